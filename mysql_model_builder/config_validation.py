# File: mysql_model_builder/config_validation.py
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Self

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .constants import DefaultConfig, MySqlValueGenerationStrategy
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class ModelBuilderSettings(BaseModel):
    """Pydantic schema for settings shared by every model a builder creates."""

    default_schema: Optional[str] = Field(
        default=None,
        description="Schema used for tables that do not configure one.",
    )
    pluralize_table_names: bool = Field(
        default=False,
        description="If True, conventional table names are the plural of the entity name.",
    )
    value_generation_strategy: Optional[MySqlValueGenerationStrategy] = Field(
        default=DefaultConfig.VALUE_GENERATION_STRATEGY,
        description="Model-wide strategy applied by convention to generated integer keys.",
    )
    hi_lo_sequence_name: str = Field(
        default=DefaultConfig.HI_LO_SEQUENCE_NAME,
        min_length=1,
        description="Sequence used when hi-lo generation is enabled without a name.",
    )
    hi_lo_increment: int = Field(
        default=DefaultConfig.HI_LO_INCREMENT,
        gt=0,
        description="Increment of sequences created for hi-lo generation.",
    )
    max_identifier_length: int = Field(
        default=DefaultConfig.MAX_IDENTIFIER_LENGTH,
        ge=8,
        le=255,
        description="Conventional names longer than this are truncated.",
    )

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("default_schema", mode="before")
    @classmethod
    def check_default_schema(cls, v: Any) -> Optional[str]:
        """Blank schemas are treated as not configured."""
        if v is None:
            return None
        if not isinstance(v, str):
            raise ValueError(f"default_schema must be a string, got {type(v).__name__}")
        return v.strip() or None

    @field_validator("hi_lo_sequence_name")
    @classmethod
    def check_sequence_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("hi_lo_sequence_name cannot be blank")
        return v.strip()

    @model_validator(mode="after")
    def check_sequence_name_length(self) -> Self:
        if len(self.hi_lo_sequence_name) > self.max_identifier_length:
            raise ValueError(
                f"hi_lo_sequence_name is longer than max_identifier_length "
                f"({self.max_identifier_length})"
            )
        return self


def validate_and_parse_config(config_dict: Dict[str, Any], config_file: Optional[str] = None) -> ModelBuilderSettings:
    """
    Validates a raw configuration dictionary against ModelBuilderSettings.

    Raises:
        ConfigurationError: listing every validation failure
    """
    try:
        settings = ModelBuilderSettings.model_validate(config_dict)
    except ValidationError as e:
        problems = []
        for error in e.errors():
            loc = " -> ".join(str(part) for part in error.get("loc", ())) or "settings"
            problems.append(f"{loc}: {error.get('msg', 'invalid value')}")
        raise ConfigurationError(
            "Configuration validation failed: " + "; ".join(problems),
            config_file=config_file,
            context={"errors": problems},
        ) from e
    logger.debug("Configuration dictionary parsed and validated successfully.")
    return settings


def load_config(
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> ModelBuilderSettings:
    """
    Loads settings from a YAML file, applies explicit overrides and validates.

    Args:
        config_path: Optional path to a YAML mapping of settings
        overrides: Values that win over the file (None values are ignored)

    Returns:
        Validated settings
    """
    raw_config: Dict[str, Any] = {}

    if config_path:
        config_file = Path(config_path)
        if not config_file.is_file():
            raise ConfigurationError(
                f"Configuration file not found: {config_path}",
                config_file=config_path,
            )
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML configuration: {e}", config_file=config_path
            ) from e

        if yaml_config is None:
            logger.warning(f"Config file {config_path} is empty. Using defaults.")
        elif not isinstance(yaml_config, dict):
            raise ConfigurationError(
                "Configuration file must contain a mapping",
                config_file=config_path,
                context={"loaded_type": type(yaml_config).__name__},
            )
        else:
            raw_config.update(yaml_config)
            logger.debug(f"Loaded configuration from {config_path}")

    overridden_keys = set()
    for key, value in (overrides or {}).items():
        if value is not None:
            raw_config[key] = value
            overridden_keys.add(key)
    if overridden_keys:
        logger.debug(f"Overridden config keys: {sorted(overridden_keys)}")

    return validate_and_parse_config(raw_config, config_file=config_path)

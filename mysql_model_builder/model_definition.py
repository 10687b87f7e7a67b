# File: mysql_model_builder/model_definition.py
"""
YAML model definitions.

A model definition describes entity types, their properties, keys, indexes,
relationships and sequences together with their MySQL options. It is
validated with pydantic and replayed through MySqlModelBuilder, so a model
built from YAML follows exactly the same conventions and precedence rules as
one configured in code.

Example document::

    default_schema: shop
    value_generation:
      strategy: sequence_hi_lo
      sequence_name: shop_hilo
    entities:
      - name: Customer
        properties:
          - {name: id, type: int}
          - {name: name, type: str, column_name: customer_name}
      - name: Order
        properties:
          - {name: order_id, type: int}
          - {name: customer_id, type: int}
        relationships:
          - principal: Customer
            foreign_key: [customer_id]
            navigation: customer
            inverse_navigation: orders
"""

import logging
import uuid
from datetime import date, datetime, time, timedelta
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional, Self

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .builders.mysql import MySqlEntityTypeBuilder, MySqlModelBuilder
from .config_validation import ModelBuilderSettings
from .constants import (
    MySqlValueGenerationStrategy,
    ScalarTypes,
    SequenceValueType,
    ValueGenerated,
)
from .domain.models import EntityType, Model, Property
from .exceptions import ConfigurationError, ModelDefinitionError

logger = logging.getLogger(__name__)


# --- Pydantic Models for the Model Definition Schema ---


class DefinitionModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class MySqlPropertyOptions(DefinitionModel):
    """MySQL overrides of a property."""

    column_name: Optional[str] = Field(None, min_length=1)
    column_type: Optional[str] = Field(None, min_length=1)
    default_value: Any = None
    default_value_sql: Optional[str] = Field(None, min_length=1)
    computed_column_sql: Optional[str] = Field(None, min_length=1)
    value_generation_strategy: Optional[MySqlValueGenerationStrategy] = None
    hi_lo_sequence_name: Optional[str] = Field(None, min_length=1)
    hi_lo_sequence_schema: Optional[str] = Field(None, min_length=1)

    @model_validator(mode="after")
    def check_single_server_value(self) -> Self:
        _check_single_server_value(self, "mysql")
        if self.hi_lo_sequence_schema and not self.hi_lo_sequence_name:
            raise ValueError("hi_lo_sequence_schema requires hi_lo_sequence_name")
        return self


class PropertyDefinition(DefinitionModel):
    """Schema for a single property of an entity."""

    name: str = Field(..., min_length=1)
    type: str = Field(..., description="Python type name, e.g. 'int', 'str', 'datetime'.")
    nullable: bool = False
    column_name: Optional[str] = Field(None, min_length=1)
    column_type: Optional[str] = Field(None, min_length=1)
    default_value: Any = None
    default_value_sql: Optional[str] = Field(None, min_length=1)
    computed_column_sql: Optional[str] = Field(None, min_length=1)
    value_generated: Optional[ValueGenerated] = None
    mysql: Optional[MySqlPropertyOptions] = None

    @field_validator("name")
    @classmethod
    def check_identifier(cls, v: str) -> str:
        if not v.isidentifier():
            raise ValueError(f"'{v}' is not a valid Python identifier")
        return v

    @field_validator("type")
    @classmethod
    def check_type(cls, v: str) -> str:
        if v not in ScalarTypes.BY_NAME:
            raise ValueError(f"Unsupported type '{v}'. Expected one of: {', '.join(ScalarTypes.BY_NAME)}")
        return v

    @model_validator(mode="after")
    def check_single_server_value(self) -> Self:
        _check_single_server_value(self, "property")
        return self

    @property
    def clr_type(self) -> type:
        return ScalarTypes.BY_NAME[self.type]


def _check_single_server_value(options: BaseModel, where: str) -> None:
    configured = [
        name for name in ("default_value", "default_value_sql", "computed_column_sql")
        if getattr(options, name) is not None
    ]
    if len(configured) > 1:
        raise ValueError(f"Only one of {', '.join(configured)} can be set on a {where}")


class KeyDefinition(DefinitionModel):
    properties: List[str] = Field(..., min_length=1)
    name: Optional[str] = Field(None, min_length=1)
    clustered: Optional[bool] = None


class IndexDefinition(DefinitionModel):
    properties: List[str] = Field(..., min_length=1)
    name: Optional[str] = Field(None, min_length=1)
    filter: Optional[str] = Field(None, min_length=1)
    unique: bool = False
    clustered: Optional[bool] = None


class RelationshipDefinition(DefinitionModel):
    """A foreign key from the declaring entity (the dependent) to ``principal``."""

    principal: str = Field(..., min_length=1)
    foreign_key: Optional[List[str]] = Field(None, min_length=1)
    principal_key: Optional[List[str]] = Field(None, min_length=1)
    navigation: Optional[str] = Field(None, min_length=1)
    inverse_navigation: Optional[str] = Field(None, min_length=1)
    unique: bool = False
    required: Optional[bool] = None
    constraint_name: Optional[str] = Field(None, min_length=1)


class EntityDefinition(DefinitionModel):
    """Schema for an entity type and everything declared on it."""

    name: str = Field(..., min_length=1)
    table: Optional[str] = Field(None, min_length=1)
    schema_name: Optional[str] = Field(None, alias="schema", min_length=1)
    memory_optimized: bool = False
    properties: List[PropertyDefinition] = Field(..., min_length=1)
    key: Optional[KeyDefinition] = None
    alternate_keys: List[KeyDefinition] = Field(default_factory=list)
    indexes: List[IndexDefinition] = Field(default_factory=list)
    relationships: List[RelationshipDefinition] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    @model_validator(mode="after")
    def check_members(self) -> Self:
        names = [p.name for p in self.properties]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Entity '{self.name}' declares duplicate properties: {', '.join(duplicates)}")

        declared = set(names)
        referenced = []
        for key in ([self.key] if self.key else []) + self.alternate_keys:
            referenced.extend(key.properties)
        for index in self.indexes:
            referenced.extend(index.properties)
        for relationship in self.relationships:
            referenced.extend(relationship.foreign_key or [])
        unknown = sorted(set(referenced) - declared)
        if unknown:
            raise ValueError(f"Entity '{self.name}' references undeclared properties: {', '.join(unknown)}")
        return self


class SequenceDefinition(DefinitionModel):
    name: str = Field(..., min_length=1)
    schema_name: Optional[str] = Field(None, alias="schema", min_length=1)
    type: SequenceValueType = SequenceValueType.INT64
    start_value: Optional[int] = None
    increment_by: Optional[int] = None
    min_value: Optional[int] = None
    max_value: Optional[int] = None
    cyclic: bool = False
    mysql_only: bool = Field(False, description="Visible only through the MySQL accessors.")

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class ValueGenerationDefinition(DefinitionModel):
    """Model-wide MySQL value generation."""

    strategy: MySqlValueGenerationStrategy
    sequence_name: Optional[str] = Field(None, min_length=1)
    sequence_schema: Optional[str] = Field(None, min_length=1)

    @model_validator(mode="after")
    def check_sequence_options(self) -> Self:
        if self.strategy != MySqlValueGenerationStrategy.SEQUENCE_HI_LO and (
            self.sequence_name or self.sequence_schema
        ):
            raise ValueError("sequence_name and sequence_schema only apply to the sequence_hi_lo strategy")
        return self


class ModelDefinition(DefinitionModel):
    """Root schema of a YAML model definition."""

    default_schema: Optional[str] = Field(None, min_length=1)
    value_generation: Optional[ValueGenerationDefinition] = None
    sequences: List[SequenceDefinition] = Field(default_factory=list)
    entities: List[EntityDefinition] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_entities(self) -> Self:
        names = [e.name for e in self.entities]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate entity names: {', '.join(duplicates)}")
        for entity in self.entities:
            for relationship in entity.relationships:
                if relationship.principal not in names:
                    raise ValueError(
                        f"Entity '{entity.name}' relates to unknown entity '{relationship.principal}'"
                    )
        return self


# --- Loading ---


def parse_model_definition(data: Dict[str, Any], source: Optional[str] = None) -> ModelDefinition:
    """
    Validate a raw model definition dictionary.

    Raises:
        ModelDefinitionError: listing every validation failure
    """
    try:
        return ModelDefinition.model_validate(data)
    except ValidationError as e:
        problems = []
        for error in e.errors():
            loc = " -> ".join(str(part) for part in error.get("loc", ())) or "model"
            problems.append(f"{loc}: {error.get('msg', 'invalid value')}")
        raise ModelDefinitionError(
            "Model definition validation failed: " + "; ".join(problems),
            context={"errors": problems, "source": source},
            suggestions=["Fix the listed entries in the model definition"],
        ) from e


def load_model_definition(path: str) -> ModelDefinition:
    """Read and validate a YAML model definition file."""
    definition_file = Path(path)
    if not definition_file.is_file():
        raise ConfigurationError(f"Model definition file not found: {path}", config_file=path)
    try:
        with open(definition_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in model definition: {e}", config_file=path) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            "Model definition must contain a mapping",
            config_file=path,
            context={"loaded_type": type(data).__name__},
        )
    logger.debug(f"Loaded model definition from {path}")
    return parse_model_definition(data, source=path)


# --- Building ---


def coerce_default_value(value: Any, clr_type: type) -> Any:
    """Convert a YAML scalar to the Python type of the property it defaults."""
    if value is None or isinstance(value, clr_type) and not isinstance(value, bool) or clr_type is bool:
        return value
    try:
        if clr_type is Decimal and isinstance(value, (int, float, str)):
            return Decimal(str(value))
        if clr_type is float and isinstance(value, int) and not isinstance(value, bool):
            return float(value)
        if clr_type is uuid.UUID and isinstance(value, str):
            return uuid.UUID(value)
        if clr_type is datetime and isinstance(value, str):
            return datetime.fromisoformat(value)
        if clr_type is date and isinstance(value, str):
            return date.fromisoformat(value)
    except (InvalidOperation, ValueError) as e:
        raise ModelDefinitionError(f"Cannot convert default value {value!r} to {clr_type.__name__}: {e}") from e
    return value


def _configure_property(entity_builder: MySqlEntityTypeBuilder, definition: PropertyDefinition) -> None:
    clr_type = Optional[definition.clr_type] if definition.nullable else definition.clr_type
    builder = entity_builder.property(definition.name, clr_type)

    if definition.column_name:
        builder.has_column_name(definition.column_name)
    if definition.column_type:
        builder.has_column_type(definition.column_type)
    if definition.default_value is not None:
        builder.has_default_value(coerce_default_value(definition.default_value, definition.clr_type))
    if definition.default_value_sql:
        builder.has_default_value_sql(definition.default_value_sql)
    if definition.computed_column_sql:
        builder.has_computed_column_sql(definition.computed_column_sql)

    mysql = definition.mysql
    if mysql is not None:
        if mysql.column_name:
            builder.for_mysql_has_column_name(mysql.column_name)
        if mysql.column_type:
            builder.for_mysql_has_column_type(mysql.column_type)
        if mysql.default_value is not None:
            builder.for_mysql_has_default_value(coerce_default_value(mysql.default_value, definition.clr_type))
        if mysql.default_value_sql:
            builder.for_mysql_has_default_value_sql(mysql.default_value_sql)
        if mysql.computed_column_sql:
            builder.for_mysql_has_computed_column_sql(mysql.computed_column_sql)
        if mysql.value_generation_strategy == MySqlValueGenerationStrategy.SEQUENCE_HI_LO:
            builder.for_mysql_use_sequence_hi_lo(mysql.hi_lo_sequence_name, mysql.hi_lo_sequence_schema)
        elif mysql.value_generation_strategy == MySqlValueGenerationStrategy.IDENTITY_COLUMN:
            builder.use_mysql_identity_column()

    if definition.value_generated == ValueGenerated.NEVER:
        builder.value_generated_never()
    elif definition.value_generated == ValueGenerated.ON_ADD:
        builder.value_generated_on_add()
    elif definition.value_generated == ValueGenerated.ON_ADD_OR_UPDATE:
        builder.value_generated_on_add_or_update()


def _configure_key(key_builder, definition: KeyDefinition) -> None:
    if definition.name:
        key_builder.has_name(definition.name)
    if definition.clustered is not None:
        key_builder.for_mysql_is_clustered(definition.clustered)


def _configure_entity(model_builder: MySqlModelBuilder, definition: EntityDefinition) -> None:
    entity_builder = model_builder.entity(definition.name)
    for property_definition in definition.properties:
        _configure_property(entity_builder, property_definition)

    if definition.table:
        entity_builder.to_table(definition.table, definition.schema_name)
    elif definition.schema_name:
        entity_builder.to_schema(definition.schema_name)
    if definition.memory_optimized:
        entity_builder.for_mysql_is_memory_optimized()

    if definition.key is not None:
        _configure_key(entity_builder.has_key(*definition.key.properties), definition.key)
    elif entity_builder.metadata.find_primary_key() is None:
        raise ModelDefinitionError(
            f"Entity '{definition.name}' has no key",
            entity=definition.name,
            suggestions=["Declare a 'key', or a property named 'id' or '<entity>_id'"],
        )
    for alternate_key in definition.alternate_keys:
        _configure_key(entity_builder.has_alternate_key(*alternate_key.properties), alternate_key)

    for index in definition.indexes:
        index_builder = entity_builder.has_index(*index.properties)
        if index.name:
            index_builder.has_name(index.name)
        if index.filter:
            index_builder.has_filter(index.filter)
        if index.unique:
            index_builder.is_unique()
        if index.clustered is not None:
            index_builder.for_mysql_is_clustered(index.clustered)


def _configure_relationship(
    model_builder: MySqlModelBuilder, dependent: str, definition: RelationshipDefinition
) -> None:
    entity_builder = model_builder.entity(dependent)
    navigation_builder = entity_builder.has_one(definition.navigation, definition.principal)

    if definition.unique:
        builder = navigation_builder.with_one(definition.inverse_navigation)
        principal_key = definition.principal_key or [
            p.name for p in model_builder.model.get_entity_type(definition.principal).find_primary_key().properties
        ]
        builder.has_principal_key(definition.principal, *principal_key)
        if definition.foreign_key:
            builder.has_foreign_key(dependent, *definition.foreign_key)
    else:
        builder = navigation_builder.with_many(definition.inverse_navigation)
        if definition.principal_key:
            builder.has_principal_key(*definition.principal_key)
        if definition.foreign_key:
            builder.has_foreign_key(*definition.foreign_key)

    if definition.required is not None:
        builder.is_required(definition.required)
    if definition.constraint_name:
        builder.has_constraint_name(definition.constraint_name)


def build_model_from_definition(
    definition: ModelDefinition,
    settings: Optional[ModelBuilderSettings] = None,
) -> Model:
    """
    Replay a model definition through MySqlModelBuilder.

    Returns:
        The configured model
    """
    model_builder = MySqlModelBuilder(settings)
    if definition.default_schema:
        model_builder.has_default_schema(definition.default_schema)

    for sequence in definition.sequences:
        if sequence.mysql_only:
            builder = model_builder.for_mysql_has_sequence(sequence.name, sequence.schema_name, sequence.type)
        else:
            builder = model_builder.has_sequence(sequence.name, sequence.schema_name, sequence.type)
        if sequence.increment_by is not None:
            builder.increments_by(sequence.increment_by)
        if sequence.start_value is not None:
            builder.starts_at(sequence.start_value)
        if sequence.min_value is not None:
            builder.has_min(sequence.min_value)
        if sequence.max_value is not None:
            builder.has_max(sequence.max_value)
        if sequence.cyclic:
            builder.is_cyclic()

    generation = definition.value_generation
    if generation is not None:
        if generation.strategy == MySqlValueGenerationStrategy.SEQUENCE_HI_LO:
            model_builder.for_mysql_use_sequence_hi_lo(generation.sequence_name, generation.sequence_schema)
        else:
            model_builder.for_mysql_use_identity_columns()

    for entity in definition.entities:
        _configure_entity(model_builder, entity)
    for entity in definition.entities:
        for relationship in entity.relationships:
            _configure_relationship(model_builder, entity.name, relationship)

    logger.info(f"Built model with {len(definition.entities)} entity types")
    return model_builder.model


# --- Describing ---


def _plain(value: Any) -> Any:
    """Convert metadata values to YAML-friendly scalars."""
    if isinstance(value, (Decimal, uuid.UUID, time, timedelta)):
        return str(value)
    if hasattr(value, "value") and not isinstance(value, (str, bytes)):
        return value.value
    return value


def _describe_property(prop: Property) -> Dict[str, Any]:
    mysql = prop.mysql()
    strategy = mysql.value_generation_strategy
    description = {
        'property': prop.name,
        'column': mysql.column_name,
        'type': prop.clr_type.__name__,
        'column_type': mysql.column_type,
        'nullable': prop.is_nullable,
        'shadow': prop.is_shadow,
        'value_generated': prop.value_generated.value,
        'default_value': _plain(mysql.default_value),
        'default_value_sql': mysql.default_value_sql,
        'computed_column_sql': mysql.computed_column_sql,
        'value_generation_strategy': _plain(strategy),
    }
    if strategy == MySqlValueGenerationStrategy.SEQUENCE_HI_LO:
        sequence = mysql.find_hi_lo_sequence()
        description['hi_lo_sequence'] = sequence.to_dict() if sequence is not None else None
    return description


def _describe_entity(entity_type: EntityType) -> Dict[str, Any]:
    mysql = entity_type.mysql()
    primary_key = entity_type.find_primary_key()

    def columns(properties):
        return [p.mysql().column_name for p in properties]

    return {
        'name': entity_type.name,
        'table': mysql.table_name,
        'schema': mysql.schema,
        'memory_optimized': mysql.is_memory_optimized,
        'columns': [_describe_property(p) for p in entity_type.get_properties()],
        'primary_key': {
            'name': primary_key.mysql().name,
            'columns': columns(primary_key.properties),
            'clustered': primary_key.mysql().is_clustered,
        } if primary_key is not None else None,
        'alternate_keys': [
            {'name': key.mysql().name, 'columns': columns(key.properties), 'clustered': key.mysql().is_clustered}
            for key in entity_type.get_keys()
            if not key.is_primary_key()
        ],
        'indexes': [
            {
                'name': index.mysql().name,
                'columns': columns(index.properties),
                'unique': index.is_unique,
                'filter': index.mysql().filter,
                'clustered': index.mysql().is_clustered,
            }
            for index in entity_type.get_indexes()
        ],
        'foreign_keys': [
            {
                'name': fk.mysql().name,
                'columns': columns(fk.properties),
                'principal_table': fk.principal_entity_type.mysql().table_name,
                'principal_columns': columns(fk.principal_key.properties),
                'unique': fk.is_unique,
                'required': fk.is_required,
                'navigation': fk.dependent_to_principal,
                'inverse_navigation': fk.principal_to_dependent,
            }
            for fk in entity_type.get_foreign_keys()
        ],
    }


def describe_model(model: Model) -> Dict[str, Any]:
    """
    Resolve the MySQL view of a model into plain data.

    Every name is the effective one: explicit MySQL overrides first, then
    relational settings, then the conventional name.
    """
    mysql = model.mysql()
    return {
        'default_schema': mysql.default_schema,
        'value_generation_strategy': _plain(mysql.value_generation_strategy),
        'hi_lo_sequence_name': mysql.hi_lo_sequence_name,
        'hi_lo_sequence_schema': mysql.hi_lo_sequence_schema,
        'sequences': [s.to_dict() for s in mysql.sequences],
        'entities': [_describe_entity(e) for e in model.get_entity_types()],
    }

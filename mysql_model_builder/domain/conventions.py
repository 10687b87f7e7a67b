"""
Conventions applied while a model is being built.

The model notifies a ConventionDispatcher whenever entity types, properties,
keys, foreign keys or property annotations change. Conventions configure the
model at ConfigurationSource.CONVENTION, so anything a user configures
explicitly always wins.
"""

import logging
from typing import Any, List, Optional

from ..constants import (
    DefaultConfig,
    MySqlAnnotationNames,
    RelationalAnnotationNames,
    ScalarTypes,
    ValueGenerated,
)
from .annotations import ConfigurationSource
from .models import EntityType, ForeignKey, Key, Model, Property, is_scalar_type, unwrap_optional
from .naming import to_snake_case

logger = logging.getLogger(__name__)


class ValueGeneratedConvention:
    """
    Decides when the database generates a value for a property.

    A computed column is generated on add or update; a default value or
    default SQL expression is generated on add; otherwise only a
    single-property integer (or UUID) primary key that is not also a foreign
    key is generated on add.
    """

    # Annotation changes that can change the outcome
    TRIGGERS = frozenset(RelationalAnnotationNames.SERVER_GENERATED)

    def annotations_for(self, prop: Property):
        return prop.relational()

    def is_trigger(self, annotation_name: str) -> bool:
        return annotation_name in self.TRIGGERS

    def get_value_generated(self, prop: Property) -> ValueGenerated:
        annotations = self.annotations_for(prop)
        if annotations.computed_column_sql is not None:
            return ValueGenerated.ON_ADD_OR_UPDATE
        if annotations.default_value is not None or annotations.default_value_sql is not None:
            return ValueGenerated.ON_ADD
        return self.get_key_value_generated(prop)

    @staticmethod
    def get_key_value_generated(prop: Property) -> ValueGenerated:
        primary_key = prop.declaring_entity_type.find_primary_key()
        if (
            primary_key is not None
            and primary_key.properties == [prop]
            and not prop.is_foreign_key()
            and prop.clr_type in ScalarTypes.GENERATED_KEY
        ):
            return ValueGenerated.ON_ADD
        return ValueGenerated.NEVER

    def apply(self, prop: Property) -> None:
        prop.set_value_generated(self.get_value_generated(prop), ConfigurationSource.CONVENTION)


class MySqlValueGeneratedConvention(ValueGeneratedConvention):
    """Value generation as seen through the MySQL overrides and strategy."""

    TRIGGERS = frozenset(
        list(RelationalAnnotationNames.SERVER_GENERATED)
        + [MySqlAnnotationNames.override_of(name) for name in RelationalAnnotationNames.SERVER_GENERATED]
        + [MySqlAnnotationNames.VALUE_GENERATION_STRATEGY]
    )

    def annotations_for(self, prop: Property):
        return prop.mysql()

    def get_value_generated(self, prop: Property) -> ValueGenerated:
        if prop.mysql().get_value_generation_strategy(fallback_to_model=False) is not None:
            return ValueGenerated.ON_ADD
        return super().get_value_generated(prop)


def find_candidate_foreign_key_properties(
    dependent: EntityType,
    principal: EntityType,
    principal_key: Key,
    navigation: Optional[str] = None,
) -> Optional[List[Property]]:
    """
    Find existing properties on ``dependent`` that match ``principal_key`` by name.

    For every principal key property ``pk`` the candidates, in order, are
    ``<navigation>_<pk>``, ``<navigation>_id``, ``<principal>_<pk>``,
    ``<principal>_id`` and ``pk`` itself when it already starts with
    ``<principal>_`` (``order_id`` on ``Order``). The ``_id`` forms only
    apply to single-property keys.

    Returns:
        Matching properties in key order, or None if any key property has no match
    """
    principal_snake = to_snake_case(principal.name)
    single = len(principal_key.properties) == 1
    matches: List[Property] = []

    for key_property in principal_key.properties:
        candidates = []
        if navigation:
            candidates.append(f"{navigation}_{key_property.name}")
            if single:
                candidates.append(f"{navigation}_id")
        candidates.append(f"{principal_snake}_{key_property.name}")
        if single:
            candidates.append(f"{principal_snake}_id")
        if key_property.name.startswith(f"{principal_snake}_"):
            candidates.append(key_property.name)

        match = None
        for candidate in candidates:
            prop = dependent.find_property(candidate)
            if prop is not None and prop.clr_type is key_property.clr_type and not (
                dependent is principal and prop in principal_key.properties
            ):
                match = prop
                break
        if match is None:
            return None
        matches.append(match)

    return matches


class ConventionDispatcher:
    """Runs the relational conventions in response to model changes."""

    value_generated_convention_class = ValueGeneratedConvention

    def __init__(self, settings: Any = None):
        self.settings = settings
        self.value_generated_convention = self.value_generated_convention_class()

    def on_model_initialized(self, model: Model) -> None:
        logger.debug(f"Initializing model with {type(self).__name__}")

    def on_entity_type_added(self, entity_type: EntityType) -> None:
        """Discover the scalar properties of a mapped class."""
        for name, hint in entity_type.get_type_hints().items():
            if name.startswith("_") or name in entity_type.ignored_members:
                continue
            if entity_type.find_property(name) is not None:
                continue
            underlying, _ = unwrap_optional(hint)
            if not is_scalar_type(underlying):
                continue
            entity_type.add_property(name, hint, configuration_source=ConfigurationSource.CONVENTION)

    @staticmethod
    def find_key_property(entity_type: EntityType) -> Optional[Property]:
        for name in ("id", f"{to_snake_case(entity_type.name)}_id"):
            prop = entity_type.find_property(name)
            if prop is not None:
                return prop
        return None

    def discover_primary_key(self, entity_type: EntityType) -> None:
        """Make ``id`` or ``<entity>_id`` the key unless one was configured explicitly."""
        if not ConfigurationSource.CONVENTION.overrides(entity_type.primary_key_configuration_source):
            return
        key_property = self.find_key_property(entity_type)
        primary_key = entity_type.find_primary_key()
        if key_property is None or (primary_key is not None and primary_key.properties == [key_property]):
            return
        entity_type.set_primary_key([key_property], ConfigurationSource.CONVENTION)

    def on_property_added(self, prop: Property) -> None:
        # Shadow foreign key properties never become keys
        if not (prop.is_shadow and prop.configuration_source == ConfigurationSource.CONVENTION):
            self.discover_primary_key(prop.declaring_entity_type)
        self.value_generated_convention.apply(prop)

    def on_primary_key_changed(self, entity_type: EntityType, previous: Optional[Key]) -> None:
        affected = list(previous.properties) if previous is not None else []
        primary_key = entity_type.find_primary_key()
        if primary_key is not None:
            affected.extend(primary_key.properties)
        for prop in affected:
            self.value_generated_convention.apply(prop)

    def on_foreign_key_added(self, foreign_key: ForeignKey) -> None:
        for prop in foreign_key.properties:
            self.value_generated_convention.apply(prop)

    def on_foreign_key_removed(self, foreign_key: ForeignKey) -> None:
        for prop in foreign_key.properties:
            if prop.declaring_entity_type.find_property(prop.name) is prop:
                self.value_generated_convention.apply(prop)

    def on_property_annotation_changed(self, prop: Property, name: str, old_value: Any, new_value: Any) -> None:
        if self.value_generated_convention.is_trigger(name):
            self.value_generated_convention.apply(prop)


class MySqlConventionDispatcher(ConventionDispatcher):
    """Adds the MySQL value generation conventions."""

    value_generated_convention_class = MySqlValueGeneratedConvention

    def on_model_initialized(self, model: Model) -> None:
        super().on_model_initialized(model)
        strategy = getattr(
            self.settings, "value_generation_strategy", DefaultConfig.VALUE_GENERATION_STRATEGY
        )
        if strategy is not None:
            model.set_annotation(
                MySqlAnnotationNames.VALUE_GENERATION_STRATEGY, strategy, ConfigurationSource.CONVENTION
            )

"""
MySQL accessors over model annotations.

A MySQL accessor reads the ``MySql:*`` override of a relational setting when
one is present and the generic ``Relational:*`` value otherwise. Writes always
go to the MySQL override, leaving the relational value untouched. On top of
the relational settings it exposes the MySQL value generation strategy, the
hi-lo sequence used by a property or model, clustering and memory-optimized
tables.
"""

import logging
from typing import Any, List, Optional

from ..constants import (
    DefaultConfig,
    MySqlAnnotationNames,
    MySqlValueGenerationStrategy,
    RelationalAnnotationNames,
    ScalarTypes,
    ValueGenerated,
)
from ..domain import naming
from ..exceptions import ConflictingValueGenerationError, InvalidValueGenerationError
from .relational import (
    SETTING_LABELS,
    RelationalEntityTypeAnnotations,
    RelationalForeignKeyAnnotations,
    RelationalIndexAnnotations,
    RelationalKeyAnnotations,
    RelationalModelAnnotations,
    RelationalPropertyAnnotations,
)

logger = logging.getLogger(__name__)

STRATEGY_LABEL = "value_generation_strategy"


def is_compatible_with_identity_column(prop) -> bool:
    """Identity columns need an integer or decimal property."""
    return prop.clr_type in ScalarTypes.IDENTITY_COMPATIBLE


def is_compatible_with_sequence_hi_lo(prop) -> bool:
    """Hi-lo generation needs an integer property."""
    return prop.clr_type in ScalarTypes.HI_LO_COMPATIBLE


class MySqlOverrideMixin:
    """Reads ``MySql:*`` overrides first and writes only to them."""

    def _annotation_name(self, relational_name: str) -> str:
        return MySqlAnnotationNames.override_of(relational_name)

    def _get_value(self, relational_name: str) -> Any:
        annotation = self.metadata.find_annotation(self._annotation_name(relational_name))
        if annotation is not None:
            return annotation.value
        return self.metadata.get_annotation_value(relational_name)


class MySqlModelAnnotations(MySqlOverrideMixin, RelationalModelAnnotations):
    """MySQL settings of a model."""

    DEFAULT_HI_LO_SEQUENCE_NAME = DefaultConfig.HI_LO_SEQUENCE_NAME

    sequence_prefix = MySqlAnnotationNames.SEQUENCE_PREFIX

    def find_sequence(self, name: str, schema: Optional[str] = None):
        """Find a MySQL sequence, falling back to a relational one with the same name."""
        sequence = self.model.find_sequence(name, schema, prefix=MySqlAnnotationNames.SEQUENCE_PREFIX)
        if sequence is not None:
            return sequence
        return self.model.find_sequence(name, schema, prefix=RelationalAnnotationNames.SEQUENCE_PREFIX)

    @property
    def sequences(self) -> List:
        by_name = {
            (s.schema, s.name): s
            for s in self.model.get_sequences(prefix=RelationalAnnotationNames.SEQUENCE_PREFIX)
        }
        for sequence in self.model.get_sequences(prefix=MySqlAnnotationNames.SEQUENCE_PREFIX):
            by_name[(sequence.schema, sequence.name)] = sequence
        return list(by_name.values())

    @property
    def value_generation_strategy(self) -> Optional[MySqlValueGenerationStrategy]:
        return self.annotations.get(MySqlAnnotationNames.VALUE_GENERATION_STRATEGY)

    @value_generation_strategy.setter
    def value_generation_strategy(self, value: Optional[MySqlValueGenerationStrategy]) -> None:
        self.set_value_generation_strategy(value)

    def set_value_generation_strategy(self, value: Optional[MySqlValueGenerationStrategy]) -> bool:
        return self.annotations.set(MySqlAnnotationNames.VALUE_GENERATION_STRATEGY, value)

    @property
    def hi_lo_sequence_name(self) -> Optional[str]:
        return self.annotations.get(MySqlAnnotationNames.HI_LO_SEQUENCE_NAME)

    @hi_lo_sequence_name.setter
    def hi_lo_sequence_name(self, value: Optional[str]) -> None:
        self.set_hi_lo_sequence_name(value)

    def set_hi_lo_sequence_name(self, value: Optional[str]) -> bool:
        naming.check_null_but_not_empty(value, "name")
        return self.annotations.set(MySqlAnnotationNames.HI_LO_SEQUENCE_NAME, value)

    @property
    def hi_lo_sequence_schema(self) -> Optional[str]:
        return self.annotations.get(MySqlAnnotationNames.HI_LO_SEQUENCE_SCHEMA)

    @hi_lo_sequence_schema.setter
    def hi_lo_sequence_schema(self, value: Optional[str]) -> None:
        self.set_hi_lo_sequence_schema(value)

    def set_hi_lo_sequence_schema(self, value: Optional[str]) -> bool:
        naming.check_null_but_not_empty(value, "schema")
        return self.annotations.set(MySqlAnnotationNames.HI_LO_SEQUENCE_SCHEMA, value)

    @property
    def default_hi_lo_sequence_name(self) -> str:
        return getattr(self.model.settings, "hi_lo_sequence_name", self.DEFAULT_HI_LO_SEQUENCE_NAME)

    def find_hi_lo_sequence(self):
        return self.find_sequence(
            self.hi_lo_sequence_name or self.default_hi_lo_sequence_name,
            self.hi_lo_sequence_schema,
        )


class MySqlEntityTypeAnnotations(MySqlOverrideMixin, RelationalEntityTypeAnnotations):
    """MySQL settings of an entity type."""

    model_annotations_class = MySqlModelAnnotations

    @property
    def is_memory_optimized(self) -> bool:
        return bool(self.annotations.get(MySqlAnnotationNames.MEMORY_OPTIMIZED))

    @is_memory_optimized.setter
    def is_memory_optimized(self, value: bool) -> None:
        self.set_memory_optimized(value)

    def set_memory_optimized(self, value: bool) -> bool:
        return self.annotations.set(MySqlAnnotationNames.MEMORY_OPTIMIZED, value)


class MySqlPropertyAnnotations(MySqlOverrideMixin, RelationalPropertyAnnotations):
    """
    MySQL settings of a property.

    Server-generated values are read as one layer: when any of the MySQL
    default value, default SQL or computed SQL overrides is present the
    relational values are ignored entirely. An explicitly configured value
    generation strategy hides all three.
    """

    def _has_provider_server_generated(self) -> bool:
        return any(
            self.metadata.find_annotation(self._annotation_name(name)) is not None
            for name in RelationalAnnotationNames.SERVER_GENERATED
        )

    def _get_server_generated(self, relational_name: str) -> Any:
        if self._has_provider_server_generated():
            return self.annotations.get(self._annotation_name(relational_name))
        return self.annotations.get(relational_name)

    def _get_exclusive(self, relational_name: str, fallback: bool) -> Any:
        if fallback and self.get_value_generation_strategy(fallback_to_model=False) is not None:
            return None
        return super()._get_exclusive(relational_name, fallback)

    def _can_set_server_generated(self, relational_name: str, value: Any) -> bool:
        if not super()._can_set_server_generated(relational_name, value):
            return False
        if value is None or self.get_value_generation_strategy(fallback_to_model=False) is None:
            return True
        if self.should_throw_on_conflict:
            raise ConflictingValueGenerationError(
                SETTING_LABELS[relational_name], self.prop.name, STRATEGY_LABEL
            )
        return self.annotations.can_set(MySqlAnnotationNames.VALUE_GENERATION_STRATEGY, None)

    def _clear_all_server_generated_values(self) -> None:
        self.annotations.set(MySqlAnnotationNames.VALUE_GENERATION_STRATEGY, None)
        super()._clear_all_server_generated_values()

    # Value generation strategy

    def get_value_generation_strategy(
        self, fallback_to_model: bool = True
    ) -> Optional[MySqlValueGenerationStrategy]:
        """
        Strategy used to generate values for this property.

        Args:
            fallback_to_model: If False, only an explicitly stored strategy is
                returned. Otherwise the model-wide strategy applies to
                properties generated on add that have no server-generated
                value and whose type supports the strategy.
        """
        annotation = self.metadata.find_annotation(MySqlAnnotationNames.VALUE_GENERATION_STRATEGY)
        if annotation is not None:
            return annotation.value
        if not fallback_to_model:
            return None

        prop = self.prop
        if prop.value_generated != ValueGenerated.ON_ADD:
            return None
        if any(
            self._get_server_generated(name) is not None
            for name in RelationalAnnotationNames.SERVER_GENERATED
        ):
            return None

        model_strategy = prop.model.mysql().value_generation_strategy
        if (model_strategy == MySqlValueGenerationStrategy.SEQUENCE_HI_LO
                and is_compatible_with_sequence_hi_lo(prop)):
            return MySqlValueGenerationStrategy.SEQUENCE_HI_LO
        if (model_strategy == MySqlValueGenerationStrategy.IDENTITY_COLUMN
                and is_compatible_with_identity_column(prop)):
            return MySqlValueGenerationStrategy.IDENTITY_COLUMN
        return None

    @property
    def value_generation_strategy(self) -> Optional[MySqlValueGenerationStrategy]:
        return self.get_value_generation_strategy()

    @value_generation_strategy.setter
    def value_generation_strategy(self, value: Optional[MySqlValueGenerationStrategy]) -> None:
        self.set_value_generation_strategy(value)

    def set_value_generation_strategy(self, value: Optional[MySqlValueGenerationStrategy]) -> bool:
        prop = self.prop
        if value == MySqlValueGenerationStrategy.IDENTITY_COLUMN and not is_compatible_with_identity_column(prop):
            raise InvalidValueGenerationError(value.value, prop.name, prop.clr_type)
        if value == MySqlValueGenerationStrategy.SEQUENCE_HI_LO and not is_compatible_with_sequence_hi_lo(prop):
            raise InvalidValueGenerationError(value.value, prop.name, prop.clr_type)

        if not self.can_set_value_generation_strategy(value):
            return False

        if (
            not self.should_throw_on_conflict
            and value is not None
            and self.get_value_generation_strategy(fallback_to_model=False) != value
        ):
            self._clear_all_server_generated_values()
            RelationalPropertyAnnotations(
                prop, self.configuration_source, should_throw_on_conflict=False
            )._clear_all_server_generated_values()

        return self.annotations.set(MySqlAnnotationNames.VALUE_GENERATION_STRATEGY, value)

    def can_set_value_generation_strategy(self, value: Optional[MySqlValueGenerationStrategy]) -> bool:
        if self.get_value_generation_strategy(fallback_to_model=False) == value:
            return True
        if not self.annotations.can_set(MySqlAnnotationNames.VALUE_GENERATION_STRATEGY, value):
            return False
        if value is None:
            return True

        visible = [
            name for name in RelationalAnnotationNames.SERVER_GENERATED
            if self._get_server_generated(name) is not None
            or self.annotations.get(name) is not None
        ]
        if self.should_throw_on_conflict:
            if visible:
                raise ConflictingValueGenerationError(
                    STRATEGY_LABEL, self.prop.name, SETTING_LABELS[visible[0]]
                )
            return True
        return all(
            self.annotations.can_set(name, None) and self._can_set_value(name, None)
            for name in RelationalAnnotationNames.SERVER_GENERATED
        )

    # Hi-lo sequence

    @property
    def hi_lo_sequence_name(self) -> Optional[str]:
        return self.annotations.get(MySqlAnnotationNames.HI_LO_SEQUENCE_NAME)

    @hi_lo_sequence_name.setter
    def hi_lo_sequence_name(self, value: Optional[str]) -> None:
        self.set_hi_lo_sequence_name(value)

    def set_hi_lo_sequence_name(self, value: Optional[str]) -> bool:
        naming.check_null_but_not_empty(value, "name")
        return self.annotations.set(MySqlAnnotationNames.HI_LO_SEQUENCE_NAME, value)

    @property
    def hi_lo_sequence_schema(self) -> Optional[str]:
        return self.annotations.get(MySqlAnnotationNames.HI_LO_SEQUENCE_SCHEMA)

    @hi_lo_sequence_schema.setter
    def hi_lo_sequence_schema(self, value: Optional[str]) -> None:
        self.set_hi_lo_sequence_schema(value)

    def set_hi_lo_sequence_schema(self, value: Optional[str]) -> bool:
        naming.check_null_but_not_empty(value, "schema")
        return self.annotations.set(MySqlAnnotationNames.HI_LO_SEQUENCE_SCHEMA, value)

    def find_hi_lo_sequence(self):
        """The sequence backing hi-lo generation of this property, if it uses hi-lo."""
        if self.get_value_generation_strategy() != MySqlValueGenerationStrategy.SEQUENCE_HI_LO:
            return None
        model_annotations = self.prop.model.mysql()
        name = (
            self.hi_lo_sequence_name
            or model_annotations.hi_lo_sequence_name
            or model_annotations.default_hi_lo_sequence_name
        )
        schema = self.hi_lo_sequence_schema or model_annotations.hi_lo_sequence_schema
        return model_annotations.find_sequence(name, schema)


class MySqlKeyAnnotations(MySqlOverrideMixin, RelationalKeyAnnotations):
    """MySQL settings of a key."""

    entity_type_annotations_class = MySqlEntityTypeAnnotations
    property_annotations_class = MySqlPropertyAnnotations

    @property
    def is_clustered(self) -> Optional[bool]:
        return self.annotations.get(MySqlAnnotationNames.CLUSTERED)

    @is_clustered.setter
    def is_clustered(self, value: Optional[bool]) -> None:
        self.set_clustered(value)

    def set_clustered(self, value: Optional[bool]) -> bool:
        return self.annotations.set(MySqlAnnotationNames.CLUSTERED, value)


class MySqlForeignKeyAnnotations(MySqlOverrideMixin, RelationalForeignKeyAnnotations):
    """MySQL settings of a foreign key."""

    entity_type_annotations_class = MySqlEntityTypeAnnotations
    property_annotations_class = MySqlPropertyAnnotations


class MySqlIndexAnnotations(MySqlOverrideMixin, RelationalIndexAnnotations):
    """MySQL settings of an index."""

    entity_type_annotations_class = MySqlEntityTypeAnnotations
    property_annotations_class = MySqlPropertyAnnotations

    @property
    def is_clustered(self) -> Optional[bool]:
        return self.annotations.get(MySqlAnnotationNames.CLUSTERED)

    @is_clustered.setter
    def is_clustered(self, value: Optional[bool]) -> None:
        self.set_clustered(value)

    def set_clustered(self, value: Optional[bool]) -> bool:
        return self.annotations.set(MySqlAnnotationNames.CLUSTERED, value)

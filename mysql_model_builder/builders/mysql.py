"""
MySQL extensions of the fluent builders.

MySqlModelBuilder hands out MySQL flavours of every builder, so chained calls
never lose access to the ``for_mysql_*`` methods. Provider settings are
written to ``MySql:*`` annotations and read back through ``mysql()`` on the
metadata objects, where they take precedence over the relational values.
"""

import logging
from typing import Any, Optional, Self

from ..constants import DefaultConfig, MySqlValueGenerationStrategy, SequenceValueType
from ..domain.annotations import ConfigurationSource
from ..domain.conventions import MySqlConventionDispatcher
from ..domain.models import Property, Sequence
from ..domain.naming import check_not_empty, check_null_but_not_empty
from ..metadata.mysql import (
    MySqlEntityTypeAnnotations,
    MySqlForeignKeyAnnotations,
    MySqlIndexAnnotations,
    MySqlKeyAnnotations,
    MySqlModelAnnotations,
    MySqlPropertyAnnotations,
)
from .entity_builder import EntityTypeBuilder
from .model_builder import ModelBuilder
from .property_builder import IndexBuilder, KeyBuilder, PropertyBuilder
from .relationship_builder import (
    CollectionNavigationBuilder,
    ReferenceCollectionBuilder,
    ReferenceNavigationBuilder,
    ReferenceReferenceBuilder,
)

logger = logging.getLogger(__name__)


def _model_annotations(model) -> MySqlModelAnnotations:
    return MySqlModelAnnotations(model, ConfigurationSource.EXPLICIT, should_throw_on_conflict=False)


def _ensure_hi_lo_sequence(model, name: Optional[str], schema: Optional[str]) -> Sequence:
    """Find the named hi-lo sequence, creating a relational one if the model has none."""
    annotations = _model_annotations(model)
    name = name or annotations.default_hi_lo_sequence_name
    sequence = annotations.find_sequence(name, schema)
    if sequence is None:
        sequence = model.relational().get_or_add_sequence(name, schema)
        sequence.increment_by = getattr(model.settings, "hi_lo_increment", DefaultConfig.HI_LO_INCREMENT)
        logger.debug(f"Created hi-lo sequence '{schema or ''}.{name}' (increment {sequence.increment_by})")
    return sequence


class MySqlPropertyBuilder(PropertyBuilder):
    """Property builder with MySQL value generation and column overrides."""

    def _mysql(self) -> MySqlPropertyAnnotations:
        return MySqlPropertyAnnotations(
            self.metadata, ConfigurationSource.EXPLICIT, should_throw_on_conflict=False
        )

    def for_mysql_use_sequence_hi_lo(self, name: Optional[str] = None, schema: Optional[str] = None) -> Self:
        """
        Generate values for this property with a hi-lo sequence.

        The sequence is created with the configured hi-lo increment when the
        model does not define it yet. Any default value, default SQL or
        computed SQL configured for the property is cleared.
        """
        check_null_but_not_empty(name, "name")
        check_null_but_not_empty(schema, "schema")
        prop: Property = self.metadata
        annotations = self._mysql()
        annotations.set_value_generation_strategy(MySqlValueGenerationStrategy.SEQUENCE_HI_LO)
        sequence = _ensure_hi_lo_sequence(prop.model, name, schema)

        annotations.set_hi_lo_sequence_name(sequence.name)
        annotations.set_hi_lo_sequence_schema(schema)
        logger.debug(f"{prop!r} uses hi-lo sequence '{sequence.name}'")
        return self

    def use_mysql_identity_column(self) -> Self:
        annotations = self._mysql()
        annotations.set_value_generation_strategy(MySqlValueGenerationStrategy.IDENTITY_COLUMN)
        annotations.set_hi_lo_sequence_name(None)
        annotations.set_hi_lo_sequence_schema(None)
        return self

    def for_mysql_has_column_name(self, name: Optional[str]) -> Self:
        check_null_but_not_empty(name, "name")
        self._mysql().set_column_name(name)
        return self

    def for_mysql_has_column_type(self, type_name: Optional[str]) -> Self:
        check_null_but_not_empty(type_name, "type_name")
        self._mysql().set_column_type(type_name)
        return self

    def for_mysql_has_default_value(self, value: Any) -> Self:
        self._mysql().set_default_value(value)
        return self

    def for_mysql_has_default_value_sql(self, sql: Optional[str]) -> Self:
        check_null_but_not_empty(sql, "sql")
        self._mysql().set_default_value_sql(sql)
        return self

    def for_mysql_has_computed_column_sql(self, sql: Optional[str]) -> Self:
        check_null_but_not_empty(sql, "sql")
        self._mysql().set_computed_column_sql(sql)
        return self


class MySqlKeyBuilder(KeyBuilder):

    def _mysql(self) -> MySqlKeyAnnotations:
        return MySqlKeyAnnotations(self.metadata, ConfigurationSource.EXPLICIT, should_throw_on_conflict=False)

    def for_mysql_is_clustered(self, clustered: bool = True) -> Self:
        self._mysql().set_clustered(clustered)
        return self

    def for_mysql_has_name(self, name: Optional[str]) -> Self:
        check_null_but_not_empty(name, "name")
        self._mysql().set_name(name)
        return self


class MySqlIndexBuilder(IndexBuilder):

    def _mysql(self) -> MySqlIndexAnnotations:
        return MySqlIndexAnnotations(self.metadata, ConfigurationSource.EXPLICIT, should_throw_on_conflict=False)

    def for_mysql_is_clustered(self, clustered: bool = True) -> Self:
        self._mysql().set_clustered(clustered)
        return self

    def for_mysql_has_name(self, name: Optional[str]) -> Self:
        check_null_but_not_empty(name, "name")
        self._mysql().set_name(name)
        return self

    def for_mysql_has_filter(self, sql: Optional[str]) -> Self:
        check_null_but_not_empty(sql, "sql")
        self._mysql().set_filter(sql)
        return self


class MySqlRelationshipMixin:
    """Provider constraint name for the relationship builders."""

    def for_mysql_has_constraint_name(self, name: Optional[str]) -> Self:
        check_null_but_not_empty(name, "name")
        MySqlForeignKeyAnnotations(
            self.metadata, ConfigurationSource.EXPLICIT, should_throw_on_conflict=False
        ).set_name(name)
        return self


class MySqlReferenceCollectionBuilder(MySqlRelationshipMixin, ReferenceCollectionBuilder):
    pass


class MySqlReferenceReferenceBuilder(MySqlRelationshipMixin, ReferenceReferenceBuilder):
    pass


class MySqlCollectionNavigationBuilder(CollectionNavigationBuilder):
    reference_collection_builder_class = MySqlReferenceCollectionBuilder


class MySqlReferenceNavigationBuilder(ReferenceNavigationBuilder):
    reference_collection_builder_class = MySqlReferenceCollectionBuilder
    reference_reference_builder_class = MySqlReferenceReferenceBuilder


class MySqlEntityTypeBuilder(EntityTypeBuilder):
    """Entity type builder with MySQL table options."""

    property_builder_class = MySqlPropertyBuilder
    key_builder_class = MySqlKeyBuilder
    index_builder_class = MySqlIndexBuilder
    collection_navigation_builder_class = MySqlCollectionNavigationBuilder
    reference_navigation_builder_class = MySqlReferenceNavigationBuilder

    def _mysql(self) -> MySqlEntityTypeAnnotations:
        return MySqlEntityTypeAnnotations(
            self.metadata, ConfigurationSource.EXPLICIT, should_throw_on_conflict=False
        )

    def for_mysql_is_memory_optimized(self, memory_optimized: bool = True) -> Self:
        self._mysql().set_memory_optimized(memory_optimized)
        return self

    def for_mysql_to_table(self, name: str, schema: Optional[str] = None) -> Self:
        check_not_empty(name, "name")
        check_null_but_not_empty(schema, "schema")
        annotations = self._mysql()
        annotations.set_table_name(name)
        if schema is not None:
            annotations.set_schema(schema)
        return self


class MySqlModelBuilder(ModelBuilder):
    """
    Model builder for MySQL.

    Runs the MySQL conventions, which make identity columns the model-wide
    value generation strategy unless settings choose otherwise.
    """

    entity_type_builder_class = MySqlEntityTypeBuilder
    conventions_class = MySqlConventionDispatcher

    def _mysql(self) -> MySqlModelAnnotations:
        return _model_annotations(self.model)

    def for_mysql_use_sequence_hi_lo(self, name: Optional[str] = None, schema: Optional[str] = None) -> Self:
        """
        Use hi-lo sequences for all generated integer keys.

        Args:
            name: Sequence name (defaults to the configured hi-lo sequence name)
            schema: Sequence schema
        """
        check_null_but_not_empty(name, "name")
        check_null_but_not_empty(schema, "schema")
        sequence = _ensure_hi_lo_sequence(self.model, name, schema)

        annotations = self._mysql()
        annotations.set_value_generation_strategy(MySqlValueGenerationStrategy.SEQUENCE_HI_LO)
        annotations.set_hi_lo_sequence_name(sequence.name)
        annotations.set_hi_lo_sequence_schema(schema)
        return self

    def for_mysql_use_identity_columns(self) -> Self:
        annotations = self._mysql()
        annotations.set_value_generation_strategy(MySqlValueGenerationStrategy.IDENTITY_COLUMN)
        annotations.set_hi_lo_sequence_name(None)
        annotations.set_hi_lo_sequence_schema(None)
        return self

    def for_mysql_has_sequence(
        self,
        name: str,
        schema: Optional[str] = None,
        value_type: SequenceValueType = DefaultConfig.SEQUENCE_VALUE_TYPE,
        configure=None,
    ):
        """Configure a sequence visible only through the MySQL accessors."""
        sequence = self._mysql().get_or_add_sequence(name, schema, value_type)
        sequence.update(value_type=value_type)
        builder = self.sequence_builder_class(sequence)
        if configure is not None:
            configure(builder)
            return self
        return builder

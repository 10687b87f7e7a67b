"""
Relational accessors over model annotations.

Each accessor wraps one metadata object and exposes the generic relational
settings stored in its ``Relational:*`` annotations, falling back to the
conventional value when nothing was configured. Accessors created by the
fluent builders resolve conflicts between server-generated values by clearing
the previous setting; accessors returned from ``relational()`` on a metadata
object raise instead.
"""

import logging
from typing import Any, List, Optional

from ..constants import DefaultConfig, RelationalAnnotationNames, SequenceValueType
from ..domain.annotations import Annotatable, ConfigurationSource, _same_value
from ..domain import naming
from ..exceptions import ConflictingValueGenerationError, IncorrectDefaultValueTypeError

logger = logging.getLogger(__name__)

# Human-readable names of server-generated value settings, used in errors
SETTING_LABELS = {
    RelationalAnnotationNames.DEFAULT_VALUE: "default_value",
    RelationalAnnotationNames.DEFAULT_VALUE_SQL: "default_value_sql",
    RelationalAnnotationNames.COMPUTED_COLUMN_SQL: "computed_column_sql",
}


class RelationalAnnotations:
    """Reads and writes annotations on one metadata object with a fixed configuration source."""

    def __init__(
        self,
        metadata: Annotatable,
        configuration_source: ConfigurationSource = ConfigurationSource.EXPLICIT,
    ):
        self.metadata = metadata
        self.configuration_source = configuration_source

    def get(self, name: str) -> Any:
        return self.metadata.get_annotation_value(name)

    def has(self, name: str) -> bool:
        return self.metadata.find_annotation(name) is not None

    def can_set(self, name: str, value: Any) -> bool:
        return self.metadata.can_set_annotation(name, value, self.configuration_source)

    def set(self, name: str, value: Any) -> bool:
        return self.metadata.set_annotation(name, value, self.configuration_source)


class AnnotationsAccessor:
    """Base class of all relational and provider accessors."""

    def __init__(
        self,
        metadata: Annotatable,
        configuration_source: ConfigurationSource = ConfigurationSource.EXPLICIT,
        should_throw_on_conflict: bool = True,
    ):
        self.metadata = metadata
        self.annotations = RelationalAnnotations(metadata, configuration_source)
        self.should_throw_on_conflict = should_throw_on_conflict

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.metadata!r})"

    @property
    def configuration_source(self) -> ConfigurationSource:
        return self.annotations.configuration_source

    def _annotation_name(self, relational_name: str) -> str:
        """Name under which this accessor stores a relational setting."""
        return relational_name

    def _get_value(self, relational_name: str) -> Any:
        return self.annotations.get(relational_name)

    def _can_set_value(self, relational_name: str, value: Any) -> bool:
        return self.annotations.can_set(self._annotation_name(relational_name), value)

    def _set_value(self, relational_name: str, value: Any) -> bool:
        return self.annotations.set(self._annotation_name(relational_name), value)

    def _with_metadata(self, accessor_class, metadata: Annotatable):
        """Accessor of the same family for a related metadata object."""
        return accessor_class(metadata, self.configuration_source, self.should_throw_on_conflict)


class RelationalModelAnnotations(AnnotationsAccessor):
    """Relational settings of a model: default schema and sequences."""

    sequence_prefix = RelationalAnnotationNames.SEQUENCE_PREFIX

    @property
    def model(self):
        return self.metadata

    @property
    def default_schema(self) -> Optional[str]:
        configured = self._get_value(RelationalAnnotationNames.DEFAULT_SCHEMA)
        if configured is not None:
            return configured
        return getattr(self.model.settings, "default_schema", None)

    @default_schema.setter
    def default_schema(self, value: Optional[str]) -> None:
        self.set_default_schema(value)

    def set_default_schema(self, value: Optional[str]) -> bool:
        naming.check_null_but_not_empty(value, "schema")
        return self._set_value(RelationalAnnotationNames.DEFAULT_SCHEMA, value)

    def find_sequence(self, name: str, schema: Optional[str] = None):
        return self.model.find_sequence(name, schema, prefix=self.sequence_prefix)

    def get_or_add_sequence(
        self,
        name: str,
        schema: Optional[str] = None,
        value_type: SequenceValueType = DefaultConfig.SEQUENCE_VALUE_TYPE,
    ):
        naming.check_not_empty(name, "name")
        naming.check_null_but_not_empty(schema, "schema")
        sequence = self.model.find_sequence(name, schema, prefix=self.sequence_prefix)
        if sequence is not None:
            return sequence
        return self.model.add_sequence(
            name, schema, value_type,
            prefix=self.sequence_prefix,
            configuration_source=self.configuration_source,
        )

    @property
    def sequences(self) -> List:
        return self.model.get_sequences(prefix=self.sequence_prefix)


class RelationalEntityTypeAnnotations(AnnotationsAccessor):
    """Relational settings of an entity type: table and schema."""

    model_annotations_class = RelationalModelAnnotations

    @property
    def entity_type(self):
        return self.metadata

    @property
    def table_name(self) -> str:
        configured = self._get_value(RelationalAnnotationNames.TABLE_NAME)
        if configured is not None:
            return configured
        settings = self.entity_type.model.settings
        return naming.truncate_identifier(
            naming.default_table_name(
                self.entity_type.name, getattr(settings, "pluralize_table_names", False)
            ),
            self.entity_type.model.max_identifier_length,
        )

    @table_name.setter
    def table_name(self, value: Optional[str]) -> None:
        self.set_table_name(value)

    def set_table_name(self, value: Optional[str]) -> bool:
        naming.check_null_but_not_empty(value, "name")
        return self._set_value(RelationalAnnotationNames.TABLE_NAME, value)

    @property
    def schema(self) -> Optional[str]:
        configured = self._get_value(RelationalAnnotationNames.SCHEMA)
        if configured is not None:
            return configured
        return self._with_metadata(self.model_annotations_class, self.entity_type.model).default_schema

    @schema.setter
    def schema(self, value: Optional[str]) -> None:
        self.set_schema(value)

    def set_schema(self, value: Optional[str]) -> bool:
        naming.check_null_but_not_empty(value, "schema")
        return self._set_value(RelationalAnnotationNames.SCHEMA, value)


class RelationalPropertyAnnotations(AnnotationsAccessor):
    """
    Relational settings of a property: column name and type plus the three
    mutually exclusive server-generated values (default value, default SQL
    expression and computed column SQL).
    """

    @property
    def prop(self):
        return self.metadata

    # Column name and type

    @property
    def column_name(self) -> str:
        configured = self._get_value(RelationalAnnotationNames.COLUMN_NAME)
        return configured if configured is not None else self.prop.name

    @column_name.setter
    def column_name(self, value: Optional[str]) -> None:
        self.set_column_name(value)

    def set_column_name(self, value: Optional[str]) -> bool:
        naming.check_null_but_not_empty(value, "name")
        return self._set_value(RelationalAnnotationNames.COLUMN_NAME, value)

    @property
    def column_type(self) -> Optional[str]:
        return self._get_value(RelationalAnnotationNames.COLUMN_TYPE)

    @column_type.setter
    def column_type(self, value: Optional[str]) -> None:
        self.set_column_type(value)

    def set_column_type(self, value: Optional[str]) -> bool:
        naming.check_null_but_not_empty(value, "type_name")
        return self._set_value(RelationalAnnotationNames.COLUMN_TYPE, value)

    # Server-generated values

    def _get_server_generated(self, relational_name: str) -> Any:
        return self._get_value(relational_name)

    def _get_exclusive(self, relational_name: str, fallback: bool) -> Any:
        if fallback:
            for other in RelationalAnnotationNames.SERVER_GENERATED:
                if other != relational_name and self._get_server_generated(other) is not None:
                    return None
        return self._get_server_generated(relational_name)

    def get_default_value(self, fallback: bool = True) -> Any:
        return self._get_exclusive(RelationalAnnotationNames.DEFAULT_VALUE, fallback)

    def get_default_value_sql(self, fallback: bool = True) -> Optional[str]:
        return self._get_exclusive(RelationalAnnotationNames.DEFAULT_VALUE_SQL, fallback)

    def get_computed_column_sql(self, fallback: bool = True) -> Optional[str]:
        return self._get_exclusive(RelationalAnnotationNames.COMPUTED_COLUMN_SQL, fallback)

    @property
    def default_value(self) -> Any:
        return self.get_default_value()

    @default_value.setter
    def default_value(self, value: Any) -> None:
        self.set_default_value(value)

    @property
    def default_value_sql(self) -> Optional[str]:
        return self.get_default_value_sql()

    @default_value_sql.setter
    def default_value_sql(self, value: Optional[str]) -> None:
        self.set_default_value_sql(value)

    @property
    def computed_column_sql(self) -> Optional[str]:
        return self.get_computed_column_sql()

    @computed_column_sql.setter
    def computed_column_sql(self, value: Optional[str]) -> None:
        self.set_computed_column_sql(value)

    def set_default_value(self, value: Any) -> bool:
        if value is not None and not self.prop.accepts(value):
            raise IncorrectDefaultValueTypeError(value, self.prop.name, self.prop.clr_type)
        return self._set_server_generated(RelationalAnnotationNames.DEFAULT_VALUE, value)

    def set_default_value_sql(self, value: Optional[str]) -> bool:
        naming.check_null_but_not_empty(value, "sql")
        return self._set_server_generated(RelationalAnnotationNames.DEFAULT_VALUE_SQL, value)

    def set_computed_column_sql(self, value: Optional[str]) -> bool:
        naming.check_null_but_not_empty(value, "sql")
        return self._set_server_generated(RelationalAnnotationNames.COMPUTED_COLUMN_SQL, value)

    def can_set_default_value(self, value: Any) -> bool:
        return self._can_set_server_generated(RelationalAnnotationNames.DEFAULT_VALUE, value)

    def can_set_default_value_sql(self, value: Optional[str]) -> bool:
        return self._can_set_server_generated(RelationalAnnotationNames.DEFAULT_VALUE_SQL, value)

    def can_set_computed_column_sql(self, value: Optional[str]) -> bool:
        return self._can_set_server_generated(RelationalAnnotationNames.COMPUTED_COLUMN_SQL, value)

    def _set_server_generated(self, relational_name: str, value: Any) -> bool:
        if not self._can_set_server_generated(relational_name, value):
            return False
        if (
            not self.should_throw_on_conflict
            and value is not None
            and not _same_value(self._get_exclusive(relational_name, True), value)
        ):
            self._clear_all_server_generated_values()
        return self._set_value(relational_name, value)

    def _can_set_server_generated(self, relational_name: str, value: Any) -> bool:
        if _same_value(self._get_exclusive(relational_name, False), value):
            return True
        if not self._can_set_value(relational_name, value):
            return False
        if value is None:
            return True

        others = [n for n in RelationalAnnotationNames.SERVER_GENERATED if n != relational_name]
        if self.should_throw_on_conflict:
            for other in others:
                if self._get_server_generated(other) is not None:
                    raise ConflictingValueGenerationError(
                        SETTING_LABELS[relational_name], self.prop.name, SETTING_LABELS[other]
                    )
            return True
        return all(self._can_set_value(other, None) for other in others)

    def _clear_all_server_generated_values(self) -> None:
        for name in RelationalAnnotationNames.SERVER_GENERATED:
            self._set_value(name, None)


class RelationalKeyAnnotations(AnnotationsAccessor):
    """Relational settings of a primary or alternate key."""

    entity_type_annotations_class = RelationalEntityTypeAnnotations
    property_annotations_class = RelationalPropertyAnnotations

    @property
    def key(self):
        return self.metadata

    @property
    def name(self) -> str:
        configured = self._get_value(RelationalAnnotationNames.NAME)
        if configured is not None:
            return configured
        entity_type = self.key.declaring_entity_type
        table = self._with_metadata(self.entity_type_annotations_class, entity_type).table_name
        max_length = entity_type.model.max_identifier_length
        if self.key.is_primary_key():
            return naming.primary_key_name(table, max_length)
        columns = [self._with_metadata(self.property_annotations_class, p).column_name for p in self.key.properties]
        return naming.alternate_key_name(table, columns, max_length)

    @name.setter
    def name(self, value: Optional[str]) -> None:
        self.set_name(value)

    def set_name(self, value: Optional[str]) -> bool:
        naming.check_null_but_not_empty(value, "name")
        return self._set_value(RelationalAnnotationNames.NAME, value)


class RelationalForeignKeyAnnotations(AnnotationsAccessor):
    """Relational settings of a foreign key: the constraint name."""

    entity_type_annotations_class = RelationalEntityTypeAnnotations
    property_annotations_class = RelationalPropertyAnnotations

    @property
    def foreign_key(self):
        return self.metadata

    @property
    def name(self) -> str:
        configured = self._get_value(RelationalAnnotationNames.NAME)
        if configured is not None:
            return configured
        fk = self.foreign_key
        dependent_table = self._with_metadata(self.entity_type_annotations_class, fk.declaring_entity_type).table_name
        principal_table = self._with_metadata(self.entity_type_annotations_class, fk.principal_entity_type).table_name
        columns = [self._with_metadata(self.property_annotations_class, p).column_name for p in fk.properties]
        return naming.foreign_key_name(
            dependent_table, principal_table, columns, fk.declaring_entity_type.model.max_identifier_length
        )

    @name.setter
    def name(self, value: Optional[str]) -> None:
        self.set_name(value)

    def set_name(self, value: Optional[str]) -> bool:
        naming.check_null_but_not_empty(value, "name")
        return self._set_value(RelationalAnnotationNames.NAME, value)


class RelationalIndexAnnotations(AnnotationsAccessor):
    """Relational settings of an index: name and filter expression."""

    entity_type_annotations_class = RelationalEntityTypeAnnotations
    property_annotations_class = RelationalPropertyAnnotations

    @property
    def index(self):
        return self.metadata

    @property
    def name(self) -> str:
        configured = self._get_value(RelationalAnnotationNames.NAME)
        if configured is not None:
            return configured
        entity_type = self.index.declaring_entity_type
        table = self._with_metadata(self.entity_type_annotations_class, entity_type).table_name
        columns = [self._with_metadata(self.property_annotations_class, p).column_name for p in self.index.properties]
        return naming.index_name(table, columns, entity_type.model.max_identifier_length)

    @name.setter
    def name(self, value: Optional[str]) -> None:
        self.set_name(value)

    def set_name(self, value: Optional[str]) -> bool:
        naming.check_null_but_not_empty(value, "name")
        return self._set_value(RelationalAnnotationNames.NAME, value)

    @property
    def filter(self) -> Optional[str]:
        return self._get_value(RelationalAnnotationNames.FILTER)

    @filter.setter
    def filter(self, value: Optional[str]) -> None:
        self.set_filter(value)

    def set_filter(self, value: Optional[str]) -> bool:
        naming.check_null_but_not_empty(value, "sql")
        return self._set_value(RelationalAnnotationNames.FILTER, value)

"""Fluent configuration of properties, keys and indexes."""

import logging
from typing import Any, Optional, Self

from ..constants import ValueGenerated
from ..domain.annotations import ConfigurationSource
from ..domain.models import Index, Key, Property
from ..domain.naming import check_null_but_not_empty
from ..metadata.relational import (
    RelationalIndexAnnotations,
    RelationalKeyAnnotations,
    RelationalPropertyAnnotations,
)

logger = logging.getLogger(__name__)


class PropertyBuilder:
    """
    Configures a single property.

    Server-generated values set here replace each other: the last of
    has_default_value, has_default_value_sql and has_computed_column_sql wins.
    """

    def __init__(self, prop: Property, entity_type_builder: Any = None):
        self.metadata = prop
        self.entity_type_builder = entity_type_builder

    def _relational(self) -> RelationalPropertyAnnotations:
        return RelationalPropertyAnnotations(
            self.metadata, ConfigurationSource.EXPLICIT, should_throw_on_conflict=False
        )

    def has_column_name(self, name: Optional[str]) -> Self:
        check_null_but_not_empty(name, "name")
        self._relational().set_column_name(name)
        return self

    def has_column_type(self, type_name: Optional[str]) -> Self:
        check_null_but_not_empty(type_name, "type_name")
        self._relational().set_column_type(type_name)
        return self

    def has_default_value(self, value: Any) -> Self:
        self._relational().set_default_value(value)
        return self

    def has_default_value_sql(self, sql: Optional[str]) -> Self:
        check_null_but_not_empty(sql, "sql")
        self._relational().set_default_value_sql(sql)
        return self

    def has_computed_column_sql(self, sql: Optional[str]) -> Self:
        check_null_but_not_empty(sql, "sql")
        self._relational().set_computed_column_sql(sql)
        return self

    def is_required(self, required: bool = True) -> Self:
        self.metadata.is_nullable = not required
        return self

    def value_generated_never(self) -> Self:
        self.metadata.set_value_generated(ValueGenerated.NEVER, ConfigurationSource.EXPLICIT)
        return self

    def value_generated_on_add(self) -> Self:
        self.metadata.set_value_generated(ValueGenerated.ON_ADD, ConfigurationSource.EXPLICIT)
        return self

    def value_generated_on_add_or_update(self) -> Self:
        self.metadata.set_value_generated(ValueGenerated.ON_ADD_OR_UPDATE, ConfigurationSource.EXPLICIT)
        return self


class KeyBuilder:
    """Configures a primary or alternate key."""

    def __init__(self, key: Key):
        self.metadata = key

    def has_name(self, name: Optional[str]) -> Self:
        check_null_but_not_empty(name, "name")
        RelationalKeyAnnotations(self.metadata, should_throw_on_conflict=False).set_name(name)
        return self


class IndexBuilder:
    """Configures an index."""

    def __init__(self, index: Index):
        self.metadata = index

    def has_name(self, name: Optional[str]) -> Self:
        check_null_but_not_empty(name, "name")
        RelationalIndexAnnotations(self.metadata, should_throw_on_conflict=False).set_name(name)
        return self

    def has_filter(self, sql: Optional[str]) -> Self:
        check_null_but_not_empty(sql, "sql")
        RelationalIndexAnnotations(self.metadata, should_throw_on_conflict=False).set_filter(sql)
        return self

    def is_unique(self, unique: bool = True) -> Self:
        self.metadata.is_unique = unique
        return self

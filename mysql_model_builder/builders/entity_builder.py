"""Fluent configuration of an entity type."""

import logging
from typing import Any, Optional, Self

from ..domain.annotations import ConfigurationSource
from ..domain.models import EntityType, Property, unwrap_optional
from ..domain.naming import check_not_empty, check_null_but_not_empty
from ..exceptions import ModelDefinitionError
from ..metadata.relational import RelationalEntityTypeAnnotations
from .property_builder import IndexBuilder, KeyBuilder, PropertyBuilder
from .relationship_builder import (
    CollectionNavigationBuilder,
    ReferenceNavigationBuilder,
    navigation_target,
)

logger = logging.getLogger(__name__)


class EntityTypeBuilder:
    """
    Configures one entity type.

    Provider builders swap in their own property, key, index and navigation
    builders through the ``*_builder_class`` attributes so that chained calls
    keep returning provider builders.
    """

    property_builder_class = PropertyBuilder
    key_builder_class = KeyBuilder
    index_builder_class = IndexBuilder
    collection_navigation_builder_class = CollectionNavigationBuilder
    reference_navigation_builder_class = ReferenceNavigationBuilder

    def __init__(self, entity_type: EntityType, model_builder: Any):
        self.metadata = entity_type
        self.model_builder = model_builder

    def _relational(self) -> RelationalEntityTypeAnnotations:
        return RelationalEntityTypeAnnotations(
            self.metadata, ConfigurationSource.EXPLICIT, should_throw_on_conflict=False
        )

    @staticmethod
    def get_or_add_property(entity_type: EntityType, name: str, clr_type: Any = None) -> Property:
        """
        Find a property or add it explicitly.

        Members of the mapped class are added with their hinted type. Any
        other name becomes a shadow property and needs ``clr_type``.

        Raises:
            ModelDefinitionError: If the type is unknown or conflicts with the existing property
        """
        check_not_empty(name, "name")
        prop = entity_type.find_property(name)
        if prop is not None:
            if clr_type is not None and unwrap_optional(clr_type)[0] is not prop.clr_type:
                raise ModelDefinitionError(
                    f"Property '{entity_type.name}.{name}' is {prop.clr_type.__name__}, not {clr_type!r}",
                    entity=entity_type.name,
                    member=name,
                )
            prop.configuration_source = ConfigurationSource.EXPLICIT
            return prop

        hints = entity_type.get_type_hints()
        if clr_type is None:
            clr_type = hints.get(name)
            if clr_type is None:
                raise ModelDefinitionError(
                    f"'{entity_type.name}' has no member '{name}'",
                    entity=entity_type.name,
                    member=name,
                    suggestions=["Pass clr_type to map a shadow property"],
                )
        return entity_type.add_property(name, clr_type, is_shadow=name not in hints)

    def property(self, name: str, clr_type: Any = None) -> PropertyBuilder:
        return self.property_builder_class(self.get_or_add_property(self.metadata, name, clr_type), self)

    def has_key(self, *property_names: str) -> KeyBuilder:
        properties = [self.get_or_add_property(self.metadata, name) for name in property_names]
        key = self.metadata.set_primary_key(properties, ConfigurationSource.EXPLICIT)
        return self.key_builder_class(key)

    def has_alternate_key(self, *property_names: str) -> KeyBuilder:
        properties = [self.get_or_add_property(self.metadata, name) for name in property_names]
        return self.key_builder_class(self.metadata.add_key(properties))

    def has_index(self, *property_names: str) -> IndexBuilder:
        properties = [self.get_or_add_property(self.metadata, name) for name in property_names]
        return self.index_builder_class(self.metadata.add_index(properties))

    def to_table(self, name: str, schema: Optional[str] = None) -> Self:
        check_not_empty(name, "name")
        check_null_but_not_empty(schema, "schema")
        annotations = self._relational()
        annotations.set_table_name(name)
        if schema is not None:
            annotations.set_schema(schema)
        return self

    def to_schema(self, schema: Optional[str]) -> Self:
        """Place the table in a schema without renaming it; None falls back to the model default."""
        check_null_but_not_empty(schema, "schema")
        self._relational().set_schema(schema)
        return self

    def ignore(self, member: str) -> Self:
        check_not_empty(member, "member")
        self.metadata.ignored_members.add(member)
        if self.metadata.find_property(member) is not None:
            self.metadata.remove_property(member)
        return self

    def _related(self, navigation: str, related: Any, collection: bool) -> EntityType:
        if related is None:
            related = navigation_target(self.metadata, navigation, collection)
            if related is None:
                raise ModelDefinitionError(
                    f"Cannot find the related type of navigation '{self.metadata.name}.{navigation}'",
                    entity=self.metadata.name,
                    member=navigation,
                    suggestions=["Pass the related class or entity name explicitly"],
                )
        return self.model_builder.get_or_add_entity_type(related)

    def has_many(self, navigation: Optional[str], related: Any = None) -> CollectionNavigationBuilder:
        """Start a one-to-many relationship where this entity type is the principal."""
        if navigation is not None:
            check_not_empty(navigation, "navigation")
        return self.collection_navigation_builder_class(
            self.metadata, self._related(navigation, related, collection=True), navigation, self
        )

    def has_one(self, navigation: Optional[str], related: Any = None) -> ReferenceNavigationBuilder:
        """Start a relationship with a reference navigation on this entity type."""
        if navigation is not None:
            check_not_empty(navigation, "navigation")
        return self.reference_navigation_builder_class(
            self.metadata, self._related(navigation, related, collection=False), navigation, self
        )

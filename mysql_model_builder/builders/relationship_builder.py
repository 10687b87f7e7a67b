"""
Fluent configuration of relationships between entity types.

A relationship starts from a navigation on one entity type
(``has_many``/``has_one``) and is completed with the inverse navigation
(``with_one``/``with_many``). Configuring the same pair of navigations again
returns a builder over the same foreign key.
"""

import logging
import typing
from typing import Any, List, Optional, Self, Sequence as SequenceType

from ..domain.annotations import ConfigurationSource
from ..domain.conventions import find_candidate_foreign_key_properties
from ..domain.models import EntityType, ForeignKey, Key, Property, unwrap_optional
from ..domain.naming import check_null_but_not_empty, to_snake_case
from ..exceptions import ModelDefinitionError
from ..metadata.relational import RelationalForeignKeyAnnotations

logger = logging.getLogger(__name__)


def navigation_target(entity_type: EntityType, navigation: str, collection: bool) -> Optional[type]:
    """
    Resolve the related class of a navigation from the type hints of a mapped class.

    Collection navigations are hinted as ``List[Related]`` (or any generic
    container); reference navigations as ``Related`` or ``Optional[Related]``.
    """
    hint = entity_type.get_type_hints().get(navigation)
    if hint is None:
        return None
    hint, _ = unwrap_optional(hint)
    if collection:
        args = typing.get_args(hint)
        if not args:
            return None
        hint = args[0]
    return hint if isinstance(hint, type) else None


def find_foreign_key(
    dependent: EntityType,
    principal: EntityType,
    dependent_to_principal: Optional[str],
    principal_to_dependent: Optional[str],
) -> Optional[ForeignKey]:
    """Find a foreign key already configured for either of the navigations."""
    for foreign_key in dependent.get_foreign_keys():
        if foreign_key.principal_entity_type is not principal:
            continue
        if dependent_to_principal and foreign_key.dependent_to_principal == dependent_to_principal:
            return foreign_key
        if principal_to_dependent and foreign_key.principal_to_dependent == principal_to_dependent:
            return foreign_key
    return None


def _foreign_key_properties(
    dependent: EntityType,
    principal: EntityType,
    principal_key: Key,
    dependent_to_principal: Optional[str],
) -> List[Property]:
    properties = find_candidate_foreign_key_properties(
        dependent, principal, principal_key, dependent_to_principal
    )
    if properties is not None:
        return properties

    prefix = dependent_to_principal or to_snake_case(principal.name)
    shadow = []
    for key_property in principal_key.properties:
        name = f"{prefix}_{key_property.name}"
        prop = dependent.find_property(name)
        if prop is None:
            prop = dependent.add_property(
                name,
                Optional[key_property.clr_type],
                is_shadow=True,
                configuration_source=ConfigurationSource.CONVENTION,
            )
            logger.debug(f"Created shadow foreign key property '{dependent.name}.{name}'")
        shadow.append(prop)
    return shadow


def create_foreign_key(
    dependent: EntityType,
    principal: EntityType,
    dependent_to_principal: Optional[str],
    principal_to_dependent: Optional[str],
    is_unique: bool,
    principal_key: Optional[Key] = None,
    properties: Optional[SequenceType[Property]] = None,
) -> ForeignKey:
    """Add a foreign key from ``dependent`` to ``principal`` and wire up its navigations."""
    if principal_key is None:
        principal_key = principal.find_primary_key()
    if principal_key is None:
        raise ModelDefinitionError(
            f"Cannot relate '{dependent.name}' to '{principal.name}': '{principal.name}' has no primary key",
            entity=principal.name,
        )
    if properties is None:
        properties = _foreign_key_properties(dependent, principal, principal_key, dependent_to_principal)

    foreign_key = dependent.add_foreign_key(properties, principal_key, principal, is_unique)
    foreign_key.set_navigations(dependent_to_principal, principal_to_dependent)
    logger.debug(f"Configured {foreign_key!r}")
    return foreign_key


def replace_foreign_key(
    old: ForeignKey,
    dependent: EntityType,
    principal: EntityType,
    dependent_to_principal: Optional[str],
    principal_to_dependent: Optional[str],
    principal_key: Optional[Key] = None,
    properties: Optional[SequenceType[Property]] = None,
) -> ForeignKey:
    """
    Replace ``old`` by a foreign key with a different shape.

    Annotations configured on ``old`` (such as the constraint name) carry over
    to the new foreign key. Shadow properties created by convention for
    ``old`` are removed when nothing else uses them.
    """
    old.declaring_entity_type.remove_foreign_key(old)
    new = create_foreign_key(
        dependent, principal, dependent_to_principal, principal_to_dependent,
        old.is_unique, principal_key=principal_key, properties=properties,
    )
    for annotation in old.annotations:
        new.set_annotation(annotation.name, annotation.value, annotation.configuration_source)

    for prop in old.properties:
        if (
            prop.is_shadow
            and prop.configuration_source == ConfigurationSource.CONVENTION
            and prop not in new.properties
            and not (prop.get_containing_keys() or prop.get_containing_foreign_keys() or prop.get_containing_indexes())
        ):
            prop.declaring_entity_type.remove_property(prop.name)
    return new


class RelationshipBuilderBase:
    """Shared configuration of a foreign key reached through navigations."""

    def __init__(self, foreign_key: ForeignKey, entity_type_builder: Any):
        self.metadata = foreign_key
        self.entity_type_builder = entity_type_builder

    @property
    def foreign_key(self) -> ForeignKey:
        return self.metadata

    def _relational(self) -> RelationalForeignKeyAnnotations:
        return RelationalForeignKeyAnnotations(
            self.metadata, ConfigurationSource.EXPLICIT, should_throw_on_conflict=False
        )

    def _entity_type(self, entity: Any) -> EntityType:
        return self.entity_type_builder.model_builder.get_or_add_entity_type(entity)

    def _properties(self, entity_type: EntityType, names: SequenceType[str]) -> List[Property]:
        if not names:
            raise ModelDefinitionError("At least one property name is required", entity=entity_type.name)
        return [self.entity_type_builder.get_or_add_property(entity_type, name) for name in names]

    def has_constraint_name(self, name: Optional[str]) -> Self:
        """Set the foreign key constraint name; None restores the conventional name."""
        check_null_but_not_empty(name, "name")
        self._relational().set_name(name)
        return self

    def is_required(self, required: bool = True) -> Self:
        for prop in self.metadata.properties:
            prop.is_nullable = not required
        self.metadata.is_required = required
        return self


class ReferenceCollectionBuilder(RelationshipBuilderBase):
    """A one-to-many relationship: one principal, many dependents."""

    def has_foreign_key(self, *property_names: str) -> Self:
        fk = self.metadata
        properties = self._properties(fk.declaring_entity_type, property_names)
        if properties != fk.properties:
            self.metadata = replace_foreign_key(
                fk, fk.declaring_entity_type, fk.principal_entity_type,
                fk.dependent_to_principal, fk.principal_to_dependent,
                principal_key=fk.principal_key, properties=properties,
            )
        return self

    def has_principal_key(self, *property_names: str) -> Self:
        fk = self.metadata
        principal_key = fk.principal_entity_type.add_key(self._properties(fk.principal_entity_type, property_names))
        if principal_key is not fk.principal_key:
            self.metadata = replace_foreign_key(
                fk, fk.declaring_entity_type, fk.principal_entity_type,
                fk.dependent_to_principal, fk.principal_to_dependent,
                principal_key=principal_key, properties=_reusable_properties(fk, principal_key),
            )
        return self


class ReferenceReferenceBuilder(RelationshipBuilderBase):
    """
    A one-to-one relationship.

    Either side can be the dependent; has_foreign_key and has_principal_key
    name the side explicitly and flip the relationship when needed.
    """

    def _other(self, entity_type: EntityType) -> EntityType:
        fk = self.metadata
        if entity_type is fk.declaring_entity_type:
            return fk.principal_entity_type
        if entity_type is fk.principal_entity_type:
            return fk.declaring_entity_type
        raise ModelDefinitionError(
            f"'{entity_type.name}' is not part of the relationship between "
            f"'{fk.declaring_entity_type.name}' and '{fk.principal_entity_type.name}'",
            entity=entity_type.name,
        )

    def has_foreign_key(self, dependent_entity: Any, *property_names: str) -> Self:
        fk = self.metadata
        dependent = self._entity_type(dependent_entity)
        principal = self._other(dependent)
        properties = self._properties(dependent, property_names)

        if dependent is fk.declaring_entity_type:
            if properties != fk.properties:
                self.metadata = replace_foreign_key(
                    fk, dependent, principal, fk.dependent_to_principal, fk.principal_to_dependent,
                    principal_key=fk.principal_key, properties=properties,
                )
        else:
            self.metadata = replace_foreign_key(
                fk, dependent, principal, fk.principal_to_dependent, fk.dependent_to_principal,
                properties=properties,
            )
        return self

    def has_principal_key(self, principal_entity: Any, *property_names: str) -> Self:
        fk = self.metadata
        principal = self._entity_type(principal_entity)
        dependent = self._other(principal)
        principal_key = principal.add_key(self._properties(principal, property_names))

        if principal is fk.principal_entity_type:
            if principal_key is not fk.principal_key:
                self.metadata = replace_foreign_key(
                    fk, dependent, principal, fk.dependent_to_principal, fk.principal_to_dependent,
                    principal_key=principal_key, properties=_reusable_properties(fk, principal_key),
                )
        else:
            self.metadata = replace_foreign_key(
                fk, dependent, principal, fk.principal_to_dependent, fk.dependent_to_principal,
                principal_key=principal_key,
            )
        return self


def _reusable_properties(foreign_key: ForeignKey, principal_key: Key) -> Optional[List[Property]]:
    """Keep explicitly mapped foreign key properties that still fit the new principal key."""
    if len(foreign_key.properties) != len(principal_key.properties):
        return None
    if any(p.is_shadow for p in foreign_key.properties):
        return None
    for prop, key_property in zip(foreign_key.properties, principal_key.properties):
        if prop.clr_type is not key_property.clr_type:
            return None
    return list(foreign_key.properties)


class CollectionNavigationBuilder:
    """Started by has_many; completed with with_one."""

    reference_collection_builder_class = ReferenceCollectionBuilder

    def __init__(
        self,
        principal: EntityType,
        dependent: EntityType,
        collection_navigation: Optional[str],
        entity_type_builder: Any,
    ):
        self.principal = principal
        self.dependent = dependent
        self.collection_navigation = collection_navigation
        self.entity_type_builder = entity_type_builder

    def with_one(self, reference_navigation: Optional[str] = None) -> ReferenceCollectionBuilder:
        foreign_key = find_foreign_key(
            self.dependent, self.principal, reference_navigation, self.collection_navigation
        )
        if foreign_key is None:
            foreign_key = create_foreign_key(
                self.dependent, self.principal, reference_navigation, self.collection_navigation, is_unique=False
            )
        elif (foreign_key.dependent_to_principal, foreign_key.principal_to_dependent) != (
            reference_navigation, self.collection_navigation
        ):
            foreign_key.set_navigations(
                reference_navigation or foreign_key.dependent_to_principal,
                self.collection_navigation or foreign_key.principal_to_dependent,
            )
        return self.reference_collection_builder_class(foreign_key, self.entity_type_builder)


class ReferenceNavigationBuilder:
    """Started by has_one; completed with with_many or with_one."""

    reference_collection_builder_class = ReferenceCollectionBuilder
    reference_reference_builder_class = ReferenceReferenceBuilder

    def __init__(
        self,
        declaring: EntityType,
        related: EntityType,
        reference_navigation: Optional[str],
        entity_type_builder: Any,
    ):
        self.declaring = declaring
        self.related = related
        self.reference_navigation = reference_navigation
        self.entity_type_builder = entity_type_builder

    def with_many(self, collection_navigation: Optional[str] = None) -> ReferenceCollectionBuilder:
        foreign_key = find_foreign_key(
            self.declaring, self.related, self.reference_navigation, collection_navigation
        )
        if foreign_key is None:
            foreign_key = create_foreign_key(
                self.declaring, self.related, self.reference_navigation, collection_navigation, is_unique=False
            )
        elif collection_navigation and foreign_key.principal_to_dependent != collection_navigation:
            foreign_key.set_navigations(foreign_key.dependent_to_principal, collection_navigation)
        return self.reference_collection_builder_class(foreign_key, self.entity_type_builder)

    def with_one(self, reference_navigation: Optional[str] = None) -> ReferenceReferenceBuilder:
        """
        Complete a one-to-one relationship.

        An existing foreign key in either direction is reused. Otherwise the
        dependent side is the one whose properties match the other's key by
        name, trying the related type first; the related type is the
        dependent when neither matches.
        """
        declaring, related = self.declaring, self.related
        foreign_key = (
            find_foreign_key(related, declaring, reference_navigation, self.reference_navigation)
            or find_foreign_key(declaring, related, self.reference_navigation, reference_navigation)
        )
        if foreign_key is None:
            if self._can_depend_on(related, declaring, reference_navigation):
                dependent_is_related = True
            elif self._can_depend_on(declaring, related, self.reference_navigation):
                dependent_is_related = False
            else:
                dependent_is_related = True

            if dependent_is_related:
                foreign_key = create_foreign_key(
                    related, declaring, reference_navigation, self.reference_navigation, is_unique=True
                )
            else:
                foreign_key = create_foreign_key(
                    declaring, related, self.reference_navigation, reference_navigation, is_unique=True
                )
        return self.reference_reference_builder_class(foreign_key, self.entity_type_builder)

    @staticmethod
    def _can_depend_on(dependent: EntityType, principal: EntityType, navigation: Optional[str]) -> bool:
        principal_key = principal.find_primary_key()
        if principal_key is None:
            return False
        return find_candidate_foreign_key_properties(dependent, principal, principal_key, navigation) is not None

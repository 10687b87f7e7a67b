"""
Core metadata objects of a relational model.

These objects describe entity types, their properties, keys, foreign keys,
indexes and the model-level sequences. They only hold structure and
annotations; relational and MySQL-specific meaning is layered on top by the
accessor objects returned from ``relational()`` and ``mysql()``.
"""

import logging
import types
import typing
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence as SequenceType, Tuple, Union

from ..constants import (
    DefaultConfig,
    RelationalAnnotationNames,
    ScalarTypes,
    SequenceValueType,
    ValueGenerated,
)
from ..exceptions import MissingMetadataError, ModelDefinitionError
from ..metadata.mysql import (
    MySqlEntityTypeAnnotations,
    MySqlForeignKeyAnnotations,
    MySqlIndexAnnotations,
    MySqlKeyAnnotations,
    MySqlModelAnnotations,
    MySqlPropertyAnnotations,
)
from ..metadata.relational import (
    RelationalEntityTypeAnnotations,
    RelationalForeignKeyAnnotations,
    RelationalIndexAnnotations,
    RelationalKeyAnnotations,
    RelationalModelAnnotations,
    RelationalPropertyAnnotations,
)
from .annotations import Annotatable, ConfigurationSource

logger = logging.getLogger(__name__)

EntityReference = Union[str, type]


def unwrap_optional(clr_type: Any) -> Tuple[Any, bool]:
    """
    Strip ``Optional[...]`` from a type hint.

    Returns:
        The underlying type and whether it was optional
    """
    if typing.get_origin(clr_type) in (Union, types.UnionType):
        args = [arg for arg in typing.get_args(clr_type) if arg is not type(None)]
        if len(args) == 1 and len(typing.get_args(clr_type)) == 2:
            return args[0], True
    return clr_type, False


def is_scalar_type(clr_type: Any) -> bool:
    return isinstance(clr_type, type) and clr_type in ScalarTypes.ALL


@dataclass
class Sequence:
    """A database sequence defined on the model."""

    name: str
    schema: Optional[str] = None
    value_type: SequenceValueType = DefaultConfig.SEQUENCE_VALUE_TYPE
    start_value: int = DefaultConfig.SEQUENCE_START_VALUE
    increment_by: int = DefaultConfig.SEQUENCE_INCREMENT
    min_value: Optional[int] = None
    max_value: Optional[int] = None
    is_cyclic: bool = False

    @property
    def clr_type(self) -> type:
        return self.value_type.python_type

    @staticmethod
    def annotation_name(prefix: str, name: str, schema: Optional[str] = None) -> str:
        return f"{prefix}{schema or ''}.{name}"

    def validate(self) -> None:
        """Check the facets fit the value type and each other."""
        low, high = self.value_type.bounds
        for facet in ("start_value", "min_value", "max_value"):
            value = getattr(self, facet)
            if value is not None and not low <= value <= high:
                raise ModelDefinitionError(
                    f"Sequence '{self.name}' {facet} {value} is out of range for {self.value_type.value}",
                    member=self.name,
                )
        if self.increment_by == 0:
            raise ModelDefinitionError(f"Sequence '{self.name}' cannot increment by 0", member=self.name)
        if self.min_value is not None and self.max_value is not None and self.min_value > self.max_value:
            raise ModelDefinitionError(
                f"Sequence '{self.name}' min value {self.min_value} is greater than max value {self.max_value}",
                member=self.name,
            )

    def update(self, **facets: Any) -> None:
        """Assign facets only if the sequence stays valid with them."""
        replace(self, **facets).validate()
        for facet, value in facets.items():
            setattr(self, facet, value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'schema': self.schema,
            'type': self.value_type.value,
            'start_value': self.start_value,
            'increment_by': self.increment_by,
            'min_value': self.min_value,
            'max_value': self.max_value,
            'is_cyclic': self.is_cyclic,
        }


class Model(Annotatable):
    """
    Root of the metadata graph.

    Holds entity types by name and sequences as annotations. Conventions
    attached to the model are notified when elements change.
    """

    def __init__(self, settings: Any = None, conventions: Any = None):
        super().__init__()
        self.settings = settings
        self.conventions = conventions
        self._entity_types: Dict[str, "EntityType"] = {}

    def __repr__(self) -> str:
        return f"Model(entity_types={list(self._entity_types)})"

    def relational(self) -> RelationalModelAnnotations:
        return RelationalModelAnnotations(self)

    def mysql(self) -> MySqlModelAnnotations:
        return MySqlModelAnnotations(self)

    @property
    def max_identifier_length(self) -> int:
        return getattr(self.settings, "max_identifier_length", DefaultConfig.MAX_IDENTIFIER_LENGTH)

    # Entity types

    def find_entity_type(self, entity: EntityReference) -> Optional["EntityType"]:
        name = entity.__name__ if isinstance(entity, type) else entity
        return self._entity_types.get(name)

    def get_entity_type(self, entity: EntityReference) -> "EntityType":
        entity_type = self.find_entity_type(entity)
        if entity_type is None:
            raise MissingMetadataError("entity type", getattr(entity, "__name__", entity))
        return entity_type

    def get_entity_types(self) -> List["EntityType"]:
        return list(self._entity_types.values())

    def add_entity_type(self, entity: EntityReference) -> "EntityType":
        if isinstance(entity, type):
            name, clr_type = entity.__name__, entity
        else:
            name, clr_type = entity, None
        if name in self._entity_types:
            raise ModelDefinitionError(f"Entity type '{name}' is already in the model", entity=name)

        entity_type = EntityType(name, self, clr_type)
        self._entity_types[name] = entity_type
        logger.debug(f"Added entity type '{name}'")
        if self.conventions is not None:
            self.conventions.on_entity_type_added(entity_type)
        return entity_type

    def remove_entity_type(self, entity: EntityReference) -> Optional["EntityType"]:
        entity_type = self.find_entity_type(entity)
        if entity_type is None:
            return None
        for foreign_key in entity_type.get_referencing_foreign_keys():
            dependent = foreign_key.declaring_entity_type
            if dependent is not entity_type:
                raise ModelDefinitionError(
                    f"Entity type '{entity_type.name}' is referenced by a foreign key on '{dependent.name}'",
                    entity=entity_type.name,
                )
        for foreign_key in entity_type.get_foreign_keys():
            entity_type.remove_foreign_key(foreign_key)
        del self._entity_types[entity_type.name]
        return entity_type

    # Sequences

    def add_sequence(
        self,
        name: str,
        schema: Optional[str] = None,
        value_type: SequenceValueType = DefaultConfig.SEQUENCE_VALUE_TYPE,
        prefix: str = RelationalAnnotationNames.SEQUENCE_PREFIX,
        configuration_source: ConfigurationSource = ConfigurationSource.EXPLICIT,
    ) -> Sequence:
        sequence = Sequence(name=name, schema=schema, value_type=value_type)
        self.set_annotation(Sequence.annotation_name(prefix, name, schema), sequence, configuration_source)
        logger.debug(f"Added sequence '{sequence.schema or ''}.{sequence.name}'")
        return sequence

    def find_sequence(
        self,
        name: str,
        schema: Optional[str] = None,
        prefix: str = RelationalAnnotationNames.SEQUENCE_PREFIX,
    ) -> Optional[Sequence]:
        return self.get_annotation_value(Sequence.annotation_name(prefix, name, schema))

    def get_sequences(self, prefix: str = RelationalAnnotationNames.SEQUENCE_PREFIX) -> List[Sequence]:
        return [a.value for a in self.annotations if a.name.startswith(prefix)]


class EntityType(Annotatable):
    """An entity type: a Python class (or named shadow type) mapped to a table."""

    def __init__(self, name: str, model: Model, clr_type: Optional[type] = None):
        super().__init__()
        self.name = name
        self.model = model
        self.clr_type = clr_type
        self._properties: Dict[str, "Property"] = {}
        self._primary_key: Optional["Key"] = None
        self._primary_key_source: Optional[ConfigurationSource] = None
        self._keys: List["Key"] = []
        self._indexes: List["Index"] = []
        self._foreign_keys: List["ForeignKey"] = []
        self._navigations: Dict[str, "ForeignKey"] = {}
        self.ignored_members: set = set()

    def __repr__(self) -> str:
        return f"EntityType({self.name!r})"

    def display_name(self) -> str:
        return self.name

    @property
    def has_clr_type(self) -> bool:
        return self.clr_type is not None

    def relational(self) -> RelationalEntityTypeAnnotations:
        return RelationalEntityTypeAnnotations(self)

    def mysql(self) -> MySqlEntityTypeAnnotations:
        return MySqlEntityTypeAnnotations(self)

    def get_type_hints(self) -> Dict[str, Any]:
        """Resolved type hints of the mapped class (empty for shadow entity types)."""
        if self.clr_type is None:
            return {}
        try:
            return typing.get_type_hints(self.clr_type)
        except NameError as e:
            raise ModelDefinitionError(
                f"Cannot resolve type hints of '{self.name}': {e}", entity=self.name
            ) from e

    # Properties

    def find_property(self, name: str) -> Optional["Property"]:
        return self._properties.get(name)

    def get_property(self, name: str) -> "Property":
        prop = self.find_property(name)
        if prop is None:
            raise MissingMetadataError("property", name, entity=self.name)
        return prop

    def get_properties(self) -> List["Property"]:
        return list(self._properties.values())

    def add_property(
        self,
        name: str,
        clr_type: Any,
        is_shadow: bool = False,
        configuration_source: ConfigurationSource = ConfigurationSource.EXPLICIT,
    ) -> "Property":
        if name in self._properties:
            raise ModelDefinitionError(f"Property '{name}' already exists", entity=self.name, member=name)
        if name in self._navigations:
            raise ModelDefinitionError(
                f"'{name}' is already a navigation on '{self.name}'", entity=self.name, member=name
            )

        underlying, optional = unwrap_optional(clr_type)
        if not is_scalar_type(underlying):
            raise ModelDefinitionError(
                f"Property '{name}' has unsupported type {clr_type!r}",
                entity=self.name,
                member=name,
            )

        prop = Property(name, underlying, self, is_nullable=optional, is_shadow=is_shadow,
                        configuration_source=configuration_source)
        self._properties[name] = prop
        self.ignored_members.discard(name)
        logger.debug(f"Added property '{self.name}.{name}' ({underlying.__name__})")
        if self.model.conventions is not None:
            self.model.conventions.on_property_added(prop)
        return prop

    def remove_property(self, name: str) -> Optional["Property"]:
        prop = self.find_property(name)
        if prop is None:
            return None
        if prop.get_containing_keys() or prop.get_containing_foreign_keys() or prop.get_containing_indexes():
            raise ModelDefinitionError(
                f"Property '{name}' is still used by a key, foreign key or index",
                entity=self.name,
                member=name,
            )
        del self._properties[name]
        return prop

    # Keys

    def find_primary_key(self) -> Optional["Key"]:
        return self._primary_key

    @property
    def primary_key_configuration_source(self) -> Optional[ConfigurationSource]:
        return self._primary_key_source

    def set_primary_key(
        self,
        properties: SequenceType["Property"],
        configuration_source: ConfigurationSource = ConfigurationSource.EXPLICIT,
    ) -> Optional["Key"]:
        """Make the given properties the primary key, replacing any weaker configuration."""
        if not configuration_source.overrides(self._primary_key_source):
            if self._primary_key is not None and self._primary_key.properties == list(properties):
                return self._primary_key
            return None

        previous = self._primary_key
        key = self.find_key(properties) or self._add_key(properties)
        self._primary_key = key
        self._primary_key_source = configuration_source

        if previous is not None and previous is not key and not previous.get_referencing_foreign_keys():
            self._keys.remove(previous)

        if self.model.conventions is not None and previous is not key:
            self.model.conventions.on_primary_key_changed(self, previous)
        return key

    def find_key(self, properties: SequenceType["Property"]) -> Optional["Key"]:
        properties = list(properties)
        for key in self._keys:
            if key.properties == properties:
                return key
        return None

    def get_keys(self) -> List["Key"]:
        return list(self._keys)

    def add_key(self, properties: SequenceType["Property"]) -> "Key":
        existing = self.find_key(properties)
        if existing is not None:
            return existing
        return self._add_key(properties)

    def _add_key(self, properties: SequenceType["Property"]) -> "Key":
        if not properties:
            raise ModelDefinitionError("A key requires at least one property", entity=self.name)
        key = Key(list(properties), self)
        self._keys.append(key)
        return key

    # Indexes

    def find_index(self, properties: SequenceType["Property"]) -> Optional["Index"]:
        properties = list(properties)
        for index in self._indexes:
            if index.properties == properties:
                return index
        return None

    def add_index(self, properties: SequenceType["Property"]) -> "Index":
        existing = self.find_index(properties)
        if existing is not None:
            return existing
        if not properties:
            raise ModelDefinitionError("An index requires at least one property", entity=self.name)
        index = Index(list(properties), self)
        self._indexes.append(index)
        return index

    def get_indexes(self) -> List["Index"]:
        return list(self._indexes)

    # Foreign keys and navigations

    def get_foreign_keys(self) -> List["ForeignKey"]:
        return list(self._foreign_keys)

    def get_referencing_foreign_keys(self) -> List["ForeignKey"]:
        return [
            fk
            for entity_type in self.model.get_entity_types()
            for fk in entity_type.get_foreign_keys()
            if fk.principal_entity_type is self
        ]

    def add_foreign_key(
        self,
        properties: SequenceType["Property"],
        principal_key: "Key",
        principal_entity_type: "EntityType",
        is_unique: bool = False,
    ) -> "ForeignKey":
        properties = list(properties)
        if len(properties) != len(principal_key.properties):
            raise ModelDefinitionError(
                f"Foreign key on '{self.name}' has {len(properties)} properties but the principal "
                f"key on '{principal_entity_type.name}' has {len(principal_key.properties)}",
                entity=self.name,
            )
        foreign_key = ForeignKey(properties, principal_key, self, principal_entity_type, is_unique)
        self._foreign_keys.append(foreign_key)
        if self.model.conventions is not None:
            self.model.conventions.on_foreign_key_added(foreign_key)
        return foreign_key

    def remove_foreign_key(self, foreign_key: "ForeignKey") -> None:
        self._foreign_keys.remove(foreign_key)
        for entity_type in (self, foreign_key.principal_entity_type):
            for name, fk in list(entity_type._navigations.items()):
                if fk is foreign_key:
                    del entity_type._navigations[name]
        if self.model.conventions is not None:
            self.model.conventions.on_foreign_key_removed(foreign_key)

    def find_navigation(self, name: str) -> Optional["ForeignKey"]:
        return self._navigations.get(name)

    def get_navigations(self) -> Dict[str, "ForeignKey"]:
        return dict(self._navigations)

    def add_navigation(self, name: str, foreign_key: "ForeignKey") -> None:
        if name in self._properties:
            raise ModelDefinitionError(
                f"'{name}' is already a property on '{self.name}'", entity=self.name, member=name
            )
        self._navigations[name] = foreign_key


class Property(Annotatable):
    """A scalar property of an entity type, mapped to a column."""

    def __init__(
        self,
        name: str,
        clr_type: type,
        declaring_entity_type: EntityType,
        is_nullable: bool = False,
        is_shadow: bool = False,
        configuration_source: ConfigurationSource = ConfigurationSource.EXPLICIT,
    ):
        super().__init__()
        self.name = name
        self.clr_type = clr_type
        self.declaring_entity_type = declaring_entity_type
        self.is_nullable = is_nullable or clr_type in ScalarTypes.NULLABLE_BY_DEFAULT
        self.is_shadow = is_shadow
        self.configuration_source = configuration_source
        self._value_generated = ValueGenerated.NEVER
        self._value_generated_source: Optional[ConfigurationSource] = None

    def __repr__(self) -> str:
        return f"Property({self.declaring_entity_type.name}.{self.name})"

    def relational(self) -> RelationalPropertyAnnotations:
        return RelationalPropertyAnnotations(self)

    def mysql(self) -> MySqlPropertyAnnotations:
        return MySqlPropertyAnnotations(self)

    @property
    def model(self) -> Model:
        return self.declaring_entity_type.model

    @property
    def value_generated(self) -> ValueGenerated:
        return self._value_generated

    @property
    def value_generated_configuration_source(self) -> Optional[ConfigurationSource]:
        return self._value_generated_source

    def set_value_generated(
        self,
        value: ValueGenerated,
        configuration_source: ConfigurationSource = ConfigurationSource.EXPLICIT,
    ) -> bool:
        if not configuration_source.overrides(self._value_generated_source):
            return False
        if value != self._value_generated:
            logger.debug(f"{self!r} value generated: {value.value} ({configuration_source.name.lower()})")
        self._value_generated = value
        self._value_generated_source = configuration_source
        return True

    def get_containing_keys(self) -> List["Key"]:
        return [key for key in self.declaring_entity_type.get_keys() if self in key.properties]

    def get_containing_foreign_keys(self) -> List["ForeignKey"]:
        return [fk for fk in self.declaring_entity_type.get_foreign_keys() if self in fk.properties]

    def get_containing_indexes(self) -> List["Index"]:
        return [index for index in self.declaring_entity_type.get_indexes() if self in index.properties]

    def is_key(self) -> bool:
        return bool(self.get_containing_keys())

    def is_primary_key(self) -> bool:
        primary_key = self.declaring_entity_type.find_primary_key()
        return primary_key is not None and self in primary_key.properties

    def is_foreign_key(self) -> bool:
        return bool(self.get_containing_foreign_keys())

    def is_integer(self) -> bool:
        return self.clr_type in ScalarTypes.INTEGER

    def accepts(self, value: Any) -> bool:
        """Check if ``value`` is a valid value for this property's type."""
        if value is None:
            return self.is_nullable
        if self.clr_type is bool:
            return isinstance(value, bool)
        if isinstance(value, bool):
            return False
        if self.clr_type is float:
            return isinstance(value, (int, float))
        if self.clr_type is Decimal:
            return isinstance(value, (int, Decimal))
        return isinstance(value, self.clr_type)

    def _on_annotation_set(self, name: str, old_value: Any, new_value: Any) -> None:
        conventions = self.model.conventions
        if conventions is not None:
            conventions.on_property_annotation_changed(self, name, old_value, new_value)


class Key(Annotatable):
    """A primary or alternate key."""

    def __init__(self, properties: List[Property], declaring_entity_type: EntityType):
        super().__init__()
        self.properties = properties
        self.declaring_entity_type = declaring_entity_type

    def __repr__(self) -> str:
        return f"Key({self.declaring_entity_type.name}: {', '.join(p.name for p in self.properties)})"

    def relational(self) -> RelationalKeyAnnotations:
        return RelationalKeyAnnotations(self)

    def mysql(self) -> MySqlKeyAnnotations:
        return MySqlKeyAnnotations(self)

    def is_primary_key(self) -> bool:
        return self.declaring_entity_type.find_primary_key() is self

    def get_referencing_foreign_keys(self) -> List["ForeignKey"]:
        return [
            fk for fk in self.declaring_entity_type.get_referencing_foreign_keys()
            if fk.principal_key is self
        ]


class ForeignKey(Annotatable):
    """A relationship between a dependent entity type and a principal key."""

    def __init__(
        self,
        properties: List[Property],
        principal_key: Key,
        dependent_entity_type: EntityType,
        principal_entity_type: EntityType,
        is_unique: bool = False,
    ):
        super().__init__()
        self.properties = properties
        self.principal_key = principal_key
        self.declaring_entity_type = dependent_entity_type
        self.principal_entity_type = principal_entity_type
        self.is_unique = is_unique
        self.is_required = not any(p.is_nullable for p in properties)
        self.dependent_to_principal: Optional[str] = None
        self.principal_to_dependent: Optional[str] = None

    def __repr__(self) -> str:
        return (
            f"ForeignKey({self.declaring_entity_type.name}"
            f"({', '.join(p.name for p in self.properties)}) -> "
            f"{self.principal_entity_type.name})"
        )

    @property
    def dependent_entity_type(self) -> EntityType:
        return self.declaring_entity_type

    def relational(self) -> RelationalForeignKeyAnnotations:
        return RelationalForeignKeyAnnotations(self)

    def mysql(self) -> MySqlForeignKeyAnnotations:
        return MySqlForeignKeyAnnotations(self)

    def set_navigations(self, dependent_to_principal: Optional[str], principal_to_dependent: Optional[str]) -> None:
        if dependent_to_principal:
            self.declaring_entity_type.add_navigation(dependent_to_principal, self)
        if principal_to_dependent:
            self.principal_entity_type.add_navigation(principal_to_dependent, self)
        self.dependent_to_principal = dependent_to_principal
        self.principal_to_dependent = principal_to_dependent


class Index(Annotatable):
    """A database index over one or more properties."""

    def __init__(self, properties: List[Property], declaring_entity_type: EntityType):
        super().__init__()
        self.properties = properties
        self.declaring_entity_type = declaring_entity_type
        self.is_unique = False

    def __repr__(self) -> str:
        return f"Index({self.declaring_entity_type.name}: {', '.join(p.name for p in self.properties)})"

    def relational(self) -> RelationalIndexAnnotations:
        return RelationalIndexAnnotations(self)

    def mysql(self) -> MySqlIndexAnnotations:
        return MySqlIndexAnnotations(self)


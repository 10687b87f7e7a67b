"""Entry point of the fluent API."""

import logging
from typing import Any, Callable, Optional, Union

from ..config_validation import ModelBuilderSettings
from ..constants import DefaultConfig, SequenceValueType
from ..domain.annotations import ConfigurationSource
from ..domain.conventions import ConventionDispatcher
from ..domain.models import EntityType, Model
from ..domain.naming import check_not_empty, check_null_but_not_empty
from ..metadata.relational import RelationalModelAnnotations
from .entity_builder import EntityTypeBuilder
from .sequence_builder import SequenceBuilder

logger = logging.getLogger(__name__)


class ModelBuilder:
    """
    Builds a Model through chained configuration calls.

    Conventions run as the model is configured: entity classes contribute
    their scalar type hints as properties, ``id`` or ``<entity>_id`` becomes
    the primary key, and value generation follows keys and server-generated
    values. Explicit configuration always takes precedence.

    Example:
        >>> builder = ModelBuilder()
        >>> builder.entity(Customer).property("name").has_column_name("customer_name")
        >>> builder.model.find_entity_type(Customer).find_property("name").relational().column_name
        'customer_name'
    """

    entity_type_builder_class = EntityTypeBuilder
    sequence_builder_class = SequenceBuilder
    conventions_class = ConventionDispatcher

    def __init__(self, settings: Optional[ModelBuilderSettings] = None, conventions: Any = None):
        self.settings = settings or ModelBuilderSettings()
        self.model = Model(self.settings, conventions or self.conventions_class(self.settings))
        self.model.conventions.on_model_initialized(self.model)

    def _relational(self) -> RelationalModelAnnotations:
        return RelationalModelAnnotations(
            self.model, ConfigurationSource.EXPLICIT, should_throw_on_conflict=False
        )

    def get_or_add_entity_type(self, entity: Union[str, type]) -> EntityType:
        if isinstance(entity, str):
            check_not_empty(entity, "name")
        entity_type = self.model.find_entity_type(entity)
        if entity_type is None:
            return self.model.add_entity_type(entity)
        if entity_type.clr_type is None and isinstance(entity, type):
            # Named earlier without its class; map the class now
            entity_type.clr_type = entity
            self.model.conventions.on_entity_type_added(entity_type)
        return entity_type

    def entity(
        self,
        entity: Union[str, type],
        configure: Optional[Callable[[EntityTypeBuilder], Any]] = None,
    ):
        """
        Configure an entity type, adding it to the model if needed.

        Args:
            entity: Entity class, or the name of an entity type
            configure: Optional callback receiving the entity type builder

        Returns:
            The entity type builder, or this model builder when ``configure`` is given
        """
        builder = self.entity_type_builder_class(self.get_or_add_entity_type(entity), self)
        if configure is not None:
            configure(builder)
            return self
        return builder

    def ignore(self, entity: Union[str, type]) -> "ModelBuilder":
        entity_type = self.model.find_entity_type(entity)
        if entity_type is not None:
            self.model.remove_entity_type(entity_type.name)
            logger.debug(f"Ignored entity type '{entity_type.name}'")
        return self

    def has_default_schema(self, schema: Optional[str]) -> "ModelBuilder":
        check_null_but_not_empty(schema, "schema")
        self._relational().set_default_schema(schema)
        return self

    def has_sequence(
        self,
        name: str,
        schema: Optional[str] = None,
        value_type: SequenceValueType = DefaultConfig.SEQUENCE_VALUE_TYPE,
        configure: Optional[Callable[[SequenceBuilder], Any]] = None,
    ):
        """
        Configure a sequence, adding it to the model if needed.

        Returns:
            The sequence builder, or this model builder when ``configure`` is given
        """
        sequence = self._relational().get_or_add_sequence(name, schema, value_type)
        sequence.update(value_type=value_type)
        builder = self.sequence_builder_class(sequence)
        if configure is not None:
            configure(builder)
            return self
        return builder

"""
MySQL Model Builder.

Fluent builders that attach relational and MySQL metadata to a model of
entity types, properties, keys, foreign keys, indexes and sequences.

Example:
    >>> from mysql_model_builder import MySqlModelBuilder
    >>> builder = MySqlModelBuilder()
    >>> builder.entity(Customer).property("id").for_mysql_use_sequence_hi_lo("customer_ids")
    >>> builder.model.find_entity_type(Customer).find_property("id").mysql().hi_lo_sequence_name
    'customer_ids'
"""

# The domain package must load before the builders and accessors that use it
from .domain import (
    ConfigurationSource,
    EntityType,
    ForeignKey,
    Index,
    Key,
    Model,
    Property,
    Sequence,
)
from .builders import ModelBuilder, MySqlModelBuilder
from .config_validation import ModelBuilderSettings, load_config
from .constants import MySqlValueGenerationStrategy, SequenceValueType, ValueGenerated
from .exceptions import (
    ConfigurationError,
    ConflictingValueGenerationError,
    IncorrectDefaultValueTypeError,
    InvalidNameError,
    InvalidValueGenerationError,
    MissingMetadataError,
    ModelBuilderError,
    ModelDefinitionError,
)
from .model_definition import build_model_from_definition, describe_model, load_model_definition

__version__ = "0.1.0"

__all__ = [
    # Builders
    'ModelBuilder',
    'MySqlModelBuilder',

    # Metadata
    'ConfigurationSource',
    'EntityType',
    'ForeignKey',
    'Index',
    'Key',
    'Model',
    'Property',
    'Sequence',

    # Constants
    'MySqlValueGenerationStrategy',
    'SequenceValueType',
    'ValueGenerated',

    # Configuration
    'ModelBuilderSettings',
    'load_config',

    # Model definitions
    'build_model_from_definition',
    'describe_model',
    'load_model_definition',

    # Exceptions
    'ConfigurationError',
    'ConflictingValueGenerationError',
    'IncorrectDefaultValueTypeError',
    'InvalidNameError',
    'InvalidValueGenerationError',
    'MissingMetadataError',
    'ModelBuilderError',
    'ModelDefinitionError',
]

"""
Domain module for MySQL Model Builder.

This module contains the metadata graph a model builder configures: entity
types, properties, keys, foreign keys, indexes and sequences, the annotation
store they share, conventional naming and the conventions that run while a
model is built.
"""

from .annotations import (
    Annotatable,
    Annotation,
    ConfigurationSource,
)

from . import naming

from .models import (
    EntityType,
    ForeignKey,
    Index,
    Key,
    Model,
    Property,
    Sequence,
)

from .conventions import (
    ConventionDispatcher,
    MySqlConventionDispatcher,
    MySqlValueGeneratedConvention,
    ValueGeneratedConvention,
    find_candidate_foreign_key_properties,
)

__all__ = [
    # Annotations
    'Annotatable',
    'Annotation',
    'ConfigurationSource',

    # Naming
    'naming',

    # Models
    'EntityType',
    'ForeignKey',
    'Index',
    'Key',
    'Model',
    'Property',
    'Sequence',

    # Conventions
    'ConventionDispatcher',
    'MySqlConventionDispatcher',
    'MySqlValueGeneratedConvention',
    'ValueGeneratedConvention',
    'find_candidate_foreign_key_properties',
]

"""
Fluent builders that configure a model.

ModelBuilder configures the generic relational model; MySqlModelBuilder adds
the ``for_mysql_*`` methods at every level of the chain.
"""

from .model_builder import ModelBuilder
from .entity_builder import EntityTypeBuilder
from .property_builder import IndexBuilder, KeyBuilder, PropertyBuilder
from .relationship_builder import (
    CollectionNavigationBuilder,
    ReferenceCollectionBuilder,
    ReferenceNavigationBuilder,
    ReferenceReferenceBuilder,
)
from .sequence_builder import SequenceBuilder
from .mysql import (
    MySqlCollectionNavigationBuilder,
    MySqlEntityTypeBuilder,
    MySqlIndexBuilder,
    MySqlKeyBuilder,
    MySqlModelBuilder,
    MySqlPropertyBuilder,
    MySqlReferenceCollectionBuilder,
    MySqlReferenceNavigationBuilder,
    MySqlReferenceReferenceBuilder,
)

__all__ = [
    'ModelBuilder',
    'EntityTypeBuilder',
    'PropertyBuilder',
    'KeyBuilder',
    'IndexBuilder',
    'SequenceBuilder',
    'CollectionNavigationBuilder',
    'ReferenceNavigationBuilder',
    'ReferenceCollectionBuilder',
    'ReferenceReferenceBuilder',
    'MySqlModelBuilder',
    'MySqlEntityTypeBuilder',
    'MySqlPropertyBuilder',
    'MySqlKeyBuilder',
    'MySqlIndexBuilder',
    'MySqlCollectionNavigationBuilder',
    'MySqlReferenceNavigationBuilder',
    'MySqlReferenceCollectionBuilder',
    'MySqlReferenceReferenceBuilder',
]

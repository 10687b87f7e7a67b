"""
Relational and MySQL accessors over model annotations.
"""

from .relational import (
    RelationalEntityTypeAnnotations,
    RelationalForeignKeyAnnotations,
    RelationalIndexAnnotations,
    RelationalKeyAnnotations,
    RelationalModelAnnotations,
    RelationalPropertyAnnotations,
)
from .mysql import (
    MySqlEntityTypeAnnotations,
    MySqlForeignKeyAnnotations,
    MySqlIndexAnnotations,
    MySqlKeyAnnotations,
    MySqlModelAnnotations,
    MySqlPropertyAnnotations,
    is_compatible_with_identity_column,
    is_compatible_with_sequence_hi_lo,
)

__all__ = [
    'RelationalEntityTypeAnnotations',
    'RelationalForeignKeyAnnotations',
    'RelationalIndexAnnotations',
    'RelationalKeyAnnotations',
    'RelationalModelAnnotations',
    'RelationalPropertyAnnotations',
    'MySqlEntityTypeAnnotations',
    'MySqlForeignKeyAnnotations',
    'MySqlIndexAnnotations',
    'MySqlKeyAnnotations',
    'MySqlModelAnnotations',
    'MySqlPropertyAnnotations',
    'is_compatible_with_identity_column',
    'is_compatible_with_sequence_hi_lo',
]

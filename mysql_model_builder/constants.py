"""
Centralized constants for MySQL Model Builder.

This module contains annotation names, enumerations and default values shared
by the domain model, the metadata accessors and the fluent builders. Keeping
them in one place makes the naming convention for provider-specific versus
generic relational annotations easy to audit.
"""

import uuid
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Dict, Tuple


# =============================================================================
# ANNOTATION NAMES
# =============================================================================

class RelationalAnnotationNames:
    """Names of generic relational annotations."""

    PREFIX = "Relational:"

    COLUMN_NAME = PREFIX + "ColumnName"
    COLUMN_TYPE = PREFIX + "ColumnType"
    DEFAULT_VALUE_SQL = PREFIX + "DefaultValueSql"
    COMPUTED_COLUMN_SQL = PREFIX + "ComputedColumnSql"
    DEFAULT_VALUE = PREFIX + "DefaultValue"
    TABLE_NAME = PREFIX + "TableName"
    SCHEMA = PREFIX + "Schema"
    DEFAULT_SCHEMA = PREFIX + "DefaultSchema"
    NAME = PREFIX + "Name"
    FILTER = PREFIX + "Filter"
    SEQUENCE_PREFIX = PREFIX + "Sequence:"

    # Mutually exclusive ways for the server to produce a column value
    SERVER_GENERATED = (DEFAULT_VALUE, DEFAULT_VALUE_SQL, COMPUTED_COLUMN_SQL)


class MySqlAnnotationNames:
    """Names of MySQL provider annotations."""

    PREFIX = "MySql:"

    VALUE_GENERATION_STRATEGY = PREFIX + "ValueGenerationStrategy"
    HI_LO_SEQUENCE_NAME = PREFIX + "HiLoSequenceName"
    HI_LO_SEQUENCE_SCHEMA = PREFIX + "HiLoSequenceSchema"
    CLUSTERED = PREFIX + "Clustered"
    MEMORY_OPTIMIZED = PREFIX + "MemoryOptimized"
    SEQUENCE_PREFIX = PREFIX + "Sequence:"

    @classmethod
    def override_of(cls, relational_name: str) -> str:
        """Return the provider-specific name overriding a relational annotation."""
        if not relational_name.startswith(RelationalAnnotationNames.PREFIX):
            raise ValueError(f"'{relational_name}' is not a relational annotation name")
        return cls.PREFIX + relational_name[len(RelationalAnnotationNames.PREFIX):]


# =============================================================================
# ENUMERATIONS
# =============================================================================

class ValueGenerated(Enum):
    """When the database generates a value for a property."""

    NEVER = "never"
    ON_ADD = "on_add"
    ON_ADD_OR_UPDATE = "on_add_or_update"


class MySqlValueGenerationStrategy(Enum):
    """Strategies MySQL can use to generate key values."""

    SEQUENCE_HI_LO = "sequence_hi_lo"
    IDENTITY_COLUMN = "identity_column"


class SequenceValueType(Enum):
    """Value types a database sequence can produce."""

    INT64 = "int64"
    INT32 = "int32"
    INT16 = "int16"
    UINT8 = "uint8"
    DECIMAL = "decimal"

    @property
    def python_type(self) -> type:
        return Decimal if self is SequenceValueType.DECIMAL else int

    @property
    def bounds(self) -> Tuple[int, int]:
        """Inclusive range of values the type can hold (decimal uses int64 range)."""
        return _SEQUENCE_BOUNDS[self]


_SEQUENCE_BOUNDS: Dict[SequenceValueType, Tuple[int, int]] = {
    SequenceValueType.INT64: (-(2 ** 63), 2 ** 63 - 1),
    SequenceValueType.INT32: (-(2 ** 31), 2 ** 31 - 1),
    SequenceValueType.INT16: (-(2 ** 15), 2 ** 15 - 1),
    SequenceValueType.UINT8: (0, 255),
    SequenceValueType.DECIMAL: (-(2 ** 63), 2 ** 63 - 1),
}


# =============================================================================
# DEFAULTS
# =============================================================================

class DefaultConfig:
    """Default configuration values."""

    HI_LO_SEQUENCE_NAME = "EntityFrameworkHiLoSequence"
    HI_LO_INCREMENT = 10

    SEQUENCE_START_VALUE = 1
    SEQUENCE_INCREMENT = 1
    SEQUENCE_VALUE_TYPE = SequenceValueType.INT64

    VALUE_GENERATION_STRATEGY = MySqlValueGenerationStrategy.IDENTITY_COLUMN

    # MySQL limits identifiers (tables, columns, constraints) to 64 characters
    MAX_IDENTIFIER_LENGTH = 64


# =============================================================================
# PROPERTY TYPES
# =============================================================================

class ScalarTypes:
    """Python types that map to columns."""

    ALL: Tuple[type, ...] = (
        int, float, Decimal, str, bool, bytes,
        datetime, date, time, timedelta, uuid.UUID,
    )

    # bool subclasses int but never maps to an integer column
    INTEGER: Tuple[type, ...] = (int,)
    IDENTITY_COMPATIBLE: Tuple[type, ...] = (int, Decimal)
    HI_LO_COMPATIBLE: Tuple[type, ...] = (int,)

    # Single-property primary keys of these types are generated on add
    GENERATED_KEY: Tuple[type, ...] = (int, uuid.UUID)

    # Types that can hold NULL without Optional[...]
    NULLABLE_BY_DEFAULT: Tuple[type, ...] = (str, bytes)

    # Names usable in YAML model definitions
    BY_NAME: Dict[str, type] = {
        "int": int,
        "float": float,
        "decimal": Decimal,
        "str": str,
        "bool": bool,
        "bytes": bytes,
        "datetime": datetime,
        "date": date,
        "time": time,
        "timedelta": timedelta,
        "uuid": uuid.UUID,
    }

"""
Naming convention utilities for MySQL Model Builder.

This module produces the conventional names used when a table, key, index
or foreign key has not been given an explicit name, and converts between the
Python naming styles used by entity classes.
"""

import re
from typing import Iterable, Optional

import inflect

from ..constants import DefaultConfig
from ..exceptions import InvalidNameError


# Initialize inflect engine for pluralization
p = inflect.engine()


def to_snake_case(name: str) -> str:
    """
    Convert CamelCase or PascalCase to snake_case.

    Example:
        >>> to_snake_case("OrderDetails")
        'order_details'
        >>> to_snake_case("XMLHttpRequest")
        'xml_http_request'
    """
    if not isinstance(name, str):
        raise TypeError(f"Expected string, got {type(name).__name__}")

    name = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    name = re.sub("__([A-Z])", r"_\1", name)
    name = re.sub("([a-z0-9])([A-Z])", r"\1_\2", name)
    return name.lower()


def to_pascal_case(name: str) -> str:
    """
    Convert snake_case to PascalCase.

    Example:
        >>> to_pascal_case("order_details")
        'OrderDetails'
    """
    if not isinstance(name, str):
        raise TypeError(f"Expected string, got {type(name).__name__}")
    return "".join(word[:1].upper() + word[1:] for word in name.split("_") if word)


def pluralize(name: str) -> str:
    """
    Pluralize the last word of an entity name.

    Example:
        >>> pluralize("OrderDetail")
        'OrderDetails'
        >>> pluralize("Category")
        'Categories'
    """
    words = to_snake_case(name).split("_")
    if p.singular_noun(words[-1]) is not False:
        # Already plural
        return name
    plural_word = p.plural_noun(words[-1])
    head = name[: len(name) - len(words[-1])]
    if name[-len(words[-1]):][:1].isupper():
        plural_word = plural_word[:1].upper() + plural_word[1:]
    return head + plural_word


def truncate_identifier(name: str, max_length: int = DefaultConfig.MAX_IDENTIFIER_LENGTH) -> str:
    """
    Shorten a generated identifier so it fits the database limit.

    Truncated names end with ``~`` so they never collide with a name that
    happens to be exactly ``max_length`` characters long.
    """
    if len(name) <= max_length:
        return name
    return name[: max_length - 1] + "~"


def default_table_name(entity_name: str, pluralize_names: bool = False) -> str:
    """Conventional table name for an entity type."""
    return pluralize(entity_name) if pluralize_names else entity_name


def primary_key_name(table_name: str, max_length: int = DefaultConfig.MAX_IDENTIFIER_LENGTH) -> str:
    return truncate_identifier(f"PK_{table_name}", max_length)


def alternate_key_name(
    table_name: str,
    column_names: Iterable[str],
    max_length: int = DefaultConfig.MAX_IDENTIFIER_LENGTH,
) -> str:
    return truncate_identifier(f"AK_{table_name}_{'_'.join(column_names)}", max_length)


def foreign_key_name(
    dependent_table: str,
    principal_table: str,
    column_names: Iterable[str],
    max_length: int = DefaultConfig.MAX_IDENTIFIER_LENGTH,
) -> str:
    """
    Conventional foreign key constraint name.

    Example:
        >>> foreign_key_name("Order", "Customer", ["customer_id"])
        'FK_Order_Customer_customer_id'
    """
    return truncate_identifier(
        f"FK_{dependent_table}_{principal_table}_{'_'.join(column_names)}", max_length
    )


def index_name(
    table_name: str,
    column_names: Iterable[str],
    max_length: int = DefaultConfig.MAX_IDENTIFIER_LENGTH,
) -> str:
    return truncate_identifier(f"IX_{table_name}_{'_'.join(column_names)}", max_length)


def check_not_empty(value: Optional[str], argument: str) -> str:
    """Reject None, empty and whitespace-only names."""
    if value is None or not isinstance(value, str) or not value.strip():
        raise InvalidNameError(argument, value)
    return value


def check_null_but_not_empty(value: Optional[str], argument: str) -> Optional[str]:
    """Allow None (reset to convention) but reject empty and whitespace-only names."""
    if value is None:
        return None
    return check_not_empty(value, argument)

"""
Annotation storage for model elements.

Every element of a model (the model itself, entity types, properties, keys,
foreign keys and indexes) carries an ordered mapping from annotation name to
value. Each annotation remembers the configuration source that set it so that
conventions never overwrite what a user configured explicitly.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)


class ConfigurationSource(Enum):
    """Where a piece of configuration came from, strongest first."""

    EXPLICIT = 0
    DATA_ANNOTATION = 1
    CONVENTION = 2

    def overrides(self, other: Optional["ConfigurationSource"]) -> bool:
        """Check if configuration from this source may replace configuration from ``other``."""
        if other is None:
            return True
        return self.value <= other.value

    @staticmethod
    def strongest(first: "ConfigurationSource", second: Optional["ConfigurationSource"]) -> "ConfigurationSource":
        if second is None or first.overrides(second):
            return first
        return second


@dataclass
class Annotation:
    """A named metadata value attached to a model element."""

    name: str
    value: Any
    configuration_source: ConfigurationSource = ConfigurationSource.EXPLICIT


class Annotatable:
    """Base class for model elements that carry annotations."""

    def __init__(self):
        self._annotations: Dict[str, Annotation] = {}

    @property
    def annotations(self) -> List[Annotation]:
        return list(self._annotations.values())

    def __iter__(self) -> Iterator[Annotation]:
        return iter(list(self._annotations.values()))

    def __getitem__(self, name: str) -> Any:
        return self.get_annotation_value(name)

    def find_annotation(self, name: str) -> Optional[Annotation]:
        return self._annotations.get(name)

    def get_annotation_value(self, name: str, default: Any = None) -> Any:
        annotation = self._annotations.get(name)
        return annotation.value if annotation is not None else default

    def can_set_annotation(
        self,
        name: str,
        value: Any,
        configuration_source: ConfigurationSource = ConfigurationSource.EXPLICIT,
    ) -> bool:
        """Check if ``value`` can be stored under ``name`` from the given source."""
        existing = self._annotations.get(name)
        if existing is None:
            return True
        if _same_value(existing.value, value):
            return True
        return configuration_source.overrides(existing.configuration_source)

    def set_annotation(
        self,
        name: str,
        value: Any,
        configuration_source: ConfigurationSource = ConfigurationSource.EXPLICIT,
    ) -> bool:
        """
        Set, replace or (with ``value=None``) remove an annotation.

        Args:
            name: Annotation name
            value: New value; None removes the annotation
            configuration_source: Source of the new value

        Returns:
            False if a stronger source already set a different value
        """
        if not self.can_set_annotation(name, value, configuration_source):
            logger.debug(
                f"Ignoring {configuration_source.name.lower()} value for '{name}' "
                f"on {self!r}: already configured by a stronger source"
            )
            return False

        existing = self._annotations.get(name)
        old_value = existing.value if existing is not None else None

        if value is None:
            self._annotations.pop(name, None)
        else:
            source = configuration_source
            if existing is not None and _same_value(existing.value, value):
                source = ConfigurationSource.strongest(configuration_source, existing.configuration_source)
            self._annotations[name] = Annotation(name, value, source)

        if not _same_value(old_value, value):
            self._on_annotation_set(name, old_value, value)
        return True

    def remove_annotation(self, name: str) -> Optional[Annotation]:
        annotation = self._annotations.pop(name, None)
        if annotation is not None:
            self._on_annotation_set(name, annotation.value, None)
        return annotation

    def _on_annotation_set(self, name: str, old_value: Any, new_value: Any) -> None:
        """Hook for subclasses that react to annotation changes."""


def _same_value(first: Any, second: Any) -> bool:
    # 1 == True in Python, but they are different defaults for a column
    if type(first) is not type(second):
        return False
    return first == second

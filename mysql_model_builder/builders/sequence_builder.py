"""Fluent configuration of a database sequence."""

import logging
from typing import Any, Self

from ..domain.models import Sequence

logger = logging.getLogger(__name__)


class SequenceBuilder:
    """Configures the facets of a sequence; every method returns the same builder."""

    def __init__(self, sequence: Sequence):
        self.metadata = sequence

    def _set(self, facet: str, value: Any) -> Self:
        # A rejected value leaves the sequence untouched
        self.metadata.update(**{facet: value})
        logger.debug(f"Sequence '{self.metadata.name}' {facet} = {value}")
        return self

    def increments_by(self, increment: int) -> Self:
        return self._set("increment_by", increment)

    def starts_at(self, start_value: int) -> Self:
        return self._set("start_value", start_value)

    def has_min(self, minimum: int) -> Self:
        return self._set("min_value", minimum)

    def has_max(self, maximum: int) -> Self:
        return self._set("max_value", maximum)

    def is_cyclic(self, cyclic: bool = True) -> Self:
        return self._set("is_cyclic", cyclic)

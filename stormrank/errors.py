"""
Errors
======

Every fatal condition of a run is a `StormRankError`. Expected outcomes
(an unmatched label, an unknown magnitude code) are NOT errors: they are
counted and reported instead.
"""

from __future__ import annotations
from typing import Optional


class StormRankError(Exception):
    """Base class for all stormrank failures."""


class CatalogError(StormRankError):
    """The reference catalog is empty or could not be read."""


class EmptyInputError(StormRankError):
    """There are no records to aggregate."""


class ConfigError(StormRankError, ValueError):
    pass


class RecordParseError(StormRankError, ValueError):
    """A required numeric field of one record is missing or malformed."""

    def __init__(self, record_id: Optional[int], field: str, value: object) -> None:
        self.record_id = record_id
        self.field = field
        self.value = value
        super().__init__(f"Row {record_id}: invalid value for {field!r}: {value!r}")

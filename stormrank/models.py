"""
Data model (RawRecord, NormalizedRecord, GroupSummary, PipelineResult)
=====================================================================

Each row of the Storm Data table is converted into a `RawRecord` object.
We keep records immutable (`frozen=True`) so that:
- records cannot be accidentally modified after loading, and
- normalization pairs a record with a label instead of editing it.

Damage amounts are never stored: they are decoded on demand from the
(coefficient, magnitude code) pairs.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from .magnitude import decode
from .ranking import top_k

Number = Union[int, float]


@dataclass(frozen=True)
class RawRecord:
    """One observed storm event.

    Fields are the subset of Storm Data columns the report consumes.
    """
    record_id: int
    event_label: str
    fatalities: int
    injuries: int
    property_damage_coefficient: float
    property_damage_code: Optional[str]
    crop_damage_coefficient: float
    crop_damage_code: Optional[str]

    @property
    def toll(self) -> int:
        return self.fatalities + self.injuries

    @property
    def property_damage(self) -> float:
        return decode(self.property_damage_coefficient, self.property_damage_code)

    @property
    def crop_damage(self) -> float:
        return decode(self.crop_damage_coefficient, self.crop_damage_code)

    @property
    def total_damage(self) -> float:
        """Decoded property + crop damage in US$."""
        return self.property_damage + self.crop_damage


@dataclass(frozen=True)
class NormalizedRecord:
    """A RawRecord paired with its canonical label (None = no match)."""
    record: RawRecord
    label: Optional[str]

    @property
    def matched(self) -> bool:
        return self.label is not None


@dataclass(frozen=True)
class GroupSummary:
    """One ranked row: an event type and its summed metric."""
    event_type: str
    value: Number
    # number of retained records behind this row
    events: int
    breakdown: Dict[str, Number] = field(default_factory=dict)


@dataclass(frozen=True)
class PipelineResult:
    """Everything one run produces: both rankings plus drop diagnostics."""
    toll: List[GroupSummary]
    damage: List[GroupSummary]
    total_records: int
    retained: int
    dropped: int
    unmatched_labels: Counter = field(default_factory=Counter)
    unrecognized_codes: Counter = field(default_factory=Counter)

    def ranking(self, metric: str) -> List[GroupSummary]:
        m = metric.lower().strip()
        if m in ("toll", "harm", "health"):
            return self.toll
        if m in ("damage", "damages", "economic"):
            return self.damage
        raise ValueError("metric must be: toll, damage")

    def top(self, metric: str, n: int) -> List[GroupSummary]:
        """Return the `n` highest rows for `metric` (heap selection, ties in ranking order)."""
        return top_k(self.ranking(metric), n)

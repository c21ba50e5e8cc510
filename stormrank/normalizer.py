"""
Label normalizer (fuzzy matching)
=================================

Raw Storm Data event types are free text: "TSTM WIND", "Tornadoe",
"FLOOD ", "Summary of June 3". This module maps each one onto the
closest label of the reference catalog, or reports "no match" (None).

Algorithm:
1) trim + case-fold the raw label (the catalog is lower-cased already)
2) edit distance to every catalog entry (rapidfuzz Levenshtein or OSA)
3) keep the minimum; above `max_distance` -> None
4) ties on the minimum: lowest catalog index ("first") or None ("reject")

Cost is O(C * L) per label. `LabelNormalizer` memoizes per distinct label,
which is what keeps a full Storm Data run cheap: ~900k rows but only ~1k
distinct spellings.
"""

from __future__ import annotations
import logging
import math
from typing import Dict, Optional, Tuple

from rapidfuzz.distance import Levenshtein, OSA

from .catalog import ReferenceCatalog

logger = logging.getLogger(__name__)

_SCORERS = {
    "levenshtein": Levenshtein,
    "osa": OSA,
}

Match = Tuple[Optional[str], Optional[int]]


def _clean(raw_label: object) -> str:
    if raw_label is None or (isinstance(raw_label, float) and math.isnan(raw_label)):
        return ""
    return str(raw_label).strip().lower()


def best_match(
    raw_label: object,
    catalog: ReferenceCatalog,
    max_distance: int = 8,
    *,
    method: str = "levenshtein",
    tie_policy: str = "first",
) -> Match:
    """Return (canonical label, distance), or (None, None) for no match.

    A blank or missing label is no match without scoring it: an empty
    string would otherwise sit within `max_distance` of short entries
    such as "hail".
    """
    key = _clean(raw_label)
    if not key:
        return None, None
    scorer = _SCORERS[method]

    best: Optional[str] = None
    best_dist: Optional[int] = None
    tied = False
    for label in catalog.labels:
        d = scorer.distance(key, label, score_cutoff=max_distance)
        if d > max_distance:
            continue
        if best_dist is None or d < best_dist:
            best, best_dist, tied = label, d, False
        elif d == best_dist:
            tied = True

    if best is None:
        return None, None
    if tied and tie_policy == "reject":
        return None, None
    return best, best_dist


def normalize(
    raw_label: object,
    catalog: ReferenceCatalog,
    max_distance: int = 8,
    *,
    method: str = "levenshtein",
    tie_policy: str = "first",
) -> Optional[str]:
    """Map a raw label to its canonical label, or None."""
    label, _ = best_match(raw_label, catalog, max_distance, method=method, tie_policy=tie_policy)
    return label


class LabelNormalizer:
    """`normalize` bound to one catalog + policy, memoized per distinct label."""

    def __init__(
        self,
        catalog: ReferenceCatalog,
        max_distance: int = 8,
        *,
        method: str = "levenshtein",
        tie_policy: str = "first",
    ) -> None:
        if method not in _SCORERS:
            raise ValueError(f"Unknown distance method: {method!r}")
        self.catalog = catalog
        self.max_distance = max_distance
        self.method = method
        self.tie_policy = tie_policy
        self._memo: Dict[str, Match] = {}

    def best_match(self, raw_label: object) -> Match:
        key = _clean(raw_label)
        hit = self._memo.get(key)
        if hit is None:
            hit = best_match(key, self.catalog, self.max_distance,
                             method=self.method, tie_policy=self.tie_policy)
            if hit[0] is None:
                logger.debug("No catalog match for label %r", key)
            self._memo[key] = hit
        return hit

    def __call__(self, raw_label: object) -> Optional[str]:
        return self.best_match(raw_label)[0]

    @property
    def distinct_labels_seen(self) -> int:
        return len(self._memo)

"""
Reference catalog (canonical event types)
=========================================

The catalog is the closed set of event-type labels every raw label is
matched against. By default it is the list of 48 event types from NWS
Directive 10-1605 (Storm Data Preparation), in directive order.

Key ideas:
- Labels are stripped and lower-cased ONCE when the catalog is built,
  so matching never re-normalizes the catalog per call.
- Catalog order matters only for tie-breaks (matcher ties and ranking ties).
- The catalog is read-only after construction.
"""

from __future__ import annotations
import logging
from typing import Dict, Iterable, Iterator, Tuple

from .errors import CatalogError

logger = logging.getLogger(__name__)

EVENT_TYPES: Tuple[str, ...] = (
    "Astronomical Low Tide",
    "Avalanche",
    "Blizzard",
    "Coastal Flood",
    "Cold/Wind Chill",
    "Debris Flow",
    "Dense Fog",
    "Dense Smoke",
    "Drought",
    "Dust Devil",
    "Dust Storm",
    "Excessive Heat",
    "Extreme Cold/Wind Chill",
    "Flash Flood",
    "Flood",
    "Frost/Freeze",
    "Funnel Cloud",
    "Freezing Fog",
    "Hail",
    "Heat",
    "Heavy Rain",
    "Heavy Snow",
    "High Surf",
    "High Wind",
    "Hurricane (Typhoon)",
    "Ice Storm",
    "Lake-Effect Snow",
    "Lakeshore Flood",
    "Lightning",
    "Marine Hail",
    "Marine High Wind",
    "Marine Strong Wind",
    "Marine Thunderstorm Wind",
    "Rip Current",
    "Seiche",
    "Sleet",
    "Storm Surge/Tide",
    "Strong Wind",
    "Thunderstorm Wind",
    "Tornado",
    "Tropical Depression",
    "Tropical Storm",
    "Tsunami",
    "Volcanic Ash",
    "Waterspout",
    "Wildfire",
    "Winter Storm",
    "Winter Weather",
)


class ReferenceCatalog:
    """Ordered, case-normalized set of canonical labels."""

    def __init__(self, labels: Iterable[str]) -> None:
        ordered: list = []
        index: Dict[str, int] = {}
        for raw in labels:
            label = str(raw).strip().lower()
            if not label:
                continue
            if label in index:
                logger.warning("Duplicate catalog label %r ignored", raw)
                continue
            index[label] = len(ordered)
            ordered.append(label)
        if not ordered:
            raise CatalogError("Reference catalog is empty.")
        self._labels: Tuple[str, ...] = tuple(ordered)
        self._index = index

    @property
    def labels(self) -> Tuple[str, ...]:
        return self._labels

    def index(self, label: str) -> int:
        """Catalog position of a canonical label (KeyError if absent)."""
        return self._index[label]

    def __len__(self) -> int:
        return len(self._labels)

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels)

    def __contains__(self, label: object) -> bool:
        return label in self._index

    def __repr__(self) -> str:
        return f"ReferenceCatalog({len(self)} labels)"


def default_catalog() -> ReferenceCatalog:
    return ReferenceCatalog(EVENT_TYPES)


def load_catalog(path: str) -> ReferenceCatalog:
    """Read a catalog from a text file, one label per line.

    Blank lines and lines starting with '#' are skipped.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            lines = [ln.strip() for ln in f]
    except OSError as e:
        raise CatalogError(f"Cannot read catalog file {path!r}: {e}") from e
    labels = [ln for ln in lines if ln and not ln.startswith("#")]
    logger.info("Loaded %d catalog labels from %s", len(labels), path)
    return ReferenceCatalog(labels)

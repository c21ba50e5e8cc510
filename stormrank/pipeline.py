"""
Core pipeline (stormrank)
=========================

This is the heart of the project. A run is a single forward pass:

1) Normalize  -> pair every RawRecord with a canonical label (or None)
2) Filter     -> drop unmatched records, counting them
3) Decode     -> property + crop damage per record (magnitude codes)
4) Aggregate  -> one GroupSummary per event type, for toll and for damage
5) Rank       -> descending by metric, ties in catalog order

Nothing is persisted and nothing is mutated: the same records and catalog
always give the same PipelineResult.
"""

from __future__ import annotations
import csv
import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple

from .catalog import ReferenceCatalog, default_catalog
from .config import PipelineConfig
from .errors import EmptyInputError
from .magnitude import decode, is_recognized
from .models import GroupSummary, NormalizedRecord, PipelineResult, RawRecord
from .normalizer import LabelNormalizer
from .ranking import rank_groups

logger = logging.getLogger(__name__)

Retained = List[Tuple[RawRecord, str]]


# ---------------- Filter ----------------
def filter_matched(normalized: Iterable[NormalizedRecord]) -> Tuple[Retained, Counter]:
    """Keep matched records in input order.

    Returns (retained pairs, Counter of dropped raw labels); the drop count
    is the Counter's total.
    """
    kept: Retained = []
    dropped: Counter = Counter()
    for n in normalized:
        if n.matched:
            kept.append((n.record, n.label))
        else:
            dropped[n.record.event_label] += 1
    return kept, dropped


# ---------------- Aggregation ----------------
def aggregate_toll(retained: Retained, catalog: ReferenceCatalog) -> List[GroupSummary]:
    """Sum fatalities + injuries per event type, ranked descending."""
    fatalities: Dict[str, int] = {}
    injuries: Dict[str, int] = {}
    counts: Counter = Counter()
    for rec, label in retained:
        fatalities[label] = fatalities.get(label, 0) + rec.fatalities
        injuries[label] = injuries.get(label, 0) + rec.injuries
        counts[label] += 1
    rows = [
        GroupSummary(
            event_type=label,
            value=fatalities[label] + injuries[label],
            events=counts[label],
            breakdown={"fatalities": fatalities[label], "injuries": injuries[label]},
        )
        for label in _in_catalog_order(counts, catalog)
    ]
    return rank_groups(rows)


def aggregate_damage(retained: Retained, catalog: ReferenceCatalog) -> List[GroupSummary]:
    """Sum decoded property + crop damage per event type, ranked descending.

    Per-record totals are added in record order so float rounding is the
    same on every run.
    """
    prop: Dict[str, float] = {}
    crop: Dict[str, float] = {}
    total: Dict[str, float] = {}
    counts: Counter = Counter()
    for rec, label in retained:
        p = decode(rec.property_damage_coefficient, rec.property_damage_code)
        c = decode(rec.crop_damage_coefficient, rec.crop_damage_code)
        prop[label] = prop.get(label, 0.0) + p
        crop[label] = crop.get(label, 0.0) + c
        total[label] = total.get(label, 0.0) + (p + c)
        counts[label] += 1
    rows = [
        GroupSummary(
            event_type=label,
            value=total[label],
            events=counts[label],
            breakdown={"property": prop[label], "crop": crop[label]},
        )
        for label in _in_catalog_order(counts, catalog)
    ]
    return rank_groups(rows)


def _in_catalog_order(present: Iterable[str], catalog: ReferenceCatalog) -> List[str]:
    return sorted(present, key=catalog.index)


def count_unrecognized_codes(records: Iterable[RawRecord]) -> Counter:
    out: Counter = Counter()
    for rec in records:
        for code in (rec.property_damage_code, rec.crop_damage_code):
            if not is_recognized(code):
                out[code] += 1
    return out


# ---------------- Driver ----------------
@dataclass
class StormRank:
    """Pipeline driver: one catalog + one config, any number of runs.

    The engine stores no per-run state; `run` returns everything it computes.
    """
    catalog: ReferenceCatalog = field(default_factory=default_catalog)
    config: PipelineConfig = field(default_factory=PipelineConfig)
    normalizer: LabelNormalizer = field(init=False)

    def __post_init__(self) -> None:
        self.config.validate()
        self.normalizer = LabelNormalizer(
            self.catalog,
            self.config.max_distance,
            method=self.config.distance_method,
            tie_policy=self.config.tie_policy,
        )

    def normalize_records(self, records: Iterable[RawRecord]) -> List[NormalizedRecord]:
        return [NormalizedRecord(record=r, label=self.normalizer(r.event_label)) for r in records]

    def run(self, records: Sequence[RawRecord]) -> PipelineResult:
        """Normalize, filter, aggregate and rank `records`."""
        if not records:
            raise EmptyInputError("No records to aggregate (input is empty).")

        normalized = self.normalize_records(records)
        retained, unmatched = filter_matched(normalized)
        dropped = sum(unmatched.values())
        logger.info(
            "Normalized %d records (%d distinct labels): retained=%d dropped=%d",
            len(records), self.normalizer.distinct_labels_seen, len(retained), dropped,
        )
        if not retained:
            logger.warning("Every record was dropped: no label matched the catalog")

        retained_records = [r for r, _ in retained]
        unrecognized = count_unrecognized_codes(retained_records)
        if unrecognized:
            logger.warning(
                "Unrecognized magnitude codes decoded with exponent 0: %s",
                dict(unrecognized.most_common()),
            )

        return PipelineResult(
            toll=aggregate_toll(retained, self.catalog),
            damage=aggregate_damage(retained, self.catalog),
            total_records=len(records),
            retained=len(retained),
            dropped=dropped,
            unmatched_labels=unmatched,
            unrecognized_codes=unrecognized,
        )

    # ---------------- Export ----------------
    @staticmethod
    def export_csv(result: PipelineResult, path: str) -> None:
        """Write both rankings to one CSV (metric column tells them apart)."""
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(["metric", "rank", "event_type", "value", "events", "breakdown"])
            for metric in ("toll", "damage"):
                for i, row in enumerate(result.ranking(metric), start=1):
                    parts = ";".join(f"{k}={v}" for k, v in row.breakdown.items())
                    w.writerow([metric, i, row.event_type, row.value, row.events, parts])

    @staticmethod
    def export_json(result: PipelineResult, path: str) -> None:
        """Export both rankings plus drop diagnostics as JSON."""
        payload = {
            "total_records": result.total_records,
            "retained": result.retained,
            "dropped": result.dropped,
            "toll": [_row_dict(r) for r in result.toll],
            "damage": [_row_dict(r) for r in result.damage],
            "unmatched_labels": dict(result.unmatched_labels.most_common()),
            "unrecognized_codes": {str(k): v for k, v in result.unrecognized_codes.most_common()},
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)


def _row_dict(row: GroupSummary) -> dict:
    return {
        "event_type": row.event_type,
        "value": row.value,
        "events": row.events,
        "breakdown": dict(row.breakdown),
    }

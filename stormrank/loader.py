"""
Dataset loader (Storm Data table -> RawRecord list)
===================================================

This module reads a NOAA storm events table and converts each row into a
`RawRecord` object.

Key ideas:
- We try multiple possible column names because two layouts are common:
  the legacy Storm Data file (EVTYPE, FATALITIES, PROPDMG, PROPDMGEXP, ...)
  and the NCEI "details" files (EVENT_TYPE, DEATHS_DIRECT, DAMAGE_PROPERTY
  with values like "25.00K").
- Compressed CSVs (.bz2/.gz/.zip) are read directly; .xlsx goes through openpyxl.
- Numeric fields are parsed strictly by default: one malformed value aborts
  the load with a RecordParseError. With strict=False the row is skipped.
"""

from __future__ import annotations
import logging
import math
import re
from typing import List, Optional, Tuple

import pandas as pd

from .errors import RecordParseError
from .models import RawRecord

logger = logging.getLogger(__name__)

# NCEI details files encode damage as one string: "25.00K", "1.5M", "0"
_COMBINED_DAMAGE = re.compile(r"^\s*(\d+(?:\.\d*)?|\.\d+)\s*([A-Za-z+?\-]?)\s*$")


def _to_str(x) -> str:
    if pd.isna(x): return ""
    return str(x).strip()


def _to_code(x) -> Optional[str]:
    """Magnitude code cell -> stripped string, or None when blank."""
    if pd.isna(x): return None
    if isinstance(x, float) and x.is_integer():
        x = int(x)  # Excel reads the digit codes as numbers
    s = str(x).strip()
    return s or None


def _to_count(x, record_id: int, field: str) -> int:
    """Cell -> non-negative integer, raising RecordParseError otherwise."""
    if pd.isna(x):
        raise RecordParseError(record_id, field, x)
    try:
        v = float(x)
    except (TypeError, ValueError) as e:
        raise RecordParseError(record_id, field, x) from e
    if v < 0 or not v.is_integer():
        raise RecordParseError(record_id, field, x)
    return int(v)


def _to_amount(x, record_id: int, field: str) -> float:
    """Cell -> non-negative float, raising RecordParseError otherwise."""
    if pd.isna(x):
        raise RecordParseError(record_id, field, x)
    try:
        v = float(x)
    except (TypeError, ValueError) as e:
        raise RecordParseError(record_id, field, x) from e
    if not math.isfinite(v) or v < 0:
        raise RecordParseError(record_id, field, x)
    return v


def split_combined_damage(x, record_id: int = -1, field: str = "damage") -> Tuple[float, Optional[str]]:
    """Split "25.00K" into (25.0, "K"). Blank cells mean no damage: (0.0, None)."""
    if pd.isna(x):
        return 0.0, None
    s = str(x).strip()
    if not s:
        return 0.0, None
    m = _COMBINED_DAMAGE.match(s)
    if not m:
        raise RecordParseError(record_id, field, x)
    return float(m.group(1)), (m.group(2) or None)


def _norm(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", str(s).lower())


def _col(df: pd.DataFrame, *names: str) -> str:
    cols = list(df.columns)
    for n in names:
        if n in cols:
            return n
    norm_map = {_norm(c): c for c in cols}
    for n in names:
        nn = _norm(n)
        if nn in norm_map:
            return norm_map[nn]
    raise KeyError(f"Missing required column. Tried={names}. Available={cols}")


def _opt_col(df: pd.DataFrame, *names: str) -> Optional[str]:
    try:
        return _col(df, *names)
    except KeyError:
        return None


def read_table(path: str) -> pd.DataFrame:
    """Read a CSV (optionally compressed) or an Excel workbook into a DataFrame."""
    if str(path).lower().endswith((".xlsx", ".xlsm")):
        df = pd.read_excel(path, engine="openpyxl")
    else:
        # keep magnitude codes like "0" or "+" as text
        df = pd.read_csv(path, compression="infer", low_memory=False, dtype=str)
    df.rename(columns={c: str(c).strip() for c in df.columns}, inplace=True)
    logger.info("Read %d rows x %d columns from %s", len(df), len(df.columns), path)
    return df


def records_from_frame(df: pd.DataFrame, *, strict: bool = True) -> List[RawRecord]:
    """Convert a DataFrame into RawRecord objects (see module docstring)."""
    label_col = _col(df, "EVTYPE", "EVENT_TYPE", "Event Type", "event_label")
    deaths_col = _col(df, "FATALITIES", "DEATHS_DIRECT", "Deaths", "fatalities")
    injuries_col = _col(df, "INJURIES", "INJURIES_DIRECT", "injuries")

    prop_col = _opt_col(df, "PROPDMG", "property_damage_coefficient")
    prop_exp_col = _opt_col(df, "PROPDMGEXP", "property_damage_code")
    crop_col = _opt_col(df, "CROPDMG", "crop_damage_coefficient")
    crop_exp_col = _opt_col(df, "CROPDMGEXP", "crop_damage_code")
    # NCEI layout: one combined column per damage kind
    prop_combined = None if prop_col else _col(df, "DAMAGE_PROPERTY", "PROPDMG")
    crop_combined = None if crop_col else _col(df, "DAMAGE_CROPS", "CROPDMG")

    records: List[RawRecord] = []
    skipped = 0
    for i, row in enumerate(df.itertuples(index=False, name=None)):
        cell = dict(zip(df.columns, row))
        try:
            if prop_combined:
                prop, prop_code = split_combined_damage(cell[prop_combined], i, prop_combined)
            else:
                prop = _to_amount(cell[prop_col], i, prop_col)
                prop_code = _to_code(cell[prop_exp_col]) if prop_exp_col else None
            if crop_combined:
                crop, crop_code = split_combined_damage(cell[crop_combined], i, crop_combined)
            else:
                crop = _to_amount(cell[crop_col], i, crop_col)
                crop_code = _to_code(cell[crop_exp_col]) if crop_exp_col else None

            records.append(RawRecord(
                record_id=i,
                event_label=_to_str(cell[label_col]),
                fatalities=_to_count(cell[deaths_col], i, deaths_col),
                injuries=_to_count(cell[injuries_col], i, injuries_col),
                property_damage_coefficient=prop,
                property_damage_code=prop_code,
                crop_damage_coefficient=crop,
                crop_damage_code=crop_code,
            ))
        except RecordParseError as e:
            if strict:
                raise
            skipped += 1
            logger.debug("Skipping malformed row: %s", e)

    if skipped:
        logger.warning("Skipped %d malformed rows (lenient mode)", skipped)
    return records


def load_storm_data(path: str, *, strict: bool = True) -> List[RawRecord]:
    """Load a Storm Data file (.csv, .csv.bz2, .csv.gz, .xlsx) into RawRecords."""
    return records_from_frame(read_table(path), strict=strict)

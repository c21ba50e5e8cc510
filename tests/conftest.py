"""
Pytest configuration and fixtures for the stormrank test suite.
"""

import pytest

from stormrank.catalog import ReferenceCatalog
from stormrank.models import RawRecord


def make_record(label, fatalities=0, injuries=0, prop=0.0, prop_code=None,
                crop=0.0, crop_code=None, record_id=0):
    return RawRecord(
        record_id=record_id,
        event_label=label,
        fatalities=fatalities,
        injuries=injuries,
        property_damage_coefficient=prop,
        property_damage_code=prop_code,
        crop_damage_coefficient=crop,
        crop_damage_code=crop_code,
    )


@pytest.fixture
def record_factory():
    """Build RawRecord objects with zero defaults."""
    return make_record


@pytest.fixture
def small_catalog():
    return ReferenceCatalog(["tornado", "flood"])


@pytest.fixture
def scenario_records():
    """The three-record end-to-end scenario (one label cannot be matched)."""
    return [
        make_record("Tornadoe", 3, 1, 10, "K", 0, "-", record_id=0),
        make_record("FLOOD ", 0, 0, 1, "M", 2, "K", record_id=1),
        make_record("blizzard!!", 1, 0, 0, "", 0, "", record_id=2),
    ]


@pytest.fixture
def storm_csv(tmp_path):
    """A tiny legacy-layout Storm Data CSV."""
    path = tmp_path / "StormData.csv"
    path.write_text(
        "STATE__,EVTYPE,FATALITIES,INJURIES,PROPDMG,PROPDMGEXP,CROPDMG,CROPDMGEXP\n"
        "1,TORNADO,5,10,25,K,0,\n"
        "1,TSTM WIND,0,2,1.5,M,3,K\n"
        "2,Summary of June 3,0,0,0,,0,\n"
        "2, flood ,1,0,2,B,0,?\n",
        encoding="utf-8",
    )
    return path

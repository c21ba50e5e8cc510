import pandas as pd
import pytest

from stormrank.errors import RecordParseError
from stormrank.loader import load_storm_data, records_from_frame, split_combined_damage


def test_legacy_layout(storm_csv):
    recs = load_storm_data(str(storm_csv))
    assert len(recs) == 4
    first = recs[0]
    assert first.record_id == 0
    assert first.event_label == "TORNADO"
    assert (first.fatalities, first.injuries) == (5, 10)
    assert (first.property_damage_coefficient, first.property_damage_code) == (25.0, "K")
    assert (first.crop_damage_coefficient, first.crop_damage_code) == (0.0, None)
    assert first.total_damage == 25_000.0
    # labels are trimmed at load time
    assert recs[3].event_label == "flood"
    assert recs[3].crop_damage_code == "?"


def test_compressed_csv_is_read_directly(tmp_path, storm_csv):
    bz = tmp_path / "StormData.csv.bz2"
    pd.read_csv(storm_csv, dtype=str).to_csv(bz, index=False, compression="bz2")
    assert len(load_storm_data(str(bz))) == 4


def _frame(**overrides):
    row = {
        "EVTYPE": "HAIL", "FATALITIES": "0", "INJURIES": "1",
        "PROPDMG": "2", "PROPDMGEXP": "K", "CROPDMG": "0", "CROPDMGEXP": None,
    }
    row.update(overrides)
    return pd.DataFrame([row, {**row, "EVTYPE": "HEAT"}])


@pytest.mark.parametrize("field, value", [
    ("FATALITIES", "abc"),
    ("INJURIES", "-1"),
    ("INJURIES", "1.5"),
    ("PROPDMG", None),
    ("CROPDMG", "lots"),
])
def test_strict_mode_aborts_on_malformed_numbers(field, value):
    df = _frame()
    df.loc[0, field] = value
    with pytest.raises(RecordParseError) as info:
        records_from_frame(df)
    assert info.value.record_id == 0
    assert info.value.field == field


def test_lenient_mode_skips_malformed_rows():
    df = _frame()
    df.loc[0, "FATALITIES"] = "abc"
    recs = records_from_frame(df, strict=False)
    assert [r.event_label for r in recs] == ["HEAT"]
    assert recs[0].record_id == 1


def test_missing_required_column():
    df = _frame().drop(columns=["INJURIES"])
    with pytest.raises(KeyError):
        records_from_frame(df)


def test_ncei_details_layout():
    df = pd.DataFrame([
        {"EVENT_TYPE": "Hail", "DEATHS_DIRECT": "0", "INJURIES_DIRECT": "2",
         "DAMAGE_PROPERTY": "25.00K", "DAMAGE_CROPS": None},
        {"EVENT_TYPE": "Flood", "DEATHS_DIRECT": "1", "INJURIES_DIRECT": "0",
         "DAMAGE_PROPERTY": "1.5M", "DAMAGE_CROPS": "0.00K"},
    ])
    recs = records_from_frame(df)
    assert recs[0].property_damage == 25_000.0
    assert recs[0].crop_damage == 0.0
    assert recs[1].property_damage == 1_500_000.0
    assert recs[1].toll == 1


@pytest.mark.parametrize("raw, expected", [
    ("25.00K", (25.0, "K")),
    ("1.5M", (1.5, "M")),
    ("0", (0.0, None)),
    ("", (0.0, None)),
    (None, (0.0, None)),
    (" 3 B ", (3.0, "B")),
])
def test_split_combined_damage(raw, expected):
    assert split_combined_damage(raw) == expected


def test_split_combined_damage_rejects_garbage():
    with pytest.raises(RecordParseError):
        split_combined_damage("about a million", 4, "DAMAGE_PROPERTY")


def test_excel_digit_codes_read_as_text(tmp_path):
    path = tmp_path / "storms.xlsx"
    pd.DataFrame([
        {"EVTYPE": "HAIL", "FATALITIES": 0, "INJURIES": 0,
         "PROPDMG": 2, "PROPDMGEXP": 5, "CROPDMG": 1, "CROPDMGEXP": "K"},
    ]).to_excel(path, index=False, engine="openpyxl")
    rec = load_storm_data(str(path))[0]
    assert rec.property_damage_code == "5"
    assert rec.property_damage == 200_000.0
    assert rec.crop_damage == 1000.0

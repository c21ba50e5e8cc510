import json

from stormrank import cli


def test_cli_prints_rankings_and_exports(storm_csv, tmp_path, capsys):
    out_json = tmp_path / "rank.json"
    code = cli.main(["--csv", str(storm_csv), "--top", "3", "--export-json", str(out_json)])
    assert code == 0

    printed = capsys.readouterr().out
    assert "Loaded 4 records" in printed
    assert "tornado" in printed

    payload = json.loads(out_json.read_text(encoding="utf-8"))
    assert payload["total_records"] == 4
    assert payload["toll"][0]["event_type"] == "tornado"
    assert payload["toll"][0]["value"] == 15
    assert payload["retained"] + payload["dropped"] == 4


def test_cli_custom_catalog(storm_csv, tmp_path, capsys):
    catalog = tmp_path / "types.txt"
    catalog.write_text("Tornado\nFlood\n", encoding="utf-8")
    code = cli.main(["--csv", str(storm_csv), "--catalog", str(catalog), "--max-distance", "2"])
    assert code == 0
    assert "dropped 2" in capsys.readouterr().out


def test_cli_reports_errors(tmp_path, capsys):
    bad = tmp_path / "bad.csv"
    bad.write_text(
        "EVTYPE,FATALITIES,INJURIES,PROPDMG,PROPDMGEXP,CROPDMG,CROPDMGEXP\n"
        "HAIL,many,0,0,,0,\n",
        encoding="utf-8",
    )
    assert cli.main(["--csv", str(bad)]) == 1
    assert "Error:" in capsys.readouterr().err
    # lenient mode skips the row, leaving nothing to aggregate
    assert cli.main(["--csv", str(bad), "--lenient"]) == 1


def test_cli_report_with_every_record_dropped(tmp_path, capsys):
    data = tmp_path / "storms.csv"
    data.write_text(
        "EVTYPE,FATALITIES,INJURIES,PROPDMG,PROPDMGEXP,CROPDMG,CROPDMGEXP\n"
        "Summary of the month of August in Georgia,0,0,0,,0,\n",
        encoding="utf-8",
    )
    out = tmp_path / "r.docx"
    assert cli.main(["--csv", str(data), "--report", str(out)]) == 1
    assert "Nothing to report on" in capsys.readouterr().err
    assert not out.exists()

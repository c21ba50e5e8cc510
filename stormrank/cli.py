"""
stormrank Command Line Interface (CLI)
======================================

One-shot batch report, run like:

    python -m stormrank.cli --csv "path/to/StormData.csv.bz2"
    python -m stormrank.cli --download --report storm_report.docx

It:
- parses arguments (argparse); STORMRANK_* environment variables give defaults
- loads the dataset (or downloads it into a local cache first)
- runs the pipeline and prints both ranked tables + the dropped count
- optionally exports CSV/JSON and writes a DOCX report

The CLI DOES NOT modify the dataset file.
"""

from __future__ import annotations
import argparse
import logging
import os
import sys
from typing import List, Optional

from .catalog import default_catalog, load_catalog
from .config import DISTANCE_METHODS, TIE_POLICIES, PipelineConfig
from .download import DEFAULT_FILE_NAME, STORM_DATA_URL, fetch_dataset
from .errors import StormRankError
from .loader import load_storm_data
from .models import GroupSummary, PipelineResult
from .pipeline import StormRank


def build_parser(defaults: PipelineConfig) -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="stormrank",
        description="Rank storm event types by human toll and economic damage.",
    )
    src = ap.add_mutually_exclusive_group(required=True)
    src.add_argument("--csv", help="Path to Storm Data (.csv, .csv.bz2, .csv.gz or .xlsx)")
    src.add_argument("--download", action="store_true", help="Fetch the Storm Data file into --cache-dir first")
    ap.add_argument("--url", default=STORM_DATA_URL, help="Dataset URL used with --download")
    ap.add_argument("--cache-dir", default="data", help="Where --download keeps the file")
    ap.add_argument("--catalog", help="Text file with one canonical event type per line")
    ap.add_argument("--max-distance", type=int, default=defaults.max_distance)
    ap.add_argument("--method", choices=DISTANCE_METHODS, default=defaults.distance_method)
    ap.add_argument("--tie-policy", choices=TIE_POLICIES, default=defaults.tie_policy)
    ap.add_argument("--lenient", action="store_true", default=not defaults.strict,
                    help="Skip malformed rows instead of aborting")
    ap.add_argument("--top", type=int, default=defaults.top_n, help="Rows to print per ranking")
    ap.add_argument("--export-csv", help="Write both rankings to this CSV file")
    ap.add_argument("--export-json", help="Write both rankings + diagnostics to this JSON file")
    ap.add_argument("--report", help="Write a DOCX report to this path")
    ap.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the stormrank CLI.

    1) Load dataset (download if asked)
    2) Run the pipeline
    3) Print / export / report
    """
    try:
        defaults = PipelineConfig.from_env()
    except StormRankError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    args = build_parser(defaults).parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    try:
        return _run(args)
    except (StormRankError, KeyError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _run(args: argparse.Namespace) -> int:
    config = PipelineConfig(
        max_distance=args.max_distance,
        distance_method=args.method,
        tie_policy=args.tie_policy,
        strict=not args.lenient,
        top_n=args.top,
    ).validate()

    path = args.csv
    if args.download:
        path = fetch_dataset(args.url, os.path.join(args.cache_dir, DEFAULT_FILE_NAME))

    catalog = load_catalog(args.catalog) if args.catalog else default_catalog()

    print("Loading dataset...")
    records = load_storm_data(path, strict=config.strict)
    print(f"Loaded {len(records)} records. Catalog has {len(catalog)} event types.")

    engine = StormRank(catalog=catalog, config=config)
    result = engine.run(records)
    _print_summary(result, config.top_n)

    if args.export_csv:
        engine.export_csv(result, args.export_csv)
        print(f"Exported CSV to {args.export_csv}")
    if args.export_json:
        engine.export_json(result, args.export_json)
        print(f"Exported JSON to {args.export_json}")
    if args.report:
        from .report import generate_docx_report, ReportConfig, DatasetCitation
        cfg = ReportConfig(
            top_n=config.top_n,
            citation=DatasetCitation(file_name=os.path.basename(path)),
            parameters={
                "max_distance": config.max_distance,
                "distance_method": config.distance_method,
                "tie_policy": config.tie_policy,
                "strict": config.strict,
            },
        )
        generate_docx_report(result, args.report, config=cfg)
        print(f"Report written to {args.report}")
    return 0


def _print_summary(result: PipelineResult, top_n: int) -> None:
    print(f"Retained {result.retained} of {result.total_records} records; dropped {result.dropped} (unmatched event type).")
    print(f"\nTop {top_n} by fatalities + injuries:")
    _print_rows(result.top("toll", top_n), lambda v: f"{v:,}")
    print(f"\nTop {top_n} by property + crop damage (US$):")
    _print_rows(result.top("damage", top_n), lambda v: f"{v:,.0f}")


def _print_rows(rows: List[GroupSummary], fmt) -> None:
    for i, r in enumerate(rows, start=1):
        print(f"{i:>3}. {r.event_type:<28} {fmt(r.value):>20}  (events={r.events})")


if __name__ == "__main__":
    sys.exit(main())

from __future__ import annotations

"""
stormrank report generator
--------------------------
This module generates a DOCX report from a PipelineResult.

Design goals:
- Keep stormrank usable even if report dependencies are missing (lazy imports).
- Show the two questions the report answers side by side:
  which event types are most harmful to population health (toll), and
  which have the greatest economic consequences (damage).
- Make the data loss visible: records dropped by the label filter and
  magnitude codes that decoded with exponent 0 are listed, not hidden.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import os
import tempfile

from .errors import EmptyInputError
from .models import GroupSummary, PipelineResult


# -----------------------------
# Configuration / citation types
# -----------------------------

@dataclass
class DatasetCitation:
    """Minimal dataset citation metadata for the DOCX report."""
    database_name: str = "Storm Events Database (Storm Data)"
    institutional_author: str = "NOAA National Centers for Environmental Information"
    location: str = "Asheville, NC, USA"
    website: str = "https://www.ncdc.noaa.gov/stormevents/"
    file_name: Optional[str] = None
    file_note: Optional[str] = "U.S. storm events 1950-2011, bzip2-compressed CSV."


@dataclass
class ReportConfig:
    """High-level knobs to control how the report is written."""
    title: str = "Storm Events: Health and Economic Impact"
    subtitle: str = "Event types ranked by human toll and damage (stormrank)"
    dataset_name: str = "NOAA Storm Data"
    citation: DatasetCitation = field(default_factory=DatasetCitation)

    # How many event types to show in bar charts / tables
    top_n: int = 10

    # How many unmatched labels to list
    max_unmatched: int = 15

    # Run parameters echoed in the footer (e.g. max_distance)
    parameters: Dict[str, object] = field(default_factory=dict)


def _billions(v: float) -> float:
    return v / 1e9


# -----------------------------
# Main entry point used by CLI
# -----------------------------

def generate_docx_report(
    result: PipelineResult,
    out_path: str,
    *,
    config: Optional[ReportConfig] = None,
) -> str:
    """
    Generate a DOCX report + charts for one pipeline run.

    Returns the path written.
    """
    config = config or ReportConfig()

    # Lazy imports: only required when a report is requested.
    try:
        from docx import Document
        from docx.shared import Pt, Inches
        from docx.enum.text import WD_ALIGN_PARAGRAPH
        from docx.oxml.ns import qn
    except ImportError as e:
        raise ImportError(
            "Missing dependency: python-docx.\n"
            "Install it with: python -m pip install python-docx"
        ) from e

    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        import numpy as np
    except ImportError as e:
        raise ImportError(
            "Missing dependency: matplotlib (and numpy).\n"
            "Install with: python -m pip install matplotlib numpy"
        ) from e

    if not result.toll and not result.damage:
        raise EmptyInputError("Nothing to report on (no record matched the catalog).")

    top_toll = result.top("toll", config.top_n)
    top_damage = result.top("damage", config.top_n)

    # -----------------------------
    # 1) Charts
    # -----------------------------
    # charts only need to live until doc.save
    with tempfile.TemporaryDirectory(prefix="stormrank_report_") as tmpdir:
        # Each chart is: (title, file_path)
        chart_paths: List[Tuple[str, str]] = []

        def _save(filename: str) -> str:
            path = os.path.join(tmpdir, filename)
            plt.tight_layout()
            plt.savefig(path, dpi=200)
            plt.close()
            return path

        def _stacked_bar(title: str, rows: List[GroupSummary], parts: List[str], ylabel: str,
                         filename: str, scale=lambda v: v) -> None:
            """Bars per event type, stacked by breakdown component."""
            if not rows:
                return
            x = np.arange(len(rows))
            bottom = np.zeros(len(rows))
            plt.figure(figsize=(8, 4.5))
            for part in parts:
                vals = np.array([scale(r.breakdown.get(part, 0)) for r in rows], dtype=float)
                plt.bar(x, vals, bottom=bottom, label=part.capitalize(), edgecolor="black", linewidth=0.5)
                bottom += vals
            plt.xticks(x, [r.event_type for r in rows], rotation=45, ha="right")
            plt.title(title)
            plt.ylabel(ylabel)
            plt.legend()
            chart_paths.append((title, _save(filename)))

        _stacked_bar(
            f"Top {len(top_toll)} event types by fatalities + injuries",
            top_toll, ["fatalities", "injuries"], "People", "top_toll.png",
        )
        _stacked_bar(
            f"Top {len(top_damage)} event types by economic damage",
            top_damage, ["property", "crop"], "Damage (billion US$)", "top_damage.png",
            scale=_billions,
        )

        # -----------------------------
        # 2) Build DOCX report
        # -----------------------------
        doc = Document()

        style = doc.styles["Normal"]
        style.font.name = "Calibri"
        style._element.rPr.rFonts.set(qn("w:eastAsia"), "Calibri")
        style.font.size = Pt(11)

        def _center_title(text: str, size: int, bold: bool = False, italic: bool = False) -> None:
            p = doc.add_paragraph()
            r = p.add_run(text)
            r.bold = bold
            r.italic = italic
            r.font.size = Pt(size)
            p.alignment = WD_ALIGN_PARAGRAPH.CENTER

        def _kv(key: str, value: str) -> None:
            p = doc.add_paragraph()
            r = p.add_run(f"{key}: ")
            r.bold = True
            p.add_run(value)

        def _table(header: List[str], body: List[List[str]]) -> None:
            t = doc.add_table(rows=1, cols=len(header))
            for i, h in enumerate(header):
                t.rows[0].cells[i].text = h
            for values in body:
                cells = t.add_row().cells
                for i, v in enumerate(values):
                    cells[i].text = v

        _center_title(config.title, 22, bold=True)
        _center_title(config.subtitle, 12, italic=True)

        doc.add_paragraph("")
        _kv("Dataset", config.dataset_name)
        _kv("Records read", f"{result.total_records:,}")
        _kv("Records retained", f"{result.retained:,}")
        _kv("Records dropped (unmatched event type)", f"{result.dropped:,}")
        _kv("Event types present", str(len(result.toll)))

        doc.add_paragraph("")
        doc.add_heading("Dataset citation", level=1)
        cit = config.citation
        if cit.file_name:
            doc.add_paragraph(f"Data file used: {cit.file_name}")
        if cit.file_note:
            doc.add_paragraph(f"File note: {cit.file_note}")
        doc.add_paragraph(f"{cit.institutional_author}. {cit.database_name}. {cit.location}. {cit.website}.")

        doc.add_paragraph("")
        doc.add_heading("Data processing", level=1)
        for note in [
            "Event type labels were trimmed, lower-cased and matched to the 48 official "
            "NWS event types by edit distance; labels too far from every type were dropped.",
            "Damage magnitudes (H, K, M, B, digits, +) were decoded to US$ as coefficient x 10^exponent; "
            "unknown codes count with exponent 0.",
            "Toll is fatalities + injuries. Damage is property + crop damage.",
            "Ties in the rankings are listed in catalog order.",
        ]:
            doc.add_paragraph(note, style="List Bullet")

        doc.add_paragraph("")
        doc.add_heading("Visualizations", level=1)
        for title, path in chart_paths:
            doc.add_paragraph(title)
            doc.add_picture(path, width=Inches(6.5))
            doc.add_paragraph("")

        doc.add_heading("Most harmful event types (population health)", level=1)
        _table(
            ["Rank", "Event type", "Fatalities", "Injuries", "Toll", "Events"],
            [
                [str(i), r.event_type, f"{r.breakdown.get('fatalities', 0):,}",
                 f"{r.breakdown.get('injuries', 0):,}", f"{r.value:,}", f"{r.events:,}"]
                for i, r in enumerate(top_toll, start=1)
            ],
        )

        doc.add_paragraph("")
        doc.add_heading("Event types with the greatest economic consequences", level=1)
        _table(
            ["Rank", "Event type", "Property (US$)", "Crop (US$)", "Total (US$)", "Events"],
            [
                [str(i), r.event_type, f"{r.breakdown.get('property', 0.0):,.0f}",
                 f"{r.breakdown.get('crop', 0.0):,.0f}", f"{r.value:,.0f}", f"{r.events:,}"]
                for i, r in enumerate(top_damage, start=1)
            ],
        )

        if result.unmatched_labels:
            doc.add_paragraph("")
            doc.add_heading("Dropped records", level=1)
            doc.add_paragraph(
                f"{result.dropped:,} records had an event type that matched no catalog entry. "
                f"Most frequent labels:"
            )
            _table(
                ["Raw label", "Records"],
                [[label or "(blank)", f"{n:,}"] for label, n in result.unmatched_labels.most_common(config.max_unmatched)],
            )

        if result.unrecognized_codes:
            doc.add_paragraph("")
            doc.add_heading("Unrecognized magnitude codes", level=1)
            _table(
                ["Code", "Occurrences"],
                [[repr(code), f"{n:,}"] for code, n in result.unrecognized_codes.most_common()],
            )

        # -----------------------------
        # Reproducibility footer
        # -----------------------------
        doc.add_paragraph("")
        doc.add_heading("Reproducibility footer", level=1)

        from . import __version__ as stormrank_version
        from datetime import datetime as _dt
        generated_at = _dt.now().isoformat(timespec="seconds")

        doc.add_paragraph(f"stormrank version: {stormrank_version}")
        doc.add_paragraph(f"Report generated at: {generated_at}")
        if config.citation.file_name:
            doc.add_paragraph(f"Dataset file: {config.citation.file_name}")
        for k, v in config.parameters.items():
            doc.add_paragraph(f"{k} = {v}", style="List Bullet")

        os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
        doc.save(out_path)
    return out_path

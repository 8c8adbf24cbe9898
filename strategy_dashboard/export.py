"""Export of dashboard tables to a paginated PDF.

The projection step (project_export) is pure: it picks each tab's raw or
filtered records and flattens them through the derived columns into text
rows. The Exporter renders those sections with reportlab, one section per
non-empty tab, landscape, with running page numbers.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Mapping, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import landscape, letter
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from reportlab.platypus.doctemplate import LayoutError

from strategy_dashboard.columns import derive_columns
from strategy_dashboard.filters import FilterState, filter_records
from strategy_dashboard.sheets import SheetTable
from strategy_dashboard.utils.text import as_text

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_DIR = Path("data/exports")
FILTERED_FILENAME = "dashboard-filtered.pdf"
UNFILTERED_FILENAME = "dashboard-all.pdf"
DOCUMENT_TITLE = "National Strategy Dashboard"

# Lines kept per cell when a row cannot be laid out even when split
MAX_CELL_LINES = 40
CELL_CHAR_WIDTH = 3.5

# ── Styles ────────────────────────────────────────────────────────────────

NAVY = colors.HexColor("#1B2A4A")
DARK_TEXT = colors.HexColor("#2D2D2D")
MED_TEXT = colors.HexColor("#555555")
LIGHT_BG = colors.HexColor("#F2F4F7")
RULE_COLOR = colors.HexColor("#D9DCE3")

style_title = ParagraphStyle(
    "Title", fontName="Helvetica-Bold", fontSize=16, textColor=NAVY,
    leading=19, spaceAfter=2,
)
style_subtitle = ParagraphStyle(
    "Subtitle", fontName="Helvetica", fontSize=8.5, textColor=MED_TEXT,
    leading=11, spaceAfter=6,
)
style_section = ParagraphStyle(
    "Section", fontName="Helvetica-Bold", fontSize=12, textColor=NAVY,
    leading=15, spaceBefore=10, spaceAfter=4,
)
style_table_header = ParagraphStyle(
    "TH", fontName="Helvetica-Bold", fontSize=7.5, textColor=colors.white,
    leading=9,
)
style_table_cell = ParagraphStyle(
    "TD", fontName="Helvetica", fontSize=7, textColor=DARK_TEXT,
    leading=9,
)


@dataclass
class ExportSection:
    """One tab's worth of export: heading, header row and text rows."""

    title: str
    headers: list[str] = field(default_factory=list)
    fields: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)


def export_filename(apply_filters: bool) -> str:
    return FILTERED_FILENAME if apply_filters else UNFILTERED_FILENAME


def project_export(
    tables: Mapping[str, SheetTable],
    state: Optional[FilterState] = None,
    apply_filters: bool = False,
) -> list[ExportSection]:
    """Select and flatten each tab's records for export.

    Args:
        tables: Tab name to SheetTable, in tab order.
        state: Active filters; only consulted when apply_filters is set.
            No state means no active filters.
        apply_filters: Export the filtered view instead of the raw records.

    Returns:
        One section per tab that has rows, in tab order.
    """
    sections = []
    for name, table in tables.items():
        records = table.records
        if apply_filters:
            records = filter_records(records, state or FilterState())
        if not records:
            logger.debug(f"Skipping empty tab '{name}' in export")
            continue

        columns = derive_columns(table.records)
        if not columns:
            logger.debug(f"Skipping tab '{name}' with no visible columns")
            continue
        sections.append(ExportSection(
            title=name,
            headers=[c.header_name for c in columns],
            fields=[c.field for c in columns],
            rows=[[as_text(r.get(c.field)) for c in columns] for r in records],
        ))
    return sections


def _cell(text: str, style: ParagraphStyle) -> Paragraph:
    return Paragraph(escape(text).replace("\n", "<br/>"), style)


def _truncate(text: str, limit: Optional[int]) -> str:
    if limit is None or len(text) <= limit:
        return text
    return text[:limit].rstrip() + " [...]"


def _draw_page_number(canvas, doc):
    canvas.saveState()
    canvas.setFont("Helvetica", 7)
    canvas.setFillColor(MED_TEXT)
    canvas.drawRightString(
        doc.pagesize[0] - doc.rightMargin, 0.3 * inch, f"Page {doc.page}",
    )
    canvas.restoreState()


class Exporter:
    """Writes export sections to a PDF document."""

    def __init__(self, export_dir: Optional[Path] = None):
        self.export_dir = Path(export_dir) if export_dir else DEFAULT_EXPORT_DIR
        self.export_dir.mkdir(parents=True, exist_ok=True)

    def export_pdf(
        self,
        tables: Mapping[str, SheetTable],
        state: Optional[FilterState] = None,
        apply_filters: bool = False,
    ) -> Optional[Path]:
        """Render all non-empty tabs into one landscape PDF.

        Returns:
            Path to the generated PDF, or None when no tab has rows.
        """
        sections = project_export(tables, state, apply_filters)
        if not sections:
            logger.warning("No rows to export")
            return None

        filepath = self.export_dir / export_filename(apply_filters)
        try:
            self.render(sections, filepath, filtered=apply_filters)
        except LayoutError as e:
            logger.warning(f"Export layout failed, truncating long cells: {e}")
            self.render(sections, filepath, filtered=apply_filters, truncate=True)
        total = sum(len(s.rows) for s in sections)
        logger.info(f"Exported {total} rows in {len(sections)} section(s) to {filepath}")
        return filepath

    def render(
        self,
        sections: list[ExportSection],
        filepath: Path,
        filtered: bool = False,
        truncate: bool = False,
    ) -> None:
        """Write sections to filepath.

        Rows taller than a page are split across pages. With truncate set,
        cells are also cut to what fits in MAX_CELL_LINES lines of their column.
        """
        doc = SimpleDocTemplate(
            str(filepath), pagesize=landscape(letter),
            topMargin=0.5 * inch, bottomMargin=0.5 * inch,
            leftMargin=0.5 * inch, rightMargin=0.5 * inch,
            title=DOCUMENT_TITLE,
        )
        W = doc.width

        story = [
            Paragraph(DOCUMENT_TITLE, style_title),
            Paragraph(
                f"{'Filtered view' if filtered else 'All records'}&nbsp;&nbsp;|&nbsp;&nbsp;"
                f"Generated {datetime.now():%Y-%m-%d %H:%M}",
                style_subtitle,
            ),
        ]

        for section in sections:
            story.append(Paragraph(escape(section.title), style_section))
            n_cols = max(len(section.headers), 1)
            col_width = W / n_cols
            limit = int(col_width / CELL_CHAR_WIDTH) * MAX_CELL_LINES if truncate else None

            data = [[_cell(h, style_table_header) for h in section.headers]]
            data.extend(
                [_cell(_truncate(v, limit), style_table_cell) for v in row]
                for row in section.rows
            )
            table = Table(data, colWidths=[col_width] * n_cols, repeatRows=1, splitInRow=1)
            table.setStyle(TableStyle([
                ("BACKGROUND", (0, 0), (-1, 0), NAVY),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, LIGHT_BG]),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("TOPPADDING", (0, 0), (-1, -1), 3),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
                ("LEFTPADDING", (0, 0), (-1, -1), 4),
                ("GRID", (0, 0), (-1, -1), 0.5, RULE_COLOR),
            ]))
            story.append(table)
            story.append(Spacer(1, 8))

        doc.build(story, onFirstPage=_draw_page_number, onLaterPages=_draw_page_number)

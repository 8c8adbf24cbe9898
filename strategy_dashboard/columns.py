"""Column metadata and per-cell display classification.

Column descriptors are derived from the field set of a sheet's first
record. Rendering is split in two steps: derive_columns() decides how each
field is shown, and render_cell() turns a value into a CellView (text,
colored chips, status background). Clicking a chip is not handled here;
each Chip carries the ChipToggle action the presentation layer should feed
back into filters.apply_action().
"""

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from strategy_dashboard.filters import PORTFOLIO, PORTFOLIO_FIELD, TAG, TAGS_FIELD, ChipToggle
from strategy_dashboard.lookups import LookupContext
from strategy_dashboard.sheets import ID_FIELD
from strategy_dashboard.utils.text import as_text, normalize_key, title_case

MEASURES_FIELD = "Measures"
HIDDEN_FIELDS = {ID_FIELD, "Category", "Materials"}
_HIDDEN_RE = re.compile(r"update", re.IGNORECASE)

# Year columns such as "24/25" carry a progress status per measure
_STATUS_FIELD_RE = re.compile(r"^[0-9]{2}/[0-9]{2}$")

STATUS_COLORS = {
    "not started": "#e6e6e6",
    "started": "#ffd360",
    "maintained": "#bfe1f6",
    "delayed": "#ff9689",
    "on track": "#d4edbc",
    "nearly completed": "#98d55e",
    "abandoned": "#3d3d3d",
    "completed": "#11734b",
}

HIGHLIGHT_TAG = "blue"
HIGHLIGHT_COLOR = "#E3F2FD"

# Row height: baseline plus one line per CHARS_PER_LINE of Measures text
CHARS_PER_LINE = 45
BASE_ROW_HEIGHT = 32
LINE_HEIGHT = 20


class ColumnKind(str, Enum):
    TEXT = "text"
    CHIPS = "chips"
    LONG_TEXT = "long_text"
    STATUS = "status"


@dataclass(frozen=True)
class ColumnDescriptor:
    field: str
    header_name: str
    kind: ColumnKind = ColumnKind.TEXT
    min_width: int = 140
    width: Optional[int] = None
    max_width: Optional[int] = None
    flex: float = 1.0
    align: str = "left"
    # "portfolio" or "tag" for chip columns
    filter_kind: Optional[str] = None


@dataclass(frozen=True)
class Chip:
    label: str
    color: str
    action: ChipToggle


@dataclass(frozen=True)
class CellView:
    text: str
    chips: tuple[Chip, ...] = ()
    background: Optional[str] = None
    css_class: Optional[str] = None


def is_hidden_field(name: str) -> bool:
    """Structural fields that are never shown as columns."""
    return name in HIDDEN_FIELDS or bool(_HIDDEN_RE.search(name))


def is_status_field(name: str) -> bool:
    return bool(_STATUS_FIELD_RE.match(name))


def describe_field(name: str) -> ColumnDescriptor:
    """Classify one field and attach its sizing hints."""
    if name == PORTFOLIO_FIELD:
        return ColumnDescriptor(
            field=name, header_name=name, kind=ColumnKind.CHIPS,
            width=180, filter_kind=PORTFOLIO,
        )
    if name == TAGS_FIELD:
        return ColumnDescriptor(
            field=name, header_name=name, kind=ColumnKind.CHIPS,
            min_width=260, filter_kind=TAG,
        )
    if name == MEASURES_FIELD:
        return ColumnDescriptor(
            field=name, header_name=name, kind=ColumnKind.LONG_TEXT,
            min_width=300, max_width=420, flex=2.0,
        )
    if is_status_field(name):
        return ColumnDescriptor(
            field=name, header_name=name, kind=ColumnKind.STATUS,
            width=120, align="center",
        )
    return ColumnDescriptor(field=name, header_name=name)


def derive_columns(records: Sequence[dict]) -> list[ColumnDescriptor]:
    """Build column descriptors from the first record's fields.

    All records of a sheet share a field set, so only the first one is
    inspected. An empty sheet has no columns.
    """
    if not records:
        return []
    return [describe_field(name) for name in records[0] if not is_hidden_field(name)]


def status_color(value) -> Optional[str]:
    """Map a status cell to its color; unknown statuses get None."""
    return STATUS_COLORS.get(normalize_key(value))


def status_class(value) -> str:
    """CSS class token for a status cell, e.g. "status-on-track"."""
    return "status-" + re.sub(r"\s+", "-", normalize_key(value))


def chips_for(value, filter_kind: str, context: LookupContext) -> tuple[Chip, ...]:
    """One colored chip per comma-separated part of a cell."""
    chips = []
    for part in as_text(value).split(","):
        key = normalize_key(part)
        if not key:
            continue
        color = context.portfolio_color(key) if filter_kind == PORTFOLIO else context.tag_color(key)
        chips.append(Chip(
            label=title_case(key),
            color=color,
            action=ChipToggle(kind=filter_kind, value=part.strip()),
        ))
    return tuple(chips)


def render_cell(column: ColumnDescriptor, value, context: LookupContext) -> CellView:
    """Compute how one cell should be displayed."""
    text = as_text(value)
    if column.kind == ColumnKind.CHIPS:
        return CellView(text=text, chips=chips_for(value, column.filter_kind, context))
    if column.kind == ColumnKind.STATUS:
        return CellView(text=text, background=status_color(value), css_class=status_class(value))
    return CellView(text=text)


def chips_in_records(
    columns: Sequence[ColumnDescriptor],
    records: Sequence[dict],
    context: LookupContext,
) -> tuple[Chip, ...]:
    """Distinct clickable chips from the chip columns of records, first-seen order."""
    seen = set()
    chips = []
    for record in records:
        for col in columns:
            if col.kind != ColumnKind.CHIPS:
                continue
            for chip in chips_for(record.get(col.field), col.filter_kind, context):
                key = (col.filter_kind, normalize_key(chip.action.value))
                if key not in seen:
                    seen.add(key)
                    chips.append(chip)
    return tuple(chips)


def selected_chips(portfolios, tags, context: LookupContext) -> tuple[Chip, ...]:
    """Removable chips for the active filter selections, portfolios first."""
    chips = [
        Chip(label=p, color=context.portfolio_color(p), action=ChipToggle(PORTFOLIO, p))
        for p in portfolios
    ]
    chips.extend(
        Chip(label=t, color=context.tag_color(t), action=ChipToggle(TAG, t))
        for t in tags
    )
    return tuple(chips)


def row_height(record: dict) -> int:
    """Pixel height hint for a row, from the length of its Measures text."""
    length = len(as_text(record.get(MEASURES_FIELD)))
    lines = math.ceil(length / CHARS_PER_LINE)
    return BASE_ROW_HEIGHT + lines * LINE_HEIGHT


def row_highlight(record: dict) -> Optional[str]:
    """Background for rows tagged "blue", else None."""
    tags = {normalize_key(t) for t in as_text(record.get(TAGS_FIELD)).split(",")}
    return HIGHLIGHT_COLOR if HIGHLIGHT_TAG in tags else None

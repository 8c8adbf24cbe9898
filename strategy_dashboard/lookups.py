"""Config sheet resolution into color lookups and option lists.

Config sheet layout (row 1 is explanatory text and is always skipped):
    A | Tag name
    B | Tag colour (hex, '#' optional)
    C | Portfolio name
    D | Portfolio colour (hex, '#' optional)
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from strategy_dashboard.utils.text import as_text, normalize_key, to_hex, trim
from strategy_dashboard.workbook import Sheet

logger = logging.getLogger(__name__)

FALLBACK_COLOR = "#e0e0e0"

TAG_NAME_COL = 0
TAG_COLOR_COL = 1
PORTFOLIO_NAME_COL = 2
PORTFOLIO_COLOR_COL = 3


@dataclass(frozen=True)
class LookupContext:
    """Read-only color tables and option lists built once per load."""

    portfolio_colors: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    tag_colors: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    portfolio_options: tuple[str, ...] = ()
    tag_options: tuple[str, ...] = ()

    def portfolio_color(self, name) -> str:
        return self.portfolio_colors.get(normalize_key(name), FALLBACK_COLOR)

    def tag_color(self, name) -> str:
        return self.tag_colors.get(normalize_key(name), FALLBACK_COLOR)


def _cell(row, idx) -> str:
    return as_text(trim(row[idx])) if idx < len(row) else ""


def _add_entry(name: str, color: str, options: dict, colors: dict) -> None:
    key = normalize_key(name)
    options.setdefault(key, name)
    if color:
        colors[key] = to_hex(color)


def resolve_config(sheet: Sheet) -> LookupContext:
    """Parse the Config sheet into a LookupContext.

    Rows with a blank name skip that entity entirely; a name without a
    colour still becomes a selectable option. When a name repeats, the
    first spelling is kept for display and the last colour wins.
    """
    portfolio_options: dict[str, str] = {}
    tag_options: dict[str, str] = {}
    portfolio_colors: dict[str, str] = {}
    tag_colors: dict[str, str] = {}

    for row in sheet.rows[1:]:
        tag_name = _cell(row, TAG_NAME_COL)
        portfolio_name = _cell(row, PORTFOLIO_NAME_COL)

        if portfolio_name:
            _add_entry(portfolio_name, _cell(row, PORTFOLIO_COLOR_COL),
                       portfolio_options, portfolio_colors)
        if tag_name:
            _add_entry(tag_name, _cell(row, TAG_COLOR_COL), tag_options, tag_colors)

    context = LookupContext(
        portfolio_colors=MappingProxyType(portfolio_colors),
        tag_colors=MappingProxyType(tag_colors),
        portfolio_options=tuple(sorted(portfolio_options.values())),
        tag_options=tuple(sorted(tag_options.values())),
    )
    logger.info(
        f"Config resolved: {len(context.portfolio_options)} portfolios "
        f"({len(portfolio_colors)} coloured), {len(context.tag_options)} tags "
        f"({len(tag_colors)} coloured)"
    )
    return context

"""Record filtering by portfolio, tag and free-text search.

FilterState is the only mutable piece of a dashboard session. The filter
engine itself is pure: it reads the state and returns an order-preserving
subsequence of the records it was given.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from strategy_dashboard.lookups import LookupContext
from strategy_dashboard.sheets import ID_FIELD
from strategy_dashboard.utils.text import as_text, normalize_key, split_values

logger = logging.getLogger(__name__)

PORTFOLIO_FIELD = "Portfolio"
TAGS_FIELD = "Tags"

PORTFOLIO = "portfolio"
TAG = "tag"


def _dedupe(names: Iterable) -> list[str]:
    """Drop names equal to an earlier one after normalization, keeping first casing."""
    seen = set()
    result = []
    for name in names:
        text = as_text(name).strip()
        key = normalize_key(text)
        if not key or key in seen:
            continue
        seen.add(key)
        result.append(text)
    return result


@dataclass
class FilterState:
    """Current portfolio/tag selections and search query."""

    portfolios: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    query: str = ""

    def __post_init__(self):
        self.portfolios = _dedupe(self.portfolios)
        self.tags = _dedupe(self.tags)
        self.query = as_text(self.query)

    @property
    def is_active(self) -> bool:
        return bool(self.portfolios or self.tags or self.query)

    def set_portfolios(self, names: Iterable) -> None:
        self.portfolios = _dedupe(names)

    def set_tags(self, names: Iterable) -> None:
        self.tags = _dedupe(names)

    def set_query(self, query) -> None:
        self.query = as_text(query)

    def toggle_portfolio(self, name) -> None:
        self.portfolios = _toggle(self.portfolios, name)

    def toggle_tag(self, name) -> None:
        self.tags = _toggle(self.tags, name)

    def clear(self) -> None:
        self.portfolios = []
        self.tags = []
        self.query = ""


def _toggle(selected: list[str], name) -> list[str]:
    key = normalize_key(name)
    if not key:
        return selected
    if any(normalize_key(s) == key for s in selected):
        return [s for s in selected if normalize_key(s) != key]
    return selected + [as_text(name).strip()]


@dataclass(frozen=True)
class ChipToggle:
    """User action: a chip was clicked or removed.

    kind is PORTFOLIO or TAG; value is the entity name the chip stands for.
    """

    kind: str
    value: str


def apply_action(
    state: FilterState,
    action: ChipToggle,
    context: Optional[LookupContext] = None,
) -> FilterState:
    """Apply a chip toggle to the filter state (in place) and return it.

    When a context is given, a newly selected name takes the spelling of
    the matching option from the Config sheet.
    """
    if action.kind not in (PORTFOLIO, TAG):
        raise ValueError(f"Unknown filter kind '{action.kind}'")

    value = action.value
    if context is not None:
        options = context.portfolio_options if action.kind == PORTFOLIO else context.tag_options
        key = normalize_key(value)
        value = next((o for o in options if normalize_key(o) == key), value)

    if action.kind == PORTFOLIO:
        state.toggle_portfolio(value)
    else:
        state.toggle_tag(value)
    logger.debug(f"Toggled {action.kind} '{value}'")
    return state


def matches_any(value, selected_keys: set[str]) -> bool:
    """True if any comma-separated part of value is in selected_keys."""
    return any(part in selected_keys for part in split_values(value))


def matches_query(record: dict, query: str) -> bool:
    """Case-insensitive substring search across every field of the record."""
    needle = query.lower()
    return any(
        needle in as_text(value).lower()
        for name, value in record.items()
        if name != ID_FIELD
    )


def filter_records(records: Iterable[dict], state: FilterState) -> list[dict]:
    """Return the records that satisfy every active predicate, in input order.

    The search predicate is active for any non-empty query and matches the
    query text as given, surrounding spaces included.
    """
    portfolio_keys = {normalize_key(p) for p in state.portfolios}
    tag_keys = {normalize_key(t) for t in state.tags}
    query = state.query

    result = []
    for record in records:
        if portfolio_keys and not matches_any(record.get(PORTFOLIO_FIELD), portfolio_keys):
            continue
        if tag_keys and not matches_any(record.get(TAGS_FIELD), tag_keys):
            continue
        if query and not matches_query(record, query):
            continue
        result.append(record)
    return result

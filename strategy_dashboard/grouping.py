"""Grouping of records by the two-level numbering of their category.

Category texts look like "3.2 Curriculum Reform". Records are bucketed by
the leading "<major>.<minor>" pair, looked up in Category, then Subcategory,
then Measures. Records with no numbering anywhere share a fallback bucket.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from strategy_dashboard.utils.text import as_text

CANDIDATE_FIELDS = ("Category", "Subcategory", "Measures")
CATEGORY_FIELD = "Category"
FALLBACK_KEY = "—"

_PREFIX_RE = re.compile(r"^([0-9]+)\.([0-9]+)")


@dataclass
class Group:
    key: str
    records: list[dict] = field(default_factory=list)

    @property
    def title(self) -> str:
        """Category of the first member, or a label synthesized from the key."""
        category = as_text(self.records[0].get(CATEGORY_FIELD)).strip() if self.records else ""
        return category or f"Category {self.key}"

    def __len__(self) -> int:
        return len(self.records)


def group_key(record: dict) -> str:
    """Return "<major>.<minor>" for a record, or FALLBACK_KEY."""
    prefix = _numeric_prefix(record)
    return prefix or FALLBACK_KEY


def _numeric_prefix(record: dict) -> Optional[str]:
    for name in CANDIDATE_FIELDS:
        text = as_text(record.get(name)).strip()
        if not text:
            continue
        m = _PREFIX_RE.match(text)
        if m:
            return f"{m.group(1)}.{m.group(2)}"
    return None


def group_records(records: Iterable[dict]) -> list[Group]:
    """Partition records into groups, both in first-seen order."""
    groups: dict[str, Group] = {}
    for record in records:
        key = group_key(record)
        if key not in groups:
            groups[key] = Group(key=key)
        groups[key].records.append(record)
    return list(groups.values())


def flatten(groups: Iterable[Group]) -> list[dict]:
    return [record for group in groups for record in group.records]

"""Sheet normalization: raw grids into typed, name-keyed records.

The header row is not fixed. Introductory rows sit above the table, so the
header is the first row with a cell mentioning "measure". Sheets without
such a row (purely introductory tabs) normalize to an empty table.
"""

import logging
from dataclasses import dataclass, field

from strategy_dashboard.utils.text import as_text, is_blank, trim
from strategy_dashboard.workbook import Sheet

logger = logging.getLogger(__name__)

HEADER_MARKER = "measure"
ID_FIELD = "id"


@dataclass(frozen=True)
class SheetTable:
    """Records of one sheet plus the field order discovered from its header.

    Each record is a dict with a synthetic "id" (0-based position in the
    sheet) followed by one entry per header field.
    """

    name: str
    fields: tuple[str, ...] = ()
    records: list[dict] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.records)

    @property
    def is_empty(self) -> bool:
        return not self.records


def find_header_index(rows) -> int:
    """Return the index of the header row, or -1 if there is none."""
    for idx, row in enumerate(rows):
        if any(HEADER_MARKER in as_text(cell).lower() for cell in row):
            return idx
    return -1


def normalize_sheet(sheet: Sheet) -> SheetTable:
    """Convert a raw sheet into a SheetTable.

    Rows above the header are discarded, as are rows whose cells are all
    blank. Blank header cells do not become fields.
    """
    header_idx = find_header_index(sheet.rows)
    if header_idx < 0:
        logger.warning(f"No header row found in sheet '{sheet.name}', treating as empty")
        return SheetTable(name=sheet.name)

    header = sheet.rows[header_idx]
    columns = []
    for col_idx, cell in enumerate(header):
        name = as_text(trim(cell))
        if not name or name == ID_FIELD:
            continue
        columns.append((col_idx, name))

    records = []
    for row in sheet.rows[header_idx + 1:]:
        if all(is_blank(cell) for cell in row):
            continue
        record = {ID_FIELD: len(records)}
        for col_idx, name in columns:
            record[name] = trim(row[col_idx]) if col_idx < len(row) else ""
        records.append(record)

    fields = tuple(dict.fromkeys(name for _, name in columns))
    logger.debug(f"Sheet '{sheet.name}': header at row {header_idx}, {len(records)} records")
    return SheetTable(name=sheet.name, fields=fields, records=records)

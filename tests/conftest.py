"""Shared fixtures: small workbooks built in memory with openpyxl."""

import io

import pytest
from openpyxl import Workbook as XlsxWorkbook


def build_xlsx(sheets: dict) -> bytes:
    """Write {sheet name: list of rows} to xlsx bytes, sheets in dict order."""
    wb = XlsxWorkbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(title=name)
        for row in rows:
            ws.append(list(row))
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


CONFIG_ROWS = [
    ["Tag", "Tag colour", "Portfolio", "Portfolio colour"],
    ["Blue", "E3F2FD", "Education", "003399"],
    ["Urgent", "#ff0000", "Health", ""],
    ["", "", "Labour", "#00aa00"],
]

STRATEGY_ROWS = [
    ["National Strategy", None, None, None, None, None],
    [None, None, None, None, None, None],
    ["Category", "Subcategory", "Measures", "Portfolio", "Tags", "24/25"],
    ["3.2 Curriculum Reform", "", "Revise the national curriculum", "Education", "blue", "On Track"],
    ["3.2 Curriculum Reform", "", "Train teachers", "Education, Labour", "", "started"],
    [None, None, None, None, None, None],
    ["", "4.1 Hospitals", "Build two hospitals", "Health", "Urgent", "Delayed"],
    ["General", "", "Publish annual report", "Labour", "", ""],
]


@pytest.fixture
def workbook_bytes():
    return build_xlsx({
        "Introduction": [["Welcome to the dashboard"]],
        "Strategy": STRATEGY_ROWS,
        "Config": CONFIG_ROWS,
        "Notes": [["just some notes"]],
    })


@pytest.fixture
def workbook_file(tmp_path, workbook_bytes):
    path = tmp_path / "strategy.xlsx"
    path.write_bytes(workbook_bytes)
    return path


@pytest.fixture
def xlsx_builder():
    return build_xlsx

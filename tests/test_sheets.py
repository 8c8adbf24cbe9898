"""Tests for sheet normalization."""

from strategy_dashboard.sheets import find_header_index, normalize_sheet
from strategy_dashboard.workbook import Sheet


def make_sheet(rows, name="Strategy"):
    return Sheet(name=name, rows=tuple(tuple(r) for r in rows))


class TestHeaderDetection:
    def test_first_row_mentioning_measure(self):
        rows = [("Intro",), ("",), ("Category", "MEASURES"), ("Measure again",)]
        assert find_header_index(rows) == 2

    def test_substring_case_insensitive(self):
        assert find_header_index([("Key measure taken",)]) == 0

    def test_no_header(self):
        assert find_header_index([("Intro",), ("Other",)]) == -1

    def test_numbers_do_not_break_detection(self):
        assert find_header_index([(1, 2.5, None), ("Measures",)]) == 1


class TestNormalizeSheet:
    def test_records_and_ids(self):
        table = normalize_sheet(make_sheet([
            ("Title", None),
            (" Category ", "Measures"),
            (" 1.1 A ", " do x "),
            (None, None),
            ("", "  "),
            ("1.2 B", "do y"),
        ]))
        assert table.fields == ("Category", "Measures")
        assert table.records == [
            {"id": 0, "Category": "1.1 A", "Measures": "do x"},
            {"id": 1, "Category": "1.2 B", "Measures": "do y"},
        ]

    def test_ids_unique_and_sequential(self):
        rows = [("Measures",)] + [(f"m{i}",) for i in range(5)]
        table = normalize_sheet(make_sheet(rows))
        assert [r["id"] for r in table.records] == list(range(5))

    def test_missing_header_gives_empty_table(self):
        table = normalize_sheet(make_sheet([("Welcome",), ("Read me",)], name="Introduction"))
        assert table.is_empty
        assert table.fields == ()
        assert table.name == "Introduction"

    def test_short_rows_padded(self):
        table = normalize_sheet(make_sheet([("Measures", "Tags"), ("only measure",)]))
        assert table.records[0]["Tags"] == ""

    def test_blank_header_cells_skipped(self):
        table = normalize_sheet(make_sheet([("Measures", None, "Tags"), ("m", "ignored", "t")]))
        assert table.fields == ("Measures", "Tags")
        assert table.records[0] == {"id": 0, "Measures": "m", "Tags": "t"}

    def test_synthetic_id_cannot_be_overwritten(self):
        table = normalize_sheet(make_sheet([("id", "Measures"), ("99", "m")]))
        assert table.records[0]["id"] == 0
        assert "id" not in table.fields

    def test_numeric_values_kept(self):
        table = normalize_sheet(make_sheet([("Measures", "Budget"), ("m", 1500)]))
        assert table.records[0]["Budget"] == 1500

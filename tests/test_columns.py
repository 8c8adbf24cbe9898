"""Tests for column derivation and cell classification."""

import pytest

from strategy_dashboard.columns import (
    HIGHLIGHT_COLOR,
    STATUS_COLORS,
    ColumnKind,
    chips_in_records,
    derive_columns,
    describe_field,
    render_cell,
    row_height,
    row_highlight,
    selected_chips,
    status_class,
    status_color,
)
from strategy_dashboard.filters import PORTFOLIO, TAG, ChipToggle, FilterState, apply_action
from strategy_dashboard.lookups import FALLBACK_COLOR, LookupContext


@pytest.fixture
def context():
    return LookupContext(
        portfolio_colors={"education": "#003399"},
        tag_colors={"blue": "#E3F2FD"},
        portfolio_options=("Education", "Health"),
        tag_options=("Blue",),
    )


@pytest.fixture
def record():
    return {
        "id": 0,
        "Category": "3.2 Curriculum Reform",
        "Subcategory": "",
        "Measures": "Revise the curriculum",
        "Portfolio": "education, it services",
        "Tags": "Blue",
        "Materials": "link",
        "Last Update": "yesterday",
        "24/25": "On Track",
    }


class TestDeriveColumns:
    def test_hidden_fields_excluded(self, record):
        fields = [c.field for c in derive_columns([record])]
        assert fields == ["Subcategory", "Measures", "Portfolio", "Tags", "24/25"]

    def test_update_match_is_case_insensitive(self):
        assert derive_columns([{"id": 0, "UPDATED BY": "x", "Measures": "m"}])[0].field == "Measures"

    def test_only_first_record_inspected(self):
        cols = derive_columns([{"id": 0, "Measures": "m"}, {"id": 1, "Measures": "n", "Extra": "e"}])
        assert [c.field for c in cols] == ["Measures"]

    def test_empty(self):
        assert derive_columns([]) == []

    def test_classification(self):
        assert describe_field("Portfolio").kind == ColumnKind.CHIPS
        assert describe_field("Portfolio").filter_kind == PORTFOLIO
        assert describe_field("Tags").kind == ColumnKind.CHIPS
        assert describe_field("Tags").filter_kind == TAG
        assert describe_field("Measures").kind == ColumnKind.LONG_TEXT
        assert describe_field("24/25").kind == ColumnKind.STATUS
        assert describe_field("Owner").kind == ColumnKind.TEXT

    def test_status_pattern_is_exact(self):
        assert describe_field("2024/25").kind == ColumnKind.TEXT
        assert describe_field("24/25 notes").kind == ColumnKind.TEXT

    def test_sizing_hints(self):
        status = describe_field("23/24")
        assert status.width == 120
        assert status.align == "center"
        measures = describe_field("Measures")
        assert measures.flex == 2.0
        assert measures.min_width == 300


class TestStatus:
    def test_on_track_regardless_of_casing(self):
        assert status_color("On Track") == STATUS_COLORS["on track"]
        assert status_color("  ON TRACK ") == STATUS_COLORS["on track"]

    def test_unknown_status(self):
        assert status_color("pending review") is None
        assert status_color(None) is None

    def test_status_class(self):
        assert status_class("Nearly Completed") == "status-nearly-completed"

    def test_render_status_cell(self, context):
        view = render_cell(describe_field("24/25"), "Delayed", context)
        assert view.background == STATUS_COLORS["delayed"]
        assert view.css_class == "status-delayed"


class TestChips:
    def test_portfolio_chips(self, context):
        view = render_cell(describe_field("Portfolio"), "education, it services,", context)
        assert [c.label for c in view.chips] == ["Education", "IT Services"]
        assert [c.color for c in view.chips] == ["#003399", FALLBACK_COLOR]
        assert view.chips[0].action == ChipToggle(PORTFOLIO, "education")

    def test_tag_chips_use_tag_colors(self, context):
        view = render_cell(describe_field("Tags"), "BLUE, hr", context)
        assert [c.label for c in view.chips] == ["Blue", "HR"]
        assert view.chips[0].color == "#E3F2FD"
        assert view.chips[1].action.kind == TAG

    def test_chip_action_toggles_filter(self, context):
        state = FilterState()
        chip = render_cell(describe_field("Portfolio"), "education", context).chips[0]
        apply_action(state, chip.action, context)
        assert state.portfolios == ["Education"]
        apply_action(state, chip.action, context)
        assert state.portfolios == []

    def test_blank_chip_cell(self, context):
        assert render_cell(describe_field("Tags"), None, context).chips == ()

    def test_chips_in_records_are_distinct_and_actionable(self, context):
        records = [
            {"id": 0, "Portfolio": "Education, Health", "Tags": "blue", "Owner": "x"},
            {"id": 1, "Portfolio": " EDUCATION", "Tags": "Blue, urgent", "Owner": "y"},
        ]
        columns = derive_columns(records)
        chips = chips_in_records(columns, records, context)
        assert [c.label for c in chips] == ["Education", "Health", "Blue", "Urgent"]
        assert [c.action.kind for c in chips] == [PORTFOLIO, PORTFOLIO, TAG, TAG]

        state = FilterState()
        apply_action(state, chips[1].action, context)
        assert state.portfolios == ["Health"]

    def test_selected_chips(self, context):
        chips = selected_chips(["Education"], ["Blue", "Other"], context)
        assert [c.label for c in chips] == ["Education", "Blue", "Other"]
        assert [c.color for c in chips] == ["#003399", "#E3F2FD", FALLBACK_COLOR]

    def test_plain_text_cell(self, context):
        view = render_cell(describe_field("Owner"), 42, context)
        assert view.text == "42"
        assert view.chips == ()
        assert view.background is None


class TestRowHints:
    def test_row_height(self):
        assert row_height({"Measures": ""}) == 32
        assert row_height({"Measures": "x" * 45}) == 52
        assert row_height({"Measures": "x" * 46}) == 72
        assert row_height({}) == 32

    def test_row_highlight(self):
        assert row_highlight({"Tags": "Urgent, Blue "}) == HIGHLIGHT_COLOR
        assert row_highlight({"Tags": "blueprint"}) is None
        assert row_highlight({}) is None

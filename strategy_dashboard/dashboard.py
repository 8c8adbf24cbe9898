"""Streamlit dashboard for the national strategy workbook.

Launch with: python -m strategy_dashboard.cli dashboard
Or directly: streamlit run strategy_dashboard/dashboard.py
"""

import os
from pathlib import Path

import pandas as pd
import streamlit as st

from strategy_dashboard.columns import ColumnKind, chips_in_records, render_cell, row_highlight
from strategy_dashboard.export import export_filename
from strategy_dashboard.filters import PORTFOLIO, TAG, FilterState
from strategy_dashboard.pipeline import DashboardPipeline, DashboardSession
from strategy_dashboard.settings import SETTINGS_ENV, SOURCE_ENV, load_settings
from strategy_dashboard.utils.text import normalize_key
from strategy_dashboard.workbook import LoadError


def load_session() -> DashboardSession:
    """Load the workbook once per browser session."""
    if "dashboard_data" not in st.session_state:
        settings_path = os.getenv(SETTINGS_ENV)
        settings = load_settings(Path(settings_path) if settings_path else None)
        pipeline = DashboardPipeline(settings, source=os.getenv(SOURCE_ENV))
        with st.spinner("Loading workbook..."):
            st.session_state["dashboard_data"] = pipeline.load()
        st.session_state["settings"] = settings
    return DashboardSession(st.session_state["dashboard_data"])


def _toggle(session: DashboardSession, action) -> None:
    """Chip callback: apply the toggle and write the selections back to the widgets."""
    session.state = FilterState(
        portfolios=st.session_state.get("portfolios", []),
        tags=st.session_state.get("tags", []),
        query=st.session_state.get("query", ""),
    )
    session.apply(action)
    st.session_state["portfolios"] = session.state.portfolios
    st.session_state["tags"] = session.state.tags


def _chip_bar(session: DashboardSession, columns, records, key_prefix: str) -> None:
    """Clickable chips for the portfolios and tags shown in a group.

    Names missing from the Config sheet cannot be selected in the filter
    widgets, so their chips are shown disabled.
    """
    chips = chips_in_records(columns, records, session.context)
    if not chips:
        return
    context = session.context
    known = {
        kind: {normalize_key(o) for o in options}
        for kind, options in (
            (PORTFOLIO, context.portfolio_options),
            (TAG, context.tag_options),
        )
    }
    chip_cols = st.columns(min(len(chips), 8))
    for i, chip in enumerate(chips):
        chip_cols[i % len(chip_cols)].button(
            chip.label,
            key=f"{key_prefix}-{chip.action.kind}-{normalize_key(chip.action.value)}",
            on_click=_toggle,
            args=(session, chip.action),
            disabled=normalize_key(chip.action.value) not in known[chip.action.kind],
        )


def _frame(session: DashboardSession, columns, records):
    """Build a styled DataFrame for one group of records."""
    rows = []
    styles = []
    for record in records:
        row = {}
        row_style = {}
        highlight = row_highlight(record)
        for col in columns:
            view = render_cell(col, record.get(col.field), session.context)
            if col.kind == ColumnKind.CHIPS:
                row[col.header_name] = ", ".join(chip.label for chip in view.chips)
            else:
                row[col.header_name] = view.text
            background = view.background or highlight
            row_style[col.header_name] = f"background-color: {background}" if background else ""
        rows.append(row)
        styles.append(row_style)

    df = pd.DataFrame(rows, columns=[c.header_name for c in columns])
    css = pd.DataFrame(styles, columns=df.columns, index=df.index).fillna("")
    return df.style.apply(lambda _: css, axis=None)


def main():
    st.set_page_config(
        page_title="National Strategy Dashboard",
        page_icon=None,
        layout="wide",
    )
    st.title("National Strategy Dashboard")

    try:
        session = load_session()
    except LoadError:
        st.error("Failed to load – please check sharing permissions.")
        return

    context = session.context

    # --- Filters ---
    col1, col2, col3 = st.columns(3)
    portfolios = col1.multiselect("Portfolios", options=list(context.portfolio_options),
                                  key="portfolios")
    tags = col2.multiselect("Tags", options=list(context.tag_options), key="tags")
    query = col3.text_input("Search", placeholder="Search all fields...", key="query")
    session.state = FilterState(portfolios=portfolios, tags=tags, query=query)

    chips = session.active_chips()
    if chips:
        chip_cols = st.columns(min(len(chips), 8))
        for i, chip in enumerate(chips):
            chip_cols[i % len(chip_cols)].button(
                f"✕ {chip.label}",
                key=f"chip-{chip.action.kind}-{chip.label}",
                on_click=_toggle,
                args=(session, chip.action),
            )

    # --- Export ---
    exp1, exp2 = st.columns(2)
    export_dir = st.session_state["settings"].export_dir
    for column, apply_filters, label in (
        (exp1, False, "Export all to PDF"),
        (exp2, True, "Export filtered to PDF"),
    ):
        if column.button(label):
            path = session.export(apply_filters=apply_filters, export_dir=export_dir)
            if path is None:
                column.info("Nothing to export.")
            else:
                column.download_button(
                    "Download", data=path.read_bytes(),
                    file_name=export_filename(apply_filters), mime="application/pdf",
                )

    st.divider()

    # --- Tables by tab and category ---
    if not session.tabs:
        st.info("The workbook has no data tabs.")
        return

    for tab, container in zip(session.tabs, st.tabs(session.tabs)):
        with container:
            columns = session.columns(tab)
            groups = session.groups(tab)
            if not groups:
                st.info("No records match the current filters.")
                continue
            for group in groups:
                with st.expander(group.title, expanded=True):
                    _chip_bar(session, columns, group.records, key_prefix=f"{tab}-{group.key}")
                    st.dataframe(
                        _frame(session, columns, group.records),
                        use_container_width=True,
                        hide_index=True,
                    )


if __name__ == "__main__":
    main()

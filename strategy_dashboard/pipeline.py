"""Pipeline orchestrator for the strategy dashboard.

DashboardPipeline runs the one suspending step (fetch and decode the
workbook) and derives everything that is fixed for a load: the color
lookups, the option lists and the normalized tables of every data sheet.
DashboardSession holds the user's filter state for that load and recomputes
filtered records, groups and columns in full whenever they are asked for.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from strategy_dashboard.columns import ColumnDescriptor, derive_columns, selected_chips
from strategy_dashboard.export import Exporter
from strategy_dashboard.filters import ChipToggle, FilterState, apply_action, filter_records
from strategy_dashboard.grouping import Group, group_records
from strategy_dashboard.lookups import LookupContext, resolve_config
from strategy_dashboard.settings import Settings
from strategy_dashboard.sheets import SheetTable, normalize_sheet
from strategy_dashboard.workbook import LoadError, Workbook, WorkbookLoader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardData:
    """Everything derived from one workbook load."""

    context: LookupContext
    tables: dict[str, SheetTable] = field(default_factory=dict)
    source_hash: str = ""

    @property
    def tabs(self) -> list[str]:
        return list(self.tables)


def build_dashboard_data(workbook: Workbook, settings: Optional[Settings] = None) -> DashboardData:
    """Derive lookups and per-tab tables from a decoded workbook.

    Raises:
        LoadError: If the Config sheet is missing.
    """
    settings = settings or Settings()
    config = workbook.get(settings.config_sheet)
    if config is None:
        raise LoadError(f"Workbook has no '{settings.config_sheet}' sheet")
    context = resolve_config(config)

    ignored = set(settings.ignored_sheets) | {settings.config_sheet}
    tables = {}
    for name in workbook.sheet_names:
        if name in ignored:
            continue
        tables[name] = normalize_sheet(workbook.sheets[name])
        logger.info(f"Tab '{name}': {len(tables[name])} records")

    return DashboardData(context=context, tables=tables, source_hash=workbook.source_hash)


class DashboardPipeline:
    """Loads the workbook and builds DashboardData."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        source: Optional[str] = None,
        use_cache: bool = False,
    ):
        self.settings = settings or Settings()
        self.loader = WorkbookLoader(
            source or self.settings.export_url,
            use_cache=use_cache,
            cache_dir=self.settings.cache_dir,
            timeout=self.settings.request_timeout,
        )

    def load(self) -> DashboardData:
        """Fetch, decode and derive. Only LoadError escapes."""
        workbook = self.loader.load()
        data = build_dashboard_data(workbook, self.settings)
        logger.info(
            f"Loaded {len(data.tables)} tab(s), "
            f"{sum(len(t) for t in data.tables.values())} records "
            f"(source {data.source_hash[:12]})"
        )
        return data


class DashboardSession:
    """Filter state plus on-demand derived views for one loaded workbook."""

    def __init__(self, data: DashboardData, state: Optional[FilterState] = None):
        self.data = data
        self.state = state or FilterState()

    @property
    def context(self) -> LookupContext:
        return self.data.context

    @property
    def tabs(self) -> list[str]:
        return self.data.tabs

    def table(self, tab: str) -> SheetTable:
        return self.data.tables.get(tab, SheetTable(name=tab))

    def records(self, tab: str) -> list[dict]:
        return self.table(tab).records

    def filtered(self, tab: str) -> list[dict]:
        return filter_records(self.records(tab), self.state)

    def groups(self, tab: str) -> list[Group]:
        return group_records(self.filtered(tab))

    def columns(self, tab: str) -> list[ColumnDescriptor]:
        return derive_columns(self.records(tab))

    def active_chips(self):
        return selected_chips(self.state.portfolios, self.state.tags, self.context)

    def apply(self, action: ChipToggle) -> FilterState:
        return apply_action(self.state, action, self.context)

    def export(self, apply_filters: bool = False, export_dir: Optional[Path] = None) -> Optional[Path]:
        exporter = Exporter(export_dir)
        return exporter.export_pdf(self.data.tables, self.state, apply_filters)

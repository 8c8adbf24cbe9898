"""National strategy dashboard: workbook ingestion, filtering, grouping and export."""

__version__ = "0.1.0"

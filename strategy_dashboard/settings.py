"""Runtime settings for the strategy dashboard.

Defaults point at the published national strategy workbook. Any of them can
be overridden from a YAML file:

    spreadsheet_id: 1eSsGajvwtzHQFCpYaE_Rhqla7-9KVTktwE5QSHfh4-A
    ignored_sheets: [Introduction, Config]
    request_timeout: 60
"""

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_SPREADSHEET_ID = "1eSsGajvwtzHQFCpYaE_Rhqla7-9KVTktwE5QSHfh4-A"
DEFAULT_EXPORT_URL_TEMPLATE = (
    "https://docs.google.com/spreadsheets/d/{spreadsheet_id}/export?format=xlsx"
)
DEFAULT_SETTINGS_PATH = Path("data/settings.yaml")

# Passed from the CLI to the Streamlit process
SETTINGS_ENV = "STRATEGY_DASHBOARD_SETTINGS"
SOURCE_ENV = "STRATEGY_DASHBOARD_SOURCE"


@dataclass
class Settings:
    """Where the workbook lives and how its sheets are interpreted."""

    spreadsheet_id: str = DEFAULT_SPREADSHEET_ID
    export_url_template: str = DEFAULT_EXPORT_URL_TEMPLATE
    config_sheet: str = "Config"
    ignored_sheets: list[str] = field(default_factory=lambda: ["Introduction", "Config"])
    # None waits for the download indefinitely
    request_timeout: Optional[float] = None
    cache_dir: Path = Path("data/cache")
    export_dir: Path = Path("data/exports")

    @property
    def export_url(self) -> str:
        return self.export_url_template.format(spreadsheet_id=self.spreadsheet_id)


def load_settings(path: Optional[Path] = None) -> Settings:
    """Build settings from defaults, overlaid with a YAML file if present.

    Args:
        path: YAML file to read. When omitted, data/settings.yaml is used
            if it exists, otherwise the defaults are returned.

    Returns:
        Settings instance.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
    """
    if path is None:
        if not DEFAULT_SETTINGS_PATH.exists():
            return Settings()
        path = DEFAULT_SETTINGS_PATH
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    known = {f.name for f in fields(Settings)}
    overrides = {}
    for key, value in data.items():
        if key not in known:
            logger.warning(f"Ignoring unknown setting '{key}' in {path}")
            continue
        if key in ("cache_dir", "export_dir"):
            value = Path(value)
        elif key == "ignored_sheets":
            value = [str(v) for v in value or []]
        overrides[key] = value

    logger.debug(f"Loaded {len(overrides)} setting(s) from {path}")
    return Settings(**overrides)

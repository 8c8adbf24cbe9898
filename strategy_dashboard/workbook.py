"""Workbook loading.

Fetches the spreadsheet export over HTTP (or reads a local .xlsx file) and
decodes it into plain Python grids with openpyxl. Loading is all or nothing:
any network or decode failure raises LoadError and no partial workbook is
returned.
"""

import hashlib
import io
import logging
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import requests
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

logger = logging.getLogger(__name__)


class LoadError(Exception):
    """The workbook could not be fetched or decoded."""


@dataclass(frozen=True)
class Sheet:
    """A raw 2-D grid of cell values with no inherent schema."""

    name: str
    rows: tuple[tuple, ...]


@dataclass(frozen=True)
class Workbook:
    """Sheets keyed by name, in the order they are declared in the file."""

    sheets: dict[str, Sheet] = field(default_factory=dict)
    source: str = ""
    source_hash: str = ""

    @property
    def sheet_names(self) -> list[str]:
        return list(self.sheets)

    def get(self, name: str) -> Optional[Sheet]:
        return self.sheets.get(name)


def _is_remote(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


class WorkbookLoader:
    """Fetches and decodes a workbook from a URL or a local file.

    With use_cache=True a cached copy is read when present, and a fresh
    download is saved to the cache directory for the next offline run.
    Without it nothing is written to disk.
    """

    def __init__(
        self,
        source: str,
        use_cache: bool = False,
        cache_dir: Optional[Path] = None,
        timeout: Optional[float] = None,
    ):
        self.source = str(source)
        self.use_cache = use_cache
        self.cache_dir = Path(cache_dir) if cache_dir else Path("data/cache")
        self.timeout = timeout
        self._cache_path = self.cache_dir / "workbook.xlsx"

    def fetch_source(self) -> bytes:
        """Download (or read) the raw workbook bytes.

        Raises:
            LoadError: On any network failure or unreadable local file.
        """
        if self.use_cache and self._cache_path.exists():
            logger.info(f"Loading workbook from cache: {self._cache_path}")
            return self._cache_path.read_bytes()

        if not _is_remote(self.source):
            path = Path(self.source)
            try:
                return path.read_bytes()
            except OSError as e:
                raise LoadError(f"Cannot read workbook file {path}: {e}") from e

        logger.info(f"Fetching workbook from {self.source}")
        try:
            resp = requests.get(self.source, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise LoadError(f"Failed to fetch workbook: {e}") from e
        data = resp.content

        if self.use_cache:
            self._write_cache(data)
        return data

    def _write_cache(self, data: bytes) -> None:
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            self._cache_path.write_bytes(data)
            logger.debug(f"Cached workbook to {self._cache_path}")
        except OSError as e:
            logger.warning(f"Could not cache workbook to {self._cache_path}: {e}")

    def parse(self, raw_data: bytes) -> Workbook:
        """Decode xlsx bytes into a Workbook of plain value grids.

        Raises:
            LoadError: If the bytes are not a readable spreadsheet.
        """
        try:
            wb = load_workbook(io.BytesIO(raw_data), read_only=True, data_only=True)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError, OSError) as e:
            raise LoadError(f"Could not decode workbook: {e}") from e

        try:
            sheets = {}
            for ws in wb.worksheets:
                # Exported files can carry stale dimension metadata
                ws.reset_dimensions()
                rows = tuple(tuple(row) for row in ws.iter_rows(values_only=True))
                sheets[ws.title] = Sheet(name=ws.title, rows=rows)
        except Exception as e:
            # Sheet XML is only parsed while iterating in read-only mode
            raise LoadError(f"Could not decode workbook: {e}") from e
        finally:
            wb.close()

        return Workbook(
            sheets=sheets,
            source=self.source,
            source_hash=hashlib.sha256(raw_data).hexdigest(),
        )

    def load(self) -> Workbook:
        """Fetch and decode the workbook."""
        raw_data = self.fetch_source()
        logger.info(f"Fetched workbook ({len(raw_data)} bytes)")
        workbook = self.parse(raw_data)
        logger.info(
            f"Decoded {len(workbook.sheets)} sheet(s): {', '.join(workbook.sheet_names)}"
        )
        return workbook

"""Snapshot sources: Google Sheets via gspread, and CSV exports.

Handles service-account authentication and reading the CleanData tab as a
list of string rows. Both sources return rows in sheet order with metadata
rows included; skipping them is the parser's job.
"""

import csv
import logging
from pathlib import Path
from typing import Optional, Protocol, Union

import gspread

from config import SHEET_ESI_LIST_TAB, SHEET_WEBHOOK_CELL

logger = logging.getLogger(__name__)


class DataSource(Protocol):
    """Read-only access to a tabular snapshot."""

    def fetch(self, identifier: str) -> list[list[str]]:
        ...


def get_sheets_client(key_path: Path) -> gspread.Client:
    """Authenticate with Google Sheets using a service account key.

    Args:
        key_path: Path to the service account JSON key file.

    Returns:
        An authorized ``gspread.Client``.

    Raises:
        FileNotFoundError: If the service account key file does not exist.
        google.auth.exceptions.DefaultCredentialsError: If the key is invalid.
    """
    if not key_path.exists():
        raise FileNotFoundError(f"Service account key not found: {key_path}")
    logger.debug("Authenticating with service account key %s", key_path)
    return gspread.service_account(filename=str(key_path))


def open_spreadsheet(client: gspread.Client, spreadsheet_id: str) -> gspread.Spreadsheet:
    """Open a spreadsheet by ID.

    Raises:
        gspread.exceptions.SpreadsheetNotFound: If the ID is wrong or the
            service account has no access.
    """
    spreadsheet = client.open_by_key(spreadsheet_id)
    logger.info("Opened spreadsheet '%s'", spreadsheet.title)
    return spreadsheet


class SheetDataSource:
    """Reads tabs from an open Google Spreadsheet.

    Args:
        spreadsheet: An opened ``gspread.Spreadsheet``.
    """

    def __init__(self, spreadsheet: gspread.Spreadsheet) -> None:
        self.spreadsheet = spreadsheet

    def fetch(self, identifier: str) -> list[list[str]]:
        """Return every row of the tab named *identifier*.

        Raises:
            gspread.exceptions.WorksheetNotFound: If the tab does not exist.
        """
        rows = self.spreadsheet.worksheet(identifier).get_all_values()
        logger.info("Read %d row(s) from tab '%s'", len(rows), identifier)
        return rows

    def read_cell(self, tab: str, a1: str) -> str:
        """Return the displayed value of one cell, ``""`` if empty."""
        value = self.spreadsheet.worksheet(tab).acell(a1).value
        return "" if value is None else str(value)

    def read_webhook_url(self) -> str:
        """Return the webhook URL kept in the ESI_List tab (cell G2)."""
        return self.read_cell(SHEET_ESI_LIST_TAB, SHEET_WEBHOOK_CELL).strip()


class CsvDataSource:
    """Reads a CSV export of a tab from disk.

    Args:
        base_dir: Directory relative identifiers are resolved against.
    """

    def __init__(self, base_dir: Optional[Union[str, Path]] = None) -> None:
        self.base_dir = Path(base_dir) if base_dir is not None else None

    def fetch(self, identifier: str) -> list[list[str]]:
        """Return every row of the CSV file at *identifier*.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        path = Path(identifier)
        if self.base_dir is not None and not path.is_absolute():
            path = self.base_dir / path

        # utf-8-sig tolerates a byte-order mark on exported files
        with path.open("r", newline="", encoding="utf-8-sig") as f:
            rows = [list(row) for row in csv.reader(f)]
        logger.info("Read %d row(s) from %s", len(rows), path)
        return rows

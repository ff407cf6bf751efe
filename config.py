"""Central configuration for the structure fuel status reporter.

Module-level constants are the single source of truth for magic values —
sheet layout, cell addresses, Discord limits and markup. Never hardcode these
values elsewhere.

Per-deployment values (webhook URL, spreadsheet ID, schedule) live in
``ReportSettings``, which is built once at startup and passed explicitly to
whatever needs it.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Optional

from dotenv import load_dotenv

from exceptions import ConfigError

# ---------------------------------------------------------------------------
# Project paths
# ---------------------------------------------------------------------------

PROJECT_ROOT: Final[Path] = Path(__file__).resolve().parent
ENV_PATH: Final[Path] = PROJECT_ROOT / ".env"

# ---------------------------------------------------------------------------
# Google Sheets — service account & spreadsheet
# ---------------------------------------------------------------------------

# Path to the service account JSON key file. Never commit this file.
SERVICE_ACCOUNT_KEY_PATH: Final[Path] = PROJECT_ROOT / "service_account.json"

# ---------------------------------------------------------------------------
# Google Sheets — tab layout
# ---------------------------------------------------------------------------

SHEET_CLEAN_DATA_TAB: Final[str] = "CleanData"
SHEET_ESI_LIST_TAB: Final[str] = "ESI_List"

# Cell on the ESI_List tab holding the webhook URL, used when no URL is
# configured through the environment.
SHEET_WEBHOOK_CELL: Final[str] = "G2"

# Position of the "last updated" label on the CleanData tab (cell E1).
TIMESTAMP_ROW: Final[int] = 0
TIMESTAMP_COL: Final[int] = 4

# Rows at the top of CleanData that hold metadata, not structures.
# Whether this should be 3 or 4 has been questioned before. The provisioned
# layout (E1 label, empty A2, "name" header in A3) puts the first structure on
# row 4, so 3 is used. Override with FUEL_HEADER_ROWS or --header-rows if a
# sheet differs.
HEADER_ROW_OFFSET: Final[int] = 3

# Column indexes within a CleanData row.
COL_NAME: Final[int] = 0
COL_REMAINING: Final[int] = 1
COL_STATE: Final[int] = 3

# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------

DEFAULT_REPORT_TITLE: Final[str] = "OPTM Fuel Status Update"

# Structures with fewer whole days than this are emphasised.
URGENT_DAYS_THRESHOLD: Final[int] = 7

# ---------------------------------------------------------------------------
# Discord
# ---------------------------------------------------------------------------

# Hard limit on the ``content`` field of a webhook message.
DISCORD_MAX_MESSAGE_LENGTH: Final[int] = 2000

DISCORD_REQUEST_TIMEOUT: Final[float] = 30.0

# Timestamp markup styles: relative ("in 3 days") and short date/time.
TIMESTAMP_STYLE_RELATIVE: Final[str] = "R"
TIMESTAMP_STYLE_ABSOLUTE: Final[str] = "f"

# ---------------------------------------------------------------------------
# Scheduler
# ---------------------------------------------------------------------------

DEFAULT_REPORT_HOUR: Final[int] = 12
DEFAULT_REPORT_MINUTE: Final[int] = 0
DEFAULT_TIMEZONE: Final[str] = "UTC"


# ---------------------------------------------------------------------------
# Runtime settings
# ---------------------------------------------------------------------------


def _env_int(name: str, default: int, low: int, high: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(name, f"expected an integer, got '{raw}'") from None
    if not low <= value <= high:
        raise ConfigError(name, f"expected a value in {low}-{high}, got {value}")
    return value


@dataclass(frozen=True)
class ReportSettings:
    """Per-deployment settings for one reporter instance.

    Attributes:
        webhook_url: Discord webhook to post to. Empty means "read it from
            the ESI_List tab".
        spreadsheet_id: Google Spreadsheet ID (from the URL).
        service_account_key_path: Service account JSON key for gspread.
        title: Report heading shown on the first message.
        header_rows: Metadata rows skipped at the top of CleanData.
        report_hour: Hour of day for the scheduled report.
        report_minute: Minute of hour for the scheduled report.
        timezone: IANA timezone name the schedule is expressed in.
    """

    webhook_url: str = ""
    spreadsheet_id: str = ""
    service_account_key_path: Path = SERVICE_ACCOUNT_KEY_PATH
    title: str = DEFAULT_REPORT_TITLE
    header_rows: int = HEADER_ROW_OFFSET
    report_hour: int = DEFAULT_REPORT_HOUR
    report_minute: int = DEFAULT_REPORT_MINUTE
    timezone: str = DEFAULT_TIMEZONE

    @classmethod
    def from_env(cls, env_path: Optional[Path] = None) -> "ReportSettings":
        """Build settings from the process environment and an optional ``.env``.

        Args:
            env_path: ``.env`` file to load. Defaults to ``ENV_PATH``.

        Returns:
            A populated ``ReportSettings``.

        Raises:
            ConfigError: If a numeric variable is not an integer or is out
                of range.
        """
        load_dotenv(dotenv_path=env_path or ENV_PATH)

        key_path = os.getenv("FUEL_SERVICE_ACCOUNT_KEY", "").strip()
        return cls(
            webhook_url=os.getenv("FUEL_WEBHOOK_URL", "").strip(),
            spreadsheet_id=os.getenv("FUEL_SPREADSHEET_ID", "").strip(),
            service_account_key_path=(
                Path(key_path) if key_path else SERVICE_ACCOUNT_KEY_PATH
            ),
            title=os.getenv("FUEL_REPORT_TITLE", "").strip() or DEFAULT_REPORT_TITLE,
            header_rows=_env_int("FUEL_HEADER_ROWS", HEADER_ROW_OFFSET, 0, 1000),
            report_hour=_env_int("FUEL_REPORT_HOUR", DEFAULT_REPORT_HOUR, 0, 23),
            report_minute=_env_int("FUEL_REPORT_MINUTE", DEFAULT_REPORT_MINUTE, 0, 59),
            timezone=os.getenv("FUEL_TIMEZONE", "").strip() or DEFAULT_TIMEZONE,
        )

#!/usr/bin/env python3
"""Entry point for the structure fuel status reporter.

Subcommands::

    report     Read the CleanData snapshot and post the status report once.
    schedule   Post the report every day at a fixed time.

Configuration comes from the environment (or ``.env``); see
``config.ReportSettings``. Command-line flags override it.

Usage::

    python main.py report
    python main.py report --csv exports/CleanData.csv --dry-run
    python main.py schedule --hour 13 --minute 30 --timezone Europe/London

Exit codes: 0 on success, 1 if any message failed to deliver, 2 on a
configuration error.
"""

import argparse
import dataclasses
import logging
import sys
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from config import SHEET_CLEAN_DATA_TAB, ReportSettings
from exceptions import ConfigError, FuelReportError
from notify import DiscordWebhookNotifier, DryRunNotifier, Notifier
from report import SendResult, run_report
from sheets import CsvDataSource, DataSource, SheetDataSource, get_sheets_client, open_spreadsheet

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_DELIVERY_FAILED = 1
EXIT_CONFIG_ERROR = 2


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


def apply_overrides(settings: ReportSettings, args: argparse.Namespace) -> ReportSettings:
    """Return *settings* with any command-line overrides applied."""
    overrides = {}
    for name in ("title", "header_rows", "report_hour", "report_minute", "timezone"):
        value = getattr(args, name, None)
        if value is not None:
            overrides[name] = value
    if getattr(args, "webhook_url", None):
        overrides["webhook_url"] = args.webhook_url

    settings = dataclasses.replace(settings, **overrides)
    if settings.header_rows < 0:
        raise ConfigError("--header-rows", "must not be negative")
    if not 0 <= settings.report_hour <= 23:
        raise ConfigError("--hour", f"expected 0-23, got {settings.report_hour}")
    if not 0 <= settings.report_minute <= 59:
        raise ConfigError("--minute", f"expected 0-59, got {settings.report_minute}")
    return settings


def build_source(
    settings: ReportSettings,
    csv_path: Optional[str],
) -> tuple[DataSource, str]:
    """Pick the snapshot source and the identifier to fetch from it.

    Raises:
        ConfigError: If neither a CSV path nor a spreadsheet ID is given.
    """
    if csv_path:
        return CsvDataSource(), csv_path

    if not settings.spreadsheet_id:
        raise ConfigError(
            "FUEL_SPREADSHEET_ID", "set it, or pass --csv to read a local export"
        )
    client = get_sheets_client(settings.service_account_key_path)
    spreadsheet = open_spreadsheet(client, settings.spreadsheet_id)
    return SheetDataSource(spreadsheet), SHEET_CLEAN_DATA_TAB


def build_notifier(
    settings: ReportSettings,
    source: DataSource,
    dry_run: bool,
) -> Notifier:
    """Create the notifier, falling back to the webhook URL stored in the sheet.

    Raises:
        ConfigError: If no webhook URL can be found.
    """
    if dry_run:
        return DryRunNotifier()

    webhook_url = settings.webhook_url
    if not webhook_url and isinstance(source, SheetDataSource):
        webhook_url = source.read_webhook_url()
        if webhook_url:
            logger.info("Using webhook URL from the ESI_List tab")

    if not webhook_url:
        raise ConfigError("FUEL_WEBHOOK_URL", "no webhook URL configured")
    return DiscordWebhookNotifier(webhook_url)


def report_once(
    settings: ReportSettings,
    csv_path: Optional[str] = None,
    tab: Optional[str] = None,
    dry_run: bool = False,
) -> SendResult:
    """Read the snapshot and send one report."""
    source, identifier = build_source(settings, csv_path)
    if tab and not csv_path:
        identifier = tab
    notifier = build_notifier(settings, source, dry_run)
    return run_report(source, notifier, settings, identifier=identifier)


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


def cmd_report(args: argparse.Namespace, settings: ReportSettings) -> int:
    """Send the report once and translate the outcome into an exit code."""
    result = report_once(settings, csv_path=args.csv, tab=args.tab, dry_run=args.dry_run)
    if not result.ok:
        logger.error("%d message(s) failed to deliver", len(result.failed))
        return EXIT_DELIVERY_FAILED
    return EXIT_OK


def scheduled_job(settings: ReportSettings, csv_path: Optional[str], tab: Optional[str]) -> None:
    """Scheduler job body. Errors are logged so the next run still happens."""
    try:
        result = report_once(settings, csv_path=csv_path, tab=tab)
    except Exception:
        logger.exception("Scheduled report failed")
        return
    if not result.ok:
        logger.error("Scheduled report: %d message(s) failed to deliver", len(result.failed))


def cmd_schedule(args: argparse.Namespace, settings: ReportSettings) -> int:
    """Run the report every day at ``report_hour:report_minute``."""
    try:
        tz = ZoneInfo(settings.timezone)
    except ZoneInfoNotFoundError:
        raise ConfigError("FUEL_TIMEZONE", f"unknown timezone '{settings.timezone}'") from None

    scheduler = BlockingScheduler(timezone=tz)
    scheduler.add_job(
        scheduled_job,
        CronTrigger(hour=settings.report_hour, minute=settings.report_minute, timezone=tz),
        id="fuel_report",
        replace_existing=True,
        max_instances=1,
        args=[settings, args.csv, args.tab],
    )
    logger.info(
        "Fuel report scheduled daily at %02d:%02d (%s)",
        settings.report_hour,
        settings.report_minute,
        settings.timezone,
    )

    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Scheduler stopped")
    return EXIT_OK


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Post EVE structure fuel status to a Discord webhook.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--csv",
        metavar="PATH",
        help="Read the snapshot from a CSV export instead of Google Sheets",
    )
    common.add_argument(
        "--tab",
        help=f"Spreadsheet tab to read (default: {SHEET_CLEAN_DATA_TAB})",
    )
    common.add_argument("--webhook-url", help="Override FUEL_WEBHOOK_URL")
    common.add_argument("--title", help="Report heading")
    common.add_argument(
        "--header-rows",
        type=int,
        help="Metadata rows to skip at the top of the snapshot",
    )

    report_parser = subparsers.add_parser(
        "report",
        parents=[common],
        help="Send the fuel status report once",
    )
    report_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the messages instead of posting them",
    )

    schedule_parser = subparsers.add_parser(
        "schedule",
        parents=[common],
        help="Send the fuel status report every day",
    )
    schedule_parser.add_argument("--hour", dest="report_hour", type=int, help="Hour of day (0-23)")
    schedule_parser.add_argument("--minute", dest="report_minute", type=int, help="Minute (0-59)")
    schedule_parser.add_argument("--timezone", help="IANA timezone name (default: UTC)")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Parse arguments, configure logging and dispatch to a subcommand."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )

    try:
        settings = apply_overrides(ReportSettings.from_env(), args)
        if args.command == "report":
            return cmd_report(args, settings)
        return cmd_schedule(args, settings)
    except (ConfigError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        return EXIT_CONFIG_ERROR
    except FuelReportError as exc:
        logger.error("Report aborted: %s", exc)
        return EXIT_DELIVERY_FAILED


if __name__ == "__main__":
    sys.exit(main())

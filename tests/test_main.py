"""Tests for main.py — CLI wiring, exit codes and scheduling."""

from unittest.mock import MagicMock, patch

import pytest

from config import ReportSettings
from exceptions import DeliveryError
from main import (
    EXIT_CONFIG_ERROR,
    EXIT_DELIVERY_FAILED,
    EXIT_OK,
    build_notifier,
    main,
    scheduled_job,
)
from notify import DiscordWebhookNotifier, DryRunNotifier
from sheets import CsvDataSource, SheetDataSource

CSV_SNAPSHOT = (
    ",,,,2024-01-01 12:00\n"
    ",,,,\n"
    "name,Days Remaining,,,\n"
    "Station-B,10 days 0 hours,,Anchored\n"
    "Station-A,5 days 10 hours,,Anchored\n"
)


@pytest.fixture
def snapshot_csv(tmp_path):
    path = tmp_path / "CleanData.csv"
    path.write_text(CSV_SNAPSHOT, encoding="utf-8")
    return str(path)


@pytest.fixture
def settings():
    """Patch environment loading so tests never read a real .env."""
    with patch("main.ReportSettings.from_env", return_value=ReportSettings()) as mock:
        yield mock


class TestReportCommand:
    """Tests for `main.py report`."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == EXIT_OK
        assert "usage" in capsys.readouterr().out

    def test_dry_run_from_csv(self, settings, snapshot_csv, capsys):
        assert main(["report", "--csv", snapshot_csv, "--dry-run"]) == EXIT_OK

        out = capsys.readouterr().out
        assert "**OPTM Fuel Status Update (2024-01-01 12:00):**" in out
        assert out.index("Station-A") < out.index("Station-B")

    def test_title_override(self, settings, snapshot_csv, capsys):
        main(["report", "--csv", snapshot_csv, "--dry-run", "--title", "Corp Fuel"])
        assert "**Corp Fuel (2024-01-01 12:00):**" in capsys.readouterr().out

    def test_missing_spreadsheet_id(self, settings):
        assert main(["report"]) == EXIT_CONFIG_ERROR

    def test_missing_webhook(self, settings, snapshot_csv):
        assert main(["report", "--csv", snapshot_csv]) == EXIT_CONFIG_ERROR

    def test_missing_csv_file(self, settings, tmp_path):
        missing = str(tmp_path / "nope.csv")
        assert main(["report", "--csv", missing, "--dry-run"]) == EXIT_CONFIG_ERROR

    def test_negative_header_rows(self, settings, snapshot_csv):
        args = ["report", "--csv", snapshot_csv, "--dry-run", "--header-rows", "-1"]
        assert main(args) == EXIT_CONFIG_ERROR

    @patch("main.DiscordWebhookNotifier")
    def test_posts_to_webhook(self, mock_notifier_cls, settings, snapshot_csv):
        args = ["report", "--csv", snapshot_csv, "--webhook-url", "https://hook"]

        assert main(args) == EXIT_OK

        mock_notifier_cls.assert_called_once_with("https://hook")
        mock_notifier_cls.return_value.send.assert_called_once()

    @patch("main.DiscordWebhookNotifier")
    def test_delivery_failure_exit_code(self, mock_notifier_cls, settings, snapshot_csv):
        mock_notifier_cls.return_value.send.side_effect = DeliveryError(500, "boom")
        args = ["report", "--csv", snapshot_csv, "--webhook-url", "https://hook"]

        assert main(args) == EXIT_DELIVERY_FAILED


class TestBuildNotifier:
    """Tests for picking the notifier and the webhook URL."""

    def test_dry_run(self):
        notifier = build_notifier(ReportSettings(), CsvDataSource(), dry_run=True)
        assert isinstance(notifier, DryRunNotifier)

    def test_configured_url_wins(self):
        source = MagicMock(spec=SheetDataSource)
        notifier = build_notifier(ReportSettings(webhook_url="https://env"), source, dry_run=False)

        assert isinstance(notifier, DiscordWebhookNotifier)
        assert notifier.webhook_url == "https://env"
        source.read_webhook_url.assert_not_called()

    def test_falls_back_to_sheet_cell(self):
        spreadsheet = MagicMock()
        spreadsheet.worksheet.return_value.acell.return_value.value = "https://sheet"

        notifier = build_notifier(ReportSettings(), SheetDataSource(spreadsheet), dry_run=False)

        assert notifier.webhook_url == "https://sheet"


class TestScheduleCommand:
    """Tests for `main.py schedule`."""

    @patch("main.BlockingScheduler")
    def test_registers_daily_job(self, mock_scheduler_cls, settings, snapshot_csv):
        args = ["schedule", "--csv", snapshot_csv, "--hour", "6", "--minute", "15"]

        assert main(args) == EXIT_OK

        scheduler = mock_scheduler_cls.return_value
        scheduler.add_job.assert_called_once()
        kwargs = scheduler.add_job.call_args.kwargs
        assert kwargs["id"] == "fuel_report"
        assert kwargs["max_instances"] == 1
        job_settings, csv_path, tab = kwargs["args"]
        assert (job_settings.report_hour, job_settings.report_minute) == (6, 15)
        assert csv_path == snapshot_csv
        assert tab is None
        scheduler.start.assert_called_once()

    @patch("main.BlockingScheduler")
    def test_invalid_hour(self, mock_scheduler_cls, settings):
        assert main(["schedule", "--hour", "25"]) == EXIT_CONFIG_ERROR
        mock_scheduler_cls.assert_not_called()

    @patch("main.BlockingScheduler")
    def test_unknown_timezone(self, mock_scheduler_cls, settings):
        assert main(["schedule", "--timezone", "Not/AZone"]) == EXIT_CONFIG_ERROR
        mock_scheduler_cls.assert_not_called()

    @patch("main.report_once", side_effect=RuntimeError("sheet unavailable"))
    def test_job_errors_do_not_stop_the_scheduler(self, _mock_report):
        scheduled_job(ReportSettings(), None, None)

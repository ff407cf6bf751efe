"""Fuel status report building and delivery.

Sorts structure records, converts remaining fuel into absolute expiry
timestamps, renders one Discord-markup line per structure and packs the
lines into messages that respect the webhook size limit. Lines are never
split across messages.
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

from config import (
    DEFAULT_REPORT_TITLE,
    DISCORD_MAX_MESSAGE_LENGTH,
    SHEET_CLEAN_DATA_TAB,
    TIMESTAMP_STYLE_ABSOLUTE,
    TIMESTAMP_STYLE_RELATIVE,
    URGENT_DAYS_THRESHOLD,
    ReportSettings,
)
from exceptions import DeliveryError, MessageTooLongError
from notify import Notifier
from parse import StructureRecord, extract_timestamp_label, parse_rows
from sheets import DataSource

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SendResult:
    """Outcome of delivering one report."""

    sent: int = 0
    failed: list[DeliveryError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class StatusReportBuilder:
    """Builds and sends the fuel status report.

    Args:
        title: Heading placed at the top of the first message.
        max_length: Maximum characters per message.
        urgent_days: Records with fewer whole days than this are emphasised.
        clock: Returns the current time as an aware ``datetime``. Injected
            so expiry timestamps are reproducible in tests.
    """

    def __init__(
        self,
        title: str = DEFAULT_REPORT_TITLE,
        max_length: int = DISCORD_MAX_MESSAGE_LENGTH,
        urgent_days: int = URGENT_DAYS_THRESHOLD,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.title = title
        self.max_length = max_length
        self.urgent_days = urgent_days
        self.clock = clock

    @staticmethod
    def sort_records(records: Iterable[StructureRecord]) -> list[StructureRecord]:
        """Sort by name, plain code-point order. Equal names keep input order."""
        return sorted(records, key=lambda record: record.name)

    @staticmethod
    def expiry_timestamp(record: StructureRecord, now: datetime) -> int:
        """Unix seconds at which *record* runs out of fuel, counted from *now*."""
        expires = now + timedelta(days=record.days, hours=record.hours)
        return int(expires.timestamp())

    def format_line(self, record: StructureRecord, now: datetime) -> str:
        """Render one structure as a Discord markup line (no trailing newline)."""
        ts = self.expiry_timestamp(record, now)
        line = (
            f"**{record.name}** - expires "
            f"<t:{ts}:{TIMESTAMP_STYLE_RELATIVE}> - <t:{ts}:{TIMESTAMP_STYLE_ABSOLUTE}>"
        )
        if record.days < self.urgent_days:
            line = f"__{line}__"
        return line

    def header(self, label: str) -> str:
        return f"**{self.title} ({label}):**\n\n"

    def format_lines(
        self,
        records: Iterable[StructureRecord],
        now: Optional[datetime] = None,
    ) -> list[str]:
        """Sort *records* and render each one. Blank names are dropped."""
        now = now or self.clock()
        return [
            self.format_line(record, now)
            for record in self.sort_records(records)
            if record.name.strip()
        ]

    def chunk_lines(self, label: str, lines: Sequence[str]) -> list[str]:
        """Pack *lines* into messages of at most ``max_length`` characters.

        The header goes on the first message only. A message is closed as
        soon as the next line (with its newline) would push it past the
        limit.

        Args:
            label: Timestamp label for the header.
            lines: Formatted lines in output order.

        Returns:
            The messages, in order. Empty if *lines* is empty.

        Raises:
            MessageTooLongError: If the header or a single line cannot fit in
                one message on its own.
        """
        if not lines:
            return []

        buffer = self.header(label)
        if len(buffer) > self.max_length:
            raise MessageTooLongError(len(buffer), self.max_length)

        messages: list[str] = []
        for line in lines:
            entry = line + "\n"
            if len(entry) > self.max_length:
                raise MessageTooLongError(len(entry), self.max_length)
            if len(buffer) + len(entry) > self.max_length:
                messages.append(buffer)
                buffer = ""
            buffer += entry

        if buffer:
            messages.append(buffer)
        return messages

    def build_messages(
        self,
        label: str,
        records: Iterable[StructureRecord],
    ) -> list[str]:
        """Render and chunk a full report without sending anything."""
        return self.chunk_lines(label, self.format_lines(records))

    def send(
        self,
        label: str,
        records: Iterable[StructureRecord],
        notifier: Notifier,
    ) -> SendResult:
        """Build the report and deliver every message through *notifier*.

        All messages are built before the first one is sent, so a
        ``MessageTooLongError`` leaves nothing half-posted. A failed delivery
        is logged and recorded; the remaining messages are still attempted.

        Returns:
            A ``SendResult`` counting delivered messages and collecting
            delivery errors.
        """
        messages = self.build_messages(label, records)
        result = SendResult()

        if not messages:
            logger.info("No structures to report; nothing sent")
            return result

        for index, message in enumerate(messages, start=1):
            try:
                notifier.send(message)
            except DeliveryError as exc:
                logger.error("Message %d/%d not delivered: %s", index, len(messages), exc)
                result.failed.append(exc)
                continue
            result.sent += 1
            logger.debug("Message %d/%d delivered (%d chars)", index, len(messages), len(message))

        logger.info("Report delivered: %d sent, %d failed", result.sent, len(result.failed))
        return result


def run_report(
    source: DataSource,
    notifier: Notifier,
    settings: ReportSettings,
    identifier: str = SHEET_CLEAN_DATA_TAB,
    builder: Optional[StatusReportBuilder] = None,
) -> SendResult:
    """Fetch a snapshot from *source*, parse it, and send the report.

    Args:
        source: Where the CleanData rows come from.
        notifier: Where the messages go.
        settings: Title and header-row offset are taken from here.
        identifier: Passed to ``source.fetch`` (tab name or file path).
        builder: Builder to use; one is created from *settings* if omitted.

    Returns:
        The ``SendResult`` of the delivery.
    """
    builder = builder or StatusReportBuilder(title=settings.title)

    rows = source.fetch(identifier)
    label = extract_timestamp_label(rows)
    snapshot = parse_rows(rows, header_rows=settings.header_rows)

    if snapshot.rejected:
        logger.warning(
            "%d row(s) skipped with unreadable remaining time: %s",
            len(snapshot.rejected),
            ", ".join(f"row {r.row_number} ({r.name})" for r in snapshot.rejected),
        )

    logger.info("Reporting %d structure(s) as of '%s'", len(snapshot.records), label)
    return builder.send(label, snapshot.records, notifier)

"""Row validation for the CleanData snapshot.

Turns raw spreadsheet rows into ``StructureRecord`` values. Rows with a blank
name are placeholders and are skipped silently; rows with a name but an
unreadable remaining-time cell are rejected and reported. No sorting,
formatting or I/O belongs here.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Optional

from config import (
    COL_NAME,
    COL_REMAINING,
    COL_STATE,
    HEADER_ROW_OFFSET,
    TIMESTAMP_COL,
    TIMESTAMP_ROW,
)
from exceptions import RemainingTimeParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StructureRecord:
    """One structure and the fuel it has left.

    - name: structure name as shown in game
    - days: whole days of fuel remaining (negative once expired)
    - hours: whole hours on top of *days*
    - state: structure state column (e.g. "shield_vulnerable")
    """

    name: str
    days: int
    hours: int
    state: str = ""


@dataclass(frozen=True)
class RejectedRow:
    """A named row whose remaining-time cell could not be parsed."""

    row_number: int
    name: str
    value: str
    reason: str


@dataclass
class ParsedSnapshot:
    """Records accepted from a snapshot, plus the rows that were rejected."""

    records: list[StructureRecord] = field(default_factory=list)
    rejected: list[RejectedRow] = field(default_factory=list)


def _cell(row: Sequence[Any], index: int) -> str:
    if index >= len(row) or row[index] is None:
        return ""
    return str(row[index])


def parse_remaining_time(raw: str) -> tuple[int, int]:
    """Parse a ``"<days> days <hours> hours"`` string.

    The string is split on whitespace; token 0 is the day count and token 2
    the hour count. Tokens 1 and 3 are the literal unit words and are not
    checked.

    Args:
        raw: The cell value, e.g. ``"6 days 23 hours"``.

    Returns:
        A ``(days, hours)`` tuple.

    Raises:
        RemainingTimeParseError: If there are fewer than three tokens or
            either count is not an integer.
    """
    tokens = raw.split()
    if len(tokens) < 3:
        raise RemainingTimeParseError(
            "remaining", raw, "Expected '<days> days <hours> hours'."
        )
    try:
        days = int(tokens[0])
        hours = int(tokens[2])
    except ValueError:
        raise RemainingTimeParseError(
            "remaining", raw, "Day and hour counts must be integers."
        ) from None
    return days, hours


def parse_row(row: Sequence[Any]) -> Optional[StructureRecord]:
    """Convert one CleanData row into a ``StructureRecord``.

    Args:
        row: Cells in sheet order: name, remaining time, fuel expiry, state.
            Short rows are padded with empty cells.

    Returns:
        The record, or ``None`` if the name cell is blank.

    Raises:
        RemainingTimeParseError: If the row has a name but its remaining
            time is malformed.
    """
    name = _cell(row, COL_NAME)
    if not name.strip():
        return None

    days, hours = parse_remaining_time(_cell(row, COL_REMAINING))
    return StructureRecord(
        name=name,
        days=days,
        hours=hours,
        state=_cell(row, COL_STATE),
    )


def parse_rows(
    rows: Sequence[Sequence[Any]],
    header_rows: int = HEADER_ROW_OFFSET,
) -> ParsedSnapshot:
    """Parse every data row of a CleanData snapshot.

    Args:
        rows: All rows of the tab, metadata rows included.
        header_rows: Number of leading metadata rows to drop.

    Returns:
        A ``ParsedSnapshot`` with the accepted records in input order and
        one ``RejectedRow`` per malformed row.
    """
    snapshot = ParsedSnapshot()
    for offset, row in enumerate(rows[header_rows:]):
        # 1-based sheet row number, for log lines people can look up
        row_number = header_rows + offset + 1
        try:
            record = parse_row(row)
        except RemainingTimeParseError as exc:
            logger.warning("Rejecting row %d (%s): %s", row_number, _cell(row, COL_NAME), exc)
            snapshot.rejected.append(
                RejectedRow(
                    row_number=row_number,
                    name=_cell(row, COL_NAME),
                    value=exc.value,
                    reason=exc.reason,
                )
            )
            continue
        if record is not None:
            snapshot.records.append(record)

    logger.debug(
        "Parsed %d record(s), rejected %d, from %d row(s)",
        len(snapshot.records),
        len(snapshot.rejected),
        len(rows),
    )
    return snapshot


def extract_timestamp_label(rows: Sequence[Sequence[Any]]) -> str:
    """Return the "last updated" label stored in cell E1, or ``""``."""
    if len(rows) <= TIMESTAMP_ROW:
        return ""
    return _cell(rows[TIMESTAMP_ROW], TIMESTAMP_COL)

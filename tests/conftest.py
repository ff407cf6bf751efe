"""Shared test configuration and fixtures.

Provides a frozen clock so expiry timestamps are deterministic, and helpers
that build CleanData-shaped rows (three metadata rows, then one row per
structure).
"""

from datetime import datetime, timezone

import pytest

from report import StatusReportBuilder

# 2024-01-01 12:00:00 UTC
FIXED_NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

METADATA_ROWS = [
    ["", "", "2024-01-01T12:00:00.000", "2024-01-01T12:00:00.000Z", "2024-01-01 12:00"],
    ["", "", "", "", ""],
    ["name", "Days Remaining", "", "", ""],
]


def _clean_data(*rows: list[str]) -> list[list[str]]:
    return [list(r) for r in METADATA_ROWS] + [list(r) for r in rows]


@pytest.fixture
def clean_data():
    """Return a function that prefixes structure rows with the metadata rows."""
    return _clean_data


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def builder() -> StatusReportBuilder:
    """Builder with a short title and the frozen clock."""
    return StatusReportBuilder(title="Fuel", clock=lambda: FIXED_NOW)

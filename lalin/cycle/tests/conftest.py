"""Shared fixtures and period histories for cycle engine tests."""

from __future__ import annotations

from datetime import date, timedelta
from itertools import count

import pytest

from lalin.cycle.config_loader import CycleConfig, load_cycle_config
from lalin.cycle.cycle_stats import PeriodEntry

# Reference "today" for the regular-history scenarios
TEST_TODAY = date(2024, 3, 1)

_ids = count(1)


def make_entry(start: str, end: str | None = None, flow: str | None = None) -> PeriodEntry:
    return PeriodEntry(id=f"p{next(_ids)}", start_date=start, end_date=end, flow=flow)


def build_history(first_start: date, gaps: list[int]) -> list[PeriodEntry]:
    """Build entries whose consecutive start dates are ``gaps`` days apart."""
    starts = [first_start]
    for gap in gaps:
        starts.append(starts[-1] + timedelta(days=gap))
    return [make_entry(d.isoformat()) for d in starts]


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cycle_config() -> CycleConfig:
    """Load the real bundled cycle config for tests."""
    return load_cycle_config()


# ---------------------------------------------------------------------------
# History fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def regular_history() -> list[PeriodEntry]:
    """Three starts 28 days apart, no end dates."""
    return [
        make_entry("2024-01-01"),
        make_entry("2024-01-29"),
        make_entry("2024-02-26"),
    ]


@pytest.fixture
def irregular_history() -> list[PeriodEntry]:
    """Gaps of 25, 35, 28, 45, 30 days: median 30, MAD 5."""
    return build_history(date(2023, 6, 1), [25, 35, 28, 45, 30])


@pytest.fixture
def single_entry() -> list[PeriodEntry]:
    return [make_entry("2024-01-01", "2024-01-05")]

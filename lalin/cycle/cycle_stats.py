"""Cycle statistics estimator.

Turns an unordered history of logged periods into robust estimates of cycle
length and period length.

Algorithm:
1. Sort entries by start date (ISO strings sort chronologically).
2. Cycle-length samples: day gaps between consecutive start dates, keeping
   only strictly positive gaps.
3. Period-length samples: ``end - start + 1`` for entries with two valid
   dates, keeping only samples in ``(0, max_sample_days]``.
4. Central tendency is the median of each sample set, not the mean, so a
   single skipped or doubled cycle doesn't drag the baseline.
5. Spread is the median absolute deviation (MAD) of cycle lengths, clamped
   to the configured uncertainty bounds (2–7 days by default).
6. Cycle length is clamped to 21–45 days, period length to 2–10 days
   (default 5 when no valid sample exists).

The estimator is pure: it never mutates its input and keeps no state.
"""

from __future__ import annotations

import logging
import math
import statistics
from dataclasses import dataclass
from typing import Iterable, Sequence

from lalin.cycle.config_loader import CycleConfig, get_cycle_config
from lalin.cycle.dates import days_between, parse_iso_date

logger = logging.getLogger("lalin.cycle.cycle_stats")


@dataclass(frozen=True)
class PeriodEntry:
    """A single logged period.

    Attributes:
        id:         Opaque identifier assigned by storage.
        start_date: First day of bleeding (``YYYY-MM-DD``).
        end_date:   Last day of bleeding, if logged.
        flow:       Intensity (light/medium/heavy). Passed through, unused.
        notes:      Free text. Unused.
        created_at: Storage timestamp. Unused.
    """

    id: str
    start_date: str
    end_date: str | None = None
    flow: str | None = None
    notes: str | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class DayRange:
    """Inclusive min/max bound in days."""

    min: int
    max: int


@dataclass(frozen=True)
class CycleStats:
    """Derived cycle statistics.  Recomputed on every call, never stored.

    Attributes:
        has_enough_data:         True when at least one valid cycle gap exists.
                                 Check this before trusting numeric fields.
        cycle_length_days:       Typical (median, clamped) cycle length.
        cycle_length_range_days: Plausible min/max cycle length.
        period_length_days:      Typical (median, clamped) bleeding duration.
        last_period_start:       Start date of the chronologically last entry.
        cycle_count:             Number of valid cycle gaps used.
        cycle_variability:       Clamped MAD of cycle lengths, in days.
    """

    has_enough_data: bool
    cycle_length_days: int | None = None
    cycle_length_range_days: DayRange | None = None
    period_length_days: int | None = None
    last_period_start: str | None = None
    cycle_count: int = 0
    cycle_variability: int | None = None


# ---------------------------------------------------------------------------
# Robust statistics helpers
# ---------------------------------------------------------------------------


def _round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; 28.5 must become 29
    return math.floor(value + 0.5)


def median(values: Iterable[int]) -> int | None:
    """Median of integer samples; even-length lists average the middle pair.

    Returns None for an empty input.
    """
    samples = list(values)
    if not samples:
        return None
    return _round_half_up(statistics.median(samples))


def median_absolute_deviation(values: Sequence[int], center: int | None = None) -> int | None:
    """Median of ``|x - center|``; ``center`` defaults to the median."""
    if not values:
        return None
    if center is None:
        center = median(values)
    return median(abs(v - center) for v in values)


def clamp(value: int, lower: int, upper: int) -> int:
    return min(upper, max(lower, value))


# ---------------------------------------------------------------------------
# Sample extraction
# ---------------------------------------------------------------------------


def sort_entries(entries: Iterable[PeriodEntry]) -> list[PeriodEntry]:
    """Return a new list ordered by start date ascending."""
    return sorted(entries, key=lambda e: e.start_date or "")


def cycle_length_samples(sorted_entries: Sequence[PeriodEntry]) -> list[int]:
    """Day gaps between consecutive parseable start dates.

    Zero and negative gaps (duplicate or malformed entries) are discarded.
    """
    starts = [
        d for d in (parse_iso_date(e.start_date) for e in sorted_entries) if d is not None
    ]
    samples: list[int] = []
    for previous, current in zip(starts, starts[1:]):
        gap = days_between(current, previous)
        if gap > 0:
            samples.append(gap)
    return samples


def period_length_samples(
    sorted_entries: Sequence[PeriodEntry],
    max_sample_days: int,
) -> list[int]:
    """Inclusive bleeding durations for entries with valid start and end dates."""
    samples: list[int] = []
    for entry in sorted_entries:
        if not entry.end_date:
            continue
        start = parse_iso_date(entry.start_date)
        end = parse_iso_date(entry.end_date)
        if start is None or end is None:
            continue
        days = days_between(end, start) + 1
        if 0 < days <= max_sample_days:
            samples.append(days)
    return samples


# ---------------------------------------------------------------------------
# Estimator
# ---------------------------------------------------------------------------


def compute_cycle_stats(
    entries: Iterable[PeriodEntry],
    config: CycleConfig | None = None,
) -> CycleStats:
    """Compute robust cycle and period length statistics.

    Never raises for any input shape.  Zero or one entry (or only duplicate
    dates) gives ``has_enough_data=False`` and no cycle length.

    Args:
        entries: Logged periods in any order.
        config:  Engine policy. Defaults to the bundled cycle_config.yaml.

    Returns:
        CycleStats for the history.
    """
    cfg = config or get_cycle_config()
    ordered = sort_entries(entries)

    cycle_samples = cycle_length_samples(ordered)
    period_samples = period_length_samples(ordered, cfg.period_length.max_sample_days)

    logger.debug(
        "Cycle stats from %d entries: %d cycle samples, %d period samples",
        len(ordered),
        len(cycle_samples),
        len(period_samples),
    )

    base_cycle = median(cycle_samples)
    base_period = median(period_samples)
    if base_period is None:
        base_period = cfg.period_length.default_days

    mad = 0
    if base_cycle:
        mad = median_absolute_deviation(cycle_samples, base_cycle) or 0

    unc = cfg.uncertainty
    uncertainty = clamp(max(unc.min_days, mad), unc.min_days, unc.max_days)

    cl = cfg.cycle_length
    cycle_length = clamp(base_cycle, cl.min_days, cl.max_days) if base_cycle else None

    cycle_range = None
    if cycle_length:
        cycle_range = DayRange(
            min=clamp(cycle_length - uncertainty, cl.min_days, cl.max_days),
            max=clamp(cycle_length + uncertainty, cl.min_days, cl.max_days),
        )

    return CycleStats(
        has_enough_data=len(cycle_samples) >= 1 and bool(cycle_length),
        cycle_length_days=cycle_length,
        cycle_length_range_days=cycle_range,
        period_length_days=clamp(
            base_period, cfg.period_length.min_days, cfg.period_length.max_days
        ),
        last_period_start=ordered[-1].start_date if ordered else None,
        cycle_count=len(cycle_samples),
        cycle_variability=uncertainty,
    )

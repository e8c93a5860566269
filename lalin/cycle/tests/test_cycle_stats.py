"""Tests for the cycle statistics estimator."""

from __future__ import annotations

import random
from datetime import date
from itertools import permutations

import pytest

from lalin.cycle.config_loader import CycleConfig
from lalin.cycle.cycle_stats import (
    DayRange,
    PeriodEntry,
    clamp,
    compute_cycle_stats,
    cycle_length_samples,
    median,
    median_absolute_deviation,
    period_length_samples,
    sort_entries,
)
from lalin.cycle.tests.conftest import build_history, make_entry


# ---------------------------------------------------------------------------
# Robust statistics helpers
# ---------------------------------------------------------------------------


class TestMedian:
    def test_empty_returns_none(self) -> None:
        assert median([]) is None

    def test_odd_length_takes_middle(self) -> None:
        assert median([30, 26, 28]) == 28

    def test_even_length_averages_middle_pair(self) -> None:
        assert median([26, 30, 28, 40]) == 29

    def test_even_length_rounds_half_up(self) -> None:
        # Banker's rounding would give 28 here
        assert median([28, 29]) == 29
        assert median([1, 2]) == 2

    def test_single_outlier_does_not_move_median(self) -> None:
        assert median([28, 28, 28, 28, 90]) == 28

    def test_accepts_generator(self) -> None:
        assert median(v for v in [26, 30, 28, 40]) == 29


class TestMedianAbsoluteDeviation:
    def test_empty_returns_none(self) -> None:
        assert median_absolute_deviation([]) is None

    def test_regular_samples_have_zero_spread(self) -> None:
        assert median_absolute_deviation([28, 28, 28]) == 0

    def test_spread_around_median(self) -> None:
        # median 29, deviations [3, 1, 1, 11] -> median 2
        assert median_absolute_deviation([26, 28, 30, 40]) == 2

    def test_explicit_center(self) -> None:
        assert median_absolute_deviation([25, 35, 28, 45, 30], center=30) == 5


class TestClamp:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(10, 21), (21, 21), (30, 30), (45, 45), (60, 45)],
    )
    def test_clamps_to_bounds(self, value: int, expected: int) -> None:
        assert clamp(value, 21, 45) == expected


# ---------------------------------------------------------------------------
# Sample extraction
# ---------------------------------------------------------------------------


class TestSamples:
    def test_sort_entries_orders_by_start_date(self) -> None:
        entries = [make_entry("2024-02-26"), make_entry("2024-01-01"), make_entry("2024-01-29")]
        assert [e.start_date for e in sort_entries(entries)] == [
            "2024-01-01",
            "2024-01-29",
            "2024-02-26",
        ]

    def test_cycle_samples_skip_duplicate_starts(self) -> None:
        entries = sort_entries(
            [make_entry("2024-01-01"), make_entry("2024-01-01"), make_entry("2024-01-29")]
        )
        assert cycle_length_samples(entries) == [28]

    def test_cycle_samples_skip_unparseable_starts(self) -> None:
        entries = sort_entries(
            [make_entry("2024-01-01"), make_entry("2024-01-15x"), make_entry("2024-01-29")]
        )
        assert cycle_length_samples(entries) == [28]

    def test_period_samples_are_inclusive(self) -> None:
        entries = [make_entry("2024-01-01", "2024-01-05")]
        assert period_length_samples(entries, max_sample_days=15) == [5]

    def test_same_day_period_counts_as_one_day(self) -> None:
        entries = [make_entry("2024-01-01", "2024-01-01")]
        assert period_length_samples(entries, max_sample_days=15) == [1]

    def test_period_samples_drop_implausible_lengths(self) -> None:
        entries = [
            make_entry("2024-01-10", "2024-01-05"),  # end before start
            make_entry("2024-02-01", "2024-02-20"),  # 20 days
            make_entry("2024-03-01", "2024-03-15"),  # exactly 15
            make_entry("2024-04-01", "2024-04-31"),  # impossible end date
            make_entry("2024-05-01"),                # no end
        ]
        assert period_length_samples(entries, max_sample_days=15) == [15]


# ---------------------------------------------------------------------------
# Estimator
# ---------------------------------------------------------------------------


class TestComputeCycleStats:
    def test_regular_history(self, regular_history: list[PeriodEntry]) -> None:
        stats = compute_cycle_stats(regular_history)
        assert stats.has_enough_data
        assert stats.cycle_length_days == 28
        assert stats.cycle_count == 2
        assert stats.period_length_days == 5  # default, no end dates
        assert stats.last_period_start == "2024-02-26"

    def test_zero_variability_is_floored(self, regular_history: list[PeriodEntry]) -> None:
        stats = compute_cycle_stats(regular_history)
        assert stats.cycle_variability == 2
        assert stats.cycle_length_range_days == DayRange(min=26, max=30)

    def test_empty_history(self) -> None:
        stats = compute_cycle_stats([])
        assert not stats.has_enough_data
        assert stats.cycle_length_days is None
        assert stats.cycle_length_range_days is None
        assert stats.last_period_start is None
        assert stats.cycle_count == 0

    def test_single_entry(self, single_entry: list[PeriodEntry]) -> None:
        stats = compute_cycle_stats(single_entry)
        assert not stats.has_enough_data
        assert stats.cycle_length_days is None
        assert stats.last_period_start == "2024-01-01"
        assert stats.period_length_days == 5

    def test_duplicate_dates_only(self) -> None:
        stats = compute_cycle_stats([make_entry("2024-01-01"), make_entry("2024-01-01")])
        assert not stats.has_enough_data
        assert stats.cycle_count == 0
        assert stats.last_period_start == "2024-01-01"

    def test_irregular_history_uses_mad(self, irregular_history: list[PeriodEntry]) -> None:
        stats = compute_cycle_stats(irregular_history)
        assert stats.cycle_length_days == 30
        assert stats.cycle_variability == 5
        assert stats.cycle_length_range_days == DayRange(min=25, max=35)
        assert stats.cycle_count == 5

    def test_variability_capped_at_seven(self) -> None:
        history = build_history(date(2023, 1, 1), [21, 45, 21, 45, 30])
        stats = compute_cycle_stats(history)
        assert stats.cycle_variability == 7

    def test_outlier_cycle_does_not_skew_baseline(self) -> None:
        # One missed log doubles a cycle
        history = build_history(date(2023, 1, 1), [28, 29, 56, 28, 28])
        stats = compute_cycle_stats(history)
        assert stats.cycle_length_days == 28

    def test_long_cycles_clamped(self) -> None:
        history = build_history(date(2023, 1, 1), [60, 60, 60])
        stats = compute_cycle_stats(history)
        assert stats.cycle_length_days == 45
        assert stats.cycle_length_range_days == DayRange(min=43, max=45)

    def test_short_cycles_clamped(self) -> None:
        history = build_history(date(2023, 1, 1), [15, 15, 15])
        stats = compute_cycle_stats(history)
        assert stats.cycle_length_days == 21
        assert stats.cycle_length_range_days == DayRange(min=21, max=23)

    def test_implausible_period_excluded(self) -> None:
        entries = [
            make_entry("2024-01-01"),
            make_entry("2024-01-29", "2024-02-17"),  # 20 days, entry error
            make_entry("2024-02-26", "2024-03-02"),  # 6 days
        ]
        stats = compute_cycle_stats(entries)
        assert stats.period_length_days == 6

    def test_period_length_clamped(self) -> None:
        long_periods = [
            make_entry("2024-01-01", "2024-01-13"),
            make_entry("2024-01-29", "2024-02-10"),
        ]
        assert compute_cycle_stats(long_periods).period_length_days == 10

        spotting = [
            make_entry("2024-01-01", "2024-01-01"),
            make_entry("2024-01-29", "2024-01-29"),
        ]
        assert compute_cycle_stats(spotting).period_length_days == 2

    def test_unparseable_last_start_still_reported(self) -> None:
        entries = [make_entry("2024-01-01"), make_entry("2024-01-29"), make_entry("2024-13-45")]
        stats = compute_cycle_stats(entries)
        assert stats.has_enough_data
        assert stats.cycle_length_days == 28
        assert stats.last_period_start == "2024-13-45"

    def test_order_independent(self, irregular_history: list[PeriodEntry]) -> None:
        expected = compute_cycle_stats(irregular_history)
        for perm in permutations(irregular_history[:4]):
            assert compute_cycle_stats(list(perm)) == compute_cycle_stats(irregular_history[:4])
        shuffled = list(irregular_history)
        random.Random(7).shuffle(shuffled)
        assert compute_cycle_stats(shuffled) == expected

    def test_input_not_mutated(self) -> None:
        entries = [make_entry("2024-02-26"), make_entry("2024-01-01"), make_entry("2024-01-29")]
        snapshot = list(entries)
        compute_cycle_stats(entries)
        assert entries == snapshot

    def test_accepts_any_iterable(self, regular_history: list[PeriodEntry]) -> None:
        stats = compute_cycle_stats(e for e in regular_history)
        assert stats.cycle_length_days == 28

    def test_custom_config(self, regular_history: list[PeriodEntry]) -> None:
        config = CycleConfig()
        stats = compute_cycle_stats(regular_history, config)
        assert stats.cycle_length_days == 28

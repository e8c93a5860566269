"""Tests for calendar day marking."""

from __future__ import annotations

from lalin.cycle.calendar import (
    DEFAULT_PALETTE,
    Dot,
    MarkedDate,
    add_log_dots,
    build_calendar_marks,
    build_period_marked_dates,
    build_prediction_marked_dates,
    most_recent_period_start,
)
from lalin.cycle.cycle_stats import PeriodEntry
from lalin.cycle.predictor import compute_predictions
from lalin.cycle.tests.conftest import TEST_TODAY, make_entry


class TestPeriodMarks:
    def test_marks_each_bleeding_day(self) -> None:
        marked = build_period_marked_dates([make_entry("2024-01-30", "2024-02-02")], "#f00")
        assert sorted(marked) == ["2024-01-30", "2024-01-31", "2024-02-01", "2024-02-02"]
        assert marked["2024-01-31"] == MarkedDate(
            selected=True, selected_color="#f00", kind="period"
        )

    def test_start_only_without_end(self) -> None:
        marked = build_period_marked_dates([make_entry("2024-01-01")])
        assert list(marked) == ["2024-01-01"]
        assert marked["2024-01-01"].selected_color == DEFAULT_PALETTE.period

    def test_overlapping_entries_merge(self) -> None:
        entries = [make_entry("2024-01-01", "2024-01-03"), make_entry("2024-01-03", "2024-01-04")]
        assert len(build_period_marked_dates(entries)) == 4

    def test_unparseable_entry_skipped(self) -> None:
        assert build_period_marked_dates([make_entry("2024-02-30")]) == {}


class TestPredictionMarks:
    def test_marks_range_window_and_ovulation(self, regular_history: list[PeriodEntry]) -> None:
        predictions = compute_predictions(regular_history, today=TEST_TODAY)
        marked = build_prediction_marked_dates(predictions)

        for day in ("2024-03-23", "2024-03-25", "2024-03-27"):
            assert marked[day].kind == "predicted_period"
        assert "2024-03-28" not in marked

        for day in ("2024-03-06", "2024-03-10"):
            assert marked[day].kind == "fertile"
            assert marked[day].selected_color == DEFAULT_PALETTE.fertile

        assert marked["2024-03-11"].kind == "ovulation"
        assert marked["2024-03-11"].selected_color == DEFAULT_PALETTE.ovulation

    def test_no_predictions_no_marks(self, single_entry: list[PeriodEntry]) -> None:
        predictions = compute_predictions(single_entry, today=TEST_TODAY)
        assert build_prediction_marked_dates(predictions) == {}


class TestCalendarMarks:
    def test_logged_period_overrides_prediction(self, regular_history: list[PeriodEntry]) -> None:
        predictions = compute_predictions(regular_history, today=TEST_TODAY)
        entries = regular_history + [make_entry("2024-03-24", "2024-03-25")]
        marked = build_calendar_marks(entries, predictions)
        assert marked["2024-03-24"].kind == "period"
        assert marked["2024-03-23"].kind == "predicted_period"

    def test_without_predictions(self, regular_history: list[PeriodEntry]) -> None:
        marked = build_calendar_marks(regular_history)
        assert set(marked) == {"2024-01-01", "2024-01-29", "2024-02-26"}

    def test_log_dots_added(self, regular_history: list[PeriodEntry]) -> None:
        marked = build_calendar_marks(
            regular_history,
            symptom_dates=["2024-01-01", "2024-01-05"],
            mood_dates=["2024-01-05"],
        )
        assert marked["2024-01-01"].kind == "period"
        assert marked["2024-01-01"].dots == (Dot("symptoms", DEFAULT_PALETTE.symptoms),)
        assert [d.key for d in marked["2024-01-05"].dots] == ["symptoms", "mood"]
        assert not marked["2024-01-05"].selected


class TestAddLogDots:
    def test_one_dot_per_key(self) -> None:
        marked = add_log_dots({}, symptom_dates=["2024-01-01", "2024-01-01"])
        assert len(marked["2024-01-01"].dots) == 1

    def test_does_not_mutate_input(self) -> None:
        original = {"2024-01-01": MarkedDate(selected=True)}
        add_log_dots(original, mood_dates=["2024-01-01"])
        assert original["2024-01-01"].dots == ()


class TestMostRecentPeriodStart:
    def test_latest_regardless_of_order(self) -> None:
        entries = [make_entry("2024-01-29"), make_entry("2024-02-26"), make_entry("2024-01-01")]
        assert most_recent_period_start(entries) == "2024-02-26"

    def test_ignores_unparseable(self) -> None:
        entries = [make_entry("2024-01-29"), make_entry("2024-13-01")]
        assert most_recent_period_start(entries) == "2024-01-29"

    def test_empty(self) -> None:
        assert most_recent_period_start([]) is None

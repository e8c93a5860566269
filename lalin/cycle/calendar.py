"""Calendar marking for logged periods and predictions.

Produces a ``{"YYYY-MM-DD": MarkedDate}`` mapping that calendar widgets can
render directly.  Logged periods always win over predicted days.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable

from lalin.cycle.config_loader import CycleConfig, get_cycle_config
from lalin.cycle.cycle_stats import PeriodEntry
from lalin.cycle.dates import enumerate_iso_dates, parse_iso_date
from lalin.cycle.predictor import Predictions

logger = logging.getLogger("lalin.cycle.calendar")


@dataclass(frozen=True)
class CalendarPalette:
    """Colours used when marking the calendar."""

    period: str = "#FC8181"
    predicted_period: str = "#FED7E2"
    fertile: str = "#9AE6B4"
    ovulation: str = "#48BB78"
    symptoms: str = "#9B87F5"
    mood: str = "#4A5568"


DEFAULT_PALETTE = CalendarPalette()


@dataclass(frozen=True)
class Dot:
    key: str
    color: str


@dataclass(frozen=True)
class MarkedDate:
    """Rendering hints for one calendar day.

    Attributes:
        selected:       Day is filled with ``selected_color``.
        selected_color: Fill colour.
        kind:           What the fill means: 'period', 'predicted_period',
                        'fertile' or 'ovulation'.
        dots:           Small indicators for logged symptoms / mood.
    """

    selected: bool = False
    selected_color: str | None = None
    kind: str | None = None
    dots: tuple[Dot, ...] = ()


MarkedDates = dict[str, MarkedDate]


def _fill(marked: MarkedDates, dates: Iterable[str], color: str, kind: str) -> None:
    for d in dates:
        existing = marked.get(d, MarkedDate())
        marked[d] = replace(existing, selected=True, selected_color=color, kind=kind)


def build_period_marked_dates(
    entries: Iterable[PeriodEntry],
    color: str = DEFAULT_PALETTE.period,
    config: CycleConfig | None = None,
) -> MarkedDates:
    """Mark every bleeding day of every logged period.

    Entries without an end date mark only their start day.  Overlapping
    entries merge into a single mark per day.
    """
    limit = (config or get_cycle_config()).calendar.max_enumerated_days
    marked: MarkedDates = {}
    for entry in entries:
        dates = enumerate_iso_dates(entry.start_date, entry.end_date or entry.start_date, limit)
        _fill(marked, dates, color, "period")
    return marked


def build_prediction_marked_dates(
    predictions: Predictions,
    palette: CalendarPalette = DEFAULT_PALETTE,
    config: CycleConfig | None = None,
) -> MarkedDates:
    """Mark the predicted period range, fertile window and ovulation day.

    Ovulation overrides the fertile window on the same day.  Returns an
    empty mapping when there are no predictions.
    """
    if not predictions.has_predictions:
        return {}

    limit = (config or get_cycle_config()).calendar.max_enumerated_days
    marked: MarkedDates = {}

    period_range = predictions.next_period.range
    _fill(
        marked,
        enumerate_iso_dates(period_range.start, period_range.end, limit),
        palette.predicted_period,
        "predicted_period",
    )

    window = predictions.fertile_window
    _fill(marked, enumerate_iso_dates(window.start, window.end, limit), palette.fertile, "fertile")
    _fill(marked, [predictions.ovulation.date], palette.ovulation, "ovulation")
    return marked


def add_log_dots(
    marked: MarkedDates,
    symptom_dates: Iterable[str] = (),
    mood_dates: Iterable[str] = (),
    palette: CalendarPalette = DEFAULT_PALETTE,
) -> MarkedDates:
    """Return a copy of ``marked`` with symptom and mood indicator dots.

    Each day carries at most one dot per key.
    """
    result = dict(marked)
    for key, dates, color in (
        ("symptoms", symptom_dates, palette.symptoms),
        ("mood", mood_dates, palette.mood),
    ):
        for d in dates:
            existing = result.get(d, MarkedDate())
            if any(dot.key == key for dot in existing.dots):
                continue
            result[d] = replace(existing, dots=existing.dots + (Dot(key=key, color=color),))
    return result


def build_calendar_marks(
    entries: Iterable[PeriodEntry],
    predictions: Predictions | None = None,
    symptom_dates: Iterable[str] = (),
    mood_dates: Iterable[str] = (),
    palette: CalendarPalette = DEFAULT_PALETTE,
    config: CycleConfig | None = None,
) -> MarkedDates:
    """Combine predictions, logged periods and log dots into one mapping."""
    marked: MarkedDates = {}
    if predictions is not None:
        marked.update(build_prediction_marked_dates(predictions, palette, config))

    for d, mark in build_period_marked_dates(entries, palette.period, config).items():
        existing = marked.get(d, MarkedDate())
        marked[d] = replace(
            existing,
            selected=True,
            selected_color=mark.selected_color,
            kind=mark.kind,
        )

    logger.debug("Built calendar marks for %d days", len(marked))
    return add_log_dots(marked, symptom_dates, mood_dates, palette)


def most_recent_period_start(entries: Iterable[PeriodEntry]) -> str | None:
    """Latest parseable start date, regardless of input order."""
    starts = [e.start_date for e in entries if parse_iso_date(e.start_date) is not None]
    return max(starts) if starts else None

"""Cycle predictor.

Projects CycleStats forward into calendar predictions:
- Next period start and plausible range
- Ovulation date (fixed luteal phase before the next period)
- Fertile window (5 days before ovulation + ovulation day)

Each prediction carries a confidence band.  With too little history the
predictor returns stats only — that is the normal state for new users, not
an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Iterable

from lalin.cycle.config_loader import CycleConfig, get_cycle_config
from lalin.cycle.cycle_stats import CycleStats, PeriodEntry, compute_cycle_stats
from lalin.cycle.dates import days_between, parse_iso_date, to_iso_date_string

logger = logging.getLogger("lalin.cycle.predictor")


class ConfidenceLevel(str, Enum):
    """Confidence band for a prediction.

    Thresholds (cycle_config.yaml):
        HIGH    score >= 70
        MEDIUM  score >= 40
        LOW     otherwise
    """

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class CyclePhase(str, Enum):
    MENSTRUAL = "menstrual"
    FOLLICULAR = "follicular"
    OVULATION = "ovulation"
    LUTEAL = "luteal"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Confidence:
    level: ConfidenceLevel
    percentage: int


@dataclass(frozen=True)
class DateRange:
    """Inclusive ``YYYY-MM-DD`` date range."""

    start: str
    end: str


@dataclass(frozen=True)
class NextPeriodPrediction:
    """Predicted next period.

    Attributes:
        start:                 Best estimate for the first day.
        range:                 Plausible window, anchored to the last period start.
        days_until_start:      ``start - today``; negative when overdue.
        confidence:            Confidence band.
        confidence_percentage: 0–100 score.
    """

    start: str
    range: DateRange
    days_until_start: int
    confidence: ConfidenceLevel
    confidence_percentage: int


@dataclass(frozen=True)
class OvulationPrediction:
    date: str
    confidence: ConfidenceLevel
    confidence_percentage: int


@dataclass(frozen=True)
class FertileWindowPrediction:
    start: str
    end: str
    confidence: ConfidenceLevel
    confidence_percentage: int


@dataclass(frozen=True)
class Predictions:
    """Stats plus optional forward predictions.

    The three prediction fields are either all set or all None.
    """

    stats: CycleStats
    next_period: NextPeriodPrediction | None = None
    ovulation: OvulationPrediction | None = None
    fertile_window: FertileWindowPrediction | None = None

    @property
    def has_predictions(self) -> bool:
        return self.next_period is not None


def calculate_confidence(
    cycle_count: int,
    variability: int,
    config: CycleConfig | None = None,
) -> Confidence:
    """Score prediction confidence from history size and regularity.

    More cycles raise the score (10 points each, capped at 70); more spread
    lowers it (5 points per day of variability, capped at 30).  The score is
    floored at 0.
    """
    c = (config or get_cycle_config()).confidence
    base_score = min(cycle_count * c.points_per_cycle, c.max_cycle_points)
    variability_penalty = min(variability * c.penalty_per_variability_day, c.max_variability_penalty)
    score = max(0, base_score - variability_penalty)

    if score >= c.high_threshold:
        level = ConfidenceLevel.HIGH
    elif score >= c.medium_threshold:
        level = ConfidenceLevel.MEDIUM
    else:
        level = ConfidenceLevel.LOW

    return Confidence(level=level, percentage=round(score))


def compute_predictions(
    entries: Iterable[PeriodEntry],
    today: date | None = None,
    config: CycleConfig | None = None,
) -> Predictions:
    """Compute cycle stats and, when possible, forward predictions.

    Args:
        entries: Logged periods in any order.
        today:   Reference date for ``days_until_start``. Defaults to today.
        config:  Engine policy. Defaults to the bundled cycle_config.yaml.

    Returns:
        Predictions; prediction fields are None when history is insufficient.
    """
    cfg = config or get_cycle_config()
    today = today or date.today()
    stats = compute_cycle_stats(entries, cfg)

    if not stats.cycle_length_days or not stats.last_period_start:
        return Predictions(stats=stats)

    last_start = parse_iso_date(stats.last_period_start)
    if last_start is None:
        logger.debug("Last period start %r is unparseable; no predictions", stats.last_period_start)
        return Predictions(stats=stats)

    next_start = last_start + timedelta(days=stats.cycle_length_days)

    # Range is anchored to the last start, not the predicted start
    range_days = stats.cycle_length_range_days
    if range_days is None:
        pad = cfg.cycle_length.fallback_range_padding_days
        range_min, range_max = stats.cycle_length_days - pad, stats.cycle_length_days + pad
    else:
        range_min, range_max = range_days.min, range_days.max
    period_range = DateRange(
        start=to_iso_date_string(last_start + timedelta(days=range_min)),
        end=to_iso_date_string(last_start + timedelta(days=range_max)),
    )

    ovulation_date = next_start - timedelta(days=cfg.ovulation.luteal_phase_days)
    fertile_start = ovulation_date - timedelta(days=cfg.ovulation.fertile_days_before)

    variability = stats.cycle_variability
    if variability is None:
        variability = cfg.uncertainty.max_days
    confidence = calculate_confidence(stats.cycle_count, variability, cfg)
    ovulation_pct = max(confidence.percentage - cfg.confidence.ovulation_offset, 0)

    return Predictions(
        stats=stats,
        next_period=NextPeriodPrediction(
            start=to_iso_date_string(next_start),
            range=period_range,
            days_until_start=days_between(next_start, today),
            confidence=confidence.level,
            confidence_percentage=confidence.percentage,
        ),
        ovulation=OvulationPrediction(
            date=to_iso_date_string(ovulation_date),
            confidence=confidence.level,
            confidence_percentage=ovulation_pct,
        ),
        fertile_window=FertileWindowPrediction(
            start=to_iso_date_string(fertile_start),
            end=to_iso_date_string(ovulation_date),
            confidence=confidence.level,
            confidence_percentage=ovulation_pct,
        ),
    )


def estimate_current_phase(
    predictions: Predictions,
    today: date,
    config: CycleConfig | None = None,
) -> CyclePhase:
    """Classify ``today`` into a cycle phase.

    Day 1 is the last period start.  Within the typical period length the
    phase is menstrual; within a day of predicted ovulation it's ovulation;
    before that follicular; after it luteal until the cycle length runs out.
    Anything outside the current cycle is unknown.
    """
    stats = predictions.stats
    last_start = parse_iso_date(stats.last_period_start)
    if last_start is None or not stats.cycle_length_days:
        return CyclePhase.UNKNOWN

    cycle_day = days_between(today, last_start) + 1
    if cycle_day <= 0:
        return CyclePhase.UNKNOWN

    period_length = stats.period_length_days
    if period_length is None:
        period_length = (config or get_cycle_config()).period_length.default_days
    if cycle_day <= period_length:
        return CyclePhase.MENSTRUAL

    ovulation_date = parse_iso_date(predictions.ovulation.date) if predictions.ovulation else None
    if ovulation_date is not None:
        if abs(days_between(today, ovulation_date)) <= 1:
            return CyclePhase.OVULATION
        if today < ovulation_date:
            return CyclePhase.FOLLICULAR

    if cycle_day <= stats.cycle_length_days:
        return CyclePhase.LUTEAL
    return CyclePhase.UNKNOWN

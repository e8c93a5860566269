"""Cycle statistics and prediction engine for Lalin.

Pure, stateless functions: hand in a snapshot of logged periods, get back
derived statistics and predictions.  Nothing here touches storage.

Modules:
    cycle_stats   — Robust cycle/period length estimation (median + MAD)
    predictor     — Next period, ovulation and fertile window predictions
    calendar      — Calendar day marking for periods and predictions
    reminders     — Reminder planning from predictions
    insights      — Recent symptom / mood summaries
    dates         — Calendar-date helpers
    config_loader — Load/validate/hot-reload cycle_config.yaml
"""

from lalin.cycle.config_loader import CycleConfig, get_cycle_config
from lalin.cycle.cycle_stats import CycleStats, PeriodEntry, compute_cycle_stats
from lalin.cycle.predictor import (
    ConfidenceLevel,
    CyclePhase,
    Predictions,
    compute_predictions,
    estimate_current_phase,
)

__all__ = [
    "CycleConfig",
    "get_cycle_config",
    "PeriodEntry",
    "CycleStats",
    "compute_cycle_stats",
    "ConfidenceLevel",
    "CyclePhase",
    "Predictions",
    "compute_predictions",
    "estimate_current_phase",
]

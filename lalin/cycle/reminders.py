"""Reminder planning from cycle predictions.

Notification preferences are an explicit ``NotificationSettings`` record passed
in by the caller — there is no module-level settings object.  The planner is
pure: it returns what should be scheduled and leaves the actual scheduling
(and cancelling stale reminders) to the platform layer.  Recompute the plan
whenever period data changes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, time, timedelta
from enum import Enum

from lalin.cycle.config_loader import CycleConfig, get_cycle_config
from lalin.cycle.dates import parse_iso_date, to_iso_date_string
from lalin.cycle.predictor import Predictions

logger = logging.getLogger("lalin.cycle.reminders")


class ReminderKind(str, Enum):
    DAILY_LOG = "daily_log"
    PERIOD = "period"
    FERTILE_WINDOW = "fertile_window"


@dataclass(frozen=True)
class NotificationSettings:
    """User notification preferences.

    Attributes:
        daily_reminder_enabled:   Daily "log your day" reminder.
        period_reminder_enabled:  One-shot reminder before the next period.
        fertile_reminder_enabled: One-shot reminder when the fertile window opens.
        daily_reminder_time:      Time of the daily reminder (default 20:00).
        period_reminder_time:     Time of one-shot reminders (default 09:00).
        period_lead_days:         Days before the predicted range start to
                                  send the period reminder.
    """

    daily_reminder_enabled: bool = False
    period_reminder_enabled: bool = False
    fertile_reminder_enabled: bool = False
    daily_reminder_time: time | None = None
    period_reminder_time: time | None = None
    period_lead_days: int | None = None


@dataclass(frozen=True)
class ReminderPlan:
    """One reminder the platform layer should schedule.

    ``fire_date`` is None for repeating daily reminders.
    """

    kind: ReminderKind
    at: time
    repeats_daily: bool = False
    fire_date: str | None = None


def plan_reminders(
    settings: NotificationSettings,
    predictions: Predictions,
    today: date | None = None,
    config: CycleConfig | None = None,
) -> list[ReminderPlan]:
    """Decide which reminders to schedule.

    One-shot reminders whose fire date is already before ``today`` are
    dropped.  Prediction-based reminders are skipped when there are no
    predictions.

    Args:
        settings:    Notification preferences.
        predictions: Output of ``compute_predictions``.
        today:       Reference date. Defaults to today.
        config:      Engine policy for default times and lead days.

    Returns:
        Reminder plans, daily first.
    """
    rc = (config or get_cycle_config()).reminders
    today = today or date.today()
    plans: list[ReminderPlan] = []

    if settings.daily_reminder_enabled:
        plans.append(
            ReminderPlan(
                kind=ReminderKind.DAILY_LOG,
                at=settings.daily_reminder_time or time(rc.daily_hour, rc.daily_minute),
                repeats_daily=True,
            )
        )

    one_shot_at = settings.period_reminder_time or time(rc.period_hour, rc.period_minute)

    if settings.period_reminder_enabled and predictions.next_period is not None:
        lead = settings.period_lead_days
        if lead is None:
            lead = rc.period_lead_days
        range_start = parse_iso_date(predictions.next_period.range.start)
        fire = range_start - timedelta(days=lead)
        if fire >= today:
            plans.append(
                ReminderPlan(
                    kind=ReminderKind.PERIOD,
                    at=one_shot_at,
                    fire_date=to_iso_date_string(fire),
                )
            )
        else:
            logger.debug("Period reminder for %s already passed; skipping", fire)

    if settings.fertile_reminder_enabled and predictions.fertile_window is not None:
        fire = parse_iso_date(predictions.fertile_window.start)
        if fire >= today:
            plans.append(
                ReminderPlan(
                    kind=ReminderKind.FERTILE_WINDOW,
                    at=one_shot_at,
                    fire_date=to_iso_date_string(fire),
                )
            )
        else:
            logger.debug("Fertile window reminder for %s already passed; skipping", fire)

    return plans

"""Stateless cycle engine endpoints.

Each request carries its own snapshot of logged periods; nothing is stored
and every response is recomputed from scratch.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Annotated, Any

from fastapi import APIRouter, Query

from lalin.cycle.calendar import build_calendar_marks
from lalin.cycle.cycle_stats import compute_cycle_stats
from lalin.cycle.insights import summarize_recent_logs
from lalin.cycle.predictor import compute_predictions, estimate_current_phase
from lalin.cycle.reminders import plan_reminders
from lalin.dependencies import EngineConfig
from lalin.models.tracking import (
    CalendarRequest,
    CycleStatsRead,
    InsightsRead,
    InsightsRequest,
    MarkedDateRead,
    PeriodHistory,
    PredictionsRead,
    ReminderPlanRead,
    ReminderRequest,
    SymptomCountRead,
)

router = APIRouter(prefix="/cycle", tags=["cycle"])
logger = logging.getLogger("lalin.routers.cycle")

TodayParam = Annotated[date | None, Query(description="Reference date, defaults to today")]


@router.post("/stats", response_model=CycleStatsRead)
async def cycle_stats(body: PeriodHistory, config: EngineConfig) -> Any:
    return compute_cycle_stats(body.to_entries(), config)


@router.post("/predictions", response_model=PredictionsRead)
async def predictions(
    body: PeriodHistory,
    config: EngineConfig,
    today: TodayParam = None,
) -> Any:
    today = today or date.today()
    result = compute_predictions(body.to_entries(), today, config)
    read = PredictionsRead.model_validate(result)
    phase = estimate_current_phase(result, today, config)
    return read.model_copy(update={"current_phase": phase})


@router.post("/calendar", response_model=dict[str, MarkedDateRead])
async def calendar(
    body: CalendarRequest,
    config: EngineConfig,
    today: TodayParam = None,
) -> Any:
    entries = body.to_entries()
    result = compute_predictions(entries, today, config)
    return build_calendar_marks(
        entries,
        result,
        symptom_dates=body.symptom_dates,
        mood_dates=body.mood_dates,
        config=config,
    )


@router.post("/reminders", response_model=list[ReminderPlanRead])
async def reminders(
    body: ReminderRequest,
    config: EngineConfig,
    today: TodayParam = None,
) -> Any:
    today = today or date.today()
    result = compute_predictions(body.to_entries(), today, config)
    plans = plan_reminders(body.settings.to_settings(), result, today, config)
    logger.info("Planned %d reminder(s)", len(plans))
    return plans


@router.post("/insights", response_model=InsightsRead)
async def insights(
    body: InsightsRequest,
    config: EngineConfig,
    today: TodayParam = None,
) -> Any:
    stats = compute_cycle_stats(body.to_entries(), config)
    summary = summarize_recent_logs(
        [s.to_entry() for s in body.symptoms],
        body.moods_by_date,
        today=today,
        stats=stats,
        periods_logged=len(body.entries),
        config=config,
    )
    return InsightsRead(
        stats=CycleStatsRead.model_validate(stats),
        mood_counts=summary.mood_counts,
        top_symptoms=[SymptomCountRead.model_validate(c) for c in summary.top_symptoms],
        hint=summary.hint,
        periods_logged=summary.periods_logged,
    )

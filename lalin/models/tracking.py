"""Pydantic request/response schemas for cycle tracking.

Dates must be ``YYYY-MM-DD`` strings at this boundary.  Well-shaped but
impossible dates (``2024-02-30``) pass validation and are ignored by the
engine.
"""

from __future__ import annotations

from datetime import time
from enum import Enum
from typing import Annotated

from pydantic import Field

from lalin.cycle.cycle_stats import PeriodEntry
from lalin.cycle.dates import ISO_DATE_PATTERN
from lalin.cycle.insights import MoodKey, SymptomEntry
from lalin.cycle.predictor import ConfidenceLevel, CyclePhase
from lalin.cycle.reminders import NotificationSettings, ReminderKind
from lalin.models.base import LalinBase

IsoDate = Annotated[str, Field(pattern=ISO_DATE_PATTERN)]


# ---------- Enums ----------

class FlowLevel(str, Enum):
    light = "light"
    medium = "medium"
    heavy = "heavy"


# ---------- Input ----------

class PeriodEntryIn(LalinBase):
    id: str = ""
    start_date: IsoDate
    end_date: IsoDate | None = None
    flow: FlowLevel | None = None
    notes: str | None = None
    created_at: str | None = None

    def to_entry(self) -> PeriodEntry:
        return PeriodEntry(
            id=self.id,
            start_date=self.start_date,
            end_date=self.end_date,
            flow=self.flow.value if self.flow else None,
            notes=self.notes,
            created_at=self.created_at,
        )


class SymptomEntryIn(LalinBase):
    id: str = ""
    date: IsoDate
    symptoms: list[str] = Field(default_factory=list)
    mood: MoodKey | None = None
    notes: str | None = None

    def to_entry(self) -> SymptomEntry:
        return SymptomEntry(
            id=self.id,
            date=self.date,
            symptoms=tuple(self.symptoms),
            mood=self.mood,
            notes=self.notes,
        )


class NotificationSettingsIn(LalinBase):
    daily_reminder_enabled: bool = False
    period_reminder_enabled: bool = False
    fertile_reminder_enabled: bool = False
    daily_reminder_time: time | None = None
    period_reminder_time: time | None = None
    period_lead_days: int | None = Field(default=None, ge=0, le=14)

    def to_settings(self) -> NotificationSettings:
        return NotificationSettings(**self.model_dump())


class PeriodHistory(LalinBase):
    """A snapshot of logged periods."""

    entries: list[PeriodEntryIn] = Field(default_factory=list)

    def to_entries(self) -> list[PeriodEntry]:
        return [e.to_entry() for e in self.entries]


class CalendarRequest(PeriodHistory):
    symptom_dates: list[IsoDate] = Field(default_factory=list)
    mood_dates: list[IsoDate] = Field(default_factory=list)


class ReminderRequest(PeriodHistory):
    settings: NotificationSettingsIn = Field(default_factory=NotificationSettingsIn)


class InsightsRequest(PeriodHistory):
    symptoms: list[SymptomEntryIn] = Field(default_factory=list)
    moods_by_date: dict[IsoDate, MoodKey] = Field(default_factory=dict)


# ---------- Output ----------

class DayRangeRead(LalinBase):
    min: int
    max: int


class CycleStatsRead(LalinBase):
    has_enough_data: bool
    cycle_length_days: int | None = None
    cycle_length_range_days: DayRangeRead | None = None
    period_length_days: int | None = None
    last_period_start: str | None = None
    cycle_count: int = 0
    cycle_variability: int | None = None


class DateRangeRead(LalinBase):
    start: str
    end: str


class NextPeriodRead(LalinBase):
    start: str
    range: DateRangeRead
    days_until_start: int
    confidence: ConfidenceLevel
    confidence_percentage: int


class OvulationRead(LalinBase):
    date: str
    confidence: ConfidenceLevel
    confidence_percentage: int


class FertileWindowRead(LalinBase):
    start: str
    end: str
    confidence: ConfidenceLevel
    confidence_percentage: int


class PredictionsRead(LalinBase):
    stats: CycleStatsRead
    next_period: NextPeriodRead | None = None
    ovulation: OvulationRead | None = None
    fertile_window: FertileWindowRead | None = None
    current_phase: CyclePhase = CyclePhase.UNKNOWN


class DotRead(LalinBase):
    key: str
    color: str


class MarkedDateRead(LalinBase):
    selected: bool = False
    selected_color: str | None = None
    kind: str | None = None
    dots: list[DotRead] = Field(default_factory=list)


class ReminderPlanRead(LalinBase):
    kind: ReminderKind
    at: time
    repeats_daily: bool = False
    fire_date: str | None = None


class SymptomCountRead(LalinBase):
    key: str
    count: int


class InsightsRead(LalinBase):
    stats: CycleStatsRead
    mood_counts: dict[MoodKey, int] = Field(default_factory=dict)
    top_symptoms: list[SymptomCountRead] = Field(default_factory=list)
    hint: str | None = None
    periods_logged: int = 0

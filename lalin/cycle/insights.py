"""Recent-log insights: mood counts, top symptoms and a symptom→mood hint.

Looks at the last 30 days (``insights.lookback_days``) of symptom and mood
logs and surfaces what the user logs most often, e.g. "cramps → tired".
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, Mapping

from lalin.cycle.config_loader import CycleConfig, get_cycle_config
from lalin.cycle.cycle_stats import CycleStats
from lalin.cycle.dates import parse_iso_date

logger = logging.getLogger("lalin.cycle.insights")


class MoodKey(str, Enum):
    HAPPY = "happy"
    SAD = "sad"
    ANXIOUS = "anxious"
    IRRITABLE = "irritable"
    CALM = "calm"
    ENERGETIC = "energetic"
    TIRED = "tired"


@dataclass(frozen=True)
class SymptomEntry:
    """A day's logged symptoms.

    Attributes:
        id:         Opaque identifier assigned by storage.
        date:       ``YYYY-MM-DD``.
        symptoms:   Symptom keys ('cramps', 'headache', ...).
        mood:       Mood logged alongside the symptoms, if any.
    """

    id: str
    date: str
    symptoms: tuple[str, ...] = ()
    mood: MoodKey | None = None
    notes: str | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class SymptomCount:
    key: str
    count: int


@dataclass
class LogInsights:
    """Summary of recent logs for the insights view.

    Attributes:
        mood_counts:  Mood → days logged within the lookback window.
        top_symptoms: Most frequent symptoms, most frequent first.
        hint:         ``"<symptom> → <mood>"`` for the top symptom's most
                      common accompanying mood, if any.
        periods_logged: Number of period entries behind the stats.
        has_enough_data: Mirrors CycleStats.has_enough_data.
    """

    mood_counts: dict[MoodKey, int] = field(default_factory=dict)
    top_symptoms: list[SymptomCount] = field(default_factory=list)
    hint: str | None = None
    periods_logged: int = 0
    has_enough_data: bool = False


def _within(value: str, cutoff: date) -> bool:
    parsed = parse_iso_date(value)
    return parsed is not None and parsed >= cutoff


def _mood_key(value: MoodKey | str | None) -> MoodKey | None:
    if not value:
        return None
    try:
        return MoodKey(value)
    except ValueError:
        logger.debug("Ignoring unknown mood %r", value)
        return None


def summarize_recent_logs(
    symptoms: Iterable[SymptomEntry],
    moods_by_date: Mapping[str, MoodKey | str],
    today: date | None = None,
    lookback_days: int | None = None,
    stats: CycleStats | None = None,
    periods_logged: int = 0,
    config: CycleConfig | None = None,
) -> LogInsights:
    """Summarize symptom and mood logs from the last ``lookback_days``.

    Logs with unparseable dates and moods outside ``MoodKey`` are ignored.
    Ties between equally frequent symptoms keep first-seen order.
    """
    ic = (config or get_cycle_config()).insights
    today = today or date.today()
    if lookback_days is None:
        lookback_days = ic.lookback_days
    cutoff = today - timedelta(days=lookback_days)

    mood_counts: Counter[MoodKey] = Counter()
    for day, value in moods_by_date.items():
        mood = _mood_key(value)
        if mood and _within(day, cutoff):
            mood_counts[mood] += 1

    symptom_counts: Counter[str] = Counter()
    moods_per_symptom: dict[str, Counter[MoodKey]] = {}
    for entry in symptoms:
        if not _within(entry.date, cutoff):
            continue
        mood = _mood_key(entry.mood)
        for key in entry.symptoms:
            symptom_counts[key] += 1
            if mood:
                moods_per_symptom.setdefault(key, Counter())[mood] += 1

    top = [
        SymptomCount(key=k, count=c)
        for k, c in symptom_counts.most_common(ic.top_symptom_limit)
    ]

    hint = None
    if top:
        accompanying = moods_per_symptom.get(top[0].key)
        if accompanying:
            mood, count = accompanying.most_common(1)[0]
            if count > 0:
                hint = f"{top[0].key} → {mood.value}"

    logger.debug(
        "Summarized %d symptom keys and %d mood days since %s",
        len(symptom_counts),
        sum(mood_counts.values()),
        cutoff,
    )

    return LogInsights(
        mood_counts=dict(mood_counts),
        top_symptoms=top,
        hint=hint,
        periods_logged=periods_logged,
        has_enough_data=stats.has_enough_data if stats else False,
    )

"""Load, validate, and hot-reload the cycle engine policy.

The policy lives in ``cycle_config.yaml`` alongside this module.  It is loaded
once on first use and cached.  Call ``reload_cycle_config()`` to re-read from
disk — no restart required.

Usage::

    from lalin.cycle.config_loader import get_cycle_config

    config = get_cycle_config()
    config.cycle_length.min_days        # 21
    config.confidence.high_threshold    # 70
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger("lalin.cycle.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "cycle_config.yaml"


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CycleLengthConfig:
    """Plausible cycle length bounds (start-to-start, in days)."""

    min_days: int = 21
    max_days: int = 45
    fallback_range_padding_days: int = 2


@dataclass(frozen=True)
class PeriodLengthConfig:
    """Bleeding duration bounds and defaults."""

    min_days: int = 2
    max_days: int = 10
    default_days: int = 5
    max_sample_days: int = 15


@dataclass(frozen=True)
class UncertaintyConfig:
    """Clamp applied to the MAD of cycle lengths."""

    min_days: int = 2
    max_days: int = 7


@dataclass(frozen=True)
class OvulationConfig:
    """Luteal phase and fertile window assumptions."""

    luteal_phase_days: int = 14
    fertile_days_before: int = 5


@dataclass(frozen=True)
class ConfidenceConfig:
    """Confidence scoring policy.

    score = max(0, min(cycles * points_per_cycle, max_cycle_points)
                   - min(variability * penalty_per_variability_day,
                         max_variability_penalty))
    """

    points_per_cycle: int = 10
    max_cycle_points: int = 70
    penalty_per_variability_day: int = 5
    max_variability_penalty: int = 30
    high_threshold: int = 70    # ≥ this = high
    medium_threshold: int = 40  # ≥ this = medium
    ovulation_offset: int = 10


@dataclass(frozen=True)
class CalendarConfig:
    max_enumerated_days: int = 400


@dataclass(frozen=True)
class ReminderConfig:
    """Default reminder times used when settings don't override them."""

    daily_hour: int = 20
    daily_minute: int = 0
    period_hour: int = 9
    period_minute: int = 0
    period_lead_days: int = 2


@dataclass(frozen=True)
class InsightsConfig:
    """Recent-log summary window."""

    lookback_days: int = 30
    top_symptom_limit: int = 4


@dataclass(frozen=True)
class CycleConfig:
    """Complete, validated cycle engine policy.

    This is the single in-memory representation of cycle_config.yaml.
    Every engine function reads from it.

    Attributes:
        version:       Config schema version string.
        cycle_length:  Cycle length clamp and range fallback.
        period_length: Period length clamp, default and sample cutoff.
        uncertainty:   Clamp for the cycle variability (MAD).
        ovulation:     Luteal phase and fertile window lengths.
        confidence:    Confidence scoring constants and band thresholds.
        calendar:      Date enumeration cap.
        reminders:     Default reminder times.
        insights:      Lookback window and top-symptom count.
    """

    version: str = "1.0"
    cycle_length: CycleLengthConfig = field(default_factory=CycleLengthConfig)
    period_length: PeriodLengthConfig = field(default_factory=PeriodLengthConfig)
    uncertainty: UncertaintyConfig = field(default_factory=UncertaintyConfig)
    ovulation: OvulationConfig = field(default_factory=OvulationConfig)
    confidence: ConfidenceConfig = field(default_factory=ConfidenceConfig)
    calendar: CalendarConfig = field(default_factory=CalendarConfig)
    reminders: ReminderConfig = field(default_factory=ReminderConfig)
    insights: InsightsConfig = field(default_factory=InsightsConfig)


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when cycle_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Cycle config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            raw = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigValidationError(f"{path} must contain a mapping at the top level")
    return raw


def _validate_and_build(raw: dict) -> CycleConfig:
    """Validate the raw YAML dict and construct a CycleConfig.

    Missing keys fall back to the built-in defaults.  All problems are
    collected and reported together.

    Raises:
        ConfigValidationError: If any value is invalid.
    """
    errors: list[str] = []

    def _section(name: str) -> dict:
        value = raw.get(name, {})
        if value is None:
            return {}
        if not isinstance(value, dict):
            errors.append(f"'{name}' must be a mapping")
            return {}
        return value

    def _int(d: dict, key: str, section: str, default: int) -> int:
        value = d.get(key, default)
        if isinstance(value, bool):
            errors.append(f"{section}.{key} must be an integer, got {value!r}")
            return default
        try:
            n = int(value)
        except (TypeError, ValueError):
            errors.append(f"{section}.{key} must be an integer, got {value!r}")
            return default
        if n < 0:
            errors.append(f"{section}.{key} = {n} must not be negative")
        return n

    def _bounds(section: str, lo: int, hi: int) -> None:
        if lo > hi:
            errors.append(f"{section}.min_days ({lo}) exceeds {section}.max_days ({hi})")

    version = str(raw.get("version", "1.0"))

    # ── Cycle length ──
    cl_raw = _section("cycle_length")
    defaults = CycleLengthConfig()
    cycle_length = CycleLengthConfig(
        min_days=_int(cl_raw, "min_days", "cycle_length", defaults.min_days),
        max_days=_int(cl_raw, "max_days", "cycle_length", defaults.max_days),
        fallback_range_padding_days=_int(
            cl_raw,
            "fallback_range_padding_days",
            "cycle_length",
            defaults.fallback_range_padding_days,
        ),
    )
    _bounds("cycle_length", cycle_length.min_days, cycle_length.max_days)

    # ── Period length ──
    pl_raw = _section("period_length")
    pl_defaults = PeriodLengthConfig()
    period_length = PeriodLengthConfig(
        min_days=_int(pl_raw, "min_days", "period_length", pl_defaults.min_days),
        max_days=_int(pl_raw, "max_days", "period_length", pl_defaults.max_days),
        default_days=_int(pl_raw, "default_days", "period_length", pl_defaults.default_days),
        max_sample_days=_int(
            pl_raw, "max_sample_days", "period_length", pl_defaults.max_sample_days
        ),
    )
    _bounds("period_length", period_length.min_days, period_length.max_days)

    # ── Uncertainty ──
    u_raw = _section("uncertainty")
    u_defaults = UncertaintyConfig()
    uncertainty = UncertaintyConfig(
        min_days=_int(u_raw, "min_days", "uncertainty", u_defaults.min_days),
        max_days=_int(u_raw, "max_days", "uncertainty", u_defaults.max_days),
    )
    _bounds("uncertainty", uncertainty.min_days, uncertainty.max_days)

    # ── Ovulation ──
    ov_raw = _section("ovulation")
    ov_defaults = OvulationConfig()
    ovulation = OvulationConfig(
        luteal_phase_days=_int(
            ov_raw, "luteal_phase_days", "ovulation", ov_defaults.luteal_phase_days
        ),
        fertile_days_before=_int(
            ov_raw, "fertile_days_before", "ovulation", ov_defaults.fertile_days_before
        ),
    )

    # ── Confidence ──
    c_raw = _section("confidence")
    c_defaults = ConfidenceConfig()
    thresholds_raw = c_raw.get("thresholds", {}) or {}
    if not isinstance(thresholds_raw, dict):
        errors.append("confidence.thresholds must be a mapping")
        thresholds_raw = {}
    confidence = ConfidenceConfig(
        points_per_cycle=_int(
            c_raw, "points_per_cycle", "confidence", c_defaults.points_per_cycle
        ),
        max_cycle_points=_int(
            c_raw, "max_cycle_points", "confidence", c_defaults.max_cycle_points
        ),
        penalty_per_variability_day=_int(
            c_raw,
            "penalty_per_variability_day",
            "confidence",
            c_defaults.penalty_per_variability_day,
        ),
        max_variability_penalty=_int(
            c_raw,
            "max_variability_penalty",
            "confidence",
            c_defaults.max_variability_penalty,
        ),
        high_threshold=_int(
            thresholds_raw, "high", "confidence.thresholds", c_defaults.high_threshold
        ),
        medium_threshold=_int(
            thresholds_raw, "medium", "confidence.thresholds", c_defaults.medium_threshold
        ),
        ovulation_offset=_int(
            c_raw, "ovulation_offset", "confidence", c_defaults.ovulation_offset
        ),
    )
    if confidence.medium_threshold > confidence.high_threshold:
        errors.append(
            f"confidence.thresholds.medium ({confidence.medium_threshold}) exceeds "
            f"confidence.thresholds.high ({confidence.high_threshold})"
        )

    # ── Calendar ──
    cal_raw = _section("calendar")
    calendar = CalendarConfig(
        max_enumerated_days=_int(
            cal_raw,
            "max_enumerated_days",
            "calendar",
            CalendarConfig().max_enumerated_days,
        ),
    )
    if calendar.max_enumerated_days < 1:
        errors.append("calendar.max_enumerated_days must be at least 1")

    # ── Reminders ──
    r_raw = _section("reminders")
    r_defaults = ReminderConfig()
    reminders = ReminderConfig(
        daily_hour=_int(r_raw, "daily_hour", "reminders", r_defaults.daily_hour),
        daily_minute=_int(r_raw, "daily_minute", "reminders", r_defaults.daily_minute),
        period_hour=_int(r_raw, "period_hour", "reminders", r_defaults.period_hour),
        period_minute=_int(r_raw, "period_minute", "reminders", r_defaults.period_minute),
        period_lead_days=_int(
            r_raw, "period_lead_days", "reminders", r_defaults.period_lead_days
        ),
    )
    for key in ("daily_hour", "period_hour"):
        if getattr(reminders, key) > 23:
            errors.append(f"reminders.{key} must be between 0 and 23")
    for key in ("daily_minute", "period_minute"):
        if getattr(reminders, key) > 59:
            errors.append(f"reminders.{key} must be between 0 and 59")

    # ── Insights ──
    i_raw = _section("insights")
    i_defaults = InsightsConfig()
    insights = InsightsConfig(
        lookback_days=_int(i_raw, "lookback_days", "insights", i_defaults.lookback_days),
        top_symptom_limit=_int(
            i_raw, "top_symptom_limit", "insights", i_defaults.top_symptom_limit
        ),
    )
    if insights.top_symptom_limit < 1:
        errors.append("insights.top_symptom_limit must be at least 1")

    if errors:
        raise ConfigValidationError(
            f"cycle_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return CycleConfig(
        version=version,
        cycle_length=cycle_length,
        period_length=period_length,
        uncertainty=uncertainty,
        ovulation=ovulation,
        confidence=confidence,
        calendar=calendar,
        reminders=reminders,
        insights=insights,
    )


def load_cycle_config(path: Path | None = None) -> CycleConfig:
    """Load and validate the cycle config from disk.

    Args:
        path: Override path to YAML. Uses the bundled cycle_config.yaml by default.

    Returns:
        Validated CycleConfig instance.
    """
    target = path or _CONFIG_PATH
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded cycle config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Global singleton with hot-reload support
# ---------------------------------------------------------------------------

_config: CycleConfig | None = None
_config_lock = threading.Lock()


def get_cycle_config() -> CycleConfig:
    """Return the global CycleConfig singleton, loading it on first call.

    Thread-safe.  Use ``reload_cycle_config()`` to refresh after YAML changes.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_cycle_config()
    return _config


def reload_cycle_config(path: Path | None = None) -> CycleConfig:
    """Reload the cycle config from disk and replace the global singleton.

    If validation fails, the old config is retained and the error is re-raised.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config
    new_config = load_cycle_config(path)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info("Reloaded cycle config: %s → %s", old_version, new_config.version)
    return new_config


def config_from_dict(raw: dict[str, Any]) -> CycleConfig:
    """Build a validated CycleConfig from an in-memory mapping."""
    return _validate_and_build(raw)

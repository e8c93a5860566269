"""Shared FastAPI dependencies injected into route handlers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from lalin.config import Settings, get_settings
from lalin.cycle.config_loader import CycleConfig, get_cycle_config


def get_engine_config() -> CycleConfig:
    """Current cycle engine policy (hot-reloadable)."""
    return get_cycle_config()


# Annotated shortcuts for route signatures
AppSettings = Annotated[Settings, Depends(get_settings)]
EngineConfig = Annotated[CycleConfig, Depends(get_engine_config)]

"""Lalin API — FastAPI application entry point.

Run locally:
    uvicorn lalin.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lalin.config import get_settings
from lalin.cycle.config_loader import get_cycle_config, reload_cycle_config
from lalin.middleware.security import SecurityHeadersMiddleware
from lalin.routers import cycle, health

# ---------- Logging ----------

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger("lalin")


# ---------- Lifespan ----------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup / shutdown hooks."""
    settings = get_settings()
    logger.info(
        "Starting %s v%s [%s]",
        settings.app_name,
        settings.app_version,
        settings.environment,
    )
    if settings.cycle_config_path:
        reload_cycle_config(settings.cycle_config_path)
    else:
        get_cycle_config()
    yield
    logger.info("%s shut down", settings.app_name)


# ---------- App factory ----------

def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Stateless cycle statistics and predictions — next period, "
            "ovulation and fertile window from a snapshot of logged periods."
        ),
        version=settings.app_version,
        debug=settings.debug,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ---------- Middleware (outermost first) ----------

    app.add_middleware(SecurityHeadersMiddleware)

    # CORS must be innermost so it can handle preflight
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------- Health check (outside v1 prefix) ----------
    app.include_router(health.router)

    # ---------- API v1 routes ----------
    app.include_router(cycle.router, prefix="/api/v1")

    return app


app = create_app()

# backend/corsprobe/main.py
from __future__ import annotations

"""
FastAPI application setup.

This module depends on:
- corsprobe.config.get_settings for configuration
- corsprobe.db.session.Base and engine for DB initialization
- corsprobe.api.api_router for route registration
- the process-wide SignalInterceptor for capture ("debug mode")
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from corsprobe.api import api_router
from corsprobe.config import configure_logging, get_settings
from corsprobe.db.session import Base, engine
from corsprobe.services.diagnostics import CaptureConflictError, get_signal_interceptor
from corsprobe.services.statsig_client import shutdown_statsig

settings = get_settings()
configure_logging(settings)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
)


# ---- CORS ----

app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(o).rstrip("/") for o in settings.allowed_origins],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---- Routes ----

app.include_router(api_router, prefix="/api")


# ---- Lifecycle ----


@app.on_event("startup")
def on_startup() -> None:
    """
    Initialize database schema and, if configured, arm signal capture.

    Sync startup handlers run on the event loop thread, so the asyncio
    channel binds to the server's loop here.
    """
    Base.metadata.create_all(bind=engine)
    if not settings.capture_on_startup:
        logger.info("Signal capture left off; enable it with PUT /api/capture")
        return
    try:
        get_signal_interceptor().enable()
    except CaptureConflictError as exc:
        # Embedded next to another capturing component.
        logger.warning("Signal capture not armed on startup: %s", exc)


@app.on_event("shutdown")
def on_shutdown() -> None:
    get_signal_interceptor().disable()
    shutdown_statsig()


# ---- Healthcheck ----


@app.get("/health", tags=["health"])
def health() -> dict:
    return {"status": "ok"}

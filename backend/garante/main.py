"""Garante API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map GaranteError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager
    - The expiry sweep loop runs only when expiry_sweep_interval_seconds > 0

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
"""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from garante.api.error_handlers import register_error_handlers
from garante.api.routes import (
    disputes, edit_eligibility, guarantees, health, invitations, restitutions,
)
from garante.config import get_settings
from garante.infrastructure import database
from garante.infrastructure.observability import setup_logging
from garante.services.expiry_sweep import run_periodically

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    sweeper = None
    if settings.expiry_sweep_interval_seconds > 0:
        sweeper = asyncio.create_task(run_periodically(
            database.db_manager._session_factory,
            settings.expiry_sweep_interval_seconds,
        ))
        logger.info(
            f"Expiry sweep every {settings.expiry_sweep_interval_seconds}s",
        )
    logger.info("Garante API started")
    yield
    logger.info("Garante API shutting down")
    if sweeper is not None:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper
    await database.db_manager.dispose()


app = FastAPI(
    title="Garante API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(guarantees.router)
app.include_router(disputes.router)
app.include_router(restitutions.router)
app.include_router(invitations.business_router)
app.include_router(invitations.router)
app.include_router(edit_eligibility.router)

register_error_handlers(app)

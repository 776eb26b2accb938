"""Liveness and readiness probes for the webhook service."""

import asyncio
import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_app_settings
from infrastructure.config.settings import Settings
from infrastructure.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter()

DB_PROBE_TIMEOUT = 5.0


async def _probe_database(db: AsyncSession) -> str | None:
    """None when ``SELECT 1`` succeeds, otherwise a short failure reason."""
    try:
        await asyncio.wait_for(db.execute(text("SELECT 1")), timeout=DB_PROBE_TIMEOUT)
    except TimeoutError:
        logger.error("Database probe timed out after %.0fs", DB_PROBE_TIMEOUT)
        return "timeout"
    except Exception as exc:
        # Probe endpoints report failure instead of raising
        logger.error("Database probe failed: %s", type(exc).__name__)
        return "unreachable"
    return None


async def _probe_cache(request: Request) -> str:
    cache = getattr(request.app.state, "cache", None)
    if cache is None or not cache.enabled:
        return "disabled"
    return "ok" if await cache.get_stats() is not None else "degraded"


@router.get("/health")
async def health_check(settings: Settings = Depends(get_app_settings)):
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "stripe_configured": settings.stripe_configured,
        "timestamp": datetime.now(UTC).isoformat(),
    }


@router.get("/health/db")
async def health_check_db(db: AsyncSession = Depends(get_db)):
    failure = await _probe_database(db)
    return {
        "status": "degraded" if failure else "healthy",
        "database": f"error: {failure}" if failure else "connected",
        "timestamp": datetime.now(UTC).isoformat(),
    }


@router.get("/health/ready")
async def readiness_check(request: Request, db: AsyncSession = Depends(get_db)):
    """Ready once the database answers and webhook handlers are registered.

    Redis is optional: a degraded cache is reported but never blocks traffic.
    """
    db_failure = await _probe_database(db)
    handlers_ready = getattr(request.app.state, "webhook_registry", None) is not None
    return {
        "ready": db_failure is None and handlers_ready,
        "database": "ok" if db_failure is None else db_failure,
        "cache": await _probe_cache(request),
        "handlers": "registered" if handlers_ready else "missing",
    }


@router.get("/health/live")
async def liveness_check():
    return {"alive": True}

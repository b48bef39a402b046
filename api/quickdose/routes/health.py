from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text

from quickdose.db.session import async_transaction
from quickdose.services.cache import get_redis_client

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


async def _check_database() -> None:
    async with async_transaction() as session:
        result = await session.execute(text("SELECT 1"))
        result.scalar()


async def _check_redis() -> None:
    redis_client = await get_redis_client()
    await redis_client.ping()


async def _run_checks() -> tuple[bool, Dict[str, Any]]:
    checks: Dict[str, Any] = {}
    healthy = True
    for name, check in (("database", _check_database), ("redis", _check_redis)):
        try:
            await check()
            checks[name] = {"status": "healthy", "message": f"{name.title()} connection successful"}
        except Exception as e:
            logger.error("%s health check failed: %s", name, e)
            checks[name] = {"status": "unhealthy", "message": f"{name.title()} connection failed: {e}"}
            healthy = False
    return healthy, checks


@router.get("/healthz")
async def healthcheck() -> dict[str, str]:
    """
    Liveness check: returns OK if the application is running.
    """
    return {"status": "ok"}


@router.get("/health")
async def health() -> JSONResponse:
    """
    Health check covering the database and Redis.
    Returns 200 if all checks pass, 503 if any check fails.
    """
    healthy, checks = await _run_checks()
    body = {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": checks,
    }
    code = status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=code, content=body)


@router.get("/readiness")
async def readiness() -> JSONResponse:
    """
    Readiness check: 200 once dependencies answer, 503 otherwise.
    """
    ready, checks = await _run_checks()
    body = {
        "status": "ready" if ready else "not_ready",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {name: {"status": "ready" if c["status"] == "healthy" else "not_ready"} for name, c in checks.items()},
    }
    code = status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=code, content=body)

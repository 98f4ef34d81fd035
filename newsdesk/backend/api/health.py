"""
Health Check Endpoints.

Endpoints:
- /health: Liveness check (process running)
- /health/ready: Readiness check (database and crypto service reachable)
"""

import asyncio
from typing import Any

from fastapi import APIRouter, HTTPException
from sqlalchemy import text

from newsdesk.backend.core.config import get_app_config
from newsdesk.backend.core.database import get_session_factory
from newsdesk.backend.core.logging import get_logger
from newsdesk.backend.core.utils import utc_now

router = APIRouter()
logger = get_logger(__name__)


async def check_database() -> dict[str, Any]:
    """
    Check database connectivity.

    Returns:
        Dict with status, latency, and optional error message
    """
    db_config = get_app_config().database
    if not db_config.host or not db_config.name:
        return {"status": "not_configured"}

    try:
        start = utc_now()
        async with get_session_factory()() as session:
            await session.execute(text("SELECT 1"))
        latency_ms = int((utc_now() - start).total_seconds() * 1000)
        return {"status": "healthy", "latency_ms": latency_ms}
    except Exception as e:
        logger.warning("Database health check failed", extra={"error": str(e)})
        return {"status": "unhealthy", "error": str(e)}


async def check_crypto_service() -> dict[str, Any]:
    """Check the crypto microservice; every encrypted read depends on it."""
    if not get_app_config().features.health_check_crypto_enabled:
        return {"status": "not_configured"}

    from newsdesk.backend.clients.crypto import get_crypto_client

    start = utc_now()
    body = await get_crypto_client().health_check()
    latency_ms = int((utc_now() - start).total_seconds() * 1000)
    if body.get("status") == "unhealthy":
        return {"status": "unhealthy", "error": body.get("error")}
    return {"status": "healthy", "latency_ms": latency_ms}


@router.get("/health")
async def health_check() -> dict[str, str]:
    """
    Liveness check.

    Returns 200 if the process is running. No dependency checks.
    """
    return {"status": "healthy"}


@router.get("/health/ready")
async def readiness_check() -> dict[str, Any]:
    """
    Readiness check.

    Checks critical dependencies in parallel using TaskGroup.
    Returns 503 if any critical dependency is unhealthy.
    """
    timeout = get_app_config().application.readiness_timeout

    db_result: dict[str, Any] = {"status": "error", "error": "check did not run"}
    crypto_result: dict[str, Any] = {"status": "error", "error": "check did not run"}

    try:
        async with asyncio.timeout(timeout):
            async with asyncio.TaskGroup() as tg:
                db_task = tg.create_task(check_database())
                crypto_task = tg.create_task(check_crypto_service())
            db_result = db_task.result()
            crypto_result = crypto_task.result()
    except* Exception as eg:
        for exc in eg.exceptions:
            logger.warning("Health check task failed", extra={"error": str(exc)})

    checks = {
        "database": db_result,
        "crypto": crypto_result,
    }

    failed = [
        name for name, check in checks.items()
        if check.get("status") in ("unhealthy", "error")
    ]

    if failed:
        logger.warning(
            "Readiness check failed",
            extra={"unhealthy": failed, "checks": checks},
        )
        raise HTTPException(
            status_code=503,
            detail={
                "status": "unhealthy",
                "checks": checks,
                "timestamp": utc_now().isoformat(),
            },
        )

    return {
        "status": "healthy",
        "checks": checks,
        "timestamp": utc_now().isoformat(),
    }

# ============================================================================
# HEALTH CHECK ROUTER
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Infrastructure - FastAPI health check endpoints
# PURPOSE: Kubernetes probes for the workflow controller
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Check Router

Endpoints:
    GET /livez   - Liveness probe (is the process alive?)
                   Always 200 while the process serves HTTP.

    GET /readyz  - Readiness probe (is the control loop running?)
                   200 when the controller is running, 503 otherwise.

    GET /health  - Full status: controller state plus a database ping.
                   200 when both pass, 503 otherwise.
"""

import logging
import time
from typing import Any, Dict

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from __version__ import __version__, BUILD_DATE

logger = logging.getLogger(__name__)

health_router = APIRouter(tags=["Health"])


# Global references (set by main app)
_controller = None
_pool = None


def set_controller(controller, pool=None):
    """Set controller (and optional pool) references for health checks."""
    global _controller, _pool
    _controller = controller
    _pool = pool


# ============================================================================
# LIVENESS PROBE
# ============================================================================

@health_router.get("/livez")
async def liveness_probe():
    """
    Kubernetes liveness probe.

    No external checks - just confirms the process is responsive.
    """
    return {"status": "alive", "version": __version__, "build_date": BUILD_DATE}


# ============================================================================
# READINESS PROBE
# ============================================================================

@health_router.get("/readyz")
async def readiness_probe():
    """
    Kubernetes readiness probe.

    Ready once both watches are established and the control loop runs.
    """
    if _controller is None or not _controller.is_running:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "message": "Controller not running"},
        )
    return {"status": "ready"}


# ============================================================================
# FULL HEALTH CHECK
# ============================================================================

async def _check_database() -> Dict[str, Any]:
    if _pool is None:
        return {"status": "unhealthy", "message": "Connection pool not initialized"}

    start = time.monotonic()
    try:
        async with _pool.connection() as conn:
            await conn.execute("SELECT 1")
    except Exception as e:
        return {"status": "unhealthy", "message": f"PostgreSQL connection failed: {e}"}

    pool_stats = _pool.get_stats()
    return {
        "status": "healthy",
        "duration_ms": round((time.monotonic() - start) * 1000, 2),
        "pool_size": pool_stats.get("pool_size"),
        "pool_available": pool_stats.get("pool_available"),
    }


def _check_controller() -> Dict[str, Any]:
    if _controller is None:
        return {"status": "unhealthy", "message": "Controller not initialized"}
    if not _controller.is_running:
        return {"status": "unhealthy", "message": "Control loop not running"}

    stats = _controller.stats
    return {
        "status": "healthy",
        "uptime_seconds": stats.get("uptime_seconds"),
        "errors": stats.get("errors", 0),
        "last_event_at": stats.get("last_event_at"),
    }


@health_router.get("/health")
async def full_health_check():
    """Controller and database status."""
    checks = {
        "controller": _check_controller(),
        "postgres": await _check_database(),
    }
    healthy = all(c["status"] == "healthy" for c in checks.values())

    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "version": __version__,
            "build_date": BUILD_DATE,
            "checks": checks,
        },
    )


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "health_router",
    "set_controller",
]

# ============================================================================
# API ROUTES
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Core - FastAPI route definitions
# PURPOSE: HTTP endpoints for controller config and status
# CREATED: 19 OCT 2026
# ============================================================================
"""
API Routes

FastAPI routes for the workflow controller.
"""

import logging

from fastapi import APIRouter, HTTPException

from core.errors import ConfigurationError
from .schemas import ConfigResponse, ControllerStatusResponse, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================
# These will be set by the main app at startup

_controller = None
_config_holder = None
_resynchronizer = None


def set_services(controller, config_holder, resynchronizer):
    """Set service instances for dependency injection."""
    global _controller, _config_holder, _resynchronizer
    _controller = controller
    _config_holder = config_holder
    _resynchronizer = resynchronizer


def get_config_holder():
    if _config_holder is None:
        raise HTTPException(500, "Services not initialized")
    return _config_holder


def get_resynchronizer():
    if _resynchronizer is None:
        raise HTTPException(500, "Services not initialized")
    return _resynchronizer


def _config_response(holder) -> ConfigResponse:
    return ConfigResponse(
        generation=holder.generation,
        config=holder.get().model_dump(mode="json", by_alias=True),
    )


# ============================================================================
# CONFIG
# ============================================================================

@router.get("/config", response_model=ConfigResponse, tags=["Config"])
async def get_config():
    """
    Get the active controller configuration.
    """
    return _config_response(get_config_holder())


@router.post(
    "/config/resync",
    response_model=ConfigResponse,
    tags=["Config"],
    responses={
        400: {"model": ErrorResponse, "description": "Config map unusable, config unchanged"},
    },
)
async def resync_config():
    """
    Reload the controller configuration from its config map.

    On failure the previous configuration stays active.
    """
    resynchronizer = get_resynchronizer()

    try:
        await resynchronizer.resync()
    except ConfigurationError as e:
        logger.warning(f"Config resync rejected: {e}")
        raise HTTPException(400, str(e))

    return _config_response(get_config_holder())


# ============================================================================
# CONTROLLER STATUS
# ============================================================================

@router.get("/controller/stats", response_model=ControllerStatusResponse, tags=["Controller"])
async def get_controller_stats():
    """
    Get control loop status and statistics.

    Returns metrics about the control loop including:
    - Running state and uptime
    - Workflows and pods processed
    - Error count
    - Reconciler write counters
    - Per-watch delivery counters
    """
    if _controller is None:
        raise HTTPException(500, "Controller not initialized")

    stats = _controller.stats

    return ControllerStatusResponse(
        status="running" if stats["running"] else "stopped",
        namespace=stats["namespace"],
        started_at=stats["started_at"],
        uptime_seconds=stats["uptime_seconds"],
        metrics={
            "workflows_processed": stats["workflows_processed"],
            "pods_processed": stats["pods_processed"],
            "errors": stats["errors"],
            "last_event_at": stats["last_event_at"],
        },
        reconciler=stats["reconciler"],
        watches=stats["watches"],
    )

# ============================================================================
# HEALTH CHECK MODULE
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Infrastructure - Health checks
# PURPOSE: Kubernetes probes and status monitoring
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Check Module

- /livez: Process alive (instant, for Kubernetes liveness probe)
- /readyz: Control loop running
- /health: Controller and database status

Usage:
    from health import health_router, set_controller

    set_controller(controller, pool)
    app.include_router(health_router)
"""

from health.router import health_router, set_controller

__all__ = [
    "health_router",
    "set_controller",
]

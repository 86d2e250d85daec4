# ============================================================================
# API MODULE
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Core - FastAPI routes
# PURPOSE: HTTP API for controller config and status
# CREATED: 19 OCT 2026
# ============================================================================
"""
API Module

FastAPI routes for the workflow controller.
"""

from .routes import router, set_services
from .schemas import (
    ConfigResponse,
    ControllerStatusResponse,
    ErrorResponse,
)

__all__ = [
    "router",
    "set_services",
    "ConfigResponse",
    "ControllerStatusResponse",
    "ErrorResponse",
]

# ============================================================================
# API SCHEMAS
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Core - Response schemas
# PURPOSE: Pydantic models for API responses
# CREATED: 19 OCT 2026
# ============================================================================
"""
API Schemas

Response models for the API.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class ConfigResponse(BaseModel):
    """Active controller configuration."""
    generation: int = Field(..., description="Number of successful resyncs since startup")
    config: Dict[str, Any] = Field(..., description="Controller config, camelCase keys")


class ControllerStatusResponse(BaseModel):
    """Control loop status."""
    status: str
    namespace: str
    started_at: Optional[str] = None
    uptime_seconds: Optional[float] = None
    metrics: Dict[str, Any] = Field(default_factory=dict)
    reconciler: Dict[str, int] = Field(default_factory=dict)
    watches: Dict[str, Dict[str, int]] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str

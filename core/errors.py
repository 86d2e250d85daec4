# ============================================================================
# CONTROLLER ERRORS
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Foundation - Controller exception types
# PURPOSE: Errors surfaced by config resync and watch startup
# CREATED: 19 OCT 2026
# ============================================================================
"""
Controller Errors

Store failures live in infrastructure.base_repository (RepositoryError and
friends). The errors here are raised by controller components:

- ConfigurationError: config resync aborted, previous config retained
- SubscriptionError: a watch could not be established (fatal at startup)
"""

from typing import Optional


class ControllerError(Exception):
    """Base exception for controller operations."""

    def __init__(self, message: str, resource: Optional[str] = None):
        self.resource = resource
        super().__init__(message)


class ConfigurationError(ControllerError):
    """Raised when the controller configuration cannot be loaded or validated."""


class SubscriptionError(ControllerError):
    """Raised when a watch subscription cannot be established."""


__all__ = ["ControllerError", "ConfigurationError", "SubscriptionError"]

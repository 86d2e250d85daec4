# ============================================================================
# CORE MODULE
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Core module initialization
# PURPOSE: Export core contracts and errors
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================

from core.contracts import NodePhase, PodPhase, ResourceKind, WatchEventType
from core.errors import ConfigurationError, ControllerError, SubscriptionError

__all__ = [
    # Enums
    "NodePhase",
    "PodPhase",
    "ResourceKind",
    "WatchEventType",
    # Errors
    "ControllerError",
    "ConfigurationError",
    "SubscriptionError",
]

# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Foundation - Core enums and well-known keys
# PURPOSE: Status enums and label/annotation keys shared across the controller
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: NodePhase, PodPhase, WatchEventType, ResourceKind, LABEL_*, ANNOTATION_*
# DEPENDENCIES: enum
# ============================================================================
"""
Base contracts for the workflow pod controller.

These values cross boundaries:
- Persisted workflow status documents (node status strings)
- Pod labels and annotations written by the workflow executor
- Watch notifications (event types, resource kinds)
"""

from enum import Enum


# ============================================================================
# WELL-KNOWN KEYS
# ============================================================================

# Pod label naming the owning workflow resource
LABEL_KEY_WORKFLOW = "workflows.rmh.io/workflow"

# Pod annotation holding the serialized step template
ANNOTATION_KEY_TEMPLATE = "workflows.rmh.io/template"

# Pod annotation holding the serialized step outputs
ANNOTATION_KEY_OUTPUTS = "workflows.rmh.io/outputs"

# Key inside the controller config map
CONFIG_MAP_KEY = "config"


# ============================================================================
# STATUS ENUMS
# ============================================================================

class NodePhase(str, Enum):
    """
    Recorded status of a workflow node (step).

    Values are the strings stored in the workflow status document and
    consumed by the DAG operator.
    """
    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    ERROR = "Error"

    def is_terminal(self) -> bool:
        """Check if this is a terminal state."""
        return self in (NodePhase.SUCCEEDED, NodePhase.FAILED, NodePhase.ERROR)


class PodPhase(str, Enum):
    """
    Lifecycle phase reported by an execution unit (pod).

    Pods carry the phase as a raw string; values outside this enum
    are treated as unrecognised.
    """
    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"

    def is_terminal(self) -> bool:
        """Check if the pod has finished executing."""
        return self in (PodPhase.SUCCEEDED, PodPhase.FAILED)


class WatchEventType(str, Enum):
    """Notification types delivered by a watch subscription."""
    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"


class ResourceKind(str, Enum):
    """Resource kinds held by the cluster resource store."""
    WORKFLOW = "Workflow"
    POD = "Pod"
    CONFIG_MAP = "ConfigMap"
    SECRET = "Secret"


__all__ = [
    "LABEL_KEY_WORKFLOW",
    "ANNOTATION_KEY_TEMPLATE",
    "ANNOTATION_KEY_OUTPUTS",
    "CONFIG_MAP_KEY",
    "NodePhase",
    "PodPhase",
    "WatchEventType",
    "ResourceKind",
]

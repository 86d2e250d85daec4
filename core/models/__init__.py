# ============================================================================
# MODELS MODULE
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Model exports
# PURPOSE: Central export point for all Pydantic models
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

Resources held by the cluster resource store (Workflow, Pod, ConfigMap,
Secret), the payloads carried on pod annotations (Template, Outputs) and
watch notifications.
"""

from core.models.resource import ObjectMeta, Resource, ConfigMap, Secret
from core.models.workflow import (
    Workflow,
    WorkflowStatus,
    NodeStatus,
    Outputs,
    Parameter,
    Artifact,
    Template,
)
from core.models.pod import Pod, PodStatus, ContainerStatus
from core.models.events import WatchEvent

__all__ = [
    # Resources
    "ObjectMeta",
    "Resource",
    "ConfigMap",
    "Secret",
    # Workflow
    "Workflow",
    "WorkflowStatus",
    "NodeStatus",
    "Outputs",
    "Parameter",
    "Artifact",
    "Template",
    # Pod
    "Pod",
    "PodStatus",
    "ContainerStatus",
    # Events
    "WatchEvent",
]

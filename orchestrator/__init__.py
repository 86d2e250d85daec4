# ============================================================================
# ORCHESTRATOR MODULE
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Core - Control loop
# PURPOSE: Watch workflows and pods and process their notifications
# CREATED: 19 OCT 2026
# ============================================================================
"""
Orchestrator Module

The watch bridge and the control loop that consumes it.

Usage:
    from orchestrator import WorkflowController

    controller = WorkflowController(workflow_store, pod_store)
    await controller.start()  # Starts the loop
"""

from .loop import WorkflowController
from .operator import LoggingWorkflowOperator, WorkflowOperator
from .watch import HandoffChannel, WatchBridge

__all__ = [
    "WorkflowController",
    "WorkflowOperator",
    "LoggingWorkflowOperator",
    "WatchBridge",
    "HandoffChannel",
]

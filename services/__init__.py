# ============================================================================
# SERVICES MODULE
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Core - Business logic layer
# PURPOSE: Pod status reconciliation and configuration loading
# CREATED: 19 OCT 2026
# ============================================================================
"""
Services Module

Business logic for the workflow controller.
Services coordinate between resource stores and the active config.

Usage:
    from services import PodStatusReconciler

    reconciler = PodStatusReconciler(workflow_store)
    written = await reconciler.handle_pod_update(pod)
"""

from .reconciler import PodStatusReconciler, StatusCandidate, evaluate_pod, apply_updates
from .config_service import ConfigResynchronizer, validate_s3_repository

__all__ = [
    "PodStatusReconciler",
    "StatusCandidate",
    "evaluate_pod",
    "apply_updates",
    "ConfigResynchronizer",
    "validate_s3_repository",
]

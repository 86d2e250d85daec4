# ============================================================================
# WORKFLOW OPERATOR
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Core - Per-workflow operation hook
# PURPOSE: Interface invoked by the control loop for every workflow notification
# CREATED: 19 OCT 2026
# ============================================================================
"""
Workflow Operator

The control loop hands every workflow notification to a WorkflowOperator.
Planning (deciding which steps to run next and creating their pods) lives
behind this interface; this package ships only a logging implementation.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict

from core.logging import log_context
from core.models import Workflow

logger = logging.getLogger(__name__)


class WorkflowOperator(ABC):
    """Performs one operation pass over a workflow."""

    @abstractmethod
    async def operate(self, workflow: Workflow) -> None:
        """
        Operate on the latest observed state of a workflow.

        Exceptions propagate to the control loop, which logs and counts
        them and moves on.
        """
        pass


class LoggingWorkflowOperator(WorkflowOperator):
    """Records each workflow notification and its node summary."""

    def __init__(self):
        self._seen: Dict[str, int] = {}

    async def operate(self, workflow: Workflow) -> None:
        with log_context(workflow=workflow.name):
            self._seen[workflow.name] = workflow.resource_version
            nodes = workflow.status.nodes
            terminal = sum(1 for n in nodes.values() if n.is_terminal)
            logger.info(
                f"Operating on workflow {workflow.name} "
                f"(version={workflow.resource_version}, nodes={len(nodes)}, terminal={terminal})"
            )

    @property
    def seen(self) -> Dict[str, int]:
        """Last observed resource version per workflow name."""
        return dict(self._seen)


__all__ = ["WorkflowOperator", "LoggingWorkflowOperator"]

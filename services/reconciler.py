# ============================================================================
# NODE STATUS RECONCILER
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Core - Pod lifecycle to node status state machine
# PURPOSE: Decide whether a pod notification changes its workflow node, and write it
# CREATED: 19 OCT 2026
# ============================================================================
"""
Node Status Reconciler

For each pod notification:

1. evaluate_pod() maps the pod phase (plus the daemon flag from its
   template annotation) to a candidate (status, daemoned) pair, or None
   when the notification cannot require a change.
2. The owning workflow is fetched via the pod's workflow label and the
   node entry via the pod name.
3. apply_updates() diffs the candidate against the recorded NodeStatus.
4. Only if something changed is the workflow written back, through a
   version-checked update.

Phase table:

    Pod phase                                  Candidate
    -----------------------------------------  ---------------------
    Pending                                    none (no lookup)
    Succeeded                                  Succeeded, daemon off
    Failed                                     Failed, daemon off
    Running, template missing/unreadable       none (logged)
    Running, template not daemon               none
    Running, daemon, containers not all ready  none
    Running, daemon, all containers ready      Succeeded, daemon on
    anything else                              Error, daemon untouched

A daemon step is complete once its pod is ready to serve; every other
step is complete only when its pod terminates.

Persistence failures (including version conflicts) are logged and
dropped. The next notification for the pod, or the watch's periodic
resync, re-triggers reconciliation.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from pydantic import ValidationError

from core.contracts import NodePhase, PodPhase
from core.logging import log_checkpoint, log_context
from core.models import NodeStatus, Outputs, Pod, Template, Workflow
from infrastructure.base_repository import NotFoundError, RepositoryError
from infrastructure.cluster import ResourceStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusCandidate:
    """
    Target node state derived from one pod notification.

    daemoned=None leaves the recorded daemon flag untouched; False is
    normalized to "unset" when applied.
    """
    status: NodePhase
    daemoned: Optional[bool] = None
    from_terminal_phase: bool = False


# ============================================================================
# PHASE TABLE
# ============================================================================

def _pending(pod: Pod) -> Optional[StatusCandidate]:
    return None


def _succeeded(pod: Pod) -> Optional[StatusCandidate]:
    return StatusCandidate(NodePhase.SUCCEEDED, daemoned=False, from_terminal_phase=True)


def _failed(pod: Pod) -> Optional[StatusCandidate]:
    return StatusCandidate(NodePhase.FAILED, daemoned=False, from_terminal_phase=True)


def _running(pod: Pod) -> Optional[StatusCandidate]:
    raw = pod.template_annotation
    if raw is None:
        logger.warning(f"{pod.name} missing template annotation")
        return None
    try:
        template = Template.model_validate_json(raw)
    except ValidationError as e:
        logger.warning(f"{pod.name} template annotation unreadable: {e}")
        return None

    if not template.is_daemon:
        # incidental state change of a running pod
        return None
    if not pod.all_containers_ready:
        return None

    logger.info(f"Processing ready daemon pod: {pod.self_link}")
    return StatusCandidate(NodePhase.SUCCEEDED, daemoned=True)


def _unrecognized(pod: Pod) -> Optional[StatusCandidate]:
    logger.info(f"Unexpected pod phase for {pod.name}: {pod.status.phase}")
    return StatusCandidate(NodePhase.ERROR)


PHASE_TABLE: Dict[str, Callable[[Pod], Optional[StatusCandidate]]] = {
    PodPhase.PENDING.value: _pending,
    PodPhase.SUCCEEDED.value: _succeeded,
    PodPhase.FAILED.value: _failed,
    PodPhase.RUNNING.value: _running,
}


def evaluate_pod(pod: Pod) -> Optional[StatusCandidate]:
    """
    Map a pod notification to a candidate node state.

    Returns None when the notification cannot change the node, in which
    case no workflow lookup is needed.
    """
    return PHASE_TABLE.get(pod.status.phase, _unrecognized)(pod)


# ============================================================================
# DIFF
# ============================================================================

def apply_updates(pod: Pod, node: NodeStatus, candidate: StatusCandidate) -> bool:
    """
    Apply a candidate and the pod's observed fields to node in place.

    Returns True if anything changed (the workflow needs a write).

    Rules:
        - status: replaced when different, except that a candidate from a
          non-terminal pod phase never replaces a terminal node status (nor
          touches its daemon flag)
        - pod_ip: replaced when different
        - daemoned: False is normalized to None; changed only when the
          normalized value differs, so None vs False is never a change
        - outputs: write-once; parsed only while the node has none. An
          unparseable payload leaves outputs unset and forces Error
        - status counts as a change only when its final value differs from
          the stored one
    """
    update_needed = False
    original_status = node.status
    stale = (
        node.status != candidate.status
        and node.is_terminal
        and not candidate.from_terminal_phase
    )

    if stale:
        logger.info(
            f"Ignoring {candidate.status.value} for node {node}: "
            f"already {node.status.value}"
        )
    elif node.status != candidate.status:
        logger.info(f"Updating node {node} status {node.status.value} -> {candidate.status.value}")
        node.status = candidate.status

    if pod.status.pod_ip != node.pod_ip:
        logger.info(f"Updating node {node} IP {node.pod_ip!r} -> {pod.status.pod_ip!r}")
        node.pod_ip = pod.status.pod_ip
        update_needed = True

    if candidate.daemoned is not None and not stale:
        daemoned = True if candidate.daemoned else None
        if bool(daemoned) != node.is_daemoned:
            logger.info(f"Setting node {node} daemoned: {node.daemoned} -> {daemoned}")
            node.daemoned = daemoned
            update_needed = True

    raw_outputs = pod.outputs_annotation
    if raw_outputs is not None and node.outputs is None:
        try:
            outputs = Outputs.model_validate_json(raw_outputs)
        except ValidationError as e:
            logger.error(f"Failed to parse {pod.name} outputs from pod annotation: {e}")
            node.status = NodePhase.ERROR
        else:
            logger.info(f"Setting node {node} outputs")
            node.outputs = outputs
            update_needed = True

    # status is dirty only by its final value; a forced Error may undo the candidate
    if node.status != original_status:
        update_needed = True

    return update_needed


# ============================================================================
# RECONCILER
# ============================================================================

class PodStatusReconciler:
    """Reconciles workflow node status from pod notifications."""

    def __init__(self, workflow_store: ResourceStore[Workflow]):
        """
        Initialize reconciler.

        Args:
            workflow_store: Store holding the workflows the pods belong to
        """
        self.workflow_store = workflow_store

        # Metrics
        self._updates_written = 0
        self._update_failures = 0
        self._dropped = 0

    async def handle_pod_update(self, pod: Pod) -> bool:
        """
        Reconcile one pod notification.

        Returns:
            True if the workflow was written, False otherwise (no-op,
            dropped, or write failed)
        """
        workflow_name = pod.workflow_name
        if workflow_name is None:
            # Unrelated to any workflow; only happens if the watch is scoped too wide
            return False

        with log_context(workflow=workflow_name, pod=pod.name):
            candidate = evaluate_pod(pod)
            if candidate is None:
                return False

            try:
                workflow = await self.workflow_store.get(workflow_name)
            except NotFoundError:
                logger.warning(f"Failed to find workflow {workflow_name}")
                self._dropped += 1
                return False
            except RepositoryError as e:
                logger.warning(f"Failed to fetch workflow {workflow_name}: {e}")
                self._dropped += 1
                return False

            current = workflow.get_node(pod.name)
            if current is None:
                logger.warning(f"pod {pod.name} unassociated with workflow {workflow_name}")
                self._dropped += 1
                return False

            with log_context(node=current.id):
                node = current.model_copy(deep=True)
                if not apply_updates(pod, node, candidate):
                    logger.info(f"No workflow update needed for node {node}")
                    return False

                workflow.status.nodes[pod.name] = node
                try:
                    await self.workflow_store.update(workflow)
                except RepositoryError as e:
                    # Rely on redelivery to catch up
                    self._update_failures += 1
                    logger.error(f"Failed to update {pod.name} status: {e}")
                    return False

                self._updates_written += 1
                log_checkpoint("node_updated", {
                    "status": node.status.value,
                    "daemoned": node.daemoned,
                    "pod_ip": node.pod_ip,
                })
                logger.info(f"Updated {node}")
                return True

    @property
    def stats(self) -> Dict[str, int]:
        return {
            "updates_written": self._updates_written,
            "update_failures": self._update_failures,
            "dropped": self._dropped,
        }


__all__ = [
    "StatusCandidate",
    "PHASE_TABLE",
    "evaluate_pod",
    "apply_updates",
    "PodStatusReconciler",
]

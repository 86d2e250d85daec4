# ============================================================================
# POD STATUS RECONCILER TESTS
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Tests - Phase table, dirty check and write path
# PURPOSE: Verify pod notifications map to node status writes exactly when needed
# CREATED: 19 OCT 2026
# ============================================================================
"""
Pod Status Reconciler Tests

Unit tests for evaluate_pod(), apply_updates() and PodStatusReconciler
against an in-memory workflow store. No database.

Run with:
    pytest tests/test_reconciler.py -v
"""

import asyncio
import pytest

from core.contracts import NodePhase
from core.models import Outputs, Workflow
from infrastructure.base_repository import RepositoryError, VersionConflictError
from services.reconciler import (
    PHASE_TABLE,
    PodStatusReconciler,
    StatusCandidate,
    apply_updates,
    evaluate_pod,
)

from fakes import InMemoryStore, make_node, make_pod, make_workflow


OUTPUTS = {"parameters": [{"name": "count", "value": "3"}], "result": "ok"}


# ============================================================================
# FIXTURES
# ============================================================================

def _make_reconciler(*nodes, workflow="wf-1"):
    """Create a reconciler over a store holding one workflow with nodes."""
    store = InMemoryStore(Workflow, objects=[make_workflow(workflow, list(nodes))])
    return PodStatusReconciler(store), store


def _handle(reconciler, pod):
    return asyncio.run(reconciler.handle_pod_update(pod))


# ============================================================================
# PHASE TABLE
# ============================================================================

class TestEvaluatePod:
    """Pod phase -> candidate mapping."""

    def test_table_covers_known_phases(self):
        assert set(PHASE_TABLE) == {"Pending", "Running", "Succeeded", "Failed"}

    def test_pending_has_no_candidate(self):
        assert evaluate_pod(make_pod(phase="Pending")) is None

    def test_succeeded_clears_daemon(self):
        candidate = evaluate_pod(make_pod(phase="Succeeded"))
        assert candidate.status == NodePhase.SUCCEEDED
        assert candidate.daemoned is False
        assert candidate.from_terminal_phase

    def test_failed_clears_daemon(self):
        candidate = evaluate_pod(make_pod(phase="Failed"))
        assert candidate.status == NodePhase.FAILED
        assert candidate.daemoned is False

    def test_running_without_template_has_no_candidate(self):
        assert evaluate_pod(make_pod(phase="Running")) is None

    def test_running_with_unreadable_template_has_no_candidate(self):
        assert evaluate_pod(make_pod(phase="Running", template="{not json")) is None

    def test_running_non_daemon_has_no_candidate(self):
        assert evaluate_pod(make_pod(phase="Running", daemon=False)) is None

    def test_running_with_non_boolean_daemon_has_no_candidate(self):
        pod = make_pod(phase="Running", template='{"daemon": "yes"}', ready=(True, True))
        assert evaluate_pod(pod) is None

    def test_running_daemon_not_ready_has_no_candidate(self):
        pod = make_pod(phase="Running", daemon=True, ready=(True, False))
        assert evaluate_pod(pod) is None

    def test_running_daemon_ready_succeeds(self):
        pod = make_pod(phase="Running", daemon=True, ready=(True, True))
        assert evaluate_pod(pod) == StatusCandidate(NodePhase.SUCCEEDED, daemoned=True)

    @pytest.mark.parametrize("phase", ["Unknown", "Evicted", ""])
    def test_unrecognized_phase_is_error(self, phase):
        candidate = evaluate_pod(make_pod(phase=phase))
        assert candidate.status == NodePhase.ERROR
        assert candidate.daemoned is None
        assert not candidate.from_terminal_phase


# ============================================================================
# DIRTY CHECK
# ============================================================================

class TestApplyUpdates:
    """apply_updates() field rules."""

    def test_no_change_is_clean(self):
        node = make_node(status=NodePhase.SUCCEEDED, pod_ip="10.0.0.5")
        candidate = StatusCandidate(NodePhase.SUCCEEDED, daemoned=False, from_terminal_phase=True)
        assert apply_updates(make_pod(phase="Succeeded"), node, candidate) is False

    def test_pod_ip_change_is_dirty(self):
        node = make_node(status=NodePhase.SUCCEEDED, pod_ip="10.0.0.1")
        candidate = StatusCandidate(NodePhase.SUCCEEDED, daemoned=False, from_terminal_phase=True)
        assert apply_updates(make_pod(phase="Succeeded", pod_ip="10.0.0.9"), node, candidate)
        assert node.pod_ip == "10.0.0.9"

    def test_false_daemon_never_dirties_unset_node(self):
        node = make_node(status=NodePhase.FAILED, pod_ip="10.0.0.5", daemoned=None)
        candidate = StatusCandidate(NodePhase.FAILED, daemoned=False, from_terminal_phase=True)
        assert apply_updates(make_pod(phase="Failed"), node, candidate) is False
        assert node.daemoned is None

    def test_false_daemon_never_dirties_false_node(self):
        node = make_node(status=NodePhase.FAILED, pod_ip="10.0.0.5", daemoned=False)
        candidate = StatusCandidate(NodePhase.FAILED, daemoned=False, from_terminal_phase=True)
        assert apply_updates(make_pod(phase="Failed"), node, candidate) is False

    def test_daemon_cleared_when_set(self):
        node = make_node(status=NodePhase.SUCCEEDED, pod_ip="10.0.0.5", daemoned=True)
        candidate = StatusCandidate(NodePhase.SUCCEEDED, daemoned=False, from_terminal_phase=True)
        assert apply_updates(make_pod(phase="Succeeded"), node, candidate)
        assert node.daemoned is None

    def test_outputs_set_once(self):
        node = make_node(status=NodePhase.SUCCEEDED, pod_ip="10.0.0.5")
        candidate = StatusCandidate(NodePhase.SUCCEEDED, daemoned=False, from_terminal_phase=True)
        assert apply_updates(make_pod(phase="Succeeded", outputs=OUTPUTS), node, candidate)
        assert node.outputs.result == "ok"
        assert node.outputs.parameters[0].value == "3"

    def test_unparseable_outputs_force_error(self):
        node = make_node(status=NodePhase.RUNNING, pod_ip="10.0.0.5")
        candidate = StatusCandidate(NodePhase.SUCCEEDED, daemoned=False, from_terminal_phase=True)
        assert apply_updates(make_pod(phase="Succeeded", outputs="{broken"), node, candidate)
        assert node.status == NodePhase.ERROR
        assert node.outputs is None

    def test_outputs_with_unknown_keys_accepted(self):
        node = make_node(status=NodePhase.RUNNING, pod_ip="10.0.0.5")
        candidate = StatusCandidate(NodePhase.SUCCEEDED, daemoned=False, from_terminal_phase=True)
        pod = make_pod(
            phase="Succeeded",
            outputs={
                "artifacts": [{"name": "a", "path": "/tmp/a", "from": "{{steps.x}}"}],
                "parameters": [{"name": "p", "value": "1", "path": "/tmp/p"}],
                "exitCode": "0",
            },
        )
        assert apply_updates(pod, node, candidate)
        assert node.status == NodePhase.SUCCEEDED
        assert node.outputs.artifacts[0].path == "/tmp/a"
        assert node.outputs.parameters[0].value == "1"

    def test_outputs_with_wrong_type_force_error(self):
        node = make_node(status=NodePhase.RUNNING, pod_ip="10.0.0.5")
        candidate = StatusCandidate(NodePhase.SUCCEEDED, daemoned=False, from_terminal_phase=True)
        pod = make_pod(phase="Succeeded", outputs={"parameters": "count=3"})
        assert apply_updates(pod, node, candidate)
        assert node.status == NodePhase.ERROR
        assert node.outputs is None

    def test_unparseable_outputs_on_errored_node_is_clean(self):
        node = make_node(status=NodePhase.ERROR, pod_ip="10.0.0.5")
        candidate = StatusCandidate(NodePhase.SUCCEEDED, daemoned=False, from_terminal_phase=True)
        assert apply_updates(make_pod(phase="Succeeded", outputs="{broken"), node, candidate) is False
        assert node.status == NodePhase.ERROR

    def test_running_candidate_does_not_regress_terminal_node(self):
        node = make_node(status=NodePhase.SUCCEEDED, pod_ip="10.0.0.5", daemoned=True)
        candidate = StatusCandidate(NodePhase.ERROR)
        assert apply_updates(make_pod(phase="Unknown"), node, candidate) is False
        assert node.status == NodePhase.SUCCEEDED
        assert node.daemoned is True

    def test_stale_candidate_still_records_pod_ip(self):
        node = make_node(status=NodePhase.FAILED, pod_ip="")
        candidate = StatusCandidate(NodePhase.SUCCEEDED, daemoned=True)
        assert apply_updates(make_pod(phase="Running", pod_ip="10.0.0.7"), node, candidate)
        assert node.status == NodePhase.FAILED
        assert node.daemoned is None
        assert node.pod_ip == "10.0.0.7"

    def test_terminal_phase_replaces_terminal_node(self):
        node = make_node(status=NodePhase.SUCCEEDED, pod_ip="10.0.0.5", daemoned=True)
        candidate = StatusCandidate(NodePhase.FAILED, daemoned=False, from_terminal_phase=True)
        assert apply_updates(make_pod(phase="Failed"), node, candidate)
        assert node.status == NodePhase.FAILED
        assert node.daemoned is None


# ============================================================================
# RECONCILER
# ============================================================================

class TestPendingPod:
    """A pending pod never touches the store."""

    def test_no_store_read(self):
        reconciler, store = _make_reconciler(make_node())
        assert _handle(reconciler, make_pod(phase="Pending")) is False
        assert store.get_calls == []
        assert store.updates == []


class TestSucceededPod:
    """A terminated pod completes its running node."""

    def test_single_write(self):
        reconciler, store = _make_reconciler(make_node(status=NodePhase.RUNNING, daemoned=True))

        assert _handle(reconciler, make_pod(phase="Succeeded")) is True

        assert len(store.updates) == 1
        node = store.stored("wf-1").get_node("wf-1-step")
        assert node.status == NodePhase.SUCCEEDED
        assert node.daemoned is None
        assert node.pod_ip == "10.0.0.5"
        assert reconciler.stats["updates_written"] == 1

    def test_redelivery_is_idempotent(self):
        reconciler, store = _make_reconciler(make_node(status=NodePhase.RUNNING))
        pod = make_pod(phase="Succeeded", outputs=OUTPUTS)

        assert _handle(reconciler, pod) is True
        assert _handle(reconciler, pod) is False

        assert len(store.updates) == 1

    def test_failed_pod_fails_node(self):
        reconciler, store = _make_reconciler(make_node(status=NodePhase.RUNNING))
        assert _handle(reconciler, make_pod(phase="Failed")) is True
        assert store.stored("wf-1").get_node("wf-1-step").status == NodePhase.FAILED

    def test_other_nodes_untouched(self):
        other = make_node("wf-1-other", status=NodePhase.RUNNING, pod_ip="10.0.0.8")
        reconciler, store = _make_reconciler(make_node(status=NodePhase.RUNNING), other)

        _handle(reconciler, make_pod(phase="Succeeded"))

        stored = store.stored("wf-1")
        assert stored.get_node("wf-1-other") == other
        assert len(stored.status.nodes) == 2


class TestDaemonPod:
    """A daemon step completes once all its containers are ready."""

    def test_not_all_ready_no_write(self):
        reconciler, store = _make_reconciler(make_node(status=NodePhase.RUNNING))
        pod = make_pod(phase="Running", daemon=True, ready=(True, False))
        assert _handle(reconciler, pod) is False
        assert store.updates == []

    def test_all_ready_single_write(self):
        reconciler, store = _make_reconciler(make_node(status=NodePhase.RUNNING))
        pod = make_pod(phase="Running", daemon=True, ready=(True, True))

        assert _handle(reconciler, pod) is True

        assert len(store.updates) == 1
        node = store.stored("wf-1").get_node("wf-1-step")
        assert node.status == NodePhase.SUCCEEDED
        assert node.daemoned is True

    def test_unreadable_template_no_store_access(self):
        reconciler, store = _make_reconciler(make_node(status=NodePhase.RUNNING))
        assert _handle(reconciler, make_pod(phase="Running", template="not-json")) is False
        assert store.get_calls == []
        assert store.updates == []


class TestOutputs:
    """Outputs are recorded once and never overwritten."""

    def test_existing_outputs_never_trigger_write(self):
        node = make_node(
            status=NodePhase.SUCCEEDED,
            pod_ip="10.0.0.5",
            outputs=Outputs(result="first"),
        )
        reconciler, store = _make_reconciler(node)

        pod = make_pod(phase="Succeeded", outputs={"result": "second"})
        assert _handle(reconciler, pod) is False
        assert store.updates == []
        assert store.stored("wf-1").get_node("wf-1-step").outputs.result == "first"

    def test_existing_outputs_kept_on_other_change(self):
        node = make_node(status=NodePhase.RUNNING, outputs=Outputs(result="first"))
        reconciler, store = _make_reconciler(node)

        assert _handle(reconciler, make_pod(phase="Succeeded", outputs="{garbage")) is True

        stored = store.stored("wf-1").get_node("wf-1-step")
        assert stored.status == NodePhase.SUCCEEDED
        assert stored.outputs.result == "first"

    def test_malformed_outputs_redelivery_writes_once(self):
        reconciler, store = _make_reconciler(make_node(status=NodePhase.RUNNING))
        pod = make_pod(phase="Succeeded", outputs="{broken")

        assert _handle(reconciler, pod) is True
        assert _handle(reconciler, pod) is False
        assert _handle(reconciler, pod) is False

        assert len(store.updates) == 1
        node = store.stored("wf-1").get_node("wf-1-step")
        assert node.status == NodePhase.ERROR
        assert node.outputs is None

    def test_outputs_round_trip_through_store(self):
        reconciler, store = _make_reconciler(make_node(status=NodePhase.RUNNING))
        _handle(reconciler, make_pod(phase="Succeeded", outputs=OUTPUTS))

        raw = store._bodies["wf-1"]["status"]["nodes"]["wf-1-step"]
        assert raw["outputs"]["result"] == "ok"
        assert raw["podIP"] == "10.0.0.5"
        assert raw["status"] == "Succeeded"


class TestStaleNotifications:
    """Terminal node status does not move backward."""

    def test_unknown_phase_after_success(self):
        reconciler, store = _make_reconciler(
            make_node(status=NodePhase.SUCCEEDED, pod_ip="10.0.0.5")
        )
        assert _handle(reconciler, make_pod(phase="Unknown")) is False
        assert store.updates == []

    def test_unknown_phase_on_running_node_is_error(self):
        reconciler, store = _make_reconciler(make_node(status=NodePhase.RUNNING, pod_ip="10.0.0.5"))
        assert _handle(reconciler, make_pod(phase="Unknown")) is True
        assert store.stored("wf-1").get_node("wf-1-step").status == NodePhase.ERROR


class TestDroppedNotifications:
    """Lookups that fail drop the notification without writing."""

    def test_pod_without_workflow_label(self):
        reconciler, store = _make_reconciler(make_node())
        assert _handle(reconciler, make_pod(phase="Succeeded", workflow=None)) is False
        assert store.get_calls == []

    def test_workflow_not_found(self):
        reconciler, store = _make_reconciler(make_node(), workflow="other")
        assert _handle(reconciler, make_pod(phase="Succeeded")) is False
        assert store.updates == []
        assert reconciler.stats["dropped"] == 1

    def test_node_not_found(self):
        reconciler, store = _make_reconciler(make_node("wf-1-elsewhere"))
        assert _handle(reconciler, make_pod(phase="Succeeded")) is False
        assert store.updates == []
        assert reconciler.stats["dropped"] == 1

    def test_store_read_failure(self):
        reconciler, store = _make_reconciler(make_node())
        store.fail_get = RepositoryError("connection reset", operation="get")
        assert _handle(reconciler, make_pod(phase="Succeeded")) is False
        assert reconciler.stats["dropped"] == 1


class TestPersistenceFailures:
    """Write failures are logged and swallowed."""

    def test_version_conflict_swallowed(self):
        reconciler, store = _make_reconciler(make_node(status=NodePhase.RUNNING))
        store.fail_update = VersionConflictError(
            "modified", operation="update", entity_id="wf-1", expected_version=1
        )

        assert _handle(reconciler, make_pod(phase="Succeeded")) is False
        assert reconciler.stats["update_failures"] == 1
        assert store.stored("wf-1").get_node("wf-1-step").status == NodePhase.RUNNING

    def test_redelivery_after_failure_writes(self):
        reconciler, store = _make_reconciler(make_node(status=NodePhase.RUNNING))
        pod = make_pod(phase="Succeeded")

        store.fail_update = RepositoryError("timeout", operation="update")
        assert _handle(reconciler, pod) is False

        store.fail_update = None
        assert _handle(reconciler, pod) is True
        assert store.stored("wf-1").get_node("wf-1-step").status == NodePhase.SUCCEEDED

    def test_concurrent_writer_conflict(self):
        reconciler, store = _make_reconciler(make_node(status=NodePhase.RUNNING))

        original_get = store.get

        async def get_then_bump(name):
            wf = await original_get(name)
            store.put(wf)  # another writer wins the race
            return wf

        store.get = get_then_bump
        assert _handle(reconciler, make_pod(phase="Succeeded")) is False
        assert reconciler.stats["update_failures"] == 1

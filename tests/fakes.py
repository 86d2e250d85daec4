# ============================================================================
# TEST FAKES
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Tests - Shared in-memory doubles
# PURPOSE: Resource store without PostgreSQL, plus model builders
# CREATED: 19 OCT 2026
# ============================================================================
"""
Test Fakes

InMemoryStore implements ResourceStore with the same version-checked
update semantics as the PostgreSQL repository. Failures can be injected
per operation.
"""

import json
from typing import Dict, List, Optional

from core.contracts import (
    ANNOTATION_KEY_OUTPUTS,
    ANNOTATION_KEY_TEMPLATE,
    LABEL_KEY_WORKFLOW,
    NodePhase,
)
from core.models import NodeStatus, ObjectMeta, Pod, Workflow
from infrastructure.base_repository import NotFoundError, VersionConflictError
from infrastructure.cluster import ResourceStore


class InMemoryStore(ResourceStore):
    """Dict-backed resource store."""

    def __init__(self, model, namespace="default", objects=None):
        super().__init__(model, namespace)
        self._bodies: Dict[str, dict] = {}
        self.get_calls: List[str] = []
        self.updates: List = []
        self.fail_get: Optional[Exception] = None
        self.fail_list: Optional[Exception] = None
        self.fail_update: Optional[Exception] = None
        for obj in objects or []:
            self.put(obj)

    def put(self, obj):
        """Insert or replace obj, bumping the stored version. Returns the stored copy."""
        current = self._bodies.get(obj.name)
        version = current["metadata"]["resourceVersion"] + 1 if current else 1
        body = obj.to_body()
        body["metadata"]["resourceVersion"] = version
        self._bodies[obj.name] = body
        return self.model.model_validate(body)

    def delete(self, name):
        self._bodies.pop(name, None)

    def stored(self, name):
        return self.model.model_validate(json.loads(json.dumps(self._bodies[name])))

    async def get(self, name):
        self.get_calls.append(name)
        if self.fail_get is not None:
            raise self.fail_get
        if name not in self._bodies:
            raise NotFoundError(f"{self.kind} '{name}' not found", operation="get", entity_id=name)
        return self.stored(name)

    async def list(self):
        if self.fail_list is not None:
            raise self.fail_list
        return [self.stored(name) for name in sorted(self._bodies)]

    async def update(self, obj):
        self.updates.append(obj)
        if self.fail_update is not None:
            raise self.fail_update
        current = self._bodies.get(obj.name)
        if current is None:
            raise NotFoundError(f"{self.kind} '{obj.name}' not found", operation="update", entity_id=obj.name)
        if current["metadata"]["resourceVersion"] != obj.resource_version:
            raise VersionConflictError(
                f"{self.kind} '{obj.name}' was modified",
                operation="update",
                entity_id=obj.name,
                expected_version=obj.resource_version,
            )
        return self.put(obj)


# ============================================================================
# BUILDERS
# ============================================================================

def make_workflow(name="wf-1", nodes=None):
    """Create a Workflow whose status holds the given NodeStatus entries."""
    return Workflow(
        metadata=ObjectMeta(name=name),
        status={"nodes": {n.id: n for n in nodes or []}},
    )


def make_node(node_id="wf-1-step", status=NodePhase.RUNNING, **kwargs):
    return NodeStatus(id=node_id, name=kwargs.pop("name", node_id), status=status, **kwargs)


def make_pod(
    name="wf-1-step",
    phase="Running",
    workflow="wf-1",
    pod_ip="10.0.0.5",
    daemon=None,
    template=None,
    outputs=None,
    ready=(True,),
):
    """
    Create a Pod.

    daemon=None omits the template annotation unless template (raw string)
    is given; outputs may be a dict (serialized) or a raw string.
    """
    labels = {LABEL_KEY_WORKFLOW: workflow} if workflow else {}
    annotations = {}
    if template is not None:
        annotations[ANNOTATION_KEY_TEMPLATE] = template
    elif daemon is not None:
        annotations[ANNOTATION_KEY_TEMPLATE] = json.dumps({"name": "step", "daemon": daemon})
    if outputs is not None:
        annotations[ANNOTATION_KEY_OUTPUTS] = outputs if isinstance(outputs, str) else json.dumps(outputs)

    return Pod(
        metadata=ObjectMeta(name=name, labels=labels, annotations=annotations),
        status={
            "phase": phase,
            "podIP": pod_ip,
            "containerStatuses": [{"name": f"c{i}", "ready": r} for i, r in enumerate(ready)],
        },
    )

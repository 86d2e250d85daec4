# ============================================================================
# WORKFLOW RESOURCE MODEL
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Core model - Workflow resource and node status
# PURPOSE: Persisted workflow document with per-node recorded status
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: Workflow, WorkflowStatus, NodeStatus, Outputs, Parameter, Artifact, Template
# DEPENDENCIES: pydantic
# ============================================================================
"""
Workflow Resource Model

Key concept:
- Workflow.spec = what to run (owned by the DAG operator, opaque here)
- Workflow.status.nodes = recorded progress, one NodeStatus per step

Node identifiers equal the name of the pod that runs the step. The node
mapping is append-only while the workflow is active: the controller only
mutates existing entries, never removes them.

Template and Outputs are the payloads carried by pod annotations. They
are parsed lazily by the reconciler.
"""

from typing import Any, ClassVar, Dict, List, Optional
from pydantic import BaseModel, Field, StrictBool

from core.contracts import NodePhase, ResourceKind
from core.models.resource import Resource


# ============================================================================
# ANNOTATION PAYLOADS
# ============================================================================

class Template(BaseModel):
    """
    Step template as serialized onto the pod by the DAG operator.

    Only `daemon` matters to status reconciliation; everything else is
    carried through untouched.
    """

    name: Optional[str] = None
    daemon: Optional[StrictBool] = Field(
        default=None,
        description="Step is complete once its pod is ready, not when it exits"
    )

    model_config = {"extra": "allow"}

    @property
    def is_daemon(self) -> bool:
        return bool(self.daemon)


class Parameter(BaseModel):
    """Output parameter produced by a step."""

    name: str
    value: Optional[str] = None

    model_config = {"extra": "ignore"}


class Artifact(BaseModel):
    """Output artifact produced by a step."""

    name: str
    path: Optional[str] = None
    s3: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Location of the uploaded artifact in the S3 repository"
    )

    model_config = {"extra": "ignore"}


class Outputs(BaseModel):
    """
    Step outputs reported by the executor via pod annotation.

    Keys the controller does not model are dropped. Malformed JSON or a
    field of the wrong type fails validation.
    """

    parameters: List[Parameter] = Field(default_factory=list)
    artifacts: List[Artifact] = Field(default_factory=list)
    result: Optional[str] = None

    model_config = {"extra": "ignore"}


# ============================================================================
# NODE STATUS
# ============================================================================

class NodeStatus(BaseModel):
    """
    Recorded status of one step within a workflow.

    Lifecycle:
        1. Created by the DAG operator when the step's pod is launched
        2. Updated by the status reconciler from pod notifications
        3. Read by the DAG operator to decide what runs next

    Invariants:
        - daemoned: None and False mean the same thing ("not daemoned");
          the reconciler only ever writes None or True
        - outputs: set at most once, never overwritten
    """

    id: str = Field(..., max_length=253)
    name: str = Field(default="", max_length=253)
    status: NodePhase = Field(default=NodePhase.PENDING)
    pod_ip: str = Field(default="", alias="podIP")
    daemoned: Optional[bool] = None
    outputs: Optional[Outputs] = None

    model_config = {"populate_by_name": True}

    @property
    def is_terminal(self) -> bool:
        """Check if node is in a terminal state."""
        return self.status.is_terminal()

    @property
    def is_daemoned(self) -> bool:
        return bool(self.daemoned)

    def __str__(self) -> str:
        return self.name or self.id


class WorkflowStatus(BaseModel):
    """Recorded progress of a workflow."""

    nodes: Dict[str, NodeStatus] = Field(default_factory=dict)

    model_config = {"populate_by_name": True}


class Workflow(Resource):
    """
    Persisted workflow resource.

    The controller never creates workflows; it fetches them by name (the
    pod's workflow label), mutates node entries and writes them back
    through a version-checked update.
    """

    KIND: ClassVar[ResourceKind] = ResourceKind.WORKFLOW

    spec: Dict[str, Any] = Field(default_factory=dict)
    status: WorkflowStatus = Field(default_factory=WorkflowStatus)

    def get_node(self, node_id: str) -> Optional[NodeStatus]:
        """Look up a node status entry by id (pod name)."""
        return self.status.nodes.get(node_id)


__all__ = [
    "Template",
    "Parameter",
    "Artifact",
    "Outputs",
    "NodeStatus",
    "WorkflowStatus",
    "Workflow",
]

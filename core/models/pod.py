# ============================================================================
# EXECUTION UNIT (POD) MODEL
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Core model - Pod as seen through watch notifications
# PURPOSE: The execution unit that carries out one workflow step
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: Pod, PodStatus, ContainerStatus
# DEPENDENCIES: pydantic
# ============================================================================
"""
Pod Model

Pods are not owned by the controller. They arrive through the pod watch,
are reconciled once against their workflow's node status, and are then
discarded.

Join keys:
- metadata.name                    -> key into Workflow.status.nodes
- metadata.labels[workflow label]  -> name of the owning Workflow
"""

from typing import ClassVar, List, Optional
from pydantic import BaseModel, Field

from core.contracts import (
    ANNOTATION_KEY_OUTPUTS,
    ANNOTATION_KEY_TEMPLATE,
    LABEL_KEY_WORKFLOW,
    ResourceKind,
)
from core.models.resource import Resource


class ContainerStatus(BaseModel):
    """Readiness of one container in the pod."""

    name: str = ""
    ready: bool = False


class PodStatus(BaseModel):
    """
    Observed pod state.

    phase stays a plain string: the reconciler maps values it does not
    recognise to a node Error instead of rejecting the notification.
    """

    phase: str = Field(default="Pending")
    pod_ip: str = Field(default="", alias="podIP")
    container_statuses: List[ContainerStatus] = Field(
        default_factory=list,
        alias="containerStatuses",
    )

    model_config = {"populate_by_name": True}


class Pod(Resource):
    """Execution unit running one workflow step."""

    KIND: ClassVar[ResourceKind] = ResourceKind.POD

    status: PodStatus = Field(default_factory=PodStatus)

    @property
    def workflow_name(self) -> Optional[str]:
        """Name of the owning workflow, None for pods outside any workflow."""
        return self.metadata.labels.get(LABEL_KEY_WORKFLOW)

    @property
    def template_annotation(self) -> Optional[str]:
        return self.metadata.annotations.get(ANNOTATION_KEY_TEMPLATE)

    @property
    def outputs_annotation(self) -> Optional[str]:
        return self.metadata.annotations.get(ANNOTATION_KEY_OUTPUTS)

    @property
    def all_containers_ready(self) -> bool:
        """True when every reported container is ready (vacuously true for none)."""
        return all(c.ready for c in self.status.container_statuses)


__all__ = ["Pod", "PodStatus", "ContainerStatus"]

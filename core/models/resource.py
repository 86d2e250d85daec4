# ============================================================================
# CLUSTER RESOURCE BASE MODELS
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Core model - Resource metadata and simple keyed resources
# PURPOSE: Common metadata for every stored resource, config maps, secrets
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: ObjectMeta, Resource, ConfigMap, Secret
# DEPENDENCIES: pydantic
# ============================================================================
"""
Cluster Resource Models

Every resource held by the resource store has the same envelope:

    {"metadata": {...}, <kind-specific fields>}

ObjectMeta.resource_version is the optimistic concurrency token: the store
bumps it on every successful update and rejects updates carrying a stale
value.
"""

from typing import ClassVar, Dict
from pydantic import BaseModel, Field, computed_field

from core.contracts import ResourceKind


class ObjectMeta(BaseModel):
    """Identity and bookkeeping fields shared by all resources."""

    name: str = Field(..., min_length=1, max_length=253)
    namespace: str = Field(default="default", max_length=63)
    resource_version: int = Field(
        default=0,
        ge=0,
        alias="resourceVersion",
        description="Version for optimistic locking - incremented by the store on each update"
    )
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)

    model_config = {"populate_by_name": True}


class Resource(BaseModel):
    """
    Base envelope for stored resources.

    Subclasses set KIND so the store and the log lines know what they hold.
    """

    KIND: ClassVar[ResourceKind]

    metadata: ObjectMeta

    model_config = {"populate_by_name": True}

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace

    @property
    def resource_version(self) -> int:
        return self.metadata.resource_version

    @computed_field
    @property
    def self_link(self) -> str:
        """Stable path used in log lines: /<kind>/<namespace>/<name>."""
        return f"/{self.KIND.value.lower()}s/{self.metadata.namespace}/{self.metadata.name}"

    def to_body(self) -> dict:
        """Serialize for the resource store (wire aliases, no computed fields)."""
        return self.model_dump(mode="json", by_alias=True, exclude={"self_link"})


class ConfigMap(Resource):
    """Keyed string blobs (controller configuration lives here)."""

    KIND: ClassVar[ResourceKind] = ResourceKind.CONFIG_MAP

    data: Dict[str, str] = Field(default_factory=dict)


class Secret(Resource):
    """Keyed secret values referenced by the artifact repository config."""

    KIND: ClassVar[ResourceKind] = ResourceKind.SECRET

    data: Dict[str, str] = Field(default_factory=dict)


__all__ = ["ObjectMeta", "Resource", "ConfigMap", "Secret"]

# ============================================================================
# CLUSTER RESOURCE STORE INTERFACE
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Infrastructure - Capability interface for resource access
# PURPOSE: Get/list/update contract consumed by watches, reconciler, config
# CREATED: 19 OCT 2026
# ============================================================================
"""
Cluster Resource Store

The controller talks to the cluster API only through this interface:

    get(name)    -> resource                raises NotFoundError
    list()       -> [resource, ...]
    update(obj)  -> resource (new version)  raises VersionConflictError, NotFoundError

A store instance is bound to one resource kind and one namespace.
update() is always version-checked: the object's
metadata.resource_version must match the stored one.

The PostgreSQL implementation lives in repositories.resource_repo.
"""

from abc import ABC, abstractmethod
from typing import Generic, List, Type, TypeVar

from core.models.resource import Resource

T = TypeVar("T", bound=Resource)


class ResourceStore(ABC, Generic[T]):
    """Abstract store for one resource kind."""

    def __init__(self, model: Type[T], namespace: str = "default"):
        self.model = model
        self.namespace = namespace

    @property
    def kind(self) -> str:
        return self.model.KIND.value

    @abstractmethod
    async def get(self, name: str) -> T:
        """Fetch one resource by name. Raises NotFoundError."""

    @abstractmethod
    async def list(self) -> List[T]:
        """List every resource of this kind in this store's namespace."""

    @abstractmethod
    async def update(self, obj: T) -> T:
        """
        Persist obj if its resource_version is still current.

        Returns the stored object with the bumped resource_version.
        Raises VersionConflictError if the resource changed since it was
        read, NotFoundError if it no longer exists.
        """


__all__ = ["ResourceStore"]

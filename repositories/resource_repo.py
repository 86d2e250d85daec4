# ============================================================================
# RESOURCE REPOSITORY
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Core - PostgreSQL-backed cluster resource store
# PURPOSE: Get/list/update with optimistic locking for one resource kind
# CREATED: 19 OCT 2026
# ============================================================================
"""
Resource Repository

PostgreSQL implementation of infrastructure.cluster.ResourceStore.

All kinds share one table keyed by (kind, namespace, name). The resource
document lives in `body` (JSONB); `resource_version` is a separate column
so the version check happens in the WHERE clause of the UPDATE, never in
Python.
"""

from typing import Any, Dict, List, Type

from psycopg import sql
from psycopg.rows import dict_row
from psycopg.types.json import Json
from psycopg_pool import AsyncConnectionPool

from core.models import ConfigMap, Pod, Secret, Workflow
from core.models.resource import Resource
from infrastructure.base_repository import (
    BaseRepository,
    NotFoundError,
    RepositoryError,
    VersionConflictError,
)
from infrastructure.cluster import ResourceStore, T
from .database import TABLE_RESOURCES


class ResourceRepository(BaseRepository, ResourceStore[T]):
    """Repository for one resource kind in one namespace."""

    def __init__(self, pool: AsyncConnectionPool, model: Type[T], namespace: str = "default"):
        BaseRepository.__init__(self)
        ResourceStore.__init__(self, model, namespace)
        self.pool = pool

    async def get(self, name: str) -> T:
        """
        Get a resource by name.

        Raises:
            NotFoundError: No such resource in this namespace
        """
        with self._error_context(f"{self.kind} get", name):
            async with self.pool.connection() as conn:
                conn.row_factory = dict_row
                result = await conn.execute(
                    sql.SQL("""
                    SELECT resource_version, body FROM {}
                    WHERE kind = %s AND namespace = %s AND name = %s
                    """).format(TABLE_RESOURCES),
                    (self.kind, self.namespace, name),
                )
                row = await result.fetchone()

        if row is None:
            raise NotFoundError(
                f"{self.kind} '{self.namespace}/{name}' not found",
                operation="get",
                entity_id=name,
            )
        return self._row_to_model(row)

    async def list(self) -> List[T]:
        """List all resources of this kind in the namespace, ordered by name."""
        with self._error_context(f"{self.kind} list", self.namespace):
            async with self.pool.connection() as conn:
                conn.row_factory = dict_row
                result = await conn.execute(
                    sql.SQL("""
                    SELECT resource_version, body FROM {}
                    WHERE kind = %s AND namespace = %s
                    ORDER BY name
                    """).format(TABLE_RESOURCES),
                    (self.kind, self.namespace),
                )
                rows = await result.fetchall()
        return [self._row_to_model(row) for row in rows]

    async def create(self, obj: T) -> T:
        """
        Insert a new resource at version 1.

        Used by bootstrap tooling and tests; the controller itself never
        creates resources.
        """
        with self._error_context(f"{self.kind} create", obj.name):
            async with self.pool.connection() as conn:
                await conn.execute(
                    sql.SQL("""
                    INSERT INTO {} (kind, namespace, name, resource_version, body)
                    VALUES (%(kind)s, %(namespace)s, %(name)s, 1, %(body)s)
                    """).format(TABLE_RESOURCES),
                    {
                        "kind": self.kind,
                        "namespace": self.namespace,
                        "name": obj.name,
                        "body": Json(obj.to_body()),
                    },
                )
        self._log_operation(True, f"{self.kind} created", obj.name)
        return self._with_version(obj, 1)

    async def update(self, obj: T) -> T:
        """
        Update a resource with optimistic locking.

        The row is only written if its resource_version still equals the
        version carried by obj. On success the returned copy carries the
        bumped version.

        Raises:
            VersionConflictError: Resource changed since obj was read
            NotFoundError: Resource no longer exists
        """
        expected = obj.resource_version
        with self._error_context(f"{self.kind} update", obj.name):
            async with self.pool.connection() as conn:
                conn.row_factory = dict_row
                result = await conn.execute(
                    sql.SQL("""
                    UPDATE {} SET
                        body = %(body)s,
                        resource_version = resource_version + 1,
                        updated_at = now()
                    WHERE kind = %(kind)s
                      AND namespace = %(namespace)s
                      AND name = %(name)s
                      AND resource_version = %(expected)s
                    RETURNING resource_version
                    """).format(TABLE_RESOURCES),
                    {
                        "body": Json(obj.to_body()),
                        "kind": self.kind,
                        "namespace": self.namespace,
                        "name": obj.name,
                        "expected": expected,
                    },
                )
                row = await result.fetchone()

                if row is None:
                    exists = await conn.execute(
                        sql.SQL("""
                        SELECT 1 FROM {}
                        WHERE kind = %s AND namespace = %s AND name = %s
                        """).format(TABLE_RESOURCES),
                        (self.kind, self.namespace, obj.name),
                    )
                    if await exists.fetchone() is None:
                        raise NotFoundError(
                            f"{self.kind} '{self.namespace}/{obj.name}' not found",
                            operation="update",
                            entity_id=obj.name,
                        )
                    self._log_operation(
                        False, f"{self.kind} update", obj.name,
                        {"expected_version": expected},
                    )
                    raise VersionConflictError(
                        f"{self.kind} '{self.namespace}/{obj.name}' was modified "
                        f"(expected version {expected})",
                        operation="update",
                        entity_id=obj.name,
                        expected_version=expected,
                    )

        new_version = row["resource_version"]
        self._log_operation(True, f"{self.kind} updated", obj.name, {"version": new_version})
        return self._with_version(obj, new_version)

    def _row_to_model(self, row: Dict[str, Any]) -> T:
        """Convert a database row to the model, taking the version from its column."""
        body = dict(row["body"])
        metadata = dict(body.get("metadata") or {})
        metadata["resourceVersion"] = row["resource_version"]
        body["metadata"] = metadata
        try:
            return self.model.model_validate(body)
        except ValueError as e:
            raise RepositoryError(
                f"Stored {self.kind} '{metadata.get('name')}' is malformed: {e}",
                operation="decode",
                entity_id=metadata.get("name"),
            ) from e

    @staticmethod
    def _with_version(obj: T, version: int) -> T:
        metadata = obj.metadata.model_copy(update={"resource_version": version})
        return obj.model_copy(update={"metadata": metadata})


# ============================================================================
# TYPED FACTORIES
# ============================================================================

def workflow_repository(pool: AsyncConnectionPool, namespace: str = "default") -> "ResourceRepository[Workflow]":
    return ResourceRepository(pool, Workflow, namespace)


def pod_repository(pool: AsyncConnectionPool, namespace: str = "default") -> "ResourceRepository[Pod]":
    return ResourceRepository(pool, Pod, namespace)


def config_map_repository(pool: AsyncConnectionPool, namespace: str = "default") -> "ResourceRepository[ConfigMap]":
    return ResourceRepository(pool, ConfigMap, namespace)


def secret_repository(pool: AsyncConnectionPool, namespace: str = "default") -> "ResourceRepository[Secret]":
    return ResourceRepository(pool, Secret, namespace)


__all__ = [
    "ResourceRepository",
    "workflow_repository",
    "pod_repository",
    "config_map_repository",
    "secret_repository",
]

# ============================================================================
# REPOSITORIES MODULE
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Core - Database access layer
# PURPOSE: PostgreSQL-backed cluster resource store
# CREATED: 19 OCT 2026
# ============================================================================
"""
Repositories Module

Provides database access for cluster resources.
Uses psycopg3 async with connection pooling.

Usage:
    from repositories import get_pool, workflow_repository

    pool = await get_pool()
    workflows = workflow_repository(pool, namespace="default")
    wf = await workflows.get("wf-123")
"""

from .database import get_pool, init_pool, close_pool, ensure_schema
from .resource_repo import (
    ResourceRepository,
    workflow_repository,
    pod_repository,
    config_map_repository,
    secret_repository,
)

__all__ = [
    "get_pool",
    "init_pool",
    "close_pool",
    "ensure_schema",
    "ResourceRepository",
    "workflow_repository",
    "pod_repository",
    "config_map_repository",
    "secret_repository",
]

"""
Infrastructure module for the workflow controller.

Provides:
- ResourceStore: Abstract get/list/update access to one resource kind
- Informer: List-and-poll watch over a ResourceStore
- BaseRepository: Error and logging conventions for store implementations

Usage:
    from infrastructure import Informer

    informer = Informer(store, handler, poll_interval=1.0, resync_period=300)
    await informer.start(stop_event)
"""

from infrastructure.base_repository import (
    BaseRepository,
    RepositoryError,
    NotFoundError,
    VersionConflictError,
)
from infrastructure.cluster import ResourceStore
from infrastructure.informer import Informer, EventHandler

__all__ = [
    # Repository base
    'BaseRepository',
    'RepositoryError',
    'NotFoundError',
    'VersionConflictError',
    # Cluster access
    'ResourceStore',
    'Informer',
    'EventHandler',
]

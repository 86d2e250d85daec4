# ============================================================================
# BASE REPOSITORY - ERROR HANDLING PATTERNS
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Infrastructure - Base repository patterns
# PURPOSE: Common error types, error wrapping and logging for resource stores
# CREATED: 19 OCT 2026
# ============================================================================
"""
Base Repository Patterns

Abstract base class providing common infrastructure for resource stores:
- Consistent error handling with a context manager
- Store error taxonomy (not found, version conflict)
- Standardized operation logging

Storage-specific repositories (PostgreSQL) extend this with their
connection management.
"""

import logging
from abc import ABC
from contextlib import contextmanager
from typing import Any, Dict, Optional


class RepositoryError(Exception):
    """Base exception for repository operations."""

    def __init__(self, message: str, operation: str = None, entity_id: str = None):
        self.operation = operation
        self.entity_id = entity_id
        super().__init__(message)


class NotFoundError(RepositoryError):
    """Raised when the requested resource does not exist."""


class VersionConflictError(RepositoryError):
    """
    Raised when a version-checked update loses the race.

    The resource changed since it was read; the caller should re-read
    and re-apply (or, for the controller, wait for redelivery).
    """

    def __init__(
        self,
        message: str,
        operation: str = None,
        entity_id: str = None,
        expected_version: Optional[int] = None,
    ):
        self.expected_version = expected_version
        super().__init__(message, operation=operation, entity_id=entity_id)


class BaseRepository(ABC):
    """
    Abstract base repository with common patterns.

    Provides:
    - Error context manager for consistent error handling
    - Standardized logging

    Subclasses implement storage-specific operations.
    """

    def __init__(self):
        """Initialize base repository."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.logger.debug(f"{self.__class__.__name__} initialized")

    @contextmanager
    def _error_context(self, operation: str, entity_id: Optional[str] = None):
        """
        Context manager for consistent error handling.

        Driver exceptions are logged with context and re-raised as
        RepositoryError. Store errors that already carry meaning
        (NotFoundError, VersionConflictError) pass through unchanged.

        Example:
            with self._error_context("workflow update", name):
                await conn.execute(...)
        """
        try:
            yield
        except RepositoryError:
            raise
        except Exception as e:
            error_msg = f"{operation} failed"
            if entity_id:
                error_msg += f" for {entity_id}"
            error_msg += f": {e}"
            self.logger.error(error_msg)
            raise RepositoryError(error_msg, operation=operation, entity_id=entity_id) from e

    def _log_operation(
        self,
        success: bool,
        operation: str,
        entity_id: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Log operation result with consistent formatting.

        Format:
            Success: "operation: entity_id | details"
            Failure: "operation failed: entity_id | details"
        """
        if success:
            msg = f"{operation}: {entity_id}"
        else:
            msg = f"{operation} failed: {entity_id}"

        if details:
            msg += f" | {details}"

        if success:
            self.logger.debug(msg)
        else:
            self.logger.warning(msg)


__all__ = [
    "RepositoryError",
    "NotFoundError",
    "VersionConflictError",
    "BaseRepository",
]

# ============================================================================
# WATCH EVENT MODEL
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Core model - Watch notifications
# PURPOSE: One Add/Update/Delete notification delivered by a watch
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: WatchEvent
# DEPENDENCIES: dataclasses
# ============================================================================
"""
Watch Event Model

A WatchEvent pairs the notification type with the resulting object. For
DELETED the object is the last state the watch knew about.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

from core.contracts import WatchEventType
from core.models.resource import Resource

T = TypeVar("T", bound=Resource)


@dataclass(frozen=True)
class WatchEvent(Generic[T]):
    """A single watch notification."""

    type: WatchEventType
    object: T

    @property
    def kind(self) -> str:
        return self.object.KIND.value

    def describe(self) -> str:
        """Short form for log lines, e.g. 'Pod MODIFIED /pods/default/wf-1-step'."""
        return f"{self.kind} {self.type.value} {self.object.self_link}"


__all__ = ["WatchEvent"]

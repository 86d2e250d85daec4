# ============================================================================
# INFORMER - LIST/POLL WATCH SUBSCRIPTION
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Infrastructure - Watch/event API over a resource store
# PURPOSE: Turn periodic listings into ordered Add/Update/Delete notifications
# CREATED: 19 OCT 2026
# ============================================================================
"""
Informer

Watch subscription for one resource kind, built on ResourceStore.list():

1. start(): initial list. Failure raises SubscriptionError (fatal to the
   caller). Every listed object is delivered as ADDED.
2. Poll loop: every poll_interval seconds re-list and diff against the
   cache by (name -> resource_version):
     new name              -> ADDED
     version changed       -> MODIFIED
     name gone             -> DELETED (last-known object)
3. Every resync_period seconds, every cached object is re-delivered as
   MODIFIED even if unchanged (full resync). This is the redelivery the
   controller relies on to heal dropped or failed reconciliations.

Delivery is strictly sequential: the handler is awaited for each event
before the next one is delivered. A handler that blocks (backpressure)
stalls this informer only.

Transient list failures inside the poll loop are logged and retried on
the next poll; they never surface to the caller.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Dict, Generic, List, Optional

from core.contracts import WatchEventType
from core.errors import SubscriptionError
from core.logging import log_context
from core.models.events import WatchEvent
from infrastructure.cluster import ResourceStore, T

logger = logging.getLogger(__name__)

EventHandler = Callable[[WatchEvent], Awaitable[None]]


class Informer(Generic[T]):
    """List-and-poll watch for one resource kind."""

    def __init__(
        self,
        store: ResourceStore[T],
        handler: EventHandler,
        poll_interval: float = 1.0,
        resync_period: float = 0.0,
        label_selector: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize informer.

        Args:
            store: Resource store to list from
            handler: Awaited once per notification, in order
            poll_interval: Seconds between listings
            resync_period: Seconds between full redeliveries (0 disables)
            label_selector: Only objects carrying all these labels are watched
        """
        self.store = store
        self.handler = handler
        self.poll_interval = poll_interval
        self.resync_period = resync_period
        self.label_selector = label_selector or {}

        self._cache: Dict[str, T] = {}
        self._task: Optional[asyncio.Task] = None
        self._last_resync = 0.0

        # Metrics
        self._events_delivered = 0
        self._list_errors = 0

    @property
    def kind(self) -> str:
        return self.store.kind

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self, stop_event: asyncio.Event) -> None:
        """
        Establish the subscription and begin delivering events.

        The initial listing must succeed; the ADDED events for it are
        delivered from the background task so start() returns as soon as
        the subscription is established.

        Raises:
            SubscriptionError: Initial listing failed
        """
        try:
            initial = await self._list()
        except Exception as e:
            raise SubscriptionError(
                f"Failed to establish {self.kind} watch: {e}",
                resource=self.kind,
            ) from e

        logger.info(f"{self.kind} watch established ({len(initial)} objects)")
        self._task = asyncio.create_task(
            self._run(initial, stop_event),
            name=f"informer-{self.kind.lower()}",
        )

    async def stop(self) -> None:
        """Cancel the poll loop. Events not yet delivered are dropped."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info(
            f"{self.kind} watch stopped (delivered={self._events_delivered}, "
            f"list_errors={self._list_errors})"
        )

    async def _run(self, initial: List[T], stop_event: asyncio.Event) -> None:
        self._last_resync = time.monotonic()
        await self._apply(initial, resync=False)

        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.poll_interval)
                break  # Stop event was set
            except asyncio.TimeoutError:
                pass

            try:
                current = await self._list()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._list_errors += 1
                logger.warning(f"{self.kind} list failed, retrying next poll: {e}")
                continue

            resync = (
                self.resync_period > 0
                and time.monotonic() - self._last_resync >= self.resync_period
            )
            if resync:
                self._last_resync = time.monotonic()
            await self._apply(current, resync=resync)

    async def _list(self) -> List[T]:
        items = await self.store.list()
        if not self.label_selector:
            return items
        return [item for item in items if self._matches(item)]

    def _matches(self, obj: T) -> bool:
        labels = obj.metadata.labels
        return all(labels.get(k) == v for k, v in self.label_selector.items())

    async def _apply(self, current: List[T], resync: bool) -> None:
        """Diff a listing against the cache and deliver the resulting events."""
        seen = set()
        for obj in current:
            seen.add(obj.name)
            cached = self._cache.get(obj.name)
            self._cache[obj.name] = obj
            if cached is None:
                await self._deliver(WatchEventType.ADDED, obj)
            elif cached.resource_version != obj.resource_version or resync:
                await self._deliver(WatchEventType.MODIFIED, obj)

        for name in [n for n in self._cache if n not in seen]:
            last_known = self._cache.pop(name)
            await self._deliver(WatchEventType.DELETED, last_known)

        if resync:
            logger.debug(f"{self.kind} resync delivered {len(current)} objects")

    async def _deliver(self, event_type: WatchEventType, obj: T) -> None:
        event = WatchEvent(type=event_type, object=obj)
        with log_context(kind=self.kind):
            try:
                await self.handler(event)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.exception(f"{self.kind} handler failed for {event.describe()}: {e}")
        self._events_delivered += 1

    @property
    def stats(self) -> Dict[str, int]:
        return {
            "cached": len(self._cache),
            "events_delivered": self._events_delivered,
            "list_errors": self._list_errors,
        }


__all__ = ["Informer", "EventHandler"]

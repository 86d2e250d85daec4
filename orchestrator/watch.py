# ============================================================================
# WATCH BRIDGE
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Core - Watch subscriptions to control loop channels
# PURPOSE: Forward workflow and pod notifications onto per-kind handoff channels
# CREATED: 19 OCT 2026
# ============================================================================
"""
Watch Bridge

Two independent subscriptions feed one serialized processing stream:

    workflow informer --send--> workflow channel --\
                                                    +--> control loop
    pod informer      --send--> pod channel -------/

Each channel is an unbuffered handoff: send() returns only once the
control loop has taken the object. A slow reconciliation therefore
delays acknowledgement of further notifications of the same kind (the
informer delivers sequentially and is waiting on send), but never of
the other kind.

Delete notifications forward the last-known object, same as Add/Update.
"""

import asyncio
import logging
from typing import Generic, Optional, TypeVar

from core.config import ControllerSettings
from core.errors import SubscriptionError
from core.models import Pod, WatchEvent, Workflow
from infrastructure.cluster import ResourceStore
from infrastructure.informer import Informer

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HandoffChannel(Generic[T]):
    """
    Unbuffered (size-zero) channel between one producer and one consumer.

    Built on asyncio.Queue(maxsize=1) plus join(): the receiver marks the
    item done as soon as it takes it, which releases the sender. At most
    one item is ever in flight.
    """

    def __init__(self, name: str):
        self.name = name
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=1)
        self._sent = 0

    async def send(self, item: T) -> None:
        """Block until the receiver has taken item."""
        await self._queue.put(item)
        await self._queue.join()
        self._sent += 1

    async def receive(self) -> T:
        """Take the next item, releasing its sender."""
        item = await self._queue.get()
        self._queue.task_done()
        return item

    @property
    def sent(self) -> int:
        return self._sent

    def __repr__(self) -> str:
        return f"HandoffChannel({self.name!r}, waiting={self._queue.qsize()})"


class WatchBridge:
    """
    Owns the workflow and pod subscriptions and their channels.

    Pods are watched in settings.namespace. Every notification is
    forwarded; pods unrelated to any workflow are ignored downstream.
    """

    def __init__(
        self,
        workflow_store: ResourceStore[Workflow],
        pod_store: ResourceStore[Pod],
        settings: Optional[ControllerSettings] = None,
    ):
        self.settings = settings or ControllerSettings()
        self.workflow_updates: HandoffChannel[Workflow] = HandoffChannel("workflows")
        self.pod_updates: HandoffChannel[Pod] = HandoffChannel("pods")

        self._workflow_informer = Informer(
            workflow_store,
            self._on_workflow_event,
            poll_interval=self.settings.poll_interval,
            resync_period=self.settings.resync_period,
        )
        self._pod_informer = Informer(
            pod_store,
            self._on_pod_event,
            poll_interval=self.settings.poll_interval,
            resync_period=self.settings.resync_period,
        )

    async def start(self, stop_event: asyncio.Event) -> None:
        """
        Establish both subscriptions.

        Raises:
            SubscriptionError: Either watch could not be established. A
                watch that was already started is stopped first.
        """
        logger.info("Watch Workflow objects")
        await self._workflow_informer.start(stop_event)

        logger.info(f"Watch workflow pods in namespace '{self.settings.namespace}'")
        try:
            await self._pod_informer.start(stop_event)
        except SubscriptionError:
            await self._workflow_informer.stop()
            raise

    async def stop(self) -> None:
        await self._workflow_informer.stop()
        await self._pod_informer.stop()

    async def _on_workflow_event(self, event: WatchEvent) -> None:
        logger.info(f"WF {event.type.value} {event.object.self_link}")
        await self.workflow_updates.send(event.object)

    async def _on_pod_event(self, event: WatchEvent) -> None:
        logger.info(f"Pod {event.type.value} {event.object.self_link}")
        await self.pod_updates.send(event.object)

    @property
    def stats(self) -> dict:
        return {
            "workflows": self._workflow_informer.stats,
            "pods": self._pod_informer.stats,
        }


__all__ = ["HandoffChannel", "WatchBridge"]

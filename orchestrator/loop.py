# ============================================================================
# CONTROL LOOP
# ============================================================================
# EPOCH: 1 - POD RECONCILIATION
# STATUS: Core - Single consumer for workflow and pod notifications
# PURPOSE: Serialize processing of both notification streams
# CREATED: 19 OCT 2026
# ============================================================================
"""
Control Loop

One consumer, two producers:

    workflow channel --> operator.operate(workflow)
    pod channel      --> reconciler.handle_pod_update(pod)

Exactly one item is processed at a time, so workflow operations and pod
reconciliations never run concurrently with each other. When both
channels have an item ready the kind that was NOT served last goes first,
which keeps a busy stream of one kind from starving the other.

Processing errors are logged and counted; the loop carries on with the
next item. Nothing is retried here: the watch's periodic resync
redelivers every object.

Shutdown cancels the receives that are still waiting, stops the watch
bridge and returns. Items already handed over but not yet processed are
dropped.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from core.config import ControllerSettings, get_settings
from core.contracts import ResourceKind
from core.logging import log_checkpoint
from core.models import Pod, Workflow
from infrastructure.cluster import ResourceStore
from orchestrator.operator import LoggingWorkflowOperator, WorkflowOperator
from orchestrator.watch import WatchBridge
from services.reconciler import PodStatusReconciler

logger = logging.getLogger(__name__)


class WorkflowController:
    """
    Workflow pod controller.

    Owns the watch bridge and drives the control loop. Use run() to block
    until a stop event is set, or start()/stop() to run the loop as a
    background task inside the FastAPI application.
    """

    def __init__(
        self,
        workflow_store: ResourceStore[Workflow],
        pod_store: ResourceStore[Pod],
        operator: Optional[WorkflowOperator] = None,
        reconciler: Optional[PodStatusReconciler] = None,
        settings: Optional[ControllerSettings] = None,
    ):
        """
        Initialize controller.

        Args:
            workflow_store: Store the workflows are watched and updated in
            pod_store: Store the workflow pods are watched in
            operator: Workflow operator (defaults to LoggingWorkflowOperator)
            reconciler: Pod reconciler (defaults to one over workflow_store)
            settings: Watch settings (defaults to environment settings)
        """
        self.settings = settings or get_settings()
        self.bridge = WatchBridge(workflow_store, pod_store, self.settings)
        self.operator = operator or LoggingWorkflowOperator()
        self.reconciler = reconciler or PodStatusReconciler(workflow_store)

        # State
        self._running = False
        self._stop_event = asyncio.Event()
        self._loop_task: Optional[asyncio.Task] = None
        self._last_served: Optional[ResourceKind] = None

        # Metrics
        self._started_at: Optional[datetime] = None
        self._workflows_processed = 0
        self._pods_processed = 0
        self._errors = 0
        self._last_event_at: Optional[datetime] = None

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    async def run(self, stop_event: asyncio.Event) -> None:
        """
        Establish the watches and process notifications until stop_event is set.

        Raises:
            SubscriptionError: A watch could not be established
        """
        await self.bridge.start(stop_event)
        self._running = True
        self._started_at = datetime.now(timezone.utc)
        try:
            await self._control_loop(stop_event)
        finally:
            self._running = False

    async def start(self) -> None:
        """
        Establish the watches and start the control loop in the background.

        Raises:
            SubscriptionError: A watch could not be established
        """
        if self._running:
            logger.warning("Controller already running")
            return

        self._stop_event.clear()
        await self.bridge.start(self._stop_event)

        self._running = True
        self._started_at = datetime.now(timezone.utc)
        self._loop_task = asyncio.create_task(
            self._control_loop(self._stop_event),
            name="controller-loop",
        )
        logger.info(
            f"Controller started (namespace={self.settings.namespace}, "
            f"poll={self.settings.poll_interval}s, resync={self.settings.resync_period}s)"
        )
        log_checkpoint("controller_started", {"namespace": self.settings.namespace})

    async def stop(self) -> None:
        """Stop the control loop. An item being processed is abandoned."""
        logger.info("Stopping controller")

        self._running = False
        self._stop_event.set()

        if self._loop_task:
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
            self._loop_task = None

        logger.info(
            f"Controller stopped (workflows={self._workflows_processed}, "
            f"pods={self._pods_processed}, errors={self._errors})"
        )

    # ========================================================================
    # CONTROL LOOP
    # ========================================================================

    async def _control_loop(self, stop_event: asyncio.Event) -> None:
        channels = {
            ResourceKind.WORKFLOW: self.bridge.workflow_updates,
            ResourceKind.POD: self.bridge.pod_updates,
        }
        receives: Dict[ResourceKind, asyncio.Task] = {}
        ready: Dict[ResourceKind, Any] = {}
        stop_wait = asyncio.create_task(stop_event.wait(), name="controller-stop")

        logger.info("Control loop started")
        try:
            while not stop_event.is_set():
                for kind, channel in channels.items():
                    if kind not in ready and kind not in receives:
                        receives[kind] = asyncio.create_task(
                            channel.receive(),
                            name=f"controller-receive-{kind.value.lower()}",
                        )

                if not ready:
                    await asyncio.wait(
                        [stop_wait, *receives.values()],
                        return_when=asyncio.FIRST_COMPLETED,
                    )
                    if stop_event.is_set():
                        break

                for kind in list(receives):
                    if receives[kind].done():
                        ready[kind] = receives.pop(kind).result()

                kind = self._select(ready)
                await self._dispatch(kind, ready.pop(kind))
        finally:
            pending = [*receives.values(), stop_wait]
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            if ready:
                logger.info(f"Dropping {len(ready)} undelivered item(s) on shutdown")
            await self.bridge.stop()
            logger.info("Control loop stopped")

    def _select(self, ready: Dict[ResourceKind, Any]) -> ResourceKind:
        """Pick the next kind to serve: the only one ready, else the one not served last."""
        if len(ready) == 1:
            return next(iter(ready))
        if self._last_served is ResourceKind.WORKFLOW:
            return ResourceKind.POD
        return ResourceKind.WORKFLOW

    async def _dispatch(self, kind: ResourceKind, obj: Any) -> None:
        self._last_served = kind
        self._last_event_at = datetime.now(timezone.utc)
        try:
            if kind is ResourceKind.WORKFLOW:
                await self.operator.operate(obj)
                self._workflows_processed += 1
            else:
                await self.reconciler.handle_pod_update(obj)
                self._pods_processed += 1
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._errors += 1
            logger.exception(f"Error processing {kind.value} {obj.self_link}: {e}")

    # ========================================================================
    # PROPERTIES
    # ========================================================================

    @property
    def is_running(self) -> bool:
        """Check if the control loop is running."""
        return self._running

    @property
    def stats(self) -> Dict[str, Any]:
        """Get controller statistics."""
        uptime_seconds = None
        if self._started_at:
            uptime_seconds = (datetime.now(timezone.utc) - self._started_at).total_seconds()

        return {
            "running": self._running,
            "namespace": self.settings.namespace,
            "started_at": self._started_at.isoformat() if self._started_at else None,
            "uptime_seconds": uptime_seconds,
            "workflows_processed": self._workflows_processed,
            "pods_processed": self._pods_processed,
            "errors": self._errors,
            "last_event_at": self._last_event_at.isoformat() if self._last_event_at else None,
            "reconciler": self.reconciler.stats,
            "watches": self.bridge.stats,
        }


__all__ = ["WorkflowController"]

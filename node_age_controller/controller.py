"""Watch-driven controller loop that feeds node names to the reconciliation policy."""

import threading
import time
from collections import deque

import urllib3
from kubernetes import watch
from kubernetes.client.rest import ApiException

from node_age_controller.exceptions import ConflictError, NodeNotFoundError, TransientError
from node_age_controller.logging_config import get_logger
from node_age_controller.models.policy import Decision
from node_age_controller.policy import ReconciliationPolicy

logger = get_logger(__name__)


class NodeController:
    """Runs the policy for every node that is added or modified.

    Requests are processed one at a time from a de-duplicating FIFO queue.
    Conflicts and transient failures put the node back on the queue for the
    next pass; missing nodes are dropped.
    """

    def __init__(
        self,
        node_client,
        policy: ReconciliationPolicy,
        resync_seconds: int = 300,
        watch_timeout_seconds: int = 60,
        error_backoff_seconds: float = 5.0,
    ):
        self.node_client = node_client
        self.policy = policy
        self.resync_seconds = resync_seconds
        self.watch_timeout_seconds = watch_timeout_seconds
        self.error_backoff_seconds = error_backoff_seconds
        self._queue: deque[str] = deque()
        self._queued: set[str] = set()
        self._resource_version: str | None = None

    @property
    def pending(self) -> list[str]:
        return list(self._queue)

    def enqueue(self, name: str) -> None:
        """Queue a node for reconciliation unless it is already waiting."""
        if name not in self._queued:
            self._queue.append(name)
            self._queued.add(name)

    def resync(self) -> None:
        """Queue every node in the cluster."""
        try:
            snapshot = self.node_client.list_nodes()
        except TransientError as e:
            logger.error(f"Resync failed: {e.message}")
            return

        self._resource_version = snapshot.resource_version
        for node in snapshot.nodes:
            self.enqueue(node.name)
        logger.debug(f"Resync queued {len(snapshot.nodes)} nodes")

    def process_queue(self) -> list[Decision]:
        """Reconcile every node currently queued.

        Returns:
            Decisions for the nodes that reconciled without error
        """
        decisions = []
        retry = []

        while self._queue:
            name = self._queue.popleft()
            self._queued.discard(name)
            try:
                decisions.append(self.policy.reconcile(name))
            except NodeNotFoundError:
                logger.debug(f"Node {name} no longer exists, dropping request")
            except ConflictError as e:
                logger.info(f"Conflict reconciling node {name}, requeueing: {e.message}")
                retry.append(name)
            except TransientError as e:
                logger.error(f"Error reconciling node {name}, requeueing: {e.message}")
                retry.append(name)

        for name in retry:
            self.enqueue(name)
        return decisions

    def handle_event(self, event: dict) -> None:
        """Queue the node from a watch event; deletions need no action."""
        event_type = event["type"]
        obj = event["object"]
        if obj.metadata.resource_version:
            self._resource_version = obj.metadata.resource_version

        if event_type in ("ADDED", "MODIFIED"):
            self.enqueue(obj.metadata.name)
        else:
            logger.debug(f"Ignoring {event_type} event for node {obj.metadata.name}")

    def _watch(self, stop: threading.Event) -> None:
        kwargs = {"timeout_seconds": self.watch_timeout_seconds}
        if self._resource_version:
            kwargs["resource_version"] = self._resource_version

        w = watch.Watch()
        for event in w.stream(self.node_client.api.list_node, **kwargs):
            if stop.is_set():
                break
            self.handle_event(event)
            self.process_queue()
        w.stop()

    def run(self, stop_event: threading.Event | None = None) -> None:
        """Watch nodes and reconcile them until ``stop_event`` is set.

        The watch resumes from the last resource version seen, so a stream
        timeout does not replay every node. A full resync runs at startup,
        every ``resync_seconds`` and whenever that version has expired.
        """
        stop = stop_event or threading.Event()
        logger.info("Starting node controller")
        last_resync = None

        while not stop.is_set():
            try:
                if last_resync is None or time.monotonic() - last_resync >= self.resync_seconds:
                    self.resync()
                    last_resync = time.monotonic()
                self.process_queue()
                self._watch(stop)

            except ApiException as e:
                if e.status == 410:  # Resource version too old
                    logger.info("Node watch resource version expired, relisting")
                    self._resource_version = None
                    last_resync = None
                    continue
                logger.error(f"Node watch error: {e}")
                stop.wait(self.error_backoff_seconds)

            except urllib3.exceptions.HTTPError as e:
                logger.error(f"Node watch connection error: {e}")
                stop.wait(self.error_backoff_seconds)

            except Exception as e:
                logger.error(f"Unexpected node controller error: {e}", exc_info=True)
                stop.wait(self.error_backoff_seconds)

        logger.info("Node controller stopped")

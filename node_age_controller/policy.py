"""Per-node reconciliation: decide whether a node should be cordoned, and cordon it."""

from collections.abc import Callable
from datetime import datetime, timezone

from node_age_controller.classifier import (
    age_of,
    format_age,
    is_control_plane,
    is_cordoned,
    is_ignored,
)
from node_age_controller.exceptions import KubernetesError
from node_age_controller.logging_config import get_logger
from node_age_controller.models.policy import Decision, PolicyConfig, SkipReason
from node_age_controller.mutator import cordon
from node_age_controller.threshold import evaluate

logger = get_logger(__name__)

NODE_CORDONED_EVENT = "NodeCordoned"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReconciliationPolicy:
    """Cordons nodes older than the configured maximum age.

    The policy holds no cluster state between calls. Each reconcile fetches the
    node and lists the cluster again, so the threshold always reflects the
    latest cordons made by this or any other actor.
    """

    def __init__(
        self, client, config: PolicyConfig, clock: Callable[[], datetime] | None = None
    ):
        """Initialize the policy.

        Args:
            client: Provides get_node, list_nodes, update_node and emit_event
            config: Policy limits and dry-run flag
            clock: Returns the current time, timezone-aware; defaults to utc_now
        """
        self.client = client
        self.config = config
        self.clock = clock or utc_now

    def reconcile(self, name: str) -> Decision:
        """Reconcile a single node by name.

        Checks run in a fixed order and the first one that applies decides the
        skip reason: control-plane, ignored, threshold met, too young, already
        cordoned, dry run.

        Returns:
            The decision taken for the node

        Raises:
            NodeNotFoundError: If the node no longer exists
            ConflictError: If the cordon update lost a race with another writer
            TransientError: If any API call failed
        """
        node = self.client.get_node(name)

        if is_control_plane(node):
            return self._skip(name, SkipReason.CONTROL_PLANE, "Ignoring control-plane node")

        if is_ignored(node):
            return self._skip(name, SkipReason.IGNORED, "Ignoring node with ignore annotation")

        snapshot = self.client.list_nodes()
        if evaluate(snapshot, self.config):
            return self._skip(
                name,
                SkipReason.THRESHOLD_MET,
                "Cordon threshold met "
                f"(max cordoned: {self.config.max_cordoned_nodes}, "
                f"min available: {self.config.min_available_nodes})",
            )

        age = age_of(node, self.clock())
        logger.debug(f"Checking node {name} age {format_age(age)}")

        if age <= self.config.max_node_age:
            return self._skip(
                name,
                SkipReason.TOO_YOUNG,
                f"Node age {format_age(age)} within {format_age(self.config.max_node_age)}",
                age,
            )

        if is_cordoned(node):
            return self._skip(name, SkipReason.ALREADY_CORDONED, "Node is already cordoned", age)

        if self.config.dry_run:
            return self._skip(
                name,
                SkipReason.DRY_RUN,
                f"DryRun enabled, would cordon node aged {format_age(age)}",
                age,
            )

        logger.info(f"Cordoning node {name} aged {format_age(age)}")
        try:
            self.client.update_node(cordon(node))
        except KubernetesError as e:
            logger.error(f"Failed to cordon node {name}: {e.message}")
            raise

        self.client.emit_event(
            NODE_CORDONED_EVENT,
            name,
            f"Cordoned node {name}: age {format_age(age)} exceeds "
            f"{format_age(self.config.max_node_age)}",
            uid=node.uid,
        )
        return Decision.cordon(name, age)

    def _skip(self, name: str, reason: SkipReason, message: str, age=None) -> Decision:
        logger.info(f"Skipping node {name} [{reason.value}]: {message}")
        return Decision.skip(name, reason, age)

"""Cluster-wide limits on how many nodes may be cordoned at once."""

from node_age_controller.classifier import is_cordoned
from node_age_controller.models.node import NodeSnapshot
from node_age_controller.models.policy import PolicyConfig


def count_cordoned(snapshot: NodeSnapshot) -> int:
    """Number of nodes in the snapshot that are already unschedulable."""
    return sum(1 for node in snapshot.nodes if is_cordoned(node))


def count_available(snapshot: NodeSnapshot) -> int:
    """Number of schedulable nodes in the snapshot."""
    return len(snapshot.nodes) - count_cordoned(snapshot)


def evaluate(snapshot: NodeSnapshot, config: PolicyConfig) -> bool:
    """Return True when the threshold is met and no further node may be cordoned.

    The counts are always derived from the snapshot passed in. Concurrent
    reconciliations of different nodes can each see the same snapshot and both
    pass, so the cordoned count may briefly overshoot ``max_cordoned_nodes``.

    Args:
        snapshot: Nodes from a fresh list call
        config: Policy limits

    Returns:
        True if blocked, False if another cordon is permitted
    """
    cordoned = count_cordoned(snapshot)
    available = len(snapshot.nodes) - cordoned
    return available <= config.min_available_nodes or cordoned >= config.max_cordoned_nodes

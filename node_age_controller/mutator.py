"""Builds the cordoned form of a node."""

from node_age_controller.models.node import Node


def cordon(node: Node) -> Node:
    """Return a copy of ``node`` marked unschedulable.

    The input is left untouched; callers may still hold it for logging.
    """
    return node.model_copy(update={"unschedulable": True}, deep=True)

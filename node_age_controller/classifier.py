"""Predicates over a single node's taints, annotations and schedulability."""

from datetime import datetime, timedelta

from node_age_controller.models.node import Node

# master on older clusters, control-plane on current ones
CONTROL_PLANE_TAINT_KEYS = frozenset(
    {
        "node-role.kubernetes.io/master",
        "node-role.kubernetes.io/control-plane",
    }
)

IGNORE_ANNOTATION = "node-age-controller.io/ignore"


def is_control_plane(node: Node) -> bool:
    """True if any taint key marks the node as control-plane."""
    return any(taint.key in CONTROL_PLANE_TAINT_KEYS for taint in node.taints)


def is_cordoned(node: Node) -> bool:
    """True if the node is already unschedulable."""
    return node.unschedulable


def is_ignored(node: Node) -> bool:
    """True if the ignore annotation is set to exactly "true".

    Any other value, including "True", leaves the node subject to the policy.
    """
    return node.annotations.get(IGNORE_ANNOTATION) == "true"


def age_of(node: Node, now: datetime) -> timedelta:
    """Age of the node at ``now``. Negative under clock skew, not clamped."""
    return now - node.creation_timestamp


def format_age(age: timedelta) -> str:
    """Format a timedelta into a short human readable string."""
    total_seconds = int(age.total_seconds())
    sign = "-" if total_seconds < 0 else ""
    total_seconds = abs(total_seconds)

    if total_seconds < 60:
        return f"{sign}{total_seconds}s"
    elif total_seconds < 3600:
        return f"{sign}{total_seconds // 60}m"
    elif total_seconds < 86400:
        return f"{sign}{total_seconds // 3600}h"
    else:
        return f"{sign}{total_seconds // 86400}d"

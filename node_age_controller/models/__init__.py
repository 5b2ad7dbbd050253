"""Data models for nodes, policy configuration and decisions."""

from node_age_controller.models.node import Node, NodeSnapshot, NodeTaint
from node_age_controller.models.policy import (
    Action,
    Decision,
    PolicyConfig,
    SkipReason,
    parse_duration,
)

__all__ = [
    "Node",
    "NodeTaint",
    "NodeSnapshot",
    "Action",
    "Decision",
    "PolicyConfig",
    "SkipReason",
    "parse_duration",
]

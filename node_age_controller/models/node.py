"""Data models for cluster nodes as seen by the controller."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NodeTaint(BaseModel):
    """Kubernetes node taint."""

    key: str
    value: str | None = None
    effect: str  # NoSchedule, PreferNoSchedule, NoExecute

    @field_validator("effect")
    @classmethod
    def validate_effect(cls, v: str) -> str:
        """Validate taint effect is one of the allowed values."""
        allowed = ["NoSchedule", "PreferNoSchedule", "NoExecute"]
        if v not in allowed:
            raise ValueError(f"effect must be one of {allowed}, got {v}")
        return v


class Node(BaseModel):
    """A cluster node, reduced to the fields the cordon policy inspects."""

    name: str
    creation_timestamp: datetime
    taints: list[NodeTaint] = Field(default_factory=list)
    annotations: dict[str, str] = Field(default_factory=dict)
    unschedulable: bool = False
    resource_version: str | None = None
    uid: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate node name is not empty."""
        if not v:
            raise ValueError("name cannot be empty")
        return v

    @field_validator("creation_timestamp")
    @classmethod
    def validate_creation_timestamp(cls, v: datetime) -> datetime:
        """Treat naive timestamps as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @classmethod
    def from_kubernetes(cls, v1_node) -> "Node":
        """Build from a kubernetes.client.V1Node."""
        metadata = v1_node.metadata
        spec = v1_node.spec

        taints = []
        for taint in (spec.taints if spec else None) or []:
            taints.append(NodeTaint(key=taint.key, value=taint.value, effect=taint.effect))

        return cls(
            name=metadata.name,
            creation_timestamp=metadata.creation_timestamp,
            taints=taints,
            annotations=metadata.annotations or {},
            unschedulable=bool(spec.unschedulable) if spec else False,
            resource_version=metadata.resource_version,
            uid=metadata.uid,
        )


class NodeSnapshot(BaseModel):
    """Nodes returned by a single list call.

    Built fresh for every threshold evaluation and discarded afterwards.
    """

    model_config = ConfigDict(frozen=True)

    nodes: tuple[Node, ...] = ()
    resource_version: str | None = None

    @classmethod
    def from_kubernetes(cls, v1_node_list) -> "NodeSnapshot":
        """Build from a kubernetes.client.V1NodeList."""
        metadata = v1_node_list.metadata
        return cls(
            nodes=tuple(Node.from_kubernetes(item) for item in v1_node_list.items or []),
            resource_version=metadata.resource_version if metadata else None,
        )

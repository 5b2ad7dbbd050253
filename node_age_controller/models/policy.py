"""Configuration and decision models for the cordon policy."""

import re
from datetime import timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h|d)")
_NUMBER = re.compile(r"\d+(?:\.\d+)?")
_DURATION_UNITS = {
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
}


def parse_duration(value: str) -> timedelta:
    """Parse a Go-style duration string such as "720h", "1h30m" or "90s".

    A "d" suffix for days is also accepted. A bare number is read as seconds.

    Raises:
        ValueError: If the string is not a valid duration
    """
    text = value.strip()
    if not text:
        raise ValueError("duration cannot be empty")

    negative = text.startswith("-")
    if negative or text.startswith("+"):
        text = text[1:]

    if _NUMBER.fullmatch(text):
        total = timedelta(seconds=float(text))
    else:
        position = 0
        total = timedelta()
        for match in _DURATION_PART.finditer(text):
            if match.start() != position:
                break
            total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
            position = match.end()
        if position == 0 or position != len(text):
            raise ValueError(
                f"invalid duration '{value}' (expected e.g. 720h, 1h30m, 30d)"
            )

    return -total if negative else total


class PolicyConfig(BaseModel):
    """Cordon policy settings, fixed at process start."""

    model_config = ConfigDict(frozen=True)

    dry_run: bool = False
    max_cordoned_nodes: int = Field(default=3, ge=0)
    min_available_nodes: int = Field(default=3, ge=0)
    max_node_age: timedelta = timedelta(hours=720)

    @field_validator("max_node_age", mode="before")
    @classmethod
    def parse_max_node_age(cls, v):
        """Accept Go-style duration strings in addition to timedelta values."""
        if isinstance(v, str):
            return parse_duration(v)
        return v

    @field_validator("max_node_age")
    @classmethod
    def validate_max_node_age(cls, v: timedelta) -> timedelta:
        """Validate max_node_age is not negative."""
        if v < timedelta(0):
            raise ValueError("max_node_age cannot be negative")
        return v

    def save(self, path: str) -> None:
        """Save configuration to YAML file."""
        import yaml

        data = self.model_dump()
        data["max_node_age"] = f"{int(self.max_node_age.total_seconds())}s"
        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False)

    @classmethod
    def load(cls, path: str, **overrides) -> "PolicyConfig":
        """Load configuration from YAML file.

        Keyword arguments that are not None take precedence over the file.
        """
        import yaml

        with open(path) as f:
            data = yaml.safe_load(f) or {}
        data.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**data)


class SkipReason(str, Enum):
    """Why a reconciliation left a node alone."""

    CONTROL_PLANE = "control-plane"
    IGNORED = "ignored-annotation"
    THRESHOLD_MET = "threshold-met"
    TOO_YOUNG = "too-young"
    ALREADY_CORDONED = "already-cordoned"
    DRY_RUN = "dry-run"


class Action(str, Enum):
    SKIP = "skip"
    CORDON = "cordon"


class Decision(BaseModel):
    """Outcome of one reconciliation. Never persisted."""

    model_config = ConfigDict(frozen=True)

    node: str
    action: Action
    reason: SkipReason | None = None
    age: timedelta | None = None

    @classmethod
    def skip(cls, node: str, reason: SkipReason, age: timedelta | None = None) -> "Decision":
        return cls(node=node, action=Action.SKIP, reason=reason, age=age)

    @classmethod
    def cordon(cls, node: str, age: timedelta) -> "Decision":
        return cls(node=node, action=Action.CORDON, age=age)

    @property
    def cordoned(self) -> bool:
        return self.action == Action.CORDON

    def __str__(self) -> str:
        if self.cordoned:
            return f"cordon {self.node}"
        return f"skip {self.node} ({self.reason.value})"

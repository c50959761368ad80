"""Status signal shown on the host node after each input."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

from ..rules_engine.models import Level, LevelCounts, SeverityOrdering

NO_VALIDATION_FOUND = "no validation found"
RUNTIME_ERROR = "runtime error"

Fill = Literal["red", "yellow", "green"]
Shape = Literal["dot", "ring"]

_FILL_BY_LEVEL = {Level.ERROR: "red", Level.WARNING: "yellow", Level.INFO: "green"}


class NodeStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    fill: Fill
    shape: Shape = "dot"
    text: str
    counts: Optional[LevelCounts] = None
    level: Optional[Level] = None


def status_text(counts: LevelCounts) -> str:
    return f"E:{counts.error} W:{counts.warning} I:{counts.info}"


def status_for_counts(counts: LevelCounts, ordering: Optional[SeverityOrdering] = None) -> NodeStatus:
    ordering = ordering or SeverityOrdering.default()
    level = ordering.dominant_from_counts(counts)
    return NodeStatus(
        fill=_FILL_BY_LEVEL[level],
        shape="dot",
        text=status_text(counts),
        counts=counts,
        level=level,
    )


def no_validation_status() -> NodeStatus:
    return NodeStatus(fill="red", shape="ring", text=NO_VALIDATION_FOUND)


def runtime_error_status() -> NodeStatus:
    return NodeStatus(fill="red", shape="ring", text=RUNTIME_ERROR)

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

UNKNOWN_RULE = "(unknown)"
ENGINE_SHEET = "(engine)"


class Level(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Operator(str, Enum):
    EQ = "=="
    NE = "!="
    CONTAINS = "contains"
    NOT_CONTAINS = "!contains"
    REGEX = "regex"
    IS_EMPTY = "isEmpty"
    NOT_EMPTY = "!isEmpty"


class RhsType(str, Enum):
    STR = "str"
    NUM = "num"
    BOOL = "bool"
    MSG = "msg"
    FLOW = "flow"
    GLOBAL = "global"
    ENV = "env"
    JSONATA = "jsonata"


class Condition(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    attribute: str
    operator: Operator
    rhs_type: RhsType = Field(default=RhsType.STR, alias="rhsType")
    value: Any = None


class ConditionGroup(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    all_of: List[Condition] = Field(default_factory=list, alias="and")


class RuleDefinition(BaseModel):
    """Declarative check definition.

    Type-specific parameters (`requiredSheets`, `sheet`, `requiredColumns`, ...)
    are kept as extra fields and validated by the rule type's `params_model`.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    id: str = Field(min_length=1)
    type: str = Field(min_length=1)
    level: Level = Level.ERROR
    description: str = ""
    conditions: Optional[ConditionGroup] = None
    suggestions: List[str] = Field(default_factory=list)

    def params(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


class LogEntry(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    rule_id: str = Field(default=UNKNOWN_RULE, alias="ruleId")
    type: str = ""
    level: Level = Level.INFO
    description: str = ""
    value: str = ""
    source_sheet: Optional[str] = None
    target_sheet: Optional[str] = None

    @property
    def is_issue(self) -> bool:
        return self.level in (Level.WARNING, Level.ERROR)

    def sheets(self) -> List[str]:
        """Sheet names this entry refers to, excluding the engine sentinel."""
        names: List[str] = []
        for name in (self.source_sheet, self.target_sheet):
            if name and name != ENGINE_SHEET and name not in names:
                names.append(name)
        return names

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class LevelCounts(BaseModel):
    info: int = 0
    warning: int = 0
    error: int = 0
    total: int = 0

    @model_validator(mode="after")
    def _recompute_total(self) -> "LevelCounts":
        # total is always derived; incoming totals are not trusted.
        self.total = self.info + self.warning + self.error
        return self

    @classmethod
    def from_levels(cls, levels: Iterable[Level]) -> "LevelCounts":
        counts = {Level.INFO: 0, Level.WARNING: 0, Level.ERROR: 0}
        for level in levels:
            counts[Level(level)] += 1
        return cls(
            info=counts[Level.INFO],
            warning=counts[Level.WARNING],
            error=counts[Level.ERROR],
        )

    def get(self, level: Level) -> int:
        return int(getattr(self, Level(level).value))

    @property
    def issues(self) -> int:
        return self.warning + self.error


class ValidationResult(BaseModel):
    logs: List[LogEntry] = Field(default_factory=list)
    counts: LevelCounts = Field(default_factory=LevelCounts)

    @classmethod
    def from_logs(cls, logs: Iterable[LogEntry]) -> "ValidationResult":
        logs = list(logs)
        return cls(logs=logs, counts=LevelCounts.from_levels(e.level for e in logs))

    def to_wire(self) -> Dict[str, Any]:
        return {
            "logs": [entry.to_wire() for entry in self.logs],
            "counts": self.counts.model_dump(),
        }


@dataclass(frozen=True)
class SeverityOrdering:
    order: Dict[Level, int]

    @classmethod
    def default(cls) -> "SeverityOrdering":
        # Higher wins.
        return cls(order={Level.ERROR: 30, Level.WARNING: 20, Level.INFO: 10})

    def dominant(self, levels: Iterable[Level]) -> Level:
        levels = list(levels)
        if not levels:
            return Level.INFO
        return max(levels, key=lambda lvl: self.order.get(lvl, 0))

    def dominant_from_counts(self, counts: LevelCounts) -> Level:
        return self.dominant(lvl for lvl in Level if counts.get(lvl) > 0)

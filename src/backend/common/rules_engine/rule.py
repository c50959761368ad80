from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Type

from pydantic import BaseModel, ValidationError

from .context import EvaluationContext
from .errors import ConfigurationError
from .models import Level, LogEntry, RuleDefinition


class RuleType(ABC):
    rule_type: str
    title: str
    params_model: Type[BaseModel]

    def __init__(self):
        if not getattr(self, "rule_type", None):
            raise ValueError("RuleType must define rule_type")

    def parse_params(self, rule: RuleDefinition) -> BaseModel:
        try:
            return self.params_model.model_validate(rule.params())
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}" for err in exc.errors()
            )
            raise ConfigurationError(
                f"invalid parameters for type '{self.rule_type}' ({problems})", rule_id=rule.id
            ) from exc

    @abstractmethod
    def evaluate(self, rule: RuleDefinition, params: BaseModel, ctx: EvaluationContext) -> List[LogEntry]:  # pragma: no cover
        raise NotImplementedError

    def entry(self, rule: RuleDefinition, *, level: Level, value: str, **provenance) -> LogEntry:
        return LogEntry(
            rule_id=rule.id,
            type=rule.type,
            level=level,
            description=rule.description,
            value=value,
            **provenance,
        )

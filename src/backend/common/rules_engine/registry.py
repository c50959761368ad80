from __future__ import annotations

from typing import Dict, Iterable, Type

from .errors import ConfigurationError
from .rule import RuleType


class RuleTypeRegistry:
    def __init__(self):
        self._types: Dict[str, Type[RuleType]] = {}

    def register(self, type_cls: Type[RuleType]) -> None:
        rule_type = getattr(type_cls, "rule_type", None)
        if not rule_type:
            raise ValueError("RuleType class missing rule_type")
        if rule_type in self._types:
            raise ValueError(f"Duplicate rule_type registered: {rule_type}")
        self._types[rule_type] = type_cls

    def create(self, rule_type: str, *, rule_id: str | None = None) -> RuleType:
        type_cls = self._types.get(rule_type)
        if type_cls is None:
            raise ConfigurationError(f"unrecognized rule type '{rule_type}'", rule_id=rule_id)
        return type_cls()

    def get(self, rule_type: str) -> Type[RuleType]:
        return self._types[rule_type]

    def ids(self) -> Iterable[str]:
        return self._types.keys()

    def __contains__(self, rule_type: object) -> bool:
        return rule_type in self._types


registry = RuleTypeRegistry()


def register_rule_type(type_cls: Type[RuleType]) -> Type[RuleType]:
    registry.register(type_cls)
    return type_cls

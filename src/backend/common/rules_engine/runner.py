from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel

from .conditions import conditions_hold
from .context import EvaluationContext, TabularModel
from .errors import ConditionError, ConfigurationError
from .models import LogEntry, RuleDefinition, ValidationResult
from .registry import RuleTypeRegistry, registry
from .rule import RuleType

logger = logging.getLogger(__name__)


class RulesRunner:
    """Evaluates a ruleset in list order.

    Every rule is validated when the runner is built, so a malformed rule
    aborts before anything is evaluated.
    """

    def __init__(self, rules: Iterable[RuleDefinition], *, types: Optional[RuleTypeRegistry] = None):
        self._types = types or registry
        self._rules = list(rules)
        self._prepared = self._prepare(self._rules)

    @property
    def rules(self) -> List[RuleDefinition]:
        return list(self._rules)

    def _prepare(self, rules: Sequence[RuleDefinition]) -> List[Tuple[RuleDefinition, RuleType, BaseModel]]:
        prepared: List[Tuple[RuleDefinition, RuleType, BaseModel]] = []
        seen: set[str] = set()
        for rule in rules:
            if rule.id in seen:
                raise ConfigurationError("duplicate rule id in ruleset", rule_id=rule.id)
            seen.add(rule.id)
            rule_type = self._types.create(rule.type, rule_id=rule.id)
            prepared.append((rule, rule_type, rule_type.parse_params(rule)))
        return prepared

    def evaluate(self, ctx: EvaluationContext) -> List[LogEntry]:
        logs: List[LogEntry] = []
        for rule, rule_type, params in self._prepared:
            if rule.conditions is not None and rule.conditions.all_of:
                try:
                    matched = conditions_hold(rule.conditions.all_of, ctx)
                except ConditionError as exc:
                    logger.warning("Rule %s skipped: condition failed to evaluate (%s)", rule.id, exc)
                    continue
                if not matched:
                    logger.debug("Rule %s skipped: conditions not met", rule.id)
                    continue
            entries = rule_type.evaluate(rule, params, ctx)
            logger.debug("Rule %s emitted %d log entries", rule.id, len(entries))
            logs.extend(entries)
        return logs

    def run(self, ctx: EvaluationContext) -> ValidationResult:
        result = ValidationResult.from_logs(self.evaluate(ctx))
        logger.info(
            "Validated %d rules: %d error, %d warning, %d info",
            len(self._prepared),
            result.counts.error,
            result.counts.warning,
            result.counts.info,
        )
        return result


def evaluate(
    rules: Iterable[RuleDefinition],
    model: TabularModel,
    context: Optional[EvaluationContext] = None,
) -> List[LogEntry]:
    """Evaluate `rules` against `model`; `context` supplies msg/flow/global/env and config."""
    ctx = context or EvaluationContext()
    if ctx.model is not model:
        ctx = EvaluationContext(
            model=model,
            message=ctx.message,
            flow=ctx.flow,
            global_state=ctx.global_state,
            env=ctx.env,
            config=ctx.config,
        )
    return RulesRunner(rules).evaluate(ctx)

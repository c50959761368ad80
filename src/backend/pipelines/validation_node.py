from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, MutableMapping, Optional

from common.report.status import NodeStatus, status_for_counts
from common.rules_engine.config import Scope, ValidationNodeConfig
from common.rules_engine.context import EvaluationContext, TabularModel
from common.rules_engine.loader import load_rules
from common.rules_engine.models import ValidationResult
from common.rules_engine.runner import RulesRunner

from .storage import InMemoryScopedStorage, ScopedStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationOutcome:
    message: MutableMapping[str, Any]
    result: ValidationResult
    status: NodeStatus


class ValidationNode:
    """Runs a ruleset against the tabular model found in the configured scope.

    The ruleset is validated when the node is built; a malformed rule raises
    `ConfigurationError` before any message is processed.
    """

    def __init__(
        self,
        rules: Any,
        config: Optional[ValidationNodeConfig] = None,
        storage: Optional[ScopedStorage] = None,
    ) -> None:
        self.config = config or ValidationNodeConfig()
        self.storage = storage or InMemoryScopedStorage()
        self.runner = RulesRunner(load_rules(rules))

    def _context(self, message: MutableMapping[str, Any]) -> EvaluationContext:
        raw_model = self.storage.read(self.config.model_scope, self.config.model_path, message)
        flow = getattr(self.storage, "flow", {})
        global_state = getattr(self.storage, "global_", {})
        return EvaluationContext(
            model=TabularModel.from_mapping(raw_model),
            message=message,
            flow=flow,
            global_state=global_state,
            env=dict(os.environ),
            config=self.config.evaluator,
        )

    def on_input(self, message: MutableMapping[str, Any]) -> ValidationOutcome:
        ctx = self._context(message)
        if not ctx.model.sheets:
            logger.info(
                "No sheets found at %s.%s; every sheet check will report missing",
                Scope(self.config.model_scope).value,
                self.config.model_path,
            )
        result = self.runner.run(ctx)
        self.storage.write(self.config.out_scope, self.config.out_path, result.to_wire(), message)
        return ValidationOutcome(message=message, result=result, status=status_for_counts(result.counts))

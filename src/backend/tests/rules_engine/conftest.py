import os
import sys


# Ensure `src/backend` is on sys.path so imports like `import common...` work.
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

import pytest

from common.rules_engine.config import EmptySheetPolicy, EvaluatorConfig
from common.rules_engine.context import EvaluationContext, TabularModel
from common.rules_engine.models import RuleDefinition


@pytest.fixture
def make_model():
    def _make(sheets: dict | None = None) -> TabularModel:
        return TabularModel.from_mapping(sheets or {})

    return _make


@pytest.fixture
def make_ctx(make_model):
    def _make(
        *,
        sheets: dict | None = None,
        message: dict | None = None,
        flow: dict | None = None,
        global_state: dict | None = None,
        env: dict | None = None,
        empty_sheet_policy: EmptySheetPolicy = EmptySheetPolicy.NO_DATA,
        emit_pass_entries: bool = True,
    ) -> EvaluationContext:
        return EvaluationContext(
            model=make_model(sheets),
            message=message or {},
            flow=flow or {},
            global_state=global_state or {},
            env=env or {},
            config=EvaluatorConfig(empty_sheet_policy=empty_sheet_policy, emit_pass_entries=emit_pass_entries),
        )

    return _make


@pytest.fixture
def make_rule():
    def _make(rule_id: str, rule_type: str, **fields) -> RuleDefinition:
        return RuleDefinition.model_validate({"id": rule_id, "type": rule_type, **fields})

    return _make

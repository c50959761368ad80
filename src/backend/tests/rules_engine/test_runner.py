import logging

import pytest

from common.rules_engine.errors import ConfigurationError
from common.rules_engine.models import ENGINE_SHEET, Level, RuleDefinition
from common.rules_engine.runner import RulesRunner, evaluate


def _rules():
    return [
        RuleDefinition.model_validate(
            {"id": "R1", "type": "sheetsExist", "level": "error", "requiredSheets": ["Customers", "Orders"]}
        ),
        RuleDefinition.model_validate(
            {
                "id": "R2",
                "type": "sheetHasColumns",
                "level": "warning",
                "sheet": "Customers",
                "requiredColumns": ["id", "email"],
            }
        ),
    ]


def test_run_produces_logs_in_rule_order(make_ctx):
    ctx = make_ctx(sheets={"Customers": [{"id": 1, "name": "Ada"}]})
    result = RulesRunner(_rules()).run(ctx)

    assert [(e.rule_id, e.level) for e in result.logs] == [
        ("R1", Level.INFO),
        ("R1", Level.ERROR),
        ("R2", Level.INFO),
        ("R2", Level.WARNING),
    ]
    assert result.counts.model_dump() == {"info": 2, "warning": 1, "error": 1, "total": 4}
    assert result.logs[1].source_sheet == ENGINE_SHEET


def test_run_is_repeatable(make_ctx):
    ctx = make_ctx(sheets={"Customers": [{"id": 1}]})
    runner = RulesRunner(_rules())
    assert runner.run(ctx) == runner.run(ctx)


def test_unknown_type_aborts_before_evaluation():
    rules = _rules() + [RuleDefinition(id="R3", type="sheetIsSorted")]
    with pytest.raises(ConfigurationError) as exc:
        RulesRunner(rules)
    assert "sheetIsSorted" in str(exc.value)
    assert "R3" in str(exc.value)


def test_duplicate_rule_ids_are_rejected():
    rules = _rules() + [RuleDefinition.model_validate({"id": "R1", "type": "sheetsExist", "requiredSheets": []})]
    with pytest.raises(ConfigurationError, match="duplicate"):
        RulesRunner(rules)


def test_missing_required_field_names_rule():
    rules = [RuleDefinition(id="R9", type="sheetsExist")]
    with pytest.raises(ConfigurationError) as exc:
        RulesRunner(rules)
    assert exc.value.rule_id == "R9"
    assert "requiredSheets" in str(exc.value)


def test_conditions_gate_rules(make_ctx):
    gated = RuleDefinition.model_validate(
        {
            "id": "R1",
            "type": "sheetsExist",
            "requiredSheets": ["Orders"],
            "conditions": {"and": [{"attribute": "mode", "operator": "==", "rhsType": "str", "value": "strict"}]},
        }
    )
    runner = RulesRunner([gated])
    assert runner.evaluate(make_ctx(message={"mode": "lenient"})) == []
    assert len(runner.evaluate(make_ctx(message={"mode": "strict"}))) == 1


def test_condition_error_fails_closed_and_continues(make_ctx, caplog):
    broken = RuleDefinition.model_validate(
        {
            "id": "R1",
            "type": "sheetsExist",
            "requiredSheets": ["Orders"],
            "conditions": {"and": [{"attribute": "mode", "operator": "==", "rhsType": "env", "value": "NOPE"}]},
        }
    )
    ok = RuleDefinition.model_validate({"id": "R2", "type": "sheetsExist", "requiredSheets": ["Orders"]})
    with caplog.at_level(logging.WARNING):
        logs = RulesRunner([broken, ok]).evaluate(make_ctx(message={"mode": "x"}))
    assert [e.rule_id for e in logs] == ["R2"]
    assert "R1" in caplog.text


def test_module_level_evaluate_uses_given_model(make_ctx, make_model):
    ctx = make_ctx(sheets={})
    model = make_model({"Customers": [{"id": 1, "email": "a@b.c"}], "Orders": [{"id": 1}]})
    logs = evaluate(_rules(), model, ctx)
    assert all(e.level == Level.INFO for e in logs)


def test_empty_ruleset_yields_no_logs(make_ctx):
    result = RulesRunner([]).run(make_ctx())
    assert result.logs == []
    assert result.counts.total == 0


def _gated(rule_id, condition):
    return RuleDefinition.model_validate(
        {"id": rule_id, "type": "sheetsExist", "requiredSheets": ["Orders"], "conditions": {"and": [condition]}}
    )


def test_signalling_nan_fails_closed_and_continues(make_ctx):
    rules = [
        _gated("R1", {"attribute": "count", "operator": "==", "rhsType": "num", "value": 1}),
        _gated("R2", {"attribute": "missing", "operator": "isEmpty"}),
    ]
    logs = RulesRunner(rules).evaluate(make_ctx(message={"count": "sNaN"}))
    assert [e.rule_id for e in logs] == ["R2"]


def test_mapping_contains_list_lookup_does_not_abort(make_ctx):
    rules = [
        _gated("R1", {"attribute": "record", "operator": "contains", "rhsType": "msg", "value": "keys"}),
        _gated("R2", {"attribute": "missing", "operator": "isEmpty"}),
    ]
    logs = RulesRunner(rules).evaluate(make_ctx(message={"record": {"a": 1}, "keys": ["a"]}))
    assert [e.rule_id for e in logs] == ["R2"]

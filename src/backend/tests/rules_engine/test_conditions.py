from decimal import Decimal

import pytest

from common.rules_engine.conditions import (
    conditions_hold,
    contains,
    evaluate_condition,
    is_empty,
    resolve_rhs,
)
from common.rules_engine.errors import ConditionError
from common.rules_engine.models import Condition


def _cond(attribute, operator, value=None, rhs_type="str"):
    return Condition.model_validate(
        {"attribute": attribute, "operator": operator, "rhsType": rhs_type, "value": value}
    )


def test_string_equality_coerces_lhs(make_ctx):
    ctx = make_ctx(message={"mode": "strict", "count": 3})
    assert evaluate_condition(_cond("mode", "==", "strict"), ctx)
    assert evaluate_condition(_cond("count", "==", "3"), ctx)
    assert evaluate_condition(_cond("mode", "!=", "lenient"), ctx)


def test_numeric_equality(make_ctx):
    ctx = make_ctx(message={"count": "3.0"})
    assert evaluate_condition(_cond("count", "==", "3", rhs_type="num"), ctx)


def test_unparseable_number_raises(make_ctx):
    ctx = make_ctx(message={"count": 3})
    with pytest.raises(ConditionError):
        evaluate_condition(_cond("count", "==", "three", rhs_type="num"), ctx)


def test_bool_rhs(make_ctx):
    ctx = make_ctx(message={"enabled": True, "flag": "false"})
    assert evaluate_condition(_cond("enabled", "==", "true", rhs_type="bool"), ctx)
    assert evaluate_condition(_cond("flag", "==", False, rhs_type="bool"), ctx)
    with pytest.raises(ConditionError):
        resolve_rhs(_cond("enabled", "==", "yes", rhs_type="bool"), ctx)


def test_scope_lookups(make_ctx):
    ctx = make_ctx(
        message={"client": "acme", "expected": "acme"},
        flow={"settings": {"client": "acme"}},
        global_state={"clients": ["acme", "globex"]},
        env={"CLIENT": "acme"},
    )
    assert evaluate_condition(_cond("client", "==", "expected", rhs_type="msg"), ctx)
    assert evaluate_condition(_cond("client", "==", "settings.client", rhs_type="flow"), ctx)
    assert evaluate_condition(_cond("client", "==", "clients.0", rhs_type="global"), ctx)
    assert evaluate_condition(_cond("client", "==", "CLIENT", rhs_type="env"), ctx)


def test_missing_lookup_raises(make_ctx):
    ctx = make_ctx(message={"client": "acme"})
    with pytest.raises(ConditionError):
        resolve_rhs(_cond("client", "==", "nope", rhs_type="flow"), ctx)
    with pytest.raises(ConditionError):
        resolve_rhs(_cond("client", "==", "NOPE", rhs_type="env"), ctx)


def test_jsonata_expression(make_ctx):
    ctx = make_ctx(message={"client": "acme"}, flow={"limit": 5})
    assert resolve_rhs(_cond("client", "==", "flow.limit + 1", rhs_type="jsonata"), ctx) == 6
    assert evaluate_condition(_cond("client", "==", "msg.client", rhs_type="jsonata"), ctx)


def test_jsonata_failure_raises(make_ctx):
    with pytest.raises(ConditionError):
        resolve_rhs(_cond("client", "==", "(((", rhs_type="jsonata"), make_ctx())


def test_contains_on_sequences_and_strings(make_ctx):
    ctx = make_ctx(message={"tags": ["a", "b"], "name": "validation report"})
    assert evaluate_condition(_cond("tags", "contains", "a"), ctx)
    assert evaluate_condition(_cond("tags", "!contains", "c"), ctx)
    assert evaluate_condition(_cond("name", "contains", "report"), ctx)
    assert not evaluate_condition(_cond("missing", "contains", "x"), ctx)


def test_regex(make_ctx):
    ctx = make_ctx(message={"code": "INV-2024-001"})
    assert evaluate_condition(_cond("code", "regex", r"^INV-\d{4}"), ctx)
    with pytest.raises(ConditionError):
        evaluate_condition(_cond("code", "regex", "(unclosed"), ctx)


def test_emptiness_checks(make_ctx):
    ctx = make_ctx(message={"blank": "", "items": [], "filled": {"a": 1}})
    assert evaluate_condition(_cond("blank", "isEmpty"), ctx)
    assert evaluate_condition(_cond("items", "isEmpty"), ctx)
    assert evaluate_condition(_cond("absent", "isEmpty"), ctx)
    assert evaluate_condition(_cond("filled", "!isEmpty"), ctx)


def test_conditions_hold_requires_all(make_ctx):
    ctx = make_ctx(message={"a": "1", "b": "2"})
    assert conditions_hold([_cond("a", "==", "1"), _cond("b", "==", "2")], ctx)
    assert not conditions_hold([_cond("a", "==", "1"), _cond("b", "==", "3")], ctx)


def test_helpers():
    assert contains({"k": 1}, "k")
    assert not contains(None, "k")
    assert is_empty(None)
    assert not is_empty(0)
    assert resolve_rhs(_cond("x", "==", "2.50", rhs_type="num"), None) == Decimal("2.50")


def test_contains_coerces_elements_like_equality(make_ctx):
    ctx = make_ctx(message={"tags": [1, 2], "count": 1, "flags": {"1": True}})
    assert evaluate_condition(_cond("count", "==", "1"), ctx)
    assert evaluate_condition(_cond("tags", "contains", "1"), ctx)
    assert evaluate_condition(_cond("tags", "contains", "2.0", rhs_type="num"), ctx)
    assert evaluate_condition(_cond("tags", "!contains", "3"), ctx)
    assert evaluate_condition(_cond("flags", "contains", 1, rhs_type="num"), ctx)


def test_nan_is_not_a_number(make_ctx):
    with pytest.raises(ConditionError):
        resolve_rhs(_cond("x", "==", "NaN", rhs_type="num"), None)
    with pytest.raises(ConditionError):
        evaluate_condition(_cond("count", "==", "1", rhs_type="num"), make_ctx(message={"count": "sNaN"}))

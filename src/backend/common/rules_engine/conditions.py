"""Condition evaluation for rule gating.

A rule's `conditions.and` list is evaluated left to right; every condition must
hold for the rule to fire. Any condition that cannot be evaluated raises
`ConditionError`, which the runner treats as "rule not matched".
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

import jsonata

from ..paths import get_path, split_path
from .context import EvaluationContext
from .errors import ConditionError
from .models import Condition, Operator, RhsType

_MISSING = object()


def conditions_hold(conditions: Iterable[Condition], ctx: EvaluationContext) -> bool:
    for condition in conditions:
        if not evaluate_condition(condition, ctx):
            return False
    return True


def evaluate_condition(condition: Condition, ctx: EvaluationContext) -> bool:
    lhs = ctx.lookup_message(condition.attribute)
    op = condition.operator

    if op == Operator.IS_EMPTY:
        return is_empty(lhs)
    if op == Operator.NOT_EMPTY:
        return not is_empty(lhs)

    rhs = resolve_rhs(condition, ctx)

    try:
        return _apply(op, lhs, rhs, condition.rhs_type)
    except (TypeError, ArithmeticError) as exc:
        raise ConditionError(f"Cannot apply {op.value} to {condition.attribute}: {exc}") from exc


def _apply(op: Operator, lhs: Any, rhs: Any, rhs_type: RhsType) -> bool:
    if op in (Operator.EQ, Operator.NE):
        equal = coerce_lhs(lhs, rhs_type) == rhs
        return equal if op == Operator.EQ else not equal
    if op in (Operator.CONTAINS, Operator.NOT_CONTAINS):
        found = contains(lhs, rhs, rhs_type)
        return found if op == Operator.CONTAINS else not found
    if op == Operator.REGEX:
        try:
            pattern = re.compile(str(rhs))
        except re.error as exc:
            raise ConditionError(f"Invalid regex {rhs!r}: {exc}") from exc
        return pattern.search(_stringify(lhs)) is not None
    raise ConditionError(f"Unsupported operator: {op}")


def resolve_rhs(condition: Condition, ctx: EvaluationContext) -> Any:
    rhs_type = condition.rhs_type
    value = condition.value

    if rhs_type == RhsType.STR:
        return _stringify(value)
    if rhs_type == RhsType.NUM:
        return _to_number(value)
    if rhs_type == RhsType.BOOL:
        return _to_bool(value)
    if rhs_type in (RhsType.MSG, RhsType.FLOW, RhsType.GLOBAL):
        source = {
            RhsType.MSG: ctx.message,
            RhsType.FLOW: ctx.flow,
            RhsType.GLOBAL: ctx.global_state,
        }[rhs_type]
        if not split_path(str(value or "")):
            raise ConditionError(f"Empty {rhs_type.value} lookup path")
        resolved = get_path(source, str(value), _MISSING)
        if resolved is _MISSING:
            raise ConditionError(f"{rhs_type.value}.{value} is not set")
        return resolved
    if rhs_type == RhsType.ENV:
        name = str(value or "")
        if name not in ctx.env:
            raise ConditionError(f"Environment variable {name!r} is not set")
        return ctx.env[name]
    if rhs_type == RhsType.JSONATA:
        return evaluate_expression(str(value or ""), ctx)
    raise ConditionError(f"Unsupported rhsType: {rhs_type}")


def evaluate_expression(expression: str, ctx: EvaluationContext) -> Any:
    if not expression.strip():
        raise ConditionError("Empty JSONata expression")
    try:
        return jsonata.Jsonata(expression).evaluate(ctx.expression_input())
    except Exception as exc:
        raise ConditionError(f"JSONata expression {expression!r} failed: {exc}") from exc


def coerce_lhs(lhs: Any, rhs_type: RhsType) -> Any:
    if rhs_type == RhsType.STR:
        return _stringify(lhs)
    if rhs_type == RhsType.NUM:
        return _to_number(lhs)
    if rhs_type == RhsType.BOOL:
        return _to_bool(lhs)
    return lhs


def contains(lhs: Any, rhs: Any, rhs_type: Optional[RhsType] = None) -> bool:
    """Key membership for mappings, element membership for arrays, substring otherwise.

    Keys and elements are coerced per `rhs_type` the same way `==` coerces its
    left-hand side; items that do not coerce never match.
    """
    if lhs is None:
        return False
    if isinstance(lhs, Mapping) or (isinstance(lhs, Sequence) and not isinstance(lhs, (str, bytes))):
        return any(_matches(item, rhs, rhs_type) for item in lhs)
    return _stringify(rhs) in _stringify(lhs)


def _matches(item: Any, rhs: Any, rhs_type: Optional[RhsType]) -> bool:
    if rhs_type is None:
        return item == rhs
    try:
        return coerce_lhs(item, rhs_type) == rhs
    except ConditionError:
        return False


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (Mapping, Sequence)) and not isinstance(value, bytes):
        return len(value) == 0
    return False


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _to_number(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ConditionError(f"Cannot compare boolean {value!r} as a number")
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise ConditionError(f"Not a number: {value!r}") from exc
    if number.is_nan():
        raise ConditionError(f"Not a number: {value!r}")
    return number


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = _stringify(value).strip().lower()
    if text == "true":
        return True
    if text == "false":
        return False
    raise ConditionError(f"Not a boolean: {value!r}")

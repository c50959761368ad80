import pytest

from common.rules_engine.errors import ConfigurationError
from common.rules_engine.models import Level
from common.rules_engine.rules.sheet_has_columns import SHEET_HAS_COLUMNS


def _run(rule, ctx):
    rule_type = SHEET_HAS_COLUMNS()
    return rule_type.evaluate(rule, rule_type.parse_params(rule), ctx)


def test_sheet_has_columns_one_entry_per_column(make_rule, make_ctx):
    rule = make_rule(
        "R2",
        "sheetHasColumns",
        level="warning",
        sheet="Customers",
        requiredColumns=["id", "email", "name"],
    )
    ctx = make_ctx(sheets={"Customers": [{"id": 1, "name": "Ada"}]})
    logs = _run(rule, ctx)

    assert [(e.level, e.value) for e in logs] == [
        (Level.INFO, "Column 'id' present in sheet 'Customers'."),
        (Level.WARNING, "Column 'email' missing in sheet 'Customers'."),
        (Level.INFO, "Column 'name' present in sheet 'Customers'."),
    ]
    assert all(e.source_sheet == "Customers" for e in logs)


def test_sheet_has_columns_missing_sheet_reports_every_column(make_rule, make_ctx):
    rule = make_rule("R2", "sheetHasColumns", sheet="Orders", requiredColumns=["id", "total"])
    logs = _run(rule, make_ctx(sheets={}, emit_pass_entries=False))
    assert [e.value for e in logs] == [
        "Column 'id' missing: sheet 'Orders' not found.",
        "Column 'total' missing: sheet 'Orders' not found.",
    ]
    assert {(e.level, e.source_sheet, e.target_sheet) for e in logs} == {(Level.ERROR, "(engine)", "Orders")}


def test_sheet_has_columns_resolves_nested_column_groups(make_rule, make_ctx):
    rule = make_rule(
        "R2",
        "sheetHasColumns",
        sheet="Customers",
        requiredColumns=["address", "address.city", "address.zip"],
    )
    ctx = make_ctx(sheets={"Customers": [{"id": 1, "address": {"city": "Oslo"}}]})
    assert [e.level for e in _run(rule, ctx)] == [Level.INFO, Level.INFO, Level.ERROR]


def test_sheet_has_columns_uses_declared_columns_without_rows(make_rule, make_ctx):
    rule = make_rule("R2", "sheetHasColumns", sheet="Orders", requiredColumns=["total"])
    ctx = make_ctx(sheets={"Orders": {"columns": ["id", "total"], "rows": []}})
    assert _run(rule, ctx)[0].level == Level.INFO


def test_sheet_has_columns_requires_sheet_name(make_rule):
    rule = make_rule("R2", "sheetHasColumns", requiredColumns=["id"])
    with pytest.raises(ConfigurationError) as exc:
        SHEET_HAS_COLUMNS().parse_params(rule)
    assert "R2" in str(exc.value)
    assert "sheet" in str(exc.value)

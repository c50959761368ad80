import json

import pytest

from common.rules_engine.catalog import build_catalog, build_skeleton, main
from common.rules_engine.loader import load_rules
from common.rules_engine.runner import RulesRunner


def test_catalog_lists_builtin_rule_types():
    entries = {e.rule_type: e for e in build_catalog()}
    assert set(entries) >= {"sheetsExist", "sheetHasColumns"}
    assert entries["sheetsExist"].required_params == ["requiredSheets"]
    assert entries["sheetHasColumns"].required_params == ["sheet", "requiredColumns"]
    assert entries["sheetHasColumns"].implementation.endswith("sheet_has_columns.SHEET_HAS_COLUMNS")


def test_skeleton_is_a_loadable_ruleset():
    skeleton = build_skeleton(build_catalog())
    rules = load_rules(skeleton)
    assert [r.type for r in rules] == [e.rule_type for e in build_catalog()]
    assert sorted(r.id for r in rules) == sorted({r.id for r in rules})
    assert skeleton["rules"][0]["suggestions"] == []


def test_skeleton_placeholders_need_editing_before_use():
    # `sheet: ""` is below the minimum length.
    with pytest.raises(ValueError):
        RulesRunner(load_rules(build_skeleton(build_catalog())))


def test_catalog_cli_json(capsys):
    main(["--format", "json"])
    payload = json.loads(capsys.readouterr().out)
    assert [e["rule_type"] for e in payload] == sorted(e["rule_type"] for e in payload)


def test_catalog_cli_type_filter(capsys):
    main(["--format", "json", "--type", "sheetsExist", "--skeleton"])
    payload = json.loads(capsys.readouterr().out)
    assert payload["rules"][0]["requiredSheets"] == []
    with pytest.raises(SystemExit):
        main(["--type", "nope"])

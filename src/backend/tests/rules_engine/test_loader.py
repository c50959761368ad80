import json

import pytest

from common.rules_engine.errors import ConfigurationError
from common.rules_engine.loader import load_rules, load_rules_file
from common.rules_engine.models import Level


def test_load_rules_accepts_list_and_wrapped_object():
    raw = [{"id": "R1", "type": "sheetsExist", "requiredSheets": ["A"], "suggestions": ["Add sheet A"]}]
    assert load_rules(raw)[0].suggestions == ["Add sheet A"]
    assert load_rules({"rules": raw})[0].params() == {"requiredSheets": ["A"]}


def test_level_defaults_to_error():
    assert load_rules([{"id": "R1", "type": "sheetsExist"}])[0].level == Level.ERROR


def test_unknown_operator_is_configuration_error():
    raw = [
        {
            "id": "R1",
            "type": "sheetsExist",
            "conditions": {"and": [{"attribute": "a", "operator": "~=", "value": "x"}]},
        }
    ]
    with pytest.raises(ConfigurationError) as exc:
        load_rules(raw)
    assert "R1" in str(exc.value)


def test_unknown_rhs_type_is_configuration_error():
    raw = [
        {
            "id": "R1",
            "type": "sheetsExist",
            "conditions": {"and": [{"attribute": "a", "operator": "==", "rhsType": "xml", "value": "x"}]},
        }
    ]
    with pytest.raises(ConfigurationError):
        load_rules(raw)


def test_rule_without_id_is_rejected():
    with pytest.raises(ConfigurationError):
        load_rules([{"type": "sheetsExist"}])


def test_load_rules_file_json_and_yaml(tmp_path):
    rules = [{"id": "R1", "type": "sheetsExist", "requiredSheets": ["A"]}]
    json_path = tmp_path / "rules.json"
    json_path.write_text(json.dumps(rules), encoding="utf-8")
    yaml_path = tmp_path / "rules.yaml"
    yaml_path.write_text("rules:\n  - id: R1\n    type: sheetsExist\n    requiredSheets: [A]\n", encoding="utf-8")

    assert load_rules_file(json_path) == load_rules_file(yaml_path)


def test_load_rules_file_rejects_bad_json(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_rules_file(path)

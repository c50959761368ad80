import json
from datetime import datetime

import pytest

from scripts.run_validation_report import main, run_validation_report


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_run_validation_report_from_model(tmp_path):
    rules = _write(tmp_path / "rules.json", [{"id": "R1", "type": "sheetsExist", "requiredSheets": ["A", "B"]}])
    model = _write(tmp_path / "model.json", {"A": [{"x": 1}]})

    out_json, out_html = run_validation_report(
        rules_path=rules,
        model_path=model,
        validation_path=None,
        message_path=None,
        output_dir=tmp_path / "out",
        title="Intake check",
        now=datetime(2024, 5, 1, 9, 30, 0),
    )

    assert out_json.name == "validation_20240501_093000.json"
    assert out_html.name == "validation_report_20240501_093000.html"
    payload = json.loads(out_json.read_text(encoding="utf-8"))
    assert payload["counts"] == {"info": 1, "warning": 0, "error": 1, "total": 2}
    assert "<title>Intake check</title>" in out_html.read_text(encoding="utf-8")


def test_run_validation_report_from_existing_payload(tmp_path):
    validation = _write(tmp_path / "validation.json", [{"id": "R1", "level": "warning", "message": "odd"}])
    _, out_html = run_validation_report(
        rules_path=None,
        model_path=None,
        validation_path=validation,
        message_path=None,
        output_dir=tmp_path,
        now=datetime(2024, 5, 1, 9, 30, 0),
    )
    assert "data-rule='R1'" in out_html.read_text(encoding="utf-8")


def test_empty_payload_exits(tmp_path):
    validation = _write(tmp_path / "validation.json", [])
    with pytest.raises(SystemExit):
        run_validation_report(
            rules_path=None,
            model_path=None,
            validation_path=validation,
            message_path=None,
            output_dir=tmp_path,
        )


def test_main_prints_written_paths(tmp_path, capsys):
    rules = _write(tmp_path / "rules.json", {"rules": [{"id": "R1", "type": "sheetsExist", "requiredSheets": ["A"]}]})
    model = _write(tmp_path / "model.json", {"A": [{"x": 1}]})
    assert main(["--rules", str(rules), "--model", str(model), "--output-dir", str(tmp_path)]) == 0
    out = capsys.readouterr().out.splitlines()
    assert len(out) == 2
    assert all(line.startswith("Wrote ") for line in out)


def test_main_rejects_bad_ruleset(tmp_path):
    rules = _write(tmp_path / "rules.json", [{"id": "R1", "type": "unknownType"}])
    model = _write(tmp_path / "model.json", {})
    with pytest.raises(SystemExit, match="Invalid ruleset"):
        main(["--rules", str(rules), "--model", str(model), "--output-dir", str(tmp_path)])


def test_main_model_requires_rules(tmp_path):
    with pytest.raises(SystemExit):
        main(["--model", str(tmp_path / "model.json")])

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List

from pydantic import ValidationError

from .errors import ConfigurationError
from .models import RuleDefinition


def load_rules(raw: Any) -> List[RuleDefinition]:
    """
    Parse a ruleset.

    Accepts a list of rule objects or an object with a `rules` list. Rules that
    are already `RuleDefinition` instances pass through unchanged.
    """
    if raw is None:
        return []
    if isinstance(raw, dict):
        if "rules" not in raw:
            raise ConfigurationError("Ruleset object must contain a 'rules' list.")
        raw = raw["rules"]
    if not isinstance(raw, list):
        raise ConfigurationError("Ruleset must be a list of rule objects.")

    rules: List[RuleDefinition] = []
    for idx, entry in enumerate(raw):
        if isinstance(entry, RuleDefinition):
            rules.append(entry)
            continue
        if not isinstance(entry, dict):
            raise ConfigurationError(f"Rule #{idx} must be an object.")
        rule_id = entry.get("id")
        try:
            rules.append(RuleDefinition.model_validate(entry))
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}" for err in exc.errors()
            )
            raise ConfigurationError(
                f"invalid rule definition #{idx} ({problems})",
                rule_id=str(rule_id) if rule_id else None,
            ) from exc
    return rules


def load_rules_file(path: Path) -> List[RuleDefinition]:
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in (".yaml", ".yml"):
        try:
            import yaml  # type: ignore
        except ModuleNotFoundError as exc:
            raise SystemExit(
                "PyYAML is required for YAML rule files. Install it with `pip install pyyaml`."
            ) from exc
        try:
            raw = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Rules file {path} is not valid YAML: {exc}") from exc
    else:
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Rules file {path} is not valid JSON: {exc}") from exc
    return load_rules(raw)

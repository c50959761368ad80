"""Rule type catalog.

Lists every registered rule type with the parameters it accepts, or prints a
starter ruleset that can be edited and fed back through `load_rules_file`.

    python -m common.rules_engine.catalog --format json
    python -m common.rules_engine.catalog --skeleton > rules.yaml
"""

from __future__ import annotations

import argparse
import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .models import Level
from .registry import RuleTypeRegistry, registry

# Built-in rule types register themselves on import.
from . import rules as _builtin_rules  # noqa: F401


class RuleTypeCatalogEntry(BaseModel):
    rule_type: str
    title: str
    implementation: str
    required_params: List[str] = Field(default_factory=list)
    optional_params: List[str] = Field(default_factory=list)
    params_schema: Dict[str, Any] = Field(default_factory=dict)


def _param_names(schema: Dict[str, Any]) -> tuple[List[str], List[str]]:
    names = list((schema.get("properties") or {}).keys())
    required = [n for n in names if n in set(schema.get("required") or [])]
    optional = [n for n in names if n not in required]
    return required, optional


def build_catalog(types: Optional[RuleTypeRegistry] = None) -> List[RuleTypeCatalogEntry]:
    types = types or registry
    entries: List[RuleTypeCatalogEntry] = []
    for rule_type in sorted(types.ids()):
        type_cls = types.get(rule_type)
        schema = type_cls.params_model.model_json_schema(by_alias=True)
        required, optional = _param_names(schema)
        entries.append(
            RuleTypeCatalogEntry(
                rule_type=rule_type,
                title=type_cls.title,
                implementation=f"{type_cls.__module__}.{type_cls.__name__}",
                required_params=required,
                optional_params=optional,
                params_schema=schema,
            )
        )
    return entries


def _placeholder(prop: Dict[str, Any]) -> Any:
    if prop.get("type") == "array":
        return []
    if prop.get("type") in ("integer", "number"):
        return 0
    if prop.get("type") == "boolean":
        return False
    return ""


def build_skeleton(entries: List[RuleTypeCatalogEntry]) -> Dict[str, Any]:
    """One example rule per type, with every required parameter present."""
    rules: List[Dict[str, Any]] = []
    for idx, entry in enumerate(entries, start=1):
        props = entry.params_schema.get("properties") or {}
        rule: Dict[str, Any] = {
            "id": f"R{idx}",
            "type": entry.rule_type,
            "level": Level.ERROR.value,
            "description": entry.title,
        }
        for name in entry.required_params:
            rule[name] = _placeholder(props.get(name, {}))
        rule["suggestions"] = []
        rules.append(rule)
    return {"rules": rules}


def _dump(payload: Any, fmt: str) -> str:
    if fmt == "json":
        return json.dumps(payload, indent=2)
    try:
        import yaml  # type: ignore
    except ModuleNotFoundError as exc:
        raise SystemExit("PyYAML is required for YAML output. Install it with `pip install pyyaml`.") from exc
    return yaml.safe_dump(payload, sort_keys=False)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="List the registered rule types and their parameters.")
    parser.add_argument("--format", choices=("yaml", "json"), default="yaml", help="Output format (default: yaml).")
    parser.add_argument("--type", dest="rule_type", default=None, help="Only show this rule type.")
    parser.add_argument(
        "--skeleton",
        action="store_true",
        help="Print a starter ruleset with one example rule per type instead of the catalog.",
    )
    args = parser.parse_args(argv)

    entries = build_catalog()
    if args.rule_type:
        entries = [e for e in entries if e.rule_type == args.rule_type]
        if not entries:
            raise SystemExit(f"Unknown rule type '{args.rule_type}'.")

    if args.skeleton:
        print(_dump(build_skeleton(entries), args.format))
    else:
        print(_dump([e.model_dump() for e in entries], args.format))


if __name__ == "__main__":
    main()

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field

from ..paths import get_path
from .config import EmptySheetPolicy, EvaluatorConfig


def flatten_columns(row: Mapping[str, Any], prefix: str = "") -> List[str]:
    """Column paths of a row; nested mappings become dotted column groups."""
    columns: List[str] = []
    for key, value in row.items():
        path = f"{prefix}{key}"
        if isinstance(value, Mapping) and value:
            columns.extend(flatten_columns(value, prefix=f"{path}."))
        else:
            columns.append(path)
    return columns


class Sheet(BaseModel):
    name: str
    columns: List[str] = Field(default_factory=list)
    rows: List[Dict[str, Any]] = Field(default_factory=list)

    def has_column(self, path: str) -> bool:
        path = path.strip()
        if not path:
            return False
        group_prefix = f"{path}."
        return any(col == path or col.startswith(group_prefix) for col in self.columns)

    def is_empty(self, policy: EmptySheetPolicy) -> bool:
        if policy == EmptySheetPolicy.PRESENT:
            return False
        if policy == EmptySheetPolicy.NO_ROWS:
            return not self.rows
        if policy == EmptySheetPolicy.NO_COLUMNS:
            return not self.columns
        return not self.rows or not self.columns


class TabularModel(BaseModel):
    sheets: Dict[str, Sheet] = Field(default_factory=dict)

    def get_sheet(self, name: str) -> Optional[Sheet]:
        return self.sheets.get(name)

    def sheet_names(self) -> List[str]:
        return list(self.sheets.keys())

    @classmethod
    def from_mapping(cls, raw: Any) -> "TabularModel":
        """
        Build a model from a parsed workbook payload.

        Accepted shapes:
          {"Sheet": [{"col": 1, "group": {"nested": 2}}, ...]}
          {"Sheet": {"columns": ["col", "group.nested"], "rows": [...]}}
          {"sheets": {...either of the above...}}
        """
        if isinstance(raw, TabularModel):
            return raw
        if raw is None:
            return cls()
        if not isinstance(raw, Mapping):
            raise ValueError("Tabular model must be a mapping of sheet name to rows.")
        if set(raw.keys()) == {"sheets"} and isinstance(raw["sheets"], Mapping):
            raw = raw["sheets"]

        sheets: Dict[str, Sheet] = {}
        for name, payload in raw.items():
            sheets[str(name)] = _sheet_from_payload(str(name), payload)
        return cls(sheets=sheets)


def _sheet_from_payload(name: str, payload: Any) -> Sheet:
    if isinstance(payload, Sheet):
        return payload
    if payload is None:
        return Sheet(name=name)
    if isinstance(payload, Mapping):
        rows = [r for r in (payload.get("rows") or []) if isinstance(r, Mapping)]
        columns = [str(c) for c in (payload.get("columns") or [])]
        if not columns:
            columns = _columns_from_rows(rows)
        return Sheet(name=name, columns=columns, rows=[dict(r) for r in rows])
    if isinstance(payload, list):
        rows = [r for r in payload if isinstance(r, Mapping)]
        return Sheet(name=name, columns=_columns_from_rows(rows), rows=[dict(r) for r in rows])
    raise ValueError(f"Sheet '{name}' must be a list of rows or an object with rows/columns.")


def _columns_from_rows(rows: List[Mapping[str, Any]]) -> List[str]:
    seen: Dict[str, None] = {}
    for row in rows:
        for col in flatten_columns(row):
            seen.setdefault(col, None)
    return list(seen.keys())


@dataclass(frozen=True)
class EvaluationContext:
    model: TabularModel = field(default_factory=TabularModel)
    message: Mapping[str, Any] = field(default_factory=dict)
    flow: Mapping[str, Any] = field(default_factory=dict)
    global_state: Mapping[str, Any] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)
    config: EvaluatorConfig = field(default_factory=EvaluatorConfig)

    def lookup_message(self, path: str, default: Any = None) -> Any:
        return get_path(self.message, path, default)

    def expression_input(self) -> Dict[str, Any]:
        return {
            "msg": dict(self.message),
            "flow": dict(self.flow),
            "global": dict(self.global_state),
            "env": dict(self.env),
        }

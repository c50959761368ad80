from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from ..context import EvaluationContext
from ..models import ENGINE_SHEET, Level, LogEntry, RuleDefinition
from ..registry import register_rule_type
from ..rule import RuleType


class SheetsExistParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    required_sheets: List[str] = Field(alias="requiredSheets")


@register_rule_type
class SHEETS_EXIST(RuleType):
    rule_type = "sheetsExist"
    title = "Required sheets exist and hold data"
    params_model = SheetsExistParams

    def evaluate(self, rule: RuleDefinition, params: SheetsExistParams, ctx: EvaluationContext) -> List[LogEntry]:
        policy = ctx.config.empty_sheet_policy
        entries: List[LogEntry] = []
        for name in params.required_sheets:
            sheet = ctx.model.get_sheet(name)
            if sheet is None:
                level, value = rule.level, f"Sheet '{name}' is missing."
            elif sheet.is_empty(policy):
                level, value = rule.level, f"Sheet '{name}' is empty."
            else:
                level = Level.INFO
                value = f"Sheet '{name}' found ({len(sheet.rows)} rows, {len(sheet.columns)} columns)."
                if not ctx.config.emit_pass_entries:
                    continue
            entries.append(
                self.entry(rule, level=level, value=value, source_sheet=ENGINE_SHEET, target_sheet=name)
            )
        return entries

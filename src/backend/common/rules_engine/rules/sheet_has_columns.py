from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from ..context import EvaluationContext
from ..models import ENGINE_SHEET, Level, LogEntry, RuleDefinition
from ..registry import register_rule_type
from ..rule import RuleType


class SheetHasColumnsParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sheet: str = Field(min_length=1)
    # Dot-paths address nested column groups, e.g. "address.city".
    required_columns: List[str] = Field(alias="requiredColumns")


@register_rule_type
class SHEET_HAS_COLUMNS(RuleType):
    rule_type = "sheetHasColumns"
    title = "Sheet declares the required columns"
    params_model = SheetHasColumnsParams

    def evaluate(
        self, rule: RuleDefinition, params: SheetHasColumnsParams, ctx: EvaluationContext
    ) -> List[LogEntry]:
        sheet = ctx.model.get_sheet(params.sheet)
        if sheet is None:
            # Every required column counts as missing.
            return [
                self.entry(
                    rule,
                    level=rule.level,
                    value=f"Column '{column}' missing: sheet '{params.sheet}' not found.",
                    source_sheet=ENGINE_SHEET,
                    target_sheet=params.sheet,
                )
                for column in params.required_columns
            ]

        entries: List[LogEntry] = []
        for column in params.required_columns:
            if sheet.has_column(column):
                if not ctx.config.emit_pass_entries:
                    continue
                level, value = Level.INFO, f"Column '{column}' present in sheet '{params.sheet}'."
            else:
                level, value = rule.level, f"Column '{column}' missing in sheet '{params.sheet}'."
            entries.append(self.entry(rule, level=level, value=value, source_sheet=params.sheet))
        return entries

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator


load_dotenv()


class EmptySheetPolicy(str, Enum):
    # Sheet counts as empty when it has no rows or no columns.
    NO_DATA = "no_data"
    NO_ROWS = "no_rows"
    NO_COLUMNS = "no_columns"
    # Existence alone satisfies the check.
    PRESENT = "present"


class EvaluatorConfig(BaseModel):
    empty_sheet_policy: EmptySheetPolicy = EmptySheetPolicy.NO_DATA
    # Emit an `info` confirmation for every check that passed.
    emit_pass_entries: bool = True


class ReportConfig(BaseModel):
    title: str = "Validation Report"
    rows_per_page: int = 10
    rows_per_page_options: Tuple[int, ...] = (10, 25, 50, 100)

    @field_validator("rows_per_page_options")
    @classmethod
    def _options_not_empty(cls, value: Tuple[int, ...]) -> Tuple[int, ...]:
        if not value or any(v <= 0 for v in value):
            raise ValueError("rows_per_page_options must hold positive integers")
        return tuple(value)

    @field_validator("rows_per_page")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("rows_per_page must be positive")
        return value

    def page_size_options(self) -> List[int]:
        options = list(self.rows_per_page_options)
        if self.rows_per_page not in options:
            options.append(self.rows_per_page)
        return sorted(options)


class Scope(str, Enum):
    MSG = "msg"
    FLOW = "flow"
    GLOBAL = "global"


class ValidationNodeConfig(BaseModel):
    """Where the validation node reads its model and writes its result."""

    model_scope: Scope = Scope.MSG
    model_path: str = "payload"
    out_scope: Scope = Scope.MSG
    out_path: str = "validation"
    evaluator: EvaluatorConfig = Field(default_factory=EvaluatorConfig)


class ReportNodeConfig(BaseModel):
    """Where the report node reads validation data and writes the HTML document."""

    in_scope: Scope = Scope.MSG
    in_path: str = "validation"
    out_scope: Scope = Scope.MSG
    out_path: str = "payload"
    # Optional fixed filename written alongside the document.
    file_scope: Scope = Scope.MSG
    file_path: str = "filename"
    fixed_filename: str = ""
    report: ReportConfig = Field(default_factory=ReportConfig)


@dataclass(frozen=True)
class Settings:
    log_level: str
    title: str
    rows_per_page: int
    empty_sheet_policy: EmptySheetPolicy

    def evaluator_config(self) -> EvaluatorConfig:
        return EvaluatorConfig(empty_sheet_policy=self.empty_sheet_policy)

    def report_config(self) -> ReportConfig:
        return ReportConfig(title=self.title, rows_per_page=self.rows_per_page)


def get_settings() -> Settings:
    """
    Load tool settings from environment variables.

    Reads:
      VALIDATION_REPORT_LOG_LEVEL, VALIDATION_REPORT_TITLE,
      VALIDATION_REPORT_ROWS_PER_PAGE, VALIDATION_REPORT_EMPTY_SHEET_POLICY
    """
    policy_raw = os.getenv("VALIDATION_REPORT_EMPTY_SHEET_POLICY", EmptySheetPolicy.NO_DATA.value)
    try:
        policy = EmptySheetPolicy(policy_raw.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(p.value for p in EmptySheetPolicy)
        raise ValueError(f"VALIDATION_REPORT_EMPTY_SHEET_POLICY must be one of: {allowed}.") from exc

    rpp_raw = os.getenv("VALIDATION_REPORT_ROWS_PER_PAGE", "10").strip()
    try:
        rows_per_page = int(rpp_raw)
    except ValueError as exc:
        raise ValueError("VALIDATION_REPORT_ROWS_PER_PAGE must be an integer.") from exc

    return Settings(
        log_level=os.getenv("VALIDATION_REPORT_LOG_LEVEL", "INFO").strip().upper() or "INFO",
        title=os.getenv("VALIDATION_REPORT_TITLE", "Validation Report").strip() or "Validation Report",
        rows_per_page=rows_per_page,
        empty_sheet_policy=policy,
    )

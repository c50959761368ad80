from __future__ import annotations

from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..rules_engine.models import Level, LevelCounts, LogEntry


class Grouping(str, Enum):
    RULE = "rule"
    SHEET = "sheet"


# Sub-table order inside every card.
TABLE_ORDER: Tuple[Level, ...] = (Level.ERROR, Level.WARNING, Level.INFO)
TABLE_TITLES: Dict[Level, str] = {Level.ERROR: "Errors", Level.WARNING: "Warnings", Level.INFO: "Info"}
TABLE_SUFFIXES: Dict[Level, str] = {Level.ERROR: "err", Level.WARNING: "warn", Level.INFO: "info"}


class RuleBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    rule_id: str
    description: str = ""
    type: str = ""
    rows: List[LogEntry] = Field(default_factory=list)
    counts: LevelCounts = Field(default_factory=LevelCounts)
    status: Level = Level.INFO
    issues: int = 0
    anchor: str = ""


class SheetBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    sheet: str
    rows: List[LogEntry] = Field(default_factory=list)
    counts: LevelCounts = Field(default_factory=LevelCounts)
    status: Level = Level.INFO
    issues: int = 0
    anchor: str = ""


class ReportSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_rules: int = 0
    total_rows: int = 0
    rules_passed: int = 0
    rules_warn: int = 0
    rules_err: int = 0
    info_rows: int = 0
    warn_rows: int = 0
    err_rows: int = 0
    generated: str = ""


class ReportRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int
    rule_id: str
    source_sheet: str = ""
    value: str = ""
    type: str = ""
    target_sheet: str = ""
    level: Level = Level.INFO
    # Suggestions are attached to warning/error rows only.
    suggestions: Optional[List[str]] = None

    @property
    def is_issue(self) -> bool:
        return self.level in (Level.WARNING, Level.ERROR)

    @property
    def status_label(self) -> str:
        return "YES" if self.level == Level.INFO else "NO"

    def cells(self, with_rule_column: bool) -> List[str]:
        cells = [str(self.index), self.source_sheet, self.value, self.type, self.target_sheet]
        if with_rule_column:
            cells.append(self.rule_id)
        cells.extend([self.status_label, self.level.value])
        return cells

    def search_text(self, with_rule_column: bool) -> str:
        return "\t".join(self.cells(with_rule_column)).lower()


class SeverityTable(BaseModel):
    model_config = ConfigDict(frozen=True)

    table_id: str
    kind: Level
    title: str
    with_rule_column: bool = False
    rows: List[ReportRow] = Field(default_factory=list)

    def headers(self) -> List[str]:
        headers = ["#", "Source Sheet", "Value", "Type", "Target Sheet"]
        if self.with_rule_column:
            headers.append("Rule")
        headers.extend(["Status", "Level"])
        return headers


class ReportBlock(BaseModel):
    """One card of the report: a rule or a sheet with its severity sub-tables."""

    model_config = ConfigDict(frozen=True)

    grouping: Grouping
    key: str
    anchor: str
    status: Level
    counts: LevelCounts
    issues: int
    description: str = ""
    type: str = ""
    tables: List[SeverityTable] = Field(default_factory=list)

    @property
    def title(self) -> str:
        label = "Rule" if self.grouping == Grouping.RULE else "Sheet"
        return f"{label}: {self.key}"


class ReportDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = "Validation Report"
    generated: str = ""
    summary: ReportSummary = Field(default_factory=ReportSummary)
    rule_blocks: List[ReportBlock] = Field(default_factory=list)
    sheet_blocks: List[ReportBlock] = Field(default_factory=list)
    rows_per_page: int = 10
    rows_per_page_options: List[int] = Field(default_factory=lambda: [10, 25, 50, 100])

    def blocks(self, grouping: Grouping) -> List[ReportBlock]:
        return self.rule_blocks if grouping == Grouping.RULE else self.sheet_blocks

    def iter_tables(self, grouping: Optional[Grouping] = None) -> Iterator[SeverityTable]:
        groupings = [grouping] if grouping is not None else [Grouping.RULE, Grouping.SHEET]
        for g in groupings:
            for block in self.blocks(g):
                yield from block.tables

    def table(self, table_id: str) -> SeverityTable:
        for table in self.iter_tables():
            if table.table_id == table_id:
                return table
        raise KeyError(table_id)

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from ..rules_engine.config import ReportConfig
from ..rules_engine.models import LogEntry, ValidationResult
from .grouping import build_suggestion_map, group_by_rule, group_by_sheet, idify, summarize
from .models import (
    TABLE_ORDER,
    TABLE_SUFFIXES,
    TABLE_TITLES,
    Grouping,
    ReportBlock,
    ReportDocument,
    ReportRow,
    SeverityTable,
)
from .normalize import normalize_logs

logger = logging.getLogger(__name__)


def _unique(candidate: str, used: Set[str]) -> str:
    value = candidate
    n = 2
    while value in used:
        value = f"{candidate}_{n}"
        n += 1
    used.add(value)
    return value


def _tables(
    grouping: Grouping,
    key: str,
    rows: Sequence[LogEntry],
    suggestion_map: Dict[str, List[str]],
    used_ids: Set[str],
) -> List[SeverityTable]:
    with_rule_column = grouping == Grouping.SHEET
    tables: List[SeverityTable] = []
    for kind in TABLE_ORDER:
        subset = [r for r in rows if r.level == kind]
        if not subset:
            continue
        table_rows = [
            ReportRow(
                index=i,
                rule_id=entry.rule_id,
                source_sheet=entry.source_sheet or "",
                value=entry.value,
                type=entry.type,
                target_sheet=entry.target_sheet or "",
                level=entry.level,
                suggestions=list(suggestion_map.get(entry.rule_id, [])) if entry.is_issue else None,
            )
            for i, entry in enumerate(subset, start=1)
        ]
        tables.append(
            SeverityTable(
                table_id=_unique(f"tbl_{grouping.value}_{idify(key)}_{TABLE_SUFFIXES[kind]}", used_ids),
                kind=kind,
                title=TABLE_TITLES[kind],
                with_rule_column=with_rule_column,
                rows=table_rows,
            )
        )
    return tables


def build_report(
    logs: Iterable[Any] | ValidationResult,
    suggestion_source: Optional[Iterable[Any]] = None,
    *,
    config: Optional[ReportConfig] = None,
    generated_at: Optional[datetime] = None,
) -> ReportDocument:
    """
    Derive the report document from a log stream.

    Pure apart from the default timestamp: pass `generated_at` to make the
    output fully deterministic.
    """
    cfg = config or ReportConfig()
    if isinstance(logs, ValidationResult):
        entries = list(logs.logs)
    else:
        entries = normalize_logs(logs)
    suggestion_map = build_suggestion_map(suggestion_source)
    generated = (generated_at or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")

    rule_blocks = group_by_rule(entries)
    sheet_blocks = group_by_sheet(entries)
    used_ids: Set[str] = set()

    rule_cards = [
        ReportBlock(
            grouping=Grouping.RULE,
            key=block.rule_id,
            anchor=_unique(block.anchor, used_ids),
            status=block.status,
            counts=block.counts,
            issues=block.issues,
            description=block.description,
            type=block.type,
            tables=_tables(Grouping.RULE, block.rule_id, block.rows, suggestion_map, used_ids),
        )
        for block in rule_blocks
    ]
    sheet_cards = [
        ReportBlock(
            grouping=Grouping.SHEET,
            key=block.sheet,
            anchor=_unique(block.anchor, used_ids),
            status=block.status,
            counts=block.counts,
            issues=block.issues,
            tables=_tables(Grouping.SHEET, block.sheet, block.rows, suggestion_map, used_ids),
        )
        for block in sheet_blocks
    ]

    summary = summarize(entries, rule_blocks, generated=generated)
    logger.debug(
        "Built report: %d rules, %d sheets, %d rows",
        summary.total_rules,
        len(sheet_cards),
        summary.total_rows,
    )
    return ReportDocument(
        title=cfg.title,
        generated=generated,
        summary=summary,
        rule_blocks=rule_cards,
        sheet_blocks=sheet_cards,
        rows_per_page=cfg.rows_per_page,
        rows_per_page_options=cfg.page_size_options(),
    )

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..rules_engine.models import Level, LevelCounts, LogEntry, RuleDefinition, SeverityOrdering
from .models import ReportSummary, RuleBlock, SheetBlock
from .render import escape_html

_ID_UNSAFE = re.compile(r"[^a-zA-Z0-9_-]+")


def idify(text: str) -> str:
    """URL/DOM-safe id fragment of the HTML-escaped text.

    Every run of other characters becomes `_`, so `a&b` turns into `a_amp_b`.
    """
    return _ID_UNSAFE.sub("_", escape_html(text))


def build_suggestion_map(source: Optional[Iterable[Any]]) -> Dict[str, List[str]]:
    """ruleId -> suggestions, from rule definitions or raw rule objects."""
    suggestions: Dict[str, List[str]] = {}
    for rule in source or []:
        if isinstance(rule, RuleDefinition):
            rule_id, items = rule.id, rule.suggestions
        elif isinstance(rule, Mapping):
            rule_id, items = rule.get("id"), rule.get("suggestions")
        else:
            continue
        if rule_id is None:
            continue
        suggestions[str(rule_id)] = [str(s) for s in (items or [])]
    return suggestions


def _status(counts: LevelCounts, ordering: SeverityOrdering) -> Level:
    return ordering.dominant_from_counts(counts)


def group_by_rule(logs: Sequence[LogEntry]) -> List[RuleBlock]:
    ordering = SeverityOrdering.default()
    grouped: Dict[str, List[LogEntry]] = {}
    for entry in logs:
        grouped.setdefault(entry.rule_id, []).append(entry)

    blocks: List[RuleBlock] = []
    for rule_id, rows in grouped.items():
        counts = LevelCounts.from_levels(r.level for r in rows)
        blocks.append(
            RuleBlock(
                rule_id=rule_id,
                description=rows[0].description,
                type=rows[0].type,
                rows=rows,
                counts=counts,
                status=_status(counts, ordering),
                issues=counts.issues,
                anchor=f"rule_{idify(rule_id)}",
            )
        )
    return blocks


def sheet_names(logs: Iterable[LogEntry]) -> List[str]:
    names: Dict[str, None] = {}
    for entry in logs:
        for name in entry.sheets():
            names.setdefault(name, None)
    return list(names.keys())


def group_by_sheet(logs: Sequence[LogEntry]) -> List[SheetBlock]:
    ordering = SeverityOrdering.default()
    blocks: List[SheetBlock] = []
    for name in sheet_names(logs):
        rows = [e for e in logs if e.source_sheet == name or e.target_sheet == name]
        counts = LevelCounts.from_levels(r.level for r in rows)
        blocks.append(
            SheetBlock(
                sheet=name,
                rows=rows,
                counts=counts,
                status=_status(counts, ordering),
                issues=counts.issues,
                anchor=f"sheet_{idify(name)}",
            )
        )
    return blocks


def summarize(logs: Sequence[LogEntry], rule_blocks: Sequence[RuleBlock], *, generated: str = "") -> ReportSummary:
    row_counts = LevelCounts.from_levels(e.level for e in logs)
    return ReportSummary(
        total_rules=len(rule_blocks),
        total_rows=len(logs),
        rules_passed=sum(1 for b in rule_blocks if b.status == Level.INFO),
        rules_warn=sum(1 for b in rule_blocks if b.status == Level.WARNING),
        rules_err=sum(1 for b in rule_blocks if b.status == Level.ERROR),
        info_rows=row_counts.info,
        warn_rows=row_counts.warning,
        err_rows=row_counts.error,
        generated=generated,
    )

"""Interactive state of a rendered report, as a pure reducer.

The inlined script of the HTML document runs the same machine in the browser;
this module is the reference implementation and is what the tests exercise.

Every user action produces a new `ViewerState` via `reduce`; `compute_view`
derives what is visible from a document and a state, in this order:

1. severity chips hide whole sub-tables;
2. the search term marks rows as passing or not inside visible sub-tables;
3. a card is visible iff it passes the rule-status filter and has a sub-table
   with at least one passing row;
4. visible tables are paginated over their passing rows only;
5. highlights are computed for visible page rows only.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from ..rules_engine.models import Level
from .models import Grouping, ReportBlock, ReportDocument, ReportRow, SeverityTable

logger = logging.getLogger(__name__)

COPY_OK_NOTICE = "Copied visible rows"
COPY_FAILED_NOTICE = "Clipboard copy failed"


class TablePage(BaseModel):
    model_config = ConfigDict(frozen=True)

    page: int = 1
    rows_per_page: int = 10


def _all_chips() -> Dict[Level, bool]:
    return {Level.INFO: True, Level.WARNING: True, Level.ERROR: True}


class ViewerState(BaseModel):
    model_config = ConfigDict(frozen=True)

    search_term: str = ""
    rule_status_filter: Optional[Level] = None
    chips: Dict[Level, bool] = Field(default_factory=_all_chips)
    grouping: Grouping = Grouping.RULE
    tables: Dict[str, TablePage] = Field(default_factory=dict)
    light_theme: bool = False
    expanded: bool = True
    export_menu_open: bool = False

    @property
    def query(self) -> str:
        return self.search_term.strip().lower()

    def table_page(self, table_id: str, default_rows_per_page: int = 10) -> TablePage:
        return self.tables.get(table_id) or TablePage(rows_per_page=default_rows_per_page)


def initial_state(document: ReportDocument) -> ViewerState:
    return ViewerState(
        tables={t.table_id: TablePage(rows_per_page=document.rows_per_page) for t in document.iter_tables()}
    )


# ---- actions --------------------------------------------------------------


@dataclass(frozen=True)
class SetSearch:
    term: str


@dataclass(frozen=True)
class SetRuleStatusFilter:
    level: Optional[Union[Level, str]]


@dataclass(frozen=True)
class ToggleChip:
    level: Level


@dataclass(frozen=True)
class SetGrouping:
    grouping: Grouping


@dataclass(frozen=True)
class ChangePage:
    table_id: str
    delta: int


@dataclass(frozen=True)
class SetRowsPerPage:
    table_id: str
    rows_per_page: int


@dataclass(frozen=True)
class ToggleTheme:
    pass


@dataclass(frozen=True)
class ExpandAll:
    pass


@dataclass(frozen=True)
class CollapseAll:
    pass


@dataclass(frozen=True)
class ToggleExportMenu:
    pass


@dataclass(frozen=True)
class CloseExportMenu:
    pass


Action = Union[
    SetSearch,
    SetRuleStatusFilter,
    ToggleChip,
    SetGrouping,
    ChangePage,
    SetRowsPerPage,
    ToggleTheme,
    ExpandAll,
    CollapseAll,
    ToggleExportMenu,
    CloseExportMenu,
]


# ---- pagination -----------------------------------------------------------


@dataclass(frozen=True)
class PageWindow:
    page: int
    pages: int
    start: int
    end: int
    total: int

    @property
    def shown(self) -> int:
        return self.end - self.start


def page_count(total: int, rows_per_page: int) -> int:
    return max(1, math.ceil(total / rows_per_page))


def paginate(total: int, page: int, rows_per_page: int) -> PageWindow:
    """Window over `total` filtered rows; out-of-range pages clamp to the nearest valid page."""
    if rows_per_page <= 0:
        raise ValueError("rows_per_page must be positive")
    pages = page_count(total, rows_per_page)
    page = min(max(page, 1), pages)
    start = (page - 1) * rows_per_page
    end = min(start + rows_per_page, total)
    return PageWindow(page=page, pages=pages, start=start, end=end, total=total)


# ---- filtering ------------------------------------------------------------


def row_passes(row: ReportRow, table: SeverityTable, query: str) -> bool:
    return not query or query in row.search_text(table.with_rule_column)


def passing_rows(table: SeverityTable, state: ViewerState) -> List[ReportRow]:
    if not state.chips.get(table.kind, True):
        return []
    query = state.query
    return [row for row in table.rows if row_passes(row, table, query)]


def block_passes_rule_filter(block: ReportBlock, state: ViewerState) -> bool:
    if state.grouping != Grouping.RULE or state.rule_status_filter is None:
        return True
    return block.counts.get(state.rule_status_filter) > 0


def _coerce_rule_filter(level: Optional[Union[Level, str]]) -> Optional[Level]:
    if level is None or level == "":
        return None
    return Level(level)


def _reset_out_of_range(document: ReportDocument, state: ViewerState) -> ViewerState:
    tables = dict(state.tables)
    changed = False
    for table in document.iter_tables(state.grouping):
        current = state.table_page(table.table_id, document.rows_per_page)
        total = len(passing_rows(table, state))
        if current.page > page_count(total, current.rows_per_page):
            tables[table.table_id] = current.model_copy(update={"page": 1})
            changed = True
    if not changed:
        return state
    return state.model_copy(update={"tables": tables})


def reduce(document: ReportDocument, state: ViewerState, action: Action) -> ViewerState:
    """Return the state that follows `action`; `state` itself is never modified."""
    if isinstance(action, SetSearch):
        return _reset_out_of_range(document, state.model_copy(update={"search_term": action.term}))
    if isinstance(action, SetRuleStatusFilter):
        level = _coerce_rule_filter(action.level)
        return _reset_out_of_range(document, state.model_copy(update={"rule_status_filter": level}))
    if isinstance(action, ToggleChip):
        level = Level(action.level)
        chips = dict(state.chips)
        chips[level] = not chips.get(level, True)
        return _reset_out_of_range(document, state.model_copy(update={"chips": chips}))
    if isinstance(action, SetGrouping):
        grouping = Grouping(action.grouping)
        return _reset_out_of_range(document, state.model_copy(update={"grouping": grouping}))
    if isinstance(action, ChangePage):
        table = document.table(action.table_id)
        current = state.table_page(table.table_id, document.rows_per_page)
        total = len(passing_rows(table, state))
        window = paginate(total, current.page + action.delta, current.rows_per_page)
        tables = dict(state.tables)
        tables[table.table_id] = current.model_copy(update={"page": window.page})
        return state.model_copy(update={"tables": tables})
    if isinstance(action, SetRowsPerPage):
        if action.rows_per_page not in document.rows_per_page_options:
            raise ValueError(
                f"rows_per_page must be one of {document.rows_per_page_options}, got {action.rows_per_page}"
            )
        table = document.table(action.table_id)
        current = state.table_page(table.table_id, document.rows_per_page)
        total = len(passing_rows(table, state))
        page = current.page
        if page > page_count(total, action.rows_per_page):
            page = 1
        tables = dict(state.tables)
        tables[table.table_id] = TablePage(page=page, rows_per_page=action.rows_per_page)
        return state.model_copy(update={"tables": tables})
    if isinstance(action, ToggleTheme):
        return state.model_copy(update={"light_theme": not state.light_theme})
    if isinstance(action, ExpandAll):
        return state.model_copy(update={"expanded": True})
    if isinstance(action, CollapseAll):
        return state.model_copy(update={"expanded": False})
    if isinstance(action, ToggleExportMenu):
        return state.model_copy(update={"export_menu_open": not state.export_menu_open})
    if isinstance(action, CloseExportMenu):
        return state.model_copy(update={"export_menu_open": False})
    raise TypeError(f"Unknown viewer action: {action!r}")


# ---- derived view ---------------------------------------------------------


@dataclass(frozen=True)
class TableView:
    table: SeverityTable
    visible: bool
    passing: Tuple[ReportRow, ...]
    window: PageWindow

    @property
    def page_rows(self) -> Tuple[ReportRow, ...]:
        return self.passing[self.window.start : self.window.end]


@dataclass(frozen=True)
class BlockView:
    block: ReportBlock
    visible: bool
    tables: Tuple[TableView, ...]


@dataclass(frozen=True)
class ViewResult:
    grouping: Grouping
    query: str
    blocks: Tuple[BlockView, ...]
    # (table_id, row index) -> per-cell highlight segments, visible page rows only.
    highlights: Dict[Tuple[str, int], List[List[Tuple[str, bool]]]] = field(default_factory=dict)

    def visible_blocks(self) -> List[BlockView]:
        return [b for b in self.blocks if b.visible]

    def table(self, table_id: str) -> TableView:
        for block in self.blocks:
            for tv in block.tables:
                if tv.table.table_id == table_id:
                    return tv
        raise KeyError(table_id)


def highlight(text: str, query: str) -> List[Tuple[str, bool]]:
    """Split `text` into (segment, is_match) pairs for a case-insensitive query."""
    if not query or not text:
        return [(text, False)]
    lowered = text.lower()
    query = query.lower()
    segments: List[Tuple[str, bool]] = []
    pos = 0
    while True:
        idx = lowered.find(query, pos)
        if idx < 0:
            break
        if idx > pos:
            segments.append((text[pos:idx], False))
        segments.append((text[idx : idx + len(query)], True))
        pos = idx + len(query)
    if pos < len(text) or not segments:
        segments.append((text[pos:], False))
    return segments


def compute_view(document: ReportDocument, state: ViewerState) -> ViewResult:
    query = state.query
    block_views: List[BlockView] = []
    for block in document.blocks(state.grouping):
        passes_rule = block_passes_rule_filter(block, state)
        table_views: List[TableView] = []
        for table in block.tables:
            current = state.table_page(table.table_id, document.rows_per_page)
            chip_on = state.chips.get(table.kind, True)
            passing = tuple(passing_rows(table, state)) if chip_on else ()
            table_views.append(
                TableView(
                    table=table,
                    visible=chip_on and bool(passing),
                    passing=passing,
                    window=paginate(len(passing), current.page, current.rows_per_page),
                )
            )
        visible = passes_rule and any(tv.visible for tv in table_views)
        block_views.append(BlockView(block=block, visible=visible, tables=tuple(table_views)))

    highlights: Dict[Tuple[str, int], List[List[Tuple[str, bool]]]] = {}
    if query:
        for bv in block_views:
            if not bv.visible:
                continue
            for tv in bv.tables:
                if not tv.visible:
                    continue
                for row in tv.page_rows:
                    highlights[(tv.table.table_id, row.index)] = [
                        highlight(cell, query) for cell in row.cells(tv.table.with_rule_column)
                    ]
    return ViewResult(grouping=state.grouping, query=query, blocks=tuple(block_views), highlights=highlights)


# ---- exports --------------------------------------------------------------

_EXPORT_KEYS = ("idx", "source", "value", "type", "target", "status", "level")


def visible_rows(view: ViewResult) -> List[Dict[str, str]]:
    """Every passing row of every visible table, across all pages."""
    rows: List[Dict[str, str]] = []
    for bv in view.visible_blocks():
        for tv in bv.tables:
            if not tv.visible:
                continue
            for row in tv.passing:
                record = {
                    "idx": str(row.index),
                    "source": row.source_sheet,
                    "value": row.value,
                    "type": row.type,
                    "target": row.target_sheet,
                    "status": row.status_label,
                    "level": row.level.value,
                }
                if view.grouping == Grouping.RULE:
                    record["ruleId"] = bv.block.key
                else:
                    record["rule"] = row.rule_id
                    record["sheet"] = bv.block.key
                rows.append(record)
    return rows


def export_issues_csv(view: ViewResult) -> str:
    rows = [r for r in visible_rows(view) if r["level"] in (Level.WARNING.value, Level.ERROR.value)]
    head = list(rows[0].keys()) if rows else list(_EXPORT_KEYS)
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(head)
    for row in rows:
        writer.writerow([row.get(k, "") for k in head])
    return buffer.getvalue().rstrip("\n")


def export_visible_json(view: ViewResult) -> str:
    return json.dumps(visible_rows(view), indent=2)


def visible_rows_tsv(view: ViewResult) -> str:
    return "\n".join("\t".join(row.values()) for row in visible_rows(view))


def copy_visible(view: ViewResult, clipboard: Callable[[str], None]) -> str:
    """Copy visible rows; a failing clipboard yields a notice instead of an exception."""
    try:
        clipboard(visible_rows_tsv(view))
    except Exception as exc:
        logger.warning("Clipboard copy failed: %s", exc)
        return COPY_FAILED_NOTICE
    return COPY_OK_NOTICE


class ViewerSession:
    """Holds one document and its current state; each dispatch replaces the state."""

    def __init__(self, document: ReportDocument, state: Optional[ViewerState] = None):
        self.document = document
        self.state = state or initial_state(document)

    def dispatch(self, action: Action) -> ViewResult:
        self.state = reduce(self.document, self.state, action)
        return self.view

    @property
    def view(self) -> ViewResult:
        return compute_view(self.document, self.state)

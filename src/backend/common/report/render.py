"""Serialization of a `ReportDocument` into one self-contained HTML page.

This is the only module that deals with textual escaping.
"""

from __future__ import annotations

import json
from typing import Any, List

from ..rules_engine.models import Level
from .assets import REPORT_CSS, REPORT_SCRIPT
from .models import Grouping, ReportBlock, ReportDocument, ReportRow, SeverityTable

_HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
}

_BADGE_CLASS = {Level.ERROR: "err", Level.WARNING: "warn", Level.INFO: "ok"}


def escape_html(value: Any) -> str:
    """Escape `& < > " '`; None renders as an empty string."""
    if value is None:
        return ""
    if isinstance(value, bool):
        text = "true" if value else "false"
    else:
        text = value if isinstance(value, str) else str(value)
    return "".join(_HTML_ESCAPES.get(ch, ch) for ch in text)


def _script_json(value: Any) -> str:
    # Keep the payload from terminating the surrounding <script> element.
    return json.dumps(value).replace("</", "<\\/")


def _render_row(row: ReportRow, table: SeverityTable) -> List[str]:
    cells = row.cells(table.with_rule_column)
    tds: List[str] = []
    for pos, cell in enumerate(cells):
        if pos == 2:
            tds.append(f"<td class='val-cell'>{escape_html(cell)}</td>")
        elif pos == len(cells) - 2:
            css = "status-yes" if row.status_label == "YES" else "status-no"
            tds.append(f"<td><span class='{css}'>{escape_html(cell)}</span></td>")
        elif pos == len(cells) - 1:
            tds.append(f"<td class='lvl {escape_html(row.level.value)}'>{escape_html(cell)}</td>")
        else:
            tds.append(f"<td>{escape_html(cell)}</td>")

    lines = [
        f"<tr class='main-row' data-level='{escape_html(row.level.value)}' "
        f"data-text='{escape_html(row.search_text(table.with_rule_column))}'>" + "".join(tds) + "</tr>"
    ]
    if row.is_issue:
        suggestions = row.suggestions or []
        if suggestions:
            body = "<ul>" + "".join(f"<li>{escape_html(s)}</li>" for s in suggestions) + "</ul>"
        else:
            body = "<div class='muted'>No suggestions provided for this rule.</div>"
        lines.append(
            f"<tr class='why-row' data-level='{escape_html(row.level.value)}'>"
            f"<td colspan='{len(cells)}'><div class='why'><div><b>Suggestions</b></div>{body}</div></td>"
            "</tr>"
        )
    return lines


def _render_table(table: SeverityTable, document: ReportDocument) -> List[str]:
    table_id = escape_html(table.table_id)
    head = "".join(f"<th>{escape_html(h)}</th>" for h in table.headers())
    options = "".join(
        f"<option{' selected' if opt == document.rows_per_page else ''}>{opt}</option>"
        for opt in document.rows_per_page_options
    )
    lines = [
        f"<div class='sec' data-sec='{table_id}' data-kind='{table.kind.value}'>",
        f"<div class='sec-h'>{escape_html(table.title)}</div>",
        "<div class='table-wrap'>",
        f"<table class='data-table' id='{table_id}' data-kind='{table.kind.value}' data-page='1' "
        f"data-rows='{document.rows_per_page}' data-with-rule='{1 if table.with_rule_column else 0}'>",
        f"<thead><tr>{head}</tr></thead>",
        "<tbody>",
    ]
    for row in table.rows:
        lines.extend(_render_row(row, table))
    lines.extend(
        [
            "</tbody>",
            "</table>",
            "<div class='pager'>",
            "<button class='btn' onclick='chgPage(this,-1)'>&#9664; Prev</button>",
            "<span class='spacer'></span>",
            "<span class='muted'>Rows <span class='rpp'>0</span>/<span class='total'>"
            f"{len(table.rows)}</span> &middot; Page <span class='page'>1</span>/<span class='pages'>1</span></span>",
            f"<select class='select' aria-label='Rows per page' onchange='setRpp(this)'>{options}</select>",
            "<span class='spacer'></span>",
            "<button class='btn' onclick='chgPage(this,1)'>Next &#9654;</button>",
            "</div>",
            "</div>",
            "</div>",
        ]
    )
    return lines


def _render_block(block: ReportBlock, index: int, document: ReportDocument) -> List[str]:
    identity = "data-rule" if block.grouping == Grouping.RULE else "data-sheet"
    counts = block.counts
    lines = [
        f"<section class='rule' {identity}='{escape_html(block.key)}' "
        f"data-status='{block.status.value}' data-issues='{block.issues}' "
        f"data-count-info='{counts.info}' data-count-warning='{counts.warning}' "
        f"data-count-error='{counts.error}' id='{escape_html(block.anchor)}' data-index='{index}'>",
        "<div class='rule-hd'>",
        f"<div class='rule-title'>{escape_html(block.title)}</div>",
        f"<span class='status-badge {_BADGE_CLASS[block.status]}'>{block.status.value.upper()}</span>",
        f"<span class='pill'><span class='dot err'></span>{counts.error}</span>",
        f"<span class='pill'><span class='dot warn'></span>{counts.warning}</span>",
        f"<span class='pill'><span class='dot ok'></span>{counts.info}</span>",
        "</div>",
    ]
    if block.grouping == Grouping.RULE:
        lines.append(
            f"<div class='rule-desc'>Description: {escape_html(block.description)} | "
            f"<b>Type:</b> {escape_html(block.type)}</div>"
        )
    lines.append("<details class='rule-body' open>")
    for table in block.tables:
        lines.extend(_render_table(table, document))
    lines.append("</details>")
    lines.append("</section>")
    return lines


def _render_toolbar(document: ReportDocument) -> List[str]:
    s = document.summary
    return [
        "<div class='toolbar'>",
        "<input id='searchBox' class='input' placeholder='Search rows (value / sheet / rule)' "
        "title='Filters rows inside visible tables and rules' oninput='setSearch(this)'/>",
        "<span class='divider'></span>",
        "<div class='group' role='group' aria-labelledby='lblRulesFilter'>",
        "<span id='lblRulesFilter' class='group-title'>Rules</span>",
        "<label class='sr-only' for='levelSelect'>Rule status</label>",
        "<select id='levelSelect' class='select' title='Show rules that contain at least one row of this level' "
        "onchange='setRuleFilter(this)'>",
        "<option value=''>All rule statuses</option>",
        "<option value='info'>Rules with Info</option>",
        "<option value='warning'>Rules with Warning</option>",
        "<option value='error'>Rules with Error</option>",
        "</select>",
        "</div>",
        "<span class='divider'></span>",
        "<div class='group' role='group' aria-labelledby='lblTableFilter'>",
        "<span id='lblTableFilter' class='group-title'>Tables</span>",
        "<span class='chip active' id='chip-info' title='Toggle Info sub-tables' onclick=\"toggleChip('info')\">"
        f"<span class='dot ok'></span><span class='tag' id='count-info'>{s.info_rows}</span></span>",
        "<span class='chip active' id='chip-warning' title='Toggle Warning sub-tables' "
        "onclick=\"toggleChip('warning')\">"
        f"<span class='dot warn'></span><span class='tag' id='count-warn'>{s.warn_rows}</span></span>",
        "<span class='chip active' id='chip-error' title='Toggle Error sub-tables' onclick=\"toggleChip('error')\">"
        f"<span class='dot err'></span><span class='tag' id='count-err'>{s.err_rows}</span></span>",
        "</div>",
        "<span class='divider'></span>",
        "<div class='group' role='group' aria-labelledby='lblView'>",
        "<span id='lblView' class='group-title'>View</span>",
        "<label class='sr-only' for='groupSelect'>Group by</label>",
        "<select id='groupSelect' class='select' onchange='switchGrouping(this)'>",
        "<option value='rule' selected>By rule</option>",
        "<option value='sheet'>By sheet</option>",
        "</select>",
        "<button class='btn' onclick='foldAll()' title='Unfold all tables'>&#9660;</button>",
        "<button class='btn' onclick='collapseAll()' title='Fold all tables'>&#9650;</button>",
        "<button class='btn' onclick='toggleLight()' title='Toggle light theme'>&#9728;</button>",
        "</div>",
        "<div class='group export dropdown' role='group' aria-labelledby='lblExport'>",
        "<span id='lblExport' class='group-title'>Export</span>",
        "<button id='btnExport' class='btn menu-btn' aria-haspopup='true' aria-expanded='false' "
        "onclick='toggleExportMenu(event)'>Export &#9662;</button>",
        "<div id='exportMenu' class='menu-list' role='menu' aria-labelledby='btnExport'>",
        "<button class='menu-item' role='menuitem' onclick='exportIssuesCSV()'>Issues CSV</button>",
        "<button class='menu-item' role='menuitem' onclick='exportVisibleJSON()'>Visible JSON</button>",
        "<button class='menu-item' role='menuitem' onclick='copyVisible()'>Copy Visible</button>",
        "<div class='menu-sep' aria-hidden='true'></div>",
        "<button class='menu-item' role='menuitem' onclick='printReport()'>Print</button>",
        "</div>",
        "</div>",
        "</div>",
    ]


def _render_summary(document: ReportDocument) -> List[str]:
    s = document.summary
    metrics = [
        ("Total rules", s.total_rules),
        ("Total rows", s.total_rows),
        ("Rules passed", s.rules_passed),
        ("Rules with warnings", s.rules_warn),
        ("Rules with errors", s.rules_err),
        ("Generated", s.generated),
    ]
    lines = ["<div class='summary'>"]
    for label, value in metrics:
        lines.append(
            f"<div class='card'><div class='muted'>{escape_html(label)}</div>"
            f"<div class='big'>{escape_html(value)}</div></div>"
        )
    pills = (
        ("ok", "Info rows", s.info_rows),
        ("warn", "Warning rows", s.warn_rows),
        ("err", "Error rows", s.err_rows),
    )
    for dot, label, value in pills:
        lines.append(
            f"<div class='card'><span class='pill'><span class='dot {dot}'></span>{label}</span> <b>{value}</b></div>"
        )
    lines.append("</div>")
    return lines


def render_html(document: ReportDocument) -> str:
    config = {
        "rowsPerPage": document.rows_per_page,
        "rowsPerPageOptions": list(document.rows_per_page_options),
    }
    lines: List[str] = []
    lines.append("<!DOCTYPE html>")
    lines.append("<html lang='en'>")
    lines.append("<head>")
    lines.append("<meta charset='utf-8'>")
    lines.append("<meta name='viewport' content='width=device-width, initial-scale=1'>")
    lines.append(f"<title>{escape_html(document.title)}</title>")
    lines.append(f"<style>{REPORT_CSS}</style>")
    lines.append("</head>")
    lines.append("<body>")
    lines.append("<div class='title-wrap'>")
    lines.append(f"<h1>{escape_html(document.title)}</h1>")
    lines.append(f"<div class='muted'>Generated on {escape_html(document.generated)}</div>")
    lines.append("</div>")
    lines.append("<div id='headerDock'>")
    lines.extend(_render_toolbar(document))
    lines.append("</div>")
    lines.extend(_render_summary(document))
    lines.append("<div id='sections-rule'>")
    for idx, block in enumerate(document.rule_blocks):
        lines.extend(_render_block(block, idx, document))
    lines.append("</div>")
    lines.append("<div id='sections-sheet' style='display:none'>")
    for idx, block in enumerate(document.sheet_blocks):
        lines.extend(_render_block(block, idx, document))
    lines.append("</div>")
    lines.append(f"<script>window.REPORT_CONFIG = {_script_json(config)};</script>")
    lines.append(f"<script>{REPORT_SCRIPT}</script>")
    lines.append("</body>")
    lines.append("</html>")
    return "\n".join(lines)

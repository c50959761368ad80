"""Report building: validation logs in, a self-contained interactive HTML document out."""

from .builder import build_report
from .models import Grouping, ReportBlock, ReportDocument, ReportRow, SeverityTable
from .normalize import normalize_log, normalize_logs, read_validation_payload
from .render import escape_html, render_html
from .status import NodeStatus, status_for_counts
from .viewer import ViewerSession, ViewerState, compute_view, initial_state, reduce

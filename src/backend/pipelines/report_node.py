from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable, MutableMapping, Optional

from common.report.builder import build_report
from common.report.normalize import read_validation_payload
from common.report.render import render_html
from common.report.status import NodeStatus, no_validation_status, runtime_error_status, status_for_counts
from common.rules_engine.config import ReportNodeConfig
from common.rules_engine.errors import RenderFailure

from .storage import InMemoryScopedStorage, ScopedStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportOutcome:
    message: MutableMapping[str, Any]
    status: NodeStatus
    # False when nothing was found to report on; the message passes through untouched.
    rendered: bool = True


class ReportNode:
    """Turns the validation data at the configured location into an HTML report.

    `status` always reflects the last processed message.
    """

    def __init__(
        self,
        config: Optional[ReportNodeConfig] = None,
        storage: Optional[ScopedStorage] = None,
        rules: Optional[Iterable[Any]] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.config = config or ReportNodeConfig()
        self.storage = storage or InMemoryScopedStorage()
        self.rules = list(rules or [])
        self.clock = clock
        self.status: Optional[NodeStatus] = None

    def on_input(self, message: MutableMapping[str, Any]) -> ReportOutcome:
        cfg = self.config
        try:
            src = self.storage.read(cfg.in_scope, cfg.in_path, message)
            result = read_validation_payload(src)
            if result is None:
                logger.info("No validation found at %s.%s; passing message through", cfg.in_scope.value, cfg.in_path)
                self.status = no_validation_status()
                return ReportOutcome(message=message, status=self.status, rendered=False)

            document = build_report(result, self.rules, config=cfg.report, generated_at=self.clock())
            html = render_html(document)
            self.storage.write(cfg.out_scope, cfg.out_path, html, message)

            filename = cfg.fixed_filename.strip()
            if filename:
                self.storage.write(cfg.file_scope, cfg.file_path, filename, message)
        except Exception as exc:
            self.status = runtime_error_status()
            logger.error("Report generation failed: %s", exc)
            raise RenderFailure(f"Report generation failed: {exc}") from exc

        self.status = status_for_counts(result.counts)
        logger.info("Report rendered (%s)", self.status.text)
        return ReportOutcome(message=message, status=self.status)

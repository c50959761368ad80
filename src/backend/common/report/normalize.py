"""Ingestion of validation payloads into canonical `LogEntry` records.

Hosts emit log entries with loose field names (`ruleId`/`id`/`rule`,
`value`/`message`) and free-form levels. All of that is resolved here, once;
the grouping and rendering code only sees `LogEntry`.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Iterable, List, Optional

from pydantic import ValidationError

from ..rules_engine.models import UNKNOWN_RULE, Level, LevelCounts, LogEntry, ValidationResult

logger = logging.getLogger(__name__)


def normalize_level(raw: Any) -> Level:
    text = str(raw if raw is not None else "info").strip().lower()
    if text.startswith("err"):
        return Level.ERROR
    if text.startswith("warn"):
        return Level.WARNING
    return Level.INFO


def _first_present(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)


def _sheet(value: Any) -> Optional[str]:
    text = _text(value).strip()
    return text or None


def normalize_log(raw: Any) -> LogEntry:
    if isinstance(raw, LogEntry):
        return raw
    if not isinstance(raw, Mapping):
        raise TypeError(f"Log entries must be objects, got {type(raw).__name__}")
    rule_id = _first_present(raw, "ruleId", "id", "rule")
    return LogEntry(
        rule_id=UNKNOWN_RULE if rule_id is None else _text(rule_id),
        type=_text(raw.get("type")),
        level=normalize_level(raw.get("level")),
        description=_text(raw.get("description")),
        value=_text(_first_present(raw, "value", "message")),
        source_sheet=_sheet(raw.get("source_sheet")),
        target_sheet=_sheet(raw.get("target_sheet")),
    )


def normalize_logs(raw_logs: Iterable[Any]) -> List[LogEntry]:
    return [normalize_log(raw) for raw in raw_logs]


def _declared_counts(raw: Any) -> Optional[LevelCounts]:
    if not isinstance(raw, Mapping):
        return None
    try:
        return LevelCounts.model_validate(
            {k: raw.get(k, 0) or 0 for k in (Level.INFO.value, Level.WARNING.value, Level.ERROR.value)}
        )
    except ValidationError:
        logger.warning("Ignoring malformed counts in validation payload: %r", raw)
        return None


def read_validation_payload(src: Any) -> Optional[ValidationResult]:
    """
    Interpret whatever sits at the configured input location.

    Returns None when nothing usable is there ("no validation found"); that is
    a defined pass-through path, not an error.
    Accepts `{logs, counts}`, a bare list of log entries, or a `ValidationResult`.
    """
    if not src:
        return None
    if isinstance(src, ValidationResult):
        return src
    if isinstance(src, list):
        return ValidationResult.from_logs(normalize_logs(src))
    if isinstance(src, Mapping):
        raw_logs = src.get("logs")
        logs = normalize_logs(raw_logs) if isinstance(raw_logs, list) else []
        result = ValidationResult.from_logs(logs)
        declared = _declared_counts(src.get("counts"))
        if declared is None:
            return result
        if declared != result.counts:
            logger.warning(
                "Declared counts %s disagree with %d log entries (%s); keeping declared counts for status",
                declared.model_dump(),
                len(logs),
                result.counts.model_dump(),
            )
        return ValidationResult(logs=logs, counts=declared)
    logger.warning("Unsupported validation payload type %s; treating as an empty log", type(src).__name__)
    return ValidationResult()

import os
import sys


# Ensure `src/backend` is on sys.path so imports like `import common...` work.
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

from datetime import datetime

import pytest

from common.report.builder import build_report

GENERATED_AT = datetime(2024, 5, 1, 9, 30, 0)


@pytest.fixture
def generated_at() -> datetime:
    return GENERATED_AT


@pytest.fixture
def make_log():
    def _make(rule_id: str = "R1", level: str = "info", value: str = "", **fields) -> dict:
        return {"ruleId": rule_id, "level": level, "value": value, **fields}

    return _make


@pytest.fixture
def make_document(generated_at):
    def _make(logs, rules=None, **kwargs):
        return build_report(logs, rules, generated_at=generated_at, **kwargs)

    return _make

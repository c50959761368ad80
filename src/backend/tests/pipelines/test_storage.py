import pytest

from common.rules_engine.config import Scope
from pipelines.storage import InMemoryScopedStorage


def test_read_write_each_scope():
    storage = InMemoryScopedStorage()
    msg = {}
    storage.write(Scope.MSG, "report.html", "<html/>", msg)
    storage.write(Scope.FLOW, "last.file", "a.html", msg)
    storage.write("global", "count", 3, msg)

    assert msg == {"report": {"html": "<html/>"}}
    assert storage.flow == {"last": {"file": "a.html"}}
    assert storage.global_ == {"count": 3}
    assert storage.read(Scope.MSG, "report.html", msg) == "<html/>"
    assert storage.read(Scope.GLOBAL, "count", msg) == 3
    assert storage.read(Scope.FLOW, "missing.path", msg) is None


def test_write_rejects_empty_path():
    with pytest.raises(ValueError):
        InMemoryScopedStorage().write(Scope.MSG, "", 1, {})


def test_unknown_scope_is_rejected():
    with pytest.raises(ValueError):
        InMemoryScopedStorage().read("session", "x", {})

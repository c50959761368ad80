from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, MutableMapping, Protocol

from common.paths import get_path, set_path
from common.rules_engine.config import Scope


class ScopedStorage(Protocol):
    def read(self, scope: Scope, path: str, message: MutableMapping[str, Any]) -> Any:
        """Return the value at `path` in `scope`, or None when absent."""
        ...

    def write(self, scope: Scope, path: str, value: Any, message: MutableMapping[str, Any]) -> None:
        """Store `value` at `path` in `scope`; `msg` writes go into the message itself."""
        ...


@dataclass
class InMemoryScopedStorage:
    """Process-local flow/global context, as a host runtime would provide."""

    flow: Dict[str, Any] = field(default_factory=dict)
    global_: Dict[str, Any] = field(default_factory=dict)

    def _context(self, scope: Scope, message: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
        scope = Scope(scope)
        if scope == Scope.MSG:
            return message
        if scope == Scope.FLOW:
            return self.flow
        return self.global_

    def read(self, scope: Scope, path: str, message: MutableMapping[str, Any]) -> Any:
        return get_path(self._context(scope, message), path)

    def write(self, scope: Scope, path: str, value: Any, message: MutableMapping[str, Any]) -> None:
        set_path(self._context(scope, message), path, value)

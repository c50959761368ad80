from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Sequence

_MISSING = object()


def split_path(path: str) -> list[str]:
    return [part for part in str(path or "").split(".") if part]


def get_path(data: Any, path: str, default: Any = None) -> Any:
    """Resolve a dot-path (`a.b.0.c`) into nested mappings/sequences."""
    current = data
    for part in split_path(path):
        if isinstance(current, Mapping):
            if part not in current:
                return default
            current = current[part]
        elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
            try:
                current = current[int(part)]
            except (ValueError, IndexError):
                return default
        else:
            return default
    return current


def has_path(data: Any, path: str) -> bool:
    return get_path(data, path, _MISSING) is not _MISSING


def set_path(data: MutableMapping[str, Any], path: str, value: Any) -> None:
    """Set a dot-path value, creating intermediate mappings as needed."""
    parts = split_path(path)
    if not parts:
        raise ValueError("Path must not be empty.")
    current: MutableMapping[str, Any] = data
    for part in parts[:-1]:
        nxt = current.get(part)
        if not isinstance(nxt, MutableMapping):
            nxt = {}
            current[part] = nxt
        current = nxt
    current[parts[-1]] = value

"""Dot-path helpers shared by the field registry, filter engine, and output shaper.

A path such as ``"owner.email"`` addresses ``record["owner"]["email"]``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any


class _Missing:
    """Sentinel for a path that does not resolve."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def split_path(path: str) -> list[str]:
    return [part for part in path.split(".") if part]


def resolve_path(record: Any, path: str) -> Any:
    """Return the value at ``path`` inside ``record``, or ``MISSING``.

    Traversal stops at the first segment that is absent or whose parent is
    not a mapping; it never raises.
    """
    parts = split_path(path)
    if not parts:
        return MISSING

    current = record
    for part in parts:
        if not isinstance(current, Mapping) or part not in current:
            return MISSING
        current = current[part]
    return current


def assign_path(target: dict[str, Any], path: str, value: Any) -> None:
    """Set ``value`` at ``path`` in ``target``, creating intermediate dicts."""
    parts = split_path(path)
    if not parts:
        return

    current = target
    for part in parts[:-1]:
        child = current.get(part)
        if not isinstance(child, dict):
            child = {}
            current[part] = child
        current = child
    current[parts[-1]] = value


def path_in(field: str, fields: Iterable[str]) -> bool:
    """Whether ``field`` is addressable given a list of declared field paths.

    True when ``field`` is listed verbatim, or when it shares its leading
    segment with a listed path: a declared ``owner.email`` makes ``owner``
    and ``owner.name`` addressable, and a declared ``owner`` makes
    ``owner.email`` addressable.
    """
    declared = list(fields)
    if field in declared:
        return True

    parts = split_path(field)
    if not parts:
        return False
    base = parts[0]
    return any(candidate == base or candidate.startswith(base + ".") for candidate in declared)


def is_empty_value(value: Any) -> bool:
    """Missing, ``None``, an empty string, or an empty collection."""
    if value is MISSING or value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False

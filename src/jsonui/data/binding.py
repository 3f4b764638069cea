"""Binding detection and resolution, including list item scopes."""

from dataclasses import dataclass
from typing import Any

from .path import ABSENT, get_in, join_path, parse_path

ITEM = "$item"
INDEX = "$index"


@dataclass(frozen=True)
class ItemScope:
    """Current item of a repeated element: absolute item path plus its index."""

    path: str
    index: int

    @classmethod
    def of(cls, items_path: str, index: int) -> "ItemScope":
        return cls(path=join_path(parse_path(items_path) + (index,)), index=index)


def is_binding(value: Any) -> bool:
    """True for a `{"path": "..."}` reference (exactly one key)."""
    return isinstance(value, dict) and len(value) == 1 and isinstance(value.get("path"), str)


def scoped_segments(path: str, scope: ItemScope | None) -> tuple | None:
    """
    Absolute segments for `path`, expanding a leading `$item` against `scope`.

    Returns None for `$item` paths used outside any scope.
    """
    segments = parse_path(path)
    if segments and segments[0] == ITEM:
        if scope is None:
            return None
        return parse_path(scope.path) + segments[1:]
    return segments


def resolve_path(model: Any, path: str, scope: ItemScope | None = None) -> Any:
    """Resolve a binding path, honouring `$item` / `$index` under a scope."""
    segments = parse_path(path)
    if segments and segments[0] == INDEX:
        return scope.index if scope is not None else ABSENT
    absolute = scoped_segments(path, scope)
    if absolute is None:
        return ABSENT
    return get_in(model, absolute)


def resolve_value(model: Any, value: Any, scope: ItemScope | None = None) -> Any:
    """
    Resolve bindings anywhere inside `value`.

    Missing locations become None so view code never sees the ABSENT sentinel.
    """
    if is_binding(value):
        resolved = resolve_path(model, value["path"], scope)
        return None if resolved is ABSENT else resolved
    if isinstance(value, dict):
        return {key: resolve_value(model, item, scope) for key, item in value.items()}
    if isinstance(value, list):
        return [resolve_value(model, item, scope) for item in value]
    return value


__all__ = ["ITEM", "INDEX", "ItemScope", "is_binding", "scoped_segments", "resolve_path", "resolve_value"]

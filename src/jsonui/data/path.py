"""Path parsing and get/set on nested data models.

Two syntaxes address a location:

- dotted/bracketed: ``a.b[0].c``, ``a["key.with.dots"]``, ``a['x']``
- JSON pointer: ``/a/b/0/c`` (``~1`` is ``/``, ``~0`` is ``~``)

The empty string addresses the whole model. Reads never fail on missing data;
only malformed path strings raise ``InvalidPathError``.
"""

from functools import lru_cache
import re
from typing import Any, Iterable

from ..core.errors import InvalidPathError

Segment = str | int

_INDEX = re.compile(r"\[([0-9]+)\]")
_QUOTED = re.compile(r"""\[(?:"([^"]*)"|'([^']*)')\]""")
_KEY = re.compile(r"[^.\[\]]+")
_PLAIN_KEY = re.compile(r"""[^.\[\]"'/][^.\[\]"']*""")


class _Absent:
    """Marker for a path that resolves to nothing."""

    _instance: "_Absent | None" = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"

    def __copy__(self) -> "_Absent":
        return self

    def __deepcopy__(self, memo: dict) -> "_Absent":
        return self


ABSENT: Any = _Absent()


@lru_cache(maxsize=1024)
def parse_path(path: str) -> tuple[Segment, ...]:
    """
    Split a path string into key (str) and index (int) segments.

    Raises:
        InvalidPathError: If the path is syntactically malformed
    """
    if not isinstance(path, str):
        raise InvalidPathError(repr(path), "path must be a string")
    if path == "":
        return ()
    if path.startswith("/"):
        return _parse_pointer(path)

    segments: list[Segment] = []
    pos = 0
    expect_key = False  # set after a '.'
    while pos < len(path):
        if path[pos] == "[":
            if expect_key:
                raise InvalidPathError(path, f"empty segment at {pos}")
            if match := _INDEX.match(path, pos):
                segments.append(int(match.group(1)))
            elif match := _QUOTED.match(path, pos):
                segments.append(match.group(1) if match.group(1) is not None else match.group(2))
            elif "]" not in path[pos:]:
                raise InvalidPathError(path, f"unterminated bracket at {pos}")
            else:
                raise InvalidPathError(path, f"bracket segment must be an index or quoted key at {pos}")
            pos = match.end()
        elif path[pos] == ".":
            raise InvalidPathError(path, f"empty segment at {pos}")
        else:
            match = _KEY.match(path, pos)
            if match is None:
                raise InvalidPathError(path, f"unexpected {path[pos]!r} at {pos}")
            if segments and not expect_key:
                raise InvalidPathError(path, f"missing '.' before key at {pos}")
            segments.append(match.group(0))
            pos = match.end()

        expect_key = False
        if pos < len(path) and path[pos] == ".":
            pos += 1
            expect_key = True

    if expect_key:
        raise InvalidPathError(path, "trailing '.'")
    return tuple(segments)


def _parse_pointer(path: str) -> tuple[Segment, ...]:
    segments: list[Segment] = []
    for raw in path[1:].split("/"):
        if "~" in raw and re.search(r"~(?![01])", raw):
            raise InvalidPathError(path, f"bad escape in {raw!r}")
        token = raw.replace("~1", "/").replace("~0", "~")
        segments.append(int(token) if token.isascii() and token.isdigit() else token)
    return tuple(segments)


def join_path(segments: Iterable[Segment]) -> str:
    """Render segments back to a dotted/bracketed path string."""
    parts: list[str] = []
    for segment in segments:
        if isinstance(segment, int):
            if segment < 0:
                raise InvalidPathError(str(segment), "negative index")
            parts.append(f"[{segment}]")
        elif _PLAIN_KEY.fullmatch(segment):
            parts.append(f".{segment}" if parts else segment)
        elif '"' not in segment:
            parts.append(f'["{segment}"]')
        elif "'" not in segment:
            parts.append(f"['{segment}']")
        else:
            raise InvalidPathError(segment, "key contains both quote characters")
    return "".join(parts)


def is_prefix(prefix: str, path: str) -> bool:
    """True if `prefix` addresses `path` or one of its ancestors (segment-aware)."""
    head = _normalized(parse_path(prefix))
    full = _normalized(parse_path(path))
    return full[: len(head)] == head


def _normalized(segments: tuple[Segment, ...]) -> tuple[str, ...]:
    return tuple(str(segment) for segment in segments)


def _child(container: Any, segment: Segment) -> Any:
    if isinstance(container, dict):
        return container.get(segment if isinstance(segment, str) else str(segment), ABSENT)
    if isinstance(container, list):
        if isinstance(segment, str):
            if not (segment.isascii() and segment.isdigit()):
                return ABSENT
            segment = int(segment)
        return container[segment] if segment < len(container) else ABSENT
    return ABSENT


def get_in(model: Any, segments: Iterable[Segment], default: Any = ABSENT) -> Any:
    """Walk pre-parsed segments, returning `default` when anything is missing."""
    current = model
    for segment in segments:
        current = _child(current, segment)
        if current is ABSENT:
            return default
    return current


def get(model: Any, path: str, default: Any = ABSENT) -> Any:
    """
    Resolve `path` against `model`.

    Returns:
        The value, or `default` (ABSENT) if any part of the path is missing
    """
    return get_in(model, parse_path(path), default)


def _new_container(segment: Segment) -> dict | list:
    return [] if isinstance(segment, int) else {}


def _accepts(container: Any, segment: Segment) -> bool:
    if isinstance(container, dict):
        return True
    if isinstance(container, list):
        return isinstance(segment, int) or (segment.isascii() and segment.isdigit())
    return False


def _write(container: dict | list, segment: Segment, value: Any) -> None:
    if isinstance(container, dict):
        container[segment if isinstance(segment, str) else str(segment)] = value
        return
    index = int(segment)
    if index >= len(container):
        container.extend([None] * (index + 1 - len(container)))
    container[index] = value


def set(model: Any, path: str, value: Any) -> Any:
    """
    Write `value` at `path`, creating missing containers.

    Int segments create lists (padded with None), str segments create dicts.
    Scalars in the way are replaced by a fresh container, and so is a list
    in the way of a non-numeric key.

    Returns:
        The (mutated) model, or `value` when `path` addresses the root

    Raises:
        InvalidPathError: If the path is malformed
    """
    segments = parse_path(path)
    if not segments:
        return value

    root = model
    if not _accepts(root, segments[0]):
        root = _new_container(segments[0])

    current = root
    for segment, following in zip(segments, segments[1:]):
        child = _child(current, segment)
        if not _accepts(child, following):
            child = _new_container(following)
            _write(current, segment, child)
        current = child

    _write(current, segments[-1], value)
    return root


__all__ = ["ABSENT", "Segment", "parse_path", "join_path", "is_prefix", "get", "get_in", "set"]

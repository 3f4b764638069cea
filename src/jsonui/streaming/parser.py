"""
Partial JSON Parser
Incremental state machine exposing speculative snapshots of a document
that is still being received.
"""

import copy
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..core import StreamParseError, get_logger

logger = get_logger(__name__)

Path = tuple[str | int, ...]

_NUMBER = re.compile(r"-?(0|[1-9]\d*)(\.\d+)?([eE][+-]?\d+)?")
_NUMBER_CHARS = frozenset("0123456789+-.eE")
_DIGITS = frozenset("0123456789")
_WHITESPACE = frozenset(" \t\n\r")
_HEX = frozenset("0123456789abcdefABCDEF")
_ESCAPES = {'"': '"', "\\": "\\", "/": "/", "b": "\b", "f": "\f", "n": "\n", "r": "\r", "t": "\t"}
_LITERALS = {"true": True, "false": False, "null": None}
_REPLACEMENT = "\ufffd"


class _State(str, Enum):
    KEY_OR_END = "key_or_end"
    KEY = "key"
    COLON = "colon"
    VALUE = "value"
    VALUE_OR_END = "value_or_end"
    COMMA_OR_END = "comma_or_end"


@dataclass
class _Frame:
    container: dict | list
    path: Path
    state: _State
    key: str | None = None

    @property
    def is_object(self) -> bool:
        return isinstance(self.container, dict)


@dataclass
class _Token:
    kind: str  # string | number | literal
    path: Path | None  # None for object keys
    chars: list[str] = field(default_factory=list)
    escape: str | None = None  # "\\" after backslash, "u" inside \uXXXX
    hex: str = ""
    high: int | None = None  # pending high surrogate

    def text(self) -> str:
        tail = _REPLACEMENT if self.high is not None else ""
        return "".join(self.chars) + tail


_NOTHING = object()


@dataclass(frozen=True)
class PartialDocument:
    """
    Speculative view of a document in progress.

    Attributes:
        value: Deep copy of the root with open containers implicitly closed
            and the in-progress scalar (if any) placed at `partial_path`
        partial_path: Location of the in-progress string or number
        open_paths: Paths of every container not yet closed
        complete: The root container has closed
    """

    value: Any
    partial_path: Path | None = None
    open_paths: frozenset[Path] = frozenset()
    complete: bool = False


class PartialJSONParser:
    """
    Strict JSON parser that accepts its input in arbitrary fragments.

    Text before the first `{` is skipped (markdown fences, prose) and text
    after the root object closes is ignored.

    Examples:
        >>> parser = PartialJSONParser()
        >>> parser.feed('{"title": "Hel')
        >>> parser.snapshot().value
        {'title': 'Hel'}
    """

    def __init__(self, max_size: int = 512 * 1024, max_depth: int = 32) -> None:
        self.max_size = max_size
        self.max_depth = max_depth
        self._root: dict | None = None
        self._stack: list[_Frame] = []
        self._token: _Token | None = None
        self._done = False
        self._position = 0
        self._size = 0

    @property
    def complete(self) -> bool:
        return self._done

    @property
    def position(self) -> int:
        """Characters consumed so far."""
        return self._position

    def feed(self, text: str) -> None:
        """
        Consume a fragment.

        Raises:
            StreamParseError: Malformed JSON or a size/depth limit exceeded
        """
        for ch in text:
            self._position += 1
            if self._done:
                continue
            if self._root is not None:
                self._size += 1
                if self._size > self.max_size:
                    raise StreamParseError(
                        f"Document exceeds maximum size of {self.max_size} characters", self._position
                    )
            self._step(ch)

    def close(self) -> Any:
        """
        Signal end of input.

        Returns:
            The completed root object

        Raises:
            StreamParseError: Document is incomplete
        """
        if not self._done:
            raise StreamParseError("Unexpected end of document", self._position)
        return self._root

    def snapshot(self) -> PartialDocument:
        """Speculative deep copy of everything received so far."""
        if self._root is None:
            return PartialDocument(value=None)

        value = copy.deepcopy(self._root)
        partial_path = None
        token = self._token
        if token is not None and token.path is not None:
            partial = self._partial_value(token)
            if partial is not _NOTHING:
                _place(value, token.path, partial)
                partial_path = token.path

        return PartialDocument(
            value=value,
            partial_path=partial_path,
            open_paths=frozenset(frame.path for frame in self._stack),
            complete=self._done,
        )

    @staticmethod
    def _partial_value(token: _Token) -> Any:
        if token.kind == "string":
            return token.text()
        if token.kind == "number":
            text = "".join(token.chars)
            for end in range(len(text), 0, -1):
                if _NUMBER.fullmatch(text[:end]):
                    return _to_number(text[:end])
        return _NOTHING

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def _error(self, message: str) -> StreamParseError:
        return StreamParseError(message, self._position)

    def _step(self, ch: str) -> None:
        token = self._token
        if token is not None:
            if token.kind == "string":
                self._string_char(token, ch)
                return
            if token.kind == "literal":
                self._literal_char(token, ch)
                return
            if ch in _NUMBER_CHARS:
                token.chars.append(ch)
                return
            self._finish_number(token)

        if self._root is None:
            if ch == "{":
                self._root = {}
                self._stack.append(_Frame(self._root, (), _State.KEY_OR_END))
            return

        if ch in _WHITESPACE:
            return

        frame = self._stack[-1]
        if frame.is_object:
            self._object_char(frame, ch)
        else:
            self._array_char(frame, ch)

    def _object_char(self, frame: _Frame, ch: str) -> None:
        match frame.state:
            case _State.KEY_OR_END | _State.KEY:
                if ch == '"':
                    self._token = _Token("string", None)
                elif ch == "}" and frame.state is _State.KEY_OR_END:
                    self._close()
                else:
                    raise self._error(f"Expected object key, got {ch!r}")
            case _State.COLON:
                if ch != ":":
                    raise self._error(f"Expected ':', got {ch!r}")
                frame.state = _State.VALUE
            case _State.VALUE:
                self._start_value(frame, ch)
            case _State.COMMA_OR_END:
                if ch == ",":
                    frame.state = _State.KEY
                elif ch == "}":
                    self._close()
                else:
                    raise self._error(f"Expected ',' or '}}', got {ch!r}")

    def _array_char(self, frame: _Frame, ch: str) -> None:
        match frame.state:
            case _State.VALUE_OR_END:
                if ch == "]":
                    self._close()
                else:
                    self._start_value(frame, ch)
            case _State.VALUE:
                self._start_value(frame, ch)
            case _State.COMMA_OR_END:
                if ch == ",":
                    frame.state = _State.VALUE
                elif ch == "]":
                    self._close()
                else:
                    raise self._error(f"Expected ',' or ']', got {ch!r}")

    def _child_path(self, frame: _Frame) -> Path:
        if frame.is_object:
            return frame.path + (frame.key,)
        return frame.path + (len(frame.container),)

    def _start_value(self, frame: _Frame, ch: str) -> None:
        path = self._child_path(frame)
        if ch == '"':
            self._token = _Token("string", path)
        elif ch == "-" or ch in _DIGITS:
            self._token = _Token("number", path, [ch])
        elif ch in "tfn":
            self._token = _Token("literal", path, [ch])
        elif ch in "{[":
            if len(self._stack) >= self.max_depth:
                raise self._error(f"Nesting exceeds maximum depth of {self.max_depth}")
            child: dict | list = {} if ch == "{" else []
            self._attach(frame, child)
            self._stack.append(
                _Frame(child, path, _State.KEY_OR_END if ch == "{" else _State.VALUE_OR_END)
            )
        else:
            raise self._error(f"Unexpected character {ch!r}")

    def _attach(self, frame: _Frame, value: Any) -> None:
        if frame.is_object:
            frame.container[frame.key] = value
            frame.key = None
        else:
            frame.container.append(value)
        frame.state = _State.COMMA_OR_END

    def _close(self) -> None:
        self._stack.pop()
        if not self._stack:
            self._done = True
            logger.debug("document_complete", size=self._size)

    def _complete_token(self, value: Any) -> None:
        self._token = None
        self._attach(self._stack[-1], value)

    def _string_char(self, token: _Token, ch: str) -> None:
        if token.escape == "u":
            if ch not in _HEX:
                raise self._error(f"Invalid unicode escape digit {ch!r}")
            token.hex += ch
            if len(token.hex) == 4:
                code = int(token.hex, 16)
                token.hex = ""
                token.escape = None
                self._code_point(token, code)
            return

        if token.escape == "\\":
            token.escape = None
            if ch == "u":
                token.escape = "u"
                return
            if ch not in _ESCAPES:
                raise self._error(f"Invalid escape \\{ch}")
            self._flush_surrogate(token)
            token.chars.append(_ESCAPES[ch])
            return

        if ch == "\\":
            token.escape = "\\"
            return
        self._flush_surrogate(token)
        if ch == '"':
            self._finish_string(token)
        elif ord(ch) < 0x20:
            raise self._error("Control character in string")
        else:
            token.chars.append(ch)

    @staticmethod
    def _flush_surrogate(token: _Token) -> None:
        if token.high is not None:
            token.chars.append(_REPLACEMENT)
            token.high = None

    def _code_point(self, token: _Token, code: int) -> None:
        if 0xDC00 <= code <= 0xDFFF and token.high is not None:
            token.chars.append(chr(0x10000 + ((token.high - 0xD800) << 10) + (code - 0xDC00)))
            token.high = None
            return
        self._flush_surrogate(token)
        if 0xD800 <= code <= 0xDBFF:
            token.high = code
        elif 0xDC00 <= code <= 0xDFFF:
            token.chars.append(_REPLACEMENT)
        else:
            token.chars.append(chr(code))

    def _finish_string(self, token: _Token) -> None:
        text = "".join(token.chars)
        if token.path is None:
            frame = self._stack[-1]
            frame.key = text
            frame.state = _State.COLON
            self._token = None
        else:
            self._complete_token(text)

    def _finish_number(self, token: _Token) -> None:
        text = "".join(token.chars)
        if not _NUMBER.fullmatch(text):
            raise self._error(f"Invalid number {text!r}")
        self._complete_token(_to_number(text))

    def _literal_char(self, token: _Token, ch: str) -> None:
        candidate = "".join(token.chars) + ch
        if candidate in _LITERALS:
            self._complete_token(_LITERALS[candidate])
        elif any(word.startswith(candidate) for word in _LITERALS):
            token.chars.append(ch)
        else:
            raise self._error(f"Invalid literal {candidate!r}")


def _to_number(text: str) -> int | float:
    if any(c in text for c in ".eE"):
        return float(text)
    return int(text)


def _place(root: Any, path: Path, value: Any) -> None:
    container = root
    for segment in path[:-1]:
        container = container[segment]
    last = path[-1]
    if isinstance(container, list):
        container.append(value)
    else:
        container[last] = value


__all__ = ["PartialJSONParser", "PartialDocument"]

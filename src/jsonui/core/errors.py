"""Engine error taxonomy."""


class JsonUIError(Exception):
    """Base class for engine errors."""

    pass


class InvalidPathError(JsonUIError, ValueError):
    """Path string is syntactically malformed."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Invalid path {path!r}: {reason}")
        self.path = path
        self.reason = reason


class StreamError(JsonUIError):
    """Streaming session failed."""

    pass


class StreamParseError(StreamError):
    """Fragment could not be parsed as part of a JSON document."""

    def __init__(self, message: str, position: int | None = None) -> None:
        if position is not None:
            message = f"{message} (at char {position})"
        super().__init__(message)
        self.position = position


class StreamSourceError(StreamError):
    """Fragment source raised while being read."""

    def __init__(self, message: str, original: BaseException | None = None) -> None:
        super().__init__(message)
        self.original = original


class UnknownActionError(JsonUIError, KeyError):
    """Action name has no registered handler."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"No handler registered for action: {self.name}"


class TreeError(JsonUIError):
    """Tree operation failed."""

    pass


class PatchError(TreeError):
    """Patch targets an element that does not exist."""

    pass


class TreeFrozenError(TreeError):
    """Tree no longer accepts patches."""

    pass


class TreeDiffError(TreeError):
    """Transition between two trees cannot be expressed as patches."""

    pass


__all__ = [
    "JsonUIError",
    "InvalidPathError",
    "StreamError",
    "StreamParseError",
    "StreamSourceError",
    "UnknownActionError",
    "TreeError",
    "PatchError",
    "TreeFrozenError",
    "TreeDiffError",
]

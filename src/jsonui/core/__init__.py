"""Core utilities and infrastructure."""

from .config import Settings, get_settings
from .errors import (
    JsonUIError,
    InvalidPathError,
    StreamError,
    StreamParseError,
    StreamSourceError,
    UnknownActionError,
    TreeError,
    PatchError,
    TreeFrozenError,
    TreeDiffError,
)
from .logging_config import configure_logging, get_logger, LogContext
from .json import extract_json, safe_json_dumps, JSONParseError
from .hash import hash_fields
from .cache import LRUCache
from .id import SessionID, GenerationID, new_session_id, new_generation_id


def create_container(**kwargs):
    """Create dependency injection container (lazy import to avoid circular deps)."""
    from .container import create_container as _create_container

    return _create_container(**kwargs)


__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Errors
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
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
    # JSON
    "extract_json",
    "safe_json_dumps",
    "JSONParseError",
    # Hashing
    "hash_fields",
    # Caching
    "LRUCache",
    # IDs
    "SessionID",
    "GenerationID",
    "new_session_id",
    "new_generation_id",
    # DI
    "create_container",
]

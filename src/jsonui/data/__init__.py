"""
Data Model
Path-addressable data, bindings and the session DataStore.
"""

from .path import ABSENT, parse_path, join_path, is_prefix, get, get_in, set
from .binding import ItemScope, is_binding, resolve_path, resolve_value
from .store import DataStore

__all__ = [
    "ABSENT",
    "parse_path",
    "join_path",
    "is_prefix",
    "get",
    "get_in",
    "set",
    "ItemScope",
    "is_binding",
    "resolve_path",
    "resolve_value",
    "DataStore",
]

"""Incremental tree construction from streamed JSON."""

from .parser import PartialDocument, PartialJSONParser
from .builder import Fragment, StreamingTreeBuilder, StreamState, StreamUpdate

__all__ = [
    "PartialDocument",
    "PartialJSONParser",
    "Fragment",
    "StreamingTreeBuilder",
    "StreamState",
    "StreamUpdate",
]

"""ID Generation.

ULID-based identifiers for sessions and generations. Prefixes make logs readable
(`sess_01J...`, `gen_01J...`); ULIDs keep them k-sortable.
"""

from typing import NewType
from ulid import ULID

SessionID = NewType("SessionID", str)
"""Isolated engine session identifier"""

GenerationID = NewType("GenerationID", str)
"""Single streaming generation identifier"""


class Prefix:
    """ID prefix constants."""

    SESSION = "sess"
    GENERATION = "gen"


def _generate_with_prefix(prefix: str) -> str:
    return f"{prefix}_{ULID()}"


def new_session_id() -> SessionID:
    """Generate new session ID."""
    return SessionID(_generate_with_prefix(Prefix.SESSION))


def new_generation_id() -> GenerationID:
    """Generate new generation ID."""
    return GenerationID(_generate_with_prefix(Prefix.GENERATION))


__all__ = [
    "SessionID",
    "GenerationID",
    "Prefix",
    "new_session_id",
    "new_generation_id",
]

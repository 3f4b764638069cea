"""DataStore - owned data model with path subscriptions."""

import copy
import itertools
from typing import Any, Callable, Mapping

from ..core import get_logger
from . import path as paths
from .binding import ItemScope, resolve_path, resolve_value

logger = get_logger(__name__)

Listener = Callable[[str, Any], None]


class DataStore:
    """
    Single owned data model for one session.

    Writes are synchronous: every subscriber whose path is an ancestor of,
    equal to, or a descendant of the written path is called before `set`
    returns, in subscription order. A listener that raises is logged and
    does not stop the others.
    """

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._model: Any = copy.deepcopy(dict(initial)) if initial is not None else {}
        self._listeners: dict[int, tuple[tuple[str, ...], Listener]] = {}
        self._ids = itertools.count()

    @property
    def model(self) -> Any:
        """Live model (read-only by convention; use `set` to mutate)."""
        return self._model

    def get(self, path: str, default: Any = paths.ABSENT) -> Any:
        """Value at `path`, or `default` (ABSENT) if missing."""
        return paths.get(self._model, path, default)

    def set(self, path: str, value: Any) -> None:
        """Write `value` at `path` and notify dependents."""
        self._model = paths.set(self._model, path, value)
        logger.debug("data_set", path=path)
        self._notify(path, value)

    def update(self, updates: Mapping[str, Any]) -> None:
        """Apply several writes in order."""
        for key, value in updates.items():
            self.set(key, value)

    def subscribe(self, path: str, callback: Listener) -> Callable[[], None]:
        """
        Call `callback(written_path, value)` whenever a related path is written.

        Returns:
            Unsubscribe handle (idempotent)
        """
        segments = tuple(str(segment) for segment in paths.parse_path(path))
        token = next(self._ids)
        self._listeners[token] = (segments, callback)

        def unsubscribe() -> None:
            self._listeners.pop(token, None)

        return unsubscribe

    def snapshot(self) -> Any:
        """Deep copy of the current model."""
        return copy.deepcopy(self._model)

    def resolve(self, value: Any, scope: ItemScope | None = None) -> Any:
        """Resolve bindings inside a prop value against the current model."""
        return resolve_value(self._model, value, scope)

    def resolve_path(self, path: str, scope: ItemScope | None = None) -> Any:
        """Resolve a single binding path (ABSENT if missing)."""
        return resolve_path(self._model, path, scope)

    def _notify(self, path: str, value: Any) -> None:
        written = tuple(str(segment) for segment in paths.parse_path(path))
        for segments, callback in list(self._listeners.values()):
            shared = min(len(segments), len(written))
            if segments[:shared] != written[:shared]:
                continue
            try:
                callback(path, value)
            except Exception as e:
                logger.error("listener_failed", path=path, error=str(e), exc_info=True)


__all__ = ["DataStore", "Listener"]

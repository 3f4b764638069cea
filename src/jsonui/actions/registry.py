"""
Action Registry
Lookup table from action name to the embedding application's handler
"""

from typing import Any, Callable, Mapping

from ..core import get_logger

logger = get_logger(__name__)

Handler = Callable[[dict[str, Any]], Any]


class ActionRegistry:
    """
    Named handler registry. Handlers take the resolved params dict and may be
    sync or async. The engine ships no handlers of its own.
    """

    def __init__(self, handlers: Mapping[str, Handler] | None = None) -> None:
        self.handlers: dict[str, Handler] = {}
        for name, handler in (handlers or {}).items():
            self.register(name, handler)

    def register(self, name: str, handler: Handler) -> None:
        """
        Register a handler.

        Args:
            name: Action name
            handler: Callable receiving the params dict
        """
        if name in self.handlers:
            logger.warning("action_replaced", action=name)
        self.handlers[name] = handler
        logger.debug("action_registered", action=name)

    def unregister(self, name: str) -> None:
        """Remove a handler if present."""
        if self.handlers.pop(name, None) is not None:
            logger.debug("action_unregistered", action=name)

    def get(self, name: str) -> Handler | None:
        return self.handlers.get(name)

    def has(self, name: str) -> bool:
        return name in self.handlers

    def list_all(self) -> list[str]:
        """Registered action names, sorted."""
        return sorted(self.handlers)

    def __contains__(self, name: str) -> bool:
        return name in self.handlers

    def __len__(self) -> int:
        return len(self.handlers)

"""
Action Dispatcher
Resolves, confirms and invokes named actions against the session data model
"""

import inspect
from collections import Counter
from typing import Any, Awaitable, Callable, Mapping

from ..core import UnknownActionError, get_logger
from ..data import DataStore
from ..monitoring import metrics_collector
from .models import Action, ConfirmSpec
from .registry import ActionRegistry, Handler

logger = get_logger(__name__)

ConfirmHook = Callable[[ConfirmSpec, Action], bool | Awaitable[bool]]


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class ActionDispatcher:
    """
    Dispatches declarative actions to registered handlers.

    Params are resolved against the store at dispatch time. Follow-up
    effects (`onSuccess` / `onError`) may write to the store with
    `{"set": {path: value}}` and chain another action with `{"action": ...}`.
    Without a confirm hook, confirmation is treated as accepted.
    """

    def __init__(
        self,
        registry: ActionRegistry | Mapping[str, Handler] | None = None,
        store: DataStore | None = None,
        confirm: ConfirmHook | None = None,
    ) -> None:
        if not isinstance(registry, ActionRegistry):
            registry = ActionRegistry(registry)
        self.registry = registry
        self.store = store
        self.confirm = confirm
        self._pending: Counter[str] = Counter()

    def is_pending(self, name: str) -> bool:
        """True while at least one dispatch of `name` is in flight."""
        return self._pending[name] > 0

    async def dispatch(self, action: Action | str | dict[str, Any]) -> Any:
        """
        Run an action.

        Returns:
            Handler result, or None when declined or recovered via onError

        Raises:
            UnknownActionError: No handler registered for the name
        """
        action = Action.coerce(action)
        handler = self.registry.get(action.name)
        if handler is None:
            metrics_collector.record_action("unknown")
            raise UnknownActionError(action.name)

        params = self._resolve(action.params)

        if action.confirm is not None and not await self._confirmed(action):
            logger.info("action_declined", action=action.name)
            metrics_collector.record_action("declined")
            return None

        self._pending[action.name] += 1
        try:
            result = await _maybe_await(handler(params))
        except Exception as e:
            if action.on_error is None:
                metrics_collector.record_action("error")
                raise
            logger.warning("action_failed", action=action.name, error=str(e))
            metrics_collector.record_action("recovered")
            await self._apply_effects(action.on_error)
            return None
        finally:
            self._pending[action.name] -= 1

        logger.info("action_dispatched", action=action.name)
        metrics_collector.record_action("success")
        if action.on_success is not None:
            await self._apply_effects(action.on_success)
        return result

    async def _confirmed(self, action: Action) -> bool:
        if self.confirm is None:
            return True
        return bool(await _maybe_await(self.confirm(action.confirm, action)))

    def _resolve(self, params: dict[str, Any]) -> dict[str, Any]:
        if self.store is None:
            return dict(params)
        return self.store.resolve(params)

    async def _apply_effects(self, effects: dict[str, Any]) -> None:
        writes = effects.get("set")
        if writes:
            if self.store is None:
                logger.warning("effect_without_store", paths=list(writes))
            else:
                self.store.update(self._resolve(writes))
        chained = effects.get("action")
        if chained is not None:
            await self.dispatch(chained)


__all__ = ["ActionDispatcher", "ConfirmHook"]

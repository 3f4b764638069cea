"""Validation Engine - per-path check pipelines with trigger policies."""

from typing import Any, Callable, Iterable, Mapping

from ..core import get_logger
from ..data import DataStore
from ..data.path import ABSENT, parse_path
from ..monitoring import metrics_collector
from .models import FieldConfig, FieldState, FieldStatus, ValidateOn, ValidationRule

logger = get_logger(__name__)

Check = Callable[[Any, Mapping[str, Any]], bool]


class ValidationEngine:
    """
    Runs named checks from an injected catalog against DataStore values.

    Errors are advisory: nothing here ever blocks a write. Fields with an
    on-change policy re-validate automatically on writes to their path.
    """

    def __init__(self, store: DataStore, checks: Mapping[str, Check] | None = None) -> None:
        self.store = store
        self.checks: dict[str, Check] = dict(checks or {})
        self._configs: dict[str, FieldConfig] = {}
        self._states: dict[str, FieldState] = {}
        self._unsubscribers: dict[str, Callable[[], None]] = {}

    def configure(
        self,
        path: str,
        rules: Iterable[ValidationRule | Mapping[str, Any]] = (),
        validate_on: ValidateOn | str = ValidateOn.BLUR,
    ) -> FieldConfig:
        """
        Set the rule pipeline and trigger policy for `path`.

        Raises:
            InvalidPathError: If `path` is malformed
        """
        parse_path(path)
        config = FieldConfig(
            rules=tuple(
                rule if isinstance(rule, ValidationRule) else ValidationRule.model_validate(rule)
                for rule in rules
            ),
            validate_on=ValidateOn(validate_on),
        )
        self._configs[path] = config

        if unsubscribe := self._unsubscribers.pop(path, None):
            unsubscribe()
        if config.validate_on is ValidateOn.CHANGE:
            self._unsubscribers[path] = self.store.subscribe(
                path, lambda _written, _value: self.validate(path)
            )
        return config

    def configure_from_props(
        self, path: str, props: Mapping[str, Any], default: ValidateOn | str = ValidateOn.BLUR
    ) -> FieldConfig:
        """Configure from element props shaped like `{checks: [{fn, message}], validateOn}`."""
        return self.configure(
            path,
            props.get("checks") or (),
            props.get("validateOn") or props.get("validate_on") or default,
        )

    def register_check(self, name: str, check: Check) -> None:
        """Add or replace a named predicate."""
        self.checks[name] = check

    def touch(self, path: str) -> FieldState:
        """Mark `path` as touched without evaluating."""
        state = self._state(path)
        state.touched = True
        return state.model_copy(deep=True)

    def validate(self, path: str) -> list[str]:
        """
        Run every rule for `path` in declaration order.

        Returns:
            Every failing message (no short-circuit). A check that raises
            counts as failing.
        """
        config = self._configs.get(path, FieldConfig())
        value = self.store.get(path)
        if value is ABSENT:
            value = None

        errors: list[str] = []
        for rule in config.rules:
            check = self.checks.get(rule.check)
            if check is None:
                logger.warning("unknown_check", check=rule.check, path=path)
                continue
            try:
                passed = check(value, rule.args)
            except Exception as e:
                logger.warning("check_failed", check=rule.check, path=path, error=str(e), exc_info=True)
                passed = False
            if not passed:
                errors.append(rule.message)

        state = self._state(path)
        state.errors = errors
        state.validated = True
        metrics_collector.record_validation("invalid" if errors else "valid")
        return list(errors)

    def handle_event(self, path: str, event: ValidateOn | str) -> list[str] | None:
        """
        React to an input event.

        Blur touches the field. The field validates when the event matches
        its policy; returns the errors then, otherwise None.
        """
        event = ValidateOn(event)
        if event is ValidateOn.BLUR:
            self.touch(path)
        config = self._configs.get(path)
        if config is None or config.validate_on is not event:
            return None
        return self.validate(path)

    def submit(self) -> bool:
        """Touch and validate every configured field. True when all pass."""
        valid = True
        for path in self._configs:
            self.touch(path)
            if self.validate(path):
                valid = False
        return valid

    def state(self, path: str) -> FieldState:
        """Copy of the field state (a fresh UNTOUCHED state if never seen)."""
        state = self._states.get(path)
        return state.model_copy(deep=True) if state else FieldState()

    def status(self, path: str) -> FieldStatus:
        return self.state(path).status

    def errors(self, path: str) -> list[str]:
        return self.state(path).errors

    @property
    def is_valid(self) -> bool:
        """True when no validated field currently has errors."""
        return not any(state.errors for state in self._states.values())

    def reset(self, path: str | None = None) -> None:
        """Clear state for one path, or for every path."""
        if path is None:
            self._states.clear()
        else:
            self._states.pop(path, None)

    def close(self) -> None:
        """Drop DataStore subscriptions."""
        for unsubscribe in self._unsubscribers.values():
            unsubscribe()
        self._unsubscribers.clear()

    def _state(self, path: str) -> FieldState:
        return self._states.setdefault(path, FieldState())


__all__ = ["Check", "ValidationEngine"]

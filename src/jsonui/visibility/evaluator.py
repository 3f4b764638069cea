"""Visibility Evaluator - boolean conditions over the data model."""

from dataclasses import dataclass
import operator
from typing import Any, Callable

from ..core import InvalidPathError, get_logger
from ..data import DataStore
from ..data.binding import ItemScope, is_binding, resolve_path
from ..data.path import ABSENT

logger = get_logger(__name__)

_COMPARISONS: dict[str, Callable[[Any, Any], bool]] = {
    "eq": operator.eq,
    "neq": operator.ne,
    "gt": operator.gt,
    "gte": operator.ge,
    "lt": operator.lt,
    "lte": operator.le,
}


@dataclass(frozen=True)
class AuthState:
    """Auth facts visible to `{"auth": ...}` conditions."""

    signed_in: bool = False


class VisibilityEvaluator:
    """
    Evaluates visibility conditions.

    Supported forms: None/True/False, `{"path": p}`, `{"auth": "signedIn"|"signedOut"}`,
    `{"and": [...]}`, `{"or": [...]}`, `{"not": c}` and the comparisons
    eq/neq/gt/gte/lt/lte over two operands (literals or bindings).

    Pure and uncached; malformed conditions evaluate to False.
    """

    def __init__(self, auth: AuthState | None = None) -> None:
        self.auth = auth or AuthState()

    def evaluate(
        self,
        condition: Any,
        model: Any,
        scope: ItemScope | None = None,
    ) -> bool:
        if isinstance(model, DataStore):
            model = model.model
        try:
            return self._eval(condition, model, scope)
        except _Malformed as e:
            logger.warning("malformed_condition", reason=str(e))
            return False

    def _eval(self, condition: Any, model: Any, scope: ItemScope | None) -> bool:
        if condition is None:
            return True
        if isinstance(condition, bool):
            return condition
        if not isinstance(condition, dict) or len(condition) != 1:
            raise _Malformed(f"expected a single-operator object, got {condition!r}")

        (op, arg), = condition.items()
        match op:
            case "path":
                if not isinstance(arg, str):
                    raise _Malformed("path must be a string")
                return bool(self._operand({"path": arg}, model, scope))
            case "auth":
                if arg == "signedIn":
                    return self.auth.signed_in
                if arg == "signedOut":
                    return not self.auth.signed_in
                raise _Malformed(f"unknown auth state {arg!r}")
            case "and":
                return all(self._eval(item, model, scope) for item in self._list(op, arg))
            case "or":
                return any(self._eval(item, model, scope) for item in self._list(op, arg))
            case "not":
                return not self._eval(arg, model, scope)
            case _ if op in _COMPARISONS:
                operands = self._list(op, arg)
                if len(operands) != 2:
                    raise _Malformed(f"{op} takes two operands")
                left, right = (self._operand(item, model, scope) for item in operands)
                if op not in ("eq", "neq") and (left is None or right is None):
                    return False
                try:
                    return bool(_COMPARISONS[op](left, right))
                except TypeError as e:
                    raise _Malformed(f"cannot compare {left!r} and {right!r}") from e
            case _:
                raise _Malformed(f"unknown operator {op!r}")

    @staticmethod
    def _list(op: str, arg: Any) -> list:
        if not isinstance(arg, list):
            raise _Malformed(f"{op} expects a list")
        return arg

    @staticmethod
    def _operand(value: Any, model: Any, scope: ItemScope | None) -> Any:
        if is_binding(value):
            try:
                resolved = resolve_path(model, value["path"], scope)
            except InvalidPathError as e:
                raise _Malformed(str(e)) from e
            return None if resolved is ABSENT else resolved
        return value


class _Malformed(Exception):
    pass


def is_visible(
    condition: Any, model: Any, scope: ItemScope | None = None, auth: AuthState | None = None
) -> bool:
    """Convenience wrapper around `VisibilityEvaluator.evaluate`."""
    return VisibilityEvaluator(auth).evaluate(condition, model, scope)


__all__ = ["AuthState", "VisibilityEvaluator", "is_visible"]

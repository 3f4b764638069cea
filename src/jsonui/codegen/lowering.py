"""
JSX Lowering
Translates a Tree into JSX source for the exported page.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Collection

from ..core import InvalidPathError, get_logger, safe_json_dumps
from ..data.binding import INDEX, ITEM, is_binding
from ..data.path import parse_path
from ..tree import Element, Tree

logger = get_logger(__name__)

PASSTHROUGH = "Passthrough"
INDENT = "  "

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_RESERVED_PROPS = frozenset({"key", "ref", "children"})
_COMPARISONS = {"eq": "===", "neq": "!==", "gt": ">", "gte": ">=", "lt": "<", "lte": "<="}


class _Malformed(Exception):
    pass


def _literal(value: Any) -> str:
    return safe_json_dumps(value)


@dataclass
class Lowered:
    """JSX body plus what it references."""

    body: str
    components: set[str] = field(default_factory=set)
    passthrough: bool = False
    actions: set[str] = field(default_factory=set)


class JSXLowering:
    """
    One-shot lowering of a tree to JSX.

    Item scopes are tracked as a stack; depth N binds `itemN`/`indexN`.
    Dangling and cyclic child references are skipped.
    """

    def __init__(self, tree: Tree, components: Collection[str]) -> None:
        self.tree = tree
        self.known = frozenset(components)
        self.result = Lowered(body="")

    def lower(self, base_indent: int = 0) -> Lowered:
        lines: list[str] = []
        root = self.tree.root
        if root is not None:
            lines = self._element(root, base_indent, 0, ())
        self.result.body = "\n".join(lines) if lines else INDENT * base_indent + "{null}"
        return self.result

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def binding(self, path: str, depth: int) -> str:
        """Expression reading `path` at scope depth `depth` (0 = no item scope)."""
        try:
            segments = parse_path(path)
        except InvalidPathError:
            logger.warning("binding_lowered_undefined", path=path)
            return "undefined"

        if segments and segments[0] == INDEX:
            return f"index{depth - 1}" if depth else "undefined"
        if segments and segments[0] == ITEM:
            if not depth:
                return "undefined"
            target, segments = f"item{depth - 1}", segments[1:]
        else:
            target = "data"
        if not segments:
            return target
        return f"getIn({target}, {_literal(list(segments))})"

    def value(self, value: Any, depth: int) -> str:
        if is_binding(value):
            return self.binding(value["path"], depth)
        if isinstance(value, dict):
            entries = ", ".join(f"{_literal(k)}: {self.value(v, depth)}" for k, v in value.items())
            return "{" + entries + "}"
        if isinstance(value, list):
            return "[" + ", ".join(self.value(v, depth) for v in value) + "]"
        return _literal(value)

    def condition(self, condition: Any, depth: int) -> str:
        """JS boolean expression; malformed conditions lower to `false`."""
        try:
            return self._condition(condition, depth)
        except _Malformed as e:
            logger.warning("malformed_condition", reason=str(e))
            return "false"

    def _condition(self, condition: Any, depth: int) -> str:
        if condition is None or condition is True:
            return "true"
        if condition is False:
            return "false"
        if not isinstance(condition, dict) or len(condition) != 1:
            raise _Malformed(f"expected a single-operator object, got {condition!r}")

        (op, arg), = condition.items()
        match op:
            case "path":
                if not isinstance(arg, str):
                    raise _Malformed("path must be a string")
                return f"truthy({self._operand({'path': arg}, depth)})"
            case "auth":
                if arg == "signedIn":
                    return "auth.signedIn"
                if arg == "signedOut":
                    return "!auth.signedIn"
                raise _Malformed(f"unknown auth state {arg!r}")
            case "and" | "or":
                if not isinstance(arg, list):
                    raise _Malformed(f"{op} expects a list")
                if not arg:
                    return "true" if op == "and" else "false"
                joiner = " && " if op == "and" else " || "
                return "(" + joiner.join(self._condition(item, depth) for item in arg) + ")"
            case "not":
                return f"!{self._condition(arg, depth)}"
            case _ if op in _COMPARISONS:
                if not isinstance(arg, list) or len(arg) != 2:
                    raise _Malformed(f"{op} takes two operands")
                left, right = (self._operand(item, depth) for item in arg)
                return f"compare({left}, {_literal(_COMPARISONS[op])}, {right})"
            case _:
                raise _Malformed(f"unknown operator {op!r}")

    def _operand(self, value: Any, depth: int) -> str:
        if is_binding(value):
            expression = self.binding(value["path"], depth)
            if expression == "undefined":
                raise _Malformed(f"invalid path {value['path']!r}")
            return expression
        return self.value(value, depth)

    # ------------------------------------------------------------------
    # Elements
    # ------------------------------------------------------------------

    def _element(self, element_id: str, indent: int, depth: int, ancestors: tuple[str, ...]) -> list[str]:
        element = self.tree.elements.get(element_id)
        if element is None or element_id in ancestors:
            logger.debug("child_skipped", id=element_id, reason="cyclic" if element else "dangling")
            return []
        ancestors = ancestors + (element_id,)
        self._collect_actions(element)

        if element.visible is not None:
            pad = INDENT * indent
            inner = self._tag(element, indent + 1, depth, ancestors)
            return [f"{pad}{{{self.condition(element.visible, depth)} && (", *inner, f"{pad})}}"]
        return self._tag(element, indent, depth, ancestors)

    def _tag(self, element: Element, indent: int, depth: int, ancestors: tuple[str, ...]) -> list[str]:
        pad = INDENT * indent
        if element.type in self.known:
            name = element.type
            self.result.components.add(name)
            attributes = self._attributes(element.props, depth)
        else:
            name = PASSTHROUGH
            self.result.passthrough = True
            attributes = f" type={_literal(element.type)} props={{{self.value(element.props, depth)}}}"

        children = self._children(element, indent + 1, depth, ancestors)
        if not children:
            return [f"{pad}<{name}{attributes} />"]
        return [f"{pad}<{name}{attributes}>", *children, f"{pad}</{name}>"]

    def _attributes(self, props: dict[str, Any], depth: int) -> str:
        parts: list[str] = []
        spread: dict[str, Any] = {}
        for key, value in props.items():
            if _IDENTIFIER.match(key) and key not in _RESERVED_PROPS:
                parts.append(f"{key}={{{self.value(value, depth)}}}")
            else:
                spread[key] = value
        if spread:
            parts.append(f"{{...{self.value(spread, depth)}}}")
        return "".join(f" {part}" for part in parts)

    def _children(self, element: Element, indent: int, depth: int, ancestors: tuple[str, ...]) -> list[str]:
        if element.repeat is None:
            lines: list[str] = []
            for child in element.children:
                lines.extend(self._element(child, indent, depth, ancestors))
            return lines

        pad = INDENT * indent
        items = self.binding(element.repeat.path, depth)
        item, index = f"item{depth}", f"index{depth}"
        if element.repeat.key:
            key = f"String({self.binding(ITEM + '.' + element.repeat.key, depth + 1)} ?? {index})"
        else:
            key = index

        body: list[str] = []
        for child in element.children:
            body.extend(self._element(child, indent + 2, depth + 1, ancestors))
        return [
            f"{pad}{{asArray({items}).map(({item}, {index}) => (",
            f"{pad}{INDENT}<Fragment key={{{key}}}>",
            *body,
            f"{pad}{INDENT}</Fragment>",
            f"{pad}))}}",
        ]

    def _collect_actions(self, element: Element) -> None:
        for key, value in element.props.items():
            if key != "action" and not key.startswith("on"):
                continue
            if isinstance(value, str) and key == "action":
                self.result.actions.add(value)
            elif isinstance(value, dict) and isinstance(value.get("name"), str):
                self.result.actions.add(value["name"])


def lower_tree(tree: Tree, components: Collection[str], base_indent: int = 0) -> Lowered:
    """Lower `tree` to JSX, recording used components and action names."""
    return JSXLowering(tree, components).lower(base_indent)


__all__ = ["Lowered", "JSXLowering", "lower_tree", "PASSTHROUGH"]

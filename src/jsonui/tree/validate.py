"""Structural validation of element trees (Result pattern)."""

from dataclasses import dataclass

from returns.result import Failure, Result, Success

from .models import Tree


@dataclass(frozen=True)
class TreeIssue:
    """Structural problem found in a tree."""

    message: str
    element_id: str | None = None


def validate_tree(tree: Tree) -> Result[None, TreeIssue]:
    """
    Check the root reference, dangling children and cycles.

    Args:
        tree: Tree to check

    Returns:
        Success(None), or Failure with the first issue found
    """
    if tree.root is not None and tree.root not in tree.elements:
        return Failure(TreeIssue(f"Root references missing element: {tree.root}", tree.root))

    for element in tree.elements.values():
        for child in element.children:
            if child not in tree.elements:
                return Failure(TreeIssue(f"Element {element.id} has missing child: {child}", element.id))

    # Iterative DFS with colouring: 1 = on stack, 2 = done
    state: dict[str, int] = {}
    for start in tree.elements:
        if start in state:
            continue
        stack = [(start, iter(tree.elements[start].children))]
        state[start] = 1
        while stack:
            node, children = stack[-1]
            child = next(children, None)
            if child is None:
                state[node] = 2
                stack.pop()
            elif state.get(child) == 1:
                return Failure(TreeIssue(f"Cycle through element: {child}", child))
            elif child not in state:
                state[child] = 1
                stack.append((child, iter(tree.elements[child].children)))

    return Success(None)


__all__ = ["TreeIssue", "validate_tree"]

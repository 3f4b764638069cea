"""Tree diffing - minimal growth patches between two trees."""

from typing import Any

from ..core import TreeDiffError
from .models import (
    AppendText,
    Element,
    InsertElement,
    Patch,
    SetChildren,
    SetRoot,
    Tree,
    UpdateAttributes,
    UpdateProps,
)


def diff(old: Tree, new: Tree) -> list[Patch]:
    """
    Patches that turn `old` into `new`.

    Only growth is expressible: elements may be added and props, attributes,
    children and root may change, but nothing may be removed. Every patch is
    applied to a working copy as it is produced, so
    `old.clone().apply_patches(diff(old, new))` always yields `new`.

    Raises:
        TreeDiffError: An element or prop was removed, or a type changed
    """
    removed = old.elements.keys() - new.elements.keys()
    if removed:
        raise TreeDiffError(f"Elements removed: {sorted(removed)}")
    if old.root is not None and new.root is None:
        raise TreeDiffError("Root removed")

    work = old.clone()
    patches: list[Patch] = []

    def emit(patch: Patch) -> None:
        work.apply_patch(patch)
        patches.append(patch)

    if new.root != work.root:
        emit(SetRoot(id=new.root))

    parents: dict[str, str] = {}
    for element in new.elements.values():
        for child in element.children:
            parents.setdefault(child, element.id)

    for element_id, element in new.elements.items():
        current = work.elements.get(element_id)
        if current is None:
            emit(_insert(work, element, parents.get(element_id), new))
            continue
        if current.type != element.type:
            raise TreeDiffError(f"Type of {element_id} changed: {current.type} -> {element.type}")
        for patch in _prop_patches(current, element):
            emit(patch)
        attrs = _changed_attributes(current, element)
        if attrs:
            emit(UpdateAttributes(id=element_id, attrs=attrs))

    for element_id, element in new.elements.items():
        if work.elements[element_id].children != element.children:
            emit(SetChildren(id=element_id, children=list(element.children)))

    return patches


def _insert(work: Tree, element: Element, parent_id: str | None, new: Tree) -> InsertElement:
    parent = work.elements.get(parent_id) if parent_id is not None else None
    if parent is None or element.id in parent.children:
        return InsertElement(element=element.model_copy(deep=True))
    # Position among siblings already placed in the working copy
    siblings = new.elements[parent_id].children
    placed = set(parent.children)
    index = sum(1 for sibling in siblings[: siblings.index(element.id)] if sibling in placed)
    return InsertElement(element=element.model_copy(deep=True), parent_id=parent_id, index=index)


def _prop_patches(current: Element, element: Element) -> list[Patch]:
    dropped = current.props.keys() - element.props.keys()
    if dropped:
        raise TreeDiffError(f"Props removed from {element.id}: {sorted(dropped)}")

    patches: list[Patch] = []
    updates: dict[str, Any] = {}
    for key, value in element.props.items():
        if key not in current.props:
            updates[key] = value
            continue
        before = current.props[key]
        if before == value:
            continue
        if isinstance(before, str) and isinstance(value, str) and value.startswith(before):
            patches.append(AppendText(id=element.id, key=key, suffix=value[len(before):]))
        else:
            updates[key] = value
    if updates:
        patches.append(UpdateProps(id=element.id, props=updates))
    return patches


def _changed_attributes(current: Element, element: Element) -> dict[str, Any]:
    attrs: dict[str, Any] = {}
    if current.visible != element.visible:
        attrs["visible"] = element.visible
    if current.repeat != element.repeat:
        attrs["repeat"] = element.repeat.model_dump() if element.repeat is not None else None
    return attrs


__all__ = ["diff"]

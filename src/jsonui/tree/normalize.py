"""
Document Normalizer
Converts (possibly partial) tree documents into flattened Trees
"""

from typing import Any

from ..core import get_logger
from ..core.json import extract_json
from .models import Element, RepeatSpec, Tree

logger = get_logger(__name__)

Path = tuple[str | int, ...]

LIST_TYPE = "List"


class _Flattener:
    """
    Single-use flattener.

    `open_paths` and `partial_path` describe which parts of the document are
    still being received; with both empty the document is treated as complete.
    """

    def __init__(self, open_paths: frozenset[Path], partial_path: Path | None) -> None:
        self.open_paths = open_paths
        self.partial_path = partial_path
        self.elements: dict[str, Element] = {}

    def _partial(self, path: Path) -> bool:
        return self.partial_path == path

    def _settled(self, path: Path) -> bool:
        if path in self.open_paths:
            return False
        if self.partial_path is not None and self.partial_path[: len(path)] == path:
            return False
        return True

    def flatten(self, document: Any) -> Tree:
        if not isinstance(document, dict):
            return Tree()

        elements = document.get("elements")
        if isinstance(elements, dict):
            for key, raw in elements.items():
                self._add(key, raw, ("elements", key))

        root_id = None
        root = document.get("root")
        if isinstance(root, str):
            if root and not self._partial(("root",)):
                root_id = root
        elif isinstance(root, dict):
            candidate = self._nested_id(root, ("root",), "root")
            if candidate is not None and self._add(candidate, root, ("root",)):
                root_id = candidate

        return Tree(root=root_id, elements=self.elements)

    def _nested_id(self, raw: Any, path: Path, default: str) -> str | None:
        """
        Id of a nested element object.

        An explicit `id` wins as soon as it is complete. `key` and the
        positional default apply only once the object closes, since an `id`
        may still follow them.
        """
        if not isinstance(raw, dict):
            return None
        explicit = raw.get("id")
        if isinstance(explicit, str) and explicit:
            return None if self._partial(path + ("id",)) else explicit
        if not self._settled(path):
            return None
        key = raw.get("key")
        if isinstance(key, str) and key:
            return key
        return default

    def _add(self, element_id: str, raw: Any, path: Path) -> bool:
        if element_id in self.elements:
            return True
        if not element_id or not isinstance(raw, dict):
            return False
        element_type = raw.get("type")
        if not isinstance(element_type, str) or not element_type or self._partial(path + ("type",)):
            if self._settled(path):
                logger.debug("element_skipped", id=element_id, reason="missing type")
            return False

        props: dict[str, Any] = {}
        raw_props = raw.get("props")
        if isinstance(raw_props, dict):
            for key, value in raw_props.items():
                # Strings stream as prefixes; everything else waits until settled
                if isinstance(value, str) or self._settled(path + ("props", key)):
                    props[key] = value

        element = Element(
            id=element_id,
            type=element_type,
            props=props,
            visible=self._visible(raw, path),
            repeat=self._repeat(raw, path, element_type),
        )
        self.elements[element_id] = element

        raw_children = raw.get("children")
        if isinstance(raw_children, list):
            for index, child in enumerate(raw_children):
                child_path = path + ("children", index)
                if isinstance(child, str):
                    if child and not self._partial(child_path):
                        element.children.append(child)
                elif isinstance(child, dict):
                    child_id = self._nested_id(child, child_path, f"{element_id}-{index}")
                    if child_id is not None and self._add(child_id, child, child_path):
                        element.children.append(child_id)
        return True

    def _visible(self, raw: dict[str, Any], path: Path) -> Any:
        if "visible" in raw and self._settled(path + ("visible",)):
            return raw["visible"]
        return None

    def _repeat(self, raw: dict[str, Any], path: Path, element_type: str) -> RepeatSpec | None:
        spec = raw.get("repeat")
        if isinstance(spec, dict) and self._settled(path + ("repeat",)):
            if isinstance(spec.get("path"), str):
                key = spec.get("key")
                return RepeatSpec(path=spec["path"], key=key if isinstance(key, str) else None)
            return None

        props = raw.get("props")
        if element_type == LIST_TYPE and isinstance(props, dict) and self._settled(path + ("props",)):
            data_path = props.get("dataPath")
            if isinstance(data_path, str):
                key = props.get("itemKey")
                return RepeatSpec(path=data_path, key=key if isinstance(key, str) else None)
        return None


def document_to_tree(
    document: Any,
    open_paths: frozenset[Path] = frozenset(),
    partial_path: Path | None = None,
) -> Tree:
    """
    Flatten a tree document.

    Accepts the flat `{"root": id, "elements": {...}}` shape, nested element
    objects inside `children` or under `root` (missing ids become
    `<parent>-<index>`), and `List` elements whose `dataPath`/`itemKey` props
    are lifted into `repeat`.
    """
    return _Flattener(open_paths, partial_path).flatten(document)


def load_tree(text: str) -> Tree:
    """
    Load a complete tree document from text (markdown fences and minor
    syntax damage tolerated).

    Raises:
        JSONParseError: Text holds no recoverable JSON object
    """
    tree = document_to_tree(extract_json(text, repair=True))
    logger.debug("tree_loaded", elements=len(tree.elements), root=tree.root)
    return tree


__all__ = ["document_to_tree", "load_tree", "LIST_TYPE"]

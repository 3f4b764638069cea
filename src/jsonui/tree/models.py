"""Tree Data Models and patch operations."""

from typing import Annotated, Any, Iterable, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, TypeAdapter, field_validator

from ..core import PatchError, TreeFrozenError

ATTRIBUTES = frozenset({"visible", "repeat"})


class RepeatSpec(BaseModel):
    """Render children once per item of the sequence at `path`."""

    model_config = ConfigDict(frozen=True)

    path: str
    key: str | None = None


class Element(BaseModel):
    """Single UI element in the flattened tree."""

    id: str = Field(..., min_length=1)
    type: str = Field(..., description="Component registry key")
    props: dict[str, Any] = Field(default_factory=dict)
    children: list[str] = Field(default_factory=list)
    visible: Any = None
    repeat: RepeatSpec | None = None


class InsertElement(BaseModel):
    op: Literal["insert"] = "insert"
    element: Element
    parent_id: str | None = None
    index: int | None = None


class UpdateProps(BaseModel):
    """Shallow merge of `props` into the element's props."""

    op: Literal["update"] = "update"
    id: str
    props: dict[str, Any]


class AppendText(BaseModel):
    """Append `suffix` to the string prop `key`."""

    op: Literal["append"] = "append"
    id: str
    key: str
    suffix: str


class SetChildren(BaseModel):
    op: Literal["children"] = "children"
    id: str
    children: list[str]


class UpdateAttributes(BaseModel):
    """Replace `visible` and/or `repeat`."""

    op: Literal["attrs"] = "attrs"
    id: str
    attrs: dict[str, Any]

    @field_validator("attrs")
    @classmethod
    def validate_attrs(cls, v: dict[str, Any]) -> dict[str, Any]:
        unknown = set(v) - ATTRIBUTES
        if unknown:
            raise ValueError(f"Unsupported attributes: {sorted(unknown)}")
        return v


class SetRoot(BaseModel):
    op: Literal["root"] = "root"
    id: str


Patch = Annotated[
    Union[InsertElement, UpdateProps, AppendText, SetChildren, UpdateAttributes, SetRoot],
    Field(discriminator="op"),
]

_patch_adapter: TypeAdapter[Patch] = TypeAdapter(Patch)


def parse_patch(data: dict[str, Any]) -> Patch:
    """Validate a wire-form patch dict."""
    return _patch_adapter.validate_python(data)


class Tree(BaseModel):
    """
    Flattened element tree addressed by id.

    Mutated only through patches. Once frozen, every patch raises
    TreeFrozenError. Equality compares root and elements only.
    """

    root: str | None = None
    elements: dict[str, Element] = Field(default_factory=dict)

    _frozen: bool = PrivateAttr(default=False)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tree):
            return NotImplemented
        return self.root == other.root and self.elements == other.elements

    def __len__(self) -> int:
        return len(self.elements)

    def __contains__(self, element_id: object) -> bool:
        return element_id in self.elements

    def get(self, element_id: str) -> Element | None:
        return self.elements.get(element_id)

    def clone(self) -> "Tree":
        """Unfrozen deep copy."""
        return Tree(
            root=self.root,
            elements={k: v.model_copy(deep=True) for k, v in self.elements.items()},
        )

    def apply_patches(self, patches: Iterable[Patch]) -> None:
        """Apply patches in order."""
        for patch in patches:
            self.apply_patch(patch)

    def apply_patch(self, patch: Patch) -> None:
        """
        Apply a single patch in place.

        Raises:
            TreeFrozenError: Tree is frozen
            PatchError: Patch targets a missing element or is inconsistent
        """
        if self._frozen:
            raise TreeFrozenError(f"Tree is frozen; rejected {patch.op} patch")

        match patch:
            case InsertElement(element=element, parent_id=parent_id, index=index):
                if element.id in self.elements:
                    raise PatchError(f"Element already exists: {element.id}")
                parent = None
                if parent_id is not None:
                    parent = self._require(parent_id)
                self.elements[element.id] = element.model_copy(deep=True)
                if parent is not None and element.id not in parent.children:
                    position = len(parent.children) if index is None else min(index, len(parent.children))
                    parent.children.insert(position, element.id)
            case UpdateProps(id=element_id, props=props):
                target = self._require(element_id)
                target.props = {**target.props, **props}
            case AppendText(id=element_id, key=key, suffix=suffix):
                target = self._require(element_id)
                current = target.props.get(key, "")
                if not isinstance(current, str):
                    raise PatchError(f"Prop {key!r} of {element_id} is not a string")
                target.props = {**target.props, key: current + suffix}
            case SetChildren(id=element_id, children=children):
                self._require(element_id).children = list(children)
            case UpdateAttributes(id=element_id, attrs=attrs):
                target = self._require(element_id)
                if "visible" in attrs:
                    target.visible = attrs["visible"]
                if "repeat" in attrs:
                    repeat = attrs["repeat"]
                    target.repeat = None if repeat is None else RepeatSpec.model_validate(repeat)
            case SetRoot(id=element_id):
                # Root may precede its element while streaming
                self.root = element_id

    def _require(self, element_id: str) -> Element:
        element = self.elements.get(element_id)
        if element is None:
            raise PatchError(f"Unknown element: {element_id}")
        return element


__all__ = [
    "RepeatSpec",
    "Element",
    "InsertElement",
    "UpdateProps",
    "AppendText",
    "SetChildren",
    "UpdateAttributes",
    "SetRoot",
    "Patch",
    "parse_patch",
    "Tree",
]

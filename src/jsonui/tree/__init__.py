"""
Element Trees
Flattened trees, patch operations, diffing and validation.
"""

from .models import (
    RepeatSpec,
    Element,
    InsertElement,
    UpdateProps,
    AppendText,
    SetChildren,
    UpdateAttributes,
    SetRoot,
    Patch,
    parse_patch,
    Tree,
)
from .diff import diff
from .normalize import document_to_tree, load_tree
from .validate import TreeIssue, validate_tree

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
    "diff",
    "document_to_tree",
    "load_tree",
    "TreeIssue",
    "validate_tree",
]

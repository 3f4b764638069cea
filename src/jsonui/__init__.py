"""
jsonui - streaming JSON UI engine.

Builds element trees from streamed JSON, binds them to a data model,
validates fields, evaluates visibility, dispatches actions and exports
standalone Next.js projects.
"""

from .core import (
    Settings,
    get_settings,
    configure_logging,
    create_container,
    JsonUIError,
    InvalidPathError,
    StreamError,
    StreamParseError,
    StreamSourceError,
    UnknownActionError,
    TreeError,
    PatchError,
    TreeFrozenError,
    TreeDiffError,
)
from .data import ABSENT, DataStore, ItemScope
from .tree import Element, RepeatSpec, Tree, diff, load_tree, validate_tree
from .streaming import PartialJSONParser, StreamingTreeBuilder, StreamState, StreamUpdate
from .validation import ValidationEngine, ValidationRule, ValidateOn
from .visibility import AuthState, VisibilityEvaluator
from .actions import Action, ActionDispatcher, ActionRegistry
from .codegen import CodeGenerator, ExportOptions, GeneratedFile, generate_project
from .session import ResolvedElement, Session, SessionFactory

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "create_container",
    "JsonUIError",
    "InvalidPathError",
    "StreamError",
    "StreamParseError",
    "StreamSourceError",
    "UnknownActionError",
    "TreeError",
    "PatchError",
    "TreeFrozenError",
    "TreeDiffError",
    "ABSENT",
    "DataStore",
    "ItemScope",
    "Element",
    "RepeatSpec",
    "Tree",
    "diff",
    "load_tree",
    "validate_tree",
    "PartialJSONParser",
    "StreamingTreeBuilder",
    "StreamState",
    "StreamUpdate",
    "ValidationEngine",
    "ValidationRule",
    "ValidateOn",
    "AuthState",
    "VisibilityEvaluator",
    "Action",
    "ActionDispatcher",
    "ActionRegistry",
    "CodeGenerator",
    "ExportOptions",
    "GeneratedFile",
    "generate_project",
    "ResolvedElement",
    "Session",
    "SessionFactory",
]

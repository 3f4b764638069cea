"""
Code Export
Standalone Next.js project generation from element trees.
"""

from .models import DEFAULT_COMPONENTS, ExportOptions, GeneratedFile
from .lowering import Lowered, JSXLowering, lower_tree, PASSTHROUGH
from .generator import CodeGenerator, generate_project

__all__ = [
    "DEFAULT_COMPONENTS",
    "ExportOptions",
    "GeneratedFile",
    "Lowered",
    "JSXLowering",
    "lower_tree",
    "PASSTHROUGH",
    "CodeGenerator",
    "generate_project",
]

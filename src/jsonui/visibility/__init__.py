"""Element visibility conditions."""

from .evaluator import AuthState, VisibilityEvaluator, is_visible

__all__ = ["AuthState", "VisibilityEvaluator", "is_visible"]

"""Field validation with configurable trigger policies."""

from .models import ValidateOn, FieldStatus, ValidationRule, FieldConfig, FieldState
from .engine import Check, ValidationEngine

__all__ = [
    "ValidateOn",
    "FieldStatus",
    "ValidationRule",
    "FieldConfig",
    "FieldState",
    "Check",
    "ValidationEngine",
]

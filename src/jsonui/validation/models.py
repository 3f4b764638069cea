"""Validation Data Models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ValidateOn(str, Enum):
    """When a field re-validates."""

    CHANGE = "change"
    BLUR = "blur"
    SUBMIT = "submit"


class FieldStatus(str, Enum):
    """Per-path validation state."""

    UNTOUCHED = "untouched"
    TOUCHED = "touched"
    VALID = "valid"
    INVALID = "invalid"


class ValidationRule(BaseModel):
    """Named predicate plus the message shown when it fails."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    check: str = Field(..., alias="fn", description="Predicate name in the check catalog")
    message: str
    args: dict[str, Any] = Field(default_factory=dict)


class FieldConfig(BaseModel):
    """Rules and trigger policy for one path."""

    model_config = ConfigDict(frozen=True)

    rules: tuple[ValidationRule, ...] = ()
    validate_on: ValidateOn = ValidateOn.BLUR


class FieldState(BaseModel):
    """Errors and touched flag for one path."""

    errors: list[str] = Field(default_factory=list)
    touched: bool = False
    validated: bool = False

    @property
    def status(self) -> FieldStatus:
        if self.validated:
            return FieldStatus.INVALID if self.errors else FieldStatus.VALID
        return FieldStatus.TOUCHED if self.touched else FieldStatus.UNTOUCHED

"""Action Type Definitions."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ConfirmSpec(BaseModel):
    """Confirmation prompt shown before an action runs."""

    title: str = ""
    message: str = ""
    variant: str = Field(default="default", description="default | danger")


class Action(BaseModel):
    """Named action plus parameters and follow-ups."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    params: dict[str, Any] = Field(default_factory=dict)
    confirm: ConfirmSpec | None = None
    on_success: dict[str, Any] | None = Field(default=None, alias="onSuccess")
    on_error: dict[str, Any] | None = Field(default=None, alias="onError")

    @classmethod
    def coerce(cls, value: "Action | str | dict[str, Any]") -> "Action":
        """Accept an Action, a bare name, or its dict form."""
        if isinstance(value, Action):
            return value
        if isinstance(value, str):
            return cls(name=value)
        return cls.model_validate(value)

"""Export Data Models."""

from pydantic import BaseModel, ConfigDict, Field

# Component catalog shipped with the exported project
DEFAULT_COMPONENTS: tuple[str, ...] = (
    "Card",
    "Heading",
    "Text",
    "Metric",
    "Chart",
    "Table",
    "Button",
    "Alert",
    "Grid",
    "Stack",
    "Divider",
    "Badge",
    "TextField",
    "Select",
    "DatePicker",
    "Empty",
    "List",
)


class ExportOptions(BaseModel):
    """Options for generating a standalone project."""

    model_config = ConfigDict(frozen=True)

    project_name: str = Field(
        default="generated-ui",
        pattern=r"^[a-z0-9][a-z0-9._-]*$",
        description="npm package name",
    )
    title: str = Field(default="Generated UI")
    components: tuple[str, ...] = Field(default=DEFAULT_COMPONENTS)
    include_readme: bool = True


class GeneratedFile(BaseModel):
    """Single file of an exported project."""

    model_config = ConfigDict(frozen=True)

    path: str
    content: str

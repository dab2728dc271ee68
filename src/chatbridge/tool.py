"""Tool descriptors advertised to the model."""

from __future__ import annotations

from typing import Any
from pydantic import BaseModel, model_validator

from .args_schema import ArgsSchema


class Tool(BaseModel):
    """Describes a tool the model may call.

    A ``Tool`` carries the metadata a backend needs to advertise a function:
    its name, a description and the JSON Schema of its input. The schema is
    either rendered from ``args_schema`` or given verbatim as ``parameters``.
    Running the tool is the caller's business.
    """

    name: str
    """The name of the tool."""

    description: str = ""
    """A description of what the tool does."""

    args_schema: list[ArgsSchema] | None = None
    """The schema of the tool's input arguments."""

    parameters: dict[str, Any] | None = None
    """A ready-made JSON Schema for the input. Takes precedence over ``args_schema``."""

    strict: bool | None = None
    """If True, the backend is asked to make arguments match the schema exactly.
    If None, `strict` is not included in the tool definition."""

    @model_validator(mode="after")
    def _validate_name(self) -> Tool:
        """Ensure tool has a valid name."""
        if not self.name:
            raise ValueError("Tool must have a non-empty name.")
        return self

    def json_schema(self) -> dict[str, Any]:
        """Build the JSON Schema describing the tool input.

        Returns:
            dict[str, Any]: An ``object`` schema.

        Raises:
            ValueError: If an argument uses a type with no JSON Schema equivalent.
        """
        if self.parameters is not None:
            return self.parameters

        properties = {}
        required = []

        if self.args_schema:
            for arg in self.args_schema:
                properties[arg.name] = arg.convert_to_json_schema()
                if arg.required:
                    required.append(arg.name)

        return {
            "type": "object",
            "properties": properties,
            "required": required,
            "additionalProperties": False,
        }

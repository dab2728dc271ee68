"""Schema definition for tool arguments."""

from __future__ import annotations

from typing import Any
from pydantic import BaseModel, ConfigDict, Field


class ArgsSchema(BaseModel):
    """Represents an argument for a tool."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    """The name of the argument."""

    type_: type[Any] = Field(alias="type")
    """The Python type of the argument."""

    description: str = ""
    """A description of the argument."""

    enum: list[Any] | None = None
    """List of allowed values for the argument."""

    required: bool = True
    """Whether the model must always supply the argument."""

    def convert_to_json_schema(self) -> dict[str, Any]:
        """Convert the argument to a JSON Schema representation.

        Returns:
            dict[str, Any]: A dictionary representing the argument in JSON Schema format.

        Raises:
            ValueError: If the argument's Python type has no JSON Schema equivalent.
        """
        schema: dict[str, Any] = {
            "type": self._json_type(),
            "description": self.description,
        }
        if self.enum:
            schema["enum"] = self.enum
        return schema

    def _json_type(self) -> str:
        """Get the JSON Schema type corresponding to the Python type.

        Returns:
            str: The JSON type string (e.g., "string", "integer", "number", "boolean").

        Raises:
            ValueError: If the Python type is unsupported.
        """
        # bool before int: bool is a subclass of int
        if self.type_ is bool:
            return "boolean"
        if self.type_ is str:
            return "string"
        if self.type_ is int:
            return "integer"
        if self.type_ is float:
            return "number"
        if self.type_ is list:
            return "array"
        if self.type_ is dict:
            return "object"
        raise ValueError(f"Unsupported type: {self.type_}")

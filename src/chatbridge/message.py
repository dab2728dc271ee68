"""Internal conversation model shared by every backend."""

from __future__ import annotations

import base64
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .constants import MessageRole


class TextContent(BaseModel):
    """A plain text part."""

    type: Literal["text"] = "text"

    text: str
    """The text of the part."""


class BinaryContent(BaseModel):
    """An attachment (typically an image) sent along with a user message."""

    type: Literal["binary"] = "binary"

    path: str = ""
    """Where the attachment was loaded from, informational only."""

    mime_type: str
    """MIME type of the payload, e.g. ``image/png``."""

    data: bytes
    """Raw attachment bytes."""

    def to_data_url(self) -> str:
        """Encode the attachment as a ``data:`` URL understood by chat backends."""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


class ToolCall(BaseModel):
    """A tool invocation requested by the model.

    Instances are immutable. While a stream is being consumed the partial
    state lives in the stream accumulator, which emits a fresh ``ToolCall``
    for every event.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["tool_call"] = "tool_call"

    id: str
    """Identifier of the call, unique within one response."""

    name: str = ""
    """The name of the tool to run."""

    input: str = ""
    """The tool arguments, serialized as JSON text."""


class ToolResult(BaseModel):
    """The output of a tool call, sent back inside a tool message."""

    type: Literal["tool_result"] = "tool_result"

    tool_call_id: str
    """The ``ToolCall.id`` this result answers."""

    name: str = ""
    """The name of the tool that produced the result."""

    content: str
    """The tool output."""

    is_error: bool = False
    """Whether the tool failed."""


ContentPart = Annotated[
    Union[TextContent, BinaryContent, ToolCall, ToolResult],
    Field(discriminator="type"),
]


class Message(BaseModel):
    """A single message in a conversation.

    A message is an ordered list of content parts. Which parts are meaningful
    depends on the role: user messages carry text and attachments, assistant
    messages carry text and tool calls, tool messages carry tool results.
    """

    role: MessageRole
    """The author of the message."""

    parts: list[ContentPart] = Field(default_factory=list)
    """The content parts, in order."""

    def content(self) -> str:
        """Return the text of the first text part, or an empty string."""
        for part in self.parts:
            if isinstance(part, TextContent):
                return part.text
        return ""

    def binary_content(self) -> list[BinaryContent]:
        return [part for part in self.parts if isinstance(part, BinaryContent)]

    def tool_calls(self) -> list[ToolCall]:
        return [part for part in self.parts if isinstance(part, ToolCall)]

    def tool_results(self) -> list[ToolResult]:
        return [part for part in self.parts if isinstance(part, ToolResult)]

"""Conversion of messages and tools into Chat Completions wire format."""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable

from .constants import MessageRole
from .message import Message
from .tool import Tool

logger = logging.getLogger(__name__)


def clean_messages(messages: Iterable[Message]) -> list[Message]:
    """Drop messages that have no content parts."""
    return [msg for msg in messages if msg.parts]


def convert_messages(
    messages: Iterable[Message],
    system_message: str,
) -> tuple[list[dict[str, Any]], list[str]]:
    """Convert messages to Chat Completions message dictionaries.

    A system message is always placed first. Empty messages are skipped.
    Assistant tool calls whose stored input is not a JSON object are dropped
    individually and reported as warnings, together with any tool results
    answering them. An assistant message left empty by this is skipped.

    Args:
        messages: The conversation, in order.
        system_message: The system prompt.

    Returns:
        tuple[list[dict[str, Any]], list[str]]: The wire messages and any
            warnings produced along the way.
    """
    wire: list[dict[str, Any]] = [{"role": "system", "content": system_message}]
    warnings: list[str] = []
    dropped_ids: set[str] = set()

    for msg in messages:
        if not msg.parts:
            continue

        if msg.role == MessageRole.USER:
            content: list[dict[str, Any]] = [{"type": "text", "text": msg.content()}]
            for binary in msg.binary_content():
                content.append(
                    {"type": "image_url", "image_url": {"url": binary.to_data_url()}}
                )
            wire.append({"role": "user", "content": content})

        elif msg.role == MessageRole.ASSISTANT:
            assistant: dict[str, Any] = {"role": "assistant"}
            if msg.content():
                assistant["content"] = msg.content()

            tool_calls = []
            for call in msg.tool_calls():
                try:
                    args = json.loads(call.input)
                    if not isinstance(args, dict):
                        raise ValueError("arguments must be a JSON object")
                except ValueError as e:
                    warning = f"Dropping tool call {call.id} ({call.name}): invalid input: {e}"
                    logger.warning(warning)
                    warnings.append(warning)
                    dropped_ids.add(call.id)
                    continue

                tool_calls.append(
                    {
                        "id": call.id,
                        "type": "function",
                        "function": {"name": call.name, "arguments": json.dumps(args)},
                    }
                )
            if tool_calls:
                assistant["tool_calls"] = tool_calls

            # Nothing left once every tool call was dropped
            if len(assistant) > 1:
                wire.append(assistant)

        elif msg.role == MessageRole.TOOL:
            for result in msg.tool_results():
                if result.tool_call_id in dropped_ids:
                    warning = f"Dropping tool result for dropped tool call {result.tool_call_id}"
                    logger.warning(warning)
                    warnings.append(warning)
                    continue
                wire.append(
                    {
                        "role": "tool",
                        "content": result.content,
                        "tool_call_id": result.tool_call_id,
                    }
                )

    return wire, warnings


def convert_tools(tools: Iterable[Tool] | None) -> tuple[list[dict[str, Any]], list[str]]:
    """Convert tools to Chat Completions function declarations.

    A tool whose schema cannot be built is skipped and reported as a warning;
    the remaining tools are still converted.

    Returns:
        tuple[list[dict[str, Any]], list[str]]: The wire tools and warnings.
    """
    wire: list[dict[str, Any]] = []
    warnings: list[str] = []

    for tool in tools or []:
        try:
            schema = tool.json_schema()
        except ValueError as e:
            warning = f"Skipping tool {tool.name}: failed to build schema: {e}"
            logger.warning(warning)
            warnings.append(warning)
            continue

        function: dict[str, Any] = {
            "name": tool.name,
            "description": tool.description,
            "parameters": schema,
        }
        if tool.strict is not None:
            function["strict"] = tool.strict
        wire.append({"type": "function", "function": function})

    return wire, warnings

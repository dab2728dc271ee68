"""Response and streaming event types returned to callers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, List

from .constants import EventType, FinishReason
from .message import ToolCall


@dataclass(frozen=True)
class TokenUsage:
    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_tokens: int = 0
    cache_read_tokens: int = 0


@dataclass(frozen=True)
class ProviderResponse:
    """
    Aggregated result of one completion.
    Returned by Provider.send_messages() and carried by the COMPLETE event.
    """
    content: str = ""
    tool_calls: List[ToolCall] = field(default_factory=list)
    usage: TokenUsage = field(default_factory=TokenUsage)
    finish_reason: FinishReason = FinishReason.UNKNOWN


@dataclass(frozen=True)
class ProviderEvent:
    """
    A single event of a streamed completion.
    Only the payload field matching ``type`` is set.
    """
    # Classification
    type: EventType

    # Payload (for streaming)
    content: Optional[str] = None
    thinking: Optional[str] = None
    tool_call: Optional[ToolCall] = None

    # Lifecycle
    response: Optional[ProviderResponse] = None

    # Errors / diagnostics
    error: Optional[BaseException] = None
    warning: Optional[str] = None

"""Constants and Enums for the chatbridge package."""

from __future__ import annotations

from enum import Enum
from typing import Literal


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class FinishReason(str, Enum):
    STOP = "stop"
    LENGTH = "length"
    TOOL_CALLS = "tool_calls"
    CONTENT_FILTER = "content_filter"
    UNKNOWN = "unknown"


class EventType(str, Enum):
    CONTENT_START = "content_start"
    CONTENT_DELTA = "content_delta"
    THINKING_DELTA = "thinking_delta"
    TOOL_USE_START = "tool_use_start"
    TOOL_USE_DELTA = "tool_use_delta"
    TOOL_USE_STOP = "tool_use_stop"
    CONTENT_STOP = "content_stop"
    COMPLETE = "complete"
    ERROR = "error"
    WARNING = "warning"


class ModelProvider(str, Enum):
    OPENAI = "openai"
    INFINEON = "infineon"


ReasoningEffort = Literal["low", "medium", "high"]

MAX_RETRIES = 8
BASE_RETRY_DELAY_MS = 1000
DEFAULT_TIMEOUT = 60.0  # seconds
DEFAULT_INFINEON_BASE_URL = "https://api.infineon.ai/v1"
STREAM_BUFFER_SIZE = 1  # events held ahead of the consumer

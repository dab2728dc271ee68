from .provider import (
    Provider,
    ProviderClientOptions,
    OpenAIOptions,
    InfineonOptions,
    new_provider,
)
from .client import ChatCompletionsClient
from .message import Message, TextContent, BinaryContent, ToolCall, ToolResult
from .tool import Tool
from .args_schema import ArgsSchema
from .models import Model, SUPPORTED_MODELS, get_model
from .events import ProviderEvent, ProviderResponse, TokenUsage
from .streaming import EventStream
from .retry import RetryPolicy, RetryDecision
from .transport import ChatTransport, ChunkStream, OpenAITransport
from .constants import MessageRole, FinishReason, EventType, ModelProvider, MAX_RETRIES
from .errors import (
    ChatBridgeError,
    BackendAPIError,
    MaxRetriesError,
    ProtocolError,
    TransportError,
    UnsupportedProviderError,
)

__all__ = [
    "Provider", "ProviderClientOptions", "OpenAIOptions", "InfineonOptions", "new_provider",
    "ChatCompletionsClient",
    "Message", "TextContent", "BinaryContent", "ToolCall", "ToolResult",
    "Tool", "ArgsSchema",
    "Model", "SUPPORTED_MODELS", "get_model",
    "ProviderEvent", "ProviderResponse", "TokenUsage", "EventStream",
    "RetryPolicy", "RetryDecision",
    "ChatTransport", "ChunkStream", "OpenAITransport",
    "MessageRole", "FinishReason", "EventType", "ModelProvider", "MAX_RETRIES",
    "ChatBridgeError", "BackendAPIError", "MaxRetriesError", "ProtocolError",
    "TransportError", "UnsupportedProviderError",
]

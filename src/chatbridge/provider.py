"""Provider capability and the factory that builds concrete backends."""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from pydantic import BaseModel, ConfigDict, Field

from .client import ChatCompletionsClient
from .constants import (
    DEFAULT_INFINEON_BASE_URL,
    DEFAULT_TIMEOUT,
    ModelProvider,
    ReasoningEffort,
)
from .convert import clean_messages
from .errors import UnsupportedProviderError
from .events import ProviderResponse
from .message import Message
from .models import Model
from .streaming import EventStream
from .tool import Tool
from .transport import ChatTransport, OpenAITransport


class OpenAIOptions(BaseModel):
    """Options specific to the OpenAI provider."""

    base_url: str | None = None
    """Custom base URL for the OpenAI API."""

    extra_headers: dict[str, str] = Field(default_factory=dict)
    """Headers added to every request."""

    disable_cache: bool = False
    """Recorded for parity with other providers; Chat Completions has no cache switch."""

    reasoning_effort: ReasoningEffort | None = None
    """Reasoning effort for models that support it.

    Options: `low`, `medium`, `high`.
    """


class InfineonOptions(BaseModel):
    """Options specific to the Infineon provider."""

    base_url: str = DEFAULT_INFINEON_BASE_URL
    """Endpoint of the Infineon API."""

    extra_headers: dict[str, str] = Field(default_factory=dict)
    """Headers added to every request."""

    disable_cache: bool = False
    """Recorded for parity with other providers; Chat Completions has no cache switch."""


class ProviderClientOptions(BaseModel):
    """Configuration shared by every provider, plus per-provider sub-options."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid")

    api_key: str | None = None
    """API key for the backend."""

    model: Model | None = None
    """Descriptor of the model to call."""

    max_tokens: int = 0
    """Maximum number of output tokens; 0 falls back to the model default."""

    system_message: str = ""
    """System prompt placed before every conversation."""

    timeout: float | None = DEFAULT_TIMEOUT
    """Request timeout in seconds."""

    stream_usage: bool = True
    """Ask for a terminal usage chunk when streaming."""

    openai_options: OpenAIOptions = Field(default_factory=OpenAIOptions)
    """OpenAI-specific options."""

    infineon_options: InfineonOptions = Field(default_factory=InfineonOptions)
    """Infineon-specific options."""

    transport: Any | None = None
    """A ``ChatTransport`` to use instead of the OpenAI SDK transport."""


class ProviderClient(Protocol):
    """The operations a concrete backend client implements."""

    async def send(
        self, messages: Sequence[Message], tools: Sequence[Tool] | None = None
    ) -> ProviderResponse: ...

    def stream(
        self, messages: Sequence[Message], tools: Sequence[Tool] | None = None
    ) -> EventStream: ...


class Provider:
    """The uniform capability handed to callers.

    Wraps a concrete ``ProviderClient``; callers only see messages, tools,
    responses and events, never backend types. Messages without content
    parts are filtered before they reach the client.
    """

    def __init__(self, options: ProviderClientOptions, client: ProviderClient) -> None:
        self._options = options
        self._client = client

    @property
    def model(self) -> Model:
        """The model descriptor this provider was configured with."""
        return self._options.model

    async def send_messages(
        self,
        messages: Sequence[Message],
        tools: Sequence[Tool] | None = None,
    ) -> ProviderResponse:
        """Send the conversation and wait for the complete response.

        Args:
            messages: The conversation, in order.
            tools: Tools the model may call.

        Returns:
            ``ProviderResponse``: The aggregated completion.
        """
        return await self._client.send(clean_messages(messages), tools)

    def stream_response(
        self,
        messages: Sequence[Message],
        tools: Sequence[Tool] | None = None,
    ) -> EventStream:
        """Send the conversation and stream the response as events.

        Args:
            messages: The conversation, in order.
            tools: Tools the model may call.

        Returns:
            ``EventStream``: Async iterator of ``ProviderEvent``.
        """
        return self._client.stream(clean_messages(messages), tools)

    def __repr__(self) -> str:
        model_id = self.model.id if self.model else None
        return f"{self.__class__.__name__}(model={model_id})"


def _max_tokens(options: ProviderClientOptions) -> int:
    if options.max_tokens > 0:
        return options.max_tokens
    if options.model is not None:
        return options.model.default_max_tokens
    return 0


def _new_openai_client(options: ProviderClientOptions) -> ChatCompletionsClient:
    openai_options = options.openai_options
    transport: ChatTransport = options.transport or OpenAITransport(
        api_key=options.api_key,
        base_url=openai_options.base_url,
        extra_headers=openai_options.extra_headers,
        timeout=options.timeout,
    )
    return ChatCompletionsClient(
        transport=transport,
        model=options.model,
        system_message=options.system_message,
        max_tokens=_max_tokens(options),
        reasoning_effort=openai_options.reasoning_effort,
        stream_usage=options.stream_usage,
    )


def _new_infineon_client(options: ProviderClientOptions) -> ChatCompletionsClient:
    infineon_options = options.infineon_options
    transport: ChatTransport = options.transport or OpenAITransport(
        api_key=options.api_key,
        base_url=infineon_options.base_url,
        extra_headers=infineon_options.extra_headers,
        timeout=options.timeout,
    )
    return ChatCompletionsClient(
        transport=transport,
        model=options.model,
        system_message=options.system_message,
        max_tokens=_max_tokens(options),
        stream_usage=options.stream_usage,
    )


_CLIENT_FACTORIES = {
    ModelProvider.OPENAI: _new_openai_client,
    ModelProvider.INFINEON: _new_infineon_client,
}


def new_provider(provider: ModelProvider | str, **options: Any) -> Provider:
    """Build a provider for ``provider`` from keyword options.

    Args:
        provider: Provider identifier, e.g. ``"openai"`` or ``ModelProvider.INFINEON``.
        **options: Fields of ``ProviderClientOptions`` (``api_key``, ``model``,
            ``max_tokens``, ``system_message``, ``openai_options``,
            ``infineon_options``, ``transport``, ...).

    Returns:
        ``Provider``: The configured provider.

    Raises:
        UnsupportedProviderError: If ``provider`` is not a known identifier.
        pydantic.ValidationError: If an option has the wrong type or name.
        ValueError: If no model descriptor was given.
    """
    try:
        provider_id = ModelProvider(provider)
    except ValueError:
        raise UnsupportedProviderError(f"provider not supported: {provider}") from None

    client_options = ProviderClientOptions(**options)
    if client_options.model is None:
        raise ValueError("a model descriptor is required")

    client = _CLIENT_FACTORIES[provider_id](client_options)
    return Provider(client_options, client)

"""Backend transport capability and its OpenAI SDK implementation."""

from __future__ import annotations

from typing import Any, AsyncIterator, Protocol

import httpx
import openai
from openai import AsyncOpenAI, AsyncStream
from openai.types.chat import ChatCompletion, ChatCompletionChunk

from .constants import DEFAULT_TIMEOUT
from .errors import BackendAPIError, ChatBridgeError, TransportError


class ChunkStream(Protocol):
    """An open streaming completion.

    Iterating yields chunks; ``StopAsyncIteration`` signals a clean end of
    stream. Any other exception is a transport failure.
    """

    def __aiter__(self) -> AsyncIterator[ChatCompletionChunk]: ...

    async def __anext__(self) -> ChatCompletionChunk: ...

    async def close(self) -> None: ...


class ChatTransport(Protocol):
    """What the core needs from a backend: one blocking and one streaming call."""

    async def create_chat_completion(self, params: dict[str, Any]) -> ChatCompletion: ...

    async def create_chat_completion_stream(self, params: dict[str, Any]) -> ChunkStream: ...


def translate_error(error: Exception) -> ChatBridgeError:
    """Map an SDK or HTTP error onto the chatbridge taxonomy."""
    if isinstance(error, openai.APIStatusError):
        return BackendAPIError(
            error.message,
            status_code=error.status_code,
            retry_after=error.response.headers.get("retry-after"),
        )
    return TransportError(str(error))


class _OpenAIChunkStream:
    """Wraps an SDK stream so failures surface as chatbridge errors."""

    def __init__(self, stream: AsyncStream[ChatCompletionChunk]) -> None:
        self._stream = stream

    def __aiter__(self) -> _OpenAIChunkStream:
        return self

    async def __anext__(self) -> ChatCompletionChunk:
        try:
            return await self._stream.__anext__()
        except (openai.APIError, httpx.HTTPError) as e:
            raise translate_error(e) from e

    async def close(self) -> None:
        await self._stream.close()


class OpenAITransport:
    """``ChatTransport`` backed by ``openai.AsyncOpenAI``.

    The SDK's own retries are disabled; retrying is decided by
    ``chatbridge.retry.RetryPolicy``.

    Args:
        api_key: API key sent as bearer token.
        base_url: Optional endpoint override for OpenAI-compatible backends.
        extra_headers: Headers added to every request.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        extra_headers: dict[str, str] | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> None:
        client_kwargs: dict[str, Any] = {
            "api_key": api_key,
            "timeout": timeout,
            "max_retries": 0,
        }
        if base_url:
            client_kwargs["base_url"] = base_url
        if extra_headers:
            client_kwargs["default_headers"] = dict(extra_headers)
        self._client = AsyncOpenAI(**client_kwargs)

    @property
    def client(self) -> AsyncOpenAI:
        """Access the underlying SDK client."""
        return self._client

    async def create_chat_completion(self, params: dict[str, Any]) -> ChatCompletion:
        try:
            return await self._client.chat.completions.create(**params)
        except (openai.APIError, httpx.HTTPError) as e:
            raise translate_error(e) from e

    async def create_chat_completion_stream(self, params: dict[str, Any]) -> ChunkStream:
        try:
            stream = await self._client.chat.completions.create(**params, stream=True)
        except (openai.APIError, httpx.HTTPError) as e:
            raise translate_error(e) from e
        return _OpenAIChunkStream(stream)

    async def aclose(self) -> None:
        """Close the SDK client."""
        await self._client.close()

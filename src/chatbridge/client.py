"""Chat Completions client: request execution, retries and stream translation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Sequence, TypeVar

from openai.types.chat import ChatCompletion

from .constants import EventType, ReasoningEffort
from .convert import convert_messages, convert_tools
from .errors import ProtocolError
from .events import ProviderEvent, ProviderResponse
from .message import Message, ToolCall
from .models import Model
from .retry import RetryPolicy
from .streaming import (
    Emit,
    EventStream,
    StreamAccumulator,
    finish_reason_from_str,
    usage_from_completion,
)
from .tool import Tool
from .transport import ChatTransport, ChunkStream

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ChatCompletionsClient:
    """Talks to one OpenAI-compatible Chat Completions backend.

    Both the OpenAI and the Infineon providers are served by this client;
    they differ only in the transport configuration and request options the
    factory hands in.

    Args:
        transport: The backend transport.
        model: Descriptor of the model to call.
        system_message: System prompt placed before every conversation.
        max_tokens: Output token limit; 0 leaves it to the backend.
        reasoning_effort: Sent for models that can reason.
        stream_usage: Ask the backend for a terminal usage chunk when streaming.
        retry_policy: Retry classification, defaults to ``RetryPolicy()``.
    """

    def __init__(
        self,
        *,
        transport: ChatTransport,
        model: Model,
        system_message: str = "",
        max_tokens: int = 0,
        reasoning_effort: ReasoningEffort | None = None,
        stream_usage: bool = True,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.transport = transport
        self.model = model
        self.system_message = system_message
        self.max_tokens = max_tokens
        self.reasoning_effort = reasoning_effort
        self.stream_usage = stream_usage
        self.retry_policy = retry_policy or RetryPolicy()

    def _prepare_request_params(
        self,
        messages: Sequence[Message],
        tools: Sequence[Tool] | None,
    ) -> tuple[dict[str, Any], list[str]]:
        """Prepare the request body shared by the blocking and streaming calls."""
        wire_messages, warnings = convert_messages(messages, self.system_message)
        wire_tools, tool_warnings = convert_tools(tools)
        warnings.extend(tool_warnings)

        params: dict[str, Any] = {
            "model": self.model.api_model,
            "messages": wire_messages,
        }
        if wire_tools:
            params["tools"] = wire_tools
        if self.max_tokens > 0:
            # Reasoning models reject max_tokens
            if self.model.can_reason:
                params["max_completion_tokens"] = self.max_tokens
            else:
                params["max_tokens"] = self.max_tokens
        if self.model.can_reason and self.reasoning_effort is not None:
            params["reasoning_effort"] = self.reasoning_effort
        return params, warnings

    async def _with_retries(
        self,
        call: Callable[[], Awaitable[T]],
        description: str,
    ) -> T:
        """Run ``call`` until it succeeds or the retry policy gives up."""
        max_retries = self.retry_policy.max_retries
        last_error: Exception | None = None

        for attempt in range(max_retries):
            try:
                return await call()
            except Exception as e:
                last_error = e
                decision = self.retry_policy.decide(attempt, e)
                if decision.fatal_error is not None:
                    raise decision.fatal_error from e
                if not decision.retry:
                    raise
                if attempt == max_retries - 1:
                    break
                logger.info(
                    "Retrying %s (attempt %d/%d) in %d ms: %s",
                    description,
                    attempt + 1,
                    max_retries,
                    decision.delay_ms,
                    e,
                )
                await asyncio.sleep(decision.delay_ms / 1000)

        assert last_error is not None
        raise last_error

    async def send(
        self,
        messages: Sequence[Message],
        tools: Sequence[Tool] | None = None,
    ) -> ProviderResponse:
        """Request one completion and wait for the whole answer.

        Raises:
            BackendAPIError: A non-retryable backend error, or the last
                rate-limit error once attempts ran out.
            MaxRetriesError: Server errors persisted past the retry budget.
            ProtocolError: The backend returned no choices.
        """
        params, _ = self._prepare_request_params(messages, tools)

        completion = await self._with_retries(
            lambda: self.transport.create_chat_completion(params),
            "request",
        )

        if not completion.choices:
            raise ProtocolError("no choices returned")

        choice = completion.choices[0]
        return ProviderResponse(
            content=choice.message.content or "",
            tool_calls=self._tool_calls(completion),
            usage=usage_from_completion(completion.usage),
            finish_reason=finish_reason_from_str(choice.finish_reason),
        )

    def stream(
        self,
        messages: Sequence[Message],
        tools: Sequence[Tool] | None = None,
    ) -> EventStream:
        """Request a streamed completion.

        Must be called with a running event loop. The returned stream ends
        with exactly one COMPLETE or ERROR event, unless it is closed early.
        """
        params, warnings = self._prepare_request_params(messages, tools)
        if self.stream_usage:
            params["stream_options"] = {"include_usage": True}

        async def produce(emit: Emit) -> None:
            try:
                stream = await self._with_retries(
                    lambda: self.transport.create_chat_completion_stream(params),
                    "stream request",
                )
            except Exception as e:
                logger.error("Failed to open stream: %s", e)
                await emit(ProviderEvent(type=EventType.ERROR, error=e))
                return

            try:
                await self._consume(stream, warnings, emit)
            finally:
                await stream.close()

        return EventStream(produce)

    async def _consume(self, stream: ChunkStream, warnings: list[str], emit: Emit) -> None:
        await emit(ProviderEvent(type=EventType.CONTENT_START))
        for warning in warnings:
            await emit(ProviderEvent(type=EventType.WARNING, warning=warning))

        accumulator = StreamAccumulator()
        while True:
            try:
                chunk = await stream.__anext__()
            except StopAsyncIteration:
                break
            except Exception as e:
                logger.error("Stream failed: %s", e)
                await emit(ProviderEvent(type=EventType.ERROR, error=e))
                return
            for event in accumulator.add_chunk(chunk):
                await emit(event)

        for event in accumulator.finish():
            await emit(event)

    @staticmethod
    def _tool_calls(completion: ChatCompletion) -> list[ToolCall]:
        message = completion.choices[0].message
        tool_calls = []
        for call in message.tool_calls or []:
            function = getattr(call, "function", None)
            if function is None:
                logger.warning("Ignoring non-function tool call %s", call.id)
                continue
            tool_calls.append(
                ToolCall(id=call.id, name=function.name, input=function.arguments)
            )
        return tool_calls

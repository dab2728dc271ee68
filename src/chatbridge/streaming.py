"""Incremental assembly of streamed completions and the event stream handle."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, AsyncIterator, Optional

from openai.types.chat import ChatCompletionChunk
from openai.types.completion_usage import CompletionUsage

from .constants import STREAM_BUFFER_SIZE, EventType, FinishReason
from .events import ProviderEvent, ProviderResponse, TokenUsage
from .message import ToolCall

Emit = Callable[[ProviderEvent], Awaitable[None]]

_CLOSED = object()


def finish_reason_from_str(reason: Optional[str]) -> FinishReason:
    """Map a backend finish reason onto ``FinishReason``; unknown values map to UNKNOWN."""
    if reason == "stop":
        return FinishReason.STOP
    if reason == "length":
        return FinishReason.LENGTH
    if reason == "tool_calls":
        return FinishReason.TOOL_CALLS
    if reason == "content_filter":
        return FinishReason.CONTENT_FILTER
    return FinishReason.UNKNOWN


def usage_from_completion(usage: Optional[CompletionUsage]) -> TokenUsage:
    """Convert backend usage counters. Cached prompt tokens are reported separately."""
    if usage is None:
        return TokenUsage()
    cached = 0
    if usage.prompt_tokens_details is not None:
        cached = usage.prompt_tokens_details.cached_tokens or 0
    return TokenUsage(
        input_tokens=usage.prompt_tokens - cached,
        output_tokens=usage.completion_tokens,
        cache_read_tokens=cached,
    )


@dataclass
class _PendingToolCall:
    id: str
    name: str = ""
    input: str = ""

    def snapshot(self) -> ToolCall:
        return ToolCall(id=self.id, name=self.name, input=self.input)


class StreamAccumulator:
    """Rebuilds one streamed completion from its chunks.

    Owned by a single stream task. Each call to ``add_chunk`` updates the
    running content, tool calls, usage and finish reason, and returns the
    incremental events the chunk produced, in order. Tool calls are
    addressed by the positional index the backend sends with every delta.
    """

    def __init__(self) -> None:
        self._content: list[str] = []
        self._tool_calls: list[_PendingToolCall] = []
        self._usage = TokenUsage()
        self._finish_reason = FinishReason.UNKNOWN

    def add_chunk(self, chunk: ChatCompletionChunk) -> list[ProviderEvent]:
        if chunk.usage is not None:
            self._usage = usage_from_completion(chunk.usage)

        if not chunk.choices:
            return []

        events: list[ProviderEvent] = []
        choice = chunk.choices[0]
        delta = choice.delta

        if delta.content:
            self._content.append(delta.content)
            events.append(ProviderEvent(type=EventType.CONTENT_DELTA, content=delta.content))

        # Not part of the OpenAI schema, sent by several compatible backends
        reasoning = _extra(delta, "reasoning_content")
        if reasoning:
            events.append(ProviderEvent(type=EventType.THINKING_DELTA, thinking=reasoning))

        for tool_delta in delta.tool_calls or []:
            self._add_tool_delta(tool_delta, events)

        if choice.finish_reason:
            self._finish_reason = finish_reason_from_str(choice.finish_reason)
        return events

    def _add_tool_delta(self, tool_delta: Any, events: list[ProviderEvent]) -> None:
        index = tool_delta.index
        in_bounds = 0 <= index < len(self._tool_calls)

        if not in_bounds:
            if tool_delta.id is None:
                return
            pending = _PendingToolCall(id=tool_delta.id)
            self._tool_calls.append(pending)
            events.append(ProviderEvent(type=EventType.TOOL_USE_START, tool_call=pending.snapshot()))
            # The new call only becomes addressable if it landed on the sent index
            in_bounds = 0 <= index < len(self._tool_calls)
            if not in_bounds:
                return

        pending = self._tool_calls[index]
        function = tool_delta.function
        if function is None:
            return

        if function.name:
            pending.name += function.name

        if function.arguments:
            pending.input += function.arguments
            events.append(
                ProviderEvent(
                    type=EventType.TOOL_USE_DELTA,
                    tool_call=ToolCall(id=pending.id, name=pending.name, input=function.arguments),
                )
            )

    def finish(self) -> list[ProviderEvent]:
        """Return the closing events of a cleanly finished stream, ending with COMPLETE."""
        tool_calls = [pending.snapshot() for pending in self._tool_calls]
        events = [ProviderEvent(type=EventType.TOOL_USE_STOP, tool_call=call) for call in tool_calls]
        events.append(ProviderEvent(type=EventType.CONTENT_STOP))

        response = ProviderResponse(
            content="".join(self._content),
            tool_calls=tool_calls,
            usage=self._usage,
            finish_reason=self._finish_reason,
        )
        events.append(ProviderEvent(type=EventType.COMPLETE, response=response))
        return events


def _extra(model: Any, key: str) -> Any:
    extra = getattr(model, "model_extra", None) or {}
    return extra.get(key)


class EventStream:
    """Ordered, single-pass sequence of ``ProviderEvent``.

    Creating an ``EventStream`` schedules ``producer`` as a task on the
    running loop. The producer is the only writer; it receives an awaitable
    ``emit`` callback that blocks while the consumer is behind, and the
    stream is closed when it returns, fails or is cancelled. Cancelling a
    task that waits on the next event also cancels the producer. Use
    ``async with`` (or call ``aclose``) to cancel the producer when
    abandoning the stream early.

    Example:
        async with provider.stream_response(messages, tools) as events:
            async for event in events:
                ...
    """

    def __init__(self, producer: Callable[[Emit], Awaitable[None]]) -> None:
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=STREAM_BUFFER_SIZE)
        self._exhausted = False
        self._task = asyncio.get_running_loop().create_task(self._run(producer))

    async def _run(self, producer: Callable[[Emit], Awaitable[None]]) -> None:
        try:
            await producer(self._queue.put)
        except asyncio.CancelledError:
            self._exhausted = True
            # Wake a consumer still waiting on an empty queue
            if not self._queue.full():
                self._queue.put_nowait(_CLOSED)
            raise
        finally:
            if not self._exhausted:
                await self._queue.put(_CLOSED)

    def __aiter__(self) -> AsyncIterator[ProviderEvent]:
        return self

    async def __anext__(self) -> ProviderEvent:
        if self._exhausted:
            raise StopAsyncIteration
        try:
            item = await self._queue.get()
        except asyncio.CancelledError:
            self._exhausted = True
            self._task.cancel()
            raise
        if item is _CLOSED:
            self._exhausted = True
            # Re-raise a producer failure to the consumer
            if self._task.done() and not self._task.cancelled():
                exc = self._task.exception()
                if exc is not None:
                    raise exc
            raise StopAsyncIteration
        return item

    async def aclose(self) -> None:
        """Cancel the producer and end the sequence."""
        self._exhausted = True
        if not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

    async def collect(self) -> list[ProviderEvent]:
        """Consume the remaining events into a list."""
        return [event async for event in self]

    async def __aenter__(self) -> EventStream:
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

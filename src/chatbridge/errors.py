"""Exceptions raised by chatbridge."""

from __future__ import annotations

__all__ = [
    "BackendAPIError",
    "ChatBridgeError",
    "MaxRetriesError",
    "ProtocolError",
    "TransportError",
    "UnsupportedProviderError",
]


class ChatBridgeError(Exception):
    """Base exception for all chatbridge errors."""


class BackendAPIError(ChatBridgeError):
    """An HTTP error reported by the backend chat API.

    Args:
        message: Human readable description.
        status_code: The HTTP status code of the failed response.
        retry_after: Raw ``Retry-After`` header value, if the backend sent one.
    """

    def __init__(
        self, message: str, *, status_code: int, retry_after: str | None = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.retry_after = retry_after

    def __str__(self) -> str:
        return f"{self.status_code}: {super().__str__()}"


class MaxRetriesError(ChatBridgeError):
    """Raised when server errors persist past the retry budget."""


class ProtocolError(ChatBridgeError):
    """Raised when the backend answers successfully but with an unexpected shape."""


class TransportError(ChatBridgeError):
    """Raised when a stream fails for a reason other than a clean end-of-stream."""


class UnsupportedProviderError(ChatBridgeError, ValueError):
    """Raised by the provider factory for an unknown provider identifier."""

"""Retry classification for failed backend calls."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from .constants import BASE_RETRY_DELAY_MS, MAX_RETRIES
from .errors import BackendAPIError, MaxRetriesError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryDecision:
    retry: bool
    delay_ms: int = 0
    fatal_error: Optional[BaseException] = None


class RetryPolicy:
    """Decides whether a failed call should be attempted again.

    Only ``BackendAPIError`` is considered. Rate limits (429) are always
    retried, honouring ``Retry-After`` when present. Server errors (5xx) are
    retried until the attempt budget runs out, after which a
    ``MaxRetriesError`` is returned as the fatal error. Everything else is
    left to the caller to raise as is.

    Args:
        max_retries: Total number of attempts the caller makes.
        base_delay_ms: Delay of the first backoff step; doubled per attempt.
    """

    def __init__(
        self,
        max_retries: int = MAX_RETRIES,
        base_delay_ms: int = BASE_RETRY_DELAY_MS,
    ) -> None:
        if max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms

    def backoff_ms(self, attempt: int) -> int:
        return self.base_delay_ms * (1 << attempt)

    def decide(self, attempt: int, error: BaseException) -> RetryDecision:
        """Classify ``error`` raised by the zero-based ``attempt``.

        Args:
            attempt: Index of the attempt that failed.
            error: The exception it raised.

        Returns:
            ``RetryDecision``: ``retry`` with a delay, or no retry with an
            optional fatal error to raise instead of ``error``.
        """
        if not isinstance(error, BackendAPIError):
            return RetryDecision(retry=False)

        if error.status_code == 429:
            retry_after = _parse_retry_after(error.retry_after)
            if retry_after is not None:
                return RetryDecision(retry=True, delay_ms=retry_after)
            return RetryDecision(retry=True, delay_ms=self.backoff_ms(attempt))

        if 500 <= error.status_code < 600:
            if attempt >= self.max_retries - 1:
                fatal = MaxRetriesError(f"max retries reached: {error}")
                fatal.__cause__ = error
                return RetryDecision(retry=False, fatal_error=fatal)
            return RetryDecision(retry=True, delay_ms=self.backoff_ms(attempt))

        return RetryDecision(retry=False)


def _parse_retry_after(value: str | None) -> int | None:
    """Convert a ``Retry-After`` value in seconds to milliseconds.

    HTTP-date values and garbage yield None so the caller falls back to
    exponential backoff.
    """
    if not value:
        return None
    try:
        seconds = float(value.strip())
    except ValueError:
        logger.debug("Ignoring non-numeric Retry-After header %r", value)
        return None
    if not math.isfinite(seconds) or seconds < 0:
        return None
    return int(seconds * 1000)

"""Retry policies for search requests."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from docquery.cancellation import CancellationToken
from docquery.exceptions import TransientSearchError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_transient_error(exc: Exception) -> bool:
    """Default retry predicate: connection drops, timeouts and ``TransientSearchError``."""
    return isinstance(exc, TransientSearchError | ConnectionError | TimeoutError)


class ExponentialRetryPolicy:
    """Retry transient failures with exponential backoff.

    The first retry waits ``initial_delay`` seconds and every further retry
    doubles the wait, capped at ``max_delay``.  When attempts run out the
    last failure is re-raised unchanged.

    Implements the ``RetryPolicy`` protocol.

    Parameters:
        max_attempts: Total number of attempts, including the first.
            Default 10.
        initial_delay: Seconds to wait before the first retry.  Default 0.1.
        max_delay: Upper bound on any single wait.  Default 30.0.
        log: Logger receiving a warning per retry.  Defaults to this
            module's logger.
    """

    __slots__ = ("_initial_delay", "_logger", "_max_attempts", "_max_delay")

    def __init__(
        self,
        max_attempts: int = 10,
        initial_delay: float = 0.1,
        max_delay: float = 30.0,
        log: logging.Logger | None = None,
    ) -> None:
        if max_attempts < 1:
            msg = "max_attempts must be >= 1"
            raise ValueError(msg)
        if initial_delay < 0 or max_delay < 0:
            msg = "retry delays must be non-negative"
            raise ValueError(msg)
        self._max_attempts = max_attempts
        self._initial_delay = initial_delay
        self._max_delay = max_delay
        self._logger = log or logger

    def __repr__(self) -> str:
        return (
            f"ExponentialRetryPolicy(max_attempts={self._max_attempts}, "
            f"initial_delay={self._initial_delay}, max_delay={self._max_delay})"
        )

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the given (1-based) failed attempt."""
        return min(self._initial_delay * 2 ** (attempt - 1), self._max_delay)

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        should_retry: Callable[[Exception], bool] = is_transient_error,
        cancellation: CancellationToken,
    ) -> T:
        attempt = 0
        while True:
            attempt += 1
            cancellation.raise_if_cancelled()
            try:
                return await operation()
            except Exception as exc:
                if attempt >= self._max_attempts or not should_retry(exc):
                    raise
                delay = self.delay_for(attempt)
                self._logger.warning(
                    "Search attempt %d/%d failed: %s. Retrying in %.2fs...",
                    attempt, self._max_attempts, exc, delay,
                )
            await cancellation.guard(asyncio.sleep(delay))


class NoRetryPolicy:
    """Run the operation exactly once.  Implements the ``RetryPolicy`` protocol."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "NoRetryPolicy()"

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        should_retry: Callable[[Exception], bool] = is_transient_error,
        cancellation: CancellationToken,
    ) -> T:
        cancellation.raise_if_cancelled()
        return await operation()

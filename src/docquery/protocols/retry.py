"""Retry policy protocol."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from docquery.cancellation import CancellationToken

T = TypeVar("T")


@runtime_checkable
class RetryPolicy(Protocol):
    """Protocol for policies that decide how to re-run failed operations."""

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        should_retry: Callable[[Exception], bool],
        cancellation: CancellationToken,
    ) -> T:
        """Run *operation*, retrying failures accepted by *should_retry*.

        The final failure (or the first one *should_retry* rejects) is
        re-raised unchanged.  Cancellation of *cancellation* must interrupt
        both attempts and any delay between them.
        """
        ...

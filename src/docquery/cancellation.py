"""Cooperative cancellation for outstanding searches."""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from collections.abc import Awaitable, Callable
from typing import TypeVar

from docquery.exceptions import QueryCancelledError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancellationToken:
    """A thread-safe, one-shot cancellation signal.

    The caller creates a token, passes it to ``aexecute`` (or an async query
    terminal) and may later call ``cancel()`` from any thread.  Awaitables
    run through ``guard`` are abandoned as soon as the token fires and the
    awaiting code receives ``QueryCancelledError``.

    Usage::

        token = CancellationToken()
        task = asyncio.create_task(context.query(Robot).ato_list(cancellation=token))
        ...
        token.cancel()
    """

    __slots__ = ("_callbacks", "_event", "_lock")

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"

    @property
    def cancelled(self) -> bool:
        """Whether ``cancel()`` has been called."""
        return self._event.is_set()

    def cancel(self) -> None:
        """Signal cancellation.  Calling it more than once has no further effect."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.warning("Cancellation callback %r failed", callback, exc_info=True)

    def raise_if_cancelled(self) -> None:
        """Raise ``QueryCancelledError`` if the token has fired."""
        if self._event.is_set():
            msg = "Query was cancelled"
            raise QueryCancelledError(msg)

    def register(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Run *callback* when the token fires and return a function that unregisters it.

        If the token has already fired, *callback* runs immediately.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return lambda: self._unregister(callback)
        callback()
        return lambda: None

    def _unregister(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """Await *awaitable*, abandoning it if the token fires first.

        Raises:
            QueryCancelledError: If the token fired before or during the wait.
        """
        if self._event.is_set():
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            self.raise_if_cancelled()

        loop = asyncio.get_running_loop()
        task = asyncio.ensure_future(awaitable)
        unregister = self.register(lambda: loop.call_soon_threadsafe(task.cancel))
        try:
            return await task
        except asyncio.CancelledError:
            if not self._event.is_set() or not task.cancelled():
                raise
        finally:
            unregister()
        msg = "Query was cancelled while waiting for the search service"
        raise QueryCancelledError(msg)

"""Run async query execution from blocking call sites.

``run_sync`` gives a blocking contract over a coroutine without ever
requiring the caller's event loop to make progress: when the calling
thread already runs a loop, the coroutine gets a private loop on a worker
thread, so the blocked caller cannot deadlock it.  Failures surface as the
original exception object, never as a group or wrapper.
"""

from __future__ import annotations

import asyncio
import contextvars
import logging
from collections.abc import Awaitable, Callable
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def unwrap_exception(exc: BaseException) -> BaseException:
    """Reduce exception groups that hold exactly one failure to that failure."""
    while isinstance(exc, BaseExceptionGroup) and len(exc.exceptions) == 1:
        exc = exc.exceptions[0]
    return exc


async def await_unwrapped(awaitable: Awaitable[T]) -> T:
    """Await *awaitable*, re-raising the single original failure of any exception group.

    The original exception is raised outside the handler so no group is
    chained onto it as context.
    """
    try:
        return await awaitable
    except BaseExceptionGroup as group:
        failure = unwrap_exception(group)
        if failure is group:
            raise
    raise failure


def _has_running_loop() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


def run_sync(operation: Callable[[], Awaitable[T]]) -> T:
    """Run the awaitable produced by *operation* to completion and return its result.

    Parameters:
        operation: Zero-argument callable returning the awaitable to run.
            It is invoked on whichever loop ends up running it.

    Returns:
        The awaitable's result.

    Raises:
        Whatever the awaitable raised, as the same exception object.
    """

    async def _invoke() -> T:
        return await await_unwrapped(operation())

    if not _has_running_loop():
        return asyncio.run(_invoke())

    logger.debug("Event loop already running on this thread; running query on a worker loop")
    context = contextvars.copy_context()
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="docquery-sync") as pool:
        future = pool.submit(context.run, asyncio.run, _invoke())
        return future.result()

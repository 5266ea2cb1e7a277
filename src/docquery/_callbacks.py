"""Callback notification used by the query provider."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any


def notify_callbacks(
    callbacks: Sequence[Any],
    event: str,
    *args: Any,
    logger: logging.Logger,
) -> None:
    """Invoke ``event`` on every callback that defines it.

    A failing callback is logged with its traceback and skipped; it never
    interrupts query execution or the remaining callbacks.

    Parameters:
        callbacks: Callback objects, typically ``QueryCallback`` implementations.
        event: Name of the hook method to call.
        *args: Positional arguments forwarded to the hook.
        logger: Logger that receives failure records.
    """
    for callback in callbacks:
        hook = getattr(callback, event, None)
        if not callable(hook):
            continue
        try:
            hook(*args)
        except Exception:
            logger.warning("Query callback %r.%s failed", callback, event, exc_info=True)

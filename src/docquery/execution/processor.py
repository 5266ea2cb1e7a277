"""Send translated search requests through a connection."""

from __future__ import annotations

import logging
import time
from typing import Any

from docquery._argument import ensure_not_none
from docquery.cancellation import CancellationToken
from docquery.execution.retry import is_transient_error
from docquery.models.request import SearchRequest
from docquery.models.response import SearchResponse
from docquery.protocols.connection import Connection
from docquery.protocols.retry import RetryPolicy


class SearchRequestProcessor:
    """Runs search requests against a connection under a retry policy.

    Every connection call and every retry delay is guarded by the caller's
    cancellation token.

    Parameters:
        connection: Transport that performs the search.
        log: Logger for request timings and missing responses.
        retry_policy: Policy deciding whether failed attempts are re-run.
    """

    __slots__ = ("_connection", "_log", "_retry_policy")

    def __init__(
        self,
        connection: Connection,
        log: logging.Logger,
        retry_policy: RetryPolicy,
    ) -> None:
        self._connection = ensure_not_none("connection", connection)
        self._log = ensure_not_none("log", log)
        self._retry_policy = ensure_not_none("retry_policy", retry_policy)

    def __repr__(self) -> str:
        return (
            f"SearchRequestProcessor(connection={self._connection!r}, "
            f"retry_policy={self._retry_policy!r})"
        )

    async def search(
        self,
        request: SearchRequest,
        cancellation: CancellationToken,
    ) -> SearchResponse | None:
        """Run *request* and return the validated response.

        Returns:
            A response owned by the caller (response models from the
            connection are deep-copied), or ``None`` when the connection
            produced none.

        Raises:
            QueryCancelledError: If *cancellation* fired while the request
                was outstanding.
        """

        async def _attempt() -> SearchResponse | dict[str, Any] | None:
            return await cancellation.guard(self._connection.search(request))

        start = time.monotonic()
        raw = await self._retry_policy.execute(
            _attempt, should_retry=is_transient_error, cancellation=cancellation,
        )
        elapsed_ms = (time.monotonic() - start) * 1000

        if raw is None:
            self._log.warning(
                "Search of '%s' returned no response after %.2fms",
                request.document_type, elapsed_ms,
            )
            return None

        # The caller releases hit buffers in place, so it must own the response.
        if isinstance(raw, SearchResponse):
            response = raw.model_copy(deep=True)
        else:
            response = SearchResponse.model_validate(raw)
        total = response.hits.total if response.hits is not None else 0
        self._log.debug(
            "Search of '%s' matched %d documents in %.2fms (service took %dms)",
            request.document_type, total, elapsed_ms, response.took,
        )
        return response

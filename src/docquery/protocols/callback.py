"""Query callback protocol for observability hooks."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from docquery.models.request import SearchRequest


@runtime_checkable
class QueryCallback(Protocol):
    """Protocol for query execution callbacks.

    Only the hooks a callback defines are invoked, so implementations may
    provide any subset.  Exceptions raised by hooks are logged and ignored.
    Hooks fire only for expressions that translated into a request, so
    translation failures reach the caller without any hook being invoked.
    """

    def on_query_start(self, request: SearchRequest) -> None: ...
    def on_short_circuit(self, request: SearchRequest) -> None: ...
    def on_query_end(self, request: SearchRequest, result: Any, time_ms: float) -> None: ...
    def on_query_error(self, request: SearchRequest, error: BaseException) -> None: ...

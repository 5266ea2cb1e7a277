"""SearchContext -- the entry point for building queries."""

from __future__ import annotations

import logging
from typing import TypeVar

from docquery._argument import ensure_not_none
from docquery.execution.memory import DEFAULT_RELEASE_THRESHOLD
from docquery.execution.retry import ExponentialRetryPolicy
from docquery.mapping.typed import TypedDocumentMapping
from docquery.models.expression import QueryExpression
from docquery.protocols.connection import Connection
from docquery.protocols.mapping import DocumentMapping
from docquery.protocols.retry import RetryPolicy
from docquery.provider import SearchQueryProvider
from docquery.query import SearchQuery

T = TypeVar("T")


class SearchContext:
    """Binds a connection to a mapping and hands out queries.

    Usage::

        context = SearchContext(InMemoryConnection({"robots": docs}))
        cheap = context.query(Robot).where(ref("cost") < 5).to_list()

    Parameters:
        connection: Transport used to run search requests.
        mapping: Field mapping.  Defaults to ``TypedDocumentMapping()``.
        log: Logger for execution messages.  Defaults to the ``docquery`` logger.
        retry_policy: Retry policy.  Defaults to an ``ExponentialRetryPolicy``
            logging through *log*.
        release_threshold: Hit lists longer than this are released after
            materialization.  Default 4096.
    """

    __slots__ = ("_provider",)

    def __init__(
        self,
        connection: Connection,
        mapping: DocumentMapping | None = None,
        log: logging.Logger | None = None,
        retry_policy: RetryPolicy | None = None,
        release_threshold: int = DEFAULT_RELEASE_THRESHOLD,
    ) -> None:
        log = log or logging.getLogger("docquery")
        self._provider = SearchQueryProvider(
            ensure_not_none("connection", connection),
            mapping or TypedDocumentMapping(),
            log=log,
            retry_policy=retry_policy or ExponentialRetryPolicy(log=log),
            release_threshold=release_threshold,
        )

    def __repr__(self) -> str:
        return f"SearchContext(provider={self._provider!r})"

    @property
    def provider(self) -> SearchQueryProvider:
        return self._provider

    def query(self, element_type: type[T]) -> SearchQuery[T]:
        """Start a query over all documents of *element_type*."""
        ensure_not_none("element_type", element_type)
        return self._provider.create_typed_query(element_type, QueryExpression(element_type))

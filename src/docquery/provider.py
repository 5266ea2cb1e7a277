"""SearchQueryProvider -- the query execution orchestrator."""

from __future__ import annotations

import logging
import time
import types
from typing import Any, TypeVar, Union, get_args, get_origin

from docquery._argument import ensure_non_negative, ensure_not_none
from docquery._callbacks import notify_callbacks
from docquery.cancellation import CancellationToken
from docquery.exceptions import NoResponseError, QueryShapeError, ResultTypeError
from docquery.execution.bridge import await_unwrapped, run_sync
from docquery.execution.memory import DEFAULT_RELEASE_THRESHOLD, release_large_hits
from docquery.execution.processor import SearchRequestProcessor
from docquery.execution.retry import ExponentialRetryPolicy
from docquery.models.criteria import ALWAYS_FALSE
from docquery.models.expression import QueryExpression
from docquery.models.response import SearchResponse
from docquery.protocols.callback import QueryCallback
from docquery.protocols.connection import Connection
from docquery.protocols.mapping import DocumentMapping
from docquery.protocols.retry import RetryPolicy
from docquery.protocols.translator import Translator
from docquery.query import SearchQuery
from docquery.translation.translator import QueryTranslator

T = TypeVar("T")

_default_log = logging.getLogger("docquery")
# Stands in for "no retry policy given"; an explicit None is rejected.
_DEFAULT_RETRY: Any = object()


def conforms(value: Any, result_type: Any) -> bool:
    """Check *value* against a class, union, ``Any`` or parametrized collection type."""
    if result_type is Any:
        return True
    origin = get_origin(result_type)
    if origin is None:
        return isinstance(value, result_type)
    args = get_args(result_type)
    if origin is Union or origin is types.UnionType:
        return any(conforms(value, arg) for arg in args)
    if not isinstance(value, origin):
        return False
    if origin in (list, set, frozenset) and len(args) == 1:
        return all(conforms(item, args[0]) for item in value)
    if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
        return all(conforms(item, args[0]) for item in value)
    return True


class SearchQueryProvider:
    """Executes query expressions against a document search service.

    Translates each expression into a ``SearchRequest`` plus a
    materializer, runs the request through the connection (unless the
    filter can never match), materializes the response, and releases large
    hit buffers before returning.

    Usage::

        provider = SearchQueryProvider(connection, TypedDocumentMapping())
        robots = provider.execute(QueryExpression(Robot))
        count = await provider.aexecute_as(int, QueryExpression(Robot).then(Count()))

    ``execute`` and ``aexecute`` raise the same exception types; neither
    ever surfaces an exception group or a wrapper around the original
    failure.

    Parameters:
        connection: Transport used to run search requests.
        mapping: Field mapping between element types and documents.
        log: Logger receiving execution messages.  Defaults to the
            ``docquery`` logger; ``None`` is rejected.
        retry_policy: Policy applied to failed connection calls.  Defaults to
            ``ExponentialRetryPolicy`` logging through *log*; ``None`` is
            rejected.
        translator: Translator turning expressions into requests.  Defaults
            to ``QueryTranslator()``.
        release_threshold: Hit lists longer than this are cleared after
            materialization.  Default 4096.
    """

    def __init__(
        self,
        connection: Connection,
        mapping: DocumentMapping,
        log: logging.Logger = _default_log,
        retry_policy: RetryPolicy = _DEFAULT_RETRY,
        translator: Translator | None = None,
        release_threshold: int = DEFAULT_RELEASE_THRESHOLD,
    ) -> None:
        self._connection = ensure_not_none("connection", connection)
        self._mapping = ensure_not_none("mapping", mapping)
        self._log = ensure_not_none("log", log)
        if retry_policy is _DEFAULT_RETRY:
            retry_policy = ExponentialRetryPolicy(log=self._log)
        self._retry_policy = ensure_not_none("retry_policy", retry_policy)
        self._translator = translator or QueryTranslator()
        self._release_threshold = ensure_non_negative("release_threshold", release_threshold)
        self._callbacks: list[QueryCallback] = []
        self._processor = SearchRequestProcessor(connection, log, self._retry_policy)

    # -- Read-only properties --

    @property
    def connection(self) -> Connection:
        return self._connection

    @property
    def mapping(self) -> DocumentMapping:
        return self._mapping

    @property
    def log(self) -> logging.Logger:
        return self._log

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry_policy

    @property
    def release_threshold(self) -> int:
        return self._release_threshold

    def __repr__(self) -> str:
        return (
            f"SearchQueryProvider(connection={self._connection!r}, "
            f"mapping={self._mapping!r}, retry_policy={self._retry_policy!r})"
        )

    def add_callback(self, callback: QueryCallback) -> SearchQueryProvider:
        """Register an execution callback. Returns self for chaining."""
        self._callbacks.append(callback)
        return self

    def _notify(self, event: str, *args: Any) -> None:
        notify_callbacks(self._callbacks, event, *args, logger=self._log)

    # -- Query construction --

    def create_query(self, expression: QueryExpression) -> SearchQuery[Any]:
        """Build a query whose element type is discovered from *expression* at runtime.

        Raises:
            QueryShapeError: If *expression* does not yield a sequence.
            Any exception raised while constructing the query, unchanged.
        """
        ensure_not_none("expression", expression)
        element_type = expression.sequence_element_type()
        return SearchQuery[element_type](self, expression, element_type)  # type: ignore[valid-type]

    def create_typed_query(self, element_type: type[T], expression: QueryExpression) -> SearchQuery[T]:
        """Build a query over *element_type*.

        Raises:
            QueryShapeError: If *expression* is not a sequence of
                *element_type* (or of a subclass of it).
        """
        ensure_not_none("element_type", element_type)
        ensure_not_none("expression", expression)
        produced = expression.sequence_element_type()
        if not (
            isinstance(element_type, type)
            and isinstance(produced, type)
            and issubclass(produced, element_type)
        ):
            msg = (
                f"Expression yields {getattr(produced, '__name__', produced)!s}, "
                f"which is not a sequence of {getattr(element_type, '__name__', element_type)!s}"
            )
            raise QueryShapeError(msg)
        return SearchQuery[element_type](self, expression, element_type)  # type: ignore[valid-type]

    # -- Execution --

    def execute(self, expression: QueryExpression) -> Any:
        """Execute *expression* and block until the result is available.

        Safe to call from inside a running event loop.  Takes no
        cancellation token: the call runs to completion or fails.
        """
        return run_sync(lambda: self.aexecute(expression))

    def execute_as(self, result_type: type[T], expression: QueryExpression) -> T:
        """Blocking ``execute`` narrowed to *result_type*.

        Raises:
            ResultTypeError: If the result does not conform to *result_type*.
        """
        return self._narrow(result_type, self.execute(expression))

    async def aexecute_as(
        self,
        result_type: type[T],
        expression: QueryExpression,
        cancellation: CancellationToken | None = None,
    ) -> T:
        """Async ``aexecute`` narrowed to *result_type*.

        Raises:
            ResultTypeError: If the result does not conform to *result_type*.
        """
        return self._narrow(result_type, await self.aexecute(expression, cancellation))

    async def aexecute(
        self,
        expression: QueryExpression,
        cancellation: CancellationToken | None = None,
    ) -> Any:
        """Execute *expression* asynchronously.

        Parameters:
            expression: The query to run.
            cancellation: Token observed while the search is outstanding.

        Returns:
            The materialized result: a list, a count, an aggregate value or
            a single element, depending on the expression.

        Callbacks observe a query only once it has been translated into a
        request: translation failures propagate before ``on_query_start``
        and are not reported to ``on_query_error``.

        Raises:
            MissingArgumentError: If *expression* is ``None``.
            TranslationError: If *expression* cannot be translated.
            NoResponseError: If the connection produced no response.
            QueryCancelledError: If *cancellation* fired during the search.
        """
        ensure_not_none("expression", expression)
        token = cancellation if cancellation is not None else CancellationToken()
        return await await_unwrapped(self._run(expression, token))

    async def _run(self, expression: QueryExpression, cancellation: CancellationToken) -> Any:
        start = time.monotonic()
        translation = self._translator.translate(self._mapping, expression)
        request = translation.search_request

        self._log.debug("Executing query against document type '%s'", request.document_type)
        self._notify("on_query_start", request)

        try:
            if request.filter == ALWAYS_FALSE:
                self._log.debug(
                    "Filter for '%s' can never match; skipping the search",
                    request.document_type,
                )
                self._notify("on_short_circuit", request)
                response = SearchResponse()
            else:
                response = await self._processor.search(request, cancellation)
                if response is None:
                    msg = f"No response received for search of '{request.document_type}'"
                    raise NoResponseError(msg)

            result = translation.materializer.materialize(response)

            if release_large_hits(response, self._release_threshold):
                self._log.debug(
                    "Released hit buffer of search of '%s' after materialization",
                    request.document_type,
                )
        except BaseException as exc:
            self._notify("on_query_error", request, exc)
            raise

        elapsed_ms = (time.monotonic() - start) * 1000
        self._notify("on_query_end", request, result, elapsed_ms)
        return result

    @staticmethod
    def _narrow(result_type: Any, result: Any) -> Any:
        if not conforms(result, result_type):
            type_name = getattr(result_type, "__name__", None) or repr(result_type)
            msg = f"Query result of type {type(result).__name__} is not a {type_name}"
            raise ResultTypeError(msg)
        return result

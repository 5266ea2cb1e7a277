"""docquery: Typed, composable queries over document search services.

Entry Points:
    SearchContext, SearchQuery, SearchQueryProvider

Query Description:
    QueryExpression, Where, Select, OrderBy, Skip, Take, Count, Aggregate,
    First, AggregateOperation, ResultShape, ref, FieldRef,
    Criteria, TermCriteria, TermsCriteria, RangeCriteria, ExistsCriteria,
    AndCriteria, OrCriteria, NotCriteria, ConstantCriteria,
    ALWAYS_TRUE, ALWAYS_FALSE, and_criteria, or_criteria, not_criteria,
    terms_criteria

Requests & Responses:
    SearchRequest, SearchType, SortOption, AggregateDirective,
    SearchResponse, Hits, Hit

Execution:
    CancellationToken, ExponentialRetryPolicy, NoRetryPolicy, run_sync,
    QueryTranslator, Translation, TypedDocumentMapping

Protocols (extension points):
    Connection, DocumentMapping, Materializer, Translator, RetryPolicy,
    QueryCallback

Backends:
    InMemoryConnection

Exceptions:
    DocQueryError, MissingArgumentError, QueryShapeError, NoResponseError,
    ResultTypeError, TranslationError, UnknownFieldError, NoResultsError,
    TransientSearchError, QueryCancelledError
"""

from importlib.metadata import PackageNotFoundError, version

from docquery.backends import InMemoryConnection
from docquery.cancellation import CancellationToken
from docquery.context import SearchContext
from docquery.exceptions import (
    DocQueryError,
    MissingArgumentError,
    NoResponseError,
    NoResultsError,
    QueryCancelledError,
    QueryShapeError,
    ResultTypeError,
    TransientSearchError,
    TranslationError,
    UnknownFieldError,
)
from docquery.execution import ExponentialRetryPolicy, NoRetryPolicy, run_sync
from docquery.mapping import TypedDocumentMapping
from docquery.models import (
    ALWAYS_FALSE,
    ALWAYS_TRUE,
    Aggregate,
    AggregateDirective,
    AggregateOperation,
    AndCriteria,
    ConstantCriteria,
    Count,
    Criteria,
    ExistsCriteria,
    FieldRef,
    First,
    Hit,
    Hits,
    NotCriteria,
    OrCriteria,
    OrderBy,
    QueryExpression,
    RangeCriteria,
    ResultShape,
    SearchRequest,
    SearchResponse,
    SearchType,
    Select,
    Skip,
    SortOption,
    Take,
    TermCriteria,
    TermsCriteria,
    Where,
    and_criteria,
    not_criteria,
    or_criteria,
    ref,
    terms_criteria,
)
from docquery.protocols import (
    Connection,
    DocumentMapping,
    Materializer,
    QueryCallback,
    RetryPolicy,
    Translator,
)
from docquery.provider import SearchQueryProvider
from docquery.query import SearchQuery
from docquery.translation import QueryTranslator, Translation

try:
    __version__ = version("docquery")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

__all__ = [
    "ALWAYS_FALSE",
    "ALWAYS_TRUE",
    "Aggregate",
    "AggregateDirective",
    "AggregateOperation",
    "AndCriteria",
    "CancellationToken",
    "Connection",
    "ConstantCriteria",
    "Count",
    "Criteria",
    "DocQueryError",
    "DocumentMapping",
    "ExistsCriteria",
    "ExponentialRetryPolicy",
    "FieldRef",
    "First",
    "Hit",
    "Hits",
    "InMemoryConnection",
    "Materializer",
    "MissingArgumentError",
    "NoResponseError",
    "NoResultsError",
    "NoRetryPolicy",
    "NotCriteria",
    "OrCriteria",
    "OrderBy",
    "QueryCallback",
    "QueryCancelledError",
    "QueryExpression",
    "QueryShapeError",
    "QueryTranslator",
    "RangeCriteria",
    "ResultShape",
    "ResultTypeError",
    "RetryPolicy",
    "SearchContext",
    "SearchQuery",
    "SearchQueryProvider",
    "SearchRequest",
    "SearchResponse",
    "SearchType",
    "Select",
    "Skip",
    "SortOption",
    "Take",
    "TermCriteria",
    "TermsCriteria",
    "TransientSearchError",
    "Translation",
    "TranslationError",
    "Translator",
    "TypedDocumentMapping",
    "UnknownFieldError",
    "Where",
    "__version__",
    "and_criteria",
    "not_criteria",
    "or_criteria",
    "ref",
    "run_sync",
    "terms_criteria",
]

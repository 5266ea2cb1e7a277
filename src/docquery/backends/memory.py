"""In-memory search connection for development and testing.

Evaluates translated ``SearchRequest`` objects directly against stored
documents -- no search service or network needed.  Production users
provide their own ``Connection`` implementation for their service.
"""

from __future__ import annotations

import logging
import statistics
import threading
from collections.abc import Iterable, Mapping
from typing import Any

from typing_extensions import TypedDict

from docquery.models.criteria import (
    AndCriteria,
    ConstantCriteria,
    Criteria,
    ExistsCriteria,
    NotCriteria,
    OrCriteria,
    RangeCriteria,
    TermCriteria,
    TermsCriteria,
)
from docquery.models.expression import AggregateOperation
from docquery.models.request import AggregateDirective, SearchRequest, SearchType

logger = logging.getLogger(__name__)

_MISSING = object()


class RawHits(TypedDict):
    total: int
    max_score: float | None
    hits: list[dict[str, Any]]


class RawSearchResponse(TypedDict):
    """Wire-shaped response body, as a search service would return it."""

    took: int
    timed_out: bool
    hits: RawHits
    aggregations: dict[str, dict[str, Any]]


def lookup(document: Mapping[str, Any], field: str) -> Any:
    """Read a (possibly dotted) field from a document, or ``_MISSING``."""
    current: Any = document
    for part in field.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return _MISSING
        current = current[part]
    return current


def _candidates(value: Any) -> list[Any]:
    if value is _MISSING or value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _in_range(value: Any, criteria: RangeCriteria) -> bool:
    try:
        if criteria.gt is not None and not value > criteria.gt:
            return False
        if criteria.gte is not None and not value >= criteria.gte:
            return False
        if criteria.lt is not None and not value < criteria.lt:
            return False
        return not (criteria.lte is not None and not value <= criteria.lte)
    except TypeError:
        return False


def matches(criteria: Criteria | None, document: Mapping[str, Any]) -> bool:
    """Check whether *document* satisfies *criteria*.

    List-valued fields match when any element matches, as in most
    document search services.
    """
    if criteria is None:
        return True
    if isinstance(criteria, ConstantCriteria):
        return criteria.value
    if isinstance(criteria, AndCriteria):
        return all(matches(c, document) for c in criteria.criteria)
    if isinstance(criteria, OrCriteria):
        return any(matches(c, document) for c in criteria.criteria)
    if isinstance(criteria, NotCriteria):
        return not matches(criteria.criteria, document)
    if isinstance(criteria, ExistsCriteria):
        return bool(_candidates(lookup(document, criteria.field)))
    if isinstance(criteria, TermCriteria):
        return criteria.value in _candidates(lookup(document, criteria.field))
    if isinstance(criteria, TermsCriteria):
        values = _candidates(lookup(document, criteria.field))
        return any(v in criteria.values for v in values)
    if isinstance(criteria, RangeCriteria):
        return any(_in_range(v, criteria) for v in _candidates(lookup(document, criteria.field)))
    msg = f"Unsupported criteria type {type(criteria).__name__}"
    raise TypeError(msg)


def _aggregate(directive: AggregateDirective, documents: list[dict[str, Any]]) -> Any:
    values = [
        v for doc in documents for v in _candidates(lookup(doc, directive.field))
    ]
    if not values:
        return 0 if directive.operation is AggregateOperation.SUM else None
    if directive.operation is AggregateOperation.MIN:
        return min(values)
    if directive.operation is AggregateOperation.MAX:
        return max(values)
    if directive.operation is AggregateOperation.SUM:
        return sum(values)
    return statistics.fmean(values)


class InMemoryConnection:
    """Dict-backed connection.  Implements the ``Connection`` protocol.

    Documents are stored per document type as plain dicts.  Each search
    filters, sorts (stable, missing values last), pages and projects them
    the way a document search service would.

    Parameters:
        documents: Optional initial documents keyed by document type.
    """

    __slots__ = ("_documents", "_lock", "_search_count")

    def __init__(self, documents: Mapping[str, Iterable[Mapping[str, Any]]] | None = None) -> None:
        self._documents: dict[str, list[dict[str, Any]]] = {}
        self._lock = threading.Lock()
        self._search_count = 0
        for document_type, docs in (documents or {}).items():
            self.index(document_type, docs)

    def __repr__(self) -> str:
        counts = {name: len(docs) for name, docs in self._documents.items()}
        return f"{type(self).__name__}(documents={counts})"

    @property
    def search_count(self) -> int:
        """Number of searches served so far."""
        return self._search_count

    def index(self, document_type: str, documents: Iterable[Mapping[str, Any]]) -> None:
        """Store *documents* under *document_type*, appending to any already stored."""
        copies = [dict(doc) for doc in documents]
        with self._lock:
            self._documents.setdefault(document_type, []).extend(copies)

    def clear(self) -> None:
        with self._lock:
            self._documents.clear()

    async def search(self, request: SearchRequest) -> RawSearchResponse:
        with self._lock:
            self._search_count += 1
            stored = list(self._documents.get(request.document_type, []))

        matched = [doc for doc in stored if matches(request.filter, doc)]
        for option in reversed(request.sort):
            present = [d for d in matched if _candidates(lookup(d, option.field))]
            absent = [d for d in matched if not _candidates(lookup(d, option.field))]
            present.sort(key=lambda d, f=option.field: lookup(d, f), reverse=option.descending)
            matched = present + absent

        aggregations = {
            directive.name: {"value": _aggregate(directive, matched)}
            for directive in request.aggregations
        }

        page: list[dict[str, Any]] = []
        if request.search_type is not SearchType.COUNT:
            end = None if request.size is None else request.offset + request.size
            page = matched[request.offset:end]

        logger.debug(
            "In-memory search of '%s': %d of %d documents matched",
            request.document_type, len(matched), len(stored),
        )
        return {
            "took": 0,
            "timed_out": False,
            "hits": {
                "total": len(matched),
                "max_score": None,
                "hits": [self._to_hit(request, position, doc) for position, doc in enumerate(page)],
            },
            "aggregations": aggregations,
        }

    @staticmethod
    def _to_hit(request: SearchRequest, position: int, document: dict[str, Any]) -> dict[str, Any]:
        hit: dict[str, Any] = {
            "_index": request.document_type,
            "_id": str(document.get("id", request.offset + position)),
            "_score": 1.0,
        }
        if request.fields:
            hit["fields"] = {
                name: [value]
                for name in request.fields
                if (value := lookup(document, name)) is not _MISSING
            }
        else:
            hit["_source"] = dict(document)
        return hit

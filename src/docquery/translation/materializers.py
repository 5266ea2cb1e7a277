"""Materializers: turn a raw ``SearchResponse`` into the caller's result shape."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from docquery.exceptions import NoResultsError
from docquery.models.expression import AggregateOperation
from docquery.models.response import Hit, SearchResponse
from docquery.protocols.mapping import DocumentMapping


def _field_value(hit: Hit, field_name: str) -> Any:
    """Read a projected field from a hit, preferring ``fields`` over ``_source``.

    Search services report stored fields as single-element lists; those are
    unwrapped to the bare value.
    """
    if hit.fields is not None and field_name in hit.fields:
        value = hit.fields[field_name]
        if isinstance(value, list) and len(value) == 1:
            return value[0]
        return value
    if hit.source is not None:
        current: Any = hit.source
        for part in field_name.split("."):
            if not isinstance(current, dict):
                return None
            current = current.get(part)
        return current
    return None


@dataclass(frozen=True, slots=True)
class ListMaterializer:
    """Materialize every hit as an element of ``element_type``.

    When ``projection`` is set, each hit is reduced to the projected fields
    instead: a bare value for a single field, or a dict keyed by attribute
    name for several.  ``projection`` maps attribute names to document
    field names.
    """

    element_type: type
    mapping: DocumentMapping
    projection: tuple[tuple[str, str], ...] = ()

    def materialize_hit(self, hit: Hit) -> Any:
        if not self.projection:
            return self.mapping.materialize_document(self.element_type, hit.source or {})
        if len(self.projection) == 1:
            return _field_value(hit, self.projection[0][1])
        return {attribute: _field_value(hit, field_name) for attribute, field_name in self.projection}

    def materialize(self, response: SearchResponse) -> list[Any]:
        return [self.materialize_hit(hit) for hit in response.documents]


@dataclass(frozen=True, slots=True)
class CountMaterializer:
    """Materialize the total number of matching documents."""

    def materialize(self, response: SearchResponse) -> int:
        if response.hits is None:
            return 0
        return response.hits.total


@dataclass(frozen=True, slots=True)
class AggregateMaterializer:
    """Materialize one aggregate statistic reported under ``name``.

    A missing statistic (no matching documents) becomes ``None``, except
    for sums, which are 0 over an empty set.
    """

    name: str
    operation: AggregateOperation

    def materialize(self, response: SearchResponse) -> Any:
        value = response.aggregations.get(self.name, {}).get("value")
        if value is None and self.operation is AggregateOperation.SUM:
            return 0
        return value


@dataclass(frozen=True, slots=True)
class FirstMaterializer:
    """Materialize the first element produced by ``inner``."""

    inner: ListMaterializer
    or_default: bool = False

    def materialize(self, response: SearchResponse) -> Any:
        hits = response.documents
        if hits:
            return self.inner.materialize_hit(hits[0])
        if self.or_default:
            return None
        msg = f"No {self.inner.element_type.__name__} matched the query"
        raise NoResultsError(msg)

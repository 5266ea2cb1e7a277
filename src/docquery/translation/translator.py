"""Translate query expressions into search requests plus materializers."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from docquery.exceptions import TranslationError
from docquery.models.criteria import ALWAYS_TRUE, Criteria, and_criteria, rename_fields
from docquery.models.expression import (
    Aggregate,
    Count,
    First,
    OrderBy,
    QueryExpression,
    Select,
    Skip,
    Take,
    Where,
)
from docquery.models.request import AggregateDirective, SearchRequest, SearchType, SortOption
from docquery.protocols.mapping import DocumentMapping
from docquery.protocols.materializer import Materializer
from docquery.translation.materializers import (
    AggregateMaterializer,
    CountMaterializer,
    FirstMaterializer,
    ListMaterializer,
)

logger = logging.getLogger(__name__)

AGGREGATE_NAME = "result"


@dataclass(frozen=True, slots=True)
class Translation:
    """The outcome of translating one expression.

    Produced fresh for every execution; neither half is reused.
    """

    search_request: SearchRequest
    materializer: Materializer


class QueryTranslator:
    """Default translator.  Implements the ``Translator`` protocol.

    Walks the expression's operations in order, accumulating filters,
    paging, sorting and projection, and picks a materializer from the
    terminal operation (or a list materializer when there is none).
    """

    __slots__ = ()

    def translate(self, mapping: DocumentMapping, expression: QueryExpression) -> Translation:
        element_type = expression.element_type

        def field_name(attribute: str) -> str:
            return mapping.get_field_name(element_type, attribute)

        criteria: list[Criteria] = []
        offset = 0
        size: int | None = None
        sort: list[SortOption] = []
        projection: tuple[tuple[str, str], ...] = ()
        aggregations: tuple[AggregateDirective, ...] = ()
        search_type = SearchType.QUERY_THEN_FETCH
        materializer: Materializer | None = None

        for op in expression.operations:
            if isinstance(op, Where):
                criteria.append(rename_fields(op.criteria, field_name))
            elif isinstance(op, Select):
                projection = tuple((attribute, field_name(attribute)) for attribute in op.fields)
            elif isinstance(op, OrderBy):
                sort.append(SortOption(field=field_name(op.field), descending=op.descending))
            elif isinstance(op, Skip):
                offset += op.count
                if size is not None:
                    size = max(0, size - op.count)
            elif isinstance(op, Take):
                size = op.count if size is None else min(size, op.count)
            elif isinstance(op, Count):
                search_type = SearchType.COUNT
                size = 0
                materializer = CountMaterializer()
            elif isinstance(op, Aggregate):
                target = self._aggregate_field(op, projection, field_name)
                aggregations = (
                    AggregateDirective(name=AGGREGATE_NAME, operation=op.operation, field=target),
                )
                size = 0
                materializer = AggregateMaterializer(name=AGGREGATE_NAME, operation=op.operation)
            elif isinstance(op, First):
                size = 1 if size is None else min(size, 1)
                materializer = FirstMaterializer(
                    ListMaterializer(element_type, mapping, projection), or_default=op.or_default,
                )
            else:
                msg = f"Unsupported query operation {type(op).__name__}"
                raise TranslationError(msg)

        if materializer is None:
            materializer = ListMaterializer(element_type, mapping, projection)

        combined = and_criteria(*criteria)
        request = SearchRequest(
            document_type=mapping.get_document_type(element_type),
            filter=None if combined == ALWAYS_TRUE else combined,
            offset=offset,
            size=size,
            fields=tuple(name for _, name in projection),
            sort=tuple(sort),
            aggregations=aggregations,
            search_type=search_type,
        )
        logger.debug("Translated %d operations into %r", len(expression.operations), request)
        return Translation(search_request=request, materializer=materializer)

    @staticmethod
    def _aggregate_field(
        op: Aggregate,
        projection: tuple[tuple[str, str], ...],
        field_name: Callable[[str], str],
    ) -> str:
        if op.field is not None:
            return field_name(op.field)
        if len(projection) == 1:
            return projection[0][1]
        msg = f"Aggregate '{op.operation}' needs a field or a single-field projection"
        raise TranslationError(msg)


_default_translator = QueryTranslator()


def translate(mapping: DocumentMapping, expression: QueryExpression) -> Translation:
    """Translate *expression* with the default ``QueryTranslator``."""
    return _default_translator.translate(mapping, expression)

"""Tests for docquery.translation.translator and materializers."""

from __future__ import annotations

import pytest

from docquery.exceptions import NoResultsError, TranslationError, UnknownFieldError
from docquery.mapping.typed import TypedDocumentMapping
from docquery.models.criteria import ALWAYS_FALSE, TermCriteria, ref, terms_criteria
from docquery.models.expression import (
    Aggregate,
    AggregateOperation,
    Count,
    First,
    OrderBy,
    QueryExpression,
    Select,
    Skip,
    Take,
    Where,
)
from docquery.models.request import AggregateDirective, SearchType, SortOption
from docquery.models.response import SearchResponse
from docquery.protocols.translator import Translator
from docquery.translation.materializers import (
    AggregateMaterializer,
    CountMaterializer,
    FirstMaterializer,
    ListMaterializer,
)
from docquery.translation.translator import QueryTranslator, translate
from tests.conftest import ROBOT_DOCUMENTS, Robot, make_hits_response

MAPPING = TypedDocumentMapping()


def _translate(*operations: object):  # noqa: ANN202
    expression = QueryExpression(Robot)
    for op in operations:
        expression = expression.then(op)  # type: ignore[arg-type]
    return translate(MAPPING, expression)


# ---------------------------------------------------------------------------
# Request construction
# ---------------------------------------------------------------------------


class TestQueryTranslator:
    """How expressions become search requests."""

    def test_protocol_compliance(self) -> None:
        assert isinstance(QueryTranslator(), Translator)

    def test_bare_expression(self) -> None:
        translation = _translate()
        request = translation.search_request
        assert request.document_type == "robots"
        assert request.filter is None
        assert request.size is None
        assert isinstance(translation.materializer, ListMaterializer)

    def test_where_renames_fields(self) -> None:
        request = _translate(Where(ref("serial_number") == "MRV-1")).search_request
        assert request.filter == TermCriteria("serialNumber", "MRV-1")

    def test_unknown_field_fails_translation(self) -> None:
        with pytest.raises(UnknownFieldError):
            _translate(Where(ref("colour") == "red"))

    def test_impossible_filter_becomes_always_false(self) -> None:
        request = _translate(
            Where(ref("zone") == 1),
            Where(terms_criteria("name", [])),
        ).search_request
        assert request.filter == ALWAYS_FALSE

    def test_order_by_appends_sort_keys(self) -> None:
        request = _translate(OrderBy("zone"), OrderBy("cost", descending=True)).search_request
        assert request.sort == (
            SortOption(field="zone"),
            SortOption(field="cost", descending=True),
        )

    def test_skip_then_take(self) -> None:
        request = _translate(Skip(2), Take(3)).search_request
        assert (request.offset, request.size) == (2, 3)

    def test_take_then_skip_shrinks_size(self) -> None:
        request = _translate(Take(3), Skip(2)).search_request
        assert (request.offset, request.size) == (2, 1)

    def test_take_never_grows_size(self) -> None:
        request = _translate(Take(2), Take(10)).search_request
        assert request.size == 2

    def test_select_requests_mapped_fields(self) -> None:
        request = _translate(Select(("name", "serial_number"))).search_request
        assert request.fields == ("name", "serialNumber")

    def test_count(self) -> None:
        translation = _translate(Where(ref("zone") == 3), Count())
        assert translation.search_request.search_type is SearchType.COUNT
        assert translation.search_request.size == 0
        assert isinstance(translation.materializer, CountMaterializer)

    def test_aggregate_on_field(self) -> None:
        translation = _translate(Aggregate(AggregateOperation.MAX, "cost"))
        assert translation.search_request.aggregations == (
            AggregateDirective(name="result", operation=AggregateOperation.MAX, field="cost"),
        )
        assert translation.search_request.size == 0
        assert isinstance(translation.materializer, AggregateMaterializer)

    def test_aggregate_on_single_projection(self) -> None:
        translation = _translate(Select(("serial_number",), str), Aggregate(AggregateOperation.MIN))
        assert translation.search_request.aggregations[0].field == "serialNumber"

    def test_aggregate_without_field_needs_projection(self) -> None:
        with pytest.raises(TranslationError, match="needs a field"):
            _translate(Aggregate(AggregateOperation.SUM))

    def test_first_limits_size(self) -> None:
        translation = _translate(Skip(1), First())
        assert translation.search_request.size == 1
        assert translation.search_request.offset == 1
        assert isinstance(translation.materializer, FirstMaterializer)

    def test_each_translation_is_fresh(self) -> None:
        expression = QueryExpression(Robot)
        assert translate(MAPPING, expression) is not translate(MAPPING, expression)


# ---------------------------------------------------------------------------
# Materializers
# ---------------------------------------------------------------------------


class TestMaterializers:
    """Turning responses into results."""

    def test_list_materializer_builds_elements(self) -> None:
        response = SearchResponse.model_validate(make_hits_response(ROBOT_DOCUMENTS[:2]))
        robots = ListMaterializer(Robot, MAPPING).materialize(response)
        assert [r.name for r in robots] == ["Marvin", "Bender"]
        assert robots[0].serial_number == "MRV-1"

    def test_list_materializer_accepts_empty_response(self) -> None:
        assert ListMaterializer(Robot, MAPPING).materialize(SearchResponse()) == []

    def test_single_field_projection_prefers_fields(self) -> None:
        response = SearchResponse.model_validate({
            "hits": {"total": 1, "hits": [{"fields": {"name": ["Gort"]}, "_source": {"name": "x"}}]},
        })
        materializer = ListMaterializer(Robot, MAPPING, (("name", "name"),))
        assert materializer.materialize(response) == ["Gort"]

    def test_multi_field_projection_reads_source(self) -> None:
        response = SearchResponse.model_validate(make_hits_response([ROBOT_DOCUMENTS[0]]))
        materializer = ListMaterializer(
            Robot, MAPPING, (("name", "name"), ("serial_number", "serialNumber")),
        )
        assert materializer.materialize(response) == [{"name": "Marvin", "serial_number": "MRV-1"}]

    def test_count_of_empty_response_is_zero(self) -> None:
        assert CountMaterializer().materialize(SearchResponse()) == 0

    def test_count_reads_total(self) -> None:
        response = SearchResponse.model_validate(make_hits_response([], total=42))
        assert CountMaterializer().materialize(response) == 42

    def test_aggregate_reads_named_value(self) -> None:
        response = SearchResponse(aggregations={"result": {"value": 20.0}})
        assert AggregateMaterializer("result", AggregateOperation.MAX).materialize(response) == 20.0

    def test_missing_aggregate(self) -> None:
        assert AggregateMaterializer("result", AggregateOperation.MAX).materialize(SearchResponse()) is None
        assert AggregateMaterializer("result", AggregateOperation.SUM).materialize(SearchResponse()) == 0

    def test_first_on_empty_response(self) -> None:
        inner = ListMaterializer(Robot, MAPPING)
        assert FirstMaterializer(inner, or_default=True).materialize(SearchResponse()) is None
        with pytest.raises(NoResultsError, match="No Robot matched"):
            FirstMaterializer(inner).materialize(SearchResponse())

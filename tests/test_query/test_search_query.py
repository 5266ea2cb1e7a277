"""Tests for docquery.query.SearchQuery and docquery.context.SearchContext.

Each async terminal is checked against its blocking counterpart over the
same robot inventory, and the builders are exercised end to end against
the in-memory backend.
"""

from __future__ import annotations

import pytest
from pydantic import BaseModel

from docquery.backends.memory import InMemoryConnection
from docquery.cancellation import CancellationToken
from docquery.context import SearchContext
from docquery.exceptions import (
    MissingArgumentError,
    NoResultsError,
    QueryCancelledError,
    QueryShapeError,
    UnknownFieldError,
)
from docquery.execution.retry import ExponentialRetryPolicy, NoRetryPolicy
from docquery.mapping.typed import TypedDocumentMapping
from docquery.models.criteria import ref
from docquery.models.expression import Count, QueryExpression, Where
from docquery.query import SearchQuery
from tests.conftest import ROBOT_DOCUMENTS, Robot


class Ticket(BaseModel):
    id: str
    cancellation: str


@pytest.fixture
def context() -> SearchContext:
    return SearchContext(
        InMemoryConnection({"robots": ROBOT_DOCUMENTS}),
        retry_policy=NoRetryPolicy(),
    )


# ---------------------------------------------------------------------------
# SearchContext
# ---------------------------------------------------------------------------


class TestSearchContext:
    def test_defaults(self) -> None:
        context = SearchContext(InMemoryConnection())
        assert isinstance(context.provider.mapping, TypedDocumentMapping)
        assert isinstance(context.provider.retry_policy, ExponentialRetryPolicy)
        assert context.provider.log.name == "docquery"

    def test_connection_required(self) -> None:
        with pytest.raises(MissingArgumentError, match="'connection'"):
            SearchContext(None)  # type: ignore[arg-type]

    def test_query_is_typed(self, context: SearchContext) -> None:
        query = context.query(Robot)
        assert isinstance(query, SearchQuery)
        assert query.element_type is Robot
        assert query.expression == QueryExpression(Robot)


# ---------------------------------------------------------------------------
# Async terminals agree with blocking terminals
# ---------------------------------------------------------------------------


class TestAsyncTerminals:
    """Each ``a``-prefixed terminal returns what its blocking form returns."""

    @pytest.mark.asyncio
    async def test_count(self, context: SearchContext) -> None:
        expected = context.query(Robot).count()
        actual = await context.query(Robot).acount()
        assert actual == expected == 5

    @pytest.mark.asyncio
    async def test_count_with_predicate(self, context: SearchContext) -> None:
        expected = context.query(Robot).count(ref("zone") == 3)
        actual = await context.query(Robot).acount(ref("zone") == 3)
        assert actual == expected == 2

    @pytest.mark.asyncio
    async def test_count_with_terms(self, context: SearchContext) -> None:
        assert await context.query(Robot).acount(zone=1) == context.query(Robot).count(zone=1) == 2

    @pytest.mark.asyncio
    async def test_min_of_projection(self, context: SearchContext) -> None:
        expected = context.query(Robot).select("cost").min()
        actual = await context.query(Robot).select("cost").amin()
        assert actual == expected == 1.75

    @pytest.mark.asyncio
    async def test_min_of_field(self, context: SearchContext) -> None:
        expected = context.query(Robot).min("cost")
        actual = await context.query(Robot).amin("cost")
        assert actual == expected == 1.75

    @pytest.mark.asyncio
    async def test_max_of_projection(self, context: SearchContext) -> None:
        expected = context.query(Robot).select("cost").max()
        actual = await context.query(Robot).select("cost").amax()
        assert actual == expected == 20.0

    @pytest.mark.asyncio
    async def test_max_of_field(self, context: SearchContext) -> None:
        expected = context.query(Robot).max("cost")
        actual = await context.query(Robot).amax("cost")
        assert actual == expected == 20.0

    @pytest.mark.asyncio
    async def test_sum_and_average(self, context: SearchContext) -> None:
        assert await context.query(Robot).asum("zone") == context.query(Robot).sum("zone") == 10
        assert await context.query(Robot).aaverage("zone") == context.query(Robot).average("zone") == 2.0

    @pytest.mark.asyncio
    async def test_to_list(self, context: SearchContext) -> None:
        query = context.query(Robot).order_by("name")
        assert await query.ato_list() == query.to_list()

    @pytest.mark.asyncio
    async def test_first(self, context: SearchContext) -> None:
        query = context.query(Robot).order_by_descending("cost")
        assert (await query.afirst()).name == query.first().name == "Kryten"
        assert await query.afirst_or_default(zone=9) is None

    @pytest.mark.asyncio
    async def test_cancelled_token(self, context: SearchContext) -> None:
        token = CancellationToken()
        token.cancel()
        with pytest.raises(QueryCancelledError):
            await context.query(Robot).ato_list(cancellation=token)

    @pytest.mark.asyncio
    async def test_cancellation_keyword_is_not_a_term(self) -> None:
        context = SearchContext(
            InMemoryConnection({"tickets": [
                {"id": "t1", "cancellation": "refunded"},
                {"id": "t2", "cancellation": "none"},
            ]}),
            retry_policy=NoRetryPolicy(),
        )
        query = context.query(Ticket)
        assert await query.acount(cancellation=CancellationToken()) == 2
        assert await query.acount(ref("cancellation") == "refunded") == 1
        first = await query.afirst(ref("cancellation") == "none", cancellation=CancellationToken())
        assert first.id == "t2"


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


class TestBuilders:
    """Composition of query operations, executed against the in-memory backend."""

    def test_builders_are_immutable(self, context: SearchContext) -> None:
        base = context.query(Robot)
        filtered = base.where(zone=3)
        assert base.expression.operations == ()
        assert filtered.expression.operations == (Where(ref("zone") == 3),)

    def test_where_combines_criteria_and_terms(self, context: SearchContext) -> None:
        names = [r.name for r in context.query(Robot).where(ref("cost") > 5, zone=3)]
        assert sorted(names) == ["Kryten", "Robby"]

    def test_where_on_camel_cased_field(self, context: SearchContext) -> None:
        robot = context.query(Robot).where(serial_number="BND-22").first()
        assert robot.name == "Bender"

    def test_order_skip_take(self, context: SearchContext) -> None:
        names = [r.name for r in context.query(Robot).order_by("cost").skip(1).take(2)]
        assert names == ["Bender", "Robby"]

    def test_order_by_with_tie_breaker(self, context: SearchContext) -> None:
        robots = context.query(Robot).order_by("zone").order_by_descending("cost").to_list()
        assert [r.id for r in robots] == ["r1", "r5", "r2", "r4", "r3"]

    def test_select_single_field(self, context: SearchContext) -> None:
        query = context.query(Robot).where(zone=1).order_by("name").select("name")
        assert query.element_type is str
        assert query.to_list() == ["Gort", "Marvin"]

    def test_select_many_fields(self, context: SearchContext) -> None:
        rows = context.query(Robot).where(zone=2).select("name", "serial_number").to_list()
        assert rows == [{"name": "Bender", "serial_number": "BND-22"}]

    def test_first_without_match(self, context: SearchContext) -> None:
        with pytest.raises(NoResultsError):
            context.query(Robot).first(zone=42)

    def test_aggregate_over_nothing(self, context: SearchContext) -> None:
        assert context.query(Robot).where(zone=42).max("cost") is None
        assert context.query(Robot).where(zone=42).sum("cost") == 0

    def test_unknown_attribute(self, context: SearchContext) -> None:
        with pytest.raises(UnknownFieldError):
            context.query(Robot).where(colour="red").to_list()

    def test_scalar_expression_is_not_a_query(self, context: SearchContext) -> None:
        counted = QueryExpression(Robot).then(Count())
        with pytest.raises(QueryShapeError):
            SearchQuery(context.provider, counted)

    def test_impossible_filter_never_searches(self) -> None:
        connection = InMemoryConnection({"robots": ROBOT_DOCUMENTS})
        context = SearchContext(connection)
        assert context.query(Robot).where(ref("zone").isin([])).to_list() == []
        assert connection.search_count == 0

    def test_repr(self, context: SearchContext) -> None:
        assert repr(context.query(Robot).where(zone=1).take(2)) == "SearchQuery[Robot](Where, Take)"

"""SearchQuery -- the composable, typed query surface."""

from __future__ import annotations

import typing
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from pydantic import BaseModel

from docquery._argument import ensure_not_none
from docquery.exceptions import QueryShapeError
from docquery.models.criteria import Criteria, TermCriteria, and_criteria
from docquery.models.expression import (
    Aggregate,
    AggregateOperation,
    Count,
    First,
    OrderBy,
    QueryExpression,
    QueryOperation,
    Select,
    Skip,
    Take,
    Where,
)

if TYPE_CHECKING:
    from docquery.cancellation import CancellationToken
    from docquery.provider import SearchQueryProvider

T = TypeVar("T")


def _attribute_type(element_type: type, attribute: str) -> type:
    """Best-effort static type of *attribute*, falling back to ``object``."""
    annotation: Any = None
    if isinstance(element_type, type) and issubclass(element_type, BaseModel):
        info = element_type.model_fields.get(attribute)
        annotation = info.annotation if info is not None else None
    else:
        try:
            annotation = typing.get_type_hints(element_type).get(attribute)
        except (NameError, TypeError):
            annotation = None
    return annotation if isinstance(annotation, type) else object


def _build_criteria(criteria: tuple[Criteria, ...], terms: dict[str, Any]) -> Criteria:
    return and_criteria(*criteria, *(TermCriteria(name, value) for name, value in terms.items()))


class SearchQuery(Generic[T]):
    """An immutable query over documents of type ``T``.

    Builder methods return new queries; terminal methods execute through
    the provider.  Blocking terminals (``to_list``, ``count``, ``min`` ...)
    and their ``a``-prefixed async counterparts return equal results.

    ``cancellation`` is a reserved keyword on the async terminals: it never
    becomes a term filter.  Filter an attribute of that name with
    ``ref("cancellation")`` instead.

    Usage::

        robots = context.query(Robot).where(ref("cost") > 10).order_by("name").take(5)
        for robot in robots:
            ...
        busy = await context.query(Robot).acount(zone=3)
    """

    def __init__(
        self,
        provider: SearchQueryProvider,
        expression: QueryExpression | None = None,
        element_type: type[T] | None = None,
    ) -> None:
        self._provider = ensure_not_none("provider", provider)
        if expression is None:
            expression = QueryExpression(ensure_not_none("element_type", element_type))
        produced = expression.sequence_element_type()
        if element_type is None:
            element_type = produced
        elif not issubclass(produced, element_type):
            msg = f"Expression yields {produced.__name__}, not {element_type.__name__}"
            raise QueryShapeError(msg)
        self._expression = expression
        self._element_type: type[T] = element_type

    @property
    def provider(self) -> SearchQueryProvider:
        return self._provider

    @property
    def expression(self) -> QueryExpression:
        return self._expression

    @property
    def element_type(self) -> type[T]:
        return self._element_type

    def __repr__(self) -> str:
        ops = ", ".join(type(op).__name__ for op in self._expression.operations)
        return f"SearchQuery[{self._element_type.__name__}]({ops})"

    # -- Builders --

    def _compose(self, operation: QueryOperation) -> SearchQuery[T]:
        return self._provider.create_typed_query(
            self._element_type, self._expression.then(operation),
        )

    def where(self, *criteria: Criteria, **terms: Any) -> SearchQuery[T]:
        """Keep elements matching all *criteria* and all ``attribute=value`` *terms*."""
        return self._compose(Where(_build_criteria(criteria, terms)))

    def select(self, *fields: str) -> SearchQuery[Any]:
        """Project onto one attribute (bare values) or several (dicts)."""
        result_type = _attribute_type(self._element_type, fields[0]) if len(fields) == 1 else dict
        expression = self._expression.then(Select(tuple(fields), result_type))
        return self._provider.create_query(expression)

    def order_by(self, field: str) -> SearchQuery[T]:
        """Sort ascending by *field*; later calls add tie-breaking keys."""
        return self._compose(OrderBy(field))

    def order_by_descending(self, field: str) -> SearchQuery[T]:
        return self._compose(OrderBy(field, descending=True))

    def skip(self, count: int) -> SearchQuery[T]:
        return self._compose(Skip(count))

    def take(self, count: int) -> SearchQuery[T]:
        return self._compose(Take(count))

    # -- Terminal expressions --

    def _filtered(self, criteria: tuple[Criteria, ...], terms: dict[str, Any]) -> QueryExpression:
        if not criteria and not terms:
            return self._expression
        return self._expression.then(Where(_build_criteria(criteria, terms)))

    def _aggregate(self, operation: AggregateOperation, field: str | None) -> QueryExpression:
        return self._expression.then(Aggregate(operation, field))

    def _first(self, or_default: bool, criteria: tuple[Criteria, ...], terms: dict[str, Any]) -> QueryExpression:
        return self._filtered(criteria, terms).then(First(or_default=or_default))

    # -- Blocking terminals --

    def to_list(self) -> list[T]:
        return self._provider.execute_as(list, self._expression)

    def __iter__(self) -> Iterator[T]:
        return iter(self.to_list())

    def count(self, *criteria: Criteria, **terms: Any) -> int:
        return self._provider.execute_as(int, self._filtered(criteria, terms).then(Count()))

    def min(self, field: str | None = None) -> Any:
        return self._provider.execute(self._aggregate(AggregateOperation.MIN, field))

    def max(self, field: str | None = None) -> Any:
        return self._provider.execute(self._aggregate(AggregateOperation.MAX, field))

    def sum(self, field: str | None = None) -> Any:
        return self._provider.execute(self._aggregate(AggregateOperation.SUM, field))

    def average(self, field: str | None = None) -> Any:
        return self._provider.execute(self._aggregate(AggregateOperation.AVERAGE, field))

    def first(self, *criteria: Criteria, **terms: Any) -> T:
        """Return the first match.  Raises ``NoResultsError`` when nothing matches."""
        return self._provider.execute(self._first(False, criteria, terms))

    def first_or_default(self, *criteria: Criteria, **terms: Any) -> T | None:
        return self._provider.execute(self._first(True, criteria, terms))

    # -- Async terminals --

    async def ato_list(self, cancellation: CancellationToken | None = None) -> list[T]:
        return await self._provider.aexecute_as(list, self._expression, cancellation)

    async def acount(
        self,
        *criteria: Criteria,
        cancellation: CancellationToken | None = None,
        **terms: Any,
    ) -> int:
        expression = self._filtered(criteria, terms).then(Count())
        return await self._provider.aexecute_as(int, expression, cancellation)

    async def amin(self, field: str | None = None, cancellation: CancellationToken | None = None) -> Any:
        return await self._provider.aexecute(self._aggregate(AggregateOperation.MIN, field), cancellation)

    async def amax(self, field: str | None = None, cancellation: CancellationToken | None = None) -> Any:
        return await self._provider.aexecute(self._aggregate(AggregateOperation.MAX, field), cancellation)

    async def asum(self, field: str | None = None, cancellation: CancellationToken | None = None) -> Any:
        return await self._provider.aexecute(self._aggregate(AggregateOperation.SUM, field), cancellation)

    async def aaverage(
        self, field: str | None = None, cancellation: CancellationToken | None = None,
    ) -> Any:
        expression = self._aggregate(AggregateOperation.AVERAGE, field)
        return await self._provider.aexecute(expression, cancellation)

    async def afirst(
        self,
        *criteria: Criteria,
        cancellation: CancellationToken | None = None,
        **terms: Any,
    ) -> T:
        return await self._provider.aexecute(self._first(False, criteria, terms), cancellation)

    async def afirst_or_default(
        self,
        *criteria: Criteria,
        cancellation: CancellationToken | None = None,
        **terms: Any,
    ) -> T | None:
        return await self._provider.aexecute(self._first(True, criteria, terms), cancellation)

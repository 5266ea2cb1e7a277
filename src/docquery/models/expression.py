"""Composable, immutable query descriptions.

A ``QueryExpression`` records the element type being queried and the
ordered operations applied to it.  It is consumed read-only by the
translator; nothing here knows about the search service.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from docquery.exceptions import QueryShapeError
from docquery.models.criteria import Criteria


class ResultShape(StrEnum):
    """Whether an expression yields a sequence of elements or a single value."""

    SEQUENCE = "sequence"
    SCALAR = "scalar"


class AggregateOperation(StrEnum):
    MIN = "min"
    MAX = "max"
    SUM = "sum"
    AVERAGE = "average"


@dataclass(frozen=True, slots=True)
class Where:
    criteria: Criteria


@dataclass(frozen=True, slots=True)
class Select:
    """Project each element onto one or more attributes.

    A single-field projection yields bare values of ``result_type``;
    several fields yield dicts keyed by attribute name.
    """

    fields: tuple[str, ...]
    result_type: type = object

    def __post_init__(self) -> None:
        if not self.fields:
            msg = "Select requires at least one field"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class OrderBy:
    field: str
    descending: bool = False


@dataclass(frozen=True, slots=True)
class Skip:
    count: int

    def __post_init__(self) -> None:
        if self.count < 0:
            msg = f"Skip count must be non-negative, got {self.count}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class Take:
    count: int

    def __post_init__(self) -> None:
        if self.count < 0:
            msg = f"Take count must be non-negative, got {self.count}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class Count:
    pass


@dataclass(frozen=True, slots=True)
class Aggregate:
    """Reduce the sequence to a single statistic over ``field``.

    ``field`` may be omitted when the expression already projects exactly
    one field.
    """

    operation: AggregateOperation
    field: str | None = None


@dataclass(frozen=True, slots=True)
class First:
    or_default: bool = False


QueryOperation = Where | Select | OrderBy | Skip | Take | Count | Aggregate | First

TERMINAL_OPERATIONS: tuple[type, ...] = (Count, Aggregate, First)


@dataclass(frozen=True, slots=True)
class QueryExpression:
    """An immutable description of what to fetch.

    Usage::

        expr = QueryExpression(Robot).then(Where(ref("zone") == 3)).then(Count())
        expr.result_shape  # ResultShape.SCALAR
    """

    element_type: type
    operations: tuple[QueryOperation, ...] = ()

    @property
    def result_shape(self) -> ResultShape:
        if self.operations and isinstance(self.operations[-1], TERMINAL_OPERATIONS):
            return ResultShape.SCALAR
        return ResultShape.SEQUENCE

    def then(self, operation: QueryOperation) -> QueryExpression:
        """Return a new expression with *operation* appended."""
        if self.result_shape is ResultShape.SCALAR:
            last = type(self.operations[-1]).__name__
            msg = f"Cannot apply {type(operation).__name__} after terminal operation {last}"
            raise QueryShapeError(msg)
        return QueryExpression(self.element_type, (*self.operations, operation))

    def sequence_element_type(self) -> type:
        """Return the type of the elements this expression yields.

        Raises:
            QueryShapeError: If the expression yields a single value.
        """
        if self.result_shape is ResultShape.SCALAR:
            msg = (
                f"Expression over {self.element_type.__name__} ends in "
                f"{type(self.operations[-1]).__name__} and is not a sequence"
            )
            raise QueryShapeError(msg)
        element_type = self.element_type
        for op in self.operations:
            if isinstance(op, Select):
                element_type = op.result_type if len(op.fields) == 1 else dict
        return element_type

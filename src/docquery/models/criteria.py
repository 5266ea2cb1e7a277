"""Filter criteria tree used by query expressions and search requests.

Criteria are immutable values.  The combinators (``and_criteria``,
``or_criteria``, ``not_criteria``) simplify as they build, so a filter that
can never match collapses to the ``ALWAYS_FALSE`` sentinel and the provider
can answer it without contacting the search service.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from typing import Any

__all__ = [
    "ALWAYS_FALSE",
    "ALWAYS_TRUE",
    "AndCriteria",
    "ConstantCriteria",
    "Criteria",
    "ExistsCriteria",
    "FieldRef",
    "NotCriteria",
    "OrCriteria",
    "RangeCriteria",
    "TermCriteria",
    "TermsCriteria",
    "and_criteria",
    "not_criteria",
    "or_criteria",
    "ref",
    "rename_fields",
    "terms_criteria",
]


@dataclass(frozen=True, slots=True)
class Criteria:
    """Base class for every node of the criteria tree."""

    def __and__(self, other: Criteria) -> Criteria:
        return and_criteria(self, other)

    def __or__(self, other: Criteria) -> Criteria:
        return or_criteria(self, other)

    def __invert__(self) -> Criteria:
        return not_criteria(self)


@dataclass(frozen=True, slots=True)
class ConstantCriteria(Criteria):
    """A criteria that matches everything (``True``) or nothing (``False``)."""

    value: bool


ALWAYS_TRUE = ConstantCriteria(True)
ALWAYS_FALSE = ConstantCriteria(False)


@dataclass(frozen=True, slots=True)
class TermCriteria(Criteria):
    """Field equals a single value."""

    field: str
    value: Any


@dataclass(frozen=True, slots=True)
class TermsCriteria(Criteria):
    """Field equals any one of several values."""

    field: str
    values: tuple[Any, ...]


@dataclass(frozen=True, slots=True)
class RangeCriteria(Criteria):
    """Field falls within the given bounds.  ``None`` leaves a side open."""

    field: str
    gt: Any = None
    gte: Any = None
    lt: Any = None
    lte: Any = None


@dataclass(frozen=True, slots=True)
class ExistsCriteria(Criteria):
    """Field is present and not null."""

    field: str


@dataclass(frozen=True, slots=True)
class AndCriteria(Criteria):
    criteria: tuple[Criteria, ...]


@dataclass(frozen=True, slots=True)
class OrCriteria(Criteria):
    criteria: tuple[Criteria, ...]


@dataclass(frozen=True, slots=True)
class NotCriteria(Criteria):
    criteria: Criteria


def and_criteria(*criteria: Criteria) -> Criteria:
    """Combine criteria so that all must match.

    ``ALWAYS_TRUE`` operands are dropped, any ``ALWAYS_FALSE`` operand makes
    the whole result ``ALWAYS_FALSE``, and nested ands are flattened.
    """
    flattened: list[Criteria] = []
    for c in criteria:
        if c == ALWAYS_FALSE:
            return ALWAYS_FALSE
        if c == ALWAYS_TRUE:
            continue
        if isinstance(c, AndCriteria):
            flattened.extend(c.criteria)
        else:
            flattened.append(c)
    if not flattened:
        return ALWAYS_TRUE
    if len(flattened) == 1:
        return flattened[0]
    return AndCriteria(tuple(flattened))


def or_criteria(*criteria: Criteria) -> Criteria:
    """Combine criteria so that any may match.

    ``ALWAYS_FALSE`` operands are dropped, any ``ALWAYS_TRUE`` operand makes
    the whole result ``ALWAYS_TRUE``, and nested ors are flattened.
    """
    flattened: list[Criteria] = []
    for c in criteria:
        if c == ALWAYS_TRUE:
            return ALWAYS_TRUE
        if c == ALWAYS_FALSE:
            continue
        if isinstance(c, OrCriteria):
            flattened.extend(c.criteria)
        else:
            flattened.append(c)
    if not flattened:
        return ALWAYS_FALSE
    if len(flattened) == 1:
        return flattened[0]
    return OrCriteria(tuple(flattened))


def not_criteria(criteria: Criteria) -> Criteria:
    """Negate a criteria, folding constants and double negation."""
    if isinstance(criteria, ConstantCriteria):
        return ConstantCriteria(not criteria.value)
    if isinstance(criteria, NotCriteria):
        return criteria.criteria
    return NotCriteria(criteria)


def terms_criteria(field: str, values: Iterable[Any]) -> Criteria:
    """Match any of *values*; an empty set of values can never match."""
    unique = tuple(dict.fromkeys(values))
    if not unique:
        return ALWAYS_FALSE
    if len(unique) == 1:
        return TermCriteria(field, unique[0])
    return TermsCriteria(field, unique)


def rename_fields(criteria: Criteria, rename: Callable[[str], str]) -> Criteria:
    """Return a copy of *criteria* with every field name passed through *rename*."""
    if isinstance(criteria, AndCriteria | OrCriteria):
        return replace(criteria, criteria=tuple(rename_fields(c, rename) for c in criteria.criteria))
    if isinstance(criteria, NotCriteria):
        return NotCriteria(rename_fields(criteria.criteria, rename))
    if isinstance(criteria, TermCriteria | TermsCriteria | RangeCriteria | ExistsCriteria):
        return replace(criteria, field=rename(criteria.field))
    return criteria


class FieldRef:
    """Builds criteria against a named attribute with Python operators.

    Usage::

        query.where(ref("cost") > 10, ref("zone").isin([1, 3]))
    """

    __slots__ = ("_name",)

    def __init__(self, name: str) -> None:
        if not name:
            msg = "field name must be a non-empty string"
            raise ValueError(msg)
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"ref({self._name!r})"

    def __eq__(self, value: object) -> Criteria:  # type: ignore[override]
        return TermCriteria(self._name, value)

    def __ne__(self, value: object) -> Criteria:  # type: ignore[override]
        return NotCriteria(TermCriteria(self._name, value))

    def __gt__(self, value: Any) -> Criteria:
        return RangeCriteria(self._name, gt=value)

    def __ge__(self, value: Any) -> Criteria:
        return RangeCriteria(self._name, gte=value)

    def __lt__(self, value: Any) -> Criteria:
        return RangeCriteria(self._name, lt=value)

    def __le__(self, value: Any) -> Criteria:
        return RangeCriteria(self._name, lte=value)

    __hash__ = None  # type: ignore[assignment]

    def isin(self, values: Iterable[Any]) -> Criteria:
        return terms_criteria(self._name, values)

    def between(self, low: Any, high: Any) -> Criteria:
        """Inclusive range on both ends."""
        return RangeCriteria(self._name, gte=low, lte=high)

    def exists(self) -> Criteria:
        return ExistsCriteria(self._name)

    def missing(self) -> Criteria:
        return NotCriteria(ExistsCriteria(self._name))


def ref(name: str) -> FieldRef:
    """Reference an attribute of the queried element type."""
    return FieldRef(name)

"""Query, request and response models."""

from .criteria import (
    ALWAYS_FALSE,
    ALWAYS_TRUE,
    AndCriteria,
    ConstantCriteria,
    Criteria,
    ExistsCriteria,
    FieldRef,
    NotCriteria,
    OrCriteria,
    RangeCriteria,
    TermCriteria,
    TermsCriteria,
    and_criteria,
    not_criteria,
    or_criteria,
    ref,
    rename_fields,
    terms_criteria,
)
from .expression import (
    Aggregate,
    AggregateOperation,
    Count,
    First,
    OrderBy,
    QueryExpression,
    QueryOperation,
    ResultShape,
    Select,
    Skip,
    Take,
    Where,
)
from .request import AggregateDirective, SearchRequest, SearchType, SortOption
from .response import Hit, Hits, SearchResponse

__all__ = [
    "ALWAYS_FALSE",
    "ALWAYS_TRUE",
    "Aggregate",
    "AggregateDirective",
    "AggregateOperation",
    "AndCriteria",
    "ConstantCriteria",
    "Count",
    "Criteria",
    "ExistsCriteria",
    "FieldRef",
    "First",
    "Hit",
    "Hits",
    "NotCriteria",
    "OrCriteria",
    "OrderBy",
    "QueryExpression",
    "QueryOperation",
    "RangeCriteria",
    "ResultShape",
    "SearchRequest",
    "SearchResponse",
    "SearchType",
    "Select",
    "Skip",
    "SortOption",
    "Take",
    "TermCriteria",
    "TermsCriteria",
    "Where",
    "and_criteria",
    "not_criteria",
    "or_criteria",
    "ref",
    "rename_fields",
    "terms_criteria",
]

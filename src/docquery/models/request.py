"""Transport-level description of a search operation."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, InstanceOf

from docquery.models.criteria import Criteria
from docquery.models.expression import AggregateOperation


class SearchType(StrEnum):
    QUERY_THEN_FETCH = "query_then_fetch"
    COUNT = "count"


class SortOption(BaseModel):
    """A single sort key on a document field."""

    field: str
    descending: bool = False

    model_config = ConfigDict(frozen=True)


class AggregateDirective(BaseModel):
    """Ask the service to compute a statistic and report it under ``name``."""

    name: str
    operation: AggregateOperation
    field: str

    model_config = ConfigDict(frozen=True)


class SearchRequest(BaseModel):
    """Everything a connection needs to run one search.

    Fully determined by the query expression and the field mapping.  A
    ``filter`` of ``None`` matches every document of ``document_type``.
    """

    document_type: str
    filter: InstanceOf[Criteria] | None = None
    offset: int = Field(default=0, ge=0)
    size: int | None = Field(default=None, ge=0)
    fields: tuple[str, ...] = ()
    sort: tuple[SortOption, ...] = ()
    aggregations: tuple[AggregateDirective, ...] = ()
    search_type: SearchType = SearchType.QUERY_THEN_FETCH

    model_config = ConfigDict(frozen=True)

"""Raw search service response models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Hit(BaseModel):
    """A single matched document."""

    index: str | None = Field(default=None, alias="_index")
    id: str | None = Field(default=None, alias="_id")
    score: float | None = Field(default=None, alias="_score")
    source: dict[str, Any] | None = Field(default=None, alias="_source")
    fields: dict[str, Any] | None = None

    model_config = ConfigDict(populate_by_name=True)


class Hits(BaseModel):
    total: int = Field(default=0, ge=0)
    max_score: float | None = None
    hits: list[Hit] = Field(default_factory=list)


class SearchResponse(BaseModel):
    """Result payload of one search.

    ``SearchResponse()`` is the empty response: no hits section and no
    aggregations.  Materializers must accept it.
    """

    took: int = 0
    timed_out: bool = False
    hits: Hits | None = None
    aggregations: dict[str, dict[str, Any]] = Field(default_factory=dict)

    @property
    def documents(self) -> list[Hit]:
        """The hit list, or an empty list when the response carries none."""
        if self.hits is None:
            return []
        return self.hits.hits

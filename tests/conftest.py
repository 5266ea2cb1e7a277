"""Shared fixtures for docquery tests."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from docquery.execution.retry import NoRetryPolicy
from docquery.mapping.typed import TypedDocumentMapping
from docquery.models.request import SearchRequest
from docquery.models.response import SearchResponse
from docquery.provider import SearchQueryProvider


class Robot(BaseModel):
    """Element type used throughout the tests; stored under ``robots``."""

    id: str
    name: str
    cost: float
    zone: int
    serial_number: str | None = None


@dataclass
class Sensor:
    id: str
    kind: str
    reading: float


ROBOT_DOCUMENTS: list[dict[str, Any]] = [
    {"id": "r1", "name": "Marvin", "cost": 12.5, "zone": 1, "serialNumber": "MRV-1"},
    {"id": "r2", "name": "Bender", "cost": 3.0, "zone": 2, "serialNumber": "BND-22"},
    {"id": "r3", "name": "Robby", "cost": 7.25, "zone": 3},
    {"id": "r4", "name": "Kryten", "cost": 20.0, "zone": 3, "serialNumber": "KRY-4"},
    {"id": "r5", "name": "Gort", "cost": 1.75, "zone": 1},
]


class FakeConnection:
    """Connection stub returning a pre-configured outcome for every search.

    Satisfies the ``Connection`` protocol and records every request it
    receives, so tests can assert whether (and how) the service was called.

    Parameters:
        response: Returned from each search (a ``SearchResponse`` or a raw
            dict).  Defaults to the empty response.
        error: Raised from each search instead of returning.
        block: When set, each search waits on this event before returning.
    """

    def __init__(
        self,
        response: SearchResponse | dict[str, Any] | None = None,
        error: BaseException | None = None,
        block: asyncio.Event | None = None,
    ) -> None:
        self.response = response or SearchResponse()
        self.error = error
        self.block = block
        self.requests: list[SearchRequest] = []

    @property
    def call_count(self) -> int:
        return len(self.requests)

    async def search(self, request: SearchRequest) -> SearchResponse | dict[str, Any] | None:
        self.requests.append(request)
        if self.block is not None:
            await self.block.wait()
        if self.error is not None:
            raise self.error
        return self.response


class NoneConnection:
    """Connection that never produces a response."""

    def __init__(self) -> None:
        self.call_count = 0

    async def search(self, request: SearchRequest) -> None:
        self.call_count += 1
        return None


def make_hits_response(sources: list[dict[str, Any]], total: int | None = None) -> dict[str, Any]:
    """Build a raw response body whose hits carry the given ``_source`` dicts."""
    return {
        "took": 1,
        "timed_out": False,
        "hits": {
            "total": len(sources) if total is None else total,
            "max_score": None,
            "hits": [
                {"_index": "robots", "_id": str(i), "_score": 1.0, "_source": source}
                for i, source in enumerate(sources)
            ],
        },
    }


def make_provider(
    connection: Any,
    *,
    mapping: TypedDocumentMapping | None = None,
    release_threshold: int = 4096,
) -> SearchQueryProvider:
    """Create a provider with no retries so failures surface on the first attempt."""
    return SearchQueryProvider(
        connection,
        mapping or TypedDocumentMapping(),
        log=logging.getLogger("docquery.tests"),
        retry_policy=NoRetryPolicy(),
        release_threshold=release_threshold,
    )


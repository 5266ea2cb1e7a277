"""Materializer protocol."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from docquery.models.response import SearchResponse


@runtime_checkable
class Materializer(Protocol):
    """Converts a raw response into the caller's expected result shape.

    Materializers are bound at translation time and hold no state that
    depends on a particular response.
    """

    def materialize(self, response: SearchResponse) -> Any: ...

"""Connection protocol: the network boundary of docquery.

Any object with an async ``search`` method matching this signature can be
handed to ``SearchContext`` -- no inheritance required.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from docquery.models.request import SearchRequest
from docquery.models.response import SearchResponse


@runtime_checkable
class Connection(Protocol):
    """Protocol for transports that run a search request against a service."""

    async def search(self, request: SearchRequest) -> SearchResponse | dict[str, Any] | None:
        """Run *request* and return the raw result.

        Parameters:
            request: The fully translated search request.

        Returns:
            A ``SearchResponse`` or the raw response dictionary (validated
            by the caller).  ``None`` signals that no response arrived and
            is treated as an error, not as an empty result.

        Raises:
            TransientSearchError: For failures the retry policy may retry.
        """
        ...

"""Release large hit buffers once a response has been materialized."""

from __future__ import annotations

from docquery.models.response import SearchResponse

DEFAULT_RELEASE_THRESHOLD = 4096


def release_large_hits(
    response: SearchResponse,
    threshold: int = DEFAULT_RELEASE_THRESHOLD,
) -> bool:
    """Clear the response's hit list if it holds more than *threshold* entries.

    Called after the materializer has consumed the hits.  A large list keeps
    every raw hit (and its ``_source`` dict) alive for as long as the
    response is referenced; clearing it lets them be reclaimed right away.
    The materialized result is never affected.

    Returns:
        ``True`` if the hit list was cleared.
    """
    if response.hits is None:
        return False
    hits = response.hits.hits
    if len(hits) <= threshold:
        return False
    hits.clear()
    return True

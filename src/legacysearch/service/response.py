"""Response envelope shaping shared by every search path."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from legacysearch.core.types import SearchHit, SearchHits, SearchResponse


def build_response(results: Iterable[Any], total: int, took: int) -> SearchResponse:
    """Wrap an ordered result collection into the search envelope.

    Knows nothing about the store that produced the results; the hit list
    keeps the iteration order of ``results``.

    Args:
        results: Ordered page of results, one per hit
        total: Number of matches, independent of the page size
        took: Elapsed time in milliseconds

    Returns:
        The response envelope
    """
    hits = [SearchHit(source=result) for result in results]
    return SearchResponse(took=took, hits=SearchHits(total=total, hits=hits))


def serialize_response(response: SearchResponse) -> str:
    """Serialize an envelope to its JSON wire format."""
    return response.model_dump_json(by_alias=True)

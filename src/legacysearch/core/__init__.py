"""Core components for LegacySearch."""

from legacysearch.core.connection import DatabaseConnection
from legacysearch.core.types import (
    AddressDocument,
    PersonDocument,
    SearchHit,
    SearchHits,
    SearchResponse,
)

__all__ = [
    "DatabaseConnection",
    "AddressDocument",
    "PersonDocument",
    "SearchHit",
    "SearchHits",
    "SearchResponse",
]

"""Search index for LegacySearch.

A reference-keyed copy of every person, kept aligned with the record store by
the person service (write to the record store first, then to the index).

Example:
    >>> from legacysearch import LegacySearch
    >>>
    >>> app = LegacySearch("sqlite:///people.db")
    >>> app.service.upsert("42", person)
    >>> app.index.get("42")
    >>> app.index.search("paris", limit=5)
"""

from legacysearch.search.engine import IndexStatus, SearchIndex

__all__ = [
    "SearchIndex",
    "IndexStatus",
]

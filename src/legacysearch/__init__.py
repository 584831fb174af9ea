"""LegacySearch - a relational record store and a search index kept in sync.

Persons live in a relational database (SQLite or PostgreSQL), which owns
their identity. Every write is mirrored into a search index keyed by the
person's external reference, and both read paths answer with the same
search-engine-shaped JSON envelope.

Example:
    from legacysearch import LegacySearch, PersonDocument

    app = LegacySearch("sqlite:///people.db")

    # Bootstrap with synthetic data ("0" is always Joe Smith)
    app.init(1000)

    # Merge a partial payload onto the stored person
    patch = PersonDocument.from_payload({"name": "Joe Smith Jr"})
    app.service.upsert("0", patch.to_person())

    # Free-text and structured search, same envelope
    app.service.search("joe paris")
    app.service.advanced_search(country="France", city="Paris", size=20)
"""

from legacysearch.core.engine import LegacySearch
from legacysearch.core.types import (
    AddressDocument,
    PersonDocument,
    SearchHit,
    SearchHits,
    SearchResponse,
)
from legacysearch.data.criteria import CriteriaSet, Criterion, MatchMode
from legacysearch.data.record_store import RecordStore
from legacysearch.exceptions import (
    ConnectionError,
    GenerationError,
    LegacySearchError,
    QueryError,
    SearchIndexError,
    TransactionError,
    UnknownAttributeError,
    ValidationError,
)
from legacysearch.generator import PersonGenerator
from legacysearch.mapping.copier import FieldCopier
from legacysearch.schema.models import Address, Person
from legacysearch.search.engine import IndexStatus, SearchIndex
from legacysearch.service.person_service import PersonService
from legacysearch.service.response import build_response

__version__ = "0.1.0"

__all__ = [
    # Main classes
    "LegacySearch",
    "PersonService",
    "RecordStore",
    "SearchIndex",
    "FieldCopier",
    "PersonGenerator",
    # Models
    "Person",
    "Address",
    # Wire types
    "PersonDocument",
    "AddressDocument",
    "SearchHit",
    "SearchHits",
    "SearchResponse",
    "IndexStatus",
    "build_response",
    # Criteria
    "CriteriaSet",
    "Criterion",
    "MatchMode",
    # Exceptions
    "LegacySearchError",
    "ConnectionError",
    "TransactionError",
    "QueryError",
    "UnknownAttributeError",
    "ValidationError",
    "GenerationError",
    "SearchIndexError",
]

"""Main LegacySearch entry point: wires every collaborator once."""

from __future__ import annotations

import logging
from typing import Any

from legacysearch.core.connection import DatabaseConnection
from legacysearch.core.types import PersonDocument
from legacysearch.data.record_store import RecordStore
from legacysearch.generator import PersonGenerator
from legacysearch.mapping.copier import FieldCopier
from legacysearch.schema.models import Person
from legacysearch.search.engine import IndexStatus, SearchIndex
from legacysearch.service.person_service import PersonService

logger = logging.getLogger(__name__)


class LegacySearch:
    """Record store and search index kept in sync for persons.

    Construct once per process and share it: the record store, the search
    index, the field copier and the generator are built here and handed to a
    single :class:`PersonService`.

    Example:
        app = LegacySearch("sqlite:///people.db")
        app.init(100)
        app.service.upsert("0", Person(name="Joe Smith Jr"))
        print(app.service.advanced_search(country="France"))
    """

    def __init__(
        self,
        url: str,
        index_url: str | None = None,
        echo: bool = False,
        generator: PersonGenerator | None = None,
        indexing: bool = True,
    ) -> None:
        """Initialize LegacySearch.

        Args:
            url: Record store connection URL
            index_url: Search index connection URL (default: same as ``url``)
            echo: Whether to echo SQL statements (for debugging)
            generator: Synthetic data generator (default: built-in dictionaries)
            indexing: Keep the search index aligned on writes
        """
        self._connection = DatabaseConnection(url, echo=echo)
        self._record_store = RecordStore(self._connection)
        self._record_store.ensure_tables()

        # Same URL shares one engine, which in-memory SQLite requires
        if index_url is None or index_url == url:
            self._index_connection = self._connection
        else:
            self._index_connection = DatabaseConnection(index_url, echo=echo)

        self._index: SearchIndex | None = None
        if indexing:
            self._index = SearchIndex(self._index_connection)

        self._service = PersonService(
            record_store=self._record_store,
            copier=FieldCopier(),
            generator=generator or PersonGenerator(),
            index=self._index,
        )
        logger.debug(f"LegacySearch initialized with {self._connection.url}")

    @property
    def service(self) -> PersonService:
        """The person service."""
        return self._service

    @property
    def record_store(self) -> RecordStore:
        """The relational record store."""
        return self._record_store

    @property
    def index(self) -> SearchIndex | None:
        """The search index, or None when indexing is disabled."""
        return self._index

    def init(self, count: int) -> bool:
        """Fill both stores with synthetic persons."""
        return self._service.init(count)

    def get(self, reference: str) -> dict[str, Any] | None:
        """Get a person as a JSON-serializable dict."""
        person = self._service.get(reference)
        return PersonDocument.from_person(person).model_dump(mode="json") if person else None

    def upsert(self, reference: str, person: Person) -> dict[str, Any]:
        """Upsert a person and return it as a JSON-serializable dict."""
        persisted = self._service.upsert(reference, person)
        return PersonDocument.from_person(persisted).model_dump(mode="json")

    def delete(self, reference: str) -> bool:
        """Delete a person from both stores."""
        return self._service.delete(reference)

    def count(self) -> int:
        """Number of persons in the record store."""
        with self._record_store.transaction():
            return self._record_store.count()

    def index_status(self) -> IndexStatus | None:
        """Search index status, or None when indexing is disabled."""
        return self._index.get_status() if self._index else None

    def close(self) -> None:
        """Close database connections."""
        if self._index_connection is not self._connection:
            self._index_connection.close()
        self._connection.close()

    def __enter__(self) -> LegacySearch:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

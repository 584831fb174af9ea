"""Person service: orchestrates the record store and the search index.

The record store is the source of truth. Writes go to the record store first
and reach the search index only once the record store has committed, as an
upsert (or delete) keyed by the person's reference. Both search paths return
the same JSON envelope whichever store answered.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from datetime import date
from typing import TYPE_CHECKING

from legacysearch.core.types import PersonDocument, SearchResponse
from legacysearch.data.criteria import CriteriaSet
from legacysearch.exceptions import GenerationError, ValidationError
from legacysearch.service.response import build_response, serialize_response

if TYPE_CHECKING:
    from legacysearch.data.record_store import RecordStore
    from legacysearch.generator import PersonGenerator
    from legacysearch.mapping.copier import FieldCopier
    from legacysearch.schema.models import Person
    from legacysearch.search.engine import SearchIndex

logger = logging.getLogger(__name__)

FIXTURE_REFERENCE = "0"
FIXTURE_NAME = "Joe Smith"


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _year_range(value: str) -> tuple[date, date | None] | None:
    """Turn a ``YYYY`` or ISO date filter into the range of its calendar year.

    Returns None for values that name no year, so the filter is skipped.
    """
    try:
        if value.isdigit() and len(value) <= 4:
            year = int(value)
        else:
            year = date.fromisoformat(value).year
        start = date(year, 1, 1)
    except ValueError:
        logger.warning(f"Ignoring date filter '{value}': expected a year (YYYY) or an ISO date")
        return None
    end = date(year + 1, 1, 1) if year < date.max.year else None
    return start, end


class PersonService:
    """Transactional CRUD, search and bulk init for persons.

    Holds no per-request state: every collaborator is injected once at
    process start and shared across requests.
    """

    def __init__(
        self,
        record_store: RecordStore,
        copier: FieldCopier,
        generator: PersonGenerator,
        index: SearchIndex | None = None,
        serializer: Callable[[SearchResponse], str] = serialize_response,
    ) -> None:
        """Initialize the service.

        Args:
            record_store: Relational store, source of truth for identity
            copier: Merges incoming fields onto stored persons on upsert
            generator: Synthetic persons for bulk init
            index: Search index kept aligned on writes. If None, writes only
                reach the record store.
            serializer: Turns a response envelope into its wire payload
        """
        self._store = record_store
        self._copier = copier
        self._generator = generator
        self._index = index
        self._serializer = serializer

    # === Read / write primitives ===

    def get(self, reference: str) -> Person | None:
        """Find a person by external reference."""
        with self._store.transaction():
            person = self._store.get_by_reference(reference)
        logger.debug(f"get({reference})={person}")
        return person

    def save(self, person: Person) -> Person:
        """Persist a person, then index it once the record store committed.

        Returns:
            The persisted person, carrying its assigned id
        """
        with self._store.transaction() as scope:
            persisted = self._store.save(person)
            if self._index is not None:
                index = self._index
                scope.after_commit(lambda: index.index(persisted))
        return persisted

    def upsert(self, reference: str, person: Person) -> Person:
        """Create or merge the person stored under ``reference``.

        Fields set on ``person`` overwrite the stored ones, fields left unset
        are kept, and the stored id is preserved. The reference inside the
        payload is ignored in favour of ``reference``.
        """
        existing = self.get(reference)
        if existing is not None:
            self._copier.copy(person, existing)
            person = existing
        person.reference = reference
        return self.save(person)

    def delete(self, reference: str | None) -> bool:
        """Delete a person from the record store, then from the index.

        Returns:
            True if a person was deleted, False if none had this reference
        """
        logger.debug(f"Person: {reference}")

        if reference is None:
            return False

        with self._store.transaction() as scope:
            person = self._store.get_by_reference(reference)
            if person is None:
                logger.debug(f"Person with reference {reference} does not exist")
                return False
            self._store.delete(person)
            if self._index is not None:
                index = self._index
                scope.after_commit(lambda: index.delete(reference))

        logger.debug(f"Person deleted: {reference}")
        return True

    # === Search ===

    def search(
        self,
        query: str | None,
        country: str | None = None,
        date_filter: str | None = None,
        from_: int = 0,
        size: int = 10,
    ) -> str | None:
        """Free-text search over the record store.

        Args:
            query: Whitespace-separated terms, all of which must match
            country: Exact (case-insensitive) country filter
            date_filter: Year of birth filter, ``YYYY`` or an ISO date. Values
                naming no year are ignored.
            from_: Offset of the first hit
            size: Page size

        Returns:
            The JSON envelope, or None if it could not be serialized
        """
        criteria = CriteriaSet().equals("address.country", country)
        year_range = _year_range(date_filter) if date_filter is not None else None
        if year_range is not None:
            criteria.between("date_of_birth", *year_range)

        start = time.perf_counter()
        with self._store.transaction():
            total = self._store.count_like_free_text(query, criteria)
            persons = self._store.find_like_free_text(query, from_, size, criteria)
        took = _elapsed_ms(start)

        response = build_response(self._project(persons), total, took)
        logger.debug(f"search({query})={response.hits.total_hits} persons")
        return self._serialize(response)

    def advanced_search(
        self,
        name: str | None = None,
        country: str | None = None,
        city: str | None = None,
        from_: int = 0,
        size: int = 10,
    ) -> str | None:
        """Structured search: substring filters on name, country and city.

        Filters left as None are skipped; with no filter at all every person
        matches, one page at a time.

        Returns:
            The JSON envelope, or None if it could not be serialized
        """
        criteria = (
            CriteriaSet()
            .ilike("name", name)
            .ilike("address.country", country)
            .ilike("address.city", city)
        )

        start = time.perf_counter()
        with self._store.transaction():
            total = self._store.count_with_criteria(criteria)
            persons = self._store.find_with_criteria(criteria, from_, size)
        took = _elapsed_ms(start)

        response = build_response(self._project(persons), total, took)
        logger.debug(
            f"advancedSearch({name},{country},{city})={response.hits.total_hits} persons"
        )
        return self._serialize(response)

    def _project(self, persons: Iterable[Person]) -> list[PersonDocument]:
        return [PersonDocument.from_person(p) for p in persons]

    def _serialize(self, response: SearchResponse) -> str | None:
        try:
            return self._serializer(response)
        except (TypeError, ValueError):
            logger.error("can not serialize to json", exc_info=True)
            return None

    # === Bulk init ===

    def _generate(self) -> Person:
        try:
            return self._generator.generate()
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(f"Person generator failed: {e}") from e

    def init(self, count: int) -> bool:
        """Fill the stores with ``count`` synthetic persons.

        The first one is a known fixture (reference "0", named Joe Smith), the
        others get references "1" to ``count - 1``. A generation failure stops
        the loop but what was saved so far is still committed.

        Returns:
            True once the loop is over, whether or not it completed
        """
        if count < 1:
            raise ValidationError(
                f"Cannot initialize with {count} persons. Count must be at least 1.",
                {"count": "must be >= 1"},
            )

        logger.debug(f"Initializing database for {count} persons")

        start = time.perf_counter()
        saved = 0
        with self._store.transaction():
            try:
                joe = self._generate()
                joe.name = FIXTURE_NAME
                joe.reference = FIXTURE_REFERENCE
                self.save(joe)
                saved += 1

                for i in range(1, count):
                    person = self._generate()
                    person.reference = str(i)
                    self.save(person)
                    saved += 1
            except GenerationError:
                logger.warning("error while generating data", exc_info=True)

        took = max(_elapsed_ms(start), 1)
        logger.info(
            f"Database initialized with {saved} persons. "
            f"Took: {took} ms, around {1000 * saved // took} per second."
        )
        return True

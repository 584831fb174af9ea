"""Tests for the record store and its thread-bound transaction scope."""

import threading
from datetime import date

import pytest

from legacysearch import (
    CriteriaSet,
    LegacySearch,
    RecordStore,
    TransactionError,
    UnknownAttributeError,
    ValidationError,
)


@pytest.fixture
def store(memory_app: LegacySearch) -> RecordStore:
    return memory_app.record_store


class TestTransactionScope:
    """Explicit begin/commit/rollback and the transaction() helper."""

    def test_gateway_requires_scope(self, store: RecordStore):
        """Queries outside a scope fail fast."""
        with pytest.raises(TransactionError):
            store.get_by_reference("x")
        with pytest.raises(TransactionError):
            store.count()

    def test_begin_twice_raises(self, store: RecordStore):
        """Scopes do not nest on one thread."""
        store.begin_transaction()
        try:
            with pytest.raises(TransactionError):
                store.begin_transaction()
        finally:
            store.rollback_transaction()

    def test_commit_without_scope_raises(self, store: RecordStore):
        with pytest.raises(TransactionError):
            store.commit_transaction()

    def test_rollback_without_scope_raises(self, store: RecordStore):
        with pytest.raises(TransactionError):
            store.rollback_transaction()

    def test_explicit_commit(self, store: RecordStore, make_person):
        """begin, save, commit makes the person visible to later scopes."""
        store.begin_transaction()
        store.save(make_person("Ada", reference="a"))
        store.commit_transaction()

        assert store.in_transaction is False
        with store.transaction():
            assert store.get_by_reference("a").name == "Ada"

    def test_explicit_rollback(self, store: RecordStore, make_person):
        """Rolled back writes are discarded."""
        store.begin_transaction()
        store.save(make_person("Ada", reference="a"))
        store.rollback_transaction()

        with store.transaction():
            assert store.get_by_reference("a") is None

    def test_block_error_rolls_back(self, store: RecordStore, make_person):
        """An exception inside transaction() rolls back and propagates."""
        with pytest.raises(RuntimeError):
            with store.transaction():
                store.save(make_person("Ada", reference="a"))
                raise RuntimeError("boom")

        assert store.in_transaction is False
        with store.transaction():
            assert store.count() == 0

    def test_inner_block_joins_outer_scope(self, store: RecordStore):
        """A nested transaction() reuses the scope already open."""
        with store.transaction() as outer:
            with store.transaction() as inner:
                assert inner is outer
            assert store.in_transaction is True
        assert store.in_transaction is False

    def test_after_commit_runs_after_commit(self, store: RecordStore, make_person):
        """Callbacks run once the data is committed and the scope is closed."""
        seen = []

        with store.transaction() as scope:
            store.save(make_person("Ada", reference="a"))
            scope.after_commit(lambda: seen.append(store.in_transaction))
            assert seen == []

        assert seen == [False]

    def test_after_commit_dropped_on_rollback(self, store: RecordStore):
        """Callbacks of a rolled back scope never run."""
        seen = []

        with pytest.raises(RuntimeError):
            with store.transaction() as scope:
                scope.after_commit(lambda: seen.append("ran"))
                raise RuntimeError("boom")

        assert seen == []

    def test_scope_is_bound_to_thread(self, store: RecordStore):
        """A scope opened on one thread is invisible to another."""
        seen = {}

        store.begin_transaction()
        try:
            worker = threading.Thread(
                target=lambda: seen.setdefault("other", store.in_transaction)
            )
            worker.start()
            worker.join()
            assert store.in_transaction is True
        finally:
            store.rollback_transaction()

        assert seen["other"] is False


class TestCrud:
    """Gateway reads and writes."""

    def test_save_and_get(self, store: RecordStore, make_person):
        with store.transaction():
            person = store.save(make_person("Ada", "France", "Paris", reference="a"))
            assert person.id is not None
            assert person.address.id is not None

        with store.transaction():
            found = store.get_by_reference("a")
        assert found.address.city == "Paris"

    def test_delete_removes_address(self, store: RecordStore, make_person):
        """Deleting a person deletes its address too."""
        from sqlalchemy import func, select

        from legacysearch import Address

        with store.transaction():
            store.save(make_person("Ada", "France", "Paris", reference="a"))

        with store.transaction() as scope:
            store.delete(store.get_by_reference("a"))
            addresses = scope.session.scalar(select(func.count(Address.id)))

        assert addresses == 0

    def test_saved_person_without_address_stays_readable(self, store: RecordStore):
        """The address relation is loaded before the scope closes, even when never set."""
        from legacysearch import Person, PersonDocument

        with store.transaction():
            person = store.save(Person(reference="bare", name="Bare"))

        assert person.address is None
        assert PersonDocument.from_person(person).reference == "bare"

    def test_delete_detached_person(self, store: RecordStore, make_person):
        """A person loaded in an earlier scope can still be deleted."""
        with store.transaction():
            person = store.save(make_person("Ada", reference="a"))

        with store.transaction():
            store.delete(person)

        with store.transaction():
            assert store.count() == 0


@pytest.fixture
def seeded(store: RecordStore, make_person) -> RecordStore:
    with store.transaction():
        store.save(make_person("Joe Smith", "France", "Paris", "p1", date(1970, 5, 1)))
        store.save(make_person("Jane Smith", "France", "Lyon", "p2", date(1982, 1, 9)))
        store.save(make_person("Ada Martin", "Germany", "Berlin", "p3"))
        store.save(make_person("No Address", reference="p4"))
    return store


class TestQueries:
    """Free-text and criteria queries."""

    def test_free_text_counts_and_pages(self, seeded: RecordStore):
        with seeded.transaction():
            assert seeded.count_like_free_text("smith") == 2
            page = seeded.find_like_free_text("smith", 1, 10)
        assert [p.reference for p in page] == ["p2"]

    def test_free_text_without_query(self, seeded: RecordStore):
        """A blank query matches persons with or without an address."""
        with seeded.transaction():
            assert seeded.count_like_free_text("   ") == 4

    def test_free_text_with_criteria(self, seeded: RecordStore):
        criteria = CriteriaSet().equals("address.city", "LYON")
        with seeded.transaction():
            assert seeded.count_like_free_text("smith", criteria) == 1

    def test_criteria_between(self, seeded: RecordStore):
        """Between is inclusive below and exclusive above."""
        criteria = CriteriaSet().between("date_of_birth", date(1970, 5, 1), date(1982, 1, 9))
        with seeded.transaction():
            found = seeded.find_with_criteria(criteria, 0, 10)
        assert [p.reference for p in found] == ["p1"]

    def test_criteria_between_open_above(self, seeded: RecordStore):
        """A None upper bound leaves the range open."""
        criteria = CriteriaSet().between("date_of_birth", date(1980, 1, 1), None)
        with seeded.transaction():
            found = seeded.find_with_criteria(criteria, 0, 10)
        assert [p.reference for p in found] == ["p2"]

    def test_empty_criteria_match_everything(self, seeded: RecordStore):
        with seeded.transaction():
            assert seeded.count_with_criteria(CriteriaSet()) == 4
            assert len(seeded.find_with_criteria(CriteriaSet(), 0, 2)) == 2

    def test_page_past_the_end_is_empty(self, seeded: RecordStore):
        with seeded.transaction():
            assert seeded.find_with_criteria(CriteriaSet(), 10, 5) == []

    def test_zero_size_page(self, seeded: RecordStore):
        with seeded.transaction():
            assert seeded.find_with_criteria(CriteriaSet(), 0, 0) == []

    def test_unknown_attribute_path(self, seeded: RecordStore):
        """Unknown paths are rejected with the list of known ones."""
        criteria = CriteriaSet().ilike("address.street", "main")
        with seeded.transaction():
            with pytest.raises(UnknownAttributeError) as exc_info:
                seeded.count_with_criteria(criteria)

        assert exc_info.value.context["path"] == "address.street"
        assert "address.city" in exc_info.value.context["available_paths"]

    def test_negative_size_rejected(self, seeded: RecordStore):
        with seeded.transaction():
            with pytest.raises(ValidationError):
                seeded.find_with_criteria(CriteriaSet(), 0, -1)

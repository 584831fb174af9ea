"""Shared test fixtures for LegacySearch."""

import os
from collections.abc import Generator
from datetime import date

import pytest

from legacysearch import Address, LegacySearch, Person, PersonGenerator


def _psycopg_available() -> bool:
    """Check if psycopg is installed."""
    try:
        import psycopg  # noqa: F401

        return True
    except ImportError:
        return False


def _postgresql_connectable(url: str) -> bool:
    """Check if we can connect to PostgreSQL."""
    if not _psycopg_available():
        return False
    try:
        from legacysearch.core.connection import DatabaseConnection

        conn = DatabaseConnection(url)
        result = conn.test_connection()
        conn.close()
        return result
    except Exception:
        return False


@pytest.fixture
def postgresql_url() -> str:
    """Get PostgreSQL URL from environment or use default.

    Tests using this fixture are skipped when no server is reachable.
    """
    url = os.environ.get("TEST_DATABASE_URL") or "postgresql://localhost/legacysearch_test"

    if not _psycopg_available():
        pytest.skip("psycopg not installed")

    if not _postgresql_connectable(url):
        pytest.skip(f"Cannot connect to PostgreSQL at {url}")

    return url


@pytest.fixture
def memory_app() -> Generator[LegacySearch, None, None]:
    """LegacySearch on SQLite in-memory, record store and index sharing one engine."""
    app = LegacySearch("sqlite:///:memory:", generator=PersonGenerator(seed=42))
    yield app
    app.close()


@pytest.fixture
def file_app(tmp_path) -> Generator[LegacySearch, None, None]:
    """LegacySearch with record store and index in two separate SQLite files."""
    app = LegacySearch(
        f"sqlite:///{tmp_path}/records.db",
        index_url=f"sqlite:///{tmp_path}/index.db",
        generator=PersonGenerator(seed=7),
    )
    yield app
    app.close()


@pytest.fixture
def pg_app(postgresql_url: str) -> Generator[LegacySearch, None, None]:
    """LegacySearch on PostgreSQL. Drops the ls_ tables afterwards."""
    app = LegacySearch(postgresql_url)
    yield app
    from sqlalchemy import text

    with app.record_store._connection.engine.connect() as conn:
        result = conn.execute(text("SELECT tablename FROM pg_tables WHERE tablename LIKE 'ls_%'"))
        for row in result:
            conn.execute(text(f'DROP TABLE IF EXISTS "{row[0]}" CASCADE'))
        conn.commit()
    app.close()


def _make_person(
    name: str | None = None,
    country: str | None = None,
    city: str | None = None,
    reference: str | None = None,
    born: date | None = None,
) -> Person:
    """Build a transient person; the address is only set when a part of it is given."""
    address = Address(country=country, city=city) if country or city else None
    return Person(reference=reference, name=name, date_of_birth=born, address=address)


@pytest.fixture
def make_person():
    """Factory for transient persons."""
    return _make_person


@pytest.fixture
def people(memory_app: LegacySearch) -> LegacySearch:
    """Five known persons stored under references p1..p5."""
    service = memory_app.service
    service.upsert("p1", _make_person("Joe Smith", "France", "Paris", born=date(1970, 5, 1)))
    service.upsert("p2", _make_person("Jane Smith", "France", "Lyon", born=date(1982, 1, 9)))
    service.upsert("p3", _make_person("Ada Martin", "Germany", "Berlin", born=date(1970, 12, 31)))
    service.upsert("p4", _make_person("Karl Weber", "Germany", "Munich", born=date(1965, 7, 14)))
    service.upsert("p5", _make_person("Rosa Costa", "Portugal", "Paris de Lisboa"))
    return memory_app


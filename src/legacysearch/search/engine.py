"""Search index for LegacySearch.

Holds a denormalized JSON copy of every person, keyed by its external
reference, plus a full-text table (FTS5 on SQLite, tsvector on PostgreSQL).
Writes are upserts by reference, so replaying one is harmless.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

import pydantic
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from legacysearch.core.types import PersonDocument
from legacysearch.exceptions import SearchIndexError

if TYPE_CHECKING:
    from legacysearch.core.connection import DatabaseConnection
    from legacysearch.schema.models import Person

logger = logging.getLogger(__name__)


@dataclass
class IndexStatus:
    """Status of the search index for one document type."""

    doc_type: str
    indexed: int
    last_updated: datetime | str | None


def document_content(document: dict[str, Any]) -> str:
    """Flatten the searchable text of a person document."""
    address = document.get("address") or {}
    parts = [
        document.get("name"),
        document.get("gender"),
        address.get("country"),
        address.get("country_code"),
        address.get("city"),
        address.get("zipcode"),
    ]
    return " ".join(str(p) for p in parts if p)


class SearchIndex:
    """Reference-keyed document index for persons."""

    DOC_TYPE = "person"

    def __init__(self, connection: DatabaseConnection) -> None:
        """Initialize search index.

        Args:
            connection: Connection to the database holding the index. May be
                the record store's database or a separate one.
        """
        self._engine = connection.engine
        self._is_postgresql = connection.is_postgresql

        self._ensure_index_tables()

    def _ensure_index_tables(self) -> None:
        """Create index tables if they don't exist."""
        with Session(self._engine) as session:
            if self._is_postgresql:
                self._create_postgresql_tables(session)
            else:
                self._create_sqlite_tables(session)
            session.commit()

    def _create_postgresql_tables(self, session: Session) -> None:
        """Create PostgreSQL index table with a generated tsvector column."""
        session.execute(
            text("""
            CREATE TABLE IF NOT EXISTS ls_search_index (
                doc_type VARCHAR(64) NOT NULL,
                reference VARCHAR(255) NOT NULL,
                source TEXT NOT NULL,
                content TEXT NOT NULL,
                updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
                PRIMARY KEY (doc_type, reference)
            )
        """)
        )
        session.execute(
            text("""
            ALTER TABLE ls_search_index
            ADD COLUMN IF NOT EXISTS tsv tsvector
            GENERATED ALWAYS AS (to_tsvector('simple', content)) STORED
        """)
        )
        session.execute(
            text(
                "CREATE INDEX IF NOT EXISTS ix_ls_search_index_fts "
                "ON ls_search_index USING gin(tsv)"
            )
        )

    def _create_sqlite_tables(self, session: Session) -> None:
        """Create SQLite index table and its FTS5 companion."""
        session.execute(
            text("""
            CREATE TABLE IF NOT EXISTS ls_search_index (
                doc_type TEXT NOT NULL,
                reference TEXT NOT NULL,
                source TEXT NOT NULL,
                content TEXT NOT NULL,
                updated_at TEXT NOT NULL DEFAULT (datetime('now')),
                PRIMARY KEY (doc_type, reference)
            )
        """)
        )
        session.execute(
            text("""
            CREATE VIRTUAL TABLE IF NOT EXISTS ls_search_index_fts USING fts5(
                doc_type UNINDEXED,
                reference UNINDEXED,
                content,
                tokenize='unicode61'
            )
        """)
        )

    def index(self, person: Person) -> None:
        """Index or re-index one person under its reference.

        Raises:
            SearchIndexError: If the person has no reference or the write fails
        """
        if not person.reference:
            raise SearchIndexError("index", None, "person has no reference")

        try:
            document = PersonDocument.from_person(person).model_dump(mode="json")
        except (pydantic.ValidationError, SQLAlchemyError) as e:
            reason = f"cannot build document: {e}"
            raise SearchIndexError("index", person.reference, reason) from e
        source = json.dumps(document)
        content = document_content(document)

        try:
            with Session(self._engine) as session:
                if self._is_postgresql:
                    self._index_postgresql(session, person.reference, source, content)
                else:
                    self._index_sqlite(session, person.reference, source, content)
                session.commit()
        except SQLAlchemyError as e:
            raise SearchIndexError("index", person.reference, str(e)) from e

        logger.debug(f"indexed {self.DOC_TYPE}/{person.reference}")

    def _index_postgresql(
        self, session: Session, reference: str, source: str, content: str
    ) -> None:
        session.execute(
            text("""
            INSERT INTO ls_search_index (doc_type, reference, source, content)
            VALUES (:doc_type, :reference, :source, :content)
            ON CONFLICT (doc_type, reference) DO UPDATE SET
                source = EXCLUDED.source,
                content = EXCLUDED.content,
                updated_at = NOW()
        """),
            {
                "doc_type": self.DOC_TYPE,
                "reference": reference,
                "source": source,
                "content": content,
            },
        )

    def _index_sqlite(self, session: Session, reference: str, source: str, content: str) -> None:
        params = {
            "doc_type": self.DOC_TYPE,
            "reference": reference,
            "source": source,
            "content": content,
        }
        existing = session.execute(
            text(
                "SELECT 1 FROM ls_search_index "
                "WHERE doc_type = :doc_type AND reference = :reference"
            ),
            params,
        ).fetchone()

        if existing:
            session.execute(
                text("""
                UPDATE ls_search_index SET
                    source = :source,
                    content = :content,
                    updated_at = datetime('now')
                WHERE doc_type = :doc_type AND reference = :reference
            """),
                params,
            )
            session.execute(
                text(
                    "DELETE FROM ls_search_index_fts "
                    "WHERE doc_type = :doc_type AND reference = :reference"
                ),
                params,
            )
        else:
            session.execute(
                text("""
                INSERT INTO ls_search_index (doc_type, reference, source, content)
                VALUES (:doc_type, :reference, :source, :content)
            """),
                params,
            )

        session.execute(
            text("""
            INSERT INTO ls_search_index_fts (doc_type, reference, content)
            VALUES (:doc_type, :reference, :content)
        """),
            params,
        )

    def delete(self, reference: str) -> None:
        """Remove a person document. Unknown references are a no-op.

        Raises:
            SearchIndexError: If the delete fails
        """
        params = {"doc_type": self.DOC_TYPE, "reference": reference}
        try:
            with Session(self._engine) as session:
                session.execute(
                    text(
                        "DELETE FROM ls_search_index "
                        "WHERE doc_type = :doc_type AND reference = :reference"
                    ),
                    params,
                )
                if not self._is_postgresql:
                    session.execute(
                        text(
                            "DELETE FROM ls_search_index_fts "
                            "WHERE doc_type = :doc_type AND reference = :reference"
                        ),
                        params,
                    )
                session.commit()
        except SQLAlchemyError as e:
            raise SearchIndexError("delete", reference, str(e)) from e

        logger.debug(f"deleted {self.DOC_TYPE}/{reference} from index")

    def get(self, reference: str) -> dict[str, Any] | None:
        """Fetch the stored document for a reference."""
        with Session(self._engine) as session:
            row = session.execute(
                text(
                    "SELECT source FROM ls_search_index "
                    "WHERE doc_type = :doc_type AND reference = :reference"
                ),
                {"doc_type": self.DOC_TYPE, "reference": reference},
            ).fetchone()
        if row is None:
            return None
        return json.loads(row[0])

    def count(self) -> int:
        """Number of indexed person documents."""
        with Session(self._engine) as session:
            result = session.execute(
                text("SELECT COUNT(*) FROM ls_search_index WHERE doc_type = :doc_type"),
                {"doc_type": self.DOC_TYPE},
            )
            return int(result.scalar() or 0)

    def search(self, query: str, limit: int = 10) -> list[dict[str, Any]]:
        """Ranked full-text search over indexed documents.

        Args:
            query: Search query text
            limit: Maximum documents to return

        Returns:
            Stored documents, most relevant first
        """
        terms = query.split()
        if not terms:
            return []

        try:
            with Session(self._engine) as session:
                if self._is_postgresql:
                    rows = self._search_postgresql(session, query, limit)
                else:
                    rows = self._search_sqlite(session, terms, limit)
        except SQLAlchemyError as e:
            raise SearchIndexError("search", None, str(e)) from e

        return [json.loads(row[0]) for row in rows]

    def _search_postgresql(self, session: Session, query: str, limit: int) -> list[Any]:
        result = session.execute(
            text("""
            SELECT source, ts_rank(tsv, q) AS score
            FROM ls_search_index, plainto_tsquery('simple', :query) q
            WHERE doc_type = :doc_type AND tsv @@ q
            ORDER BY score DESC
            LIMIT :limit
        """),
            {"query": query, "doc_type": self.DOC_TYPE, "limit": limit},
        )
        return list(result.fetchall())

    def _search_sqlite(self, session: Session, terms: list[str], limit: int) -> list[Any]:
        # Quote each term so FTS5 operators in user input are taken literally
        match = " ".join('"' + t.replace('"', '""') + '"' for t in terms)
        result = session.execute(
            text("""
            SELECT i.source, bm25(ls_search_index_fts) AS score
            FROM ls_search_index_fts f
            JOIN ls_search_index i
                ON i.doc_type = f.doc_type AND i.reference = f.reference
            WHERE ls_search_index_fts MATCH :match AND f.doc_type = :doc_type
            ORDER BY score
            LIMIT :limit
        """),
            {"match": match, "doc_type": self.DOC_TYPE, "limit": limit},
        )
        return list(result.fetchall())

    def get_status(self) -> IndexStatus:
        """Get indexing status for the person document type."""
        with Session(self._engine) as session:
            row = session.execute(
                text("""
                SELECT COUNT(*), MAX(updated_at)
                FROM ls_search_index
                WHERE doc_type = :doc_type
            """),
                {"doc_type": self.DOC_TYPE},
            ).fetchone()

        indexed, last_updated = (row[0], row[1]) if row else (0, None)
        return IndexStatus(
            doc_type=self.DOC_TYPE, indexed=int(indexed or 0), last_updated=last_updated
        )


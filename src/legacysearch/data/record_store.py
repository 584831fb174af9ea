"""Relational record store for persons.

The store owns the transaction scope. A scope is bound to the calling thread,
so a process-wide store can serve concurrent request threads; gateway methods
always run in the scope of the current thread and fail fast without one.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from sqlalchemy import ColumnElement, Select, and_, func, inspect, or_, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from legacysearch.data.criteria import CriteriaSet, Criterion, MatchMode
from legacysearch.exceptions import TransactionError, UnknownAttributeError, ValidationError
from legacysearch.schema.models import Address, Base, Person

if TYPE_CHECKING:
    from legacysearch.core.connection import DatabaseConnection

logger = logging.getLogger(__name__)

# Attribute paths usable in criteria, resolved against Person joined to Address
ATTRIBUTE_PATHS: dict[str, InstrumentedAttribute[Any]] = {
    "reference": Person.reference,
    "name": Person.name,
    "gender": Person.gender,
    "date_of_birth": Person.date_of_birth,
    "children": Person.children,
    "address.country": Address.country,
    "address.country_code": Address.country_code,
    "address.city": Address.city,
    "address.zipcode": Address.zipcode,
}

# Text attributes matched by free-text queries
FREE_TEXT_PATHS = (
    "name",
    "gender",
    "address.country",
    "address.country_code",
    "address.city",
    "address.zipcode",
)


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass
class TransactionScope:
    """An open transaction: one session plus callbacks to run after commit."""

    session: Session
    _after_commit: list[Callable[[], None]] = field(default_factory=list)

    def after_commit(self, callback: Callable[[], None]) -> None:
        """Register a callback to run once the scope has committed."""
        self._after_commit.append(callback)

    def _run_after_commit(self) -> None:
        callbacks, self._after_commit = self._after_commit, []
        for callback in callbacks:
            callback()


class RecordStore:
    """CRUD, free-text and criteria queries over the person tables."""

    def __init__(self, connection: DatabaseConnection) -> None:
        """Initialize record store.

        Args:
            connection: Connection to the relational database
        """
        self._connection = connection
        self._local = threading.local()
        self._initialized = False

    def ensure_tables(self) -> None:
        """Create person tables if they don't exist.

        This is idempotent - safe to call multiple times.
        """
        if self._initialized:
            return
        Base.metadata.create_all(
            self._connection.engine,
            tables=[Address.__table__, Person.__table__],  # type: ignore[list-item]
        )
        self._initialized = True

    # === Transaction scope ===

    @property
    def current_scope(self) -> TransactionScope | None:
        """The scope open on the calling thread, if any."""
        return getattr(self._local, "scope", None)

    @property
    def in_transaction(self) -> bool:
        """Whether the calling thread has an open scope."""
        return self.current_scope is not None

    def begin_transaction(self) -> TransactionScope:
        """Open a scope on the calling thread.

        Raises:
            TransactionError: If a scope is already open (scopes do not nest)
        """
        if self.current_scope is not None:
            raise TransactionError(
                "A transaction is already in progress on this thread. "
                "Commit it before beginning another one."
            )
        scope = TransactionScope(self._connection.get_session())
        self._local.scope = scope
        return scope

    def commit_transaction(self) -> None:
        """Commit and close the scope, then run its after-commit callbacks.

        Raises:
            TransactionError: If no scope is open
        """
        scope = self._require_scope()
        try:
            scope.session.commit()
        finally:
            scope.session.close()
            self._local.scope = None
        scope._run_after_commit()

    def rollback_transaction(self) -> None:
        """Roll back and close the scope. After-commit callbacks are dropped."""
        scope = self._require_scope()
        try:
            scope.session.rollback()
        finally:
            scope.session.close()
            self._local.scope = None

    @contextmanager
    def transaction(self) -> Iterator[TransactionScope]:
        """Run a block inside a scope.

        Joins the scope already open on this thread, if any, so a scope is
        never nested. Otherwise begins one, commits on normal exit and rolls
        back when the block raises.
        """
        current = self.current_scope
        if current is not None:
            yield current
            return

        scope = self.begin_transaction()
        try:
            yield scope
        except BaseException:
            self.rollback_transaction()
            raise
        self.commit_transaction()

    def _require_scope(self) -> TransactionScope:
        scope = self.current_scope
        if scope is None:
            raise TransactionError(
                "No transaction in progress. Call begin_transaction() or use transaction()."
            )
        return scope

    @property
    def _session(self) -> Session:
        return self._require_scope().session

    # === CRUD ===

    def get_by_reference(self, reference: str) -> Person | None:
        """Find a person by external reference."""
        return self._session.scalars(
            select(Person).where(Person.reference == reference)
        ).first()

    def save(self, person: Person) -> Person:
        """Insert a person without identity, update one that has it.

        Returns:
            The persisted person, carrying its assigned id
        """
        session = self._session
        if person.id is None:
            session.add(person)
            persisted = person
        else:
            persisted = session.merge(person)
        session.flush()
        # Callers read the address after the scope closes, so it must be loaded now
        if "address" in inspect(persisted).unloaded:
            session.refresh(persisted)
        return persisted

    def delete(self, person: Person) -> None:
        """Delete a person and its address."""
        session = self._session
        if person not in session:
            person = session.merge(person)
        session.delete(person)
        session.flush()

    def count(self) -> int:
        """Total number of persons."""
        return self._session.scalar(select(func.count(Person.id))) or 0

    # === Free-text queries ===

    def count_like_free_text(self, query: str | None, criteria: CriteriaSet | None = None) -> int:
        """Count persons matching a free-text query and optional criteria."""
        stmt = self._count_statement(self._free_text_clauses(query, criteria))
        return self._session.scalar(stmt) or 0

    def find_like_free_text(
        self,
        query: str | None,
        from_: int,
        size: int,
        criteria: CriteriaSet | None = None,
    ) -> list[Person]:
        """Fetch one page of persons matching a free-text query.

        Every whitespace-separated term must appear, case-insensitively, in at
        least one text attribute. An empty query matches every person.
        """
        stmt = self._find_statement(self._free_text_clauses(query, criteria), from_, size)
        return list(self._session.scalars(stmt).all())

    # === Criteria queries ===

    def count_with_criteria(self, criteria: CriteriaSet) -> int:
        """Count persons matching every criterion."""
        stmt = self._count_statement(self._criteria_clauses(criteria))
        return self._session.scalar(stmt) or 0

    def find_with_criteria(self, criteria: CriteriaSet, from_: int, size: int) -> list[Person]:
        """Fetch one page of persons matching every criterion, ordered by id."""
        stmt = self._find_statement(self._criteria_clauses(criteria), from_, size)
        return list(self._session.scalars(stmt).all())

    # === Statement building ===

    def _count_statement(self, clauses: Sequence[ColumnElement[bool]]) -> Select[tuple[int]]:
        return (
            select(func.count(Person.id))
            .select_from(Person)
            .outerjoin(Address, Person.address_id == Address.id)
            .where(*clauses)
        )

    def _find_statement(
        self, clauses: Sequence[ColumnElement[bool]], from_: int, size: int
    ) -> Select[tuple[Person]]:
        if from_ < 0 or size < 0:
            raise ValidationError(
                "Pagination parameters must not be negative",
                {"from": f"{from_}", "size": f"{size}"},
            )
        return (
            select(Person)
            .outerjoin(Address, Person.address_id == Address.id)
            .where(*clauses)
            .order_by(Person.id)
            .offset(from_)
            .limit(size)
        )

    def _free_text_clauses(
        self, query: str | None, criteria: CriteriaSet | None
    ) -> list[ColumnElement[bool]]:
        clauses: list[ColumnElement[bool]] = []
        for term in (query or "").split():
            pattern = f"%{_escape_like(term)}%"
            clauses.append(
                or_(*[ATTRIBUTE_PATHS[p].ilike(pattern, escape="\\") for p in FREE_TEXT_PATHS])
            )
        if criteria is not None:
            clauses.extend(self._criteria_clauses(criteria))
        return clauses

    def _criteria_clauses(self, criteria: CriteriaSet) -> list[ColumnElement[bool]]:
        return [self._criterion_clause(c) for c in criteria]

    def _criterion_clause(self, criterion: Criterion) -> ColumnElement[bool]:
        column = ATTRIBUTE_PATHS.get(criterion.path)
        if column is None:
            raise UnknownAttributeError(criterion.path, sorted(ATTRIBUTE_PATHS))

        if criterion.mode == MatchMode.ILIKE:
            return column.ilike(f"%{_escape_like(str(criterion.value))}%", escape="\\")
        if criterion.mode == MatchMode.EQUALS:
            if isinstance(criterion.value, str):
                return func.lower(column) == func.lower(criterion.value)
            return column == criterion.value
        lower, upper = criterion.value
        if upper is None:
            return column >= lower
        return and_(column >= lower, column < upper)

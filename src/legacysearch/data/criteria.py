"""Criteria sets for structured queries against the record store.

A criterion names an attribute path (``name``, ``address.country``...) and a
match mode. A criteria set is an ordered, AND-combined list of criteria; the
record store turns it into SQL ``WHERE`` clauses.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from legacysearch.exceptions import ValidationError


class MatchMode:
    """Supported criterion match modes."""

    ILIKE = "ilike"  # case-insensitive substring
    EQUALS = "equals"  # case-insensitive equality
    BETWEEN = "between"  # lower inclusive, upper exclusive

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid match mode values."""
        return [cls.ILIKE, cls.EQUALS, cls.BETWEEN]


@dataclass(frozen=True)
class Criterion:
    """Predicate over a single attribute path."""

    path: str
    value: Any
    mode: str = MatchMode.ILIKE

    def __post_init__(self) -> None:
        if self.mode not in MatchMode.values():
            raise ValidationError(
                f"Invalid match mode '{self.mode}'. Valid modes: {', '.join(MatchMode.values())}",
                {"mode": self.mode},
            )
        if self.mode == MatchMode.BETWEEN and (
            not isinstance(self.value, tuple) or len(self.value) != 2
        ):
            raise ValidationError(
                f"Criterion on '{self.path}' with mode 'between' needs a (lower, upper) tuple",
                {"path": self.path},
            )


@dataclass
class CriteriaSet:
    """Ordered collection of criteria combined with logical AND.

    Null filter values are dropped, so an empty set matches everything.
    """

    criteria: list[Criterion] = field(default_factory=list)

    def add(self, criterion: Criterion) -> CriteriaSet:
        """Append a criterion."""
        self.criteria.append(criterion)
        return self

    def ilike(self, path: str, value: str | None) -> CriteriaSet:
        """Add a case-insensitive substring match, unless value is None."""
        if value is not None:
            self.add(Criterion(path, value, MatchMode.ILIKE))
        return self

    def equals(self, path: str, value: Any | None) -> CriteriaSet:
        """Add a case-insensitive equality match, unless value is None."""
        if value is not None:
            self.add(Criterion(path, value, MatchMode.EQUALS))
        return self

    def between(self, path: str, lower: Any, upper: Any) -> CriteriaSet:
        """Add a half-open range match ``lower <= value < upper``.

        An upper bound of None leaves the range open above.
        """
        self.add(Criterion(path, (lower, upper), MatchMode.BETWEEN))
        return self

    @property
    def paths(self) -> list[str]:
        """Attribute paths referenced, in order."""
        return [c.path for c in self.criteria]

    def __iter__(self) -> Iterator[Criterion]:
        return iter(self.criteria)

    def __len__(self) -> int:
        return len(self.criteria)

    def __bool__(self) -> bool:
        return bool(self.criteria)

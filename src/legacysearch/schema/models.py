"""SQLAlchemy ORM models for the LegacySearch record store.

A Person owns exactly one Address row. The reference column is the stable
external identifier shared with the search index; the integer id is assigned
by the database and never by callers or by the index.
"""

from __future__ import annotations

from datetime import date
from sqlalchemy import Date, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all LegacySearch models."""

    pass


class Address(Base):
    """Postal address of a person."""

    __tablename__ = "ls_addresses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    country: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    country_code: Mapped[str | None] = mapped_column(String(8), nullable=True)
    city: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    zipcode: Mapped[str | None] = mapped_column(String(32), nullable=True)

    def __repr__(self) -> str:
        return f"Address(city={self.city!r}, country={self.country!r})"


class Person(Base):
    """Canonical person record."""

    __tablename__ = "ls_persons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reference: Mapped[str | None] = mapped_column(
        String(255), unique=True, nullable=True, index=True
    )
    name: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    gender: Mapped[str | None] = mapped_column(String(16), nullable=True)
    children: Mapped[int | None] = mapped_column(Integer, nullable=True)
    address_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("ls_addresses.id", ondelete="SET NULL"), nullable=True
    )

    # Eager so detached persons (returned after their scope closed) keep it
    address: Mapped[Address | None] = relationship(
        "Address",
        lazy="joined",
        cascade="all, delete-orphan",
        single_parent=True,
    )

    def __repr__(self) -> str:
        return f"Person(id={self.id!r}, reference={self.reference!r}, name={self.name!r})"

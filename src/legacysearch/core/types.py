"""Wire types for LegacySearch.

All types are pydantic models so they serialize straight to the JSON shape
clients expect. The search envelope mirrors a search engine response
(``took`` / ``hits.total`` / ``hits.hits[]._source``) even when the relational
store answered the query.
"""

from __future__ import annotations

from datetime import date
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from legacysearch.exceptions import ValidationError
from legacysearch.schema.models import Address, Person


class AddressDocument(BaseModel):
    """Wire shape of an address."""

    model_config = ConfigDict(from_attributes=True)

    country: str | None = Field(default=None, description="Country name")
    country_code: str | None = Field(default=None, description="ISO country code")
    city: str | None = Field(default=None, description="City name")
    zipcode: str | None = Field(default=None, description="Postal code")

    def to_address(self) -> Address:
        """Build a transient Address row from this document."""
        return Address(
            country=self.country,
            country_code=self.country_code,
            city=self.city,
            zipcode=self.zipcode,
        )


class PersonDocument(BaseModel):
    """Wire shape of a person.

    ``id`` is emitted on output but never required on input, and ignored by
    :meth:`to_person` since identity is owned by the record store.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int | None = Field(default=None, description="Internal identity (read-only)")
    reference: str | None = Field(default=None, description="Stable external identifier")
    name: str | None = None
    date_of_birth: date | None = None
    gender: str | None = None
    children: int | None = None
    address: AddressDocument | None = None

    @classmethod
    def from_person(cls, person: Person) -> PersonDocument:
        """Project an ORM person onto its wire shape."""
        return cls.model_validate(person)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> PersonDocument:
        """Validate an inbound JSON payload.

        Raises:
            ValidationError: If the payload does not match the person shape
        """
        try:
            return cls.model_validate(payload)
        except pydantic.ValidationError as e:
            field_errors = {
                ".".join(str(loc) for loc in err["loc"]): err["msg"] for err in e.errors()
            }
            raise ValidationError("Invalid person payload", field_errors) from e

    def to_person(self) -> Person:
        """Build a transient Person from this document, without identity."""
        return Person(
            reference=self.reference,
            name=self.name,
            date_of_birth=self.date_of_birth,
            gender=self.gender,
            children=self.children,
            address=self.address.to_address() if self.address else None,
        )


class SearchHit(BaseModel):
    """One wrapped result. ``_source`` only mirrors the search engine wrapper."""

    model_config = ConfigDict(populate_by_name=True)

    source: Any = Field(alias="_source")


class SearchHits(BaseModel):
    """Total match count plus the current page of hits."""

    total: int = Field(..., description="Number of matches, independent of page size")
    hits: list[SearchHit] = Field(default_factory=list)

    @property
    def total_hits(self) -> int:
        """Alias of ``total`` kept for search engine client compatibility."""
        return self.total


class SearchResponse(BaseModel):
    """Paginated response envelope shared by every search path."""

    took: int = Field(..., description="Elapsed time in milliseconds")
    hits: SearchHits

"""Record store schema for LegacySearch."""

from legacysearch.schema.models import Address, Base, Person

__all__ = ["Base", "Person", "Address"]

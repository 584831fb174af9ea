"""Merge-on-update field copying between mapped entities."""

from __future__ import annotations

from typing import Any

from sqlalchemy import inspect
from sqlalchemy.orm import Mapper


class FieldCopier:
    """Deep-copies the set fields of one mapped entity onto another.

    Only non-null values are copied, so a partial source never erases what the
    target already holds. Primary and foreign key columns are left untouched:
    the target keeps its identity. Scalar relationships are merged
    recursively; a missing target relation receives a fresh copy.
    """

    def copy(self, source: Any, target: Any) -> Any:
        """Copy non-null fields from ``source`` onto ``target``.

        Args:
            source: Entity holding the incoming values
            target: Entity to update in place

        Returns:
            The updated target
        """
        mapper: Mapper[Any] = inspect(type(target))
        if not isinstance(source, mapper.class_):
            raise TypeError(
                f"Cannot copy {type(source).__name__} onto {type(target).__name__}"
            )

        key_columns = {c.key for c in mapper.primary_key}
        key_columns.update(c.key for c in mapper.columns if c.foreign_keys)

        for attr in mapper.column_attrs:
            if any(col.key in key_columns for col in attr.columns):
                continue
            value = getattr(source, attr.key)
            if value is not None:
                setattr(target, attr.key, value)

        for rel in mapper.relationships:
            if rel.uselist:
                continue
            incoming = getattr(source, rel.key)
            if incoming is None:
                continue
            current = getattr(target, rel.key)
            if current is None:
                current = rel.mapper.class_()
                setattr(target, rel.key, current)
            self.copy(incoming, current)

        return target

"""Entity mapping helpers."""

from legacysearch.mapping.copier import FieldCopier

__all__ = ["FieldCopier"]

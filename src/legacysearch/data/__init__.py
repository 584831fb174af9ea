"""Record store access for LegacySearch."""

from legacysearch.data.criteria import CriteriaSet, Criterion, MatchMode
from legacysearch.data.record_store import RecordStore, TransactionScope

__all__ = ["CriteriaSet", "Criterion", "MatchMode", "RecordStore", "TransactionScope"]

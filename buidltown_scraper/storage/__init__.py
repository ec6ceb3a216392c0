"""
Persisted stores.

- RecordStore: contract used by the reconciler
- InMemoryStore: dict-backed store for tests and dry runs
- ApifyRecordStore: Apify key-value store backend
"""

from .base import RecordStore, StoredRow
from .memory import InMemoryStore
from .apify_store import ApifyRecordStore

__all__ = ["RecordStore", "StoredRow", "InMemoryStore", "ApifyRecordStore"]

"""
Store contract used by the reconciler.

A store holds one logical table per entity type ("hackathons", "grants")
with a unique natural key (source, source_id). Rows are the snake_case
dicts produced by ``CanonicalRecord.to_row()``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class StoredRow:
    """What the reconciler needs to know about an existing row."""
    id: str
    content_hash: Optional[str]


class RecordStore(ABC):
    """
    Abstract persisted store.

    Implementations raise ``PersistenceError`` (or its subclass
    ``ConstraintViolation``) for failures they can classify; any other
    exception is wrapped by the reconciler.
    """

    @abstractmethod
    async def find(self, table: str, source: str, source_id: str) -> Optional[StoredRow]:
        """Look up a row by natural key."""
        pass

    @abstractmethod
    async def insert(self, table: str, row: dict) -> str:
        """Insert a new row and return its id."""
        pass

    @abstractmethod
    async def update(self, table: str, row_id: str, row: dict) -> None:
        """Overwrite every field of an existing row."""
        pass

    async def close(self) -> None:
        """Release resources held by the store."""
        return None

"""
In-memory store.

Used by tests and dry runs. Enforces the same unique constraints as the
production database: (source, source_id) and slug, per table.
"""

import copy
import uuid
from typing import Optional

import structlog

from ..errors import ConstraintViolation, PersistenceError
from .base import RecordStore, StoredRow

logger = structlog.get_logger(__name__)


class InMemoryStore(RecordStore):
    """
    Dict-backed store with write accounting.

    ``writes`` counts successful inserts and updates; tests use it to
    assert that unchanged records cause no write.
    """

    def __init__(self):
        self._tables: dict[str, dict[str, dict]] = {}
        self._key_index: dict[str, dict[tuple[str, str], str]] = {}
        self._slug_index: dict[str, dict[str, str]] = {}
        self.writes = 0
        self.inserts = 0
        self.updates = 0

    def _table(self, table: str) -> dict[str, dict]:
        if not table:
            raise PersistenceError("Table name is required")
        self._key_index.setdefault(table, {})
        self._slug_index.setdefault(table, {})
        return self._tables.setdefault(table, {})

    async def find(self, table: str, source: str, source_id: str) -> Optional[StoredRow]:
        rows = self._table(table)
        row_id = self._key_index[table].get((source, source_id))
        if row_id is None:
            return None
        return StoredRow(id=row_id, content_hash=rows[row_id].get("content_hash"))

    async def insert(self, table: str, row: dict) -> str:
        rows = self._table(table)
        key = (row["source"], row["source_id"])
        slug = row.get("slug")

        if key in self._key_index[table]:
            raise ConstraintViolation(
                f"Duplicate key {key} in {table}",
                source=key[0],
                source_id=key[1],
            )
        if slug and slug in self._slug_index[table]:
            raise ConstraintViolation(
                f"Duplicate slug {slug!r} in {table}",
                source=key[0],
                source_id=key[1],
            )

        row_id = str(uuid.uuid4())
        rows[row_id] = {**copy.deepcopy(row), "id": row_id}
        self._key_index[table][key] = row_id
        if slug:
            self._slug_index[table][slug] = row_id

        self.writes += 1
        self.inserts += 1
        logger.debug("row_inserted", table=table, source=key[0], source_id=key[1])
        return row_id

    async def update(self, table: str, row_id: str, row: dict) -> None:
        rows = self._table(table)
        if row_id not in rows:
            raise PersistenceError(f"Row {row_id} not found in {table}")

        existing = rows[row_id]
        old_key = (existing["source"], existing["source_id"])
        new_key = (row["source"], row["source_id"])
        if new_key != old_key and new_key in self._key_index[table]:
            raise ConstraintViolation(
                f"Duplicate key {new_key} in {table}",
                source=new_key[0],
                source_id=new_key[1],
            )

        old_slug, new_slug = existing.get("slug"), row.get("slug")
        owner = self._slug_index[table].get(new_slug) if new_slug else None
        if owner is not None and owner != row_id:
            raise ConstraintViolation(
                f"Duplicate slug {new_slug!r} in {table}",
                source=new_key[0],
                source_id=new_key[1],
            )

        if old_slug and old_slug != new_slug:
            self._slug_index[table].pop(old_slug, None)
        if new_slug:
            self._slug_index[table][new_slug] = row_id
        if new_key != old_key:
            self._key_index[table].pop(old_key, None)
            self._key_index[table][new_key] = row_id

        rows[row_id] = {**copy.deepcopy(row), "id": row_id}
        self.writes += 1
        self.updates += 1
        logger.debug("row_updated", table=table, source=new_key[0], source_id=new_key[1])

    def get(self, table: str, source: str, source_id: str) -> Optional[dict]:
        """Return a copy of a stored row, or None."""
        row_id = self._key_index.get(table, {}).get((source, source_id))
        if row_id is None:
            return None
        return copy.deepcopy(self._tables[table][row_id])

    def rows(self, table: str) -> list[dict]:
        """All rows of a table in insertion order."""
        return [copy.deepcopy(row) for row in self._tables.get(table, {}).values()]

    def count(self, table: str) -> int:
        return len(self._tables.get(table, {}))

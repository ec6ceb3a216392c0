"""
Apify key-value store backend.

Each row is stored under "{table}-{source}-{source_id}". Apify keys
allow only a restricted character set, so other characters are replaced
and overlong keys are shortened with a hash suffix.
"""

import hashlib
import re
from typing import Any, Optional

import structlog
from apify import Actor

from ..errors import PersistenceError
from .base import RecordStore, StoredRow

logger = structlog.get_logger(__name__)

MAX_KEY_LENGTH = 256
_INVALID_KEY_CHARS = re.compile(r"[^a-zA-Z0-9!\-_.'()]")


def record_key(table: str, source: str, source_id: str) -> str:
    """Build the storage key of a row."""
    key = _INVALID_KEY_CHARS.sub("_", f"{table}-{source}-{source_id}")
    if len(key) > MAX_KEY_LENGTH:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:16]
        key = f"{key[:MAX_KEY_LENGTH - 17]}-{digest}"
    return key


class ApifyRecordStore(RecordStore):
    """
    Store rows in a named Apify key-value store.

    Usage:
        async with Actor:
            store = await ApifyRecordStore.open("buidltown-records")
    """

    def __init__(self, kv_store: Any):
        self._kv = kv_store

    @classmethod
    async def open(cls, name: Optional[str] = None) -> "ApifyRecordStore":
        """Open (or create) the key-value store; must run inside ``async with Actor``."""
        kv_store = await Actor.open_key_value_store(name=name)
        logger.info("kv_store_opened", name=name or "default")
        return cls(kv_store)

    async def find(self, table: str, source: str, source_id: str) -> Optional[StoredRow]:
        key = record_key(table, source, source_id)
        try:
            row = await self._kv.get_value(key)
        except Exception as e:
            raise PersistenceError(
                f"Lookup of {key} failed: {e}", source=source, source_id=source_id
            ) from e

        if not row:
            return None
        return StoredRow(id=key, content_hash=row.get("content_hash"))

    async def insert(self, table: str, row: dict) -> str:
        key = record_key(table, row["source"], row["source_id"])
        await self._write(key, {**row, "id": key})
        return key

    async def update(self, table: str, row_id: str, row: dict) -> None:
        await self._write(row_id, {**row, "id": row_id})

    async def _write(self, key: str, row: dict) -> None:
        try:
            await self._kv.set_value(key, row)
        except Exception as e:
            raise PersistenceError(
                f"Write of {key} failed: {e}",
                source=row.get("source"),
                source_id=row.get("source_id"),
            ) from e
        logger.debug("kv_row_written", key=key)

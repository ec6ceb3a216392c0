"""
Upsert reconciliation.

Decides per record whether to create, update or leave a row alone,
keyed by (source, source_id) and driven by the content hash. The
strategy is last-write-wins without a concurrency token; each extractor
reconciles its own keys serially.
"""

from enum import Enum

import structlog

from .core.hashing import generate_content_hash
from .core.models import CanonicalRecord
from .errors import PersistenceError
from .storage.base import RecordStore

logger = structlog.get_logger(__name__)


class ReconcileOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


class UpsertReconciler:
    """
    Create/update/skip records against a store.

    Usage:
        reconciler = UpsertReconciler(store)
        outcome = await reconciler.reconcile(record)
    """

    def __init__(self, store: RecordStore):
        self.store = store

    async def reconcile(self, record: CanonicalRecord) -> ReconcileOutcome:
        """
        Persist a record if it is new or changed.

        Args:
            record: Mapped hackathon or grant

        Returns:
            ReconcileOutcome

        Raises:
            PersistenceError: Lookup or write failed; the record is not
                reported as unchanged
        """
        table = record.TABLE
        source = record.source.value
        source_id = record.source_id

        if not record.content_hash:
            record.content_hash = generate_content_hash(record)

        try:
            existing = await self.store.find(table, source, source_id)

            if existing is None:
                await self.store.insert(table, record.to_row())
                outcome = ReconcileOutcome.CREATED
            elif existing.content_hash != record.content_hash:
                await self.store.update(table, existing.id, record.to_row())
                outcome = ReconcileOutcome.UPDATED
            else:
                outcome = ReconcileOutcome.UNCHANGED

        except PersistenceError as e:
            if e.source is None:
                e.source, e.source_id = source, source_id
            raise
        except Exception as e:
            raise PersistenceError(
                f"{type(e).__name__}: {e}", source=source, source_id=source_id
            ) from e

        logger.debug(
            "reconciled",
            table=table,
            source=source,
            source_id=source_id,
            outcome=outcome.value,
            hash=record.content_hash[:8],
        )
        return outcome

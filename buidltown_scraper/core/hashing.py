"""
Content hashing and slug generation.

The content hash covers only fields a visitor would notice changing, so
re-scraping an unchanged listing reproduces the same digest and the
reconciler can skip the write.
"""

import hashlib
import json
import re
from datetime import datetime
from typing import Any, Optional

from .models import CanonicalRecord, GrantRecord, HackathonRecord

SLUG_BASE_LENGTH = 50
SOURCE_ID_PREFIX_LENGTH = 8

# Significant fields, in hashing order.
HASH_FIELDS = (
    "name",
    "description",
    "start",
    "end",
    "deadline",
    "amount",
    "status",
    "action_url",
)


def slugify(name: str) -> str:
    """
    Lowercase a name and collapse every run of non-alphanumerics to "-".

    Truncation happens after stripping, so a slug may end in a hyphen
    when the cut falls on a separator. Existing slugs depend on this.
    """
    base = re.sub(r"[^a-z0-9]+", "-", (name or "").lower())
    return base.strip("-")[:SLUG_BASE_LENGTH]


def generate_slug(name: str, source: str, source_id: str) -> str:
    """
    Build the display slug of a record.

    Args:
        name: Record name
        source: Source value, e.g. "devfolio"
        source_id: Upstream identifier; only the first 8 chars are used

    Returns:
        "{slugified-name}-{source}-{source_id[:8]}"
    """
    source = getattr(source, "value", source)
    return f"{slugify(name)}-{source}-{str(source_id)[:SOURCE_ID_PREFIX_LENGTH]}"


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _amount_of(record: CanonicalRecord) -> Optional[dict]:
    if isinstance(record, HackathonRecord):
        if record.prize_pool is None:
            return None
        return {
            "amount": record.prize_pool.amount,
            "currency": record.prize_pool.currency,
        }
    if isinstance(record, GrantRecord):
        if record.funding is None:
            return None
        return {
            "min": record.funding.min_amount,
            "max": record.funding.max_amount,
            "total": record.funding.total_pool,
            "currency": record.funding.currency,
        }
    return None


def significant_fields(record: CanonicalRecord) -> dict[str, Any]:
    """Pick the hashed subset of a record as plain JSON values."""
    if isinstance(record, GrantRecord):
        start = record.program_start_date
        end = record.program_end_date
        deadline = record.application_deadline
    else:
        start = getattr(record, "start_date", None)
        end = getattr(record, "end_date", None)
        deadline = None

    status = getattr(record, "status", None)
    values = {
        "name": record.name,
        "description": record.description,
        "start": _iso(start),
        "end": _iso(end),
        "deadline": _iso(deadline),
        "amount": _amount_of(record),
        "status": getattr(status, "value", status),
        "action_url": getattr(record, "action_url", None),
    }
    return {key: values[key] for key in HASH_FIELDS}


def generate_content_hash(record: CanonicalRecord) -> str:
    """
    Generate SHA-256 hash over the significant fields of a record.

    Hash is based on:
    - name, description
    - start / end dates and the application deadline
    - prize pool or funding amounts with currency
    - status
    - primary action URL (registration or application)

    Logos, banners, chains, categories, raw payload and scrape
    timestamps are ignored.

    Args:
        record: Hackathon or grant record

    Returns:
        SHA-256 hex digest
    """
    content = json.dumps(
        significant_fields(record),
        sort_keys=True,
        separators=(",", ":"),
        default=str,
        ensure_ascii=False,
    )
    return hashlib.sha256(content.encode("utf-8")).hexdigest()

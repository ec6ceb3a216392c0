"""
Canonical data models for hackathons and grants.

Both record types share identity (source, source_id), display text,
chain/category taxonomy and audit fields. Rows written to the store are
produced by ``to_row()`` in snake_case with ISO-8601 dates.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class Source(str, Enum):
    """Upstream origin. Values are part of the identity key; never rename."""
    ETHGLOBAL = "ethglobal"
    DEVFOLIO = "devfolio"
    DORAHACKS = "dorahacks"
    AKINDO = "akindo"
    DEVPOST = "devpost"
    HACKQUEST = "hackquest"
    TAIKAI = "taikai"
    FOUNDATION_GRANTS = "foundation_grants"
    ALCHEMY_GRANTS = "alchemy_grants"


class EntityType(str, Enum):
    """Logical table a source writes to."""
    HACKATHON = "hackathon"
    GRANT = "grant"


class HackathonStatus(str, Enum):
    UPCOMING = "upcoming"
    REGISTRATION_OPEN = "registration_open"
    ONGOING = "ongoing"
    JUDGING = "judging"
    COMPLETED = "completed"


class GrantStatus(str, Enum):
    ACTIVE = "active"
    UPCOMING = "upcoming"
    CLOSED = "closed"
    PAUSED = "paused"


class HackathonFormat(str, Enum):
    ONLINE = "online"
    IN_PERSON = "in-person"
    HYBRID = "hybrid"


class FundingFormat(str, Enum):
    FIXED = "fixed"
    RANGE = "range"
    NEGOTIABLE = "negotiable"
    MILESTONE_BASED = "milestone-based"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _serialize(value: Any) -> Any:
    """Convert a dataclass field value into a store-friendly value."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize(v) for v in value]
    return value


@dataclass
class PrizePool:
    """Total prize pool of a hackathon."""
    amount: float
    currency: str = "USD"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Funding:
    """Funding information of a grant program."""
    currency: str = "USD"
    format: FundingFormat = FundingFormat.RANGE
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None
    total_pool: Optional[float] = None

    def to_dict(self) -> dict:
        data = {k: v for k, v in asdict(self).items() if v is not None}
        data["format"] = self.format.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Funding":
        return cls(
            currency=data.get("currency", "USD"),
            format=FundingFormat(data.get("format", FundingFormat.RANGE.value)),
            min_amount=data.get("min_amount", data.get("minAmount")),
            max_amount=data.get("max_amount", data.get("maxAmount")),
            total_pool=data.get("total_pool", data.get("totalPool")),
        )


@dataclass
class Foundation:
    """Organisation behind a grant program."""
    name: str
    chain: str
    website_url: Optional[str] = None
    logo_url: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CanonicalRecord:
    """
    Fields shared by hackathons and grants.

    ``chains`` may hold names that did not normalize; ``chain_ids`` only
    holds ids of recognized chains, so it is never longer than ``chains``.
    """

    source: Source
    source_id: str
    slug: str
    name: str

    description: Optional[str] = None
    short_description: Optional[str] = None

    chains: list[str] = field(default_factory=list)
    chain_ids: list[int] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)

    logo_url: Optional[str] = None
    banner_url: Optional[str] = None

    # Audit
    raw_data: dict = field(default_factory=dict)
    content_hash: Optional[str] = None
    last_scraped_at: datetime = field(default_factory=_utcnow)

    TABLE = ""

    @property
    def key(self) -> tuple[str, str]:
        """Natural reconciliation key."""
        return (self.source.value, self.source_id)

    def to_row(self) -> dict:
        """Convert to a snake_case row for the store."""
        return {k: _serialize(v) for k, v in asdict(self).items()}


@dataclass
class HackathonRecord(CanonicalRecord):
    """Canonical hackathon."""

    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: HackathonStatus = HackathonStatus.UPCOMING
    format: HackathonFormat = HackathonFormat.ONLINE
    location: Optional[str] = None
    prize_pool: Optional[PrizePool] = None
    themes: list[str] = field(default_factory=list)

    registration_url: Optional[str] = None
    website_url: Optional[str] = None
    discord_url: Optional[str] = None
    twitter_url: Optional[str] = None

    participant_count: Optional[int] = None
    is_official: bool = False

    TABLE = "hackathons"

    @property
    def action_url(self) -> Optional[str]:
        return self.registration_url


@dataclass
class GrantRecord(CanonicalRecord):
    """Canonical grant program."""

    application_deadline: Optional[datetime] = None
    program_start_date: Optional[datetime] = None
    program_end_date: Optional[datetime] = None
    is_rolling: bool = False
    status: GrantStatus = GrantStatus.ACTIVE

    foundation: Optional[Foundation] = None
    funding: Optional[Funding] = None
    tracks: list[str] = field(default_factory=list)

    application_url: Optional[str] = None
    guidelines_url: Optional[str] = None

    TABLE = "grants"

    @property
    def action_url(self) -> Optional[str]:
        return self.application_url


@dataclass
class ScrapeCounts:
    """Aggregate counts of one extractor run."""
    found: int = 0
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    failed: int = 0

    def to_dict(self) -> dict:
        return asdict(self)

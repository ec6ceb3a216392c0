"""
Core layer - pure building blocks of the pipeline.

Components:
- models: HackathonRecord, GrantRecord and their enums
- chains: Chain alias table and normalization
- categories: Keyword-based category assignment
- hashing: Content hash and slug generation
- dates: Free-text date range parsing
- status: Status keyword tables and date-derived status
- normalizer: Prize amounts and text cleanup
- http_client: Rate-limited, retrying HTTP client
- selectors: Meta, JSON-LD and __NEXT_DATA__ helpers for listing pages
"""

from .models import (
    CanonicalRecord,
    EntityType,
    Foundation,
    Funding,
    FundingFormat,
    GrantRecord,
    GrantStatus,
    HackathonFormat,
    HackathonRecord,
    HackathonStatus,
    PrizePool,
    ScrapeCounts,
    Source,
)
from .chains import NormalizedChains, normalize_chains, normalize_chain_name, extract_chains_from_text
from .categories import assign_categories
from .hashing import generate_content_hash, generate_slug, slugify
from .dates import DateRange, parse_date_range, parse_iso_datetime, estimate_dates_from_status
from .status import (
    StatusKeywordTable,
    map_hackathon_status,
    map_grant_status,
    resolve_hackathon_status,
)
from .normalizer import parse_prize_amount, parse_participant_count, normalize_title, cleanup_html_text

__all__ = [
    "CanonicalRecord",
    "EntityType",
    "Foundation",
    "Funding",
    "FundingFormat",
    "GrantRecord",
    "GrantStatus",
    "HackathonFormat",
    "HackathonRecord",
    "HackathonStatus",
    "PrizePool",
    "ScrapeCounts",
    "Source",
    "NormalizedChains",
    "normalize_chains",
    "normalize_chain_name",
    "extract_chains_from_text",
    "assign_categories",
    "generate_content_hash",
    "generate_slug",
    "slugify",
    "DateRange",
    "parse_date_range",
    "parse_iso_datetime",
    "estimate_dates_from_status",
    "StatusKeywordTable",
    "map_hackathon_status",
    "map_grant_status",
    "resolve_hackathon_status",
    "parse_prize_amount",
    "parse_participant_count",
    "normalize_title",
    "cleanup_html_text",
]

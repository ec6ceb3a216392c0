"""
Record mapping helpers shared by all extractors.

``build_hackathon_record`` and ``build_grant_record`` fill every field of
a canonical record explicitly, normalize chains, assign categories,
resolve status and compute slug and content hash. Extractors only pick
values out of their raw candidates and pass them in.
"""

from datetime import datetime
from typing import Iterable, Optional

from buidltown_scraper.core.categories import assign_categories
from buidltown_scraper.core.chains import extract_chains_from_text, normalize_chains
from buidltown_scraper.core.dates import estimate_dates_from_status
from buidltown_scraper.core.hashing import generate_content_hash, generate_slug
from buidltown_scraper.core.models import (
    Foundation,
    Funding,
    GrantRecord,
    GrantStatus,
    HackathonFormat,
    HackathonRecord,
    HackathonStatus,
    PrizePool,
    Source,
)
from buidltown_scraper.core.normalizer import normalize_title, shorten
from buidltown_scraper.core.status import map_grant_status, resolve_hackathon_status

SHORT_DESCRIPTION_LENGTH = 200


def _clean_list(values: Optional[Iterable[str]]) -> list[str]:
    cleaned: list[str] = []
    for value in values or []:
        if isinstance(value, str):
            value = normalize_title(value)
            if value and value not in cleaned:
                cleaned.append(value)
    return cleaned


def _required_name(name: Optional[str]) -> str:
    name = normalize_title(name)
    if not name:
        raise ValueError("candidate has no name")
    return name


def _start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def build_hackathon_record(
    source: Source,
    source_id: str,
    name: Optional[str],
    *,
    now: datetime,
    description: Optional[str] = None,
    short_description: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    explicit_status: Optional[HackathonStatus] = None,
    estimate_missing_dates: bool = False,
    format: HackathonFormat = HackathonFormat.ONLINE,
    location: Optional[str] = None,
    prize_pool: Optional[PrizePool] = None,
    chains: Optional[Iterable[str]] = None,
    themes: Optional[Iterable[str]] = None,
    tags: Optional[Iterable[str]] = None,
    registration_url: Optional[str] = None,
    website_url: Optional[str] = None,
    discord_url: Optional[str] = None,
    twitter_url: Optional[str] = None,
    logo_url: Optional[str] = None,
    banner_url: Optional[str] = None,
    participant_count: Optional[int] = None,
    is_official: bool = False,
    raw_data: Optional[dict] = None,
) -> HackathonRecord:
    """
    Build a canonical hackathon.

    Chains found nowhere in the listing are searched for in the name,
    description and themes. With ``estimate_missing_dates`` a listing
    without dates gets a window guessed from its status; the guess is
    anchored to the start of the day so reruns on the same day hash the
    same.

    Raises:
        ValueError: Candidate has no usable name or id
    """
    if not source_id:
        raise ValueError("candidate has no source_id")
    name = _required_name(name)
    description = description.strip() if description and description.strip() else None
    themes = _clean_list(themes)
    tags = _clean_list(tags)

    raw_chains = _clean_list(chains)
    if not raw_chains:
        raw_chains = extract_chains_from_text(" ".join(filter(None, [name, description, *themes, *tags])))
    normalized = normalize_chains(raw_chains)

    categories = assign_categories(name, description, short_description, tags=[*themes, *tags])

    status = resolve_hackathon_status(explicit_status, start_date, end_date, now)
    if estimate_missing_dates and start_date is None and end_date is None:
        start_date, end_date = estimate_dates_from_status(status, _start_of_day(now))

    record = HackathonRecord(
        source=source,
        source_id=str(source_id),
        slug=generate_slug(name, source.value, str(source_id)),
        name=name,
        description=description,
        short_description=normalize_title(short_description) or shorten(description, SHORT_DESCRIPTION_LENGTH),
        chains=normalized.chains,
        chain_ids=normalized.chain_ids,
        categories=categories,
        logo_url=logo_url or None,
        banner_url=banner_url or None,
        raw_data=dict(raw_data or {}),
        last_scraped_at=now,
        start_date=start_date,
        end_date=end_date,
        status=status,
        format=format,
        location=normalize_title(location) or None,
        prize_pool=prize_pool,
        themes=themes,
        registration_url=registration_url or None,
        website_url=website_url or registration_url or None,
        discord_url=discord_url or None,
        twitter_url=twitter_url or None,
        participant_count=participant_count,
        is_official=is_official,
    )
    record.content_hash = generate_content_hash(record)
    return record


def build_grant_record(
    source: Source,
    source_id: str,
    name: Optional[str],
    *,
    now: datetime,
    description: Optional[str] = None,
    short_description: Optional[str] = None,
    foundation: Optional[Foundation] = None,
    funding: Optional[Funding] = None,
    status: Optional[GrantStatus] = None,
    status_text: Optional[str] = None,
    application_deadline: Optional[datetime] = None,
    program_start_date: Optional[datetime] = None,
    program_end_date: Optional[datetime] = None,
    is_rolling: bool = False,
    chains: Optional[Iterable[str]] = None,
    categories: Optional[Iterable[str]] = None,
    tracks: Optional[Iterable[str]] = None,
    application_url: Optional[str] = None,
    guidelines_url: Optional[str] = None,
    logo_url: Optional[str] = None,
    banner_url: Optional[str] = None,
    raw_data: Optional[dict] = None,
) -> GrantRecord:
    """
    Build a canonical grant program.

    Upstream categories are used when given; only when there are none is
    the name and description scanned for keywords. A deadline in the past
    closes a non-rolling grant.

    Raises:
        ValueError: Candidate has no usable name or id
    """
    if not source_id:
        raise ValueError("candidate has no source_id")
    name = _required_name(name)
    description = description.strip() if description and description.strip() else None

    raw_chains = _clean_list(chains)
    if not raw_chains and foundation and foundation.chain:
        raw_chains = [foundation.chain]
    normalized = normalize_chains(raw_chains)

    given_categories = _clean_list(categories)
    if given_categories:
        assigned = assign_categories(tags=given_categories)
    else:
        assigned = assign_categories(name, description, short_description)

    resolved = GrantStatus(status) if status else map_grant_status(status_text)
    if (
        application_deadline is not None
        and not is_rolling
        and application_deadline < now
        and resolved is GrantStatus.ACTIVE
    ):
        resolved = GrantStatus.CLOSED

    record = GrantRecord(
        source=source,
        source_id=str(source_id),
        slug=generate_slug(name, source.value, str(source_id)),
        name=name,
        description=description,
        short_description=normalize_title(short_description) or shorten(description, SHORT_DESCRIPTION_LENGTH),
        chains=normalized.chains,
        chain_ids=normalized.chain_ids,
        categories=assigned,
        logo_url=logo_url or (foundation.logo_url if foundation else None),
        banner_url=banner_url or None,
        raw_data=dict(raw_data or {}),
        last_scraped_at=now,
        application_deadline=application_deadline,
        program_start_date=program_start_date,
        program_end_date=program_end_date,
        is_rolling=bool(is_rolling),
        status=resolved,
        foundation=foundation,
        funding=funding,
        tracks=_clean_list(tracks),
        application_url=application_url or None,
        guidelines_url=guidelines_url or None,
    )
    record.content_hash = generate_content_hash(record)
    return record

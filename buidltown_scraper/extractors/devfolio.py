"""
Devfolio hackathons via the public JSON API.

``GET https://api.devfolio.co/api/hackathons?filter=<filter>&page=<n>``
returns ``{"result": [...]}``; an empty result ends pagination. Each
configured filter (application_open, upcoming, past) is walked in turn.
"""

from typing import Any, Optional

from buidltown_scraper.core.dates import parse_iso_datetime
from buidltown_scraper.core.models import HackathonFormat, HackathonRecord, HackathonStatus, Source
from buidltown_scraper.errors import ExtractorFetchError

from .base import SourceExtractor
from .mapping import build_hackathon_record

API_URL = "https://api.devfolio.co/api/hackathons"
DEFAULT_FILTERS = ("application_open", "upcoming", "past")

# Listing filter a hackathon was found under, when it says more than the dates
FILTER_STATUS = {
    "application_open": HackathonStatus.REGISTRATION_OPEN,
}


def theme_names(themes: Any) -> list[str]:
    """
    Flatten the API's theme list.

    Themes come either as plain strings or as
    ``{"theme": {"name": "DeFi"}}`` / ``{"name": "DeFi"}`` objects.
    """
    names = []
    for theme in themes or []:
        if isinstance(theme, str):
            names.append(theme)
        elif isinstance(theme, dict):
            inner = theme.get("theme") if isinstance(theme.get("theme"), dict) else theme
            name = inner.get("name")
            if name:
                names.append(name)
    return names


class DevfolioExtractor(SourceExtractor):
    """Devfolio hackathons, paginated per listing filter."""

    source = Source.DEVFOLIO
    display_name = "Devfolio"
    default_listing_url = API_URL

    @property
    def filters(self) -> list[str]:
        return list(self.metadata.get("filters") or DEFAULT_FILTERS)

    async def fetch_candidates(self) -> list[dict]:
        candidates: list[dict] = []

        for index, listing_filter in enumerate(self.filters):
            try:
                items = await self.fetch_json_pages("result", params={"filter": listing_filter})
            except ExtractorFetchError as e:
                # Only the first filter's listing is required
                if index == 0:
                    raise
                self.logger.warning("listing_filter_failed", filter=listing_filter, error=str(e))
                continue

            candidates.extend({**item, "_filter": listing_filter} for item in items)

        return candidates

    def source_id_of(self, candidate: dict) -> str:
        return str(candidate.get("slug") or candidate.get("uuid") or "")

    def map_candidate(self, candidate: dict) -> HackathonRecord:
        slug = self.source_id_of(candidate)
        themes = theme_names(candidate.get("themes"))
        settings = candidate.get("hackathon_setting") or {}

        is_online = candidate.get("is_online")
        if is_online is None:
            event_format = HackathonFormat.ONLINE
        else:
            event_format = HackathonFormat.ONLINE if is_online else HackathonFormat.IN_PERSON

        location: Optional[str] = candidate.get("location") or None
        if event_format is HackathonFormat.ONLINE and not location:
            location = "Online"

        url = f"https://{slug}.devfolio.co/"
        participants = candidate.get("participants_count")

        return build_hackathon_record(
            self.source,
            slug,
            candidate.get("name"),
            now=self.now(),
            description=candidate.get("desc") or candidate.get("tagline"),
            short_description=candidate.get("tagline"),
            start_date=parse_iso_datetime(candidate.get("starts_at")),
            end_date=parse_iso_datetime(candidate.get("ends_at")),
            explicit_status=FILTER_STATUS.get(candidate.get("_filter")),
            format=event_format,
            location=location,
            themes=themes,
            registration_url=url,
            website_url=settings.get("site") or url,
            discord_url=settings.get("discord"),
            twitter_url=settings.get("twitter"),
            logo_url=settings.get("logo") or candidate.get("logo"),
            banner_url=candidate.get("cover_img"),
            participant_count=participants if isinstance(participants, int) else None,
            raw_data=candidate,
        )

"""
DoraHacks hackathons.

Every listing card is an anchor to ``/hackathon/<slug>`` whose text runs
organizer, title, status badge, location and prize together. Dates are
only shown on the detail page.
"""

import re
from typing import Optional

from bs4 import Tag

from buidltown_scraper.core.chains import extract_chains_from_text
from buidltown_scraper.core.dates import parse_date_range, parse_iso_datetime
from buidltown_scraper.core.models import HackathonFormat, HackathonRecord, Source
from buidltown_scraper.core.normalizer import (
    cleanup_html_text,
    parse_participant_count,
    parse_prize_amount,
)
from buidltown_scraper.core.selectors import (
    absolute_url,
    cleanup_navigation,
    first_image,
    json_ld_dates,
    leaf_texts,
    meta_content,
    social_links,
)
from buidltown_scraper.core.status import DORAHACKS_STATUS_TABLE

from .base import SourceExtractor
from .mapping import build_hackathon_record

BASE_URL = "https://dorahacks.io"

# Card fragments that are never the hackathon title
NOISE_MARKERS = (
    "🏆", "Prize Pool", "BUIDLs", "Virtual", "Upcoming", "Ongoing", "Ended",
    "days left", "Password needed", "Winner Announced", "Pre-registration",
)

_LOCATION_RE = re.compile(r"^[A-Z][\w .'-]+,\s*[A-Z][\w .'-]+$")

DESCRIPTION_SELECTORS = '[class*="description"], [class*="about"], .markdown-body'
DESCRIPTION_LIMIT = 1000


def slug_from_href(href: str) -> Optional[str]:
    if not href.startswith("/hackathon/") and "dorahacks.io/hackathon/" not in href:
        return None
    slug = href.split("/hackathon/", 1)[1].split("/")[0].split("?")[0]
    return slug or None


def card_title(card: Tag) -> Optional[str]:
    """Pick the title out of a card: a heading, else the first plausible fragment."""
    heading = card.find(["h1", "h2", "h3", "h4"])
    if heading:
        text = heading.get_text(" ", strip=True)
        if text:
            return text

    for text in leaf_texts(card):
        if not 10 < len(text) < 150:
            continue
        if any(marker in text for marker in NOISE_MARKERS):
            continue
        if len(text.split()) <= 15:
            return text
    return None


def card_location(fragments: list[str]) -> Optional[str]:
    for text in fragments:
        if len(text) < 40 and _LOCATION_RE.match(text):
            return text
    return None


class DoraHacksExtractor(SourceExtractor):
    """DoraHacks hackathons with detail-page dates."""

    source = Source.DORAHACKS
    display_name = "DoraHacks"
    default_listing_url = f"{BASE_URL}/hackathon"

    @property
    def base_url(self) -> str:
        return self.metadata.get("base_url", BASE_URL)

    async def fetch_candidates(self) -> list[dict]:
        soup = await self.fetch_listing_soup()

        candidates = []
        for link in soup.select('a[href*="/hackathon/"]'):
            slug = slug_from_href(link.get("href") or "")
            if not slug:
                continue

            fragments = leaf_texts(link)
            candidates.append({
                "slug": slug,
                "title": card_title(link),
                "text": " ".join(fragments),
                "location": card_location(fragments),
                "logo_url": first_image(link, self.base_url),
                "url": absolute_url(self.base_url, f"/hackathon/{slug}"),
            })

        return candidates

    def source_id_of(self, candidate: dict) -> str:
        return candidate["slug"]

    async def enrich_candidate(self, candidate: dict) -> None:
        soup = await self.fetch_detail_soup(candidate["url"])

        candidate.update(social_links(soup))
        candidate["banner_url"] = meta_content(soup, 'meta[property="og:image"]')

        # Structured event data beats whatever date text the page shows first
        dates = json_ld_dates(soup)
        cleanup_navigation(soup)
        page_text = soup.get_text(" ", strip=True)
        dates = dates or parse_date_range(page_text)
        if dates:
            candidate["start_date"] = dates.start_date.isoformat()
            candidate["end_date"] = dates.end_date.isoformat()

        description = soup.select_one(DESCRIPTION_SELECTORS)
        if description:
            text = cleanup_html_text(description.get_text(" ", strip=True))
            if len(text) > 50:
                candidate["description"] = text[:DESCRIPTION_LIMIT]

        candidate["participant_count"] = parse_participant_count(page_text)

    def map_candidate(self, candidate: dict) -> HackathonRecord:
        text = candidate.get("text") or ""

        if "Virtual" in text or not candidate.get("location"):
            event_format, location = HackathonFormat.ONLINE, "Virtual"
        else:
            event_format, location = HackathonFormat.IN_PERSON, candidate["location"]

        return build_hackathon_record(
            self.source,
            candidate["slug"],
            candidate.get("title"),
            now=self.now(),
            description=candidate.get("description"),
            start_date=parse_iso_datetime(candidate.get("start_date")),
            end_date=parse_iso_datetime(candidate.get("end_date")),
            explicit_status=DORAHACKS_STATUS_TABLE.match(text),
            format=event_format,
            location=location,
            prize_pool=parse_prize_amount(text),
            chains=extract_chains_from_text(text),
            registration_url=candidate["url"],
            discord_url=candidate.get("discord_url"),
            twitter_url=candidate.get("twitter_url"),
            logo_url=candidate.get("logo_url"),
            banner_url=candidate.get("banner_url"),
            participant_count=candidate.get("participant_count"),
            raw_data=candidate,
        )

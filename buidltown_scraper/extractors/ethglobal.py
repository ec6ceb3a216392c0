"""
ETHGlobal events.

The listing at ethglobal.com/events links every event as an anchor whose
text runs name, dates and event type together, e.g.
"ETHGlobal Bangkok Nov 15th, 2024 Nov 17th, 2024 Hackathon". Detail pages
add a description, banner and dates when the card had none. Events with
no dates anywhere are kept with unknown dates and an upcoming status.
"""

import re
from typing import Optional
from urllib.parse import urljoin

from buidltown_scraper.core.dates import parse_date_range
from buidltown_scraper.core.models import HackathonFormat, HackathonRecord, Source
from buidltown_scraper.core.normalizer import cleanup_html_text, normalize_title
from buidltown_scraper.core.selectors import card_of, meta_content

from .base import SourceExtractor
from .mapping import build_hackathon_record

BASE_URL = "https://ethglobal.com"

SKIP_LINK_TEXT = ("apply now", "register now", "view all", "learn more")

_DATE_FRAGMENT = re.compile(r"[A-Z][a-z]{2,}\.?\s+\d{1,2}(?:st|nd|rd|th)?,?\s*\d{4}")
_EVENT_TYPE = re.compile(r"\b(Hackathon|Conference|Summit|Virtual|Online|Co-working|Competition)\b", re.IGNORECASE)

CITIES = (
    "bangkok", "singapore", "tokyo", "london", "paris", "new york", "san francisco",
    "berlin", "denver", "dubai", "mumbai", "new delhi", "delhi", "seoul", "taipei",
    "brussels", "cannes", "sydney", "melbourne", "amsterdam", "lisbon", "prague",
    "warsaw", "istanbul", "waterloo", "buenos aires",
)
_CITY_RE = re.compile(r"\b(" + "|".join(re.escape(c) for c in CITIES) + r")\b", re.IGNORECASE)


def slug_from_href(href: str) -> Optional[str]:
    """Extract the event slug: /events/bangkok/prizes?x=1 -> bangkok."""
    if "/events/" not in href:
        return None
    slug = href.split("/events/", 1)[1].split("/")[0].split("?")[0].split("#")[0]
    return slug or None


def clean_event_name(text: str, slug: str) -> str:
    """Strip dates and event type words from card text."""
    name = _DATE_FRAGMENT.sub(" ", text)
    name = _EVENT_TYPE.sub(" ", name)
    name = re.sub(r"ETHGlobal's First", " ", name, flags=re.IGNORECASE)
    name = normalize_title(name)
    if len(name) < 3:
        name = " ".join(word.capitalize() for word in slug.split("-"))
    return name


class EthGlobalExtractor(SourceExtractor):
    """ETHGlobal hackathons (always on Ethereum, always official)."""

    source = Source.ETHGLOBAL
    display_name = "ETHGlobal"
    default_listing_url = f"{BASE_URL}/events"

    @property
    def base_url(self) -> str:
        return self.metadata.get("base_url", BASE_URL)

    async def fetch_candidates(self) -> list[dict]:
        soup = await self.fetch_listing_soup()

        candidates = []
        for link in soup.select('a[href*="/events/"]'):
            href = link.get("href") or ""
            slug = slug_from_href(href)
            if not slug:
                continue

            text = link.get_text(" ", strip=True)
            if any(skip in text.lower() for skip in SKIP_LINK_TEXT):
                continue

            parent = card_of(link)
            candidates.append({
                "slug": slug,
                "text": text,
                "parent_text": parent.get_text(" ", strip=True) if parent is not link else "",
                "url": urljoin(self.base_url, f"/events/{slug}"),
            })

        return candidates

    def source_id_of(self, candidate: dict) -> str:
        return candidate["slug"]

    async def enrich_candidate(self, candidate: dict) -> None:
        soup = await self.fetch_detail_soup(candidate["url"])

        banner_url = meta_content(soup, 'meta[property="og:image"]')
        if banner_url:
            candidate["banner_url"] = banner_url

        description = meta_content(soup, 'meta[name="description"]', 'meta[property="og:description"]')
        if description:
            candidate["description"] = cleanup_html_text(description)

        candidate["detail_text"] = soup.get_text(" ", strip=True)[:5000]

    def map_candidate(self, candidate: dict) -> HackathonRecord:
        slug = candidate["slug"]
        text = candidate.get("text") or ""
        parent_text = candidate.get("parent_text") or ""

        dates = (
            parse_date_range(text)
            or parse_date_range(parent_text)
            or parse_date_range(candidate.get("detail_text"))
        )
        name = clean_event_name(text or parent_text, slug)

        lowered = parent_text.lower()
        if "online" in lowered or "virtual" in lowered:
            event_format, location = HackathonFormat.ONLINE, "Online"
        elif "hybrid" in lowered:
            event_format, location = HackathonFormat.HYBRID, None
        else:
            event_format, location = HackathonFormat.IN_PERSON, None

        city = _CITY_RE.search(f"{name} {parent_text}")
        if city:
            location = city.group(1).title()

        return build_hackathon_record(
            self.source,
            slug,
            name,
            now=self.now(),
            description=candidate.get("description"),
            start_date=dates.start_date if dates else None,
            end_date=dates.end_date if dates else None,
            format=event_format,
            location=location,
            chains=["Ethereum"],
            registration_url=candidate["url"],
            website_url=candidate["url"],
            banner_url=candidate.get("banner_url"),
            is_official=True,
            raw_data={k: v for k, v in candidate.items() if k != "detail_text"},
        )

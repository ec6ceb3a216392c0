"""
Akindo hackathons and Wave Hacks (buildathons).

Both listings link cards to ``/hackathons/<id>`` or ``/wave-hacks/<id>``.
Cards show a title, a prize such as "10,000 USDC", ``#tag`` chips and a
status badge but no dates. The source_id carries the card kind so that
a hackathon and a wave hack sharing an id stay apart.
"""

import re
from typing import Optional

from bs4 import BeautifulSoup, Tag

from buidltown_scraper.core.models import HackathonFormat, HackathonRecord, Source
from buidltown_scraper.core.normalizer import parse_participant_count, parse_prize_amount
from buidltown_scraper.core.selectors import absolute_url, first_image, leaf_texts
from buidltown_scraper.core.status import AKINDO_STATUS_TABLE
from buidltown_scraper.errors import ExtractorFetchError

from .base import SourceExtractor
from .mapping import build_hackathon_record

BASE_URL = "https://app.akindo.io"

_CARD_HREF_RE = re.compile(r"/(wave-hacks|hackathons)/([^/?#]+)")

CARD_KINDS = {
    "hackathons": "hackathon",
    "wave-hacks": "buildathon",
}


def card_name(card: Tag) -> Optional[str]:
    heading = card.select_one("h1, h2, h3, h4, [class*='title'], [class*='heading']")
    if heading:
        text = heading.get_text(" ", strip=True)
        if text:
            return text

    for text in leaf_texts(card):
        if 5 < len(text) < 100 and "$" not in text and "USDC" not in text and "USDT" not in text:
            return text
    return None


def card_tags(card: Tag) -> list[str]:
    """``#tag`` chips of a card, without the hash."""
    tags = []
    for text in leaf_texts(card):
        if text.startswith("#") and len(text) > 1:
            tag = text[1:].strip()
            if tag not in tags:
                tags.append(tag)
    return tags


class AkindoExtractor(SourceExtractor):
    """Akindo hackathons plus Wave Hacks from the extra listings."""

    source = Source.AKINDO
    display_name = "Akindo"
    default_listing_url = f"{BASE_URL}/hackathons"

    @property
    def base_url(self) -> str:
        return self.metadata.get("base_url", BASE_URL)

    def parse_listing(self, soup: BeautifulSoup) -> list[dict]:
        candidates = []
        for link in soup.select('a[href*="/hackathons/"], a[href*="/wave-hacks/"]'):
            href = link.get("href") or ""
            match = _CARD_HREF_RE.search(href)
            if not match:
                continue

            kind = CARD_KINDS[match.group(1)]
            text = link.get_text(" ", strip=True)
            description = link.select_one("p, [class*='description']")
            candidates.append({
                "id": f"{kind}-{match.group(2)}",
                "kind": kind,
                "name": card_name(link),
                "description": description.get_text(" ", strip=True) if description else None,
                "text": text,
                "tags": card_tags(link),
                "logo_url": first_image(link, self.base_url),
                "url": absolute_url(self.base_url, href),
            })
        return candidates

    async def fetch_candidates(self) -> list[dict]:
        soup = await self.fetch_listing_soup()
        candidates = self.parse_listing(soup)

        for url in self.metadata.get("extra_listings") or []:
            try:
                extra = await self.fetch_listing_soup(url)
            except ExtractorFetchError as e:
                self.logger.warning("extra_listing_failed", url=url, error=str(e))
                continue
            candidates.extend(self.parse_listing(extra))

        return candidates

    def source_id_of(self, candidate: dict) -> str:
        return candidate["id"]

    def map_candidate(self, candidate: dict) -> HackathonRecord:
        text = candidate.get("text") or ""
        tags = candidate.get("tags") or []

        return build_hackathon_record(
            self.source,
            candidate["id"],
            candidate.get("name"),
            now=self.now(),
            description=candidate.get("description"),
            short_description="Akindo Buildathon" if candidate.get("kind") == "buildathon" else None,
            explicit_status=AKINDO_STATUS_TABLE.match(text),
            estimate_missing_dates=True,
            format=HackathonFormat.ONLINE,
            location="Online",
            prize_pool=parse_prize_amount(text),
            themes=tags,
            registration_url=candidate.get("url"),
            logo_url=candidate.get("logo_url"),
            participant_count=parse_participant_count(text),
            is_official=True,
            raw_data=candidate,
        )

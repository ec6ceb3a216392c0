"""
HackQuest hackathons.

Cards are anchors to ``/<lang>/hackathons/<slug>`` with the title in an
``h2`` and status badges that are Korean or English depending on the
locale the page was served in. The language prefix is dropped from the
stored URL so both locales map to one record.
"""

import re
from typing import Optional

from buidltown_scraper.core.models import HackathonFormat, HackathonRecord, Source
from buidltown_scraper.core.normalizer import parse_participant_count, parse_prize_amount
from buidltown_scraper.core.selectors import absolute_url, first_image, leaf_texts
from buidltown_scraper.core.status import HACKQUEST_STATUS_TABLE, first_matching_status

from .base import SourceExtractor
from .mapping import build_hackathon_record

BASE_URL = "https://www.hackquest.io"

_SLUG_RE = re.compile(r"/hackathons/([^/?#]+)")
_LANG_PREFIX_RE = re.compile(r"/(ko|en|zh|ja|zh-cn|vi)/")


def strip_language_prefix(url: str) -> str:
    """https://www.hackquest.io/ko/hackathons/x -> https://www.hackquest.io/hackathons/x"""
    return _LANG_PREFIX_RE.sub("/", url, count=1)


def card_format(text: str) -> HackathonFormat:
    if "HYBRID" in text:
        return HackathonFormat.HYBRID
    if "IN-PERSON" in text or "OFFLINE" in text:
        return HackathonFormat.IN_PERSON
    return HackathonFormat.ONLINE


class HackQuestExtractor(SourceExtractor):
    """HackQuest hackathons (Korean or English listing)."""

    source = Source.HACKQUEST
    display_name = "HackQuest"
    default_listing_url = f"{BASE_URL}/hackathons"

    @property
    def base_url(self) -> str:
        return self.metadata.get("base_url", BASE_URL)

    async def fetch_candidates(self) -> list[dict]:
        soup = await self.fetch_listing_soup()

        candidates = []
        for link in soup.select('a[href*="/hackathons/"]'):
            href = link.get("href") or ""
            match = _SLUG_RE.search(href)
            if not match or len(match.group(1)) < 3:
                continue

            title = link.find("h2")
            name: Optional[str] = title.get_text(" ", strip=True) if title else None
            paragraph = link.find("p")

            candidates.append({
                "slug": match.group(1),
                "name": name,
                "description": paragraph.get_text(" ", strip=True) if paragraph else None,
                "badges": [text for text in leaf_texts(link) if text != name],
                "text": link.get_text(" ", strip=True),
                "logo_url": first_image(link, self.base_url),
                "url": strip_language_prefix(absolute_url(self.base_url, href)),
            })

        return candidates

    def source_id_of(self, candidate: dict) -> str:
        return candidate["slug"]

    def map_candidate(self, candidate: dict) -> HackathonRecord:
        text = candidate.get("text") or ""
        event_format = card_format(text)

        return build_hackathon_record(
            self.source,
            candidate["slug"],
            candidate.get("name"),
            now=self.now(),
            description=candidate.get("description"),
            explicit_status=first_matching_status(candidate.get("badges") or [], HACKQUEST_STATUS_TABLE),
            estimate_missing_dates=True,
            format=event_format,
            location="Online" if event_format is HackathonFormat.ONLINE else None,
            prize_pool=parse_prize_amount(text),
            registration_url=candidate["url"],
            logo_url=candidate.get("logo_url"),
            participant_count=parse_participant_count(text),
            raw_data=candidate,
        )

"""
TAIKAI hackathons.

taikai.network is a Next.js app; the listing's challenges are embedded in
the ``__NEXT_DATA__`` payload. Depending on the deployment they sit in
``pageProps.challenges``, ``pageProps.initialState.challenges.list``, a
React Query ``dehydratedState`` or as ``Challenge:<id>`` entries of the
Apollo cache. Plain anchor cards are used when the payload has none.
"""

from typing import Any, Optional

from bs4 import BeautifulSoup

from buidltown_scraper.core.dates import parse_date_range, parse_iso_datetime
from buidltown_scraper.core.models import HackathonFormat, HackathonRecord, PrizePool, Source
from buidltown_scraper.core.normalizer import parse_participant_count, parse_prize_amount
from buidltown_scraper.core.selectors import absolute_url, dig, first_image, next_data

from .base import SourceExtractor
from .mapping import build_hackathon_record

BASE_URL = "https://taikai.network"


def _image_url(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value or None
    if isinstance(value, dict):
        return value.get("url") or None
    return None


def challenges_from_next_data(data: dict) -> list[dict]:
    """Find the challenge list wherever this deployment put it."""
    props = dig(data, "props", "pageProps") or {}

    challenges = props.get("challenges")
    if not challenges:
        challenges = dig(props, "initialState", "challenges", "list")

    if not challenges:
        for query in dig(props, "dehydratedState", "queries") or []:
            state = dig(query, "state", "data")
            if isinstance(state, list):
                challenges = state
            elif isinstance(state, dict):
                challenges = state.get("items") or state.get("challenges")
            if challenges:
                break

    if not challenges:
        apollo = props.get("apolloState") or {}
        challenges = [
            value for key, value in apollo.items()
            if key.startswith("Challenge:")
            and isinstance(value, dict)
            and value.get("name")
            and value.get("slug")
        ]

    return [c for c in challenges or [] if isinstance(c, dict)]


def prize_of(challenge: dict) -> Optional[PrizePool]:
    prize = challenge.get("prizePool") or challenge.get("prize")
    if isinstance(prize, (int, float)) and not isinstance(prize, bool):
        return PrizePool(amount=float(prize), currency=challenge.get("currency") or "USD") if prize > 0 else None
    if isinstance(prize, str):
        # Bare numbers are USD on TAIKAI
        return parse_prize_amount(prize) or parse_prize_amount(f"{prize} USD")
    return None


class TaikaiExtractor(SourceExtractor):
    """TAIKAI hackathons from the embedded Next.js payload."""

    source = Source.TAIKAI
    display_name = "TAIKAI"
    default_listing_url = f"{BASE_URL}/hackathons"

    @property
    def base_url(self) -> str:
        return self.metadata.get("base_url", BASE_URL)

    def parse_cards(self, soup: BeautifulSoup) -> list[dict]:
        cards = []
        for link in soup.select('a[href*="/hackathons/"]'):
            href = link.get("href") or ""
            slug = href.split("/hackathons/", 1)[1].split("/")[0].split("?")[0]
            heading = link.select_one("h2, h3, h4, [class*='title'], [class*='name']")
            if not slug or heading is None:
                continue
            cards.append({
                "slug": slug,
                "name": heading.get_text(" ", strip=True),
                "text": link.get_text(" ", strip=True),
                "logo": first_image(link, self.base_url),
                "url": absolute_url(self.base_url, href),
            })
        return cards

    async def fetch_candidates(self) -> list[dict]:
        soup = await self.fetch_listing_soup()

        data = next_data(soup)
        challenges = challenges_from_next_data(data) if data else []
        if challenges:
            return challenges

        self.logger.info("next_data_missing", fallback="cards")
        return self.parse_cards(soup)

    def source_id_of(self, candidate: dict) -> str:
        return str(candidate.get("slug") or candidate.get("id") or "")

    def challenge_url(self, candidate: dict) -> str:
        if candidate.get("url"):
            return candidate["url"]
        organization = dig(candidate, "organization", "slug")
        slug = self.source_id_of(candidate)
        path = f"/{organization}/hackathons/{slug}" if organization else f"/hackathons/{slug}"
        return absolute_url(self.base_url, path)

    def map_candidate(self, candidate: dict) -> HackathonRecord:
        text = candidate.get("text") or ""

        start = parse_iso_datetime(candidate.get("startDate"))
        end = parse_iso_datetime(candidate.get("endDate") or candidate.get("registrationDeadline"))
        if start is None and end is None and text:
            dates = parse_date_range(text)
            if dates:
                start, end = dates

        hints = [text, candidate.get("format"), candidate.get("location")]
        lowered = " ".join(h for h in hints if isinstance(h, str)).lower()
        if "hybrid" in lowered:
            event_format = HackathonFormat.HYBRID
        elif "in-person" in lowered or "offline" in lowered:
            event_format = HackathonFormat.IN_PERSON
        else:
            event_format = HackathonFormat.ONLINE

        participants = candidate.get("participantsCount")
        if not isinstance(participants, int):
            participants = parse_participant_count(text)

        url = self.challenge_url(candidate)
        description = candidate.get("description")
        if not isinstance(description, str):
            description = candidate.get("shortDescription")

        return build_hackathon_record(
            self.source,
            self.source_id_of(candidate),
            candidate.get("name") or candidate.get("title"),
            now=self.now(),
            description=description,
            short_description=candidate.get("shortDescription"),
            start_date=start,
            end_date=end,
            format=event_format,
            location=candidate.get("location") if isinstance(candidate.get("location"), str) else None,
            prize_pool=prize_of(candidate) or parse_prize_amount(text),
            themes=[t for t in candidate.get("tags") or [] if isinstance(t, str)],
            registration_url=url,
            logo_url=_image_url(candidate.get("logo")) or _image_url(candidate.get("logoFile")),
            banner_url=_image_url(candidate.get("cover")) or _image_url(candidate.get("coverFile")),
            participant_count=participants,
            is_official=True,
            raw_data=candidate,
        )

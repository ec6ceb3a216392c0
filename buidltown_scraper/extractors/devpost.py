"""
Devpost hackathons via ``https://devpost.com/api/hackathons?page=N``.

Devpost lists every kind of hackathon, so entries are kept only when
their title, organizer or themes mention a web3 keyword. The prize comes
as an HTML snippet (``$<span data-currency-value>10,000</span>``) and
``open_state`` is one of open / upcoming / ended.
"""

from typing import Iterable

from buidltown_scraper.core.dates import parse_date_range
from buidltown_scraper.core.models import HackathonFormat, HackathonRecord, Source
from buidltown_scraper.core.normalizer import parse_prize_amount, strip_html
from buidltown_scraper.core.status import DEVPOST_STATUS_TABLE

from .base import SourceExtractor
from .mapping import build_hackathon_record

API_URL = "https://devpost.com/api/hackathons"

WEB3_KEYWORDS = (
    "blockchain", "web3", "crypto", "defi", "nft", "ethereum", "solana",
    "bitcoin", "smart contract", "dapp", "dao", "token", "decentralized",
    "polygon", "arbitrum", "optimism", "cosmos", "polkadot", "near", "sui",
    "aptos", "hedera", "cardano", "avalanche", "bnb", "binance",
)


def theme_names(item: dict) -> list[str]:
    return [
        theme["name"] for theme in item.get("themes") or []
        if isinstance(theme, dict) and theme.get("name")
    ]


def is_web3(item: dict, keywords: Iterable[str]) -> bool:
    haystack = " ".join(filter(None, [
        item.get("title"),
        item.get("organization_name"),
        *theme_names(item),
    ])).lower()
    return any(keyword.lower() in haystack for keyword in keywords)


class DevpostExtractor(SourceExtractor):
    """Web3 hackathons from the Devpost API."""

    source = Source.DEVPOST
    display_name = "Devpost"
    default_listing_url = API_URL

    @property
    def keywords(self) -> list[str]:
        return list(self.metadata.get("keywords") or WEB3_KEYWORDS)

    async def fetch_candidates(self) -> list[dict]:
        items = await self.fetch_json_pages("hackathons")
        if not self.metadata.get("web3_only", True):
            return items

        keywords = self.keywords
        kept = [item for item in items if is_web3(item, keywords)]
        self.logger.debug("web3_filter", total=len(items), kept=len(kept))
        return kept

    def source_id_of(self, candidate: dict) -> str:
        return str(candidate.get("id") or "")

    def map_candidate(self, candidate: dict) -> HackathonRecord:
        dates = parse_date_range(candidate.get("submission_period_dates"))

        location = (candidate.get("displayed_location") or {}).get("location")
        if not location or location.lower() == "online":
            event_format, location = HackathonFormat.ONLINE, "Online"
        else:
            event_format = HackathonFormat.IN_PERSON

        thumbnail = candidate.get("thumbnail_url")
        if thumbnail and thumbnail.startswith("//"):
            thumbnail = f"https:{thumbnail}"

        registrations = candidate.get("registrations_count")
        organization = candidate.get("organization_name")

        return build_hackathon_record(
            self.source,
            self.source_id_of(candidate),
            candidate.get("title"),
            now=self.now(),
            short_description=f"Hosted by {organization}" if organization else None,
            start_date=dates.start_date if dates else None,
            end_date=dates.end_date if dates else None,
            explicit_status=DEVPOST_STATUS_TABLE.match(candidate.get("open_state") or ""),
            format=event_format,
            location=location,
            prize_pool=parse_prize_amount(strip_html(candidate.get("prize_amount"))),
            themes=theme_names(candidate),
            registration_url=candidate.get("url"),
            logo_url=thumbnail,
            participant_count=registrations if isinstance(registrations, int) else None,
            raw_data=candidate,
        )

"""
Alchemy's curated web3 grants list.

The page at alchemy.com/best/web3-grants is one long article: every
program is an h2/h3 heading ("1. Ethereum Foundation Grants") followed by
paragraphs and an outbound link to the program. Programs without such a
link are skipped. All of them are rolling and open.
"""

import re
from typing import Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from buidltown_scraper.core.chains import extract_chains_from_text
from buidltown_scraper.core.models import (
    EntityType,
    Foundation,
    GrantRecord,
    GrantStatus,
    Source,
)
from buidltown_scraper.core.normalizer import cleanup_html_text, normalize_title

from .base import SourceExtractor
from .mapping import build_grant_record

LISTING_URL = "https://www.alchemy.com/best/web3-grants"

DESCRIPTION_LENGTH = 500
MULTI_CHAIN = "Multi-chain"

_HEADINGS = ["h2", "h3"]
_NUMBER_PREFIX = re.compile(r"^\d+\.\s*")
_GRANT_WORDS = ("grant", "fund")


def is_grant_heading(text: str) -> bool:
    """Numbered list items and headings that talk about grants or funds."""
    lowered = text.lower()
    return bool(_NUMBER_PREFIX.match(text)) or any(word in lowered for word in _GRANT_WORDS)


def grant_slug(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def grant_block(heading: Tag) -> list[Tag]:
    """
    Elements describing the program under a heading.

    A <section> holding only this heading is the whole block; otherwise
    the block is the heading's siblings up to the next heading.
    """
    section = heading.find_parent("section")
    if section is not None and len(section.find_all(_HEADINGS)) == 1:
        return [section]

    block = []
    for sibling in heading.find_next_siblings():
        if sibling.name in _HEADINGS or sibling.find(_HEADINGS):
            break
        block.append(sibling)
    return block


def _is_external(href: str, listing_host: str) -> bool:
    host = urlparse(href).netloc
    return href.startswith("http") and bool(host) and not host.endswith(listing_host)


def parse_grants(soup: BeautifulSoup, listing_url: str = LISTING_URL) -> list[dict]:
    """
    Extract program candidates from the grants article.

    Returns:
        Dicts with name, description and link, in page order
    """
    listing_host = urlparse(listing_url).netloc.removeprefix("www.")

    candidates = []
    for heading in soup.find_all(_HEADINGS):
        text = normalize_title(heading.get_text(" ", strip=True))
        if not text or not is_grant_heading(text):
            continue

        block = grant_block(heading)

        paragraphs: list[str] = []
        link: Optional[str] = None
        for element in block:
            found = [element] if element.name == "p" else element.find_all("p")
            paragraphs.extend(p.get_text(" ", strip=True) for p in found)

            if link is None:
                anchors = [element] if element.name == "a" else element.find_all("a", href=True)
                for anchor in anchors:
                    href = anchor.get("href") or ""
                    if _is_external(href, listing_host):
                        link = href
                        break

        if link is None:
            continue

        candidates.append({
            "name": _NUMBER_PREFIX.sub("", text),
            "description": cleanup_html_text(" ".join(paragraphs))[:DESCRIPTION_LENGTH],
            "link": link,
        })

    return candidates


class AlchemyGrantsExtractor(SourceExtractor):
    """Grant programs from Alchemy's web3 grants article."""

    source = Source.ALCHEMY_GRANTS
    entity_type = EntityType.GRANT
    display_name = "Alchemy Grants"
    default_listing_url = LISTING_URL

    async def fetch_candidates(self) -> list[dict]:
        soup = await self.fetch_listing_soup()
        return parse_grants(soup, self.listing_url)

    def source_id_of(self, candidate: dict) -> str:
        return grant_slug(candidate["name"])

    def map_candidate(self, candidate: dict) -> GrantRecord:
        name = candidate["name"]
        description = candidate.get("description") or None

        # The organisation is named first: "Uniswap Foundation Grants"
        chains = extract_chains_from_text(name)
        foundation = Foundation(
            name=name.split()[0],
            chain=chains[0] if chains else MULTI_CHAIN,
        )

        return build_grant_record(
            self.source,
            self.source_id_of(candidate),
            name,
            now=self.now(),
            description=description,
            foundation=foundation,
            status=GrantStatus.ACTIVE,
            is_rolling=True,
            chains=chains,
            application_url=candidate["link"],
            raw_data=candidate,
        )

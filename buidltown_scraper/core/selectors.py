"""
HTML helpers shared by the listing extractors.

Listing pages are rendered by different frontends, so extractors lean on
the few things they have in common: anchors per card, meta tags,
JSON-LD blocks and the Next.js ``__NEXT_DATA__`` payload.
"""

import json
from typing import Any, Iterator, Optional
from urllib.parse import urljoin

import structlog
from bs4 import BeautifulSoup, Tag

from .dates import DateRange, parse_iso_datetime

logger = structlog.get_logger(__name__)


# Containers tried, in order, when looking for a card around an anchor
CARD_CONTAINERS = ["article", "li", "div"]


def meta_content(soup: BeautifulSoup, *selectors: str) -> Optional[str]:
    """
    Return the content of the first matching meta tag.

    Args:
        soup: Parsed HTML
        selectors: CSS selectors such as 'meta[property="og:image"]'
    """
    for selector in selectors:
        tag = soup.select_one(selector)
        if tag and tag.get("content"):
            return tag["content"].strip()
    return None


def cleanup_navigation(soup: BeautifulSoup) -> None:
    """
    Remove navigation, footer, scripts from soup.

    Modifies soup in place.
    """
    for elem in soup.select("nav, footer, script, style, header, aside"):
        elem.decompose()


def absolute_url(base_url: str, href: Optional[str]) -> Optional[str]:
    if not href:
        return None
    return urljoin(base_url, href)


def card_of(link: Tag, min_text: int = 0) -> Tag:
    """
    Find the card element around an anchor.

    Walks up to the nearest container whose text is at least
    ``min_text`` characters; the anchor itself when none is.
    """
    for parent in link.find_parents(CARD_CONTAINERS):
        if len(parent.get_text(" ", strip=True)) >= min_text:
            return parent
    return link


def leaf_texts(element: Tag) -> list[str]:
    """Visible text fragments of an element, in document order."""
    return [text for text in element.stripped_strings if text]


def first_image(element: Tag, base_url: str = "") -> Optional[str]:
    img = element.find("img")
    if img is None:
        return None
    return absolute_url(base_url, img.get("src") or img.get("data-src"))


def json_ld_objects(soup: BeautifulSoup) -> Iterator[dict]:
    """
    Yield JSON-LD objects embedded in the page.

    Top-level lists and ``@graph`` arrays are flattened. Blocks that do
    not parse are skipped.
    """
    for script in soup.find_all("script", type="application/ld+json"):
        raw = script.string or script.get_text()
        if not raw:
            continue
        try:
            data = json.loads(raw)
        except ValueError:
            logger.debug("invalid_json_ld")
            continue

        stack = data if isinstance(data, list) else [data]
        for item in stack:
            if not isinstance(item, dict):
                continue
            yield item
            for nested in item.get("@graph") or []:
                if isinstance(nested, dict):
                    yield nested


def json_ld_dates(soup: BeautifulSoup) -> Optional[DateRange]:
    """Start and end date of the first JSON-LD object that has a startDate."""
    for item in json_ld_objects(soup):
        start = parse_iso_datetime(item.get("startDate"))
        if start is None:
            continue
        end = parse_iso_datetime(item.get("endDate")) or start
        return DateRange(start, end)
    return None


def next_data(soup: BeautifulSoup) -> Optional[dict]:
    """
    Parse the Next.js ``__NEXT_DATA__`` payload.

    Returns:
        Payload dict or None if the page has none or it is invalid
    """
    script = soup.find("script", id="__NEXT_DATA__")
    if script is None:
        return None
    raw = script.string or script.get_text()
    try:
        data = json.loads(raw)
    except ValueError as e:
        logger.warning("invalid_next_data", error=str(e))
        return None
    return data if isinstance(data, dict) else None


def dig(data: Any, *path: str) -> Any:
    """Follow a key path through nested dicts; None on any miss."""
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


SOCIAL_LINK_SELECTORS = {
    "discord_url": 'a[href*="discord.gg"], a[href*="discord.com"]',
    "twitter_url": 'a[href*="twitter.com"], a[href*="//x.com"]',
}


def social_links(soup: BeautifulSoup) -> dict[str, str]:
    """Discord and Twitter links found on a page, keyed by record field."""
    links = {}
    for field_name, selector in SOCIAL_LINK_SELECTORS.items():
        link = soup.select_one(selector)
        if link and link.get("href"):
            links[field_name] = link["href"]
    return links

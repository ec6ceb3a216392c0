"""
Normalization utilities for listing text.

Handles:
- Prize amounts ($150,000 / 10,000 USDC / 50K USDT / €20k / 5 ETH)
- Text cleanup after HTML extraction
- Short descriptions for cards
"""

import re
from typing import Optional

import structlog

from .models import PrizePool

logger = structlog.get_logger(__name__)


CURRENCY_SYMBOLS = {
    "$": "USD",
    "€": "EUR",
    "£": "GBP",
}

CURRENCY_CODES = ("USDC", "USDT", "USD", "ETH", "EUR", "GBP")

MULTIPLIERS = {
    "k": 1_000,
    "m": 1_000_000,
    "mm": 1_000_000,
    "b": 1_000_000_000,
}

_AMOUNT_RE = re.compile(
    r"(?P<symbol>[$€£])?\s*"
    r"(?<![\w.])(?P<number>\d[\d,]*(?:\.\d+)?)\s*"
    r"(?P<suffix>mm|[kmb])?\b\s*"
    r"(?:(?P<code>usdc|usdt|usd|eth|eur|gbp)\b)?",
    re.IGNORECASE,
)


def _to_prize(match: re.Match) -> Optional[PrizePool]:
    try:
        amount = float(match.group("number").replace(",", ""))
    except ValueError:
        logger.debug("invalid_amount", text=match.group(0))
        return None

    amount *= MULTIPLIERS.get((match.group("suffix") or "").lower(), 1)
    if amount <= 0:
        return None

    code = match.group("code")
    currency = code.upper() if code else CURRENCY_SYMBOLS[match.group("symbol")]
    return PrizePool(amount=amount, currency=currency)


def parse_prize_amount(text: Optional[str]) -> Optional[PrizePool]:
    """
    Parse a prize amount from listing text.

    Supported formats:
    - "$150,000" -> PrizePool(150000.0, "USD")
    - "10,000 USDC" -> PrizePool(10000.0, "USDC")
    - "$50K" / "50k USDT" -> 50000.0
    - "€20,000" -> PrizePool(20000.0, "EUR")
    - "5 ETH" -> PrizePool(5.0, "ETH")

    Numbers without any currency marker are rejected, so dates and
    participant counts are never taken for prizes. A code only counts as
    a whole word ("2026 Ethereum" is not 2026 ETH), and an amount with a
    currency symbol wins over one with a trailing code.

    Args:
        text: String containing an amount

    Returns:
        PrizePool or None if no amount is found
    """
    if not text:
        return None

    matches = list(_AMOUNT_RE.finditer(text.replace("\u00a0", " ")))
    with_symbol = [m for m in matches if m.group("symbol")]
    with_code = [m for m in matches if m.group("code") and not m.group("symbol")]

    for match in with_symbol + with_code:
        prize = _to_prize(match)
        if prize is not None:
            return prize

    return None


def normalize_title(title: Optional[str]) -> str:
    """
    Normalize a title for consistent display.

    - Collapses whitespace
    - Strips leading/trailing whitespace

    Args:
        title: Raw title string

    Returns:
        Normalized title
    """
    if not title:
        return ""

    return re.sub(r"\s+", " ", title).strip()


def cleanup_html_text(text: Optional[str]) -> str:
    """
    Clean up text extracted from HTML.

    - Decodes the common entities BeautifulSoup leaves in attributes
    - Removes extra whitespace and blank lines
    - Normalizes spacing before punctuation

    Args:
        text: Raw text from HTML

    Returns:
        Cleaned text
    """
    if not text:
        return ""

    cleaned = re.sub(r"&nbsp;", " ", text)
    cleaned = re.sub(r"&amp;", "&", cleaned)
    cleaned = re.sub(r"&lt;", "<", cleaned)
    cleaned = re.sub(r"&gt;", ">", cleaned)
    cleaned = cleaned.replace("\u00a0", " ")

    cleaned = re.sub(r"[ \t]+", " ", cleaned)
    cleaned = re.sub(r"\n\s*\n", "\n\n", cleaned)
    cleaned = cleaned.strip()

    cleaned = re.sub(r"\s+([,\.;:!?])", r"\1", cleaned)

    return cleaned


def strip_html(html: Optional[str]) -> str:
    """Drop tags from a snippet of HTML and clean the remaining text."""
    if not html:
        return ""
    return cleanup_html_text(re.sub(r"<[^>]+>", " ", html))


def shorten(text: Optional[str], limit: int = 200) -> Optional[str]:
    """Cut text at a word boundary, appending an ellipsis when cut."""
    if not text:
        return None
    text = normalize_title(text)
    if len(text) <= limit:
        return text
    cut = text[:limit].rsplit(" ", 1)[0]
    return cut.rstrip(",.;:") + "..."


_PARTICIPANTS_RE = re.compile(
    r"(\d{1,3}(?:,\d{3})+|\d+)\+?\s*(?:buidlers?|participants?|builders?|hackers?|registered|참가자)",
    re.IGNORECASE,
)


def parse_participant_count(text: Optional[str]) -> Optional[int]:
    """'1,234 BUIDLers' -> 1234; None when no count is shown."""
    if not text:
        return None
    match = _PARTICIPANTS_RE.search(text)
    if not match:
        return None
    return int(match.group(1).replace(",", ""))

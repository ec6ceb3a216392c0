"""
Category assignment.

Maps free text and tags onto the fixed category vocabulary shown on the
site. Matching is case-insensitive; aliases of three characters or less
("ai", "zk", "dex") must match a whole word.
"""

import re
from typing import Iterable, Optional

FALLBACK_CATEGORY = "web3"

CATEGORIES = (
    "defi", "nft", "gaming", "dao", "infrastructure", "social", "privacy",
    "identity", "payments", "ai", "rwa", "security", "education",
    "public-goods", "metaverse", "research", "consumer", "enterprise",
)

# Ordered alias -> category. First match in this order wins a slot.
CATEGORY_ALIASES: dict[str, str] = {
    # DeFi
    "decentralized finance": "defi",
    "defi": "defi",
    "finance": "defi",
    "lending": "defi",
    "dex": "defi",
    "amm": "defi",
    "yield": "defi",
    "trading": "defi",
    # NFT
    "nft": "nft",
    "nfts": "nft",
    "collectibles": "nft",
    "digital art": "nft",
    # Gaming
    "gaming": "gaming",
    "gamefi": "gaming",
    "games": "gaming",
    "game": "gaming",
    "play to earn": "gaming",
    "p2e": "gaming",
    # DAO
    "dao": "dao",
    "daos": "dao",
    "governance": "dao",
    # Infrastructure
    "infrastructure": "infrastructure",
    "infra": "infrastructure",
    "developer tools": "infrastructure",
    "developer tooling": "infrastructure",
    "tooling": "infrastructure",
    "scaling": "infrastructure",
    "interoperability": "infrastructure",
    "sdk": "infrastructure",
    "api": "infrastructure",
    # Social
    "social": "social",
    "socialfi": "social",
    "community": "social",
    # Privacy
    "privacy": "privacy",
    "zero knowledge": "privacy",
    "zero-knowledge": "privacy",
    "zk": "privacy",
    "zkp": "privacy",
    # Identity
    "identity": "identity",
    "credentials": "identity",
    "did": "identity",
    "kyc": "identity",
    # Payments
    "payments": "payments",
    "payment": "payments",
    "stablecoin": "payments",
    "remittance": "payments",
    # AI
    "artificial intelligence": "ai",
    "machine learning": "ai",
    "ai": "ai",
    "ml": "ai",
    "agents": "ai",
    # RWA
    "real world assets": "rwa",
    "real-world assets": "rwa",
    "tokenization": "rwa",
    "rwa": "rwa",
    # Security
    "security": "security",
    "auditing": "security",
    "audit": "security",
    # Education
    "education": "education",
    "onboarding": "education",
    # Public goods
    "public goods": "public-goods",
    "public-goods": "public-goods",
    "open source": "public-goods",
    "oss": "public-goods",
    # Metaverse
    "metaverse": "metaverse",
    "virtual world": "metaverse",
    "vr": "metaverse",
    "xr": "metaverse",
    # Grant-side
    "research": "research",
    "consumer": "consumer",
    "enterprise": "enterprise",
}


def _compile(alias: str) -> re.Pattern:
    escaped = re.escape(alias)
    if len(alias) <= 3:
        return re.compile(rf"\b{escaped}\b", re.IGNORECASE)
    return re.compile(escaped, re.IGNORECASE)


# Common English words that only count as an exact tag, never in prose.
TAG_ONLY_ALIASES = frozenset({"did", "game", "community", "yield"})

_ALIAS_PATTERNS = [
    (_compile(alias), category)
    for alias, category in CATEGORY_ALIASES.items()
    if alias not in TAG_ONLY_ALIASES
]


def normalize_category(tag: str) -> Optional[str]:
    """Map a single tag onto a category id, or None if it is not one."""
    if not tag:
        return None
    key = tag.strip().lower()
    if key in CATEGORY_ALIASES:
        return CATEGORY_ALIASES[key]
    hyphenated = re.sub(r"[\s_]+", "-", key)
    if hyphenated in CATEGORIES:
        return hyphenated
    return None


def assign_categories(*texts: Optional[str], tags: Optional[Iterable[str]] = None) -> list[str]:
    """
    Assign categories from tags and free text.

    Tags are looked up exactly first, then every text is scanned for
    aliases. Never returns an empty list.

    Args:
        *texts: Name, description, tagline and the like (None is skipped)
        tags: Upstream tags or themes

    Returns:
        Ordered, deduplicated category ids; ``["web3"]`` when nothing matches
    """
    categories: list[str] = []
    tags = [t for t in (tags or []) if t]

    for tag in tags:
        category = normalize_category(tag)
        if category and category not in categories:
            categories.append(category)

    haystack = " ".join(t for t in (*texts, *tags) if t)
    if haystack:
        for pattern, category in _ALIAS_PATTERNS:
            if category not in categories and pattern.search(haystack):
                categories.append(category)

    return categories or [FALLBACK_CATEGORY]

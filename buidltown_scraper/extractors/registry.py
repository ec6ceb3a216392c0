"""
Extractor registry.

Maps each source to its extractor class in the default run order and
builds configured extractors for a run or a single queue message.
"""

from typing import Iterable, Optional

import structlog

from buidltown_scraper.config.loader import ScraperSettings, SourceSettings
from buidltown_scraper.core.http_client import HttpClient
from buidltown_scraper.core.models import EntityType, Source
from buidltown_scraper.errors import ConfigError
from buidltown_scraper.reconciler import UpsertReconciler

from .akindo import AkindoExtractor
from .alchemy_grants import AlchemyGrantsExtractor
from .base import SourceExtractor
from .devfolio import DevfolioExtractor
from .devpost import DevpostExtractor
from .dorahacks import DoraHacksExtractor
from .ethglobal import EthGlobalExtractor
from .foundation_grants import FoundationGrantsExtractor
from .hackquest import HackQuestExtractor
from .taikai import TaikaiExtractor

logger = structlog.get_logger(__name__)

# Default run order
EXTRACTORS: dict[Source, type[SourceExtractor]] = {
    Source.ETHGLOBAL: EthGlobalExtractor,
    Source.DEVFOLIO: DevfolioExtractor,
    Source.DORAHACKS: DoraHacksExtractor,
    Source.AKINDO: AkindoExtractor,
    Source.DEVPOST: DevpostExtractor,
    Source.HACKQUEST: HackQuestExtractor,
    Source.TAIKAI: TaikaiExtractor,
    Source.FOUNDATION_GRANTS: FoundationGrantsExtractor,
    Source.ALCHEMY_GRANTS: AlchemyGrantsExtractor,
}


def get_extractor_class(source: str) -> type[SourceExtractor]:
    """
    Look up the extractor class of a source.

    Raises:
        ConfigError: Unknown source
    """
    try:
        return EXTRACTORS[Source(source)]
    except ValueError as e:
        raise ConfigError(f"Unknown source: {source!r}") from e


def select_sources(
    settings: ScraperSettings,
    source_names: Optional[Iterable[str]] = None,
    entity_type: Optional[EntityType] = None,
) -> list[SourceSettings]:
    """
    Pick the source settings to run, in configured order.

    Args:
        settings: Loaded scraper settings
        source_names: Restrict to these sources (None = all enabled)
        entity_type: Restrict to sources producing this entity type

    Raises:
        ConfigError: A requested source is unknown
    """
    if source_names is not None:
        names = list(source_names)
        for name in names:
            get_extractor_class(name)
        selected = [s for s in settings.sources if s.source.value in names]
        for name in names:
            if settings.source(name) is None:
                # Known source without a config entry runs on defaults
                selected.append(SourceSettings(
                    source=Source(name),
                    listing_url=get_extractor_class(name).default_listing_url,
                ))
    else:
        selected = settings.enabled_sources

    if entity_type is not None:
        selected = [s for s in selected if EXTRACTORS[s.source].entity_type is entity_type]
    return selected


def build_extractors(
    sources: Iterable[SourceSettings],
    reconciler: UpsertReconciler,
    http_client: Optional[HttpClient] = None,
) -> list[SourceExtractor]:
    """Instantiate one extractor per source settings entry."""
    extractors = []
    for source_settings in sources:
        extractor_class = EXTRACTORS[source_settings.source]
        if http_client is not None and source_settings.listing_url:
            http_client.set_rate_limit(source_settings.listing_url, source_settings.requests_per_second)
        extractors.append(extractor_class(
            reconciler=reconciler,
            http_client=http_client,
            settings=source_settings,
        ))
    return extractors


def select_extractors(
    message: dict,
    settings: ScraperSettings,
    reconciler: UpsertReconciler,
    http_client: Optional[HttpClient] = None,
) -> list[SourceExtractor]:
    """
    Build the extractors a queue message asks for.

    Messages look like ``{"source": "devfolio", "entityType": "hackathon"}``.
    A missing source or ``"all"`` selects every enabled source of the
    entity type; a missing entity type selects both.

    Raises:
        ConfigError: Unknown source or entity type
    """
    source = message.get("source")
    entity = message.get("entityType") or message.get("entity_type")

    try:
        entity_type = EntityType(entity) if entity else None
    except ValueError as e:
        raise ConfigError(f"Unknown entity type: {entity!r}") from e

    source_names = None if source in (None, "", "all") else [source]
    selected = select_sources(settings, source_names, entity_type)
    logger.info(
        "message_selected",
        source=source or "all",
        entity_type=entity or "all",
        extractors=len(selected),
    )
    return build_extractors(selected, reconciler, http_client)

"""
Curated foundation grant programs.

No network access: the programs come from ``config/foundation_grants.yml``
(or a list injected by the caller). Each program's slug is its source_id.
"""

from typing import Optional

from buidltown_scraper.config.loader import ConfigLoader
from buidltown_scraper.core.models import (
    EntityType,
    Foundation,
    Funding,
    GrantRecord,
    Source,
)
from buidltown_scraper.errors import ConfigError, ExtractorFetchError

from .base import SourceExtractor
from .mapping import build_grant_record

DEFAULT_PROGRAMS_FILE = "foundation_grants.yml"


class FoundationGrantsExtractor(SourceExtractor):
    """Static list of ecosystem grant programs."""

    source = Source.FOUNDATION_GRANTS
    entity_type = EntityType.GRANT
    display_name = "Foundation Grants"

    def __init__(
        self,
        *args,
        programs: Optional[list[dict]] = None,
        config_loader: Optional[ConfigLoader] = None,
        **kwargs,
    ):
        """
        Initialize extractor.

        Args:
            programs: Program dicts to use instead of the YAML file
            config_loader: Loader for the programs file (defaults to package config)
        """
        super().__init__(*args, **kwargs)
        self._programs = programs
        self._config_loader = config_loader or ConfigLoader()

    async def fetch_candidates(self) -> list[dict]:
        if self._programs is not None:
            return list(self._programs)

        filename = self.metadata.get("programs_file", DEFAULT_PROGRAMS_FILE)
        try:
            return self._config_loader.load_foundation_grants(filename)
        except ConfigError as e:
            raise ExtractorFetchError(self.source.value, str(e)) from e

    def source_id_of(self, candidate: dict) -> str:
        return candidate["slug"]

    def map_candidate(self, candidate: dict) -> GrantRecord:
        info = candidate.get("foundation") or {}
        foundation = Foundation(
            name=info["name"],
            chain=info["chain"],
            website_url=info.get("website_url"),
            logo_url=info.get("logo_url"),
        ) if info else None

        funding_data = candidate.get("funding")
        funding = Funding.from_dict(funding_data) if funding_data else None

        return build_grant_record(
            self.source,
            candidate["slug"],
            candidate.get("name"),
            now=self.now(),
            description=candidate.get("description"),
            short_description=candidate.get("short_description"),
            foundation=foundation,
            funding=funding,
            status_text=candidate.get("status"),
            is_rolling=bool(candidate.get("is_rolling", False)),
            chains=candidate.get("chains"),
            categories=candidate.get("categories"),
            tracks=candidate.get("tracks"),
            application_url=candidate.get("application_url"),
            guidelines_url=candidate.get("guidelines_url"),
            raw_data=candidate,
        )

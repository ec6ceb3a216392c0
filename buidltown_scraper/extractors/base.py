"""
Base class for source extractors.

An extractor owns one upstream site: it fetches the listing, turns each
raw candidate into a canonical record and hands the record to the
reconciler. A malformed candidate, or one whose detail page fails, is
logged and skipped; only an unreachable primary listing fails the whole
run.
"""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import structlog
from bs4 import BeautifulSoup

from buidltown_scraper.config.loader import SourceSettings
from buidltown_scraper.core.http_client import HttpClient
from buidltown_scraper.core.models import CanonicalRecord, EntityType, ScrapeCounts, Source
from buidltown_scraper.errors import ExtractorFetchError, FetchError, PersistenceError
from buidltown_scraper.reconciler import ReconcileOutcome, UpsertReconciler

logger = structlog.get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SourceExtractor(ABC):
    """
    Abstract base class for source extractors.

    Subclasses set ``source``, ``entity_type`` and ``display_name`` and
    implement:
    - fetch_candidates: raw candidates from the upstream listing
    - source_id_of: the upstream identifier of a candidate
    - map_candidate: candidate -> HackathonRecord / GrantRecord

    Optionally they override ``enrich_candidate`` to pull detail pages;
    ``enrich`` runs it with bounded concurrency.
    """

    source: Source
    entity_type: EntityType = EntityType.HACKATHON
    display_name: str = ""
    default_listing_url: Optional[str] = None

    def __init__(
        self,
        reconciler: UpsertReconciler,
        http_client: Optional[HttpClient] = None,
        settings: Optional[SourceSettings] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize extractor.

        Args:
            reconciler: Reconciler shared by all extractors of a run
            http_client: Shared HTTP client (None for static sources)
            settings: Source settings from sources.yml
            now: Clock, injectable for tests
        """
        self.reconciler = reconciler
        self.http_client = http_client
        self.settings = settings or SourceSettings(
            source=self.source,
            listing_url=self.default_listing_url,
        )
        self.now = now or utcnow
        self.logger = logger.bind(source=self.source.value)

    @property
    def name(self) -> str:
        return self.display_name or self.source.value

    @property
    def listing_url(self) -> str:
        return self.settings.listing_url or self.default_listing_url or ""

    @property
    def metadata(self) -> dict:
        return self.settings.metadata

    # Subclass hooks

    @abstractmethod
    async def fetch_candidates(self) -> list[dict]:
        """
        Fetch raw candidates from the upstream listing.

        Raises:
            ExtractorFetchError: Primary listing unreachable
        """
        pass

    @abstractmethod
    def source_id_of(self, candidate: dict) -> str:
        """Return the upstream identifier of a candidate."""
        pass

    @abstractmethod
    def map_candidate(self, candidate: dict) -> CanonicalRecord:
        """Convert a raw candidate into a canonical record."""
        pass

    async def enrich_candidate(self, candidate: dict) -> None:
        """Add detail-page data to a candidate in place. No-op by default."""
        return None

    # Shared helpers

    def _require_client(self) -> HttpClient:
        if self.http_client is None:
            raise ExtractorFetchError(self.source.value, "no HTTP client configured")
        return self.http_client

    async def fetch_listing_text(self, url: Optional[str] = None, **kwargs) -> str:
        """Fetch a primary listing page; failures are fatal for the run."""
        url = url or self.listing_url
        try:
            return await self._require_client().get_text(url, **kwargs)
        except FetchError as e:
            raise ExtractorFetchError(self.source.value, str(e)) from e

    async def fetch_listing_json(self, url: Optional[str] = None, **kwargs) -> Any:
        """Fetch a primary JSON listing; failures are fatal for the run."""
        url = url or self.listing_url
        try:
            return await self._require_client().get_json(url, **kwargs)
        except FetchError as e:
            raise ExtractorFetchError(self.source.value, str(e)) from e

    async def fetch_listing_soup(self, url: Optional[str] = None, **kwargs) -> BeautifulSoup:
        html = await self.fetch_listing_text(url, **kwargs)
        return BeautifulSoup(html, "lxml")

    async def fetch_detail_soup(self, url: str) -> BeautifulSoup:
        """
        Fetch a detail page.

        Raises:
            FetchError: Page unreachable; ``enrich`` drops the candidate
        """
        html = await self._require_client().get_text(url)
        return BeautifulSoup(html, "lxml")

    async def fetch_json_pages(
        self,
        items_key: str,
        params: Optional[dict] = None,
        url: Optional[str] = None,
    ) -> list[dict]:
        """
        Walk a ``?page=N`` JSON listing until an empty page or ``max_pages``.

        Only the first page is fatal; a later failing page ends the walk
        with what was collected so far.

        Args:
            items_key: Key of the item list in each page
            params: Extra query parameters sent with every page
            url: Listing URL (defaults to the configured one)

        Returns:
            Items of all pages, in order
        """
        items: list[dict] = []
        for page in range(1, self.settings.max_pages + 1):
            try:
                data = await self.fetch_listing_json(url, params={**(params or {}), "page": page})
            except ExtractorFetchError as e:
                if page == 1:
                    raise
                self.logger.warning("listing_page_failed", page=page, error=str(e), **(params or {}))
                break

            page_items = data.get(items_key) if isinstance(data, dict) else None
            if not page_items:
                break

            items.extend(item for item in page_items if isinstance(item, dict))
            self.logger.debug("listing_page_fetched", page=page, items=len(page_items), **(params or {}))

        return items

    def dedupe(self, candidates: list[dict]) -> list[dict]:
        """Drop candidates whose source_id was already seen; first wins."""
        unique: list[dict] = []
        seen: set[str] = set()

        for candidate in candidates:
            try:
                source_id = self.source_id_of(candidate)
            except Exception as e:
                self.logger.warning("candidate_parse_failed", stage="source_id", error=str(e))
                continue

            if not source_id:
                self.logger.warning("candidate_parse_failed", stage="source_id", error="empty source_id")
                continue
            if source_id in seen:
                self.logger.debug("duplicate_candidate", source_id=source_id)
                continue

            seen.add(source_id)
            unique.append(candidate)

        return unique

    async def enrich(self, candidates: list[dict]) -> list[dict]:
        """
        Run ``enrich_candidate`` over all candidates.

        At most ``settings.detail_concurrency`` detail fetches run at a
        time. A candidate whose enrichment fails is dropped from this run,
        so a half-filled record never replaces a stored one.

        Returns:
            Successfully enriched candidates, in input order
        """
        semaphore = asyncio.Semaphore(max(1, self.settings.detail_concurrency))

        async def bounded(candidate: dict) -> bool:
            async with semaphore:
                try:
                    await self.enrich_candidate(candidate)
                except Exception as e:
                    self.logger.warning(
                        "enrichment_failed",
                        source_id=self.source_id_of(candidate),
                        error=str(e),
                    )
                    return False
                return True

        results = await asyncio.gather(*(bounded(c) for c in candidates))
        return [candidate for candidate, ok in zip(candidates, results) if ok]

    async def run(self) -> ScrapeCounts:
        """
        Fetch, map and reconcile every candidate of this source.

        Returns:
            ScrapeCounts for the run

        Raises:
            ExtractorFetchError: Primary listing unreachable
        """
        self.logger.info("scrape_started", url=self.listing_url or None)

        try:
            candidates = await self.fetch_candidates()
        except FetchError as e:
            raise ExtractorFetchError(self.source.value, str(e)) from e

        unique = self.dedupe(candidates)
        self.logger.info(
            "candidates_extracted",
            raw=len(candidates),
            unique=len(unique),
        )

        enriched = await self.enrich(unique)

        counts = ScrapeCounts(failed=len(unique) - len(enriched))
        for candidate in enriched:
            try:
                record = self.map_candidate(candidate)
            except Exception as e:
                self.logger.warning(
                    "candidate_parse_failed",
                    source_id=self.source_id_of(candidate),
                    error=str(e),
                )
                continue

            counts.found += 1

            try:
                outcome = await self.reconciler.reconcile(record)
            except PersistenceError as e:
                counts.failed += 1
                self.logger.error(
                    "persist_failed",
                    source_id=record.source_id,
                    error=str(e),
                )
                continue

            if outcome is ReconcileOutcome.CREATED:
                counts.created += 1
            elif outcome is ReconcileOutcome.UPDATED:
                counts.updated += 1
            else:
                counts.unchanged += 1

        self.logger.info("scrape_complete", **counts.to_dict())
        return counts

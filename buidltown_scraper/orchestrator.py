"""
Scrape orchestrator.

Runs a list of extractors and collects one result per extractor. A
failing source is recorded and the run moves on; the report is always
returned in configured order.
"""

import asyncio
import time
from dataclasses import asdict, dataclass, field
from typing import Iterable, Optional

import structlog

from .config.loader import MAX_SOURCE_CONCURRENCY, ScraperSettings
from .core.http_client import HttpClient
from .core.models import EntityType
from .extractors.base import SourceExtractor
from .extractors.registry import build_extractors, select_sources
from .reconciler import UpsertReconciler
from .storage.base import RecordStore

logger = structlog.get_logger(__name__)


@dataclass
class ScrapeResult:
    """Outcome of one extractor within a run."""
    name: str
    entity_type: EntityType = EntityType.HACKATHON
    found: int = 0
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    failed: int = 0
    error: Optional[str] = None
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["entity_type"] = self.entity_type.value
        return data


@dataclass
class RunReport:
    """Per-extractor results of a run plus totals."""
    results: list[ScrapeResult] = field(default_factory=list)

    @property
    def total_found(self) -> int:
        return sum(r.found for r in self.results)

    @property
    def total_created(self) -> int:
        return sum(r.created for r in self.results)

    @property
    def total_updated(self) -> int:
        return sum(r.updated for r in self.results)

    @property
    def failures(self) -> list[ScrapeResult]:
        return [r for r in self.results if not r.ok]

    @property
    def ok(self) -> bool:
        return not self.failures

    def by_entity(self) -> dict[str, dict[str, int]]:
        """Found/created/updated totals split between hackathons and grants."""
        summary = {
            entity.value: {"found": 0, "created": 0, "updated": 0}
            for entity in EntityType
        }
        for result in self.results:
            totals = summary[result.entity_type.value]
            totals["found"] += result.found
            totals["created"] += result.created
            totals["updated"] += result.updated
        return summary

    def to_dict(self) -> dict:
        return {
            "results": [r.to_dict() for r in self.results],
            "total_found": self.total_found,
            "total_created": self.total_created,
            "total_updated": self.total_updated,
            "failures": [r.name for r in self.failures],
            "by_entity": self.by_entity(),
        }


class ScrapeOrchestrator:
    """
    Run extractors with per-source fault isolation.

    Usage:
        orchestrator = ScrapeOrchestrator(extractors, max_concurrency=2)
        report = await orchestrator.run_all()
    """

    def __init__(self, extractors: Iterable[SourceExtractor], max_concurrency: int = 1):
        """
        Initialize orchestrator.

        Args:
            extractors: Extractors in run order
            max_concurrency: Sources run at once (clamped to 1..3)
        """
        self.extractors = list(extractors)
        self.max_concurrency = max(1, min(int(max_concurrency), MAX_SOURCE_CONCURRENCY))

    async def _run_one(self, extractor: SourceExtractor) -> ScrapeResult:
        started = time.monotonic()
        result = ScrapeResult(name=extractor.name, entity_type=extractor.entity_type)

        try:
            counts = await extractor.run()
        except Exception as e:
            result.error = str(e) or type(e).__name__
            logger.error(
                "source_failed",
                source=extractor.source.value,
                error=result.error,
                error_type=type(e).__name__,
            )
        else:
            result.found = counts.found
            result.created = counts.created
            result.updated = counts.updated
            result.unchanged = counts.unchanged
            result.failed = counts.failed

        result.duration = round(time.monotonic() - started, 3)
        return result

    async def run_all(self) -> RunReport:
        """
        Run every extractor and report.

        Sequential when max_concurrency is 1, otherwise bounded by a
        semaphore. Never raises for a failing extractor.

        Returns:
            RunReport with results in extractor order
        """
        logger.info(
            "run_started",
            extractors=len(self.extractors),
            max_concurrency=self.max_concurrency,
        )

        if self.max_concurrency == 1:
            results = [await self._run_one(e) for e in self.extractors]
        else:
            semaphore = asyncio.Semaphore(self.max_concurrency)

            async def bounded(extractor: SourceExtractor) -> ScrapeResult:
                async with semaphore:
                    return await self._run_one(extractor)

            results = list(await asyncio.gather(*(bounded(e) for e in self.extractors)))

        report = RunReport(results=results)
        logger.info(
            "run_complete",
            total_found=report.total_found,
            total_created=report.total_created,
            total_updated=report.total_updated,
            failures=[r.name for r in report.failures],
        )
        return report


async def run_sources(
    source_names: Optional[list[str]],
    settings: ScraperSettings,
    store: RecordStore,
    entity_type: Optional[EntityType] = None,
    max_concurrency: Optional[int] = None,
    http_client: Optional[HttpClient] = None,
) -> RunReport:
    """
    Build extractors from config and run them against a store.

    Args:
        source_names: Sources to run (None = all enabled)
        settings: Loaded scraper settings
        store: Record store shared by all extractors
        entity_type: Only run sources producing this entity type
        max_concurrency: Overrides settings.max_concurrency
        http_client: Client to use instead of one built from settings

    Returns:
        RunReport
    """
    selected = select_sources(settings, source_names, entity_type)
    reconciler = UpsertReconciler(store)
    concurrency = max_concurrency or settings.max_concurrency

    if http_client is not None:
        extractors = build_extractors(selected, reconciler, http_client)
        return await ScrapeOrchestrator(extractors, concurrency).run_all()

    async with HttpClient(
        requests_per_second=settings.requests_per_second,
        timeout=settings.timeout,
        max_retries=settings.max_retries,
    ) as client:
        extractors = build_extractors(selected, reconciler, client)
        return await ScrapeOrchestrator(extractors, concurrency).run_all()

"""
Exception hierarchy for the scraping pipeline.

Mapping problems (bad dates, unknown categories or statuses) are never
errors; they resolve to documented defaults. Only fetch and persistence
failures surface as exceptions.
"""

from typing import Optional


class ScraperError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(ScraperError):
    """Invalid or missing configuration."""


class FetchError(ScraperError):
    """Upstream request failed after retries were exhausted."""

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(f"{url}: {message}")


class ExtractorFetchError(ScraperError):
    """Primary listing of a source could not be fetched; the run is lost."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"{source}: {message}")


class PersistenceError(ScraperError):
    """Store write or lookup failed for a single record."""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        source_id: Optional[str] = None,
    ):
        self.source = source
        self.source_id = source_id
        super().__init__(message)


class ConstraintViolation(PersistenceError):
    """Unique constraint on (source, source_id) or slug was violated."""

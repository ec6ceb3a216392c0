"""
YAML configuration loader with validation.

Loads scraper settings from YAML files with:
- Environment variable substitution
- Validation of source entries
- Default values
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import structlog
import yaml

from ..core.models import Source
from ..errors import ConfigError

logger = structlog.get_logger(__name__)

MAX_DETAIL_CONCURRENCY = 3
MAX_SOURCE_CONCURRENCY = 3


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variables in text.

    Supports formats:
    - ${VAR_NAME} - empty string and a warning if missing
    - ${VAR_NAME:-default} - optional with default

    Args:
        text: Text with env var placeholders

    Returns:
        Text with substituted values
    """
    def replace(match):
        var_expr = match.group(1)
        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)
        value = os.getenv(var_expr)
        if value is None:
            logger.warning("env_var_not_set", var=var_expr)
            return ""
        return value

    return re.sub(r"\$\{([^}]+)\}", replace, text)


def _positive(data: dict, key: str, default: Any, cast=float) -> Any:
    value = data.get(key, default)
    try:
        value = cast(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be a number, got {value!r}") from e
    if value <= 0:
        raise ConfigError(f"{key} must be positive, got {value!r}")
    return value


@dataclass
class SourceSettings:
    """Per-source settings from sources.yml."""

    source: Source
    enabled: bool = True
    listing_url: Optional[str] = None
    max_pages: int = 5
    detail_concurrency: int = MAX_DETAIL_CONCURRENCY
    requests_per_second: float = 2.0
    metadata: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "SourceSettings":
        """
        Create from a YAML mapping.

        Raises:
            ConfigError: Unknown source or missing/invalid field
        """
        if not isinstance(data, dict):
            raise ConfigError(f"Source entry must be a mapping, got {type(data).__name__}")
        if "source" not in data:
            raise ConfigError("Missing required field: source")

        try:
            source = Source(data["source"])
        except ValueError as e:
            raise ConfigError(f"Unknown source: {data['source']!r}") from e

        listing_url = data.get("listing_url")
        if source is not Source.FOUNDATION_GRANTS and not listing_url:
            raise ConfigError(f"Missing required field: listing_url ({source.value})")

        return cls(
            source=source,
            enabled=bool(data.get("enabled", True)),
            listing_url=listing_url,
            max_pages=_positive(data, "max_pages", 5, int),
            detail_concurrency=min(
                _positive(data, "detail_concurrency", MAX_DETAIL_CONCURRENCY, int),
                MAX_DETAIL_CONCURRENCY,
            ),
            requests_per_second=_positive(data, "requests_per_second", 2.0),
            metadata=data.get("metadata") or {},
        )


@dataclass
class ScraperSettings:
    """Global settings plus the ordered source list."""

    max_concurrency: int = 1
    timeout: float = 30.0
    max_retries: int = 3
    requests_per_second: float = 2.0
    kv_store_name: Optional[str] = None
    sources: list[SourceSettings] = field(default_factory=list)

    def source(self, name: str) -> Optional[SourceSettings]:
        """Settings of one source by its value, or None."""
        for settings in self.sources:
            if settings.source.value == name:
                return settings
        return None

    @property
    def enabled_sources(self) -> list[SourceSettings]:
        return [s for s in self.sources if s.enabled]


class ConfigLoader:
    """
    Configuration loader for scraper settings.

    Loads YAML config files and validates against the expected schema.
    """

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_dir: Directory containing config files
                       (defaults to package config directory)
        """
        if config_dir:
            self.config_dir = Path(config_dir)
        else:
            self.config_dir = Path(__file__).parent

    def load_file(self, filename: str) -> dict:
        """
        Load YAML config file.

        Args:
            filename: Config file name (relative to config_dir)

        Returns:
            Parsed config dict
        """
        filepath = self.config_dir / filename

        if not filepath.exists():
            raise ConfigError(f"Config file not found: {filepath}")

        logger.info("loading_config", file=str(filepath))

        with open(filepath, "r", encoding="utf-8") as f:
            content = f.read()

        content = substitute_env_vars(content)

        try:
            config = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {filepath}: {e}") from e

        return config or {}

    def load_settings(self, filename: str = "sources.yml") -> ScraperSettings:
        """
        Load global settings and source definitions.

        Invalid source entries are logged and skipped.

        Args:
            filename: Sources config file name

        Returns:
            ScraperSettings
        """
        config = self.load_file(filename)
        globals_ = config.get("settings") or {}

        sources = []
        for source_data in config.get("sources") or []:
            try:
                source = SourceSettings.from_dict(source_data)
                sources.append(source)
                logger.debug("source_loaded", source=source.source.value, enabled=source.enabled)
            except ConfigError as e:
                logger.error(
                    "source_load_failed",
                    source=source_data.get("source", "unknown") if isinstance(source_data, dict) else "unknown",
                    error=str(e),
                )

        return ScraperSettings(
            max_concurrency=min(
                _positive(globals_, "max_concurrency", 1, int), MAX_SOURCE_CONCURRENCY
            ),
            timeout=_positive(globals_, "timeout", 30.0),
            max_retries=_positive(globals_, "max_retries", 3, int),
            requests_per_second=_positive(globals_, "requests_per_second", 2.0),
            kv_store_name=globals_.get("kv_store_name") or None,
            sources=sources,
        )

    def load_foundation_grants(self, filename: str = "foundation_grants.yml") -> list[dict]:
        """
        Load the curated foundation grant programs.

        Programs are grouped by foundation in the file; each returned
        program dict carries its foundation under "foundation".

        Returns:
            Flat list of program dicts
        """
        config = self.load_file(filename)
        foundations = config.get("foundations") or []
        if not isinstance(foundations, list):
            raise ConfigError(f"'foundations' in {filename} must be a list")

        programs = []
        for foundation in foundations:
            for field_name in ("name", "chain"):
                if not foundation.get(field_name):
                    raise ConfigError(f"Foundation entry missing {field_name}: {foundation!r}")

            info = {
                "name": foundation["name"],
                "chain": foundation["chain"],
                "website_url": foundation.get("website_url"),
                "logo_url": foundation.get("logo_url"),
            }
            for program in foundation.get("programs") or []:
                if not program.get("slug") or not program.get("name"):
                    raise ConfigError(f"Program under {info['name']} needs name and slug")
                programs.append({**program, "foundation": info})

        logger.info("foundation_grants_loaded", programs=len(programs))
        return programs


def load_settings(config_path: Optional[str] = None) -> ScraperSettings:
    """
    Convenience function to load scraper settings.

    Args:
        config_path: Optional path to sources.yml

    Returns:
        ScraperSettings
    """
    if config_path:
        loader = ConfigLoader(str(Path(config_path).parent))
        return loader.load_settings(Path(config_path).name)
    return ConfigLoader().load_settings()

"""
Configuration module for scraper sources.

Provides:
- YAML config loading with validation
- Source settings and global settings
- Environment variable substitution
"""

from .loader import ConfigLoader, ScraperSettings, SourceSettings, load_settings

__all__ = ["ConfigLoader", "ScraperSettings", "SourceSettings", "load_settings"]

"""
Source extractors - one per upstream site.

Each extractor fetches its listing, maps candidates to canonical records
and hands them to the reconciler. See registry.EXTRACTORS for run order.
"""

from .base import SourceExtractor
from .akindo import AkindoExtractor
from .alchemy_grants import AlchemyGrantsExtractor
from .devfolio import DevfolioExtractor
from .devpost import DevpostExtractor
from .dorahacks import DoraHacksExtractor
from .ethglobal import EthGlobalExtractor
from .foundation_grants import FoundationGrantsExtractor
from .hackquest import HackQuestExtractor
from .taikai import TaikaiExtractor
from .registry import EXTRACTORS, build_extractors, select_extractors, select_sources

__all__ = [
    "SourceExtractor",
    "AkindoExtractor",
    "AlchemyGrantsExtractor",
    "DevfolioExtractor",
    "DevpostExtractor",
    "DoraHacksExtractor",
    "EthGlobalExtractor",
    "FoundationGrantsExtractor",
    "HackQuestExtractor",
    "TaikaiExtractor",
    "EXTRACTORS",
    "build_extractors",
    "select_extractors",
    "select_sources",
]

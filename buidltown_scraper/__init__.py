"""
buidltown-scraper - web3 hackathon and grant catalog pipeline.

Architecture:
- core/: Stable foundation (models, HTTP client, chain/category/date normalizers, hashing)
- extractors/: One extractor per upstream site plus the curated grant list
- storage/: Record stores keyed by (source, source_id)
- reconciler: Create/update/unchanged decision per record
- orchestrator: Runs many extractors with per-source fault isolation
- config/: YAML-driven source definitions
"""

__version__ = "0.1.0"
__all__ = ["__version__"]

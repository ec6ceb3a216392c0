"""
CLI entry point for buidltown-scraper.

Usage:
    python -m buidltown_scraper
    python -m buidltown_scraper --sources devfolio,dorahacks
    python -m buidltown_scraper --entity grant --store apify
"""

import argparse
import asyncio
import json
import logging
import sys

import structlog

# Log level mapping
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def setup_logging(level: str = "INFO", json_output: bool = False):
    """Configure structured logging."""
    log_level = LOG_LEVELS.get(level.upper(), logging.INFO)

    if json_output:
        processors = [
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Web3 hackathon and grant scraper",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run all enabled sources against an in-memory store
  python -m buidltown_scraper

  # Run specific sources
  python -m buidltown_scraper --sources ethglobal,devfolio

  # Only grant sources, persisted to the Apify key-value store
  python -m buidltown_scraper --entity grant --store apify

  # Use custom config file
  python -m buidltown_scraper --config /path/to/sources.yml
        """,
    )

    parser.add_argument(
        "--sources",
        type=str,
        help="Comma-separated list of sources to run (default: all enabled)",
    )

    parser.add_argument(
        "--entity",
        choices=["hackathon", "grant"],
        help="Only run sources producing this entity type",
    )

    parser.add_argument(
        "--store",
        choices=["memory", "apify"],
        default="memory",
        help="Record store (default: memory)",
    )

    parser.add_argument(
        "--concurrency",
        type=int,
        help="Sources scraped at once, 1-3 (default: from config)",
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to sources.yml config file",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Output logs as JSON (for production)",
    )

    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    return parser.parse_args(argv)


async def main_async(args):
    """Async main function."""
    from .config.loader import load_settings
    from .core.models import EntityType
    from .orchestrator import run_sources
    from .storage import ApifyRecordStore, InMemoryStore

    logger = structlog.get_logger(__name__)

    settings = load_settings(args.config)
    sources = [s.strip() for s in args.sources.split(",") if s.strip()] if args.sources else None
    entity_type = EntityType(args.entity) if args.entity else None

    logger.info(
        "starting_buidltown_scraper",
        sources=sources or "all",
        entity=args.entity or "all",
        store=args.store,
    )

    if args.store == "apify":
        from apify import Actor

        async with Actor:
            store = await ApifyRecordStore.open(settings.kv_store_name)
            report = await run_sources(sources, settings, store, entity_type, args.concurrency)
            await Actor.set_value("RUN_REPORT", report.to_dict())
    else:
        store = InMemoryStore()
        report = await run_sources(sources, settings, store, entity_type, args.concurrency)

    print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    return report


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    # Version check
    if args.version:
        from . import __version__
        print(f"buidltown-scraper {__version__}")
        sys.exit(0)

    # Setup logging
    setup_logging(args.log_level, args.json_logs)

    # Run async main
    try:
        report = asyncio.run(main_async(args))
        sys.exit(0 if report.ok else 1)
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        logger = structlog.get_logger(__name__)
        logger.exception("fatal_error", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()

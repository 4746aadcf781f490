"""cli.py
Command-line entry point for one filmography sync run.

Owns the storage connection and the process exit status: 0 when the run
completes (even if individual entities failed), 1 when it cannot start.
"""

import argparse
import logging
import sys

from scrapy.crawler import CrawlerProcess
from scrapy.settings import Settings

from . import settings as project_settings
from .config import SyncConfig
from .exceptions import FatalSetupFailure
from .spiders.filmography_spider import FilmographySpider
from .storage import CreditStore

logger = logging.getLogger(__name__)

SUMMARY_STATS = ('pending', 'skipped', 'empty', 'failed', 'persisted')


def _parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="filmography-sync",
        description="Sync IMDb filmography credits for entities that have none stored yet.",
    )
    parser.add_argument(
        "--env-file", default=None, help="Path to a .env file (default: ./.env if present)"
    )
    parser.add_argument(
        "--log-level", default=None, help="Override LOG_LEVEL (DEBUG, INFO, WARNING, ...)"
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=0,
        help="Maximum number of pending entities to process (0 for no limit)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Load and report the pending set without fetching anything",
    )
    return parser.parse_args(argv)


def build_settings(config, log_level=None):
    settings = Settings()
    settings.setmodule(project_settings, priority="project")
    settings.update(config.scrapy_settings(), priority="cmdline")
    if log_level:
        settings.set("LOG_LEVEL", log_level.upper(), priority="cmdline")
    return settings


def log_summary(stats):
    counts = {name: stats.get_value(f"filmography/{name}", 0) for name in SUMMARY_STATS}
    logger.info(
        "Sync summary: "
        + ", ".join(f"{name}={count}" for name, count in counts.items())
    )


def run(config, args):
    process = CrawlerProcess(build_settings(config, args.log_level))

    store = CreditStore.from_config(config)
    try:
        store.open()
        work_items = store.pending_work_items()
        if args.limit > 0:
            work_items = work_items[: args.limit]
        logger.info(f"Loaded {len(work_items)} pending entities")

        if args.dry_run:
            for work_item in work_items:
                logger.info(f"Pending entity {work_item.entity_id}: {work_item.source_url}")
            return 0

        crawler = process.create_crawler(FilmographySpider)
        process.crawl(crawler, work_items=work_items, store=store)
        process.start()
        log_summary(crawler.stats)
    except FatalSetupFailure as e:
        logger.error(f"Fatal setup failure: {e}")
        return 1
    finally:
        store.close()

    logger.info("Processing finished.")
    return 0


def main(argv=None):
    """Parse CLI options, build the configuration and run the sync."""

    args = _parse_args(argv)
    try:
        config = SyncConfig.from_env(env_file=args.env_file)
    except FatalSetupFailure as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error(f"Fatal setup failure: {e}")
        return 1
    return run(config, args)


if __name__ == "__main__":
    sys.exit(main())

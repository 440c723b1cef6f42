"""
Event ingestion CLI.

Commands:
- import-csv: bulk-import events from a CSV file into the local database
- scrape-url: extract events from any URL (LLM first, site scraper fallback)
- scrape-date: run the site scrapers for a day or a date range

Results are printed as JSON on stdout; logs go to stderr.
"""

from __future__ import annotations

import asyncio
import json
import sys
from datetime import date
from pathlib import Path
from typing import Any, Optional

import click
from dotenv import load_dotenv

from .browser import BrowserManager
from .cost_tracker import CostTracker
from .csv_import import CsvImportService
from .database import CategoryStore, EventStore
from .geocoder import Geocoder
from .hybrid_extractor import HybridExtractor
from .logging_utils import configure_logging, get_logger
from .mistral_extractor import MistralExtractor
from .models import ScraperType
from .normalizer import EventNormalizer
from .scrapers import ScraperFactory, ScraperService


logger = get_logger(__name__)


def _echo_json(payload: Any) -> None:
    click.echo(json.dumps(payload, ensure_ascii=False, indent=2))


def _parse_day(ctx, param, value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"expected YYYY-MM-DD, got {value!r}")


def _cost_summary(tracker: CostTracker) -> dict[str, Any]:
    return {
        "totalUsd": round(tracker.get_total_cost(), 6),
        "byModel": tracker.get_monthly_costs(),
        "tokens": tracker.get_token_usage(),
    }


@click.group()
@click.version_option(version="1.0.0")
@click.option("-v", "--verbose", is_flag=True, help="Log at DEBUG level")
def cli(verbose: bool):
    """Event ingestion: site scrapers, LLM extraction and CSV import."""
    load_dotenv()
    configure_logging("DEBUG" if verbose else None)


@cli.command("import-csv")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--db", "db_path", type=click.Path(dir_okay=False, path_type=Path), help="SQLite database file")
def import_csv(csv_file: Path, db_path: Optional[Path]):
    """Import events from CSV_FILE."""

    async def run():
        async with Geocoder() as geocoder:
            service = CsvImportService(EventStore(db_path), geocoder, CategoryStore(db_path))
            return await service.import_from_csv(csv_file.read_bytes(), filename=csv_file.name)

    result = asyncio.run(run())
    _echo_json(result.to_dict())
    if result.failed:
        sys.exit(1)


@cli.command("scrape-url")
@click.argument("url")
@click.option("--fallback/--no-fallback", default=True, help="Use the site scraper when the LLM finds nothing")
def scrape_url(url: str, fallback: bool):
    """Extract events from URL."""
    tracker = CostTracker()

    async def run():
        async with BrowserManager() as browser:
            extractor = HybridExtractor(
                browser,
                MistralExtractor(cost_tracker=tracker),
                EventNormalizer(),
                ScraperService(ScraperFactory(browser)),
            )
            return await extractor.extract(url, use_fallback=fallback)

    extraction = asyncio.run(run())
    _echo_json({
        "state": extraction.state.value,
        "path": [state.value for state in extraction.path],
        "reason": extraction.reason,
        "events": [event.to_dict() for event in extraction.events],
        "costs": _cost_summary(tracker),
    })
    if not extraction.ok:
        sys.exit(1)


@cli.command("scrape-date")
@click.argument("day", callback=_parse_day)
@click.option("--end", "end_day", callback=_parse_day, help="Last day of the range (inclusive)")
@click.option(
    "--scraper",
    "scraper_types",
    multiple=True,
    type=click.Choice([t.value for t in ScraperType]),
    help="Only run these scrapers (repeatable). Default: all",
)
def scrape_date(day: date, end_day: Optional[date], scraper_types: tuple[str, ...]):
    """Run the site scrapers for DAY (YYYY-MM-DD)."""
    if end_day is not None and end_day < day:
        raise click.BadParameter("--end must not be before DAY")
    active = [ScraperType(value) for value in scraper_types] or None

    async def run():
        async with BrowserManager() as browser:
            service = ScraperService(ScraperFactory(browser), active_types=active)
            if end_day is None:
                return await service.scrape_events_for_date(day)
            return await service.scrape_events_for_date_range(day, end_day)

    events = asyncio.run(run())
    logger.info("Scraped %s events", len(events))
    _echo_json([event.to_dict() for event in events])


def main():
    cli()


if __name__ == "__main__":
    main()

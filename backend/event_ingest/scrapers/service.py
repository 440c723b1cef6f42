"""
Scraper Service

Keeps the set of active scrapers and fans date queries out to all of them
concurrently. A failing scraper fails the whole query.
"""

from __future__ import annotations

import asyncio
from datetime import date
from typing import Iterable, Optional

from ..errors import ScraperNotFoundError
from ..logging_utils import get_logger
from ..models import Event, ScraperType
from .base import ListingScraper
from .factory import ScraperFactory


class ScraperService:
    """
    Usage:
        service = ScraperService(ScraperFactory(browser))
        events = await service.scrape_events_for_date(date.today())
    """

    def __init__(self, factory: ScraperFactory, active_types: Optional[Iterable[ScraperType]] = None):
        """
        Args:
            factory: Source of scraper instances.
            active_types: Scrapers to enable initially. Defaults to every registered type.
        """
        self.factory = factory
        self.logger = get_logger(__name__)
        self._active: dict[ScraperType, ListingScraper] = {}
        for scraper_type in active_types if active_types is not None else list(ScraperType):
            self.activate_scraper(scraper_type)

    def activate_scraper(self, scraper_type: ScraperType) -> None:
        scraper_type = ScraperType(scraper_type)
        if scraper_type not in self._active:
            self._active[scraper_type] = self.factory.get_scraper(scraper_type)
            self.logger.debug("Activated scraper for type: %s", scraper_type.value)

    def deactivate_scraper(self, scraper_type: ScraperType) -> None:
        self._active.pop(ScraperType(scraper_type), None)
        self.logger.debug("Deactivated scraper for type: %s", ScraperType(scraper_type).value)

    def get_active_scrapers(self) -> list[ScraperType]:
        return list(self._active)

    def get_scraper(self, scraper_type: ScraperType) -> ListingScraper:
        scraper = self._active.get(ScraperType(scraper_type))
        if scraper is None:
            raise ScraperNotFoundError(ScraperType(scraper_type).value)
        return scraper

    async def scrape_events_for_date(self, day: date) -> list[Event]:
        scrapers = list(self._active.values())
        self.logger.info("Scraping %s for %s", ", ".join(t.value for t in self._active), day)
        results = await asyncio.gather(*(scraper.scrape_events_for_date(day) for scraper in scrapers))
        return [event for events in results for event in events]

    async def scrape_events_for_date_range(self, start: date, end: date) -> list[Event]:
        scrapers = list(self._active.values())
        self.logger.info("Scraping %s for %s to %s", ", ".join(t.value for t in self._active), start, end)
        results = await asyncio.gather(
            *(scraper.scrape_events_for_date_range(start, end) for scraper in scrapers)
        )
        return [event for events in results for event in events]

    async def scrape_events_from_url(self, scraper_type: ScraperType, url: str) -> list[Event]:
        scraper = self.get_scraper(scraper_type)
        result = await scraper.scrape_events_from_url(url)
        return result.events

"""
Registry mapping every ScraperType to a scraper instance.
"""

from __future__ import annotations

from ..browser import BrowserManager
from ..models import ScraperType
from .base import ListingScraper
from .curt import CurtScraper
from .eventbrite import EventbriteScraper
from .eventfinder import EventFinderScraper
from .parks import ParksScraper
from .rausgegangen import RausgegangenScraper


SCRAPER_CLASSES: dict[ScraperType, type[ListingScraper]] = {
    ScraperType.EVENTFINDER: EventFinderScraper,
    ScraperType.CURT: CurtScraper,
    ScraperType.RAUSGEGANGEN: RausgegangenScraper,
    ScraperType.EVENTBRITE: EventbriteScraper,
    ScraperType.PARKS: ParksScraper,
}


class ScraperFactory:
    """Builds one scraper per type, all sharing the same browser."""

    def __init__(self, browser: BrowserManager):
        self.browser = browser
        self._scrapers: dict[ScraperType, ListingScraper] = {
            scraper_type: scraper_class(browser)
            for scraper_type, scraper_class in SCRAPER_CLASSES.items()
        }

    def get_scraper(self, scraper_type: ScraperType) -> ListingScraper:
        return self._scrapers[ScraperType(scraper_type)]

    def get_all_scrapers(self) -> dict[ScraperType, ListingScraper]:
        return dict(self._scrapers)

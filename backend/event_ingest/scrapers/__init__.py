from .base import BaseScraper, DailyListingScraper, ListingScraper, ScrapedItem
from .curt import CurtScraper
from .eventbrite import EventbriteScraper
from .eventfinder import EventFinderScraper
from .factory import ScraperFactory
from .parks import ParksScraper
from .rausgegangen import RausgegangenScraper
from .service import ScraperService

__all__ = [
    "BaseScraper",
    "CurtScraper",
    "DailyListingScraper",
    "EventFinderScraper",
    "EventbriteScraper",
    "ListingScraper",
    "ParksScraper",
    "RausgegangenScraper",
    "ScrapedItem",
    "ScraperFactory",
    "ScraperService",
]

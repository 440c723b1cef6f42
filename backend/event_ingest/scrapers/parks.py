"""
PARKS Nürnberg calendar scraper.

The calendar is a single page; date filtering happens after parsing.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from bs4 import BeautifulSoup

from ..models import ScraperConfig, ScraperOptions, ScraperType
from .base import ListingScraper, ScrapedItem, select_text
from .dates import add_hours, clean_time, find_time_range, parse_month_name_date


DEFAULT_VENUE = "PARKS Nürnberg"
VENUE_LATITUDE = 49.453872
VENUE_LONGITUDE = 11.077298


def parse_time_span(text: str) -> tuple[str, str]:
    """
    "19:00 - 22:00" -> both ends; a single "19:00" lasts one hour;
    no time at all means the whole day.
    """
    span = find_time_range(text)
    if span:
        return span
    start = clean_time(text)
    if start:
        return start, add_hours(start, 1)
    return "00:00", "23:59"


def parse_parks_listing(html: str, today: Optional[date] = None) -> list[ScrapedItem]:
    year = (today or date.today()).year
    soup = BeautifulSoup(html, "lxml")
    items: list[ScrapedItem] = []
    for element in soup.select(".em-event.em-item"):
        iso_date = parse_month_name_date(select_text(element, ".em-event-date"), year)
        time_from, time_to = parse_time_span(select_text(element, ".em-event-time"))
        items.append(
            ScrapedItem(
                title=select_text(element, "h3 a"),
                date=iso_date,
                time_from=time_from,
                time_to=time_to,
                description=select_text(element, ".em-item-desc"),
                address=select_text(element, ".em-event-location a") or DEFAULT_VENUE,
                latitude=VENUE_LATITUDE,
                longitude=VENUE_LONGITUDE,
            )
        )
    return items


class ParksScraper(ListingScraper):
    scraper_type = ScraperType.PARKS
    default_config = ScraperConfig(
        base_url="https://www.parks-nuernberg.de/kalender/",
        date_format="YYYY-MM-DD",
        max_results=10,
    )
    container_selector = ".em-view-container"
    container_state = "attached"
    # wait for the container as long as for navigation
    container_timeout_ms = None
    wait_until = "load"

    def parse_listing(self, html: str, url: str) -> list[ScrapedItem]:
        return parse_parks_listing(html)

    def generate_url(self, options: ScraperOptions) -> str:
        return self.config.base_url

    def generate_url_for_date(self, day: date) -> str:
        return self.config.base_url

    def extract_date_from_url(self, url: str) -> Optional[date]:
        return None

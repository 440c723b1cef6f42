"""
eventfinder.de (Nürnberg) listing scraper.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Optional

from bs4 import BeautifulSoup
from playwright.async_api import Error as PlaywrightError, Page

from ..models import ScraperConfig, ScraperOptions, ScraperType
from .base import ListingScraper, ScrapedItem, select_text
from .dates import parse_month_name_date, parse_numeric_date


COOKIE_BUTTON_SELECTOR = ".cookie-banner button, .cookie-notice button, #cookie-notice button"
URL_DATE_RE = re.compile(r"datum/(\d{4}-\d{2}-\d{2})")


def parse_eventfinder_listing(html: str, today: Optional[date] = None) -> list[ScrapedItem]:
    """Parse `.event-item` cards; every event covers the whole day."""
    year = (today or date.today()).year
    soup = BeautifulSoup(html, "lxml")
    items: list[ScrapedItem] = []
    for element in soup.select(".event-item"):
        date_text = select_text(element, ".event-date")
        iso_date = parse_numeric_date(date_text, year) or parse_month_name_date(date_text, year)
        items.append(
            ScrapedItem(
                title=select_text(element, ".event-title"),
                date=iso_date,
                time_from="00:00",
                time_to="23:59",
                description=select_text(element, ".event-description"),
                address=select_text(element, ".event-location"),
            )
        )
    return items


class EventFinderScraper(ListingScraper):
    scraper_type = ScraperType.EVENTFINDER
    default_config = ScraperConfig(
        base_url="https://www.eventfinder.de/nuernberg",
        date_format="YYYY-MM-DD",
        pagination_pattern="?page={page}",
        max_pages=5,
    )
    container_selector = ".event-list"

    def parse_listing(self, html: str, url: str) -> list[ScrapedItem]:
        return parse_eventfinder_listing(html)

    async def handle_cookie_banner(self, page: Page) -> None:
        try:
            button = await page.query_selector(COOKIE_BUTTON_SELECTOR)
            if button:
                await button.click()
                await page.wait_for_timeout(1000)
        except PlaywrightError as e:
            self.logger.warning("Cookie banner could not be dismissed: %s", e)

    def generate_url(self, options: ScraperOptions) -> str:
        category = options.category or "veranstaltungen"
        time_frame = options.time_frame or "naechste-woche"
        return f"{self.config.base_url}/{category}/{time_frame}/"

    def generate_url_for_date(self, day: date) -> str:
        return f"{self.config.base_url}/datum/{day.isoformat()}"

    def extract_date_from_url(self, url: str) -> Optional[date]:
        match = URL_DATE_RE.search(url)
        if not match:
            return None
        try:
            return date.fromisoformat(match.group(1))
        except ValueError:
            return None

"""
curt.de (Nürnberg) day-page scraper.

Curt publishes one page per day under /tag/YYYY-MM-DD/. Cards sometimes
omit the year or the whole date; the day in the URL fills the gap.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Optional

from bs4 import BeautifulSoup
from playwright.async_api import Error as PlaywrightError, Page, TimeoutError as PlaywrightTimeoutError

from ..categories import normalize_category_id
from ..models import ScraperConfig, ScraperOptions, ScraperType
from .base import DailyListingScraper, ScrapedItem, select_text
from .dates import clean_time, parse_numeric_date


ITEM_SELECTOR = ".event, .event-item, .event-container, .termin"
COOKIE_ACCEPT_SELECTOR = 'button[data-testid="uc-accept-all-button"]'
URL_DATE_RE = re.compile(r"tag/(\d{4}-\d{2}-\d{2})")


def parse_curt_listing(html: str, page_date: Optional[date] = None) -> list[ScrapedItem]:
    default_year = page_date.year if page_date else None
    soup = BeautifulSoup(html, "lxml")
    items: list[ScrapedItem] = []
    for element in soup.select(ITEM_SELECTOR):
        title = select_text(element, ".title a, .event-title, .titel")
        if not title:
            continue

        iso_date = parse_numeric_date(select_text(element, ".links .dat, .date, .datum"), default_year)
        if iso_date is None and page_date is not None:
            iso_date = page_date.isoformat()

        items.append(
            ScrapedItem(
                title=title,
                date=iso_date,
                time_from=clean_time(select_text(element, ".links .time, .time, .uhrzeit")),
                description=select_text(element, ".description a, .event-description, .beschreibung"),
                address=select_text(element, ".mitte .loc, .location, .ort"),
                category_id=normalize_category_id(select_text(element, ".mitte .cat, .category, .kategorie")),
            )
        )
    return items


class CurtScraper(DailyListingScraper):
    scraper_type = ScraperType.CURT
    default_config = ScraperConfig(
        base_url="https://www.curt.de/termine/84",
        date_format="YYYY-MM-DD",
        pagination_pattern="tag/{date}/",
        max_pages=7,
        max_results=10,
    )
    container_selector = "#eventinnen"

    def validate_config(self) -> bool:
        return super().validate_config() and bool(self.config.pagination_pattern)

    def parse_listing(self, html: str, url: str) -> list[ScrapedItem]:
        return parse_curt_listing(html, self.extract_date_from_url(url))

    async def handle_cookie_banner(self, page: Page) -> None:
        try:
            await page.wait_for_selector(COOKIE_ACCEPT_SELECTOR, timeout=2500)
        except PlaywrightTimeoutError:
            self.logger.debug("No cookie banner")
            return
        try:
            await page.click(COOKIE_ACCEPT_SELECTOR)
            self.logger.debug("Cookie banner accepted")
        except PlaywrightError as e:
            self.logger.warning("Cookie banner could not be dismissed: %s", e)

    def generate_url(self, options: ScraperOptions) -> str:
        if options.start_date:
            return self.generate_url_for_date(options.start_date)
        return self.config.base_url

    def generate_url_for_date(self, day: date) -> str:
        path = self.config.pagination_pattern.replace("{date}", day.isoformat())
        return f"{self.config.base_url}/{path}"

    def extract_date_from_url(self, url: str) -> Optional[date]:
        match = URL_DATE_RE.search(url)
        if not match:
            return None
        try:
            return date.fromisoformat(match.group(1))
        except ValueError:
            return None

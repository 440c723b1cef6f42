"""
eventbrite.de (Nürnberg) search-results scraper.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlparse

from bs4 import BeautifulSoup, Tag
from playwright.async_api import Error as PlaywrightError, Page

from ..models import ScraperConfig, ScraperOptions, ScraperType
from .base import ListingScraper, ScrapedItem, select_text
from .dates import month_from_name


COOKIE_BUTTON_SELECTOR = '[data-testid="cookie-banner-accept"], .cookie-banner button, .cookie-notice button'

# "So., 22. Juni, 08:00"
CARD_DATETIME_RE = re.compile(
    r"([A-Za-zäöüÄÖÜß]{2,4})\.,\s*(\d{1,2})\.\s*([A-Za-zäöüÄÖÜß]+),\s*(\d{2}:\d{2})"
)


def parse_card_datetime(text: str, year: int) -> tuple[Optional[str], Optional[str]]:
    match = CARD_DATETIME_RE.search(text or "")
    if not match:
        return None, None
    _, day, month_name, clock = match.groups()
    month = month_from_name(month_name)
    if month is None:
        return None, None
    try:
        return date(year, month, int(day)).isoformat(), clock
    except ValueError:
        return None, None


def parse_card_price(text: str) -> Optional[float]:
    """'ab 12,50 €' -> 12.5, 'Kostenlos' -> 0.0, None if no price is recognizable."""
    if (text or "").strip().lower() in {"kostenlos", "free", "gratis"}:
        return 0.0
    digits = re.sub(r"[^0-9,]", "", text or "").replace(",", ".", 1)
    if not digits or digits == ".":
        return None
    try:
        return float(digits.replace(",", ""))
    except ValueError:
        return None


def _price_text(location: Optional[Tag]) -> str:
    if location is None:
        return ""
    sibling = location.find_next_sibling()
    sibling = sibling.find_next_sibling() if sibling is not None else None
    price = sibling.find("p") if sibling is not None else None
    return " ".join(price.get_text(" ", strip=True).split()) if price is not None else ""


def parse_eventbrite_listing(html: str, today: Optional[date] = None) -> list[ScrapedItem]:
    year = (today or date.today()).year
    soup = BeautifulSoup(html, "lxml")
    items: list[ScrapedItem] = []
    for card in soup.select(".event-card"):
        details = card.select_one(".event-card-details")
        lines = details.select(".event-card__clamp-line--one") if details is not None else []
        datetime_text = lines[0].get_text(" ", strip=True) if lines else ""
        location = lines[1] if len(lines) > 1 else None

        iso_date, clock = parse_card_datetime(datetime_text, year)
        price_text = _price_text(location)
        price = parse_card_price(price_text)

        items.append(
            ScrapedItem(
                title=select_text(details, ".event-card-link h3"),
                date=iso_date,
                time_from=clock,
                address=" ".join(location.get_text(" ", strip=True).split()) if location is not None else "",
                price=price,
                price_string=price_text or None,
                tickets_needed=(price > 0) if price is not None else None,
            )
        )
    return items


class EventbriteScraper(ListingScraper):
    scraper_type = ScraperType.EVENTBRITE
    default_config = ScraperConfig(
        base_url="https://www.eventbrite.de/d/germany--n%C3%BCrnberg/all-events/",
        date_format="YYYY-MM-DD",
        pagination_pattern="?page={page}",
        max_pages=5,
    )
    container_selector = ".search-results-panel-content__events"
    container_timeout_ms = 15000
    wait_until = "load"
    # cards switch to the German date format shortly after render
    settle_ms = 3200
    # the search URL already restricts dates; card dates carry no year
    filter_by_date_range = False

    def parse_listing(self, html: str, url: str) -> list[ScrapedItem]:
        return parse_eventbrite_listing(html)

    async def handle_cookie_banner(self, page: Page) -> None:
        try:
            button = await page.query_selector(COOKIE_BUTTON_SELECTOR)
            if button:
                await button.click()
                await page.wait_for_timeout(1000)
        except PlaywrightError as e:
            self.logger.warning("Cookie banner could not be dismissed: %s", e)

    def _url_with_range(self, start: date, end: date) -> str:
        query = urlencode({"start_date": start.isoformat(), "end_date": end.isoformat()})
        return f"{self.config.base_url}?{query}"

    def generate_url(self, options: ScraperOptions) -> str:
        start = options.start_date or date.today()
        end = options.end_date if options.start_date and options.end_date else start
        return self._url_with_range(start, end)

    def generate_url_for_date(self, day: date) -> str:
        return self._url_with_range(day, day)

    def extract_date_from_url(self, url: str) -> Optional[date]:
        values = parse_qs(urlparse(url).query).get("start_date")
        if not values:
            return None
        try:
            return date.fromisoformat(values[0])
        except ValueError:
            return None

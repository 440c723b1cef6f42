"""
Scraper contract and the shared listing algorithm.

Every site scraper follows the same flow:
1. Navigate to a listing URL with a borrowed browser page
2. Dismiss the cookie banner (best effort)
3. Wait for the list container (bounded timeout)
4. Hand the rendered HTML to a pure per-site parser
5. Drop incomplete items, filter by date range, truncate, assign ids

Sites only differ in selectors, their German date rules and URL layout.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, ClassVar, Optional, Union

from bs4 import Tag
from playwright.async_api import Error as PlaywrightError, Page

from ..browser import BrowserManager
from ..errors import InvalidScraperConfigError, ScrapingError
from ..logging_utils import get_logger, is_debug
from ..models import (
    DailyTimeSlot,
    Event,
    Location,
    ScraperConfig,
    ScraperOptions,
    ScraperResult,
    ScraperType,
)


@dataclass
class ScrapedItem:
    """
    Raw listing entry as read from a page.
    Dates and times are already ISO; everything else is trimmed text.
    """
    title: str
    date: Optional[str]
    time_from: Optional[str] = None
    time_to: Optional[str] = None
    description: str = ""
    address: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    category_id: str = "default"
    price: Optional[float] = None
    price_string: Optional[str] = None
    tickets_needed: Optional[bool] = None

    def to_event(self) -> Event:
        slot = DailyTimeSlot(date=self.date, from_=self.time_from, to=self.time_to)
        return Event(
            title=self.title,
            description=self.description,
            location=Location(address=self.address, latitude=self.latitude, longitude=self.longitude),
            daily_time_slots=[slot],
            category_id=self.category_id,
            price=self.price,
            price_string=self.price_string,
            tickets_needed=self.tickets_needed,
        )


def select_text(element: Optional[Tag], selector: str) -> str:
    """Trimmed text of the first match of `selector` under `element`, or ''."""
    if element is None:
        return ""
    found = element.select_one(selector)
    if found is None:
        return ""
    return " ".join(found.get_text(" ", strip=True).split())


class BaseScraper(ABC):
    """Operations every scraper (site or hybrid) exposes."""

    scraper_type: ClassVar[Optional[ScraperType]] = None
    default_config: ClassVar[ScraperConfig] = ScraperConfig()

    def __init__(self) -> None:
        self.logger = get_logger(f"{__name__}.{type(self).__name__}")
        self.initialize()

    def initialize(self, config: Union[ScraperConfig, dict[str, Any], None] = None) -> None:
        """Merge overrides into the default config and validate the result."""
        if not isinstance(config, ScraperConfig):
            config = ScraperConfig.model_validate(config or {})
        merged = self.default_config.model_dump()
        merged.update(config.model_dump(exclude_unset=True))
        self.config = ScraperConfig.model_validate(merged)
        if not self.validate_config():
            raise InvalidScraperConfigError(f"Invalid scraper configuration for {type(self).__name__}")

    def validate_config(self) -> bool:
        return bool(self.config.base_url and self.config.date_format)

    @abstractmethod
    async def scrape_events(self, options: ScraperOptions) -> list[Event]:
        ...

    @abstractmethod
    async def scrape_events_for_date(self, day: date) -> list[Event]:
        ...

    @abstractmethod
    async def scrape_events_for_date_range(self, start: date, end: date) -> list[Event]:
        ...

    @abstractmethod
    async def scrape_events_from_url(self, url: str, options: Optional[ScraperOptions] = None) -> ScraperResult:
        ...

    @abstractmethod
    def generate_url(self, options: ScraperOptions) -> str:
        ...

    @abstractmethod
    def generate_url_for_date(self, day: date) -> str:
        ...

    @abstractmethod
    def extract_date_from_url(self, url: str) -> Optional[date]:
        ...

    async def handle_cookie_banner(self, page: Page) -> None:
        """Dismiss a consent dialog if the site shows one. No-op by default."""
        return None


class ListingScraper(BaseScraper):
    """Scraper for sites that render a list of event cards on one page."""

    container_selector: ClassVar[str] = ""
    container_timeout_ms: ClassVar[Optional[int]] = 10000
    container_state: ClassVar[str] = "visible"
    wait_until: ClassVar[str] = "networkidle"
    settle_ms: ClassVar[int] = 0
    filter_by_date_range: ClassVar[bool] = True

    def __init__(self, browser: BrowserManager):
        self.browser = browser
        super().__init__()

    @abstractmethod
    def parse_listing(self, html: str, url: str) -> list[ScrapedItem]:
        """Turn a rendered listing page into raw items."""

    async def scrape_events(self, options: ScraperOptions) -> list[Event]:
        url = self.generate_url(options)
        result = await self.scrape_events_from_url(url, options)
        return result.events

    async def scrape_events_for_date(self, day: date) -> list[Event]:
        return await self.scrape_events(ScraperOptions(start_date=day, end_date=day))

    async def scrape_events_for_date_range(self, start: date, end: date) -> list[Event]:
        return await self.scrape_events(ScraperOptions(start_date=start, end_date=end))

    async def scrape_events_from_url(self, url: str, options: Optional[ScraperOptions] = None) -> ScraperResult:
        self.logger.debug("Scraping events from URL: %s", url)
        html = await self._fetch_listing_html(url)
        items = self.parse_listing(html, url)
        result = self._build_result(items, options)
        self.logger.info("[%s] %s events from %s", type(self).__name__, len(result.events), url)
        return result

    async def _fetch_listing_html(self, url: str) -> str:
        async with self.browser.page() as page:
            try:
                await page.goto(url, wait_until=self.wait_until, timeout=self.browser.timeout_ms)
                await self.handle_cookie_banner(page)
                await page.wait_for_selector(
                    self.container_selector,
                    state=self.container_state,
                    timeout=self.container_timeout_ms or self.browser.timeout_ms,
                )
                self.logger.debug("Event container %s found", self.container_selector)
                if self.settle_ms:
                    await page.wait_for_timeout(self.settle_ms)
                return await page.content()
            except PlaywrightError as e:
                self.logger.error("Error scraping events from URL %s: %s", url, e)
                raise ScrapingError(url, str(e)) from e

    def _max_results(self, options: Optional[ScraperOptions]) -> Optional[int]:
        if options is not None and options.max_results:
            return options.max_results
        return self.config.max_results

    def _build_result(self, items: list[ScrapedItem], options: Optional[ScraperOptions]) -> ScraperResult:
        valid = [item for item in items if item.title and item.date]

        if (
            self.filter_by_date_range
            and options is not None
            and options.start_date is not None
            and options.end_date is not None
        ):
            start, end = options.start_date, options.end_date
            valid = [item for item in valid if start <= date.fromisoformat(item.date) <= end]

        max_results = self._max_results(options)
        limited = valid[:max_results] if max_results else valid

        if is_debug():
            self.logger.debug(
                "Found %s items, %s usable, returning %s (max_results=%s)",
                len(items), len(valid), len(limited), max_results,
            )

        return ScraperResult(
            events=[item.to_event() for item in limited],
            has_more_pages=max_results is not None and len(valid) > max_results,
        )


class DailyListingScraper(ListingScraper):
    """
    Listing scraper for sites that publish one page per day.
    Date ranges are fetched day by day and concatenated.
    """

    async def scrape_events(self, options: ScraperOptions) -> list[Event]:
        per_day = ScraperOptions(max_results=options.max_results)
        if options.start_date and options.end_date:
            return await self._scrape_days(options.start_date, options.end_date, per_day)
        if options.start_date:
            return await self._scrape_day(options.start_date, per_day)
        result = await self.scrape_events_from_url(self.generate_url(options), per_day)
        return result.events

    async def scrape_events_for_date(self, day: date) -> list[Event]:
        return await self._scrape_day(day, None)

    async def scrape_events_for_date_range(self, start: date, end: date) -> list[Event]:
        return await self._scrape_days(start, end, None)

    async def _scrape_day(self, day: date, options: Optional[ScraperOptions]) -> list[Event]:
        result = await self.scrape_events_from_url(self.generate_url_for_date(day), options)
        return result.events

    async def _scrape_days(self, start: date, end: date, options: Optional[ScraperOptions]) -> list[Event]:
        self.logger.debug("Scraping events for date range: %s to %s", start, end)
        events: list[Event] = []
        current = start
        while current <= end:
            events.extend(await self._scrape_day(current, options))
            current += timedelta(days=1)
        self.logger.debug("Total events found: %s", len(events))
        return events

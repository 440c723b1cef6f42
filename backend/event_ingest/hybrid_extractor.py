"""
Hybrid Event Extractor

Extracts events from an arbitrary URL:
1. Fetch the rendered page and let the LLM extract events
2. Normalize the LLM output into canonical events
3. If that fails or finds nothing, hand the URL once to the site scraper
   registered for its domain (if any)

The outcome is returned as a HybridExtraction value; failures along the
way are recorded in it instead of being raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional
from urllib.parse import urlparse

from .browser import BrowserManager
from .logging_utils import get_logger
from .mistral_extractor import MistralExtractor
from .models import Event, ScraperConfig, ScraperOptions, ScraperResult, ScraperType
from .normalizer import EventNormalizer
from .scrapers.base import BaseScraper
from .scrapers.service import ScraperService


FALLBACK_DOMAINS: dict[str, ScraperType] = {
    "eventfinder.de": ScraperType.EVENTFINDER,
    "curt.de": ScraperType.CURT,
    "rausgegangen.de": ScraperType.RAUSGEGANGEN,
    "eventbrite.de": ScraperType.EVENTBRITE,
    "eventbrite.com": ScraperType.EVENTBRITE,
    "parks-nuernberg.de": ScraperType.PARKS,
}


class ExtractionState(str, Enum):
    TRY_LLM = "try_llm"
    NORMALIZE = "normalize"
    SUCCESS = "success"
    FALLBACK = "fallback"
    FALLBACK_SUCCESS = "fallback_success"
    EMPTY = "empty"


@dataclass
class HybridExtraction:
    """Terminal outcome of one extraction: SUCCESS, FALLBACK_SUCCESS or EMPTY."""
    state: ExtractionState
    events: list[Event] = field(default_factory=list)
    reason: Optional[str] = None
    path: list[ExtractionState] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state in (ExtractionState.SUCCESS, ExtractionState.FALLBACK_SUCCESS)


def resolve_scraper_type(url: str) -> Optional[ScraperType]:
    """Map a URL's host (ignoring a leading "www.") to its site scraper."""
    host = (urlparse(url).hostname or "").lower()
    if host.startswith("www."):
        host = host[len("www."):]
    return FALLBACK_DOMAINS.get(host)


class HybridExtractor(BaseScraper):
    """
    LLM-first extractor with a site-scraper fallback.

    Only URL-based extraction is supported; date-based operations raise
    NotImplementedError.
    """

    default_config = ScraperConfig(base_url="", date_format="YYYY-MM-DD")

    def __init__(
        self,
        browser: BrowserManager,
        extractor: MistralExtractor,
        normalizer: EventNormalizer,
        scraper_service: ScraperService,
    ):
        self.browser = browser
        self.extractor = extractor
        self.normalizer = normalizer
        self.scraper_service = scraper_service
        super().__init__()

    def validate_config(self) -> bool:
        return True

    async def extract(self, url: str, use_fallback: bool = True) -> HybridExtraction:
        path = [ExtractionState.TRY_LLM]
        reason: Optional[str]

        try:
            html = await self._fetch_html(url)
            raw_events = await self.extractor.extract_events(html)
            path.append(ExtractionState.NORMALIZE)
            events = self.normalizer.normalize(raw_events)
            if events:
                path.append(ExtractionState.SUCCESS)
                self.logger.info("LLM extraction found %s events for %s", len(events), url)
                return HybridExtraction(ExtractionState.SUCCESS, events, None, path)
            reason = "LLM extraction returned no events"
        except Exception as e:
            reason = f"LLM extraction failed: {e}"
        self.logger.warning("%s (%s)", reason, url)

        if not use_fallback:
            path.append(ExtractionState.EMPTY)
            return HybridExtraction(ExtractionState.EMPTY, [], f"{reason}; fallback disabled", path)

        path.append(ExtractionState.FALLBACK)
        return await self._fallback(url, path)

    async def _fallback(self, url: str, path: list[ExtractionState]) -> HybridExtraction:
        scraper_type = resolve_scraper_type(url)
        if scraper_type is None:
            self.logger.warning("No matching scraper for URL: %s", url)
            path.append(ExtractionState.EMPTY)
            return HybridExtraction(ExtractionState.EMPTY, [], f"No scraper registered for {url}", path)

        self.logger.info("Falling back to %s scraper for %s", scraper_type.value, url)
        try:
            events = await self.scraper_service.scrape_events_from_url(scraper_type, url)
        except Exception as e:
            self.logger.error("Fallback scraper %s failed: %s", scraper_type.value, e)
            path.append(ExtractionState.EMPTY)
            return HybridExtraction(ExtractionState.EMPTY, [], f"Fallback scraper failed: {e}", path)

        if not events:
            path.append(ExtractionState.EMPTY)
            return HybridExtraction(ExtractionState.EMPTY, [], f"{scraper_type.value} scraper found no events", path)

        path.append(ExtractionState.FALLBACK_SUCCESS)
        return HybridExtraction(ExtractionState.FALLBACK_SUCCESS, events, None, path)

    async def _fetch_html(self, url: str) -> str:
        async with self.browser.page() as page:
            await page.goto(url, wait_until="networkidle", timeout=self.browser.timeout_ms)
            return await page.content()

    async def scrape_events_from_url(self, url: str, options: Optional[ScraperOptions] = None) -> ScraperResult:
        use_fallback = options.use_fallback if options is not None else True
        extraction = await self.extract(url, use_fallback=use_fallback)
        return ScraperResult(events=extraction.events, has_more_pages=False)

    async def scrape_events(self, options: ScraperOptions) -> list[Event]:
        if options.start_date and options.end_date:
            return await self.scrape_events_for_date_range(options.start_date, options.end_date)
        if options.start_date:
            return await self.scrape_events_for_date(options.start_date)
        raise NotImplementedError("Hybrid extraction needs a URL; use scrape_events_from_url")

    async def scrape_events_for_date(self, day: date) -> list[Event]:
        raise NotImplementedError("Not supported; use scrape_events_from_url")

    async def scrape_events_for_date_range(self, start: date, end: date) -> list[Event]:
        raise NotImplementedError("Not supported; use scrape_events_from_url")

    def generate_url(self, options: ScraperOptions) -> str:
        raise NotImplementedError("Not supported")

    def generate_url_for_date(self, day: date) -> str:
        raise NotImplementedError("Not supported")

    def extract_date_from_url(self, url: str) -> Optional[date]:
        return None

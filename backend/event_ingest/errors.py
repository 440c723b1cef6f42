"""
Exceptions raised by the ingestion package.
"""

from typing import Optional


class IngestError(Exception):
    """Base class for all ingestion failures."""


class InvalidScraperConfigError(IngestError):
    """Scraper configuration is missing a required value."""


class ScrapingError(IngestError):
    """Navigation or selector wait failed while scraping a page."""

    def __init__(self, url: str, message: str):
        super().__init__(f"Error scraping events from URL {url}: {message}")
        self.url = url


class ScraperNotFoundError(IngestError):
    """No active scraper is registered for the requested type."""

    def __init__(self, scraper_type: str):
        super().__init__(f"No active scraper found for type: {scraper_type}")
        self.scraper_type = scraper_type


class ExtractionError(IngestError):
    """LLM extraction failed or returned an unusable response."""

    def __init__(self, message: str, model: Optional[str] = None):
        super().__init__(message)
        self.model = model


class LocationNotFoundError(IngestError):
    """Location search returned no results for an address."""

    def __init__(self, address: str):
        super().__init__(f"No location results for: {address}")
        self.address = address

"""
rausgegangen.de (Nürnberg) scraper.

Tiles carry "Wd, DD.MM | HH:mm" without a year; the current year is assumed.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlparse

from bs4 import BeautifulSoup

from ..models import ScraperConfig, ScraperOptions, ScraperType
from .base import DailyListingScraper, ScrapedItem, select_text
from .dates import clean_time


DAY_MONTH_RE = re.compile(r"(\d{1,2})\.(\d{1,2})")


def parse_tile_datetime(text: str, year: int) -> tuple[Optional[str], Optional[str]]:
    """Split "Sa, 21.06 | 20:00" into ISO date and HH:mm."""
    date_part, _, time_part = text.partition("|")
    match = DAY_MONTH_RE.search(date_part)
    if not match:
        return None, None
    try:
        iso_date = date(year, int(match.group(2)), int(match.group(1))).isoformat()
    except ValueError:
        return None, None
    return iso_date, clean_time(time_part)


def parse_rausgegangen_listing(html: str, today: Optional[date] = None) -> list[ScrapedItem]:
    year = (today or date.today()).year
    soup = BeautifulSoup(html, "lxml")
    items: list[ScrapedItem] = []
    for element in soup.select("#horizontal-scroll .event-tile-text"):
        title = select_text(element, "h4.text-base")
        if not title:
            continue

        iso_date, clock = parse_tile_datetime(select_text(element, ".text-sm"), year)
        venue = select_text(element, ".text-sm.opacity-70.truncate")
        price_text = select_text(element, ".text-sm.text-primary.truncate.h-4")

        items.append(
            ScrapedItem(
                title=title,
                date=iso_date,
                time_from=clock,
                time_to=clock,
                description=f"{venue} - {price_text}" if price_text else venue,
                address=venue,
                price_string=price_text or None,
            )
        )
    return items


class RausgegangenScraper(DailyListingScraper):
    scraper_type = ScraperType.RAUSGEGANGEN
    default_config = ScraperConfig(
        base_url="https://rausgegangen.de/nurnberg/eventsbydate",
        date_format="DD.MM.YYYY",
        max_results=10,
        fixed_params={
            "geospatial_query_type": "CITY",
            "lat": "49.453872",
            "lng": "11.077298",
            "city": "nurnberg",
            "active_city_name": "Nürnberg",
        },
    )
    container_selector = "#horizontal-scroll"

    def validate_config(self) -> bool:
        return super().validate_config() and bool(self.config.fixed_params)

    def parse_listing(self, html: str, url: str) -> list[ScrapedItem]:
        return parse_rausgegangen_listing(html)

    def _url_with_range(self, start: date, end: date) -> str:
        params = {
            **self.config.fixed_params,
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
        }
        return f"{self.config.base_url}/?{urlencode(params)}"

    def generate_url(self, options: ScraperOptions) -> str:
        if options.start_date and options.end_date:
            return self._url_with_range(options.start_date, options.end_date)
        if options.start_date:
            return self.generate_url_for_date(options.start_date)
        return self.config.base_url

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

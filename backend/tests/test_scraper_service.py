from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from event_ingest.errors import ScraperNotFoundError, ScrapingError
from event_ingest.models import DailyTimeSlot, Event, ScraperResult, ScraperType
from event_ingest.scrapers import ScraperFactory, ScraperService
from event_ingest.scrapers.factory import SCRAPER_CLASSES


def _make_event(title, day="2025-06-21"):
    return Event(title=title, daily_time_slots=[DailyTimeSlot(date=day)])


def _make_factory(**events_by_type):
    scrapers = {}
    for scraper_type in ScraperType:
        scraper = MagicMock()
        events = events_by_type.get(scraper_type.value, [])
        scraper.scrape_events_for_date = AsyncMock(return_value=events)
        scraper.scrape_events_for_date_range = AsyncMock(return_value=events)
        scraper.scrape_events_from_url = AsyncMock(return_value=ScraperResult(events=events))
        scrapers[scraper_type] = scraper
    factory = MagicMock()
    factory.get_scraper.side_effect = lambda scraper_type: scrapers[ScraperType(scraper_type)]
    return factory, scrapers


def test_factory_builds_every_scraper_type(fake_browser):
    factory = ScraperFactory(fake_browser)

    scrapers = factory.get_all_scrapers()
    assert set(scrapers) == set(ScraperType)
    for scraper_type, scraper in scrapers.items():
        assert isinstance(scraper, SCRAPER_CLASSES[scraper_type])
        assert scraper.browser is fake_browser
    assert factory.get_scraper("curt") is scrapers[ScraperType.CURT]


def test_all_scrapers_active_by_default():
    factory, _ = _make_factory()
    service = ScraperService(factory)

    assert service.get_active_scrapers() == list(ScraperType)


def test_activate_and_deactivate():
    factory, scrapers = _make_factory()
    service = ScraperService(factory, active_types=[ScraperType.CURT])

    service.activate_scraper(ScraperType.PARKS)
    service.deactivate_scraper(ScraperType.CURT)

    assert service.get_active_scrapers() == [ScraperType.PARKS]
    assert service.get_scraper(ScraperType.PARKS) is scrapers[ScraperType.PARKS]


def test_get_inactive_scraper_raises():
    factory, _ = _make_factory()
    service = ScraperService(factory, active_types=[])

    with pytest.raises(ScraperNotFoundError):
        service.get_scraper(ScraperType.EVENTBRITE)


async def test_scrape_for_date_concatenates_all_active_scrapers():
    factory, scrapers = _make_factory(curt=[_make_event("A")], parks=[_make_event("B"), _make_event("C")])
    service = ScraperService(factory, active_types=[ScraperType.CURT, ScraperType.PARKS, ScraperType.EVENTFINDER])

    events = await service.scrape_events_for_date(date(2025, 6, 21))

    assert [event.title for event in events] == ["A", "B", "C"]
    scrapers[ScraperType.EVENTFINDER].scrape_events_for_date.assert_awaited_once_with(date(2025, 6, 21))
    scrapers[ScraperType.RAUSGEGANGEN].scrape_events_for_date.assert_not_awaited()


async def test_scrape_for_date_range_delegates_range():
    factory, scrapers = _make_factory(curt=[_make_event("A")])
    service = ScraperService(factory, active_types=[ScraperType.CURT])

    events = await service.scrape_events_for_date_range(date(2025, 6, 21), date(2025, 6, 23))

    assert len(events) == 1
    scrapers[ScraperType.CURT].scrape_events_for_date_range.assert_awaited_once_with(
        date(2025, 6, 21), date(2025, 6, 23)
    )


async def test_failing_scraper_fails_whole_query():
    factory, scrapers = _make_factory(curt=[_make_event("A")])
    scrapers[ScraperType.PARKS].scrape_events_for_date.side_effect = ScrapingError("https://parks", "timeout")
    service = ScraperService(factory, active_types=[ScraperType.CURT, ScraperType.PARKS])

    with pytest.raises(ScrapingError):
        await service.scrape_events_for_date(date(2025, 6, 21))


async def test_scrape_from_url_returns_events():
    factory, scrapers = _make_factory(rausgegangen=[_make_event("Sommerfest")])
    service = ScraperService(factory)

    events = await service.scrape_events_from_url(ScraperType.RAUSGEGANGEN, "https://rausgegangen.de/x")

    assert [event.title for event in events] == ["Sommerfest"]
    scrapers[ScraperType.RAUSGEGANGEN].scrape_events_from_url.assert_awaited_once_with("https://rausgegangen.de/x")


async def test_scrape_from_url_with_inactive_type_raises():
    factory, scrapers = _make_factory()
    service = ScraperService(factory, active_types=[ScraperType.CURT])

    with pytest.raises(ScraperNotFoundError):
        await service.scrape_events_from_url(ScraperType.PARKS, "https://parks-nuernberg.de/x")
    scrapers[ScraperType.PARKS].scrape_events_from_url.assert_not_awaited()

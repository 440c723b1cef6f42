from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError

from conftest import FakeBrowser
from event_ingest.errors import ExtractionError
from event_ingest.hybrid_extractor import ExtractionState, HybridExtractor, resolve_scraper_type
from event_ingest.models import DailyTimeSlot, Event, ScraperOptions, ScraperType
from event_ingest.normalizer import EventNormalizer


CURT_URL = "https://www.curt.de/termine/84/tag/2025-06-21/"

LLM_EVENT = {
    "title": "Jazz im Park",
    "location": {"address": "Stadtpark"},
    "dailyTimeSlots": [{"date": "2025-06-21", "from": "19:00"}],
    "categoryId": "konzert",
}


def _make_hybrid(llm_events=None, llm_error=None, fallback_events=None, fallback_error=None, browser=None):
    extractor = MagicMock()
    extractor.extract_events = AsyncMock(return_value=llm_events or [], side_effect=llm_error)
    service = MagicMock()
    service.scrape_events_from_url = AsyncMock(return_value=fallback_events or [], side_effect=fallback_error)
    hybrid = HybridExtractor(browser or FakeBrowser(html="<main>Termine</main>"), extractor, EventNormalizer(), service)
    return hybrid, extractor, service


def _make_event(title="Konzert im Hirsch"):
    return Event(title=title, daily_time_slots=[DailyTimeSlot(date="2025-06-21")])


async def test_llm_success_short_circuits_fallback():
    hybrid, extractor, service = _make_hybrid(llm_events=[LLM_EVENT])

    extraction = await hybrid.extract(CURT_URL)

    assert extraction.state == ExtractionState.SUCCESS
    assert extraction.ok
    assert [event.title for event in extraction.events] == ["Jazz im Park"]
    assert extraction.path == [ExtractionState.TRY_LLM, ExtractionState.NORMALIZE, ExtractionState.SUCCESS]
    extractor.extract_events.assert_awaited_once_with("<main>Termine</main>")
    service.scrape_events_from_url.assert_not_awaited()


async def test_llm_failure_falls_back_exactly_once():
    hybrid, _, service = _make_hybrid(llm_error=ExtractionError("Invalid JSON"), fallback_events=[_make_event()])

    extraction = await hybrid.extract(CURT_URL)

    assert extraction.state == ExtractionState.FALLBACK_SUCCESS
    assert [event.title for event in extraction.events] == ["Konzert im Hirsch"]
    assert extraction.path[-2:] == [ExtractionState.FALLBACK, ExtractionState.FALLBACK_SUCCESS]
    service.scrape_events_from_url.assert_awaited_once_with(ScraperType.CURT, CURT_URL)


async def test_empty_llm_result_falls_back():
    hybrid, _, service = _make_hybrid(llm_events=[], fallback_events=[_make_event()])

    extraction = await hybrid.extract(CURT_URL)

    assert extraction.state == ExtractionState.FALLBACK_SUCCESS
    assert ExtractionState.NORMALIZE in extraction.path
    service.scrape_events_from_url.assert_awaited_once()


async def test_events_without_dates_count_as_empty():
    hybrid, _, service = _make_hybrid(llm_events=[{"title": "Ohne Datum"}], fallback_events=[_make_event()])

    extraction = await hybrid.extract(CURT_URL)

    assert extraction.state == ExtractionState.FALLBACK_SUCCESS
    service.scrape_events_from_url.assert_awaited_once()


async def test_fetch_failure_falls_back():
    browser = FakeBrowser(goto_error=PlaywrightError("net::ERR_TIMED_OUT"))
    hybrid, extractor, service = _make_hybrid(fallback_events=[_make_event()], browser=browser)

    extraction = await hybrid.extract(CURT_URL)

    assert extraction.state == ExtractionState.FALLBACK_SUCCESS
    extractor.extract_events.assert_not_awaited()
    assert browser.released == 1


async def test_fallback_disabled_returns_empty():
    hybrid, _, service = _make_hybrid(llm_error=ExtractionError("down"))

    extraction = await hybrid.extract(CURT_URL, use_fallback=False)

    assert extraction.state == ExtractionState.EMPTY
    assert extraction.events == []
    assert "fallback disabled" in extraction.reason
    service.scrape_events_from_url.assert_not_awaited()


async def test_unknown_domain_returns_empty():
    hybrid, _, service = _make_hybrid(llm_events=[])

    extraction = await hybrid.extract("https://example.org/events")

    assert extraction.state == ExtractionState.EMPTY
    assert not extraction.ok
    service.scrape_events_from_url.assert_not_awaited()


async def test_fallback_failure_returns_empty():
    hybrid, _, service = _make_hybrid(llm_events=[], fallback_error=RuntimeError("selector timeout"))

    extraction = await hybrid.extract(CURT_URL)

    assert extraction.state == ExtractionState.EMPTY
    assert "selector timeout" in extraction.reason
    service.scrape_events_from_url.assert_awaited_once()


async def test_fallback_without_events_returns_empty():
    hybrid, _, _ = _make_hybrid(llm_events=[], fallback_events=[])

    extraction = await hybrid.extract(CURT_URL)

    assert extraction.state == ExtractionState.EMPTY
    assert extraction.path[-1] == ExtractionState.EMPTY


async def test_scrape_events_from_url_honours_use_fallback_option():
    hybrid, _, service = _make_hybrid(llm_events=[], fallback_events=[_make_event()])

    result = await hybrid.scrape_events_from_url(CURT_URL, ScraperOptions(use_fallback=False))

    assert result.events == []
    assert result.has_more_pages is False
    service.scrape_events_from_url.assert_not_awaited()


async def test_date_operations_are_not_supported():
    hybrid, _, _ = _make_hybrid()

    with pytest.raises(NotImplementedError):
        await hybrid.scrape_events_for_date(date(2025, 6, 21))
    with pytest.raises(NotImplementedError):
        await hybrid.scrape_events_for_date_range(date(2025, 6, 21), date(2025, 6, 22))
    with pytest.raises(NotImplementedError):
        hybrid.generate_url_for_date(date(2025, 6, 21))
    assert hybrid.extract_date_from_url(CURT_URL) is None


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://www.eventfinder.de/nuernberg/", ScraperType.EVENTFINDER),
        ("https://curt.de/termine/84", ScraperType.CURT),
        ("https://rausgegangen.de/nurnberg/eventsbydate/", ScraperType.RAUSGEGANGEN),
        ("https://www.eventbrite.com/d/germany/all-events/", ScraperType.EVENTBRITE),
        ("https://www.parks-nuernberg.de/kalender/", ScraperType.PARKS),
        ("https://example.org/", None),
    ],
)
def test_resolve_scraper_type(url, expected):
    assert resolve_scraper_type(url) == expected

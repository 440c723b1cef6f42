import httpx
import pytest

from event_ingest.geocoder import Geocoder


NOMINATIM_RESULT = {
    "place_id": 123,
    "name": "Z-Bau",
    "display_name": "Z-Bau, Frankenstraße 200, 90461 Nürnberg, Deutschland",
    "type": "arts_centre",
    "lat": "49.4334",
    "lon": "11.0893",
    "address": {"city": "Nürnberg", "postcode": "90461"},
}


def _make_geocoder(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return Geocoder(
        client=client,
        base_url="https://nominatim.test/search",
        user_agent="event-ingest-tests/1.0",
        timeout_seconds=5,
        min_delay_seconds=0,
    )


async def test_search_locations_maps_results():
    async with _make_geocoder(lambda request: httpx.Response(200, json=[NOMINATIM_RESULT])) as geocoder:
        results = await geocoder.search_locations("Z-Bau Nürnberg")

    assert len(results) == 1
    result = results[0]
    assert result.title == "Z-Bau"
    assert result.id == "123"
    assert result.address.label.startswith("Z-Bau, Frankenstraße 200")
    assert result.address.city == "Nürnberg"
    assert result.address.postal_code == "90461"
    assert (result.position.lat, result.position.lng) == (49.4334, 11.0893)


async def test_search_locations_sends_query_and_user_agent():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=[])

    async with _make_geocoder(handler) as geocoder:
        assert await geocoder.search_locations("Hirsch") == []

    request = requests[0]
    assert request.url.host == "nominatim.test"
    assert request.url.params["q"] == "Hirsch"
    assert request.url.params["format"] == "json"
    assert request.headers["User-Agent"] == "event-ingest-tests/1.0"


async def test_search_locations_caches_normalized_queries():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=[NOMINATIM_RESULT])

    async with _make_geocoder(handler) as geocoder:
        first = await geocoder.search_locations("Z-Bau")
        second = await geocoder.search_locations("  z-bau ")

    assert len(calls) == 1
    assert first == second


async def test_blank_query_skips_request():
    calls = []

    async with _make_geocoder(lambda request: calls.append(request)) as geocoder:
        assert await geocoder.search_locations("   ") == []

    assert calls == []


async def test_results_without_coordinates_are_skipped():
    payload = [{"display_name": "Irgendwo"}, NOMINATIM_RESULT]

    async with _make_geocoder(lambda request: httpx.Response(200, json=payload)) as geocoder:
        results = await geocoder.search_locations("Z-Bau")

    assert [result.title for result in results] == ["Z-Bau"]


async def test_http_error_is_raised_and_not_cached():
    responses = [httpx.Response(503), httpx.Response(200, json=[NOMINATIM_RESULT])]

    async with _make_geocoder(lambda request: responses.pop(0)) as geocoder:
        with pytest.raises(httpx.HTTPStatusError):
            await geocoder.search_locations("Z-Bau")
        results = await geocoder.search_locations("Z-Bau")

    assert len(results) == 1

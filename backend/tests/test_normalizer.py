from event_ingest.normalizer import EventNormalizer


def _base_partial(**overrides):
    partial = {
        "title": "Jazz im Park",
        "description": "Open Air",
        "location": {"address": "Stadtpark, Nürnberg", "latitude": 49.46, "longitude": 11.09},
        "dailyTimeSlots": [{"date": "2025-06-21", "from": "19:00", "to": "22:00"}],
        "categoryId": "konzert",
        "price": 0,
        "priceString": "Eintritt frei",
    }
    partial.update(overrides)
    return partial


def test_normalize_fills_system_fields():
    events = EventNormalizer().normalize([_base_partial(), _base_partial(title="Lesung")])

    assert len(events) == 2
    assert events[0].id and events[1].id
    assert events[0].id != events[1].id
    assert events[0].created_at
    assert events[0].updated_at


def test_normalize_keeps_known_fields():
    event = EventNormalizer().normalize([_base_partial(website="https://jazz.example")])[0]

    assert event.title == "Jazz im Park"
    assert event.location.address == "Stadtpark, Nürnberg"
    assert event.location.latitude == 49.46
    assert event.category_id == "konzert"
    assert event.price == 0.0
    assert event.price_string == "Eintritt frei"
    assert event.website == "https://jazz.example"


def test_normalize_missing_location_becomes_empty():
    event = EventNormalizer().normalize([_base_partial(location=None)])[0]

    assert event.location.address == ""
    assert event.location.latitude == 0.0
    assert event.location.longitude == 0.0


def test_normalize_non_numeric_coordinates_become_zero():
    event = EventNormalizer().normalize([_base_partial(location={"address": "Z-Bau", "latitude": "n/a"})])[0]

    assert event.location.address == "Z-Bau"
    assert event.location.latitude == 0.0


def test_normalize_unknown_category_falls_back_to_default():
    events = EventNormalizer().normalize([_base_partial(categoryId="dance-party"), _base_partial(categoryId=None)])

    assert [event.category_id for event in events] == ["default", "default"]


def test_normalize_drops_malformed_times_but_keeps_slot():
    event = EventNormalizer().normalize(
        [_base_partial(dailyTimeSlots=[{"date": "2025-06-21", "from": "7 Uhr", "to": "22:00"}])]
    )[0]

    slot = event.daily_time_slots[0]
    assert slot.from_ is None
    assert slot.to == "22:00"


def test_normalize_drops_event_without_valid_date():
    events = EventNormalizer().normalize(
        [
            _base_partial(dailyTimeSlots=[{"date": "21.06.2025"}]),
            _base_partial(dailyTimeSlots=[]),
            _base_partial(dailyTimeSlots=None),
            _base_partial(title="Lesung"),
        ]
    )

    assert [event.title for event in events] == ["Lesung"]


def test_normalize_never_copies_system_owned_fields():
    event = EventNormalizer().normalize(
        [_base_partial(isPromoted=True, titleImageUrl="https://img", imageUrls=["https://img"], id="llm-id")]
    )[0]

    assert event.is_promoted is None
    assert event.title_image_url is None
    assert event.image_urls is None
    assert event.id != "llm-id"


def test_normalize_skips_non_objects():
    events = EventNormalizer().normalize(["Jazz", _base_partial()])

    assert len(events) == 1

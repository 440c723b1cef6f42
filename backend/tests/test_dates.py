from event_ingest.scrapers.dates import (
    add_hours,
    clean_time,
    find_time_range,
    month_from_name,
    parse_month_name_date,
    parse_numeric_date,
)


def test_parse_numeric_date_with_year():
    assert parse_numeric_date("Sa., 21.06.2025", 2024) == "2025-06-21"


def test_parse_numeric_date_without_year_uses_default():
    assert parse_numeric_date("21.06.", 2025) == "2025-06-21"


def test_parse_numeric_date_does_not_read_time_as_year():
    assert parse_numeric_date("22.06. 19:30", 2025) == "2025-06-22"


def test_parse_numeric_date_prefers_iso():
    assert parse_numeric_date("2025-07-01 ab 20 Uhr", 2024) == "2025-07-01"


def test_parse_numeric_date_rejects_impossible_iso_date():
    assert parse_numeric_date("2025-02-30") is None
    assert parse_numeric_date("Termin: 2025-13-01", 2025) is None


def test_parse_numeric_date_rejects_impossible_day():
    assert parse_numeric_date("31.02.2025", 2025) is None
    assert parse_numeric_date("", 2025) is None


def test_parse_month_name_date():
    assert parse_month_name_date("So., 22. Juni 2025", 2024) == "2025-06-22"
    assert parse_month_name_date("3. Okt", 2025) == "2025-10-03"
    assert parse_month_name_date("14. März", 2026) == "2026-03-14"


def test_parse_month_name_date_unknown_month():
    assert parse_month_name_date("5. Brumaire", 2025) is None


def test_month_from_name_accepts_abbreviations():
    assert month_from_name("Sept.") == 9
    assert month_from_name("Dezember") == 12
    assert month_from_name("foo") is None


def test_clean_time_normalizes_formats():
    assert clean_time("20.30 Uhr") == "20:30"
    assert clean_time("8:00") == "08:00"
    assert clean_time("19:30h") == "19:30"


def test_clean_time_rejects_invalid():
    assert clean_time("25:00") is None
    assert clean_time("ganztägig") is None
    assert clean_time(None) is None


def test_find_time_range():
    assert find_time_range("19:00 – 22:30 Uhr") == ("19:00", "22:30")
    assert find_time_range("ab 19 Uhr") is None


def test_add_hours_wraps_midnight():
    assert add_hours("19:00", 1) == "20:00"
    assert add_hours("23:30", 1) == "00:30"

"""
German date/time parsing shared by the site scrapers.

All functions return ISO strings (YYYY-MM-DD / HH:mm) or None when the
input does not contain a recognizable value.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Optional


MONTH_NAMES = {
    'jan': 1, 'januar': 1, 'feb': 2, 'februar': 2, 'mär': 3, 'maerz': 3, 'märz': 3,
    'apr': 4, 'april': 4, 'mai': 5, 'jun': 6, 'juni': 6,
    'jul': 7, 'juli': 7, 'aug': 8, 'august': 8, 'sep': 9, 'sept': 9, 'september': 9,
    'okt': 10, 'oktober': 10, 'nov': 11, 'november': 11, 'dez': 12, 'dezember': 12,
}

NUMERIC_DATE_RE = re.compile(r'(?P<day>\d{1,2})\.\s*(?P<month>\d{1,2})\.(?:\s?(?P<year>\d{4})(?![\d:]))?')
MONTH_NAME_DATE_RE = re.compile(
    r'(?P<day>\d{1,2})\.\s*(?P<month>[A-Za-zäöüÄÖÜß]+)\.?(?:\s+(?P<year>\d{4}))?'
)
ISO_DATE_RE = re.compile(r'(\d{4})-(\d{2})-(\d{2})')
TIME_RE = re.compile(r'(?P<hour>\d{1,2})[:.](?P<minute>\d{2})')
TIME_RANGE_RE = re.compile(r'(\d{1,2}[:.]\d{2})\s*[-–]\s*(\d{1,2}[:.]\d{2})')


def month_from_name(name: str) -> Optional[int]:
    """Resolve a German month name or abbreviation ("Juni", "Okt", "März")."""
    key = name.strip().strip('.').lower()
    if key in MONTH_NAMES:
        return MONTH_NAMES[key]
    return MONTH_NAMES.get(key[:3])


def _to_iso(year: int, month: int, day: int) -> Optional[str]:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def _year_or_default(raw: Optional[str], default_year: int) -> int:
    return int(raw) if raw else default_year


def parse_numeric_date(text: str, default_year: Optional[int] = None) -> Optional[str]:
    """Parse "DD.MM.YYYY" or "DD.MM." (year falls back to default_year/current year)."""
    if not text:
        return None
    iso = ISO_DATE_RE.search(text)
    if iso:
        return _to_iso(int(iso.group(1)), int(iso.group(2)), int(iso.group(3)))
    match = NUMERIC_DATE_RE.search(text)
    if not match:
        return None
    year = _year_or_default(match.group('year'), default_year or date.today().year)
    return _to_iso(year, int(match.group('month')), int(match.group('day')))


def parse_month_name_date(text: str, default_year: Optional[int] = None) -> Optional[str]:
    """Parse "22. Juni 2025" / "So., 22. Juni" style dates."""
    if not text:
        return None
    for match in MONTH_NAME_DATE_RE.finditer(text):
        month = month_from_name(match.group('month'))
        if month is None:
            continue
        year = _year_or_default(match.group('year'), default_year or date.today().year)
        return _to_iso(year, month, int(match.group('day')))
    return None


def clean_time(text: Optional[str]) -> Optional[str]:
    """Normalize "8:00", "20.30 Uhr" or "19:30h" to HH:mm."""
    if not text:
        return None
    match = TIME_RE.search(text)
    if not match:
        return None
    hour, minute = int(match.group('hour')), int(match.group('minute'))
    if hour > 23 or minute > 59:
        return None
    return f"{hour:02d}:{minute:02d}"


def find_time_range(text: Optional[str]) -> Optional[tuple[str, str]]:
    if not text:
        return None
    match = TIME_RANGE_RE.search(text)
    if not match:
        return None
    start, end = clean_time(match.group(1)), clean_time(match.group(2))
    if start and end:
        return start, end
    return None


def add_hours(clock: str, hours: int) -> str:
    """Shift an HH:mm value, wrapping past midnight."""
    hour, minute = map(int, clock.split(':'))
    return f"{(hour + hours) % 24:02d}:{minute:02d}"

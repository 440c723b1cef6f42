"""
CSV Event Import

Imports events from a German-headed CSV file. Rows are processed one at a
time; a bad row is reported and the import continues with the next one.

Per row:
1. Validate required fields and formats
2. Build one daily time slot per day between Startdatum and Enddatum
3. Skip rows that duplicate an existing event (same title and dates)
4. Resolve the venue via location search, map the category, parse the price
5. Create the event
"""

from __future__ import annotations

import csv
import io
import re
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Protocol, Union

from dateutil.parser import isoparse

from .categories import DEFAULT_CATEGORY_ID, match_category_id
from .errors import LocationNotFoundError
from .logging_utils import get_logger, is_debug
from .models import (
    Category,
    CreateEventRequest,
    CsvImportResult,
    CsvRow,
    CsvRowError,
    CsvRowResult,
    DailyTimeSlot,
    Event,
    Location,
    LocationResult,
)


EXPECTED_CSV_COLUMNS = [
    "Titel",
    "Beschreibung",
    "Startdatum",
    "Enddatum",
    "Startzeit",
    "Endzeit",
    "Veranstaltungsort",
    "Kategorien",
    "Preis",
    "Tickets",
    "E-Mail",
    "Telefon",
    "Webseite",
    "Social Media",
    "Bild-URL",
    "Detail-URL",
]

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PRICE_NUMBER_RE = re.compile(r"(\d+[.,]?\d*)")

FREE_PRICE_WORDS = {"kostenlos", "frei", "eintritt frei", "free"}
TICKETS_TRUE_WORDS = {"ja", "yes", "true", "1"}


# ============ Collaborators ============


class EventRepository(Protocol):
    async def create(self, request: CreateEventRequest) -> Event: ...

    async def find_by_title_and_date(self, title: str, dates: list[str]) -> Optional[Event]: ...


class LocationSearch(Protocol):
    async def search_locations(self, query: str) -> list[LocationResult]: ...


class CategoryRepository(Protocol):
    async def find_all(self) -> list[Category]: ...


# ============ Field parsing ============


@dataclass
class PriceInfo:
    price: Optional[float]
    price_string: Optional[str] = None


def parse_price(raw: Optional[str]) -> PriceInfo:
    """
    "kostenlos" -> 0, "ab 10,00€" -> 10.0, "auf Anfrage" -> None.
    The original text is kept whenever one was given.
    """
    if not raw or not raw.strip():
        return PriceInfo(price=None)

    original = raw.strip()
    lowered = original.lower()
    if lowered in FREE_PRICE_WORDS:
        return PriceInfo(price=0.0, price_string=original)

    match = PRICE_NUMBER_RE.search(lowered)
    if match:
        return PriceInfo(price=float(match.group(1).replace(",", ".")), price_string=original)

    return PriceInfo(price=None, price_string=original)


def parse_tickets_needed(raw: Optional[str]) -> bool:
    return bool(raw) and raw.strip().lower() in TICKETS_TRUE_WORDS


def parse_email(raw: Optional[str]) -> Optional[str]:
    if not raw or not raw.strip():
        return None
    value = raw.strip()
    return value if EMAIL_RE.match(value) else None


def is_valid_date(value: str) -> bool:
    """YYYY-MM-DD and an existing calendar day."""
    value = value.strip()
    if not DATE_RE.match(value):
        return False
    try:
        isoparse(value)
    except ValueError:
        return False
    return True


def is_valid_time(value: str) -> bool:
    return bool(TIME_RE.match(value.strip()))


# ============ Service ============


class CsvImportService:
    """
    Usage:
        service = CsvImportService(events, locations, categories)
        result = await service.import_from_csv(path.read_bytes())
    """

    def __init__(
        self,
        events: EventRepository,
        locations: LocationSearch,
        categories: CategoryRepository,
    ):
        self.events = events
        self.locations = locations
        self.categories = categories
        self.logger = get_logger(__name__)

    async def import_from_csv(self, content: Union[bytes, str], filename: str = "") -> CsvImportResult:
        """
        Import every row of a CSV file.

        Args:
            content: File content (UTF-8, BOM allowed).
            filename: Only used for logging.

        Returns:
            Per-row results plus successful/failed/skipped counts.
        """
        self.logger.info("Starting CSV import %s", filename)
        rows = self.parse_csv(content, filename)
        self.logger.info("Parsed %s rows from CSV", len(rows))

        results: list[CsvRowResult] = []
        successful = failed = skipped = 0
        for index, row in enumerate(rows, start=1):
            result = await self.process_row(row, index)
            results.append(result)
            if result.success:
                successful += 1
            elif result.skipped:
                skipped += 1
            else:
                failed += 1

        self.logger.info(
            "CSV import completed: %s successful, %s failed, %s skipped (duplicates), %s total",
            successful, failed, skipped, len(rows),
        )
        return CsvImportResult(
            total_rows=len(rows),
            successful=successful,
            failed=failed,
            skipped=skipped,
            results=results,
        )

    def parse_csv(self, content: Union[bytes, str], filename: str = "") -> list[CsvRow]:
        if isinstance(content, bytes):
            try:
                text = content.decode("utf-8-sig")
            except UnicodeDecodeError as e:
                self.logger.warning(
                    "CSV %s is not valid UTF-8 (%s), replacing undecodable bytes", filename or "<upload>", e
                )
                text = content.decode("utf-8-sig", errors="replace")
        else:
            text = content.lstrip("\ufeff")
        if not text.strip():
            self.logger.info("CSV contains no data rows")
            return []

        header_line = text.splitlines()[0]
        delimiter = ";" if header_line.count(";") > header_line.count(",") else ","

        reader = csv.DictReader(io.StringIO(text, newline=""), delimiter=delimiter)
        reader.fieldnames = [name.strip() for name in (reader.fieldnames or [])]
        self._log_columns(reader.fieldnames)

        rows: list[CsvRow] = []
        for raw in reader:
            values = {key: value for key, value in raw.items() if key is not None}
            if not any((value or "").strip() for value in values.values()):
                continue
            rows.append(CsvRow.model_validate(values))
        return rows

    def _log_columns(self, columns: list[str]) -> None:
        unexpected = [column for column in columns if column not in EXPECTED_CSV_COLUMNS]
        missing = [column for column in EXPECTED_CSV_COLUMNS if column not in columns]
        self.logger.debug("Detected columns (%s): %s", len(columns), ", ".join(columns))
        if unexpected:
            self.logger.info("Ignoring unknown columns: %s", ", ".join(unexpected))
        if missing:
            self.logger.info("Missing columns: %s", ", ".join(missing))

    async def process_row(self, row: CsvRow, row_index: int) -> CsvRowResult:
        if is_debug():
            self.logger.debug(
                "Row %s: title=%r start=%r end=%r venue=%r categories=%r price=%r",
                row_index, row.title, row.start_date, row.end_date, row.venue, row.categories, row.price,
            )

        validation_errors = self.validate_row(row, row_index)
        if validation_errors:
            return CsvRowResult(row_index=row_index, success=False, errors=validation_errors)

        slots = self.build_daily_time_slots(row)
        if not slots:
            return CsvRowResult(
                row_index=row_index,
                success=False,
                errors=[
                    CsvRowError(
                        row_index=row_index,
                        field="Enddatum",
                        message=f"Enddatum '{row.end_date}' liegt vor Startdatum '{row.start_date}'",
                        value=row.end_date,
                    )
                ],
            )

        warnings: list[CsvRowError] = []
        dates = [slot.date for slot in slots]

        try:
            duplicate = await self.events.find_by_title_and_date(row.title, dates)
        except Exception as e:
            self.logger.warning("Row %s: duplicate check failed: %s", row_index, e)
            warnings.append(CsvRowError(row_index=row_index, message=f"Fehler bei der Duplikatsprüfung: {e}"))
            duplicate = None

        if duplicate is not None:
            self.logger.debug("Row %s: duplicate of event %s", row_index, duplicate.id)
            return CsvRowResult(
                row_index=row_index,
                success=False,
                skipped=True,
                duplicate_event_id=duplicate.id,
                errors=[
                    CsvRowError(
                        row_index=row_index,
                        field="Titel",
                        message=(
                            f"Event mit Titel '{row.title}' und Datum '{', '.join(dates)}' "
                            f"existiert bereits (ID: {duplicate.id})"
                        ),
                        value=row.title,
                    )
                ],
            )

        location = Location(address=row.venue)
        if row.venue:
            try:
                location = await self.resolve_location(row.venue)
            except Exception as e:
                self.logger.warning("Row %s: location lookup failed for %r: %s", row_index, row.venue, e)
                warnings.append(
                    CsvRowError(
                        row_index=row_index,
                        field="Veranstaltungsort",
                        message=(
                            f"Location konnte nicht aufgelöst werden: {row.venue}. "
                            "Verwende Adresse ohne Koordinaten."
                        ),
                        value=row.venue,
                    )
                )
        else:
            warnings.append(CsvRowError(row_index=row_index, field="Veranstaltungsort", message="Veranstaltungsort fehlt"))

        category_id = DEFAULT_CATEGORY_ID
        if row.categories:
            try:
                category_id = await self.map_category_to_id(row.categories)
            except Exception as e:
                self.logger.warning("Row %s: category mapping failed: %s", row_index, e)
                warnings.append(
                    CsvRowError(
                        row_index=row_index,
                        field="Kategorien",
                        message=f"Kategorie-Mapping fehlgeschlagen: {e}. Verwende 'default'.",
                        value=row.categories,
                    )
                )

        price = parse_price(row.price)

        try:
            request = CreateEventRequest(
                title=row.title,
                description=row.description,
                address=location.address,
                latitude=location.latitude,
                longitude=location.longitude,
                daily_time_slots=slots,
                category_id=category_id,
                tickets_needed=parse_tickets_needed(row.tickets),
                price=price.price,
                price_string=price.price_string,
                contact_email=parse_email(row.email),
                contact_phone=row.phone or None,
                website=row.website or row.detail_url or None,
            )
            event = await self.events.create(request)
        except Exception as e:
            self.logger.warning("Row %s: event creation failed: %s", row_index, e)
            warnings.append(CsvRowError(row_index=row_index, message=f"Event konnte nicht erstellt werden: {e}"))
            return CsvRowResult(row_index=row_index, success=False, errors=warnings)

        self.logger.debug("Row %s: created event %s", row_index, event.id)
        return CsvRowResult(row_index=row_index, success=True, event_id=event.id, errors=warnings)

    def validate_row(self, row: CsvRow, row_index: int) -> list[CsvRowError]:
        errors: list[CsvRowError] = []

        if not row.title:
            errors.append(
                CsvRowError(
                    row_index=row_index,
                    field="Titel",
                    message="Titel ist ein Pflichtfeld und darf nicht leer sein",
                    value=row.title,
                )
            )

        if not row.start_date:
            errors.append(
                CsvRowError(
                    row_index=row_index,
                    field="Startdatum",
                    message="Startdatum ist ein Pflichtfeld und darf nicht leer sein",
                    value=row.start_date,
                )
            )
        elif not is_valid_date(row.start_date):
            errors.append(self._format_error(row_index, "Startdatum", row.start_date, "Datumsformat", "YYYY-MM-DD"))

        if row.end_date and not is_valid_date(row.end_date):
            errors.append(self._format_error(row_index, "Enddatum", row.end_date, "Datumsformat", "YYYY-MM-DD"))
        if row.start_time and not is_valid_time(row.start_time):
            errors.append(self._format_error(row_index, "Startzeit", row.start_time, "Zeitformat", "HH:mm"))
        if row.end_time and not is_valid_time(row.end_time):
            errors.append(self._format_error(row_index, "Endzeit", row.end_time, "Zeitformat", "HH:mm"))

        return errors

    @staticmethod
    def _format_error(row_index: int, column: str, value: str, kind: str, expected: str) -> CsvRowError:
        return CsvRowError(
            row_index=row_index,
            field=column,
            message=f"Ungültiges {kind}: '{value}'. Erwartet: {expected}",
            value=value,
        )

    @staticmethod
    def build_daily_time_slots(row: CsvRow) -> list[DailyTimeSlot]:
        """
        One slot per day from Startdatum through Enddatum (inclusive).
        Returns [] when Enddatum lies before Startdatum.
        """
        start = isoparse(row.start_date).date()
        end = isoparse(row.end_date).date() if row.end_date else start
        if end < start:
            return []

        slots: list[DailyTimeSlot] = []
        current = start
        while current <= end:
            slots.append(
                DailyTimeSlot(date=current.isoformat(), from_=row.start_time or None, to=row.end_time or None)
            )
            current += timedelta(days=1)
        return slots

    async def resolve_location(self, address: str) -> Location:
        """First location-search hit for an address; raises if there is none."""
        results = await self.locations.search_locations(address)
        if not results:
            raise LocationNotFoundError(address)
        first = results[0]
        return Location(
            address=first.address.label or address,
            latitude=first.position.lat or 0.0,
            longitude=first.position.lng or 0.0,
        )

    async def map_category_to_id(self, category_name: str) -> str:
        if not category_name or not category_name.strip():
            return DEFAULT_CATEGORY_ID

        categories = await self.categories.find_all()
        category_id = match_category_id(category_name, categories)
        if category_id is None:
            self.logger.warning("Category %r not found, using '%s'", category_name, DEFAULT_CATEGORY_ID)
            return DEFAULT_CATEGORY_ID
        return category_id

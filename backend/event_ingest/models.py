"""
Pydantic Models for event ingestion

Defines the canonical event shape, scraper configuration/results,
CSV import records, and the collaborator payloads (categories, locations).
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
CLOCK_TIME_PATTERN = r"^\d{2}:\d{2}$"


def new_event_id() -> str:
    return str(uuid.uuid4())


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ScraperType(str, Enum):
    """Registered site scrapers."""
    EVENTFINDER = "eventfinder"
    CURT = "curt"
    RAUSGEGANGEN = "rausgegangen"
    EVENTBRITE = "eventbrite"
    PARKS = "parks"


# ============ Canonical Event ============


class DailyTimeSlot(CamelModel):
    """One calendar day plus optional start/end clock time."""
    date: str = Field(..., pattern=ISO_DATE_PATTERN, description="ISO date (YYYY-MM-DD)")
    from_: Optional[str] = Field(None, alias="from", pattern=CLOCK_TIME_PATTERN, description="Start time (HH:mm)")
    to: Optional[str] = Field(None, pattern=CLOCK_TIME_PATTERN, description="End time (HH:mm)")


class Location(CamelModel):
    """Resolved venue of an event."""
    address: str = Field(default="", description="Full address or venue label")
    latitude: float = Field(default=0.0)
    longitude: float = Field(default=0.0)


class SocialMedia(CamelModel):
    instagram: Optional[str] = None
    facebook: Optional[str] = None
    tiktok: Optional[str] = None


class Event(CamelModel):
    """A normalized event, regardless of where it was ingested from."""
    id: str = Field(default_factory=new_event_id)
    title: str = Field(..., description="Event title")
    description: str = Field(default="")
    location: Location = Field(default_factory=Location)
    daily_time_slots: list[DailyTimeSlot] = Field(..., min_length=1)
    category_id: str = Field(default="default")
    price: Optional[float] = Field(None, description="0 for free, None if unknown")
    price_string: Optional[str] = Field(None, description="Original price text, e.g. 'ab 10,00€'")
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    website: Optional[str] = None
    social_media: Optional[SocialMedia] = None
    tickets_needed: Optional[bool] = None
    # System-owned fields; never filled by scrapers, the LLM or imports
    is_promoted: Optional[bool] = None
    title_image_url: Optional[str] = None
    image_urls: Optional[list[str]] = None
    favorite_count: Optional[int] = None
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)


class CreateEventRequest(CamelModel):
    """Payload handed to the event-creation collaborator."""
    title: str
    description: str = ""
    address: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    daily_time_slots: list[DailyTimeSlot] = Field(..., min_length=1)
    category_id: str = "default"
    tickets_needed: bool = False
    price: Optional[float] = None
    price_string: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    website: Optional[str] = None


# ============ Scraping ============


class Viewport(CamelModel):
    width: int = 375
    height: int = 812
    device_scale_factor: float = 2
    is_mobile: bool = True
    has_touch: bool = True


class BrowserConfig(CamelModel):
    headless: bool = True
    viewport: Viewport = Field(default_factory=Viewport)
    user_agent: Optional[str] = None


class ScraperConfig(CamelModel):
    """Per-scraper settings; built at construction, changed only via initialize()."""
    base_url: str = ""
    date_format: str = ""
    pagination_pattern: Optional[str] = None
    max_pages: Optional[int] = None
    max_results: Optional[int] = None
    fixed_params: dict[str, str] = Field(default_factory=dict)
    browser_config: Optional[BrowserConfig] = None


class ScraperOptions(CamelModel):
    time_frame: Optional[str] = None
    category: Optional[str] = None
    max_results: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    page: Optional[int] = None
    use_fallback: bool = True

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _strip_time(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.date()
        return value


class ScraperResult(CamelModel):
    """Unit of work returned by a single page fetch."""
    events: list[Event] = Field(default_factory=list)
    next_page_url: Optional[str] = None
    has_more_pages: bool = False


# ============ Collaborator payloads ============


class Category(CamelModel):
    id: str
    name: str
    description: str = ""
    color_code: Optional[str] = None
    icon_name: Optional[str] = None


class LocationAddress(CamelModel):
    label: str = ""
    city: Optional[str] = None
    postal_code: Optional[str] = None


class LocationPosition(CamelModel):
    lat: float
    lng: float


class LocationResult(CamelModel):
    title: str = ""
    id: str = ""
    result_type: str = ""
    address: LocationAddress = Field(default_factory=LocationAddress)
    position: LocationPosition


# ============ CSV import ============


class CsvRow(BaseModel):
    """One data row of the import file, keyed by the German column headers."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str = Field(default="", alias="Titel")
    description: str = Field(default="", alias="Beschreibung")
    start_date: str = Field(default="", alias="Startdatum")
    end_date: str = Field(default="", alias="Enddatum")
    start_time: str = Field(default="", alias="Startzeit")
    end_time: str = Field(default="", alias="Endzeit")
    venue: str = Field(default="", alias="Veranstaltungsort")
    categories: str = Field(default="", alias="Kategorien")
    price: str = Field(default="", alias="Preis")
    tickets: str = Field(default="", alias="Tickets")
    email: str = Field(default="", alias="E-Mail")
    phone: str = Field(default="", alias="Telefon")
    website: str = Field(default="", alias="Webseite")
    # Parsed but ignored: images are system-managed, social links are not imported
    social_media: str = Field(default="", alias="Social Media")
    image_url: str = Field(default="", alias="Bild-URL")
    detail_url: str = Field(default="", alias="Detail-URL")

    @field_validator("*", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip()
        return value


class CsvRowError(CamelModel):
    row_index: int
    field: Optional[str] = None
    message: str
    value: Optional[str] = None


class CsvRowResult(CamelModel):
    row_index: int = Field(..., ge=1, description="1-based, header excluded")
    success: bool
    event_id: Optional[str] = None
    skipped: Optional[bool] = None
    duplicate_event_id: Optional[str] = None
    errors: list[CsvRowError] = Field(default_factory=list)


class CsvImportResult(CamelModel):
    total_rows: int
    successful: int
    failed: int
    skipped: int
    results: list[CsvRowResult] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_counts(self) -> "CsvImportResult":
        if self.successful + self.failed + self.skipped != self.total_rows:
            raise ValueError(
                f"Row counts do not add up: {self.successful} + {self.failed} + {self.skipped} != {self.total_rows}"
            )
        return self

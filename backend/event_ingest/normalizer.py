"""
Event Normalizer

Completes partial LLM output into canonical Event objects: generates
id/timestamps, coerces the location, filters malformed time slots and
clamps the category. System-owned fields are never taken from the LLM.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from pydantic import ValidationError

from .categories import normalize_category_id
from .logging_utils import get_logger
from .models import DailyTimeSlot, Event, Location, SocialMedia


ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
CLOCK_RE = re.compile(r"^\d{2}:\d{2}$")

OPTIONAL_TEXT_FIELDS = {
    "priceString": "price_string",
    "website": "website",
    "contactEmail": "contact_email",
    "contactPhone": "contact_phone",
}


def _number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


class EventNormalizer:
    def __init__(self):
        self.logger = get_logger(__name__)

    def normalize(self, partial_events: list[dict[str, Any]]) -> list[Event]:
        """Complete each partial event; events without a usable date are dropped."""
        events: list[Event] = []
        for partial in partial_events:
            if not isinstance(partial, dict):
                self.logger.warning("Skipping non-object event: %r", partial)
                continue
            event = self._complete_event(partial)
            if event is not None:
                events.append(event)
        return events

    def _complete_event(self, partial: dict[str, Any]) -> Optional[Event]:
        title = partial.get("title") or ""
        slots = self._valid_slots(partial.get("dailyTimeSlots"))
        if not slots:
            self.logger.warning("Dropping event without valid dailyTimeSlots: %s", title or "<untitled>")
            return None

        fields: dict[str, Any] = {
            "title": str(title),
            "description": str(partial.get("description") or ""),
            "location": self._ensure_location(partial.get("location")),
            "daily_time_slots": slots,
            "category_id": normalize_category_id(partial.get("categoryId")),
        }

        price = partial.get("price")
        if isinstance(price, (int, float)) and not isinstance(price, bool):
            fields["price"] = float(price)

        for source_key, target in OPTIONAL_TEXT_FIELDS.items():
            value = partial.get(source_key)
            if value:
                fields[target] = str(value)

        social = partial.get("socialMedia")
        if isinstance(social, dict):
            try:
                fields["social_media"] = SocialMedia.model_validate(social)
            except ValidationError:
                self.logger.warning("Ignoring malformed socialMedia for %s", title)

        tickets = partial.get("ticketsNeeded")
        if isinstance(tickets, bool):
            fields["tickets_needed"] = tickets

        # isPromoted, titleImageUrl and imageUrls are system-owned and never copied
        return Event(**fields)

    def _valid_slots(self, slots: Any) -> list[DailyTimeSlot]:
        if not isinstance(slots, list):
            return []

        valid: list[DailyTimeSlot] = []
        for slot in slots:
            if not isinstance(slot, dict):
                continue
            slot_date = slot.get("date")
            if not isinstance(slot_date, str) or not ISO_DATE_RE.match(slot_date):
                self.logger.warning("Invalid date in dailyTimeSlot: %s", slot_date)
                continue
            start, end = slot.get("from"), slot.get("to")
            valid.append(
                DailyTimeSlot(
                    date=slot_date,
                    from_=start if isinstance(start, str) and CLOCK_RE.match(start) else None,
                    to=end if isinstance(end, str) and CLOCK_RE.match(end) else None,
                )
            )
        return valid

    @staticmethod
    def _ensure_location(location: Any) -> Location:
        if not isinstance(location, dict):
            return Location()
        return Location(
            address=str(location.get("address") or ""),
            latitude=_number(location.get("latitude")),
            longitude=_number(location.get("longitude")),
        )

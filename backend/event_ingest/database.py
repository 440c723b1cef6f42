"""
Database module for event ingestion

SQLite-backed event and category stores used by the CLI. They implement
the events and categories interfaces expected by CsvImportService. The
async methods run the blocking sqlite3 work in a worker thread; every call
opens its own connection there.
"""

from __future__ import annotations

import asyncio
import sqlite3
import string
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from . import settings
from .logging_utils import get_logger
from .models import Category, CreateEventRequest, DailyTimeSlot, Event, Location, new_event_id, utc_now_iso


DEFAULT_CATEGORIES = [
    Category(id="konzert", name="Konzert", color_code="#E53935", icon_name="music"),
    Category(id="party", name="Party", color_code="#8E24AA", icon_name="party"),
    Category(id="theater", name="Theater", color_code="#3949AB", icon_name="theater"),
    Category(id="ausstellung", name="Ausstellung", color_code="#00897B", icon_name="museum"),
    Category(id="sport", name="Sport", color_code="#43A047", icon_name="sport"),
    Category(id="kinder", name="Kinder", color_code="#FDD835", icon_name="child"),
    Category(id="sonstiges", name="Sonstiges", color_code="#757575", icon_name="more"),
]

_PUNCTUATION = str.maketrans("", "", string.punctuation + "–—„“”‚‘’")


def normalize_title(title: str) -> str:
    """Lowercase, drop punctuation, collapse whitespace."""
    return " ".join(title.lower().translate(_PUNCTUATION).split())


def init_db(db_path: Optional[Path] = None) -> None:
    """Initialize database with schema."""
    if db_path is None:
        db_path = settings.database_path()

    with get_connection(db_path) as conn:
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS events (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                title_key TEXT NOT NULL,
                description TEXT,
                address TEXT,
                latitude REAL DEFAULT 0,
                longitude REAL DEFAULT 0,
                category_id TEXT DEFAULT 'default',
                price REAL,
                price_string TEXT,
                contact_email TEXT,
                contact_phone TEXT,
                website TEXT,
                tickets_needed INTEGER DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS event_dates (
                event_id TEXT NOT NULL REFERENCES events(id) ON DELETE CASCADE,
                date TEXT NOT NULL,
                time_from TEXT,
                time_to TEXT,
                PRIMARY KEY (event_id, date)
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS categories (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                description TEXT DEFAULT '',
                color_code TEXT,
                icon_name TEXT
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_events_title_key
            ON events(title_key)
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_event_dates_date
            ON event_dates(date)
        """)

        cursor.executemany(
            """
            INSERT OR IGNORE INTO categories (id, name, description, color_code, icon_name)
            VALUES (?, ?, ?, ?, ?)
            """,
            [(c.id, c.name, c.description, c.color_code, c.icon_name) for c in DEFAULT_CATEGORIES],
        )

        conn.commit()


@contextmanager
def get_connection(db_path: Optional[Path] = None) -> Iterator[sqlite3.Connection]:
    """Get database connection as context manager."""
    if db_path is None:
        db_path = settings.database_path()

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    try:
        yield conn
    finally:
        conn.close()


# ============ Event Operations ============


class EventStore:
    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path or settings.database_path()
        self.logger = get_logger(__name__)
        init_db(self.db_path)

    async def create(self, request: CreateEventRequest) -> Event:
        now = utc_now_iso()
        event = Event(
            id=new_event_id(),
            title=request.title,
            description=request.description,
            location=Location(address=request.address, latitude=request.latitude, longitude=request.longitude),
            daily_time_slots=request.daily_time_slots,
            category_id=request.category_id,
            price=request.price,
            price_string=request.price_string,
            contact_email=request.contact_email,
            contact_phone=request.contact_phone,
            website=request.website,
            tickets_needed=request.tickets_needed,
            created_at=now,
            updated_at=now,
        )
        await asyncio.to_thread(self._insert, event)
        self.logger.debug("Stored event %s (%s)", event.id, event.title)
        return event

    def _insert(self, event: Event) -> None:
        with get_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO events (
                    id, title, title_key, description, address, latitude, longitude,
                    category_id, price, price_string, contact_email, contact_phone,
                    website, tickets_needed, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                event.id,
                event.title,
                normalize_title(event.title),
                event.description,
                event.location.address,
                event.location.latitude,
                event.location.longitude,
                event.category_id,
                event.price,
                event.price_string,
                event.contact_email,
                event.contact_phone,
                event.website,
                1 if event.tickets_needed else 0,
                event.created_at,
                event.updated_at,
            ))
            cursor.executemany(
                "INSERT INTO event_dates (event_id, date, time_from, time_to) VALUES (?, ?, ?, ?)",
                [(event.id, slot.date, slot.from_, slot.to) for slot in event.daily_time_slots],
            )
            conn.commit()

    async def find_by_title_and_date(self, title: str, dates: list[str]) -> Optional[Event]:
        """An existing event with the same (normalized) title on any of the given dates."""
        if not dates:
            return None
        return await asyncio.to_thread(self._find_by_title_and_date, title, dates)

    def _find_by_title_and_date(self, title: str, dates: list[str]) -> Optional[Event]:
        placeholders = ", ".join("?" for _ in dates)
        with get_connection(self.db_path) as conn:
            row = conn.execute(
                f"""
                SELECT DISTINCT e.id FROM events e
                JOIN event_dates d ON d.event_id = e.id
                WHERE e.title_key = ? AND d.date IN ({placeholders})
                ORDER BY e.created_at
                LIMIT 1
                """,
                (normalize_title(title), *dates),
            ).fetchone()

        if row is None:
            return None
        return self.get(row["id"])

    def get(self, event_id: str) -> Optional[Event]:
        with get_connection(self.db_path) as conn:
            row = conn.execute("SELECT * FROM events WHERE id = ?", (event_id,)).fetchone()
            if row is None:
                return None
            slot_rows = conn.execute(
                "SELECT date, time_from, time_to FROM event_dates WHERE event_id = ? ORDER BY date",
                (event_id,),
            ).fetchall()

        return Event(
            id=row["id"],
            title=row["title"],
            description=row["description"] or "",
            location=Location(
                address=row["address"] or "",
                latitude=row["latitude"] or 0.0,
                longitude=row["longitude"] or 0.0,
            ),
            daily_time_slots=[
                DailyTimeSlot(date=slot["date"], from_=slot["time_from"], to=slot["time_to"])
                for slot in slot_rows
            ],
            category_id=row["category_id"],
            price=row["price"],
            price_string=row["price_string"],
            contact_email=row["contact_email"],
            contact_phone=row["contact_phone"],
            website=row["website"],
            tickets_needed=bool(row["tickets_needed"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def count(self) -> int:
        with get_connection(self.db_path) as conn:
            return conn.execute("SELECT COUNT(*) FROM events").fetchone()[0]


# ============ Category Operations ============


class CategoryStore:
    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path or settings.database_path()
        init_db(self.db_path)

    async def find_all(self) -> list[Category]:
        """All categories in registration order."""
        return await asyncio.to_thread(self._load_all)

    def _load_all(self) -> list[Category]:
        with get_connection(self.db_path) as conn:
            rows = conn.execute("SELECT * FROM categories ORDER BY rowid").fetchall()
        return [
            Category(
                id=row["id"],
                name=row["name"],
                description=row["description"] or "",
                color_code=row["color_code"],
                icon_name=row["icon_name"],
            )
            for row in rows
        ]

    def add(self, category: Category) -> None:
        with get_connection(self.db_path) as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO categories (id, name, description, color_code, icon_name)
                VALUES (?, ?, ?, ?, ?)
                """,
                (category.id, category.name, category.description, category.color_code, category.icon_name),
            )
            conn.commit()

"""
Runtime settings read from environment variables.

Values are read at call time so tests and the CLI can adjust the
environment (or a .env file loaded via python-dotenv) before use.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional


DEFAULT_MISTRAL_BASE_URL = "https://api.mistral.ai/v1"
DEFAULT_MISTRAL_MODEL = "mistral-small-latest"
DEFAULT_BROWSER_TIMEOUT_MS = 60000
DEFAULT_DB_PATH = Path(__file__).resolve().parents[1] / "data" / "events.db"
DEFAULT_GEOCODING_BASE_URL = "https://nominatim.openstreetmap.org/search"
DEFAULT_GEOCODING_USER_AGENT = "event-ingest/1.0"


def _read_positive_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
        return value if value > 0 else default
    except ValueError:
        return default


def _read_positive_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
        return value if value > 0 else default
    except ValueError:
        return default


def _read_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def mistral_api_key() -> Optional[str]:
    return os.getenv("MISTRAL_API_KEY") or None


def mistral_base_url() -> str:
    return os.getenv("MISTRAL_BASE_URL", DEFAULT_MISTRAL_BASE_URL)


def mistral_model() -> str:
    return os.getenv("MISTRAL_MODEL", DEFAULT_MISTRAL_MODEL)


def browser_headless() -> bool:
    return _read_bool_env("BROWSER_HEADLESS", True)


def browser_timeout_ms() -> int:
    return _read_positive_int_env("BROWSER_TIMEOUT_MS", DEFAULT_BROWSER_TIMEOUT_MS)


def geocoding_timeout_seconds() -> float:
    return _read_positive_float_env("GEOCODING_TIMEOUT_SECONDS", 10.0)


def database_path() -> Path:
    """Get database path, creating the data directory if needed."""
    db_path = Path(os.getenv("DATABASE_PATH", str(DEFAULT_DB_PATH)))
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return db_path


def geocoding_base_url() -> str:
    return os.getenv("GEOCODING_BASE_URL", DEFAULT_GEOCODING_BASE_URL)


def geocoding_user_agent() -> str:
    return os.getenv("GEOCODING_USER_AGENT", DEFAULT_GEOCODING_USER_AGENT)

"""
Category lookup helpers.

Maps free-text category names (CSV column, LLM output) onto known category ids.
"""

from __future__ import annotations

from typing import Optional, Sequence

from .models import Category


DEFAULT_CATEGORY_ID = "default"

# Ids the LLM is allowed to emit; anything else falls back to DEFAULT_CATEGORY_ID
LLM_CATEGORY_IDS = (
    "konzert",
    "party",
    "theater",
    "ausstellung",
    "sport",
    "kinder",
    "sonstiges",
    DEFAULT_CATEGORY_ID,
)


def normalize_category_id(value: Optional[str]) -> str:
    """Clamp an LLM-provided category id to the allowed set."""
    if not value:
        return DEFAULT_CATEGORY_ID
    candidate = value.strip().lower()
    return candidate if candidate in LLM_CATEGORY_IDS else DEFAULT_CATEGORY_ID


def match_category_id(text: str, categories: Sequence[Category]) -> Optional[str]:
    """
    Find the category id best matching a free-text name.

    Order of precedence:
    1. exact (case-insensitive) name match
    2. exact (case-insensitive) id match
    3. category names contained in the text, earliest position first
       ("Kindertheater" -> Kinder before Theater); ties keep registration order

    Returns:
        The matching category id, or None if nothing matched.
    """
    needle = text.strip().lower()
    if not needle:
        return None

    for category in categories:
        if category.name.strip().lower() == needle:
            return category.id

    for category in categories:
        if category.id.lower() == needle:
            return category.id

    candidates: list[tuple[int, Category]] = []
    for category in categories:
        name = category.name.strip().lower()
        if name and name in needle:
            candidates.append((needle.index(name), category))

    if not candidates:
        return None

    # sorted() is stable, so equal positions keep the order of `categories`
    candidates = sorted(candidates, key=lambda item: item[0])
    return candidates[0][1].id

"""
Prompts for LLM event extraction.
"""

from datetime import date
from typing import Optional

from .categories import LLM_CATEGORY_IDS


EVENT_EXTRACTION_SYSTEM_PROMPT = """Du bist ein Experte für die Extraktion von Veranstaltungsdaten aus HTML-Seiten.

Deine Aufgabe:
Lies das HTML und extrahiere JEDE erkennbare Veranstaltung.

AUSGABEFORMAT (JSON-Objekt):
{{
  "events": [{{
    "title": "string (Pflicht)",
    "description": "string",
    "location": {{
      "address": "string (Pflicht)",
      "latitude": "number (0 wenn unbekannt)",
      "longitude": "number (0 wenn unbekannt)"
    }},
    "dailyTimeSlots": [{{
      "date": "YYYY-MM-DD",
      "from": "HH:mm (optional)",
      "to": "HH:mm (optional)"
    }}],
    "price": "number | null (0 = kostenlos, null = unbekannt)",
    "priceString": "string (optional, Originaltext wie 'ab 10,00€')",
    "categoryId": "string (Pflicht, eine von: {categories})",
    "website": "string (optional, absolute URL)",
    "contactEmail": "string (optional)",
    "contactPhone": "string (optional)",
    "socialMedia": {{
      "instagram": "string (optional)",
      "facebook": "string (optional)",
      "tiktok": "string (optional)"
    }},
    "ticketsNeeded": "boolean (optional)"
  }}]
}}

NICHT extrahieren:
- "isPromoted": darüber entscheidet ausschließlich das System
- Bild-URLs ("titleImageUrl", "imageUrls"): Bilder stellt das System selbst bereit
- "id", "createdAt", "updatedAt": werden automatisch erzeugt

REGELN:
1. Nur echte Veranstaltungen, keine Werbung und keine Navigation
2. Deutsche Datumsangaben nach ISO (YYYY-MM-DD) umwandeln
3. Fehlt das Jahr, das aktuelle Jahr verwenden: {year}
4. Uhrzeiten immer als HH:mm
5. "Eintritt frei", "kostenlos", "free" → price: 0
6. "ab X€" oder "X€ - Y€" → price: niedrigster Wert, priceString: Originaltext
7. Mehrtägige Veranstaltungen: ein Eintrag in dailyTimeSlots pro Tag
8. Unbekannte Felder als null, nicht als leere Strings
9. Links immer als absolute URL

Antworte AUSSCHLIESSLICH mit einem JSON-Objekt der Form {{ "events": [...] }}
"""

EVENT_EXTRACTION_USER_PROMPT = """Extrahiere alle Veranstaltungen aus folgendem HTML:

{html}"""


def build_system_prompt(today: Optional[date] = None) -> str:
    return EVENT_EXTRACTION_SYSTEM_PROMPT.format(
        categories=", ".join(LLM_CATEGORY_IDS),
        year=(today or date.today()).year,
    )

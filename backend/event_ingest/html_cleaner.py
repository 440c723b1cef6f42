"""
HTML Cleaner

Shrinks raw page HTML before it is sent to the LLM: scripts, styles,
comments, page chrome and most attributes carry no event data but cost tokens.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, Comment, Tag


BOILERPLATE_TAGS = ["header", "footer", "nav", "aside", "noscript"]
VOID_TAGS = {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr"}
RELEVANT_CLASS_RE = re.compile(r"event|date|time|title|location|price", re.IGNORECASE)


def _strip_attributes(tag: Tag) -> None:
    for name in list(tag.attrs):
        lowered = name.lower()
        if lowered.startswith("data-") or lowered.startswith("on"):
            del tag[name]
        elif lowered in {"id", "style"}:
            del tag[name]
        elif lowered == "class":
            value = tag[name]
            classes = " ".join(value) if isinstance(value, list) else str(value)
            if not RELEVANT_CLASS_RE.search(classes):
                del tag[name]


def _is_empty(tag: Tag) -> bool:
    if tag.name in VOID_TAGS:
        return False
    if tag.find(True) is not None:
        return False
    return not tag.get_text(strip=True)


class HtmlCleaner:
    """Stateless helpers; call the class methods directly."""

    @staticmethod
    def clean(html: str) -> str:
        """
        Clean HTML for LLM processing.

        Args:
            html: Raw HTML (full document or fragment).

        Returns:
            Compact HTML without scripts, styles, comments, page chrome,
            data-/on* attributes or empty elements.
        """
        if not html:
            return ""

        soup = BeautifulSoup(html, "lxml")

        for tag in soup(["script", "style"]):
            tag.decompose()

        for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
            comment.extract()

        for tag in soup(BOILERPLATE_TAGS):
            tag.decompose()

        for tag in soup.find_all(True):
            _strip_attributes(tag)

        # Children come after their parents in document order, so walking
        # backwards lets a parent become empty once its children are gone
        for tag in reversed(soup.find_all(True)):
            if tag.name in {"html", "body"}:
                continue
            if _is_empty(tag):
                tag.decompose()

        root = soup.body if soup.body is not None else soup
        return re.sub(r"\s+", " ", root.decode_contents()).strip()

    @classmethod
    def extract_main_content(cls, html: str) -> str:
        """Clean only the <main> (else first <article>) region, falling back to the whole page."""
        soup = BeautifulSoup(html or "", "lxml")
        for name in ("main", "article"):
            region = soup.find(name)
            if region is not None:
                return cls.clean(region.decode_contents())
        return cls.clean(html)

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest


class FakeBrowser:
    """Stands in for BrowserManager: hands out mock pages serving canned HTML."""

    timeout_ms = 1000

    def __init__(self, html="", html_by_url=None, goto_error=None, selector_error=None):
        self.html = html
        self.html_by_url = html_by_url or {}
        self.goto_error = goto_error
        self.selector_error = selector_error
        self.pages = []
        self.released = 0

    def _make_page(self):
        page = MagicMock()
        page.url = None

        async def goto(url, **kwargs):
            page.url = url
            if self.goto_error is not None:
                raise self.goto_error

        async def content():
            return self.html_by_url.get(page.url, self.html)

        page.goto = AsyncMock(side_effect=goto)
        page.content = AsyncMock(side_effect=content)
        page.wait_for_selector = AsyncMock(side_effect=self.selector_error)
        page.wait_for_timeout = AsyncMock()
        page.query_selector = AsyncMock(return_value=None)
        page.click = AsyncMock()
        return page

    @asynccontextmanager
    async def page(self):
        page = self._make_page()
        self.pages.append(page)
        try:
            yield page
        finally:
            self.released += 1

    @property
    def visited(self):
        return [page.url for page in self.pages]


@pytest.fixture
def fake_browser():
    return FakeBrowser()

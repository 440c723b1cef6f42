"""
Shared Chromium handle for scrapers and the hybrid extractor.

One browser is launched lazily on first use and reused by every caller.
Each borrowed page lives in its own context (mobile viewport, iPhone UA)
and is closed when the borrow scope exits. The browser itself is only
torn down by an explicit close().
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable, Optional

from playwright.async_api import Browser, BrowserContext, Page, async_playwright

from . import settings
from .logging_utils import get_logger


IPHONE_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 14_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/14.0 Mobile/15E148 Safari/604.1"
)

CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--disable-gpu",
    "--window-size=375x812",
]


@dataclass
class BrowserSettings:
    headless: bool = True
    timeout_ms: int = settings.DEFAULT_BROWSER_TIMEOUT_MS
    viewport: dict[str, int] = field(default_factory=lambda: {"width": 375, "height": 812})
    device_scale_factor: float = 2
    is_mobile: bool = True
    has_touch: bool = True
    user_agent: str = IPHONE_USER_AGENT
    args: list[str] = field(default_factory=lambda: list(CHROMIUM_ARGS))

    @classmethod
    def from_env(cls) -> "BrowserSettings":
        return cls(
            headless=settings.browser_headless(),
            timeout_ms=settings.browser_timeout_ms(),
        )


class BrowserManager:
    """
    Owns the Playwright driver and a single Chromium instance.

    Usage:
        async with BrowserManager() as browser:
            async with browser.page() as page:
                await page.goto(url)
    """

    def __init__(
        self,
        browser_settings: Optional[BrowserSettings] = None,
        playwright_factory: Callable[[], Any] = async_playwright,
    ):
        self.settings = browser_settings or BrowserSettings.from_env()
        self._playwright_factory = playwright_factory
        self._playwright = None
        self._browser: Optional[Browser] = None
        self._lock = asyncio.Lock()
        self.logger = get_logger(__name__)

    @property
    def timeout_ms(self) -> int:
        return self.settings.timeout_ms

    @property
    def is_running(self) -> bool:
        return self._browser is not None

    async def _ensure_browser(self) -> Browser:
        async with self._lock:
            if self._browser is not None:
                return self._browser

            self.logger.info("Launching Chromium (headless=%s)", self.settings.headless)
            self._playwright = await self._playwright_factory().start()
            try:
                self._browser = await self._playwright.chromium.launch(
                    headless=self.settings.headless,
                    args=self.settings.args,
                )
            except Exception:
                await self._playwright.stop()
                self._playwright = None
                raise
            return self._browser

    async def new_page(self) -> Page:
        """Open a fresh page in its own context. Caller must close both."""
        browser = await self._ensure_browser()
        context: BrowserContext = await browser.new_context(
            viewport=self.settings.viewport,
            device_scale_factor=self.settings.device_scale_factor,
            is_mobile=self.settings.is_mobile,
            has_touch=self.settings.has_touch,
            user_agent=self.settings.user_agent,
            java_script_enabled=True,
        )
        context.set_default_timeout(self.settings.timeout_ms)
        context.set_default_navigation_timeout(self.settings.timeout_ms)
        return await context.new_page()

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        """Borrow a single-use page; it is released even if the body raises."""
        page = await self.new_page()
        try:
            yield page
        finally:
            context = page.context
            try:
                await page.close()
            finally:
                await context.close()

    async def close(self) -> None:
        async with self._lock:
            if self._browser is not None:
                try:
                    await self._browser.close()
                finally:
                    self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None
                self.logger.info("Chromium closed")

    async def __aenter__(self) -> "BrowserManager":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

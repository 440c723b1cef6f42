from unittest.mock import AsyncMock, MagicMock

import pytest

from event_ingest.browser import IPHONE_USER_AGENT, BrowserManager, BrowserSettings


def _make_playwright():
    page = MagicMock()
    page.close = AsyncMock()
    context = MagicMock()
    context.new_page = AsyncMock(return_value=page)
    context.close = AsyncMock()
    page.context = context

    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()

    playwright = MagicMock()
    playwright.chromium.launch = AsyncMock(return_value=browser)
    playwright.stop = AsyncMock()

    starter = MagicMock()
    starter.start = AsyncMock(return_value=playwright)
    factory = MagicMock(return_value=starter)
    return factory, playwright, browser, context, page


def _make_manager(factory, **overrides):
    settings = BrowserSettings(**{"headless": True, "timeout_ms": 5000, **overrides})
    return BrowserManager(browser_settings=settings, playwright_factory=factory)


async def test_browser_is_launched_once_and_shared():
    factory, playwright, browser, _, _ = _make_playwright()
    manager = _make_manager(factory)

    async with manager.page():
        pass
    async with manager.page():
        pass

    factory.assert_called_once()
    playwright.chromium.launch.assert_awaited_once()
    assert browser.new_context.await_count == 2
    assert manager.is_running


async def test_page_uses_mobile_context():
    factory, _, browser, context, _ = _make_playwright()
    manager = _make_manager(factory)

    async with manager.page():
        pass

    kwargs = browser.new_context.await_args.kwargs
    assert kwargs["viewport"] == {"width": 375, "height": 812}
    assert kwargs["is_mobile"] is True
    assert kwargs["user_agent"] == IPHONE_USER_AGENT
    context.set_default_timeout.assert_called_once_with(5000)


async def test_page_is_released_when_body_raises():
    factory, _, _, context, page = _make_playwright()
    manager = _make_manager(factory)

    with pytest.raises(RuntimeError):
        async with manager.page():
            raise RuntimeError("navigation failed")

    page.close.assert_awaited_once()
    context.close.assert_awaited_once()


async def test_close_stops_browser_and_driver():
    factory, playwright, browser, _, _ = _make_playwright()

    async with _make_manager(factory) as manager:
        async with manager.page():
            pass

    browser.close.assert_awaited_once()
    playwright.stop.assert_awaited_once()
    assert not manager.is_running


async def test_close_without_launch_is_noop():
    factory, playwright, _, _, _ = _make_playwright()
    manager = _make_manager(factory)

    await manager.close()

    factory.assert_not_called()
    playwright.stop.assert_not_awaited()


async def test_failed_launch_stops_driver():
    factory, playwright, _, _, _ = _make_playwright()
    playwright.chromium.launch.side_effect = RuntimeError("no chromium")
    manager = _make_manager(factory)

    with pytest.raises(RuntimeError):
        async with manager.page():
            pass

    playwright.stop.assert_awaited_once()
    assert not manager.is_running


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("BROWSER_HEADLESS", "false")
    monkeypatch.setenv("BROWSER_TIMEOUT_MS", "15000")

    settings = BrowserSettings.from_env()

    assert settings.headless is False
    assert settings.timeout_ms == 15000

"""Browser session lifecycle for watching a host page.

The engine never auto-opens a browser; the app layer provides the page.
This module provides a helper for apps (and the CLI) that want one.
"""
import logging
from contextlib import contextmanager
from typing import Any

log = logging.getLogger(__name__)


@contextmanager
def open_host_page(
    playwright: Any,
    url: str,
    *,
    headed: bool = False,
    viewport: dict | None = None,
    locale: str = "en-US",
    goto_timeout: int = 30000,
):
    """Launch Chromium, open ``url`` and yield the page.

    The browser is closed on exit even if navigation failed.
    """
    browser = playwright.chromium.launch(headless=not headed)
    context = None
    try:
        context = browser.new_context(
            viewport=viewport or {"width": 1920, "height": 1080},
            locale=locale,
        )
        page = context.new_page()
        page.goto(url, wait_until="domcontentloaded", timeout=goto_timeout)
        log.info(f"Opened host page {url}")
        yield page
    finally:
        if context is not None:
            try:
                context.close()
            except Exception as e:
                log.warning(f"Failed to close browser context cleanly: {e}")
        try:
            browser.close()
        except Exception as e:
            log.warning(f"Failed to close browser cleanly: {e}")

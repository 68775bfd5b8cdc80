"""Headless browser rendering of client-side pages."""

from __future__ import annotations

import logging

from playwright.async_api import (
    Error as PlaywrightError,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from .config import SnapshotConfig

logger = logging.getLogger("page_snapshot")

SCROLL_TO_BOTTOM = "() => window.scrollTo(0, document.body ? document.body.scrollHeight : 0)"


class RenderError(RuntimeError):
    """Raised when the page cannot be loaded; fatal for the whole job."""


async def render_page(url: str, config: SnapshotConfig) -> str:
    """Load ``url`` in headless Chromium and return the hydrated DOM as HTML.

    The page is scrolled to the bottom and given ``settle_seconds`` to let
    viewport-triggered lazy loaders fire. The browser is always closed.
    """
    try:
        async with async_playwright() as playwright:
            browser = await playwright.chromium.launch(
                headless=config.headless,
                args=list(config.browser_args),
            )
            try:
                context = await browser.new_context(
                    viewport={
                        "width": config.viewport_width,
                        "height": config.viewport_height,
                    },
                    user_agent=config.user_agent,
                )
                page = await context.new_page()
                page.set_default_navigation_timeout(config.navigation_timeout * 1000)
                logger.info("Loading %s", url)
                await page.goto(url, wait_until="networkidle")
                await page.evaluate(SCROLL_TO_BOTTOM)
                if config.settle_seconds:
                    await page.wait_for_timeout(int(config.settle_seconds * 1000))
                html = await page.content()
            finally:
                await browser.close()
    except PlaywrightTimeoutError as exc:
        raise RenderError(f"Timed out loading {url}: {exc}") from exc
    except PlaywrightError as exc:
        raise RenderError(f"Failed to render {url}: {exc}") from exc
    logger.debug("Rendered %s (%d chars)", url, len(html))
    return html

"""
Browser tool — async Playwright page handling.

Opens a URL in headless Chromium with a fixed viewport and device scale
factor, and wraps the handful of page scripts the stitcher relies on:
reading the viewport and document heights, reading the device pixel
ratio, and scrolling the window.
"""

import asyncio
import logging
from typing import Any, Optional

from playwright.async_api import async_playwright, Browser, Page, Playwright

from config import (
    HEADLESS,
    PAGE_TIMEOUT_MS,
    VIEWPORT_WIDTH,
    VIEWPORT_HEIGHT,
    DEVICE_SCALE_FACTOR,
    MAX_RETRIES,
    RETRY_DELAY_SECONDS,
)

logger = logging.getLogger(__name__)

# ── Page scripts ──────────────────────────────────────────────────────────────

VIEWPORT_HEIGHT_JS = "() => window.innerHeight"
PAGE_HEIGHT_JS = (
    "() => Math.max("
    "document.documentElement.scrollHeight, "
    "document.documentElement.getBoundingClientRect().height)"
)
DEVICE_PIXEL_RATIO_JS = "() => window.devicePixelRatio"
SCROLL_BY_JS = "(dy) => window.scrollBy(0, dy)"


# ── Page queries ──────────────────────────────────────────────────────────────

def _to_int(value: Any) -> Optional[int]:
    """Truncate a JS number (possibly fractional or a string) to int."""
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


async def read_viewport_height(page: Page) -> Optional[int]:
    """Return window.innerHeight in CSS pixels, or None if unreadable."""
    return _to_int(await page.evaluate(VIEWPORT_HEIGHT_JS))


async def read_page_height(page: Page) -> Optional[int]:
    """Return the full scrollable document height in CSS pixels."""
    return _to_int(await page.evaluate(PAGE_HEIGHT_JS))


async def read_device_pixel_ratio(page: Page) -> int:
    """
    Return window.devicePixelRatio rounded to a whole multiplier.

    Fractional ratios round half up to the nearest integer (1.25 -> 1,
    1.5 -> 2, 2.5 -> 3) and anything unreadable counts as 1.
    """
    raw = await page.evaluate(DEVICE_PIXEL_RATIO_JS)
    try:
        ratio = int(float(raw) + 0.5)
    except (TypeError, ValueError):
        logger.warning("Unreadable devicePixelRatio %r, assuming 1", raw)
        return 1
    return max(ratio, 1)


async def scroll_by(page: Page, dy: int) -> None:
    """Scroll the window down by dy CSS pixels."""
    await page.evaluate(SCROLL_BY_JS, dy)


# ── Browser lifecycle ─────────────────────────────────────────────────────────

async def open_page(
    url: str,
    *,
    headless: bool = HEADLESS,
    timeout_ms: int = PAGE_TIMEOUT_MS,
    viewport_width: int = VIEWPORT_WIDTH,
    viewport_height: int = VIEWPORT_HEIGHT,
    device_scale_factor: int = DEVICE_SCALE_FACTOR,
    wait_until: str = "networkidle",
    retries: int = MAX_RETRIES,
) -> tuple[Playwright, Browser, Page]:
    """
    Launch Chromium and return a (playwright, browser, page) tuple with
    the URL loaded. Caller is responsible for cleanup via close_browser().

    Args:
        url: The target URL to load.
        headless: Whether to run in headless mode.
        timeout_ms: Maximum time to wait for page load (ms).
        viewport_width: Browser viewport width in CSS pixels.
        viewport_height: Browser viewport height in CSS pixels.
        device_scale_factor: Raw pixels per CSS pixel for screenshots.
        wait_until: Playwright wait condition ('networkidle', 'load', 'domcontentloaded').
        retries: Number of navigation attempts.

    Raises:
        RuntimeError: If the page cannot be loaded after all retries.
    """
    pw = await async_playwright().start()
    browser: Optional[Browser] = None
    try:
        browser = await pw.chromium.launch(headless=headless)
        context = await browser.new_context(
            viewport={"width": viewport_width, "height": viewport_height},
            device_scale_factor=device_scale_factor,
        )
        page = await context.new_page()
        page.set_default_timeout(timeout_ms)

        last_error: Optional[Exception] = None
        for attempt in range(1, retries + 1):
            try:
                logger.info(
                    "Loading page (attempt %d/%d): %s", attempt, retries, url
                )
                await page.goto(url, wait_until=wait_until, timeout=timeout_ms)
                logger.info("Page loaded: %s", url)
                return pw, browser, page
            except Exception as exc:
                last_error = exc
                logger.warning("Page load attempt %d failed: %s", attempt, exc)
                if attempt < retries:
                    await asyncio.sleep(RETRY_DELAY_SECONDS)

        raise RuntimeError(
            f"Failed to load page after {retries} attempts: {last_error}"
        )
    except Exception:
        await close_browser(pw, browser)
        raise


async def close_browser(pw: Playwright, browser: Optional[Browser]) -> None:
    """Close the browser and stop Playwright, logging rather than raising."""
    if browser:
        try:
            await browser.close()
        except Exception as exc:
            logger.debug("Browser close failed: %s", exc)
    try:
        await pw.stop()
    except Exception as exc:
        logger.debug("Playwright stop failed: %s", exc)

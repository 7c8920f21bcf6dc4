"""
Screenshot tool — raw viewport captures and the html2canvas pass-through.

capture_viewport() returns what the browser can see right now as PNG
bytes; the stitcher builds full pages out of these. capture_full_page()
instead asks html2canvas to render the whole document inside the page
and hands back its base64 output unchanged.
"""

import asyncio
import base64
import binascii
import io
import logging
import re
import time
from pathlib import Path
from typing import Optional

from PIL import Image
from playwright.async_api import Page

from config import (
    HTML2CANVAS_PATH,
    MAX_SCREENSHOT_GENERATION_WAIT_TIME,
    RENDER_POLL_INTERVAL_SECONDS,
)
from errors import RenderTimeout, StitchError

logger = logging.getLogger(__name__)

RESET_RESULT_JS = "() => { window.canvasImgContentDecoded = undefined; }"
RENDER_JS = """() => {
  const store = (canvas) => {
    window.canvasImgContentDecoded = canvas.toDataURL("image/png");
  };
  const pending = html2canvas(document.body, { onrendered: store });
  if (pending && typeof pending.then === "function") {
    pending.then(store);
  }
}"""
RESULT_JS = "() => window.canvasImgContentDecoded"

_DATA_URL_PREFIX = re.compile(r"^data:image/png;base64,")


async def capture_viewport(page: Page) -> bytes:
    """Capture the currently visible viewport as PNG bytes."""
    return await page.screenshot(full_page=False, type="png")


def decode_png(data: bytes) -> Image.Image:
    """
    Decode captured bytes into an RGB image.

    Raises:
        ValueError: If the bytes are empty or not an image.
    """
    if not data:
        raise ValueError("screenshot returned no data")
    try:
        with Image.open(io.BytesIO(data)) as img:
            return img.convert("RGB")
    except OSError as exc:
        raise ValueError(f"screenshot is not a decodable image: {exc}") from exc


def load_html2canvas(script_path: Optional[Path] = None) -> str:
    """Read the html2canvas bundle from disk."""
    path = Path(script_path or HTML2CANVAS_PATH)
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise StitchError(f"Cannot read html2canvas script at {path}: {exc}") from exc


async def capture_full_page(
    page: Page,
    *,
    script_path: Optional[Path] = None,
    timeout: float = MAX_SCREENSHOT_GENERATION_WAIT_TIME,
    poll_interval: float = RENDER_POLL_INTERVAL_SECONDS,
) -> str:
    """
    Render the whole page with html2canvas and return base64 PNG text.

    The script is injected into the page, rendering of document.body is
    started, and the result is polled until it appears or the timeout
    elapses.

    Args:
        page: The Playwright page to render.
        script_path: Location of html2canvas.js (defaults to HTML2CANVAS_PATH).
        timeout: Seconds to wait for the render to finish.
        poll_interval: Seconds between result checks.

    Returns:
        Base64-encoded PNG with any data-URL prefix removed.

    Raises:
        StitchError: If the script cannot be read.
        RenderTimeout: If no result appears within the timeout.
    """
    payload = load_html2canvas(script_path)
    await page.add_script_tag(content=payload)
    await page.evaluate(RESET_RESULT_JS)
    await page.evaluate(RENDER_JS)
    logger.info("html2canvas render started (waiting up to %gs)", timeout)

    deadline = time.monotonic() + timeout
    while True:
        output = await page.evaluate(RESULT_JS)
        if output:
            break
        if time.monotonic() >= deadline:
            logger.error("html2canvas render timed out after %gs", timeout)
            raise RenderTimeout(timeout)
        await asyncio.sleep(poll_interval)

    b64_string = _DATA_URL_PREFIX.sub("", output)
    logger.info("html2canvas render complete (base64 length: %d)", len(b64_string))
    return b64_string


async def save_full_page(path: Path, page: Page, **kwargs) -> Path:
    """
    Render via capture_full_page() and write the decoded PNG to path.

    Raises:
        StitchError: If the render is not valid base64 or cannot be written.
    """
    b64_string = await capture_full_page(page, **kwargs)
    try:
        data = base64.b64decode(b64_string, validate=True)
    except binascii.Error as exc:
        logger.error("html2canvas returned malformed base64: %s", exc)
        raise StitchError(f"html2canvas returned malformed base64: {exc}") from exc

    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as exc:
        raise StitchError(f"Failed to write {path}: {exc}") from exc
    logger.info("Full-page render saved to: %s", path)
    return path

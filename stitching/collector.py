"""
Slice collector — scrolls the page one viewport at a time and captures
each position.

Every capture depends on the scroll position left by the previous step,
so slices are produced strictly one after another.
"""

import logging
from typing import AsyncIterator

from playwright.async_api import Page

from errors import CaptureFailure
from models.schema import Plan, Slice
from tools.browser import scroll_by
from tools.screenshot import capture_viewport, decode_png

logger = logging.getLogger(__name__)


async def capture_slice(page: Page, index: int) -> Slice:
    """
    Capture and decode the current viewport.

    Raises:
        CaptureFailure: If the browser fails or returns unusable data.
    """
    try:
        data = await capture_viewport(page)
    except Exception as exc:
        logger.error("Screenshot of slice %d failed: %s", index, exc)
        raise CaptureFailure(index, str(exc)) from exc

    try:
        image = decode_png(data)
    except ValueError as exc:
        logger.error("Slice %d could not be decoded: %s", index, exc)
        raise CaptureFailure(index, str(exc)) from exc

    logger.debug("Captured slice %d (%dx%d)", index, image.width, image.height)
    return Slice(index=index, image=image)


async def collect_slices(page: Page, plan: Plan) -> AsyncIterator[Slice]:
    """
    Yield plan.total_slices slices: one at the current scroll position,
    then one after each scroll of viewport_height CSS pixels.
    """
    yield await capture_slice(page, 0)

    for index in range(1, plan.slice_count + 1):
        await scroll_by(page, plan.viewport_height)
        yield await capture_slice(page, index)

"""
Stitcher — builds one full-page PNG out of viewport screenshots.

Orchestrates the pipeline for a single save:
  measure → plan → capture first slice → canvas → composite → write

Every step is awaited in order on the caller's event loop. The page's
scroll position is changed along the way and is not restored; do not run
two stitches against the same page at once.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from playwright.async_api import Page

from errors import StitchError
from models.schema import StitchResult
from stitching.canvas import build_canvas
from stitching.collector import collect_slices
from stitching.compositor import composite
from stitching.planner import measure_page, plan_dimensions

logger = logging.getLogger(__name__)


async def save_stitch(
    path: Union[str, Path],
    page: Page,
    *,
    page_height_limit: Optional[int] = None,
    density_factor: Optional[int] = None,
) -> StitchResult:
    """
    Scroll through the page, capture each viewport, and write the
    stitched full-page PNG to `path`.

    Args:
        path: Destination file for the PNG.
        page: A Playwright page (or anything with the same evaluate /
            screenshot coroutines).
        page_height_limit: Optional cap on the captured height in CSS
            pixels; ignored unless positive.
        density_factor: Raw pixels per CSS pixel. Read from
            window.devicePixelRatio when omitted.

    Returns:
        A StitchResult describing the written image.

    Raises:
        InvalidViewport: If the page reports no usable viewport height.
        CaptureFailure: If any slice cannot be captured.
        StitchError: If the page has zero height, or the image cannot be
            written.
    """
    destination = Path(path)
    logger.info("Stitching full-page screenshot -> %s", destination)

    config = await measure_page(
        page,
        page_height_limit=page_height_limit,
        density_factor=density_factor,
    )
    plan = plan_dimensions(config)
    if plan.canvas_height == 0:
        logger.error("Page reports no height to capture: %s", plan.summary())
        raise StitchError("Page has no height to capture")

    slices = collect_slices(page, plan)
    try:
        first = await anext(slices)
        canvas = build_canvas(first.width, plan, destination)
        captured = await composite(canvas, slices, plan, first=first)
    finally:
        await slices.aclose()

    try:
        canvas.save()
    except (OSError, ValueError, SystemError) as exc:
        logger.error("Failed to write stitched image to %s: %s", destination, exc)
        raise StitchError(f"Failed to write {destination}: {exc}") from exc

    logger.info(
        "Stitched %d slices into %dx%d image: %s",
        captured,
        canvas.width,
        canvas.height,
        destination,
    )
    return StitchResult(
        path=destination,
        plan=plan,
        width=canvas.width,
        height=canvas.height,
        slices_captured=captured,
    )

"""
Dimension planner — decides how many slices a page needs and how tall
the stitched canvas will be.

Heights are measured in CSS pixels on the live page; the density factor
turns them into raw screenshot pixels. Two limits can shorten the
captured height: an optional user cap, and the image backend's hard
pixel ceiling, which always wins.
"""

import logging
from typing import Optional

from playwright.async_api import Page

from config import PIXEL_DIMENSION_LIMIT
from errors import InvalidViewport, StitchError
from models.schema import CaptureConfig, Plan
from tools.browser import (
    read_device_pixel_ratio,
    read_page_height,
    read_viewport_height,
)

logger = logging.getLogger(__name__)


def limit_page_height(config: CaptureConfig) -> int:
    """Apply the user limit, then the backend ceiling, to the page height."""
    height = config.page_height
    limit = config.page_height_limit

    if limit is not None and limit > 0:
        height = min(limit, height)

    if height * config.density_factor > config.pixel_dimension_limit:
        height = config.pixel_dimension_limit // config.density_factor
        logger.info(
            "Page height clamped to %d to stay under the %dpx backend limit",
            height,
            config.pixel_dimension_limit,
        )

    return height


def plan_dimensions(config: CaptureConfig) -> Plan:
    """
    Derive slice geometry from page measurements.

    Raises:
        InvalidViewport: If the viewport height is not positive.
    """
    if config.viewport_height <= 0:
        raise InvalidViewport(config.viewport_height)

    effective = limit_page_height(config)
    slice_count, remainder = divmod(effective, config.viewport_height)

    plan = Plan(
        viewport_height=config.viewport_height,
        page_height=config.page_height,
        effective_page_height=effective,
        density_factor=config.density_factor,
        slice_count=slice_count,
        remainder=remainder,
        was_limited=effective != config.page_height,
    )
    logger.info(plan.summary())
    return plan


async def measure_page(
    page: Page,
    *,
    page_height_limit: Optional[int] = None,
    density_factor: Optional[int] = None,
    pixel_dimension_limit: int = PIXEL_DIMENSION_LIMIT,
) -> CaptureConfig:
    """
    Read viewport height, page height and (unless given) the device pixel
    ratio from the live page.

    Raises:
        InvalidViewport: If the viewport height is missing, not positive,
            or the browser fails to report it.
        StitchError: If the browser fails while reading the other values.
    """
    try:
        viewport_height = await read_viewport_height(page)
    except Exception as exc:
        logger.error("Could not read the viewport height: %s", exc)
        raise InvalidViewport(None) from exc
    if viewport_height is None or viewport_height <= 0:
        raise InvalidViewport(viewport_height)

    try:
        page_height = await read_page_height(page)
        if density_factor is None:
            density_factor = await read_device_pixel_ratio(page)
    except Exception as exc:
        logger.error("Could not measure the page: %s", exc)
        raise StitchError(f"Could not measure the page: {exc}") from exc

    if page_height is None or page_height < 0:
        logger.warning("Unreadable page height %r, using the viewport", page_height)
        page_height = viewport_height

    logger.debug(
        "Measured viewport=%d page=%d density=%d",
        viewport_height,
        page_height,
        density_factor,
    )
    return CaptureConfig(
        viewport_height=viewport_height,
        page_height=page_height,
        page_height_limit=page_height_limit,
        pixel_dimension_limit=pixel_dimension_limit,
        density_factor=density_factor,
    )

"""
Compositor — pastes captured slices onto the canvas.

Slice i lands at viewport_height * i * density_factor. The browser can't
scroll past the bottom of the page, so the final slice shows the last
full viewport rather than just the leftover strip; when the page height
was not limited, only its bottom `remainder` rows are new and it is
cropped to those. With a limited height no crop happens and paste()
clips whatever hangs past the canvas.
"""

import logging
from typing import AsyncIterable, Optional

from models.schema import Canvas, Plan, Slice

logger = logging.getLogger(__name__)


def slice_offset(index: int, plan: Plan) -> int:
    """Vertical canvas position of slice `index` in raw pixels."""
    return plan.viewport_height * index * plan.density_factor


def last_slice_box(width: int, plan: Plan) -> tuple[int, int, int, int]:
    """Crop box selecting the bottom `remainder` rows of a full slice."""
    remainder_px = plan.remainder * plan.density_factor
    top = plan.slice_pixel_height - remainder_px
    return (0, top, width, top + remainder_px)


def needs_crop(slc: Slice, plan: Plan) -> bool:
    return slc.index == plan.last_index and not plan.was_limited


def place_slice(canvas: Canvas, slc: Slice, plan: Plan) -> None:
    """Overwrite the canvas region belonging to one slice."""
    image = slc.image
    offset = slice_offset(slc.index, plan)

    if needs_crop(slc, plan):
        if plan.remainder == 0:
            # Page height is an exact multiple of the viewport; nothing new here
            logger.debug("Slice %d adds no rows, skipped", slc.index)
            return
        box = last_slice_box(image.width, plan)
        image = image.crop(box)
        logger.debug("Slice %d cropped to rows %d-%d", slc.index, box[1], box[3])

    canvas.image.paste(image, (0, offset))
    logger.debug("Slice %d placed at y=%d", slc.index, offset)


async def composite(
    canvas: Canvas,
    slices: AsyncIterable[Slice],
    plan: Plan,
    *,
    first: Optional[Slice] = None,
) -> int:
    """
    Place every slice onto the canvas in the order they arrive.

    `first` is a slice already taken off the iterator (the stitcher reads
    one to size the canvas). Returns the number of slices consumed.
    """
    consumed = 0
    if first is not None:
        place_slice(canvas, first, plan)
        consumed += 1

    async for slc in slices:
        place_slice(canvas, slc, plan)
        consumed += 1

    return consumed

"""
Canvas builder — allocates the blank surface slices are pasted onto.
"""

import logging
from pathlib import Path

from PIL import Image

from config import CANVAS_BACKGROUND
from errors import CaptureFailure, StitchError
from models.schema import Canvas, Plan

logger = logging.getLogger(__name__)


def build_canvas(
    width: int,
    plan: Plan,
    destination: Path,
    *,
    background: str = CANVAS_BACKGROUND,
) -> Canvas:
    """
    Allocate a canvas as wide as the first slice and as tall as the
    planned page in raw pixels, filled with the background colour.

    The destination's parent directory is created so the final write
    cannot fail on a missing folder.
    """
    if width <= 0:
        raise CaptureFailure(0, f"initial slice has width {width}")

    destination = Path(destination)
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StitchError(f"Cannot create output folder {destination.parent}: {exc}") from exc

    image = Image.new("RGB", (width, plan.canvas_height), background)
    logger.info("Canvas allocated: %dx%d -> %s", width, plan.canvas_height, destination)
    return Canvas(image=image, destination=destination)

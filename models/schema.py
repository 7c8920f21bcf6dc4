"""
Pydantic models for the data passed between the stitching stages.

CaptureConfig holds what was measured on the live page, Plan holds the
geometry derived from it, and Slice carries one decoded viewport capture.
"""

from pathlib import Path
from typing import Optional

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field

from config import PIXEL_DIMENSION_LIMIT


class CaptureConfig(BaseModel):
    """Page measurements and limits for a single stitch."""

    viewport_height: int = Field(
        ...,
        description="Visible window height in CSS pixels.",
    )
    page_height: int = Field(
        ...,
        ge=0,
        description="Full scrollable page height in CSS pixels.",
    )
    page_height_limit: Optional[int] = Field(
        default=None,
        description="User cap on the captured height; ignored unless > 0.",
    )
    pixel_dimension_limit: int = Field(
        default=PIXEL_DIMENSION_LIMIT,
        gt=0,
        description="Hard ceiling on any raw image dimension.",
    )
    density_factor: int = Field(
        default=1,
        ge=1,
        description="Raw image pixels per CSS pixel.",
    )


class Plan(BaseModel):
    """Slice geometry computed once per stitch."""

    viewport_height: int
    page_height: int
    effective_page_height: int
    density_factor: int
    slice_count: int = Field(..., ge=0)
    remainder: int = Field(..., ge=0)
    was_limited: bool

    @property
    def canvas_height(self) -> int:
        return self.effective_page_height * self.density_factor

    @property
    def slice_pixel_height(self) -> int:
        return self.viewport_height * self.density_factor

    @property
    def total_slices(self) -> int:
        return self.slice_count + 1

    @property
    def last_index(self) -> int:
        return self.slice_count

    def summary(self) -> str:
        return (
            f"Plan: {self.total_slices} slices of {self.viewport_height}px | "
            f"page={self.page_height}, effective={self.effective_page_height}, "
            f"remainder={self.remainder}, density={self.density_factor}, "
            f"limited={self.was_limited}"
        )


class Slice(BaseModel):
    """One decoded viewport capture and its position in the sequence."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    index: int = Field(..., ge=0)
    image: Image.Image

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height


class StitchResult(BaseModel):
    """Outcome of a completed save_stitch() call."""

    path: Path
    plan: Plan
    width: int
    height: int
    slices_captured: int


class Canvas(BaseModel):
    """The output surface for one stitch and the file it will be written to."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    image: Image.Image
    destination: Path

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def save(self) -> Path:
        self.image.save(self.destination, format="PNG")
        return self.destination

"""
Shared fixtures: a fake Playwright page backed by a tall Pillow image.

Every raw pixel row of the fake page has its own colour, so a stitched
result can be compared against the page row by row.
"""

import io
import sys
from pathlib import Path
from typing import Optional

import pytest
from PIL import Image

# Adjust path so we can import from the project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from tools.browser import (
    DEVICE_PIXEL_RATIO_JS,
    PAGE_HEIGHT_JS,
    SCROLL_BY_JS,
    VIEWPORT_HEIGHT_JS,
)
from tools.screenshot import RENDER_JS, RESET_RESULT_JS, RESULT_JS


def css_px(value) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def row_colour(y: int) -> tuple[int, int, int]:
    return (y % 256, (y // 256) % 256, 128)


def make_page_image(width: int, height: int) -> Image.Image:
    """A width x height image whose row y is filled with row_colour(y)."""
    rows = b"".join(bytes(row_colour(y)) * width for y in range(height))
    return Image.frombytes("RGB", (width, height), rows)


def png_bytes(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


class FakePage:
    """
    Stand-in for playwright.async_api.Page.

    Scrolling clamps at page_height - viewport_height like a real window,
    and screenshot() returns the visible part of the page at the device
    pixel ratio.
    """

    def __init__(
        self,
        *,
        viewport_height=800,
        page_height=2500,
        width: int = 8,
        device_pixel_ratio=1,
        fail_at: Optional[int] = None,
        blank_at: Optional[int] = None,
        render_result: Optional[str] = None,
        render_after: int = 0,
        broken_script: Optional[str] = None,
    ) -> None:
        self.viewport_height = viewport_height
        self.page_height = page_height
        self.device_pixel_ratio = device_pixel_ratio
        self.fail_at = fail_at
        self.blank_at = blank_at
        self.render_result = render_result
        self.render_after = render_after
        self.broken_script = broken_script

        self.scale = max(int(float(device_pixel_ratio or 1) + 0.5), 1)
        self.content = make_page_image(
            width * self.scale, max(css_px(page_height), 1) * self.scale
        )
        self.scroll_y = 0
        self.shots = 0
        self.polls = 0
        self.calls: list[tuple] = []
        self.scripts: list[str] = []

    @property
    def max_scroll(self) -> int:
        return max(css_px(self.page_height) - css_px(self.viewport_height), 0)

    async def evaluate(self, expression: str, arg=None):
        self.calls.append(("evaluate", expression, arg))
        if expression == self.broken_script:
            raise RuntimeError("Execution context was destroyed")
        if expression == VIEWPORT_HEIGHT_JS:
            return self.viewport_height
        if expression == PAGE_HEIGHT_JS:
            return self.page_height
        if expression == DEVICE_PIXEL_RATIO_JS:
            return self.device_pixel_ratio
        if expression == SCROLL_BY_JS:
            self.scroll_y = min(self.scroll_y + arg, self.max_scroll)
            return None
        if expression in (RESET_RESULT_JS, RENDER_JS):
            return None
        if expression == RESULT_JS:
            self.polls += 1
            if self.polls > self.render_after:
                return self.render_result
            return None
        raise AssertionError(f"unexpected script: {expression}")

    async def screenshot(self, **kwargs) -> bytes:
        index = self.shots
        self.shots += 1
        self.calls.append(("screenshot", index, self.scroll_y))
        if index == self.fail_at:
            raise RuntimeError("Target page, context or browser has been closed")
        if index == self.blank_at:
            return b""
        top = self.scroll_y * self.scale
        bottom = top + css_px(self.viewport_height) * self.scale
        return png_bytes(self.content.crop((0, top, self.content.width, bottom)))

    async def add_script_tag(self, content: Optional[str] = None, **kwargs) -> None:
        self.scripts.append(content)


@pytest.fixture
def make_page():
    """Factory for FakePage instances."""
    return FakePage

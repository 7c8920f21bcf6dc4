"""
Tests for the slice collector and the save_stitch() pipeline.

Tests cover:
- Capture / scroll ordering
- Capture failures carrying the slice index and aborting the stitch
- Stitched output matching the page pixel for pixel
- High-density pages
- Limited page heights
- Byte-identical output across runs
"""

import asyncio

import pytest
from PIL import Image

from conftest import row_colour
from errors import CaptureFailure, InvalidViewport, StitchError
from models.schema import CaptureConfig
from stitcher import save_stitch
from stitching.collector import collect_slices
from stitching.planner import plan_dimensions
from tools.browser import PAGE_HEIGHT_JS, SCROLL_BY_JS


def _run(coro):
    """Run an async coroutine synchronously for testing."""
    return asyncio.run(coro)


async def _drain(page, plan):
    return [slc async for slc in collect_slices(page, plan)]


def _plan_for(page, **overrides):
    values = {
        "viewport_height": page.viewport_height,
        "page_height": page.page_height,
        "density_factor": page.scale,
    }
    values.update(overrides)
    return plan_dimensions(CaptureConfig(**values))


class TestCollectSlices:
    """Scrolling and capturing in order."""

    def test_captures_one_more_than_slice_count(self, make_page):
        page = make_page()
        plan = _plan_for(page)

        slices = _run(_drain(page, plan))

        assert [s.index for s in slices] == [0, 1, 2, 3]
        assert page.shots == plan.total_slices

    def test_scroll_then_capture_alternate(self, make_page):
        page = make_page()
        plan = _plan_for(page)

        _run(_drain(page, plan))

        kinds = [call[0] if call[0] == "screenshot" else call[1] for call in page.calls]
        assert kinds == [
            "screenshot",
            SCROLL_BY_JS, "screenshot",
            SCROLL_BY_JS, "screenshot",
            SCROLL_BY_JS, "screenshot",
        ]
        scrolls = [call[2] for call in page.calls if call[0] == "evaluate"]
        assert scrolls == [800, 800, 800]

    def test_final_scroll_is_clamped_by_the_browser(self, make_page):
        page = make_page()
        plan = _plan_for(page)

        _run(_drain(page, plan))

        positions = [call[2] for call in page.calls if call[0] == "screenshot"]
        assert positions == [0, 800, 1600, 1700]

    def test_single_slice_page_never_scrolls(self, make_page):
        page = make_page(page_height=600)
        plan = _plan_for(page)

        slices = _run(_drain(page, plan))

        assert len(slices) == 1
        assert all(call[0] == "screenshot" for call in page.calls)

    def test_driver_error_becomes_capture_failure(self, make_page):
        page = make_page(fail_at=2)
        plan = _plan_for(page)

        with pytest.raises(CaptureFailure) as exc_info:
            _run(_drain(page, plan))

        assert exc_info.value.index == 2
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert page.shots == 3

    def test_empty_screenshot_becomes_capture_failure(self, make_page):
        page = make_page(blank_at=1)
        plan = _plan_for(page)

        with pytest.raises(CaptureFailure) as exc_info:
            _run(_drain(page, plan))

        assert exc_info.value.index == 1


class TestSaveStitch:
    """End-to-end stitching against the fake page."""

    def test_output_matches_page(self, make_page, tmp_path):
        page = make_page()
        out = tmp_path / "full.png"

        result = _run(save_stitch(out, page))

        assert result.plan.slice_count == 3
        assert result.plan.remainder == 100
        assert result.slices_captured == 4
        with Image.open(out) as img:
            assert img.size == (8, 2500)
            assert list(img.convert("RGB").getdata()) == list(page.content.getdata())

    def test_high_density_page(self, make_page, tmp_path):
        page = make_page(device_pixel_ratio=2)
        out = tmp_path / "retina.png"

        result = _run(save_stitch(out, page))

        assert result.plan.density_factor == 2
        assert (result.width, result.height) == (16, 5000)
        with Image.open(out) as img:
            assert list(img.convert("RGB").getdata()) == list(page.content.getdata())

    def test_injected_density_factor(self, make_page, tmp_path):
        page = make_page(device_pixel_ratio=2)

        result = _run(save_stitch(tmp_path / "x.png", page, density_factor=2))

        assert result.height == 5000

    def test_limited_height_is_not_cropped(self, make_page, tmp_path):
        page = make_page()
        out = tmp_path / "limited.png"

        result = _run(save_stitch(out, page, page_height_limit=2000))

        assert result.plan.was_limited is True
        assert result.plan.slice_count == 2
        assert result.height == 2000
        with Image.open(out) as img:
            expected = page.content.crop((0, 0, 8, 2000))
            assert list(img.convert("RGB").getdata()) == list(expected.getdata())

    def test_limited_last_slice_keeps_scroll_clamped_rows(self, make_page, tmp_path):
        page = make_page()
        out = tmp_path / "seam.png"

        _run(save_stitch(out, page, page_height_limit=2450))

        with Image.open(out) as img:
            img = img.convert("RGB")
            assert img.height == 2450
            # the last capture starts at the clamped scroll position 1700
            assert img.getpixel((0, 2400)) == row_colour(1700)

    def test_exact_multiple_page(self, make_page, tmp_path):
        page = make_page(page_height=2400)
        out = tmp_path / "exact.png"

        result = _run(save_stitch(out, page))

        assert result.plan.remainder == 0
        assert result.slices_captured == 4
        with Image.open(out) as img:
            assert list(img.convert("RGB").getdata()) == list(page.content.getdata())

    def test_identical_runs_are_byte_identical(self, make_page, tmp_path):
        first = tmp_path / "a.png"
        second = tmp_path / "b.png"

        _run(save_stitch(first, make_page()))
        _run(save_stitch(second, make_page()))

        assert first.read_bytes() == second.read_bytes()

    def test_capture_failure_aborts_without_output(self, make_page, tmp_path):
        out = tmp_path / "never.png"

        with pytest.raises(CaptureFailure) as exc_info:
            _run(save_stitch(out, make_page(fail_at=3)))

        assert exc_info.value.index == 3
        assert not out.exists()

    def test_invalid_viewport_aborts_before_capture(self, make_page, tmp_path):
        page = make_page(viewport_height=0)

        with pytest.raises(InvalidViewport):
            _run(save_stitch(tmp_path / "never.png", page))

        assert page.shots == 0

    def test_unwritable_destination_raises_stitch_error(self, make_page, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")

        with pytest.raises(StitchError):
            _run(save_stitch(blocker / "out.png", make_page()))

    def test_zero_height_page_raises_before_capture(self, make_page, tmp_path):
        page = make_page(page_height=0)
        out = tmp_path / "empty.png"

        with pytest.raises(StitchError, match="no height"):
            _run(save_stitch(out, page))

        assert page.shots == 0
        assert not out.exists()

    def test_measurement_error_aborts_without_output(self, make_page, tmp_path):
        page = make_page(broken_script=PAGE_HEIGHT_JS)
        out = tmp_path / "never.png"

        with pytest.raises(StitchError):
            _run(save_stitch(out, page))

        assert page.shots == 0
        assert not out.exists()

"""
CLI entrypoint for the scroll-and-stitch screenshot tool.

Usage:
    python main.py https://example.com output/example.png
    python main.py https://example.com --page-height-limit 5000
    python main.py https://example.com --density-factor 2
    python main.py https://example.com --html2canvas

The tool will:
1. Open the URL in headless Chromium using Playwright
2. Measure the viewport and page heights
3. Scroll one viewport at a time, capturing each position
4. Stitch the captures into a single PNG
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from config import (
    DEVICE_SCALE_FACTOR,
    LOG_FORMAT,
    LOG_LEVEL,
    OUTPUT_DIR,
    PAGE_HEIGHT_LIMIT,
)
from errors import StitchError
from stitcher import save_stitch
from tools.browser import close_browser, open_page
from tools.screenshot import save_full_page

EXIT_OK = 0
EXIT_STITCH_FAILED = 1
EXIT_BROWSER_FAILED = 2


def setup_logging() -> None:
    """Configure logging for the entire application."""
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )
    # Reduce noise from third-party libraries
    logging.getLogger("playwright").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Capture a full-page screenshot by scrolling and stitching.",
    )
    parser.add_argument("url", help="Page to capture.")
    parser.add_argument(
        "output",
        nargs="?",
        type=Path,
        default=OUTPUT_DIR / "screenshot.png",
        help="Destination PNG (default: %(default)s).",
    )
    parser.add_argument(
        "--page-height-limit",
        type=int,
        default=PAGE_HEIGHT_LIMIT,
        help="Cap the captured height in CSS pixels; 0 disables the cap.",
    )
    parser.add_argument(
        "--device-scale-factor",
        type=int,
        default=DEVICE_SCALE_FACTOR,
        help="Browser device scale factor (raw pixels per CSS pixel).",
    )
    parser.add_argument(
        "--density-factor",
        type=int,
        default=None,
        help="Raw pixels per CSS pixel used for stitching "
        "(default: read window.devicePixelRatio from the page).",
    )
    parser.add_argument(
        "--html2canvas",
        action="store_true",
        help="Render in-page with html2canvas instead of stitching.",
    )
    args = parser.parse_args(argv)
    if args.page_height_limit < 0:
        parser.error("--page-height-limit must not be negative")
    if args.device_scale_factor < 1:
        parser.error("--device-scale-factor must be at least 1")
    if args.density_factor is not None and args.density_factor < 1:
        parser.error("--density-factor must be at least 1")
    return args


async def run_stitch(args: argparse.Namespace) -> int:
    """
    Open the page, produce the screenshot, and return an exit code.

    Returns:
        0: Screenshot written
        1: Capture or stitching failed
        2: Browser could not be started or the page could not be loaded
    """
    logger = logging.getLogger(__name__)

    try:
        pw, browser, page = await open_page(
            args.url, device_scale_factor=args.device_scale_factor
        )
    except Exception as exc:
        logger.error("Could not open %s: %s", args.url, exc)
        print(f"\n❌ Could not open page: {exc}")
        return EXIT_BROWSER_FAILED

    try:
        if args.html2canvas:
            path = await save_full_page(args.output, page)
            print(f"💾 Full-page render saved to: {path}")
        else:
            result = await save_stitch(
                args.output,
                page,
                page_height_limit=args.page_height_limit or None,
                density_factor=args.density_factor,
            )
            print(f"📐 {result.plan.summary()}")
            print(f"💾 {result.width}x{result.height} PNG saved to: {result.path}")
        return EXIT_OK
    except StitchError as exc:
        logger.error("Screenshot failed: %s", exc)
        print(f"\n❌ Screenshot failed: {exc}")
        return EXIT_STITCH_FAILED
    except Exception as exc:
        logger.exception("Unhandled exception: %s", exc)
        print(f"\n❌ Fatal error: {exc}")
        return EXIT_STITCH_FAILED
    finally:
        await close_browser(pw, browser)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entrypoint — sets up logging and runs the async capture."""
    args = parse_args(argv)
    setup_logging()
    try:
        exit_code = asyncio.run(run_stitch(args))
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Interrupted by user")
        exit_code = EXIT_STITCH_FAILED
    sys.exit(exit_code)


if __name__ == "__main__":
    main()

"""
Configuration module for the scroll-and-stitch screenshot tool.

Loads settings from environment variables with sensible defaults.
Uses python-dotenv for local .env file support.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()


# --- Image Backend ---
# Largest width/height the raw image buffer handles in one piece
PIXEL_DIMENSION_LIMIT: int = int(os.getenv("PIXEL_DIMENSION_LIMIT", "65500"))
CANVAS_BACKGROUND: str = os.getenv("CANVAS_BACKGROUND", "white")

# --- Stitching ---
# 0 = no limit
PAGE_HEIGHT_LIMIT: int = int(os.getenv("PAGE_HEIGHT_LIMIT", "0"))
DEVICE_SCALE_FACTOR: int = int(os.getenv("DEVICE_SCALE_FACTOR", "1"))

# --- In-page rendering (html2canvas) ---
HTML2CANVAS_PATH: Path = Path(
    os.getenv("HTML2CANVAS_PATH", str(Path("vendor") / "html2canvas.js"))
)
MAX_SCREENSHOT_GENERATION_WAIT_TIME: float = float(
    os.getenv("MAX_SCREENSHOT_GENERATION_WAIT_TIME", "120")
)
RENDER_POLL_INTERVAL_SECONDS: float = float(
    os.getenv("RENDER_POLL_INTERVAL_SECONDS", "0.5")
)

# --- Browser Settings ---
HEADLESS: bool = os.getenv("HEADLESS", "true").lower() in ("true", "1", "yes")
PAGE_TIMEOUT_MS: int = int(os.getenv("PAGE_TIMEOUT_MS", "60000"))
VIEWPORT_WIDTH: int = int(os.getenv("VIEWPORT_WIDTH", "1280"))
VIEWPORT_HEIGHT: int = int(os.getenv("VIEWPORT_HEIGHT", "800"))

# --- Retry / Resilience ---
# Applies to page navigation only; a stitch is never retried
MAX_RETRIES: int = int(os.getenv("MAX_RETRIES", "3"))
RETRY_DELAY_SECONDS: float = float(os.getenv("RETRY_DELAY_SECONDS", "2.0"))

# --- Paths ---
OUTPUT_DIR: Path = Path(os.getenv("OUTPUT_DIR", "output"))

# --- Logging ---
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT: str = os.getenv(
    "LOG_FORMAT",
    "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

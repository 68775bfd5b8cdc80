"""Configuration objects and constants for the snapshot pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

DEFAULT_BROWSER_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
)

# External font services stay live instead of being mirrored.
FONT_SERVICE_HOSTS = ("fonts.googleapis.com",)

# Script sources that make no sense in an offline copy.
TRACKING_SCRIPT_PATTERNS = ("google-analytics", "googletagmanager", "facebook")

INDEX_FILENAME = "index.html"
STYLES_FILENAME = "styles.css"
README_FILENAME = "README.md"
RESERVED_FILENAMES = frozenset({INDEX_FILENAME, STYLES_FILENAME, README_FILENAME})


@dataclass
class SnapshotConfig:
    """Top-level settings that control rendering, fetching and output."""

    output_root: Path = Path(".")
    user_agent: str = DEFAULT_USER_AGENT
    viewport_width: int = 1920
    viewport_height: int = 1080
    navigation_timeout: float = 30.0
    settle_seconds: float = 3.0
    fetch_timeout: float = 10.0
    headless: bool = True
    browser_args: Tuple[str, ...] = DEFAULT_BROWSER_ARGS
    font_service_hosts: Tuple[str, ...] = FONT_SERVICE_HOSTS
    tracking_patterns: Tuple[str, ...] = TRACKING_SCRIPT_PATTERNS
    html_indent: int = 2
    css_indent: int = 2
    wrap_line_length: int = 120

"""Cleaning, formatting and writing the final static bundle."""

from __future__ import annotations

import logging
import re
import textwrap
from pathlib import Path
from typing import Iterable, List, Sequence
from urllib.parse import urlparse

import cssbeautifier
from bs4 import BeautifulSoup, NavigableString
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter

from .config import INDEX_FILENAME, README_FILENAME, STYLES_FILENAME, SnapshotConfig
from .document import select_all
from .models import CloneJob

logger = logging.getLogger("page_snapshot")

UNWANTED_SELECTORS = (
    "noscript",
    'meta[http-equiv="refresh" i]',
    'meta[name="robots" i]',
)

PRESERVE_WHITESPACE_TAGS = {"pre", "textarea", "script", "style"}
HTML_WHITESPACE = re.compile(r"[ \t\r\n\f]+")


def strip_unwanted_elements(soup: BeautifulSoup, tracking_patterns: Sequence[str]) -> int:
    """Remove trackers, social widgets and tags that misbehave offline."""
    removed = 0
    for script in soup.find_all("script", src=True):
        src = script.get("src") or ""
        if any(pattern in src for pattern in tracking_patterns):
            script.decompose()
            removed += 1
    for selector in UNWANTED_SELECTORS:
        for tag in select_all(soup, selector):
            tag.decompose()
            removed += 1
    logger.debug("Stripped %d unwanted element(s)", removed)
    return removed


def wrap_long_text(soup: BeautifulSoup, width: int) -> None:
    """Break text runs longer than ``width`` at ASCII whitespace.

    Content inside whitespace-sensitive elements is left alone; non-breaking
    spaces are never used as break points.
    """
    if width <= 0:
        return
    for text in list(soup.find_all(string=True)):
        if type(text) is not NavigableString or len(text) <= width:
            continue
        if any(parent.name in PRESERVE_WHITESPACE_TAGS for parent in text.parents):
            continue
        body = text.strip(" \t\r\n\f")
        if not body:
            continue
        lead = text[: len(text) - len(text.lstrip(" \t\r\n\f"))]
        trail = text[len(text.rstrip(" \t\r\n\f")):]
        wrapped = textwrap.fill(
            HTML_WHITESPACE.sub(" ", body),
            width=width,
            break_long_words=False,
            break_on_hyphens=False,
        )
        text.replace_with(lead + wrapped + trail)


def format_html(soup: BeautifulSoup, indent: int = 2, wrap_line_length: int = 120) -> str:
    wrap_long_text(soup, wrap_line_length)
    formatter = HTMLFormatter(
        entity_substitution=EntitySubstitution.substitute_xml,
        indent=indent,
    )
    return soup.prettify(formatter=formatter)


def format_css(css_text: str, indent: int = 2, wrap_line_length: int = 120) -> str:
    """Re-indent CSS text without interpreting it, keeping every rule as written."""
    if not css_text.strip():
        return css_text
    opts = cssbeautifier.default_options()
    opts.indent_size = indent
    opts.wrap_line_length = wrap_line_length
    opts.space_around_combinator = True
    opts.end_with_newline = True
    try:
        formatted = cssbeautifier.beautify(css_text, opts)
    except Exception as exc:  # pylint: disable=broad-except
        logger.warning("Could not format stylesheet, writing it as-is: %s", exc)
        return css_text
    if not formatted.strip():
        return css_text
    return formatted


def build_readme(job: CloneJob, files: Iterable[str]) -> str:
    hostname = urlparse(job.source_url).hostname or job.source_url
    listing = "\n".join(f"- `{name}`" for name in files)
    return (
        f"# Cloned Website: {hostname}\n\n"
        f"This folder contains a cloned version of {job.source_url}\n\n"
        "## Files:\n"
        f"{listing}\n\n"
        "## To view:\n"
        f"Open `{INDEX_FILENAME}` in your web browser.\n\n"
        "## Note:\n"
        "This is a static clone. Interactive features may not work as expected.\n"
    )


def write_bundle(
    job: CloneJob,
    soup: BeautifulSoup,
    css_text: str,
    asset_files: Sequence[str],
    config: SnapshotConfig,
) -> List[str]:
    """Write ``index.html``, ``styles.css`` and ``README.md`` next to the assets."""
    destination: Path = job.destination
    destination.mkdir(parents=True, exist_ok=True)

    (destination / INDEX_FILENAME).write_text(
        format_html(soup, config.html_indent, config.wrap_line_length), encoding="utf-8"
    )
    (destination / STYLES_FILENAME).write_text(
        format_css(css_text, config.css_indent, config.wrap_line_length), encoding="utf-8"
    )

    files = [INDEX_FILENAME, STYLES_FILENAME, *sorted(set(asset_files))]
    (destination / README_FILENAME).write_text(
        build_readme(job, files), encoding="utf-8"
    )
    files.append(README_FILENAME)
    logger.info("Saved bundle to %s (%d files)", destination, len(files))
    return files

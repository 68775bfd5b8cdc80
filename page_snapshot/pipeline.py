"""High-level orchestration for turning a live URL into a static bundle."""

from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable, Optional

import requests

from .assets import AssetRewriter
from .bundle import strip_unwanted_elements, write_bundle
from .config import SnapshotConfig
from .document import parse_document
from .fetcher import AssetFetcher
from .models import CloneJob, CloneResult
from .renderer import render_page
from .styles import resolve_styles
from .utils import default_folder_name, validate_source_url

logger = logging.getLogger("page_snapshot")

Renderer = Callable[[str, SnapshotConfig], Awaitable[str]]


def build_job(url: str, folder_name: Optional[str], config: SnapshotConfig) -> CloneJob:
    """Validate the URL and work out where the bundle should be written."""
    validate_source_url(url)
    folder = folder_name or default_folder_name(url)
    return CloneJob(source_url=url, destination=config.output_root / folder)


async def run_clone(
    url: str,
    folder_name: Optional[str] = None,
    config: Optional[SnapshotConfig] = None,
    *,
    render: Renderer = render_page,
    session: Optional[requests.Session] = None,
) -> CloneResult:
    """Render, resolve styles, localize assets and write the bundle.

    Raises on job-level failures (invalid URL, render failure, disk errors).
    Resource-level failures are collected on the returned result instead.
    """
    config = config or SnapshotConfig()
    job = build_job(url, folder_name, config)
    start = time.perf_counter()

    html = await render(url, config)
    soup = parse_document(html)

    fetcher = AssetFetcher(config, session)
    try:
        aggregate = resolve_styles(soup, url, fetcher, config)
        strip_unwanted_elements(soup, config.tracking_patterns)

        job.destination.mkdir(parents=True, exist_ok=True)
        rewriter = AssetRewriter(url, job.destination, fetcher)
        asset_files = rewriter.rewrite_all(soup, aggregate)

        files = write_bundle(job, soup, aggregate.text, asset_files, config)
    finally:
        if session is None:
            fetcher.close()

    if fetcher.failures:
        logger.warning(
            "%d resource(s) could not be downloaded and still point at the live site",
            len(fetcher.failures),
        )
    logger.info("Cloned %s in %.2fs", url, time.perf_counter() - start)
    return CloneResult(job=job, files=files, failures=list(fetcher.failures))


async def clone_website(
    url: str,
    folder_name: Optional[str] = None,
    config: Optional[SnapshotConfig] = None,
    *,
    render: Renderer = render_page,
    session: Optional[requests.Session] = None,
) -> str:
    """Clone ``url`` and describe the outcome; never raises."""
    try:
        result = await run_clone(
            url, folder_name, config, render=render, session=session
        )
    except Exception as exc:  # pylint: disable=broad-except
        logger.error("Clone of %s failed: %s", url, exc)
        return f"Error cloning website: {exc}"
    return (
        f"Website cloned successfully! Files saved in {result.job.destination}/ "
        "including index.html, styles.css, JavaScript files, and all assets."
    )

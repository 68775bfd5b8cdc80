"""Utility helpers for URL handling and filesystem-safe names."""

from __future__ import annotations

import re
from urllib.parse import unquote, urljoin, urlparse

SAFE_NAME_PATTERN = re.compile(r"[^A-Za-z0-9._-]+")
FETCHABLE_SCHEMES = {"http", "https"}


def is_data_uri(value: str) -> bool:
    """Return True for inline ``data:`` resources, which are never fetched."""
    return value.strip().lower().startswith("data:")


def resolve_url(base_url: str, reference: str) -> str:
    """Resolve a possibly relative reference against the page or sheet URL."""
    return urljoin(base_url, reference.strip())


def is_fetchable(url: str) -> bool:
    return urlparse(url).scheme.lower() in FETCHABLE_SCHEMES


def validate_source_url(url: str) -> str:
    """Return the hostname of an absolute http(s) URL or raise ValueError."""
    parsed = urlparse(url)
    if parsed.scheme.lower() not in FETCHABLE_SCHEMES or not parsed.hostname:
        raise ValueError(f"Invalid URL: {url!r}")
    return parsed.hostname


def default_folder_name(url: str) -> str:
    """Derive ``cloned-<host-with-dashes>`` from the source URL."""
    hostname = validate_source_url(url)
    return f"cloned-{hostname.replace('.', '-')}"


def safe_filename(text: str, max_len: int = 120) -> str:
    """Reduce a path segment to characters safe on disk and inside URLs."""
    text = SAFE_NAME_PATTERN.sub("-", text.strip())
    text = re.sub(r"-+", "-", text).strip("-.")
    return text[:max_len]


def url_basename(url: str) -> str:
    """Return the sanitized last path segment of a URL, or an empty string."""
    path = urlparse(url).path
    segment = unquote(path.rsplit("/", 1)[-1]) if path else ""
    return safe_filename(segment)

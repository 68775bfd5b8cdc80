"""Single-resource HTTP fetching with a spoofed browser identity."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import requests

from .config import SnapshotConfig
from .models import FetchResult, FetchStatus
from .utils import is_data_uri, is_fetchable

logger = logging.getLogger("page_snapshot")


def _declared_charset(content_type: str) -> Optional[str]:
    for part in content_type.split(";")[1:]:
        key, _, value = part.partition("=")
        if key.strip().lower() == "charset" and value.strip():
            return value.strip().strip("\"'")
    return None


class AssetFetcher:
    """Fetch remote resources one at a time without ever raising.

    Every call returns a :class:`FetchResult`. Failed results are also kept in
    :attr:`failures` so callers can inspect what went missing.
    """

    def __init__(
        self,
        config: SnapshotConfig,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = config.fetch_timeout
        self.headers: Dict[str, str] = {"User-Agent": config.user_agent}
        self._session = session or requests.Session()
        self.failures: List[FetchResult] = []

    def fetch(self, url: str) -> FetchResult:
        """Retrieve ``url`` and report ok, skipped or failed."""
        if is_data_uri(url) or not is_fetchable(url):
            logger.debug("Skipping non-fetchable reference %s", url[:80])
            return FetchResult(url=url, status=FetchStatus.SKIPPED)
        try:
            resp = self._session.get(url, timeout=self.timeout, headers=self.headers)
            resp.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Failed to fetch %s: %s", url, exc)
            result = FetchResult(url=url, status=FetchStatus.FAILED, error=str(exc))
            self.failures.append(result)
            return result

        content_type = resp.headers.get("Content-Type", "")
        logger.debug("Fetched %s (%d bytes)", url, len(resp.content))
        return FetchResult(
            url=url,
            status=FetchStatus.OK,
            body=resp.content,
            content_type=content_type,
            encoding=_declared_charset(content_type),
        )

    def close(self) -> None:
        self._session.close()

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple, Union

import pytest
import requests

from page_snapshot.config import SnapshotConfig
from page_snapshot.fetcher import AssetFetcher

PAGE_URL = "https://example.com/page"

Route = Union[bytes, str, Tuple[int, bytes, str]]


class FakeResponse:
    def __init__(self, url: str, status_code: int, body: bytes, content_type: str) -> None:
        self.url = url
        self.status_code = status_code
        self.content = body
        self.headers = {"Content-Type": content_type}

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error for url: {self.url}")


@dataclass
class FakeSession:
    """In-memory stand-in for ``requests.Session`` keyed by absolute URL."""

    routes: Dict[str, Route] = field(default_factory=dict)
    calls: List[str] = field(default_factory=list)
    last_kwargs: Dict[str, object] = field(default_factory=dict)
    closed: bool = False

    def get(self, url: str, **kwargs: object) -> FakeResponse:
        self.calls.append(url)
        self.last_kwargs = kwargs
        if url not in self.routes:
            raise requests.ConnectionError(f"Cannot connect to {url}")
        route = self.routes[url]
        if isinstance(route, tuple):
            status, body, content_type = route
        elif isinstance(route, str):
            status, body, content_type = 200, route.encode("utf-8"), "text/plain"
        else:
            status, body, content_type = 200, route, "application/octet-stream"
        return FakeResponse(url, status, body, content_type)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def config(tmp_path) -> SnapshotConfig:
    return SnapshotConfig(output_root=tmp_path)


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def fetcher(config: SnapshotConfig, session: FakeSession) -> AssetFetcher:
    return AssetFetcher(config, session=session)

"""Data models used throughout the snapshot pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional


@dataclass(frozen=True)
class CloneJob:
    """A single page-to-bundle request."""

    source_url: str
    destination: Path


class AssetKind(str, Enum):
    IMAGE = "image"
    BACKGROUND = "background"
    VECTOR = "vector"
    CSS_IMAGE = "css-image"
    SCRIPT = "script"
    STYLESHEET = "stylesheet"


@dataclass
class AssetReference:
    """Remote resource discovered in the document or the stylesheet."""

    kind: AssetKind
    original: str
    origin_url: str
    container: Any = None
    local_name: Optional[str] = None


class FetchStatus(str, Enum):
    OK = "ok"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class FetchResult:
    """Outcome of a single resource fetch; failures never raise."""

    url: str
    status: FetchStatus
    body: bytes = b""
    content_type: str = ""
    encoding: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is FetchStatus.OK

    @property
    def text(self) -> str:
        try:
            return self.body.decode(self.encoding or "utf-8", errors="replace")
        except LookupError:
            return self.body.decode("utf-8", errors="replace")


@dataclass
class CloneResult:
    """Summary of a completed clone job."""

    job: CloneJob
    files: List[str] = field(default_factory=list)
    failures: List[FetchResult] = field(default_factory=list)

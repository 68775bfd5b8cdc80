"""Stylesheet discovery and aggregation into a single local file."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from .config import STYLES_FILENAME, SnapshotConfig
from .document import append_stylesheet_link, ensure_head, inner_text, select_all
from .fetcher import AssetFetcher
from .utils import resolve_url

logger = logging.getLogger("page_snapshot")

STYLESHEET_LINK_SELECTOR = 'link[rel="stylesheet" i]'


@dataclass
class StyleChunk:
    """One stylesheet source and the URL its relative references resolve against."""

    base_url: str
    text: str
    origin: str = "inline"


@dataclass
class StyleSheetAggregate:
    """Ordered concatenation of external and inline CSS."""

    chunks: List[StyleChunk] = field(default_factory=list)

    def append(self, text: str, base_url: str, origin: str = "inline") -> None:
        self.chunks.append(StyleChunk(base_url=base_url, text=text, origin=origin))

    @property
    def text(self) -> str:
        return "".join(chunk.text + "\n" for chunk in self.chunks)


def is_font_service(url: str, hosts: Sequence[str]) -> bool:
    host = (urlparse(url).hostname or "").lower()
    return any(host == h or host.endswith("." + h) for h in hosts)


def partition_stylesheet_links(
    soup: BeautifulSoup,
    page_url: str,
    font_hosts: Sequence[str],
) -> Tuple[List[Tag], List[Tuple[Tag, str]]]:
    """Split ``<link rel=stylesheet>`` nodes into font-service and ordinary sheets.

    Ordinary sheets are returned with their absolute URL. Links without an
    ``href`` are ignored.
    """
    font_links: List[Tag] = []
    external: List[Tuple[Tag, str]] = []
    for link in select_all(soup, STYLESHEET_LINK_SELECTOR):
        href = (link.get("href") or "").strip()
        if not href:
            continue
        absolute = resolve_url(page_url, href)
        if is_font_service(absolute, font_hosts):
            font_links.append(link)
        else:
            external.append((link, absolute))
    return font_links, external


def resolve_styles(
    soup: BeautifulSoup,
    page_url: str,
    fetcher: AssetFetcher,
    config: SnapshotConfig,
) -> StyleSheetAggregate:
    """Collect every style source into one aggregate and relink the document.

    External sheets that fail to download are skipped. The head ends with the
    retained font-service links followed by a link to the local stylesheet.
    """
    font_links, external = partition_stylesheet_links(
        soup, page_url, config.font_service_hosts
    )

    for link, _ in external:
        link.decompose()
    for link in font_links:
        link.extract()

    inline_blocks = [inner_text(style) for style in soup.find_all("style")]

    aggregate = StyleSheetAggregate()
    for _, css_url in external:
        result = fetcher.fetch(css_url)
        if not result.ok:
            logger.warning("Failed to download CSS: %s", css_url)
            continue
        aggregate.append(result.text, base_url=css_url, origin=css_url)

    for block in inline_blocks:
        aggregate.append(block, base_url=page_url)

    head = ensure_head(soup)
    for link in font_links:
        head.append(link)
    append_stylesheet_link(soup, STYLES_FILENAME)

    logger.info(
        "Aggregated %d stylesheet(s) and %d inline block(s); kept %d font link(s)",
        len(aggregate.chunks) - len(inline_blocks),
        len(inline_blocks),
        len(font_links),
    )
    return aggregate

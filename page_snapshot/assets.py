"""Discovery, download and local rewriting of page resources."""

from __future__ import annotations

import itertools
import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple

from bs4 import BeautifulSoup, Tag
from filetype import guess

from .config import RESERVED_FILENAMES
from .document import remove_attributes
from .fetcher import AssetFetcher
from .models import AssetKind, AssetReference, FetchResult, FetchStatus
from .styles import StyleSheetAggregate
from .utils import is_data_uri, resolve_url, url_basename

logger = logging.getLogger("page_snapshot")

CSS_URL_PATTERN = re.compile(r"""url\(\s*(['"]?)(.*?)\1\s*\)""", re.IGNORECASE | re.DOTALL)
DECLARATION_PATTERN = re.compile(
    r"""([\w-]+)\s*:((?:url\([^)]*\)|"[^"]*"|'[^']*'|[^;])*)"""
)
BACKGROUND_PROPERTIES = {"background", "background-image"}

IMAGE_SOURCE_ATTRIBUTES = ("src", "data-src", "data-lazy", "data-original")
LAZY_ATTRIBUTES = ("data-src", "data-lazy", "data-original", "data-srcset")

DEFAULT_EXTENSIONS = {
    AssetKind.IMAGE: ".jpg",
    AssetKind.BACKGROUND: ".jpg",
    AssetKind.CSS_IMAGE: ".jpg",
    AssetKind.VECTOR: ".svg",
    AssetKind.SCRIPT: ".js",
    AssetKind.STYLESHEET: ".css",
}

FALLBACK_STEMS = {
    AssetKind.IMAGE: "image",
    AssetKind.BACKGROUND: "bg",
    AssetKind.CSS_IMAGE: "css-img",
    AssetKind.VECTOR: "svg",
    AssetKind.SCRIPT: "script",
    AssetKind.STYLESHEET: "stylesheet",
}

Span = Tuple[int, int, str]


def _is_reference(value: str) -> bool:
    """True when a raw URL value points at something worth downloading."""
    return bool(value) and not is_data_uri(value) and not value.startswith("#")


def sniff_extension(data: bytes) -> Optional[str]:
    kind = guess(data)
    if kind is None:
        return None
    ext = kind.extension.lower()
    return ".jpg" if ext == "jpeg" else f".{ext}"


def first_srcset_url(srcset: str) -> str:
    candidate = srcset.strip()
    if not candidate or is_data_uri(candidate):
        return ""
    # URLs may contain commas; only a trailing one separates candidates.
    first = candidate.split()[0]
    return first[:-1] if first.endswith(",") else first


def image_source(img: Tag) -> Optional[str]:
    """Pick the first non-empty, non-data source among the lazy-load variants."""
    for attr in IMAGE_SOURCE_ATTRIBUTES:
        value = (img.get(attr) or "").strip()
        if value and not is_data_uri(value):
            return value
    return first_srcset_url(img.get("data-srcset") or "") or None


def substitute_spans(text: str, spans: Iterable[Span]) -> str:
    """Replace ``(start, end, replacement)`` spans, leaving other text intact."""
    pieces: List[str] = []
    cursor = 0
    for start, end, replacement in sorted(spans):
        pieces.append(text[cursor:start])
        pieces.append(replacement)
        cursor = end
    pieces.append(text[cursor:])
    return "".join(pieces)


def background_url_spans(style: str) -> List[Span]:
    """Locate every ``url(...)`` inside background declarations of a style attribute."""
    found: List[Span] = []
    for declaration in DECLARATION_PATTERN.finditer(style):
        if declaration.group(1).lower() not in BACKGROUND_PROPERTIES:
            continue
        offset = declaration.start(2)
        for match in CSS_URL_PATTERN.finditer(declaration.group(2)):
            found.append((offset + match.start(2), offset + match.end(2), match.group(2)))
    return found


class NameRegistry:
    """Hands out unique local filenames within one destination directory."""

    def __init__(self, reserved: Iterable[str] = RESERVED_FILENAMES) -> None:
        self._by_url: Dict[str, str] = {}
        self._taken: Set[str] = {name.lower() for name in reserved}
        self._counter = itertools.count(1)

    def lookup(self, url: str) -> Optional[str]:
        return self._by_url.get(url)

    def next_token(self) -> int:
        return next(self._counter)

    def claim(self, url: str, preferred: str) -> str:
        stem, dot, suffix = preferred.rpartition(".")
        if not dot:
            stem, suffix = preferred, ""
        name = preferred
        attempt = 2
        while name.lower() in self._taken:
            name = f"{stem}-{attempt}.{suffix}" if suffix else f"{stem}-{attempt}"
            attempt += 1
        self._taken.add(name.lower())
        self._by_url[url] = name
        return name

    def release(self, url: str) -> None:
        name = self._by_url.pop(url, None)
        if name:
            self._taken.discard(name.lower())


class AssetRewriter:
    """Download every resource a page references and point it at a local copy.

    A failed download leaves the original reference untouched.
    """

    def __init__(
        self,
        page_url: str,
        destination: Path,
        fetcher: AssetFetcher,
        registry: Optional[NameRegistry] = None,
    ) -> None:
        self.page_url = page_url
        self.destination = destination
        self.fetcher = fetcher
        self.registry = registry or NameRegistry()
        self.saved: List[AssetReference] = []

    @property
    def saved_files(self) -> List[str]:
        return [ref.local_name for ref in self.saved if ref.local_name]

    def _choose_name(self, reference: AssetReference, result: FetchResult, token: Optional[int]) -> str:
        sniffed = sniff_extension(result.body)
        basename = url_basename(reference.origin_url)
        if basename:
            if "." not in basename and sniffed:
                basename += sniffed
            return basename
        if token is None:
            token = self.registry.next_token()
        stem = FALLBACK_STEMS[reference.kind]
        return f"{stem}-{token}{sniffed or DEFAULT_EXTENSIONS[reference.kind]}"

    def localize(self, reference: AssetReference, token: Optional[int] = None) -> Optional[str]:
        """Fetch ``reference`` and save it, returning the local filename or None."""
        known = self.registry.lookup(reference.origin_url)
        if known:
            reference.local_name = known
            return known

        result = self.fetcher.fetch(reference.origin_url)
        if not result.ok:
            if result.status is FetchStatus.FAILED:
                logger.warning(
                    "Failed to process %s: %s", reference.kind.value, reference.origin_url
                )
            return None

        name = self.registry.claim(
            reference.origin_url, self._choose_name(reference, result, token)
        )
        try:
            (self.destination / name).write_bytes(result.body)
        except OSError as exc:
            logger.warning("Failed to write asset %s: %s", name, exc)
            self.registry.release(reference.origin_url)
            return None
        reference.local_name = name
        self.saved.append(reference)
        logger.debug("Saved %s -> %s", reference.origin_url, name)
        return name

    def _reference(self, kind: AssetKind, raw: str, container=None, base_url: Optional[str] = None) -> AssetReference:
        return AssetReference(
            kind=kind,
            original=raw,
            origin_url=resolve_url(base_url or self.page_url, raw),
            container=container,
        )

    def rewrite_images(self, soup: BeautifulSoup) -> None:
        for index, img in enumerate(soup.find_all("img")):
            src = image_source(img)
            if not src:
                continue
            name = self.localize(self._reference(AssetKind.IMAGE, src, img), token=index)
            if name:
                img["src"] = name
                remove_attributes(img, LAZY_ATTRIBUTES)

    def rewrite_inline_backgrounds(self, soup: BeautifulSoup) -> None:
        for element in soup.find_all(style=True):
            style = element.get("style") or ""
            spans: List[Span] = []
            for start, end, raw in background_url_spans(style):
                if not _is_reference(raw.strip()):
                    continue
                name = self.localize(self._reference(AssetKind.BACKGROUND, raw, element))
                if name:
                    spans.append((start, end, name))
            if spans:
                element["style"] = substitute_spans(style, spans)

    def rewrite_vector_images(self, soup: BeautifulSoup) -> None:
        for image in soup.find_all("image"):
            href = (image.get("href") or image.get("xlink:href") or "").strip()
            if not href or is_data_uri(href):
                continue
            name = self.localize(self._reference(AssetKind.VECTOR, href, image))
            if name:
                image["href"] = name
                image["xlink:href"] = name

    def _rewrite_css_text(self, text: str, base_url: str) -> str:
        names: Dict[str, Optional[str]] = {}
        for match in CSS_URL_PATTERN.finditer(text):
            raw = match.group(2).strip()
            if raw in names or not _is_reference(raw):
                continue
            names[raw] = self.localize(
                self._reference(AssetKind.CSS_IMAGE, raw, base_url=base_url)
            )

        def _swap(match: "re.Match[str]") -> str:
            name = names.get(match.group(2).strip())
            if not name:
                return match.group(0)
            whole = match.group(0)
            start = match.start(2) - match.start(0)
            end = match.end(2) - match.start(0)
            return whole[:start] + name + whole[end:]

        return CSS_URL_PATTERN.sub(_swap, text)

    def rewrite_stylesheet(self, aggregate: StyleSheetAggregate) -> None:
        """Localize every ``url(...)`` in the aggregate, all occurrences per URL."""
        for chunk in aggregate.chunks:
            chunk.text = self._rewrite_css_text(chunk.text, chunk.base_url)

    def rewrite_scripts(self, soup: BeautifulSoup) -> None:
        for index, script in enumerate(soup.find_all("script", src=True)):
            src = (script.get("src") or "").strip()
            if not src or is_data_uri(src):
                continue
            name = self.localize(self._reference(AssetKind.SCRIPT, src, script), token=index)
            if name:
                script["src"] = name

    def rewrite_all(self, soup: BeautifulSoup, aggregate: StyleSheetAggregate) -> List[str]:
        self.rewrite_images(soup)
        self.rewrite_inline_backgrounds(soup)
        self.rewrite_vector_images(soup)
        self.rewrite_stylesheet(aggregate)
        self.rewrite_scripts(soup)
        logger.info(
            "Downloaded %d asset(s); %d fetch failure(s)",
            len(self.saved),
            len(self.fetcher.failures),
        )
        return self.saved_files

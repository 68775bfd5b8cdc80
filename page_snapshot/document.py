"""Parsing, querying and mutating the rendered document."""

from __future__ import annotations

from typing import Iterable, List

from bs4 import BeautifulSoup, NavigableString, Tag


def parse_document(html: str) -> BeautifulSoup:
    """Parse serialized DOM into a mutable tree."""
    return BeautifulSoup(html, "html.parser")


def select_all(soup: BeautifulSoup, selector: str) -> List[Tag]:
    """Return every node matching ``selector`` in document order."""
    return list(soup.select(selector))


def ensure_head(soup: BeautifulSoup) -> Tag:
    """Return the ``<head>`` element, creating one when the page lacks it."""
    head = soup.find("head")
    if head is not None:
        return head
    head = soup.new_tag("head")
    html = soup.find("html")
    if html is not None:
        html.insert(0, head)
    else:
        soup.insert(0, head)
    return head


def append_stylesheet_link(soup: BeautifulSoup, href: str) -> Tag:
    link = soup.new_tag("link", attrs={"rel": "stylesheet", "href": href})
    ensure_head(soup).append(link)
    return link


def remove_attributes(tag: Tag, names: Iterable[str]) -> None:
    for name in names:
        if name in tag.attrs:
            del tag[name]


def inner_text(tag: Tag) -> str:
    """Return the raw text content of an element such as ``<style>``."""
    return "".join(str(child) for child in tag.contents if isinstance(child, NavigableString))

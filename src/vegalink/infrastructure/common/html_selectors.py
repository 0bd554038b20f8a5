"""CSS-selector-based HTML extraction with fallback chains.

Thin helpers over BeautifulSoup shared by every host resolver.
``extract_attr`` accepts a primary selector and optional
*fallback_selectors*: the first selector that yields at least one match
wins, which keeps resolvers working across minor layout changes
(renamed CSS class, extra wrapper ``<div>``, ...).
"""

from __future__ import annotations

from urllib.parse import urlsplit

from bs4 import BeautifulSoup, Tag


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML string into a BeautifulSoup tree (lxml parser)."""
    return BeautifulSoup(html, "lxml")


def joined_text(root: BeautifulSoup | Tag, selector: str) -> str:
    """Concatenate the text of every element matching *selector*."""
    return " ".join(
        text for el in root.select(selector) if (text := el.get_text(" ", strip=True))
    )


def page_text(root: BeautifulSoup | Tag, limit: int | None = None) -> str:
    """Visible text of ``<body>`` (or the whole tree), optionally truncated."""
    body = root.find("body") if isinstance(root, BeautifulSoup) else root
    text = (body or root).get_text(" ", strip=True)
    return text[:limit] if limit is not None else text


def extract_attr(
    element: Tag,
    selector: str,
    attr: str,
    *fallback_selectors: str,
    default: str = "",
) -> str:
    """Extract an HTML attribute from the first matching child element.

    With ``selector=""`` the attribute is read from *element* itself.
    """
    if selector == "":
        val = element.get(attr)
        return str(val) if val else default

    for sel in (selector, *fallback_selectors):
        match = element.select_one(sel)
        if match:
            val = match.get(attr)
            if val:
                return str(val)
    return default


def origin_of(url: str) -> str:
    """Return ``scheme://host[:port]`` of *url* (empty string if unparsable)."""
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return ""
    return f"{parts.scheme}://{parts.netloc}"

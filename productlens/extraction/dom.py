# productlens/extraction/dom.py

"""Queryable-document helpers over BeautifulSoup.

Extraction code only touches the page through these functions: select by
CSS selector, read an element's text and tag name, read JSON-LD payloads
and ``<meta>`` triples, and read the whole document's visible text.
Selector syntax errors and malformed JSON are absorbed here and turn into
empty results.
"""

import json
import logging
from collections.abc import Iterator
from typing import Any

from bs4 import BeautifulSoup, Comment, Tag
from soupsieve import SelectorSyntaxError

from productlens.extraction.text_normalizer import normalize_text

logger = logging.getLogger("productlens.dom")

# Content of these tags is never rendered
_INVISIBLE_TAGS: frozenset[str] = frozenset({
    "script", "style", "noscript", "template", "head", "title",
})


def parse_html(html: str) -> BeautifulSoup:
    """Parse raw HTML into a queryable document."""
    return BeautifulSoup(html, "lxml")


def safe_select(root: BeautifulSoup | Tag, selector: str) -> list[Tag]:
    """Run a CSS selector, returning ``[]`` if it cannot be compiled."""
    try:
        return list(root.select(selector))
    except (SelectorSyntaxError, NotImplementedError, ValueError) as exc:
        logger.debug("Skipping invalid selector %r: %s", selector, exc)
        return []


def safe_select_one(
    root: BeautifulSoup | Tag, selector: str,
) -> Tag | None:
    """First element matching ``selector``, or ``None``."""
    matches = safe_select(root, selector)
    return matches[0] if matches else None


def element_text(element: Tag) -> str:
    """Whitespace-normalised text rendered by an element."""
    return normalize_text(element.get_text(" "))


def element_tag(element: Tag) -> str | None:
    """Lowercase tag name of an element."""
    return element.name.lower() if element.name else None


def json_ld_blocks(soup: BeautifulSoup) -> list[Any]:
    """Parse every ``application/ld+json`` script on the page.

    Scripts whose body is not valid JSON are skipped.
    """
    blocks: list[Any] = []
    for script in safe_select(
        soup, 'script[type="application/ld+json"]'
    ):
        raw = script.string or script.get_text()
        if not raw or not raw.strip():
            continue
        try:
            blocks.append(json.loads(raw))
        except (json.JSONDecodeError, TypeError) as exc:
            logger.debug("Skipping malformed JSON-LD block: %s", exc)
    return blocks


def _is_product_type(value: Any) -> bool:
    """True if an ``@type`` value names a schema.org Product."""
    if isinstance(value, str):
        return value == "Product"
    if isinstance(value, list):
        return "Product" in value
    return False


def iter_json_ld_products(payload: Any) -> Iterator[dict[str, Any]]:
    """Yield every Product-typed object in a JSON-LD payload.

    Arrays and ``@graph`` containers are walked recursively.
    """
    if isinstance(payload, list):
        for item in payload:
            yield from iter_json_ld_products(item)
        return
    if not isinstance(payload, dict):
        return
    if _is_product_type(payload.get("@type")):
        yield payload
    graph = payload.get("@graph")
    if isinstance(graph, list):
        yield from iter_json_ld_products(graph)


def meta_tags(soup: BeautifulSoup) -> list[tuple[str, str]]:
    """Return ``(name-or-property, content)`` for every ``<meta>`` tag."""
    result: list[tuple[str, str]] = []
    for meta in soup.find_all("meta"):
        if not isinstance(meta, Tag):
            continue
        key = meta.get("property") or meta.get("name")
        content = meta.get("content")
        if not key or content is None:
            continue
        result.append((str(key).strip(), str(content)))
    return result


def meta_content(soup: BeautifulSoup, key: str) -> str | None:
    """Content of the first ``<meta>`` whose name or property is ``key``."""
    for name, content in meta_tags(soup):
        if name.lower() == key.lower():
            text = normalize_text(content)
            if text:
                return text
    return None


def visible_text(soup: BeautifulSoup) -> str:
    """Text the page renders, one line per text node.

    Script, style and other non-rendered content is ignored, as are
    HTML comments.
    """
    root = soup.body or soup
    lines: list[str] = []
    for string in root.find_all(string=True):
        if isinstance(string, Comment):
            continue
        if any(
            parent.name in _INVISIBLE_TAGS for parent in string.parents
        ):
            continue
        text = normalize_text(str(string))
        if text:
            lines.append(text)
    return "\n".join(lines)

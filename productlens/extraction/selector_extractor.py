# productlens/extraction/selector_extractor.py

"""Candidate fragment extraction from a product page.

Three independent strategies feed the scorer:

1. Site patterns: common e-commerce class/attribute conventions, one
   selector list per category.
2. Structured data: JSON-LD ``Product`` objects, social/description meta
   tags and semantic containers.
3. Fallback: generic text-bearing elements, skipping text already
   collected earlier in the same pass.

The order of the strategies carries no priority; ranking happens in the
relevance scorer.
"""

import logging
from typing import Any

from bs4 import BeautifulSoup

from productlens.config.extraction_config import (
    DEFAULT_EXTRACTION_CONFIG,
    ExtractionConfig,
)
from productlens.extraction.dom import (
    element_tag,
    element_text,
    iter_json_ld_products,
    json_ld_blocks,
    meta_tags,
    safe_select,
)
from productlens.extraction.text_normalizer import (
    normalize_block,
    normalize_text,
)
from productlens.models.fragment import Category, ContentFragment

logger = logging.getLogger("productlens.extractor")

# Strategy-intrinsic confidence priors
SITE_PATTERN_CONFIDENCE = 0.9
JSON_LD_CONFIDENCE = 0.95
META_CONFIDENCE = 0.7
SEMANTIC_CONFIDENCE = 0.6
FALLBACK_CONFIDENCE = 0.3

SITE_PATTERNS: dict[Category, list[str]] = {
    Category.TITLE: [
        '[class*="product-title"]',
        '[class*="product-name"]',
        '[class*="productTitle"]',
        '[class*="product_title"]',
        '[id*="productTitle"]',
        '[id*="product-title"]',
        '[itemprop="name"]',
        '[data-testid*="product-title"]',
        'h1[class*="title"]',
    ],
    Category.PRICE: [
        '[class*="price"]',
        '[class*="Price"]',
        '[id*="price"]',
        '[itemprop="price"]',
        '[data-testid*="price"]',
        '[class*="cost"]',
    ],
    Category.DESCRIPTION: [
        '[class*="description"]',
        '[id*="description"]',
        '[itemprop="description"]',
        '[class*="product-details"]',
        '[class*="product-info"]',
        '[class*="product-summary"]',
        '[data-testid*="description"]',
    ],
    Category.REVIEWS: [
        '[class*="review"]',
        '[id*="review"]',
        '[class*="rating"]',
        '[itemprop="review"]',
        '[itemprop="aggregateRating"]',
        '[data-testid*="review"]',
    ],
    Category.FEATURES: [
        '[class*="feature"]',
        '[id*="feature"]',
        '[class*="highlight"]',
        '[class*="benefit"]',
        '[class*="bullet"]',
    ],
    Category.SPECS: [
        '[class*="spec"]',
        '[id*="spec"]',
        '[class*="technical"]',
        '[class*="attribute"]',
        'table[class*="detail"]',
    ],
}

SEMANTIC_SELECTORS: list[str] = [
    "article",
    "main",
    '[role="main"]',
    'section[class*="product"]',
    '[class*="product-detail"]',
    '[class*="product-section"]',
]

FALLBACK_SELECTOR = "p, h1, h2, h3, h4, h5, h6, li, td, span"

_META_PREFIXES: tuple[str, ...] = ("og:", "twitter:")


# ── Site-pattern strategy ────────────────────────────────


def extract_site_patterns(
    soup: BeautifulSoup,
    config: ExtractionConfig = DEFAULT_EXTRACTION_CONFIG,
) -> list[ContentFragment]:
    """Collect fragments matched by the per-category site selectors.

    An element matched by several selectors of the same category is
    emitted once.
    """
    fragments: list[ContentFragment] = []
    for category, selectors in SITE_PATTERNS.items():
        seen: set[int] = set()
        for selector in selectors:
            for element in safe_select(soup, selector):
                if id(element) in seen:
                    continue
                seen.add(id(element))
                text = element_text(element)
                if len(text) <= config.min_fragment_length:
                    continue
                fragments.append(
                    ContentFragment(
                        text=text,
                        category=category,
                        source=f"site:{category.value}",
                        element=element_tag(element),
                        confidence=SITE_PATTERN_CONFIDENCE,
                    )
                )
    logger.debug("Site patterns produced %d fragments", len(fragments))
    return fragments


# ── Structured-data strategy ─────────────────────────────


def _offer(product: dict[str, Any]) -> dict[str, Any]:
    """First offer of a Product, whether ``offers`` is a dict or list."""
    offers = product.get("offers")
    if isinstance(offers, list):
        offers = offers[0] if offers else None
    return offers if isinstance(offers, dict) else {}


def _brand_name(product: dict[str, Any]) -> str:
    brand = product.get("brand")
    if isinstance(brand, dict):
        brand = brand.get("name")
    return normalize_text(str(brand)) if brand else ""


def json_ld_product_text(product: dict[str, Any]) -> str:
    """Render a JSON-LD Product as a multi-line text block.

    Only fields present on the object produce a line.
    """
    lines: list[str] = []

    name = product.get("name")
    if name:
        lines.append(f"Product: {normalize_text(str(name))}")

    description = product.get("description")
    if description:
        lines.append(f"Description: {normalize_text(str(description))}")

    offer = _offer(product)
    price = offer.get("price", offer.get("lowPrice"))
    if price not in (None, ""):
        currency = normalize_text(str(offer.get("priceCurrency") or ""))
        lines.append(f"Price: {price} {currency}".rstrip())

    brand = _brand_name(product)
    if brand:
        lines.append(f"Brand: {brand}")

    rating = product.get("aggregateRating")
    if isinstance(rating, dict):
        value = rating.get("ratingValue")
        if value not in (None, ""):
            lines.append(f"Rating: {value}")
        count = rating.get("reviewCount", rating.get("ratingCount"))
        if count not in (None, ""):
            lines.append(f"Reviews: {count}")

    return "\n".join(lines)


def _extract_json_ld(soup: BeautifulSoup) -> list[ContentFragment]:
    fragments: list[ContentFragment] = []
    for payload in json_ld_blocks(soup):
        for product in iter_json_ld_products(payload):
            text = normalize_block(json_ld_product_text(product))
            if not text:
                continue
            fragments.append(
                ContentFragment(
                    text=text,
                    category=Category.STRUCTURED_DATA,
                    source="json-ld",
                    element="script",
                    confidence=JSON_LD_CONFIDENCE,
                )
            )
    return fragments


def _extract_meta(
    soup: BeautifulSoup, config: ExtractionConfig,
) -> list[ContentFragment]:
    fragments: list[ContentFragment] = []
    for key, content in meta_tags(soup):
        lowered = key.lower()
        if not (
            lowered.startswith(_META_PREFIXES) or lowered == "description"
        ):
            continue
        text = normalize_text(content)
        if len(text) <= config.min_meta_length:
            continue
        fragments.append(
            ContentFragment(
                text=text,
                category=Category.META,
                source=f"meta:{lowered}",
                element="meta",
                confidence=META_CONFIDENCE,
            )
        )
    return fragments


def _extract_semantic(
    soup: BeautifulSoup, config: ExtractionConfig,
) -> list[ContentFragment]:
    fragments: list[ContentFragment] = []
    seen: set[int] = set()
    for selector in SEMANTIC_SELECTORS:
        for element in safe_select(soup, selector):
            if id(element) in seen:
                continue
            seen.add(id(element))
            text = element_text(element)
            if not (
                config.min_semantic_length
                < len(text)
                < config.max_semantic_length
            ):
                continue
            fragments.append(
                ContentFragment(
                    text=text,
                    category=Category.SEMANTIC,
                    source=f"semantic:{selector}",
                    element=element_tag(element),
                    confidence=SEMANTIC_CONFIDENCE,
                )
            )
    return fragments


def extract_structured_data(
    soup: BeautifulSoup,
    config: ExtractionConfig = DEFAULT_EXTRACTION_CONFIG,
) -> list[ContentFragment]:
    """Collect JSON-LD, meta tag and semantic-container fragments."""
    fragments = (
        _extract_json_ld(soup)
        + _extract_meta(soup, config)
        + _extract_semantic(soup, config)
    )
    logger.debug("Structured data produced %d fragments", len(fragments))
    return fragments


# ── Fallback strategy ────────────────────────────────────


def _already_collected(
    text: str,
    collected: list[ContentFragment],
    prefix_length: int,
) -> bool:
    """True if ``text`` repeats, or is prefix-contained in, a fragment."""
    prefix = text[:prefix_length] if len(text) >= prefix_length else None
    for fragment in collected:
        if fragment.text == text:
            return True
        if prefix is not None and prefix in fragment.text:
            return True
    return False


def extract_fallback(
    soup: BeautifulSoup,
    collected: list[ContentFragment] | None = None,
    config: ExtractionConfig = DEFAULT_EXTRACTION_CONFIG,
) -> list[ContentFragment]:
    """Collect generic text elements not already covered this pass.

    ``collected`` holds the fragments gathered so far by the other
    strategies; fallback fragments are checked against it and against
    each other.
    """
    pool: list[ContentFragment] = list(collected or [])
    fragments: list[ContentFragment] = []
    for element in safe_select(soup, FALLBACK_SELECTOR):
        text = element_text(element)
        if not (
            config.min_fallback_length
            < len(text)
            < config.max_fallback_length
        ):
            continue
        if _already_collected(text, pool, config.fallback_prefix_length):
            continue
        fragment = ContentFragment(
            text=text,
            category=Category.GENERAL,
            source="fallback",
            element=element_tag(element),
            confidence=FALLBACK_CONFIDENCE,
        )
        fragments.append(fragment)
        pool.append(fragment)
    logger.debug("Fallback produced %d fragments", len(fragments))
    return fragments


# ── Combined pass ────────────────────────────────────────


def extract_fragments(
    soup: BeautifulSoup,
    config: ExtractionConfig = DEFAULT_EXTRACTION_CONFIG,
) -> list[ContentFragment]:
    """Run all three strategies and concatenate their fragments."""
    fragments: list[ContentFragment] = []
    fragments.extend(extract_site_patterns(soup, config))
    fragments.extend(extract_structured_data(soup, config))
    fragments.extend(extract_fallback(soup, fragments, config))
    logger.info("Extracted %d candidate fragments", len(fragments))
    return fragments

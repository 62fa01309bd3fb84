# productlens/extraction/field_parser.py

"""Structured product field parsing from heterogeneous markup.

Every field follows the same fallback chain and stops at the first
strategy that yields a value:

1. JSON-LD ``Product`` objects (first script that parses wins)
2. ``og:title`` meta (title only)
3. common CSS selectors for the field
4. a regex scan of the page's visible text

Each extractor returns ``None`` on a total miss instead of raising.
"""

import logging
import re
import time
from collections.abc import Callable
from typing import Any, TypeVar

from bs4 import BeautifulSoup, Tag

from productlens.extraction.dom import (
    element_text,
    iter_json_ld_products,
    json_ld_blocks,
    meta_content,
    safe_select_one,
    visible_text,
)
from productlens.extraction.text_normalizer import normalize_text
from productlens.models.product import ProductRecord

logger = logging.getLogger("productlens.field_parser")

T = TypeVar("T")

DEFAULT_CURRENCY = "USD"
MAX_PRICE = 10_000_000.0
MAX_RATING = 5.0

_NUMBER = r"(\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?)"
_SYMBOLS = "$€£¥₹"

_PRICE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(rf"[{_SYMBOLS}]\s?{_NUMBER}"),
    re.compile(rf"{_NUMBER}\s?[{_SYMBOLS}]"),
    re.compile(
        rf"\b(?:price|cost)\s*:\s*[{_SYMBOLS}]?\s?{_NUMBER}",
        re.IGNORECASE,
    ),
)

_RATING_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"(\d+(?:\.\d+)?)\s*out\s+of\s+5\b", re.IGNORECASE),
    re.compile(r"(\d+(?:\.\d+)?)\s*stars?\b", re.IGNORECASE),
    re.compile(r"\brating\s*:?\s*(\d+(?:\.\d+)?)", re.IGNORECASE),
)

_REVIEW_COUNT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\((\d[\d,]*)\s*reviews?\)", re.IGNORECASE),
    re.compile(r"(\d[\d,]*)\s*(?:reviews?|ratings?)\b", re.IGNORECASE),
)

# A lone number, optionally tagged with a currency code
_BARE_AMOUNT = re.compile(
    rf"(?:[A-Za-z]{{3}}\s?)?{_NUMBER}(?:\s?[A-Za-z]{{3}})?"
)
_BARE_RATING = re.compile(r"\d+(?:\.\d+)?")

# Checked in this order; the first symbol present wins
CURRENCY_SYMBOLS: tuple[tuple[str, str], ...] = (
    ("$", "USD"),
    ("€", "EUR"),
    ("£", "GBP"),
    ("¥", "JPY"),
    ("₹", "INR"),
)

TITLE_SELECTORS: list[str] = [
    "#productTitle",
    'h1[class*="product-title"]',
    '[class*="product-title"]',
    '[class*="product-name"]',
    'h1[itemprop="name"]',
    '[itemprop="name"]',
    'h1[class*="title"]',
    "h1",
]

PRICE_SELECTORS: list[str] = [
    '[itemprop="price"]',
    "#priceblock_ourprice",
    ".a-price .a-offscreen",
    '[data-testid*="price"]',
    '[class*="product-price"]',
    '[class*="sale-price"]',
    ".price",
    '[class*="price"]',
]

CURRENCY_SELECTORS: list[str] = [
    '[itemprop="priceCurrency"]',
    'meta[property="product:price:currency"]',
    'meta[property="og:price:currency"]',
]

RATING_SELECTORS: list[str] = [
    '[itemprop="ratingValue"]',
    '[class*="rating-value"]',
    '[class*="average-rating"]',
    '[data-testid*="rating"]',
    '[class*="rating"]',
]

REVIEW_COUNT_SELECTORS: list[str] = [
    '[itemprop="reviewCount"]',
    '[itemprop="ratingCount"]',
    "#acrCustomerReviewText",
    '[class*="review-count"]',
    '[class*="reviewCount"]',
    '[data-testid*="review-count"]',
]


# ── Value parsers ────────────────────────────────────────


def _to_float(raw: str) -> float | None:
    try:
        return float(raw.replace(",", ""))
    except ValueError:
        return None


def parse_price_value(value: Any) -> float | None:
    """Parse a price from a number or a string such as ``"1,299.00"``."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        price = float(value)
    else:
        match = re.search(r"\d[\d,]*(?:\.\d+)?", str(value))
        if not match:
            return None
        price = _to_float(match.group(0))
        if price is None:
            return None
    return price if 0 < price < MAX_PRICE else None


def parse_rating_value(value: Any) -> float | None:
    """Parse a rating in [0, 5] from a number or its leading number."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        rating = float(value)
    else:
        match = re.search(r"\d+(?:\.\d+)?", str(value))
        if not match:
            return None
        rating = float(match.group(0))
    return rating if 0 <= rating <= MAX_RATING else None


def parse_count_value(value: Any) -> int | None:
    """Parse a positive integer count such as ``"1,234"``."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        count = int(value)
    else:
        match = re.search(r"\d[\d,]*", str(value))
        if not match:
            return None
        count = int(match.group(0).replace(",", ""))
    return count if count > 0 else None


def _ordered_matches(
    patterns: tuple[re.Pattern[str], ...], text: str,
) -> list[re.Match[str]]:
    """Matches of every pattern, in order of position in ``text``."""
    matches = [
        (match.start(), index, match)
        for index, pattern in enumerate(patterns)
        for match in pattern.finditer(text)
    ]
    matches.sort(key=lambda item: (item[0], item[1]))
    return [match for _, _, match in matches]


def parse_price_text(text: str) -> float | None:
    """First price in free text with a value in (0, 10,000,000).

    ``"$1,234.56"`` gives ``1234.56``; ``"price: $50"`` gives ``50.0``.
    The earliest match wins regardless of which pattern found it.
    """
    for match in _ordered_matches(_PRICE_PATTERNS, text):
        price = _to_float(match.group(1))
        if price is not None and 0 < price < MAX_PRICE:
            return price
    return None


def parse_rating_text(text: str) -> float | None:
    """First ``X out of 5`` / ``X stars`` / ``rating: X`` in [0, 5]."""
    for match in _ordered_matches(_RATING_PATTERNS, text):
        rating = float(match.group(1))
        if 0 <= rating <= MAX_RATING:
            return rating
    return None


def parse_review_count_text(text: str) -> int | None:
    """First ``(N reviews)`` or ``N reviews|ratings`` with N > 0."""
    for match in _ordered_matches(_REVIEW_COUNT_PATTERNS, text):
        count = int(match.group(1).replace(",", ""))
        if count > 0:
            return count
    return None


def parse_price_field(text: str) -> float | None:
    """Price shown by a price element.

    A bare amount (``"49.99"``, ``"EUR 49.99"``) is read directly; any
    other text goes through :func:`parse_price_text` so that discounts
    or unit counts printed before the price are skipped.
    """
    if _BARE_AMOUNT.fullmatch(text.strip()):
        return parse_price_value(text)
    return parse_price_text(text)


def parse_rating_field(text: str) -> float | None:
    """Rating shown by a rating element; bare numbers are read directly."""
    if _BARE_RATING.fullmatch(text.strip()):
        return parse_rating_value(text)
    return parse_rating_text(text)


def parse_currency_code(value: Any) -> str | None:
    """Uppercase three-letter currency code, or ``None``."""
    if not value:
        return None
    code = normalize_text(str(value)).upper()
    return code if re.fullmatch(r"[A-Z]{3}", code) else None


def detect_currency_symbol(text: str) -> str | None:
    """ISO code of the first known currency symbol present in ``text``."""
    for symbol, code in CURRENCY_SYMBOLS:
        if symbol in text:
            return code
    return None


# ── Parser ───────────────────────────────────────────────


def _content_attr(element: Tag) -> str | None:
    content = element.get("content")
    if content:
        return normalize_text(str(content))
    return None


class StructuredFieldParser:
    """Derive title, price, currency, rating and review count."""

    # ── JSON-LD access ───────────────────────────────────

    @staticmethod
    def _from_json_ld(
        soup: BeautifulSoup,
        reader: Callable[[dict[str, Any]], T | None],
    ) -> T | None:
        """First non-``None`` value ``reader`` yields from a JSON-LD Product."""
        for payload in json_ld_blocks(soup):
            for product in iter_json_ld_products(payload):
                try:
                    value = reader(product)
                except (AttributeError, TypeError, ValueError) as exc:
                    logger.debug("Unreadable JSON-LD product field: %s", exc)
                    continue
                if value is not None:
                    return value
        return None

    @staticmethod
    def _offer(product: dict[str, Any]) -> dict[str, Any]:
        offers = product.get("offers")
        if isinstance(offers, list):
            offers = offers[0] if offers else None
        return offers if isinstance(offers, dict) else {}

    @staticmethod
    def _aggregate_rating(product: dict[str, Any]) -> dict[str, Any]:
        rating = product.get("aggregateRating")
        return rating if isinstance(rating, dict) else {}

    @staticmethod
    def _name(product: dict[str, Any]) -> str | None:
        name = product.get("name")
        if not name:
            return None
        return normalize_text(str(name)) or None

    @staticmethod
    def _currency_code(product: dict[str, Any]) -> str | None:
        return parse_currency_code(
            StructuredFieldParser._offer(product).get("priceCurrency")
        )

    @staticmethod
    def _review_count(product: dict[str, Any]) -> int | None:
        rating = StructuredFieldParser._aggregate_rating(product)
        return parse_count_value(
            rating.get("reviewCount", rating.get("ratingCount"))
        )

    @staticmethod
    def _from_selectors(
        soup: BeautifulSoup,
        selectors: list[str],
        parse: Callable[[str], T | None],
        parse_content: Callable[[str], T | None] | None = None,
    ) -> T | None:
        """Parse the first matching element of each selector in turn.

        A ``content`` attribute is machine-readable and goes through
        ``parse_content`` (default ``parse``); rendered text goes
        through ``parse``.
        """
        for selector in selectors:
            element = safe_select_one(soup, selector)
            if element is None:
                continue
            content = _content_attr(element)
            if content is not None:
                value = (parse_content or parse)(content)
            else:
                value = parse(element_text(element))
            if value is not None:
                return value
        return None

    # ── Field extractors ─────────────────────────────────

    @staticmethod
    def extract_title(soup: BeautifulSoup) -> str | None:
        """Product name: JSON-LD, ``og:title``, selectors, ``<title>``."""
        title = StructuredFieldParser._from_json_ld(
            soup, StructuredFieldParser._name
        )
        if title:
            return title

        title = meta_content(soup, "og:title")
        if title:
            return title

        title = StructuredFieldParser._from_selectors(
            soup, TITLE_SELECTORS, lambda text: text or None
        )
        if title:
            return title

        if soup.title and soup.title.string:
            return normalize_text(soup.title.string) or None
        return None

    @staticmethod
    def extract_price(
        soup: BeautifulSoup, page_text: str | None = None,
    ) -> float | None:
        """Offer price: JSON-LD, selectors, then free text."""
        price = StructuredFieldParser._from_json_ld(
            soup,
            lambda p: parse_price_value(
                StructuredFieldParser._offer(p).get("price")
            ),
        )
        if price is not None:
            return price

        price = StructuredFieldParser._from_selectors(
            soup, PRICE_SELECTORS, parse_price_field, parse_price_value
        )
        if price is not None:
            return price

        text = page_text if page_text is not None else visible_text(soup)
        return parse_price_text(text)

    @staticmethod
    def extract_currency(
        soup: BeautifulSoup, page_text: str | None = None,
    ) -> str:
        """ISO currency code; ``USD`` when nothing points elsewhere."""
        currency = StructuredFieldParser._from_json_ld(
            soup, StructuredFieldParser._currency_code
        )
        if currency:
            return currency

        currency = StructuredFieldParser._from_selectors(
            soup, CURRENCY_SELECTORS, parse_currency_code
        )
        if currency:
            return currency

        text = page_text if page_text is not None else visible_text(soup)
        return detect_currency_symbol(text) or DEFAULT_CURRENCY

    @staticmethod
    def extract_rating(
        soup: BeautifulSoup, page_text: str | None = None,
    ) -> float | None:
        """Average rating in [0, 5]: JSON-LD, selectors, free text."""
        rating = StructuredFieldParser._from_json_ld(
            soup,
            lambda p: parse_rating_value(
                StructuredFieldParser._aggregate_rating(p).get("ratingValue")
            ),
        )
        if rating is not None:
            return rating

        rating = StructuredFieldParser._from_selectors(
            soup, RATING_SELECTORS, parse_rating_field, parse_rating_value
        )
        if rating is not None:
            return rating

        text = page_text if page_text is not None else visible_text(soup)
        return parse_rating_text(text)

    @staticmethod
    def extract_review_count(
        soup: BeautifulSoup, page_text: str | None = None,
    ) -> int | None:
        """Number of reviews: JSON-LD, selectors, free text."""
        count = StructuredFieldParser._from_json_ld(
            soup, StructuredFieldParser._review_count
        )
        if count is not None:
            return count

        count = StructuredFieldParser._from_selectors(
            soup, REVIEW_COUNT_SELECTORS, parse_count_value
        )
        if count is not None:
            return count

        text = page_text if page_text is not None else visible_text(soup)
        return parse_review_count_text(text)

    # ── Record assembly ──────────────────────────────────

    @staticmethod
    def parse_record(
        soup: BeautifulSoup,
        url: str,
        timestamp: int | None = None,
    ) -> ProductRecord:
        """Build a :class:`ProductRecord` snapshot for ``url``."""
        page_text = visible_text(soup)
        record = ProductRecord(
            url=url,
            title=StructuredFieldParser.extract_title(soup),
            price=StructuredFieldParser.extract_price(soup, page_text),
            rating=StructuredFieldParser.extract_rating(soup, page_text),
            review_count=StructuredFieldParser.extract_review_count(
                soup, page_text
            ),
            currency=StructuredFieldParser.extract_currency(
                soup, page_text
            ),
            timestamp=(
                timestamp
                if timestamp is not None
                else int(time.time() * 1000)
            ),
        )
        logger.info(
            "Parsed record for %s (price=%s %s, rating=%s, reviews=%s)",
            url or "<unknown>",
            record.price,
            record.currency,
            record.rating,
            record.review_count,
        )
        return record

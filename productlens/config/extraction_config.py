# productlens/config/extraction_config.py

"""Immutable extraction policy: size limits, boost tables and penalties.

One :class:`ExtractionConfig` instance is passed explicitly into every
extraction, scoring and packing function.  ``DEFAULT_EXTRACTION_CONFIG``
holds the reference policy; override fields with
:func:`dataclasses.replace` rather than mutating anything.
"""

from dataclasses import dataclass, field

from productlens.models.fragment import Category

# Category priors applied as the first multiplicative scoring step
_CATEGORY_PRIORS: dict[Category, float] = {
    Category.TITLE: 3.0,
    Category.PRICE: 2.5,
    Category.STRUCTURED_DATA: 2.2,
    Category.DESCRIPTION: 2.0,
    Category.REVIEWS: 1.8,
    Category.FEATURES: 1.5,
    Category.META: 1.4,
    Category.SPECS: 1.3,
    Category.SEMANTIC: 1.1,
    Category.GENERAL: 1.0,
}

# Keyword families: name -> case-insensitive regex
_KEYWORD_PATTERNS: dict[str, str] = {
    "price": r"[$€£¥₹]\s?\d|\d+[.,]\d{2}\b|\b(?:price|cost|sale|discount|deal|save)\b",
    "product": r"\b(?:product|item|model|brand|sku|edition|version)\b",
    "review": r"\b(?:reviews?|ratings?|stars?|customers?|verified|recommend)\b",
    "feature": r"\b(?:features?|benefits?|includes?|designed|technology|performance)\b",
    "shipping": r"\b(?:shipping|delivery|ships|dispatch(?:ed)?|returns?)\b",
    "availability": r"\b(?:in stock|out of stock|available|availability|pre-?order|sold out)\b",
    "warranty": r"\b(?:warranty|guarantee|guaranteed|support)\b",
}

_KEYWORD_BOOSTS: dict[str, float] = {name: 1.2 for name in _KEYWORD_PATTERNS}

_ELEMENT_BOOSTS: dict[str, float] = {
    "h1": 1.3,
    "h2": 1.2,
    "h3": 1.1,
}

# Boilerplate: whole-string navigation words, footer/menu chrome,
# legal policy text and cart item-count phrases
_BOILERPLATE_PATTERNS: tuple[str, ...] = (
    r"^\s*(?:home|cart|login|log in|sign in|sign up|register|account|"
    r"my account|menu|search|wishlist|checkout|logout|log out)\s*$",
    r"\b(?:footer|navigation|breadcrumbs?|skip to (?:main )?content|"
    r"main menu|back to top)\b",
    r"\b(?:privacy policy|terms of (?:use|service)|terms (?:&|and) conditions|"
    r"cookie policy|all rights reserved|copyright)\b",
    r"\b\d+\s+items?\s+in\s+(?:your\s+)?cart\b|\bcart\s*\(\d+\)",
)

# Fixed output order of category blocks in packed content
_CATEGORY_ORDER: tuple[Category, ...] = (
    Category.TITLE,
    Category.PRICE,
    Category.DESCRIPTION,
    Category.FEATURES,
    Category.REVIEWS,
    Category.SPECS,
    Category.STRUCTURED_DATA,
    Category.META,
    Category.SEMANTIC,
    Category.GENERAL,
)


@dataclass(frozen=True)
class ExtractionConfig:
    """Process-wide extraction policy."""

    # --- Size limits ---
    max_content_length: int = 8000
    max_section_length: int = 1500
    min_fragment_length: int = 10
    max_fallback_length: int = 500
    min_meta_length: int = 20
    min_semantic_length: int = 50
    max_semantic_length: int = 2000
    min_fallback_length: int = 20
    fallback_prefix_length: int = 50

    # --- Truncation ---
    prefer_sentence_boundary: bool = True
    sentence_cut_ratio: float = 0.7
    word_cut_ratio: float = 0.8
    min_remaining_budget: int = 100
    ellipsis: str = "..."

    # --- Scoring ---
    category_priors: dict[Category, float] = field(
        default_factory=lambda: dict(_CATEGORY_PRIORS)
    )
    keyword_patterns: dict[str, str] = field(
        default_factory=lambda: dict(_KEYWORD_PATTERNS)
    )
    keyword_boosts: dict[str, float] = field(
        default_factory=lambda: dict(_KEYWORD_BOOSTS)
    )
    element_boosts: dict[str, float] = field(
        default_factory=lambda: dict(_ELEMENT_BOOSTS)
    )
    boilerplate_patterns: tuple[str, ...] = _BOILERPLATE_PATTERNS
    short_text_length: int = 30
    short_text_penalty: float = 0.5
    long_text_length: int = 1000
    long_text_penalty: float = 0.7
    boilerplate_penalty: float = 0.3

    # --- Dedup / packing ---
    dedup_key_length: int = 100
    category_order: tuple[Category, ...] = _CATEGORY_ORDER
    block_separator: str = "\n\n---\n\n"
    section_separator: str = "\n\n"
    empty_content: str = "No content found."


DEFAULT_EXTRACTION_CONFIG = ExtractionConfig()

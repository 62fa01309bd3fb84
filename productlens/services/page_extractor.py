# productlens/services/page_extractor.py

"""Single-page pipeline: DOM to bounded content and product record."""

import logging
from dataclasses import dataclass

from bs4 import BeautifulSoup

from productlens.config.extraction_config import (
    DEFAULT_EXTRACTION_CONFIG,
    ExtractionConfig,
)
from productlens.extraction.content_packer import pack_fragments
from productlens.extraction.dom import parse_html
from productlens.extraction.field_parser import StructuredFieldParser
from productlens.extraction.relevance_scorer import score_fragments
from productlens.extraction.selector_extractor import extract_fragments
from productlens.models.product import ProductRecord
from productlens.services.value_score import (
    calculate_value_score,
    value_category,
)

logger = logging.getLogger("productlens.page_extractor")


@dataclass
class PageExtraction:
    """Everything derived from one product page."""

    url: str
    content: str
    record: ProductRecord
    fragment_count: int = 0
    value_score: float | None = None

    @property
    def value_label(self) -> str | None:
        """Category label of the value score."""
        if self.value_score is None:
            return None
        return value_category(self.value_score)

    def to_dict(self) -> dict[str, object]:
        """Serialise for JSON output."""
        return {
            "url": self.url,
            "product": self.record.to_dict(),
            "valueScore": (
                round(self.value_score, 2)
                if self.value_score is not None
                else None
            ),
            "valueCategory": self.value_label,
            "fragments": self.fragment_count,
            "content": self.content,
        }


class PageExtractor:
    """Run extraction, scoring, packing and field parsing on a page."""

    def __init__(
        self, config: ExtractionConfig = DEFAULT_EXTRACTION_CONFIG,
    ) -> None:
        self.config = config

    def extract(
        self,
        soup: BeautifulSoup,
        url: str = "",
        timestamp: int | None = None,
    ) -> PageExtraction:
        """Process an already-parsed document."""
        fragments = extract_fragments(soup, self.config)
        scored = score_fragments(fragments, self.config)
        content = pack_fragments(scored, self.config)
        record = StructuredFieldParser.parse_record(soup, url, timestamp)
        extraction = PageExtraction(
            url=url,
            content=content,
            record=record,
            fragment_count=len(fragments),
            value_score=calculate_value_score(record),
        )
        logger.info(
            "Extracted %s: %d fragments, %d chars, value=%s",
            url or "<inline>",
            len(fragments),
            len(content),
            extraction.value_score,
        )
        return extraction

    def extract_html(
        self,
        html: str,
        url: str = "",
        timestamp: int | None = None,
    ) -> PageExtraction:
        """Parse raw HTML and process it."""
        return self.extract(parse_html(html), url, timestamp)

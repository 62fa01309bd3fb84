# productlens/services/comparison_orchestrator.py

"""Summarise product pages one by one and compare the results.

The summarizer is an external text-in/text-out service.  Each product is
processed in turn; a failure on one product becomes a warning on the
result and the batch carries on with the next product.
"""

import inspect
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

from bs4 import BeautifulSoup

from productlens.models.price_history import PriceAlert
from productlens.services.page_extractor import PageExtraction, PageExtractor
from productlens.services.price_tracker import PriceHistoryTracker

logger = logging.getLogger("productlens.orchestrator")

SUMMARY_CONTEXT = (
    "You are an e-commerce shopping assistant agent. You specialize in "
    "providing complete and concise summaries of products, their reviews "
    "and pricing. Your goal is to guide users to purchase products that "
    "get them the most value for their money. Do not make things up."
)

COMPARISON_INSTRUCTIONS = (
    "Compare the products below. For each one, weigh price, rating, "
    "review volume and the value score (0-10, higher is better). Point "
    "out the best overall value, the cheapest option and the highest "
    "rated option, and note any important trade-offs. Only use the "
    "information provided."
)

TextResult = str | AsyncIterator[str]


class Summarizer(Protocol):
    """External summarization/comparison service.

    Both methods may return the full text (directly or awaited) or an
    async iterator of text chunks.
    """

    def summarize(
        self, text: str, context: str,
    ) -> Awaitable[TextResult] | TextResult:
        ...

    def compare(
        self, summaries: list[dict[str, Any]], instructions: str,
    ) -> Awaitable[TextResult] | TextResult:
        ...


ChunkCallback = Callable[[str, str], None]


@dataclass
class PageInput:
    """One page to process: raw HTML or an already-parsed document."""

    id: str
    url: str = ""
    html: str | None = None
    soup: BeautifulSoup | None = None


@dataclass
class ProductSummary:
    """Summary of a single product plus its extracted data."""

    id: str
    extraction: PageExtraction
    summary: str
    alert: PriceAlert | None = None

    def to_payload(self) -> dict[str, Any]:
        """Structured summary handed to the comparison call."""
        record = self.extraction.record
        return {
            "id": self.id,
            "url": record.url,
            "title": record.title,
            "price": record.price,
            "currency": record.currency,
            "rating": record.rating,
            "reviewCount": record.review_count,
            "valueScore": (
                round(self.extraction.value_score, 2)
                if self.extraction.value_score is not None
                else None
            ),
            "valueCategory": self.extraction.value_label,
            "summary": self.summary,
        }


@dataclass
class ComparisonResult:
    """Outcome of a comparison run."""

    summaries: list[ProductSummary] = field(
        default_factory=lambda: list[ProductSummary]()
    )
    comparison: str | None = None
    warnings: list[str] = field(
        default_factory=lambda: list[str]()
    )

    @property
    def alerts(self) -> list[PriceAlert]:
        """Price alerts raised while tracking the summarised products."""
        return [s.alert for s in self.summaries if s.alert is not None]


async def collect_text(
    result: Awaitable[TextResult] | TextResult,
    on_chunk: Callable[[str], None] | None = None,
) -> str:
    """Resolve a summarizer result to a single string.

    Streams are consumed chunk by chunk and ``on_chunk`` sees each one.
    """
    if inspect.isawaitable(result):
        result = await result
    if isinstance(result, str):
        if on_chunk is not None:
            on_chunk(result)
        return result

    chunks: list[str] = []
    async for chunk in result:
        chunks.append(chunk)
        if on_chunk is not None:
            on_chunk(chunk)
    return "".join(chunks)


class ComparisonOrchestrator:
    """Coordinates extraction, price tracking, summaries and comparison."""

    def __init__(
        self,
        summarizer: Summarizer,
        extractor: PageExtractor | None = None,
        tracker: PriceHistoryTracker | None = None,
        summary_context: str = SUMMARY_CONTEXT,
        comparison_instructions: str = COMPARISON_INSTRUCTIONS,
    ) -> None:
        self.summarizer = summarizer
        self.extractor = extractor or PageExtractor()
        self.tracker = tracker
        self.summary_context = summary_context
        self.comparison_instructions = comparison_instructions

    # ── Private helpers ──────────────────────────────────

    def _extract(self, page: PageInput) -> PageExtraction:
        if page.soup is not None:
            return self.extractor.extract(page.soup, page.url)
        if page.html is not None:
            return self.extractor.extract_html(page.html, page.url)
        msg = f"page {page.id} has no HTML or parsed document"
        raise ValueError(msg)

    async def _summarize_one(
        self,
        page: PageInput,
        on_chunk: ChunkCallback | None,
    ) -> ProductSummary:
        extraction = self._extract(page)

        alert: PriceAlert | None = None
        if self.tracker is not None:
            alert = await self.tracker.track(extraction.record)

        summary = await collect_text(
            self.summarizer.summarize(
                extraction.content, self.summary_context
            ),
            (lambda chunk: on_chunk(page.id, chunk)) if on_chunk else None,
        )
        return ProductSummary(
            id=page.id,
            extraction=extraction,
            summary=summary.strip(),
            alert=alert,
        )

    # ── Public entry points ──────────────────────────────

    async def summarize_pages(
        self,
        pages: list[PageInput],
        on_chunk: ChunkCallback | None = None,
    ) -> ComparisonResult:
        """Summarise each page in order, isolating per-page failures."""
        result = ComparisonResult()
        for page in pages:
            try:
                result.summaries.append(
                    await self._summarize_one(page, on_chunk)
                )
            except Exception as exc:
                result.warnings.append(
                    f"Could not summarize {page.id}: {exc}"
                )
                logger.warning(
                    "Could not summarize %s (%s): %s",
                    page.id,
                    page.url or "<inline>",
                    exc,
                    exc_info=True,
                )
        return result

    async def compare(
        self,
        pages: list[PageInput],
        on_chunk: ChunkCallback | None = None,
    ) -> ComparisonResult:
        """Summarise every page, then ask for a cross-product comparison.

        The comparison is skipped when no page produced a summary; a
        failing comparison call is reported as a warning.
        """
        result = await self.summarize_pages(pages, on_chunk)
        if not result.summaries:
            result.warnings.append("No product summaries to compare.")
            return result

        payload = [s.to_payload() for s in result.summaries]
        try:
            comparison = await collect_text(
                self.summarizer.compare(
                    payload, self.comparison_instructions
                ),
                (lambda chunk: on_chunk("comparison", chunk))
                if on_chunk else None,
            )
            result.comparison = comparison.strip()
        except Exception as exc:
            result.warnings.append(f"Comparison failed: {exc}")
            logger.warning(
                "Comparison of %d products failed: %s",
                len(payload),
                exc,
                exc_info=True,
            )

        logger.info(
            "Compared %d products (%d warnings)",
            len(result.summaries),
            len(result.warnings),
        )
        return result

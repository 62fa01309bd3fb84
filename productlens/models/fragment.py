# productlens/models/fragment.py

"""Content fragment models passed between extraction, scoring and packing."""

from dataclasses import dataclass
from enum import Enum


class Category(Enum):
    """Semantic bucket of a fragment, used for priors and output order."""

    TITLE = "title"
    PRICE = "price"
    DESCRIPTION = "description"
    REVIEWS = "reviews"
    FEATURES = "features"
    SPECS = "specs"
    STRUCTURED_DATA = "structured-data"
    META = "meta"
    SEMANTIC = "semantic"
    GENERAL = "general"


@dataclass(frozen=True)
class ContentFragment:
    """A unit of extracted page text with its provenance."""

    text: str
    category: Category
    source: str
    confidence: float
    element: str | None = None

    def with_score(self, score: float) -> "ScoredFragment":
        """Return a scored copy of this fragment."""
        return ScoredFragment(
            text=self.text,
            category=self.category,
            source=self.source,
            confidence=self.confidence,
            element=self.element,
            score=score,
        )


@dataclass(frozen=True)
class ScoredFragment(ContentFragment):
    """A fragment after relevance scoring; ``score`` may exceed 1.0."""

    score: float = 0.0

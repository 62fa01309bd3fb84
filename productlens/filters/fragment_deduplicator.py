# productlens/filters/fragment_deduplicator.py

"""Near-duplicate removal for scored content fragments."""

import logging

from productlens.config.extraction_config import (
    DEFAULT_EXTRACTION_CONFIG,
    ExtractionConfig,
)
from productlens.extraction.text_normalizer import dedup_key
from productlens.models.fragment import ScoredFragment

logger = logging.getLogger("productlens.filters")


class FragmentDeduplicator:
    """Remove fragments that share a normalised text key."""

    @staticmethod
    def sort_by_score(
        fragments: list[ScoredFragment],
    ) -> list[ScoredFragment]:
        """Return fragments ordered from highest to lowest score."""
        return sorted(fragments, key=lambda f: f.score, reverse=True)

    @staticmethod
    def deduplicate(
        fragments: list[ScoredFragment],
        config: ExtractionConfig = DEFAULT_EXTRACTION_CONFIG,
    ) -> tuple[list[ScoredFragment], int]:
        """Keep the highest-scored fragment per dedup key.

        Fragments are sorted by score first, so the first occurrence of
        a key is the one that survives.  Returns the kept fragments in
        score order and the count of removed duplicates.
        """
        if not fragments:
            return [], 0

        seen: set[str] = set()
        kept: list[ScoredFragment] = []
        removed = 0

        for fragment in FragmentDeduplicator.sort_by_score(fragments):
            key = dedup_key(fragment.text, config.dedup_key_length)
            if key in seen:
                removed += 1
                continue
            seen.add(key)
            kept.append(fragment)

        if removed:
            logger.debug(
                "Deduplication removed %d duplicate fragments",
                removed,
            )

        return kept, removed

# productlens/extraction/relevance_scorer.py

"""Heuristic relevance scoring of content fragments.

A fragment's score starts at its strategy confidence and passes through
an ordered list of multiplicative steps (:data:`SCORE_STEPS`):

1. category prior
2. keyword-family boosts (compounding)
3. source element boost (h1/h2/h3)
4. short and long text penalties, checked independently
5. boilerplate penalty
"""

import logging
import re
from collections.abc import Callable

from productlens.config.extraction_config import (
    DEFAULT_EXTRACTION_CONFIG,
    ExtractionConfig,
)
from productlens.models.fragment import ContentFragment, ScoredFragment

logger = logging.getLogger("productlens.scorer")

ScoreStep = Callable[[float, ContentFragment, ExtractionConfig], float]


def apply_category_prior(
    score: float, fragment: ContentFragment, config: ExtractionConfig,
) -> float:
    """Multiply by the prior of the fragment's category."""
    return score * config.category_priors.get(fragment.category, 1.0)


def matching_keyword_families(
    text: str, config: ExtractionConfig = DEFAULT_EXTRACTION_CONFIG,
) -> list[str]:
    """Names of the keyword families whose pattern matches ``text``."""
    return [
        name
        for name, pattern in config.keyword_patterns.items()
        if re.search(pattern, text, re.IGNORECASE)
    ]


def apply_keyword_boosts(
    score: float, fragment: ContentFragment, config: ExtractionConfig,
) -> float:
    """Multiply by the boost of every matching keyword family."""
    for name in matching_keyword_families(fragment.text, config):
        score *= config.keyword_boosts.get(name, 1.0)
    return score


def apply_element_boost(
    score: float, fragment: ContentFragment, config: ExtractionConfig,
) -> float:
    """Multiply by the boost configured for the source tag, if any."""
    if fragment.element:
        score *= config.element_boosts.get(fragment.element.lower(), 1.0)
    return score


def apply_length_penalties(
    score: float, fragment: ContentFragment, config: ExtractionConfig,
) -> float:
    """Penalise very short and very long text.

    The two checks are independent; both fire if both thresholds hold.
    """
    length = len(fragment.text)
    if length < config.short_text_length:
        score *= config.short_text_penalty
    if length > config.long_text_length:
        score *= config.long_text_penalty
    return score


def is_boilerplate(
    text: str, config: ExtractionConfig = DEFAULT_EXTRACTION_CONFIG,
) -> bool:
    """True if ``text`` looks like navigation, footer or legal chrome."""
    return any(
        re.search(pattern, text, re.IGNORECASE)
        for pattern in config.boilerplate_patterns
    )


def apply_boilerplate_penalty(
    score: float, fragment: ContentFragment, config: ExtractionConfig,
) -> float:
    """Multiply by the boilerplate penalty on a match."""
    if is_boilerplate(fragment.text, config):
        score *= config.boilerplate_penalty
    return score


SCORE_STEPS: tuple[ScoreStep, ...] = (
    apply_category_prior,
    apply_keyword_boosts,
    apply_element_boost,
    apply_length_penalties,
    apply_boilerplate_penalty,
)


def score_fragment(
    fragment: ContentFragment,
    config: ExtractionConfig = DEFAULT_EXTRACTION_CONFIG,
) -> ScoredFragment:
    """Score a single fragment."""
    score = fragment.confidence
    for step in SCORE_STEPS:
        score = step(score, fragment, config)
    return fragment.with_score(score)


def score_fragments(
    fragments: list[ContentFragment],
    config: ExtractionConfig = DEFAULT_EXTRACTION_CONFIG,
) -> list[ScoredFragment]:
    """Score every fragment; output has the same length as the input."""
    scored = [score_fragment(f, config) for f in fragments]
    if scored:
        logger.debug(
            "Scored %d fragments (max=%.3f)",
            len(scored),
            max(s.score for s in scored),
        )
    return scored

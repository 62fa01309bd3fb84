# productlens/extraction/content_packer.py

"""Pack scored fragments into one bounded text for the summarizer."""

import logging

from productlens.config.extraction_config import (
    DEFAULT_EXTRACTION_CONFIG,
    ExtractionConfig,
)
from productlens.filters.fragment_deduplicator import FragmentDeduplicator
from productlens.models.fragment import Category, ScoredFragment

logger = logging.getLogger("productlens.packer")


def truncate_section(
    text: str,
    max_length: int,
    config: ExtractionConfig = DEFAULT_EXTRACTION_CONFIG,
) -> str:
    """Shorten ``text`` to at most ``max_length`` chars at a boundary.

    Preference order: the last full stop past ``sentence_cut_ratio`` of
    the limit (kept, no ellipsis), then the last space past
    ``word_cut_ratio`` of the limit, then a hard cut.  Word and hard cuts
    end in the ellipsis, which counts toward the limit.
    """
    if len(text) <= max_length:
        return text

    prefix = text[:max_length]
    if config.prefer_sentence_boundary:
        last_period = prefix.rfind(".")
        if last_period > max_length * config.sentence_cut_ratio:
            return prefix[: last_period + 1]

    room = max_length - len(config.ellipsis)
    if room <= 0:
        return prefix
    head = prefix[:room]
    last_space = head.rfind(" ")
    if last_space > max_length * config.word_cut_ratio:
        return head[:last_space] + config.ellipsis
    return head + config.ellipsis


def select_sections(
    fragments: list[ScoredFragment],
    config: ExtractionConfig = DEFAULT_EXTRACTION_CONFIG,
) -> list[tuple[Category, str]]:
    """Greedily choose ``(category, text)`` sections that fit the budget.

    Fragments are deduplicated and walked in score order.  Every section
    after the first is charged for the widest separator, so the joined
    output can never exceed ``max_content_length``.  When a section does
    not fit, a hard-cut slice is added if more than
    ``min_remaining_budget`` chars are left, and packing stops.
    """
    unique, _removed = FragmentDeduplicator.deduplicate(fragments, config)
    budget = config.max_content_length
    separator_cost = max(
        len(config.block_separator), len(config.section_separator)
    )

    selected: list[tuple[Category, str]] = []
    total = 0
    for fragment in unique:
        section = truncate_section(
            fragment.text, config.max_section_length, config
        )
        overhead = separator_cost if selected else 0
        if total + overhead + len(section) <= budget:
            selected.append((fragment.category, section))
            total += overhead + len(section)
            continue

        remaining = budget - total - overhead
        if remaining > config.min_remaining_budget:
            cut = remaining - len(config.ellipsis)
            selected.append(
                (fragment.category, section[:cut] + config.ellipsis)
            )
            total += overhead + cut + len(config.ellipsis)
        logger.debug(
            "Content budget exhausted after %d sections (%d chars)",
            len(selected),
            total,
        )
        break

    return selected


def format_sections(
    sections: list[tuple[Category, str]],
    config: ExtractionConfig = DEFAULT_EXTRACTION_CONFIG,
) -> str:
    """Group sections by category and join them in the fixed order."""
    if not sections:
        # Placeholder is clipped to the budget too
        return config.empty_content[: max(config.max_content_length, 0)]

    grouped: dict[Category, list[str]] = {}
    for category, text in sections:
        grouped.setdefault(category, []).append(text)

    blocks: list[str] = []
    for category in config.category_order:
        texts = grouped.get(category)
        if texts:
            blocks.append(config.section_separator.join(texts))
    # Categories missing from the configured order still get emitted
    for category, texts in grouped.items():
        if category not in config.category_order:
            blocks.append(config.section_separator.join(texts))

    return config.block_separator.join(blocks)


def pack_fragments(
    fragments: list[ScoredFragment],
    config: ExtractionConfig = DEFAULT_EXTRACTION_CONFIG,
) -> str:
    """Build the bounded content string from scored fragments."""
    sections = select_sections(fragments, config)
    content = format_sections(sections, config)
    logger.info(
        "Packed %d sections into %d chars", len(sections), len(content)
    )
    return content

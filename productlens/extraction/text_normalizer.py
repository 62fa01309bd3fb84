# productlens/extraction/text_normalizer.py

"""Whitespace canonicalisation for extracted text."""

import re

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(text: str | None) -> str:
    """Collapse every whitespace run to one space and trim the ends."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize_block(text: str | None) -> str:
    """Normalise a multi-line block, keeping single line breaks.

    Each line is collapsed with :func:`normalize_text`; empty lines are
    dropped.
    """
    if not text:
        return ""
    lines = (normalize_text(line) for line in text.splitlines())
    return "\n".join(line for line in lines if line)


def dedup_key(text: str, length: int = 100) -> str:
    """Return the comparison key used to spot near-duplicate fragments.

    Lowercased, whitespace-collapsed, trimmed, first ``length`` chars.
    """
    return normalize_text(text.lower())[:length]

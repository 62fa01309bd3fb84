# tests/test_text_normalizer.py

"""Tests for whitespace normalisation and dedup keys."""

import unittest

from productlens.extraction.text_normalizer import (
    dedup_key,
    normalize_block,
    normalize_text,
)


class TestNormalizeText(unittest.TestCase):
    """normalize_text collapses and trims whitespace."""

    def test_collapses_runs(self) -> None:
        self.assertEqual(
            normalize_text("  Acme \n\t Widget   Pro "),
            "Acme Widget Pro",
        )

    def test_none_and_empty(self) -> None:
        self.assertEqual(normalize_text(None), "")
        self.assertEqual(normalize_text(""), "")
        self.assertEqual(normalize_text(" \n\t "), "")

    def test_non_breaking_space(self) -> None:
        """Unicode whitespace counts as whitespace."""
        self.assertEqual(normalize_text("19.99\u00a0USD"), "19.99 USD")


class TestNormalizeBlock(unittest.TestCase):
    """normalize_block keeps line structure."""

    def test_keeps_single_newlines(self) -> None:
        text = "Product:   Widget\n\n\n  Price: 19.99  USD \n"
        self.assertEqual(
            normalize_block(text), "Product: Widget\nPrice: 19.99 USD"
        )

    def test_empty(self) -> None:
        self.assertEqual(normalize_block(None), "")
        self.assertEqual(normalize_block("\n \n"), "")


class TestDedupKey(unittest.TestCase):
    """dedup_key lowercases, normalises and truncates."""

    def test_case_and_whitespace_insensitive(self) -> None:
        self.assertEqual(
            dedup_key("  Great   WIDGET "), dedup_key("great widget")
        )

    def test_truncates_to_length(self) -> None:
        key = dedup_key("a" * 250)
        self.assertEqual(len(key), 100)

    def test_custom_length(self) -> None:
        self.assertEqual(dedup_key("Hello World", 5), "hello")

    def test_truncation_after_normalisation(self) -> None:
        """Whitespace runs do not eat into the key length."""
        self.assertEqual(dedup_key("a     b", 3), "a b")


if __name__ == "__main__":
    unittest.main()

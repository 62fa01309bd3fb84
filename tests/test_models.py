# tests/test_models.py

"""Tests for fragment, product and price history models."""

import dataclasses
import unittest

from productlens.models.fragment import (
    Category,
    ContentFragment,
    ScoredFragment,
)
from productlens.models.price_history import (
    PriceAlert,
    PriceHistoryEntry,
    PriceObservation,
)
from productlens.models.product import ProductRecord


class TestFragments(unittest.TestCase):
    """ContentFragment and ScoredFragment."""

    def test_with_score_keeps_fields(self) -> None:
        frag = ContentFragment(
            text="Acme Widget",
            category=Category.TITLE,
            source="site:title",
            confidence=0.9,
            element="h1",
        )
        scored = frag.with_score(3.5)
        self.assertIsInstance(scored, ScoredFragment)
        self.assertEqual(scored.text, "Acme Widget")
        self.assertEqual(scored.category, Category.TITLE)
        self.assertEqual(scored.element, "h1")
        self.assertEqual(scored.score, 3.5)

    def test_fragments_are_frozen(self) -> None:
        frag = ContentFragment(
            text="x", category=Category.META, source="meta:og:title",
            confidence=0.7,
        )
        with self.assertRaises(dataclasses.FrozenInstanceError):
            frag.text = "y"  # type: ignore[misc]

    def test_category_values(self) -> None:
        self.assertEqual(Category.STRUCTURED_DATA.value, "structured-data")
        self.assertEqual(len(Category), 10)


class TestProductRecord(unittest.TestCase):
    """ProductRecord serialisation."""

    def test_to_dict(self) -> None:
        record = ProductRecord(
            url="https://shop.example/p/1",
            title="Widget",
            price=19.99,
            rating=4.5,
            review_count=120,
            currency="EUR",
            timestamp=1700000000000,
        )
        self.assertEqual(
            record.to_dict(),
            {
                "url": "https://shop.example/p/1",
                "title": "Widget",
                "price": 19.99,
                "rating": 4.5,
                "reviewCount": 120,
                "currency": "EUR",
                "timestamp": 1700000000000,
            },
        )

    def test_defaults(self) -> None:
        record = ProductRecord(url="u", title=None)
        self.assertIsNone(record.price)
        self.assertEqual(record.currency, "USD")


class TestPriceHistoryModels(unittest.TestCase):
    """PriceHistoryEntry and PriceAlert."""

    def test_entry_round_trip(self) -> None:
        entry = PriceHistoryEntry(
            prices=[PriceObservation(10.0, "USD", 1000)],
            last_price=10.0,
            last_update=1000,
        )
        data = entry.to_dict()
        self.assertEqual(
            data,
            {
                "prices": [
                    {"price": 10.0, "currency": "USD", "timestamp": 1000}
                ],
                "lastPrice": 10.0,
                "lastUpdate": 1000,
            },
        )
        self.assertEqual(PriceHistoryEntry.from_dict(data), entry)

    def test_from_dict_drops_malformed(self) -> None:
        entry = PriceHistoryEntry.from_dict({
            "prices": [
                {"price": "12.5", "timestamp": 5},
                {"price": "abc", "timestamp": 6},
                {"timestamp": 7},
                "garbage",
            ],
            "lastPrice": None,
        })
        self.assertEqual(len(entry.prices), 1)
        self.assertEqual(entry.prices[0].price, 12.5)
        self.assertEqual(entry.prices[0].currency, "USD")
        self.assertIsNone(entry.last_price)
        self.assertIsNone(entry.last_update)

    def test_alert_percent_label(self) -> None:
        alert = PriceAlert(
            kind="drop", url="u", old_price=100.0, new_price=85.0,
            percent=15.0,
        )
        self.assertEqual(alert.percent_label, "15.0%")
        self.assertEqual(alert.to_dict()["percentage"], "15.0%")
        self.assertEqual(alert.to_dict()["type"], "drop")


if __name__ == "__main__":
    unittest.main()

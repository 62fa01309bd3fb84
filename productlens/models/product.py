# productlens/models/product.py

"""Structured product record derived from a single extraction pass."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ProductRecord:
    """Snapshot of the fields parsed out of one product page.

    A fresh record is produced on every scrape; records are never
    updated in place.  ``timestamp`` is epoch milliseconds.
    """

    url: str
    title: str | None
    price: float | None = None
    rating: float | None = None
    review_count: int | None = None
    currency: str = "USD"
    timestamp: int = 0

    def to_dict(self) -> dict[str, object]:
        """Serialise the record for JSON output."""
        return {
            "url": self.url,
            "title": self.title,
            "price": self.price,
            "rating": self.rating,
            "reviewCount": self.review_count,
            "currency": self.currency,
            "timestamp": self.timestamp,
        }

# productlens/models/price_history.py

"""Temporal price observation models for price history tracking."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class PriceObservation:
    """A single price observation for a product at a point in time."""

    price: float
    currency: str
    timestamp: int

    def to_dict(self) -> dict[str, object]:
        """Serialise for the key-value store."""
        return {
            "price": self.price,
            "currency": self.currency,
            "timestamp": self.timestamp,
        }


@dataclass
class PriceHistoryEntry:
    """Persisted per-URL price history.

    ``last_update`` and observation timestamps are epoch milliseconds.
    """

    prices: list[PriceObservation] = field(
        default_factory=lambda: list[PriceObservation]()
    )
    last_price: float | None = None
    last_update: int | None = None

    def to_dict(self) -> dict[str, object]:
        """Serialise for the key-value store."""
        return {
            "prices": [p.to_dict() for p in self.prices],
            "lastPrice": self.last_price,
            "lastUpdate": self.last_update,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PriceHistoryEntry":
        """Rebuild an entry from its stored dict form.

        Malformed observations are dropped rather than failing the load.
        """
        prices: list[PriceObservation] = []
        for raw in data.get("prices") or []:
            if not isinstance(raw, dict):
                continue
            try:
                prices.append(
                    PriceObservation(
                        price=float(raw["price"]),
                        currency=str(raw.get("currency", "USD")),
                        timestamp=int(raw["timestamp"]),
                    )
                )
            except (KeyError, TypeError, ValueError):
                continue

        last_price = data.get("lastPrice")
        last_update = data.get("lastUpdate")
        return cls(
            prices=prices,
            last_price=(
                float(last_price) if last_price is not None else None
            ),
            last_update=(
                int(last_update) if last_update is not None else None
            ),
        )


@dataclass(frozen=True)
class PriceAlert:
    """A significant price change between two observations."""

    kind: str  # "drop" or "increase"
    url: str
    old_price: float
    new_price: float
    percent: float
    currency: str = "USD"

    @property
    def percent_label(self) -> str:
        """Percentage change formatted like ``15.0%``."""
        return f"{self.percent:.1f}%"

    def to_dict(self) -> dict[str, object]:
        """Serialise for JSON output."""
        return {
            "type": self.kind,
            "url": self.url,
            "oldPrice": self.old_price,
            "newPrice": self.new_price,
            "percentage": self.percent_label,
            "currency": self.currency,
        }

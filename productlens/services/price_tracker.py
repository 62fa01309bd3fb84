# productlens/services/price_tracker.py

"""Per-URL price history with drop/increase alerts."""

import logging
import time
from typing import Any

from productlens.config.settings import Settings
from productlens.models.price_history import (
    PriceAlert,
    PriceHistoryEntry,
    PriceObservation,
)
from productlens.models.product import ProductRecord
from productlens.storage.kv_store import KeyValueStore

logger = logging.getLogger("productlens.price_history")

_MS_PER_DAY = 24 * 60 * 60 * 1000


def history_key(url: str) -> str:
    """Store key holding the history for ``url``."""
    return f"{Settings.PRICE_HISTORY_KEY_PREFIX}{url}"


def compare_prices(
    url: str,
    last_price: float | None,
    current_price: float,
    currency: str = "USD",
    threshold: float = Settings.PRICE_ALERT_THRESHOLD,
) -> PriceAlert | None:
    """Alert when ``current_price`` moved by at least ``threshold``.

    The same relative threshold applies to drops and increases.
    """
    if last_price is None or last_price <= 0:
        return None
    change = (current_price - last_price) / last_price
    if change <= -threshold:
        kind = "drop"
    elif change >= threshold:
        kind = "increase"
    else:
        return None
    return PriceAlert(
        kind=kind,
        url=url,
        old_price=last_price,
        new_price=current_price,
        percent=round(abs(change) * 100, 1),
        currency=currency,
    )


class PriceHistoryTracker:
    """Record price observations per product URL and flag big moves."""

    def __init__(
        self,
        store: KeyValueStore,
        threshold: float = Settings.PRICE_ALERT_THRESHOLD,
        retention_days: int = Settings.PRICE_HISTORY_RETENTION_DAYS,
    ) -> None:
        self._store = store
        self._threshold = threshold
        self._retention_ms = retention_days * _MS_PER_DAY

    async def get_history(self, url: str) -> PriceHistoryEntry | None:
        """Stored history for ``url``, or ``None``."""
        raw: Any = await self._store.get(history_key(url))
        if not isinstance(raw, dict):
            return None
        return PriceHistoryEntry.from_dict(raw)

    async def track(
        self,
        record: ProductRecord,
        now_ms: int | None = None,
    ) -> PriceAlert | None:
        """Record ``record``'s price and return an alert, if any.

        Never raises: a failing store is logged and treated as "no
        alert".
        """
        if record.price is None or not record.url:
            return None

        now = now_ms if now_ms is not None else int(time.time() * 1000)
        try:
            history = (
                await self.get_history(record.url) or PriceHistoryEntry()
            )
            alert = compare_prices(
                record.url,
                history.last_price,
                record.price,
                record.currency,
                self._threshold,
            )

            history.prices.append(
                PriceObservation(
                    price=record.price,
                    currency=record.currency,
                    timestamp=now,
                )
            )
            cutoff = now - self._retention_ms
            history.prices = [
                p for p in history.prices if p.timestamp >= cutoff
            ]
            history.last_price = record.price
            history.last_update = now

            await self._store.set(history_key(record.url), history.to_dict())
        except Exception as exc:
            logger.warning(
                "Price history update failed for %s: %s",
                record.url,
                exc,
                exc_info=True,
            )
            return None

        if alert is not None:
            logger.info(
                "Price %s of %s for %s (%.2f -> %.2f)",
                alert.kind,
                alert.percent_label,
                record.url,
                alert.old_price,
                alert.new_price,
            )
        return alert

"""
Request-scoped price cache.

One PriceCache is created per optimization call and passed explicitly to
every component that needs prices. It is never shared between calls, so
concurrent requests cannot see each other's (possibly stale) prices.

INVARIANTS:
- Each card id hits the oracle at most once per cache
- Unknown prices are cached too (as None), not re-fetched
"""

import logging

from deckforge.models.recommendation import PriceTrend
from deckforge.services.catalog import PriceOracle, TrendSource

logger = logging.getLogger(__name__)


class PriceCache:
    """Lazily populated memo over a PriceOracle."""

    def __init__(
        self,
        oracle: PriceOracle,
        trend_source: TrendSource | None = None,
        unknown_price_fallback: float = 1.0,
    ) -> None:
        self._oracle = oracle
        self._trend_source = trend_source
        self.unknown_price_fallback = unknown_price_fallback
        self._prices: dict[str, float | None] = {}
        self._trends: dict[str, PriceTrend] = {}
        self.oracle_lookups = 0

    def __len__(self) -> int:
        return len(self._prices)

    def __contains__(self, card_id: str) -> bool:
        return card_id in self._prices

    def price(self, card_id: str) -> float | None:
        """Market price, or None if the oracle has no usable price."""
        if card_id not in self._prices:
            self.oracle_lookups += 1
            raw = self._oracle.get_price(card_id)
            self._prices[card_id] = raw if raw is not None and raw > 0 else None
            if self._prices[card_id] is None:
                logger.debug("No market price for %s", card_id)
        return self._prices[card_id]

    def price_or_fallback(self, card_id: str) -> tuple[float, bool]:
        """
        Price for cost accounting.

        Returns:
            (unit_price, price_known). Unknown prices use the fallback.
        """
        price = self.price(card_id)
        if price is None:
            return self.unknown_price_fallback, False
        return price, True

    def trend(self, card_id: str) -> PriceTrend:
        if self._trend_source is None:
            return PriceTrend.STABLE
        if card_id not in self._trends:
            self._trends[card_id] = self._trend_source.get_price_trend(card_id)
        return self._trends[card_id]

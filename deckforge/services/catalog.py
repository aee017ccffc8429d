"""
Card catalog and price oracle boundary.

The catalog is an external collaborator (a database in production). The
engine only depends on the protocols below; InMemoryCatalog implements
all of them over parsed catalog records for tests and batch jobs.

INVARIANTS:
- get_card never substitutes a default card: unknown ids raise
- A zero or missing price is "unknown" (None), never "free"
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from deckforge.models.card import Card, CardRole, CreatureCard
from deckforge.models.failure import CardNotFoundError
from deckforge.models.recommendation import PriceTrend
from deckforge.parsers.catalog import load_catalog_records, parse_card, parse_price

logger = logging.getLogger(__name__)

_TREND_VALUES = {t.value for t in PriceTrend}


@dataclass(frozen=True)
class CardFilter:
    """
    Catalog query.

    Every set field narrows the result. Unset fields do not filter.

    Attributes:
        role: Only cards of this role
        exclude_ids: Card ids to leave out
        element_types_any: Card must share at least one element type
        subtypes_any: Card must share at least one subtype
        hp_min: Minimum hp (creatures only; other roles never match)
        hp_max: Maximum hp (creatures only; other roles never match)
        format: Card must be legal in this format
        name_prefix: Case-insensitive name prefix
        newest_first: Order by release date, newest first
        limit: Maximum number of cards returned
    """

    role: CardRole | None = None
    exclude_ids: frozenset[str] = field(default_factory=frozenset)
    element_types_any: frozenset[str] | None = None
    subtypes_any: frozenset[str] | None = None
    hp_min: int | None = None
    hp_max: int | None = None
    format: str | None = None
    name_prefix: str | None = None
    newest_first: bool = False
    limit: int | None = None

    def matches(self, card: Card) -> bool:
        if self.role is not None and card.role is not self.role:
            return False
        if card.id in self.exclude_ids:
            return False
        if self.element_types_any is not None and not (card.element_types & self.element_types_any):
            return False
        if self.subtypes_any is not None and not (card.subtypes & self.subtypes_any):
            return False
        if self.hp_min is not None or self.hp_max is not None:
            if not isinstance(card, CreatureCard):
                return False
            if self.hp_min is not None and card.hp < self.hp_min:
                return False
            if self.hp_max is not None and card.hp > self.hp_max:
                return False
        if not card.is_legal_in(self.format):
            return False
        if self.name_prefix and not card.name.lower().startswith(self.name_prefix.lower()):
            return False
        return True


class CardCatalog(Protocol):
    """Read access to the card catalog."""

    def get_card(self, card_id: str) -> Card:
        """Raises CardNotFoundError for unknown ids."""
        ...

    def find_cards(self, card_filter: CardFilter) -> list[Card]: ...


class PriceOracle(Protocol):
    """Current market price lookup. None means unknown."""

    def get_price(self, card_id: str) -> float | None: ...


class TrendSource(Protocol):
    """Optional price trend lookup."""

    def get_price_trend(self, card_id: str) -> PriceTrend: ...


class InMemoryCatalog:
    """
    Catalog, price oracle and trend source held in memory.

    Cards keep their insertion order, which is the order find_cards
    returns them in unless newest_first is requested.
    """

    def __init__(
        self,
        cards: Iterable[Card] = (),
        prices: dict[str, float] | None = None,
        trends: dict[str, PriceTrend] | None = None,
    ) -> None:
        self._cards: dict[str, Card] = {}
        for card in cards:
            self._cards.setdefault(card.id, card)
        self._prices = dict(prices or {})
        self._trends = dict(trends or {})

    @classmethod
    def from_records(cls, records: Iterable[dict[str, Any]]) -> "InMemoryCatalog":
        """
        Build a catalog from raw catalog records.

        Records that cannot be parsed (no id, unknown role) are skipped
        and logged; the rest of the catalog stays usable.
        """
        cards: list[Card] = []
        prices: dict[str, float] = {}
        trends: dict[str, PriceTrend] = {}
        skipped = 0

        for record in records:
            try:
                card = parse_card(record)
            except ValueError as e:
                skipped += 1
                logger.warning("Skipping catalog record: %s", e)
                continue
            cards.append(card)

            price = parse_price(record)
            if price is not None:
                prices[card.id] = price

            trend = record.get("trend")
            if isinstance(trend, str) and trend in _TREND_VALUES:
                trends[card.id] = PriceTrend(trend)

        logger.info(
            "catalog_loaded",
            extra={"cards": len(cards), "priced": len(prices), "skipped": skipped},
        )
        return cls(cards, prices, trends)

    @classmethod
    def from_file(cls, path: Path) -> "InMemoryCatalog":
        """
        Load a catalog from a JSON export.

        Raises:
            FileNotFoundError: If the file doesn't exist
        """
        return cls.from_records(load_catalog_records(path))

    def __len__(self) -> int:
        return len(self._cards)

    def __contains__(self, card_id: str) -> bool:
        return card_id in self._cards

    def get_card(self, card_id: str) -> Card:
        card = self._cards.get(card_id)
        if card is None:
            raise CardNotFoundError(card_id)
        return card

    def find_cards(self, card_filter: CardFilter) -> list[Card]:
        found = [card for card in self._cards.values() if card_filter.matches(card)]

        if card_filter.newest_first:
            # Undated cards sort last
            found.sort(key=lambda c: c.release_date or "", reverse=True)

        if card_filter.limit is not None:
            found = found[: card_filter.limit]
        return found

    def get_price(self, card_id: str) -> float | None:
        price = self._prices.get(card_id)
        if price is None or price <= 0:
            return None
        return price

    def get_price_trend(self, card_id: str) -> PriceTrend:
        return self._trends.get(card_id, PriceTrend.STABLE)

    def set_price(self, card_id: str, price: float) -> None:
        self._prices[card_id] = price

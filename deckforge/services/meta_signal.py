"""
Meta-relevance signal.

How often a card shows up in the current competitive meta, on a 0-100
scale. Production deployments plug in a source backed by tournament
data; the static source scores a fixed list of known meta cards.
"""

from typing import Protocol

from deckforge.models.card import Card

DEFAULT_META_CARD_IDS: frozenset[str] = frozenset({"swsh1-79", "swsh1-169", "swsh1-178"})

KNOWN_META_SCORE = 80.0
DEFAULT_META_SCORE = 30.0


class MetaSource(Protocol):
    def meta_score(self, card: Card) -> float:
        """Meta relevance of a card, 0-100."""
        ...


class StaticMetaSource:
    """Scores known meta cards high and everything else low."""

    def __init__(
        self,
        meta_card_ids: frozenset[str] | set[str] = DEFAULT_META_CARD_IDS,
        known_score: float = KNOWN_META_SCORE,
        default_score: float = DEFAULT_META_SCORE,
    ) -> None:
        self.meta_card_ids = frozenset(meta_card_ids)
        self.known_score = known_score
        self.default_score = default_score

    def meta_score(self, card: Card) -> float:
        if card.id in self.meta_card_ids:
            return self.known_score
        return self.default_score

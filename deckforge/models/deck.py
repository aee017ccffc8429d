from dataclasses import dataclass, field

from deckforge.models.card import Card


@dataclass(frozen=True, slots=True)
class DeckCard:
    """A card entry in a deck with its quantity (always >= 1)."""

    card: Card
    quantity: int

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError(f"Deck entry for '{self.card.id}' needs quantity >= 1")


@dataclass(frozen=True)
class Deck:
    """
    A deck submitted for optimization.

    Decks are read-only input. Simulated changes always produce a new Deck
    (see optimization.impact.apply_changes), never mutate this one.

    Attributes:
        cards: Deck entries
        format: Format tag (e.g. "standard")
        archetype: Primary strategy hint (aggro, control, combo, midrange...)
        name: Display name
        id: Caller's identifier for the deck
    """

    cards: tuple[DeckCard, ...] = field(default_factory=tuple)
    format: str | None = None
    archetype: str | None = None
    name: str = ""
    id: str = ""

    def quantity_of(self, card_id: str) -> int:
        """Total copies of a card across all entries."""
        return sum(dc.quantity for dc in self.cards if dc.card.id == card_id)

    def contains(self, card_id: str) -> bool:
        return any(dc.card.id == card_id for dc in self.cards)

    def total_cards(self) -> int:
        return sum(dc.quantity for dc in self.cards)

    def card_ids(self) -> set[str]:
        return {dc.card.id for dc in self.cards}

    def others(self, card_id: str) -> list[DeckCard]:
        """Entries for every card except the given one."""
        return [dc for dc in self.cards if dc.card.id != card_id]

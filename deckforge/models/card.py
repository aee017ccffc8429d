"""
Card catalog records.

Cards are immutable and owned by the catalog. The role of a card is
carried by its type rather than by a loose string field, so scoring code
can dispatch on the variant instead of null-checking creature-only data.

Variants:
- CreatureCard: has hp and attacks
- SupportCard: tool/item/supporter style cards
- ResourceCard: energy style cards that power creature attacks
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar


class CardRole(str, Enum):
    """Role a card plays in a deck."""

    CREATURE = "creature"
    SUPPORT = "support"
    RESOURCE = "resource"


# Subtype markers that denote a high power tier, with their power bonus
POWER_TIER_SUBTYPES: dict[str, int] = {
    "VMAX": 30,
    "ex": 25,
    "V": 20,
    "GX": 20,
}


@dataclass(frozen=True, slots=True)
class Attack:
    """
    A single creature attack.

    Attributes:
        name: Attack name
        energy_cost: Number of resource cards required to use it
        damage: Base damage dealt
    """

    name: str = ""
    energy_cost: int = 0
    damage: int = 0


@dataclass(frozen=True, slots=True)
class Card:
    """
    Common base for all catalog cards.

    Attributes:
        id: Catalog identifier (unique)
        name: Printed card name
        subtypes: Free-form tags, including power-tier markers
        element_types: Elemental types (e.g. "Fire", "Water")
        abilities: Ability texts
        rarity: Rarity label as printed
        text: Rules text used for keyword checks
        legal_formats: Formats the card is legal in (empty = unrestricted)
        release_date: ISO release date, used to bias towards newer cards
    """

    role: ClassVar[CardRole]

    id: str
    name: str
    subtypes: frozenset[str] = field(default_factory=frozenset)
    element_types: frozenset[str] = field(default_factory=frozenset)
    abilities: tuple[str, ...] = ()
    rarity: str = ""
    text: str = ""
    legal_formats: frozenset[str] = field(default_factory=frozenset)
    release_date: str | None = None

    def is_legal_in(self, format_name: str | None) -> bool:
        """Check format legality. No format or no legality data means legal."""
        if not format_name or not self.legal_formats:
            return True
        wanted = format_name.lower()
        return any(f.lower() == wanted for f in self.legal_formats)

    @property
    def has_abilities(self) -> bool:
        return len(self.abilities) > 0

    def power_tier_bonus(self) -> int:
        """Largest power bonus among this card's subtype markers."""
        return max((POWER_TIER_SUBTYPES.get(s, 0) for s in self.subtypes), default=0)

    def has_power_tier(self) -> bool:
        return any(s in POWER_TIER_SUBTYPES for s in self.subtypes)


@dataclass(frozen=True, slots=True)
class CreatureCard(Card):
    """A creature card. Only creatures have hp and attacks."""

    role: ClassVar[CardRole] = CardRole.CREATURE

    hp: int = 0
    attacks: tuple[Attack, ...] = ()

    def damage_efficiency(self) -> float:
        """
        Best damage-per-energy ratio across attacks, normalized by 100.

        Returns 0.0 for creatures without attacks.
        """
        best = 0.0
        for attack in self.attacks:
            best = max(best, attack.damage / max(1, attack.energy_cost))
        return best / 100

    def best_attack_damage(self) -> int:
        return max((a.damage for a in self.attacks), default=0)


@dataclass(frozen=True, slots=True)
class SupportCard(Card):
    """A support (trainer) card."""

    role: ClassVar[CardRole] = CardRole.SUPPORT


@dataclass(frozen=True, slots=True)
class ResourceCard(Card):
    """A resource (energy) card."""

    role: ClassVar[CardRole] = CardRole.RESOURCE


CARD_TYPES: dict[CardRole, type[Card]] = {
    CardRole.CREATURE: CreatureCard,
    CardRole.SUPPORT: SupportCard,
    CardRole.RESOURCE: ResourceCard,
}

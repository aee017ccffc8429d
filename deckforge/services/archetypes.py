"""
Archetype knowledge tables.

Static, curated data the scoring heuristics lean on: staple cards per
archetype, the rules-text keywords that signal an archetype fit, and the
archetypes considered viable at each spending bracket.

Keyword matching is a plain case-insensitive substring search. The
scoring thresholds were tuned against exactly this behavior.
"""

from deckforge.models.card import Card
from deckforge.models.constraints import Archetype, BudgetTier

ARCHETYPE_STAPLES: dict[str, tuple[str, ...]] = {
    Archetype.AGGRO.value: ("swsh1-79", "swsh1-169", "swsh1-178"),
    Archetype.CONTROL.value: ("swsh1-80", "swsh1-176", "swsh1-182"),
}

ARCHETYPE_TRAITS: dict[str, tuple[str, ...]] = {
    Archetype.AGGRO.value: ("quick", "fast", "rush"),
    Archetype.CONTROL.value: ("disrupt", "heal", "stall"),
    Archetype.COMBO.value: ("when", "if you", "this ability"),
}

# Upper bounds (exclusive) of each bracket; anything above is premium
BUDGET_TIER_BOUNDS: tuple[tuple[float, BudgetTier], ...] = (
    (50.0, BudgetTier.BUDGET),
    (150.0, BudgetTier.STANDARD),
    (300.0, BudgetTier.COMPETITIVE),
)

BUDGET_TIER_ARCHETYPES: dict[BudgetTier, tuple[Archetype, ...]] = {
    BudgetTier.BUDGET: (Archetype.AGGRO, Archetype.SPREAD),
    BudgetTier.STANDARD: (
        Archetype.AGGRO,
        Archetype.MIDRANGE,
        Archetype.SPREAD,
        Archetype.TOOLBOX,
    ),
    BudgetTier.COMPETITIVE: (
        Archetype.CONTROL,
        Archetype.COMBO,
        Archetype.MIDRANGE,
        Archetype.TURBO,
    ),
    BudgetTier.PREMIUM: tuple(Archetype),
}


def _key(archetype: str | None) -> str:
    return (archetype or "").strip().lower()


def get_archetype_staples(archetype: str | None) -> tuple[str, ...]:
    """Staple card ids for an archetype; empty for unknown archetypes."""
    return ARCHETYPE_STAPLES.get(_key(archetype), ())


def fits_archetype(card: Card, archetype: str | None) -> bool:
    """True if the card's rules or ability text mentions an archetype trait."""
    traits = ARCHETYPE_TRAITS.get(_key(archetype), ())
    if not traits:
        return False
    card_text = f"{card.text} {' '.join(card.abilities)}".lower()
    return any(trait in card_text for trait in traits)


def get_budget_tier(budget: float) -> BudgetTier:
    for upper, tier in BUDGET_TIER_BOUNDS:
        if budget < upper:
            return tier
    return BudgetTier.PREMIUM


def budget_archetypes(tier: BudgetTier) -> tuple[Archetype, ...]:
    """Viable archetypes for a budget tier, in preference order."""
    return BUDGET_TIER_ARCHETYPES.get(tier, (Archetype.AGGRO,))

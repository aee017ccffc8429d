"""
Pairwise card synergy.

Scores how well two cards work together on a [0, 1] scale, starting from
a neutral 0.5 and adding a bonus for each interaction found:

- +0.2 shared element type
- +0.3 resource card whose name names the creature's element type
- +0.2 support card whose text mentions the creature's element type
- +0.1 both cards have abilities

Role-specific terms are checked in both argument orders, so the score is
symmetric. Pure function: no I/O, no state.
"""

from deckforge.models.card import Card, CreatureCard, ResourceCard, SupportCard

NEUTRAL_SYNERGY = 0.5
SHARED_TYPE_BONUS = 0.2
RESOURCE_MATCH_BONUS = 0.3
SUPPORT_REFERENCE_BONUS = 0.2
ABILITY_BONUS = 0.1


def _resource_powers(resource: Card, creature: Card) -> bool:
    if not isinstance(resource, ResourceCard) or not isinstance(creature, CreatureCard):
        return False
    name = resource.name.lower()
    return any(t.lower() in name for t in creature.element_types)


def _support_references(support: Card, creature: Card) -> bool:
    if not isinstance(support, SupportCard) or not isinstance(creature, CreatureCard):
        return False
    if not support.text:
        return False
    text = support.text.lower()
    return any(t.lower() in text for t in creature.element_types)


def synergy(card_a: Card, card_b: Card) -> float:
    """
    Synergy between two cards.

    Returns:
        Score in [0, 1]
    """
    score = NEUTRAL_SYNERGY

    if card_a.element_types & card_b.element_types:
        score += SHARED_TYPE_BONUS

    if _resource_powers(card_a, card_b) or _resource_powers(card_b, card_a):
        score += RESOURCE_MATCH_BONUS

    if _support_references(card_a, card_b) or _support_references(card_b, card_a):
        score += SUPPORT_REFERENCE_BONUS

    if card_a.has_abilities and card_b.has_abilities:
        score += ABILITY_BONUS

    return min(1.0, score)

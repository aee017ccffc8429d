"""
Value Scoring — Performance Per Dollar.

Card value rewards cheap cards that still pull their weight: hp bought
per dollar, attack efficiency and abilities for creatures, draw/search
effects for support cards, special resources, and common rarities.
Deck value is projected performance divided by what the deck costs.

INVARIANTS:
- Card value is in [0, 1]
- Value cards have a known price; unpriced cards are never "hidden value"
- Hard constraints apply to value cards as to any other suggestion
"""

import logging

from deckforge.models.card import Card, CreatureCard, ResourceCard, SupportCard
from deckforge.models.recommendation import DeckRecommendation
from deckforge.optimization.candidates import filter_hard_constraints
from deckforge.optimization.context import OptimizationContext
from deckforge.services.catalog import CardFilter

logger = logging.getLogger(__name__)

BASE_CARD_VALUE = 0.5
ABILITY_VALUE = 0.2
CARD_ADVANTAGE_VALUE = 0.3
CHEAP_SUPPORT_VALUE = 0.2
CHEAP_SUPPORT_PRICE = 2.0
SPECIAL_RESOURCE_VALUE = 0.2
COMMON_RARITY_VALUE = 0.1
COMMON_RARITIES = frozenset({"common", "uncommon"})
CARD_ADVANTAGE_KEYWORDS = ("draw", "search")

# Strictly above this counts as a value card
VALUE_CARD_THRESHOLD = 0.7
MAX_VALUE_CARDS = 20

# Performance credited to every deck before its projected improvement
BASE_DECK_PERFORMANCE = 70.0


def card_value(card: Card, price: float | None) -> float:
    """
    Value of a card at a given unit price, 0-1.

    Unknown prices are scored as 1.0.
    """
    price = price or 1.0
    value = BASE_CARD_VALUE

    if isinstance(card, CreatureCard):
        if card.hp > 0:
            value += card.hp / price / 100
        value += card.damage_efficiency()
        if card.has_abilities:
            value += ABILITY_VALUE

    elif isinstance(card, SupportCard):
        text = card.text.lower()
        if any(keyword in text for keyword in CARD_ADVANTAGE_KEYWORDS):
            value += CARD_ADVANTAGE_VALUE
        if price < CHEAP_SUPPORT_PRICE:
            value += CHEAP_SUPPORT_VALUE

    elif isinstance(card, ResourceCard):
        if "Special" in card.subtypes:
            value += SPECIAL_RESOURCE_VALUE

    if card.rarity.lower() in COMMON_RARITIES:
        value += COMMON_RARITY_VALUE

    return min(1.0, value)


def deck_value_score(recommendation: DeckRecommendation) -> float:
    """Projected performance per dollar of a recommendation."""
    performance = recommendation.expected_impact.overall_improvement + BASE_DECK_PERFORMANCE
    total = recommendation.cost_analysis.total_cost or 1.0
    return performance / total


def find_value_cards(
    ctx: OptimizationContext,
    max_price: float,
    limit: int = MAX_VALUE_CARDS,
) -> list[Card]:
    """
    Find underpriced cards that perform well for what they cost.

    Args:
        ctx: Request context; its constraints supply the format and
            the exclusion and ownership filters
        max_price: Highest unit price considered
        limit: Maximum number of cards returned

    Returns:
        Value cards, best first. Ties keep catalog order.
    """
    pool = ctx.catalog.find_cards(CardFilter(format=ctx.constraints.format))
    pool = filter_hard_constraints(pool, ctx.constraints)

    scored: list[tuple[float, Card]] = []
    for card in pool:
        price = ctx.prices.price(card.id)
        if price is None or price > max_price:
            continue
        value = card_value(card, price)
        if value > VALUE_CARD_THRESHOLD:
            scored.append((value, card))

    scored.sort(key=lambda item: item[0], reverse=True)
    found = [card for _, card in scored[:limit]]

    logger.info(
        "value_cards_found",
        extra={
            "format": ctx.constraints.format,
            "max_price": max_price,
            "pool": len(pool),
            "qualifying": len(scored),
            "returned": len(found),
        },
    )
    return found

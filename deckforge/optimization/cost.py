"""
Cost Calculator — What a Change Set Costs.

- added_cost: unit price * quantity of every card added or brought in
  by a replace
- removed_value: unit price * quantity of every card removed or
  displaced by a replace
- net_cost = added_cost - removed_value
- total_cost is the spend on new cards (added_cost); it is what budgets
  are checked against

INVARIANTS:
- O(changes) given a warm price cache; re-run after every budget mutation
- Same changes + same cache -> identical CostBreakdown
- Unknown prices are charged at the fallback price and listed in
  unpriced_card_ids, never treated as free
"""

from collections.abc import Sequence

from deckforge.models.deck import Deck
from deckforge.models.recommendation import CardChange, CardCost, ChangeAction, CostBreakdown
from deckforge.services.pricing import PriceCache

# Added spend above which cheaper alternatives are worth surfacing
BUDGET_FRIENDLY_THRESHOLD = 100.0


def change_cost(change: CardChange, prices: PriceCache) -> float:
    """Spend a single change contributes (zero for removals)."""
    if change.action is ChangeAction.REMOVE:
        return 0.0
    unit_price, _ = prices.price_or_fallback(change.card.id)
    return unit_price * change.quantity


def cost(changes: Sequence[CardChange], prices: PriceCache) -> CostBreakdown:
    """
    Aggregate cost of a change set.

    Args:
        changes: Changes to price
        prices: Request-scoped price cache

    Returns:
        CostBreakdown with one per-card line per added card
    """
    added_cost = 0.0
    removed_value = 0.0
    per_card: list[CardCost] = []
    unpriced: dict[str, None] = {}

    for change in changes:
        unit_price, known = prices.price_or_fallback(change.card.id)
        if not known:
            unpriced.setdefault(change.card.id)
        line_total = unit_price * change.quantity

        if change.action is ChangeAction.REMOVE:
            removed_value += line_total
            continue

        added_cost += line_total
        per_card.append(
            CardCost(
                card=change.card,
                quantity=change.quantity,
                unit_price=unit_price,
                total_price=line_total,
                trend=prices.trend(change.card.id),
                price_known=known,
            )
        )

        if change.action is ChangeAction.REPLACE and change.current_card is not None:
            old_price, old_known = prices.price_or_fallback(change.current_card.id)
            if not old_known:
                unpriced.setdefault(change.current_card.id)
            removed_value += old_price * change.quantity

    return CostBreakdown(
        total_cost=added_cost,
        added_cost=added_cost,
        removed_value=removed_value,
        net_cost=added_cost - removed_value,
        per_card_cost=tuple(per_card),
        unpriced_card_ids=tuple(unpriced),
        budget_friendly_alternatives=added_cost > BUDGET_FRIENDLY_THRESHOLD,
    )


def deck_cost(deck: Deck, prices: PriceCache) -> CostBreakdown:
    """Cost of buying every card in a deck."""
    changes = [
        CardChange(action=ChangeAction.ADD, card=entry.card, quantity=entry.quantity)
        for entry in deck.cards
    ]
    return cost(changes, prices)

"""
Candidate Search — Plausible Substitutes for a Card.

Enumerates catalog cards that could stand in for a card being replaced.
The search is heuristic and bounded: similar cards of the same role,
unioned with a short freshness-biased list of meta cards, filtered
through the caller's hard constraints and capped.

INVARIANTS:
- Hard constraints (exclusions, format legality, ownership when
  requested) are enforced here; no violating card leaves this module
- The card being replaced is never its own candidate
- An empty result is a normal outcome, not an error
- Same catalog + same request -> same candidates, in the same order
"""

import logging

from deckforge.models.card import Card, CreatureCard, SupportCard
from deckforge.models.constraints import OptimizationConstraints
from deckforge.models.failure import ConstraintViolationError
from deckforge.optimization.context import OptimizationContext
from deckforge.services.catalog import CardFilter

logger = logging.getLogger(__name__)


def constraint_violation(card: Card, constraints: OptimizationConstraints) -> str | None:
    """
    Check a card against the hard constraints.

    Returns:
        Reason the card is not allowed, or None if it is allowed
    """
    if card.id in constraints.must_exclude_cards:
        return "card is on the exclusion list"
    if not card.is_legal_in(constraints.format):
        return f"card is not legal in {constraints.format}"
    if constraints.only_owned_cards and card.id not in constraints.owned_card_ids:
        return "card is not in the player's collection"
    return None


def filter_hard_constraints(
    cards: list[Card],
    constraints: OptimizationConstraints,
) -> list[Card]:
    """Keep only cards that satisfy every hard constraint. Order is kept."""
    return [card for card in cards if constraint_violation(card, constraints) is None]


def validate_card_allowed(card: Card, constraints: OptimizationConstraints) -> None:
    """
    Final guard before a card is placed in a recommendation.

    Raises:
        ConstraintViolationError: If the card violates a hard constraint
    """
    reason = constraint_violation(card, constraints)
    if reason is not None:
        raise ConstraintViolationError(card.id, reason)


def _similar_cards_filter(card: Card, ctx: OptimizationContext) -> CardFilter | None:
    """Catalog query for cards similar to the one being replaced. Uncapped."""
    constraints = ctx.constraints
    base = {
        "role": card.role,
        "exclude_ids": frozenset({card.id}) | constraints.must_exclude_cards,
        "format": constraints.format,
    }

    if isinstance(card, CreatureCard):
        window = ctx.config.hp_window
        return CardFilter(
            element_types_any=card.element_types,
            hp_min=max(0, card.hp - window),
            hp_max=card.hp + window,
            **base,
        )
    if isinstance(card, SupportCard):
        return CardFilter(subtypes_any=card.subtypes, **base)

    # Resource cards only draw from the meta list
    return None


def _meta_cards_filter(card: Card, ctx: OptimizationContext) -> CardFilter:
    return CardFilter(
        role=card.role,
        exclude_ids=frozenset({card.id}) | ctx.constraints.must_exclude_cards,
        format=ctx.constraints.format,
        newest_first=True,
    )


def _within_price(card: Card, max_price: float, ctx: OptimizationContext) -> bool:
    price = ctx.prices.price(card.id)
    return price is not None and price <= max_price


def _eligible(
    cards: list[Card],
    ctx: OptimizationContext,
    max_price: float | None,
) -> list[Card]:
    """Hard constraints, then the optional price ceiling. Order is kept."""
    eligible = filter_hard_constraints(cards, ctx.constraints)
    if max_price is not None:
        eligible = [c for c in eligible if _within_price(c, max_price, ctx)]
    return eligible


def find_candidates(
    card_to_replace: Card,
    ctx: OptimizationContext,
    max_price: float | None = None,
) -> list[Card]:
    """
    Find substitute candidates for a card.

    Applies, in order:
    1. Similar cards of the same role (creatures: shared element type and
       hp within the window; support: shared subtype)
    2. Recent cards of the same role, newest first
    3. Hard constraints (exclusions, format, ownership) on both lists
    4. Optional unit price ceiling (unknown prices never pass a ceiling)
    5. Cap similar at candidate_limit and recent at meta_candidate_limit
    6. Union, de-duplicated by id (first occurrence wins), capped at
       candidate_limit

    Caps come after every filter, so a qualifying card is never crowded
    out by cards that would have been filtered anyway.

    Args:
        card_to_replace: Card being replaced
        ctx: Request context (catalog, constraints, settings, prices)
        max_price: Optional per-card price ceiling

    Returns:
        Candidate cards, possibly empty
    """
    similar: list[Card] = []
    similar_filter = _similar_cards_filter(card_to_replace, ctx)
    if similar_filter is not None:
        similar = ctx.catalog.find_cards(similar_filter)
    recent = ctx.catalog.find_cards(_meta_cards_filter(card_to_replace, ctx))

    eligible_similar = _eligible(similar, ctx, max_price)[: ctx.config.candidate_limit]
    eligible_recent = _eligible(recent, ctx, max_price)[: ctx.config.meta_candidate_limit]

    unique: dict[str, Card] = {}
    for card in [*eligible_similar, *eligible_recent]:
        if card.id != card_to_replace.id:
            unique.setdefault(card.id, card)

    candidates = list(unique.values())[: ctx.config.candidate_limit]

    logger.info(
        "candidates_found",
        extra={
            "card_id": card_to_replace.id,
            "similar": len(similar),
            "recent": len(recent),
            "eligible_similar": len(eligible_similar),
            "eligible_recent": len(eligible_recent),
            "max_price": max_price,
            "final": len(candidates),
        },
    )
    return candidates


def family_name(card: Card) -> str:
    """First word of the card name, shared by cards of the same family."""
    parts = card.name.split()
    return parts[0] if parts else card.name


def find_family_candidates(
    card: Card,
    ctx: OptimizationContext,
    max_price: float | None = None,
) -> list[Card]:
    """
    Find same-family cards of the same role (shared name prefix).

    Hard constraints and the optional price ceiling apply as in
    find_candidates. No cap: families are small.
    """
    family = ctx.catalog.find_cards(
        CardFilter(
            role=card.role,
            exclude_ids=frozenset({card.id}),
            format=ctx.constraints.format,
            name_prefix=family_name(card),
        )
    )
    return _eligible(family, ctx, max_price)

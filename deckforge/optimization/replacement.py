"""
Replacement Selector — Score Candidates, Pick the Best.

Scores each candidate substitute for a card against the deck it would
join, and turns the winner into a replace CardChange with the runner-ups
attached as alternatives.

Replacement score starts at 50:
- creature -> creature: + min(hp gain / 10, 10), + efficiency gain * 50
- + average synergy improvement over the other deck cards * 20
- + meta relevance gain / 2
- with a budget set: -30 if the price increase exceeds 20% of the
  budget, +10 if the candidate is cheaper
- +15 if the candidate's text fits the deck's archetype

INVARIANTS:
- Every triggered factor appears in the reasoning, in scoring order
- A replace change carries the replaced card's total copy count
- A candidate already in the deck is never chosen
- No candidate scoring above 0 -> no change (None), not an error
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from deckforge.config import MAX_ALTERNATIVES_PER_CHANGE, SYNERGY_CHANGE_THRESHOLD
from deckforge.models.analysis import DeckAnalysisResult
from deckforge.models.card import Card, CreatureCard
from deckforge.models.deck import Deck
from deckforge.models.recommendation import (
    CardChange,
    ChangeAction,
    SynergyChange,
    SynergyDirection,
)
from deckforge.optimization.candidates import find_candidates, validate_card_allowed
from deckforge.optimization.context import OptimizationContext
from deckforge.optimization.performance import deck_archetype
from deckforge.optimization.synergy import synergy
from deckforge.services.archetypes import fits_archetype

logger = logging.getLogger(__name__)

BASE_SCORE = 50.0
MAX_HP_BONUS = 10.0
EFFICIENCY_WEIGHT = 50
SYNERGY_WEIGHT = 20
EXPENSIVE_RATIO = 0.2
EXPENSIVE_PENALTY = 30
CHEAPER_BONUS = 10
ARCHETYPE_FIT_BONUS = 15


@dataclass(frozen=True)
class ReplacementScore:
    """Score of one candidate as a substitute."""

    card: Card
    score: int
    reasoning: str


def synergy_improvement(
    current: Card,
    candidate: Card,
    others: Sequence[Card],
) -> float:
    """Average synergy gain of candidate over current across other cards."""
    if not others:
        return 0.0
    total = sum(synergy(candidate, other) - synergy(current, other) for other in others)
    return total / len(others)


def synergy_changes(current: Card, candidate: Card, deck: Deck) -> list[SynergyChange]:
    """Deck cards whose synergy moves by more than the change threshold."""
    changes: list[SynergyChange] = []
    for entry in deck.others(current.id):
        before = synergy(current, entry.card)
        after = synergy(candidate, entry.card)
        if abs(after - before) > SYNERGY_CHANGE_THRESHOLD:
            changes.append(
                SynergyChange(
                    affected_card_name=entry.card.name,
                    previous_synergy=before,
                    new_synergy=after,
                    direction=(
                        SynergyDirection.POSITIVE if after > before else SynergyDirection.NEGATIVE
                    ),
                )
            )
    return changes


def evaluate_replacement(
    current: Card,
    candidate: Card,
    deck: Deck,
    analysis: DeckAnalysisResult | None,
    ctx: OptimizationContext,
    include_price: bool = True,
    synergy_pool: Sequence[Card] | None = None,
) -> ReplacementScore:
    """
    Score a candidate as a substitute for current.

    Args:
        current: Card being replaced
        candidate: Proposed substitute
        deck: Deck the substitute would join
        analysis: Baseline analysis (archetype fallback)
        ctx: Request context
        include_price: Apply the price terms (off for power-only ranking)
        synergy_pool: Cards the synergy term is measured against.
            Defaults to every other card in the deck.

    Returns:
        ReplacementScore with score in [0, 100]
    """
    score = BASE_SCORE
    reasons: list[str] = []

    if isinstance(current, CreatureCard) and isinstance(candidate, CreatureCard):
        hp_diff = candidate.hp - current.hp
        if hp_diff > 0:
            score += min(hp_diff / 10, MAX_HP_BONUS)
            reasons.append(f"+{hp_diff} HP")

        current_eff = current.damage_efficiency()
        candidate_eff = candidate.damage_efficiency()
        if candidate_eff > current_eff:
            score += (candidate_eff - current_eff) * EFFICIENCY_WEIGHT
            reasons.append("Better damage efficiency")

    if synergy_pool is None:
        others: Sequence[Card] = [entry.card for entry in deck.others(current.id)]
    else:
        others = [card for card in synergy_pool if card.id != current.id]
    improvement = synergy_improvement(current, candidate, others)
    score += improvement * SYNERGY_WEIGHT
    if improvement > 0:
        reasons.append("Improved deck synergy")

    current_meta = ctx.meta.meta_score(current)
    candidate_meta = ctx.meta.meta_score(candidate)
    if candidate_meta > current_meta:
        score += (candidate_meta - current_meta) / 2
        reasons.append("Higher meta relevance")

    max_budget = ctx.constraints.max_budget
    if include_price and max_budget is not None:
        current_price = ctx.prices.price(current.id)
        candidate_price = ctx.prices.price(candidate.id)
        # Unknown prices never count as cheaper or pricier
        if current_price is not None and candidate_price is not None:
            price_diff = candidate_price - current_price
            if price_diff > max_budget * EXPENSIVE_RATIO:
                score -= EXPENSIVE_PENALTY
                reasons.append("Significantly more expensive")
            elif price_diff < 0:
                score += CHEAPER_BONUS
                reasons.append("More budget-friendly")

    archetype = deck_archetype(deck, analysis)
    if fits_archetype(candidate, archetype):
        score += ARCHETYPE_FIT_BONUS
        reasons.append(f"Better fit for {archetype}")

    final = int(round(max(0.0, min(100.0, score))))
    return ReplacementScore(card=candidate, score=final, reasoning=", ".join(reasons))


def find_best_replacement(
    current: Card,
    deck: Deck,
    analysis: DeckAnalysisResult | None,
    ctx: OptimizationContext,
    candidates: Sequence[Card] | None = None,
    include_price: bool = True,
    synergy_pool: Sequence[Card] | None = None,
    max_price: float | None = None,
) -> CardChange | None:
    """
    Pick the best substitute for a card.

    Args:
        current: Card being replaced
        deck: Deck it belongs to
        analysis: Baseline analysis
        ctx: Request context
        candidates: Pre-computed candidates; searched if not given
        include_price: Apply the price terms when scoring
        synergy_pool: Restrict the synergy term to these cards
        max_price: Per-card price ceiling for the candidate search

    Returns:
        Replace CardChange for the top-scoring candidate, or None if no
        candidate scores above 0

    Raises:
        ConstraintViolationError: If the chosen card violates a hard
            constraint (candidate filtering should make this unreachable)
    """
    if candidates is None:
        candidates = find_candidates(current, ctx, max_price=max_price)

    in_deck = deck.card_ids()
    scored: list[ReplacementScore] = []
    for candidate in candidates:
        if candidate.id in in_deck:
            continue
        result = evaluate_replacement(
            current,
            candidate,
            deck,
            analysis,
            ctx,
            include_price=include_price,
            synergy_pool=synergy_pool,
        )
        logger.debug(
            "Candidate %s for %s scored %d", candidate.id, current.id, result.score
        )
        scored.append(result)

    best: ReplacementScore | None = None
    for result in scored:
        if result.score > (best.score if best else 0):
            best = result

    if best is None:
        logger.info(
            "no_replacement_found",
            extra={"card_id": current.id, "candidates": len(candidates)},
        )
        return None

    validate_card_allowed(best.card, ctx.constraints)

    runner_ups = sorted(
        (r for r in scored if r.card.id != best.card.id),
        key=lambda r: r.score,
        reverse=True,
    )

    return CardChange(
        action=ChangeAction.REPLACE,
        card=best.card,
        current_card=current,
        quantity=deck.quantity_of(current.id),
        reasoning=best.reasoning,
        impact_score=float(best.score),
        synergy_changes=synergy_changes(current, best.card, deck),
        alternatives=[r.card for r in runner_ups[:MAX_ALTERNATIVES_PER_CHANGE]],
    )


def find_replacements(
    targets: Sequence[Card],
    deck: Deck,
    analysis: DeckAnalysisResult | None,
    ctx: OptimizationContext,
    include_price: bool = True,
    synergy_pool: Sequence[Card] | None = None,
    max_price: float | None = None,
) -> list[CardChange]:
    """
    Best replacement for each target card, in target order.

    Targets with no acceptable candidate are left out. Two targets are
    never given the same replacement card.
    """
    changes: list[CardChange] = []
    chosen: set[str] = set()

    for target in targets:
        candidates = [
            c for c in find_candidates(target, ctx, max_price=max_price) if c.id not in chosen
        ]
        change = find_best_replacement(
            target,
            deck,
            analysis,
            ctx,
            candidates=candidates,
            include_price=include_price,
            synergy_pool=synergy_pool,
        )
        if change is not None:
            chosen.add(change.card.id)
            changes.append(change)
    return changes

"""
Budget Optimizer — Drive a Change Set Under a Spending Ceiling.

Greedy loop:
1. While total cost > budget and the iteration cap is not reached:
2.   Check the request deadline
3.   Take the 3 most expensive add/replace changes
4.   For each, search candidates under a per-card price ceiling
     (budget_price_ceiling_ratio * budget) and score them as substitutes
5.   Splice in the best substitute that scores acceptably and is
     strictly cheaper than the entry it replaces
6.   Recompute the total

INVARIANTS:
- Total cost is non-increasing across iterations
- The loop always terminates (iteration cap), even for a budget of 0
- Hitting the cap while over budget is a partial success: the result
  reports the residual overage, it never hides it
- Must-include cards are never substituted
- A substituted replace keeps its quantity and the card it replaces
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from deckforge.models.analysis import DeckAnalysisResult
from deckforge.models.deck import Deck
from deckforge.models.recommendation import CardChange, ChangeAction
from deckforge.optimization.candidates import find_candidates
from deckforge.optimization.context import OptimizationContext
from deckforge.optimization.cost import change_cost, cost
from deckforge.optimization.replacement import evaluate_replacement, synergy_changes

logger = logging.getLogger(__name__)

SUBSTITUTIONS_PER_ITERATION = 3


@dataclass
class BudgetFitResult:
    """Outcome of one budget fitting run."""

    changes: list[CardChange]
    max_budget: float
    total_cost: float
    iterations: int
    cost_history: list[float] = field(default_factory=list)
    substitutions: int = 0

    @property
    def within_budget(self) -> bool:
        return self.total_cost <= self.max_budget

    @property
    def overage(self) -> float:
        return max(0.0, self.total_cost - self.max_budget)


def _cheaper_substitute(
    change: CardChange,
    deck: Deck,
    analysis: DeckAnalysisResult | None,
    ctx: OptimizationContext,
    price_ceiling: float,
    taken_ids: set[str],
) -> CardChange | None:
    """Best acceptable, strictly cheaper stand-in for one change."""
    current_line = change_cost(change, ctx.prices)
    min_score = ctx.config.budget_min_replacement_score

    best: CardChange | None = None
    best_score = -1
    for candidate in find_candidates(change.card, ctx, max_price=price_ceiling):
        if candidate.id in taken_ids:
            continue

        substitute_line = ctx.prices.price_or_fallback(candidate.id)[0] * change.quantity
        if substitute_line >= current_line:
            continue

        result = evaluate_replacement(change.card, candidate, deck, analysis, ctx)
        if result.score < min_score or result.score <= best_score:
            continue

        best_score = result.score
        reasoning = f"Budget substitute for {change.card.name}"
        if result.reasoning:
            reasoning = f"{reasoning}, {result.reasoning}"
        best = CardChange(
            action=change.action,
            card=candidate,
            quantity=change.quantity,
            current_card=change.current_card,
            reasoning=reasoning,
            impact_score=float(result.score),
            synergy_changes=(
                synergy_changes(change.current_card, candidate, deck)
                if change.current_card is not None
                else []
            ),
        )
    return best


def fit_budget(
    deck: Deck,
    changes: Sequence[CardChange],
    max_budget: float,
    ctx: OptimizationContext,
    analysis: DeckAnalysisResult | None = None,
) -> BudgetFitResult:
    """
    Substitute cheaper cards until the change set fits the budget.

    Args:
        deck: Deck the changes apply to (synergy reference)
        changes: Initial change set (not mutated)
        max_budget: Spending ceiling
        ctx: Request context
        analysis: Baseline analysis (archetype fallback for scoring)

    Returns:
        BudgetFitResult; check within_budget and overage

    Raises:
        DeadlineExceededError: If the request deadline passes mid-loop
    """
    working = list(changes)
    total = cost(working, ctx.prices).total_cost
    history = [total]
    cap = ctx.config.budget_iteration_cap
    price_ceiling = max_budget * ctx.config.budget_price_ceiling_ratio
    protected = ctx.constraints.must_include_cards
    substitutions = 0
    iteration = 0

    while total > max_budget and iteration < cap:
        ctx.deadline.check("budget_optimization")

        expensive = sorted(
            (
                i
                for i, change in enumerate(working)
                if change.action is not ChangeAction.REMOVE and change.card.id not in protected
            ),
            key=lambda i: change_cost(working[i], ctx.prices),
            reverse=True,
        )[:SUBSTITUTIONS_PER_ITERATION]

        for index in expensive:
            taken = deck.card_ids() | {c.card.id for c in working}
            substitute = _cheaper_substitute(
                working[index], deck, analysis, ctx, price_ceiling, taken
            )
            if substitute is not None:
                logger.debug(
                    "Substituted %s -> %s", working[index].card.id, substitute.card.id
                )
                working[index] = substitute
                substitutions += 1

        total = cost(working, ctx.prices).total_cost
        history.append(total)
        iteration += 1

    result = BudgetFitResult(
        changes=working,
        max_budget=max_budget,
        total_cost=total,
        iterations=iteration,
        cost_history=history,
        substitutions=substitutions,
    )

    if result.within_budget:
        logger.info(
            "budget_fit_succeeded",
            extra={
                "max_budget": max_budget,
                "total_cost": total,
                "iterations": iteration,
                "substitutions": substitutions,
            },
        )
    else:
        logger.warning(
            "Budget not reached after %d iterations: cost %.2f over budget %.2f by %.2f",
            iteration,
            total,
            max_budget,
            result.overage,
        )
    return result

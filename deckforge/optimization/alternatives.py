"""
Alternative and Upgrade-Path Generator.

Alternatives rerun the replacement pipeline with different constraint
overrides and are returned side by side, never merged:

- budget: a low forced budget, candidates priced under it
- power: no budget, price terms ignored
- synergy: synergy measured only against the deck's core (cards with
  3+ copies that are not underperformers)

Upgrade paths are a ladder of optional future spend (+25/+50/+100 by
default). Each tier searches same-family cards (shared first name word)
and ranks power upgrades by power level. Every tier starts from the
original budget deck; tiers are not stacked.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from deckforge.models.analysis import DeckAnalysisResult
from deckforge.models.card import Card, CreatureCard, SupportCard
from deckforge.models.deck import Deck
from deckforge.models.recommendation import (
    AlternativeChange,
    AlternativeStrategy,
    CardChange,
    ChangeAction,
)
from deckforge.optimization.candidates import find_family_candidates
from deckforge.optimization.context import OptimizationContext
from deckforge.optimization.cost import cost
from deckforge.optimization.replacement import find_replacements

logger = logging.getLogger(__name__)

CORE_MIN_COPIES = 3
UPGRADE_IMPACT_SCORE = 20.0


def _alternative(
    strategy: AlternativeStrategy,
    changes: list[CardChange],
    ctx: OptimizationContext,
    reasoning: str,
    tradeoffs: list[str],
) -> AlternativeChange:
    return AlternativeChange(
        strategy=strategy,
        changes=changes,
        total_impact=sum(c.impact_score for c in changes) / len(changes),
        total_cost=cost(changes, ctx.prices).total_cost,
        reasoning=reasoning,
        tradeoffs=tradeoffs,
    )


def core_cards(deck: Deck, underperformers: Sequence[Card]) -> list[Card]:
    """The deck's backbone: 3+ copies and not flagged as underperforming."""
    flagged = {card.id for card in underperformers}
    seen: set[str] = set()
    core: list[Card] = []
    for entry in deck.cards:
        card = entry.card
        if card.id in flagged or card.id in seen:
            continue
        if deck.quantity_of(card.id) >= CORE_MIN_COPIES:
            seen.add(card.id)
            core.append(card)
    return core


def budget_alternative(
    deck: Deck,
    targets: Sequence[Card],
    analysis: DeckAnalysisResult | None,
    ctx: OptimizationContext,
) -> AlternativeChange | None:
    ceiling = ctx.config.budget_alternative_ceiling
    budget_ctx = ctx.with_constraints(ctx.constraints.with_budget(ceiling))
    changes = find_replacements(targets, deck, analysis, budget_ctx, max_price=ceiling)
    if not changes:
        return None
    return _alternative(
        AlternativeStrategy.BUDGET,
        changes,
        ctx,
        "Budget-friendly replacements with good performance",
        ["Slightly lower power level", "May need more setup"],
    )


def power_alternative(
    deck: Deck,
    targets: Sequence[Card],
    analysis: DeckAnalysisResult | None,
    ctx: OptimizationContext,
) -> AlternativeChange | None:
    power_ctx = ctx.with_constraints(ctx.constraints.with_budget(None))
    changes = find_replacements(targets, deck, analysis, power_ctx, include_price=False)
    if not changes:
        return None
    return _alternative(
        AlternativeStrategy.POWER,
        changes,
        ctx,
        "Maximum performance replacements",
        ["Higher cost", "May be harder to obtain"],
    )


def synergy_alternative(
    deck: Deck,
    targets: Sequence[Card],
    analysis: DeckAnalysisResult | None,
    ctx: OptimizationContext,
) -> AlternativeChange | None:
    core = core_cards(deck, targets)
    if not core:
        return None
    changes = find_replacements(targets, deck, analysis, ctx, synergy_pool=core)
    if not changes:
        return None
    return _alternative(
        AlternativeStrategy.SYNERGY,
        changes,
        ctx,
        "Maximize synergy with the deck's core cards",
        ["May not address all weaknesses", "Focused on specific combos"],
    )


def generate_alternatives(
    deck: Deck,
    targets: Sequence[Card],
    analysis: DeckAnalysisResult | None,
    ctx: OptimizationContext,
) -> list[AlternativeChange]:
    """
    Budget, power and synergy variants for the same replacement targets.

    Strategies that find no change are left out.
    """
    if not targets:
        return []

    alternatives = [
        alt
        for alt in (
            budget_alternative(deck, targets, analysis, ctx),
            power_alternative(deck, targets, analysis, ctx),
            synergy_alternative(deck, targets, analysis, ctx),
        )
        if alt is not None
    ]
    logger.info(
        "alternatives_generated",
        extra={"deck_id": deck.id, "strategies": [a.strategy.value for a in alternatives]},
    )
    return alternatives


# =============================================================================
# UPGRADE PATH
# =============================================================================


@dataclass(frozen=True)
class UpgradeTier:
    focus: str
    total_impact: float
    reasoning: str
    tradeoffs: tuple[str, ...]


UPGRADE_TIERS: tuple[UpgradeTier, ...] = (
    UpgradeTier(
        focus="consistency",
        total_impact=15.0,
        reasoning="First priority upgrades - consistency and speed",
        tradeoffs=("Minimal cost increase", "Significant consistency improvement"),
    ),
    UpgradeTier(
        focus="power",
        total_impact=25.0,
        reasoning="Secondary upgrades - power and versatility",
        tradeoffs=("Moderate cost increase", "Better matchup spread"),
    ),
    UpgradeTier(
        focus="competitive",
        total_impact=40.0,
        reasoning="Full competitive upgrade - tournament ready",
        tradeoffs=("Significant investment", "Top tier performance"),
    ),
)


def power_level(card: Card) -> float:
    """hp + power-tier subtype bonus + best attack damage / 10."""
    level = float(card.power_tier_bonus())
    if isinstance(card, CreatureCard):
        level += card.hp + card.best_attack_damage() / 10
    return level


def is_power_upgrade(original: Card, upgrade: Card) -> bool:
    """Higher hp, or a power-tier subtype the original lacks."""
    if isinstance(original, CreatureCard) and isinstance(upgrade, CreatureCard):
        if upgrade.hp > original.hp:
            return True
    return upgrade.has_power_tier() and not original.has_power_tier()


def _is_upgrade_target(change: CardChange, focus: str) -> bool:
    if focus == "consistency":
        return isinstance(change.card, SupportCard) or "consistency" in change.reasoning
    if focus == "power":
        return isinstance(change.card, CreatureCard) and not change.card.has_power_tier()
    return True


def find_card_upgrade(card: Card, max_price: float, ctx: OptimizationContext) -> Card | None:
    """Most powerful same-family power upgrade priced within max_price."""
    upgrades = [
        candidate
        for candidate in find_family_candidates(card, ctx, max_price=max_price)
        if is_power_upgrade(card, candidate)
    ]
    if not upgrades:
        return None
    # Stable: catalog order breaks ties
    upgrades.sort(key=power_level, reverse=True)
    return upgrades[0]


def find_upgrades(
    base_changes: Sequence[CardChange],
    base_cost: float,
    new_budget: float,
    focus: str,
    ctx: OptimizationContext,
) -> list[CardChange]:
    """Upgrades for one tier, computed from the original deck's changes."""
    targets = [
        c
        for c in base_changes
        if c.action is not ChangeAction.REMOVE and _is_upgrade_target(c, focus)
    ]
    if not targets:
        return []

    per_card_budget = (new_budget - base_cost) / len(targets)
    if per_card_budget <= 0:
        return []

    upgrades: list[CardChange] = []
    for target in targets:
        upgrade = find_card_upgrade(target.card, per_card_budget, ctx)
        if upgrade is None:
            continue
        upgrades.append(
            CardChange(
                action=ChangeAction.REPLACE,
                card=upgrade,
                current_card=target.card,
                quantity=target.quantity,
                reasoning=f"Upgrade for {focus}",
                impact_score=UPGRADE_IMPACT_SCORE,
            )
        )
    return upgrades


def generate_upgrade_path(
    base_changes: Sequence[CardChange],
    base_cost: float,
    current_budget: float,
    ctx: OptimizationContext,
) -> list[AlternativeChange]:
    """
    Tiered upgrade ladder over a budget deck.

    Args:
        base_changes: The budget deck's changes (the original, not a tier)
        base_cost: What the budget deck costs
        current_budget: The budget it was built for
        ctx: Request context

    Returns:
        One AlternativeChange per tier that found upgrades, cheapest tier
        first
    """
    path: list[AlternativeChange] = []
    for increment, tier in zip(ctx.config.upgrade_tier_increments, UPGRADE_TIERS):
        ceiling = current_budget + increment
        changes = find_upgrades(base_changes, base_cost, ceiling, tier.focus, ctx)
        if not changes:
            continue
        path.append(
            AlternativeChange(
                strategy=AlternativeStrategy.UPGRADE,
                changes=changes,
                total_impact=tier.total_impact,
                total_cost=cost(changes, ctx.prices).total_cost,
                reasoning=tier.reasoning,
                tradeoffs=list(tier.tradeoffs),
                budget_ceiling=ceiling,
            )
        )

    logger.info(
        "upgrade_path_generated",
        extra={"current_budget": current_budget, "tiers": len(path)},
    )
    return path

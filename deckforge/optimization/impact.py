"""
Impact Analyzer — Before/After Deltas for a Change Set.

Applies hypothetical changes to a copy of the deck and asks the external
deck analyzer to score the copy. Every impact field is new - baseline.

INVARIANTS:
- The caller's deck is never mutated; apply_changes builds a new Deck
- A replace keeps the replaced entry's quantity
- Matchup deltas of 5 points or less are not reported
- Analyzer failures raise UpstreamAnalyzerError; they are never turned
  into zero deltas
- The deadline is checked before every analyzer call
"""

import logging
from collections.abc import Sequence
from dataclasses import replace

from deckforge.config import MATCHUP_SIGNIFICANCE_THRESHOLD
from deckforge.models.analysis import DeckAnalysisResult
from deckforge.models.deck import Deck, DeckCard
from deckforge.models.failure import UpstreamAnalyzerError
from deckforge.models.recommendation import (
    CardChange,
    ChangeAction,
    ImpactAnalysis,
    MatchupChange,
)
from deckforge.optimization.context import OptimizationContext

logger = logging.getLogger(__name__)


def apply_changes(deck: Deck, changes: Sequence[CardChange]) -> Deck:
    """
    Build a new deck with the changes applied in order.

    - replace: every entry of current_card becomes the new card, same quantity
    - add: raises the quantity of an existing entry, or appends a new one
    - remove: lowers quantities of the card's entries; emptied entries go
    """
    entries = list(deck.cards)

    for change in changes:
        if change.action is ChangeAction.REPLACE:
            if change.current_card is None:
                continue
            old_id = change.current_card.id
            entries = [
                DeckCard(card=change.card, quantity=e.quantity) if e.card.id == old_id else e
                for e in entries
            ]

        elif change.action is ChangeAction.ADD:
            for i, entry in enumerate(entries):
                if entry.card.id == change.card.id:
                    entries[i] = DeckCard(card=entry.card, quantity=entry.quantity + change.quantity)
                    break
            else:
                entries.append(DeckCard(card=change.card, quantity=change.quantity))

        elif change.action is ChangeAction.REMOVE:
            to_remove = change.quantity
            kept: list[DeckCard] = []
            for entry in entries:
                if entry.card.id == change.card.id and to_remove > 0:
                    taken = min(entry.quantity, to_remove)
                    to_remove -= taken
                    if entry.quantity > taken:
                        kept.append(DeckCard(card=entry.card, quantity=entry.quantity - taken))
                    continue
                kept.append(entry)
            entries = kept

    return replace(deck, cards=tuple(entries))


def analyze_deck(deck: Deck, ctx: OptimizationContext, stage: str) -> DeckAnalysisResult:
    """
    Run the external analyzer on a deck under the request deadline.

    Raises:
        DeadlineExceededError: If the deadline has already passed
        UpstreamAnalyzerError: If the analyzer fails in any way
    """
    ctx.deadline.check(stage)
    try:
        return ctx.analyzer.analyze(deck)
    except UpstreamAnalyzerError:
        raise
    except Exception as e:
        logger.warning("Deck analyzer failed during %s: %s", stage, e)
        raise UpstreamAnalyzerError(f"{type(e).__name__}: {e}") from e


def matchup_changes(
    baseline: DeckAnalysisResult,
    updated: DeckAnalysisResult,
) -> list[MatchupChange]:
    """Matchups present in both analyses whose win rate moved significantly."""
    changes: list[MatchupChange] = []
    for matchup in baseline.matchups:
        new_rate = updated.win_rate_against(matchup.archetype)
        if new_rate is None:
            continue
        diff = new_rate - matchup.win_rate
        if abs(diff) > MATCHUP_SIGNIFICANCE_THRESHOLD:
            changes.append(
                MatchupChange(
                    archetype=matchup.archetype,
                    previous_win_rate=matchup.win_rate,
                    new_win_rate=new_rate,
                    reasoning="Improved matchup" if diff > 0 else "Weakened matchup",
                )
            )
    return changes


def compare_analyses(
    baseline: DeckAnalysisResult,
    updated: DeckAnalysisResult,
) -> ImpactAnalysis:
    """Score deltas between two analyses (updated - baseline)."""
    before = baseline.scores
    after = updated.scores
    return ImpactAnalysis(
        overall_improvement=after.overall - before.overall,
        consistency_change=after.consistency - before.consistency,
        power_change=after.power - before.power,
        speed_change=after.speed - before.speed,
        versatility_change=after.versatility - before.versatility,
        meta_relevance_change=after.meta_relevance - before.meta_relevance,
        specific_matchup_changes=tuple(matchup_changes(baseline, updated)),
    )


def impact_of(
    deck: Deck,
    changes: Sequence[CardChange],
    baseline: DeckAnalysisResult,
    ctx: OptimizationContext,
) -> ImpactAnalysis:
    """
    Project the impact of applying changes to a deck.

    Args:
        deck: Original deck (not mutated)
        changes: Change set to simulate
        baseline: Analysis of the original deck
        ctx: Request context (analyzer and deadline)

    Returns:
        ImpactAnalysis with deltas new - baseline

    Raises:
        UpstreamAnalyzerError: If the analyzer fails
        DeadlineExceededError: If the deadline has passed
    """
    modified = apply_changes(deck, changes)
    updated = analyze_deck(modified, ctx, stage="impact_analysis")
    impact = compare_analyses(baseline, updated)

    logger.info(
        "impact_analyzed",
        extra={
            "deck_id": deck.id,
            "changes": len(changes),
            "overall_improvement": impact.overall_improvement,
            "matchup_changes": len(impact.specific_matchup_changes),
        },
    )
    return impact

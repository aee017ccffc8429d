"""
Card performance evaluation.

Scores how well each card pulls its weight inside a specific deck and
flags underperformers for replacement.

Score starts at 50 and moves with each factor:
- no meaningful synergy (> 0.6) with any other card: -20
  otherwise: + average meaningful synergy * 20
- not a staple of the deck's archetype: -10
- creature with damage-per-energy below 0.6: -15
- meta relevance below 30: -15
- more than 3 copies of a non-resource card: -10

INVARIANTS:
- Score is always an int in [0, 100]
- Never raises on malformed card data (creatures with no attacks score
  zero efficiency)
"""

import logging
from dataclasses import dataclass, field

from deckforge.config import MEANINGFUL_SYNERGY_THRESHOLD
from deckforge.models.analysis import DeckAnalysisResult
from deckforge.models.card import CreatureCard, ResourceCard
from deckforge.models.deck import Deck, DeckCard
from deckforge.optimization.synergy import synergy
from deckforge.services.archetypes import get_archetype_staples
from deckforge.services.meta_signal import MetaSource

logger = logging.getLogger(__name__)

BASE_SCORE = 50
NO_SYNERGY_PENALTY = 20
SYNERGY_WEIGHT = 20
OFF_ARCHETYPE_PENALTY = 10
LOW_EFFICIENCY_THRESHOLD = 0.6
LOW_EFFICIENCY_PENALTY = 15
LOW_META_THRESHOLD = 30
LOW_META_PENALTY = 15
MAX_COPIES = 3
EXCESS_COPIES_PENALTY = 10


@dataclass
class CardPerformance:
    """Performance score of one deck card, with the factors that moved it."""

    deck_card: DeckCard
    score: int
    reasons: list[str] = field(default_factory=list)


def deck_archetype(deck: Deck, analysis: DeckAnalysisResult | None) -> str | None:
    """The deck's archetype hint, falling back to the analyzer's verdict."""
    if deck.archetype:
        return deck.archetype
    if analysis is not None:
        return analysis.primary_archetype
    return None


def evaluate(
    deck_card: DeckCard,
    deck: Deck,
    analysis: DeckAnalysisResult | None,
    meta: MetaSource,
) -> CardPerformance:
    """
    Score how well a card performs in its deck.

    Args:
        deck_card: Entry being evaluated
        deck: Deck it belongs to
        analysis: Baseline analysis of the deck (used for the archetype
            when the deck has no hint)
        meta: Meta-relevance signal

    Returns:
        CardPerformance with score in [0, 100] and reasons
    """
    card = deck_card.card
    score = float(BASE_SCORE)
    reasons: list[str] = []

    meaningful = [
        value
        for value in (synergy(card, other.card) for other in deck.others(card.id))
        if value > MEANINGFUL_SYNERGY_THRESHOLD
    ]
    if not meaningful:
        score -= NO_SYNERGY_PENALTY
        reasons.append("No significant synergies with other cards")
    else:
        score += sum(meaningful) / len(meaningful) * SYNERGY_WEIGHT

    archetype = deck_archetype(deck, analysis)
    if card.id not in get_archetype_staples(archetype):
        score -= OFF_ARCHETYPE_PENALTY
        reasons.append(f"Not typical for {archetype or 'unknown'} archetype")

    if isinstance(card, CreatureCard) and card.damage_efficiency() < LOW_EFFICIENCY_THRESHOLD:
        score -= LOW_EFFICIENCY_PENALTY
        reasons.append("Low damage-to-energy ratio")

    if meta.meta_score(card) < LOW_META_THRESHOLD:
        score -= LOW_META_PENALTY
        reasons.append("Low meta relevance")

    if deck.quantity_of(card.id) > MAX_COPIES and not isinstance(card, ResourceCard):
        score -= EXCESS_COPIES_PENALTY
        reasons.append("Potentially excessive copies")

    final = int(round(max(0.0, min(100.0, score))))
    return CardPerformance(deck_card=deck_card, score=final, reasons=reasons)


def identify_underperformers(
    deck: Deck,
    analysis: DeckAnalysisResult | None,
    meta: MetaSource,
    threshold: int = 50,
) -> list[CardPerformance]:
    """
    Find cards scoring below the threshold, worst first.

    Each card id is evaluated once even if the deck lists it in several
    entries. Callers cap the list before replacement search.
    """
    seen: set[str] = set()
    flagged: list[CardPerformance] = []

    for deck_card in deck.cards:
        if deck_card.card.id in seen:
            continue
        seen.add(deck_card.card.id)

        performance = evaluate(deck_card, deck, analysis, meta)
        logger.debug(
            "Card %s scored %d (%s)",
            deck_card.card.id,
            performance.score,
            ", ".join(performance.reasons),
        )
        if performance.score < threshold:
            flagged.append(performance)

    # Stable sort keeps deck order among equal scores
    flagged.sort(key=lambda p: p.score)
    return flagged

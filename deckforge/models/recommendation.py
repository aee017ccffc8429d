from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from deckforge.models.card import Card
from deckforge.models.failure import FailureKind


class ChangeAction(str, Enum):
    """What a CardChange does to the deck."""

    ADD = "add"
    REMOVE = "remove"
    REPLACE = "replace"


class SynergyDirection(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class PriceTrend(str, Enum):
    RISING = "rising"
    STABLE = "stable"
    FALLING = "falling"


class RecommendationType(str, Enum):
    OPTIMIZE_EXISTING = "optimize_existing"
    BUDGET_BUILD = "budget_build"


class AlternativeStrategy(str, Enum):
    """Which variant generator produced an AlternativeChange."""

    BUDGET = "budget"
    POWER = "power"
    SYNERGY = "synergy"
    UPGRADE = "upgrade"


@dataclass(frozen=True)
class SynergyChange:
    """How a replacement shifts synergy with one other deck card."""

    affected_card_name: str
    previous_synergy: float
    new_synergy: float
    direction: SynergyDirection


@dataclass
class CardChange:
    """
    A single recommended change.

    Attributes:
        action: add, remove or replace
        card: Target card (the card added, or removed)
        current_card: Card being replaced (replace only)
        quantity: Copies affected; for replace this equals the replaced
            card's total copies in the deck
        reasoning: Comma-joined factors that produced the score
        impact_score: 0-100 score of the change
        synergy_changes: Per-card synergy shifts caused by the change
        alternatives: Runner-up cards, best first
    """

    action: ChangeAction
    card: Card
    quantity: int
    current_card: Card | None = None
    reasoning: str = ""
    impact_score: float = 0.0
    synergy_changes: list[SynergyChange] = field(default_factory=list)
    alternatives: list[Card] = field(default_factory=list)


@dataclass(frozen=True)
class CardCost:
    """Price line for one card in a change set."""

    card: Card
    quantity: int
    unit_price: float
    total_price: float
    trend: PriceTrend = PriceTrend.STABLE
    price_known: bool = True


@dataclass(frozen=True)
class CostBreakdown:
    """Aggregate cost of a change set."""

    total_cost: float = 0.0
    added_cost: float = 0.0
    removed_value: float = 0.0
    net_cost: float = 0.0
    per_card_cost: tuple[CardCost, ...] = ()
    unpriced_card_ids: tuple[str, ...] = ()
    budget_friendly_alternatives: bool = False


@dataclass(frozen=True)
class MatchupChange:
    """A matchup whose estimated win rate moved significantly."""

    archetype: str
    previous_win_rate: float
    new_win_rate: float
    reasoning: str


@dataclass(frozen=True)
class ImpactAnalysis:
    """Projected score deltas (new - baseline) from applying changes."""

    overall_improvement: float = 0.0
    consistency_change: float = 0.0
    power_change: float = 0.0
    speed_change: float = 0.0
    versatility_change: float = 0.0
    meta_relevance_change: float = 0.0
    specific_matchup_changes: tuple[MatchupChange, ...] = ()


@dataclass
class AlternativeChange:
    """A variant change set produced by one alternative strategy."""

    strategy: AlternativeStrategy
    changes: list[CardChange]
    total_impact: float
    total_cost: float
    reasoning: str
    tradeoffs: list[str] = field(default_factory=list)
    budget_ceiling: float | None = None


def _new_recommendation_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex[:12]}"


@dataclass
class DeckRecommendation:
    """
    The result of one optimization call.

    A recommendation with no changes is a valid answer ("nothing better
    found"). Non-fatal outcomes are listed in outcome_flags and explained
    in the reasoning trace.
    """

    type: RecommendationType
    suggested_changes: list[CardChange]
    reasoning: list[str]
    expected_impact: ImpactAnalysis
    cost_analysis: CostBreakdown
    alternative_options: list[AlternativeChange] = field(default_factory=list)
    difficulty_rating: int = 3
    meta_relevance: float = 0.0
    confidence: float = 0.0
    budget_target: float | None = None
    budget_overage: float = 0.0
    outcome_flags: set[FailureKind] = field(default_factory=set)
    id: str = field(default_factory=lambda: _new_recommendation_id("rec"))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def budget_met(self) -> bool:
        return FailureKind.BUDGET_NOT_REACHED not in self.outcome_flags

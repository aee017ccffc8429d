from deckforge.models.analysis import DeckAnalysisResult, DeckScores, MatchupWinRate
from deckforge.models.card import (
    POWER_TIER_SUBTYPES,
    Attack,
    Card,
    CardRole,
    CreatureCard,
    ResourceCard,
    SupportCard,
)
from deckforge.models.constraints import Archetype, BudgetTier, OptimizationConstraints
from deckforge.models.deadline import RequestDeadline
from deckforge.models.deck import Deck, DeckCard
from deckforge.models.failure import (
    CardNotFoundError,
    ConstraintViolationError,
    DeadlineExceededError,
    FailureDetail,
    FailureKind,
    KnownError,
    UpstreamAnalyzerError,
)
from deckforge.models.recommendation import (
    AlternativeChange,
    AlternativeStrategy,
    CardChange,
    CardCost,
    ChangeAction,
    CostBreakdown,
    DeckRecommendation,
    ImpactAnalysis,
    MatchupChange,
    PriceTrend,
    RecommendationType,
    SynergyChange,
    SynergyDirection,
)

__all__ = [
    "POWER_TIER_SUBTYPES",
    "AlternativeChange",
    "AlternativeStrategy",
    "Archetype",
    "Attack",
    "BudgetTier",
    "Card",
    "CardChange",
    "CardCost",
    "CardNotFoundError",
    "CardRole",
    "ChangeAction",
    "ConstraintViolationError",
    "CostBreakdown",
    "CreatureCard",
    "DeadlineExceededError",
    "Deck",
    "DeckAnalysisResult",
    "DeckCard",
    "DeckRecommendation",
    "DeckScores",
    "FailureDetail",
    "FailureKind",
    "ImpactAnalysis",
    "KnownError",
    "MatchupChange",
    "MatchupWinRate",
    "OptimizationConstraints",
    "PriceTrend",
    "RecommendationType",
    "RequestDeadline",
    "ResourceCard",
    "SupportCard",
    "SynergyChange",
    "SynergyDirection",
    "UpstreamAnalyzerError",
]

from deckforge.optimization.alternatives import (
    core_cards,
    generate_alternatives,
    generate_upgrade_path,
    is_power_upgrade,
    power_level,
)
from deckforge.optimization.budget import BudgetFitResult, fit_budget
from deckforge.optimization.candidates import (
    filter_hard_constraints,
    find_candidates,
    find_family_candidates,
    validate_card_allowed,
)
from deckforge.optimization.context import OptimizationContext
from deckforge.optimization.cost import change_cost, cost, deck_cost
from deckforge.optimization.impact import apply_changes, compare_analyses, impact_of
from deckforge.optimization.optimizer import (
    DeckOptimizer,
    DeckTemplateSource,
    calculate_confidence,
)
from deckforge.optimization.performance import (
    CardPerformance,
    evaluate,
    identify_underperformers,
)
from deckforge.optimization.replacement import (
    ReplacementScore,
    evaluate_replacement,
    find_best_replacement,
    find_replacements,
)
from deckforge.optimization.synergy import synergy
from deckforge.optimization.value import card_value, deck_value_score, find_value_cards

__all__ = [
    "BudgetFitResult",
    "CardPerformance",
    "DeckOptimizer",
    "DeckTemplateSource",
    "OptimizationContext",
    "ReplacementScore",
    "apply_changes",
    "calculate_confidence",
    "card_value",
    "change_cost",
    "compare_analyses",
    "core_cards",
    "cost",
    "deck_cost",
    "deck_value_score",
    "evaluate",
    "evaluate_replacement",
    "filter_hard_constraints",
    "find_best_replacement",
    "find_candidates",
    "find_family_candidates",
    "find_replacements",
    "find_value_cards",
    "fit_budget",
    "generate_alternatives",
    "generate_upgrade_path",
    "identify_underperformers",
    "impact_of",
    "is_power_upgrade",
    "power_level",
    "synergy",
    "validate_card_allowed",
]

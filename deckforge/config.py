from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="DECKFORGE_")

    # External deck analyzer service
    analyzer_url: str = "http://localhost:8001"
    analyzer_timeout_seconds: float = 30.0

    # Wall-clock limit for a single optimization call (None = no deadline)
    request_deadline_seconds: float | None = None

    # Budget optimizer loop
    budget_iteration_cap: int = 10
    budget_price_ceiling_ratio: float = 0.10
    budget_min_replacement_score: int = 40

    # Underperformer detection
    underperformer_threshold: int = 50
    max_underperformers: int = 5

    # Candidate search
    candidate_limit: int = 20
    meta_candidate_limit: int = 10
    hp_window: int = 30

    # Alternatives and upgrade paths
    budget_alternative_ceiling: float = 50.0
    upgrade_tier_increments: tuple[float, ...] = (25.0, 50.0, 100.0)

    # Value search and cost/performance comparison
    value_card_max_price: float = 5.0
    cost_performance_ratios: tuple[float, ...] = (0.7, 1.0, 1.3)

    # Pricing
    unknown_price_fallback: float = 1.0
    variant_min_card_price: float = 5.0
    variant_target_price_ratio: float = 0.3


settings = Settings()


# =============================================================================
# SCORING THRESHOLDS
# =============================================================================

# Pairwise synergy above this counts as a meaningful interaction
MEANINGFUL_SYNERGY_THRESHOLD = 0.6

# Matchup win-rate deltas at or below this many points are noise
MATCHUP_SIGNIFICANCE_THRESHOLD = 5.0

# Synergy shifts at or below this are not reported as synergy changes
SYNERGY_CHANGE_THRESHOLD = 0.1

# Number of runner-up candidates kept on a CardChange
MAX_ALTERNATIVES_PER_CHANGE = 3

"""
Optimization constraints — the caller's hard limits on suggestions.

Exclusions, format legality and (optionally) ownership are HARD
constraints: a card that violates them must never appear in a
recommendation. Budget is a soft target the optimizers work towards.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Archetype(str, Enum):
    """Deck archetype labels."""

    AGGRO = "aggro"
    CONTROL = "control"
    COMBO = "combo"
    MIDRANGE = "midrange"
    MILL = "mill"
    STALL = "stall"
    TOOLBOX = "toolbox"
    TURBO = "turbo"
    SPREAD = "spread"


class BudgetTier(str, Enum):
    """Spending brackets used to pick viable archetypes."""

    BUDGET = "budget"  # < 50
    STANDARD = "standard"  # 50-150
    COMPETITIVE = "competitive"  # 150-300
    PREMIUM = "premium"  # 300+


class OptimizationConstraints(BaseModel):
    """Constraints attached to an optimization request."""

    model_config = ConfigDict(frozen=True)

    max_budget: float | None = Field(
        default=None,
        ge=0,
        description="Spending ceiling for suggested cards",
    )
    format: str | None = Field(
        default=None,
        description="Format every suggested card must be legal in",
    )
    must_exclude_cards: frozenset[str] = Field(
        default_factory=frozenset,
        description="Card ids that must never be suggested",
    )
    must_include_cards: frozenset[str] = Field(
        default_factory=frozenset,
        description="Card ids that must stay in (or be added to) the deck",
    )
    owned_card_ids: frozenset[str] = Field(
        default_factory=frozenset,
        description="Card ids the player owns",
    )
    only_owned_cards: bool = Field(
        default=False,
        description="Restrict suggestions to owned cards",
    )

    @field_validator("format")
    @classmethod
    def _normalize_format(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip().lower()
        return value or None

    def with_budget(self, max_budget: float | None) -> "OptimizationConstraints":
        """
        Copy of these constraints with a different budget ceiling.

        Raises:
            pydantic.ValidationError: If max_budget is negative
        """
        return self.model_validate({**self.model_dump(), "max_budget": max_budget})

    def with_format(self, format_name: str | None) -> "OptimizationConstraints":
        """Copy of these constraints restricted to another format."""
        return self.model_validate({**self.model_dump(), "format": format_name})

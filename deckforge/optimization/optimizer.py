"""
Deck Optimizer — the engine's public entry points.

    optimize_deck(deck, constraints)            -> DeckRecommendation
    build_budget_deck(max_budget, constraints)  -> DeckRecommendation
    create_budget_variant(deck, target_budget)  -> DeckRecommendation
    find_value_cards(format_name, max_price)    -> list[Card]
    optimize_cost_performance(target_budget)    -> list[DeckRecommendation]

Each call is a pure function of (deck, catalog snapshot, constraints):
it builds its own context with a fresh price cache and deadline, and
keeps no state once the recommendation is returned.

INVARIANTS:
- The caller's deck is never mutated
- "No improvement found" and "budget not reached" are answers, not
  errors: they come back as outcome_flags with a reasoning entry
- Missing cards, analyzer failures and deadline expiry raise
"""

import logging
from collections.abc import Sequence
from typing import Protocol

from deckforge.config import Settings, settings
from deckforge.models.analysis import DeckAnalysisResult
from deckforge.models.card import Card
from deckforge.models.constraints import Archetype, OptimizationConstraints
from deckforge.models.deadline import RequestDeadline
from deckforge.models.deck import Deck
from deckforge.models.failure import FailureKind
from deckforge.models.recommendation import (
    CardChange,
    ChangeAction,
    DeckRecommendation,
    ImpactAnalysis,
    RecommendationType,
    SynergyDirection,
)
from deckforge.optimization.alternatives import generate_alternatives, generate_upgrade_path
from deckforge.optimization.budget import fit_budget
from deckforge.optimization.candidates import constraint_violation, find_candidates
from deckforge.optimization.context import OptimizationContext
from deckforge.optimization.cost import cost, deck_cost
from deckforge.optimization.impact import analyze_deck, apply_changes, compare_analyses, impact_of
from deckforge.optimization.performance import identify_underperformers
from deckforge.optimization.replacement import find_best_replacement, find_replacements
from deckforge.optimization.value import deck_value_score, find_value_cards
from deckforge.services.analyzer_client import DeckAnalyzer
from deckforge.services.archetypes import budget_archetypes, get_budget_tier
from deckforge.services.catalog import CardCatalog, PriceOracle, TrendSource
from deckforge.services.meta_signal import MetaSource, StaticMetaSource
from deckforge.services.pricing import PriceCache

logger = logging.getLogger(__name__)

BASE_CONFIDENCE = 70
OPTIMIZE_DIFFICULTY = 3
BUILD_DIFFICULTY = 5
MANY_CHANGES = 5


class DeckTemplateSource(Protocol):
    def starter_deck(self, archetype: Archetype, format_name: str | None) -> Deck | None:
        """Starting list for an archetype, or None if there is none."""
        ...


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def calculate_confidence(changes: Sequence[CardChange], impact: ImpactAnalysis) -> float:
    """
    Confidence in a recommendation, 0-100.

    Base 70; +10 for an overall improvement above 10 and another +10
    above 20; -10 for more than 5 changes; +5 when every change gains
    more synergies than it loses.
    """
    confidence = BASE_CONFIDENCE
    if impact.overall_improvement > 10:
        confidence += 10
    if impact.overall_improvement > 20:
        confidence += 10
    if len(changes) > MANY_CHANGES:
        confidence -= 10

    synergistic = all(
        sum(s.direction is SynergyDirection.POSITIVE for s in c.synergy_changes)
        > sum(s.direction is SynergyDirection.NEGATIVE for s in c.synergy_changes)
        for c in changes
    )
    if synergistic:
        confidence += 5

    return _clamp(confidence)


class DeckOptimizer:
    """
    Facade over the optimization pipeline.

    Holds only long-lived collaborators. Everything request-scoped (price
    cache, constraints, deadline) is created per call.
    """

    def __init__(
        self,
        catalog: CardCatalog,
        prices: PriceOracle,
        analyzer: DeckAnalyzer,
        meta: MetaSource | None = None,
        templates: DeckTemplateSource | None = None,
        trends: TrendSource | None = None,
        config: Settings | None = None,
    ) -> None:
        self.catalog = catalog
        self.prices = prices
        self.analyzer = analyzer
        self.meta = meta or StaticMetaSource()
        self.templates = templates
        self.trends = trends
        self.config = config or settings

    def _context(
        self,
        constraints: OptimizationConstraints,
        deadline: RequestDeadline | None,
    ) -> OptimizationContext:
        return OptimizationContext(
            catalog=self.catalog,
            prices=PriceCache(
                self.prices,
                trend_source=self.trends,
                unknown_price_fallback=self.config.unknown_price_fallback,
            ),
            meta=self.meta,
            analyzer=self.analyzer,
            constraints=constraints,
            config=self.config,
            deadline=deadline or RequestDeadline(self.config.request_deadline_seconds),
        )

    # =========================================================================
    # OPTIMIZE EXISTING DECK
    # =========================================================================

    def optimize_deck(
        self,
        deck: Deck,
        constraints: OptimizationConstraints | None = None,
        deadline: RequestDeadline | None = None,
    ) -> DeckRecommendation:
        """
        Recommend replacements for a deck's underperforming cards.

        Args:
            deck: Deck to optimize (not mutated)
            constraints: Hard constraints and optional budget
            deadline: Optional wall-clock limit for this call

        Returns:
            DeckRecommendation (possibly with no changes)

        Raises:
            UpstreamAnalyzerError: If the deck analyzer fails
            DeadlineExceededError: If the deadline passes
            ConstraintViolationError: If a violating card slips through
        """
        constraints = constraints or OptimizationConstraints()
        ctx = self._context(constraints, deadline)

        baseline = analyze_deck(deck, ctx, stage="baseline_analysis")

        flagged = identify_underperformers(
            deck, baseline, ctx.meta, threshold=self.config.underperformer_threshold
        )
        targets = [
            p.deck_card.card
            for p in flagged
            if p.deck_card.card.id not in constraints.must_include_cards
        ][: self.config.max_underperformers]

        changes = find_replacements(targets, deck, baseline, ctx)

        reasoning = [
            f"Analyzing {deck.name or 'deck'} for optimization opportunities",
            f"Current deck scores: Overall {baseline.scores.overall:g}/100",
            f"Identified {len(changes)} cards for potential replacement",
        ]
        flags: set[FailureKind] = set()

        if not targets:
            reasoning.append("No underperforming cards found; the deck is already well tuned")
        elif not changes:
            flags.add(FailureKind.CONSTRAINT_UNSATISFIABLE)
            reasoning.append(
                "No replacement candidates satisfied the constraints for any underperforming card"
            )

        budget_overage = 0.0
        max_budget = constraints.max_budget
        if max_budget is not None and cost(changes, ctx.prices).total_cost > max_budget:
            fit = fit_budget(deck, changes, max_budget, ctx, analysis=baseline)
            changes = fit.changes
            if fit.within_budget:
                reasoning.append(f"Adjusted suggestions to fit the ${max_budget:.2f} budget")
            else:
                flags.add(FailureKind.BUDGET_NOT_REACHED)
                budget_overage = fit.overage
                reasoning.append(
                    f"Budget not reached: suggested cards cost ${fit.total_cost:.2f}, "
                    f"${fit.overage:.2f} over the ${max_budget:.2f} budget"
                )

        reasoning.extend(c.reasoning for c in changes if c.reasoning)
        if changes:
            reasoning.append("Expected to improve consistency and power level")

        impact = impact_of(deck, changes, baseline, ctx) if changes else ImpactAnalysis()
        alternatives = generate_alternatives(deck, targets, baseline, ctx)

        recommendation = DeckRecommendation(
            type=RecommendationType.OPTIMIZE_EXISTING,
            suggested_changes=changes,
            reasoning=reasoning,
            expected_impact=impact,
            cost_analysis=cost(changes, ctx.prices),
            alternative_options=alternatives,
            difficulty_rating=OPTIMIZE_DIFFICULTY,
            meta_relevance=_clamp(baseline.scores.meta_relevance + impact.meta_relevance_change),
            confidence=calculate_confidence(changes, impact),
            budget_target=max_budget,
            budget_overage=budget_overage,
            outcome_flags=flags,
        )

        logger.info(
            "deck_optimized",
            extra={
                "deck_id": deck.id,
                "underperformers": len(targets),
                "changes": len(changes),
                "alternatives": len(alternatives),
                "flags": sorted(f.value for f in flags),
                "elapsed": round(ctx.deadline.elapsed, 3),
            },
        )
        return recommendation

    # =========================================================================
    # BUILD BUDGET DECK
    # =========================================================================

    def _starter_deck(
        self,
        archetypes: Sequence[Archetype],
        format_name: str | None,
    ) -> tuple[Archetype, Deck] | None:
        if self.templates is None:
            return None
        for archetype in archetypes:
            starter = self.templates.starter_deck(archetype, format_name)
            if starter is not None and starter.cards:
                return archetype, starter
        return None

    def build_budget_deck(
        self,
        max_budget: float,
        constraints: OptimizationConstraints | None = None,
        deadline: RequestDeadline | None = None,
    ) -> DeckRecommendation:
        """
        Build a new deck that fits a budget.

        Picks the first viable archetype for the budget tier that has a
        starter list, adds any must-include cards, drives the list under
        the budget and attaches an upgrade ladder as alternatives.

        Raises:
            CardNotFoundError: If a must-include card is not in the catalog
            UpstreamAnalyzerError: If the deck analyzer fails
            DeadlineExceededError: If the deadline passes
            pydantic.ValidationError: If max_budget is negative
        """
        constraints = (constraints or OptimizationConstraints()).with_budget(max_budget)
        ctx = self._context(constraints, deadline)

        tier = get_budget_tier(max_budget)
        found = self._starter_deck(budget_archetypes(tier), constraints.format)
        if found is None:
            logger.warning("No starter deck available for budget tier %s", tier.value)
            return DeckRecommendation(
                type=RecommendationType.BUDGET_BUILD,
                suggested_changes=[],
                reasoning=[
                    f"No starter list is available for any {tier.value} tier archetype",
                ],
                expected_impact=ImpactAnalysis(),
                cost_analysis=cost([], ctx.prices),
                difficulty_rating=BUILD_DIFFICULTY,
                budget_target=max_budget,
                outcome_flags={FailureKind.CONSTRAINT_UNSATISFIABLE},
            )
        archetype, template = found

        reasoning = [
            f"Selected {archetype.value} as most viable archetype for the "
            f"{tier.value} budget tier (${max_budget:.2f})",
        ]

        changes: list[CardChange] = []
        for entry in template.cards:
            violation = constraint_violation(entry.card, constraints)
            if violation is not None:
                reasoning.append(f"Left out {entry.card.name}: {violation}")
                continue
            changes.append(
                CardChange(
                    action=ChangeAction.ADD,
                    card=entry.card,
                    quantity=entry.quantity,
                    reasoning=f"Core card for {archetype.value}",
                )
            )

        for card_id in sorted(constraints.must_include_cards):
            if template.contains(card_id):
                continue
            card = self.catalog.get_card(card_id)
            changes.append(
                CardChange(
                    action=ChangeAction.ADD,
                    card=card,
                    quantity=1,
                    reasoning="Required by request",
                )
            )

        empty = Deck(
            format=constraints.format or template.format,
            archetype=archetype.value,
            name=template.name or f"Budget {archetype.value.title()}",
            id=template.id,
        )
        starter = apply_changes(empty, changes)
        baseline = analyze_deck(starter, ctx, stage="baseline_analysis")

        fit = fit_budget(starter, changes, max_budget, ctx, analysis=baseline)
        changes = fit.changes

        flags: set[FailureKind] = set()
        budget_overage = 0.0
        if fit.within_budget:
            reasoning.append(f"Built within ${max_budget:.2f} budget constraint")
        else:
            flags.add(FailureKind.BUDGET_NOT_REACHED)
            budget_overage = fit.overage
            reasoning.append(
                f"Budget not reached after {fit.iterations} passes: deck costs "
                f"${fit.total_cost:.2f}, ${fit.overage:.2f} over budget"
            )
        if fit.substitutions:
            reasoning.append(f"Swapped in {fit.substitutions} cheaper cards to meet the budget")

        if fit.substitutions:
            fitted = apply_changes(empty, changes)
            impact = compare_analyses(baseline, analyze_deck(fitted, ctx, stage="impact_analysis"))
        else:
            impact = ImpactAnalysis()

        cost_analysis = cost(changes, ctx.prices)
        upgrade_path = generate_upgrade_path(changes, cost_analysis.total_cost, max_budget, ctx)
        if upgrade_path:
            reasoning.append("Included upgrade path for future improvements")

        logger.info(
            "budget_deck_built",
            extra={
                "archetype": archetype.value,
                "max_budget": max_budget,
                "total_cost": cost_analysis.total_cost,
                "iterations": fit.iterations,
                "upgrade_tiers": len(upgrade_path),
            },
        )
        return DeckRecommendation(
            type=RecommendationType.BUDGET_BUILD,
            suggested_changes=changes,
            reasoning=reasoning,
            expected_impact=impact,
            cost_analysis=cost_analysis,
            alternative_options=upgrade_path,
            difficulty_rating=BUILD_DIFFICULTY,
            meta_relevance=_clamp(baseline.scores.meta_relevance + impact.meta_relevance_change),
            confidence=calculate_confidence(changes, impact),
            budget_target=max_budget,
            budget_overage=budget_overage,
            outcome_flags=flags,
        )

    # =========================================================================
    # BUDGET VARIANT OF AN EXISTING DECK
    # =========================================================================

    def _budget_replacements(
        self,
        deck: Deck,
        reduction: float,
        baseline: DeckAnalysisResult,
        ctx: OptimizationContext,
    ) -> tuple[list[CardChange], float]:
        """Replace the priciest cards until the savings cover the reduction."""
        by_price: list[tuple[float, Card]] = []
        seen: set[str] = set()
        for entry in deck.cards:
            if entry.card.id in seen:
                continue
            seen.add(entry.card.id)
            unit_price, known = ctx.prices.price_or_fallback(entry.card.id)
            if known:
                by_price.append((unit_price, entry.card))
        # Stable: deck order among equal prices
        by_price.sort(key=lambda item: item[0], reverse=True)

        changes: list[CardChange] = []
        chosen: set[str] = set()
        savings = 0.0

        for unit_price, card in by_price:
            if savings >= reduction:
                break
            if unit_price < self.config.variant_min_card_price:
                continue
            if card.id in ctx.constraints.must_include_cards:
                continue
            ctx.deadline.check("budget_variant")

            max_price = unit_price * self.config.variant_target_price_ratio
            candidates = [
                c for c in find_candidates(card, ctx, max_price=max_price) if c.id not in chosen
            ]
            change = find_best_replacement(card, deck, baseline, ctx, candidates=candidates)
            if change is None:
                continue

            new_price, _ = ctx.prices.price_or_fallback(change.card.id)
            savings += (unit_price - new_price) * change.quantity
            chosen.add(change.card.id)
            changes.append(change)

        return changes, savings

    def create_budget_variant(
        self,
        expensive_deck: Deck,
        target_budget: float,
        constraints: OptimizationConstraints | None = None,
        deadline: RequestDeadline | None = None,
    ) -> DeckRecommendation:
        """
        Cheaper version of an existing deck.

        Walks cards from most to least expensive, replacing each with a
        card priced at most variant_target_price_ratio of it, until the
        savings cover the gap to the target. Residual overage is
        reported, not hidden.

        Raises:
            UpstreamAnalyzerError: If the deck analyzer fails
            DeadlineExceededError: If the deadline passes
            pydantic.ValidationError: If target_budget is negative
        """
        constraints = (constraints or OptimizationConstraints()).with_budget(target_budget)
        ctx = self._context(constraints, deadline)
        name = expensive_deck.name or "deck"

        original_cost = deck_cost(expensive_deck, ctx.prices)
        reduction = original_cost.total_cost - target_budget
        baseline = analyze_deck(expensive_deck, ctx, stage="baseline_analysis")

        if reduction <= 0:
            return DeckRecommendation(
                type=RecommendationType.BUDGET_BUILD,
                suggested_changes=[],
                reasoning=[
                    f"{name} already costs ${original_cost.total_cost:.2f}, "
                    f"within the ${target_budget:.2f} budget",
                ],
                expected_impact=ImpactAnalysis(),
                cost_analysis=original_cost,
                difficulty_rating=BUILD_DIFFICULTY,
                meta_relevance=_clamp(baseline.scores.meta_relevance),
                confidence=calculate_confidence([], ImpactAnalysis()),
                budget_target=target_budget,
            )

        changes, savings = self._budget_replacements(expensive_deck, reduction, baseline, ctx)

        budget_deck = apply_changes(expensive_deck, changes)
        new_cost = deck_cost(budget_deck, ctx.prices)
        impact = impact_of(expensive_deck, changes, baseline, ctx) if changes else ImpactAnalysis()

        reasoning = [
            f"Created budget version of {name}",
            f"Reduced cost from ${original_cost.total_cost:.2f} to "
            f"${new_cost.total_cost:.2f} (target ${target_budget:.2f})",
        ]
        flags: set[FailureKind] = set()
        budget_overage = max(0.0, new_cost.total_cost - target_budget)

        if changes:
            reasoning.append("Maintained core strategy while using budget alternatives")
            reasoning.extend(c.reasoning for c in changes if c.reasoning)
        else:
            flags.add(FailureKind.CONSTRAINT_UNSATISFIABLE)
            reasoning.append("No cheaper replacements satisfied the constraints")

        if budget_overage > 0:
            flags.add(FailureKind.BUDGET_NOT_REACHED)
            reasoning.append(
                f"Budget not reached: ${budget_overage:.2f} over the ${target_budget:.2f} target"
            )

        logger.info(
            "budget_variant_created",
            extra={
                "deck_id": expensive_deck.id,
                "original_cost": original_cost.total_cost,
                "new_cost": new_cost.total_cost,
                "savings": savings,
                "changes": len(changes),
            },
        )
        return DeckRecommendation(
            type=RecommendationType.BUDGET_BUILD,
            suggested_changes=changes,
            reasoning=reasoning,
            expected_impact=impact,
            cost_analysis=new_cost,
            difficulty_rating=BUILD_DIFFICULTY,
            meta_relevance=_clamp(baseline.scores.meta_relevance + impact.meta_relevance_change),
            confidence=calculate_confidence(changes, impact),
            budget_target=target_budget,
            budget_overage=budget_overage,
            outcome_flags=flags,
        )

    # =========================================================================
    # VALUE SEARCH
    # =========================================================================

    def find_value_cards(
        self,
        format_name: str | None = None,
        max_price: float | None = None,
        constraints: OptimizationConstraints | None = None,
    ) -> list[Card]:
        """
        Cards that perform well for their price.

        Args:
            format_name: Only cards legal in this format
            max_price: Highest unit price (default value_card_max_price)
            constraints: Exclusions and ownership; format_name wins over
                constraints.format when both are given

        Returns:
            Up to 20 cards scoring above 0.7 value, best first
        """
        constraints = constraints or OptimizationConstraints()
        if format_name is not None:
            constraints = constraints.with_format(format_name)
        ctx = self._context(constraints, None)
        if max_price is None:
            max_price = self.config.value_card_max_price
        return find_value_cards(ctx, max_price)

    def optimize_cost_performance(
        self,
        target_budget: float,
        constraints: OptimizationConstraints | None = None,
        deadline: RequestDeadline | None = None,
    ) -> list[DeckRecommendation]:
        """
        Budget decks around a target, ranked by performance per dollar.

        Builds a deck at each of cost_performance_ratios x target_budget
        (by default a budget, a target and a premium option). Budget
        points that yield no deck are dropped. One deadline covers all
        of the builds.

        Returns:
            Recommendations, best value first

        Raises:
            CardNotFoundError: If a must-include card is not in the catalog
            UpstreamAnalyzerError: If the deck analyzer fails
            DeadlineExceededError: If the deadline passes
            pydantic.ValidationError: If target_budget is negative
        """
        deadline = deadline or RequestDeadline(self.config.request_deadline_seconds)

        ranked: list[tuple[float, DeckRecommendation]] = []
        for ratio in self.config.cost_performance_ratios:
            budget = round(target_budget * ratio, 2)
            recommendation = self.build_budget_deck(budget, constraints, deadline=deadline)
            if not recommendation.suggested_changes:
                logger.warning("No deck built at $%.2f; dropped from comparison", budget)
                continue
            value = deck_value_score(recommendation)
            recommendation.reasoning.append(f"Value score: {value:.2f} (performance per dollar)")
            ranked.append((value, recommendation))

        # Stable: cheaper budget points first among equal values
        ranked.sort(key=lambda item: item[0], reverse=True)

        logger.info(
            "cost_performance_ranked",
            extra={
                "target_budget": target_budget,
                "options": len(ranked),
                "values": [round(value, 2) for value, _ in ranked],
            },
        )
        return [recommendation for _, recommendation in ranked]

"""Tests for replacement scoring and selection."""

import pytest
from builders import analysis, creature, deck_of, support

from deckforge.config import Settings
from deckforge.models.constraints import OptimizationConstraints
from deckforge.models.recommendation import ChangeAction, SynergyDirection
from deckforge.optimization.replacement import (
    evaluate_replacement,
    find_best_replacement,
    find_replacements,
    synergy_changes,
    synergy_improvement,
)
from deckforge.services.catalog import InMemoryCatalog


@pytest.fixture
def weak():
    """Inefficient creature: 80 damage for 2 energy (0.4)."""
    return creature("weak", hp=60, attacks=((2, 80),))


@pytest.fixture
def strong():
    """Better creature: +30 hp, 90 damage for 1 energy (0.9)."""
    return creature("strong", hp=90, attacks=((1, 90),))


class TestEvaluateReplacement:
    def test_hp_and_efficiency_gain(self, weak, strong, make_context) -> None:
        """Both creature factors score and appear in order."""
        deck = deck_of((weak, 3))
        ctx = make_context(InMemoryCatalog([weak, strong]))

        result = evaluate_replacement(weak, strong, deck, analysis(), ctx)

        # 50 + 3 (hp) + 25 (efficiency)
        assert result.score == 78
        assert result.reasoning == "+30 HP, Better damage efficiency"

    def test_hp_bonus_capped(self, weak, make_context) -> None:
        """HP gain is worth at most 10 points."""
        tank = creature("tank", hp=300, attacks=((2, 80),))
        ctx = make_context(InMemoryCatalog([weak, tank]))

        result = evaluate_replacement(weak, tank, deck_of((weak, 1)), analysis(), ctx)

        assert result.score == 60
        assert result.reasoning == "+240 HP"

    def test_no_gain_is_neutral(self, strong, weak, make_context) -> None:
        """A worse creature gets no creature bonuses."""
        ctx = make_context(InMemoryCatalog([weak, strong]))

        result = evaluate_replacement(strong, weak, deck_of((strong, 1)), analysis(), ctx)

        assert result.score == 50
        assert result.reasoning == ""

    def test_significantly_more_expensive(self, weak, strong, make_context) -> None:
        """A price jump over 20% of the budget costs 30."""
        catalog = InMemoryCatalog([weak, strong], prices={"weak": 1.0, "strong": 10.0})
        ctx = make_context(catalog, constraints=OptimizationConstraints(max_budget=20))

        result = evaluate_replacement(weak, strong, deck_of((weak, 1)), analysis(), ctx)

        assert result.score == 48
        assert result.reasoning.endswith("Significantly more expensive")

    def test_more_budget_friendly(self, weak, strong, make_context) -> None:
        catalog = InMemoryCatalog([weak, strong], prices={"weak": 10.0, "strong": 2.0})
        ctx = make_context(catalog, constraints=OptimizationConstraints(max_budget=20))

        result = evaluate_replacement(weak, strong, deck_of((weak, 1)), analysis(), ctx)

        assert result.score == 88
        assert "More budget-friendly" in result.reasoning

    def test_price_ignored_without_budget(self, weak, strong, make_context) -> None:
        catalog = InMemoryCatalog([weak, strong], prices={"weak": 1.0, "strong": 100.0})
        ctx = make_context(catalog)

        result = evaluate_replacement(weak, strong, deck_of((weak, 1)), analysis(), ctx)

        assert "expensive" not in result.reasoning

    def test_unknown_price_ignored(self, weak, strong, make_context) -> None:
        """Unknown prices are neither cheaper nor pricier."""
        catalog = InMemoryCatalog([weak, strong], prices={"weak": 10.0})
        ctx = make_context(catalog, constraints=OptimizationConstraints(max_budget=20))

        result = evaluate_replacement(weak, strong, deck_of((weak, 1)), analysis(), ctx)

        assert "budget-friendly" not in result.reasoning
        assert result.score == 78

    def test_price_terms_can_be_disabled(self, weak, strong, make_context) -> None:
        catalog = InMemoryCatalog([weak, strong], prices={"weak": 1.0, "strong": 10.0})
        ctx = make_context(catalog, constraints=OptimizationConstraints(max_budget=20))

        result = evaluate_replacement(
            weak, strong, deck_of((weak, 1)), analysis(), ctx, include_price=False
        )

        assert result.score == 78

    def test_archetype_fit(self, weak, make_context) -> None:
        """Archetype keywords in the candidate text add 15."""
        quick = creature("quick", hp=60, attacks=((2, 80),), text="Quick Strike: draw a card")
        ctx = make_context(InMemoryCatalog([weak, quick]))
        deck = deck_of((weak, 1), archetype="aggro")

        result = evaluate_replacement(weak, quick, deck, analysis(), ctx)

        assert result.score == 65
        assert result.reasoning == "Better fit for aggro"

    def test_higher_meta_relevance(self, weak, make_context) -> None:
        meta_card = creature("swsh1-79", hp=60, attacks=((2, 80),))
        ctx = make_context(InMemoryCatalog([weak, meta_card]))

        result = evaluate_replacement(weak, meta_card, deck_of((weak, 1)), analysis(), ctx)

        # (80 - 30) / 2
        assert result.score == 75
        assert result.reasoning == "Higher meta relevance"

    def test_synergy_improvement(self, make_context) -> None:
        water = creature("water", types=("Water",))
        fire = creature("fire", types=("Fire",))
        partner = creature("partner", types=("Fire",))
        deck = deck_of((water, 2), (partner, 2))
        ctx = make_context(InMemoryCatalog([water, fire, partner]))

        result = evaluate_replacement(water, fire, deck, analysis(), ctx)

        # +0.2 synergy with the one other card
        assert result.score == 54
        assert result.reasoning == "Improved deck synergy"

    def test_synergy_pool_restricts_comparison(self, make_context) -> None:
        water = creature("water", types=("Water",))
        fire = creature("fire", types=("Fire",))
        partner = creature("partner", types=("Fire",))
        outsider = creature("outsider", types=("Water",))
        deck = deck_of((water, 2), (partner, 4), (outsider, 1))
        ctx = make_context(InMemoryCatalog([water, fire, partner, outsider]))

        whole = evaluate_replacement(water, fire, deck, analysis(), ctx)
        core = evaluate_replacement(water, fire, deck, analysis(), ctx, synergy_pool=[partner])

        assert whole.score == 50
        assert core.score == 54


class TestSynergyHelpers:
    def test_improvement_with_no_others(self, weak, strong) -> None:
        assert synergy_improvement(weak, strong, []) == 0.0

    def test_synergy_changes_over_threshold(self) -> None:
        water = creature("water", types=("Water",))
        fire = creature("fire", types=("Fire",))
        partner = creature("partner", name="Partner", types=("Fire",))
        item = support("item", text="")
        deck = deck_of((water, 2), (partner, 2), (item, 2))

        changes = synergy_changes(water, fire, deck)

        assert len(changes) == 1
        assert changes[0].affected_card_name == "Partner"
        assert changes[0].direction == SynergyDirection.POSITIVE
        assert changes[0].new_synergy > changes[0].previous_synergy


class TestFindBestReplacement:
    def test_empty_candidates_returns_none(self, weak, make_context) -> None:
        """No candidates is a normal outcome."""
        ctx = make_context(InMemoryCatalog([weak]))

        assert find_best_replacement(weak, deck_of((weak, 2)), analysis(), ctx) is None

    def test_replace_change(self, weak, strong, make_context) -> None:
        ctx = make_context(InMemoryCatalog([weak, strong]))
        deck = deck_of((weak, 3))

        change = find_best_replacement(weak, deck, analysis(), ctx)

        assert change is not None
        assert change.action == ChangeAction.REPLACE
        assert change.card.id == "strong"
        assert change.current_card.id == "weak"
        assert change.impact_score == 78
        assert "+30 HP" in change.reasoning

    def test_quantity_conserved_across_entries(self, weak, strong, make_context) -> None:
        """Replace quantity equals every copy of the replaced card."""
        ctx = make_context(InMemoryCatalog([weak, strong]))
        deck = deck_of((weak, 2), (weak, 1))

        change = find_best_replacement(weak, deck, analysis(), ctx)

        assert change.quantity == deck.quantity_of("weak") == 3

    def test_skips_cards_already_in_deck(self, weak, strong, make_context) -> None:
        ctx = make_context(InMemoryCatalog([weak, strong]))
        deck = deck_of((weak, 2), (strong, 2))

        assert find_best_replacement(weak, deck, analysis(), ctx) is None

    def test_alternatives_are_runner_ups(self, weak, make_context) -> None:
        """Top 3 runner-ups, best first, never the chosen card."""
        candidates = [
            creature("c50", hp=60, attacks=((2, 80),)),
            creature("c80", hp=160, attacks=((1, 80),)),
            creature("c60", hp=160, attacks=((2, 80),)),
            creature("c65", hp=160, attacks=((2, 100),)),
            creature("c55", hp=110, attacks=((2, 80),)),
        ]
        ctx = make_context(InMemoryCatalog([weak, *candidates]))

        change = find_best_replacement(
            weak, deck_of((weak, 2)), analysis(), ctx, candidates=candidates
        )

        assert change.card.id == "c80"
        assert [c.id for c in change.alternatives] == ["c65", "c60", "c55"]

    def test_excluded_candidate_never_chosen(self, weak, strong, make_context) -> None:
        ctx = make_context(
            InMemoryCatalog([weak, strong]),
            constraints=OptimizationConstraints(must_exclude_cards={"strong"}),
        )

        assert find_best_replacement(weak, deck_of((weak, 2)), analysis(), ctx) is None


class TestFindReplacements:
    def test_skips_targets_without_candidates(self, weak, strong, make_context) -> None:
        lonely = creature("lonely", types=("Psychic",), hp=10)
        ctx = make_context(
            InMemoryCatalog([weak, strong, lonely]),
            config=Settings(_env_file=None, meta_candidate_limit=0),
        )
        deck = deck_of((weak, 2), (lonely, 1))

        changes = find_replacements([weak, lonely], deck, analysis(), ctx)

        assert [c.current_card.id for c in changes] == ["weak"]

    def test_no_duplicate_replacement_cards(self, make_context) -> None:
        """Two targets never receive the same card."""
        a = creature("a", hp=60, attacks=((2, 80),))
        b = creature("b", hp=60, attacks=((2, 80),))
        best = creature("best", hp=90, attacks=((1, 90),))
        ctx = make_context(InMemoryCatalog([a, b, best]))

        changes = find_replacements([a, b], deck_of((a, 2), (b, 2)), analysis(), ctx)

        assert [c.card.id for c in changes] == ["best"]

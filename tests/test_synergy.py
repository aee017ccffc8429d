"""Tests for pairwise card synergy."""

import itertools

import pytest
from builders import creature, resource, support

from deckforge.optimization.synergy import synergy


class TestSynergyTerms:
    def test_unrelated_cards_are_neutral(self) -> None:
        """Cards with nothing in common score the neutral 0.5."""
        a = support("s1", subtypes=("Item",))
        b = support("s2", subtypes=("Supporter",))

        assert synergy(a, b) == pytest.approx(0.5)

    def test_shared_element_type(self) -> None:
        """Sharing an element type adds 0.2."""
        a = creature("c1", types=("Fire",))
        b = creature("c2", types=("Fire", "Dragon"))

        assert synergy(a, b) == pytest.approx(0.7)

    def test_no_shared_element_type(self) -> None:
        """Different element types add nothing."""
        a = creature("c1", types=("Fire",))
        b = creature("c2", types=("Water",))

        assert synergy(a, b) == pytest.approx(0.5)

    def test_resource_named_for_creature_type(self) -> None:
        """A resource whose name names the creature's type adds 0.3."""
        fire = creature("c1", types=("Fire",))
        energy = resource("e1", "Basic Fire Energy")

        assert synergy(fire, energy) == pytest.approx(0.8)

    def test_resource_for_other_type(self) -> None:
        """A resource for another type adds nothing."""
        fire = creature("c1", types=("Fire",))
        energy = resource("e1", "Basic Water Energy")

        assert synergy(fire, energy) == pytest.approx(0.5)

    def test_support_text_mentions_creature_type(self) -> None:
        """Support text mentioning the creature's type adds 0.2."""
        fire = creature("c1", types=("Fire",))
        search = support("s1", text="Search your deck for a fire Pokémon.")

        assert synergy(search, fire) == pytest.approx(0.7)

    def test_support_without_text(self) -> None:
        """Support cards with no text never reference anything."""
        fire = creature("c1", types=("Fire",))
        blank = support("s1", text="")

        assert synergy(blank, fire) == pytest.approx(0.5)

    def test_both_have_abilities(self) -> None:
        """Two cards with abilities add 0.1."""
        a = creature("c1", types=("Fire",), abilities=("Burn bright",))
        b = creature("c2", types=("Water",), abilities=("Splash",))

        assert synergy(a, b) == pytest.approx(0.6)

    def test_only_one_has_abilities(self) -> None:
        """One card with abilities is not enough."""
        a = creature("c1", types=("Fire",), abilities=("Burn bright",))
        b = creature("c2", types=("Water",))

        assert synergy(a, b) == pytest.approx(0.5)

    def test_clamped_to_one(self) -> None:
        """Stacked bonuses never exceed 1.0."""
        fire = creature("c1", types=("Fire",), abilities=("Blaze",))
        energy = resource("e1", "Fire Energy", types=("Fire",), abilities=("Double",))

        assert synergy(fire, energy) == 1.0


class TestSynergyProperties:
    @pytest.fixture
    def cards(self) -> list:
        return [
            creature("c1", types=("Fire",)),
            creature("c2", types=("Fire",), abilities=("Blaze",)),
            creature("c3", types=("Water",), abilities=("Splash",)),
            creature("c4", hp=0, types=(), attacks=()),
            support("s1", text="Attach a Fire Energy to a Water Pokémon"),
            support("s2", text="", abilities=("Recycle",)),
            resource("e1", "Fire Energy", types=("Fire",), abilities=("Double",)),
            resource("e2", "Water Energy"),
        ]

    def test_bounded(self, cards: list) -> None:
        """Synergy is always within [0, 1]."""
        for a, b in itertools.product(cards, repeat=2):
            assert 0.0 <= synergy(a, b) <= 1.0

    def test_symmetric(self, cards: list) -> None:
        """Argument order does not matter."""
        for a, b in itertools.combinations(cards, 2):
            assert synergy(a, b) == pytest.approx(synergy(b, a))

    def test_deterministic(self, cards: list) -> None:
        """Same pair, same score."""
        a, b = cards[0], cards[6]
        assert synergy(a, b) == synergy(a, b)

"""Tests for the in-memory catalog and catalog queries."""

import logging
from pathlib import Path

import pytest
from builders import creature, resource, support

from deckforge.models.card import CardRole
from deckforge.models.failure import CardNotFoundError, FailureKind
from deckforge.models.recommendation import PriceTrend
from deckforge.services.catalog import CardFilter, InMemoryCatalog


@pytest.fixture
def sample_catalog(catalog_path: Path) -> InMemoryCatalog:
    return InMemoryCatalog.from_file(catalog_path)


class TestLoading:
    def test_bad_records_skipped(self, sample_catalog: InMemoryCatalog) -> None:
        """Records without an id or with an unknown role are dropped."""
        assert len(sample_catalog) == 7
        assert "swsh1-160" not in sample_catalog

    def test_load_is_logged(self, catalog_path: Path, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="deckforge.services.catalog"):
            InMemoryCatalog.from_file(catalog_path)

        (loaded,) = [r for r in caplog.records if r.message == "catalog_loaded"]
        assert loaded.cards == 7
        assert loaded.priced == 5
        assert loaded.skipped == 2

    def test_prices_and_trends(self, sample_catalog: InMemoryCatalog) -> None:
        assert sample_catalog.get_price("swsh1-25") == 12.5
        assert sample_catalog.get_price("swsh2-20") == pytest.approx(3.1)
        assert sample_catalog.get_price("swsh1-178") == 0.75
        assert sample_catalog.get_price("sve-2") is None
        assert sample_catalog.get_price_trend("swsh1-25") is PriceTrend.RISING
        assert sample_catalog.get_price_trend("swsh2-20") is PriceTrend.FALLING
        assert sample_catalog.get_price_trend("swsh1-30") is PriceTrend.STABLE

    def test_malformed_records_skipped(self) -> None:
        """Wrongly shaped records are skipped; the rest of the catalog loads."""
        records = [
            "not a record",
            {"id": "a", "name": "A", "supertype": "Pokémon", "types": 12},
            {"id": "b", "name": "B", "supertype": "Trainer", "subtypes": {"kind": "Item"}},
            {"id": "c", "name": "C", "supertype": "Pokémon", "hp": "60", "trend": ["up"]},
        ]

        catalog = InMemoryCatalog.from_records(records)

        assert len(catalog) == 1
        assert "c" in catalog
        assert catalog.get_price_trend("c") is PriceTrend.STABLE

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            InMemoryCatalog.from_file(tmp_path / "missing.json")


class TestGetCard:
    def test_known(self, sample_catalog: InMemoryCatalog) -> None:
        assert sample_catalog.get_card("swsh1-30").name == "Charmander"

    def test_unknown_raises(self, sample_catalog: InMemoryCatalog) -> None:
        """Unknown ids never fall back to a default card."""
        with pytest.raises(CardNotFoundError) as exc_info:
            sample_catalog.get_card("nope")

        assert exc_info.value.kind == FailureKind.NOT_FOUND
        assert exc_info.value.card_id == "nope"

    def test_duplicate_ids_keep_first(self) -> None:
        catalog = InMemoryCatalog([creature("a", name="First"), creature("a", name="Second")])

        assert len(catalog) == 1
        assert catalog.get_card("a").name == "First"


class TestFindCards:
    def test_role(self, sample_catalog: InMemoryCatalog) -> None:
        found = sample_catalog.find_cards(CardFilter(role=CardRole.SUPPORT))

        assert [c.id for c in found] == ["swsh1-169", "swsh1-178"]

    def test_newest_first_undated_last(self, sample_catalog: InMemoryCatalog) -> None:
        found = sample_catalog.find_cards(CardFilter(role=CardRole.CREATURE, newest_first=True))

        assert [c.id for c in found] == ["swsh2-20", "swsh1-25", "swsh1-30", "swsh1-99"]

    def test_limit(self, sample_catalog: InMemoryCatalog) -> None:
        found = sample_catalog.find_cards(CardFilter(role=CardRole.CREATURE, limit=2))

        assert [c.id for c in found] == ["swsh1-25", "swsh1-30"]

    def test_format(self, sample_catalog: InMemoryCatalog) -> None:
        """Centiskorch is expanded-only; the energy has no legality data."""
        found = sample_catalog.find_cards(CardFilter(format="standard"))

        ids = {c.id for c in found}
        assert "swsh2-20" not in ids
        assert "sve-2" in ids


class TestCardFilter:
    def test_unset_filter_matches_everything(self) -> None:
        assert CardFilter().matches(support("s"))

    def test_exclude_ids(self) -> None:
        assert not CardFilter(exclude_ids=frozenset({"a"})).matches(creature("a"))

    def test_element_types(self) -> None:
        card_filter = CardFilter(element_types_any=frozenset({"Water", "Fire"}))

        assert card_filter.matches(creature("a", types=("Fire",)))
        assert not card_filter.matches(creature("b", types=("Grass",)))

    def test_subtypes(self) -> None:
        card_filter = CardFilter(subtypes_any=frozenset({"Supporter"}))

        assert card_filter.matches(support("s", subtypes=("Supporter",)))
        assert not card_filter.matches(support("i", subtypes=("Item",)))

    def test_hp_bounds_are_inclusive(self) -> None:
        card_filter = CardFilter(hp_min=70, hp_max=130)

        assert card_filter.matches(creature("a", hp=70))
        assert card_filter.matches(creature("b", hp=130))
        assert not card_filter.matches(creature("c", hp=131))

    def test_hp_bounds_exclude_non_creatures(self) -> None:
        assert not CardFilter(hp_min=0).matches(resource("e", "Fire Energy"))

    def test_name_prefix_case_insensitive(self) -> None:
        card_filter = CardFilter(name_prefix="charizard")

        assert card_filter.matches(creature("a", name="Charizard VMAX"))
        assert not card_filter.matches(creature("b", name="Charmander"))


class TestPrices:
    def test_zero_price_is_unknown(self) -> None:
        catalog = InMemoryCatalog([creature("a")], prices={"a": 0.0})

        assert catalog.get_price("a") is None

    def test_set_price(self) -> None:
        catalog = InMemoryCatalog([creature("a")])
        catalog.set_price("a", 2.5)

        assert catalog.get_price("a") == 2.5

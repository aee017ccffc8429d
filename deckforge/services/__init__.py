from deckforge.services.analyzer_client import DeckAnalyzer, HttpDeckAnalyzer, deck_to_payload
from deckforge.services.archetypes import (
    budget_archetypes,
    fits_archetype,
    get_archetype_staples,
    get_budget_tier,
)
from deckforge.services.catalog import (
    CardCatalog,
    CardFilter,
    InMemoryCatalog,
    PriceOracle,
    TrendSource,
)
from deckforge.services.meta_signal import MetaSource, StaticMetaSource
from deckforge.services.pricing import PriceCache

__all__ = [
    "CardCatalog",
    "CardFilter",
    "DeckAnalyzer",
    "HttpDeckAnalyzer",
    "InMemoryCatalog",
    "MetaSource",
    "PriceCache",
    "PriceOracle",
    "StaticMetaSource",
    "TrendSource",
    "budget_archetypes",
    "deck_to_payload",
    "fits_archetype",
    "get_archetype_staples",
    "get_budget_tier",
]

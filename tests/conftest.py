from collections.abc import Callable
from pathlib import Path

import pytest
from builders import StubAnalyzer

from deckforge.config import Settings
from deckforge.models.constraints import OptimizationConstraints
from deckforge.models.deadline import RequestDeadline
from deckforge.optimization.context import OptimizationContext
from deckforge.services.analyzer_client import DeckAnalyzer
from deckforge.services.catalog import InMemoryCatalog
from deckforge.services.meta_signal import MetaSource, StaticMetaSource
from deckforge.services.pricing import PriceCache

FIXTURES_DIR = Path(__file__).parent / "fixtures"

ContextFactory = Callable[..., OptimizationContext]


@pytest.fixture
def engine_settings() -> Settings:
    """Default settings, isolated from any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def catalog_path() -> Path:
    """Sample catalog export on disk."""
    return FIXTURES_DIR / "catalog_sample.json"


@pytest.fixture
def make_context(engine_settings: Settings) -> ContextFactory:
    """Build a request context around an in-memory catalog."""

    def _make(
        catalog: InMemoryCatalog,
        constraints: OptimizationConstraints | None = None,
        analyzer: DeckAnalyzer | None = None,
        meta: MetaSource | None = None,
        config: Settings | None = None,
        deadline: RequestDeadline | None = None,
    ) -> OptimizationContext:
        config = config or engine_settings
        return OptimizationContext(
            catalog=catalog,
            prices=PriceCache(
                catalog,
                trend_source=catalog,
                unknown_price_fallback=config.unknown_price_fallback,
            ),
            meta=meta or StaticMetaSource(),
            analyzer=analyzer or StubAnalyzer(),
            constraints=constraints or OptimizationConstraints(),
            config=config,
            deadline=deadline or RequestDeadline.unlimited(),
        )

    return _make

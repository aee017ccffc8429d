"""
Per-request optimization context.

Everything one optimization call needs from the outside world, bundled
once and passed explicitly down the pipeline: collaborators, the
request-scoped price cache, settings and the deadline token.

A context is created per public call and discarded with it. Nothing in
it is shared between requests.
"""

from dataclasses import dataclass, field

from deckforge.config import Settings, settings
from deckforge.models.constraints import OptimizationConstraints
from deckforge.models.deadline import RequestDeadline
from deckforge.services.analyzer_client import DeckAnalyzer
from deckforge.services.catalog import CardCatalog
from deckforge.services.meta_signal import MetaSource
from deckforge.services.pricing import PriceCache


@dataclass
class OptimizationContext:
    """
    Collaborators and per-request state for one optimization call.

    Attributes:
        catalog: Card catalog
        prices: Price cache scoped to this request
        meta: Meta-relevance signal
        analyzer: External deck analyzer
        constraints: Caller's hard constraints and budget
        config: Engine settings
        deadline: Wall-clock limit for this request
    """

    catalog: CardCatalog
    prices: PriceCache
    meta: MetaSource
    analyzer: DeckAnalyzer
    constraints: OptimizationConstraints = field(default_factory=OptimizationConstraints)
    config: Settings = field(default_factory=lambda: settings)
    deadline: RequestDeadline = field(default_factory=RequestDeadline.unlimited)

    def with_constraints(self, constraints: OptimizationConstraints) -> "OptimizationContext":
        """Same request, different constraints. The price cache is shared."""
        return OptimizationContext(
            catalog=self.catalog,
            prices=self.prices,
            meta=self.meta,
            analyzer=self.analyzer,
            constraints=constraints,
            config=self.config,
            deadline=self.deadline,
        )

"""Small builders for cards, decks and analyses used across the tests."""

from collections.abc import Iterable

from deckforge.models.analysis import DeckAnalysisResult, DeckScores, MatchupWinRate
from deckforge.models.card import Attack, CreatureCard, ResourceCard, SupportCard
from deckforge.models.deck import Deck, DeckCard


def creature(
    card_id: str,
    name: str | None = None,
    hp: int = 100,
    types: Iterable[str] = ("Fire",),
    attacks: Iterable[tuple[int, int]] = ((1, 100),),
    subtypes: Iterable[str] = (),
    abilities: Iterable[str] = (),
    text: str = "",
    formats: Iterable[str] = (),
    release_date: str | None = None,
) -> CreatureCard:
    """Creature with attacks given as (energy_cost, damage) pairs."""
    return CreatureCard(
        id=card_id,
        name=name or card_id,
        hp=hp,
        element_types=frozenset(types),
        attacks=tuple(
            Attack(name=f"Attack {i}", energy_cost=cost, damage=damage)
            for i, (cost, damage) in enumerate(attacks)
        ),
        subtypes=frozenset(subtypes),
        abilities=tuple(abilities),
        text=text,
        legal_formats=frozenset(formats),
        release_date=release_date,
    )


def support(
    card_id: str,
    name: str | None = None,
    subtypes: Iterable[str] = ("Item",),
    text: str = "",
    abilities: Iterable[str] = (),
    formats: Iterable[str] = (),
) -> SupportCard:
    return SupportCard(
        id=card_id,
        name=name or card_id,
        subtypes=frozenset(subtypes),
        text=text,
        abilities=tuple(abilities),
        legal_formats=frozenset(formats),
    )


def resource(
    card_id: str,
    name: str,
    types: Iterable[str] = (),
    abilities: Iterable[str] = (),
) -> ResourceCard:
    return ResourceCard(
        id=card_id,
        name=name,
        element_types=frozenset(types),
        abilities=tuple(abilities),
    )


def deck_of(
    *entries: tuple,
    archetype: str | None = "midrange",
    format_name: str | None = None,
    name: str = "Test Deck",
) -> Deck:
    """Deck from (card, quantity) pairs."""
    return Deck(
        cards=tuple(DeckCard(card=card, quantity=qty) for card, qty in entries),
        format=format_name,
        archetype=archetype,
        name=name,
        id="deck-1",
    )


def analysis(
    overall: float = 60.0,
    meta_relevance: float = 50.0,
    matchups: dict[str, float] | None = None,
    primary_archetype: str | None = None,
    **scores: float,
) -> DeckAnalysisResult:
    return DeckAnalysisResult(
        scores=DeckScores(overall=overall, meta_relevance=meta_relevance, **scores),
        primary_archetype=primary_archetype,
        matchups=tuple(
            MatchupWinRate(archetype=a, win_rate=w) for a, w in (matchups or {}).items()
        ),
    )


class StubAnalyzer:
    """Deck analyzer double returning canned results in order (last repeats)."""

    def __init__(self, *results: DeckAnalysisResult) -> None:
        self.results = list(results) or [analysis()]
        self.decks: list[Deck] = []

    def analyze(self, deck: Deck) -> DeckAnalysisResult:
        self.decks.append(deck)
        index = min(len(self.decks) - 1, len(self.results) - 1)
        return self.results[index]

    @property
    def calls(self) -> int:
        return len(self.decks)

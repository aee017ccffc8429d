"""
Deck analyzer output.

The full deck analysis service is an external collaborator. This module
only pins down the shape of its output that the engine depends on:
named numeric scores, the primary archetype, and per-archetype matchup
win rates. The remaining sub-objects are kept raw.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class DeckScores:
    """Whole-deck scores (0-100)."""

    overall: float = 0.0
    consistency: float = 0.0
    power: float = 0.0
    speed: float = 0.0
    versatility: float = 0.0
    meta_relevance: float = 0.0


@dataclass(frozen=True)
class MatchupWinRate:
    """Estimated win rate (0-100) against an opponent archetype."""

    archetype: str
    win_rate: float


@dataclass(frozen=True)
class DeckAnalysisResult:
    """Parsed result of one external deck analysis."""

    scores: DeckScores = field(default_factory=DeckScores)
    primary_archetype: str | None = None
    matchups: tuple[MatchupWinRate, ...] = ()
    consistency: dict[str, Any] = field(default_factory=dict)
    synergy: dict[str, Any] = field(default_factory=dict)
    meta: dict[str, Any] = field(default_factory=dict)

    def win_rate_against(self, archetype: str) -> float | None:
        for matchup in self.matchups:
            if matchup.archetype == archetype:
                return matchup.win_rate
        return None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeckAnalysisResult":
        """
        Build from the analyzer's JSON payload.

        Accepts camelCase keys as emitted by the analysis service.

        Raises:
            ValueError: If the payload has no scores object or a score
                is not numeric
        """
        raw_scores = data.get("scores")
        if not isinstance(raw_scores, dict):
            raise ValueError("Analyzer payload is missing 'scores'")

        try:
            scores = DeckScores(
                overall=float(raw_scores.get("overall", 0)),
                consistency=float(raw_scores.get("consistency", 0)),
                power=float(raw_scores.get("power", 0)),
                speed=float(raw_scores.get("speed", 0)),
                versatility=float(raw_scores.get("versatility", 0)),
                meta_relevance=float(
                    raw_scores.get("metaRelevance", raw_scores.get("meta_relevance", 0))
                ),
            )
        except (TypeError, ValueError) as e:
            raise ValueError(f"Analyzer returned a non-numeric score: {e}") from e

        archetype_data = data.get("archetype") or {}
        if isinstance(archetype_data, dict):
            primary = archetype_data.get("primaryArchetype")
        else:
            primary = str(archetype_data)

        meta = data.get("meta") or {}
        matchups: list[MatchupWinRate] = []
        for entry in meta.get("popularMatchups", []):
            opponent = entry.get("opponentArchetype") or entry.get("archetype")
            win_rate = entry.get("winRate", entry.get("estimatedWinRate"))
            if opponent is None or win_rate is None:
                continue
            matchups.append(MatchupWinRate(archetype=opponent, win_rate=float(win_rate)))

        return cls(
            scores=scores,
            primary_archetype=primary,
            matchups=tuple(matchups),
            consistency=data.get("consistency") or {},
            synergy=data.get("synergy") or {},
            meta=meta,
        )

"""
Deck analyzer client.

The deck analysis service computes whole-deck scores (consistency, speed,
power, archetype, matchups) and is an external collaborator. The engine
talks to it through the DeckAnalyzer protocol; HttpDeckAnalyzer is the
production implementation.

INVARIANTS:
- Transport errors, HTTP errors and malformed payloads all surface as
  UpstreamAnalyzerError, never as an empty or zeroed result
"""

import logging
from typing import Any, Protocol

import httpx

from deckforge.config import settings
from deckforge.models.analysis import DeckAnalysisResult
from deckforge.models.card import CreatureCard
from deckforge.models.deck import Deck
from deckforge.models.failure import UpstreamAnalyzerError

logger = logging.getLogger(__name__)


class DeckAnalyzer(Protocol):
    def analyze(self, deck: Deck) -> DeckAnalysisResult:
        """Evaluate a complete deck."""
        ...


def deck_to_payload(deck: Deck) -> dict[str, Any]:
    """Serialize a deck for the analysis service."""
    cards: list[dict[str, Any]] = []
    for entry in deck.cards:
        card = entry.card
        card_data: dict[str, Any] = {
            "id": card.id,
            "name": card.name,
            "role": card.role.value,
            "subtypes": sorted(card.subtypes),
            "types": sorted(card.element_types),
            "quantity": entry.quantity,
        }
        if isinstance(card, CreatureCard):
            card_data["hp"] = card.hp
            card_data["attacks"] = [
                {"name": a.name, "energyCost": a.energy_cost, "damage": a.damage}
                for a in card.attacks
            ]
        cards.append(card_data)

    return {
        "id": deck.id,
        "name": deck.name,
        "format": deck.format,
        "archetype": deck.archetype,
        "cards": cards,
    }


class HttpDeckAnalyzer:
    """
    Client for the deck analysis API.

    Sends a deck and parses the analysis result.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize the analyzer client.

        Args:
            base_url: Analysis API base URL. Defaults to settings.analyzer_url.
            timeout: Request timeout in seconds. Defaults to
                settings.analyzer_timeout_seconds.
            client: Optional shared httpx client (the caller owns it).
        """
        self.base_url = (base_url or settings.analyzer_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.analyzer_timeout_seconds
        self._client = client

    def analyze(self, deck: Deck) -> DeckAnalysisResult:
        """
        Analyze a deck.

        Raises:
            UpstreamAnalyzerError: If the request fails, times out or the
                response cannot be parsed
        """
        url = f"{self.base_url}/api/v1/analyze"
        payload = {"deck": deck_to_payload(deck)}

        try:
            if self._client is not None:
                response = self._client.post(url, json=payload, timeout=self.timeout)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.post(url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            logger.warning("Deck analyzer timed out after %ss", self.timeout)
            raise UpstreamAnalyzerError(f"Analyzer timed out: {e}") from e
        except httpx.HTTPError as e:
            logger.warning("Deck analyzer request failed: %s", e)
            raise UpstreamAnalyzerError(f"Analyzer request failed: {e}") from e
        except ValueError as e:
            raise UpstreamAnalyzerError(f"Analyzer returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise UpstreamAnalyzerError("Analyzer response is not a JSON object")

        try:
            return DeckAnalysisResult.from_dict(data)
        except ValueError as e:
            raise UpstreamAnalyzerError(str(e)) from e

    def health_check(self) -> bool:
        """
        Check if the analysis API is available.

        Returns:
            True if API is healthy, False otherwise
        """
        try:
            with httpx.Client(timeout=5.0) as client:
                response = client.get(f"{self.base_url}/health")
                return response.status_code == 200
        except httpx.HTTPError:
            return False

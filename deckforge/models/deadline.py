"""
Request Deadline — Wall-Clock Limit Per Optimization Call.

A deadline is created once per public call and passed explicitly to the
stages with external wall-clock cost: the budget optimizer loop and the
deck analyzer calls.

INVARIANTS:
- Expiry is TERMINAL — the run is abandoned, nothing partial is returned
- A deadline without a limit never expires
"""

import time
from dataclasses import dataclass, field

from deckforge.models.failure import DeadlineExceededError


@dataclass
class RequestDeadline:
    """
    Tracks the time budget of a single request.

    Attributes:
        limit_seconds: Allowed wall-clock time, or None for no limit
    """

    limit_seconds: float | None = None
    _started_at: float = field(default_factory=lambda: time.monotonic(), repr=False)

    @classmethod
    def unlimited(cls) -> "RequestDeadline":
        return cls(limit_seconds=None)

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self._started_at

    @property
    def remaining(self) -> float | None:
        """Seconds left, or None if there is no limit."""
        if self.limit_seconds is None:
            return None
        return max(0.0, self.limit_seconds - self.elapsed)

    @property
    def is_expired(self) -> bool:
        return self.limit_seconds is not None and self.elapsed >= self.limit_seconds

    def check(self, stage: str) -> None:
        """
        Raise if the deadline has passed.

        MUST be called before each externally-costly step.

        Raises:
            DeadlineExceededError: If the deadline has expired (terminal)
        """
        limit = self.limit_seconds
        if limit is not None and self.elapsed >= limit:
            raise DeadlineExceededError(stage=stage, limit_seconds=limit)

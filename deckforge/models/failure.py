"""
Failure Classification — Known Errors Raised by the Engine.

Every failure the engine can raise is a KnownError carrying a
FailureKind, so the calling layer (API, batch job) can explain it
without inspecting exception types.

Two outcomes are deliberately NOT exceptions:
- CONSTRAINT_UNSATISFIABLE: no candidate passed the constraints
- BUDGET_NOT_REACHED: the budget loop hit its cap while still over budget

Both are valid answers. They are reported through
DeckRecommendation.outcome_flags and the reasoning trace.
"""

from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Resource failures
    NOT_FOUND = "not_found"

    # Constraint outcomes
    CONSTRAINT_VIOLATION = "constraint_violation"
    CONSTRAINT_UNSATISFIABLE = "constraint_unsatisfiable"
    BUDGET_NOT_REACHED = "budget_not_reached"

    # Service failures
    UPSTREAM_ANALYZER_FAILURE = "upstream_analyzer_failure"
    DEADLINE_EXCEEDED = "deadline_exceeded"


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the engine knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        super().__init__(message)

    def to_detail(self) -> FailureDetail:
        """Convert to a FailureDetail for the calling layer."""
        return FailureDetail(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class CardNotFoundError(KnownError):
    """A referenced card id does not exist in the catalog."""

    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"Card '{card_id}' was not found in the catalog",
            suggestion="Check the card id or refresh the catalog snapshot.",
        )


class UpstreamAnalyzerError(KnownError):
    """
    The external deck analyzer failed or timed out.

    Raised instead of returning zeroed deltas, which would be
    indistinguishable from "no impact".
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(
            kind=FailureKind.UPSTREAM_ANALYZER_FAILURE,
            message="The deck analyzer could not evaluate the deck",
            detail=reason,
            suggestion="Retry the request; the analysis service may be unavailable.",
        )


class DeadlineExceededError(KnownError):
    """The request ran past its deadline. Terminal: the run is abandoned."""

    def __init__(self, stage: str, limit_seconds: float):
        self.stage = stage
        self.limit_seconds = limit_seconds
        super().__init__(
            kind=FailureKind.DEADLINE_EXCEEDED,
            message="Optimization did not finish within its time limit",
            detail=f"Deadline of {limit_seconds:g}s exceeded during {stage}",
            suggestion="Retry with a smaller deck or a longer deadline.",
        )


class ConstraintViolationError(KnownError):
    """
    A chosen card violates a hard constraint.

    Candidate filtering should make this unreachable; it exists so a
    violation fails loudly instead of reaching the caller.
    """

    def __init__(self, card_id: str, reason: str):
        self.card_id = card_id
        self.reason = reason
        super().__init__(
            kind=FailureKind.CONSTRAINT_VIOLATION,
            message=f"Card '{card_id}' violates the request constraints",
            detail=reason,
        )

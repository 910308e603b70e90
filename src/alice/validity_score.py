"""
Reconcile the model's 1–5 validity score with the resolved eligibility.

Eligible claims must score at least 3 and ineligible claims at most 2.  An
inconsistent score is forced into range and flagged; the flag is advisory
and never stops an analysis.  Out-of-range raw scores are not clamped.
"""

from __future__ import annotations

from dataclasses import dataclass

from .config import (
    ELIGIBLE_SCORE_FLOOR,
    INELIGIBLE_FORCED_SCORE,
    VALIDITY_SCORE_ERROR_MESSAGE,
)
from .eligibility import OverallEligibility


@dataclass(frozen=True)
class ScoreOutcome:
    raw_score: object
    forced_score: object
    invalid: bool
    message: str | None = None


def normalize_validity_score(raw_score, eligibility: OverallEligibility) -> ScoreOutcome:
    """
    Force ``raw_score`` to agree with ``eligibility``.

    Rules:
      - ELIGIBLE and raw < 3   → 3, flagged
      - INELIGIBLE and raw >= 3 → 2, flagged
      - otherwise               → raw, not flagged

    Args:
        raw_score: Score reported by the model (normally an int 1–5).
        eligibility: Outcome of :func:`resolve_eligibility`.

    Returns:
        :class:`ScoreOutcome`.  ``message`` is set only when ``invalid``.
    """
    if eligibility is OverallEligibility.ELIGIBLE and raw_score < ELIGIBLE_SCORE_FLOOR:
        forced = ELIGIBLE_SCORE_FLOOR
    elif eligibility is OverallEligibility.INELIGIBLE and raw_score >= ELIGIBLE_SCORE_FLOOR:
        forced = INELIGIBLE_FORCED_SCORE
    else:
        return ScoreOutcome(raw_score=raw_score, forced_score=raw_score, invalid=False)

    message = VALIDITY_SCORE_ERROR_MESSAGE.format(
        validity_score=raw_score,
        overall_eligibility=eligibility.value,
    )
    return ScoreOutcome(
        raw_score=raw_score,
        forced_score=forced,
        invalid=True,
        message=message,
    )

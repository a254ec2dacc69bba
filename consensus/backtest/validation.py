"""consensus.backtest.validation

Replay metrics.

Accuracy only counts predictions that were actually resolved as a win or a
loss. Withheld rounds and fallbacks are reported, not hidden.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict, dataclass
from typing import Any

from consensus.core.types import Outcome, ResolutionStatus, SystemHealth
from consensus.integration.session import PendingPrediction

FALLBACK_HEALTH = frozenset({SystemHealth.INSUFFICIENT_HISTORY.value, SystemHealth.MODEL_UNCERTAIN.value})


@dataclass(frozen=True, slots=True)
class ReplayStep:
    """One draw and the prediction that was standing for it."""

    issue_number: str
    number: int
    actual: Outcome
    prediction: PendingPrediction | None
    status: ResolutionStatus | None

    def as_dict(self) -> dict[str, Any]:
        return {
            "issue_number": self.issue_number,
            "number": self.number,
            "actual": self.actual.value,
            "prediction": self.prediction.as_dict() if self.prediction else None,
            "status": self.status.value if self.status else None,
        }


@dataclass(frozen=True, slots=True)
class ReplayMetrics:
    steps: int
    wins: int
    losses: int
    accuracy: float
    high_confidence: int
    high_confidence_accuracy: float
    coverage: float
    fallbacks: int
    defensive_steps: int
    longest_losing_streak: int

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def longest_losing_streak(statuses: Sequence[ResolutionStatus | None]) -> int:
    best = 0
    run = 0
    for s in statuses:
        if s is ResolutionStatus.LOSS:
            run += 1
            best = max(best, run)
        elif s is ResolutionStatus.WIN:
            run = 0
    return best


def compute_metrics(steps: Sequence[ReplayStep]) -> ReplayMetrics:
    decided = [s for s in steps if s.status is not None and s.status.decided]
    wins = sum(1 for s in decided if s.status is ResolutionStatus.WIN)
    losses = len(decided) - wins

    trusted = [s for s in decided if s.prediction is not None and s.prediction.confidence_level == 1]
    trusted_wins = sum(1 for s in trusted if s.status is ResolutionStatus.WIN)

    predicted = [s.prediction for s in steps if s.prediction is not None]
    fallbacks = sum(1 for p in predicted if p.health in FALLBACK_HEALTH)
    defensive = sum(1 for p in predicted if p.health == SystemHealth.DEFENSIVE_MODE.value)

    return ReplayMetrics(
        steps=len(steps),
        wins=wins,
        losses=losses,
        accuracy=wins / len(decided) if decided else 0.0,
        high_confidence=len(trusted),
        high_confidence_accuracy=trusted_wins / len(trusted) if trusted else 0.0,
        coverage=len(trusted) / len(decided) if decided else 0.0,
        fallbacks=fallbacks,
        defensive_steps=defensive,
        longest_losing_streak=longest_losing_streak([s.status for s in steps]),
    )

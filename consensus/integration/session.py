"""consensus.integration.session

When a draw is published, the caller must close the loop around the engine.

Responsibilities:
- Reject duplicate issue numbers (the same draw reported twice)
- Resolve the pending prediction that targeted this issue
- Attach the resolution, the predicted class and the feature snapshot to the
  new observation, so weight adaptation has something to learn from
- Keep the long-term win/loss tally
- Cap history and store the prediction for the next issue

The engine stays pure with respect to history; the session owns it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

from consensus.brain.orchestrator import ConsensusEngine, Prediction
from consensus.core.exceptions import DrawInputError
from consensus.core.types import (
    WITHHELD_PREDICTIONS,
    FeatureSet,
    Observation,
    Outcome,
    ResolutionStatus,
    SharedStats,
)

logger = logging.getLogger(__name__)


class DrawResult(BaseModel):
    """One published draw, as reported by the source."""

    issue_number: str
    number: int

    @field_validator("issue_number", mode="before")
    @classmethod
    def issue_must_be_numeric(cls, v: Any) -> str:
        s = str(v).strip() if v is not None else ""
        if not s:
            raise ValueError("issue_number must not be empty")
        if not s.isdigit():
            raise ValueError(f"issue_number must be numeric, got {s!r}")
        return s

    @field_validator("number")
    @classmethod
    def number_must_be_digit(cls, v: int) -> int:
        if not 0 <= v <= 9:
            raise ValueError(f"number must lie within [0, 9], got {v}")
        return v

    @property
    def outcome(self) -> Outcome:
        return Outcome.BIG if self.number >= 5 else Outcome.SMALL


@dataclass(frozen=True, slots=True)
class PendingPrediction:
    issue_number: str
    prediction: str
    confidence: int  # percent
    confidence_level: int
    health: str
    source: str
    timestamp: datetime

    def as_dict(self) -> dict[str, Any]:
        return {
            "issue_number": self.issue_number,
            "prediction": self.prediction,
            "confidence": self.confidence,
            "confidence_level": self.confidence_level,
            "health": self.health,
            "source": self.source,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class SessionUpdate:
    draw: DrawResult
    duplicate: bool
    resolved: ResolutionStatus | None
    pending: PendingPrediction | None
    prediction: Prediction | None = None


def next_issue(issue_number: str) -> str:
    return str(int(issue_number) + 1)


class DrawSession:
    def __init__(self, engine: ConsensusEngine, *, max_history: int | None = None):
        self.engine = engine
        self.max_history = int(max_history or engine.config.history.max_history)

        self._history: list[Observation] = []
        self._stats = SharedStats()
        self._pending: PendingPrediction | None = None
        self._pending_features: FeatureSet | None = None
        self._last_issue: str | None = None

        self.wins = 0
        self.losses = 0

    @property
    def history(self) -> list[Observation]:
        return list(self._history)

    @property
    def stats(self) -> SharedStats:
        return self._stats

    @property
    def pending(self) -> PendingPrediction | None:
        return self._pending

    @property
    def long_term_accuracy(self) -> float | None:
        decided = self.wins + self.losses
        if decided == 0:
            return None
        return self.wins / decided

    def submit(self, draw: DrawResult | dict[str, Any]) -> SessionUpdate:
        if not isinstance(draw, DrawResult):
            try:
                draw = DrawResult.model_validate(draw)
            except ValidationError as e:
                raise DrawInputError(f"Invalid draw record: {e}") from e

        if draw.issue_number == self._last_issue:
            logger.debug("draw_duplicate", extra={"issue_number": draw.issue_number})
            return SessionUpdate(draw=draw, duplicate=True, resolved=None, pending=self._pending)

        status, predicted = self._resolve(draw)

        self._history.insert(
            0,
            Observation(
                period=draw.issue_number,
                number=float(draw.number),
                outcome=draw.outcome,
                status=status or ResolutionStatus.PENDING,
                timestamp=datetime.now(tz=UTC),
                prediction=predicted if status is not None else None,
                features=self._pending_features if status is not None else None,
            ),
        )
        del self._history[self.max_history :]
        self._last_issue = draw.issue_number

        result = self.engine.predict(self._history, self._stats)
        self._stats = result.stats

        decision = result.decision
        self._pending = PendingPrediction(
            issue_number=next_issue(draw.issue_number),
            prediction=decision.prediction.value,
            confidence=round(decision.confidence * 100) if decision.confidence else 50,
            confidence_level=decision.confidence_level,
            health=decision.health.value,
            source=decision.source,
            timestamp=datetime.now(tz=UTC),
        )
        # Only model-backed decisions are attributable to the feature weights.
        self._pending_features = result.features if result.consensus is not None else None

        return SessionUpdate(draw=draw, duplicate=False, resolved=status, pending=self._pending, prediction=result)

    def _resolve(self, draw: DrawResult) -> tuple[ResolutionStatus | None, Outcome | None]:
        pending = self._pending
        if pending is None or pending.issue_number != draw.issue_number:
            # Nothing to resolve; do not let a stale actual resolve the new prediction.
            self._stats = replace(self._stats, last_actual=None)
            return None, None

        if pending.prediction in WITHHELD_PREDICTIONS:
            status = ResolutionStatus.COOLDOWN
        elif draw.outcome.value == pending.prediction:
            status = ResolutionStatus.WIN
        else:
            status = ResolutionStatus.LOSS

        if status is ResolutionStatus.WIN:
            self.wins += 1
        elif status is ResolutionStatus.LOSS:
            self.losses += 1

        self._stats = replace(
            self._stats,
            last_actual=draw.number,
            last_predicted=pending.prediction,
            last_confidence_level=pending.confidence_level,
            long_term_accuracy=self.long_term_accuracy,
        )
        logger.debug(
            "draw_resolved",
            extra={"issue_number": draw.issue_number, "status": status.value, "predicted": pending.prediction},
        )

        predicted = None if pending.prediction in WITHHELD_PREDICTIONS else Outcome(pending.prediction)
        return status, predicted

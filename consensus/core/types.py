"""consensus.core.types

Lightweight dataclasses for hot-path objects.

Pydantic models own IO boundaries; dataclasses keep the engine lean.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, fields
from datetime import datetime
from enum import StrEnum
from typing import Any


class Outcome(StrEnum):
    BIG = "BIG"
    SMALL = "SMALL"

    @property
    def opposite(self) -> Outcome:
        return Outcome.SMALL if self is Outcome.BIG else Outcome.BIG

    @property
    def symbol(self) -> str:
        """One-letter code used by the pattern matcher."""

        return self.value[0]

    @classmethod
    def from_number(cls, value: Any) -> Outcome | None:
        """0-4 -> SMALL, 5-9 -> BIG, anything else -> None."""

        if value is None or isinstance(value, bool):
            return None
        try:
            n = int(float(value))
        except (TypeError, ValueError, OverflowError):
            return None
        if 0 <= n <= 4:
            return cls.SMALL
        if 5 <= n <= 9:
            return cls.BIG
        return None


class ResolutionStatus(StrEnum):
    PENDING = "Pending"
    WIN = "Win"
    LOSS = "Loss"
    COOLDOWN = "Cooldown"

    @property
    def decided(self) -> bool:
        return self in (ResolutionStatus.WIN, ResolutionStatus.LOSS)


class SystemHealth(StrEnum):
    OK = "OK"
    DEFENSIVE_MODE = "DEFENSIVE_MODE"
    INSUFFICIENT_HISTORY = "INSUFFICIENT_HISTORY"
    MODEL_UNCERTAIN = "MODEL_UNCERTAIN"


class RegimeMode(StrEnum):
    NORMAL = "NORMAL"
    DEFENSIVE = "DEFENSIVE"


# Predictions a caller may record instead of a class when it sat a round out.
WITHHELD_PREDICTIONS: frozenset[str] = frozenset({"DEFENSIVE_MODE", "COOLDOWN"})


class FeatureName(StrEnum):
    """Key set shared by :class:`FeatureSet` and the model's weight vector."""

    RSI_STRENGTH = "rsi_strength"
    RSI_IS_OVERBOUGHT = "rsi_is_overbought"
    RSI_IS_OVERSOLD = "rsi_is_oversold"
    MACD_HIST = "macd_hist"
    TREND_STRENGTH_SCORE = "trend_strength_score"
    LAST_MOVE = "last_move"


@dataclass(frozen=True, slots=True)
class FeatureSet:
    rsi_strength: float = 0.0  # [-1, 1]
    rsi_is_overbought: float = 0.0  # 0 | 1
    rsi_is_oversold: float = 0.0  # 0 | -1
    macd_hist: float = 0.0  # unbounded
    trend_strength_score: float = 0.0  # -1 | 0 | 1
    last_move: float = 0.0  # -1 | 1

    def items(self) -> Iterator[tuple[FeatureName, float]]:
        for f in fields(self):
            yield FeatureName(f.name), float(getattr(self, f.name))

    def as_dict(self) -> dict[str, float]:
        return {str(k): v for k, v in self.items()}

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> FeatureSet:
        """Build from a plain mapping, ignoring unknown keys and non-numeric values."""

        known = {str(n) for n in FeatureName}
        values: dict[str, float] = {}
        for k, v in data.items():
            if str(k) not in known:
                continue
            try:
                values[str(k)] = float(v)
            except (TypeError, ValueError):
                continue
        return cls(**values)


@dataclass(frozen=True, slots=True)
class Observation:
    """One draw. Sequences of these are always newest-first."""

    period: str
    number: float
    outcome: Outcome | None
    status: ResolutionStatus = ResolutionStatus.PENDING
    timestamp: datetime | None = None
    # Attribution: the class predicted for this period and the features behind it.
    prediction: Outcome | None = None
    features: FeatureSet | None = None


@dataclass(frozen=True, slots=True)
class AdvisorySignal:
    prediction: Outcome
    source: str


@dataclass(frozen=True, slots=True)
class PrimaryPrediction:
    prediction: Outcome
    confidence: float
    source: str = "LearningML"


@dataclass(frozen=True, slots=True)
class Decision:
    prediction: Outcome
    confidence: float | None
    confidence_level: int  # 0 = do not trust, 1 = trust
    health: SystemHealth
    source: str


# ---------------------------------------------------------------------------
# Adaptation dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class WeightAdjustment:
    previous_weights: dict[str, float]
    new_weights: dict[str, float]
    deltas: dict[str, float]
    observations: int
    applied: bool
    reason: str  # "adjusted" | "insufficient_data"


@dataclass(frozen=True, slots=True)
class RegimeTransition:
    previous: RegimeMode
    new: RegimeMode
    reason: str  # "bad_trend" | "recovery_streak"


@dataclass(frozen=True, slots=True)
class SharedStats:
    """Cross-call bookkeeping owned by the caller.

    The engine reads the ``last_*`` fields and ``long_term_accuracy``; it
    returns a copy with ``last_decision``, ``features`` and ``status`` filled
    in. Pass the returned copy into the next call.
    """

    last_actual: int | None = None
    last_predicted: str | None = None
    last_confidence_level: int | None = None
    long_term_accuracy: float | None = None
    last_decision: Decision | None = None
    features: FeatureSet | None = None
    status: ResolutionStatus | None = None

"""consensus.brain.orchestrator

The prediction engine.

This class coordinates a single prediction. It owns every piece of state that
outlives a call (weights, regime, sentiment tape, RNG) and nothing else;
history and the shared stats payload belong to the caller.

Pipeline:
1) Normalize history (lossy)
2) Minimum-history gate -> INSUFFICIENT_HISTORY fallback, nothing mutated
3) Adaptation tick on cadence: threshold drift, weight evolution, sentiment
4) Resolve the previous prediction from the shared stats
5) Regime update
6) Features -> adaptive linear model -> MODEL_UNCERTAIN fallback if silent
7) Advisory consensus scales confidence; defensive mode suppresses it
8) Return the decision plus the updated stats copy
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from threading import Lock
from typing import Any

import numpy as np

from consensus import LOGIC_LABEL
from consensus.brain.consensus import AdvisoryBank, ConsensusResult
from consensus.brain.data_quality import normalize_history
from consensus.brain.features import build_feature_set
from consensus.brain.learning import AdaptiveLinearModel
from consensus.brain.regime import RegimeMachine
from consensus.brain.sentiment import SentimentSimulator
from consensus.core.config import Config
from consensus.core.metrics import MetricsRegistry
from consensus.core.types import (
    WITHHELD_PREDICTIONS,
    Decision,
    FeatureSet,
    Outcome,
    RegimeTransition,
    ResolutionStatus,
    SharedStats,
    SystemHealth,
    WeightAdjustment,
)
from consensus.signals.base import DrawSeries

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Prediction:
    decision: Decision
    stats: SharedStats
    features: FeatureSet | None = None
    consensus: ConsensusResult | None = None
    weight_adjustment: WeightAdjustment | None = None
    regime_transition: RegimeTransition | None = None


def resolve_previous(stats: SharedStats) -> ResolutionStatus | None:
    """How did the last prediction do? None when there is nothing to resolve."""

    if stats.last_actual is None or stats.last_predicted is None:
        return None
    if stats.last_predicted in WITHHELD_PREDICTIONS:
        return ResolutionStatus.COOLDOWN

    actual = Outcome.from_number(stats.last_actual)
    if actual is not None and actual.value == stats.last_predicted:
        return ResolutionStatus.WIN
    return ResolutionStatus.LOSS


class ConsensusEngine:
    def __init__(self, config: Config | None = None, *, metrics: MetricsRegistry | None = None):
        self.config = config or Config()
        self.metrics = metrics or MetricsRegistry()
        # Independent streams: a fallback coin flip must not shift the sentiment tape.
        fallback_seed, sentiment_seed = np.random.SeedSequence(self.config.seed).spawn(2)
        self.rng = np.random.default_rng(fallback_seed)

        self.model = AdaptiveLinearModel(self.config.learning)
        self.regime = RegimeMachine(self.config.regime)
        self.sentiment = SentimentSimulator(self.config.sentiment, rng=np.random.default_rng(sentiment_seed))
        self.advisors = AdvisoryBank.from_config(self.config.advisors)

        self._lock = Lock()

    def predict(self, history: Iterable[Any], stats: SharedStats | None = None) -> Prediction:
        with self._lock:
            return self._predict(history, stats or SharedStats())

    def _predict(self, history: Iterable[Any], stats: SharedStats) -> Prediction:
        normalized = normalize_history(history)
        resolved = normalized.observations
        n = len(resolved)

        if n < self.config.history.min_history:
            logger.debug(
                "insufficient_history",
                extra={"resolved": n, "required": self.config.history.min_history, "dropped": normalized.dropped},
            )
            return Prediction(decision=self._fallback(SystemHealth.INSUFFICIENT_HISTORY), stats=stats)

        adjustment: WeightAdjustment | None = None
        if n % self.config.history.adaptation_interval == 0:
            if stats.long_term_accuracy is not None:
                self.regime.evolve_threshold(float(stats.long_term_accuracy))
            adjustment = self.model.evolve(resolved)
            self.sentiment.tick()

        status = resolve_previous(stats)
        transition = self.regime.update(resolved) if status is not None else None

        series = DrawSeries.from_observations(resolved)
        features = build_feature_set(
            series.numbers,
            min_history=self.config.history.min_history,
            rsi_period=self.config.advisors.rsi_period,
        )
        primary = self.model.predict(features)

        if primary is None:
            logger.info("model_uncertain", extra={"resolved": n})
            return Prediction(
                decision=self._fallback(SystemHealth.MODEL_UNCERTAIN),
                stats=stats,
                features=features,
                weight_adjustment=adjustment,
                regime_transition=transition,
            )

        consensus = self.advisors.run(series, primary.prediction)

        d = self.config.decision
        final = primary.confidence * (d.consensus_base + consensus.consensus_score * d.consensus_weight)
        if self.regime.defensive:
            final *= d.defensive_penalty
            level = 0
            health = SystemHealth.DEFENSIVE_MODE
        else:
            level = 1 if final > d.high_confidence_threshold else 0
            health = SystemHealth.OK

        decision = Decision(
            prediction=primary.prediction,
            confidence=float(final),
            confidence_level=level,
            health=health,
            source=consensus.tally,
        )
        self._publish(decision)

        new_stats = replace(
            stats,
            last_decision=decision,
            last_predicted=decision.prediction.value,
            features=features,
            status=status or ResolutionStatus.PENDING,
        )
        return Prediction(
            decision=decision,
            stats=new_stats,
            features=features,
            consensus=consensus,
            weight_adjustment=adjustment,
            regime_transition=transition,
        )

    def _fallback(self, health: SystemHealth) -> Decision:
        prediction = Outcome.BIG if float(self.rng.random()) > 0.5 else Outcome.SMALL
        decision = Decision(
            prediction=prediction,
            confidence=None,
            confidence_level=0,
            health=health,
            source=LOGIC_LABEL,
        )
        self._publish(decision)
        return decision

    def _publish(self, decision: Decision) -> None:
        self.metrics.inc(f"decisions.{decision.health.value.lower()}")
        self.metrics.set("regime.defensive", 1.0 if self.regime.defensive else 0.0)
        self.metrics.set("regime.bad_trend_threshold", self.regime.params.bad_trend_threshold)
        self.metrics.set("sentiment.factor", self.sentiment.factor())

    def snapshot(self) -> dict[str, Any]:
        """Current adaptive state, for status output and tests."""

        with self._lock:
            return {
                "mode": self.regime.mode.value,
                "bad_trend_threshold": self.regime.params.bad_trend_threshold,
                "weights": {str(k): v for k, v in self.model.weights.items()},
                "sentiment_factor": self.sentiment.factor(),
                "sentiment_events": len(self.sentiment.events),
            }

"""consensus.brain.learning

The adaptive linear model: a weighted vote over the feature snapshot, and a
weight vector that drifts toward features that were right.

Scoring:
- a positive weight sends a positive feature value to BIG, a negative one to SMALL
- a negative weight flips that polarity
- confidence is the normalized margin between the two scores

Adaptation (called on the engine's adaptation cadence):
- look back over recent resolved predictions that carry a feature snapshot
- a feature that pointed the same way as the prediction is nudged up on a win
  and down on a loss; features that disagreed are left alone
- every weight is clamped to [min_weight, max_weight] afterwards

Cold start: fewer than ``min_trades`` attributable predictions is a no-op.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from consensus.core.config import LearningConfig
from consensus.core.types import (
    FeatureName,
    FeatureSet,
    Observation,
    Outcome,
    PrimaryPrediction,
    ResolutionStatus,
    WeightAdjustment,
)

logger = logging.getLogger(__name__)


def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, float(x)))


def score_features(features: FeatureSet, weights: Mapping[FeatureName, float]) -> tuple[float, float]:
    """Return (big_score, small_score)."""

    big = 0.0
    small = 0.0
    for name, value in features.items():
        w = weights.get(name)
        if w is None:
            continue
        if w > 0:
            if value > 0:
                big += value * w
            else:
                small += abs(value * w)
        else:
            if value > 0:
                small += value * abs(w)
            else:
                big += abs(value * w)
    return big, small


class AdaptiveLinearModel:
    source = "LearningML"

    def __init__(self, cfg: LearningConfig):
        self.cfg = cfg
        self._weights: dict[FeatureName, float] = {FeatureName(k): float(v) for k, v in cfg.initial_weights.items()}

    @property
    def weights(self) -> dict[FeatureName, float]:
        return dict(self._weights)

    def predict(self, features: FeatureSet | None) -> PrimaryPrediction | None:
        if features is None:
            return None

        big, small = score_features(features, self._weights)
        total = big + small
        if total == 0.0:
            return None

        confidence = abs(big - small) / total
        prediction = Outcome.BIG if big > small else Outcome.SMALL
        return PrimaryPrediction(prediction=prediction, confidence=float(confidence), source=self.source)

    def attributable(self, history: Sequence[Observation]) -> list[Observation]:
        trades = [
            o
            for o in history
            if o.features is not None and o.prediction is not None and o.status.decided
        ]
        return trades[: self.cfg.lookback]

    def evolve(self, history: Sequence[Observation]) -> WeightAdjustment:
        previous = {str(k): v for k, v in self._weights.items()}
        trades = self.attributable(history)
        n = len(trades)

        if n < self.cfg.min_trades:
            logger.debug("weights_adaptation_skipped", extra={"observations": n, "required": self.cfg.min_trades})
            return WeightAdjustment(
                previous_weights=previous,
                new_weights=previous,
                deltas={k: 0.0 for k in previous},
                observations=n,
                applied=False,
                reason="insufficient_data",
            )

        lr = float(self.cfg.learning_rate)
        adjustments: dict[FeatureName, float] = {k: 0.0 for k in self._weights}

        for trade in trades:
            if trade.features is None:
                continue
            won = trade.status is ResolutionStatus.WIN
            predicted_big = trade.prediction is Outcome.BIG
            for name, value in trade.features.items():
                w = self._weights.get(name)
                if w is None:
                    continue
                impact_big = value * w > 0
                aligned = impact_big if predicted_big else not impact_big
                if not aligned:
                    continue
                adjustments[name] += lr if won else -lr

        for name in self._weights:
            self._weights[name] = _clamp(
                self._weights[name] + adjustments[name],
                self.cfg.min_weight,
                self.cfg.max_weight,
            )

        new = {str(k): v for k, v in self._weights.items()}
        deltas = {k: new[k] - previous[k] for k in previous}
        logger.info("weights_adapted", extra={"observations": n, "deltas": deltas})
        return WeightAdjustment(
            previous_weights=previous,
            new_weights=new,
            deltas=deltas,
            observations=n,
            applied=True,
            reason="adjusted",
        )

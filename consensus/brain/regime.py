"""consensus.brain.regime

Defensive-mode state machine.

NORMAL -> DEFENSIVE: recent accuracy falls below the bad-trend threshold.
DEFENSIVE -> NORMAL: only a clean run of wins releases it.

The threshold itself is not fixed. Each adaptation tick nudges it toward the
ceiling while long-term accuracy lags the target (quicker to defend) and
toward the floor while it beats the target (slower to defend). One step per
tick, never a jump.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from consensus.core.config import RegimeConfig
from consensus.core.types import Observation, RegimeMode, RegimeTransition, ResolutionStatus

logger = logging.getLogger(__name__)


@dataclass
class RegimeParameters:
    bad_trend_threshold: float
    target_accuracy: float
    evolution_rate: float
    defensive: bool = False


class RegimeMachine:
    def __init__(self, cfg: RegimeConfig):
        self.cfg = cfg
        self.params = RegimeParameters(
            bad_trend_threshold=float(cfg.bad_trend_threshold),
            target_accuracy=float(cfg.target_accuracy),
            evolution_rate=float(cfg.evolution_rate),
        )

    @property
    def mode(self) -> RegimeMode:
        return RegimeMode.DEFENSIVE if self.params.defensive else RegimeMode.NORMAL

    @property
    def defensive(self) -> bool:
        return self.params.defensive

    def evolve_threshold(self, long_term_accuracy: float) -> float:
        p = self.params
        before = p.bad_trend_threshold
        tol = self.cfg.accuracy_tolerance

        if long_term_accuracy < p.target_accuracy - tol:
            p.bad_trend_threshold = min(self.cfg.threshold_ceiling, p.bad_trend_threshold + p.evolution_rate)
        elif long_term_accuracy > p.target_accuracy + tol:
            p.bad_trend_threshold = max(self.cfg.threshold_floor, p.bad_trend_threshold - p.evolution_rate)

        if p.bad_trend_threshold != before:
            logger.debug(
                "bad_trend_threshold_drift",
                extra={"before": before, "after": p.bad_trend_threshold, "accuracy": long_term_accuracy},
            )
        return p.bad_trend_threshold

    def recent_accuracy(self, history: Sequence[Observation]) -> float | None:
        """Win ratio over the regime window, or None when the window is not decidable."""

        if len(history) < self.cfg.window:
            return None
        recent = history[: self.cfg.window]
        wins = sum(1 for o in recent if o.status is ResolutionStatus.WIN)
        losses = sum(1 for o in recent if o.status is ResolutionStatus.LOSS)
        if wins + losses < self.cfg.min_decided:
            return None
        return wins / (wins + losses)

    def detect_bad_trend(self, history: Sequence[Observation]) -> bool:
        acc = self.recent_accuracy(history)
        return acc is not None and acc < self.params.bad_trend_threshold

    def update(self, history: Sequence[Observation]) -> RegimeTransition | None:
        previous = self.mode

        if self.detect_bad_trend(history):
            self.params.defensive = True

        streak = [o.status for o in history[: self.cfg.recovery_streak]]
        if (
            self.params.defensive
            and len(streak) == self.cfg.recovery_streak
            and all(s is ResolutionStatus.WIN for s in streak)
        ):
            self.params.defensive = False

        current = self.mode
        if current == previous:
            return None

        if current is RegimeMode.DEFENSIVE:
            reason = "bad_trend"
            logger.warning(
                "defensive_mode_engaged",
                extra={"threshold": self.params.bad_trend_threshold, "accuracy": self.recent_accuracy(history)},
            )
        else:
            reason = "recovery_streak"
            logger.info("defensive_mode_released", extra={"streak": self.cfg.recovery_streak})
        return RegimeTransition(previous=previous, new=current, reason=reason)

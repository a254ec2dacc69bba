"""consensus.signals.stochastic

Stochastic extremes (mean reversion):
- %K of the newest value inside the recent high/low range
- %K above ``overbought`` -> SMALL, below ``oversold`` -> BIG

A flat range has no %K and no vote.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from consensus.core.types import AdvisorySignal, Outcome
from consensus.signals.base import Advisor, DrawSeries


@dataclass(frozen=True, slots=True)
class StochasticAdvisor(Advisor):
    name: str = "stochastic"
    period: int = 14
    overbought: float = 85.0
    oversold: float = 15.0

    def analyze(self, series: DrawSeries) -> AdvisorySignal | None:
        if self.period <= 0 or len(series) < self.period:
            return None
        window = series.numbers[: self.period]
        current = float(window[0])
        low = float(np.min(window))
        high = float(np.max(window))
        if high == low:
            return None

        k = 100.0 * (current - low) / (high - low)
        if k > self.overbought:
            return AdvisorySignal(prediction=Outcome.SMALL, source="Stochastic")
        if k < self.oversold:
            return AdvisorySignal(prediction=Outcome.BIG, source="Stochastic")
        return None

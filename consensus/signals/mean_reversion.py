"""consensus.signals.mean_reversion

Z-score mean reversion:
- z of the newest value against the window mean/stddev
- z > threshold -> SMALL, z < -threshold -> BIG

A zero-variance window has no z-score and no vote.
"""

from __future__ import annotations

from dataclasses import dataclass

from consensus.core.types import AdvisorySignal, Outcome
from consensus.signals.base import Advisor, DrawSeries
from consensus.signals.indicators import sma, stddev


@dataclass(frozen=True, slots=True)
class MeanReversionAdvisor(Advisor):
    name: str = "mean_reversion"
    period: int = 20
    z_threshold: float = 1.5

    def analyze(self, series: DrawSeries) -> AdvisorySignal | None:
        window = series.numbers[: self.period]
        if self.period < 2 or window.size < self.period:
            return None

        mu = sma(window, self.period)
        sd = stddev(window, self.period)
        if mu is None or sd is None or sd == 0.0:
            return None

        z = (float(window[0]) - mu) / sd
        if z > self.z_threshold:
            return AdvisorySignal(prediction=Outcome.SMALL, source="MeanReversion")
        if z < -self.z_threshold:
            return AdvisorySignal(prediction=Outcome.BIG, source="MeanReversion")
        return None

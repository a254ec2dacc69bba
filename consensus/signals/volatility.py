"""consensus.signals.volatility

Volatility breakout:
- sample stddev of the most recent window vs. the window before it
- recent > factor x prior -> follow the latest move

Toy baseline.
"""

from __future__ import annotations

from dataclasses import dataclass

from consensus.core.types import AdvisorySignal, Outcome
from consensus.signals.base import Advisor, DrawSeries
from consensus.signals.indicators import stddev


@dataclass(frozen=True, slots=True)
class VolatilityBreakoutAdvisor(Advisor):
    name: str = "volatility"
    period: int = 20
    factor: float = 1.8

    def analyze(self, series: DrawSeries) -> AdvisorySignal | None:
        numbers = series.numbers
        if self.period < 2 or numbers.size < self.period * 2:
            return None

        recent = stddev(numbers[: self.period], self.period)
        prior = stddev(numbers[self.period : self.period * 2], self.period)
        if recent is None or prior is None or prior == 0.0:
            return None

        if recent > prior * self.factor:
            direction = Outcome.BIG if numbers[0] > numbers[1] else Outcome.SMALL
            return AdvisorySignal(prediction=direction, source="Volatility")
        return None

"""consensus.signals.rsi_trend

RSI trend advisor:
- RSI over each of the last ``ma_period`` sub-sequences (oldest first)
- SMA of those RSI values
- current RSI above the SMA by more than ``band`` -> BIG, below -> SMALL
"""

from __future__ import annotations

from dataclasses import dataclass

from consensus.core.types import AdvisorySignal, Outcome
from consensus.signals.base import Advisor, DrawSeries
from consensus.signals.indicators import rsi, sma


@dataclass(frozen=True, slots=True)
class RSITrendAdvisor(Advisor):
    name: str = "rsi_trend"
    period: int = 14
    ma_period: int = 9
    band: float = 2.0

    def analyze(self, series: DrawSeries) -> AdvisorySignal | None:
        numbers = series.numbers
        if numbers.size < self.period + self.ma_period:
            return None

        values: list[float] = []
        for lag in range(self.ma_period - 1, -1, -1):
            r = rsi(numbers[lag:], self.period)
            if r is None:
                return None
            values.append(r)

        current = values[-1]
        ma = sma(values, self.ma_period)
        if ma is None:
            return None
        if current > ma + self.band:
            return AdvisorySignal(prediction=Outcome.BIG, source="RSITrend")
        if current < ma - self.band:
            return AdvisorySignal(prediction=Outcome.SMALL, source="RSITrend")
        return None

"""consensus.signals.price_action

Two lagged pairs moving the same way:
- p0 > p2 and p1 > p3 -> BIG
- p0 < p2 and p1 < p3 -> SMALL
"""

from __future__ import annotations

from dataclasses import dataclass

from consensus.core.types import AdvisorySignal, Outcome
from consensus.signals.base import Advisor, DrawSeries


@dataclass(frozen=True, slots=True)
class PriceActionAdvisor(Advisor):
    name: str = "price_action"
    depth: int = 5

    def analyze(self, series: DrawSeries) -> AdvisorySignal | None:
        if len(series) < max(self.depth, 4):
            return None
        p0, p1, p2, p3 = (float(v) for v in series.numbers[:4])

        if p0 > p2 and p1 > p3:
            return AdvisorySignal(prediction=Outcome.BIG, source="PriceAction")
        if p0 < p2 and p1 < p3:
            return AdvisorySignal(prediction=Outcome.SMALL, source="PriceAction")
        return None

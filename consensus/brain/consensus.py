"""consensus.brain.consensus

Advisory consensus.

Every advisor sees the same history. Abstentions are dropped; the consensus
score is the share of the remaining votes that agree with the primary model.
No votes at all is a neutral 0.5, not zero confidence.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from consensus.core.config import AdvisorConfig
from consensus.core.types import AdvisorySignal, Outcome
from consensus.signals import (
    Advisor,
    DrawSeries,
    MeanReversionAdvisor,
    PatternAdvisor,
    PriceActionAdvisor,
    RSITrendAdvisor,
    StochasticAdvisor,
    VolatilityBreakoutAdvisor,
)


@dataclass(frozen=True, slots=True)
class ConsensusResult:
    signals: list[AdvisorySignal] = field(default_factory=list)
    consensus_score: float = 0.5
    agreeing: int = 0
    total: int = 0

    @property
    def tally(self) -> str:
        return f"ML+{self.agreeing}/{self.total}_Advisors"


class AdvisoryBank:
    def __init__(self, advisors: Sequence[Advisor]):
        self.advisors = list(advisors)

    @classmethod
    def from_config(cls, cfg: AdvisorConfig) -> AdvisoryBank:
        return cls(
            [
                RSITrendAdvisor(period=cfg.rsi_period, ma_period=cfg.rsi_ma_period, band=cfg.rsi_band),
                StochasticAdvisor(
                    period=cfg.stochastic_period,
                    overbought=cfg.stochastic_overbought,
                    oversold=cfg.stochastic_oversold,
                ),
                PatternAdvisor(depth=cfg.pattern_depth, min_length=cfg.pattern_min_length),
                VolatilityBreakoutAdvisor(period=cfg.volatility_period, factor=cfg.volatility_factor),
                PriceActionAdvisor(depth=cfg.price_action_depth),
                MeanReversionAdvisor(period=cfg.mean_reversion_period, z_threshold=cfg.mean_reversion_z),
            ]
        )

    def run(self, series: DrawSeries, primary: Outcome) -> ConsensusResult:
        signals: list[AdvisorySignal] = []
        for advisor in self.advisors:
            sig = advisor.analyze(series)
            if sig is not None:
                signals.append(sig)

        total = len(signals)
        agreeing = sum(1 for s in signals if s.prediction is primary)
        score = agreeing / total if total > 0 else 0.5
        return ConsensusResult(signals=signals, consensus_score=float(score), agreeing=agreeing, total=total)

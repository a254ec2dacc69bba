"""consensus.signals

Indicator math and the advisory model bank.

These are intentionally simple heuristics. The goal is determinism and
comparability, not edge.
"""

from consensus.signals.base import Advisor, DrawSeries
from consensus.signals.mean_reversion import MeanReversionAdvisor
from consensus.signals.patterns import PatternAdvisor
from consensus.signals.price_action import PriceActionAdvisor
from consensus.signals.rsi_trend import RSITrendAdvisor
from consensus.signals.stochastic import StochasticAdvisor
from consensus.signals.volatility import VolatilityBreakoutAdvisor

__all__ = [
    "Advisor",
    "DrawSeries",
    "MeanReversionAdvisor",
    "PatternAdvisor",
    "PriceActionAdvisor",
    "RSITrendAdvisor",
    "StochasticAdvisor",
    "VolatilityBreakoutAdvisor",
]

"""consensus.brain.features

Feature snapshot for the adaptive linear model.

A snapshot is built fresh on every call and copied into the shared stats so
the next call can attribute the outcome to it.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from consensus.core.types import FeatureSet, Outcome
from consensus.signals.indicators import ema, macd_histogram, rsi


@dataclass(frozen=True, slots=True)
class TrendContext:
    strength: str  # STRONG | RANGING | UNKNOWN
    direction: Outcome | None


def trend_context(
    numbers: np.ndarray,
    *,
    short: int = 5,
    medium: int = 10,
    long: int = 20,
) -> TrendContext:
    """Three-EMA ordering: stacked up or down is a strong trend, anything else ranges."""

    if numbers.size < long:
        return TrendContext(strength="UNKNOWN", direction=None)

    s = ema(numbers, short)
    m = ema(numbers, medium)
    lg = ema(numbers, long)
    if s is None or m is None or lg is None:
        return TrendContext(strength="UNKNOWN", direction=None)

    if s > m > lg:
        return TrendContext(strength="STRONG", direction=Outcome.BIG)
    if s < m < lg:
        return TrendContext(strength="STRONG", direction=Outcome.SMALL)
    return TrendContext(strength="RANGING", direction=None)


def build_feature_set(numbers: np.ndarray, *, min_history: int, rsi_period: int = 14) -> FeatureSet | None:
    """Derive the model's features from newest-first draw values."""

    if numbers.size < max(min_history, 2):
        return None

    r = rsi(numbers, rsi_period)
    trend = trend_context(numbers)
    hist = macd_histogram(numbers)

    if trend.strength == "STRONG":
        trend_score = 1.0 if trend.direction is Outcome.BIG else -1.0
    else:
        trend_score = 0.0

    return FeatureSet(
        rsi_strength=(r - 50.0) / 50.0 if r is not None else 0.0,
        rsi_is_overbought=1.0 if r is not None and r > 70.0 else 0.0,
        rsi_is_oversold=-1.0 if r is not None and r < 30.0 else 0.0,
        macd_hist=hist if hist is not None else 0.0,
        trend_strength_score=trend_score,
        last_move=1.0 if numbers[0] > numbers[1] else -1.0,
    )

"""consensus.signals.indicators

Pure indicator math over a numeric series.

Convention: callers pass history newest-first (index 0 is the latest draw).
Every indicator that depends on order flips to chronological order itself.

Insufficient data is not an error. Every function returns ``None`` (or an
all-NaN array) when the series is too short, and none of them mutate input.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

Series = Sequence[float] | np.ndarray


def _as_array(values: Series) -> np.ndarray:
    return np.asarray(values, dtype=np.float64)


def _chronological(values: Series) -> np.ndarray:
    return _as_array(values)[::-1]


def sma(values: Series, period: int) -> float | None:
    """Mean of the ``period`` most recent values."""

    x = _as_array(values)
    if period <= 0 or x.size < period:
        return None
    return float(np.mean(x[:period]))


def ema_series(values: Series, period: int) -> np.ndarray:
    """Running EMA in chronological order.

    Entry ``t`` is the EMA over the first ``t + 1`` chronological points. The
    seed (entry ``period - 1``) is the SMA of the earliest ``period`` points;
    earlier entries are NaN.
    """

    x = _chronological(values)
    out = np.full(x.size, np.nan, dtype=np.float64)
    if period <= 0 or x.size < period:
        return out

    k = 2.0 / (period + 1.0)
    ema = float(np.mean(x[:period]))
    out[period - 1] = ema
    for t in range(period, x.size):
        # Same as value*k + ema*(1-k); exact on a flat series.
        ema = ema + k * (float(x[t]) - ema)
        out[t] = ema
    return out


def ema(values: Series, period: int) -> float | None:
    """Exponential moving average as of the newest value."""

    s = ema_series(values, period)
    if s.size == 0 or not np.isfinite(s[-1]):
        return None
    return float(s[-1])


def stddev(values: Series, period: int) -> float | None:
    """Sample standard deviation (ddof=1) of the ``period`` most recent values."""

    x = _as_array(values)
    if period < 2 or x.size < period:
        return None
    return float(np.std(x[:period], ddof=1))


def rsi(values: Series, period: int) -> float | None:
    """Wilder RSI, bounded 0..100.

    Seeds average gain/loss from the first ``period`` chronological deltas,
    then smooths through the rest of the series. Returns exactly 100 when the
    average loss is zero.
    """

    if period <= 0:
        return None
    x = _chronological(values)
    if x.size < period + 1:
        return None

    deltas = np.diff(x)
    gains = np.maximum(deltas, 0.0)
    losses = np.maximum(-deltas, 0.0)

    avg_gain = float(np.sum(gains[:period])) / period
    avg_loss = float(np.sum(losses[:period])) / period
    for i in range(period, deltas.size):
        avg_gain = (avg_gain * (period - 1) + float(gains[i])) / period
        avg_loss = (avg_loss * (period - 1) + float(losses[i])) / period

    if avg_loss == 0.0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))


def macd_histogram(values: Series, *, fast: int = 12, slow: int = 26, signal: int = 9) -> float | None:
    """MACD line minus its signal line, as of the newest value.

    The MACD line exists wherever both EMAs are seeded; the signal line is the
    ``signal``-period EMA of that line.
    """

    fast_s = ema_series(values, fast)
    slow_s = ema_series(values, slow)
    macd = fast_s - slow_s
    valid = macd[np.isfinite(macd)]
    if valid.size == 0:
        return None

    # ema() expects newest-first.
    sig = ema(valid[::-1], signal)
    if sig is None:
        return None
    return float(valid[-1] - sig)

"""consensus.core.metrics

Engine telemetry.

Counters for decisions by health label, gauges for regime and sentiment state.
No exporter dependency; ``snapshot()`` is the stable surface.
"""

from __future__ import annotations

from collections import defaultdict
from threading import Lock


class MetricsRegistry:
    def __init__(self) -> None:
        self._lock = Lock()
        self._counters: defaultdict[str, float] = defaultdict(float)
        self._gauges: dict[str, float] = {}

    def inc(self, name: str, amount: float = 1.0) -> None:
        with self._lock:
            self._counters[name] += float(amount)

    def set(self, name: str, value: float) -> None:
        with self._lock:
            self._gauges[name] = float(value)

    def counter(self, name: str) -> float:
        with self._lock:
            return float(self._counters.get(name, 0.0))

    def gauge(self, name: str) -> float | None:
        with self._lock:
            return self._gauges.get(name)

    def snapshot(self) -> dict[str, float]:
        with self._lock:
            data: dict[str, float] = {f"counter.{k}": v for k, v in self._counters.items()}
            data.update({f"gauge.{k}": v for k, v in self._gauges.items()})
            return data

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._gauges.clear()

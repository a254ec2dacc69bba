"""consensus.brain.sentiment

Simulated market sentiment.

A tape of news shocks that fade geometrically. Each tick decays every impact,
drops the ones that have faded out, and occasionally adds a fresh shock.

Telemetry only: the engine publishes ``factor()`` as a gauge and does not feed
it into the decision.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

import numpy as np

from consensus.core.config import SentimentConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SentimentEvent:
    kind: str
    impact: float  # signed


class SentimentSimulator:
    def __init__(self, cfg: SentimentConfig, *, rng: np.random.Generator | None = None):
        self.cfg = cfg
        self.rng = rng or np.random.default_rng()
        self._events: list[SentimentEvent] = []

    @property
    def events(self) -> list[SentimentEvent]:
        return list(self._events)

    def tick(self) -> SentimentEvent | None:
        """Decay, prune, maybe inject. Returns the injected event, if any."""

        decayed = [replace(e, impact=e.impact * self.cfg.decay) for e in self._events]
        self._events = [e for e in decayed if abs(e.impact) > self.cfg.floor]

        if float(self.rng.random()) < self.cfg.event_probability:
            impact = float(self.rng.uniform(-self.cfg.max_impact, self.cfg.max_impact))
            event = SentimentEvent(kind="News", impact=impact)
            self._events.append(event)
            logger.debug("sentiment_event", extra={"impact": impact, "active": len(self._events)})
            return event
        return None

    def factor(self) -> float:
        return float(sum(e.impact for e in self._events))

    def inject(self, event: SentimentEvent) -> None:
        self._events.append(event)

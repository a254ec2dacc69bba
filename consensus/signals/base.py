"""consensus.signals.base

Advisor contract.

An advisor is a pure function over draw history. It either votes for a class
or abstains. Votes are advisory: they scale the primary model's confidence and
never override its class.

Input convention: :class:`DrawSeries` is newest-first, already cleaned.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from consensus.core.types import AdvisorySignal, Observation, Outcome


@dataclass(frozen=True, slots=True)
class DrawSeries:
    numbers: np.ndarray  # float64, newest first
    outcomes: tuple[Outcome | None, ...]  # newest first, aligned with numbers

    @classmethod
    def from_observations(cls, observations: Sequence[Observation]) -> DrawSeries:
        numbers = np.array([float(o.number) for o in observations], dtype=np.float64)
        numbers.setflags(write=False)
        return cls(numbers=numbers, outcomes=tuple(o.outcome for o in observations))

    def __len__(self) -> int:
        return int(self.numbers.size)


class Advisor:
    name: str = "advisor"

    def analyze(self, series: DrawSeries) -> AdvisorySignal | None:
        raise NotImplementedError

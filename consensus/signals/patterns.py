"""consensus.signals.patterns

Discrete pattern matcher over recent classes.

The last ``depth`` outcomes are written oldest-to-newest as a string of
``B``/``S`` and tested against a fixed suffix table. First match wins, so the
table order is the precedence: a five-long streak reads as exhaustion before
its four-long tail can read as continuation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from consensus.core.types import AdvisorySignal, Outcome
from consensus.signals.base import Advisor, DrawSeries

PATTERN_RULES: Final[tuple[tuple[str, Outcome, str], ...]] = (
    ("BBBBB", Outcome.SMALL, "Pattern:StreakBreak"),
    ("SSSSS", Outcome.BIG, "Pattern:StreakBreak"),
    ("BBBB", Outcome.BIG, "Pattern:StreakCont"),
    ("SSSS", Outcome.SMALL, "Pattern:StreakCont"),
    ("BSBS", Outcome.BIG, "Pattern:AltBreak"),
    ("SBSB", Outcome.SMALL, "Pattern:AltBreak"),
)


def encode_outcomes(outcomes: tuple[Outcome | None, ...]) -> str:
    """Newest-first outcomes -> oldest-to-newest symbol string (``?`` for unknown)."""

    return "".join(o.symbol if o is not None else "?" for o in reversed(outcomes))


@dataclass(frozen=True, slots=True)
class PatternAdvisor(Advisor):
    name: str = "patterns"
    depth: int = 10
    min_length: int = 5

    def analyze(self, series: DrawSeries) -> AdvisorySignal | None:
        recent = series.outcomes[: self.depth]
        if len(recent) < self.min_length:
            return None

        sequence = encode_outcomes(recent)
        for suffix, prediction, source in PATTERN_RULES:
            if sequence.endswith(suffix):
                return AdvisorySignal(prediction=prediction, source=source)
        return None

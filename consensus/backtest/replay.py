"""consensus.backtest.replay

Replay entry point.

A minimal, honest loop:
- a fresh engine and session per run (no state leaks between replays)
- each draw first resolves the standing prediction, then produces the next
- validation scores the resolved predictions
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from consensus.backtest.validation import ReplayMetrics, ReplayStep, compute_metrics
from consensus.brain.orchestrator import ConsensusEngine
from consensus.core.config import Config
from consensus.integration.session import DrawResult, DrawSession, PendingPrediction


@dataclass(frozen=True, slots=True)
class ReplayResult:
    steps: list[ReplayStep]
    metrics: ReplayMetrics
    pending: PendingPrediction | None
    engine: ConsensusEngine


def run_replay(draws: Iterable[DrawResult], config: Config | None = None) -> ReplayResult:
    engine = ConsensusEngine(config)
    session = DrawSession(engine)

    steps: list[ReplayStep] = []
    for draw in draws:
        standing = session.pending
        update = session.submit(draw)
        if update.duplicate:
            continue
        steps.append(
            ReplayStep(
                issue_number=draw.issue_number,
                number=draw.number,
                actual=draw.outcome,
                prediction=standing if update.resolved is not None else None,
                status=update.resolved,
            )
        )

    return ReplayResult(steps=steps, metrics=compute_metrics(steps), pending=session.pending, engine=engine)

from __future__ import annotations

import numpy as np

from consensus.backtest.replay import run_replay
from consensus.brain.orchestrator import ConsensusEngine
from consensus.core.config import Config
from consensus.core.types import Observation, Outcome, SharedStats, SystemHealth
from consensus.integration.session import DrawResult


def _draws(n: int, seed: int = 0) -> list[DrawResult]:
    rng = np.random.default_rng(seed)
    return [DrawResult(issue_number=str(20240000 + i), number=int(v)) for i, v in enumerate(rng.integers(0, 10, size=n))]


def test_alternating_hundred_observations_yield_a_decision():
    history = [
        Observation(period=str(i), number=float(n), outcome=Outcome.from_number(n))
        for i, n in enumerate([5, 0] * 50)
    ]
    res = ConsensusEngine(Config(seed=0)).predict(history, SharedStats())

    assert res.decision.health is not SystemHealth.INSUFFICIENT_HISTORY
    assert res.decision.confidence_level in (0, 1)


def test_raw_mappings_work_like_observations():
    rows = [{"issueNumber": str(i), "actualNumber": n, "resultType": "BIG" if n >= 5 else "SMALL"} for i, n in enumerate([5, 0] * 50)]
    a = ConsensusEngine(Config(seed=0)).predict(rows)
    b = ConsensusEngine(Config(seed=0)).predict(
        [Observation(period=str(i), number=float(n), outcome=Outcome.from_number(n)) for i, n in enumerate([5, 0] * 50)]
    )
    assert a.decision == b.decision


def test_replay_resolves_every_consecutive_draw(test_config):
    result = run_replay(_draws(220), test_config)
    m = result.metrics

    assert m.steps == 220
    assert m.wins + m.losses == 219
    # The first 99 standing predictions are cold-start fallbacks.
    assert m.fallbacks >= 99
    assert 0.0 <= m.accuracy <= 1.0
    assert result.pending is not None
    assert result.pending.issue_number == "20240220"


def test_replay_adapts_weights_within_bounds(test_config):
    result = run_replay(_draws(220, seed=1), test_config)
    engine = result.engine
    lc = test_config.learning

    weights = engine.model.weights
    assert weights != {k: v for k, v in lc.initial_weights.items()}
    for v in weights.values():
        assert lc.min_weight <= v <= lc.max_weight
    assert engine.metrics.counter("decisions.insufficient_history") == 99.0


def test_replay_is_deterministic_for_a_seed(test_config):
    a = run_replay(_draws(180, seed=2), test_config)
    b = run_replay(_draws(180, seed=2), test_config)

    assert a.metrics.as_dict() == b.metrics.as_dict()
    assert [s.status for s in a.steps] == [s.status for s in b.steps]
    assert a.engine.snapshot() == b.engine.snapshot()

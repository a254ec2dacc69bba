from __future__ import annotations

import pytest

from consensus import LOGIC_LABEL
from consensus.brain.orchestrator import ConsensusEngine, resolve_previous
from consensus.core.config import Config, LearningConfig, SentimentConfig
from consensus.core.types import (
    FeatureName,
    Outcome,
    RegimeMode,
    ResolutionStatus,
    SharedStats,
    SystemHealth,
)

W = ResolutionStatus.WIN
L = ResolutionStatus.LOSS


def _alternating(n: int) -> list[int]:
    return [5 if i % 2 == 0 else 0 for i in range(n)]


def test_short_history_falls_back_without_mutation(make_history):
    engine = ConsensusEngine(Config(seed=1))
    before = engine.snapshot()
    stats = SharedStats(last_actual=7, last_predicted="BIG", long_term_accuracy=0.1)

    res = engine.predict(make_history(_alternating(99)), stats)

    d = res.decision
    assert d.health is SystemHealth.INSUFFICIENT_HISTORY
    assert d.confidence is None
    assert d.confidence_level == 0
    assert d.source == LOGIC_LABEL
    assert d.prediction in (Outcome.BIG, Outcome.SMALL)
    assert res.stats is stats
    assert engine.snapshot() == before


def test_malformed_entries_do_not_count_toward_minimum(make_history):
    engine = ConsensusEngine(Config(seed=1))
    history = make_history(_alternating(99)) + [{"number": "bad"}, None, "x"]
    assert engine.predict(history).decision.health is SystemHealth.INSUFFICIENT_HISTORY


def test_alternating_history_produces_a_decision(make_history):
    engine = ConsensusEngine(Config(seed=1))
    res = engine.predict(make_history(_alternating(100)), SharedStats())

    d = res.decision
    assert d.health is SystemHealth.OK
    assert d.confidence_level in (0, 1)
    assert d.confidence is not None and 0.0 <= d.confidence <= 1.0
    assert d.source.startswith("ML+") and d.source.endswith("_Advisors")

    assert res.stats.last_decision == d
    assert res.stats.last_predicted == d.prediction.value
    assert res.stats.status is ResolutionStatus.PENDING
    assert res.stats.features is not None
    assert res.features == res.stats.features


def test_confidence_level_follows_threshold(make_history):
    engine = ConsensusEngine(Config(seed=1))
    res = engine.predict(make_history(_alternating(101)))
    d = res.decision
    expected = 1 if d.confidence > engine.config.decision.high_confidence_threshold else 0
    assert d.confidence_level == expected


def test_bad_recent_accuracy_engages_defensive_mode(make_history):
    engine = ConsensusEngine(Config(seed=1))
    statuses = [L, L, L] + [W] * 5 + [L] * 22
    history = make_history(_alternating(101), statuses=statuses)
    stats = SharedStats(last_actual=5, last_predicted="SMALL")

    res = engine.predict(history, stats)

    assert res.stats.status is L
    assert res.regime_transition is not None
    assert res.regime_transition.new is RegimeMode.DEFENSIVE
    assert res.decision.health is SystemHealth.DEFENSIVE_MODE
    assert res.decision.confidence_level == 0
    assert engine.metrics.gauge("regime.defensive") == 1.0


def test_regime_untouched_without_prior_result(make_history):
    engine = ConsensusEngine(Config(seed=1))
    history = make_history(_alternating(101), statuses=[L] * 30)

    res = engine.predict(history, SharedStats())

    assert res.regime_transition is None
    assert res.decision.health is SystemHealth.OK
    assert res.stats.status is ResolutionStatus.PENDING


def test_silent_model_is_uncertain(make_history):
    zero = {str(n): 0.0 for n in FeatureName}
    engine = ConsensusEngine(Config(seed=1, learning=LearningConfig(initial_weights=zero)))
    stats = SharedStats()

    res = engine.predict(make_history(_alternating(101)), stats)

    assert res.decision.health is SystemHealth.MODEL_UNCERTAIN
    assert res.decision.confidence is None
    assert res.decision.confidence_level == 0
    assert res.decision.source == LOGIC_LABEL
    assert res.stats is stats


def test_adaptation_tick_drifts_threshold(make_history):
    engine = ConsensusEngine(Config(seed=1))
    engine.predict(make_history(_alternating(100)), SharedStats(long_term_accuracy=0.30))
    assert engine.regime.params.bad_trend_threshold == pytest.approx(0.455)

    # Off-cadence call: no drift.
    engine.predict(make_history(_alternating(101)), SharedStats(long_term_accuracy=0.30))
    assert engine.regime.params.bad_trend_threshold == pytest.approx(0.455)


def test_zero_long_term_accuracy_still_drifts(make_history):
    engine = ConsensusEngine(Config(seed=1))
    engine.predict(make_history(_alternating(100)), SharedStats(long_term_accuracy=0.0))
    assert engine.regime.params.bad_trend_threshold == pytest.approx(0.455)


def test_seeded_fallbacks_are_reproducible(make_history):
    a = ConsensusEngine(Config(seed=42))
    b = ConsensusEngine(Config(seed=42))
    history = make_history(_alternating(10))
    picks_a = [a.predict(history).decision.prediction for _ in range(20)]
    picks_b = [b.predict(history).decision.prediction for _ in range(20)]
    assert picks_a == picks_b


def test_decisions_are_counted_by_health(make_history):
    engine = ConsensusEngine(Config(seed=1))
    engine.predict(make_history(_alternating(10)))
    engine.predict(make_history(_alternating(101)))
    assert engine.metrics.counter("decisions.insufficient_history") == 1.0
    assert engine.metrics.counter("decisions.ok") == 1.0
    assert engine.metrics.gauge("regime.bad_trend_threshold") == pytest.approx(0.45)


def test_resolve_previous():
    assert resolve_previous(SharedStats()) is None
    assert resolve_previous(SharedStats(last_actual=7)) is None
    assert resolve_previous(SharedStats(last_actual=7, last_predicted="BIG")) is W
    assert resolve_previous(SharedStats(last_actual=0, last_predicted="SMALL")) is W
    assert resolve_previous(SharedStats(last_actual=2, last_predicted="BIG")) is L
    assert resolve_previous(SharedStats(last_actual=2, last_predicted="DEFENSIVE_MODE")) is ResolutionStatus.COOLDOWN
    assert resolve_previous(SharedStats(last_actual=2, last_predicted="COOLDOWN")) is ResolutionStatus.COOLDOWN


def test_confidence_is_scaled_by_consensus(make_history):
    engine = ConsensusEngine(Config(seed=1))
    res = engine.predict(make_history(_alternating(101)))

    primary = engine.model.predict(res.features)
    assert primary is not None
    assert res.consensus is not None
    d = engine.config.decision
    expected = primary.confidence * (d.consensus_base + d.consensus_weight * res.consensus.consensus_score)
    assert res.decision.confidence == pytest.approx(expected)
    assert res.decision.prediction is primary.prediction


def test_defensive_mode_applies_confidence_penalty(make_history):
    history = make_history(_alternating(101), statuses=[L] * 30)

    normal = ConsensusEngine(Config(seed=1)).predict(history, SharedStats())
    defensive = ConsensusEngine(Config(seed=1)).predict(history, SharedStats(last_actual=5, last_predicted="SMALL"))

    assert normal.decision.health is SystemHealth.OK
    assert defensive.decision.health is SystemHealth.DEFENSIVE_MODE
    assert defensive.decision.prediction is normal.decision.prediction
    assert defensive.decision.confidence == pytest.approx(normal.decision.confidence * 0.7)


def test_adaptation_runs_only_on_cadence(make_history):
    cfg = Config(seed=1, sentiment=SentimentConfig(event_probability=1.0))

    on = ConsensusEngine(cfg)
    res = on.predict(make_history(_alternating(100)))
    assert res.weight_adjustment is not None
    assert res.weight_adjustment.reason == "insufficient_data"
    assert len(on.sentiment.events) == 1

    off = ConsensusEngine(cfg)
    res = off.predict(make_history(_alternating(101)))
    assert res.weight_adjustment is None
    assert off.sentiment.events == []


def test_fallbacks_do_not_shift_sentiment_stream(make_history):
    cfg = Config(seed=5, sentiment=SentimentConfig(event_probability=1.0))
    a = ConsensusEngine(cfg)
    b = ConsensusEngine(cfg)

    a.predict([])
    a.predict(make_history(_alternating(10)))

    a.predict(make_history(_alternating(100)))
    b.predict(make_history(_alternating(100)))
    assert a.sentiment.events == b.sentiment.events
    assert [a.sentiment.tick() for _ in range(3)] == [b.sentiment.tick() for _ in range(3)]

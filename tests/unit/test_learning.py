from __future__ import annotations

import pytest

from consensus.brain.learning import AdaptiveLinearModel, score_features
from consensus.core.config import LearningConfig
from consensus.core.types import FeatureName, FeatureSet, Observation, Outcome, ResolutionStatus


def _trade(features: FeatureSet, prediction: Outcome, status: ResolutionStatus, i: int = 0) -> Observation:
    return Observation(
        period=str(i),
        number=7.0,
        outcome=Outcome.BIG,
        status=status,
        prediction=prediction,
        features=features,
    )


def test_score_features_respects_weight_polarity():
    weights = LearningConfig().initial_weights
    w = {FeatureName(k): v for k, v in weights.items()}

    big, small = score_features(FeatureSet(rsi_strength=0.5), w)
    assert big == pytest.approx(0.75)
    assert small == pytest.approx(0.0)

    # Negative weight on an overbought flag pushes toward SMALL.
    big, small = score_features(FeatureSet(rsi_is_overbought=1.0), w)
    assert big == pytest.approx(0.0)
    assert small == pytest.approx(2.0)


def test_predict_picks_larger_score_and_normalized_margin():
    model = AdaptiveLinearModel(LearningConfig())
    p = model.predict(FeatureSet(rsi_strength=0.5, last_move=-1.0))
    # big = 0.75, small = 0.5
    assert p is not None
    assert p.prediction is Outcome.BIG
    assert p.confidence == pytest.approx(0.25 / 1.25)
    assert p.source == "LearningML"


def test_predict_abstains_on_zero_total():
    model = AdaptiveLinearModel(LearningConfig())
    assert model.predict(FeatureSet()) is None
    assert model.predict(None) is None


def test_evolve_skips_below_min_trades():
    model = AdaptiveLinearModel(LearningConfig())
    before = model.weights
    history = [_trade(FeatureSet(macd_hist=1.0), Outcome.BIG, ResolutionStatus.WIN, i) for i in range(19)]

    adj = model.evolve(history)

    assert adj.applied is False
    assert adj.reason == "insufficient_data"
    assert adj.observations == 19
    assert model.weights == before


def test_evolve_rewards_aligned_features_on_wins():
    model = AdaptiveLinearModel(LearningConfig())
    fs = FeatureSet(rsi_strength=0.5, macd_hist=1.0, last_move=-1.0)
    history = [_trade(fs, Outcome.BIG, ResolutionStatus.WIN, i) for i in range(20)]

    adj = model.evolve(history)
    w = model.weights

    assert adj.applied is True
    assert w[FeatureName.RSI_STRENGTH] == pytest.approx(1.7)
    assert w[FeatureName.MACD_HIST] == pytest.approx(2.7)
    # last_move pointed SMALL while BIG was predicted: untouched.
    assert w[FeatureName.LAST_MOVE] == pytest.approx(0.5)
    assert adj.deltas[str(FeatureName.MACD_HIST)] == pytest.approx(0.2)


def test_evolve_penalizes_aligned_features_on_losses():
    model = AdaptiveLinearModel(LearningConfig())
    fs = FeatureSet(macd_hist=1.0)
    model.evolve([_trade(fs, Outcome.BIG, ResolutionStatus.LOSS, i) for i in range(20)])
    assert model.weights[FeatureName.MACD_HIST] == pytest.approx(2.3)


def test_weights_stay_within_bounds_after_adaptation():
    cfg = LearningConfig(learning_rate=1.0, min_trades=1)
    model = AdaptiveLinearModel(cfg)
    fs = FeatureSet(trend_strength_score=1.0, rsi_strength=-1.0)
    model.evolve([_trade(fs, Outcome.BIG, ResolutionStatus.WIN, i) for i in range(3)])

    w = model.weights
    assert w[FeatureName.TREND_STRENGTH_SCORE] == pytest.approx(5.0)
    for v in w.values():
        assert cfg.min_weight <= v <= cfg.max_weight

    model.evolve([_trade(fs, Outcome.SMALL, ResolutionStatus.LOSS, i) for i in range(10)])
    for v in model.weights.values():
        assert cfg.min_weight <= v <= cfg.max_weight


def test_attributable_filters_and_caps_lookback():
    model = AdaptiveLinearModel(LearningConfig(lookback=3))
    fs = FeatureSet(macd_hist=1.0)
    history = [
        _trade(fs, Outcome.BIG, ResolutionStatus.PENDING, 0),
        Observation(period="1", number=2.0, outcome=Outcome.SMALL, status=ResolutionStatus.WIN),
        _trade(fs, Outcome.BIG, ResolutionStatus.COOLDOWN, 2),
        *[_trade(fs, Outcome.BIG, ResolutionStatus.WIN, i) for i in range(3, 8)],
    ]
    trades = model.attributable(history)
    assert [t.period for t in trades] == ["3", "4", "5"]


def test_weights_property_is_a_copy():
    model = AdaptiveLinearModel(LearningConfig())
    w = model.weights
    w[FeatureName.MACD_HIST] = 99.0
    assert model.weights[FeatureName.MACD_HIST] == pytest.approx(2.5)

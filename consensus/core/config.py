"""consensus.core.config

Two config surfaces only:
1) `config/default.yaml` (or `config/user.yaml` when present)
2) Environment variables, `CONSENSUS_` prefix, `__` for nesting

Every tunable of the engine lives here. Modules receive their section, never
the raw file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, EnvSettingsSource

from consensus.core.exceptions import ConfigError
from consensus.core.types import FeatureName


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


class HistoryConfig(BaseModel):
    min_history: int = 100
    max_history: int = 150
    adaptation_interval: int = 5

    @field_validator("adaptation_interval", "min_history")
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be >= 1")
        return v

    @model_validator(mode="after")
    def cap_covers_minimum(self) -> HistoryConfig:
        if self.max_history < self.min_history:
            raise ValueError(f"max_history ({self.max_history}) must be >= min_history ({self.min_history})")
        return self


class RegimeConfig(BaseModel):
    bad_trend_threshold: float = 0.45
    threshold_floor: float = 0.42
    threshold_ceiling: float = 0.48
    target_accuracy: float = 0.54
    accuracy_tolerance: float = 0.02
    evolution_rate: float = 0.005
    window: int = 30
    min_decided: int = 15
    recovery_streak: int = 3

    @model_validator(mode="after")
    def threshold_within_bounds(self) -> RegimeConfig:
        if not (self.threshold_floor <= self.bad_trend_threshold <= self.threshold_ceiling):
            raise ValueError(
                "bad_trend_threshold must lie within [threshold_floor, threshold_ceiling], "
                f"got {self.bad_trend_threshold} not in [{self.threshold_floor}, {self.threshold_ceiling}]"
            )
        return self


def _default_weights() -> dict[str, float]:
    return {
        FeatureName.RSI_STRENGTH.value: 1.5,
        FeatureName.RSI_IS_OVERBOUGHT.value: -2.0,
        FeatureName.RSI_IS_OVERSOLD.value: 2.0,
        FeatureName.MACD_HIST.value: 2.5,
        FeatureName.TREND_STRENGTH_SCORE.value: 3.0,
        FeatureName.LAST_MOVE.value: 0.5,
    }


class LearningConfig(BaseModel):
    learning_rate: float = 0.01
    lookback: int = 50
    min_trades: int = 20
    min_weight: float = 0.1
    max_weight: float = 5.0
    initial_weights: dict[str, float] = Field(default_factory=_default_weights)

    @field_validator("initial_weights")
    @classmethod
    def keys_must_be_features(cls, v: dict[str, float]) -> dict[str, float]:
        known = {str(n) for n in FeatureName}
        unknown = sorted(set(v) - known)
        if unknown:
            raise ValueError(f"Unknown feature weights: {unknown}")
        return v

    @model_validator(mode="after")
    def bounds_ordered(self) -> LearningConfig:
        if self.min_weight > self.max_weight:
            raise ValueError("min_weight must be <= max_weight")
        return self


class AdvisorConfig(BaseModel):
    rsi_period: int = 14
    rsi_ma_period: int = 9
    rsi_band: float = 2.0
    stochastic_period: int = 14
    stochastic_overbought: float = 85.0
    stochastic_oversold: float = 15.0
    pattern_depth: int = 10
    pattern_min_length: int = 5
    volatility_period: int = 20
    volatility_factor: float = 1.8
    price_action_depth: int = 5
    mean_reversion_period: int = 20
    mean_reversion_z: float = 1.5


class SentimentConfig(BaseModel):
    event_probability: float = 0.05
    decay: float = 0.90
    floor: float = 0.05
    max_impact: float = 0.5

    @field_validator("event_probability", "decay")
    @classmethod
    def must_be_probability(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("must lie within [0, 1]")
        return v


class DecisionConfig(BaseModel):
    high_confidence_threshold: float = 0.55
    defensive_penalty: float = 0.7
    consensus_base: float = 0.6
    consensus_weight: float = 0.4


class LoggingConfig(BaseModel):
    level: str = "INFO"
    json_output: bool = False


class Config(BaseSettings):
    """Root configuration. Single source of truth."""

    seed: int | None = None

    history: HistoryConfig = Field(default_factory=HistoryConfig)
    regime: RegimeConfig = Field(default_factory=RegimeConfig)
    learning: LearningConfig = Field(default_factory=LearningConfig)
    advisors: AdvisorConfig = Field(default_factory=AdvisorConfig)
    sentiment: SentimentConfig = Field(default_factory=SentimentConfig)
    decision: DecisionConfig = Field(default_factory=DecisionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"env_prefix": "CONSENSUS_", "env_nested_delimiter": "__"}

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        try:
            raw: Any = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Config file is not valid YAML: {path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"Config file must contain a mapping: {path}")

        # Init kwargs outrank env sources in pydantic-settings, so fold env in here.
        env: dict[str, Any] = EnvSettingsSource(cls)()
        return cls(**_deep_merge(raw, env))

    @classmethod
    def from_repo_defaults(cls, repo_root: Path | None = None) -> Config:
        root = repo_root or Path.cwd()
        return cls.from_yaml(root / "config" / "default.yaml")

    @classmethod
    def discover(cls, repo_root: Path | None = None) -> Config:
        """user.yaml, then default.yaml, then built-in defaults."""

        root = repo_root or Path.cwd()
        for name in ("user.yaml", "default.yaml"):
            p = root / "config" / name
            if p.exists():
                return cls.from_yaml(p)
        return cls()

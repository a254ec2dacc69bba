"""consensus.core

Core primitives.

If a module needs to exist, it should probably depend only on this package.
"""

from .config import Config
from .exceptions import ConfigError, ConsensusError, DrawInputError
from .metrics import MetricsRegistry
from .types import (
    Decision,
    FeatureName,
    FeatureSet,
    Observation,
    Outcome,
    ResolutionStatus,
    SharedStats,
    SystemHealth,
)

__all__ = [
    "Config",
    "ConfigError",
    "ConsensusError",
    "Decision",
    "DrawInputError",
    "FeatureName",
    "FeatureSet",
    "MetricsRegistry",
    "Observation",
    "Outcome",
    "ResolutionStatus",
    "SharedStats",
    "SystemHealth",
]

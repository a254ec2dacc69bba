"""consensus.core.exceptions

Errors belong to the outer layers.

The prediction core never raises on input data; it degrades to a labeled
fallback decision instead. These exceptions cover configuration and the draw
boundary (files, session input).
"""

from __future__ import annotations


class ConsensusError(Exception):
    """Base exception for consensus-core."""


class ConfigError(ConsensusError):
    """Configuration is missing, invalid, or inconsistent."""


class DrawInputError(ConsensusError):
    """A draw file or draw record could not be read."""

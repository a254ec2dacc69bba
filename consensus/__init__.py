"""consensus: the prediction-and-adaptation core.

One engine object owns every piece of mutable state: the adaptive weight
vector, the regime parameters and the sentiment tape. Callers own history and
the shared stats payload, and hand both back in on every call.
"""

from __future__ import annotations

__all__ = ["__version__", "LOGIC_LABEL"]

__version__ = "9.0.0"

# Stamped on every decision so downstream consumers can tell engine generations apart.
LOGIC_LABEL = "ConsensusCore-v9.0"

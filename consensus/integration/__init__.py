"""consensus.integration

Caller-side bookkeeping around the engine.
"""

from consensus.integration.session import DrawResult, DrawSession, PendingPrediction, SessionUpdate

__all__ = ["DrawResult", "DrawSession", "PendingPrediction", "SessionUpdate"]

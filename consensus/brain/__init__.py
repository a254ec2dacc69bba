"""consensus.brain

Adaptive state and the single-call prediction pipeline.
"""

from consensus.brain.orchestrator import ConsensusEngine, Prediction

__all__ = ["ConsensusEngine", "Prediction"]

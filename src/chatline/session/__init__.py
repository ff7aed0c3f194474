"""Streaming session management for chatline.

Provides the checkpoint store and the controller that runs turns.
"""

from .checkpoint import CheckpointStore
from .controller import SessionController, TurnInProgressError, TurnPhase

__all__ = [
    "CheckpointStore",
    "SessionController",
    "TurnInProgressError",
    "TurnPhase",
]

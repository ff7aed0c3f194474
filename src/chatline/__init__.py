"""
Chatline: a client-side session manager for streamed conversational backends.

Decodes the backend's event stream and folds it into an append-only
timeline of messages, each with its own side-channel activity state.
"""

__version__ = "0.1.0"

from .events import DecodeFailure, StreamEvent, decode_payload
from .session import CheckpointStore, SessionController, TurnInProgressError, TurnPhase
from .timeline import ActivityState, Author, Message, Stage, Timeline
from .transport import create_channel_factory

__all__ = [
    "ActivityState",
    "Author",
    "CheckpointStore",
    "DecodeFailure",
    "Message",
    "SessionController",
    "Stage",
    "StreamEvent",
    "Timeline",
    "TurnInProgressError",
    "TurnPhase",
    "create_channel_factory",
    "decode_payload",
]

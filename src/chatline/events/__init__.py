"""Stream event decoding for chatline.

Turns raw payloads into a closed set of typed events.
"""

from .decoder import decode_payload
from .models import (
    CheckpointEvent,
    ContentEvent,
    DecodeFailure,
    EndEvent,
    EventType,
    FailureKind,
    SearchErrorEvent,
    SearchResultsEvent,
    SearchStartEvent,
    StreamEvent,
)

__all__ = [
    "CheckpointEvent",
    "ContentEvent",
    "DecodeFailure",
    "EndEvent",
    "EventType",
    "FailureKind",
    "SearchErrorEvent",
    "SearchResultsEvent",
    "SearchStartEvent",
    "StreamEvent",
    "decode_payload",
]

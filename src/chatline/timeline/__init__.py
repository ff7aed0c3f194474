"""Conversation timeline for chatline.

Provides the message model, the activity state machine and the reducer
that folds stream events into the timeline.
"""

from .models import ActivityPhase, ActivityState, Author, Message, Stage, Timeline, TurnContext
from .reducer import begin_turn, fail_turn, reduce

__all__ = [
    "ActivityPhase",
    "ActivityState",
    "Author",
    "Message",
    "Stage",
    "Timeline",
    "TurnContext",
    "begin_turn",
    "fail_turn",
    "reduce",
]

"""Timeline reducer.

The central fold of the client: given the timeline, the context of the turn
in progress and one decoded event, produce the next timeline and context.
Content and activity are independent append-only axes; events touching
either are applied in arrival order without any reordering.
"""

import logging

from ..events import (
    CheckpointEvent,
    ContentEvent,
    DecodeFailure,
    EndEvent,
    SearchErrorEvent,
    SearchResultsEvent,
    SearchStartEvent,
    StreamEvent,
)
from . import activity
from .models import Author, Message, Timeline, TurnContext

logger = logging.getLogger(__name__)

# Characters of a rejected payload echoed into the log
_RAW_PREVIEW_LENGTH = 200


def begin_turn(timeline: Timeline, text: str) -> tuple[Timeline, TurnContext]:
    """Append the user's message and an assistant placeholder.

    Args:
        timeline: Current timeline
        text: The submitted user input, stored verbatim

    Returns:
        The extended timeline and a fresh context for the new turn
    """
    user_id = timeline.next_id()
    user_msg = Message(id=user_id, author=Author.USER, content=text)
    placeholder = Message(id=user_id + 1, author=Author.ASSISTANT, loading=True)
    context = TurnContext(user_id=user_id, assistant_id=placeholder.id)
    return timeline.append(user_msg, placeholder), context


def reduce(
    timeline: Timeline,
    context: TurnContext,
    event: StreamEvent | DecodeFailure,
) -> tuple[Timeline, TurnContext]:
    """Fold one event into the timeline.

    Decode failures and events arriving after the turn ended are logged
    and leave both timeline and context untouched.
    """
    if isinstance(event, DecodeFailure):
        logger.warning(
            "Discarding undecodable payload (%s): %s | %s",
            event.kind.value,
            event.reason,
            event.raw[:_RAW_PREVIEW_LENGTH],
        )
        return timeline, context

    if context.terminal:
        logger.warning("Ignoring %s event after the turn ended", event.type)
        return timeline, context

    message = timeline.get(context.assistant_id)
    if message is None:
        raise KeyError(f"Assistant message {context.assistant_id} is not in the timeline")

    if isinstance(event, CheckpointEvent):
        return timeline, context.model_copy(update={"checkpoint_id": event.checkpoint_id})

    if isinstance(event, ContentEvent):
        updated = message.model_copy(update={
            "content": message.content + event.content,
            "loading": False,
        })
        return timeline.replace(updated), context.model_copy(update={"content_seen": True})

    if isinstance(event, SearchStartEvent):
        state = activity.start_search(message.activity, event.query)
    elif isinstance(event, SearchResultsEvent):
        state = activity.receive_results(message.activity, event.urls)
    elif isinstance(event, SearchErrorEvent):
        logger.info("Search failed for message %d: %s", message.id, event.error)
        state = activity.report_error(message.activity, event.error)
    elif isinstance(event, EndEvent):
        updated = message.model_copy(update={
            "activity": activity.finish(message.activity),
            "loading": False,
        })
        return timeline.replace(updated), context.model_copy(update={"terminal": True})
    else:
        raise TypeError(f"Unhandled event: {event!r}")

    updated = message.model_copy(update={"activity": state, "loading": False})
    return timeline.replace(updated), context


def fail_turn(
    timeline: Timeline,
    context: TurnContext,
    notice: str,
) -> tuple[Timeline, TurnContext]:
    """Finalize a turn whose channel failed.

    When nothing was streamed yet the placeholder shows ``notice`` and an
    error activity. Partial content is never discarded: if fragments were
    already received only the loading flag is cleared.
    """
    message = timeline.get(context.assistant_id)
    if message is None:
        raise KeyError(f"Assistant message {context.assistant_id} is not in the timeline")

    if context.content_seen:
        updated = message.model_copy(update={"loading": False})
    else:
        updated = message.model_copy(update={
            "content": notice,
            "loading": False,
            "activity": activity.failed_activity(),
        })
    return timeline.replace(updated), context.model_copy(update={"terminal": True})

"""Session controller.

Runs one streaming turn end to end: records the user's input, opens the
channel, routes every payload through the decoder and the reducer, keeps
the checkpoint store current and republishes the timeline to observers.

Turn phases::

    composing -> submitted -> streaming -> finalized
                     |            |
                     +----------> failed

Only one turn may be in flight. Failures never escape ``submit``: they end
up in the timeline (as an assistant message with an error activity) and in
the log. There is no retry; the next submission opens a fresh channel.
"""

import logging
from collections.abc import Callable
from contextlib import aclosing
from enum import Enum
from urllib.parse import quote

from ..config import (
    CONNECTION_FAILURE_NOTICE,
    DEFAULT_API_URL,
    DEFAULT_GREETING,
    DEFAULT_STREAM_PATH,
    PROCESSING_FAILURE_NOTICE,
)
from ..events import DecodeFailure, decode_payload
from ..timeline import Author, Message, Timeline, TurnContext, begin_turn, fail_turn, reduce
from ..transport import ChannelError, ChannelFactory, EventChannel
from .checkpoint import CheckpointStore

logger = logging.getLogger(__name__)

# Characters JavaScript's encodeURIComponent leaves unescaped, beyond quote()'s own
_URI_COMPONENT_SAFE = "!~*'()"

Observer = Callable[[tuple[Message, ...]], None]


class TurnPhase(str, Enum):
    """Lifecycle of the current (or most recent) turn."""

    COMPOSING = "composing"
    SUBMITTED = "submitted"
    STREAMING = "streaming"
    FINALIZED = "finalized"
    FAILED = "failed"


class TurnInProgressError(RuntimeError):
    """Raised when input is submitted while a turn is still running."""


class SessionController:
    """Drives streaming turns for one conversation session.

    Usage:
        controller = SessionController(create_channel_factory("sse"), base_url=url)
        controller.subscribe(render)
        await controller.submit("What's new in Python?")
    """

    def __init__(
        self,
        channel_factory: ChannelFactory,
        *,
        base_url: str = DEFAULT_API_URL,
        stream_path: str = DEFAULT_STREAM_PATH,
        checkpoints: CheckpointStore | None = None,
        greeting: str | None = DEFAULT_GREETING,
    ):
        """Initialize the controller.

        Args:
            channel_factory: Maps a stream URL to an unopened channel
            base_url: Backend base URL
            stream_path: Path of the stream endpoint
            checkpoints: Checkpoint store shared with the caller; a new one
                is created when omitted
            greeting: Opening assistant message, or None for an empty timeline
        """
        self._channel_factory = channel_factory
        self._base_url = base_url.rstrip("/")
        self._stream_path = "/" + stream_path.strip("/")
        self._checkpoints = checkpoints if checkpoints is not None else CheckpointStore()
        self._observers: list[Observer] = []
        self._phase = TurnPhase.COMPOSING
        self._context: TurnContext | None = None
        self._channel: EventChannel | None = None

        timeline = Timeline()
        if greeting:
            timeline = timeline.append(
                Message(id=timeline.next_id(), author=Author.ASSISTANT, content=greeting)
            )
        self._timeline = timeline

    @property
    def phase(self) -> TurnPhase:
        return self._phase

    @property
    def snapshot(self) -> tuple[Message, ...]:
        """Read-only view of the timeline, in display order."""
        return self._timeline.messages

    @property
    def checkpoints(self) -> CheckpointStore:
        return self._checkpoints

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer for timeline snapshots.

        Returns:
            A callable that removes the observer again
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def build_url(self, text: str) -> str:
        """Build the stream address for ``text``.

        The stored checkpoint token, if any, is passed as ``checkpoint_id``.
        """
        url = f"{self._base_url}{self._stream_path}/{quote(text, safe=_URI_COMPONENT_SAFE)}"
        token = self._checkpoints.token
        if token:
            url += f"?checkpoint_id={quote(token, safe=_URI_COMPONENT_SAFE)}"
        return url

    async def submit(self, text: str) -> TurnPhase:
        """Run one turn for ``text``.

        Args:
            text: User input; blank input is ignored

        Returns:
            The phase the turn ended in (the current phase for blank input)

        Raises:
            TurnInProgressError: If another turn is still submitted or streaming
        """
        if not text.strip():
            logger.debug("Ignoring blank input")
            return self._phase
        if self._phase in (TurnPhase.SUBMITTED, TurnPhase.STREAMING):
            raise TurnInProgressError(f"A turn is already {self._phase.value}")

        self._timeline, self._context = begin_turn(self._timeline, text)
        self._phase = TurnPhase.SUBMITTED
        self._publish()

        url = self.build_url(text)
        channel: EventChannel | None = None
        try:
            channel = self._channel_factory(url)
            await channel.open()
        except Exception as e:
            logger.error("Could not open event stream %s: %s", url, e)
            if channel is not None:
                await self._close_quietly(channel)
            self._fail(CONNECTION_FAILURE_NOTICE)
            return self._phase

        self._channel = channel
        self._phase = TurnPhase.STREAMING
        logger.info("Streaming turn %d from %s", self._context.user_id, url)
        try:
            await self._consume(channel)
            if not self._context.terminal:
                logger.error("Event stream %s closed before the end event", url)
        except ChannelError as e:
            logger.error("Event stream failed: %s", e)
        except Exception:
            logger.exception("Unexpected failure while streaming %s", url)
        finally:
            await self._close_channel()

        if self._context.terminal:
            self._phase = TurnPhase.FINALIZED
            logger.info("Turn %d finished", self._context.user_id)
        else:
            self._fail(PROCESSING_FAILURE_NOTICE)
        return self._phase

    async def close(self) -> None:
        """End the session: drop any live channel and the checkpoint token."""
        await self._close_channel()
        self._checkpoints.reset()

    async def _consume(self, channel: EventChannel) -> None:
        async with aclosing(channel.payloads()) as payloads:
            async for raw in payloads:
                self._apply(raw)
                if self._context is not None and self._context.terminal:
                    break

    def _apply(self, raw: str) -> None:
        assert self._context is not None
        event = decode_payload(raw)
        previous = self._context.checkpoint_id
        self._timeline, self._context = reduce(self._timeline, self._context, event)
        if self._context.checkpoint_id and self._context.checkpoint_id != previous:
            self._checkpoints.update(self._context.checkpoint_id)
        if not isinstance(event, DecodeFailure):
            self._publish()

    def _fail(self, notice: str) -> None:
        assert self._context is not None
        self._timeline, self._context = fail_turn(self._timeline, self._context, notice)
        self._phase = TurnPhase.FAILED
        self._publish()

    async def _close_channel(self) -> None:
        channel, self._channel = self._channel, None
        if channel is not None:
            await self._close_quietly(channel)

    async def _close_quietly(self, channel: EventChannel) -> None:
        try:
            await channel.close()
        except Exception:
            logger.exception("Could not close event stream %s", channel.url)

    def _publish(self) -> None:
        snapshot = self.snapshot
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception:
                logger.exception("Timeline observer %r failed", observer)

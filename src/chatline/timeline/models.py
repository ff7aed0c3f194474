"""Data models for the conversation timeline.

All models are frozen. The reducer replaces messages instead of mutating
them, so any snapshot handed to observers stays valid after later events.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Author(str, Enum):
    """Who wrote a message."""

    USER = "user"
    ASSISTANT = "assistant"


class ActivityPhase(str, Enum):
    """Current state of the side-channel activity automaton."""

    IDLE = "idle"
    SEARCHING = "searching"
    READING = "reading"
    DONE = "done"
    ERROR = "error"


class Stage(str, Enum):
    """Stage labels recorded in ``ActivityState.stages``."""

    SEARCHING = "searching"
    READING = "reading"
    WRITING = "writing"
    ERROR = "error"


class ActivityState(BaseModel):
    """Side-channel progress attached to an assistant message."""

    model_config = ConfigDict(frozen=True)

    phase: ActivityPhase = Field(default=ActivityPhase.IDLE)
    stages: tuple[Stage, ...] = Field(
        default=(),
        description="Stages entered so far, in order; append-only"
    )
    query: str = Field(default="", description="Query of the current search")
    results: tuple[str, ...] = Field(
        default=(),
        description="Result references from the latest results event"
    )
    error: str | None = Field(default=None, description="Side-channel failure text")

    @property
    def urls(self) -> tuple[str, ...]:
        """Alias for ``results``, matching the wire field name."""
        return self.results


class Message(BaseModel):
    """One entry in the timeline."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=1, description="Unique, monotonically assigned id")
    author: Author
    content: str = Field(default="")
    loading: bool = Field(default=False)
    activity: ActivityState | None = Field(default=None)

    @property
    def is_user(self) -> bool:
        return self.author is Author.USER


class Timeline(BaseModel):
    """Ordered, append-only sequence of messages."""

    model_config = ConfigDict(frozen=True)

    messages: tuple[Message, ...] = Field(default=())

    def next_id(self) -> int:
        """Return the id the next appended message must use."""
        if not self.messages:
            return 1
        return max(msg.id for msg in self.messages) + 1

    def get(self, message_id: int) -> Message | None:
        for msg in self.messages:
            if msg.id == message_id:
                return msg
        return None

    def append(self, *messages: Message) -> "Timeline":
        """Return a new timeline with ``messages`` appended.

        Raises:
            ValueError: If an id does not increase over the previous one
        """
        last_id = self.next_id() - 1
        for msg in messages:
            if msg.id <= last_id:
                raise ValueError(f"Message id {msg.id} does not follow {last_id}")
            last_id = msg.id
        return Timeline(messages=self.messages + messages)

    def replace(self, message: Message) -> "Timeline":
        """Return a new timeline with the message of the same id swapped in.

        Raises:
            KeyError: If no message has that id
        """
        if self.get(message.id) is None:
            raise KeyError(message.id)
        return Timeline(
            messages=tuple(message if m.id == message.id else m for m in self.messages)
        )


class TurnContext(BaseModel):
    """Bookkeeping for the turn currently being reduced."""

    model_config = ConfigDict(frozen=True)

    user_id: int
    assistant_id: int
    content_seen: bool = Field(default=False, description="At least one fragment arrived")
    terminal: bool = Field(default=False, description="The turn reached end, or failed")
    checkpoint_id: str | None = Field(
        default=None,
        description="Latest checkpoint token seen during this turn"
    )

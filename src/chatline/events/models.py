"""Typed stream events.

Each raw payload on the wire is a JSON object whose ``type`` field selects
one of the models below. The union is closed: anything outside it is a
:class:`DecodeFailure`, never a loosely-typed dict.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EventType(str, Enum):
    """Wire tags understood by the decoder."""

    CHECKPOINT = "checkpoint"
    CONTENT = "content"
    SEARCH_START = "search_start"
    SEARCH_RESULTS = "search_results"
    SEARCH_ERROR = "search_error"
    END = "end"


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class CheckpointEvent(_Event):
    """Continuation token issued by the backend for the next turn."""

    type: Literal["checkpoint"] = "checkpoint"
    checkpoint_id: str = Field(description="Opaque checkpoint token")


class ContentEvent(_Event):
    """A fragment of assistant text."""

    type: Literal["content"] = "content"
    content: str = Field(description="Fragment appended to the assistant message")


class SearchStartEvent(_Event):
    """The backend started a search on behalf of the turn."""

    type: Literal["search_start"] = "search_start"
    query: str = Field(description="Search query text")


class SearchResultsEvent(_Event):
    """Search results for the current turn.

    ``urls`` arrives either as an array of strings or as a string holding a
    JSON-encoded array. Both are normalized to ``list[str]`` here.
    """

    type: Literal["search_results"] = "search_results"
    urls: list[str] = Field(description="Result references, in producer order")

    @field_validator("urls", mode="before")
    @classmethod
    def _parse_nested_urls(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError as e:
                raise ValueError(f"urls is not a JSON-encoded array: {e.msg}") from e
        return value


class SearchErrorEvent(_Event):
    """The backend reported a failed search."""

    type: Literal["search_error"] = "search_error"
    error: str = Field(description="Error text reported by the backend")


class EndEvent(_Event):
    """Terminal marker for the turn."""

    type: Literal["end"] = "end"


StreamEvent = Annotated[
    CheckpointEvent
    | ContentEvent
    | SearchStartEvent
    | SearchResultsEvent
    | SearchErrorEvent
    | EndEvent,
    Field(discriminator="type"),
]


class FailureKind(str, Enum):
    """Why a payload could not be decoded."""

    MALFORMED_JSON = "malformed_json"      # Not JSON, or not a JSON object
    UNKNOWN_TYPE = "unknown_type"          # Missing or unrecognized "type"
    INVALID_FIELDS = "invalid_fields"      # Known type, bad or missing fields
    NESTED_RESULTS = "nested_results"      # search_results.urls unusable


@dataclass(frozen=True)
class DecodeFailure:
    """A payload that was quarantined instead of decoded.

    A plain dataclass: it must hold any text the channel delivered, even
    text pydantic refuses to validate.
    """

    kind: FailureKind
    reason: str  # Human readable explanation
    raw: str  # The offending payload, verbatim

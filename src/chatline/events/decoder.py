"""Decoding of raw stream payloads.

Hides the wire format: callers hand in the text of one payload and get back
either a typed event or a :class:`DecodeFailure`. Nothing here raises for
bad input, touches I/O, or keeps state.
"""

import json

from pydantic import TypeAdapter, ValidationError

from .models import DecodeFailure, EventType, FailureKind, StreamEvent

_event_adapter: TypeAdapter[StreamEvent] = TypeAdapter(StreamEvent)

_KNOWN_TYPES = frozenset(t.value for t in EventType)


def decode_payload(raw: str) -> StreamEvent | DecodeFailure:
    """Decode one raw payload.

    Args:
        raw: Text of a single payload, expected to be a JSON object

    Returns:
        The typed event, or a DecodeFailure describing why the payload
        was rejected
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        return DecodeFailure(kind=FailureKind.MALFORMED_JSON, reason=str(e), raw=str(raw))

    if not isinstance(data, dict):
        return DecodeFailure(
            kind=FailureKind.MALFORMED_JSON,
            reason=f"expected a JSON object, got {type(data).__name__}",
            raw=raw,
        )

    tag = data.get("type")
    if not isinstance(tag, str) or tag not in _KNOWN_TYPES:
        return DecodeFailure(
            kind=FailureKind.UNKNOWN_TYPE,
            reason=f"unrecognized event type: {tag!r}",
            raw=raw,
        )

    try:
        return _event_adapter.validate_python(data)
    except ValidationError as e:
        return DecodeFailure(kind=_classify(data, e), reason=_summarize(e), raw=raw)


def _classify(data: dict, error: ValidationError) -> FailureKind:
    """Separate failures inside a string-encoded ``urls`` from ordinary field errors."""
    if data["type"] == EventType.SEARCH_RESULTS.value and isinstance(data.get("urls"), str):
        for detail in error.errors():
            if "urls" in detail.get("loc", ()):
                return FailureKind.NESTED_RESULTS
    return FailureKind.INVALID_FIELDS


def _summarize(error: ValidationError) -> str:
    parts = []
    for detail in error.errors():
        loc = ".".join(str(p) for p in detail.get("loc", ()))
        parts.append(f"{loc}: {detail.get('msg', 'invalid')}")
    return "; ".join(parts)

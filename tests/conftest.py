"""Pytest configuration and shared fixtures."""
import json

import pytest

from chatline.session import SessionController
from chatline.transport import ScriptedChannelFactory


def payload(type_: str, **fields) -> str:
    """Encode one wire payload."""
    return json.dumps({"type": type_, **fields})


@pytest.fixture
def scenario_a():
    """Checkpoint, two fragments, end."""
    return [
        payload("checkpoint", checkpoint_id="abc"),
        payload("content", content="Hel"),
        payload("content", content="lo"),
        payload("end"),
    ]


@pytest.fixture
def scenario_b():
    """Search with string-encoded results, then an answer."""
    return [
        payload("search_start", query="x"),
        payload("search_results", urls=json.dumps(["u1", "u2"])),
        payload("content", content="answer"),
        payload("end"),
    ]


@pytest.fixture
def channels():
    """Scripted channel factory; add one script per expected turn."""
    return ScriptedChannelFactory()


@pytest.fixture
def controller(channels):
    """Controller without a greeting, streaming from scripted channels."""
    return SessionController(channels, base_url="http://backend.test", greeting=None)

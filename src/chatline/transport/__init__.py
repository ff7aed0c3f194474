"""Event channel transports for chatline."""

from .base import ChannelError, ChannelFactory, ChannelSetupError, EventChannel, TransportError
from .factory import create_channel_factory
from .scripted import ScriptedChannel, ScriptedChannelFactory
from .sse import SSEChannel

__all__ = [
    "ChannelError",
    "ChannelFactory",
    "ChannelSetupError",
    "EventChannel",
    "SSEChannel",
    "ScriptedChannel",
    "ScriptedChannelFactory",
    "TransportError",
    "create_channel_factory",
]

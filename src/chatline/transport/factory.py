"""Factory for creating channel factories."""

from functools import partial
from typing import Any

from .base import ChannelFactory


def create_channel_factory(kind: str = "sse", **config: Any) -> ChannelFactory:
    """Create a channel factory.

    The returned callable takes a stream URL and returns an unopened
    channel. The session controller only ever sees that callable, so
    which transport sits behind it stays hidden.

    Args:
        kind: Transport type ("sse" or "scripted")
        **config: Transport-specific configuration
            For sse:
                - client: httpx.AsyncClient | None
                - timeout: float | httpx.Timeout | None
            For scripted:
                - scripts: sequence of payload lists, one per turn

    Returns:
        Callable mapping a URL to an EventChannel

    Raises:
        ValueError: If the transport type is not supported

    Example:
        >>> factory = create_channel_factory("sse", timeout=10.0)
        >>> channel = factory("http://localhost:8000/chat_stream/hello")
    """
    if kind == "sse":
        from .sse import SSEChannel
        return partial(SSEChannel, **config)

    if kind == "scripted":
        from .scripted import ScriptedChannelFactory
        return ScriptedChannelFactory(*config.get("scripts", ()))

    raise ValueError(
        f"Unsupported channel type: {kind}. "
        f"Supported types: sse, scripted"
    )

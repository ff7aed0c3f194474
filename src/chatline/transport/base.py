"""Abstract base class for event channels.

A channel is the one-way connection a turn's events arrive on. The
abstraction hides:
- Wire framing (server-sent events, in-memory script, ...)
- Connection setup and teardown
- How transport failures are detected
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator, AsyncIterator, Callable
from typing import Any


class TransportError(Exception):
    """Base class for channel failures."""


class ChannelSetupError(TransportError):
    """The channel could not be opened at all."""


class ChannelError(TransportError):
    """The channel failed after it was opened."""


class EventChannel(ABC):
    """One-directional stream of raw payloads for a single turn.

    Usage:
        async with channel:
            async for payload in channel:
                ...
    """

    @abstractmethod
    async def open(self) -> None:
        """Open the channel.

        Raises:
            ChannelSetupError: If the connection cannot be established
        """

    @abstractmethod
    def payloads(self) -> AsyncGenerator[str, None]:
        """Iterate over raw payloads as they arrive.

        Iteration ends when the remote side closes the stream.

        Raises:
            ChannelError: If the stream fails mid-way
        """

    @abstractmethod
    async def close(self) -> None:
        """Close the channel. Safe to call more than once."""

    @property
    @abstractmethod
    def url(self) -> str:
        """Address the channel connects to."""

    def __aiter__(self) -> AsyncIterator[str]:
        return self.payloads()

    async def __aenter__(self) -> "EventChannel":
        await self.open()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


ChannelFactory = Callable[[str], EventChannel]

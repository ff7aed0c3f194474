"""In-memory scripted channel.

Plays back a fixed list of payloads. Used by the ``replay`` command and
as a stand-in for the network in tests. Data is never fetched from
anywhere.
"""

from collections.abc import AsyncGenerator, Iterable

from .base import ChannelError, ChannelSetupError, EventChannel


class ScriptedChannel(EventChannel):
    """Channel yielding a predetermined sequence of payloads."""

    def __init__(
        self,
        payloads: Iterable[str] = (),
        *,
        url: str = "",
        error: ChannelError | None = None,
        setup_error: ChannelSetupError | None = None,
    ):
        """Initialize the channel.

        Args:
            payloads: Raw payloads delivered in order
            url: Address the channel claims to be connected to
            error: Raised once all payloads have been delivered
            setup_error: Raised by ``open()`` instead of opening
        """
        self._url = url
        self._payloads = list(payloads)
        self._error = error
        self._setup_error = setup_error
        self.opened = False
        self.closed = False
        self.delivered = 0

    @property
    def url(self) -> str:
        return self._url

    def bind(self, url: str) -> None:
        """Point the channel at the address a session requested."""
        self._url = url

    async def open(self) -> None:
        if self._setup_error is not None:
            raise self._setup_error
        self.opened = True

    async def payloads(self) -> AsyncGenerator[str, None]:
        if not self.opened:
            raise ChannelError("Channel is not open")
        for payload in self._payloads:
            if self.closed:
                return
            self.delivered += 1
            yield payload
        if self._error is not None and not self.closed:
            raise self._error

    async def close(self) -> None:
        self.closed = True


class ScriptedChannelFactory:
    """Channel factory handing out scripted channels, one script per turn.

    Every URL requested is recorded in ``urls`` so callers can inspect the
    addresses a session built.
    """

    def __init__(self, *scripts: ScriptedChannel | Iterable[str]):
        self._scripts = list(scripts)
        self.urls: list[str] = []
        self.channels: list[ScriptedChannel] = []

    def add(self, script: ScriptedChannel | Iterable[str]) -> None:
        self._scripts.append(script)

    def __call__(self, url: str) -> ScriptedChannel:
        self.urls.append(url)
        if not self._scripts:
            raise ChannelSetupError(f"No scripted stream left for {url}")
        script = self._scripts.pop(0)
        if isinstance(script, ScriptedChannel):
            script.bind(url)
            channel = script
        else:
            channel = ScriptedChannel(script, url=url)
        self.channels.append(channel)
        return channel

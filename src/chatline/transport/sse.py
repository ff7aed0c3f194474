"""Server-sent events channel over httpx.

Hidden design decisions:
- HTTP client lifecycle (owned or borrowed)
- Event-stream framing: ``data:`` lines are joined with newlines and
  dispatched on a blank line; comments and other fields are ignored
- Mapping of httpx failures onto ChannelSetupError / ChannelError
"""

import logging
import re
from collections.abc import AsyncGenerator

import httpx

from .base import ChannelError, ChannelSetupError, EventChannel

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(30.0, read=None)

# Event streams break lines on CRLF, CR or LF only
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class SSEChannel(EventChannel):
    """Event channel reading a ``text/event-stream`` response."""

    def __init__(
        self,
        url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float | httpx.Timeout | None = None,
    ):
        """Initialize the channel.

        Args:
            url: Stream address, including any query parameters
            client: Optional shared client; the channel creates and owns
                one when omitted
            timeout: Timeout for an owned client. A number bounds connecting,
                writing and pool waits only; reads never time out
        """
        self._url = url
        self._owns_client = client is None
        if isinstance(timeout, (int, float)):
            timeout = httpx.Timeout(timeout, read=None)
        self._client = client or httpx.AsyncClient(timeout=timeout or DEFAULT_TIMEOUT)
        self._response: httpx.Response | None = None
        self._closed = False

    @property
    def url(self) -> str:
        return self._url

    async def open(self) -> None:
        request = self._client.build_request(
            "GET",
            self._url,
            headers={"Accept": "text/event-stream", "Cache-Control": "no-cache"},
        )
        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as e:
            await self._release_client()
            raise ChannelSetupError(f"Could not connect to {self._url}: {e}") from e

        if response.status_code != 200:
            await response.aclose()
            await self._release_client()
            raise ChannelSetupError(
                f"Stream request to {self._url} failed with status {response.status_code}"
            )
        self._response = response
        logger.debug("Opened event stream %s", self._url)

    async def payloads(self) -> AsyncGenerator[str, None]:
        if self._response is None:
            raise ChannelError("Channel is not open")

        data_lines: list[str] = []
        try:
            async for line in self._lines():
                if not line:
                    if data_lines:
                        yield "\n".join(data_lines)
                        data_lines = []
                    continue
                if line.startswith(":"):
                    continue
                field, _, value = line.partition(":")
                if field != "data":
                    continue
                data_lines.append(value[1:] if value.startswith(" ") else value)
        except httpx.HTTPError as e:
            raise ChannelError(f"Event stream {self._url} failed: {e}") from e

        # A final event without its trailing blank line is dropped, per SSE rules
        if data_lines:
            logger.debug("Dropping unterminated event at end of %s", self._url)

    async def _lines(self) -> AsyncGenerator[str, None]:
        assert self._response is not None
        buffer = ""
        async for chunk in self._response.aiter_text():
            buffer += chunk
            # A trailing CR may be the first half of a CRLF split across chunks
            held = buffer.endswith("\r")
            lines = _LINE_BREAK.split(buffer[:-1] if held else buffer)
            buffer = lines.pop() + ("\r" if held else "")
            for line in lines:
                yield line
        if buffer:
            yield buffer.rstrip("\r")

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._response is not None:
            await self._response.aclose()
            self._response = None
        await self._release_client()
        logger.debug("Closed event stream %s", self._url)

    async def _release_client(self) -> None:
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()

"""Configuration for chatline.

Centralizes user-visible texts and the settings read from the environment.
"""

import os

from pydantic import BaseModel, Field

# Opening message of every session
DEFAULT_GREETING = "Hi there, how can I help you?"

# Shown when a stream fails before any content arrived
PROCESSING_FAILURE_NOTICE = "Sorry, there was an error processing your request. Please try again."

# Shown when the stream could not be opened at all
CONNECTION_FAILURE_NOTICE = (
    "Sorry, there was an error connecting to the server. "
    "Please check your connection and try again."
)

DEFAULT_API_URL = "http://localhost:8000"
DEFAULT_STREAM_PATH = "/chat_stream"
DEFAULT_TIMEOUT = 30.0  # Seconds, for connecting; reads never time out


class ChatSettings(BaseModel):
    """Client settings."""

    api_url: str = Field(default=DEFAULT_API_URL, description="Backend base URL")
    stream_path: str = Field(default=DEFAULT_STREAM_PATH, description="Path of the stream endpoint")
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="Connect timeout in seconds")
    log_level: str = Field(default="warning", description="Log level name")

    @classmethod
    def from_env(cls) -> "ChatSettings":
        """Build settings from environment variables.

        Environment variables:
            CHATLINE_API_URL: Backend base URL (default: http://localhost:8000)
            CHATLINE_STREAM_PATH: Stream endpoint path (default: /chat_stream)
            CHATLINE_TIMEOUT: Connect timeout in seconds (default: 30)
            CHATLINE_LOG_LEVEL: debug, info, warning or error (default: warning)
        """
        return cls(
            api_url=os.getenv("CHATLINE_API_URL", DEFAULT_API_URL),
            stream_path=os.getenv("CHATLINE_STREAM_PATH", DEFAULT_STREAM_PATH),
            timeout=float(os.getenv("CHATLINE_TIMEOUT", str(DEFAULT_TIMEOUT))),
            log_level=os.getenv("CHATLINE_LOG_LEVEL", "warning"),
        )

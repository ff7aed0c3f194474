"""Construction helpers for the CLI.

Centralizes creation of settings, channel factories and controllers from
environment variables and command options.
"""

from collections.abc import Iterable

from ..config import ChatSettings
from ..session import SessionController
from ..transport import ScriptedChannelFactory, create_channel_factory


def get_settings(url: str | None = None, log_level: str | None = None) -> ChatSettings:
    """Load settings from the environment, letting command options win.

    Args:
        url: Backend base URL given on the command line
        log_level: Log level given on the command line

    Returns:
        Effective settings
    """
    settings = ChatSettings.from_env()
    overrides = {}
    if url:
        overrides["api_url"] = url
    if log_level:
        overrides["log_level"] = log_level
    return settings.model_copy(update=overrides) if overrides else settings


def get_controller(settings: ChatSettings) -> SessionController:
    """Create a controller streaming over server-sent events."""
    return SessionController(
        create_channel_factory("sse", timeout=settings.timeout),
        base_url=settings.api_url,
        stream_path=settings.stream_path,
    )


def get_replay_controller(
    payloads: Iterable[str],
    settings: ChatSettings,
) -> tuple[SessionController, ScriptedChannelFactory]:
    """Create a controller that plays ``payloads`` back as a single turn."""
    factory = ScriptedChannelFactory(list(payloads))
    controller = SessionController(
        factory,
        base_url=settings.api_url,
        stream_path=settings.stream_path,
        greeting=None,
    )
    return controller, factory

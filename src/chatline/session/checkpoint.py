"""Session-scoped checkpoint store."""

import logging

logger = logging.getLogger(__name__)


class CheckpointStore:
    """Holds the latest continuation token issued by the backend.

    There is at most one live token. Each checkpoint event overwrites it;
    it survives failed turns and is only dropped when the session ends.
    """

    def __init__(self, token: str | None = None):
        self._token = token or None

    @property
    def token(self) -> str | None:
        return self._token

    def update(self, token: str) -> None:
        """Replace the stored token. Empty tokens are ignored."""
        if not token:
            logger.warning("Ignoring empty checkpoint token")
            return
        if token != self._token:
            logger.debug("Checkpoint updated: %s", token)
        self._token = token

    def reset(self) -> None:
        """Forget the token. Called when the session itself ends."""
        self._token = None

    def __repr__(self) -> str:
        return f"CheckpointStore(token={self._token!r})"

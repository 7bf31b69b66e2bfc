"""Lock-guarded holder for the shared authentication state.

A single :class:`AuthenticationState` is owned by a client and read by
every organization derived from it. Reads return a snapshot; writes swap
the whole value so readers never observe a half-updated token.
"""

from threading import Lock

import structlog

from .types import Authentication

logger = structlog.get_logger(__name__)


class AuthenticationState:
    """Current access token of a client, starting out empty."""

    def __init__(self, initial: Authentication | None = None):
        self._lock = Lock()
        self._value = initial if initial is not None else Authentication()

    def get(self) -> Authentication:
        """Return the current authentication snapshot."""
        with self._lock:
            return self._value

    def replace(self, authentication: Authentication) -> None:
        """Overwrite the stored authentication."""
        with self._lock:
            self._value = authentication
        logger.debug(
            "Authentication state replaced",
            expires_at=authentication.expires_at,
            organizations=len(authentication.organizations),
        )

    def is_stale(self, now: float | None = None) -> bool:
        """Return True when no usable token is stored."""
        return self.get().is_stale(now)

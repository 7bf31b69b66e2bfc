"""Authentication response types for the Codeship API.

Pydantic models representing the payload returned by the ``/auth``
endpoint. Only the fields the client relies on are modelled; unknown keys
are ignored.
"""

import time

from pydantic import BaseModel


class OrganizationInfo(BaseModel):
    """Organization entry listed in an authentication response."""

    uuid: str = ""
    name: str = ""
    scopes: list[str] = []


class Authentication(BaseModel):
    """Access token issued by the ``/auth`` endpoint.

    An empty ``access_token`` means no authentication has happened yet.
    ``expires_at`` is a Unix timestamp in seconds.
    """

    access_token: str = ""
    expires_at: int = 0
    organizations: list[OrganizationInfo] = []

    def is_stale(self, now: float | None = None) -> bool:
        """Return True when the token is missing or already expired."""
        if now is None:
            now = time.time()
        return not self.access_token or self.expires_at <= now

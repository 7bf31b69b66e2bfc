"""Codeship API client handle.

Holds the process-wide configuration shared by every organization: base
URL, default headers, verbose flag and log sink, the HTTP transport, and
the current authentication state. Also owns the credential flow that
obtains and refreshes the access token.

A client is not safe for concurrent use by several organizations without
external synchronization; only the authentication state itself is guarded.
"""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import httpx
import pydantic
import structlog

from .errors import AuthenticationError, OrganizationNotFoundError, error_for_status
from .organization import Organization
from .state import AuthenticationState
from .types import Authentication

if TYPE_CHECKING:
    from .config import ClientConfig

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://api.codeship.com/v2"

DEFAULT_TIMEOUT = 30.0

AUTH_PATH = "/auth"


class Client:
    """Shared configuration and credentials for the Codeship API.

    Can be used as a context manager; the HTTP transport is closed on exit
    when the client created it.
    """

    def __init__(
        self,
        username: str,
        password: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        headers: Mapping[str, str] | None = None,
        verbose: bool = False,
        logger: Any = None,
        http_client: httpx.Client | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize the client.

        Args:
            username: Codeship account username (email).
            password: Codeship account password.
            base_url: Base URL of the API, without trailing slash.
            headers: Default headers sent with every request.
            verbose: Dump every request and response to ``logger``.
            logger: Sink for verbose dumps; any object with an ``info``
                method taking a string. Defaults to a structlog logger.
            http_client: Transport to use. When omitted, the client creates
                and owns an ``httpx.Client``.
            timeout: Timeout in seconds for a client-created transport.

        Raises:
            ValueError: If base_url is empty or timeout is not positive.
        """
        if not base_url:
            msg = "base_url cannot be empty"
            raise ValueError(msg)
        if timeout <= 0:
            msg = "timeout must be positive"
            raise ValueError(msg)

        self.base_url = base_url.rstrip("/")
        self.verbose = verbose
        self.logger = logger or structlog.get_logger("codeship_api.verbose")
        self._username = username
        self._password = password
        self._headers = httpx.Headers(headers or {})
        self._timeout = timeout
        self._http_client = http_client
        self._owns_http_client = http_client is None
        self._state = AuthenticationState()

    @classmethod
    def from_config(cls, config: "ClientConfig", **kwargs: Any) -> "Client":
        """Build a client from validated configuration.

        Extra keyword arguments (``logger``, ``http_client``) are passed
        through to the constructor.
        """
        return cls(
            config.username,
            config.password,
            base_url=config.base_url,
            headers=config.headers,
            verbose=config.verbose,
            timeout=config.timeout,
            **kwargs,
        )

    @property
    def http_client(self) -> httpx.Client:
        """Return the transport, creating it lazily when the client owns it."""
        if self._http_client is None or (
            self._owns_http_client and self._http_client.is_closed
        ):
            self._http_client = httpx.Client(timeout=self._timeout)
        return self._http_client

    @property
    def headers(self) -> httpx.Headers:
        """Default headers applied to every request."""
        return self._headers

    def set_headers(self, headers: Mapping[str, str]) -> None:
        """Replace the default headers."""
        self._headers = httpx.Headers(headers)

    @property
    def authentication(self) -> Authentication:
        """Snapshot of the current authentication state."""
        return self._state.get()

    def __enter__(self):
        """Enter context manager."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context manager and cleanup resources."""
        self.close()

    def close(self):
        """Close the HTTP transport if this client created it."""
        if (
            self._owns_http_client
            and self._http_client is not None
            and not self._http_client.is_closed
        ):
            self._http_client.close()

    def authentication_required(self) -> bool:
        """Return True when the access token is missing or expired."""
        return self._state.is_stale()

    def authenticate(self) -> None:
        """Obtain a fresh access token and store it.

        Posts the username and password with HTTP Basic auth to the
        ``/auth`` endpoint. The stored state is only replaced once a valid
        token has been parsed.

        Raises:
            AuthenticationError: If credentials are missing, the request
                fails, the status is not a success, or the response cannot
                be parsed. The underlying error is chained as the cause.
        """
        if not self._username or not self._password:
            msg = "username and password are required to authenticate"
            raise AuthenticationError(msg)

        headers = httpx.Headers(self._headers)
        headers["Accept"] = "application/json"
        url = self.base_url + AUTH_PATH

        logger.debug("Authenticating", url=url)
        try:
            response = self.http_client.post(
                url,
                headers=headers,
                auth=httpx.BasicAuth(self._username, self._password),
            )
        except httpx.HTTPError as err:
            msg = "authentication request failed"
            raise AuthenticationError(msg) from err

        status_error = error_for_status(response.status_code, response.content)
        if status_error is not None:
            raise AuthenticationError(str(status_error)) from status_error

        try:
            authentication = Authentication.model_validate_json(response.content)
        except pydantic.ValidationError as err:
            msg = "could not parse authentication response"
            raise AuthenticationError(msg) from err
        if not authentication.access_token:
            msg = "authentication response contained no access token"
            raise AuthenticationError(msg)

        self._state.replace(authentication)
        logger.info(
            "Authenticated",
            expires_at=authentication.expires_at,
            organizations=[org.name for org in authentication.organizations],
        )

    def organization(self, name: str) -> Organization:
        """Return the organization with the given name.

        Authenticates first when required. Names are compared
        case-insensitively.

        Raises:
            AuthenticationError: If authentication is needed and fails.
            OrganizationNotFoundError: If no organization has that name.
        """
        if self.authentication_required():
            self.authenticate()

        for info in self.authentication.organizations:
            if info.name.casefold() == name.casefold():
                return Organization(
                    uuid=info.uuid,
                    name=info.name,
                    scopes=info.scopes,
                    client=self,
                )

        msg = f"no organization found with name {name!r}"
        raise OrganizationNotFoundError(msg)

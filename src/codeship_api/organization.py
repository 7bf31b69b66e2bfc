"""Organization-scoped handle and the request pipeline.

Every API call goes through :meth:`Organization.request`: it encodes the
payload, refreshes credentials when needed, assembles headers, sends the
request through the client's transport, and maps the response status to
either the raw body or a typed error.
"""

import json
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import httpx
import pydantic
import structlog

from .dump import dump_request, dump_response
from .errors import (
    AuthenticationError,
    BodyReadError,
    ClientNotBoundError,
    EncodingError,
    TransportError,
    error_for_status,
)

if TYPE_CHECKING:
    from .client import Client

logger = structlog.get_logger(__name__)

JSON_CONTENT_TYPE = "application/json"


def encode_payload(payload: Any) -> bytes:
    """Serialize a request payload to JSON bytes.

    Pydantic models are dumped with their own serializer; anything else
    goes through :func:`json.dumps`. NaN and infinite floats are rejected
    since they have no JSON representation.

    Raises:
        EncodingError: If the payload cannot be serialized.
    """
    try:
        if isinstance(payload, pydantic.BaseModel):
            return payload.model_dump_json().encode("utf-8")
        return json.dumps(payload, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as err:
        msg = f"could not encode request payload: {err}"
        raise EncodingError(msg) from err


class Organization:
    """API handle scoped to a single Codeship organization.

    Identity fields are fixed at construction. The handle keeps a
    non-owning reference to the :class:`~codeship_api.client.Client` whose
    configuration and credentials it uses; without one every request fails
    with :class:`~codeship_api.errors.ClientNotBoundError`.

    Not safe for concurrent use: organizations sharing a client also share
    its authentication state.
    """

    def __init__(
        self,
        uuid: str,
        name: str,
        scopes: Sequence[str] = (),
        client: "Client | None" = None,
    ):
        self._uuid = uuid
        self._name = name
        self._scopes = tuple(scopes)
        self._client = client

    @property
    def uuid(self) -> str:
        return self._uuid

    @property
    def name(self) -> str:
        return self._name

    @property
    def scopes(self) -> tuple[str, ...]:
        """Permission scopes granted to the authenticated user."""
        return self._scopes

    @property
    def client(self) -> "Client | None":
        return self._client

    def __repr__(self) -> str:
        return f"Organization(uuid={self._uuid!r}, name={self._name!r})"

    def request(self, method: str, path: str, payload: Any = None) -> bytes:
        """Execute an API request and return the raw response body.

        Args:
            method: HTTP verb, e.g. ``"GET"``.
            path: Path relative to the client's base URL, e.g.
                ``"/organizations/<uuid>/projects"``.
            payload: Optional JSON-serializable body. When None the request
                is sent with an empty body.

        Returns:
            Response body bytes for status 200, 201 or 202.

        Raises:
            ClientNotBoundError: No client is bound to this organization.
            EncodingError: The payload could not be serialized.
            AuthenticationError: Refreshing the access token failed.
            TransportError: The request could not be sent.
            BodyReadError: The response body could not be read.
            HTTPStatusError: The response status is not a success; one of
                InvalidCredentialsError, InsufficientPermissionsError,
                ServerError or UnexpectedStatusError.
        """
        client = self._client
        if client is None:
            msg = "client not instantiated"
            raise ClientNotBoundError(msg)

        body = encode_payload(payload) if payload is not None else b""

        if client.authentication_required():
            try:
                client.authenticate()
            except AuthenticationError as err:
                msg = f"authentication failed: {err}"
                raise AuthenticationError(msg) from err

        headers = httpx.Headers(client.headers)
        headers["Authorization"] = f"Bearer {client.authentication.access_token}"
        if "Content-Type" not in headers:
            headers["Content-Type"] = JSON_CONTENT_TYPE

        request = client.http_client.build_request(
            method,
            client.base_url + path,
            headers=headers,
            content=body,
        )

        if client.verbose:
            client.logger.info(dump_request(request, include_body=payload is not None))

        start_time = time.time()
        logger.debug("Making API request", method=method, path=path)
        try:
            response = client.http_client.send(request, stream=True)
        except httpx.HTTPError as err:
            logger.exception("API request failed", method=method, path=path)
            msg = f"HTTP request failed: {err}"
            raise TransportError(msg) from err

        try:
            content = response.read()
        except (httpx.HTTPError, httpx.StreamError) as err:
            msg = f"could not read response body: {err}"
            raise BodyReadError(msg) from err
        finally:
            response.close()

        if client.verbose:
            client.logger.info(dump_response(response))

        logger.debug(
            "API request completed",
            status_code=response.status_code,
            duration_seconds=round(time.time() - start_time, 3),
        )

        status_error = error_for_status(response.status_code, content)
        if status_error is not None:
            raise status_error
        return content

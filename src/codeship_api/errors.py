"""Error taxonomy for the Codeship API client.

Every failure raised by the request pipeline derives from
:class:`CodeshipError` and carries an :class:`ErrorKind` so callers can
branch on the kind without string matching. Underlying causes are chained
with ``raise ... from err`` and remain available as ``__cause__``.
"""

import enum


class ErrorKind(enum.Enum):
    """Discriminant for :class:`CodeshipError` subclasses."""

    CLIENT_NOT_BOUND = "client_not_bound"
    ENCODING = "encoding"
    AUTHENTICATION = "authentication"
    TRANSPORT = "transport"
    BODY_READ = "body_read"
    INVALID_CREDENTIALS = "invalid_credentials"
    INSUFFICIENT_PERMISSIONS = "insufficient_permissions"
    SERVER = "server"
    UNEXPECTED_STATUS = "unexpected_status"
    ORGANIZATION_NOT_FOUND = "organization_not_found"


class CodeshipError(Exception):
    """Base class for all Codeship API client errors."""

    kind: ErrorKind


class ClientNotBoundError(CodeshipError):
    """Raised when an organization has no client to issue requests with."""

    kind = ErrorKind.CLIENT_NOT_BOUND


class EncodingError(CodeshipError):
    """Raised when a request payload cannot be serialized to JSON."""

    kind = ErrorKind.ENCODING


class AuthenticationError(CodeshipError):
    """Raised when obtaining an access token fails."""

    kind = ErrorKind.AUTHENTICATION


class TransportError(CodeshipError):
    """Raised when the HTTP request could not be sent."""

    kind = ErrorKind.TRANSPORT


class BodyReadError(CodeshipError):
    """Raised when the response body could not be read."""

    kind = ErrorKind.BODY_READ


class OrganizationNotFoundError(CodeshipError):
    """Raised when the authenticated user has no organization by that name."""

    kind = ErrorKind.ORGANIZATION_NOT_FOUND


class HTTPStatusError(CodeshipError):
    """Base class for errors derived from a non-success response status."""

    reason = "unexpected status"

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"HTTP status {status_code}: {self.reason}")


class InvalidCredentialsError(HTTPStatusError):
    """HTTP 401."""

    kind = ErrorKind.INVALID_CREDENTIALS
    reason = "invalid credentials"


class InsufficientPermissionsError(HTTPStatusError):
    """HTTP 403."""

    kind = ErrorKind.INSUFFICIENT_PERMISSIONS
    reason = "insufficient permissions"


class ServerError(HTTPStatusError):
    """HTTP 5xx. The response body is intentionally left out of the message."""

    kind = ErrorKind.SERVER
    reason = "server error"


class UnexpectedStatusError(HTTPStatusError):
    """Any other status outside the success set; the message includes the body."""

    kind = ErrorKind.UNEXPECTED_STATUS

    def __init__(self, status_code: int, body: str):
        self.body = body
        self.reason = f"content {body!r}"
        super().__init__(status_code)


SUCCESS_STATUS_CODES = frozenset({200, 201, 202})


def error_for_status(status_code: int, body: bytes) -> HTTPStatusError | None:
    """Map a response status to the matching error, or None on success.

    Only 200, 201 and 202 count as success. 401 and 403 have dedicated
    errors, anything from 500 up is a :class:`ServerError`, and every other
    code becomes an :class:`UnexpectedStatusError` carrying the body text.
    """
    if status_code in SUCCESS_STATUS_CODES:
        return None
    if status_code == 401:  # noqa: PLR2004
        return InvalidCredentialsError(status_code)
    if status_code == 403:  # noqa: PLR2004
        return InsufficientPermissionsError(status_code)
    if status_code >= 500:  # noqa: PLR2004
        return ServerError(status_code)
    return UnexpectedStatusError(status_code, body.decode("utf-8", errors="replace"))

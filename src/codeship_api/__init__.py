"""Codeship API client.

Authenticates against the Codeship v2 REST API and executes requests on
behalf of an organization, mapping response statuses to typed errors.

Exports:
    Client: Shared configuration, transport and credentials.
    Organization: Organization-scoped handle issuing API requests.
    ClientConfig: Validated client configuration.
    errors: Module containing the error taxonomy.
    types: Module containing Pydantic models for authentication data.
"""

from . import errors, types
from .client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, Client
from .config import (
    ClientConfig,
    config_from_env,
    configure_logging,
    create_client,
    load_config,
)
from .errors import CodeshipError, ErrorKind
from .organization import Organization

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_TIMEOUT",
    "Client",
    "ClientConfig",
    "CodeshipError",
    "ErrorKind",
    "Organization",
    "config_from_env",
    "configure_logging",
    "create_client",
    "errors",
    "load_config",
    "types",
]

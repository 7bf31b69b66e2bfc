"""Configuration and logging setup for the Codeship API client."""

import json
import logging
import os
import pathlib
import sys
from typing import TextIO

import pydantic
import structlog

from .client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, Client

CONFIG_ENV_VAR = "CODESHIP_CONFIG_PATH"
USERNAME_ENV_VAR = "CODESHIP_USERNAME"
PASSWORD_ENV_VAR = "CODESHIP_PASSWORD"
BASE_URL_ENV_VAR = "CODESHIP_BASE_URL"


class ClientConfig(pydantic.BaseModel):
    """Configuration for a Codeship API client."""

    username: str = pydantic.Field(description="Codeship account username")
    password: str = pydantic.Field(description="Codeship account password")
    base_url: str = pydantic.Field(
        DEFAULT_BASE_URL,
        description="Base URL for the Codeship API",
        min_length=1,
    )
    timeout: float = pydantic.Field(
        DEFAULT_TIMEOUT,
        description="Request timeout in seconds",
        gt=0,
    )
    verbose: bool = pydantic.Field(
        False,
        description="Dump every request and response",
    )
    headers: dict[str, str] = pydantic.Field(
        default_factory=dict,
        description="Default headers sent with every request",
    )
    log_level: str = pydantic.Field("INFO", description="Logging level")


def configure_logging(log_level_name: str, stream: TextIO | None = None) -> None:
    """Configure structlog for logfmt output on stderr.

    Request events put ``method``, ``path`` and ``status_code`` right after
    the message. Unknown level names fall back to INFO.

    Args:
        log_level_name: Level name such as ``"debug"`` or ``"INFO"``.
        stream: Destination for log lines; defaults to ``sys.stderr``.
    """
    log_level = getattr(logging, log_level_name.upper(), logging.INFO)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.EventRenamer("msg"),
            structlog.processors.format_exc_info,
            structlog.processors.LogfmtRenderer(
                key_order=(
                    "timestamp",
                    "level",
                    "msg",
                    "method",
                    "path",
                    "status_code",
                ),
                drop_missing=True,
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=False,
    )

def load_config(config_path: str | None = None) -> ClientConfig:
    """Load configuration from a JSON file.

    Falls back to the path in ``CODESHIP_CONFIG_PATH`` when no path is given.

    Raises:
        FileNotFoundError: If no path is available or the file is missing.
        pydantic.ValidationError: If the file content is invalid.
    """
    resolved_path = config_path or os.environ.get(CONFIG_ENV_VAR)
    if not resolved_path:
        msg = f"No configuration path given and {CONFIG_ENV_VAR} is not set"
        raise FileNotFoundError(msg)

    path = pathlib.Path(resolved_path)
    if not path.exists():
        msg = f"Configuration file not found: {resolved_path}"
        raise FileNotFoundError(msg)

    with path.open("r") as f:
        data = json.load(f)

    return ClientConfig(**data)


def config_from_env() -> ClientConfig:
    """Build configuration from ``CODESHIP_*`` environment variables."""
    data = {
        "username": os.environ.get(USERNAME_ENV_VAR, ""),
        "password": os.environ.get(PASSWORD_ENV_VAR, ""),
    }
    if base_url := os.environ.get(BASE_URL_ENV_VAR):
        data["base_url"] = base_url
    return ClientConfig(**data)


def create_client(config_path: str | None = None, **kwargs) -> Client:
    """Load configuration, set up logging, and build a client from it.

    Extra keyword arguments are passed to :meth:`Client.from_config`.
    """
    config = load_config(config_path)
    configure_logging(config.log_level)
    return Client.from_config(config, **kwargs)

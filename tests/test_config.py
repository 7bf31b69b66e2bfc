"""Tests for configuration loading."""

import io
import json

import pydantic
import pytest
import structlog

from codeship_api import client, config


def _write_config(tmp_path, data: dict):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data))
    return path


def test_load_config_applies_defaults(tmp_path):
    """Only credentials are required; everything else has a default."""
    path = _write_config(tmp_path, {"username": "user", "password": "pass"})

    cfg = config.load_config(str(path))

    assert cfg.base_url == "https://api.codeship.com/v2"
    assert cfg.timeout == 30.0
    assert cfg.verbose is False
    assert cfg.headers == {}
    assert cfg.log_level == "INFO"


def test_load_config_missing_file(tmp_path):
    """A missing file raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError, match="not found"):
        config.load_config(str(tmp_path / "nope.json"))


def test_load_config_uses_env_var(tmp_path, monkeypatch):
    """Without an explicit path the environment variable is used."""
    path = _write_config(
        tmp_path,
        {"username": "user", "password": "pass", "verbose": True},
    )
    monkeypatch.setenv(config.CONFIG_ENV_VAR, str(path))

    cfg = config.load_config()

    assert cfg.verbose is True


def test_load_config_without_any_path(monkeypatch):
    """No path and no environment variable is an error."""
    monkeypatch.delenv(config.CONFIG_ENV_VAR, raising=False)

    with pytest.raises(FileNotFoundError, match=config.CONFIG_ENV_VAR):
        config.load_config()


@pytest.mark.parametrize(
    "overrides",
    [{"timeout": 0}, {"timeout": -1}, {"base_url": ""}],
)
def test_load_config_rejects_invalid_values(tmp_path, overrides):
    """Invalid field values fail validation."""
    path = _write_config(tmp_path, {"username": "u", "password": "p", **overrides})

    with pytest.raises(pydantic.ValidationError):
        config.load_config(str(path))


def test_config_from_env(monkeypatch):
    """Credentials and base URL are read from CODESHIP_* variables."""
    monkeypatch.setenv(config.USERNAME_ENV_VAR, "user")
    monkeypatch.setenv(config.PASSWORD_ENV_VAR, "pass")
    monkeypatch.setenv(config.BASE_URL_ENV_VAR, "https://example.test/v2")

    cfg = config.config_from_env()

    assert cfg.username == "user"
    assert cfg.password == "pass"
    assert cfg.base_url == "https://example.test/v2"


def test_config_from_env_defaults_base_url(monkeypatch):
    """Without CODESHIP_BASE_URL the default API URL is kept."""
    monkeypatch.setenv(config.USERNAME_ENV_VAR, "user")
    monkeypatch.setenv(config.PASSWORD_ENV_VAR, "pass")
    monkeypatch.delenv(config.BASE_URL_ENV_VAR, raising=False)

    assert config.config_from_env().base_url == "https://api.codeship.com/v2"


def test_configure_logging_accepts_unknown_level():
    """An unknown level name falls back to INFO without raising."""
    try:
        config.configure_logging("not-a-level")
        config.configure_logging("debug")
    finally:
        structlog.reset_defaults()


def test_configure_logging_writes_logfmt_to_stream():
    """Events are rendered as logfmt with request fields after the message."""
    stream = io.StringIO()
    try:
        config.configure_logging("info", stream=stream)
        structlog.get_logger().info(
            "API request completed",
            status_code=200,
            method="GET",
            extra="x",
        )
    finally:
        structlog.reset_defaults()

    line = stream.getvalue().strip()
    assert line.startswith("timestamp=")
    assert 'level=info msg="API request completed" method=GET status_code=200' in line
    assert line.endswith("extra=x")


def test_configure_logging_filters_below_level():
    """Events under the configured level are dropped."""
    stream = io.StringIO()
    try:
        config.configure_logging("warning", stream=stream)
        structlog.get_logger().info("ignored")
    finally:
        structlog.reset_defaults()

    assert stream.getvalue() == ""


def test_create_client_applies_log_level(tmp_path, monkeypatch):
    """create_client configures logging from the file and builds the client."""
    path = _write_config(
        tmp_path,
        {"username": "user", "password": "pass", "log_level": "DEBUG"},
    )
    configured = []
    monkeypatch.setattr(config, "configure_logging", configured.append)

    api_client = config.create_client(str(path))

    assert configured == ["DEBUG"]
    assert isinstance(api_client, client.Client)
    assert api_client.base_url == "https://api.codeship.com/v2"

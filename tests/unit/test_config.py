# tests/unit/test_config.py

import pytest

# Import the components to be tested
from graceful_shutdown_demo.config import get_config
from graceful_shutdown_demo.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def clear_config_cache():
    """
    Fixture to automatically clear the lru_cache for get_config before and after
    each test, so every test reads its own monkeypatched environment.
    """
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def mock_valid_env(monkeypatch):
    """Sets a valid environment for a single test."""
    monkeypatch.setenv("SERVICE_NAME", "test-service")
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("GREETING_MESSAGE", "hello from the tests")
    monkeypatch.setenv("SHUTDOWN_EXTENSION_MODE", "internal")
    monkeypatch.setenv("EXTENSION_NAME", "shutdown-helper")
    monkeypatch.setenv("EXTENSION_HTTP_TIMEOUT_SECONDS", "2")
    monkeypatch.setenv("AWS_LAMBDA_RUNTIME_API", "127.0.0.1:9001")


@pytest.fixture
def required_only_env(monkeypatch):
    monkeypatch.setenv("SERVICE_NAME", "test-service")
    monkeypatch.setenv("ENVIRONMENT", "prod")
    for name in (
        "LOG_LEVEL",
        "GREETING_MESSAGE",
        "SHUTDOWN_EXTENSION_MODE",
        "EXTENSION_NAME",
        "EXTENSION_HTTP_TIMEOUT_SECONDS",
        "AWS_LAMBDA_RUNTIME_API",
    ):
        monkeypatch.delenv(name, raising=False)


def test_get_config_happy_path(mock_valid_env):
    """Tests that configuration loads correctly when all env vars are set."""
    # ACT: Call the factory function
    config = get_config()

    # ASSERT
    assert config.service_name == "test-service"
    assert config.environment == "test"
    assert config.log_level == "DEBUG"
    assert config.greeting_message == "hello from the tests"
    assert config.shutdown_extension_mode == "internal"
    assert config.extension_name == "shutdown-helper"
    assert config.extension_http_timeout_seconds == 2
    assert config.runtime_api == "127.0.0.1:9001"
    # Derived properties
    assert config.uses_internal_extension is True


def test_get_config_uses_defaults(required_only_env):
    """Tests that optional variables fall back to their default values."""
    config = get_config()

    assert config.log_level == "INFO"
    assert config.greeting_message == "hello python"
    assert config.shutdown_extension_mode == "external"
    assert config.extension_name == "no-op"
    assert config.extension_http_timeout_seconds == 5
    assert config.runtime_api is None
    assert config.uses_internal_extension is False


def test_get_config_missing_required_env_var(monkeypatch):
    """Tests that ConfigurationError is raised when required env vars are missing."""
    monkeypatch.delenv("SERVICE_NAME", raising=False)
    monkeypatch.setenv("ENVIRONMENT", "test")

    with pytest.raises(ConfigurationError, match="SERVICE_NAME"):
        get_config()


def test_get_config_invalid_log_level(required_only_env, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "CHATTY")

    with pytest.raises(ConfigurationError, match="LOG_LEVEL"):
        get_config()


def test_get_config_invalid_extension_mode(required_only_env, monkeypatch):
    monkeypatch.setenv("SHUTDOWN_EXTENSION_MODE", "sidecar")

    with pytest.raises(ConfigurationError, match="SHUTDOWN_EXTENSION_MODE"):
        get_config()


@pytest.mark.parametrize("value", ["not-a-number", "0", "-3"])
def test_get_config_invalid_timeout(required_only_env, monkeypatch, value):
    """Tests that ConfigurationError is raised for invalid integer values."""
    monkeypatch.setenv("EXTENSION_HTTP_TIMEOUT_SECONDS", value)

    with pytest.raises(ConfigurationError):
        get_config()


def test_internal_mode_requires_runtime_api(required_only_env, monkeypatch):
    monkeypatch.setenv("SHUTDOWN_EXTENSION_MODE", "internal")

    with pytest.raises(ConfigurationError, match="AWS_LAMBDA_RUNTIME_API"):
        get_config()


def test_blank_greeting_is_rejected(required_only_env, monkeypatch):
    monkeypatch.setenv("GREETING_MESSAGE", "   ")

    with pytest.raises(ConfigurationError, match="GREETING_MESSAGE"):
        get_config()


def test_get_config_caching(required_only_env):
    """Tests that get_config returns the same instance when called multiple times."""
    config1 = get_config()
    config2 = get_config()

    assert config1 is config2  # Same object instance due to lru_cache


@pytest.mark.parametrize("runtime_api", ["127.0.0.1", "127.0.0.1:", ":9001", "localhost:http"])
def test_internal_mode_requires_host_and_port(required_only_env, monkeypatch, runtime_api):
    monkeypatch.setenv("SHUTDOWN_EXTENSION_MODE", "internal")
    monkeypatch.setenv("AWS_LAMBDA_RUNTIME_API", runtime_api)

    with pytest.raises(ConfigurationError, match="host:port"):
        get_config()


def test_external_mode_ignores_runtime_api_format(required_only_env, monkeypatch):
    monkeypatch.setenv("AWS_LAMBDA_RUNTIME_API", "not-a-host-port")

    config = get_config()

    assert config.runtime_api == "not-a-host-port"

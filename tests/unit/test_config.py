"""
Unit tests for client settings.
"""
import pytest
from pydantic import ValidationError

from restclient.application.config import ClientSettings
from restclient.shared.exceptions import ConfigurationError, ErrorKind
from restclient.shared.types import CircuitState


class TestClientSettings:
    """Test cases for ClientSettings."""

    def test_defaults(self):
        """Test default values."""
        settings = ClientSettings()

        assert settings.default_timeout_seconds is None
        assert settings.default_retries == 0
        assert settings.breaker_failure_threshold == 5
        assert settings.breaker_open_seconds == 5.0
        assert not settings.log_payload

    def test_from_env(self):
        """Test loading values from RESTCLIENT_* variables."""
        settings = ClientSettings.from_env({
            "RESTCLIENT_DEFAULT_TIMEOUT_SECONDS": "2.5",
            "RESTCLIENT_DEFAULT_RETRIES": "3",
            "RESTCLIENT_LOG_RESPONSE": "true",
            "RESTCLIENT_USER_AGENT": "inventory-service/2.0",
            "UNRELATED": "ignored",
        })

        assert settings.default_timeout_seconds == 2.5
        assert settings.default_retries == 3
        assert settings.log_response is True
        assert settings.user_agent == "inventory-service/2.0"

    def test_empty_variables_keep_defaults(self):
        """Test that blank variables are treated as unset."""
        settings = ClientSettings.from_env({"RESTCLIENT_DEFAULT_RETRIES": ""})

        assert settings.default_retries == 0

    @pytest.mark.parametrize("name,value", [
        ("RESTCLIENT_DEFAULT_RETRIES", "-1"),
        ("RESTCLIENT_DEFAULT_TIMEOUT_SECONDS", "0"),
        ("RESTCLIENT_BREAKER_FAILURE_THRESHOLD", "many"),
    ])
    def test_invalid_values(self, name, value):
        """Test that invalid values raise ConfigurationError naming the field."""
        with pytest.raises(ConfigurationError) as exc_info:
            ClientSettings.from_env({name: value})

        error = exc_info.value
        assert error.kind == ErrorKind.CONFIGURATION
        assert error.field == name[len("RESTCLIENT_"):].lower()
        assert error.value == value

    def test_settings_are_frozen(self):
        """Test immutability."""
        settings = ClientSettings()

        with pytest.raises(ValidationError):
            settings.default_retries = 4

    def test_build_circuit_breaker(self):
        """Test breaker construction from settings."""
        breaker = ClientSettings(breaker_failure_threshold=2, breaker_open_seconds=1.5).build_circuit_breaker("orders")

        assert breaker.name == "orders"
        assert breaker.state == CircuitState.CLOSED
        assert breaker.config.failure_threshold == 2
        assert breaker.config.open_seconds == 1.5

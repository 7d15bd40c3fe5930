"""
Client-wide settings.

Defaults applied to every request built from a builder that carries these
settings. Values can be given explicitly or loaded from ``RESTCLIENT_*``
environment variables.
"""

import os
from typing import Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from restclient.infrastructure.logging import configure_logging
from restclient.infrastructure.resilience.circuit_breaker import CircuitBreaker, CircuitBreakerConfig
from restclient.shared.exceptions import ConfigurationError

ENV_PREFIX = "RESTCLIENT_"


class ClientSettings(BaseModel):
    """Configuration for the REST client."""
    model_config = ConfigDict(frozen=True)

    default_timeout_seconds: Optional[float] = Field(default=None, gt=0)
    default_retries: int = Field(default=0, ge=0)
    breaker_failure_threshold: int = Field(default=5, ge=1)
    breaker_open_seconds: float = Field(default=5.0, ge=0)
    log_payload: bool = False
    log_response: bool = False
    user_agent: Optional[str] = "restclient/1.0"
    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClientSettings":
        """
        Load settings from environment variables.

        Every field maps to ``RESTCLIENT_<FIELD_NAME>``; unset variables keep
        their defaults.

        Raises:
            ConfigurationError: If a variable holds an invalid value
        """
        environ = os.environ if environ is None else environ

        values: Dict[str, str] = {}
        for name in cls.model_fields:
            raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw != "":
                values[name] = raw

        try:
            return cls(**values)
        except ValidationError as e:
            first = e.errors()[0]
            field = str(first["loc"][0]) if first.get("loc") else None
            raise ConfigurationError(
                f"Invalid client settings: {first['msg']}",
                field=field,
                value=values.get(field) if field else None,
            ) from e

    def circuit_breaker_config(self) -> CircuitBreakerConfig:
        return CircuitBreakerConfig(
            failure_threshold=self.breaker_failure_threshold,
            open_seconds=self.breaker_open_seconds,
        )

    def build_circuit_breaker(self, name: str) -> CircuitBreaker:
        """Create a breaker for one downstream service using these settings."""
        return CircuitBreaker(name, self.circuit_breaker_config())

    def apply_logging(self, force: bool = False) -> None:
        """Configure structlog with this level and output format."""
        configure_logging(level=self.log_level, json_format=self.log_json, force=force)

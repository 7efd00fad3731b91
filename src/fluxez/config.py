"""Client Configuration Management

Centralized configuration for the Fluxez client with environment variable support.
"""

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Any

from .constants import DEFAULT_API_URL
from .exceptions import ConfigurationError
from .logging_utils import mask_secret, redact_headers

logger = logging.getLogger(__name__)


class DefaultConfig:
    """Default configuration values for the client."""

    # Request timeouts (in milliseconds)
    API_REQUEST_TIMEOUT = 30000
    # Default for AI generation and file transfers
    LONG_RUNNING_TIMEOUT = 120000

    # Retry configuration
    API_RETRY_ATTEMPTS = 3
    API_RETRY_DELAY = 1000  # base delay in ms, doubled per attempt
    API_MAX_RETRY_DELAY = 30000

    # Connection pooling
    MAX_CONNECTIONS = 20
    MAX_KEEPALIVE_CONNECTIONS = 10


class EnvVar:
    """Environment variables understood by ``ClientConfig.from_env``."""

    API_KEY = "FLUXEZ_API_KEY"
    API_URL = "FLUXEZ_API_URL"
    TIMEOUT = "FLUXEZ_TIMEOUT"
    RETRIES = "FLUXEZ_RETRIES"
    DEBUG = "FLUXEZ_DEBUG"


def _env_bool(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str) -> int | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got '{value}'")


@dataclass
class ClientConfig:
    """Configuration for a ``FluxezClient``.

    Timeouts and delays are expressed in milliseconds. The API key is kept
    out of ``repr`` so configs can be logged safely.
    """

    api_key: str = field(repr=False)
    api_url: str = DEFAULT_API_URL
    timeout: int = DefaultConfig.API_REQUEST_TIMEOUT
    retries: int = DefaultConfig.API_RETRY_ATTEMPTS
    retry_delay: int = DefaultConfig.API_RETRY_DELAY
    max_retry_delay: int = DefaultConfig.API_MAX_RETRY_DELAY
    debug: bool = False
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        self.headers = dict(self.headers or {})
        self.validate()

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientConfig":
        """Build a config from ``FLUXEZ_*`` environment variables.

        Explicit keyword arguments win over the environment.
        """
        values: dict[str, Any] = {
            "api_key": os.getenv(EnvVar.API_KEY, ""),
            "api_url": os.getenv(EnvVar.API_URL) or DEFAULT_API_URL,
            "debug": _env_bool(os.getenv(EnvVar.DEBUG)),
        }
        timeout = _env_int(EnvVar.TIMEOUT)
        if timeout is not None:
            values["timeout"] = timeout
        retries = _env_int(EnvVar.RETRIES)
        if retries is not None:
            values["retries"] = retries

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ConfigurationError: If any value is structurally invalid
        """
        errors = []

        if not isinstance(self.api_key, str) or not self.api_key.strip():
            raise ConfigurationError(
                "API key is required. Get your API key from the Fluxez dashboard."
            )
        if not isinstance(self.api_url, str) or not self.api_url.strip():
            errors.append("api_url must be a non-empty string")
        if not isinstance(self.timeout, int) or self.timeout <= 0:
            errors.append(f"timeout must be a positive number of ms, got {self.timeout!r}")
        if not isinstance(self.retries, int) or self.retries < 0:
            errors.append(f"retries must be >= 0, got {self.retries!r}")
        if not isinstance(self.retry_delay, int) or self.retry_delay < 0:
            errors.append(f"retry_delay must be >= 0, got {self.retry_delay!r}")
        if not isinstance(self.max_retry_delay, int) or self.max_retry_delay < 0:
            errors.append(f"max_retry_delay must be >= 0, got {self.max_retry_delay!r}")
        for name, value in self.headers.items():
            if not isinstance(name, str) or not name:
                errors.append(f"header names must be non-empty strings, got {name!r}")
            elif not isinstance(value, str):
                errors.append(f"header '{name}' must have a string value")

        if errors:
            raise ConfigurationError(
                f"Invalid client configuration: {'; '.join(errors)}", details=errors
            )

    def merged(self, **changes: Any) -> "ClientConfig":
        """Return a validated copy with ``changes`` applied.

        ``headers`` are merged key by key instead of replaced.
        """
        changes = {k: v for k, v in changes.items() if v is not None}
        if "headers" in changes:
            changes["headers"] = {**self.headers, **changes["headers"]}
        return replace(self, **changes)

    @property
    def masked_api_key(self) -> str:
        return mask_secret(self.api_key)

    def to_dict(self) -> dict[str, Any]:
        """Public view of the configuration, with the API key masked."""
        return {
            "api_key": self.masked_api_key,
            "api_url": self.api_url,
            "timeout": self.timeout,
            "retries": self.retries,
            "retry_delay": self.retry_delay,
            "max_retry_delay": self.max_retry_delay,
            "debug": self.debug,
            "headers": redact_headers(self.headers),
        }

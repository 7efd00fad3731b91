"""Fluxez Python SDK

Async client for the Fluxez multi-tenant backend platform.
"""

from .client import FluxezClient
from .config import ClientConfig, DefaultConfig
from .constants import SDK_VERSION
from .context import TenantContext
from .enums import ErrorCode, HTTPMethod
from .exceptions import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    FluxezError,
    RateLimitError,
    RequestTimeoutError,
    TransportError,
    ValidationError,
)
from .models import ConfigSnapshot, ConnectionTestResult, QueryResult

__version__ = SDK_VERSION

__all__ = [
    "FluxezClient",
    "ClientConfig",
    "DefaultConfig",
    "TenantContext",
    "ErrorCode",
    "HTTPMethod",
    "FluxezError",
    "ConfigurationError",
    "ValidationError",
    "TransportError",
    "RequestTimeoutError",
    "ApiError",
    "AuthenticationError",
    "RateLimitError",
    "ConfigSnapshot",
    "ConnectionTestResult",
    "QueryResult",
]

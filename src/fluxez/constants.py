"""Fluxez SDK Constants

Single source of truth for base URLs, header names and retry classes.
"""

SDK_VERSION = "1.0.0"

DEFAULT_API_URL = "https://api.fluxez.com/api/v1"

# HTTP Content Type Constants
APPLICATION_JSON = "application/json"

USER_AGENT = f"fluxez-python-sdk/{SDK_VERSION}"

# Prefixes issued by the Fluxez dashboard. Anything else only triggers a warning.
BEARER_KEY_PREFIX = "cgx_"
KNOWN_API_KEY_PREFIXES = ("cgx_", "service_", "anon_")


class HeaderName:
    """Header names attached to outgoing requests."""

    AUTHORIZATION = "Authorization"
    API_KEY = "x-api-key"
    ORGANIZATION_ID = "x-organization-id"
    PROJECT_ID = "x-project-id"
    APP_ID = "x-app-id"
    IDEMPOTENCY_KEY = "Idempotency-Key"
    RETRY_AFTER = "Retry-After"
    CONTENT_TYPE = "Content-Type"
    ACCEPT = "Accept"
    USER_AGENT = "User-Agent"

    # Never written to logs in clear text
    SENSITIVE = frozenset({"authorization", "x-api-key", "cookie", "set-cookie"})


class RetryStatus:
    """HTTP status classes used by the retry policy."""

    # Request was rejected before processing, safe to repeat for any call
    ALWAYS_RETRYABLE = frozenset({429})
    # Outcome unknown, only repeated for idempotent-safe calls
    IDEMPOTENT_RETRYABLE = frozenset({408, 500, 502, 503, 504})


class Endpoint:
    """Facade-level endpoints. Domain endpoints live on their clients."""

    HEALTH = "/health"
    PING = "/ping"
    QUERY = "/query"
    NATURAL_QUERY = "/query/natural"
    EXECUTE = "/execute"

"""Shared Enums for the Fluxez SDK

Enum definitions used across the SDK to avoid hardcoded string values.
"""

from enum import Enum


class HTTPMethod(Enum):
    """HTTP methods for API requests."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    def __str__(self):
        return self.value

    @property
    def is_idempotent(self) -> bool:
        """Whether repeating this method cannot duplicate side effects."""
        return self in IDEMPOTENT_METHODS


IDEMPOTENT_METHODS = frozenset(
    {
        HTTPMethod.GET,
        HTTPMethod.PUT,
        HTTPMethod.DELETE,
        HTTPMethod.HEAD,
        HTTPMethod.OPTIONS,
    }
)


class ErrorCode(Enum):
    """Machine-readable error codes used when the backend does not send one."""

    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    REQUEST_TIMEOUT = "REQUEST_TIMEOUT"
    CONFLICT = "CONFLICT"
    UNPROCESSABLE_ENTITY = "UNPROCESSABLE_ENTITY"
    TOO_MANY_REQUESTS = "TOO_MANY_REQUESTS"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    NOT_IMPLEMENTED = "NOT_IMPLEMENTED"
    BAD_GATEWAY = "BAD_GATEWAY"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    GATEWAY_TIMEOUT = "GATEWAY_TIMEOUT"

    # SDK-side codes
    NETWORK_ERROR = "NETWORK_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    TIMEOUT = "TIMEOUT"
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    def __str__(self):
        return self.value

    @classmethod
    def from_status(cls, status_code: int) -> str:
        """Map an HTTP status to an error code string.

        Unknown statuses map to ``HTTP_<status>``.
        """
        code = _STATUS_CODE_MAP.get(status_code)
        if code is not None:
            return code.value
        return f"HTTP_{status_code}"


_STATUS_CODE_MAP = {
    400: ErrorCode.BAD_REQUEST,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
    408: ErrorCode.REQUEST_TIMEOUT,
    409: ErrorCode.CONFLICT,
    422: ErrorCode.UNPROCESSABLE_ENTITY,
    429: ErrorCode.TOO_MANY_REQUESTS,
    500: ErrorCode.INTERNAL_SERVER_ERROR,
    501: ErrorCode.NOT_IMPLEMENTED,
    502: ErrorCode.BAD_GATEWAY,
    503: ErrorCode.SERVICE_UNAVAILABLE,
    504: ErrorCode.GATEWAY_TIMEOUT,
}

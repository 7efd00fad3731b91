"""Fluxez SDK Exceptions

Every failure surfaced by the SDK is a ``FluxezError``. Transport failures
(timeouts, refused connections, non-2xx responses) are normalized into the
same shape so callers can handle them uniformly::

    try:
        await client.queue.send(queue_url, {"action": "PROCESS"})
    except FluxezError as e:
        print(e.code, e.message)
"""

from typing import Any

from .enums import ErrorCode


class FluxezError(Exception):
    """Base exception for all Fluxez SDK errors."""

    def __init__(self, message: str, code: str | None = None, details: Any = None):
        self.message = message
        self.code = code
        self.details = details
        super().__init__(message)

    def __str__(self):
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": type(self).__name__,
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }


class ConfigurationError(FluxezError):
    """Raised when client construction or update arguments are invalid."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(message, ErrorCode.INVALID_CONFIGURATION.value, details)


class ValidationError(FluxezError):
    """Raised when arguments are rejected client-side, before any request."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, ErrorCode.VALIDATION_ERROR.value)
        self.field = field


class TransportError(FluxezError):
    """Raised when the request could not complete at the network level."""

    def __init__(
        self,
        message: str,
        code: str = ErrorCode.NETWORK_ERROR.value,
        cause: BaseException | None = None,
    ):
        super().__init__(message, code)
        self.cause = cause


class RequestTimeoutError(TransportError):
    """Raised when a request exceeds the configured timeout."""

    def __init__(self, message: str, timeout: float, cause: BaseException | None = None):
        super().__init__(message, ErrorCode.TIMEOUT.value, cause)
        self.timeout = timeout


class ApiError(FluxezError):
    """Raised when the backend answers with a non-2xx status.

    ``code`` and ``message`` are taken verbatim from the backend error body
    when present.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        http_status: int | None = None,
        response_body: Any = None,
        details: Any = None,
    ):
        if code is None and http_status is not None:
            code = ErrorCode.from_status(http_status)
        super().__init__(message, code, details)
        self.http_status = http_status
        self.response_body = response_body

    @property
    def is_server_error(self) -> bool:
        return self.http_status is not None and self.http_status >= 500

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["http_status"] = self.http_status
        data["response_body"] = self.response_body
        return data


class AuthenticationError(ApiError):
    """Raised when the backend rejects the API key (401/403)."""

    pass


class RateLimitError(ApiError):
    """Raised when the backend keeps rate limiting the client (429)."""

    def __init__(self, *args, retry_after: float | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.retry_after = retry_after


def api_error_for_status(http_status: int) -> type[ApiError]:
    """Pick the ApiError subclass for a status code."""
    if http_status in (401, 403):
        return AuthenticationError
    if http_status == 429:
        return RateLimitError
    return ApiError

"""HTTP Transport for the Fluxez API

The only module that talks to ``httpx``. It builds a fresh request envelope
per call from the live client configuration and tenant context, enforces the
configured timeout, retries idempotent-safe failures with exponential backoff
and normalizes every failure into the SDK error taxonomy.

Retry policy:
- 429 responses and refused connections are retried for every call, since
  the backend never processed the request.
- Timeouts, other network errors, 408 and 5xx responses are retried only for
  idempotent-safe calls: idempotent HTTP methods, calls flagged
  ``idempotent=True`` and calls carrying an ``Idempotency-Key`` header.
"""

import asyncio
import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx

from .backoff import ExponentialBackoff, parse_retry_after
from .config import ClientConfig, DefaultConfig
from .constants import (
    APPLICATION_JSON,
    BEARER_KEY_PREFIX,
    USER_AGENT,
    HeaderName,
    RetryStatus,
)
from .context import TenantContext
from .enums import ErrorCode, HTTPMethod
from .exceptions import (
    ApiError,
    RateLimitError,
    RequestTimeoutError,
    TransportError,
    api_error_for_status,
)
from .logging_utils import redact_headers

logger = logging.getLogger(__name__)

ConfigProvider = Callable[[], ClientConfig]
ContextProvider = Callable[[], TenantContext]


@dataclass
class RequestEnvelope:
    """Everything needed to send one request. Built per call, never reused."""

    method: HTTPMethod
    url: str
    path: str
    headers: dict[str, str]
    timeout: float
    idempotent: bool
    json_body: Any = None
    params: dict[str, Any] | None = None
    files: Any = None
    form_data: dict[str, Any] | None = None
    raw_response: bool = False

    @property
    def label(self) -> str:
        return f"{self.method.value} {self.path}"


def auth_headers(api_key: str) -> dict[str, str]:
    """Credential header for an API key.

    ``cgx_`` keys travel as bearer tokens, pre-formatted ``Bearer`` values are
    passed through and every other key uses ``x-api-key``.
    """
    if api_key.startswith("Bearer "):
        return {HeaderName.AUTHORIZATION: api_key}
    if api_key.startswith(BEARER_KEY_PREFIX):
        return {HeaderName.AUTHORIZATION: f"Bearer {api_key}"}
    return {HeaderName.API_KEY: api_key}


def _has_header(headers: dict[str, str], name: str) -> bool:
    name = name.lower()
    return any(key.lower() == name for key in headers)


def _clean_params(params: dict[str, Any] | None) -> dict[str, Any] | None:
    if not params:
        return None
    cleaned = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        cleaned[key] = value
    return cleaned or None


class _ConnectionPool:
    """Lazily created ``httpx.AsyncClient`` shared by derived transports."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def get(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            limits = httpx.Limits(
                max_connections=DefaultConfig.MAX_CONNECTIONS,
                max_keepalive_connections=DefaultConfig.MAX_KEEPALIVE_CONNECTIONS,
            )
            self._client = httpx.AsyncClient(
                transport=self._transport, limits=limits, follow_redirects=True
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None


class HTTPTransport:
    """Async HTTP transport bound to a live config and tenant context.

    Config and context are read through providers on every call, so changes
    made on the owning client apply to the next request of every sub-client.
    """

    def __init__(
        self,
        config_provider: ConfigProvider,
        context_provider: ContextProvider,
        transport: httpx.AsyncBaseTransport | None = None,
        pool: _ConnectionPool | None = None,
    ):
        self._config_provider = config_provider
        self._context_provider = context_provider
        self._owns_pool = pool is None
        self._pool = pool or _ConnectionPool(transport)

    @property
    def config(self) -> ClientConfig:
        return self._config_provider()

    @property
    def context(self) -> TenantContext:
        return self._context_provider()

    def derive(
        self, config_provider: ConfigProvider, context_provider: ContextProvider
    ) -> "HTTPTransport":
        """Transport for a derived client sharing this connection pool."""
        return HTTPTransport(config_provider, context_provider, pool=self._pool)

    def build_envelope(
        self,
        method: HTTPMethod,
        path: str,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        files: Any = None,
        form_data: dict[str, Any] | None = None,
        timeout: int | None = None,
        idempotent: bool | None = None,
        raw_response: bool = False,
    ) -> RequestEnvelope:
        """Build the request envelope from the current config and context.

        Header layers, later ones winning: defaults, credentials, tenant
        context, configured extra headers, per-call headers.
        """
        config = self.config
        context = self.context

        merged_headers = {
            HeaderName.ACCEPT: APPLICATION_JSON,
            HeaderName.USER_AGENT: USER_AGENT,
        }
        merged_headers.update(auth_headers(config.api_key))
        merged_headers.update(context.to_headers())
        merged_headers.update(config.headers)
        if headers:
            merged_headers.update({k: v for k, v in headers.items() if v is not None})

        if idempotent is None:
            idempotent = method.is_idempotent or _has_header(
                merged_headers, HeaderName.IDEMPOTENCY_KEY
            )

        timeout_ms = timeout if timeout is not None else config.timeout
        url = f"{config.api_url.rstrip('/')}/{path.lstrip('/')}"

        return RequestEnvelope(
            method=method,
            url=url,
            path=path,
            headers=merged_headers,
            timeout=timeout_ms / 1000.0,
            idempotent=idempotent,
            json_body=json_body,
            params=_clean_params(params),
            files=files,
            form_data=form_data,
            raw_response=raw_response,
        )

    async def request(
        self,
        method: HTTPMethod,
        path: str,
        max_retries: int | None = None,
        **envelope_kwargs: Any,
    ) -> Any:
        """Send a request and return the decoded response body.

        Args:
            method: HTTP method
            path: API path relative to the configured base URL
            max_retries: Override of the configured retry count
            **envelope_kwargs: Passed to ``build_envelope``

        Returns:
            Decoded JSON body, ``{}`` for empty bodies, raw bytes when
            ``raw_response`` is set

        Raises:
            TransportError: Network failure or timeout
            ApiError: Non-2xx response
        """
        envelope = self.build_envelope(method, path, **envelope_kwargs)
        config = self.config
        retries = config.retries if max_retries is None else max_retries
        backoff = ExponentialBackoff(
            base_delay=config.retry_delay / 1000.0,
            max_delay=config.max_retry_delay / 1000.0,
        )

        logger.debug(
            f"Request {envelope.label} headers={redact_headers(envelope.headers)} "
            f"idempotent={envelope.idempotent}"
        )

        for attempt in range(retries + 1):
            attempt_label = f"attempt {attempt + 1}/{retries + 1}"
            try:
                response = await self._send_once(envelope)
            except TransportError as e:
                if attempt < retries and self._should_retry_error(e, envelope):
                    delay = backoff.calculate_delay(attempt + 1)
                    logger.warning(
                        f"{envelope.label} {e.code} - retrying in {delay:.2f}s ({attempt_label})"
                    )
                    await asyncio.sleep(delay)
                    continue
                logger.error(f"{envelope.label} failed ({attempt_label}): {e.message}")
                raise

            if response.is_success:
                return self._parse_response(response, envelope)

            error = self._build_api_error(response)
            if attempt < retries and self._should_retry_status(
                response.status_code, envelope
            ):
                retry_after = parse_retry_after(
                    response.headers.get(HeaderName.RETRY_AFTER)
                )
                delay = backoff.calculate_delay(attempt + 1, retry_after)
                logger.warning(
                    f"{envelope.label} returned {response.status_code} - "
                    f"retrying in {delay:.2f}s ({attempt_label})"
                )
                await asyncio.sleep(delay)
                continue

            logger.error(
                f"{envelope.label} failed with {response.status_code} "
                f"[{error.code}]: {error.message}"
            )
            raise error

        # Loop always returns or raises; kept for type checkers
        raise TransportError(f"{envelope.label} failed after {retries + 1} attempts")

    async def _send_once(self, envelope: RequestEnvelope) -> httpx.Response:
        client = self._pool.get()
        request = client.build_request(
            envelope.method.value,
            envelope.url,
            headers=envelope.headers,
            params=envelope.params,
            json=envelope.json_body if envelope.files is None else None,
            data=envelope.form_data,
            files=envelope.files,
            timeout=envelope.timeout,
        )

        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                client.send(request), timeout=envelope.timeout
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise RequestTimeoutError(
                f"{envelope.label} timed out after {envelope.timeout * 1000:.0f}ms",
                timeout=envelope.timeout,
                cause=e,
            ) from e
        except httpx.ConnectError as e:
            raise TransportError(
                f"Could not connect to {envelope.url}: {e}",
                code=ErrorCode.CONNECTION_ERROR.value,
                cause=e,
            ) from e
        except httpx.TransportError as e:
            raise TransportError(
                f"Network error during {envelope.label}: {e}",
                code=ErrorCode.NETWORK_ERROR.value,
                cause=e,
            ) from e

        latency_ms = (time.monotonic() - start) * 1000
        logger.debug(
            f"{envelope.label} -> {response.status_code} {response.reason_phrase} "
            f"({latency_ms:.0f}ms)"
        )
        return response

    @staticmethod
    def _should_retry_error(error: TransportError, envelope: RequestEnvelope) -> bool:
        if error.code == ErrorCode.CONNECTION_ERROR.value:
            return True
        return envelope.idempotent

    @staticmethod
    def _should_retry_status(status_code: int, envelope: RequestEnvelope) -> bool:
        if status_code in RetryStatus.ALWAYS_RETRYABLE:
            return True
        return envelope.idempotent and (
            status_code in RetryStatus.IDEMPOTENT_RETRYABLE or status_code >= 500
        )

    @staticmethod
    def _decode_body(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return response.text

    def _parse_response(self, response: httpx.Response, envelope: RequestEnvelope) -> Any:
        if envelope.raw_response:
            return response.content

        content_type = response.headers.get(HeaderName.CONTENT_TYPE, "").lower()
        if not response.content or not response.text.strip():
            logger.debug(f"Empty response from {envelope.label}")
            return {}

        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            if APPLICATION_JSON in content_type:
                raise ApiError(
                    f"Invalid JSON in response from {envelope.label}: {e}",
                    code=ErrorCode.INVALID_RESPONSE.value,
                    http_status=response.status_code,
                    response_body=response.text,
                ) from e
            # Some endpoints answer with plain text
            logger.debug(f"Returning raw text response from {envelope.label}")
            return {"raw_response": response.text}

    def _build_api_error(self, response: httpx.Response) -> ApiError:
        """Normalize a non-2xx response, keeping backend code/message verbatim."""
        body = self._decode_body(response)
        status = response.status_code

        message = None
        code = None
        details = None
        if isinstance(body, dict):
            error_field = body.get("error")
            if isinstance(error_field, dict):
                message = error_field.get("message")
                code = error_field.get("code")
                details = error_field.get("details")
            elif isinstance(error_field, str):
                message = error_field
            message = body.get("message") or message
            code = body.get("code") or code
            details = body.get("details", details)
        elif isinstance(body, str) and body.strip():
            message = body.strip()[:500]

        if not message:
            message = f"Request failed with status {status}"
        if code is not None and not isinstance(code, str):
            code = str(code)

        error_class = api_error_for_status(status)
        kwargs: dict[str, Any] = {
            "code": code,
            "http_status": status,
            "response_body": body,
            "details": details,
        }
        if error_class is RateLimitError:
            kwargs["retry_after"] = parse_retry_after(
                response.headers.get(HeaderName.RETRY_AFTER)
            )
        return error_class(message, **kwargs)

    async def aclose(self) -> None:
        """Close the connection pool if this transport owns it."""
        if self._owns_pool:
            await self._pool.aclose()


def unwrap_payload(body: Any) -> Any:
    """Strip the backend ``{"success", "data"}`` envelope.

    A 2xx body with ``success: false`` is an error reported in-band and is
    raised as ``ApiError``.
    """
    if not isinstance(body, dict) or "success" not in body:
        return body
    if body.get("success") is False:
        error_field = body.get("error")
        if isinstance(error_field, dict):
            message = error_field.get("message") or body.get("message")
            code = error_field.get("code") or body.get("code")
        else:
            message = body.get("message") or error_field
            code = body.get("code")
        raise ApiError(
            message or "Request was not successful",
            code=code or ErrorCode.INTERNAL_SERVER_ERROR.value,
            response_body=body,
            details=body.get("details"),
        )
    if "data" in body:
        return body["data"]
    return body


__all__ = [
    "HTTPTransport",
    "RequestEnvelope",
    "auth_headers",
    "unwrap_payload",
]

"""Base Client for Fluxez Domain APIs

Shared request helpers for the per-domain clients. Every domain client wraps
one API surface and sends its requests through the ``HTTPTransport`` owned by
``FluxezClient``, so credentials, tenant context and extra headers are always
read from the facade at request time.
"""

import datetime
import logging
import uuid
from collections.abc import Iterable
from decimal import Decimal
from enum import Enum
from typing import Any
from urllib.parse import quote

from ..context import TenantContext
from ..enums import HTTPMethod
from ..exceptions import ValidationError
from ..transport import HTTPTransport, unwrap_payload

logger = logging.getLogger(__name__)


class BaseAPIClient:
    """Base class for domain clients.

    Subclasses set ``ENDPOINT`` to their path prefix and implement async
    operations on top of the ``_get``/``_post``/``_put``/``_patch``/``_delete``
    helpers.
    """

    ENDPOINT = ""

    def __init__(self, transport: HTTPTransport):
        self._transport = transport

    @property
    def context(self) -> TenantContext:
        """Live tenant context of the owning client."""
        return self._transport.context

    def _build_url(self, *parts: Any) -> str:
        """Join the client prefix and path segments, quoting each segment.

        Args:
            *parts: Path segments appended to ``ENDPOINT``

        Returns:
            Path relative to the API base URL
        """
        segments = [self.ENDPOINT.rstrip("/")] if self.ENDPOINT else []
        for part in parts:
            segments.append(quote(str(part).strip("/"), safe=""))
        path = "/".join(segments)
        return path if path.startswith("/") else f"/{path}"

    def _serialize_data(self, data: Any) -> Any:
        """Recursively serialize data to JSON-compatible format.
        Handles UUID objects, datetime objects, and other complex types.
        """
        if isinstance(data, uuid.UUID):
            return str(data)
        elif isinstance(data, (datetime.datetime, datetime.date, datetime.time)):
            return data.isoformat()
        elif isinstance(data, Decimal):
            return str(data)
        elif isinstance(data, Enum):
            return data.value
        elif isinstance(data, dict):
            return {key: self._serialize_data(value) for key, value in data.items()}
        elif isinstance(data, (list, tuple, set)):
            return [self._serialize_data(item) for item in data]
        else:
            return data

    @staticmethod
    def _compact(data: dict[str, Any]) -> dict[str, Any]:
        """Drop unset optional arguments from a request body the client builds.

        Only the top level is touched; caller payloads nested inside keep
        their ``None`` values.
        """
        return {key: value for key, value in data.items() if value is not None}

    # Client-side validation
    @staticmethod
    def _require(value: Any, name: str) -> Any:
        """Reject ``None`` and empty strings/collections before a request."""
        if value is None:
            raise ValidationError(f"{name} is required", field=name)
        if isinstance(value, str) and not value.strip():
            raise ValidationError(f"{name} must not be empty", field=name)
        if isinstance(value, (list, tuple, dict, set)) and not value:
            raise ValidationError(f"{name} must not be empty", field=name)
        return value

    @staticmethod
    def _require_choice(value: str, choices: Iterable[str], name: str) -> str:
        choices = tuple(choices)
        if value not in choices:
            raise ValidationError(
                f"{name} must be one of {', '.join(choices)}, got '{value}'", field=name
            )
        return value

    async def _request(
        self,
        method: HTTPMethod,
        path: str,
        data: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: int | None = None,
        idempotent: bool | None = None,
        unwrap: bool = True,
        **kwargs: Any,
    ) -> Any:
        body = self._serialize_data(data) if data is not None else None
        response = await self._transport.request(
            method,
            path,
            json_body=body,
            params=self._serialize_data(params) if params else None,
            headers=headers,
            timeout=timeout,
            idempotent=idempotent,
            **kwargs,
        )
        return unwrap_payload(response) if unwrap else response

    # HTTP method helpers using enums
    async def _get(self, path: str, params: dict[str, Any] | None = None, **kwargs) -> Any:
        """Make GET request."""
        return await self._request(HTTPMethod.GET, path, params=params, **kwargs)

    async def _post(self, path: str, data: Any = None, **kwargs) -> Any:
        """Make POST request."""
        return await self._request(HTTPMethod.POST, path, data=data, **kwargs)

    async def _put(self, path: str, data: Any = None, **kwargs) -> Any:
        """Make PUT request."""
        return await self._request(HTTPMethod.PUT, path, data=data, **kwargs)

    async def _patch(self, path: str, data: Any = None, **kwargs) -> Any:
        """Make PATCH request."""
        return await self._request(HTTPMethod.PATCH, path, data=data, **kwargs)

    async def _delete(self, path: str, data: Any = None, **kwargs) -> Any:
        """Make DELETE request."""
        return await self._request(HTTPMethod.DELETE, path, data=data, **kwargs)

    def __repr__(self):
        return f"{type(self).__name__}(endpoint='{self.ENDPOINT}')"

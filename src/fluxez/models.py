"""Typed results returned by the facade.

Domain sub-clients return backend payloads as decoded JSON; only the facade's
own operations have fixed result shapes.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True)
class ConnectionTestResult:
    """Outcome of ``FluxezClient.test_connection``."""

    connected: bool
    latency_ms: float
    version: str | None = None
    status: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "connected": self.connected,
            "latency_ms": self.latency_ms,
            "version": self.version,
            "status": self.status,
            "error": self.error,
        }


@dataclass
class QueryResult:
    """Result of ``raw``, ``natural`` and ``execute`` passthrough queries."""

    rows: list[Any] = field(default_factory=list)
    row_count: int = 0
    fields: list[str] | None = None
    command: str | None = None
    raw: Any = None

    @classmethod
    def from_payload(cls, payload: Any) -> "QueryResult":
        """Build from the backend payload, tolerating camelCase and bare lists."""
        if isinstance(payload, list):
            return cls(rows=payload, row_count=len(payload), raw=payload)
        if not isinstance(payload, dict):
            return cls(raw=payload)

        rows = payload.get("rows")
        if rows is None:
            rows = payload.get("data") if isinstance(payload.get("data"), list) else []
        row_count = payload.get("rowCount", payload.get("row_count"))
        if row_count is None:
            row_count = len(rows)
        return cls(
            rows=rows,
            row_count=row_count,
            fields=payload.get("fields"),
            command=payload.get("command"),
            raw=payload,
        )

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self):
        return iter(self.rows)


@dataclass(frozen=True)
class ConfigSnapshot:
    """Read-only view of a client's configuration and tenant context.

    The API key is only exposed masked.
    """

    api_key: str
    api_url: str
    timeout: int
    retries: int
    retry_delay: int
    debug: bool
    headers: MappingProxyType
    organization_id: str | None = None
    project_id: str | None = None
    app_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "api_key": self.api_key,
            "api_url": self.api_url,
            "timeout": self.timeout,
            "retries": self.retries,
            "retry_delay": self.retry_delay,
            "debug": self.debug,
            "headers": dict(self.headers),
            "organization_id": self.organization_id,
            "project_id": self.project_id,
            "app_id": self.app_id,
        }

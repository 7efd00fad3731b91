"""Cache API Client

Key/value, counter and set operations against the hosted cache. Every
operation is a ``POST /cache/operation`` carrying the operation name;
invalidation goes through ``DELETE /cache/invalidate``.

Failures propagate as SDK errors. A miss is ``None``, never an error.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from .base_client import BaseAPIClient

logger = logging.getLogger(__name__)

DEFAULT_TTL = 3600


def _field(result: Any, name: str, default: Any = None) -> Any:
    if isinstance(result, dict):
        value = result.get(name)
        return default if value is None else value
    return default


class CacheClient(BaseAPIClient):
    """Client for the cache API.

    Args:
        transport: Shared HTTP transport
        prefix: Optional namespace prepended to every key as ``prefix:key``
        default_ttl: TTL in seconds used when a write does not give one
    """

    ENDPOINT = "/cache"

    def __init__(self, transport, prefix: str = "", default_ttl: int = DEFAULT_TTL):
        super().__init__(transport)
        self.prefix = prefix
        self.default_ttl = default_ttl

    def with_prefix(self, prefix: str) -> "CacheClient":
        """Cache client namespaced under ``prefix``, sharing this transport."""
        return CacheClient(self._transport, prefix=prefix, default_ttl=self.default_ttl)

    def build_key(self, key: str) -> str:
        self._require(key, "key")
        return f"{self.prefix}:{key}" if self.prefix else key

    async def _operation(
        self, operation: str, idempotent: bool = False, **payload: Any
    ) -> Any:
        logger.debug(f"Cache {operation} {payload.get('key', '')}")
        return await self._post(
            self._build_url("operation"),
            {"operation": operation, **payload},
            idempotent=idempotent,
        )

    async def _invalidate(self, **payload: Any) -> Any:
        return await self._delete(self._build_url("invalidate"), payload)

    async def get(self, key: str) -> Any:
        result = await self._operation(
            "get", idempotent=True, key=self.build_key(key)
        )
        return _field(result, "value")

    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
        tags: list[str] | None = None,
    ) -> bool:
        """Store a value.

        Args:
            key: Cache key, prefixed when the client has a prefix
            value: JSON-serializable value
            ttl: Seconds to live; ``0`` stores without expiry
            tags: Tags usable with ``invalidate_by_tags``
        """
        result = await self._operation(
            "set",
            idempotent=True,
            key=self.build_key(key),
            value=value,
            ttl=self.default_ttl if ttl is None else ttl,
            **self._compact({"tags": tags}),
        )
        return _field(result, "success", True) is True

    async def delete(self, key: str) -> bool:
        result = await self._invalidate(keys=[self.build_key(key)])
        return _field(result, "deleted", 0) > 0

    async def delete_many(self, keys: list[str]) -> int:
        self._require(keys, "keys")
        result = await self._invalidate(keys=[self.build_key(key) for key in keys])
        return _field(result, "deleted", 0)

    async def exists(self, key: str) -> bool:
        result = await self._operation(
            "exists", idempotent=True, key=self.build_key(key)
        )
        return _field(result, "exists", False) is True

    async def ttl(self, key: str) -> int:
        """Remaining TTL in seconds, ``-1`` when the key has none."""
        result = await self._operation(
            "ttl", idempotent=True, key=self.build_key(key)
        )
        return _field(result, "ttl", -1)

    async def expire(self, key: str, seconds: int) -> bool:
        result = await self._operation(
            "expire", idempotent=True, key=self.build_key(key), ttl=seconds
        )
        return _field(result, "success", True) is True

    async def mget(self, keys: list[str]) -> list[Any]:
        self._require(keys, "keys")
        result = await self._operation(
            "mget", idempotent=True, keys=[self.build_key(key) for key in keys]
        )
        return _field(result, "values", [])

    async def mset(self, items: dict[str, Any], ttl: int | None = None) -> bool:
        self._require(items, "items")
        result = await self._operation(
            "mset",
            idempotent=True,
            items=[{"key": self.build_key(k), "value": v} for k, v in items.items()],
            ttl=self.default_ttl if ttl is None else ttl,
        )
        return _field(result, "success", True) is True

    async def incr(self, key: str, by: int = 1) -> int:
        result = await self._operation("incr", key=self.build_key(key), value=by)
        return _field(result, "value", 0)

    async def decr(self, key: str, by: int = 1) -> int:
        result = await self._operation("decr", key=self.build_key(key), value=by)
        return _field(result, "value", 0)

    async def sadd(self, key: str, members: list[Any]) -> int:
        """Add members to a set; returns how many were new."""
        self._require(members, "members")
        result = await self._operation("sadd", key=self.build_key(key), members=members)
        return _field(result, "added", 0)

    async def smembers(self, key: str) -> list[Any]:
        result = await self._operation(
            "smembers", idempotent=True, key=self.build_key(key)
        )
        return _field(result, "members", [])

    async def invalidate_by_pattern(self, pattern: str) -> int:
        result = await self._invalidate(pattern=self.build_key(pattern))
        return _field(result, "deleted", 0)

    async def invalidate_by_tags(self, tags: list[str]) -> int:
        self._require(tags, "tags")
        result = await self._invalidate(tags=tags)
        return _field(result, "deleted", 0)

    async def clear(self) -> bool:
        """Drop every key of the tenant."""
        logger.info("Clearing tenant cache")
        result = await self._invalidate(all=True)
        return _field(result, "success", True) is True

    async def stats(self) -> dict[str, Any]:
        return await self._get(self._build_url("stats"))

    async def remember(
        self,
        key: str,
        ttl: int | None,
        factory: Callable[[], Any] | Callable[[], Awaitable[Any]],
    ) -> Any:
        """Return the cached value, computing and storing it on a miss.

        ``factory`` may be a plain or an async callable.
        """
        cached = await self.get(key)
        if cached is not None:
            return cached

        value = factory()
        if inspect.isawaitable(value):
            value = await value
        await self.set(key, value, ttl=ttl)
        return value

    async def forever(self, key: str, value: Any) -> bool:
        return await self.set(key, value, ttl=0)

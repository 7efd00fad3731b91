"""Realtime API Client

Presence bookkeeping over plain HTTP. The client joins and leaves presence
channels and reads who is present; it does not open a socket, so message
subscriptions and publishing belong to a dedicated realtime connection.
"""

import logging
from typing import Any

from .base_client import BaseAPIClient

logger = logging.getLogger(__name__)


class RealtimeClient(BaseAPIClient):
    """Client for the realtime presence API."""

    ENDPOINT = "/realtime"

    async def join_presence(
        self,
        channel: str,
        user_id: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Mark ``user_id`` as present on ``channel``."""
        self._require(channel, "channel")
        self._require(user_id, "user_id")
        await self._post(
            self._build_url("presence", "join"),
            {
                "channel": channel,
                "presence_data": self._compact({"user_id": user_id, "metadata": metadata}),
            },
            idempotent=True,
        )
        logger.debug(f"Joined presence channel {channel}")

    async def leave_presence(self, channel: str) -> None:
        self._require(channel, "channel")
        await self._post(
            self._build_url("presence", "leave"), {"channel": channel}, idempotent=True
        )
        logger.debug(f"Left presence channel {channel}")

    async def get_presence(self, channel: str) -> list[dict[str, Any]]:
        """Members present on ``channel``: ``user_id``, ``metadata``, ``joined_at``."""
        self._require(channel, "channel")
        result = await self._get(self._build_url("presence", channel))
        return result or []

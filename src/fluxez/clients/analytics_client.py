"""Analytics API Client

Handles:
- Event tracking (single and batch)
- Queries, time series, funnels, cohorts and metrics
- Realtime, user, session and page analytics
- Conversion, retention and exports

Events are sent immediately; there is no client-side buffering.
"""

import logging
import uuid
from datetime import UTC, datetime
from typing import Any

from .base_client import BaseAPIClient

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("json", "csv")


class AnalyticsClient(BaseAPIClient):
    """Client for the analytics API.

    Events without a ``sessionId`` get one generated per client instance.
    """

    ENDPOINT = "/analytics"

    def __init__(self, transport):
        super().__init__(transport)
        self.session_id = f"session_{uuid.uuid4().hex}"

    def _prepare_event(self, event: dict[str, Any]) -> dict[str, Any]:
        self._require(event.get("event") or event.get("name"), "event")
        return {
            **event,
            "timestamp": event.get("timestamp") or datetime.now(UTC).isoformat(),
            "sessionId": event.get("sessionId") or self.session_id,
        }

    async def track(
        self,
        event: str,
        properties: dict[str, Any] | None = None,
        user_id: str | None = None,
        **fields: Any,
    ) -> None:
        """Track a single event.

        Args:
            event: Event name
            properties: Event properties
            user_id: Acting user
            **fields: Other event fields (``sessionId``, ``timestamp``...)
        """
        await self.track_batch(
            [
                self._compact(
                    {"event": event, "properties": properties, "userId": user_id, **fields}
                )
            ]
        )

    async def track_batch(self, events: list[dict[str, Any]]) -> None:
        self._require(events, "events")
        prepared = [self._prepare_event(event) for event in events]
        logger.debug(f"Tracking {len(prepared)} analytics event(s)")
        await self._post(self._build_url("track"), {"events": prepared})

    async def query(self, query: dict[str, Any]) -> dict[str, Any]:
        self._require(query, "query")
        return await self._post(self._build_url("query"), query, idempotent=True)

    async def time_series(
        self,
        metric: str,
        time_range: dict[str, Any],
        interval: str,
        group_by: list[str] | None = None,
        filters: dict[str, Any] | None = None,
        aggregation: str = "count",
    ) -> dict[str, Any]:
        """Metric values bucketed by ``interval`` over ``time_range``.

        Returns:
            ``{"data": [{"timestamp", "value", "dimensions"}], "metadata": ...}``
        """
        self._require(metric, "metric")
        self._require(time_range, "time_range")
        self._require(interval, "interval")
        result = await self.query(
            self._compact(
                {
                    "metric": metric,
                    "timeRange": time_range,
                    "interval": interval,
                    "groupBy": group_by,
                    "filters": filters,
                    "aggregation": aggregation,
                }
            )
        )
        result = result if isinstance(result, dict) else {"data": result}
        return {
            "data": [
                {
                    "timestamp": item.get("timestamp"),
                    "value": item.get("value"),
                    "dimensions": item.get("dimensions"),
                }
                for item in result.get("data") or []
            ],
            "metadata": result.get("metadata"),
        }

    async def funnel(self, query: dict[str, Any]) -> dict[str, Any]:
        """Funnel conversion for ordered ``steps`` within a time range."""
        self._require(query, "query")
        return await self._post(self._build_url("funnel"), query, idempotent=True)

    async def cohort(self, query: dict[str, Any]) -> dict[str, Any]:
        self._require(query, "query")
        return await self._post(self._build_url("cohort"), query, idempotent=True)

    async def metric(self, query: dict[str, Any]) -> dict[str, Any]:
        self._require(query, "query")
        return await self._post(self._build_url("metric"), query, idempotent=True)

    async def realtime(self, metric: str) -> dict[str, Any]:
        self._require(metric, "metric")
        return await self._get(self._build_url("realtime", metric))

    async def user_analytics(self, user_id: str, **options: Any) -> dict[str, Any]:
        self._require(user_id, "user_id")
        return await self._get(self._build_url("user", user_id), options)

    async def session_analytics(self, session_id: str) -> dict[str, Any]:
        self._require(session_id, "session_id")
        return await self._get(self._build_url("session", session_id))

    async def page_analytics(self, page: str, **options: Any) -> dict[str, Any]:
        self._require(page, "page")
        return await self._post(
            self._build_url("page"), {"page": page, **options}, idempotent=True
        )

    async def conversion_rate(
        self, start_event: str, end_event: str, **options: Any
    ) -> float:
        self._require(start_event, "start_event")
        self._require(end_event, "end_event")
        result = await self._post(
            self._build_url("conversion"),
            {"startEvent": start_event, "endEvent": end_event, **options},
            idempotent=True,
        )
        return result.get("rate", 0.0) if isinstance(result, dict) else result

    async def retention(self, **options: Any) -> dict[str, Any]:
        return await self._post(self._build_url("retention"), options, idempotent=True)

    async def export(self, query: dict[str, Any], format: str = "json") -> Any:
        """Export query results. CSV exports are returned as bytes."""
        self._require_choice(format, EXPORT_FORMATS, "format")
        path = self._build_url("export")
        body = {**query, "format": format}
        if format == "csv":
            return await self._post(
                path, body, idempotent=True, raw_response=True, unwrap=False
            )
        return await self._post(path, body, idempotent=True)

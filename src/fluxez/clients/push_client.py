"""Push Notification API Client

Handles:
- Sends to users, devices, segments and tags
- Scheduled sends and campaigns
- Device registration and tagging
- Templates, statistics and test sends

Delivery fan-out happens on the backend. A target is a mapping with one of
``user_id``, ``device_token``, ``segments`` or ``tags``.
"""

import logging
from typing import Any

from .base_client import BaseAPIClient

logger = logging.getLogger(__name__)


class PushClient(BaseAPIClient):
    """Client for the push notification API."""

    ENDPOINT = "/push"

    async def send(
        self,
        targets: list[dict[str, Any]],
        notification: dict[str, Any],
        **options: Any,
    ) -> dict[str, Any]:
        """Send a notification.

        Args:
            targets: Recipients, each a mapping with ``user_id``,
                ``device_token``, ``segments`` or ``tags``
            notification: ``title``, ``body`` and optional ``data``,
                ``badge``, ``sound``...
            **options: ``priority``, ``ttl``, ``collapse_key``...

        Returns:
            ``{"success", "message_id", "sent_count", "failed_count"}``
        """
        self._require(targets, "targets")
        self._require(notification, "notification")
        logger.debug(f"Sending push notification to {len(targets)} target(s)")
        return await self._post(
            self._build_url("send"),
            {"targets": targets, "notification": notification, **options},
        )

    async def send_to_user(
        self, user_id: str, notification: dict[str, Any]
    ) -> dict[str, Any]:
        self._require(user_id, "user_id")
        return await self.send([{"user_id": user_id}], notification)

    async def send_to_device(
        self, device_token: str, notification: dict[str, Any]
    ) -> dict[str, Any]:
        self._require(device_token, "device_token")
        return await self.send([{"device_token": device_token}], notification)

    async def send_to_segment(
        self, segments: list[str], notification: dict[str, Any]
    ) -> dict[str, Any]:
        self._require(segments, "segments")
        return await self.send([{"segments": segments}], notification)

    async def send_to_tags(
        self, tags: list[str], notification: dict[str, Any]
    ) -> dict[str, Any]:
        self._require(tags, "tags")
        return await self.send([{"tags": tags}], notification)

    async def schedule(
        self,
        targets: list[dict[str, Any]],
        notification: dict[str, Any],
        schedule: Any,
        **options: Any,
    ) -> dict[str, Any]:
        """Schedule a send. ``schedule`` is a datetime or an ISO-8601 string.

        Returns:
            ``{"success", "campaign_id", "scheduled_at"}``
        """
        self._require(targets, "targets")
        self._require(notification, "notification")
        self._require(schedule, "schedule")
        return await self._post(
            self._build_url("schedule"),
            {
                "targets": targets,
                "notification": notification,
                "schedule": schedule,
                **options,
            },
        )

    # Campaigns
    async def create_campaign(
        self,
        name: str,
        notification: dict[str, Any],
        targets: list[dict[str, Any]],
        scheduled_at: Any = None,
    ) -> dict[str, Any]:
        self._require(name, "name")
        self._require(notification, "notification")
        self._require(targets, "targets")
        return await self._post(
            self._build_url("campaigns"),
            self._compact(
                {
                    "name": name,
                    "notification": notification,
                    "targets": targets,
                    "scheduled_at": scheduled_at,
                }
            ),
        )

    async def get_campaigns(
        self,
        status: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> Any:
        return await self._get(
            self._build_url("campaigns"),
            {"status": status, "limit": limit, "offset": offset},
        )

    async def get_campaign(self, campaign_id: str) -> dict[str, Any]:
        self._require(campaign_id, "campaign_id")
        return await self._get(self._build_url("campaigns", campaign_id))

    async def cancel_campaign(self, campaign_id: str) -> dict[str, Any]:
        self._require(campaign_id, "campaign_id")
        return await self._post(
            self._build_url("campaigns", campaign_id, "cancel"), idempotent=True
        )

    # Devices
    async def register_device(
        self,
        device_token: str,
        platform: str,
        user_id: str | None = None,
        tags: list[str] | None = None,
        **attributes: Any,
    ) -> dict[str, Any]:
        """Register a device token for ``ios``, ``android`` or ``web``.

        Returns:
            ``{"success", "device_id"}``
        """
        self._require(device_token, "device_token")
        self._require(platform, "platform")
        return await self._post(
            self._build_url("devices"),
            self._compact(
                {
                    "device_token": device_token,
                    "platform": platform,
                    "user_id": user_id,
                    "tags": tags,
                    **attributes,
                }
            ),
            idempotent=True,
        )

    async def unregister_device(self, device_token: str) -> dict[str, Any]:
        self._require(device_token, "device_token")
        return await self._delete(self._build_url("devices", device_token))

    async def update_device_tags(
        self, device_token: str, tags: list[str]
    ) -> dict[str, Any]:
        self._require(device_token, "device_token")
        return await self._put(
            self._build_url("devices", device_token, "tags"), {"tags": tags}
        )

    # Templates
    async def create_template(self, template: dict[str, Any]) -> dict[str, Any]:
        """Create a template with ``name``, ``title``, ``body`` and ``variables``."""
        self._require(template, "template")
        return await self._post(self._build_url("templates"), template)

    async def get_templates(self) -> Any:
        return await self._get(self._build_url("templates"))

    async def send_with_template(
        self,
        template_id: str,
        targets: list[dict[str, Any]],
        variables: dict[str, str] | None = None,
        schedule: Any = None,
    ) -> dict[str, Any]:
        self._require(template_id, "template_id")
        self._require(targets, "targets")
        return await self._post(
            self._build_url("templates", template_id, "send"),
            self._compact(
                {"targets": targets, "variables": variables, "schedule": schedule}
            ),
        )

    async def get_stats(
        self,
        start_date: str | None = None,
        end_date: str | None = None,
        campaign_id: str | None = None,
    ) -> dict[str, Any]:
        return await self._get(
            self._build_url("stats"),
            {"start_date": start_date, "end_date": end_date, "campaign_id": campaign_id},
        )

    async def test(
        self, notification: dict[str, Any], test_devices: list[str]
    ) -> dict[str, Any]:
        """Send a notification to test devices only.

        Returns:
            ``{"success", "results": [{"device_token", "success", "error"}]}``
        """
        self._require(notification, "notification")
        self._require(test_devices, "test_devices")
        return await self._post(
            self._build_url("test"),
            {"notification": notification, "test_devices": test_devices},
        )

"""Video API Client

Room-based video conferencing. Media never flows through the SDK; the client
manages rooms, issues access tokens for the browser or mobile SDKs and
controls recordings and egress.

Handles:
- Rooms and access tokens
- Participants
- Recordings and egress streams
- Session history and statistics
"""

import logging
from typing import Any

from .base_client import BaseAPIClient

logger = logging.getLogger(__name__)

EGRESS_TYPES = ("rtmp", "hls", "file")


def _items(result: Any, name: str) -> list[Any]:
    if isinstance(result, dict):
        return result.get(name) or []
    return result or []


class VideoClient(BaseAPIClient):
    """Client for the video API."""

    ENDPOINT = "/video"

    # Rooms
    async def create_room(self, name: str, **options: Any) -> dict[str, Any]:
        """Create a room.

        Args:
            name: Room name
            **options: ``maxParticipants``, ``recordingEnabled``,
                ``videoQuality``, ``roomType``, ``expiresAt``...
        """
        self._require(name, "name")
        logger.debug(f"Creating video room {name}")
        return await self._post(self._build_url("rooms"), {"name": name, **options})

    async def get_room(self, room_id: str) -> dict[str, Any]:
        self._require(room_id, "room_id")
        return await self._get(self._build_url("rooms", room_id))

    async def list_rooms(self, **filters: Any) -> list[dict[str, Any]]:
        result = await self._get(self._build_url("rooms"), filters)
        return _items(result, "rooms")

    async def update_room(self, room_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        self._require(room_id, "room_id")
        self._require(updates, "updates")
        return await self._put(self._build_url("rooms", room_id), updates)

    async def delete_room(self, room_id: str) -> None:
        self._require(room_id, "room_id")
        await self._delete(self._build_url("rooms", room_id))

    async def end_room(self, room_id: str) -> None:
        """Disconnect every participant and close the room."""
        self._require(room_id, "room_id")
        await self._post(self._build_url("rooms", room_id, "end"), idempotent=True)

    async def generate_token(
        self, room_id: str, identity: str, **options: Any
    ) -> dict[str, Any]:
        """Access token for a participant joining ``room_id``.

        Args:
            room_id: Room to join
            identity: Participant identity shown to others
            **options: ``name``, ``ttl``, ``canPublish``, ``canSubscribe``...

        Returns:
            ``{"token", "expiresAt", ...}``
        """
        self._require(room_id, "room_id")
        self._require(identity, "identity")
        return await self._post(
            self._build_url("rooms", room_id, "tokens"), {"identity": identity, **options}
        )

    # Participants
    async def list_participants(self, room_id: str) -> list[dict[str, Any]]:
        self._require(room_id, "room_id")
        result = await self._get(self._build_url("rooms", room_id, "participants"))
        return _items(result, "participants")

    async def get_participant(self, room_id: str, participant_id: str) -> dict[str, Any]:
        self._require(room_id, "room_id")
        self._require(participant_id, "participant_id")
        return await self._get(
            self._build_url("rooms", room_id, "participants", participant_id)
        )

    async def remove_participant(self, room_id: str, participant_id: str) -> None:
        self._require(room_id, "room_id")
        self._require(participant_id, "participant_id")
        await self._delete(self._build_url("rooms", room_id, "participants", participant_id))

    async def update_participant_metadata(
        self, room_id: str, participant_id: str, metadata: dict[str, Any]
    ) -> dict[str, Any]:
        self._require(room_id, "room_id")
        self._require(participant_id, "participant_id")
        return await self._patch(
            self._build_url("rooms", room_id, "participants", participant_id),
            {"metadata": metadata},
        )

    # Recordings
    async def start_recording(self, room_id: str, **config: Any) -> dict[str, Any]:
        self._require(room_id, "room_id")
        return await self._post(self._build_url("rooms", room_id, "recording"), config)

    async def stop_recording(self, recording_id: str) -> None:
        self._require(recording_id, "recording_id")
        await self._post(
            self._build_url("recordings", recording_id, "stop"), idempotent=True
        )

    async def get_recording(self, recording_id: str) -> dict[str, Any]:
        self._require(recording_id, "recording_id")
        return await self._get(self._build_url("recordings", recording_id))

    async def list_recordings(self, room_id: str) -> list[dict[str, Any]]:
        self._require(room_id, "room_id")
        result = await self._get(self._build_url("rooms", room_id, "recordings"))
        return _items(result, "recordings")

    async def delete_recording(self, recording_id: str) -> None:
        self._require(recording_id, "recording_id")
        await self._delete(self._build_url("recordings", recording_id))

    # Sessions
    async def get_sessions(self, **filters: Any) -> list[dict[str, Any]]:
        result = await self._get(self._build_url("sessions"), filters)
        return _items(result, "sessions")

    async def get_session_stats(self, session_id: str) -> dict[str, Any]:
        self._require(session_id, "session_id")
        return await self._get(self._build_url("sessions", session_id, "stats"))

    # Egress
    async def start_egress(
        self, room_id: str, type: str, **options: Any
    ) -> dict[str, Any]:
        """Stream or record a room to an external output.

        Args:
            room_id: Room to capture
            type: ``rtmp``, ``hls`` or ``file``
            **options: ``rtmpUrl``, ``rtmpKey``, ``hlsSegmentDuration``...
        """
        self._require(room_id, "room_id")
        self._require_choice(type, EGRESS_TYPES, "type")
        return await self._post(
            self._build_url("egress"), {"roomId": room_id, "type": type, **options}
        )

    async def stop_egress(self, egress_id: str) -> None:
        self._require(egress_id, "egress_id")
        await self._post(self._build_url("egress", egress_id, "stop"), idempotent=True)

    async def get_egress(self, egress_id: str) -> dict[str, Any]:
        self._require(egress_id, "egress_id")
        return await self._get(self._build_url("egress", egress_id))

"""Queue API Client

Message queue operations. Visibility timeouts, FIFO ordering and
deduplication are enforced by the backend; the client only shapes requests.

Handles:
- Sending and receiving messages (single and batch)
- Queue lifecycle and attributes
- Visibility changes and statistics
"""

import json
import logging
from typing import Any

from .base_client import BaseAPIClient

logger = logging.getLogger(__name__)


def _encode_body(message: Any) -> str:
    return message if isinstance(message, str) else json.dumps(message, default=str)


def _decode_body(body: Any) -> Any:
    if not isinstance(body, str):
        return body
    try:
        return json.loads(body)
    except (TypeError, ValueError):
        return body


_ATTRIBUTE_NAMES = {
    "delay_seconds": "DelaySeconds",
    "max_receive_count": "MaxReceiveCount",
    "message_retention_period": "MessageRetentionPeriod",
    "receive_message_wait_time_seconds": "ReceiveMessageWaitTimeSeconds",
    "visibility_timeout_seconds": "VisibilityTimeout",
}


def _attribute_map(**values: int | None) -> dict[str, str]:
    """Queue attributes in the backend's string-valued attribute format."""
    return {
        _ATTRIBUTE_NAMES[name]: str(value)
        for name, value in values.items()
        if value is not None
    }


class QueueClient(BaseAPIClient):
    """Client for the queue API."""

    ENDPOINT = "/queue"

    async def send(
        self,
        queue_url: str,
        message: Any,
        delay_seconds: int | None = None,
        message_attributes: dict[str, Any] | None = None,
        message_group_id: str | None = None,
        message_deduplication_id: str | None = None,
    ) -> dict[str, Any]:
        """Send a message to a queue.

        Non-string messages are JSON encoded. A deduplication id makes the
        call safe to retry, since the backend drops duplicates.

        Returns:
            Message descriptor with ``messageId`` and ``md5OfBody``
        """
        self._require(queue_url, "queue_url")
        self._require(message, "message")
        logger.debug(f"Sending message to queue {queue_url}")
        return await self._post(
            self._build_url("send"),
            self._compact(
                {
                    "queueUrl": queue_url,
                    "messageBody": _encode_body(message),
                    "delaySeconds": delay_seconds,
                    "messageAttributes": message_attributes,
                    "messageGroupId": message_group_id,
                    "messageDeduplicationId": message_deduplication_id,
                }
            ),
            idempotent=message_deduplication_id is not None,
        )

    async def send_batch(
        self, queue_url: str, messages: list[dict[str, Any]]
    ) -> dict[str, Any]:
        """Send several messages in one call.

        Each entry holds ``body`` and optionally ``id``, ``delay_seconds``,
        ``message_attributes``, ``message_group_id`` and
        ``message_deduplication_id``.

        Returns:
            ``{"successful": [...], "failed": [...]}``
        """
        self._require(queue_url, "queue_url")
        self._require(messages, "messages")
        entries = []
        for index, msg in enumerate(messages):
            if "body" not in msg:
                self._require(None, f"messages[{index}].body")
            entries.append(
                self._compact(
                    {
                        "id": msg.get("id") or f"msg-{index}",
                        "messageBody": _encode_body(msg["body"]),
                        "delaySeconds": msg.get("delay_seconds"),
                        "messageAttributes": msg.get("message_attributes"),
                        "messageGroupId": msg.get("message_group_id"),
                        "messageDeduplicationId": msg.get("message_deduplication_id"),
                    }
                )
            )
        return await self._post(
            self._build_url("send-batch"), {"queueUrl": queue_url, "entries": entries}
        )

    async def receive(
        self,
        queue_url: str,
        max_messages: int = 1,
        wait_time_seconds: int = 0,
        visibility_timeout_seconds: int | None = None,
        message_attribute_names: list[str] | None = None,
        receive_request_attempt_id: str | None = None,
    ) -> list[dict[str, Any]]:
        """Receive messages; JSON bodies are decoded."""
        self._require(queue_url, "queue_url")
        messages = await self._post(
            self._build_url("receive"),
            self._compact(
                {
                    "queueUrl": queue_url,
                    "maxMessages": max_messages,
                    "waitTimeSeconds": wait_time_seconds,
                    "visibilityTimeoutSeconds": visibility_timeout_seconds,
                    "messageAttributeNames": message_attribute_names or ["All"],
                    "receiveRequestAttemptId": receive_request_attempt_id,
                }
            ),
        )
        messages = messages or []
        logger.debug(f"Received {len(messages)} messages from {queue_url}")
        return [{**msg, "body": _decode_body(msg.get("body"))} for msg in messages]

    async def delete(self, queue_url: str, receipt_handle: str) -> None:
        self._require(queue_url, "queue_url")
        self._require(receipt_handle, "receipt_handle")
        await self._post(
            self._build_url("delete"),
            {"queueUrl": queue_url, "receiptHandle": receipt_handle},
            idempotent=True,
        )

    async def delete_batch(
        self, queue_url: str, entries: list[dict[str, str]]
    ) -> dict[str, Any]:
        """Delete several messages. Entries hold ``id`` and ``receipt_handle``."""
        self._require(queue_url, "queue_url")
        self._require(entries, "entries")
        return await self._post(
            self._build_url("delete-batch"),
            {
                "queueUrl": queue_url,
                "entries": [
                    {"id": e["id"], "receiptHandle": e["receipt_handle"]} for e in entries
                ],
            },
            idempotent=True,
        )

    async def create_queue(
        self,
        queue_name: str,
        fifo_queue: bool | None = None,
        delay_seconds: int | None = None,
        max_receive_count: int | None = None,
        message_retention_period: int | None = None,
        receive_message_wait_time_seconds: int | None = None,
        visibility_timeout_seconds: int | None = None,
        content_based_deduplication: bool | None = None,
        kms_key_id: str | None = None,
        tags: dict[str, str] | None = None,
        dead_letter_queue: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Create a queue.

        Returns:
            ``{"queueUrl": ...}``
        """
        self._require(queue_name, "queue_name")
        attributes = _attribute_map(
            delay_seconds=delay_seconds,
            max_receive_count=max_receive_count,
            message_retention_period=message_retention_period,
            receive_message_wait_time_seconds=receive_message_wait_time_seconds,
            visibility_timeout_seconds=visibility_timeout_seconds,
        )
        if fifo_queue is not None:
            attributes["FifoQueue"] = str(fifo_queue).lower()
        if content_based_deduplication is not None:
            attributes["ContentBasedDeduplication"] = str(
                content_based_deduplication
            ).lower()
        if kms_key_id:
            attributes["KmsMasterKeyId"] = kms_key_id

        return await self._post(
            self._build_url("create"),
            self._compact(
                {
                    "queueName": queue_name,
                    "attributes": attributes,
                    "tags": tags,
                    "deadLetterQueue": dead_letter_queue,
                }
            ),
        )

    async def delete_queue(self, queue_url: str) -> None:
        self._require(queue_url, "queue_url")
        await self._delete(self._build_url("delete-queue"), {"queueUrl": queue_url})

    async def list_queues(self, prefix: str | None = None) -> list[str]:
        result = await self._get(self._build_url("list"), {"prefix": prefix})
        if isinstance(result, dict):
            return result.get("queueUrls", [])
        return result or []

    async def get_queue_url(self, queue_name: str) -> str:
        self._require(queue_name, "queue_name")
        result = await self._get(self._build_url("url", queue_name))
        return result.get("queueUrl") if isinstance(result, dict) else result

    async def get_queue_attributes(self, queue_url: str) -> dict[str, Any]:
        self._require(queue_url, "queue_url")
        return await self._get(self._build_url("attributes"), {"queueUrl": queue_url})

    async def set_queue_attributes(
        self,
        queue_url: str,
        delay_seconds: int | None = None,
        max_receive_count: int | None = None,
        message_retention_period: int | None = None,
        receive_message_wait_time_seconds: int | None = None,
        visibility_timeout_seconds: int | None = None,
    ) -> None:
        self._require(queue_url, "queue_url")
        attributes = _attribute_map(
            delay_seconds=delay_seconds,
            max_receive_count=max_receive_count,
            message_retention_period=message_retention_period,
            receive_message_wait_time_seconds=receive_message_wait_time_seconds,
            visibility_timeout_seconds=visibility_timeout_seconds,
        )
        self._require(attributes, "attributes")
        await self._put(
            self._build_url("attributes"),
            {"queueUrl": queue_url, "attributes": attributes},
        )

    async def purge_queue(self, queue_url: str) -> None:
        self._require(queue_url, "queue_url")
        await self._post(
            self._build_url("purge"), {"queueUrl": queue_url}, idempotent=True
        )

    async def change_message_visibility(
        self, queue_url: str, receipt_handle: str, visibility_timeout: int
    ) -> None:
        self._require(queue_url, "queue_url")
        self._require(receipt_handle, "receipt_handle")
        await self._post(
            self._build_url("change-visibility"),
            {
                "queueUrl": queue_url,
                "receiptHandle": receipt_handle,
                "visibilityTimeout": visibility_timeout,
            },
            idempotent=True,
        )

    async def get_queue_stats(self, queue_url: str) -> dict[str, Any]:
        """Message counts (available, in flight, delayed) and age of the oldest message."""
        self._require(queue_url, "queue_url")
        return await self._get(self._build_url("stats"), {"queueUrl": queue_url})

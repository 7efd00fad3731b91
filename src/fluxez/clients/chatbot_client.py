"""Chatbot API Client

Handles:
- Chatbot configurations
- Conversations, messages, history and feedback
- Knowledge-base documents and URL ingestion
- Training data and usage statistics
"""

import json
import logging
from typing import Any

from ..enums import HTTPMethod
from .base_client import BaseAPIClient

logger = logging.getLogger(__name__)

DOCUMENT_TYPES = ("file", "url", "text")


def _page(limit, offset, sort_by, sort_order) -> dict[str, Any]:
    return {"limit": limit, "offset": offset, "sortBy": sort_by, "sortOrder": sort_order}


class ChatbotClient(BaseAPIClient):
    """Client for the chatbot API."""

    ENDPOINT = "/chatbot"

    # Configurations
    async def get_configs(
        self,
        limit: int | None = None,
        offset: int | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> Any:
        return await self._get(
            self._build_url("configs"), _page(limit, offset, sort_by, sort_order)
        )

    async def get_config(self, config_id: str | None = None) -> dict[str, Any]:
        """Get a configuration, or the tenant's default one when no id is given."""
        if config_id:
            return await self._get(self._build_url("config", config_id))
        return await self._get(self._build_url("config"))

    async def create_config(self, config: dict[str, Any]) -> dict[str, Any]:
        self._require(config, "config")
        return await self._post(self._build_url("config"), config)

    async def update_config(self, config_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        self._require(config_id, "config_id")
        self._require(updates, "updates")
        return await self._put(self._build_url("config", config_id), updates)

    async def delete_config(self, config_id: str) -> Any:
        self._require(config_id, "config_id")
        return await self._delete(self._build_url("config", config_id))

    # Conversations
    async def get_conversations(
        self,
        limit: int | None = None,
        offset: int | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
        **filters: Any,
    ) -> Any:
        return await self._get(
            self._build_url("conversations"),
            {**_page(limit, offset, sort_by, sort_order), **filters},
        )

    async def create_conversation(self, **data: Any) -> dict[str, Any]:
        return await self._post(self._build_url("conversation"), data)

    async def send_message(
        self,
        message: str,
        session_id: str | None = None,
        user_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send a message and get the chatbot's reply.

        Returns:
            Reply with ``response``, ``conversationId`` and ``sources``
        """
        self._require(message, "message")
        return await self._post(
            self._build_url("send"),
            self._compact(
                {
                    "message": message,
                    "sessionId": session_id,
                    "userId": user_id,
                    "metadata": metadata,
                }
            ),
        )

    async def get_messages(
        self,
        conversation_id: str,
        limit: int | None = None,
        offset: int | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> Any:
        self._require(conversation_id, "conversation_id")
        return await self._get(
            self._build_url("conversation", conversation_id, "messages"),
            _page(limit, offset, sort_by, sort_order),
        )

    async def send_message_in_conversation(
        self, conversation_id: str, message: str, metadata: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        self._require(conversation_id, "conversation_id")
        self._require(message, "message")
        return await self._post(
            self._build_url("conversation", conversation_id, "message"),
            self._compact({"message": message, "metadata": metadata}),
        )

    async def get_history(self, conversation_id: str) -> Any:
        self._require(conversation_id, "conversation_id")
        return await self._get(self._build_url("conversation", conversation_id, "history"))

    async def provide_feedback(
        self, message_id: str, rating: int | str, comment: str | None = None, **extra: Any
    ) -> dict[str, Any]:
        self._require(message_id, "message_id")
        return await self._post(
            self._build_url("feedback"),
            self._compact(
                {"messageId": message_id, "rating": rating, "comment": comment, **extra}
            ),
        )

    # Knowledge base
    async def upload_document(
        self,
        type: str,
        content: bytes | str | None = None,
        url: str | None = None,
        file_name: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Add a document to the knowledge base.

        Args:
            type: ``file`` (``content`` bytes), ``url`` or ``text`` (``content`` str)
            content: File bytes or text body
            url: Page to ingest for ``url`` documents
            file_name: Name reported for ``file`` documents
            metadata: Arbitrary document metadata
        """
        self._require_choice(type, DOCUMENT_TYPES, "type")
        form_data: dict[str, Any] = {"type": type}
        files = None
        if type == "file":
            self._require(content, "content")
            data = content.encode() if isinstance(content, str) else content
            files = {"file": (file_name or "document", data)}
        elif type == "url":
            form_data["url"] = self._require(url, "url")
        else:
            form_data["content"] = self._require(content, "content")
        if metadata:
            form_data["metadata"] = json.dumps(metadata)

        logger.debug(f"Uploading {type} document to chatbot knowledge base")
        return await self._request(
            HTTPMethod.POST, self._build_url("document"), files=files, form_data=form_data
        )

    async def get_documents(
        self,
        limit: int | None = None,
        offset: int | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> Any:
        return await self._get(
            self._build_url("documents"), _page(limit, offset, sort_by, sort_order)
        )

    async def delete_document(self, document_id: str) -> Any:
        self._require(document_id, "document_id")
        return await self._delete(self._build_url("document", document_id))

    async def process_urls(self, urls: list[str]) -> dict[str, Any]:
        self._require(urls, "urls")
        return await self._post(self._build_url("process-urls"), {"urls": urls})

    async def get_training_data(self) -> Any:
        return await self._get(self._build_url("training-data"))

    async def get_stats(
        self,
        start_date: str | None = None,
        end_date: str | None = None,
        user_id: str | None = None,
    ) -> dict[str, Any]:
        return await self._get(
            self._build_url("stats"),
            {"startDate": start_date, "endDate": end_date, "userId": user_id},
        )

"""Email API Client

Handles:
- Single, templated, bulk and delayed sends
- Address verification
- Template management
- Delivery status and statistics
"""

import html
import logging
import re
from typing import Any

from .base_client import BaseAPIClient

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")


def html_to_text(markup: str) -> str:
    """Plain-text alternative of an HTML body."""
    text = _TAG_RE.sub("", markup)
    text = html.unescape(text).replace("\xa0", " ")
    return _WHITESPACE_RE.sub(" ", text).strip()


def _recipients(to: str | list[str]) -> list[str]:
    return [to] if isinstance(to, str) else list(to)


class EmailClient(BaseAPIClient):
    """Client for the email API.

    Extra keyword arguments of the send methods (``cc``, ``bcc``,
    ``replyTo``, ``attachments``, ``tags``...) are forwarded unchanged.
    """

    ENDPOINT = "/email"

    async def send(
        self,
        to: str | list[str],
        subject: str,
        html_body: str,
        text: str | None = None,
        from_email: str | None = None,
        **options: Any,
    ) -> dict[str, Any]:
        """Send a single email.

        The plain-text part is derived from ``html_body`` unless ``text`` is
        given.

        Returns:
            ``{"messageId": ..., "status": ...}``
        """
        self._require(to, "to")
        self._require(subject, "subject")
        self._require(html_body, "html_body")
        logger.debug(f"Sending email '{subject}' to {len(_recipients(to))} recipient(s)")
        return await self._post(
            self._build_url("send"),
            self._compact(
                {
                    "to": _recipients(to),
                    "subject": subject,
                    "html": html_body,
                    "text": text if text is not None else html_to_text(html_body),
                    "from": from_email,
                    **options,
                }
            ),
        )

    async def send_templated(
        self,
        template_name: str,
        to: str | list[str],
        template_data: dict[str, Any] | None = None,
        **options: Any,
    ) -> dict[str, Any]:
        self._require(template_name, "template_name")
        self._require(to, "to")
        return await self._post(
            self._build_url("send-templated"),
            {
                "templateName": template_name,
                "to": _recipients(to),
                "templateData": template_data or {},
                **options,
            },
        )

    async def send_bulk(
        self,
        recipients: list[dict[str, Any]],
        template_name: str,
        common_data: dict[str, Any] | None = None,
        **options: Any,
    ) -> dict[str, Any]:
        """Send one template to many recipients.

        Args:
            recipients: Entries with ``email`` and optional per-recipient
                ``templateData``
            template_name: Template to render
            common_data: Data shared by every recipient

        Returns:
            Bulk job descriptor
        """
        self._require(recipients, "recipients")
        self._require(template_name, "template_name")
        logger.debug(f"Sending bulk email '{template_name}' to {len(recipients)} recipients")
        return await self._post(
            self._build_url("send-bulk"),
            {
                "templateName": template_name,
                "recipients": recipients,
                "commonData": common_data or {},
                **options,
            },
        )

    async def queue_email(
        self, email: dict[str, Any], delay: int | None = None
    ) -> dict[str, Any]:
        """Queue an email for later delivery. ``delay`` is in seconds."""
        self._require(email, "email")
        return await self._post(
            self._build_url("queue"), {**email, **self._compact({"delay": delay})}
        )

    async def verify_email(self, email: str) -> dict[str, Any]:
        self._require(email, "email")
        return await self._post(self._build_url("verify"), {"email": email}, idempotent=True)

    # Templates
    async def create_template(
        self,
        name: str,
        subject: str,
        html_template: str,
        text_template: str | None = None,
        **options: Any,
    ) -> dict[str, Any]:
        self._require(name, "name")
        self._require(subject, "subject")
        self._require(html_template, "html_template")
        return await self._post(
            self._build_url("templates"),
            {
                "name": name,
                "subject": subject,
                "htmlTemplate": html_template,
                "textTemplate": text_template or html_to_text(html_template),
                **options,
            },
        )

    async def update_template(
        self, template_id: str, updates: dict[str, Any]
    ) -> dict[str, Any]:
        self._require(template_id, "template_id")
        self._require(updates, "updates")
        return await self._put(self._build_url("templates", template_id), updates)

    async def get_template(self, template_id: str) -> dict[str, Any]:
        self._require(template_id, "template_id")
        return await self._get(self._build_url("templates", template_id))

    async def list_templates(self, **filters: Any) -> Any:
        return await self._get(self._build_url("templates"), filters)

    async def delete_template(self, template_id: str) -> None:
        self._require(template_id, "template_id")
        await self._delete(self._build_url("templates", template_id))

    # Delivery
    async def get_delivery_status(self, message_id: str) -> dict[str, Any]:
        self._require(message_id, "message_id")
        return await self._get(self._build_url("status", message_id))

    async def get_stats(self, **filters: Any) -> dict[str, Any]:
        """Delivery statistics. Filters such as ``startDate``/``endDate`` pass through."""
        return await self._get(self._build_url("stats"), filters)

    async def get_queued_email_status(self, email_id: str) -> dict[str, Any]:
        self._require(email_id, "email_id")
        return await self._get(self._build_url("queue", email_id))

    async def cancel_queued_email(self, email_id: str) -> None:
        self._require(email_id, "email_id")
        await self._delete(self._build_url("queue", email_id))

    async def send_test(
        self,
        template_name: str,
        test_email: str,
        template_data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        self._require(template_name, "template_name")
        self._require(test_email, "test_email")
        return await self._post(
            self._build_url("test"),
            {
                "templateName": template_name,
                "testEmail": test_email,
                "templateData": template_data or {},
            },
        )

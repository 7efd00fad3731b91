"""Payment API Client for Tenant Billing

Wraps the tenant payment configuration and the per-project payment surface
(``/payment/{organization}/{project}/...``).

Handles:
- Payment provider configuration
- Price ids and subscriptions
- Invoices, checkout sessions and customers
- Payment intents, charges and refunds
- Webhook verification and handling

Organization, project and app ids default to the owning client's tenant
context. The configuration endpoints take them as headers, the per-project
surface as path segments.

Calls that create money movements accept an ``idempotency_key``; without one
they are never retried after a timeout or a 5xx, since the backend may have
processed them.
"""

import logging
from typing import Any

from ..constants import HeaderName
from ..exceptions import ValidationError
from .base_client import BaseAPIClient

logger = logging.getLogger(__name__)


class PaymentClient(BaseAPIClient):
    """Client for the tenant payment API."""

    ENDPOINT = "/payment"
    CONFIG_ENDPOINT = "/tenant-payment/config"

    def _tenant_path(
        self,
        *parts: Any,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> str:
        """Build ``/payment/{org}/{project}/...`` using the context as fallback."""
        context = self.context
        organization_id = organization_id or context.organization_id
        project_id = project_id or context.project_id
        if not organization_id:
            raise ValidationError(
                "organization_id is required; pass it or call set_organization()",
                field="organization_id",
            )
        if not project_id:
            raise ValidationError(
                "project_id is required; pass it or call set_project()",
                field="project_id",
            )
        return self._build_url(organization_id, project_id, *parts)

    def _config_headers(
        self,
        organization_id: str | None,
        project_id: str | None,
        app_id: str | None,
    ) -> dict[str, str]:
        """Tenant headers for the payment configuration endpoints.

        Explicit ids win over the context. The configuration is keyed by
        organization, optionally narrowed to a project and an app.
        """
        context = self.context
        organization_id = organization_id or context.organization_id
        if not organization_id:
            raise ValidationError(
                "organization_id is required; pass it or call set_organization()",
                field="organization_id",
            )
        headers = {HeaderName.ORGANIZATION_ID: organization_id}
        project_id = project_id or context.project_id
        if project_id:
            headers[HeaderName.PROJECT_ID] = project_id
        app_id = app_id or context.app_id
        if app_id:
            headers[HeaderName.APP_ID] = app_id
        return headers

    async def _create(
        self, path: str, data: Any, idempotency_key: str | None = None
    ) -> Any:
        headers = {HeaderName.IDEMPOTENCY_KEY: idempotency_key} if idempotency_key else None
        return await self._post(path, data, headers=headers)

    # Tenant payment configuration
    async def create_config(
        self,
        config: dict[str, Any],
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
        app_id: str | None = None,
    ) -> dict[str, Any]:
        """Store the payment provider configuration (keys, webhook secret...).

        Args:
            config: Provider keys, ``priceIds``, ``isActive``...
            organization_id: Owning organization, defaults to the context
            project_id: Narrow the configuration to a project
            app_id: Narrow the configuration to an app
        """
        self._require(config, "config")
        headers = self._config_headers(organization_id, project_id, app_id)
        logger.debug(
            f"Creating payment configuration for {headers[HeaderName.ORGANIZATION_ID]}"
        )
        return await self._post(self.CONFIG_ENDPOINT, config, headers=headers)

    async def get_config(
        self,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
        app_id: str | None = None,
    ) -> dict[str, Any]:
        headers = self._config_headers(organization_id, project_id, app_id)
        return await self._get(self.CONFIG_ENDPOINT, headers=headers)

    async def update_config(
        self,
        updates: dict[str, Any],
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
        app_id: str | None = None,
    ) -> dict[str, Any]:
        self._require(updates, "updates")
        headers = self._config_headers(organization_id, project_id, app_id)
        return await self._put(self.CONFIG_ENDPOINT, updates, headers=headers)

    async def delete_config(
        self,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
        app_id: str | None = None,
    ) -> None:
        headers = self._config_headers(organization_id, project_id, app_id)
        await self._delete(self.CONFIG_ENDPOINT, headers=headers)

    # Price ids
    async def add_price_id(
        self,
        price_id: str,
        metadata: dict[str, Any] | None = None,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> dict[str, Any]:
        self._require(price_id, "price_id")
        path = self._tenant_path(
            "prices", organization_id=organization_id, project_id=project_id
        )
        return await self._post(path, {"priceId": price_id, **(metadata or {})})

    async def get_price_ids(
        self, *, organization_id: str | None = None, project_id: str | None = None
    ) -> list[dict[str, Any]]:
        path = self._tenant_path(
            "prices", organization_id=organization_id, project_id=project_id
        )
        return await self._get(path)

    async def remove_price_id(
        self,
        price_config_id: str,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> None:
        self._require(price_config_id, "price_config_id")
        path = self._tenant_path(
            "prices", price_config_id, organization_id=organization_id, project_id=project_id
        )
        await self._delete(path)

    # Subscriptions
    async def create_subscription(
        self,
        data: dict[str, Any],
        idempotency_key: str | None = None,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> dict[str, Any]:
        """Create a subscription.

        Args:
            data: ``customerId``, ``priceId`` and optional ``trialPeriodDays``,
                ``metadata``...
            idempotency_key: Makes the call safe to retry
        """
        self._require(data, "data")
        path = self._tenant_path(
            "subscriptions", organization_id=organization_id, project_id=project_id
        )
        return await self._create(path, data, idempotency_key)

    async def get_subscription(
        self,
        subscription_id: str | None = None,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> Any:
        """Get one subscription, or the tenant's subscriptions when no id is given."""
        parts = ("subscriptions", subscription_id) if subscription_id else ("subscriptions",)
        path = self._tenant_path(
            *parts, organization_id=organization_id, project_id=project_id
        )
        return await self._get(path)

    async def update_subscription(
        self,
        subscription_id: str,
        updates: dict[str, Any],
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> dict[str, Any]:
        self._require(subscription_id, "subscription_id")
        self._require(updates, "updates")
        path = self._tenant_path(
            "subscriptions",
            subscription_id,
            organization_id=organization_id,
            project_id=project_id,
        )
        return await self._put(path, updates)

    async def cancel_subscription(
        self,
        subscription_id: str,
        cancel_at_period_end: bool = True,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> dict[str, Any]:
        self._require(subscription_id, "subscription_id")
        path = self._tenant_path(
            "subscriptions",
            subscription_id,
            "cancel",
            organization_id=organization_id,
            project_id=project_id,
        )
        return await self._post(
            path, {"cancelAtPeriodEnd": cancel_at_period_end}, idempotent=True
        )

    async def resume_subscription(
        self,
        subscription_id: str,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> dict[str, Any]:
        self._require(subscription_id, "subscription_id")
        path = self._tenant_path(
            "subscriptions",
            subscription_id,
            "resume",
            organization_id=organization_id,
            project_id=project_id,
        )
        return await self._post(path, idempotent=True)

    async def list_subscriptions(
        self,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
        **filters: Any,
    ) -> list[dict[str, Any]]:
        path = self._tenant_path(
            "subscriptions", organization_id=organization_id, project_id=project_id
        )
        return await self._get(path, filters)

    # Invoices
    async def get_invoices(
        self,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
        **filters: Any,
    ) -> list[dict[str, Any]]:
        path = self._tenant_path(
            "invoices", organization_id=organization_id, project_id=project_id
        )
        return await self._get(path, filters)

    async def get_invoice(
        self,
        invoice_id: str,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> dict[str, Any]:
        self._require(invoice_id, "invoice_id")
        path = self._tenant_path(
            "invoices", invoice_id, organization_id=organization_id, project_id=project_id
        )
        return await self._get(path)

    # Checkout
    async def create_checkout_session(
        self,
        data: dict[str, Any],
        idempotency_key: str | None = None,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> dict[str, Any]:
        """Create a hosted checkout session.

        Returns:
            Session descriptor with ``sessionId`` and ``url``
        """
        self._require(data, "data")
        path = self._tenant_path(
            "checkout", organization_id=organization_id, project_id=project_id
        )
        return await self._create(path, data, idempotency_key)

    async def get_checkout_session(
        self,
        session_id: str,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> dict[str, Any]:
        self._require(session_id, "session_id")
        path = self._tenant_path(
            "checkout", session_id, organization_id=organization_id, project_id=project_id
        )
        return await self._get(path)

    # Customers
    async def create_customer(
        self,
        data: dict[str, Any],
        idempotency_key: str | None = None,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> dict[str, Any]:
        self._require(data, "data")
        path = self._tenant_path(
            "customers", organization_id=organization_id, project_id=project_id
        )
        return await self._create(path, data, idempotency_key)

    async def get_customer(
        self,
        customer_id: str,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> dict[str, Any]:
        self._require(customer_id, "customer_id")
        path = self._tenant_path(
            "customers", customer_id, organization_id=organization_id, project_id=project_id
        )
        return await self._get(path)

    async def list_payment_methods(
        self,
        customer_id: str,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> list[dict[str, Any]]:
        self._require(customer_id, "customer_id")
        path = self._tenant_path(
            "customers",
            customer_id,
            "payment-methods",
            organization_id=organization_id,
            project_id=project_id,
        )
        return await self._get(path)

    # Payment intents
    async def create_payment_intent(
        self,
        data: dict[str, Any],
        idempotency_key: str | None = None,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> dict[str, Any]:
        """Create a payment intent.

        Args:
            data: ``amount`` (minor units), ``currency``, optional
                ``customerId``, ``metadata``...
            idempotency_key: Makes the call safe to retry
        """
        self._require(data, "data")
        path = self._tenant_path(
            "payment-intents", organization_id=organization_id, project_id=project_id
        )
        logger.debug(f"Creating payment intent at {path}")
        return await self._create(path, data, idempotency_key)

    async def get_payment_intent(
        self,
        payment_intent_id: str,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> dict[str, Any]:
        self._require(payment_intent_id, "payment_intent_id")
        path = self._tenant_path(
            "payment-intents",
            payment_intent_id,
            organization_id=organization_id,
            project_id=project_id,
        )
        return await self._get(path)

    async def update_payment_intent(
        self,
        payment_intent_id: str,
        updates: dict[str, Any],
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> dict[str, Any]:
        self._require(payment_intent_id, "payment_intent_id")
        self._require(updates, "updates")
        path = self._tenant_path(
            "payment-intents",
            payment_intent_id,
            organization_id=organization_id,
            project_id=project_id,
        )
        return await self._put(path, updates)

    async def _payment_intent_action(
        self,
        payment_intent_id: str,
        action: str,
        data: dict[str, Any] | None,
        idempotency_key: str | None,
        organization_id: str | None,
        project_id: str | None,
    ) -> dict[str, Any]:
        self._require(payment_intent_id, "payment_intent_id")
        path = self._tenant_path(
            "payment-intents",
            payment_intent_id,
            action,
            organization_id=organization_id,
            project_id=project_id,
        )
        return await self._create(path, data or {}, idempotency_key)

    async def confirm_payment_intent(
        self,
        payment_intent_id: str,
        data: dict[str, Any] | None = None,
        idempotency_key: str | None = None,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> dict[str, Any]:
        return await self._payment_intent_action(
            payment_intent_id, "confirm", data, idempotency_key, organization_id, project_id
        )

    async def cancel_payment_intent(
        self,
        payment_intent_id: str,
        data: dict[str, Any] | None = None,
        idempotency_key: str | None = None,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> dict[str, Any]:
        return await self._payment_intent_action(
            payment_intent_id, "cancel", data, idempotency_key, organization_id, project_id
        )

    async def capture_payment_intent(
        self,
        payment_intent_id: str,
        data: dict[str, Any] | None = None,
        idempotency_key: str | None = None,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> dict[str, Any]:
        return await self._payment_intent_action(
            payment_intent_id, "capture", data, idempotency_key, organization_id, project_id
        )

    async def list_payment_intents(
        self,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
        **filters: Any,
    ) -> list[dict[str, Any]]:
        path = self._tenant_path(
            "payment-intents", organization_id=organization_id, project_id=project_id
        )
        return await self._get(path, filters)

    # Charges and refunds
    async def create_charge(
        self,
        data: dict[str, Any],
        idempotency_key: str | None = None,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> dict[str, Any]:
        self._require(data, "data")
        path = self._tenant_path(
            "charges", organization_id=organization_id, project_id=project_id
        )
        return await self._create(path, data, idempotency_key)

    async def get_charge(
        self,
        charge_id: str,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> dict[str, Any]:
        self._require(charge_id, "charge_id")
        path = self._tenant_path(
            "charges", charge_id, organization_id=organization_id, project_id=project_id
        )
        return await self._get(path)

    async def list_charges(
        self,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
        **filters: Any,
    ) -> list[dict[str, Any]]:
        path = self._tenant_path(
            "charges", organization_id=organization_id, project_id=project_id
        )
        return await self._get(path, filters)

    async def create_refund(
        self,
        data: dict[str, Any],
        idempotency_key: str | None = None,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> dict[str, Any]:
        self._require(data, "data")
        path = self._tenant_path(
            "refunds", organization_id=organization_id, project_id=project_id
        )
        return await self._create(path, data, idempotency_key)

    async def get_refund(
        self,
        refund_id: str,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> dict[str, Any]:
        self._require(refund_id, "refund_id")
        path = self._tenant_path(
            "refunds", refund_id, organization_id=organization_id, project_id=project_id
        )
        return await self._get(path)

    async def list_refunds(
        self,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
        **filters: Any,
    ) -> list[dict[str, Any]]:
        path = self._tenant_path(
            "refunds", organization_id=organization_id, project_id=project_id
        )
        return await self._get(path, filters)

    # Webhooks
    async def verify_webhook(
        self,
        payload: str,
        signature: str,
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> dict[str, Any]:
        """Verify a provider webhook signature on the backend."""
        self._require(payload, "payload")
        self._require(signature, "signature")
        path = self._tenant_path(
            "webhooks", "verify", organization_id=organization_id, project_id=project_id
        )
        return await self._post(
            path, {"payload": payload, "signature": signature}, idempotent=True
        )

    async def handle_webhook(
        self,
        event: dict[str, Any],
        *,
        organization_id: str | None = None,
        project_id: str | None = None,
    ) -> dict[str, Any]:
        self._require(event, "event")
        path = self._tenant_path(
            "webhooks", "handle", organization_id=organization_id, project_id=project_id
        )
        return await self._post(path, {"event": event})

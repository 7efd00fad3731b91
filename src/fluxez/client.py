"""Fluxez Client Facade

``FluxezClient`` is the single entry point of the SDK. It validates the
configuration, owns the tenant context and extra headers, exposes the SQL
passthroughs and hands out lazily created domain sub-clients.

Usage::

    async with FluxezClient("cgx_...") as client:
        client.set_organization("org_1")
        client.set_project("proj_1")
        await client.queue.send(queue_url, {"action": "PROCESS"})
"""

import logging
import time
import warnings
from dataclasses import replace
from types import MappingProxyType
from typing import Any, TypeVar

import httpx

from .clients import (
    AnalyticsClient,
    AuthClient,
    BaseAPIClient,
    BrainClient,
    CacheClient,
    ChatbotClient,
    DocumentsClient,
    EdgeFunctionsClient,
    EmailClient,
    PaymentClient,
    PushClient,
    QueueClient,
    RealtimeClient,
    SchemaClient,
    SearchClient,
    StorageClient,
    VideoClient,
    WorkflowClient,
)
from .config import ClientConfig
from .constants import KNOWN_API_KEY_PREFIXES, Endpoint
from .context import TenantContext
from .enums import HTTPMethod
from .exceptions import ConfigurationError, FluxezError, ValidationError
from .logging_utils import SDKLogger, mask_secret, redact_headers
from .models import ConfigSnapshot, ConnectionTestResult, QueryResult
from .transport import HTTPTransport, unwrap_payload

logger = logging.getLogger(__name__)

ClientT = TypeVar("ClientT", bound=BaseAPIClient)

_UNSET: Any = object()


class FluxezClient:
    """Async client for the Fluxez platform.

    Configuration and tenant context are read on every request, so setters
    called after a sub-client was first used still apply to its next call.
    Requests already in flight keep the headers they were built with;
    changing the context while requests are running is the caller's
    responsibility. Use ``with_context`` to serve several tenants
    concurrently from one process.

    Args:
        api_key: Fluxez API key (``cgx_``, ``service_`` or ``anon_`` prefixed)
        api_url: Base URL of the API
        timeout: Request timeout in milliseconds
        retries: Retry attempts for retryable failures
        retry_delay: Base backoff delay in milliseconds
        debug: Log every request to stdout
        headers: Extra headers sent with every request
        organization_id: Initial organization context
        project_id: Initial project context
        app_id: Initial app context
        transport: Custom ``httpx.AsyncBaseTransport`` (tests, proxies)

    Raises:
        ConfigurationError: Missing API key or invalid settings
    """

    def __init__(
        self,
        api_key: str,
        *,
        api_url: str | None = None,
        timeout: int | None = None,
        retries: int | None = None,
        retry_delay: int | None = None,
        debug: bool = False,
        headers: dict[str, str] | None = None,
        organization_id: str | None = None,
        project_id: str | None = None,
        app_id: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        options = {
            "api_url": api_url,
            "timeout": timeout,
            "retries": retries,
            "retry_delay": retry_delay,
            "headers": headers,
        }
        config = ClientConfig(
            api_key=api_key,
            debug=bool(debug),
            **{name: value for name, value in options.items() if value is not None},
        )
        _warn_on_unknown_key_prefix(config.api_key)

        self._setup(
            config,
            TenantContext(organization_id, project_id, app_id),
            transport=transport,
        )
        if config.debug:
            SDKLogger.enable_debug()

        logger.debug(
            f"Initialized FluxezClient for {config.api_url} "
            f"(key {config.masked_api_key}, timeout {config.timeout}ms, "
            f"retries {config.retries})"
        )

    def _setup(
        self,
        config: ClientConfig,
        context: TenantContext,
        transport: httpx.AsyncBaseTransport | None = None,
        parent: HTTPTransport | None = None,
    ) -> None:
        self._config = config
        self._context = context
        if parent is None:
            self._transport = HTTPTransport(
                lambda: self._config, lambda: self._context, transport=transport
            )
        else:
            self._transport = parent.derive(lambda: self._config, lambda: self._context)
        self._clients: dict[str, BaseAPIClient] = {}

    @classmethod
    def from_env(cls, **kwargs: Any) -> "FluxezClient":
        """Create a client from ``FLUXEZ_*`` environment variables.

        Keyword arguments are passed to the constructor and win over the
        environment.
        """
        config_fields = ("api_key", "api_url", "timeout", "retries", "retry_delay", "debug")
        config = ClientConfig.from_env(
            **{name: kwargs.pop(name) for name in config_fields if name in kwargs}
        )
        return cls(
            config.api_key,
            api_url=config.api_url,
            timeout=config.timeout,
            retries=config.retries,
            retry_delay=config.retry_delay,
            debug=config.debug,
            **kwargs,
        )

    # Configuration
    def update_config(
        self,
        *,
        api_url: str | None = None,
        timeout: int | None = None,
        retries: int | None = None,
        retry_delay: int | None = None,
        debug: bool | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Merge settings into the configuration.

        ``headers`` are merged key by key. Invalid values raise
        ``ConfigurationError`` and leave the configuration unchanged.
        """
        new_config = self._config.merged(
            api_url=api_url,
            timeout=timeout,
            retries=retries,
            retry_delay=retry_delay,
            debug=debug,
            headers=headers,
        )
        if new_config.debug != self._config.debug:
            if new_config.debug:
                SDKLogger.enable_debug()
            else:
                SDKLogger.disable_debug()
        self._config = new_config
        logger.debug(f"Configuration updated: {self._config.to_dict()}")

    def set_header(self, name: str, value: str) -> None:
        if not isinstance(name, str) or not name.strip():
            raise ConfigurationError("Header name must be a non-empty string")
        self._config = self._config.merged(headers={name: value})

    def remove_header(self, name: str) -> None:
        """Remove an extra header. Unknown names are ignored."""
        lowered = name.lower()
        headers = {k: v for k, v in self._config.headers.items() if k.lower() != lowered}
        if len(headers) != len(self._config.headers):
            self._config = replace(self._config, headers=headers)

    def get_config(self) -> ConfigSnapshot:
        """Read-only snapshot of the configuration and tenant context."""
        return ConfigSnapshot(
            api_key=self._config.masked_api_key,
            api_url=self._config.api_url,
            timeout=self._config.timeout,
            retries=self._config.retries,
            retry_delay=self._config.retry_delay,
            debug=self._config.debug,
            headers=MappingProxyType(redact_headers(self._config.headers)),
            organization_id=self._context.organization_id,
            project_id=self._context.project_id,
            app_id=self._context.app_id,
        )

    # Tenant context
    def set_organization(self, organization_id: str | None) -> None:
        self._context.organization_id = organization_id

    def set_project(self, project_id: str | None) -> None:
        self._context.project_id = project_id

    def set_app(self, app_id: str | None) -> None:
        self._context.app_id = app_id

    def clear_context(self) -> None:
        self._context.clear()

    def with_context(
        self,
        *,
        organization_id: str | None = _UNSET,
        project_id: str | None = _UNSET,
        app_id: str | None = _UNSET,
    ) -> "FluxezClient":
        """Derived client with its own tenant context.

        The derived client starts from a copy of this client's configuration
        and context, overridden by the given ids (``None`` clears one). It
        shares this client's connection pool and does not close it.
        """
        context = self._context.copy()
        if organization_id is not _UNSET:
            context.organization_id = organization_id
        if project_id is not _UNSET:
            context.project_id = project_id
        if app_id is not _UNSET:
            context.app_id = app_id

        derived = object.__new__(type(self))
        derived._setup(replace(self._config), context, parent=self._transport)
        return derived

    # Connectivity
    async def test_connection(self) -> ConnectionTestResult:
        """Check connectivity with ``GET /health``.

        Never raises for network or API failures; they are reported through
        ``connected=False`` and ``error``. No retries are attempted.
        """
        start = time.monotonic()
        try:
            body = unwrap_payload(
                await self._transport.request(HTTPMethod.GET, Endpoint.HEALTH, max_retries=0)
            )
        except FluxezError as e:
            latency_ms = (time.monotonic() - start) * 1000
            logger.warning(f"Connection test failed: {e}")
            return ConnectionTestResult(
                connected=False, latency_ms=latency_ms, error=str(e)
            )

        latency_ms = (time.monotonic() - start) * 1000
        body = body if isinstance(body, dict) else {}
        return ConnectionTestResult(
            connected=True,
            latency_ms=latency_ms,
            version=body.get("version"),
            status=body.get("status"),
        )

    async def health(self) -> Any:
        return unwrap_payload(await self._transport.request(HTTPMethod.GET, Endpoint.HEALTH))

    async def ping(self) -> Any:
        return unwrap_payload(await self._transport.request(HTTPMethod.GET, Endpoint.PING))

    # Query passthroughs
    async def raw(self, sql: str, params: list[Any] | None = None) -> QueryResult:
        """Run a SQL statement on the backend with positional ``params``."""
        _require_text(sql, "sql")
        return await self._query(Endpoint.QUERY, {"sql": sql, "params": params or []})

    async def natural(
        self, prompt: str, context: dict[str, Any] | None = None
    ) -> QueryResult:
        """Answer a natural-language question over the tenant's data."""
        _require_text(prompt, "prompt")
        body: dict[str, Any] = {"query": prompt}
        if context is not None:
            body["context"] = context
        return await self._query(Endpoint.NATURAL_QUERY, body)

    async def execute(self, sql: str, params: list[Any] | None = None) -> QueryResult:
        """Execute a data-modifying statement."""
        _require_text(sql, "sql")
        return await self._query(Endpoint.EXECUTE, {"sql": sql, "params": params or []})

    async def _query(self, path: str, body: dict[str, Any]) -> QueryResult:
        response = await self._transport.request(HTTPMethod.POST, path, json_body=body)
        return QueryResult.from_payload(unwrap_payload(response))

    # Domain sub-clients
    def _client(self, name: str, client_class: type[ClientT]) -> ClientT:
        client = self._clients.get(name)
        if client is None:
            client = client_class(self._transport)
            self._clients[name] = client
        return client

    @property
    def queue(self) -> QueueClient:
        return self._client("queue", QueueClient)

    @property
    def storage(self) -> StorageClient:
        return self._client("storage", StorageClient)

    @property
    def email(self) -> EmailClient:
        return self._client("email", EmailClient)

    @property
    def cache(self) -> CacheClient:
        return self._client("cache", CacheClient)

    @property
    def search(self) -> SearchClient:
        return self._client("search", SearchClient)

    @property
    def analytics(self) -> AnalyticsClient:
        return self._client("analytics", AnalyticsClient)

    @property
    def payment(self) -> PaymentClient:
        return self._client("payment", PaymentClient)

    @property
    def brain(self) -> BrainClient:
        return self._client("brain", BrainClient)

    @property
    def ai(self) -> BrainClient:
        """Alias of ``brain``."""
        return self.brain

    @property
    def workflow(self) -> WorkflowClient:
        return self._client("workflow", WorkflowClient)

    @property
    def auth(self) -> AuthClient:
        return self._client("auth", AuthClient)

    @property
    def schema(self) -> SchemaClient:
        return self._client("schema", SchemaClient)

    @property
    def chatbot(self) -> ChatbotClient:
        return self._client("chatbot", ChatbotClient)

    @property
    def realtime(self) -> RealtimeClient:
        return self._client("realtime", RealtimeClient)

    @property
    def push(self) -> PushClient:
        return self._client("push", PushClient)

    @property
    def video(self) -> VideoClient:
        return self._client("video", VideoClient)

    @property
    def documents(self) -> DocumentsClient:
        return self._client("documents", DocumentsClient)

    @property
    def edge_functions(self) -> EdgeFunctionsClient:
        return self._client("edge_functions", EdgeFunctionsClient)

    # Resource management
    async def aclose(self) -> None:
        """Close pooled connections. Derived clients leave the shared pool open."""
        await self._transport.aclose()

    async def __aenter__(self) -> "FluxezClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def __repr__(self):
        return (
            f"FluxezClient(api_url='{self._config.api_url}', "
            f"api_key='{self._config.masked_api_key}')"
        )


def _warn_on_unknown_key_prefix(api_key: str) -> None:
    key = api_key[7:] if api_key.lower().startswith("bearer ") else api_key
    if key.startswith(KNOWN_API_KEY_PREFIXES):
        return
    message = (
        f"API key {mask_secret(key)} does not start with a known prefix "
        f"({', '.join(KNOWN_API_KEY_PREFIXES)}); requests may be rejected"
    )
    logger.warning(message)
    warnings.warn(message, UserWarning, stacklevel=3)


def _require_text(value: Any, name: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} must be a non-empty string", field=name)

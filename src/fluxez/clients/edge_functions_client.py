"""Edge Functions API Client

Serverless functions deployed and run by the platform.

Handles:
- Function CRUD, deployment and rollback
- Synchronous and asynchronous execution
- Executions, logs and statistics
- Environment variables, status, webhooks and schedules
"""

import logging
from typing import Any

from ..exceptions import ApiError
from .base_client import BaseAPIClient

logger = logging.getLogger(__name__)

RUNTIMES = ("nodejs", "python", "deno", "wasm")
FUNCTION_STATUSES = ("active", "inactive")
EXECUTION_FAILED = "EXECUTION_FAILED"


class EdgeFunctionsClient(BaseAPIClient):
    """Client for the edge functions API."""

    ENDPOINT = "/edge-functions"

    async def create(
        self, name: str, code: str, runtime: str, **options: Any
    ) -> dict[str, Any]:
        """Create a function.

        Args:
            name: Function name
            code: Source code
            runtime: ``nodejs``, ``python``, ``deno`` or ``wasm``
            **options: ``description``, ``environment_variables``,
                ``memory_limit``, ``timeout``, ``region``, ``triggers``
        """
        self._require(name, "name")
        self._require(code, "code")
        self._require_choice(runtime, RUNTIMES, "runtime")
        logger.debug(f"Creating edge function {name} ({runtime})")
        return await self._post(
            self._build_url(),
            {"name": name, "code": code, "runtime": runtime, **options},
        )

    async def get(self, function_id: str) -> dict[str, Any]:
        self._require(function_id, "function_id")
        return await self._get(self._build_url(function_id))

    async def update(self, function_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        self._require(function_id, "function_id")
        self._require(updates, "updates")
        return await self._put(self._build_url(function_id), updates)

    async def delete(self, function_id: str) -> dict[str, Any]:
        self._require(function_id, "function_id")
        return await self._delete(self._build_url(function_id))

    async def deploy(self, function_id: str) -> dict[str, Any]:
        self._require(function_id, "function_id")
        logger.info(f"Deploying edge function {function_id}")
        return await self._post(self._build_url(function_id, "deploy"))

    async def rollback(self, function_id: str, deployment_id: str) -> dict[str, Any]:
        self._require(function_id, "function_id")
        self._require(deployment_id, "deployment_id")
        logger.info(f"Rolling back edge function {function_id} to {deployment_id}")
        return await self._post(
            self._build_url(function_id, "rollback"), {"deployment_id": deployment_id}
        )

    async def get_deployments(self, function_id: str) -> Any:
        self._require(function_id, "function_id")
        return await self._get(self._build_url(function_id, "deployments"))

    # Execution
    async def execute(
        self,
        function_id: str,
        input: Any = None,
        timeout: int | None = None,
        run_async: bool | None = None,
    ) -> dict[str, Any]:
        """Run a function.

        Args:
            function_id: Function to run
            input: Payload handed to the function
            timeout: Server-side execution budget in milliseconds
            run_async: Return immediately with an execution id

        Returns:
            Execution with ``id``, ``status``, ``output``, ``duration`` and ``logs``
        """
        self._require(function_id, "function_id")
        return await self._post(
            self._build_url(function_id, "execute"),
            self._compact({"input": input, "timeout": timeout, "async": run_async}),
        )

    async def execute_sync(
        self, function_id: str, input: Any = None, timeout: int | None = None
    ) -> dict[str, Any]:
        """Run a function and wait for its output.

        Returns:
            ``{"output", "duration", "logs"}``

        Raises:
            ApiError: If the execution finished with status ``failed``
        """
        execution = await self.execute(function_id, input, timeout, run_async=False)
        if execution.get("status") == "failed":
            raise ApiError(
                execution.get("error") or "Edge function execution failed",
                code=EXECUTION_FAILED,
                response_body=execution,
            )
        return {
            "output": execution.get("output"),
            "duration": execution.get("duration"),
            "logs": execution.get("logs"),
        }

    async def execute_async(self, function_id: str, input: Any = None) -> dict[str, Any]:
        """Start a function and return ``{"executionId": ...}`` right away."""
        execution = await self.execute(function_id, input, run_async=True)
        return {"executionId": execution.get("id")}

    async def get_execution(self, execution_id: str) -> dict[str, Any]:
        self._require(execution_id, "execution_id")
        return await self._get(self._build_url("executions", execution_id))

    async def get_executions(self, function_id: str, **filters: Any) -> dict[str, Any]:
        """Execution history. Filters: ``status``, ``limit``, ``offset``, dates."""
        self._require(function_id, "function_id")
        return await self._get(self._build_url(function_id, "executions"), filters)

    async def get_logs(self, function_id: str, **filters: Any) -> list[dict[str, Any]]:
        self._require(function_id, "function_id")
        result = await self._get(self._build_url(function_id, "logs"), filters)
        return result or []

    # Configuration
    async def update_environment(
        self, function_id: str, variables: dict[str, str]
    ) -> dict[str, Any]:
        self._require(function_id, "function_id")
        return await self._put(
            self._build_url(function_id, "environment"), {"variables": variables}
        )

    async def set_status(self, function_id: str, status: str) -> dict[str, Any]:
        self._require(function_id, "function_id")
        self._require_choice(status, FUNCTION_STATUSES, "status")
        return await self._put(self._build_url(function_id, "status"), {"status": status})

    async def get_stats(self, **filters: Any) -> dict[str, Any]:
        return await self._get(self._build_url("stats"), filters)

    # Triggers
    async def create_webhook(self, function_id: str, **config: Any) -> dict[str, Any]:
        """HTTP trigger. Config: ``path``, ``methods``, ``authentication``.

        Returns:
            ``{"webhook_url", "webhook_id"}``
        """
        self._require(function_id, "function_id")
        return await self._post(self._build_url(function_id, "webhooks"), config)

    async def create_schedule(
        self,
        function_id: str,
        cron: str,
        timezone: str | None = None,
        input: Any = None,
    ) -> dict[str, Any]:
        """Cron trigger.

        Returns:
            ``{"schedule_id", "next_run"}``
        """
        self._require(function_id, "function_id")
        self._require(cron, "cron")
        return await self._post(
            self._build_url(function_id, "schedules"),
            self._compact({"cron": cron, "timezone": timezone, "input": input}),
        )

    # Defined last: the name shadows the builtin inside the class body
    async def list(self, **filters: Any) -> Any:
        """List functions. Filters: ``status``, ``runtime``, ``limit``, ``offset``."""
        return await self._get(self._build_url(), filters)

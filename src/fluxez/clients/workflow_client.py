"""Workflow API Client for Workflow Operations

Handles:
- Workflow CRUD, validation and import/export
- Executions (start, inspect, cancel, retry)
- Prompt-based generation and templates
- Connector discovery and configuration
"""

import logging
from typing import Any

from .base_client import BaseAPIClient

logger = logging.getLogger(__name__)

# Server-side execution budget, ms
DEFAULT_EXECUTION_TIMEOUT = 300000
WORKFLOW_FORMATS = ("json", "yaml")


class WorkflowClient(BaseAPIClient):
    """Client for the workflow API."""

    ENDPOINT = "/workflow"

    async def create(self, definition: dict[str, Any]) -> dict[str, Any]:
        """Create a workflow from a definition with ``name``, ``nodes`` and ``edges``."""
        self._require(definition, "definition")
        return await self._post(self._build_url("create"), definition)

    async def execute(
        self,
        workflow_id: str,
        input: dict[str, Any] | None = None,
        context: dict[str, Any] | None = None,
        timeout: int = DEFAULT_EXECUTION_TIMEOUT,
        run_async: bool = False,
    ) -> dict[str, Any]:
        """Start a workflow execution.

        Args:
            workflow_id: Workflow to run
            input: Input payload handed to the first node
            context: Execution context variables
            timeout: Server-side execution budget in milliseconds
            run_async: Return immediately with an execution id instead of
                waiting for completion

        Returns:
            Execution descriptor
        """
        self._require(workflow_id, "workflow_id")
        logger.debug(f"Executing workflow {workflow_id} (async={run_async})")
        return await self._post(
            self._build_url(workflow_id, "execute"),
            {
                "workflowId": workflow_id,
                "input": input or {},
                "context": context or {},
                "timeout": timeout,
                "async": run_async,
            },
        )

    async def get(self, workflow_id: str) -> dict[str, Any]:
        self._require(workflow_id, "workflow_id")
        return await self._get(self._build_url(workflow_id))

    async def update(self, workflow_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        self._require(workflow_id, "workflow_id")
        self._require(updates, "updates")
        return await self._put(self._build_url(workflow_id), updates)

    async def delete(self, workflow_id: str) -> None:
        self._require(workflow_id, "workflow_id")
        await self._delete(self._build_url(workflow_id))

    async def get_executions(
        self,
        workflow_id: str,
        limit: int = 20,
        offset: int = 0,
        status: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> Any:
        self._require(workflow_id, "workflow_id")
        return await self._get(
            self._build_url(workflow_id, "executions"),
            {
                "limit": limit,
                "offset": offset,
                "status": status,
                "startDate": start_date,
                "endDate": end_date,
            },
        )

    async def generate_from_prompt(
        self,
        prompt: str,
        category: str | None = None,
        complexity: str = "medium",
        include_error_handling: bool = True,
        include_notifications: bool = False,
        connector_preferences: list[str] | None = None,
        timeout: int | None = None,
    ) -> dict[str, Any]:
        """Generate a workflow definition from a natural-language prompt.

        ``timeout`` is the per-call HTTP timeout in milliseconds.
        """
        self._require(prompt, "prompt")
        return await self._post(
            self._build_url("generate"),
            self._compact(
                {
                    "prompt": prompt,
                    "category": category,
                    "complexity": complexity,
                    "includeErrorHandling": include_error_handling,
                    "includeNotifications": include_notifications,
                    "connectorPreferences": connector_preferences or [],
                }
            ),
            timeout=timeout,
        )

    # Connectors
    async def list_connectors(
        self, category: str | None = None, search: str | None = None, limit: int = 50
    ) -> Any:
        return await self._get(
            self._build_url("connectors"),
            {"category": category, "search": search, "limit": limit},
        )

    async def get_connector(self, connector_type: str) -> dict[str, Any]:
        self._require(connector_type, "connector_type")
        return await self._get(self._build_url("connectors", connector_type))

    async def test_connector(
        self, connector_type: str, config: dict[str, Any]
    ) -> dict[str, Any]:
        self._require(connector_type, "connector_type")
        self._require(config, "config")
        return await self._post(
            self._build_url("connectors", "test"),
            {"connectorType": connector_type, "config": config},
            idempotent=True,
        )

    async def configure_connector(self, config: dict[str, Any]) -> dict[str, Any]:
        self._require(config, "config")
        return await self._post(self._build_url("connectors", "configure"), config)

    async def get_configured_connectors(self) -> Any:
        return await self._get(self._build_url("connectors", "configured"))

    async def validate(self, definition: dict[str, Any]) -> dict[str, Any]:
        """Validate a definition without saving it.

        Returns:
            ``{"valid": bool, "errors": [...], "warnings": [...]}``
        """
        self._require(definition, "definition")
        return await self._post(self._build_url("validate"), definition, idempotent=True)

    async def analyze_app(self, app_data: dict[str, Any]) -> dict[str, Any]:
        """Suggest workflows for an application description."""
        self._require(app_data, "app_data")
        return await self._post(self._build_url("analyze"), app_data, idempotent=True)

    # Templates
    async def get_templates(
        self, category: str | None = None, complexity: str | None = None, limit: int = 20
    ) -> Any:
        return await self._get(
            self._build_url("templates"),
            {"category": category, "complexity": complexity, "limit": limit},
        )

    async def create_from_template(
        self, template_id: str, **customizations: Any
    ) -> dict[str, Any]:
        self._require(template_id, "template_id")
        return await self._post(
            self._build_url("templates", "create"),
            {"templateId": template_id, **customizations},
        )

    async def get_stats(self) -> dict[str, Any]:
        return await self._get(self._build_url("stats"))

    # Executions
    async def get_execution(self, execution_id: str) -> dict[str, Any]:
        self._require(execution_id, "execution_id")
        return await self._get(self._build_url("executions", execution_id))

    async def cancel_execution(self, execution_id: str) -> None:
        self._require(execution_id, "execution_id")
        await self._post(
            self._build_url("executions", execution_id, "cancel"), idempotent=True
        )

    async def retry_execution(
        self,
        execution_id: str,
        from_step: str | None = None,
        new_input: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        self._require(execution_id, "execution_id")
        return await self._post(
            self._build_url("executions", execution_id, "retry"),
            self._compact({"fromStep": from_step, "newInput": new_input}),
        )

    # Import / export
    async def export(self, workflow_id: str, format: str = "json") -> Any:
        self._require(workflow_id, "workflow_id")
        self._require_choice(format, WORKFLOW_FORMATS, "format")
        return await self._get(self._build_url(workflow_id, "export"), {"format": format})

    async def import_workflow(
        self,
        workflow_data: Any,
        format: str = "json",
        name: str | None = None,
        overwrite: bool = False,
    ) -> dict[str, Any]:
        self._require(workflow_data, "workflow_data")
        self._require_choice(format, WORKFLOW_FORMATS, "format")
        return await self._post(
            self._build_url("import"),
            self._compact(
                {
                    "workflowData": workflow_data,
                    "format": format,
                    "name": name,
                    "overwrite": overwrite,
                }
            ),
        )

    # Defined last: the name shadows the builtin inside the class body
    async def list(
        self,
        status: str | None = None,
        category: str | None = None,
        limit: int = 20,
        offset: int = 0,
        search: str | None = None,
        sort_by: str = "updatedAt",
        sort_order: str = "desc",
    ) -> Any:
        """List workflows with filtering and sorting."""
        return await self._get(
            self._build_url("list"),
            {
                "status": status,
                "category": category,
                "limit": limit,
                "offset": offset,
                "search": search,
                "sortBy": sort_by,
                "sortOrder": sort_order,
            },
        )

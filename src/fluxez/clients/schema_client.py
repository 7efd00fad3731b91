"""Schema API Client for Table Management

Handles:
- Tables (create, update, rename, copy, delete)
- Columns, indexes, constraints and triggers
- Table analysis and index suggestions
- Migrations and schema comparison

DDL runs on the backend; this client only shapes requests.
"""

import logging
from typing import Any

from .base_client import BaseAPIClient

logger = logging.getLogger(__name__)


class SchemaClient(BaseAPIClient):
    """Client for the schema management API."""

    ENDPOINT = "/schema"

    def _table_url(self, table_name: str, *parts: Any) -> str:
        self._require(table_name, "table_name")
        return self._build_url("tables", table_name, *parts)

    # Tables
    async def create_table(self, table_schema: dict[str, Any]) -> dict[str, Any]:
        """Create a table.

        Args:
            table_schema: ``name``, ``columns`` and optional ``indexes``,
                ``constraints``...

        Returns:
            Created table, or a job descriptor for asynchronous creation
        """
        self._require(table_schema, "table_schema")
        logger.info(f"Creating table {table_schema.get('name')}")
        return await self._post(self._build_url("tables"), table_schema)

    async def update_table(self, table_name: str, updates: dict[str, Any]) -> dict[str, Any]:
        self._require(updates, "updates")
        return await self._patch(self._table_url(table_name), updates)

    async def get_table(self, table_name: str) -> dict[str, Any]:
        result = await self._get(self._table_url(table_name))
        # Older backends only nest columns under "schema"
        if isinstance(result, dict) and "columns" not in result:
            schema = result.get("schema")
            if isinstance(schema, dict) and schema.get("columns"):
                result["columns"] = schema["columns"]
        return result

    async def list_tables(self, **options: Any) -> Any:
        return await self._get(self._build_url("tables"), options)

    async def delete_table(self, table_name: str, cascade: bool | None = None) -> Any:
        logger.info(f"Deleting table {table_name}")
        return await self._delete(
            self._table_url(table_name), self._compact({"cascade": cascade})
        )

    async def rename_table(self, table_name: str, new_name: str) -> dict[str, Any]:
        self._require(new_name, "new_name")
        return await self._post(self._table_url(table_name, "rename"), {"new_name": new_name})

    async def copy_table(
        self, source_table: str, target_table: str, **options: Any
    ) -> dict[str, Any]:
        """Copy a table's structure, and its data when ``include_data`` is set."""
        self._require(target_table, "target_table")
        return await self._post(
            self._table_url(source_table, "copy"),
            {"target_table": target_table, **options},
        )

    async def get_table_creation_status(self, job_id: str) -> dict[str, Any]:
        self._require(job_id, "job_id")
        return await self._get(self._build_url("tables", "jobs", job_id))

    # Columns
    async def add_column(self, table_name: str, column: dict[str, Any]) -> dict[str, Any]:
        self._require(column, "column")
        return await self._post(self._table_url(table_name, "columns"), column)

    async def update_column(
        self, table_name: str, column_name: str, updates: dict[str, Any]
    ) -> dict[str, Any]:
        self._require(column_name, "column_name")
        self._require(updates, "updates")
        return await self._patch(self._table_url(table_name, "columns", column_name), updates)

    async def drop_column(self, table_name: str, column_name: str) -> Any:
        self._require(column_name, "column_name")
        return await self._delete(self._table_url(table_name, "columns", column_name))

    async def rename_column(
        self, table_name: str, column_name: str, new_name: str
    ) -> dict[str, Any]:
        self._require(column_name, "column_name")
        self._require(new_name, "new_name")
        return await self._post(
            self._table_url(table_name, "columns", column_name, "rename"),
            {"new_name": new_name},
        )

    # Indexes
    async def create_index(self, table_name: str, index: dict[str, Any]) -> dict[str, Any]:
        self._require(index, "index")
        return await self._post(self._table_url(table_name, "indexes"), index)

    async def drop_index(self, table_name: str, index_name: str) -> Any:
        self._require(index_name, "index_name")
        return await self._delete(self._table_url(table_name, "indexes", index_name))

    async def list_indexes(self, table_name: str) -> Any:
        return await self._get(self._table_url(table_name, "indexes"))

    # Constraints
    async def add_constraint(
        self, table_name: str, constraint: dict[str, Any]
    ) -> dict[str, Any]:
        self._require(constraint, "constraint")
        return await self._post(self._table_url(table_name, "constraints"), constraint)

    async def drop_constraint(self, table_name: str, constraint_name: str) -> Any:
        self._require(constraint_name, "constraint_name")
        return await self._delete(
            self._table_url(table_name, "constraints", constraint_name)
        )

    async def list_constraints(self, table_name: str) -> Any:
        return await self._get(self._table_url(table_name, "constraints"))

    # Triggers
    async def create_trigger(self, table_name: str, trigger: dict[str, Any]) -> dict[str, Any]:
        self._require(trigger, "trigger")
        return await self._post(self._table_url(table_name, "triggers"), trigger)

    async def update_trigger(
        self, table_name: str, trigger_name: str, updates: dict[str, Any]
    ) -> dict[str, Any]:
        self._require(trigger_name, "trigger_name")
        self._require(updates, "updates")
        return await self._patch(self._table_url(table_name, "triggers", trigger_name), updates)

    async def delete_trigger(self, table_name: str, trigger_name: str) -> Any:
        self._require(trigger_name, "trigger_name")
        return await self._delete(self._table_url(table_name, "triggers", trigger_name))

    async def enable_trigger(self, table_name: str, trigger_name: str) -> None:
        self._require(trigger_name, "trigger_name")
        await self._post(
            self._table_url(table_name, "triggers", trigger_name, "enable"), idempotent=True
        )

    async def disable_trigger(self, table_name: str, trigger_name: str) -> None:
        self._require(trigger_name, "trigger_name")
        await self._post(
            self._table_url(table_name, "triggers", trigger_name, "disable"), idempotent=True
        )

    async def list_triggers(self, table_name: str) -> Any:
        return await self._get(self._table_url(table_name, "triggers"))

    # Analysis
    async def analyze_table(self, table_name: str) -> dict[str, Any]:
        return await self._get(self._table_url(table_name, "analyze"))

    async def optimize_table(self, table_name: str, **options: Any) -> dict[str, Any]:
        return await self._post(self._table_url(table_name, "optimize"), options)

    async def suggest_indexes(self, table_name: str, **options: Any) -> Any:
        return await self._get(self._table_url(table_name, "suggest-indexes"), options)

    # Migrations
    async def create_migration(self, migration: dict[str, Any]) -> dict[str, Any]:
        """Register a migration with ``name``, ``up`` and ``down`` statements."""
        self._require(migration, "migration")
        return await self._post(self._build_url("migrations"), migration)

    async def run_migration(self, migration_id: str, **options: Any) -> dict[str, Any]:
        self._require(migration_id, "migration_id")
        logger.info(f"Running migration {migration_id}")
        return await self._post(self._build_url("migrations", migration_id, "run"), options)

    async def rollback_migration(self, migration_id: str) -> dict[str, Any]:
        self._require(migration_id, "migration_id")
        logger.info(f"Rolling back migration {migration_id}")
        return await self._post(self._build_url("migrations", migration_id, "rollback"))

    async def list_migrations(self) -> Any:
        return await self._get(self._build_url("migrations"))

    async def get_migration_status(self) -> dict[str, Any]:
        return await self._get(self._build_url("migrations", "status"))

    async def compare_schemas(self, source: Any, target: Any) -> dict[str, Any]:
        """Diff two schema definitions (or schema names) on the backend."""
        self._require(source, "source")
        self._require(target, "target")
        return await self._post(
            self._build_url("compare"), {"source": source, "target": target}, idempotent=True
        )

    async def generate_migration_from_diff(
        self, source: Any, target: Any, migration_name: str | None = None
    ) -> dict[str, Any]:
        self._require(source, "source")
        self._require(target, "target")
        return await self._post(
            self._build_url("generate-migration"),
            self._compact(
                {"source": source, "target": target, "migration_name": migration_name}
            ),
        )

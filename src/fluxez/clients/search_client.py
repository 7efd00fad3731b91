"""Search API Client

Full-text, vector and hybrid search plus index management. Query helpers
(``query``, ``multi_match``, ``term``, ``range``) only shape the request body
for ``POST /search``; ranking and matching happen on the backend.
"""

import logging
from typing import Any

from .base_client import BaseAPIClient

logger = logging.getLogger(__name__)

SEARCH_MODES = ("keyword", "semantic", "hybrid")
HIGHLIGHT_PRE_TAG = "<mark>"
HIGHLIGHT_POST_TAG = "</mark>"


def _highlight(fields: list[str] | None, highlight: bool | dict | None) -> dict | None:
    if highlight is True:
        return {
            "fields": {name: {} for name in fields or []},
            "preTags": [HIGHLIGHT_PRE_TAG],
            "postTags": [HIGHLIGHT_POST_TAG],
        }
    if isinstance(highlight, dict):
        return highlight
    return None


def _hits(result: Any) -> dict[str, Any]:
    result = result if isinstance(result, dict) else {}
    return {
        "hits": result.get("hits") or [],
        "total": result.get("total") or 0,
        "took": result.get("took"),
        "aggregations": result.get("aggregations"),
        "suggestions": result.get("suggestions"),
    }


class SearchClient(BaseAPIClient):
    """Client for the search API."""

    ENDPOINT = "/search"

    async def search(self, query: dict[str, Any]) -> dict[str, Any]:
        """Run a search request body as-is.

        Returns:
            ``{"hits", "total", "took", "aggregations", "suggestions"}``
        """
        self._require(query, "query")
        result = await self._post(self._build_url(), query, idempotent=True)
        return _hits(result)

    async def unified_search(
        self,
        table: str,
        query: str,
        mode: str = "hybrid",
        columns: list[str] | None = None,
        filters: dict[str, Any] | None = None,
        limit: int = 20,
        offset: int = 0,
        highlight: bool = True,
        threshold: float = 0.3,
    ) -> dict[str, Any]:
        """Keyword, semantic or hybrid search over a table."""
        self._require(table, "table")
        self._require(query, "query")
        self._require_choice(mode, SEARCH_MODES, "mode")
        return await self._post(
            self._build_url("query"),
            self._compact(
                {
                    "table": table,
                    "query": query,
                    "mode": mode,
                    "columns": columns,
                    "filters": filters,
                    "limit": limit,
                    "offset": offset,
                    "highlight": highlight,
                    "threshold": threshold,
                }
            ),
            idempotent=True,
        )

    async def vector_search(
        self,
        index: str,
        vector: list[float] | None = None,
        text: str | None = None,
        k: int = 10,
        filter: dict[str, Any] | None = None,
        min_score: float | None = None,
    ) -> dict[str, Any]:
        """Nearest-neighbour search by vector or by text embedded on the backend."""
        self._require(index, "index")
        if not vector and not text:
            self._require(None, "vector or text")
        result = await self._post(
            self._build_url("vector"),
            self._compact(
                {
                    "index": index,
                    "vector": vector,
                    "text": text,
                    "k": k,
                    "filter": filter,
                    "minScore": min_score,
                }
            ),
            idempotent=True,
        )
        return _hits(result)

    async def query(
        self,
        q: str,
        index: str | None = None,
        fields: list[str] | None = None,
        highlight: bool | dict | None = None,
        **options: Any,
    ) -> dict[str, Any]:
        self._require(q, "q")
        body = {"query": q, "index": index, "fields": fields, **options}
        body["highlight"] = _highlight(fields, highlight)
        return await self.search(self._compact(body))

    async def multi_match(
        self,
        query: str,
        fields: list[str],
        index: str | None = None,
        highlight: bool | dict | None = None,
        **options: Any,
    ) -> dict[str, Any]:
        self._require(query, "query")
        self._require(fields, "fields")
        body = {
            "query": query,
            "fields": fields,
            "type": "multi_match",
            "index": index,
            **options,
        }
        body["highlight"] = _highlight(fields, highlight)
        return await self.search(self._compact(body))

    async def term(
        self, field: str, value: Any, index: str | None = None, **options: Any
    ) -> dict[str, Any]:
        """Exact match on a single field."""
        self._require(field, "field")
        return await self.search(
            self._compact({"index": index, "filter": {"term": {field: value}}, **options})
        )

    async def range(
        self,
        field: str,
        gte: Any = None,
        lte: Any = None,
        gt: Any = None,
        lt: Any = None,
        index: str | None = None,
        **options: Any,
    ) -> dict[str, Any]:
        self._require(field, "field")
        bounds = self._compact({"gte": gte, "lte": lte, "gt": gt, "lt": lt})
        self._require(bounds, "range bounds")
        return await self.search(
            self._compact({"index": index, "filter": {"range": {field: bounds}}, **options})
        )

    async def aggregate(self, query: dict[str, Any]) -> dict[str, Any]:
        self._require(query, "query")
        return await self._post(self._build_url("aggregate"), query, idempotent=True)

    async def suggest(self, query: dict[str, Any]) -> dict[str, Any]:
        self._require(query, "query")
        return await self._post(self._build_url("suggest"), query, idempotent=True)

    async def autocomplete(
        self, field: str, prefix: str, size: int = 10, fuzzy: bool | None = None
    ) -> list[Any]:
        self._require(field, "field")
        self._require(prefix, "prefix")
        result = await self.suggest(
            self._compact(
                {
                    "text": prefix,
                    "field": field,
                    "type": "completion",
                    "size": size,
                    "fuzzy": fuzzy,
                }
            )
        )
        return (result or {}).get("suggestions") or []

    async def count(self, query: dict[str, Any] | None = None, index: str | None = None) -> int:
        """Number of matching documents, without fetching hits."""
        body = {**(query or {}), **self._compact({"index": index}), "size": 0}
        result = await self.search(body)
        total = result["total"]
        # Some indexes report {"value": n, "relation": "eq"}
        if isinstance(total, dict):
            return total.get("value", 0)
        return total

    async def delete_by_query(self, index: str, query: dict[str, Any]) -> dict[str, Any]:
        self._require(index, "index")
        self._require(query, "query")
        logger.info(f"Deleting documents by query from index {index}")
        return await self._post(
            self._build_url("delete-by-query"), {"index": index, "query": query}
        )

    async def reindex(
        self, source: str, dest: str, query: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        self._require(source, "source")
        self._require(dest, "dest")
        return await self._post(
            self._build_url("reindex"),
            {
                "source": self._compact({"index": source, "query": query}),
                "dest": {"index": dest},
            },
        )

    async def create_index(
        self,
        name: str,
        mappings: dict[str, Any] | None = None,
        settings: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        self._require(name, "name")
        return await self._post(
            self._build_url("index"),
            self._compact({"name": name, "mappings": mappings, "settings": settings}),
        )

    async def get_index(self, name: str) -> dict[str, Any]:
        self._require(name, "name")
        return await self._get(self._build_url("index", name))

    async def delete_index(self, name: str) -> None:
        self._require(name, "name")
        await self._delete(self._build_url("index", name))

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict

from elasticsearch import AsyncElasticsearch

from ..errors import IndexOperationFailed, describe_engine_error, is_resource_already_exists
from ..models import BackfillResult
from ..query.dsl import Bool, Exists

logger = logging.getLogger(__name__)

DATE_FIELD = {"type": "date", "format": "strict_date_optional_time"}

INDEX_MAPPING: Dict[str, Any] = {
    "properties": {
        "title": {
            "type": "text",
            "fields": {"keyword": {"type": "keyword", "ignore_above": 256}},
        },
        "description": {"type": "text"},
        "status": {"type": "keyword"},
        "tags": {"type": "keyword"},
        "assignee": {"type": "keyword"},
        "priority": {"type": "keyword"},
        "severity": {"type": "keyword"},
        "due_date": DATE_FIELD,
        "compliance_framework": {"type": "keyword"},
        "created_at": DATE_FIELD,
        "updated_at": DATE_FIELD,
        "completed_at": DATE_FIELD,
    }
}

# Documents written before priority/severity/due_date/compliance_framework existed.
LEGACY_DOCUMENTS_QUERY = Bool(
    should=[Bool(must_not=[Exists(name)]) for name in ("priority", "severity", "compliance_framework")],
    minimum_should_match=1,
)

BACKFILL_SCRIPT: Dict[str, Any] = {
    "lang": "painless",
    "source": (
        "boolean changed = false;"
        " if (ctx._source.priority == null) { ctx._source.priority = params.priority; changed = true; }"
        " if (ctx._source.severity == null) { ctx._source.severity = params.severity; changed = true; }"
        " if (!ctx._source.containsKey('due_date')) { ctx._source.due_date = null; changed = true; }"
        " if (ctx._source.compliance_framework == null) { ctx._source.compliance_framework = []; changed = true; }"
        " if (!changed) { ctx.op = 'noop'; }"
    ),
    "params": {"priority": "medium", "severity": "low"},
}


class IndexManager:
    """Creates the todos index on first use and keeps track of its readiness."""

    def __init__(
        self,
        client: AsyncElasticsearch,
        index_name: str,
        *,
        number_of_shards: int = 1,
        number_of_replicas: int = 0,
    ) -> None:
        self.client = client
        self.index_name = index_name
        self._settings = {"number_of_shards": number_of_shards, "number_of_replicas": number_of_replicas}
        self._ready = False
        self._lock = asyncio.Lock()

    @property
    def ready(self) -> bool:
        return self._ready

    def reset_state(self) -> None:
        self._ready = False

    async def index_exists(self) -> bool:
        try:
            return bool(await self.client.indices.exists(index=self.index_name))
        except Exception as exc:
            logger.error("Existence check for index %s failed", self.index_name, exc_info=exc)
            raise IndexOperationFailed("Failed to check index existence", describe_engine_error(exc)) from exc

    async def ensure_index(self) -> None:
        if self._ready:
            return
        async with self._lock:
            if self._ready:
                return
            if not await self.index_exists():
                await self._create_index()
            self._ready = True
            logger.debug("Index %s is ready", self.index_name)

    async def _create_index(self) -> None:
        try:
            await self.client.indices.create(
                index=self.index_name,
                settings=self._settings,
                mappings=INDEX_MAPPING,
            )
        except Exception as exc:
            # Another process created it between our existence check and create.
            if is_resource_already_exists(exc):
                logger.debug("Index %s was created concurrently", self.index_name)
                return
            logger.error("Creating index %s failed", self.index_name, exc_info=exc)
            raise IndexOperationFailed("Failed to create index", describe_engine_error(exc)) from exc
        logger.info("Created index %s", self.index_name)

    async def delete_index(self) -> None:
        try:
            if await self.client.indices.exists(index=self.index_name):
                await self.client.indices.delete(index=self.index_name)
        except Exception as exc:
            logger.error("Deleting index %s failed", self.index_name, exc_info=exc)
            raise IndexOperationFailed("Failed to delete index", describe_engine_error(exc)) from exc
        self.reset_state()
        logger.info("Deleted index %s", self.index_name)

    async def backfill_missing_fields(self) -> BackfillResult:
        """Apply default values to documents lacking the newer optional fields."""

        await self.ensure_index()
        try:
            response = await self.client.update_by_query(
                index=self.index_name,
                query=LEGACY_DOCUMENTS_QUERY.to_dict(),
                script=BACKFILL_SCRIPT,
                conflicts="proceed",
                refresh=True,
            )
        except Exception as exc:
            logger.error("Backfill on index %s failed", self.index_name, exc_info=exc)
            raise IndexOperationFailed("Failed to backfill missing fields", describe_engine_error(exc)) from exc

        body = getattr(response, "body", response) or {}
        result = BackfillResult(
            updated=int(body.get("updated") or 0),
            errors=len(body.get("failures") or []),
            total=int(body.get("total") or 0),
        )
        logger.info(
            "Backfilled index %s: %d updated, %d failures, %d matched",
            self.index_name,
            result.updated,
            result.errors,
            result.total,
        )
        return result

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional

from elasticsearch import AsyncElasticsearch

from ..config import TodoServiceSettings
from ..errors import AppError, classify_engine_error
from ..mappers import from_hits, from_storage, merge_update, to_create_document, to_update_document
from ..models import (
    AnalyticsStats,
    BackfillResult,
    CreateTodoRequest,
    SearchResult,
    Todo,
    TodoAnalyticsParams,
    TodoSearchParams,
    TodoStats,
    TodoStatsParams,
    TodoSuggestions,
    UpdateTodoRequest,
)
from ..pagination import resolve_page
from ..query import (
    build_analytics_aggregations,
    build_analytics_query,
    build_search_query,
    build_stats_aggregations,
    build_stats_query,
    build_suggestion_aggregations,
    render_aggregations,
    resolve_sort,
)
from ..query.dsl import MatchAll
from ..reducers import to_analytics_stats, to_suggestions, to_todo_stats
from .index_manager import IndexManager
from .interface import TodosRepositoryProtocol

logger = logging.getLogger(__name__)

ENTITY_TYPE = "Todo"


def _body(response: Any) -> Dict[str, Any]:
    return getattr(response, "body", response) or {}


def _total_hits(body: Mapping[str, Any]) -> int:
    total = (body.get("hits") or {}).get("total") or 0
    if isinstance(total, Mapping):
        return int(total.get("value") or 0)
    return int(total)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ElasticsearchTodosRepository(TodosRepositoryProtocol):
    """Elasticsearch-backed todo persistence layer."""

    def __init__(
        self,
        client: AsyncElasticsearch,
        settings: TodoServiceSettings,
        *,
        index_manager: Optional[IndexManager] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not settings.elasticsearch:
            raise ValueError("Elasticsearch settings are required for the todos repository")
        self.client = client
        self._settings = settings
        self._cfg = settings.elasticsearch
        self._index = self._cfg.todos_index
        self._clock = clock
        self.index_manager = index_manager or IndexManager(
            client,
            self._index,
            number_of_shards=self._cfg.number_of_shards,
            number_of_replicas=self._cfg.number_of_replicas,
        )

    def _failure(
        self,
        exc: BaseException,
        action: str,
        todo_id: Optional[str] = None,
    ) -> AppError:
        error = classify_engine_error(exc, action, entity_type=ENTITY_TYPE, entity_id=todo_id)
        if error.status_code >= 500:
            logger.error("%s on index %s failed", action, self._index, exc_info=exc)
        return error

    async def create(self, request: CreateTodoRequest) -> Todo:
        await self.index_manager.ensure_index()
        document = to_create_document(request, self._clock())
        try:
            response = await self.client.index(index=self._index, document=document, refresh="wait_for")
        except Exception as exc:
            raise self._failure(exc, "Failed to create todo") from exc
        todo_id = str(_body(response)["_id"])
        logger.debug("Created todo %s", todo_id)
        return from_storage(todo_id, document)

    async def get_by_id(self, todo_id: str) -> Todo:
        await self.index_manager.ensure_index()
        try:
            response = await self.client.get(index=self._index, id=todo_id)
        except Exception as exc:
            raise self._failure(exc, "Failed to get todo", todo_id) from exc
        body = _body(response)
        return from_storage(str(body.get("_id") or todo_id), body.get("_source") or {})

    async def update(self, todo_id: str, request: UpdateTodoRequest) -> Todo:
        existing = await self.get_by_id(todo_id)
        delta = to_update_document(request, existing, self._clock())
        try:
            await self.client.update(index=self._index, id=todo_id, doc=delta, refresh="wait_for")
        except Exception as exc:
            raise self._failure(exc, "Failed to update todo", todo_id) from exc
        logger.debug("Updated todo %s fields %s", todo_id, sorted(delta))
        return merge_update(existing, delta, todo_id)

    async def delete(self, todo_id: str) -> None:
        await self.index_manager.ensure_index()
        try:
            await self.client.delete(index=self._index, id=todo_id, refresh="wait_for")
        except Exception as exc:
            raise self._failure(exc, "Failed to delete todo", todo_id) from exc
        logger.debug("Deleted todo %s", todo_id)

    async def search(self, params: TodoSearchParams) -> SearchResult:
        await self.index_manager.ensure_index()
        page, page_size = resolve_page(params.page, params.page_size, self._settings.pagination)
        try:
            response = await self.client.search(
                index=self._index,
                query=build_search_query(params).to_dict(),
                sort=resolve_sort(params.sort_field, params.sort_direction),
                from_=(page - 1) * page_size,
                size=page_size,
                track_total_hits=True,
            )
        except Exception as exc:
            raise self._failure(exc, "Failed to search todos") from exc
        body = _body(response)
        hits = (body.get("hits") or {}).get("hits") or []
        return SearchResult(todos=from_hits(hits), total=_total_hits(body))

    async def _aggregate(self, query: Dict[str, Any], aggs: Dict[str, Any], action: str) -> Dict[str, Any]:
        await self.index_manager.ensure_index()
        try:
            response = await self.client.search(
                index=self._index,
                query=query,
                aggs=aggs,
                size=0,
                track_total_hits=True,
            )
        except Exception as exc:
            raise self._failure(exc, action) from exc
        return _body(response)

    async def get_stats(self, params: Optional[TodoStatsParams] = None) -> TodoStats:
        params = params or TodoStatsParams(
            top_tags_limit=self._settings.analytics.top_tags_limit,
            top_assignees_limit=self._settings.analytics.top_assignees_limit,
        )
        body = await self._aggregate(
            build_stats_query(params).to_dict(),
            render_aggregations(build_stats_aggregations(params)),
            "Failed to get todo statistics",
        )
        return to_todo_stats(_total_hits(body), body.get("aggregations"))

    async def get_analytics(self, params: Optional[TodoAnalyticsParams] = None) -> AnalyticsStats:
        params = params or TodoAnalyticsParams()
        aggs = build_analytics_aggregations(self._settings.analytics.compliance_coverage_size)
        body = await self._aggregate(
            build_analytics_query(params).to_dict(),
            render_aggregations(aggs),
            "Failed to get todo analytics",
        )
        return to_analytics_stats(_total_hits(body), body.get("aggregations"), self._clock())

    async def get_suggestions(self) -> TodoSuggestions:
        aggs = build_suggestion_aggregations(self._settings.analytics.suggestions_limit)
        body = await self._aggregate(MatchAll().to_dict(), render_aggregations(aggs), "Failed to get suggestions")
        return to_suggestions(body.get("aggregations"))

    async def backfill_missing_fields(self) -> BackfillResult:
        return await self.index_manager.backfill_missing_fields()

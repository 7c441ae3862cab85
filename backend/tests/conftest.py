from __future__ import annotations

import asyncio
import itertools
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest
from elastic_transport import ApiResponseMeta, HttpHeaders, NodeConfig
from elasticsearch import ApiError, BadRequestError
from elasticsearch import NotFoundError as EsNotFoundError

from todo_service.config import ElasticsearchConfig, TodoServiceSettings
from todo_service.errors import NotFoundError
from todo_service.mappers import from_storage, merge_update, to_create_document, to_update_document
from todo_service.models import (
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
from todo_service.reducers import to_analytics_stats, to_todo_stats

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def api_error(status: int, error_type: str = "", reason: str = "", cls: type = ApiError) -> ApiError:
    meta = ApiResponseMeta(
        status=status,
        http_version="1.1",
        headers=HttpHeaders(),
        duration=0.0,
        node=NodeConfig("http", "localhost", 9200),
    )
    body = {"error": {"type": error_type, "reason": reason}, "status": status}
    return cls(error_type or "error", meta=meta, body=body)


def not_found(doc_id: str) -> ApiError:
    return api_error(404, "document_missing_exception", f"[{doc_id}]: document missing", EsNotFoundError)


def already_exists(index: str) -> ApiError:
    return api_error(400, "resource_already_exists_exception", f"index [{index}] already exists", BadRequestError)


class FakeIndices:
    def __init__(self) -> None:
        self.exists_value = False
        self.exists_error: Optional[BaseException] = None
        self.create_error: Optional[BaseException] = None
        self.calls: List[tuple] = []

    async def exists(self, *, index: str) -> bool:
        self.calls.append(("exists", {"index": index}))
        await asyncio.sleep(0)
        if self.exists_error:
            raise self.exists_error
        return self.exists_value

    async def create(self, *, index: str, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(("create", {"index": index, **kwargs}))
        if self.create_error:
            raise self.create_error
        self.exists_value = True
        return {"acknowledged": True, "index": index}

    async def delete(self, *, index: str) -> Dict[str, Any]:
        self.calls.append(("delete", {"index": index}))
        self.exists_value = False
        return {"acknowledged": True}

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)


class FakeElasticsearch:
    """Records calls and serves canned responses in place of ``AsyncElasticsearch``."""

    def __init__(self) -> None:
        self.indices = FakeIndices()
        self.documents: Dict[str, Dict[str, Any]] = {}
        self.calls: List[tuple] = []
        self.search_response: Dict[str, Any] = {"hits": {"total": {"value": 0, "relation": "eq"}, "hits": []}}
        self.update_by_query_response: Dict[str, Any] = {"updated": 0, "total": 0, "failures": []}
        self.error: Optional[BaseException] = None
        self._ids = itertools.count(1)

    def _maybe_fail(self) -> None:
        if self.error:
            raise self.error

    async def index(self, *, index: str, document: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(("index", {"index": index, "document": document, **kwargs}))
        self._maybe_fail()
        doc_id = f"todo-{next(self._ids)}"
        self.documents[doc_id] = dict(document)
        return {"_id": doc_id, "result": "created"}

    async def get(self, *, index: str, id: str) -> Dict[str, Any]:
        self.calls.append(("get", {"index": index, "id": id}))
        self._maybe_fail()
        if id not in self.documents:
            raise not_found(id)
        return {"_index": index, "_id": id, "found": True, "_source": dict(self.documents[id])}

    async def update(self, *, index: str, id: str, doc: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(("update", {"index": index, "id": id, "doc": doc, **kwargs}))
        self._maybe_fail()
        if id not in self.documents:
            raise not_found(id)
        self.documents[id].update(doc)
        return {"_id": id, "result": "updated"}

    async def delete(self, *, index: str, id: str, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(("delete", {"index": index, "id": id, **kwargs}))
        self._maybe_fail()
        if id not in self.documents:
            raise not_found(id)
        del self.documents[id]
        return {"_id": id, "result": "deleted"}

    async def search(self, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(("search", kwargs))
        self._maybe_fail()
        return self.search_response

    async def update_by_query(self, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(("update_by_query", kwargs))
        self._maybe_fail()
        return self.update_by_query_response

    async def close(self) -> None:
        return None

    def last(self, name: str) -> Dict[str, Any]:
        for call, kwargs in reversed(self.calls):
            if call == name:
                return kwargs
        raise AssertionError(f"No {name} call recorded")


class FakeTodosRepository:
    """Minimal in-memory repository used by the service and route tests."""

    def __init__(self) -> None:
        self.todos: Dict[str, Todo] = {}
        self.search_calls: List[TodoSearchParams] = []
        self.stats_calls: List[TodoStatsParams] = []
        self.analytics_calls: List[TodoAnalyticsParams] = []
        self.total_override: Optional[int] = None

    async def create(self, request: CreateTodoRequest) -> Todo:
        todo_id = str(len(self.todos) + 1)
        todo = from_storage(todo_id, to_create_document(request, FIXED_NOW))
        self.todos[todo_id] = todo
        return todo

    async def get_by_id(self, todo_id: str) -> Todo:
        if todo_id not in self.todos:
            raise NotFoundError("Todo", todo_id)
        return self.todos[todo_id]

    async def update(self, todo_id: str, request: UpdateTodoRequest) -> Todo:
        existing = await self.get_by_id(todo_id)
        updated = merge_update(existing, to_update_document(request, existing, FIXED_NOW), todo_id)
        self.todos[todo_id] = updated
        return updated

    async def delete(self, todo_id: str) -> None:
        await self.get_by_id(todo_id)
        del self.todos[todo_id]

    async def search(self, params: TodoSearchParams) -> SearchResult:
        self.search_calls.append(params)
        todos = list(self.todos.values())
        total = self.total_override if self.total_override is not None else len(todos)
        return SearchResult(todos=todos, total=total)

    async def get_stats(self, params: Optional[TodoStatsParams] = None) -> TodoStats:
        self.stats_calls.append(params)
        return to_todo_stats(len(self.todos), None)

    async def get_analytics(self, params: Optional[TodoAnalyticsParams] = None) -> AnalyticsStats:
        self.analytics_calls.append(params)
        return to_analytics_stats(len(self.todos), None, FIXED_NOW)

    async def get_suggestions(self) -> TodoSuggestions:
        tags = sorted({tag for todo in self.todos.values() for tag in todo.tags})
        return TodoSuggestions(tags=tags, compliance_frameworks=[])

    async def backfill_missing_fields(self) -> BackfillResult:
        return BackfillResult(updated=0, errors=0, total=len(self.todos))


@pytest.fixture
def settings() -> TodoServiceSettings:
    return TodoServiceSettings(
        environment="test",
        api_prefix="/api",
        elasticsearch=ElasticsearchConfig(hosts=["http://localhost:9200"], todos_index="todos_test"),
    )


@pytest.fixture
def fake_client() -> FakeElasticsearch:
    return FakeElasticsearch()

from __future__ import annotations

from typing import Optional, Protocol

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


class TodosRepositoryProtocol(Protocol):
    async def create(self, request: CreateTodoRequest) -> Todo:
        ...

    async def get_by_id(self, todo_id: str) -> Todo:
        ...

    async def update(self, todo_id: str, request: UpdateTodoRequest) -> Todo:
        ...

    async def delete(self, todo_id: str) -> None:
        ...

    async def search(self, params: TodoSearchParams) -> SearchResult:
        ...

    async def get_stats(self, params: Optional[TodoStatsParams] = None) -> TodoStats:
        ...

    async def get_analytics(self, params: Optional[TodoAnalyticsParams] = None) -> AnalyticsStats:
        ...

    async def get_suggestions(self) -> TodoSuggestions:
        ...

    async def backfill_missing_fields(self) -> BackfillResult:
        ...

from __future__ import annotations

import pytest

from todo_service.config import TodoServiceSettings
from todo_service.errors import NotFoundError, ValidationError
from todo_service.models import (
    CreateTodoRequest,
    TodoAnalyticsParams,
    TodoSearchParams,
    TodoStatsParams,
    UpdateTodoRequest,
)
from todo_service.pagination import build_pagination_meta, resolve_page
from todo_service.services import AnalyticsService, StatsService, TodosService

from .conftest import FIXED_NOW, FakeTodosRepository


@pytest.fixture
def repository() -> FakeTodosRepository:
    return FakeTodosRepository()


@pytest.fixture
def service(repository: FakeTodosRepository, settings: TodoServiceSettings) -> TodosService:
    return TodosService(repository, settings)


def test_resolve_page_defaults_and_clamps() -> None:
    assert resolve_page(None, None) == (1, 20)
    assert resolve_page(-3, 0) == (1, 1)
    assert resolve_page(2, 1000) == (2, 100)


def test_pagination_meta() -> None:
    meta = build_pagination_meta(page=2, page_size=10, total_items=25)
    assert (meta.total_pages, meta.has_next_page, meta.has_previous_page) == (3, True, True)

    last = build_pagination_meta(page=3, page_size=10, total_items=25)
    assert last.has_next_page is False

    empty = build_pagination_meta(page=1, page_size=20, total_items=0)
    assert (empty.total_pages, empty.has_next_page, empty.has_previous_page) == (0, False, False)


@pytest.mark.asyncio
async def test_list_todos_resolves_paging_before_search(service: TodosService, repository: FakeTodosRepository) -> None:
    repository.total_override = 45
    response = await service.list_todos(TodoSearchParams(page=2, page_size=500))

    sent = repository.search_calls[-1]
    assert (sent.page, sent.page_size) == (2, 100)
    assert response.pagination.total_items == 45
    assert response.pagination.total_pages == 1
    assert response.pagination.has_previous_page is True
    assert response.pagination.has_next_page is False


@pytest.mark.asyncio
async def test_todo_lifecycle(service: TodosService) -> None:
    todo = await service.create_todo(CreateTodoRequest(title="Rotate keys", tags=["Sec"]))
    assert todo.tags == ["sec"]

    updated = await service.update_todo(todo.id, UpdateTodoRequest(assignee="bob"))
    assert updated.assignee == "bob"
    assert (await service.get_todo(todo.id)).assignee == "bob"

    await service.delete_todo(todo.id)
    with pytest.raises(NotFoundError):
        await service.get_todo(todo.id)


@pytest.mark.asyncio
async def test_empty_update_and_blank_id_are_rejected(service: TodosService) -> None:
    todo = await service.create_todo(CreateTodoRequest(title="Anything"))

    with pytest.raises(ValidationError):
        await service.update_todo(todo.id, UpdateTodoRequest())
    with pytest.raises(ValidationError):
        await service.get_todo("  ")
    with pytest.raises(ValidationError):
        await service.delete_todo("")


@pytest.mark.asyncio
async def test_stats_rejects_inverted_created_window(repository: FakeTodosRepository, settings: TodoServiceSettings) -> None:
    service = StatsService(repository, settings)

    with pytest.raises(ValidationError) as excinfo:
        await service.get_stats(TodoStatsParams(created_after="2024-02-01", created_before="2024-01-01"))
    assert excinfo.value.status_code == 400

    stats = await service.get_stats(TodoStatsParams(created_after="2024-01-01", created_before="2024-02-01"))
    assert stats.total == 0


@pytest.mark.asyncio
async def test_stats_defaults_come_from_settings(repository: FakeTodosRepository, settings: TodoServiceSettings) -> None:
    settings = settings.model_copy(
        update={"analytics": settings.analytics.model_copy(update={"top_tags_limit": 7})}
    )
    await StatsService(repository, settings).get_stats()

    assert repository.stats_calls[-1].top_tags_limit == 7


@pytest.mark.asyncio
async def test_analytics_blank_framework_is_ignored(repository: FakeTodosRepository) -> None:
    service = AnalyticsService(repository)

    analytics = await service.get_analytics(TodoAnalyticsParams(compliance_framework="   "))

    assert repository.analytics_calls[-1].compliance_framework is None
    assert analytics.computed_at == FIXED_NOW


@pytest.mark.asyncio
async def test_suggestions_and_backfill(service: TodosService, repository: FakeTodosRepository) -> None:
    await service.create_todo(CreateTodoRequest(title="A", tags=["b", "a"]))

    suggestions = await AnalyticsService(repository).get_suggestions()
    assert suggestions.tags == ["a", "b"]

    result = await service.backfill()
    assert result.total == 1

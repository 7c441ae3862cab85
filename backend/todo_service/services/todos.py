from __future__ import annotations

import logging
from typing import Optional

from ..config import TodoServiceSettings, get_settings
from ..errors import ValidationError
from ..models import (
    BackfillResult,
    CreateTodoRequest,
    ListTodosResponse,
    Todo,
    TodoSearchParams,
    UpdateTodoRequest,
)
from ..pagination import build_pagination_meta, resolve_page
from ..repositories.interface import TodosRepositoryProtocol

logger = logging.getLogger(__name__)


def _require_id(todo_id: Optional[str]) -> str:
    if not todo_id or not todo_id.strip():
        raise ValidationError("Todo id is required")
    return todo_id.strip()


class TodosService:
    """Business logic for creating, reading and listing todos."""

    def __init__(self, repository: TodosRepositoryProtocol, settings: Optional[TodoServiceSettings] = None) -> None:
        self.repository = repository
        self.settings = settings or get_settings()

    async def list_todos(self, params: TodoSearchParams) -> ListTodosResponse:
        page, page_size = resolve_page(params.page, params.page_size, self.settings.pagination)
        params = params.model_copy(update={"page": page, "page_size": page_size})
        result = await self.repository.search(params)
        logger.debug("Search returned %d of %d todos (page %d)", len(result.todos), result.total, page)
        return ListTodosResponse(
            todos=result.todos,
            pagination=build_pagination_meta(page, page_size, result.total),
        )

    async def get_todo(self, todo_id: str) -> Todo:
        return await self.repository.get_by_id(_require_id(todo_id))

    async def create_todo(self, request: CreateTodoRequest) -> Todo:
        todo = await self.repository.create(request)
        logger.info("Created todo %s", todo.id)
        return todo

    async def update_todo(self, todo_id: str, request: UpdateTodoRequest) -> Todo:
        todo_id = _require_id(todo_id)
        if not request.has_updates():
            raise ValidationError("At least one field must be provided for update")
        todo = await self.repository.update(todo_id, request)
        logger.info("Updated todo %s", todo_id)
        return todo

    async def delete_todo(self, todo_id: str) -> None:
        todo_id = _require_id(todo_id)
        await self.repository.delete(todo_id)
        logger.info("Deleted todo %s", todo_id)

    async def backfill(self) -> BackfillResult:
        result = await self.repository.backfill_missing_fields()
        logger.info("Backfilled %s of %s legacy todos (%s errors)", result.updated, result.total, result.errors)
        return result

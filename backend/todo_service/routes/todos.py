from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

import pydantic
from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_analytics_service, get_app_settings, get_stats_service, get_todos_service
from ..config import TodoServiceSettings
from ..errors import ValidationError
from ..models import (
    AnalyticsStats,
    BackfillResult,
    CreateTodoRequest,
    ListTodosResponse,
    TimeInterval,
    Todo,
    TodoAnalyticsParams,
    TodoPriority,
    TodoSearchParams,
    TodoSeverity,
    TodoStats,
    TodoStatsParams,
    TodoStatus,
    UpdateTodoRequest,
)
from ..models.todo import CamelModel
from ..services.analytics import AnalyticsService
from ..services.stats import StatsService
from ..services.todos import TodosService

router = APIRouter(prefix="/todos", tags=["todos"])

E = TypeVar("E", bound=Enum)
M = TypeVar("M", bound=pydantic.BaseModel)


class TodoEnvelope(CamelModel):
    todo: Todo


class StatsEnvelope(CamelModel):
    stats: TodoStats


class AnalyticsEnvelope(CamelModel):
    analytics: AnalyticsStats


class SuggestionsResponse(CamelModel):
    tags: List[str]
    compliance_frameworks: List[str]


class BackfillEnvelope(CamelModel):
    backfill: BackfillResult


class DeleteResponse(CamelModel):
    id: str
    deleted: bool = True


def _split(param: Optional[str]) -> Optional[List[str]]:
    if not param:
        return None
    values = [raw.strip() for raw in param.split(",") if raw.strip()]
    return values or None


def _parse_enums(param: Optional[str], enum_type: Type[E], label: str) -> Optional[List[E]]:
    values = _split(param)
    if not values:
        return None
    parsed: List[E] = []
    for value in values:
        try:
            parsed.append(enum_type(value))
        except ValueError as exc:
            allowed = ", ".join(member.value for member in enum_type)
            raise ValidationError(f"Invalid {label} '{value}'. Allowed values: {allowed}") from exc
    return parsed


def _build(model: Type[M], data: Dict[str, Any]) -> M:
    try:
        return model.model_validate({key: value for key, value in data.items() if value is not None})
    except pydantic.ValidationError as exc:
        errors = [{"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]} for error in exc.errors()]
        raise ValidationError("Invalid query parameters", {"errors": errors}) from exc


@router.get("", response_model=ListTodosResponse)
async def list_todos(
    page: Optional[int] = Query(None),
    page_size: Optional[int] = Query(None, alias="pageSize"),
    status_param: Optional[str] = Query(None, alias="status", description="Comma separated list of statuses"),
    priority: Optional[str] = Query(None, description="Comma separated list of priorities"),
    severity: Optional[str] = Query(None, description="Comma separated list of severities"),
    tags: Optional[str] = Query(None, description="Comma separated list of tags, all must match"),
    assignee: Optional[str] = Query(None),
    compliance_frameworks: Optional[str] = Query(None, alias="complianceFrameworks"),
    search_text: Optional[str] = Query(None, alias="searchText"),
    due_date_after: Optional[str] = Query(None, alias="dueDateAfter"),
    due_date_before: Optional[str] = Query(None, alias="dueDateBefore"),
    created_after: Optional[str] = Query(None, alias="createdAfter"),
    created_before: Optional[str] = Query(None, alias="createdBefore"),
    updated_after: Optional[str] = Query(None, alias="updatedAfter"),
    updated_before: Optional[str] = Query(None, alias="updatedBefore"),
    completed_after: Optional[str] = Query(None, alias="completedAfter"),
    completed_before: Optional[str] = Query(None, alias="completedBefore"),
    is_overdue: Optional[bool] = Query(None, alias="isOverdue"),
    sort_field: Optional[str] = Query(None, alias="sortField"),
    sort_direction: Optional[str] = Query(None, alias="sortDirection"),
    service: TodosService = Depends(get_todos_service),
) -> ListTodosResponse:
    params = _build(
        TodoSearchParams,
        {
            "page": page,
            "page_size": page_size,
            "status": _parse_enums(status_param, TodoStatus, "status"),
            "priority": _parse_enums(priority, TodoPriority, "priority"),
            "severity": _parse_enums(severity, TodoSeverity, "severity"),
            "tags": _split(tags),
            "assignee": assignee,
            "compliance_frameworks": _split(compliance_frameworks),
            "search_text": search_text,
            "due_date_after": due_date_after,
            "due_date_before": due_date_before,
            "created_after": created_after,
            "created_before": created_before,
            "updated_after": updated_after,
            "updated_before": updated_before,
            "completed_after": completed_after,
            "completed_before": completed_before,
            "is_overdue": is_overdue,
            "sort_field": sort_field,
            "sort_direction": sort_direction,
        },
    )
    return await service.list_todos(params)


@router.get("/_stats", response_model=StatsEnvelope)
async def get_stats(
    created_after: Optional[str] = Query(None, alias="createdAfter"),
    created_before: Optional[str] = Query(None, alias="createdBefore"),
    time_interval: Optional[TimeInterval] = Query(None, alias="timeInterval"),
    top_tags_limit: Optional[int] = Query(None, alias="topTagsLimit"),
    top_assignees_limit: Optional[int] = Query(None, alias="topAssigneesLimit"),
    service: StatsService = Depends(get_stats_service),
    settings: TodoServiceSettings = Depends(get_app_settings),
) -> StatsEnvelope:
    params = _build(
        TodoStatsParams,
        {
            "created_after": created_after,
            "created_before": created_before,
            "time_interval": time_interval,
            "top_tags_limit": top_tags_limit if top_tags_limit is not None else settings.analytics.top_tags_limit,
            "top_assignees_limit": (
                top_assignees_limit if top_assignees_limit is not None else settings.analytics.top_assignees_limit
            ),
        },
    )
    return StatsEnvelope(stats=await service.get_stats(params))


@router.get("/_analytics", response_model=AnalyticsEnvelope)
async def get_analytics(
    compliance_framework: Optional[str] = Query(None, alias="complianceFramework"),
    overdue_only: bool = Query(False, alias="overdueOnly"),
    service: AnalyticsService = Depends(get_analytics_service),
) -> AnalyticsEnvelope:
    params = _build(
        TodoAnalyticsParams,
        {"compliance_framework": compliance_framework, "overdue_only": overdue_only},
    )
    return AnalyticsEnvelope(analytics=await service.get_analytics(params))


@router.get("/_suggestions", response_model=SuggestionsResponse)
async def get_suggestions(service: AnalyticsService = Depends(get_analytics_service)) -> SuggestionsResponse:
    suggestions = await service.get_suggestions()
    return SuggestionsResponse(tags=suggestions.tags, compliance_frameworks=suggestions.compliance_frameworks)


@router.post("/_backfill", response_model=BackfillEnvelope)
async def backfill_todos(service: TodosService = Depends(get_todos_service)) -> BackfillEnvelope:
    """Default the newer optional fields on documents written before they existed."""

    return BackfillEnvelope(backfill=await service.backfill())


@router.post("", response_model=TodoEnvelope, status_code=status.HTTP_201_CREATED)
async def create_todo(
    payload: CreateTodoRequest,
    service: TodosService = Depends(get_todos_service),
) -> TodoEnvelope:
    return TodoEnvelope(todo=await service.create_todo(payload))


@router.get("/{todo_id}", response_model=TodoEnvelope)
async def get_todo(todo_id: str, service: TodosService = Depends(get_todos_service)) -> TodoEnvelope:
    return TodoEnvelope(todo=await service.get_todo(todo_id))


@router.patch("/{todo_id}", response_model=TodoEnvelope)
async def update_todo(
    todo_id: str,
    payload: UpdateTodoRequest,
    service: TodosService = Depends(get_todos_service),
) -> TodoEnvelope:
    return TodoEnvelope(todo=await service.update_todo(todo_id, payload))


@router.delete("/{todo_id}", response_model=DeleteResponse)
async def delete_todo(todo_id: str, service: TodosService = Depends(get_todos_service)) -> DeleteResponse:
    await service.delete_todo(todo_id)
    return DeleteResponse(id=todo_id)

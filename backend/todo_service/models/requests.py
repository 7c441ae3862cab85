from __future__ import annotations

import re
from datetime import datetime
from enum import Enum
from typing import Annotated, List, Optional, Union

from pydantic import Field, StringConstraints, field_validator

from .todo import (
    MAX_ASSIGNEE_LENGTH,
    MAX_COMPLIANCE_FRAMEWORK_LENGTH,
    MAX_COMPLIANCE_FRAMEWORKS,
    MAX_DESCRIPTION_LENGTH,
    MAX_TAG_LENGTH,
    MAX_TAGS,
    MAX_TITLE_LENGTH,
    CamelModel,
    Todo,
    TodoPriority,
    TodoSeverity,
    TodoStatus,
)

TagValue = Annotated[str, StringConstraints(max_length=MAX_TAG_LENGTH)]
FrameworkValue = Annotated[str, StringConstraints(max_length=MAX_COMPLIANCE_FRAMEWORK_LENGTH)]


class SortField(str, Enum):
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"
    COMPLETED_AT = "completedAt"
    TITLE = "title"
    STATUS = "status"
    PRIORITY = "priority"
    SEVERITY = "severity"
    DUE_DATE = "dueDate"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class TimeInterval(str, Enum):
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


# The shape Elasticsearch accepts for strict_date_optional_time range bounds.
ISO_DATE_PATTERN = re.compile(
    r"\d{4}-\d{2}-\d{2}"
    r"(T\d{2}:\d{2}(:\d{2}(\.\d{3}|\.\d{6})?)?(Z|[+-]\d{2}:\d{2})?)?"
)


def _check_iso_date(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    try:
        if not ISO_DATE_PATTERN.fullmatch(value):
            raise ValueError(value)
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValueError(f"Invalid date '{value}'. Use ISO 8601 format.") from exc
    return value


class CreateTodoRequest(CamelModel):
    title: str = Field(..., min_length=1, max_length=MAX_TITLE_LENGTH)
    description: Optional[str] = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    status: Optional[TodoStatus] = None
    tags: Optional[List[TagValue]] = Field(None, max_length=MAX_TAGS)
    assignee: Optional[str] = Field(None, max_length=MAX_ASSIGNEE_LENGTH)
    priority: Optional[TodoPriority] = None
    severity: Optional[TodoSeverity] = None
    due_date: Optional[datetime] = None
    compliance_frameworks: Optional[List[FrameworkValue]] = Field(None, max_length=MAX_COMPLIANCE_FRAMEWORKS)

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Title is required")
        return value


class UpdateTodoRequest(CamelModel):
    """Partial update. Presence is tracked through ``model_fields_set``."""

    title: Optional[str] = Field(None, min_length=1, max_length=MAX_TITLE_LENGTH)
    description: Optional[str] = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    status: Optional[TodoStatus] = None
    tags: Optional[List[TagValue]] = Field(None, max_length=MAX_TAGS)
    assignee: Optional[str] = Field(None, max_length=MAX_ASSIGNEE_LENGTH)
    priority: Optional[TodoPriority] = None
    severity: Optional[TodoSeverity] = None
    due_date: Optional[datetime] = None
    compliance_frameworks: Optional[List[FrameworkValue]] = Field(None, max_length=MAX_COMPLIANCE_FRAMEWORKS)

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("Title cannot be empty")
        return value

    def provided(self, name: str) -> bool:
        return name in self.model_fields_set

    def has_updates(self) -> bool:
        return bool(self.model_fields_set)


class TodoSearchParams(CamelModel):
    page: Optional[int] = None
    page_size: Optional[int] = None
    status: Optional[Union[TodoStatus, List[TodoStatus]]] = None
    priority: Optional[Union[TodoPriority, List[TodoPriority]]] = None
    severity: Optional[Union[TodoSeverity, List[TodoSeverity]]] = None
    tags: Optional[List[str]] = None
    assignee: Optional[str] = None
    compliance_frameworks: Optional[List[str]] = None
    search_text: Optional[str] = None
    due_date_after: Optional[str] = None
    due_date_before: Optional[str] = None
    created_after: Optional[str] = None
    created_before: Optional[str] = None
    updated_after: Optional[str] = None
    updated_before: Optional[str] = None
    completed_after: Optional[str] = None
    completed_before: Optional[str] = None
    is_overdue: Optional[bool] = None
    # Unknown sort fields are tolerated and fall back to the default sort.
    sort_field: Optional[str] = None
    sort_direction: Optional[SortDirection] = None

    @field_validator(
        "due_date_after",
        "due_date_before",
        "created_after",
        "created_before",
        "updated_after",
        "updated_before",
        "completed_after",
        "completed_before",
    )
    @classmethod
    def _iso_dates(cls, value: Optional[str]) -> Optional[str]:
        return _check_iso_date(value)


class TodoStatsParams(CamelModel):
    created_after: Optional[str] = None
    created_before: Optional[str] = None
    time_interval: TimeInterval = TimeInterval.DAY
    top_tags_limit: int = Field(10, ge=1, le=100)
    top_assignees_limit: int = Field(10, ge=1, le=100)

    @field_validator("created_after", "created_before")
    @classmethod
    def _iso_dates(cls, value: Optional[str]) -> Optional[str]:
        return _check_iso_date(value)


class TodoAnalyticsParams(CamelModel):
    compliance_framework: Optional[str] = Field(None, max_length=MAX_COMPLIANCE_FRAMEWORK_LENGTH)
    overdue_only: bool = False


class PaginationMeta(CamelModel):
    page: int
    page_size: int
    total_items: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool


class SearchResult(CamelModel):
    todos: List[Todo]
    total: int


class ListTodosResponse(CamelModel):
    todos: List[Todo]
    pagination: PaginationMeta

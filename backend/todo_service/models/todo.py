from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, TypedDict

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel


DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

MAX_TITLE_LENGTH = 256
MAX_DESCRIPTION_LENGTH = 4000
MAX_TAGS = 20
MAX_TAG_LENGTH = 50
MAX_ASSIGNEE_LENGTH = 100
MAX_COMPLIANCE_FRAMEWORKS = 10
MAX_COMPLIANCE_FRAMEWORK_LENGTH = 100


class TodoStatus(str, Enum):
    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    ERROR = "error"


class TodoPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TodoSeverity(str, Enum):
    INFO = "info"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


TODO_STATUS_VALUES: List[str] = [status.value for status in TodoStatus]
TODO_PRIORITY_VALUES: List[str] = [priority.value for priority in TodoPriority]
TODO_SEVERITY_VALUES: List[str] = [severity.value for severity in TodoSeverity]


class CamelModel(BaseModel):
    """Base model exposing camelCase JSON while keeping snake_case attributes."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class TodoDocument(TypedDict, total=False):
    """Storage shape of a todo inside the Elasticsearch index."""

    title: str
    description: Optional[str]
    status: str
    tags: List[str]
    assignee: Optional[str]
    priority: str
    severity: str
    due_date: Optional[str]
    compliance_framework: List[str]
    created_at: str
    updated_at: str
    completed_at: Optional[str]


class Todo(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    status: TodoStatus = TodoStatus.PLANNED
    tags: List[str] = Field(default_factory=list)
    assignee: Optional[str] = None
    priority: TodoPriority = TodoPriority.MEDIUM
    severity: TodoSeverity = TodoSeverity.LOW
    due_date: Optional[datetime] = None
    compliance_frameworks: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        """Due date present and in the past while the task is not done."""

        if self.due_date is None or self.status == TodoStatus.DONE:
            return False
        reference = now or datetime.now(timezone.utc)
        due = self.due_date
        if due.tzinfo is None:
            due = due.replace(tzinfo=timezone.utc)
        if reference.tzinfo is None:
            reference = reference.replace(tzinfo=timezone.utc)
        return due < reference

    @field_serializer("created_at", "updated_at", when_used="json")
    def serialize_timestamps(self, value: datetime) -> str:
        return value.isoformat()

    @field_serializer("due_date", "completed_at", when_used="json")
    def serialize_optional_timestamps(self, value: Optional[datetime]) -> Optional[str]:
        return value.isoformat() if value else None

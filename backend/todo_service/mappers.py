from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, TypeVar

from .models import (
    CreateTodoRequest,
    Todo,
    TodoDocument,
    TodoPriority,
    TodoSeverity,
    TodoStatus,
    UpdateTodoRequest,
)
from .normalizer import normalize_compliance_frameworks, normalize_tags

EnumT = TypeVar("EnumT", bound=Enum)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _iso(value: datetime) -> str:
    return value.isoformat()


def _clean_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def _as_list(value: Any) -> List[Any]:
    # Elasticsearch keeps a single keyword value as a scalar.
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _enum_or_default(enum_cls: Type[EnumT], value: Any, default: EnumT) -> EnumT:
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        return default


def from_storage(doc_id: str, source: Mapping[str, Any]) -> Todo:
    """Build the domain entity from a stored document.

    Older documents may lack fields or hold values outside the current enums,
    so those fall back to the creation defaults instead of failing the read.
    """

    created_at = source.get("created_at") or source.get("updated_at") or EPOCH
    return Todo(
        id=doc_id,
        title=source.get("title") or "",
        description=source.get("description") or None,
        status=_enum_or_default(TodoStatus, source.get("status"), TodoStatus.PLANNED),
        tags=_as_list(source.get("tags")),
        assignee=source.get("assignee") or None,
        priority=_enum_or_default(TodoPriority, source.get("priority"), TodoPriority.MEDIUM),
        severity=_enum_or_default(TodoSeverity, source.get("severity"), TodoSeverity.LOW),
        due_date=source.get("due_date") or None,
        compliance_frameworks=_as_list(source.get("compliance_framework")),
        created_at=created_at,
        updated_at=source.get("updated_at") or created_at,
        completed_at=source.get("completed_at") or None,
    )


def from_hit(hit: Mapping[str, Any]) -> Todo:
    return from_storage(str(hit.get("_id")), hit.get("_source") or {})


def from_hits(hits: Iterable[Mapping[str, Any]]) -> List[Todo]:
    return [from_hit(hit) for hit in hits]


def to_create_document(request: CreateTodoRequest, now: datetime) -> TodoDocument:
    status = request.status or TodoStatus.PLANNED
    timestamp = _iso(now)
    return TodoDocument(
        title=request.title.strip(),
        description=_clean_optional(request.description),
        status=status.value,
        tags=normalize_tags(request.tags),
        assignee=_clean_optional(request.assignee),
        priority=(request.priority or TodoPriority.MEDIUM).value,
        severity=(request.severity or TodoSeverity.LOW).value,
        due_date=_iso(request.due_date) if request.due_date else None,
        compliance_framework=normalize_compliance_frameworks(request.compliance_frameworks),
        created_at=timestamp,
        updated_at=timestamp,
        completed_at=timestamp if status == TodoStatus.DONE else None,
    )


def to_update_document(request: UpdateTodoRequest, existing: Todo, now: datetime) -> TodoDocument:
    """Partial document holding only the fields present in ``request``.

    ``None`` values in the result are explicit clears, not omissions.
    """

    timestamp = _iso(now)
    delta = TodoDocument(updated_at=timestamp)

    if request.provided("title") and request.title is not None:
        delta["title"] = request.title.strip()
    if request.provided("description"):
        delta["description"] = _clean_optional(request.description)
    if request.provided("status") and request.status is not None:
        delta["status"] = request.status.value
        if request.status == TodoStatus.DONE and existing.status != TodoStatus.DONE:
            delta["completed_at"] = timestamp
        elif request.status != TodoStatus.DONE and existing.status == TodoStatus.DONE:
            delta["completed_at"] = None
    if request.provided("tags") and request.tags is not None:
        delta["tags"] = normalize_tags(request.tags)
    if request.provided("assignee"):
        delta["assignee"] = _clean_optional(request.assignee)
    if request.provided("priority") and request.priority is not None:
        delta["priority"] = request.priority.value
    if request.provided("severity") and request.severity is not None:
        delta["severity"] = request.severity.value
    if request.provided("due_date"):
        delta["due_date"] = _iso(request.due_date) if request.due_date else None
    if request.provided("compliance_frameworks") and request.compliance_frameworks is not None:
        delta["compliance_framework"] = normalize_compliance_frameworks(request.compliance_frameworks)
    return delta


_DOMAIN_FIELDS: Dict[str, str] = {
    "title": "title",
    "description": "description",
    "status": "status",
    "tags": "tags",
    "assignee": "assignee",
    "priority": "priority",
    "severity": "severity",
    "due_date": "due_date",
    "compliance_framework": "compliance_frameworks",
    "updated_at": "updated_at",
    "completed_at": "completed_at",
}


def merge_update(existing: Todo, delta: Mapping[str, Any], doc_id: str) -> Todo:
    """Post-update view of ``existing`` without reading the document back."""

    data = existing.model_dump()
    data["id"] = doc_id
    for storage_key, domain_key in _DOMAIN_FIELDS.items():
        if storage_key in delta:
            data[domain_key] = delta[storage_key]
    return Todo.model_validate(data)

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from todo_service.mappers import from_hit, from_storage, merge_update, to_create_document, to_update_document
from todo_service.models import (
    CreateTodoRequest,
    TodoPriority,
    TodoSeverity,
    TodoStatus,
    UpdateTodoRequest,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
LATER = NOW + timedelta(hours=1)


def _stored(**overrides):
    doc = {
        "title": "Patch servers",
        "description": None,
        "status": "planned",
        "tags": ["ops"],
        "assignee": None,
        "priority": "high",
        "severity": "medium",
        "due_date": None,
        "compliance_framework": ["SOC2"],
        "created_at": NOW.isoformat(),
        "updated_at": NOW.isoformat(),
        "completed_at": None,
    }
    doc.update(overrides)
    return doc


def test_create_document_trims_title_and_normalizes_tags() -> None:
    request = CreateTodoRequest(title="  Fix  ", tags=["Sec", "sec"])
    doc = to_create_document(request, NOW)

    assert doc["title"] == "Fix"
    assert doc["tags"] == ["sec"]
    assert doc["status"] == "planned"
    assert doc["priority"] == "medium"
    assert doc["severity"] == "low"
    assert doc["compliance_framework"] == []
    assert doc["created_at"] == doc["updated_at"] == NOW.isoformat()
    assert doc["completed_at"] is None
    assert doc["due_date"] is None


def test_create_document_done_sets_completed_at_and_blank_fields_become_none() -> None:
    request = CreateTodoRequest(title="Ship", status=TodoStatus.DONE, description="   ", assignee=" ")
    doc = to_create_document(request, NOW)

    assert doc["completed_at"] == NOW.isoformat()
    assert doc["description"] is None
    assert doc["assignee"] is None


def test_create_request_accepts_camel_case_payload() -> None:
    request = CreateTodoRequest.model_validate(
        {"title": "Audit", "complianceFrameworks": ["SOC2", "SOC2"], "dueDate": "2024-07-01T00:00:00Z"}
    )
    doc = to_create_document(request, NOW)

    assert doc["compliance_framework"] == ["SOC2"]
    assert doc["due_date"].startswith("2024-07-01T00:00:00")


def test_from_storage_fills_defaults_for_legacy_documents() -> None:
    legacy = {"title": "Old", "status": "planned", "created_at": NOW.isoformat(), "updated_at": NOW.isoformat()}
    todo = from_storage("legacy-1", legacy)

    assert todo.id == "legacy-1"
    assert todo.priority == TodoPriority.MEDIUM
    assert todo.severity == TodoSeverity.LOW
    assert todo.tags == []
    assert todo.compliance_frameworks == []
    assert todo.due_date is None
    assert todo.completed_at is None


def test_from_storage_wraps_single_keyword_values() -> None:
    todo = from_storage("t1", _stored(tags="ops", compliance_framework="SOC2"))

    assert todo.tags == ["ops"]
    assert todo.compliance_frameworks == ["SOC2"]


def test_from_storage_unknown_enum_values_fall_back_to_defaults() -> None:
    todo = from_storage("t1", _stored(status="blocked", priority="urgent", severity=3))

    assert todo.status == TodoStatus.PLANNED
    assert todo.priority == TodoPriority.MEDIUM
    assert todo.severity == TodoSeverity.LOW


def test_from_storage_missing_created_at() -> None:
    source = _stored()
    del source["created_at"]
    todo = from_storage("t1", source)
    assert todo.created_at == NOW
    assert todo.updated_at == NOW

    bare = from_storage("t2", {"title": "Orphan"})
    assert bare.created_at == datetime(1970, 1, 1, tzinfo=timezone.utc)
    assert bare.updated_at == bare.created_at


def test_from_hit_maps_storage_names_to_domain_names() -> None:
    todo = from_hit({"_id": "abc", "_source": _stored(due_date="2024-07-01T00:00:00+00:00")})

    assert todo.id == "abc"
    assert todo.compliance_frameworks == ["SOC2"]
    assert todo.due_date == datetime(2024, 7, 1, tzinfo=timezone.utc)


def test_update_into_done_sets_and_back_out_clears_completed_at() -> None:
    existing = from_storage("t1", _stored())

    to_done = to_update_document(UpdateTodoRequest(status=TodoStatus.DONE), existing, NOW)
    assert to_done["completed_at"] == NOW.isoformat()
    done = merge_update(existing, to_done, "t1")
    assert done.status == TodoStatus.DONE
    assert done.completed_at == NOW

    back = to_update_document(UpdateTodoRequest(status=TodoStatus.PLANNED), done, LATER)
    assert "completed_at" in back and back["completed_at"] is None
    planned = merge_update(done, back, "t1")
    assert planned.status == TodoStatus.PLANNED
    assert planned.completed_at is None


def test_update_delta_contains_only_provided_fields() -> None:
    existing = from_storage("t1", _stored())
    delta = to_update_document(UpdateTodoRequest(priority=TodoPriority.CRITICAL), existing, LATER)

    assert set(delta) == {"priority", "updated_at"}
    assert delta["updated_at"] == LATER.isoformat()


def test_update_with_same_status_does_not_touch_completed_at() -> None:
    existing = from_storage("t1", _stored(status="done", completed_at=NOW.isoformat()))
    delta = to_update_document(UpdateTodoRequest(status=TodoStatus.DONE), existing, LATER)

    assert "completed_at" not in delta


def test_explicit_null_due_date_and_empty_assignee_clear_fields() -> None:
    existing = from_storage("t1", _stored(due_date="2024-07-01T00:00:00+00:00", assignee="alice"))
    request = UpdateTodoRequest.model_validate({"dueDate": None, "assignee": ""})
    delta = to_update_document(request, existing, LATER)

    assert delta["due_date"] is None
    assert delta["assignee"] is None
    merged = merge_update(existing, delta, "t1")
    assert merged.due_date is None
    assert merged.assignee is None


def test_update_normalizes_tags_and_frameworks() -> None:
    existing = from_storage("t1", _stored())
    request = UpdateTodoRequest(tags=[" A", "a", "B"], compliance_frameworks=["PCI", " PCI "])
    delta = to_update_document(request, existing, LATER)

    assert delta["tags"] == ["a", "b"]
    assert delta["compliance_framework"] == ["PCI"]
    merged = merge_update(existing, delta, "t1")
    assert merged.tags == ["a", "b"]
    assert merged.compliance_frameworks == ["PCI"]
    assert merged.title == existing.title


def test_overdue_predicate_follows_status() -> None:
    todo = from_storage("t1", _stored(due_date="2024-05-01T00:00:00+00:00"))
    assert todo.is_overdue(NOW) is True

    done = merge_update(todo, {"status": "done", "completed_at": NOW.isoformat()}, "t1")
    assert done.is_overdue(NOW) is False
    assert from_storage("t2", _stored()).is_overdue(NOW) is False

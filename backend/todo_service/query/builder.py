from __future__ import annotations

from typing import Any, List, Optional, Sequence, Union

from ..models import TodoAnalyticsParams, TodoSearchParams, TodoStatsParams, TodoStatus
from .dsl import Bool, Exists, MatchAll, MultiMatch, Query, Range, Term, Terms

SEARCH_FIELDS = ("title^2", "description")


def _as_list(value: Union[None, Any, Sequence[Any]]) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def enum_filter(field: str, value: Union[None, Any, Sequence[Any]]) -> Optional[Query]:
    """``term`` for a single value, ``terms`` for several, nothing for none."""

    values = _as_list(value)
    if not values:
        return None
    if len(values) == 1:
        return Term(field, values[0])
    return Terms(field, values)


def date_range(field: str, after: Optional[str], before: Optional[str]) -> Optional[Range]:
    if not after and not before:
        return None
    return Range(field, gte=after or None, lte=before or None)


def overdue_query() -> Bool:
    return Bool(
        must=[Range("due_date", lt="now"), Exists("due_date")],
        must_not=[Term("status", TodoStatus.DONE)],
    )


def _finalize(must: List[Query], filters: List[Query]) -> Query:
    if not must and not filters:
        return MatchAll()
    return Bool(must=must, filter=filters)


def build_search_query(params: TodoSearchParams) -> Query:
    must: List[Query] = []
    filters: List[Query] = []

    search_text = (params.search_text or "").strip()
    if search_text:
        must.append(MultiMatch(search_text, SEARCH_FIELDS))

    for field, value in (
        ("status", params.status),
        ("priority", params.priority),
        ("severity", params.severity),
    ):
        clause = enum_filter(field, value)
        if clause is not None:
            filters.append(clause)

    for tag in params.tags or []:
        normalized = tag.strip().lower()
        if normalized:
            filters.append(Term("tags", normalized))

    assignee = (params.assignee or "").strip()
    if assignee:
        filters.append(Term("assignee", assignee))

    frameworks = [framework.strip() for framework in (params.compliance_frameworks or []) if framework.strip()]
    if frameworks:
        filters.append(Terms("compliance_framework", frameworks))

    for field, after, before in (
        ("due_date", params.due_date_after, params.due_date_before),
        ("created_at", params.created_after, params.created_before),
        ("updated_at", params.updated_after, params.updated_before),
        ("completed_at", params.completed_after, params.completed_before),
    ):
        clause = date_range(field, after, before)
        if clause is not None:
            filters.append(clause)

    if params.is_overdue:
        filters.append(overdue_query())

    return _finalize(must, filters)


def build_stats_query(params: TodoStatsParams) -> Query:
    """Statistics only expose the created date window."""

    filters: List[Query] = []
    clause = date_range("created_at", params.created_after, params.created_before)
    if clause is not None:
        filters.append(clause)
    return _finalize([], filters)


def build_analytics_query(params: TodoAnalyticsParams) -> Query:
    filters: List[Query] = []
    framework = (params.compliance_framework or "").strip()
    if framework:
        filters.append(Term("compliance_framework", framework))
    if params.overdue_only:
        filters.append(overdue_query())
    return _finalize([], filters)

"""Turn raw aggregation responses into typed statistics."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .models import (
    TODO_PRIORITY_VALUES,
    TODO_SEVERITY_VALUES,
    TODO_STATUS_VALUES,
    AnalyticsStats,
    AssigneeCount,
    ComplianceCoverageStats,
    DistributionStats,
    OverdueTaskStats,
    PrioritySeverityMatrixCell,
    TagCount,
    TimeSeriesPoint,
    TodoPriority,
    TodoSeverity,
    TodoStats,
    TodoStatus,
    TodoSuggestions,
)

STATUS_PERCENT_PLACES = 0
ANALYTICS_PERCENT_PLACES = 2


def percentage(count: int, total: int, places: int = ANALYTICS_PERCENT_PLACES) -> float:
    """``count / total * 100`` rounded half-up; ``0`` for an empty total."""

    if total <= 0:
        return 0.0
    quantum = Decimal(1).scaleb(-places)
    value = (Decimal(count) * 100 / Decimal(total)).quantize(quantum, rounding=ROUND_HALF_UP)
    return float(value)


def _buckets(aggs: Optional[Mapping[str, Any]], name: str) -> List[Mapping[str, Any]]:
    if not aggs:
        return []
    agg = aggs.get(name) or {}
    return list(agg.get("buckets") or [])


def bucket_counts(buckets: Iterable[Mapping[str, Any]]) -> Dict[str, int]:
    return {str(bucket.get("key")): int(bucket.get("doc_count") or 0) for bucket in buckets}


def dense_counts(buckets: Iterable[Mapping[str, Any]], values: Iterable[str]) -> Dict[str, int]:
    """Counts for every known value, zero when the engine returned no bucket."""

    counts = bucket_counts(buckets)
    return {value: counts.get(value, 0) for value in values}


def distribution(
    buckets: Iterable[Mapping[str, Any]],
    values: Iterable[str],
    total: int,
) -> List[DistributionStats]:
    return [
        DistributionStats(label=label, count=count, percentage=percentage(count, total))
        for label, count in dense_counts(buckets, values).items()
    ]


def to_todo_stats(total: int, aggs: Optional[Mapping[str, Any]]) -> TodoStats:
    by_status = dense_counts(_buckets(aggs, "by_status"), TODO_STATUS_VALUES)
    status_percentages = {
        status: percentage(count, total, STATUS_PERCENT_PLACES) for status, count in by_status.items()
    }
    top_tags = [
        TagCount(tag=str(bucket["key"]), count=int(bucket.get("doc_count") or 0))
        for bucket in _buckets(aggs, "top_tags")
    ]
    completed_over_time = [
        TimeSeriesPoint(
            date=str(bucket.get("key_as_string") or bucket.get("key")),
            count=int(bucket.get("doc_count") or 0),
        )
        for bucket in _buckets(aggs, "completed_over_time")
    ]
    top_assignees = [
        AssigneeCount(assignee=str(bucket["key"]), count=int(bucket.get("doc_count") or 0))
        for bucket in _buckets(aggs, "top_assignees")
    ]
    unassigned = ((aggs or {}).get("unassigned") or {}).get("doc_count") or 0

    return TodoStats(
        total=total,
        by_status=by_status,
        status_percentages=status_percentages,
        top_tags=top_tags,
        completed_over_time=completed_over_time,
        top_assignees=top_assignees,
        unassigned_count=int(unassigned),
    )


def _compliance_coverage(aggs: Optional[Mapping[str, Any]]) -> List[ComplianceCoverageStats]:
    coverage: List[ComplianceCoverageStats] = []
    for bucket in _buckets(aggs, "compliance_coverage"):
        framework_total = int(bucket.get("doc_count") or 0)
        by_status = dense_counts(_buckets(bucket, "by_status"), TODO_STATUS_VALUES)
        coverage.append(
            ComplianceCoverageStats(
                framework=str(bucket.get("key")),
                total=framework_total,
                by_status=by_status,
                completion_rate=percentage(by_status[TodoStatus.DONE.value], framework_total),
            )
        )
    return coverage


def _overdue(aggs: Optional[Mapping[str, Any]]) -> OverdueTaskStats:
    overdue = (aggs or {}).get("overdue_tasks") or {}
    return OverdueTaskStats(
        total=int(overdue.get("doc_count") or 0),
        by_priority=dense_counts(_buckets(overdue, "by_priority"), TODO_PRIORITY_VALUES),
        by_severity=dense_counts(_buckets(overdue, "by_severity"), TODO_SEVERITY_VALUES),
    )


def _matrix(aggs: Optional[Mapping[str, Any]], total: int) -> List[PrioritySeverityMatrixCell]:
    cells: List[PrioritySeverityMatrixCell] = []
    for priority_bucket in _buckets(aggs, "priority_severity_matrix"):
        priority_key = str(priority_bucket.get("key"))
        if priority_key not in TODO_PRIORITY_VALUES:
            continue
        for severity_bucket in _buckets(priority_bucket, "by_severity"):
            severity_key = str(severity_bucket.get("key"))
            if severity_key not in TODO_SEVERITY_VALUES:
                continue
            count = int(severity_bucket.get("doc_count") or 0)
            cells.append(
                PrioritySeverityMatrixCell(
                    priority=TodoPriority(priority_key),
                    severity=TodoSeverity(severity_key),
                    count=count,
                    percentage=percentage(count, total),
                )
            )
    return cells


def to_analytics_stats(
    total: int,
    aggs: Optional[Mapping[str, Any]],
    now: Optional[datetime] = None,
) -> AnalyticsStats:
    return AnalyticsStats(
        computed_at=now or datetime.now(timezone.utc),
        total_tasks=total,
        compliance_coverage=_compliance_coverage(aggs),
        overdue_tasks=_overdue(aggs),
        priority_distribution=distribution(_buckets(aggs, "priority_distribution"), TODO_PRIORITY_VALUES, total),
        severity_distribution=distribution(_buckets(aggs, "severity_distribution"), TODO_SEVERITY_VALUES, total),
        priority_severity_matrix=_matrix(aggs, total),
    )


def to_suggestions(aggs: Optional[Mapping[str, Any]]) -> TodoSuggestions:
    return TodoSuggestions(
        tags=[str(bucket.get("key")) for bucket in _buckets(aggs, "unique_tags")],
        compliance_frameworks=[str(bucket.get("key")) for bucket in _buckets(aggs, "unique_compliance_frameworks")],
    )

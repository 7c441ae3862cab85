from __future__ import annotations

from typing import Dict

from ..models import TimeInterval, TodoStatsParams
from .builder import overdue_query
from .dsl import Aggregation, DateHistogramAgg, FilterAgg, MissingAgg, TermsAgg

ENUM_BUCKET_SIZE = 10

HISTOGRAM_FORMATS: Dict[TimeInterval, str] = {
    TimeInterval.HOUR: "yyyy-MM-dd'T'HH:mm",
    TimeInterval.DAY: "yyyy-MM-dd",
    TimeInterval.WEEK: "yyyy-MM-dd",
    TimeInterval.MONTH: "yyyy-MM",
}


def completion_histogram(interval: TimeInterval) -> DateHistogramAgg:
    return DateHistogramAgg(
        field="completed_at",
        calendar_interval=interval.value,
        format=HISTOGRAM_FORMATS[interval],
        min_doc_count=0,
    )


def build_stats_aggregations(params: TodoStatsParams) -> Dict[str, Aggregation]:
    return {
        "by_status": TermsAgg("status", size=ENUM_BUCKET_SIZE),
        "top_tags": TermsAgg("tags", size=params.top_tags_limit),
        "completed_over_time": completion_histogram(params.time_interval),
        "top_assignees": TermsAgg("assignee", size=params.top_assignees_limit),
        "unassigned": MissingAgg("assignee"),
    }


def build_analytics_aggregations(compliance_coverage_size: int = 50) -> Dict[str, Aggregation]:
    return {
        "compliance_coverage": TermsAgg(
            "compliance_framework",
            size=compliance_coverage_size,
            aggs={"by_status": TermsAgg("status", size=ENUM_BUCKET_SIZE)},
        ),
        "overdue_tasks": FilterAgg(
            overdue_query(),
            aggs={
                "by_priority": TermsAgg("priority", size=ENUM_BUCKET_SIZE),
                "by_severity": TermsAgg("severity", size=ENUM_BUCKET_SIZE),
            },
        ),
        "priority_distribution": TermsAgg("priority", size=ENUM_BUCKET_SIZE),
        "severity_distribution": TermsAgg("severity", size=ENUM_BUCKET_SIZE),
        "priority_severity_matrix": TermsAgg(
            "priority",
            size=ENUM_BUCKET_SIZE,
            aggs={"by_severity": TermsAgg("severity", size=ENUM_BUCKET_SIZE)},
        ),
    }


def build_suggestion_aggregations(limit: int = 100) -> Dict[str, Aggregation]:
    return {
        "unique_tags": TermsAgg("tags", size=limit),
        "unique_compliance_frameworks": TermsAgg("compliance_framework", size=limit),
    }

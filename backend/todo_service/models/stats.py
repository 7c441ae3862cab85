from __future__ import annotations

from datetime import datetime
from typing import Dict, List

from pydantic import Field, field_serializer

from .todo import CamelModel, TodoPriority, TodoSeverity


class TagCount(CamelModel):
    tag: str
    count: int


class AssigneeCount(CamelModel):
    assignee: str
    count: int


class TimeSeriesPoint(CamelModel):
    date: str
    count: int


class TodoStats(CamelModel):
    total: int
    by_status: Dict[str, int]
    status_percentages: Dict[str, float]
    top_tags: List[TagCount] = Field(default_factory=list)
    completed_over_time: List[TimeSeriesPoint] = Field(default_factory=list)
    top_assignees: List[AssigneeCount] = Field(default_factory=list)
    unassigned_count: int = 0


class ComplianceCoverageStats(CamelModel):
    framework: str
    total: int
    by_status: Dict[str, int]
    completion_rate: float


class OverdueTaskStats(CamelModel):
    total: int
    by_priority: Dict[str, int]
    by_severity: Dict[str, int]


class DistributionStats(CamelModel):
    label: str
    count: int
    percentage: float


class PrioritySeverityMatrixCell(CamelModel):
    priority: TodoPriority
    severity: TodoSeverity
    count: int
    percentage: float


class AnalyticsStats(CamelModel):
    computed_at: datetime
    total_tasks: int
    compliance_coverage: List[ComplianceCoverageStats] = Field(default_factory=list)
    overdue_tasks: OverdueTaskStats
    priority_distribution: List[DistributionStats] = Field(default_factory=list)
    severity_distribution: List[DistributionStats] = Field(default_factory=list)
    priority_severity_matrix: List[PrioritySeverityMatrixCell] = Field(default_factory=list)

    @field_serializer("computed_at", when_used="json")
    def serialize_computed_at(self, value: datetime) -> str:
        return value.isoformat()


class TodoSuggestions(CamelModel):
    tags: List[str] = Field(default_factory=list)
    compliance_frameworks: List[str] = Field(default_factory=list)


class BackfillResult(CamelModel):
    updated: int = 0
    errors: int = 0
    total: int = 0

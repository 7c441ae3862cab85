from .requests import (
	CreateTodoRequest,
	ListTodosResponse,
	PaginationMeta,
	SearchResult,
	SortDirection,
	SortField,
	TimeInterval,
	TodoAnalyticsParams,
	TodoSearchParams,
	TodoStatsParams,
	UpdateTodoRequest,
)
from .stats import (
	AnalyticsStats,
	AssigneeCount,
	BackfillResult,
	ComplianceCoverageStats,
	DistributionStats,
	OverdueTaskStats,
	PrioritySeverityMatrixCell,
	TagCount,
	TimeSeriesPoint,
	TodoStats,
	TodoSuggestions,
)
from .todo import (
	DEFAULT_PAGE_SIZE,
	MAX_PAGE_SIZE,
	TODO_PRIORITY_VALUES,
	TODO_SEVERITY_VALUES,
	TODO_STATUS_VALUES,
	Todo,
	TodoDocument,
	TodoPriority,
	TodoSeverity,
	TodoStatus,
)

__all__ = [
	"AnalyticsStats",
	"AssigneeCount",
	"BackfillResult",
	"ComplianceCoverageStats",
	"CreateTodoRequest",
	"DEFAULT_PAGE_SIZE",
	"DistributionStats",
	"ListTodosResponse",
	"MAX_PAGE_SIZE",
	"OverdueTaskStats",
	"PaginationMeta",
	"PrioritySeverityMatrixCell",
	"SearchResult",
	"SortDirection",
	"SortField",
	"TODO_PRIORITY_VALUES",
	"TODO_SEVERITY_VALUES",
	"TODO_STATUS_VALUES",
	"TagCount",
	"TimeInterval",
	"TimeSeriesPoint",
	"Todo",
	"TodoAnalyticsParams",
	"TodoDocument",
	"TodoPriority",
	"TodoSearchParams",
	"TodoSeverity",
	"TodoStats",
	"TodoStatsParams",
	"TodoStatus",
	"TodoSuggestions",
	"UpdateTodoRequest",
]

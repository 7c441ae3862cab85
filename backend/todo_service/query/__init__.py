from .aggregations import (
	build_analytics_aggregations,
	build_stats_aggregations,
	build_suggestion_aggregations,
)
from .builder import build_analytics_query, build_search_query, build_stats_query, overdue_query
from .dsl import render_aggregations
from .sort import resolve_sort

__all__ = [
	"build_analytics_aggregations",
	"build_analytics_query",
	"build_search_query",
	"build_stats_aggregations",
	"build_stats_query",
	"build_suggestion_aggregations",
	"overdue_query",
	"render_aggregations",
	"resolve_sort",
]

from .analytics import AnalyticsService
from .stats import StatsService
from .todos import TodosService

__all__ = [
	"AnalyticsService",
	"StatsService",
	"TodosService",
]

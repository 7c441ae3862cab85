from .index_manager import INDEX_MAPPING, IndexManager
from .interface import TodosRepositoryProtocol
from .todos import ElasticsearchTodosRepository

__all__ = [
	"ElasticsearchTodosRepository",
	"INDEX_MAPPING",
	"IndexManager",
	"TodosRepositoryProtocol",
]

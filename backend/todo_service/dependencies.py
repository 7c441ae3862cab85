from __future__ import annotations

from typing import AsyncIterator, Dict

from elasticsearch import AsyncElasticsearch
from fastapi import Depends

from .config import TodoServiceSettings, get_settings
from .elasticsearch_client import get_elasticsearch_client
from .repositories.index_manager import IndexManager
from .repositories.interface import TodosRepositoryProtocol
from .repositories.todos import ElasticsearchTodosRepository
from .services.analytics import AnalyticsService
from .services.stats import StatsService
from .services.todos import TodosService

# Index readiness has to outlive a single request.
_index_managers: Dict[str, IndexManager] = {}


def get_index_manager(client: AsyncElasticsearch, settings: TodoServiceSettings) -> IndexManager:
    cfg = settings.elasticsearch
    if not cfg:
        raise ValueError("Elasticsearch configuration is missing")
    manager = _index_managers.get(cfg.todos_index)
    if manager is None or manager.client is not client:
        manager = IndexManager(
            client,
            cfg.todos_index,
            number_of_shards=cfg.number_of_shards,
            number_of_replicas=cfg.number_of_replicas,
        )
        _index_managers[cfg.todos_index] = manager
    return manager


def build_todos_repository(settings: TodoServiceSettings) -> ElasticsearchTodosRepository:
    client = get_elasticsearch_client(settings)
    return ElasticsearchTodosRepository(client, settings, index_manager=get_index_manager(client, settings))


async def get_app_settings() -> TodoServiceSettings:
    return get_settings()


async def get_todos_repository(
    settings: TodoServiceSettings = Depends(get_app_settings),
) -> AsyncIterator[TodosRepositoryProtocol]:
    yield build_todos_repository(settings)


async def get_todos_service(
    repository: TodosRepositoryProtocol = Depends(get_todos_repository),
    settings: TodoServiceSettings = Depends(get_app_settings),
) -> TodosService:
    return TodosService(repository, settings)


async def get_stats_service(
    repository: TodosRepositoryProtocol = Depends(get_todos_repository),
    settings: TodoServiceSettings = Depends(get_app_settings),
) -> StatsService:
    return StatsService(repository, settings)


async def get_analytics_service(
    repository: TodosRepositoryProtocol = Depends(get_todos_repository),
) -> AnalyticsService:
    return AnalyticsService(repository)

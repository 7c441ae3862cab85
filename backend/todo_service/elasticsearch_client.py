from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, Optional, Tuple

from elasticsearch import AsyncElasticsearch

from .config import ElasticsearchConfig, TodoServiceSettings, get_settings


def _client_options(cfg: ElasticsearchConfig) -> Tuple[Tuple[str, ...], Optional[str], float, bool]:
    return (tuple(cfg.hosts), cfg.api_key, cfg.request_timeout, cfg.verify_certs)


@lru_cache(maxsize=4)
def _cached_client(options: Tuple[Tuple[str, ...], Optional[str], float, bool]) -> AsyncElasticsearch:
    hosts, api_key, request_timeout, verify_certs = options
    kwargs: Dict[str, Any] = {
        "hosts": list(hosts),
        "request_timeout": request_timeout,
        "verify_certs": verify_certs,
    }
    if api_key:
        kwargs["api_key"] = api_key
    return AsyncElasticsearch(**kwargs)


def get_elasticsearch_client(settings: TodoServiceSettings | None = None) -> AsyncElasticsearch:
    """Return the process-wide async client for the configured cluster."""

    cfg = settings or get_settings()
    if not cfg.elasticsearch:
        raise ValueError("Elasticsearch configuration is missing")
    return _cached_client(_client_options(cfg.elasticsearch))


async def close_elasticsearch_client(settings: TodoServiceSettings | None = None) -> None:
    client = get_elasticsearch_client(settings)
    await client.close()
    _cached_client.cache_clear()

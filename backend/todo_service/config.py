from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, model_validator

from .models import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


DEFAULT_CONFIG_PATH = Path(os.getenv("TODO_SERVICE_CONFIG", Path.cwd() / "config.yml"))


class ElasticsearchConfig(BaseModel):
    """Elasticsearch connectivity and index configuration."""

    hosts: List[str] = Field(default_factory=lambda: ["http://localhost:9200"], description="Elasticsearch hosts")
    api_key: Optional[str] = Field(None, description="Optional API key sent with every request")
    request_timeout: float = Field(10.0, gt=0, description="Per-request timeout in seconds")
    verify_certs: bool = Field(True, description="Verify TLS certificates of the cluster")
    todos_index: str = Field("todos", description="Index used for storing todo documents")
    number_of_shards: int = Field(1, ge=1, description="Primary shard count used when the index is created")
    number_of_replicas: int = Field(0, ge=0, description="Replica count used when the index is created")
    backfill_on_startup: bool = Field(True, description="Fill defaults into legacy documents when the app starts")


class PaginationConfig(BaseModel):
    default_page_size: int = Field(DEFAULT_PAGE_SIZE, ge=1, description="Page size used when none is requested")
    max_page_size: int = Field(MAX_PAGE_SIZE, ge=1, description="Upper bound requested page sizes are clamped to")

    @model_validator(mode="after")
    def _validate_bounds(self) -> "PaginationConfig":
        if self.default_page_size > self.max_page_size:
            raise ValueError("pagination.default_page_size must not exceed pagination.max_page_size")
        return self


class AnalyticsConfig(BaseModel):
    """Bucket sizes for statistics, analytics and suggestion aggregations."""

    top_tags_limit: int = Field(10, ge=1, le=100)
    top_assignees_limit: int = Field(10, ge=1, le=100)
    compliance_coverage_size: int = Field(50, ge=1, description="Maximum number of frameworks reported in coverage")
    suggestions_limit: int = Field(100, ge=1, description="Maximum number of distinct tags/frameworks suggested")


class TodoServiceSettings(BaseModel):
    """Top-level application configuration object."""

    environment: str = Field("development", description="Environment name")
    api_prefix: str = Field("/api", description="API route prefix")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field("INFO", description="Root log level")
    elasticsearch: Optional[ElasticsearchConfig] = None
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)

    @model_validator(mode="after")
    def _validate_backend(self) -> "TodoServiceSettings":
        if not self.elasticsearch:
            raise ValueError("Elasticsearch configuration is required for this application")
        return self


def _load_yaml(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def build_settings(config_path: Optional[Path] = None) -> TodoServiceSettings:
    """Instantiate settings from a YAML file."""

    resolved_path = Path(config_path or DEFAULT_CONFIG_PATH)
    if not resolved_path.exists():
        raise FileNotFoundError(f"Configuration file not found at {resolved_path}")

    data = _load_yaml(resolved_path)
    return TodoServiceSettings(**data)


@lru_cache(maxsize=1)
def get_settings() -> TodoServiceSettings:
    """Cached accessor for settings."""

    return build_settings()

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from ..config import TodoServiceSettings, get_settings
from ..errors import ValidationError
from ..models import TodoStats, TodoStatsParams
from ..repositories.interface import TodosRepositoryProtocol


def _parse(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class StatsService:
    def __init__(self, repository: TodosRepositoryProtocol, settings: Optional[TodoServiceSettings] = None) -> None:
        self.repository = repository
        self.settings = settings or get_settings()

    def default_params(self) -> TodoStatsParams:
        return TodoStatsParams(
            top_tags_limit=self.settings.analytics.top_tags_limit,
            top_assignees_limit=self.settings.analytics.top_assignees_limit,
        )

    async def get_stats(self, params: Optional[TodoStatsParams] = None) -> TodoStats:
        params = params or self.default_params()
        if params.created_after and params.created_before:
            if _parse(params.created_after) > _parse(params.created_before):
                raise ValidationError(
                    "createdAfter must be before createdBefore",
                    {"createdAfter": params.created_after, "createdBefore": params.created_before},
                )
        return await self.repository.get_stats(params)

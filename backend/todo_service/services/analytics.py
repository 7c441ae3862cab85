from __future__ import annotations

from typing import Optional

from ..models import AnalyticsStats, TodoAnalyticsParams, TodoSuggestions
from ..repositories.interface import TodosRepositoryProtocol


class AnalyticsService:
    """Compliance and risk analytics plus autocomplete suggestions."""

    def __init__(self, repository: TodosRepositoryProtocol) -> None:
        self.repository = repository

    async def get_analytics(self, params: Optional[TodoAnalyticsParams] = None) -> AnalyticsStats:
        params = params or TodoAnalyticsParams()
        if params.compliance_framework is not None:
            framework = params.compliance_framework.strip()
            params = params.model_copy(update={"compliance_framework": framework or None})
        return await self.repository.get_analytics(params)

    async def get_suggestions(self) -> TodoSuggestions:
        return await self.repository.get_suggestions()

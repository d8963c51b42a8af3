"""Deployment log retrieval."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from .errors import NotFoundError
from .models.common import SearchResult
from .models.log import Log, LogFilter, LogSearchFilters, LogSearchRequest, SortConfiguration
from .transport import REST_API_PREFIX

if TYPE_CHECKING:
    from .client import A4CClient


class LogService:
    def __init__(self, client: A4CClient) -> None:
        self._client = client

    async def _search(self, request: LogSearchRequest) -> SearchResult[Log]:
        result = await self._client.request_json(
            "POST", f"{REST_API_PREFIX}/deployment/logs/search", request, SearchResult[Log]
        )
        return result or SearchResult[Log]()

    async def get_logs_of_application(
        self,
        app_id: str,
        env_id: str,
        filters: LogFilter | None = None,
        from_index: int = 0,
    ) -> tuple[list[Log], int]:
        """Return the logs of the current deployment, oldest first, and their count.

        A first query reads the number of available logs, a second one fetches
        them all sorted by timestamp.
        """
        deployments = await self._client.deployments.get_deployment_list(app_id, env_id)
        if not deployments:
            raise NotFoundError(
                "No deployment to read logs from",
                {"application": app_id, "environment": env_id},
            )

        search_filters = LogSearchFilters(
            **(filters or LogFilter()).model_dump(),
            deployment_id=[deployments[0].id],
        )
        count = await self._search(
            LogSearchRequest(from_=from_index, size=1, filters=search_filters)
        )
        logger.debug(f"{count.total_results} logs available for deployment {deployments[0].id}")

        result = await self._search(
            LogSearchRequest(
                from_=from_index,
                size=count.total_results,
                filters=search_filters,
                sort_configuration=SortConfiguration(ascending=True, sort_by="timestamp"),
            )
        )
        return result.data, len(result.data)

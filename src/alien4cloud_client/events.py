"""Deployment event retrieval."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlencode

from .models.common import SearchResult
from .models.log import Event
from .transport import REST_API_PREFIX

if TYPE_CHECKING:
    from .client import A4CClient


class EventService:
    def __init__(self, client: A4CClient) -> None:
        self._client = client

    async def get_events_for_application_environment(
        self, env_id: str, from_index: int = 0, size: int = 50
    ) -> tuple[list[Event], int]:
        """Return events sorted by descending date and the total number of events."""
        query = urlencode({"from": from_index, "size": size})
        result = await self._client.request_json(
            "GET",
            f"{REST_API_PREFIX}/deployments/{env_id}/events?{query}",
            data_type=SearchResult[Event],
        )
        if result is None:
            return [], 0
        return result.data, result.total_results

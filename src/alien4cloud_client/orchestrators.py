"""Orchestrator and location lookups."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .errors import A4CError, NotFoundError
from .models.common import A4CModel, Location, SearchRequest, SearchResult
from .models.deployment import Orchestrator
from .transport import REST_API_PREFIX

if TYPE_CHECKING:
    from .client import A4CClient


class _LocationEntry(A4CModel):
    location: Location


class OrchestratorService:
    def __init__(self, client: A4CClient) -> None:
        self._client = client

    async def get_orchestrator_locations(self, orchestrator_id: str) -> list[Location]:
        entries = await self._client.request_json(
            "GET",
            f"{REST_API_PREFIX}/orchestrators/{orchestrator_id}/locations",
            data_type=list[_LocationEntry],
        )
        return [entry.location for entry in entries or []]

    async def get_orchestrator_id_by_name(self, name: str) -> str:
        result = await self._client.request_json(
            "GET",
            f"{REST_API_PREFIX}/orchestrators",
            SearchRequest(query=name, size=1),
            SearchResult[Orchestrator],
        )
        if result is None or result.total_results <= 0 or not result.data:
            raise NotFoundError(f"{name!r} orchestrator name does not exist")
        orchestrator_id = result.data[0].id
        if not orchestrator_id:
            raise A4CError(f"No ID for {name!r} orchestrator")
        return orchestrator_id

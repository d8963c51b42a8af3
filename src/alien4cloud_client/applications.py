"""Application management service."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from loguru import logger

from .errors import A4CError, NotFoundError
from .models.application import (
    Application,
    ApplicationCreateRequest,
    Environment,
    TagUpdateRequest,
)
from .models.common import SearchRequest, SearchResult
from .models.topology import Topology
from .transport import REST_API_PREFIX, discard_response

if TYPE_CHECKING:
    from .client import A4CClient


class ApplicationService:
    """Create, look up, tag and delete Alien4Cloud applications."""

    def __init__(self, client: A4CClient) -> None:
        self._client = client

    async def create_application(self, name: str, template_name: str) -> str:
        """Create an application from the topology template named ``template_name``."""
        template_id = await self._client.topology.get_topology_template_id_by_name(template_name)
        request = ApplicationCreateRequest(
            name=name,
            archive_name=name,
            topology_template_version_id=template_id,
        )
        try:
            app_id = await self._client.request_json(
                "POST", f"{REST_API_PREFIX}/applications", request, str
            )
        except A4CError as exc:
            exc.context.update({"application": name, "template": template_name})
            logger.error(f"Unable to create application {name!r}: {exc}")
            raise
        logger.info(f"Created application {app_id} from template {template_name}")
        return app_id

    async def search_environments(
        self, app_id: str, search: SearchRequest | None = None
    ) -> tuple[list[Environment], int]:
        result = await self._client.request_json(
            "POST",
            f"{REST_API_PREFIX}/applications/{app_id}/environments/search",
            search or SearchRequest(size=0),
            SearchResult[Environment],
        )
        if result is None:
            return [], 0
        return result.data, result.total_results

    async def get_environment_id_by_name(self, app_id: str, env_name: str) -> str:
        environments, _ = await self.search_environments(app_id, SearchRequest(size=0))
        for environment in environments:
            if environment.name == env_name:
                return environment.id
        raise NotFoundError(
            f"{env_name!r} environment for application {app_id!r} not found",
            {"application": app_id},
        )

    async def application_exists(self, app_id: str) -> bool:
        request = self._client.new_request("GET", f"{REST_API_PREFIX}/applications/{app_id}")
        response = await self._client.do(request)
        if response.status_code == httpx.codes.NOT_FOUND:
            await discard_response(response)
            return False
        await self._client.read_response(response)
        return True

    async def search_applications(
        self, search: SearchRequest | None = None
    ) -> tuple[list[Application], int]:
        """Return the applications matching ``search`` and the total match count."""
        result = await self._client.request_json(
            "POST",
            f"{REST_API_PREFIX}/applications/search",
            search or SearchRequest(),
            SearchResult[Application],
        )
        if result is None or result.total_results <= 0:
            return [], 0
        return result.data, result.total_results

    async def get_application_ids(self, query: str = "") -> list[str]:
        request = self._client.new_request(
            "POST",
            f"{REST_API_PREFIX}/applications/search",
            SearchRequest(query=query, size=0).model_dump_json(by_alias=True, exclude_none=True),
        )
        response = await self._client.do(request)
        if response.status_code == httpx.codes.NOT_FOUND:
            await discard_response(response)
            return []
        result = await self._client.read_response(response, SearchResult[Application])
        if result is None or result.total_results <= 0:
            return []
        return [application.id for application in result.data]

    async def get_application_by_id(self, app_id: str) -> Application:
        application = await self._client.request_json(
            "GET", f"{REST_API_PREFIX}/applications/{app_id}", data_type=Application
        )
        if application is None:
            raise NotFoundError(f"Application {app_id!r} not found")
        return application

    async def delete_application(self, app_id: str) -> None:
        await self._client.request_json("DELETE", f"{REST_API_PREFIX}/applications/{app_id}")
        logger.info(f"Deleted application {app_id}")

    async def set_tag(self, app_id: str, key: str, value: str) -> None:
        await self._client.request_json(
            "POST",
            f"{REST_API_PREFIX}/applications/{app_id}/tags",
            TagUpdateRequest(tag_key=key, tag_value=value),
        )

    async def get_tag(self, app_id: str, key: str) -> str:
        application = await self.get_application_by_id(app_id)
        value = application.tag_value(key)
        if value is None:
            raise NotFoundError(f"No tag with key {key!r}", {"application": app_id})
        return value

    async def get_deployment_topology(self, app_id: str, env_id: str) -> Topology:
        topology = await self._client.request_json(
            "GET",
            f"{REST_API_PREFIX}/applications/{app_id}/environments/{env_id}/deployment-topology",
            data_type=Topology,
        )
        return topology or Topology()

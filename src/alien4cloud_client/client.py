"""Alien4Cloud REST client: session, request construction and dispatch."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
from loguru import logger
from pydantic import BaseModel

from .applications import ApplicationService
from .auth import AuthenticationManager, build_verify
from .catalog import CatalogService
from .config import ClientConfig, normalize_base_url
from .deployments import DeploymentService
from .events import EventService
from .logs import LogService
from .orchestrators import OrchestratorService
from .topology import TopologyService
from .transport import (
    JSON_MEDIA_TYPE,
    A4CRequest,
    Continue,
    Fail,
    RequestBody,
    Retry,
    RetryPredicate,
    discard_response,
    read_response,
    retry_forbidden,
)
from .users import UserService

CONNECT_TIMEOUT = 30.0


class A4CClient:
    """Asynchronous client of the Alien4Cloud REST API.

    The client owns an ``httpx.AsyncClient`` (connection pool, cookie store,
    TLS settings) and exposes one service object per resource family::

        async with A4CClient(ClientConfig.from_file()) as client:
            await client.login()
            app_id = await client.applications.create_application("app", "template")
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.base_url = normalize_base_url(config.url)
        self._http = httpx.AsyncClient(
            verify=build_verify(self.base_url, config),
            timeout=httpx.Timeout(None, connect=CONNECT_TIMEOUT),
            transport=transport,
            trust_env=True,
        )
        self._auth = AuthenticationManager(self._http, self.base_url, config)

        self.applications = ApplicationService(self)
        self.catalog = CatalogService(self)
        self.deployments = DeploymentService(self)
        self.events = EventService(self)
        self.logs = LogService(self)
        self.orchestrators = OrchestratorService(self)
        self.topology = TopologyService(self)
        self.users = UserService(self)

    @classmethod
    def from_file(cls, path: Path | str | None = None) -> A4CClient:
        return cls(ClientConfig.from_file(path))

    async def __aenter__(self) -> A4CClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @property
    def cookies(self) -> httpx.Cookies:
        return self._http.cookies

    async def login(self) -> None:
        await self._auth.login()

    async def logout(self) -> None:
        await self._auth.logout()

    def new_request(
        self,
        method: str,
        path: str,
        body: RequestBody | None = None,
        headers: dict[str, str] | None = None,
    ) -> A4CRequest:
        """Build a request for ``path`` (relative to the base URL) with JSON defaults."""
        merged = {"Content-Type": JSON_MEDIA_TYPE, "Accept": JSON_MEDIA_TYPE}
        if headers:
            merged.update(headers)
        return A4CRequest(method, f"{self.base_url}{path}", merged, body)

    async def _send(self, request: A4CRequest) -> httpx.Response:
        response = await self._http.send(request.build(self._http), stream=True)
        logger.debug(f"{request.method} {request.url} -> {response.status_code}")
        return response

    async def do(self, request: A4CRequest, *retries: RetryPredicate) -> httpx.Response:
        """Send ``request`` and run the retry chain against its response.

        ``retries`` are evaluated in order, the re-login predicate last. A
        ``Retry`` restarts dispatch from the top with the returned request. The
        returned response is unread; pass it to :meth:`read_response`.
        """
        try:
            response = await self._send(request)
            try:
                action = await self._run_retries(request, response, retries)
            except BaseException:
                await response.aclose()
                raise
            if action is None:
                return response
            await discard_response(response)
            if isinstance(action, Fail):
                raise action.error
            logger.debug(f"Retrying {action.request.method} {action.request.url}")
            return await self.do(action.request, *retries)
        finally:
            request.close()

    async def _run_retries(
        self,
        request: A4CRequest,
        response: httpx.Response,
        retries: tuple[RetryPredicate, ...],
    ) -> Retry | Fail | None:
        """Return the first non-``Continue`` action of the chain, or None."""
        for predicate in (*retries, retry_forbidden):
            request.rewind()
            action = await predicate(self, request, response)
            if isinstance(action, Retry | Fail):
                return action
            if not isinstance(action, Continue):
                raise TypeError(f"Unexpected retry action {action!r}")
        return None

    async def read_response(self, response: httpx.Response, data_type: Any = None) -> Any:
        return await read_response(response, data_type)

    async def request_json(
        self,
        method: str,
        path: str,
        payload: Any = None,
        data_type: Any = None,
        *,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Send ``payload`` and decode the envelope ``data`` as ``data_type``.

        Models and plain values are encoded as JSON; ``bytes`` are sent as-is.
        """
        body: bytes | None = None
        if isinstance(payload, bytes):
            body = payload
        elif isinstance(payload, BaseModel):
            body = payload.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")
        elif payload is not None:
            body = json.dumps(payload).encode("utf-8")
        request = self.new_request(method, path, body, headers)
        response = await self.do(request)
        return await self.read_response(response, data_type)

"""Pytest configuration and a fake Alien4Cloud server.

This file ensures that:
- `src/` is importable
- tests can build an `A4CClient` wired to an in-memory `httpx.MockTransport`
"""

from __future__ import annotations

import json
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

# Ensure src directory is in path for imports
repo_root = Path(__file__).parent.parent
src_path = repo_root / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from alien4cloud_client import A4CClient, ClientConfig  # noqa: E402

BASE_URL = "http://a4c.example.com"
REST = "/rest/latest"

Handler = Callable[[httpx.Request], httpx.Response]


def envelope(data: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json={"data": data, "error": None})


def error_response(status_code: int, message: str) -> httpx.Response:
    return httpx.Response(
        status_code, json={"error": {"code": status_code, "message": message}}
    )


class FakeAlien4Cloud:
    """Route table keyed by (method, path); records every request it receives."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, handler: Handler) -> None:
        self.routes[(method, path)] = handler

    def reply(self, method: str, path: str, data: Any, status_code: int = 200) -> None:
        self.on(method, path, lambda request: envelope(data, status_code))

    def fail(self, method: str, path: str, status_code: int, message: str) -> None:
        self.on(method, path, lambda request: error_response(status_code, message))

    def sequence(self, method: str, path: str, responses: list[httpx.Response]) -> None:
        """Serve ``responses`` in order, repeating the last one."""
        remaining = list(responses)

        def handler(request: httpx.Request) -> httpx.Response:
            return remaining.pop(0) if len(remaining) > 1 else remaining[0]

        self.on(method, path, handler)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def json_body(self, request: httpx.Request) -> Any:
        return json.loads(request.content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return error_response(404, f"unexpected call {request.method} {request.url.path}")
        return handler(request)


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(
        url=BASE_URL,
        user="admin",
        password="secret",
        poll_interval=0.0,
        settle_delay=0.0,
        state_poll_interval=0.0,
    )


@pytest.fixture
def server() -> FakeAlien4Cloud:
    fake = FakeAlien4Cloud()
    fake.reply("POST", "/login", None)
    return fake


@pytest.fixture
def make_client(config: ClientConfig, server: FakeAlien4Cloud) -> Callable[..., A4CClient]:
    def factory(handler: Handler | None = None, **overrides: Any) -> A4CClient:
        effective = config.model_copy(update=overrides) if overrides else config
        return A4CClient(effective, transport=httpx.MockTransport(handler or server))

    return factory

"""Request dispatch primitives: replayable requests, retry actions, envelope reading."""

from __future__ import annotations

import io
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from typing import IO, TYPE_CHECKING, Any

import httpx
from loguru import logger
from pydantic import ValidationError

from .errors import A4CError, APIError, ResponseDecodeError
from .models.common import Envelope, ErrorEnvelope

if TYPE_CHECKING:
    from .client import A4CClient

REST_API_PREFIX = "/rest/latest"
JSON_MEDIA_TYPE = "application/json"

_STREAM_CHUNK_SIZE = 64 * 1024

RequestBody = bytes | bytearray | str | IO[bytes]


class A4CRequest:
    """Outgoing request whose body can be rewound and sent again.

    In-memory bodies (``bytes``, ``str``, ``BytesIO``) are sent with a
    ``Content-Length`` header. Other seekable binary files are streamed and
    closed once the request has been dispatched.
    """

    def __init__(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        body: RequestBody | None = None,
    ) -> None:
        self.method = method.upper()
        self.url = url
        self.headers: dict[str, str] = dict(headers or {})
        self._content: bytes | None = None
        self._stream: IO[bytes] | None = None
        self.relogin_attempted = False

        if body is None:
            return
        if isinstance(body, str):
            self._content = body.encode("utf-8")
        elif isinstance(body, bytes | bytearray):
            self._content = bytes(body)
        elif isinstance(body, io.BytesIO):
            self._content = body.getvalue()
        elif hasattr(body, "read") and hasattr(body, "seek"):
            if hasattr(body, "seekable") and not body.seekable():
                raise TypeError("Request body file objects must be seekable")
            self._stream = body
        else:
            raise TypeError(f"Unsupported request body type: {type(body).__name__}")

    def rewind(self) -> None:
        if self._stream is not None:
            self._stream.seek(0)

    def close(self) -> None:
        if self._stream is not None and hasattr(self._stream, "close"):
            self._stream.close()

    async def _iter_stream(self) -> AsyncIterator[bytes]:
        assert self._stream is not None
        while chunk := self._stream.read(_STREAM_CHUNK_SIZE):
            yield chunk

    def build(self, client: httpx.AsyncClient) -> httpx.Request:
        """Materialize the request on ``client`` with its current body cursor."""
        content: bytes | AsyncIterator[bytes] | None = self._content
        if self._stream is not None:
            content = self._iter_stream()
        return client.build_request(self.method, self.url, headers=self.headers, content=content)

    def __repr__(self) -> str:
        return f"A4CRequest({self.method} {self.url})"


@dataclass(slots=True, frozen=True)
class Retry:
    """Resend ``request`` from the top of the dispatch chain."""

    request: A4CRequest


@dataclass(slots=True, frozen=True)
class Continue:
    """Let the next predicate in the chain inspect the response."""


@dataclass(slots=True, frozen=True)
class Fail:
    """Abort dispatch and raise ``error``."""

    error: BaseException


RetryAction = Retry | Continue | Fail
RetryPredicate = Callable[["A4CClient", A4CRequest, httpx.Response], Awaitable[RetryAction]]


async def retry_forbidden(
    client: A4CClient, request: A4CRequest, response: httpx.Response
) -> RetryAction:
    """Log in again and resend the request when the session was rejected with 403.

    The re-login happens once per request; a 403 received after a fresh login
    is left to :func:`read_response`.
    """
    if response.status_code != httpx.codes.FORBIDDEN or request.relogin_attempted:
        return Continue()

    request.relogin_attempted = True
    logger.warning(f"Received 403 for {request.method} {request.url}; logging in again")
    try:
        await client.login()
    except A4CError as exc:
        return Fail(exc)
    return Retry(request)


def encode_multipart(field: str, filename: str, content: bytes | IO[bytes]) -> tuple[bytes, str]:
    """Encode a single file as ``multipart/form-data``; returns body and content type.

    The body is kept in memory so the request stays replayable on retry.
    """
    encoded = httpx.Request("POST", "http://multipart.invalid", files={field: (filename, content)})
    return encoded.read(), encoded.headers["Content-Type"]


async def discard_response(response: httpx.Response) -> None:
    """Drain and close ``response`` so its connection returns to the pool."""
    try:
        await response.aread()
    finally:
        await response.aclose()


def _raise_for_error_envelope(response: httpx.Response, body: bytes) -> None:
    if not body.strip():
        raise APIError(response.reason_phrase, status_code=response.status_code)
    try:
        envelope = ErrorEnvelope.model_validate_json(body)
    except ValidationError as exc:
        raise ResponseDecodeError(
            f"Unable to decode error response (HTTP {response.status_code})",
            {"body": body[:200].decode("utf-8", errors="replace")},
        ) from exc
    if envelope.error is None:
        raise APIError(response.reason_phrase, status_code=response.status_code)
    raise APIError(
        envelope.error.message,
        code=envelope.error.code,
        status_code=response.status_code,
    )


async def read_response(response: httpx.Response, data_type: Any = None) -> Any:
    """Read, close and decode an Alien4Cloud response.

    A status >= 400 raises :class:`APIError` carrying the envelope message.
    Otherwise the envelope ``data`` is validated as ``data_type`` and
    returned; with no ``data_type`` the payload is discarded.
    """
    try:
        body = await response.aread()
    finally:
        await response.aclose()

    if response.status_code >= 400:
        _raise_for_error_envelope(response, body)

    if data_type is None:
        return None

    try:
        envelope = Envelope[data_type].model_validate_json(body)
    except ValidationError as exc:
        raise ResponseDecodeError(
            "Unable to decode response",
            {"status": response.status_code, "error": exc.errors()[0]["msg"]},
        ) from exc
    return envelope.data

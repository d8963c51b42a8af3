"""Exception hierarchy for Alien4Cloud client failures.

Every error raised by the client derives from :class:`A4CError`. Transport
failures (DNS, connect, TLS) are ``httpx.TransportError`` instances and are
propagated unchanged; deadlines and cancellation surface as the standard
``TimeoutError`` / ``asyncio.CancelledError``.
"""

from __future__ import annotations

from typing import Any


class A4CError(Exception):
    """Base exception for all Alien4Cloud client errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} ({details})"


class ConfigurationError(A4CError):
    """Raised when the client cannot be built from the supplied settings."""


class AuthenticationError(A4CError):
    """Raised when login or logout is rejected by the server."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, context)
        self.status_code = status_code


class APIError(A4CError):
    """Error envelope returned by Alien4Cloud for a status >= 400.

    ``message`` is the server supplied message, ``code`` the numeric error
    code from the envelope and ``status_code`` the HTTP status.
    """

    def __init__(
        self,
        message: str,
        code: int | None = None,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, context)
        self.code = code
        self.status_code = status_code


class NotFoundError(APIError):
    """Raised when a lookup expected to find a single resource found nothing."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message, code=404, status_code=404, context=context)


class ResponseDecodeError(A4CError):
    """Raised when a response body is not valid JSON or has an unexpected shape."""


class AmbiguousResultError(A4CError):
    """Raised when a search expected to match exactly one record did not."""

    def __init__(self, message: str, count: int, context: dict[str, Any] | None = None) -> None:
        super().__init__(message, context)
        self.count = count


class WorkflowTimeoutError(A4CError, TimeoutError):
    """Raised when a workflow did not reach a terminal state before its deadline."""


class CSARParsingError(A4CError):
    """Raised when an uploaded CSAR archive is reported with parsing errors."""

    def __init__(
        self,
        message: str,
        errors: dict[str, list[Any]],
        csar: Any = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, context)
        self.errors = errors
        self.csar = csar

    def has_critical_errors(self) -> bool:
        """Return True when at least one parsing error has the ``ERROR`` level."""
        return any(
            getattr(entry, "error_level", None) == "ERROR"
            for entries in self.errors.values()
            for entry in entries
        )

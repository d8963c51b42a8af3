"""Asynchronous client for the Alien4Cloud REST API."""

from importlib import metadata

from .client import A4CClient
from .config import ClientConfig
from .errors import (
    A4CError,
    AmbiguousResultError,
    APIError,
    AuthenticationError,
    ConfigurationError,
    CSARParsingError,
    NotFoundError,
    ResponseDecodeError,
    WorkflowTimeoutError,
)
from .topology import TopologyEditor
from .transport import A4CRequest, Continue, Fail, Retry, RetryAction, RetryPredicate


def _resolve_version() -> str:
    """Return the installed distribution version or fall back to the project default."""

    try:
        return metadata.version("alien4cloud-client")
    except metadata.PackageNotFoundError:
        return "0.1.0"


__version__ = _resolve_version()

__all__ = [
    "A4CClient",
    "A4CError",
    "A4CRequest",
    "APIError",
    "AmbiguousResultError",
    "AuthenticationError",
    "CSARParsingError",
    "ClientConfig",
    "ConfigurationError",
    "Continue",
    "Fail",
    "NotFoundError",
    "ResponseDecodeError",
    "Retry",
    "RetryAction",
    "RetryPredicate",
    "TopologyEditor",
    "WorkflowTimeoutError",
    "__version__",
]

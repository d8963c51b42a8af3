"""Session authentication and TLS setup for Alien4Cloud."""

from __future__ import annotations

import ssl
from urllib.parse import urlsplit

import httpx
from loguru import logger
from pydantic import ValidationError

from .config import ClientConfig
from .errors import AuthenticationError, ConfigurationError
from .models.common import ErrorEnvelope


def build_verify(base_url: str, config: ClientConfig) -> ssl.SSLContext | bool:
    """Return the ``verify`` argument of the HTTP client for ``base_url``.

    Plain ``http`` needs no TLS material. For ``https`` the insecure opt-in
    wins, otherwise the CA file is loaded into a dedicated SSL context.
    """
    if urlsplit(base_url).scheme != "https":
        return True
    if config.insecure_skip_verify:
        logger.warning(f"TLS certificate verification disabled for {base_url}")
        return False
    if not config.ca_file:
        raise ConfigurationError(
            "HTTPS connection requires a CA file or insecure_skip_verify",
            {"url": base_url},
        )
    try:
        return ssl.create_default_context(cafile=config.ca_file)
    except (OSError, ssl.SSLError) as exc:
        raise ConfigurationError(
            f"Unable to load CA file {config.ca_file}", {"url": base_url}
        ) from exc


def _error_message(response: httpx.Response) -> str:
    try:
        envelope = ErrorEnvelope.model_validate_json(response.content)
    except ValidationError:
        return response.reason_phrase
    if envelope.error is None or not envelope.error.message:
        return response.reason_phrase
    return envelope.error.message


class AuthenticationManager:
    """Open and close the cookie based Alien4Cloud session."""

    def __init__(self, client: httpx.AsyncClient, base_url: str, config: ClientConfig) -> None:
        self._client = client
        self._base_url = base_url
        self._config = config

    async def login(self) -> None:
        """Submit the login form; the session cookie lands in the client cookie store."""
        response = await self._client.post(
            f"{self._base_url}/login",
            data={
                "username": self._config.user,
                "password": self._config.password,
                "submit": "Login",
            },
            headers={"Accept": "application/json"},
        )
        if response.status_code != httpx.codes.OK:
            raise AuthenticationError(
                f"Login failed: {_error_message(response)}",
                status_code=response.status_code,
                context={"user": self._config.user},
            )
        logger.info(f"Logged in to {self._base_url} as {self._config.user}")

    async def logout(self) -> None:
        response = await self._client.post(
            f"{self._base_url}/logout",
            headers={"Accept": "application/json", "Connection": "close"},
        )
        if response.status_code != httpx.codes.OK:
            raise AuthenticationError(
                f"Logout failed: {_error_message(response)}",
                status_code=response.status_code,
            )
        logger.info(f"Logged out from {self._base_url}")

"""Client configuration for Alien4Cloud connections."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

from omegaconf import OmegaConf
from pydantic import BaseModel, Field

from .errors import ConfigurationError

CONFIG_PATH_ENV = "A4C_CONFIG_PATH"
DEFAULT_CONFIG_PATH = "conf/alien4cloud.yml"

_KEY_PREFIX = "A4C_"
_REQUIRED_KEYS = ("A4C_URL", "A4C_USER", "A4C_PASSWORD")
_OPTIONAL_KEYS = {
    "A4C_CA_FILE": "ca_file",
    "A4C_INSECURE_SKIP_VERIFY": "insecure_skip_verify",
    "A4C_WORKFLOW_TIMEOUT": "workflow_timeout",
    "A4C_POLL_INTERVAL": "poll_interval",
    "A4C_SETTLE_DELAY": "settle_delay",
    "A4C_STATE_POLL_INTERVAL": "state_poll_interval",
}


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _candidate_paths(raw: Path) -> tuple[Path, ...]:
    if raw.is_absolute():
        return (raw,)
    return (Path.cwd() / raw, _repo_root() / raw)


def _existing_unique_paths(candidates: tuple[Path, ...]) -> tuple[Path, ...]:
    existing: list[Path] = []
    seen: set[Path] = set()
    for candidate in candidates:
        if not candidate.exists():
            continue
        resolved = candidate.resolve()
        if resolved in seen:
            continue
        seen.add(resolved)
        existing.append(resolved)
    return tuple(existing)


def _resolve_config_location(spec: Path | str, *, source: str) -> Path:
    raw = Path(spec).expanduser()
    candidates = _candidate_paths(raw)
    existing = _existing_unique_paths(candidates)
    if len(existing) == 1:
        return existing[0]
    if not existing:
        checked = "\n".join(str(candidate) for candidate in candidates)
        raise FileNotFoundError(f"Configuration file not found for {source}: {raw}\nChecked:\n{checked}")
    joined = ", ".join(str(path) for path in existing)
    raise RuntimeError(f"Multiple configuration files found for {source}: {raw}. Candidates: {joined}")


def _load_normalized_config(location: Path) -> dict[str, Any]:
    raw_config = OmegaConf.load(location)
    config = OmegaConf.to_container(raw_config, resolve=True)
    if not isinstance(config, dict):
        raise ConfigurationError(f"Configuration file {location} must contain a mapping")
    normalized: dict[str, Any] = {}
    for key, value in config.items():
        name = str(key).upper()
        if not name.startswith(_KEY_PREFIX):
            name = f"{_KEY_PREFIX}{name}"
        normalized[name] = value
    return normalized


def _require_keys(normalized: dict[str, Any]) -> None:
    missing = [key for key in _REQUIRED_KEYS if not normalized.get(key)]
    if missing:
        joined = ", ".join(missing)
        raise ConfigurationError(f"Missing Alien4Cloud settings: {joined}")


def normalize_base_url(address: str) -> str:
    """Strip trailing slashes and default the scheme to ``http``."""
    address = address.strip()
    if "://" not in address:
        address = f"http://{address}"
    parts = urlsplit(address)
    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise ConfigurationError(f"Malformed Alien4Cloud URL: {address!r}", {"url": address})
    return address.rstrip("/")


class ClientConfig(BaseModel):
    """Connection settings of an Alien4Cloud client.

    ``url`` may omit its scheme, ``http`` is assumed. For ``https``
    endpoints either ``ca_file`` or ``insecure_skip_verify`` is required.
    """

    url: str = Field(description="Alien4Cloud address", examples=["https://a4c.example.com:8088"])
    user: str = Field(description="Login user name", examples=["admin"])
    password: str = Field(description="Login password", repr=False)
    ca_file: str | None = Field(
        default=None, description="PEM bundle used to verify the server certificate"
    )
    insecure_skip_verify: bool = Field(
        default=False, description="Disable TLS certificate verification"
    )
    workflow_timeout: float = Field(
        default=300.0, gt=0, description="Default deadline of run_workflow, in seconds"
    )
    poll_interval: float = Field(
        default=5.0, ge=0, description="Delay between two workflow execution polls, in seconds"
    )
    settle_delay: float = Field(
        default=1.0, ge=0, description="Delay before the first execution poll, in seconds"
    )
    state_poll_interval: float = Field(
        default=1.0, ge=0, description="Delay between two deployment status polls, in seconds"
    )

    @classmethod
    def from_file(cls, path: Path | str | None = None) -> ClientConfig:
        """Load settings from a YAML file, ``conf/alien4cloud.yml`` by default.

        The ``A4C_CONFIG_PATH`` environment variable takes precedence over
        ``path``. Keys are case-insensitive and the ``A4C_`` prefix is optional.
        """
        env_path = os.environ.get(CONFIG_PATH_ENV)
        if env_path:
            location = _resolve_config_location(env_path, source=CONFIG_PATH_ENV)
        elif path is not None:
            location = _resolve_config_location(path, source="path")
        else:
            location = _resolve_config_location(DEFAULT_CONFIG_PATH, source="default")

        normalized = _load_normalized_config(location)
        _require_keys(normalized)
        kwargs: dict[str, Any] = {
            "url": str(normalized["A4C_URL"]),
            "user": str(normalized["A4C_USER"]),
            "password": str(normalized["A4C_PASSWORD"]),
        }
        for key, field_name in _OPTIONAL_KEYS.items():
            if normalized.get(key) is not None:
                kwargs[field_name] = normalized[key]
        return cls(**kwargs)

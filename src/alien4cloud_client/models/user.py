"""User and group models."""

from __future__ import annotations

from pydantic import Field

from .common import A4CModel

ROLE_ADMIN = "ADMIN"
ROLE_COMPONENTS_MANAGER = "COMPONENTS_MANAGER"
ROLE_ARCHITECT = "ARCHITECT"
ROLE_APPLICATIONS_MANAGER = "APPLICATIONS_MANAGER"


class User(A4CModel):
    username: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    roles: list[str] = Field(default_factory=list)
    groups: list[str] = Field(default_factory=list)
    group_roles: list[str] = Field(default_factory=list)
    internal_directory: bool = True
    enabled: bool = True


class CreateUpdateUserRequest(A4CModel):
    """Body used to create a user or update its parameters."""

    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    password: str | None = None
    roles: list[str] | None = None


class Group(A4CModel):
    id: str | None = None
    name: str | None = None
    email: str | None = None
    description: str | None = None
    users: list[str] | None = None
    roles: list[str] | None = None

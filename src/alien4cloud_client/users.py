"""User and group administration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from .errors import NotFoundError
from .models.common import SearchRequest, SearchResult
from .models.user import CreateUpdateUserRequest, Group, User
from .transport import REST_API_PREFIX

if TYPE_CHECKING:
    from .client import A4CClient


class UserService:
    """Manage users, their roles and groups."""

    def __init__(self, client: A4CClient) -> None:
        self._client = client

    async def create_user(self, request: CreateUpdateUserRequest) -> None:
        if not request.username:
            raise ValueError("A user name is required to create a user")
        await self._client.request_json("POST", f"{REST_API_PREFIX}/users", request)
        logger.info(f"Created user {request.username}")

    async def update_user(self, username: str, request: CreateUpdateUserRequest) -> None:
        await self._client.request_json("PUT", f"{REST_API_PREFIX}/users/{username}", request)

    async def get_user(self, username: str) -> User:
        user = await self._client.request_json(
            "GET", f"{REST_API_PREFIX}/users/{username}", data_type=User
        )
        if user is None:
            raise NotFoundError(f"User {username!r} not found")
        return user

    async def get_users(self, usernames: list[str]) -> list[User]:
        users = await self._client.request_json(
            "POST", f"{REST_API_PREFIX}/users/getUsers", usernames, list[User]
        )
        return users or []

    async def search_users(self, search: SearchRequest | None = None) -> tuple[list[User], int]:
        result = await self._client.request_json(
            "POST",
            f"{REST_API_PREFIX}/users/search",
            search or SearchRequest(),
            SearchResult[User],
        )
        if result is None:
            return [], 0
        return result.data, result.total_results

    async def delete_user(self, username: str) -> None:
        await self._client.request_json("DELETE", f"{REST_API_PREFIX}/users/{username}")
        logger.info(f"Deleted user {username}")

    async def add_role(self, username: str, role: str) -> None:
        await self._client.request_json(
            "PUT", f"{REST_API_PREFIX}/users/{username}/roles/{role}"
        )

    async def remove_role(self, username: str, role: str) -> None:
        await self._client.request_json(
            "DELETE", f"{REST_API_PREFIX}/users/{username}/roles/{role}"
        )

    async def create_group(self, group: Group) -> str:
        """Create ``group`` and return its identifier."""
        if not group.name:
            raise ValueError("A group name is required to create a group")
        group_id = await self._client.request_json(
            "POST", f"{REST_API_PREFIX}/groups", group, str
        )
        logger.info(f"Created group {group.name} ({group_id})")
        return group_id or ""

    async def update_group(self, group_id: str, group: Group) -> None:
        await self._client.request_json("PUT", f"{REST_API_PREFIX}/groups/{group_id}", group)

    async def get_group(self, group_id: str) -> Group:
        group = await self._client.request_json(
            "GET", f"{REST_API_PREFIX}/groups/{group_id}", data_type=Group
        )
        if group is None:
            raise NotFoundError(f"Group {group_id!r} not found")
        return group

    async def get_groups(self, group_ids: list[str]) -> list[Group]:
        groups = await self._client.request_json(
            "POST", f"{REST_API_PREFIX}/groups/getGroups", group_ids, list[Group]
        )
        return groups or []

    async def search_groups(self, search: SearchRequest | None = None) -> tuple[list[Group], int]:
        result = await self._client.request_json(
            "POST",
            f"{REST_API_PREFIX}/groups/search",
            search or SearchRequest(),
            SearchResult[Group],
        )
        if result is None:
            return [], 0
        return result.data, result.total_results

    async def delete_group(self, group_id: str) -> None:
        await self._client.request_json("DELETE", f"{REST_API_PREFIX}/groups/{group_id}")
        logger.info(f"Deleted group {group_id}")

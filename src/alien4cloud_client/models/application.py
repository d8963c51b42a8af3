"""Application and environment models."""

from __future__ import annotations

from pydantic import Field

from .common import A4CModel, Tag

DEFAULT_ENVIRONMENT_NAME = "Environment"

APPLICATION_DEPLOYMENT_IN_PROGRESS = "deployment_in_progress"
APPLICATION_DEPLOYED = "deployed"
APPLICATION_UNDEPLOYMENT_IN_PROGRESS = "undeployment_in_progress"
APPLICATION_UNDEPLOYED = "undeployed"
APPLICATION_ERROR = "failure"


class Application(A4CModel):
    """An Alien4Cloud application.

    Attributes:
        id: Application identifier
        name: Display name
        tags: Key/value metadata attached to the application
    """

    id: str
    name: str = ""
    tags: list[Tag] = Field(default_factory=list)

    def tag_value(self, key: str) -> str | None:
        for tag in self.tags:
            if tag.name == key:
                return tag.value
        return None


class ApplicationCreateRequest(A4CModel):
    name: str
    archive_name: str
    topology_template_version_id: str


class Environment(A4CModel):
    id: str
    name: str = ""
    status: str = ""
    application_id: str | None = None
    environment_type: str | None = None
    current_version_name: str | None = None
    description: str | None = None


class TagUpdateRequest(A4CModel):
    tag_key: str
    tag_value: str

"""Deployment log and event models."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from .common import A4CModel, A4CTime


class Log(A4CModel):
    """A deployment log entry."""

    id: str = ""
    deployment_id: str = ""
    deployment_paas_id: str = Field(default="", alias="deploymentPaaSId")
    level: str = ""
    timestamp: A4CTime | None = None
    workflow_id: str = ""
    execution_id: str = ""
    node_id: str = ""
    instance_id: str = ""
    interface_name: str = ""
    operation_name: str = ""
    content: str = ""


class LogFilter(A4CModel):
    level: list[str] | None = None
    workflow_id: list[str] | None = None
    execution_id: list[str] | None = None


class LogSearchFilters(LogFilter):
    deployment_id: list[str] | None = None


class SortConfiguration(A4CModel):
    ascending: bool = True
    sort_by: str = "timestamp"


class LogSearchRequest(A4CModel):
    from_: int = Field(default=0, alias="from")
    size: int | None = None
    query: str | None = None
    filters: LogSearchFilters = Field(default_factory=LogSearchFilters)
    sort_configuration: SortConfiguration | None = None


class Event(A4CModel):
    """A deployment monitoring event (status change, instance state...)."""

    deployment_id: str = ""
    deployment_status: str | None = None
    date: A4CTime | None = None
    orchestrator_id: str | None = None
    node_template_id: str | None = None
    instance_id: str | None = None
    instance_state: str | None = None
    instance_status: str | None = None
    attributes: dict[str, Any] | None = None
    runtime_properties: dict[str, Any] | None = None
    message: str | None = None

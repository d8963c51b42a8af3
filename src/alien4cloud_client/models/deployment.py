"""Deployment, location and workflow execution models."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from .common import A4CModel, A4CTime

ALL_GROUPS = "_A4C_ALL"

WORKFLOW_RUNNING = "RUNNING"
WORKFLOW_SUCCEEDED = "SUCCEEDED"
WORKFLOW_FAILED = "FAILED"
WORKFLOW_CANCELLED = "CANCELLED"

TERMINAL_EXECUTION_STATUSES = frozenset({WORKFLOW_SUCCEEDED, WORKFLOW_FAILED, WORKFLOW_CANCELLED})

NODE_START = "initial"
NODE_SUBMITTING = "submitting"
NODE_SUBMITTED = "submitted"
NODE_PENDING = "pending"
NODE_RUNNING = "running"
NODE_EXECUTING = "executing"
NODE_EXECUTED = "executed"
NODE_END = "end"
NODE_ERROR = "error"
NODE_FAILED = "failed"


class Execution(A4CModel):
    """Remote record of one workflow run.

    Attributes:
        id: Execution identifier
        deployment_id: Deployment the workflow runs on
        workflow_id: Workflow identifier
        workflow_name: Workflow name
        display_workflow_name: Name shown in the Alien4Cloud UI
        start_date: When the execution started
        end_date: When the execution reached a terminal state, if it did
        status: ``RUNNING``, ``SUCCEEDED``, ``FAILED``, ``CANCELLED``...
        has_failed_tasks: True when at least one task failed
    """

    id: str = ""
    deployment_id: str = ""
    workflow_id: str = ""
    workflow_name: str = ""
    display_workflow_name: str = ""
    start_date: A4CTime | None = None
    end_date: A4CTime | None = None
    status: str = ""
    has_failed_tasks: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_EXECUTION_STATUSES


class Deployment(A4CModel):
    id: str
    deployment_username: str = ""
    environment_id: str = ""
    location_ids: list[str] = Field(default_factory=list)
    orchestrator_deployment_id: str = ""
    orchestrator_id: str = ""
    source_id: str = ""
    source_name: str = ""
    source_type: str = ""
    version_id: str = ""
    start_date: A4CTime | None = None
    end_date: A4CTime | None = None
    workflow_executions: Any = None


class DeploymentSearchItem(A4CModel):
    deployment: Deployment


class LocationModifierReference(A4CModel):
    plugin_id: str
    bean_name: str
    phase: str | None = None


class LocationConfiguration(A4CModel):
    id: str
    name: str = ""
    orchestrator_id: str = ""
    environment_type: str | None = None
    infrastructure_type: str | None = None
    creation_date: A4CTime | None = None
    last_update_date: A4CTime | None = None
    meta_properties: dict[str, str] | None = None
    modifiers: list[LocationModifierReference] | None = None


class Orchestrator(A4CModel):
    id: str
    name: str = ""
    plugin_id: str | None = None
    plugin_bean: str | None = None
    deployment_name_pattern: str | None = None
    state: str | None = None


class LocationMatch(A4CModel):
    location: LocationConfiguration
    orchestrator: Orchestrator
    ready: bool = False
    reasons: Any = None


class LocationPoliciesRequest(A4CModel):
    groups_to_locations: dict[str, str]
    orchestrator_id: str


class ApplicationDeployRequest(A4CModel):
    application_environment_id: str
    application_id: str


class UpdateDeploymentTopologyRequest(A4CModel):
    """Inputs and orchestrator properties of a deployment topology."""

    input_properties: dict[str, Any] | None = None
    provider_deployment_properties: dict[str, str] | None = None


class InstanceInformation(A4CModel):
    state: str = ""
    attributes: dict[str, str] = Field(default_factory=dict)


# node name -> instance id -> runtime information
DeploymentInformations = dict[str, dict[str, InstanceInformation]]


class CancelExecutionRequest(A4CModel):
    environment_id: str
    execution_id: str

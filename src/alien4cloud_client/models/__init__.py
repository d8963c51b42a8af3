"""Request and response models for the Alien4Cloud REST API."""

from .application import (
    APPLICATION_DEPLOYED,
    APPLICATION_DEPLOYMENT_IN_PROGRESS,
    APPLICATION_ERROR,
    APPLICATION_UNDEPLOYED,
    APPLICATION_UNDEPLOYMENT_IN_PROGRESS,
    DEFAULT_ENVIRONMENT_NAME,
    Application,
    Environment,
)
from .catalog import CSAR, ComplexToscaTypeDescriptorRequest, ParsingError, PropertyDefinition
from .common import (
    A4CTime,
    Envelope,
    FacetedSearchResult,
    Location,
    SearchRequest,
    SearchResult,
    Tag,
)
from .deployment import (
    TERMINAL_EXECUTION_STATUSES,
    WORKFLOW_CANCELLED,
    WORKFLOW_FAILED,
    WORKFLOW_RUNNING,
    WORKFLOW_SUCCEEDED,
    Deployment,
    Execution,
    InstanceInformation,
    LocationMatch,
    UpdateDeploymentTopologyRequest,
)
from .log import Event, Log, LogFilter
from .topology import BasicTopologyInfo, EditorOperation, Topology, WorkflowActivity
from .user import (
    ROLE_ADMIN,
    ROLE_APPLICATIONS_MANAGER,
    ROLE_ARCHITECT,
    ROLE_COMPONENTS_MANAGER,
    CreateUpdateUserRequest,
    Group,
    User,
)

__all__ = [
    "A4CTime",
    "APPLICATION_DEPLOYED",
    "APPLICATION_DEPLOYMENT_IN_PROGRESS",
    "APPLICATION_ERROR",
    "APPLICATION_UNDEPLOYED",
    "APPLICATION_UNDEPLOYMENT_IN_PROGRESS",
    "Application",
    "BasicTopologyInfo",
    "CSAR",
    "ComplexToscaTypeDescriptorRequest",
    "CreateUpdateUserRequest",
    "DEFAULT_ENVIRONMENT_NAME",
    "Deployment",
    "EditorOperation",
    "Envelope",
    "Environment",
    "Event",
    "Execution",
    "FacetedSearchResult",
    "Group",
    "InstanceInformation",
    "Location",
    "LocationMatch",
    "Log",
    "LogFilter",
    "ParsingError",
    "PropertyDefinition",
    "ROLE_ADMIN",
    "ROLE_APPLICATIONS_MANAGER",
    "ROLE_ARCHITECT",
    "ROLE_COMPONENTS_MANAGER",
    "SearchRequest",
    "SearchResult",
    "TERMINAL_EXECUTION_STATUSES",
    "Tag",
    "Topology",
    "UpdateDeploymentTopologyRequest",
    "User",
    "WORKFLOW_CANCELLED",
    "WORKFLOW_FAILED",
    "WORKFLOW_RUNNING",
    "WORKFLOW_SUCCEEDED",
    "WorkflowActivity",
]

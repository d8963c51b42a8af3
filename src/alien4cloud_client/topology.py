"""Topology lookup and topology editor sessions."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

from loguru import logger

from .errors import A4CError, NotFoundError
from .models.common import SearchRequest, SearchResult
from .models.topology import (
    ADD_POLICY_OPERATION,
    CREATE_WORKFLOW_OPERATION,
    DELETE_POLICY_OPERATION,
    REMOVE_WORKFLOW_OPERATION,
    UPDATE_POLICY_TARGETS_OPERATION,
    AddActivityOperation,
    AddNodeOperation,
    AddRelationshipOperation,
    BasicTopologyInfo,
    EditorExecutionResult,
    EditorOperation,
    PolicyOperation,
    Topology,
    TopologySummary,
    UpdateCapabilityPropertyOperation,
    UpdateNodePropertyOperation,
    WorkflowActivity,
    WorkflowOperation,
)
from .transport import REST_API_PREFIX

if TYPE_CHECKING:
    from .client import A4CClient


def _capitalize_first(value: str) -> str:
    return value[:1].upper() + value[1:]


def relationship_name(source: str, target: str, relationship_type: str) -> str:
    """Name a relationship ``<source><LastTypeSegment><Target>``."""
    last_segment = relationship_type.split(".")[-1]
    return f"{source}{_capitalize_first(last_segment)}{_capitalize_first(target)}"


class TopologyService:
    """Read topologies and open editor sessions on application topologies."""

    def __init__(self, client: A4CClient) -> None:
        self._client = client

    async def get_topology_id(self, app_id: str, env_id: str) -> str:
        topology_id = await self._client.request_json(
            "GET",
            f"{REST_API_PREFIX}/applications/{app_id}/environments/{env_id}/topology",
            data_type=str,
        )
        if not topology_id:
            raise NotFoundError(
                "No topology found",
                {"application": app_id, "environment": env_id},
            )
        return topology_id

    async def get_topology_template_id_by_name(self, name: str) -> str:
        result = await self._client.request_json(
            "POST",
            f"{REST_API_PREFIX}/catalog/topologies/search",
            SearchRequest(query=name, size=1),
            SearchResult[TopologySummary],
        )
        if result is None or result.total_results <= 0 or not result.data:
            raise NotFoundError(f"{name!r} topology template does not exist")
        return result.data[0].id

    async def get_topology_by_id(self, topology_id: str) -> Topology:
        topology = await self._client.request_json(
            "GET", f"{REST_API_PREFIX}/topologies/{topology_id}", data_type=Topology
        )
        return topology or Topology()

    async def get_topology(self, app_id: str, env_id: str) -> Topology:
        topology_id = await self.get_topology_id(app_id, env_id)
        return await self.get_topology_by_id(topology_id)

    async def get_topologies(self, query: str = "") -> list[BasicTopologyInfo]:
        result = await self._client.request_json(
            "POST",
            f"{REST_API_PREFIX}/catalog/topologies/search",
            SearchRequest(query=query, size=0),
            SearchResult[BasicTopologyInfo],
        )
        return result.data if result else []

    def editor(self, app_id: str, env_id: str, topology_id: str | None = None) -> TopologyEditor:
        return TopologyEditor(self._client, app_id, env_id, topology_id)


class TopologyEditor:
    """Multi-step edit session on the topology of an application environment.

    Each applied operation references the id of the previous one; the session
    keeps that cursor and serializes concurrent edits with a lock. ``save``
    commits the pending operations and resets the cursor.
    """

    def __init__(
        self, client: A4CClient, app_id: str, env_id: str, topology_id: str | None = None
    ) -> None:
        self._client = client
        self.app_id = app_id
        self.env_id = env_id
        self._topology_id = topology_id
        self._previous_operation_id: str | None = None
        self._lock = asyncio.Lock()

    @property
    def previous_operation_id(self) -> str | None:
        return self._previous_operation_id

    async def _resolve_topology_id(self) -> str:
        if self._topology_id is None:
            self._topology_id = await self._client.topology.get_topology_id(
                self.app_id, self.env_id
            )
        return self._topology_id

    async def apply(self, operation: EditorOperation) -> EditorExecutionResult:
        """Execute ``operation`` after the previously applied one."""
        async with self._lock:
            topology_id = await self._resolve_topology_id()
            chained = operation.model_copy(
                update={"previous_operation_id": self._previous_operation_id}
            )
            try:
                result = await self._client.request_json(
                    "POST",
                    f"{REST_API_PREFIX}/editor/{topology_id}/execute",
                    chained,
                    EditorExecutionResult,
                )
            except A4CError as exc:
                exc.context.update(
                    {
                        "application": self.app_id,
                        "environment": self.env_id,
                        "operation": operation.type,
                    }
                )
                logger.error(f"Unable to edit topology {topology_id}: {exc}")
                raise
            result = result or EditorExecutionResult()
            last_id = result.last_operation_id()
            if last_id is not None:
                self._previous_operation_id = last_id
            logger.debug(f"Applied {operation.type} on topology {topology_id}")
            return result

    async def save(self) -> None:
        """Commit the operations applied so far."""
        async with self._lock:
            topology_id = await self._resolve_topology_id()
            query = urlencode({"lastOperationId": self._previous_operation_id or ""})
            self._previous_operation_id = None
            await self._client.request_json(
                "POST", f"{REST_API_PREFIX}/editor/{topology_id}?{query}"
            )
            logger.info(f"Saved topology {topology_id} of application {self.app_id}")

    async def update_component_property(
        self, node_name: str, property_name: str, value: Any
    ) -> EditorExecutionResult:
        """Set a node property; ``value`` may be a scalar or a complex (mapping) value."""
        return await self.apply(
            UpdateNodePropertyOperation(
                node_name=node_name, property_name=property_name, property_value=value
            )
        )

    async def update_capability_property(
        self, node_name: str, capability_name: str, property_name: str, value: Any
    ) -> EditorExecutionResult:
        return await self.apply(
            UpdateCapabilityPropertyOperation(
                node_name=node_name,
                capability_name=capability_name,
                property_name=property_name,
                property_value=value,
            )
        )

    async def add_node(self, node_type_id: str, node_name: str) -> EditorExecutionResult:
        topology = await self._client.topology.get_topology(self.app_id, self.env_id)
        version = next(
            (
                node_type.archive_version
                for node_type in topology.node_types.values()
                if node_type.element_id == node_type_id
            ),
            "",
        )
        if not version:
            raise NotFoundError(
                f"Node type {node_type_id!r} not found in topology",
                {"application": self.app_id, "environment": self.env_id},
            )
        return await self.apply(
            AddNodeOperation(node_name=node_name, node_type_id=f"{node_type_id}:{version}")
        )

    async def add_relationship(
        self, source: str, target: str, relationship_type: str
    ) -> EditorExecutionResult:
        """Connect ``source`` to ``target`` through its requirement of ``relationship_type``."""
        topology = await self._client.topology.get_topology(self.app_id, self.env_id)
        source_type = topology.node_type_of(source)
        if source_type is None:
            raise A4CError(f"Missing relationship source node {source!r}")
        target_type = topology.node_type_of(target)
        if target_type is None:
            raise A4CError(f"Missing relationship target node {target!r}")

        requirement = next(
            (req for req in source_type.requirements if req.relationship_type == relationship_type),
            None,
        )
        if requirement is None:
            raise A4CError(f"Node {source!r} has no requirement for {relationship_type}")
        relationship = next(
            (
                rel
                for rel in topology.relationship_types.values()
                if rel.element_id == relationship_type
            ),
            None,
        )
        if relationship is None:
            raise A4CError(f"Missing relationship type {relationship_type}")
        capability = next(
            (cap for cap in target_type.capabilities if cap.type == requirement.type), None
        )
        if capability is None:
            raise A4CError(f"Node {target!r} has no capability of type {requirement.type}")

        return await self.apply(
            AddRelationshipOperation(
                node_name=source,
                relationship_name=relationship_name(source, target, relationship_type),
                relationship_type=relationship_type,
                relationship_version=relationship.archive_version,
                requirement_name=requirement.id,
                requirement_type=requirement.type,
                target=target,
                targeted_capability_name=capability.id,
            )
        )

    async def create_workflow(self, workflow_name: str) -> EditorExecutionResult:
        return await self.apply(
            WorkflowOperation(type=CREATE_WORKFLOW_OPERATION, workflow_name=workflow_name)
        )

    async def delete_workflow(self, workflow_name: str) -> EditorExecutionResult:
        return await self.apply(
            WorkflowOperation(type=REMOVE_WORKFLOW_OPERATION, workflow_name=workflow_name)
        )

    async def add_workflow_activity(
        self, workflow_name: str, activity: WorkflowActivity
    ) -> EditorExecutionResult:
        return await self.apply(AddActivityOperation.from_activity(workflow_name, activity))

    async def add_policy(self, policy_name: str, policy_type_id: str) -> EditorExecutionResult:
        return await self.apply(
            PolicyOperation(
                type=ADD_POLICY_OPERATION, policy_name=policy_name, policy_type_id=policy_type_id
            )
        )

    async def add_targets_to_policy(
        self, policy_name: str, targets: list[str]
    ) -> EditorExecutionResult:
        return await self.apply(
            PolicyOperation(
                type=UPDATE_POLICY_TARGETS_OPERATION, policy_name=policy_name, targets=targets
            )
        )

    async def delete_policy(self, policy_name: str) -> EditorExecutionResult:
        return await self.apply(
            PolicyOperation(type=DELETE_POLICY_OPERATION, policy_name=policy_name)
        )

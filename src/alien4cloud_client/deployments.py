"""Deployment, runtime state and workflow execution service."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import urlencode

from loguru import logger
from pydantic import BaseModel

from .errors import A4CError, AmbiguousResultError, NotFoundError, WorkflowTimeoutError
from .models.application import APPLICATION_UNDEPLOYED
from .models.common import FacetedSearchResult, SearchResult
from .models.deployment import (
    ALL_GROUPS,
    ApplicationDeployRequest,
    CancelExecutionRequest,
    Deployment,
    DeploymentInformations,
    DeploymentSearchItem,
    Execution,
    LocationMatch,
    LocationPoliciesRequest,
    UpdateDeploymentTopologyRequest,
)
from .models.topology import RuntimeTopology
from .polling import ExecutionCallback, monitor_execution, poll_until
from .transport import REST_API_PREFIX, encode_multipart

if TYPE_CHECKING:
    from .client import A4CClient

_EXECUTION_PAGE_SIZE = 50


class _DeploymentRef(BaseModel):
    id: str = ""


class _ActiveDeployment(BaseModel):
    deployment: _DeploymentRef | None = None


class _LastExecution(BaseModel):
    execution: Execution | None = None


class DeploymentService:
    """Deploy applications, inspect their runtime state and run workflows."""

    def __init__(self, client: A4CClient) -> None:
        self._client = client

    def _environment_path(self, app_id: str, env_id: str) -> str:
        return f"{REST_API_PREFIX}/applications/{app_id}/environments/{env_id}"

    async def get_locations_matching(self, topology_id: str, env_id: str) -> list[LocationMatch]:
        query = urlencode({"environmentId": env_id})
        matches = await self._client.request_json(
            "GET",
            f"{REST_API_PREFIX}/topologies/{topology_id}/locations?{query}",
            data_type=list[LocationMatch],
        )
        return matches or []

    async def deploy_application(self, app_id: str, env_id: str, location: str = "") -> None:
        """Deploy on the location named ``location``, or on the first matching one."""
        topology_id = await self._client.topology.get_topology_id(app_id, env_id)
        matches = await self.get_locations_matching(topology_id, env_id)

        selected = next(
            (match for match in matches if not location or match.location.name == location),
            None,
        )
        if selected is None:
            names = [match.location.name for match in matches]
            raise NotFoundError(
                f"Location {location!r} not found in list of matching locations: {names}",
                {"application": app_id, "environment": env_id},
            )

        policies = LocationPoliciesRequest(
            groups_to_locations={ALL_GROUPS: selected.location.id},
            orchestrator_id=selected.location.orchestrator_id,
        )
        await self._client.request_json(
            "POST",
            f"{self._environment_path(app_id, env_id)}/deployment-topology/location-policies",
            policies,
        )
        await self._client.request_json(
            "POST",
            f"{REST_API_PREFIX}/applications/deployment",
            ApplicationDeployRequest(application_environment_id=env_id, application_id=app_id),
        )
        logger.info(
            f"Deployment of application {app_id} on location {selected.location.name} requested"
        )

    async def update_application(self, app_id: str, env_id: str) -> None:
        """Update a deployed application with the latest topology version."""
        await self._client.request_json(
            "POST", f"{self._environment_path(app_id, env_id)}/update-deployment", {}
        )

    async def update_deployment_topology(
        self, app_id: str, env_id: str, request: UpdateDeploymentTopologyRequest
    ) -> None:
        await self._client.request_json(
            "PUT", f"{self._environment_path(app_id, env_id)}/deployment-topology", request
        )

    async def upload_deployment_input_artifact(
        self, app_id: str, env_id: str, input_artifact: str, file_path: Path | str
    ) -> None:
        path = Path(file_path)
        with path.open("rb") as handle:
            body, content_type = encode_multipart("file", path.name, handle)
        await self._client.request_json(
            "POST",
            f"{self._environment_path(app_id, env_id)}/deployment-topology/inputArtifacts/"
            f"{input_artifact}/upload",
            body,
            headers={"Content-Type": content_type},
        )
        logger.info(f"Uploaded {path.name} as input artifact {input_artifact} of {app_id}")

    async def get_deployment_list(self, app_id: str, env_id: str) -> list[Deployment]:
        query = urlencode({"environmentId": env_id, "from": 0, "query": ""})
        result = await self._client.request_json(
            "GET",
            f"{REST_API_PREFIX}/deployments/search?{query}",
            data_type=SearchResult[DeploymentSearchItem],
        )
        if result is None:
            return []
        return [item.deployment for item in result.data]

    async def undeploy_application(self, app_id: str, env_id: str) -> None:
        await self._client.request_json(
            "DELETE", f"{self._environment_path(app_id, env_id)}/deployment"
        )
        logger.info(f"Undeployment of application {app_id} requested")

    async def wait_until_state_is(self, app_id: str, env_id: str, *statuses: str) -> str:
        """Poll the deployment status until it is one of ``statuses`` and return it."""
        if not statuses:
            raise ValueError("at least one status should be given")
        return await poll_until(
            lambda: self.get_deployment_status(app_id, env_id),
            frozenset(statuses),
            interval=self._client.config.state_poll_interval,
        )

    async def get_current_deployment_id(self, app_id: str, env_id: str) -> str:
        """Return the active deployment id, or an empty string when undeployed."""
        active = await self._client.request_json(
            "GET",
            f"{self._environment_path(app_id, env_id)}/active-deployment-monitored",
            data_type=_ActiveDeployment,
        )
        if active is None or active.deployment is None:
            return ""
        return active.deployment.id

    async def get_deployment_status(self, app_id: str, env_id: str) -> str:
        deployment_id = await self.get_current_deployment_id(app_id, env_id)
        if not deployment_id:
            return APPLICATION_UNDEPLOYED
        status = await self._client.request_json(
            "GET", f"{REST_API_PREFIX}/deployments/{deployment_id}/status", data_type=str
        )
        return status or ""

    async def get_deployment_informations(
        self, app_id: str, env_id: str
    ) -> DeploymentInformations:
        informations = await self._client.request_json(
            "GET",
            f"{self._environment_path(app_id, env_id)}/deployment/informations",
            data_type=DeploymentInformations,
        )
        return informations or {}

    async def get_node_status(self, app_id: str, env_id: str, node_name: str) -> str:
        """Return the state of the first instance of ``node_name``."""
        informations = await self.get_deployment_informations(app_id, env_id)
        if not informations:
            return ""
        if node_name not in informations:
            raise NotFoundError(f"Unable to get status of node {node_name!r}")
        instance = informations[node_name].get("0")
        return instance.state if instance else ""

    async def get_output_attributes(self, app_id: str, env_id: str) -> dict[str, list[str]]:
        runtime = await self._client.request_json(
            "GET",
            f"{REST_API_PREFIX}/runtime/{app_id}/environment/{env_id}/topology",
            data_type=RuntimeTopology,
        )
        if runtime is None:
            return {}
        return runtime.topology.output_attributes

    async def get_attributes_value(
        self, app_id: str, env_id: str, node_name: str, attribute_names: list[str]
    ) -> dict[str, str]:
        return await self.get_instance_attributes_value(
            app_id, env_id, node_name, "0", attribute_names
        )

    async def get_instance_attributes_value(
        self,
        app_id: str,
        env_id: str,
        node_name: str,
        instance_name: str,
        attribute_names: list[str],
    ) -> dict[str, str]:
        informations = await self.get_deployment_informations(app_id, env_id)
        instance = informations.get(node_name, {}).get(instance_name)
        if instance is None:
            return {}
        return {
            name: instance.attributes[name]
            for name in attribute_names
            if name in instance.attributes
        }

    async def get_executions(
        self, deployment_id: str = "", query: str = "", from_: int = 0, size: int = 50
    ) -> tuple[list[Execution], FacetedSearchResult]:
        params: dict[str, str | int] = {"from": from_, "size": size}
        if deployment_id:
            params["deploymentId"] = deployment_id
        if query:
            params["query"] = query
        result = await self._client.request_json(
            "GET",
            f"{REST_API_PREFIX}/executions/search?{urlencode(params)}",
            data_type=SearchResult[Execution],
        )
        if result is None:
            return [], FacetedSearchResult()
        return result.data, result.paging()

    async def get_execution(
        self, deployment_id: str, workflow_name: str, execution_id: str
    ) -> Execution:
        """Page through the executions of ``workflow_name`` to find ``execution_id``."""
        start = 0
        size = _EXECUTION_PAGE_SIZE
        while True:
            executions, paging = await self.get_executions(
                deployment_id, workflow_name, start, size
            )
            for execution in executions:
                if execution.id == execution_id:
                    return execution
            if paging.total_results < start + size:
                raise NotFoundError(
                    f"Found no execution with ID {execution_id}",
                    {"deployment": deployment_id, "workflow": workflow_name},
                )
            start += size
            size = paging.total_results

    async def cancel_execution(self, env_id: str, execution_id: str) -> None:
        await self._client.request_json(
            "POST",
            f"{REST_API_PREFIX}/executions/cancel",
            CancelExecutionRequest(environment_id=env_id, execution_id=execution_id),
        )
        logger.info(f"Cancellation of execution {execution_id} requested")

    async def get_last_workflow_execution(self, app_id: str, env_id: str) -> Execution | None:
        deployment_id = await self.get_current_deployment_id(app_id, env_id)
        result = await self._client.request_json(
            "GET",
            f"{REST_API_PREFIX}/workflow_execution/{deployment_id}",
            data_type=_LastExecution,
        )
        return result.execution if result else None

    async def _find_execution(self, execution_id: str) -> Execution:
        executions, _ = await self.get_executions("", execution_id, 0, 1)
        if len(executions) != 1:
            logger.warning(f"Expected one execution with ID {execution_id}, got {len(executions)}")
            raise AmbiguousResultError(
                f"Expected exactly one execution with ID {execution_id}",
                count=len(executions),
            )
        return executions[0]

    async def run_workflow_async(
        self, app_id: str, env_id: str, workflow_name: str, callback: ExecutionCallback
    ) -> tuple[str, asyncio.Task[Execution | None]]:
        """Start ``workflow_name`` and monitor its execution in a background task.

        ``callback(execution, error)`` fires once the execution is terminal, or
        with the error that stopped monitoring. Cancelling the returned task
        stops monitoring.
        """
        execution_id = await self._client.request_json(
            "POST",
            f"{self._environment_path(app_id, env_id)}/workflows/{workflow_name}",
            data_type=str,
        )
        if not execution_id:
            raise A4CError(
                f"No execution ID returned for workflow {workflow_name!r}",
                {"application": app_id, "environment": env_id},
            )
        logger.info(f"Workflow {workflow_name} started on {app_id}: execution {execution_id}")

        config = self._client.config
        task = asyncio.create_task(
            monitor_execution(
                lambda: self._find_execution(execution_id),
                callback,
                poll_interval=config.poll_interval,
                settle_delay=config.settle_delay,
            ),
            name=f"a4c-execution-{execution_id}",
        )
        return execution_id, task

    async def run_workflow(
        self, app_id: str, env_id: str, workflow_name: str, timeout: float | None = None
    ) -> Execution:
        """Run ``workflow_name`` and wait for a terminal execution.

        Raises :class:`WorkflowTimeoutError` when ``timeout`` (defaults to the
        configured workflow timeout) elapses first.
        """
        loop = asyncio.get_running_loop()
        outcome: asyncio.Future[Execution] = loop.create_future()

        def on_done(execution: Execution | None, error: BaseException | None) -> None:
            if outcome.done():
                return
            if isinstance(error, asyncio.CancelledError):
                outcome.cancel()
            elif error is not None:
                outcome.set_exception(error)
            elif execution is not None:
                outcome.set_result(execution)

        deadline = timeout if timeout is not None else self._client.config.workflow_timeout
        execution_id = ""
        task: asyncio.Task[Execution | None] | None = None
        try:
            # the deadline also bounds the start request
            async with asyncio.timeout(deadline):
                execution_id, task = await self.run_workflow_async(
                    app_id, env_id, workflow_name, on_done
                )
                return await outcome
        except TimeoutError as exc:
            raise WorkflowTimeoutError(
                f"Workflow {workflow_name!r} did not complete within {deadline}s",
                {"execution": execution_id} if execution_id else {"workflow": workflow_name},
            ) from exc
        finally:
            if task is not None and not task.done():
                task.cancel()
                await asyncio.wait({task})

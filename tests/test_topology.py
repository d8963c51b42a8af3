"""Tests for topology lookups and topology editor sessions."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from alien4cloud_client import A4CError, APIError, NotFoundError
from alien4cloud_client.models.topology import (
    ADD_ACTIVITY_OPERATION,
    ADD_NODE_OPERATION,
    ADD_RELATIONSHIP_OPERATION,
    CALL_OPERATION_ACTIVITY,
    CREATE_WORKFLOW_OPERATION,
    UPDATE_NODE_PROPERTY_OPERATION,
    WorkflowActivity,
)
from alien4cloud_client.topology import relationship_name
from conftest import REST, envelope

APP = "myapp"
ENV = "env-1"
ENV_PATH = f"{REST}/applications/{APP}/environments/{ENV}"
TOPOLOGY_ID = "myapp:0.1.0-SNAPSHOT"
EXECUTE_PATH = f"{REST}/editor/{TOPOLOGY_ID}/execute"

TOPOLOGY = {
    "topology": {
        "archiveName": "myapp",
        "archiveVersion": "0.1.0-SNAPSHOT",
        "nodeTemplates": {
            "WebServer": {"name": "WebServer", "type": "org.example.nodes.WebServer"},
            "Compute": {"name": "Compute", "type": "tosca.nodes.Compute"},
        },
    },
    "nodeTypes": {
        "org.example.nodes.WebServer": {
            "archiveName": "example-types",
            "archiveVersion": "1.0.0",
            "elementId": "org.example.nodes.WebServer",
            "requirements": [
                {
                    "id": "host",
                    "type": "tosca.capabilities.Container",
                    "relationshipType": "tosca.relationships.HostedOn",
                }
            ],
        },
        "tosca.nodes.Compute": {
            "archiveName": "tosca-normative-types",
            "archiveVersion": "1.0.0-ALIEN20",
            "elementId": "tosca.nodes.Compute",
            "capabilities": [{"id": "host", "type": "tosca.capabilities.Container"}],
        },
    },
    "relationshipTypes": {
        "tosca.relationships.HostedOn": {
            "archiveVersion": "1.0.0-ALIEN20",
            "elementId": "tosca.relationships.HostedOn",
            "derivedFrom": ["tosca.relationships.Root"],
        }
    },
}


class EditorBackend:
    """Answers editor executions with a growing operation list."""

    def __init__(self) -> None:
        self.operations: list[dict[str, str]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.operations.append({"id": f"op-{len(self.operations) + 1}"})
        return envelope(
            {"lastOperationIndex": len(self.operations) - 1, "operations": self.operations}
        )


@pytest.fixture
def editor_server(server):
    server.reply("GET", f"{ENV_PATH}/topology", TOPOLOGY_ID)
    server.reply("GET", f"{REST}/topologies/{TOPOLOGY_ID}", TOPOLOGY)
    server.on("POST", EXECUTE_PATH, EditorBackend())
    server.reply("POST", f"{REST}/editor/{TOPOLOGY_ID}", None)
    return server


@pytest.mark.parametrize(
    ("source", "target", "relationship_type", "expected"),
    [
        ("WebServer", "Compute", "tosca.relationships.HostedOn", "WebServerHostedOnCompute"),
        ("app", "db", "org.example.connectsToDB", "appConnectsToDBDb"),
        ("a", "b", "Simple", "aSimpleB"),
    ],
)
def test_relationship_name(source: str, target: str, relationship_type: str, expected: str) -> None:
    assert relationship_name(source, target, relationship_type) == expected


def test_editor_chains_operations_and_save_resets_cursor(make_client, editor_server) -> None:
    """Given an editor session, when two operations are applied then saved, then each operation
    references the previous one and the save commits the last id before resetting."""

    async def scenario():
        async with make_client() as client:
            editor = client.topology.editor(APP, ENV)
            await editor.update_component_property("Compute", "flavor", "m1.small")
            await editor.update_component_property("Compute", "disk", {"size": "10 GB"})
            await editor.save()
            return editor.previous_operation_id

    assert asyncio.run(scenario()) is None

    first, second = (editor_server.json_body(r) for r in editor_server.calls("POST", EXECUTE_PATH))
    assert "previousOperationId" not in first
    assert first == {
        "type": UPDATE_NODE_PROPERTY_OPERATION,
        "nodeName": "Compute",
        "propertyName": "flavor",
        "propertyValue": "m1.small",
    }
    assert second["previousOperationId"] == "op-1"
    assert second["propertyValue"] == {"size": "10 GB"}

    (save,) = editor_server.calls("POST", f"{REST}/editor/{TOPOLOGY_ID}")
    assert save.url.params["lastOperationId"] == "op-2"
    # the topology id is resolved once per session
    assert len(editor_server.calls("GET", f"{ENV_PATH}/topology")) == 1


def test_editor_add_node_uses_type_version(make_client, editor_server) -> None:
    async def scenario() -> None:
        async with make_client() as client:
            await client.topology.editor(APP, ENV).add_node("tosca.nodes.Compute", "Compute2")

    asyncio.run(scenario())
    (operation,) = (editor_server.json_body(r) for r in editor_server.calls("POST", EXECUTE_PATH))
    assert operation == {
        "type": ADD_NODE_OPERATION,
        "nodeName": "Compute2",
        "indexedNodeTypeId": "tosca.nodes.Compute:1.0.0-ALIEN20",
    }


def test_editor_add_node_unknown_type(make_client, editor_server) -> None:
    async def scenario() -> None:
        async with make_client() as client:
            await client.topology.editor(APP, ENV).add_node("org.example.Missing", "x")

    with pytest.raises(NotFoundError):
        asyncio.run(scenario())
    assert editor_server.calls("POST", EXECUTE_PATH) == []


def test_editor_add_relationship_resolves_requirement_and_capability(
    make_client, editor_server
) -> None:
    """Given a source with a HostedOn requirement and a target exposing the matching capability,
    when a relationship is added, then the operation names both ends and the type version."""

    async def scenario() -> None:
        async with make_client() as client:
            await client.topology.editor(APP, ENV).add_relationship(
                "WebServer", "Compute", "tosca.relationships.HostedOn"
            )

    asyncio.run(scenario())
    (operation,) = (editor_server.json_body(r) for r in editor_server.calls("POST", EXECUTE_PATH))
    assert operation == {
        "type": ADD_RELATIONSHIP_OPERATION,
        "nodeName": "WebServer",
        "relationshipName": "WebServerHostedOnCompute",
        "relationshipType": "tosca.relationships.HostedOn",
        "relationshipVersion": "1.0.0-ALIEN20",
        "requirementName": "host",
        "requirementType": "tosca.capabilities.Container",
        "target": "Compute",
        "targetedCapabilityName": "host",
    }


def test_editor_add_relationship_missing_source(make_client, editor_server) -> None:
    async def scenario() -> None:
        async with make_client() as client:
            await client.topology.editor(APP, ENV).add_relationship(
                "Database", "Compute", "tosca.relationships.HostedOn"
            )

    with pytest.raises(A4CError, match="source node 'Database'"):
        asyncio.run(scenario())


def test_editor_add_workflow_activity(make_client, editor_server) -> None:
    activity = WorkflowActivity.operation_call(
        "WebServer", "tosca.interfaces.node.lifecycle.Standard", "start"
    ).append_after("WebServer_configured")

    async def scenario() -> None:
        async with make_client() as client:
            await client.topology.editor(APP, ENV).add_workflow_activity("install", activity)

    asyncio.run(scenario())
    (operation,) = (editor_server.json_body(r) for r in editor_server.calls("POST", EXECUTE_PATH))
    assert operation == {
        "type": ADD_ACTIVITY_OPERATION,
        "workflowName": "install",
        "target": "WebServer",
        "relatedStepID": "WebServer_configured",
        "before": False,
        "activity": {
            "type": CALL_OPERATION_ACTIVITY,
            "interfaceName": "tosca.interfaces.node.lifecycle.Standard",
            "operationName": "start",
        },
    }


def test_editor_failure_keeps_api_error(make_client, server) -> None:
    """Given an editor rejecting an operation, when it is applied, then the APIError class and
    code are kept and the session is added to the error context."""
    server.reply("GET", f"{ENV_PATH}/topology", TOPOLOGY_ID)
    server.fail("POST", EXECUTE_PATH, 400, "invalid operation")

    async def scenario() -> None:
        async with make_client() as client:
            await client.topology.editor(APP, ENV).create_workflow("custom")

    with pytest.raises(APIError, match="invalid operation") as excinfo:
        asyncio.run(scenario())
    assert excinfo.value.code == 400
    assert excinfo.value.context["application"] == APP
    assert excinfo.value.context["operation"] == CREATE_WORKFLOW_OPERATION


def test_get_topology_template_id_by_name(make_client, server) -> None:
    server.reply(
        "POST",
        f"{REST}/catalog/topologies/search",
        {"data": [{"id": "template:1.0.0", "name": "template"}], "totalResults": 1},
    )

    async def scenario() -> str:
        async with make_client() as client:
            return await client.topology.get_topology_template_id_by_name("template")

    assert asyncio.run(scenario()) == "template:1.0.0"
    (search,) = server.calls("POST", f"{REST}/catalog/topologies/search")
    assert server.json_body(search) == {"query": "template", "from": 0, "size": 1}


def test_get_topology_template_id_by_name_unknown(make_client, server) -> None:
    server.reply("POST", f"{REST}/catalog/topologies/search", {"data": [], "totalResults": 0})

    async def scenario() -> str:
        async with make_client() as client:
            return await client.topology.get_topology_template_id_by_name("missing")

    with pytest.raises(NotFoundError, match="missing"):
        asyncio.run(scenario())


def test_get_topology_decodes_types(make_client, editor_server) -> None:
    async def scenario():
        async with make_client() as client:
            return await client.topology.get_topology(APP, ENV)

    topology = asyncio.run(scenario())
    assert set(topology.topology.node_templates) == {"WebServer", "Compute"}
    assert topology.relationship_types["tosca.relationships.HostedOn"].derived_from == [
        "tosca.relationships.Root"
    ]
    web_server = topology.node_type_of("WebServer")
    assert web_server is not None and web_server.requirements[0].id == "host"


def test_get_topology_id_empty_raises(make_client, server) -> None:
    server.reply("GET", f"{ENV_PATH}/topology", "")

    async def scenario() -> str:
        async with make_client() as client:
            return await client.topology.get_topology_id(APP, ENV)

    with pytest.raises(NotFoundError):
        asyncio.run(scenario())

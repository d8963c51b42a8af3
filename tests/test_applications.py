"""Tests for application and environment operations."""

from __future__ import annotations

import asyncio

import pytest

from alien4cloud_client import A4CError, APIError, NotFoundError
from conftest import REST, error_response

APP = "myapp"


def test_create_application_from_template(make_client, server) -> None:
    """Given an existing topology template, when creating an application, then the template
    version id is resolved and sent with the application name."""

    server.reply(
        "POST",
        f"{REST}/catalog/topologies/search",
        {"data": [{"id": "template:1.0.0", "name": "template"}], "totalResults": 1},
    )
    server.reply("POST", f"{REST}/applications", APP, status_code=201)

    async def scenario() -> str:
        async with make_client() as client:
            return await client.applications.create_application(APP, "template")

    assert asyncio.run(scenario()) == APP
    (create,) = server.calls("POST", f"{REST}/applications")
    assert server.json_body(create) == {
        "name": APP,
        "archiveName": APP,
        "topologyTemplateVersionId": "template:1.0.0",
    }


def test_create_application_failure_keeps_api_error(make_client, server) -> None:
    """Given a name conflict, when creating an application, then the APIError class and code
    are kept and the application and template are added to the error context."""
    server.reply(
        "POST",
        f"{REST}/catalog/topologies/search",
        {"data": [{"id": "template:1.0.0", "name": "template"}], "totalResults": 1},
    )
    server.fail("POST", f"{REST}/applications", 409, "An application with the given name already exists")

    async def scenario() -> str:
        async with make_client() as client:
            return await client.applications.create_application(APP, "template")

    with pytest.raises(APIError, match="already exists") as excinfo:
        asyncio.run(scenario())
    assert excinfo.value.code == 409
    assert excinfo.value.context["application"] == APP
    assert excinfo.value.context["template"] == "template"


def test_get_environment_id_by_name(make_client, server) -> None:
    server.reply(
        "POST",
        f"{REST}/applications/{APP}/environments/search",
        {
            "data": [
                {"id": "env-1", "name": "Environment", "applicationId": APP},
                {"id": "env-2", "name": "Production", "applicationId": APP},
            ],
            "totalResults": 2,
        },
    )

    async def scenario() -> str:
        async with make_client() as client:
            return await client.applications.get_environment_id_by_name(APP, "Production")

    assert asyncio.run(scenario()) == "env-2"


def test_get_environment_id_by_name_unknown(make_client, server) -> None:
    server.reply(
        "POST",
        f"{REST}/applications/{APP}/environments/search",
        {"data": [{"id": "env-1", "name": "Environment"}], "totalResults": 1},
    )

    async def scenario() -> str:
        async with make_client() as client:
            return await client.applications.get_environment_id_by_name(APP, "Staging")

    with pytest.raises(NotFoundError, match="Staging"):
        asyncio.run(scenario())


def test_application_exists(make_client, server) -> None:
    server.reply("GET", f"{REST}/applications/{APP}", {"id": APP, "name": APP})
    server.on("GET", f"{REST}/applications/ghost", lambda request: error_response(404, "not found"))

    async def scenario() -> tuple[bool, bool]:
        async with make_client() as client:
            return (
                await client.applications.application_exists(APP),
                await client.applications.application_exists("ghost"),
            )

    assert asyncio.run(scenario()) == (True, False)


def test_application_exists_propagates_other_errors(make_client, server) -> None:
    server.fail("GET", f"{REST}/applications/{APP}", 500, "internal error")

    async def scenario() -> bool:
        async with make_client() as client:
            return await client.applications.application_exists(APP)

    with pytest.raises(A4CError, match="internal error"):
        asyncio.run(scenario())


def test_get_application_ids(make_client, server) -> None:
    server.reply(
        "POST",
        f"{REST}/applications/search",
        {"data": [{"id": "app1", "name": "app1"}, {"id": "app2", "name": "app2"}], "totalResults": 2},
    )

    async def scenario() -> list[str]:
        async with make_client() as client:
            return await client.applications.get_application_ids("app")

    assert asyncio.run(scenario()) == ["app1", "app2"]
    (search,) = server.calls("POST", f"{REST}/applications/search")
    assert server.json_body(search) == {"query": "app", "from": 0, "size": 0}


def test_get_application_ids_not_found_is_empty(make_client, server) -> None:
    server.fail("POST", f"{REST}/applications/search", 404, "not found")

    async def scenario() -> list[str]:
        async with make_client() as client:
            return await client.applications.get_application_ids()

    assert asyncio.run(scenario()) == []


def test_tags(make_client, server) -> None:
    """Given an application with tags, when setting and reading tags, then the tag body uses
    tagKey/tagValue and a missing key raises NotFoundError."""

    server.reply("POST", f"{REST}/applications/{APP}/tags", None)
    server.reply(
        "GET",
        f"{REST}/applications/{APP}",
        {"id": APP, "name": APP, "tags": [{"name": "owner", "value": "ops"}]},
    )

    async def scenario() -> str:
        async with make_client() as client:
            await client.applications.set_tag(APP, "owner", "ops")
            return await client.applications.get_tag(APP, "owner")

    assert asyncio.run(scenario()) == "ops"
    (tag,) = server.calls("POST", f"{REST}/applications/{APP}/tags")
    assert server.json_body(tag) == {"tagKey": "owner", "tagValue": "ops"}

    async def missing() -> str:
        async with make_client() as client:
            return await client.applications.get_tag(APP, "team")

    with pytest.raises(NotFoundError, match="team"):
        asyncio.run(missing())


def test_delete_application(make_client, server) -> None:
    server.reply("DELETE", f"{REST}/applications/{APP}", True)

    async def scenario() -> None:
        async with make_client() as client:
            await client.applications.delete_application(APP)

    asyncio.run(scenario())
    assert len(server.calls("DELETE", f"{REST}/applications/{APP}")) == 1


def test_get_deployment_topology(make_client, server) -> None:
    env_path = f"{REST}/applications/{APP}/environments/env-1"
    server.reply(
        "GET",
        f"{env_path}/deployment-topology",
        {"topology": {"nodeTemplates": {"Compute": {"name": "Compute", "type": "tosca.nodes.Compute"}}}},
    )

    async def scenario():
        async with make_client() as client:
            return await client.applications.get_deployment_topology(APP, "env-1")

    topology = asyncio.run(scenario())
    assert topology.topology.node_templates["Compute"].type == "tosca.nodes.Compute"

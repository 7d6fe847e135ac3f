"""Tests for the FastMCP tool registration, exercised through an in-memory MCP session."""

import json

import anyio
import pytest
from mcp.shared.memory import create_connected_server_and_client_session

from mcp_servers.terraform_docs_mcp import create_mcp
from mcp_servers.terraform_docs_server import TOOL_DESCRIPTIONS, MCPTerraformDocsServer


@pytest.fixture
def mcp(stack):
    return create_mcp(MCPTerraformDocsServer(stack.service))


def _with_session(mcp, action):
    """Run ``action(session)`` against an initialized client session."""
    async def main():
        async with create_connected_server_and_client_session(mcp._mcp_server) as session:
            return await action(session)

    return anyio.run(main)


def _call(mcp, name, arguments):
    return _with_session(mcp, lambda session: session.call_tool(name, arguments))


def test_tools_are_listed_with_input_schemas(mcp):
    listed = _with_session(mcp, lambda session: session.list_tools())
    tools = {tool.name: tool for tool in listed.tools}

    assert set(tools) == set(TOOL_DESCRIPTIONS)
    generate = tools["terraform_generate_config"]
    assert generate.description == TOOL_DESCRIPTIONS["terraform_generate_config"]
    assert generate.inputSchema["required"] == ["provider", "resource"]
    assert set(generate.inputSchema["properties"]) == {
        "provider", "resource", "attributes", "useSourceHosting", "useGithub",
    }
    assert tools["terraform_github_info"].inputSchema["required"] == ["provider"]


def test_tool_result_is_json_text_content(mcp):
    result = _call(mcp, "terraform_github_info", {"provider": "aws"})
    assert result.isError is False
    payload = json.loads(result.content[0].text)
    assert payload["owner"] == "hashicorp"
    assert payload["name"] == "terraform-provider-aws"


def test_source_toggle_reaches_the_service(mcp, stack):
    result = _call(mcp, "terraform_resource_schema", {
        "provider": "aws", "resource": "instance", "useSourceHosting": False,
    })
    assert json.loads(result.content[0].text)["source"] == "curated-fallback"
    assert stack.http.calls == []


def test_generate_config_passes_attributes(mcp):
    result = _call(mcp, "terraform_generate_config", {
        "provider": "aws",
        "resource": "instance",
        "attributes": {"instance_type": "m5.large"},
        "useGithub": False,
    })
    payload = json.loads(result.content[0].text)
    assert 'instance_type = "m5.large"' in payload["configurationText"]


def test_domain_failures_are_error_results(mcp):
    result = _call(mcp, "terraform_resource_schema", {"provider": "aws", "resource": "   "})
    assert result.isError is True
    assert "ValidationError" in result.content[0].text


def test_missing_required_argument_is_an_error_result(mcp):
    result = _call(mcp, "terraform_resource_schema", {"provider": "aws"})
    assert result.isError is True

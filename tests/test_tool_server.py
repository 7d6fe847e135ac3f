"""Tests for MCP tool dispatch, argument validation and error reporting."""

import json

import pytest

from core.tool_logger import setup_tool_logger, tool_log_path
from mcp_servers.terraform_docs_server import MCPTerraformDocsServer

from conftest import raw_url, search_url
from test_schema_parser import WIDGET_SOURCE


@pytest.fixture
def server(stack):
    return MCPTerraformDocsServer(stack.service)


def test_initialize_reports_server_identity(server):
    info = server.initialize()
    assert info["success"] is True
    assert info["server"] == "terraform-docs-mcp"
    assert info["authenticated"] is False


def test_github_info_from_static_table(server, stack):
    response = server.execute_tool("terraform_github_info", {"provider": "aws"})
    assert response["success"] is True
    result = response["result"]
    assert result["owner"] == "hashicorp"
    assert result["name"] == "terraform-provider-aws"
    assert result["defaultBranch"] == "main"
    assert result["url"] == "https://github.com/hashicorp/terraform-provider-aws"
    assert result["apiUrl"] == "https://api.github.com/repos/hashicorp/terraform-provider-aws"
    assert stack.http.calls == []


def test_github_info_for_unknown_provider_reports_not_found(server, stack):
    response = server.execute_tool("terraform_github_info", {"provider": "nonexistent-xyz"})
    assert response["success"] is False
    assert response["error_type"] == "ProviderNotFoundError"
    assert response["details"] == {"provider": "nonexistent-xyz"}
    assert stack.http.calls == [search_url("nonexistent-xyz")]


def test_resource_schema_without_source_hosting(server, stack):
    response = server.execute_tool(
        "terraform_resource_schema",
        {"provider": "aws", "resource": "instance", "useSourceHosting": False},
    )
    result = response["result"]
    assert result["source"] == "curated-fallback"
    assert result["attributes"]["ami"] == {
        "description": "AMI to use for the instance",
        "required": True,
        "type": "string",
    }
    assert result["attributes"]["tags"]["type"] == "map"
    assert result["attributes"]["root_block_device"]["nested"] is True
    assert stack.http.calls == []


def test_resource_schema_from_source(server, stack):
    stack.http.routes[raw_url("terraform-provider-aws", "internal/service/widget/resource_widget.go")] = WIDGET_SOURCE
    result = server.execute_tool("terraform_resource_schema", {"provider": "aws", "resource": "widget"})["result"]
    assert result["source"] == "extracted"
    assert result["sourceUrl"].endswith("internal/service/widget/resource_widget.go")
    assert result["attributes"]["network"]["nested"] is True


def test_use_github_alias(server, stack):
    server.execute_tool(
        "terraform_resource_schema",
        {"provider": "aws", "resource": "instance", "useGithub": False},
    )
    assert stack.http.calls == []


def test_generate_config_tool(server):
    response = server.execute_tool("terraform_generate_config", {
        "provider": "aws",
        "resource": "instance",
        "attributes": {"instance_type": "m5.large"},
        "useSourceHosting": False,
    })
    assert response["success"] is True
    assert 'instance_type = "m5.large"' in response["result"]["configurationText"]


def test_provider_docs_degrade_when_registry_is_unreachable(server, stack):
    response = server.execute_tool("terraform_provider_docs", {"provider": "aws", "resource": "instance"})
    result = response["result"]
    assert result["url"] == "https://registry.terraform.io/providers/hashicorp/aws/latest/docs/resources/instance"
    assert result["documentation"] == ""
    assert result["examples"] == []
    assert result["sources"] == []
    assert "repoUrl" not in result


def test_provider_docs_with_registry_page_and_github_examples(server, stack):
    url = "https://registry.terraform.io/providers/hashicorp/aws/latest/docs/resources/widget"
    stack.http.routes[url] = (
        '<div class="markdown-body"><p>Widget docs</p>'
        '<pre>resource "aws_widget" "a" {}</pre></div>'
    )
    stack.http.routes[raw_url("terraform-provider-aws", "examples/widget/main.tf")] = 'resource "aws_widget" "b" {}\n'

    result = server.execute_tool(
        "terraform_provider_docs",
        {"provider": "aws", "resource": "widget", "useSourceHosting": True},
    )["result"]
    assert result["documentation"].startswith("Widget docs")
    assert result["examples"] == ['resource "aws_widget" "a" {}', 'resource "aws_widget" "b" {}']
    assert result["sources"] == ["Terraform Registry", "GitHub"]
    assert result["repoUrl"] == "https://github.com/hashicorp/terraform-provider-aws"


@pytest.mark.parametrize("tool,params,field", [
    ("terraform_github_info", {}, "provider"),
    ("terraform_github_info", {"provider": ""}, "provider"),
    ("terraform_github_info", {"provider": 42}, "provider"),
    ("terraform_resource_schema", {"provider": "aws"}, "resource"),
    ("terraform_resource_schema", {"provider": "aws", "resource": "   "}, "resource"),
    ("terraform_generate_config", {"provider": "aws", "resource": "instance", "attributes": "x"}, "attributes"),
    ("terraform_provider_docs", {"provider": "aws", "useSourceHosting": "yes"}, "useSourceHosting"),
])
def test_invalid_arguments_are_validation_errors(server, stack, tool, params, field):
    response = server.execute_tool(tool, params)
    assert response["success"] is False
    assert response["error_type"] == "ValidationError"
    assert response["details"] == {"field": field}
    assert stack.http.calls == []


def test_unknown_tool(server):
    response = server.execute_tool("terraform_destroy_everything", {})
    assert response["success"] is False
    assert response["error_type"] == "UnknownTool"


def test_unexpected_errors_are_reported(server, monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(server.service, "get_repo_info", explode)
    response = server.execute_tool("terraform_github_info", {"provider": "aws"})
    assert response["success"] is False
    assert response["error_type"] == "UnexpectedError"
    assert "boom" in response["error"]


def test_tool_calls_are_written_to_jsonl(stack, tmp_path):
    tool_logger = setup_tool_logger(str(tmp_path), "test-events")
    server = MCPTerraformDocsServer(stack.service, tool_logger=tool_logger)
    server.execute_tool("terraform_github_info", {"provider": "aws"})
    server.execute_tool("terraform_github_info", {})
    for handler in tool_logger.handlers:
        handler.flush()

    with open(tool_log_path(str(tmp_path), "test-events"), encoding="utf-8") as f:
        events = [json.loads(line) for line in f]
    assert [e["success"] for e in events] == [True, False]
    assert events[1]["error_type"] == "ValidationError"
    assert all(e["event_type"] == "tool_call" and e["tool_name"] == "terraform_github_info" for e in events)
    assert all(e["duration_ms"] >= 0 for e in events)

    for handler in list(tool_logger.handlers):
        handler.close()
        tool_logger.removeHandler(handler)

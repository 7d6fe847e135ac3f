"""
MCP protocol binding for the Terraform Docs tools.

Registers the four tools on a FastMCP instance. Each tool call is handed to
MCPTerraformDocsServer.execute_tool on a worker thread, because lookups block
on the network and on the GitHub rate limiter. The same instance is served over
stdio (bin/mcp_stdio_server.py) or mounted into the FastAPI app
(bin/mcp_http_server.py).
"""

import json
import logging
from functools import partial
from typing import Annotated, Any, Dict, Optional

import anyio
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field

from mcp_servers.terraform_docs_server import TOOL_DESCRIPTIONS, MCPTerraformDocsServer

logger = logging.getLogger(__name__)

INSTRUCTIONS = (
    "Look up Terraform provider documentation, describe resource schemas and "
    "generate starter configuration. Provider names accept aliases such as gcp "
    "and azure; resource names omit the provider prefix (instance, not aws_instance)."
)

Provider = Annotated[str, Field(description="Provider name, e.g. aws, google, azurerm")]
Resource = Annotated[str, Field(description="Resource name without the provider prefix, e.g. instance")]
OptionalResource = Annotated[
    Optional[str],
    Field(description="Resource name without the provider prefix; omit for provider-level docs"),
]
Attributes = Annotated[
    Optional[Dict[str, Any]],
    Field(description="Attribute values to use instead of generated placeholders"),
]
UseSourceHosting = Annotated[Optional[bool], Field(description="Consult the provider's GitHub repository")]
UseGithub = Annotated[Optional[bool], Field(description="Alias of useSourceHosting")]


def tool_error_text(response: Dict[str, Any]) -> str:
    """JSON body of a failed execute_tool response, minus the success flag."""
    payload = {key: value for key, value in response.items() if key != "success"}
    return json.dumps(payload, default=str)


def create_mcp(server: MCPTerraformDocsServer, **options: Any) -> FastMCP:
    """Build a FastMCP instance whose tools delegate to ``server``.

    ``options`` are passed to FastMCP (host, json_response, stateless_http, ...).
    """
    mcp = FastMCP(server.settings.server_name, instructions=INSTRUCTIONS, **options)
    server.initialize()

    async def call(tool_name: str, arguments: Dict[str, Any]) -> str:
        arguments = {key: value for key, value in arguments.items() if value is not None}
        response = await anyio.to_thread.run_sync(partial(server.execute_tool, tool_name, arguments))
        if not response["success"]:
            # reported to the client as a tool result with isError set
            raise ToolError(tool_error_text(response))
        return json.dumps(response["result"], indent=2, default=str)

    @mcp.tool(name="terraform_provider_docs", description=TOOL_DESCRIPTIONS["terraform_provider_docs"])
    async def provider_docs(
        provider: Provider,
        resource: OptionalResource = None,
        useSourceHosting: UseSourceHosting = None,
        useGithub: UseGithub = None,
    ) -> str:
        return await call("terraform_provider_docs", {
            "provider": provider,
            "resource": resource,
            "useSourceHosting": useSourceHosting,
            "useGithub": useGithub,
        })

    @mcp.tool(name="terraform_generate_config", description=TOOL_DESCRIPTIONS["terraform_generate_config"])
    async def generate_config(
        provider: Provider,
        resource: Resource,
        attributes: Attributes = None,
        useSourceHosting: UseSourceHosting = None,
        useGithub: UseGithub = None,
    ) -> str:
        return await call("terraform_generate_config", {
            "provider": provider,
            "resource": resource,
            "attributes": attributes,
            "useSourceHosting": useSourceHosting,
            "useGithub": useGithub,
        })

    @mcp.tool(name="terraform_resource_schema", description=TOOL_DESCRIPTIONS["terraform_resource_schema"])
    async def resource_schema(
        provider: Provider,
        resource: Resource,
        useSourceHosting: UseSourceHosting = None,
        useGithub: UseGithub = None,
    ) -> str:
        return await call("terraform_resource_schema", {
            "provider": provider,
            "resource": resource,
            "useSourceHosting": useSourceHosting,
            "useGithub": useGithub,
        })

    @mcp.tool(name="terraform_github_info", description=TOOL_DESCRIPTIONS["terraform_github_info"])
    async def github_info(provider: Provider) -> str:
        return await call("terraform_github_info", {"provider": provider})

    logger.info(f"Registered {len(TOOL_DESCRIPTIONS)} tools on {mcp.name}")
    return mcp

"""
Terraform Docs MCP Server

This MCP server provides tools for looking up Terraform provider documentation,
inferring resource schemas from provider source code and generating starter
Terraform configuration for a resource.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, field_validator
from pydantic import ValidationError as PydanticValidationError

from core.config import Settings
from core.errors import TerraformDocsError, ValidationError
from core.tool_logger import setup_tool_logger, tool_event
from mcp_servers.terraform_docs import TerraformDocsService, build_service

logger = logging.getLogger(__name__)


class ProviderArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")

    provider: StrictStr = Field(min_length=1)

    @field_validator("provider")
    @classmethod
    def _provider_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("provider must be a non-empty string")
        return value.strip()


class SourceToggleArgs(ProviderArgs):
    useSourceHosting: Optional[StrictBool] = None
    useGithub: Optional[StrictBool] = None

    def use_source_hosting(self, default: bool) -> bool:
        if self.useSourceHosting is not None:
            return self.useSourceHosting
        if self.useGithub is not None:
            return self.useGithub
        return default


class ProviderDocsArgs(SourceToggleArgs):
    resource: Optional[StrictStr] = None


class ResourceArgs(SourceToggleArgs):
    resource: StrictStr = Field(min_length=1)

    @field_validator("resource")
    @classmethod
    def _resource_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("resource must be a non-empty string")
        return value.strip()


class GenerateConfigArgs(ResourceArgs):
    attributes: Dict[str, Any] = Field(default_factory=dict)


class GitHubInfoArgs(ProviderArgs):
    pass


def _validate(model: type, parameters: Dict[str, Any]) -> Any:
    try:
        return model.model_validate(parameters)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ValidationError(f"Invalid arguments: {field or 'input'}: {first.get('msg')}", field=field) from e


TOOL_DESCRIPTIONS: Dict[str, str] = {
    "terraform_provider_docs": "Fetch Terraform Registry documentation and examples for a provider or resource.",
    "terraform_generate_config": "Generate a starter Terraform configuration for a resource.",
    "terraform_resource_schema": "Describe a resource's attributes, extracted from provider source when possible.",
    "terraform_github_info": "Look up the GitHub repository that hosts a provider's source.",
}


class MCPTerraformDocsServer:
    """MCP Server for Terraform provider documentation and configuration"""

    def __init__(self, service: TerraformDocsService, settings: Optional[Settings] = None, tool_logger: Optional[logging.Logger] = None):
        self.service = service
        self.settings = settings or service.settings
        self.tool_logger = tool_logger or setup_tool_logger(None, "mcp")
        self._handlers: Dict[str, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
            "terraform_provider_docs": self._provider_docs,
            "terraform_generate_config": self._generate_config,
            "terraform_resource_schema": self._resource_schema,
            "terraform_github_info": self._github_info,
        }

    def initialize(self) -> Dict[str, Any]:
        """Initialize the MCP server"""
        logger.info(
            f"MCP Server initialized ({self.settings.server_name} {self.settings.server_version}, "
            f"GitHub auth: {'token' if self.settings.use_auth else 'anonymous'})"
        )
        return {
            "success": True,
            "server": self.settings.server_name,
            "version": self.settings.server_version,
            "authenticated": self.settings.use_auth,
            "message": "Terraform Docs MCP Server initialized successfully.",
        }

    def execute_tool(self, tool_name: str, parameters: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Execute an MCP tool"""
        logger.info(f"Executing tool: {tool_name} with parameters: {parameters}")

        handler = self._handlers.get(tool_name)
        if not handler:
            return {"success": False, "error": f"Unknown tool: {tool_name}", "error_type": "UnknownTool", "details": {}}

        started = time.monotonic()
        try:
            response = {"success": True, "result": handler(parameters or {})}
        except TerraformDocsError as e:
            logger.warning(f"Tool {tool_name} failed: {e}")
            response = {
                "success": False,
                "error": str(e),
                "error_type": type(e).__name__,
                "details": e.details(),
            }
        except Exception as e:
            logger.exception(f"Unexpected error in tool {tool_name}: {e}")
            response = {
                "success": False,
                "error": f"Unexpected error: {e}",
                "error_type": "UnexpectedError",
                "details": {},
            }

        tool_event(
            self.tool_logger,
            "tool_call",
            tool_name,
            duration_ms=(time.monotonic() - started) * 1000,
            success=response["success"],
            error_type=response.get("error_type"),
        )
        return response

    def _provider_docs(self, params: Dict[str, Any]) -> Dict[str, Any]:
        args = _validate(ProviderDocsArgs, params)
        return self.service.get_provider_docs(
            args.provider,
            args.resource or None,
            use_source_hosting=args.use_source_hosting(default=False),
        )

    def _generate_config(self, params: Dict[str, Any]) -> Dict[str, Any]:
        args = _validate(GenerateConfigArgs, params)
        return self.service.generate_config(
            args.provider,
            args.resource,
            args.attributes,
            use_source_hosting=args.use_source_hosting(default=True),
        )

    def _resource_schema(self, params: Dict[str, Any]) -> Dict[str, Any]:
        args = _validate(ResourceArgs, params)
        return self.service.get_resource_schema(
            args.provider,
            args.resource,
            use_source_hosting=args.use_source_hosting(default=True),
        )

    def _github_info(self, params: Dict[str, Any]) -> Dict[str, Any]:
        args = _validate(GitHubInfoArgs, params)
        return self.service.get_repo_info(args.provider)

    def close(self) -> None:
        self.service.close()


def build_server(settings: Settings) -> MCPTerraformDocsServer:
    """Wire the service graph and tool logger for one process."""
    return MCPTerraformDocsServer(
        build_service(settings),
        settings,
        tool_logger=setup_tool_logger(settings.log_dir, "mcp"),
    )

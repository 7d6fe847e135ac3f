"""Terraform configuration text from a resource schema plus attribute values."""

import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

from core.config import DEFAULT_REGIONS, normalize_provider
from core.errors import ConfigGenerationError

from .defaults import NO_DEFAULT, smart_default
from .models import Schema, SchemaAttribute

logger = logging.getLogger(__name__)

RESOURCE_LABEL = "main"
INDENT = "  "
TERRAFORM_REQUIRED_VERSION = ">= 1.0.0"

PROVIDER_VERSIONS = {
    "aws": "~> 5.0",
    "azurerm": "~> 3.0",
    "google": "~> 5.0",
}
GENERIC_PROVIDER_VERSION = ">= 1.0.0"

# Attribute names consumed by the provider block rather than the resource.
PROVIDER_KEYS = {
    "aws": ("region", "profile", "assume_role", "default_tags"),
    "azurerm": ("subscription_id", "tenant_id", "features"),
    "google": ("project", "region"),
}

LOCALS_RESOURCES = ("aws_s3_bucket", "aws_lambda_function", "aws_ecs_service", "azurerm_virtual_machine")

LIFECYCLE_HINTS: Dict[str, Tuple[str, Any]] = {
    "aws_instance": ("create_before_destroy", True),
    "aws_security_group": ("create_before_destroy", True),
    "azurerm_virtual_machine": ("create_before_destroy", True),
    "google_compute_instance": ("create_before_destroy", True),
    "aws_lambda_function": ("ignore_changes", ["source_code_hash"]),
    "aws_autoscaling_group": ("ignore_changes", ["desired_capacity"]),
}

DEPENDENCIES: Dict[str, List[str]] = {
    "aws_instance": ["aws_security_group.main", "aws_subnet.main"],
    "aws_lambda_function": ["aws_iam_role.lambda_role", "aws_cloudwatch_log_group.lambda_logs"],
    "aws_s3_bucket_policy": ["aws_s3_bucket.main"],
    "azurerm_virtual_machine": ["azurerm_network_interface.main", "azurerm_resource_group.main"],
}

EXTRA_OUTPUTS: Dict[str, List[Tuple[str, str]]] = {
    "aws_instance": [
        ("public_ip", "The public IP address of the instance"),
        ("private_ip", "The private IP address of the instance"),
    ],
    "aws_s3_bucket": [("arn", "The ARN of the bucket")],
    "aws_lambda_function": [("arn", "The ARN of the Lambda function")],
    "aws_security_group": [("arn", "The ARN of the security group")],
    "google_compute_instance": [("self_link", "The URI of the created instance")],
    "google_storage_bucket": [("url", "The base URL of the bucket")],
}

NO_OUTPUT_RESOURCES = ("aws_null_resource", "aws_iam_policy_attachment")

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")


def quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def _map_key(key: Any) -> str:
    key = str(key)
    return key if _IDENTIFIER_RE.match(key) else quote(key)


def format_value(value: Any, depth: int = 1) -> str:
    """Render a Python value as an HCL expression nested ``depth`` levels deep."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if value is None:
        return "null"
    if isinstance(value, str):
        return quote(value)
    if isinstance(value, Mapping):
        if not value:
            return "{}"
        inner = INDENT * (depth + 1)
        lines = [f"{inner}{_map_key(k)} = {format_value(v, depth + 1)}" for k, v in value.items()]
        return "{\n" + "\n".join(lines) + "\n" + INDENT * depth + "}"
    if isinstance(value, (list, tuple, set)):
        items = sorted(value, key=str) if isinstance(value, set) else list(value)
        if not items:
            return "[]"
        inner = INDENT * (depth + 1)
        lines = [f"{inner}{format_value(item, depth + 1)}," for item in items]
        return "[\n" + "\n".join(lines) + "\n" + INDENT * depth + "]"
    return quote(str(value))


def _is_map_name(name: str) -> bool:
    return name in ("tags", "labels") or name.endswith("_tags") or name.endswith("_labels")


class TerraformConfigGenerator:
    """Assembles header, terraform, provider, locals, resource and output sections."""

    def generate(
        self,
        provider: str,
        resource: str,
        schema: Schema,
        attributes: Optional[Dict[str, Any]] = None,
    ) -> str:
        provider_name = normalize_provider(provider)
        resource_name = (resource or "").strip().lower().replace("-", "_")
        if not provider_name or not resource_name:
            raise ConfigGenerationError("Provider and resource are required", provider, resource)

        values = dict(attributes or {})
        resource_type = f"{provider_name}_{resource_name}"
        logger.info(f"Generating configuration for {resource_type}")

        sections = [
            self._header(resource_type),
            self._terraform_block(provider_name),
            self._provider_block(provider_name, values),
        ]
        locals_block = self._locals_block(resource_type, values)
        if locals_block:
            sections.append(locals_block)
        sections.append(self._resource_block(provider_name, resource_type, schema, values))
        outputs = self._outputs(resource_name, resource_type)
        if outputs:
            sections.append(outputs)
        return "\n\n".join(sections) + "\n"

    def _header(self, resource_type: str) -> str:
        return f"# Terraform configuration for {resource_type}\n# Generated by terraform-docs-mcp"

    def _terraform_block(self, provider: str) -> str:
        version = PROVIDER_VERSIONS.get(provider, GENERIC_PROVIDER_VERSION)
        return "\n".join([
            "terraform {",
            f"  required_version = {quote(TERRAFORM_REQUIRED_VERSION)}",
            "",
            "  required_providers {",
            f"    {provider} = {{",
            f"      source  = {quote('hashicorp/' + provider)}",
            f"      version = {quote(version)}",
            "    }",
            "  }",
            "}",
        ])

    def _provider_block(self, provider: str, values: Dict[str, Any]) -> str:
        lines = [f'provider "{provider}" {{']
        if provider == "aws":
            lines.append(f"  region = {quote(str(values.get('region') or DEFAULT_REGIONS['aws']))}")
            if values.get("profile"):
                lines.append(f"  profile = {quote(str(values['profile']))}")
            assume_role = values.get("assume_role")
            if assume_role:
                role_arn = assume_role.get("role_arn") if isinstance(assume_role, Mapping) else assume_role
                lines.extend(["", "  assume_role {", f"    role_arn = {quote(str(role_arn))}", "  }"])
            default_tags = values.get("default_tags")
            if isinstance(default_tags, Mapping) and default_tags:
                lines.extend([
                    "",
                    "  default_tags {",
                    f"    tags = {format_value(dict(default_tags), 2)}",
                    "  }",
                ])
        elif provider == "azurerm":
            lines.append("  features {}")
            for key in ("subscription_id", "tenant_id"):
                if values.get(key):
                    lines.append(f"  {key} = {quote(str(values[key]))}")
        elif provider == "google":
            lines.append(f"  project = {quote(str(values.get('project') or 'my-project-id'))}")
            lines.append(f"  region  = {quote(str(values.get('region') or DEFAULT_REGIONS['google']))}")
            if values.get("zone"):
                lines.append(f"  zone    = {quote(str(values['zone']))}")
        lines.append("}")
        return "\n".join(lines)

    def _locals_block(self, resource_type: str, values: Dict[str, Any]) -> Optional[str]:
        if resource_type not in LOCALS_RESOURCES:
            return None
        common_tags = {"ManagedBy": "terraform", "Project": "example-project"}
        if resource_type == "aws_s3_bucket":
            local_values = {"bucket_name": values.get("bucket") or "example-bucket"}
        elif resource_type == "aws_lambda_function":
            local_values = {
                "function_name": values.get("function_name") or "example-function",
                "handler": values.get("handler") or "index.handler",
                "runtime": values.get("runtime") or "nodejs18.x",
                "timeout": values.get("timeout") or 30,
                "memory_size": values.get("memory_size") or 128,
            }
        elif resource_type == "aws_ecs_service":
            local_values = {"service_name": values.get("name") or "example-service"}
        else:
            local_values = {"vm_name": values.get("name") or "example-vm"}
        local_values["common_tags"] = common_tags
        lines = ["locals {"]
        lines.extend(f"  {key} = {format_value(value, 1)}" for key, value in local_values.items())
        lines.append("}")
        return "\n".join(lines)

    def _resource_block(self, provider: str, resource_type: str, schema: Schema, values: Dict[str, Any]) -> str:
        excluded = set(PROVIDER_KEYS.get(provider, ()))
        chunks = self._body_chunks(provider, schema.all_attributes(), values, depth=1, excluded=excluded)

        lifecycle = LIFECYCLE_HINTS.get(resource_type)
        if lifecycle:
            key, value = lifecycle
            if isinstance(value, list):
                rendered = "[\n" + "\n".join(f"      {item}," for item in value) + "\n    ]"
            else:
                rendered = format_value(value, 2)
            chunks.append(["  lifecycle {", f"    {key} = {rendered}", "  }"])

        dependencies = DEPENDENCIES.get(resource_type)
        if dependencies:
            chunks.append(["  depends_on = ["] + [f"    {dep}," for dep in dependencies] + ["  ]"])

        body = "\n\n".join("\n".join(chunk) for chunk in chunks if chunk)
        header = f'resource "{resource_type}" "{RESOURCE_LABEL}" {{'
        return f"{header}\n{body}\n}}" if body else f"{header}\n}}"

    def _body_chunks(
        self,
        provider: str,
        schema_attributes: Dict[str, SchemaAttribute],
        values: Dict[str, Any],
        depth: int,
        excluded: Optional[set] = None,
    ) -> List[List[str]]:
        """Required attributes, then supplied optional ones, then nested blocks.

        Each block instance is its own chunk so siblings get a blank line between them.
        ``excluded`` keys feed the provider block; they are left out here unless
        the schema declares them.
        """
        excluded = excluded or set()
        pad = INDENT * depth
        required_lines: List[str] = []
        optional_lines: List[str] = []
        blocks: List[Tuple[str, Dict[str, SchemaAttribute], Any]] = []

        for name, attr in schema_attributes.items():
            supplied = name in values
            if self._renders_as_block(attr, values.get(name) if supplied else None):
                if supplied:
                    blocks.append((name, attr.nested or {}, values[name]))
                elif attr.required:
                    blocks.append((name, attr.nested or {}, {}))
                continue
            if supplied:
                line = f"{pad}{name} = {format_value(values[name], depth)}"
                (required_lines if attr.required else optional_lines).append(line)
            elif attr.required:
                default = smart_default(name, attr, provider)
                if default is not NO_DEFAULT:
                    required_lines.append(f"{pad}{name} = {format_value(default, depth)}")

        for name, value in values.items():
            if name in schema_attributes or name in excluded or value is None:
                continue
            if isinstance(value, Mapping) and not _is_map_name(name):
                blocks.append((name, {}, value))
            elif isinstance(value, list) and value and all(isinstance(v, Mapping) for v in value):
                blocks.append((name, {}, value))
            else:
                optional_lines.append(f"{pad}{name} = {format_value(value, depth)}")

        chunks = [required_lines, optional_lines]
        for name, nested_schema, value in blocks:
            for instance in self._block_instances(name, value):
                chunks.append(self._block_lines(provider, name, nested_schema, instance, depth))
        return [chunk for chunk in chunks if chunk]

    @staticmethod
    def _renders_as_block(attr: SchemaAttribute, value: Any) -> bool:
        if attr.is_block:
            return True
        if attr.type == "map":
            return False
        return isinstance(value, Mapping)

    @staticmethod
    def _block_instances(name: str, value: Any) -> List[Mapping]:
        if isinstance(value, Mapping):
            return [value]
        if isinstance(value, (list, tuple)) and all(isinstance(v, Mapping) for v in value):
            return list(value)
        raise ConfigGenerationError(f"Block '{name}' expects an object or a list of objects, got {value!r}")

    def _block_lines(self, provider: str, name: str, nested_schema: Dict[str, SchemaAttribute], value: Mapping, depth: int) -> List[str]:
        pad = INDENT * depth
        inner = self._body_chunks(provider, nested_schema, dict(value), depth + 1)
        lines = [f"{pad}{name} {{"]
        for index, chunk in enumerate(inner):
            if index:
                lines.append("")
            lines.extend(chunk)
        lines.append(f"{pad}}}")
        return lines

    def _outputs(self, resource: str, resource_type: str) -> Optional[str]:
        if resource_type in NO_OUTPUT_RESOURCES:
            return None
        fields = [("id", f"The ID of the {resource_type}")]
        fields.extend(EXTRA_OUTPUTS.get(resource_type, []))
        blocks = []
        for field_name, description in fields:
            blocks.append("\n".join([
                f'output "{resource}_{field_name}" {{',
                f"  description = {quote(description)}",
                f"  value       = {resource_type}.{RESOURCE_LABEL}.{field_name}",
                "}",
            ]))
        return "\n\n".join(blocks)

"""Hand-maintained schemas for well-known resources, used when extraction fails."""

from typing import Dict, Optional, Tuple

from core.config import normalize_provider

from .models import (
    NESTING_LIST,
    ORIGIN_CURATED,
    ORIGIN_GENERIC,
    BlockType,
    Schema,
    SchemaAttribute,
)


def _required(description: str, type: str = "string", **kwargs) -> SchemaAttribute:
    return SchemaAttribute(description=description, required=True, type=type, **kwargs)


def _optional(description: str, type: str = "string", **kwargs) -> SchemaAttribute:
    return SchemaAttribute(description=description, optional=True, type=type, **kwargs)


def _block(description: str, attributes: Dict[str, SchemaAttribute], required: bool = False) -> BlockType:
    return BlockType(
        nesting=NESTING_LIST,
        attributes=attributes,
        min_items=1 if required else 0,
        max_items=1,
        description=description,
    )


def _tags() -> SchemaAttribute:
    return _optional("A map of tags to assign to the resource", "map", elem_type="string")


def _aws_instance() -> Schema:
    return Schema(
        attributes={
            "ami": _required("AMI to use for the instance"),
            "instance_type": _required("Instance type to use for the instance"),
            "availability_zone": _optional("AZ to start the instance in"),
            "subnet_id": _optional("VPC Subnet ID to launch in"),
            "vpc_security_group_ids": _optional("List of security group IDs to associate with", "set", elem_type="string"),
            "key_name": _optional("Key name of the Key Pair to use for the instance"),
            "associate_public_ip_address": _optional("Whether to associate a public IP address", "bool"),
            "user_data": _optional("User data to provide when launching the instance"),
            "tags": _tags(),
        },
        block_types={
            "root_block_device": _block(
                "Customize details about the root block device of the instance",
                {
                    "volume_size": _optional("Size of the volume in gibibytes", "number"),
                    "volume_type": _optional("Type of volume"),
                    "encrypted": _optional("Whether to enable volume encryption", "bool"),
                },
            ),
        },
    )


def _aws_s3_bucket() -> Schema:
    return Schema(
        attributes={
            "bucket": _required("Name of the bucket", force_new=True),
            "force_destroy": _optional("Delete all objects from the bucket when the bucket is destroyed", "bool"),
            "tags": _tags(),
        },
    )


def _aws_vpc() -> Schema:
    return Schema(
        attributes={
            "cidr_block": _required("The IPv4 CIDR block for the VPC"),
            "enable_dns_support": _optional("Whether DNS support is enabled in the VPC", "bool"),
            "enable_dns_hostnames": _optional("Whether DNS hostnames are enabled in the VPC", "bool"),
            "instance_tenancy": _optional("A tenancy option for instances launched into the VPC"),
            "tags": _tags(),
        },
    )


def _aws_subnet() -> Schema:
    return Schema(
        attributes={
            "vpc_id": _required("The VPC ID"),
            "cidr_block": _required("The IPv4 CIDR block for the subnet"),
            "availability_zone": _optional("AZ for the subnet"),
            "map_public_ip_on_launch": _optional("Assign a public IP address to instances launched into the subnet", "bool"),
            "tags": _tags(),
        },
    )


def _aws_security_group() -> Schema:
    rule = {
        "from_port": _required("Start port", "number"),
        "to_port": _required("End port", "number"),
        "protocol": _required("Protocol"),
        "cidr_blocks": _optional("List of CIDR blocks", "list", elem_type="string"),
        "description": _optional("Description of this rule"),
    }
    return Schema(
        attributes={
            "name": _optional("Name of the security group", force_new=True),
            "description": _optional("Security group description", force_new=True),
            "vpc_id": _required("VPC ID"),
            "tags": _tags(),
        },
        block_types={
            "ingress": BlockType(nesting="set", attributes=dict(rule), description="Ingress rules"),
            "egress": BlockType(nesting="set", attributes=dict(rule), description="Egress rules"),
        },
    )


def _aws_lambda_function() -> Schema:
    return Schema(
        attributes={
            "function_name": _required("Unique name for the Lambda function"),
            "role": _required("Amazon Resource Name (ARN) of the function's execution role"),
            "handler": _optional("Function entrypoint in your code"),
            "runtime": _optional("Identifier of the function's runtime"),
            "filename": _optional("Path to the function's deployment package"),
            "memory_size": _optional("Amount of memory in MB the function can use", "number"),
            "timeout": _optional("Amount of time the function has to run in seconds", "number"),
            "tags": _tags(),
        },
    )


def _google_compute_instance() -> Schema:
    return Schema(
        attributes={
            "name": _required("A unique name for the resource"),
            "machine_type": _required("The machine type to create"),
            "zone": _required("The zone that the machine should be created in"),
            "labels": _optional("A map of key/value label pairs to assign to the instance", "map", elem_type="string"),
            "tags": _optional("A list of network tags to attach to the instance", "list", elem_type="string"),
        },
        block_types={
            "boot_disk": _block(
                "The boot disk for the instance",
                {
                    "auto_delete": _optional("Whether the disk will be auto-deleted when the instance is deleted", "bool"),
                    "initialize_params": SchemaAttribute(
                        description="Parameters for a new disk that will be created alongside the new instance",
                        optional=True,
                        type="list",
                        elem_type="resource",
                        nested={
                            "image": _optional("The image from which to initialize this disk"),
                            "size": _optional("The size of the image in gigabytes", "number"),
                        },
                    ),
                },
                required=True,
            ),
            "network_interface": _block(
                "Networks to attach to the instance",
                {
                    "network": _optional("The name or self_link of the network to attach this interface to"),
                    "subnetwork": _optional("The name or self_link of the subnetwork to attach this interface to"),
                },
                required=True,
            ),
        },
    )


def _google_storage_bucket() -> Schema:
    return Schema(
        attributes={
            "name": _required("The name of the bucket", force_new=True),
            "location": _required("The GCS location", force_new=True),
            "storage_class": _optional("The Storage Class of the new bucket"),
            "force_destroy": _optional("Delete all contained objects when deleting the bucket", "bool"),
            "labels": _optional("A map of key/value label pairs to assign to the bucket", "map", elem_type="string"),
        },
    )


def _azurerm_resource_group() -> Schema:
    return Schema(
        attributes={
            "name": _required("The Name which should be used for this Resource Group", force_new=True),
            "location": _required("The Azure Region where the Resource Group should exist", force_new=True),
            "tags": _tags(),
        },
    )


def _azurerm_virtual_machine() -> Schema:
    return Schema(
        attributes={
            "name": _required("Specifies the name of the Virtual Machine", force_new=True),
            "location": _required("Specifies the Azure Region where the Virtual Machine exists", force_new=True),
            "resource_group_name": _required("Specifies the name of the Resource Group", force_new=True),
            "vm_size": _required("Specifies the size of the Virtual Machine"),
            "network_interface_ids": _required("A list of Network Interface IDs", "list", elem_type="string"),
            "tags": _tags(),
        },
        block_types={
            "storage_os_disk": _block(
                "The OS disk of the Virtual Machine",
                {
                    "name": _required("Specifies the name of the OS Disk"),
                    "create_option": _required("Specifies how the OS Disk should be created"),
                    "caching": _optional("Specifies the caching requirements for the OS Disk"),
                    "managed_disk_type": _optional("Specifies the type of Managed Disk"),
                },
                required=True,
            ),
        },
    )


def _azurerm_storage_account() -> Schema:
    return Schema(
        attributes={
            "name": _required("Specifies the name of the storage account", force_new=True),
            "resource_group_name": _required("The name of the resource group", force_new=True),
            "location": _required("Specifies the supported Azure location", force_new=True),
            "account_tier": _required("Defines the Tier to use for this storage account"),
            "account_replication_type": _required("Defines the type of replication to use"),
            "tags": _tags(),
        },
    )


CURATED_SCHEMAS = {
    ("aws", "instance"): _aws_instance,
    ("aws", "s3_bucket"): _aws_s3_bucket,
    ("aws", "vpc"): _aws_vpc,
    ("aws", "subnet"): _aws_subnet,
    ("aws", "security_group"): _aws_security_group,
    ("aws", "lambda_function"): _aws_lambda_function,
    ("google", "compute_instance"): _google_compute_instance,
    ("google", "storage_bucket"): _google_storage_bucket,
    ("azurerm", "resource_group"): _azurerm_resource_group,
    ("azurerm", "virtual_machine"): _azurerm_virtual_machine,
    ("azurerm", "storage_account"): _azurerm_storage_account,
}


def _key(provider: str, resource: str) -> Tuple[str, str]:
    return normalize_provider(provider), (resource or "").strip().lower().replace("-", "_")


def curated_schema(provider: str, resource: str) -> Optional[Schema]:
    """A fresh copy of the curated schema, or None when the pair is unknown."""
    factory = CURATED_SCHEMAS.get(_key(provider, resource))
    if factory is None:
        return None
    schema = factory()
    schema.provider_name, schema.resource_name = _key(provider, resource)
    schema.origin = ORIGIN_CURATED
    return schema


def generic_schema(provider: str, resource: str) -> Schema:
    provider_name, resource_name = _key(provider, resource)
    return Schema(
        attributes={
            "name": _required("Name of the resource"),
            "tags": _tags(),
        },
        resource_name=resource_name,
        provider_name=provider_name,
        origin=ORIGIN_GENERIC,
    )


def fallback_schema(provider: str, resource: str) -> Schema:
    """Curated schema when one exists, otherwise the minimal generic one."""
    return curated_schema(provider, resource) or generic_schema(provider, resource)

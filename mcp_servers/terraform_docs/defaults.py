"""Deterministic placeholder values for attributes the caller did not supply."""

import copy
from typing import Any, Dict

from core.config import DEFAULT_REGIONS, DEFAULT_ZONES, normalize_provider

from .models import SchemaAttribute

# Never auto-filled, whatever the schema says.
SENSITIVE_MARKERS = ("password", "secret", "token", "credential", "access_key", "private_key")

WELL_KNOWN_VALUES: Dict[str, Any] = {
    "bucket": "example-bucket",
    "ami": "ami-12345678",
    "image_id": "ami-12345678",
    "instance_type": "t3.micro",
    "machine_type": "e2-medium",
    "vm_size": "Standard_DS1_v2",
    "description": "Managed by Terraform",
}

TYPE_DEFAULTS: Dict[str, Any] = {
    "number": 42,
    "bool": True,
    "list": [],
    "set": [],
    "map": {},
}

FAKE_ID_SUFFIX = "0123456789abcdef0"

PROVIDER_DEFAULTS: Dict[tuple, Dict[str, Any]] = {
    ("aws", "instance"): {
        "ami": "ami-0c55b159cbfafe1f0",
        "instance_type": "t3.micro",
        "tags": {"Name": "example-instance", "Environment": "dev"},
    },
    ("aws", "s3_bucket"): {
        "bucket": "example-bucket",
        "tags": {"Name": "example-bucket", "Environment": "dev"},
    },
    ("google", "compute_instance"): {
        "name": "example-instance",
        "machine_type": "e2-medium",
        "zone": "us-central1-a",
        "boot_disk": {"initialize_params": {"image": "debian-cloud/debian-11"}},
        "network_interface": {"network": "default"},
    },
    ("azurerm", "virtual_machine"): {
        "name": "example-vm",
        "location": "East US",
        "resource_group_name": "example-resources",
        "vm_size": "Standard_DS1_v2",
    },
}


class _NoDefault:
    def __repr__(self):
        return "NO_DEFAULT"


NO_DEFAULT = _NoDefault()


def is_sensitive(name: str) -> bool:
    lowered = name.lower()
    return any(marker in lowered for marker in SENSITIVE_MARKERS)


def _fake_id(tokens) -> str:
    prefix = tokens[-2] if len(tokens) > 1 else "resource"
    return f"{prefix}-{FAKE_ID_SUFFIX}"


def _placement_default(name: str, provider: str) -> Any:
    """Region, location or zone value for the provider (aws when unknown)."""
    provider = normalize_provider(provider) or "aws"
    if name in ("region", "location"):
        return DEFAULT_REGIONS.get(provider, DEFAULT_REGIONS["aws"])
    if name == "zone" or name.endswith("_zone"):
        return DEFAULT_ZONES.get(provider, DEFAULT_ZONES["aws"])
    return None


def smart_default(name: str, attribute: SchemaAttribute, provider: str = "aws") -> Any:
    """Placeholder for a missing attribute, or NO_DEFAULT when it must be omitted.

    Lookup order: provider placement (region/zone/location), well-known
    names, name heuristics, then the declared type.
    """
    if is_sensitive(name):
        return NO_DEFAULT

    placement = _placement_default(name, provider)
    if placement is not None:
        return placement
    if name in WELL_KNOWN_VALUES:
        return copy.deepcopy(WELL_KNOWN_VALUES[name])
    if name == "name":
        return "example-name"
    if name.endswith("_name"):
        return "example-" + name[: -len("_name")].replace("_", "-")

    tokens = name.lower().split("_")
    if name.endswith("_enabled"):
        return True
    if "ids" in tokens:
        return [_fake_id(tokens[:-1] + ["id"])]
    if "id" in tokens:
        return _fake_id(tokens)
    if "arn" in tokens:
        return "arn:aws:service:region:account-id:resource/example"
    if "cidr" in name.lower():
        return "10.0.0.0/16"

    if attribute.type == "string":
        return f"example-value-for-{name}"
    if attribute.type in TYPE_DEFAULTS:
        return copy.deepcopy(TYPE_DEFAULTS[attribute.type])
    return f"required-value-for-{name}"


def provider_defaults(provider: str, resource: str) -> Dict[str, Any]:
    """Inferred attribute values for a few well-known resources (fresh copy)."""
    key = (normalize_provider(provider), (resource or "").strip().lower().replace("-", "_"))
    return copy.deepcopy(PROVIDER_DEFAULTS.get(key, {}))

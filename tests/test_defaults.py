"""Tests for placeholder values of unsupplied attributes."""

import pytest

from mcp_servers.terraform_docs.defaults import NO_DEFAULT, is_sensitive, provider_defaults, smart_default
from mcp_servers.terraform_docs.models import SchemaAttribute


def _string():
    return SchemaAttribute(required=True, type="string")


@pytest.mark.parametrize("name,expected", [
    ("ami", "ami-12345678"),
    ("instance_type", "t3.micro"),
    ("name", "example-name"),
    ("resource_group_name", "example-resource-group"),
    ("availability_zone", "us-west-2a"),
    ("monitoring_enabled", True),
    ("vpc_id", "vpc-0123456789abcdef0"),
    ("subnet_ids", ["subnet-0123456789abcdef0"]),
    ("role_arn", "arn:aws:service:region:account-id:resource/example"),
    ("cidr_block", "10.0.0.0/16"),
    ("engine", "example-value-for-engine"),
])
def test_name_heuristics(name, expected):
    assert smart_default(name, _string()) == expected


@pytest.mark.parametrize("name", ["password", "master_password", "client_secret", "api_token", "secret_access_key"])
def test_sensitive_names_are_never_filled(name):
    assert is_sensitive(name)
    assert smart_default(name, _string()) is NO_DEFAULT


def test_type_defaults():
    assert smart_default("port", SchemaAttribute(required=True, type="number")) == 42
    assert smart_default("force", SchemaAttribute(required=True, type="bool")) is True
    assert smart_default("items", SchemaAttribute(required=True, type="list")) == []
    assert smart_default("thing", SchemaAttribute(required=True)) == "required-value-for-thing"


def test_defaults_are_fresh_copies():
    first = smart_default("items", SchemaAttribute(required=True, type="list"))
    first.append("x")
    assert smart_default("items", SchemaAttribute(required=True, type="list")) == []


def test_provider_defaults_for_well_known_resources():
    defaults = provider_defaults("aws", "instance")
    assert defaults["instance_type"] == "t3.micro"
    defaults["tags"]["Name"] = "changed"
    assert provider_defaults("aws", "instance")["tags"]["Name"] == "example-instance"

    assert provider_defaults("gcp", "compute-instance")["network_interface"] == {"network": "default"}
    assert provider_defaults("aws", "unknown") == {}


@pytest.mark.parametrize("provider,name,expected", [
    ("google", "region", "us-central1"),
    ("gcp", "zone", "us-central1-a"),
    ("azurerm", "location", "East US"),
    ("aws", "region", "us-west-2"),
    ("acme", "availability_zone", "us-west-2a"),
])
def test_placement_defaults_depend_on_provider(provider, name, expected):
    assert smart_default(name, _string(), provider) == expected

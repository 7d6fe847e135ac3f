"""Unit tests for provider -> repository resolution."""

import json

from core.errors import HttpError
from mcp_servers.terraform_docs.repositories import PROVIDER_REPOS

from conftest import search_url


def test_static_table_hit_makes_no_network_calls(stack):
    repo = stack.resolver.resolve("aws")
    assert repo.owner == "hashicorp"
    assert repo.name == "terraform-provider-aws"
    assert repo.default_branch == "main"
    assert stack.http.calls == []


def test_aliases_and_case_are_normalised(stack):
    assert stack.resolver.resolve(" GCP ") == PROVIDER_REPOS["google"]
    assert stack.resolver.resolve("azure") == PROVIDER_REPOS["azurerm"]
    assert stack.http.calls == []


def test_search_fallback_takes_top_result(stack):
    stack.http.routes[search_url("acme")] = json.dumps({
        "items": [
            {"owner": {"login": "acme-corp"}, "name": "terraform-provider-acme", "default_branch": "develop"},
            {"owner": {"login": "someone"}, "name": "terraform-provider-acme-fork", "default_branch": "main"},
        ]
    })
    repo = stack.resolver.resolve("acme")
    assert repo.full_name == "acme-corp/terraform-provider-acme"
    assert repo.default_branch == "develop"

    stack.resolver.resolve("acme")
    assert stack.http.calls == [search_url("acme")]


def test_empty_search_result_is_not_found(stack):
    stack.http.routes[search_url("ghost")] = json.dumps({"items": []})
    assert stack.resolver.resolve("ghost") is None


def test_failed_search_returns_none_and_is_negatively_cached(stack):
    stack.http.routes[search_url("flaky")] = HttpError("HTTP 500", 500)
    assert stack.resolver.resolve("flaky") is None
    assert stack.resolver.resolve("flaky") is None
    assert stack.http.calls == [search_url("flaky")]


def test_negative_result_expires_after_error_ttl(stack, clock):
    stack.http.routes[search_url("later")] = HttpError("HTTP 500", 500)
    assert stack.resolver.resolve("later") is None

    clock.now += stack.cache.ttl.error_response + 1
    stack.http.routes[search_url("later")] = json.dumps({
        "items": [{"owner": {"login": "later-inc"}, "name": "terraform-provider-later"}]
    })
    repo = stack.resolver.resolve("later")
    assert repo.owner == "later-inc"
    assert repo.default_branch == "main"


def test_blank_provider_resolves_to_none(stack):
    assert stack.resolver.resolve("   ") is None
    assert stack.http.calls == []


def test_search_query_escapes_provider_name(stack):
    assert stack.resolver.resolve("acme & co#1") is None
    assert stack.http.calls == [
        "https://api.github.com/search/repositories"
        "?q=terraform-provider-acme%20%26%20co%231+in:name&sort=stars&order=desc"
    ]

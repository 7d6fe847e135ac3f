"""Provider name -> GitHub repository resolution."""

import logging
from typing import Dict, Optional
from urllib.parse import quote

from core.cache import CacheService
from core.config import normalize_provider
from core.errors import TerraformDocsError

from .github import GitHubClient
from .models import GitHubRepo

logger = logging.getLogger(__name__)

REPO_SEARCH_PREFIX = "terraform-provider-"

PROVIDER_REPOS: Dict[str, GitHubRepo] = {
    "aws": GitHubRepo(
        "hashicorp", "terraform-provider-aws", "main",
        schema_patterns=(
            "internal/service/{resource}/resource_{resource}.go",
            "internal/service/{resource}/{resource}.go",
            "internal/service/{resource}/resource_aws_{resource}.go",
        ),
    ),
    "azurerm": GitHubRepo(
        "hashicorp", "terraform-provider-azurerm", "main",
        schema_patterns=(
            "internal/services/{resource}/{resource}_resource.go",
            "internal/services/{resource}/resource_arm_{resource}.go",
        ),
    ),
    "google": GitHubRepo(
        "hashicorp", "terraform-provider-google", "main",
        schema_patterns=(
            "google/services/{resource}/resource_{resource}.go",
            "google/resource_{resource}.go",
        ),
    ),
    "kubernetes": GitHubRepo(
        "hashicorp", "terraform-provider-kubernetes", "main",
        schema_patterns=(
            "kubernetes/resource_kubernetes_{resource}.go",
            "internal/provider/resource_{resource}.go",
        ),
    ),
    "azuread": GitHubRepo("hashicorp", "terraform-provider-azuread", "main"),
    "google-beta": GitHubRepo("hashicorp", "terraform-provider-google-beta", "main"),
    "helm": GitHubRepo("hashicorp", "terraform-provider-helm", "main"),
    "random": GitHubRepo("hashicorp", "terraform-provider-random", "main"),
    "null": GitHubRepo("hashicorp", "terraform-provider-null", "main"),
    "local": GitHubRepo("hashicorp", "terraform-provider-local", "main"),
    "tls": GitHubRepo("hashicorp", "terraform-provider-tls", "main"),
    "time": GitHubRepo("hashicorp", "terraform-provider-time", "main"),
    "archive": GitHubRepo("hashicorp", "terraform-provider-archive", "main"),
    "http": GitHubRepo("hashicorp", "terraform-provider-http", "main"),
    "vault": GitHubRepo("hashicorp", "terraform-provider-vault", "main"),
    "consul": GitHubRepo("hashicorp", "terraform-provider-consul", "main"),
    "docker": GitHubRepo("kreuzwerker", "terraform-provider-docker", "master"),
    "github": GitHubRepo("integrations", "terraform-provider-github", "main"),
    "datadog": GitHubRepo("DataDog", "terraform-provider-datadog", "master"),
    "digitalocean": GitHubRepo("digitalocean", "terraform-provider-digitalocean", "main"),
}

_MISS = object()


class RepositoryResolver:
    """Static table first, then a best-effort GitHub repository search."""

    def __init__(self, github: GitHubClient, cache: CacheService):
        self.github = github
        self.cache = cache
        self._repo_cache = cache.namespace("repo")

    def resolve(self, provider: str) -> Optional[GitHubRepo]:
        """Return the provider's repository, or None when it cannot be found."""
        name = normalize_provider(provider)
        if not name:
            return None
        static = PROVIDER_REPOS.get(name)
        if static:
            return static

        key = CacheService.generate_key("repo-discovery", name)
        cached = self._repo_cache.get(key, _MISS)
        if cached is not _MISS:
            return cached

        repo = self._search(name)
        ttl = self.cache.ttl.repo_info if repo else self.cache.ttl.error_response
        self._repo_cache.set(key, repo, ttl)
        return repo

    def _search(self, provider: str) -> Optional[GitHubRepo]:
        path = (
            f"/search/repositories?q={quote(REPO_SEARCH_PREFIX + provider, safe='')}+in:name"
            "&sort=stars&order=desc"
        )
        try:
            result = self.github.api_get(path)
        except (TerraformDocsError, ValueError) as e:
            logger.warning(f"Repository search for provider '{provider}' failed: {e}")
            return None

        items = (result or {}).get("items") or []
        if not items:
            logger.info(f"No repository found for provider '{provider}'")
            return None

        top = items[0]
        try:
            repo = GitHubRepo(
                owner=top["owner"]["login"],
                name=top["name"],
                default_branch=top.get("default_branch") or "main",
            )
        except (KeyError, TypeError) as e:
            logger.warning(f"Unexpected search result shape for provider '{provider}': {e}")
            return None
        logger.info(f"Discovered repository {repo.full_name} for provider '{provider}'")
        return repo

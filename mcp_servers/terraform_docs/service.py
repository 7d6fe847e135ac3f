"""The four documentation/schema/configuration operations behind the MCP tools."""

import logging
from typing import Any, Dict, List, Optional

from core.cache import CacheService
from core.config import Settings, normalize_provider
from core.errors import ProviderNotFoundError, TerraformDocsError
from core.http_client import HttpClient
from core.rate_limiter import RateLimiter

from .defaults import provider_defaults
from .examples import ExampleExtractor, dedupe
from .generator import TerraformConfigGenerator
from .github import GitHubClient
from .html_text import extract_example_blocks, extract_main_text
from .models import schema_to_api
from .repositories import RepositoryResolver
from .schema_extractor import SchemaExtractor, normalize_resource

logger = logging.getLogger(__name__)

REGISTRY_SOURCE = "Terraform Registry"
GITHUB_SOURCE = "GitHub"


class TerraformDocsService:
    """Facade over the resolver, extractors and generator.

    All collaborators are injected; ``build_service`` wires the production set.
    """

    def __init__(
        self,
        settings: Settings,
        http: HttpClient,
        cache: CacheService,
        resolver: RepositoryResolver,
        schema_extractor: SchemaExtractor,
        example_extractor: ExampleExtractor,
        generator: Optional[TerraformConfigGenerator] = None,
    ):
        self.settings = settings
        self.http = http
        self.cache = cache
        self.resolver = resolver
        self.schema_extractor = schema_extractor
        self.example_extractor = example_extractor
        self.generator = generator or TerraformConfigGenerator()
        self._docs_cache = cache.namespace("docs")

    def registry_url(self, provider: str, resource: Optional[str] = None) -> str:
        url = f"{self.settings.registry_base_url}/providers/hashicorp/{provider}/latest/docs"
        if resource:
            url += f"/resources/{resource}"
        return url

    def _registry_docs(self, url: str) -> Optional[Dict[str, Any]]:
        key = CacheService.generate_key("docs", url)
        cached = self._docs_cache.get(key)
        if cached is not None:
            return cached or None

        try:
            response = self.http.get(url, headers={"Accept": "text/html"})
        except TerraformDocsError as e:
            logger.warning(f"Registry documentation unavailable at {url}: {e}")
            self._docs_cache.set(key, {}, self.cache.ttl.error_response)
            return None

        page = {
            "documentation": extract_main_text(response.body),
            "examples": extract_example_blocks(response.body),
        }
        self._docs_cache.set(key, page, self.cache.ttl.docs)
        return page

    def get_provider_docs(
        self,
        provider: str,
        resource: Optional[str] = None,
        use_source_hosting: bool = False,
    ) -> Dict[str, Any]:
        provider_name = normalize_provider(provider)
        resource_name = normalize_resource(resource) if resource else None
        url = self.registry_url(provider_name, resource_name)
        logger.info(f"Fetching documentation from: {url}")

        documentation = ""
        examples: List[str] = []
        sources: List[str] = []
        page = self._registry_docs(url)
        if page is not None:
            documentation = page["documentation"]
            examples = list(page["examples"])
            sources.append(REGISTRY_SOURCE)

        result: Dict[str, Any] = {"url": url}
        if use_source_hosting and resource_name:
            github_examples = self.example_extractor.fetch_examples(provider_name, resource_name)
            if github_examples:
                examples = dedupe(examples + github_examples)
                sources.append(GITHUB_SOURCE)
            repo = self.resolver.resolve(provider_name)
            if repo is not None:
                result["repoUrl"] = f"{self.settings.github_web_url}/{repo.owner}/{repo.name}"

        result.update({"documentation": documentation, "examples": examples, "sources": sources})
        return result

    def generate_config(
        self,
        provider: str,
        resource: str,
        attributes: Optional[Dict[str, Any]] = None,
        use_source_hosting: bool = True,
    ) -> Dict[str, Any]:
        schema = self.schema_extractor.extract(provider, resource, use_source_hosting=use_source_hosting)
        merged = provider_defaults(provider, resource)
        merged.update(attributes or {})
        text = self.generator.generate(provider, resource, schema, merged)
        return {"configurationText": text}

    def get_resource_schema(self, provider: str, resource: str, use_source_hosting: bool = True) -> Dict[str, Any]:
        schema = self.schema_extractor.extract(provider, resource, use_source_hosting=use_source_hosting)
        result = schema_to_api(schema)
        result["source"] = schema.origin
        if schema.source_url:
            result["sourceUrl"] = schema.source_url
        return result

    def get_repo_info(self, provider: str) -> Dict[str, Any]:
        repo = self.resolver.resolve(provider)
        if repo is None:
            raise ProviderNotFoundError(provider)
        return {
            "owner": repo.owner,
            "name": repo.name,
            "defaultBranch": repo.default_branch,
            "url": f"{self.settings.github_web_url}/{repo.owner}/{repo.name}",
            "apiUrl": f"{self.settings.github_api_url}/repos/{repo.owner}/{repo.name}",
        }

    def stats(self) -> Dict[str, Any]:
        return {
            "cache": self.cache.get_stats(),
            "rateLimit": self.resolver.github.rate_limiter.get_rate_limit_info(),
        }

    def close(self) -> None:
        self.http.close()


def build_service(settings: Settings, http: Optional[HttpClient] = None) -> TerraformDocsService:
    """Construct the process-wide service graph from settings."""
    http = http or HttpClient(settings)
    cache = CacheService(settings)
    rate_limiter = RateLimiter.from_settings(settings)
    github = GitHubClient(http, rate_limiter, cache)
    resolver = RepositoryResolver(github, cache)
    return TerraformDocsService(
        settings=settings,
        http=http,
        cache=cache,
        resolver=resolver,
        schema_extractor=SchemaExtractor(github, resolver, cache, settings),
        example_extractor=ExampleExtractor(github, resolver, cache),
    )

"""Usage examples pulled from a provider repository's examples and docs."""

import logging
import re
from typing import List

from core.cache import CacheService
from core.config import normalize_provider

from .github import GitHubClient
from .html_text import extract_example_blocks
from .repositories import RepositoryResolver
from .schema_extractor import normalize_resource

logger = logging.getLogger(__name__)

EXAMPLE_PATHS = (
    "examples/resources/{provider}_{resource}/resource.tf",
    "examples/{resource}/main.tf",
    "examples/resources/{resource}/main.tf",
    "examples/r/{provider}_{resource}/main.tf",
    "website/docs/r/{resource}.html.markdown",
    "website/docs/r/{provider}_{resource}.html.markdown",
    "website/docs/resources/{resource}.html.markdown",
    "docs/resources/{resource}.md",
)

CONFIG_KEYWORDS = ("resource", "provider", "data", "variable")

_FENCED_BLOCK_RE = re.compile(r"```(?:terraform|hcl|tf)?[^\n]*\n(.*?)```", re.S)


def looks_like_configuration(snippet: str) -> bool:
    return any(keyword in snippet for keyword in CONFIG_KEYWORDS)


def dedupe(items: List[str]) -> List[str]:
    seen = set()
    unique = []
    for item in items:
        if item not in seen:
            seen.add(item)
            unique.append(item)
    return unique


def extract_code_blocks(markdown: str) -> List[str]:
    """Fenced code blocks that look like configuration, not prose."""
    blocks = []
    for match in _FENCED_BLOCK_RE.finditer(markdown):
        code = match.group(1).strip()
        if code and looks_like_configuration(code):
            blocks.append(code)
    return dedupe(blocks)


def examples_from_document(path: str, body: str) -> List[str]:
    if path.endswith(".tf"):
        return [body.strip()]
    if path.endswith(".html"):
        return [block for block in extract_example_blocks(body) if looks_like_configuration(block)]
    return extract_code_blocks(body)


class ExampleExtractor:
    def __init__(self, github: GitHubClient, resolver: RepositoryResolver, cache: CacheService):
        self.github = github
        self.resolver = resolver
        self.cache = cache
        self._examples_cache = cache.namespace("examples")

    def fetch_examples(self, provider: str, resource: str) -> List[str]:
        """Examples for a resource, empty when none can be found. Never raises."""
        provider_name = normalize_provider(provider)
        resource_name = normalize_resource(resource)
        key = CacheService.generate_key("examples", provider_name, resource_name)
        cached = self._examples_cache.get(key)
        if cached is not None:
            return list(cached)

        repo = self.resolver.resolve(provider_name)
        if repo is None:
            self._examples_cache.set(key, [], self.cache.ttl.error_response)
            return []

        examples: List[str] = []
        for template in EXAMPLE_PATHS:
            path = template.format(provider=provider_name, resource=resource_name)
            outcome = self.github.raw_get(repo.owner, repo.name, repo.default_branch, path)
            if not outcome.ok:
                continue
            found = examples_from_document(path, outcome.body)
            if found:
                logger.info(f"Found {len(found)} examples for {provider_name}_{resource_name} in {path}")
                examples = dedupe(found)
                break

        ttl = self.cache.ttl.examples if examples else self.cache.ttl.error_response
        self._examples_cache.set(key, tuple(examples), ttl)
        return examples

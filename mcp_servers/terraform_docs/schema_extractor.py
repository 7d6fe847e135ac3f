"""Resource schema extraction with layered fallbacks.

Candidate source files are tried one at a time, in order. Every per-file
failure (fetch error, 404, unparseable text) is logged and skipped; when no
candidate yields a useful schema the curated or generic fallback is returned.
``extract`` therefore always returns a Schema with at least one attribute.
"""

import logging
from typing import Dict, List, Optional

from core.cache import CacheService
from core.config import Settings, normalize_provider
from core.errors import ParseError

from .curated_schemas import fallback_schema
from .github import GitHubClient
from .models import ORIGIN_EXTRACTED, GitHubRepo, Schema, SchemaAttribute
from .repositories import RepositoryResolver
from .schema_parser import parse_go_schema

logger = logging.getLogger(__name__)

GENERIC_SCHEMA_PATHS = (
    "internal/service/{resource}/resource_{resource}.go",
    "internal/service/{resource}/resource_{provider}_{resource}.go",
    "internal/services/{resource}/resource_{resource}.go",
    "internal/services/{resource}/resource_{provider}_{resource}.go",
    "internal/provider/resource_{resource}.go",
    "internal/provider/resource_{provider}_{resource}.go",
)

LEGACY_SCHEMA_PATHS: Dict[str, tuple] = {
    "aws": (
        "internal/service/{resource}/{resource}.go",
        "aws/resource_aws_{resource}.go",
    ),
    "google": (
        "google/resource_{resource}.go",
        "google/services/{resource}/resource_{resource}.go",
    ),
    "azurerm": (
        "azurerm/internal/services/{resource}/resource_arm_{resource}.go",
        "internal/services/{resource}/{resource}_resource.go",
    ),
}

FLAT_SCHEMA_PATHS = (
    "{resource}/resource_{provider}_{resource}.go",
    "{resource}/resource.go",
    "internal/service/{resource}/schema.go",
)


def normalize_resource(resource: str) -> str:
    """Strip whitespace, lower-case and turn hyphens into underscores."""
    return (resource or "").strip().lower().replace("-", "_")


def is_valid_schema(schema: Schema) -> bool:
    """A schema is useful when it has attributes and either a required one or a block."""
    if not schema.attributes:
        return False
    has_required = any(attr.required for attr in schema.attributes.values())
    return has_required or bool(schema.block_types)


def candidate_schema_paths(provider: str, resource: str, repo: Optional[GitHubRepo] = None) -> List[str]:
    """Ordered, de-duplicated candidate paths; provider-specific templates first."""
    templates: List[str] = []
    if repo is not None:
        templates.extend(repo.schema_patterns)
    templates.extend(GENERIC_SCHEMA_PATHS)
    templates.extend(LEGACY_SCHEMA_PATHS.get(provider, ()))
    templates.extend(FLAT_SCHEMA_PATHS)

    paths: List[str] = []
    for template in templates:
        path = template.format(provider=provider, resource=resource)
        if path not in paths:
            paths.append(path)
    return paths


def _merge_under(base: Dict[str, SchemaAttribute], extracted: Dict[str, SchemaAttribute]) -> Dict[str, SchemaAttribute]:
    merged = dict(extracted)
    merged.update(base)
    return merged


class SchemaExtractor:
    def __init__(
        self,
        github: GitHubClient,
        resolver: RepositoryResolver,
        cache: CacheService,
        settings: Optional[Settings] = None,
    ):
        self.github = github
        self.resolver = resolver
        self.cache = cache
        self.settings = settings or github.settings
        self._schema_cache = cache.namespace("schema")

    def extract(self, provider: str, resource: str, use_source_hosting: bool = True) -> Schema:
        """Return the best available schema for ``provider``/``resource``; never raises."""
        provider_name = normalize_provider(provider)
        resource_name = normalize_resource(resource)

        if not use_source_hosting:
            return fallback_schema(provider_name, resource_name)

        key = CacheService.generate_key("schema", provider_name, resource_name)
        cached = self._schema_cache.get(key)
        if cached is not None:
            logger.debug(f"Schema cache hit for {provider_name}_{resource_name}")
            return cached

        extracted = self._extract_from_repository(provider_name, resource_name)
        if extracted is not None and is_valid_schema(extracted):
            schema = extracted
            ttl = self.cache.ttl.schema
        else:
            if extracted is not None:
                logger.warning(
                    f"Schema for {provider_name}_{resource_name} is not valid or incomplete, using fallback"
                )
            schema = fallback_schema(provider_name, resource_name)
            if extracted is not None:
                schema.attributes = _merge_under(schema.attributes, extracted.attributes)
            ttl = self.cache.ttl.error_response

        self._schema_cache.set(key, schema, ttl)
        return schema

    def _extract_from_repository(self, provider: str, resource: str) -> Optional[Schema]:
        repo = self.resolver.resolve(provider)
        if repo is None:
            logger.info(f"No repository for provider '{provider}'; using fallback schema")
            return None

        for path in candidate_schema_paths(provider, resource, repo):
            outcome = self.github.raw_get(repo.owner, repo.name, repo.default_branch, path)
            if not outcome.ok:
                continue
            try:
                schema = parse_go_schema(outcome.body, source=path)
            except ParseError as e:
                logger.warning(f"Could not parse schema in {repo.full_name}:{path}: {e}")
                continue
            if not schema.attributes:
                continue

            schema.resource_name = resource
            schema.provider_name = provider
            schema.source_url = self.github.blob_url(repo.owner, repo.name, repo.default_branch, path)
            schema.origin = ORIGIN_EXTRACTED
            logger.info(f"Extracted {len(schema.attributes)} attributes for {provider}_{resource} from {path}")
            return schema

        logger.info(f"No schema source found for {provider}_{resource} in {repo.full_name}")
        return None

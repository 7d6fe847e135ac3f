"""Terraform provider documentation, schema and configuration components."""

from .examples import ExampleExtractor
from .generator import TerraformConfigGenerator
from .github import GitHubClient
from .models import GitHubRepo, Schema, SchemaAttribute
from .repositories import RepositoryResolver
from .schema_extractor import SchemaExtractor
from .service import TerraformDocsService, build_service

__all__ = [
    "ExampleExtractor",
    "GitHubClient",
    "GitHubRepo",
    "RepositoryResolver",
    "Schema",
    "SchemaAttribute",
    "SchemaExtractor",
    "TerraformConfigGenerator",
    "TerraformDocsService",
    "build_service",
]

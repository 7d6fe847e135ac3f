"""Shared fakes: an in-memory HTTP transport and a virtual clock."""

from types import SimpleNamespace
from urllib.parse import quote

import pytest

from core.cache import CacheService
from core.config import Settings
from core.errors import HttpError
from core.http_client import HttpResponse
from core.rate_limiter import RateLimiter
from mcp_servers.terraform_docs.examples import ExampleExtractor
from mcp_servers.terraform_docs.github import GitHubClient
from mcp_servers.terraform_docs.repositories import RepositoryResolver
from mcp_servers.terraform_docs.schema_extractor import SchemaExtractor
from mcp_servers.terraform_docs.service import TerraformDocsService

RAW = "https://raw.githubusercontent.com"
API = "https://api.github.com"


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += max(0.0, seconds)


class FakeHttpClient:
    """Routes URLs to canned bodies; anything unrouted is a 404."""

    def __init__(self, settings=None, routes=None):
        self.settings = settings or Settings()
        self.routes = dict(routes or {})
        self.calls = []

    def get(self, url, headers=None, **kwargs):
        self.calls.append(url)
        route = self.routes.get(url)
        if route is None:
            raise HttpError(f"HTTP 404 for {url}", 404, url=url)
        if isinstance(route, Exception):
            raise route
        status, body = route if isinstance(route, tuple) else (200, route)
        if status >= 400:
            raise HttpError(f"HTTP {status} for {url}", status, url=url)
        return HttpResponse(status_code=status, body=body, url=url)

    def close(self):
        pass


def raw_url(repo: str, path: str, owner: str = "hashicorp", branch: str = "main") -> str:
    return f"{RAW}/{owner}/{repo}/{branch}/{path}"


def search_url(provider: str) -> str:
    return f"{API}/search/repositories?q={quote('terraform-provider-' + provider, safe='')}+in:name&sort=stars&order=desc"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    return Settings(github_token=None)


@pytest.fixture
def stack(settings, clock):
    """A fully wired service graph over the fake transport."""
    http = FakeHttpClient(settings)
    cache = CacheService(settings, clock=clock)
    limiter = RateLimiter(
        requests_per_minute=1000,
        requests_per_hour=100000,
        min_interval=0,
        clock=clock,
        sleep=clock.sleep,
    )
    github = GitHubClient(http, limiter, cache)
    resolver = RepositoryResolver(github, cache)
    schema_extractor = SchemaExtractor(github, resolver, cache, settings)
    example_extractor = ExampleExtractor(github, resolver, cache)
    service = TerraformDocsService(
        settings=settings,
        http=http,
        cache=cache,
        resolver=resolver,
        schema_extractor=schema_extractor,
        example_extractor=example_extractor,
    )
    return SimpleNamespace(
        http=http,
        cache=cache,
        limiter=limiter,
        github=github,
        resolver=resolver,
        schema_extractor=schema_extractor,
        example_extractor=example_extractor,
        service=service,
    )

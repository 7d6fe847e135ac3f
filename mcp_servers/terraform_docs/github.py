"""Rate-limited, cached access to the GitHub REST API and raw file content."""

import json
import logging
from typing import Any

from core.cache import CacheService
from core.errors import HttpError, NetworkError, RequestTimeoutError, TooManyRedirectsError
from core.http_client import HttpClient
from core.rate_limiter import RateLimiter

from .models import FetchOutcome

logger = logging.getLogger(__name__)

_NOT_FOUND = "__not_found__"
_MISS = object()


class GitHubClient:
    """Every outbound GitHub call goes through the shared rate limiter and cache."""

    def __init__(self, http: HttpClient, rate_limiter: RateLimiter, cache: CacheService):
        self.http = http
        self.settings = http.settings
        self.rate_limiter = rate_limiter
        self.cache = cache
        self._api_cache = cache.namespace("github-api")
        self._raw_cache = cache.namespace("github-raw")

    def api_get(self, path: str) -> Any:
        """GET a GitHub API path and return parsed JSON.

        Raises the transport error on failure. A 404 is remembered for the
        error TTL so repeated lookups of a missing path do not hit the API.
        """
        key = CacheService.generate_key("github-api", path)
        cached = self._api_cache.get(key, _MISS)
        if cached is not _MISS:
            if cached == _NOT_FOUND:
                raise HttpError(f"HTTP 404 for {path} (cached)", 404, url=path)
            return cached

        self.rate_limiter.acquire()
        url = f"{self.settings.github_api_url}{path}"
        try:
            response = self.http.get(url)
        except HttpError as e:
            if e.is_not_found:
                self._api_cache.set(key, _NOT_FOUND, self.cache.ttl.error_response)
            raise

        data = json.loads(response.body) if response.body else None
        self._api_cache.set(key, data, self.cache.ttl.repo_info)
        return data

    def raw_url(self, owner: str, repo: str, branch: str, path: str) -> str:
        return f"{self.settings.github_raw_url}/{owner}/{repo}/{branch}/{path}"

    def blob_url(self, owner: str, repo: str, branch: str, path: str) -> str:
        return f"{self.settings.github_web_url}/{owner}/{repo}/blob/{branch}/{path}"

    def raw_get(self, owner: str, repo: str, branch: str, path: str) -> FetchOutcome:
        """Fetch a file at a branch; never raises, failures come back as outcomes."""
        key = CacheService.generate_key("github-raw", owner, repo, branch, path)
        cached = self._raw_cache.get(key)
        if cached is not None:
            return cached

        self.rate_limiter.acquire()
        url = self.raw_url(owner, repo, branch, path)
        try:
            response = self.http.get(url)
        except HttpError as e:
            outcome = FetchOutcome.failure(path, str(e), status_code=e.status_code)
        except (NetworkError, RequestTimeoutError, TooManyRedirectsError) as e:
            outcome = FetchOutcome.failure(path, str(e))
        else:
            outcome = FetchOutcome.success(path, response.body)

        ttl = self.cache.ttl.schema if outcome.ok else self.cache.ttl.error_response
        self._raw_cache.set(key, outcome, ttl)
        if not outcome.ok:
            logger.debug(f"Raw fetch {owner}/{repo}@{branch}:{path} -> {outcome.status} {outcome.error or ''}")
        return outcome

"""HTTP transport with timeouts, bounded redirects and a retry/backoff loop."""

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional
from urllib.parse import urlparse

import requests
from requests.exceptions import ConnectionError as RequestsConnectionError
from requests.exceptions import RequestException, Timeout, TooManyRedirects

from core.config import Settings
from core.errors import HttpError, NetworkError, RequestTimeoutError, TooManyRedirectsError

logger = logging.getLogger(__name__)

RATE_LIMIT_WAIT_CEILING = 60 * 60
GITHUB_HOSTS = ("api.github.com", "raw.githubusercontent.com")


@dataclass
class HttpResponse:
    status_code: int
    body: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def header(self, name: str) -> Optional[str]:
        return header_value(self.headers, name)

    def json(self) -> Any:
        return json.loads(self.body)


def header_value(headers: Mapping[str, str], name: str) -> Optional[str]:
    """Case-insensitive header lookup that also works on plain dicts."""
    wanted = name.lower()
    for key, value in (headers or {}).items():
        if key.lower() == wanted:
            return value
    return None


class HttpClient:
    """Thin wrapper around a requests.Session.

    ``fetch`` performs exactly one attempt and returns whatever status came
    back. ``get`` adds the retry policy: network errors, timeouts and 5xx are
    retried with exponential backoff, a 403 carrying a near rate-limit reset
    waits for the reset, any other 4xx fails immediately.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings or Settings()
        self.session = session or requests.Session()
        self.session.max_redirects = self.settings.max_redirects
        self._sleep = sleep
        self._clock = clock

    def _headers_for(self, url: str, headers: Optional[Mapping[str, str]]) -> Dict[str, str]:
        merged = {
            "User-Agent": self.settings.user_agent,
            "Accept": "application/vnd.github.v3+json",
        }
        if self.settings.github_token and urlparse(url).hostname in GITHUB_HOSTS:
            merged["Authorization"] = f"token {self.settings.github_token}"
        merged.update(headers or {})
        return merged

    def fetch(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> HttpResponse:
        """Perform a single request; raises only for transport failures."""
        timeout = timeout if timeout is not None else self.settings.timeout
        logger.debug(f"HTTP {method} {url}")
        try:
            response = self.session.request(
                method,
                url,
                headers=self._headers_for(url, headers),
                timeout=timeout,
                allow_redirects=True,
            )
        except Timeout as e:
            raise RequestTimeoutError(f"Request timed out after {timeout}s: {url}", timeout, url) from e
        except TooManyRedirects as e:
            raise TooManyRedirectsError(url, self.settings.max_redirects) from e
        except RequestsConnectionError as e:
            raise NetworkError(f"Connection failed for {url}: {e}", url) from e
        except RequestException as e:
            raise NetworkError(f"Request failed for {url}: {e}", url) from e

        logger.debug(f"HTTP response {response.status_code} for {url}")
        return HttpResponse(
            status_code=response.status_code,
            body=response.text,
            url=response.url or url,
            headers=dict(response.headers),
        )

    def get(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ) -> HttpResponse:
        """GET with retries; returns a 2xx response or raises the last error."""
        max_retries = self.settings.max_retries if max_retries is None else max_retries
        retry_delay = self.settings.retry_delay if retry_delay is None else retry_delay
        attempt = 0

        while True:
            try:
                response = self.fetch(url, headers=headers, timeout=timeout)
            except (NetworkError, RequestTimeoutError) as e:
                if attempt >= max_retries:
                    raise
                self._backoff(attempt, retry_delay, url, e)
                attempt += 1
                continue

            if response.ok:
                return response

            error = HttpError(
                f"HTTP {response.status_code} for {url}",
                response.status_code,
                url=url,
                headers=response.headers,
            )

            if response.status_code == 403:
                wait = self._rate_limit_wait(response)
                if wait is None or attempt >= max_retries:
                    raise error
                logger.warning(f"Rate limited by upstream. Waiting {wait:.0f}s before retrying {url}")
                self._sleep(wait)
                attempt += 1
                continue

            if response.status_code >= 500 and attempt < max_retries:
                self._backoff(attempt, retry_delay, url, error)
                attempt += 1
                continue

            raise error

    def _backoff(self, attempt: int, retry_delay: float, url: str, error: Exception) -> None:
        delay = retry_delay * (2 ** attempt)
        logger.warning(f"Attempt {attempt + 1} for {url} failed ({error}); retrying in {delay:.1f}s")
        self._sleep(delay)

    def _rate_limit_wait(self, response: HttpResponse) -> Optional[float]:
        reset = response.header("X-RateLimit-Reset")
        if not reset:
            return None
        try:
            wait = float(reset) - self._clock()
        except ValueError:
            return None
        if 0 < wait < RATE_LIMIT_WAIT_CEILING:
            return wait
        return None

    def close(self) -> None:
        self.session.close()

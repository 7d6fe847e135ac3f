"""Runtime settings loaded from the environment (and an optional .env file)."""

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Optional

import keyring
from dotenv import load_dotenv
from keyring.errors import KeyringError

logger = logging.getLogger(__name__)

KEYRING_SERVICE = "terraform-docs-mcp"
KEYRING_USERNAME = "github"

HOUR = 60 * 60
DAY = 24 * HOUR

PROVIDER_ALIASES: Dict[str, str] = {
    "gcp": "google",
    "azure": "azurerm",
}

DEFAULT_REGIONS: Dict[str, str] = {
    "aws": "us-west-2",
    "google": "us-central1",
    "azurerm": "East US",
}

DEFAULT_ZONES: Dict[str, str] = {
    "aws": "us-west-2a",
    "google": "us-central1-a",
    "azurerm": "1",
}


@dataclass(frozen=True)
class CacheTTL:
    """Per-namespace time-to-live values, in seconds."""

    schema: float = DAY
    docs: float = 6 * HOUR
    repo_info: float = 7 * DAY
    examples: float = 12 * HOUR
    error_response: float = 5 * 60


@dataclass(frozen=True)
class Settings:
    server_name: str = "terraform-docs-mcp"
    server_version: str = "0.1.0"
    log_level: str = "INFO"
    log_dir: str = "logs"

    github_api_url: str = "https://api.github.com"
    github_raw_url: str = "https://raw.githubusercontent.com"
    github_web_url: str = "https://github.com"
    github_token: Optional[str] = None
    user_agent: str = "terraform-docs-mcp/0.1.0"
    timeout: float = 10.0
    max_retries: int = 3
    retry_delay: float = 1.0
    max_redirects: int = 5

    # None means "not overridden": the ceiling then depends on whether a token is set
    requests_per_minute: Optional[int] = None
    requests_per_hour: Optional[int] = None
    min_interval: float = 1.0
    anonymous_requests_per_minute: int = 8
    anonymous_requests_per_hour: int = 50
    authenticated_requests_per_minute: int = 60
    authenticated_requests_per_hour: int = 4000

    cache_enabled: bool = True
    cache_max_size: int = 1000
    cache_default_ttl: float = HOUR
    cache_cleanup_interval: float = 10 * 60
    cache_ttl: CacheTTL = field(default_factory=CacheTTL)

    registry_base_url: str = "https://registry.terraform.io"

    @property
    def use_auth(self) -> bool:
        return bool(self.github_token)

    @property
    def effective_requests_per_minute(self) -> int:
        if self.requests_per_minute is not None:
            return self.requests_per_minute
        if self.use_auth:
            return self.authenticated_requests_per_minute
        return self.anonymous_requests_per_minute

    @property
    def effective_requests_per_hour(self) -> int:
        if self.requests_per_hour is not None:
            return self.requests_per_hour
        if self.use_auth:
            return self.authenticated_requests_per_hour
        return self.anonymous_requests_per_hour

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "Settings":
        """Build settings from environment variables, with .env as fallback."""
        load_dotenv(dotenv_path)
        defaults = cls()
        cache_ttl_hours = _env_float("CACHE_TTL_HOURS", None)
        return cls(
            log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
            log_dir=os.getenv("TOOL_LOG_DIR", defaults.log_dir),
            github_api_url=os.getenv("GITHUB_API_URL", defaults.github_api_url).rstrip("/"),
            github_token=resolve_github_token(),
            timeout=_env_float("GITHUB_TIMEOUT", defaults.timeout, minimum=0.1),
            max_retries=_env_int("GITHUB_MAX_RETRIES", defaults.max_retries, minimum=0),
            retry_delay=_env_float("GITHUB_RETRY_DELAY", defaults.retry_delay, minimum=0),
            requests_per_minute=_env_int("RATE_LIMIT_PER_MINUTE", None, minimum=1),
            requests_per_hour=_env_int("RATE_LIMIT_PER_HOUR", None, minimum=1),
            min_interval=_env_float("RATE_LIMIT_MIN_INTERVAL", defaults.min_interval, minimum=0),
            cache_enabled=os.getenv("CACHE_ENABLED", "true").strip().lower() == "true",
            cache_max_size=_env_int("CACHE_MAX_SIZE", defaults.cache_max_size, minimum=1),
            cache_default_ttl=cache_ttl_hours * HOUR if cache_ttl_hours else defaults.cache_default_ttl,
        )


def normalize_provider(provider: str) -> str:
    """Lower-case, trim and resolve provider aliases (gcp -> google)."""
    name = (provider or "").strip().lower()
    return PROVIDER_ALIASES.get(name, name)


def resolve_github_token() -> Optional[str]:
    """Return a GitHub token from the environment or the local keyring."""
    token = os.getenv("GITHUB_TOKEN")
    if token:
        logger.info("Using GitHub token from environment")
        return token
    try:
        token = keyring.get_password(KEYRING_SERVICE, KEYRING_USERNAME)
    except KeyringError as e:
        logger.debug(f"Keyring lookup for GitHub token failed: {e}")
        return None
    if token:
        logger.info("Using GitHub token from local keyring")
    return token or None


def _env_number(name: str, default, parse, minimum):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = parse(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid number for {name}: {raw!r}")
        return default
    if minimum is not None and value < minimum:
        logger.warning(f"Ignoring {name}={raw!r}: must be at least {minimum}")
        return default
    return value


def _env_int(name: str, default, minimum=None):
    return _env_number(name, default, int, minimum)


def _env_float(name: str, default, minimum=None):
    return _env_number(name, default, float, minimum)

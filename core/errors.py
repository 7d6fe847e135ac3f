"""Error taxonomy shared by the transport, extraction and tool layers."""

from typing import Any, Dict, Mapping, Optional


class TerraformDocsError(Exception):
    """Base class for all errors raised by this project."""

    def details(self) -> Dict[str, Any]:
        """Structured fields reported alongside the message in tool results."""
        return {}


class NetworkError(TerraformDocsError):
    """Transport-level failure (DNS, connection reset, TLS). Always retryable."""

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        super().__init__(message)

    def details(self) -> Dict[str, Any]:
        return {"url": self.url} if self.url else {}


class HttpError(TerraformDocsError):
    """Upstream answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        status_code: int,
        url: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ):
        self.status_code = status_code
        self.url = url
        self.headers = dict(headers or {})
        super().__init__(message)

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    def details(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"status_code": self.status_code}
        if self.url:
            result["url"] = self.url
        return result


class RequestTimeoutError(TerraformDocsError):
    """The request did not complete within its timeout."""

    def __init__(self, message: str, timeout: float, url: Optional[str] = None):
        self.timeout = timeout
        self.url = url
        super().__init__(message)

    def details(self) -> Dict[str, Any]:
        return {"timeout": self.timeout, "url": self.url}


class TooManyRedirectsError(TerraformDocsError):
    """Redirect chain exceeded the configured bound."""

    def __init__(self, url: str, limit: int):
        self.url = url
        self.limit = limit
        super().__init__(f"Exceeded {limit} redirects while fetching {url}")

    def details(self) -> Dict[str, Any]:
        return {"url": self.url, "limit": self.limit}


class NotFoundError(TerraformDocsError):
    """A named provider, resource or repository could not be resolved."""


class ProviderNotFoundError(NotFoundError):
    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"Provider Not Found: {provider}")

    def details(self) -> Dict[str, Any]:
        return {"provider": self.provider}


class ParseError(TerraformDocsError):
    """A fetched source could not be structurally interpreted.

    Always recovered by the caller; it never leaves the extraction loops.
    """

    def __init__(self, message: str, source: Optional[str] = None):
        self.source = source
        super().__init__(message)


class ValidationError(TerraformDocsError):
    """Caller supplied a malformed request."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)

    def details(self) -> Dict[str, Any]:
        return {"field": self.field} if self.field else {}


class ConfigGenerationError(TerraformDocsError):
    def __init__(self, message: str, provider: Optional[str] = None, resource: Optional[str] = None):
        self.provider = provider
        self.resource = resource
        super().__init__(message)

    def details(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.provider:
            result["provider"] = self.provider
        if self.resource:
            result["resource"] = self.resource
        return result

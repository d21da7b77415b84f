from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping

import httpx

from ccload.errors import ConfigurationError

SUPPORTED_METHODS = frozenset({"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"})
BODYLESS_METHODS = frozenset({"GET", "HEAD"})


@dataclass(frozen=True, slots=True)
class RunConfig:
    url: str
    method: str = "GET"
    body: bytes | None = None
    requests: int = 1
    concurrency: int = 1
    timeout_sec: float | None = 30.0
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def is_single(self) -> bool:
        return self.requests == 1 and self.concurrency == 1

    def to_metadata(self) -> Mapping[str, Any]:
        return {
            "url": self.url,
            "method": self.method,
            "body_bytes": len(self.body) if self.body is not None else 0,
            "requests": self.requests,
            "concurrency": self.concurrency,
            "timeout_sec": self.timeout_sec,
            "headers": dict(self.headers),
        }


def validate_config(config: RunConfig) -> RunConfig:
    _check_url(config.url)
    method = config.method.upper()
    if method not in SUPPORTED_METHODS:
        msg = f"Unsupported HTTP method: {config.method!r}"
        raise ConfigurationError(msg)
    if config.body is not None and method in BODYLESS_METHODS:
        msg = f"A request body is not allowed with {method}"
        raise ConfigurationError(msg)
    if config.requests < 1:
        msg = f"Request count must be a positive integer, got {config.requests}"
        raise ConfigurationError(msg)
    if config.concurrency < 1:
        msg = f"Concurrency must be a positive integer, got {config.concurrency}"
        raise ConfigurationError(msg)
    if config.timeout_sec is not None and config.timeout_sec <= 0:
        msg = f"Timeout must be positive, got {config.timeout_sec}"
        raise ConfigurationError(msg)
    _check_headers(config.headers)
    return replace(config, method=method, headers=dict(config.headers))


def _check_url(url: str) -> None:
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as exc:
        msg = f"Invalid URL {url!r}: {exc}"
        raise ConfigurationError(msg) from exc
    if parsed.scheme not in ("http", "https"):
        msg = f"Invalid URL {url!r}: scheme must be http or https"
        raise ConfigurationError(msg)
    if not parsed.host:
        msg = f"Invalid URL {url!r}: missing host"
        raise ConfigurationError(msg)
    if parsed.port is not None and not 0 <= parsed.port <= 65535:
        msg = f"Invalid URL {url!r}: port must be 0-65535"
        raise ConfigurationError(msg)


def _check_headers(headers: Mapping[str, str]) -> None:
    for name, value in headers.items():
        try:
            name.encode("ascii")
            value.encode("ascii")
        except UnicodeEncodeError as exc:
            msg = f"Header {name!r} must be ASCII: {exc.reason} at position {exc.start}"
            raise ConfigurationError(msg) from exc
        if not name or any(ch in name for ch in " :\r\n") or any(ch in value for ch in "\r\n"):
            msg = f"Invalid header {name!r}"
            raise ConfigurationError(msg)

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ccload.metrics.models import ErrorType


class CcloadError(Exception):
    """Base class for errors raised by ccload."""


class ConfigurationError(CcloadError, ValueError):
    """A run configuration was rejected before any request was issued."""


class TransportError(CcloadError):
    """The transport could not establish an exchange (connect, DNS, TLS)."""

    def __init__(self, message: str, error_type: ErrorType | None = None) -> None:
        super().__init__(message)
        self.error_type = error_type


class ResponseStreamError(TransportError):
    """Reading a response body failed after its headers arrived."""


class EmptyResultError(CcloadError, ValueError):
    """Aggregation was attempted over zero outcomes."""

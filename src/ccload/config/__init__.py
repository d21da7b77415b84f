from __future__ import annotations

from ccload.config.models import (
    BODYLESS_METHODS,
    SUPPORTED_METHODS,
    RunConfig,
    validate_config,
)

__all__ = [
    "BODYLESS_METHODS",
    "SUPPORTED_METHODS",
    "RunConfig",
    "validate_config",
]

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping


class ErrorType(str, Enum):
    TIMEOUT = "timeout"
    CONNECT = "connect"
    READ = "read"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class RequestOutcome:
    """Timing and result of one probed HTTP exchange.

    Times are milliseconds measured from a monotonic clock. The byte
    timings are absent when no body chunk was received. Time to last
    byte is the transfer duration from the first byte to completion, so
    ``time_to_first_byte_ms + time_to_last_byte_ms == total_time_ms``.
    """

    total_time_ms: float
    status_code: int | None = None
    error_message: str | None = None
    error_type: ErrorType | None = None
    time_to_first_byte_ms: float | None = None
    time_to_last_byte_ms: float | None = None

    @property
    def success(self) -> bool:
        return (
            self.status_code is not None
            and 200 <= self.status_code < 300
            and self.error_message is None
        )


@dataclass(frozen=True, slots=True)
class MetricStats:
    count: int
    min_ms: float
    max_ms: float
    mean_ms: float
    p50_ms: float
    p95_ms: float
    p99_ms: float


@dataclass(frozen=True, slots=True)
class Summary:
    total_requests: int
    success_count: int
    failed_count: int
    wall_clock_sec: float
    requests_per_second: float
    total_time: MetricStats
    time_to_first_byte: MetricStats | None
    time_to_last_byte: MetricStats | None
    status_counts: Mapping[int, int] = field(default_factory=dict)
    error_counts: Mapping[ErrorType, int] = field(default_factory=dict)

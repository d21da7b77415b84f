from __future__ import annotations

import math
from collections import Counter
from typing import Iterable, cast

import numpy as np
import pandas as pd

from ccload.errors import EmptyResultError
from ccload.metrics.models import ErrorType, MetricStats, RequestOutcome, Summary


def aggregate(outcomes: Iterable[RequestOutcome], wall_clock_sec: float) -> Summary:
    outcomes = list(outcomes)
    if not outcomes:
        msg = "Cannot aggregate an empty set of outcomes"
        raise EmptyResultError(msg)
    if not math.isfinite(wall_clock_sec) or wall_clock_sec <= 0:
        msg = f"Wall-clock span must be positive and finite, got {wall_clock_sec}"
        raise ValueError(msg)

    success = 0
    status_counts: Counter[int] = Counter()
    error_counts: Counter[ErrorType] = Counter()
    for outcome in outcomes:
        if outcome.success:
            success += 1
        if outcome.status_code is not None:
            status_counts[outcome.status_code] += 1
        else:
            error_counts[outcome.error_type or ErrorType.OTHER] += 1

    total = len(outcomes)
    total_time = cast(MetricStats, _metric_stats([o.total_time_ms for o in outcomes]))
    return Summary(
        total_requests=total,
        success_count=success,
        failed_count=total - success,
        wall_clock_sec=wall_clock_sec,
        requests_per_second=total / wall_clock_sec,
        total_time=total_time,
        time_to_first_byte=_metric_stats(
            [o.time_to_first_byte_ms for o in outcomes if o.time_to_first_byte_ms is not None]
        ),
        time_to_last_byte=_metric_stats(
            [o.time_to_last_byte_ms for o in outcomes if o.time_to_last_byte_ms is not None]
        ),
        status_counts=dict(sorted(status_counts.items())),
        error_counts=dict(error_counts),
    )


def _metric_stats(values: list[float]) -> MetricStats | None:
    if not values:
        return None
    arr = np.asarray(values, dtype=np.float64)
    p50, p95, p99 = np.percentile(arr, [50, 95, 99])
    lo = float(arr.min())
    hi = float(arr.max())
    # float summation can drift a ulp past the bounds on identical values
    mean = min(max(float(arr.mean()), lo), hi)
    return MetricStats(
        count=int(arr.size),
        min_ms=lo,
        max_ms=hi,
        mean_ms=mean,
        p50_ms=float(p50),
        p95_ms=float(p95),
        p99_ms=float(p99),
    )


def outcomes_frame(outcomes: Iterable[RequestOutcome]) -> pd.DataFrame:
    rows = [
        {
            "status_code": o.status_code,
            "success": o.success,
            "error_type": o.error_type.value if o.error_type is not None else None,
            "error_message": o.error_message,
            "total_time_ms": o.total_time_ms,
            "time_to_first_byte_ms": o.time_to_first_byte_ms,
            "time_to_last_byte_ms": o.time_to_last_byte_ms,
        }
        for o in outcomes
    ]
    columns = [
        "status_code",
        "success",
        "error_type",
        "error_message",
        "total_time_ms",
        "time_to_first_byte_ms",
        "time_to_last_byte_ms",
    ]
    return pd.DataFrame(rows, columns=columns)

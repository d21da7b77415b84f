from __future__ import annotations

from ccload.metrics.aggregator import aggregate, outcomes_frame
from ccload.metrics.models import ErrorType, MetricStats, RequestOutcome, Summary

__all__ = [
    "ErrorType",
    "MetricStats",
    "RequestOutcome",
    "Summary",
    "aggregate",
    "outcomes_frame",
]

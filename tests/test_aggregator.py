from __future__ import annotations

import math

import pytest
from hypothesis import given, strategies as st

from ccload.errors import EmptyResultError
from ccload.metrics import ErrorType, RequestOutcome, aggregate, outcomes_frame


@st.composite
def outcomes(draw: st.DrawFn) -> RequestOutcome:
    total = draw(st.floats(min_value=0.0, max_value=60_000.0, allow_nan=False))
    failed = draw(st.booleans())
    has_bytes = draw(st.booleans())
    ttfb = ttlb = None
    if has_bytes:
        ttfb = draw(st.floats(min_value=0.0, max_value=total, allow_nan=False))
        ttlb = total - ttfb
    if failed and not has_bytes:
        return RequestOutcome(total_time_ms=total, error_message="refused", error_type=ErrorType.CONNECT)
    status = draw(st.sampled_from([200, 201, 204, 301, 404, 500, 503]))
    return RequestOutcome(
        total_time_ms=total,
        status_code=status,
        time_to_first_byte_ms=ttfb,
        time_to_last_byte_ms=ttlb,
    )


@given(
    items=st.lists(outcomes(), min_size=1, max_size=200),
    span=st.floats(min_value=0.001, max_value=3600.0),
)
def test_counts_add_up_and_rate_is_finite(items: list[RequestOutcome], span: float) -> None:
    summary = aggregate(items, span)
    assert summary.success_count + summary.failed_count == len(items)
    assert summary.success_count == sum(1 for o in items if o.status_code and 200 <= o.status_code < 300)
    assert summary.requests_per_second > 0
    assert math.isfinite(summary.requests_per_second)
    assert sum(summary.status_counts.values()) + sum(summary.error_counts.values()) == len(items)


@given(items=st.lists(outcomes(), min_size=1, max_size=200))
def test_min_le_mean_le_max(items: list[RequestOutcome]) -> None:
    summary = aggregate(items, 1.0)
    for stats in (summary.total_time, summary.time_to_first_byte, summary.time_to_last_byte):
        if stats is None:
            continue
        assert stats.min_ms <= stats.mean_ms <= stats.max_ms


@given(items=st.lists(outcomes(), min_size=1, max_size=50))
def test_aggregation_ignores_order(items: list[RequestOutcome]) -> None:
    forward = aggregate(items, 2.0)
    backward = aggregate(list(reversed(items)), 2.0)
    assert forward.success_count == backward.success_count
    assert forward.total_time.min_ms == backward.total_time.min_ms
    assert forward.total_time.max_ms == backward.total_time.max_ms
    assert forward.total_time.mean_ms == pytest.approx(backward.total_time.mean_ms)


def test_empty_outcomes_raise() -> None:
    with pytest.raises(EmptyResultError):
        aggregate([], 1.0)


@pytest.mark.parametrize("span", [0.0, -1.5, float("inf"), float("nan")])
def test_bad_span_rejected(span: float) -> None:
    with pytest.raises(ValueError):
        aggregate([RequestOutcome(total_time_ms=1.0, status_code=200)], span)


def test_absent_metrics_are_excluded_not_zero() -> None:
    items = [
        RequestOutcome(total_time_ms=100.0, status_code=200, time_to_first_byte_ms=40.0, time_to_last_byte_ms=60.0),
        RequestOutcome(total_time_ms=300.0, status_code=200, time_to_first_byte_ms=100.0, time_to_last_byte_ms=200.0),
        RequestOutcome(total_time_ms=5.0, error_message="refused", error_type=ErrorType.CONNECT),
    ]
    summary = aggregate(items, 0.5)
    assert summary.success_count == 2
    assert summary.failed_count == 1
    assert summary.requests_per_second == pytest.approx(6.0)
    assert summary.total_time.count == 3
    assert summary.total_time.min_ms == 5.0
    assert summary.total_time.max_ms == 300.0
    assert summary.total_time.mean_ms == pytest.approx(135.0)
    assert summary.time_to_first_byte.count == 2
    assert summary.time_to_first_byte.min_ms == 40.0
    assert summary.time_to_first_byte.mean_ms == pytest.approx(70.0)
    assert summary.time_to_last_byte.max_ms == 200.0
    assert summary.error_counts == {ErrorType.CONNECT: 1}


def test_stream_error_with_2xx_counts_as_failure() -> None:
    items = [RequestOutcome(total_time_ms=10.0, status_code=200, error_message="reset", error_type=ErrorType.READ)]
    summary = aggregate(items, 1.0)
    assert summary.success_count == 0
    assert summary.failed_count == 1
    assert summary.status_counts == {200: 1}


def test_no_byte_metrics_gives_none() -> None:
    summary = aggregate([RequestOutcome(total_time_ms=3.0, status_code=204)], 1.0)
    assert summary.time_to_first_byte is None
    assert summary.time_to_last_byte is None
    assert summary.total_time.mean_ms == 3.0


def test_outcomes_frame() -> None:
    frame = outcomes_frame(
        [
            RequestOutcome(total_time_ms=10.0, status_code=200, time_to_first_byte_ms=4.0, time_to_last_byte_ms=6.0),
            RequestOutcome(total_time_ms=2.0, error_message="refused", error_type=ErrorType.CONNECT),
        ]
    )
    assert len(frame) == 2
    assert frame["success"].tolist() == [True, False]
    assert frame.loc[1, "error_type"] == "connect"
    assert outcomes_frame([]).empty

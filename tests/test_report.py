from __future__ import annotations

from ccload.metrics import ErrorType, RequestOutcome, aggregate
from ccload.report import render_outcome, render_summary


def test_render_summary_field_order_and_rounding() -> None:
    summary = aggregate(
        [
            RequestOutcome(total_time_ms=1234.0, status_code=200, time_to_first_byte_ms=234.0, time_to_last_byte_ms=1000.0),
            RequestOutcome(total_time_ms=20.0, status_code=500),
        ],
        0.75,
    )
    lines = render_summary(summary).splitlines()
    assert lines[0] == "Results:"
    assert lines[1].startswith(" Total Requests (2XX)")
    assert lines[1].endswith(": 1")
    assert lines[2].endswith(": 1")
    assert lines[3].endswith(": 2.67")
    assert lines[5].endswith(": 0.02, 1.23, 0.63")
    assert lines[6].endswith(": 0.23, 0.23, 0.23")
    assert lines[7].endswith(": 1.00, 1.00, 1.00")


def test_render_summary_missing_metrics() -> None:
    summary = aggregate([RequestOutcome(total_time_ms=5.0, error_message="refused", error_type=ErrorType.CONNECT)], 1.0)
    text = render_summary(summary)
    assert "N/A, N/A, N/A" in text


def test_render_outcome_success() -> None:
    text = render_outcome(
        RequestOutcome(total_time_ms=50.0, status_code=200, time_to_first_byte_ms=50.0, time_to_last_byte_ms=0.0)
    )
    assert " Status code: 200" in text
    assert " Total time: 0.05s" in text
    assert " Time to first byte: 0.05s" in text
    assert " Time from first to last byte: 0.00s" in text


def test_render_outcome_error() -> None:
    text = render_outcome(RequestOutcome(total_time_ms=3.0, error_message="ConnectError: refused"))
    assert " Error: ConnectError: refused" in text
    assert "Status code" not in text
    assert " Time to first byte: N/A" in text

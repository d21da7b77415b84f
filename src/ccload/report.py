from __future__ import annotations

from ccload.metrics import MetricStats, RequestOutcome, Summary

_WIDTH = 44


def _label(text: str) -> str:
    return f"{text} ".ljust(_WIDTH, ".") + ":"


def _seconds(ms: float | None) -> str:
    return "N/A" if ms is None else f"{ms / 1000.0:.2f}"


def _timed(ms: float | None) -> str:
    return "N/A" if ms is None else f"{_seconds(ms)}s"


def _triple(stats: MetricStats | None) -> str:
    if stats is None:
        return "N/A, N/A, N/A"
    return ", ".join(_seconds(v) for v in (stats.min_ms, stats.max_ms, stats.mean_ms))


def render_summary(summary: Summary) -> str:
    lines = [
        "Results:",
        f" {_label('Total Requests (2XX)')} {summary.success_count}",
        f" {_label('Failed Requests')} {summary.failed_count}",
        f" {_label('Requests/second')} {summary.requests_per_second:.2f}",
        "",
        f" {_label('Total Request Time (s) (Min, Max, Mean)')} {_triple(summary.total_time)}",
        f" {_label('Time to First Byte (s) (Min, Max, Mean)')} {_triple(summary.time_to_first_byte)}",
        f" {_label('Time to Last Byte (s) (Min, Max, Mean)')} {_triple(summary.time_to_last_byte)}",
    ]
    return "\n".join(lines)


def render_outcome(outcome: RequestOutcome) -> str:
    lines = ["Request statistics:"]
    if outcome.status_code is not None:
        lines.append(f" Status code: {outcome.status_code}")
    if outcome.error_message is not None:
        lines.append(f" Error: {outcome.error_message}")
    lines.extend(
        [
            f" Total time: {_seconds(outcome.total_time_ms)}s",
            f" Time to first byte: {_timed(outcome.time_to_first_byte_ms)}",
            f" Time from first to last byte: {_timed(outcome.time_to_last_byte_ms)}",
        ]
    )
    return "\n".join(lines)

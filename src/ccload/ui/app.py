from __future__ import annotations

import asyncio

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from ccload.config import SUPPORTED_METHODS, RunConfig
from ccload.errors import CcloadError
from ccload.loadgen.runner import RunResult, dispatch
from ccload.metrics import MetricStats, Summary, aggregate, outcomes_frame


st.set_page_config(page_title="ccload", layout="wide")


def _render_header() -> None:
    st.title("ccload")
    st.caption("Concurrent HTTP load generation with per-request byte timing.")


def _build_config() -> RunConfig:
    with st.sidebar:
        st.header("Run Configuration")
        url = st.text_input("Target URL", "https://httpbin.org/get")
        method = st.selectbox("Method", sorted(SUPPORTED_METHODS), index=sorted(SUPPORTED_METHODS).index("GET"))
        body = st.text_area("Body", "")
        requests = st.number_input("Requests", min_value=1, value=100)
        concurrency = st.number_input("Concurrency", min_value=1, value=10)
        timeout = st.number_input("Timeout (sec)", min_value=0.1, value=30.0)
    return RunConfig(
        url=url,
        method=method,
        body=body.encode("utf-8") if body else None,
        requests=int(requests),
        concurrency=int(concurrency),
        timeout_sec=float(timeout),
    )


def _run_button(config: RunConfig) -> None:
    if st.sidebar.button("Start run"):
        with st.spinner("Running..."):
            try:
                st.session_state["result"] = asyncio.run(dispatch(config))
            except CcloadError as exc:
                st.sidebar.error(str(exc))
                return
        st.sidebar.success("Run completed")


def _stats_frame(summary: Summary) -> pd.DataFrame:
    groups: list[tuple[str, MetricStats | None]] = [
        ("Total time", summary.total_time),
        ("Time to first byte", summary.time_to_first_byte),
        ("Time to last byte", summary.time_to_last_byte),
    ]
    rows = []
    for label, stats in groups:
        if stats is None:
            rows.append({"metric": label, "count": 0})
            continue
        rows.append(
            {
                "metric": label,
                "count": stats.count,
                "min_s": stats.min_ms / 1000.0,
                "max_s": stats.max_ms / 1000.0,
                "mean_s": stats.mean_ms / 1000.0,
                "p50_s": stats.p50_ms / 1000.0,
                "p95_s": stats.p95_ms / 1000.0,
                "p99_s": stats.p99_ms / 1000.0,
            }
        )
    return pd.DataFrame(rows).set_index("metric")


def _plot_latency_hist(frame: pd.DataFrame) -> go.Figure:
    if frame.empty:
        return go.Figure()
    fig = px.histogram(frame, x="total_time_ms", color="success", nbins=30, title="Total request time (ms)")
    fig.update_layout(height=300, margin=dict(l=10, r=10, t=30, b=10))
    return fig


def _plot_status(summary: Summary) -> go.Figure:
    labels = [str(code) for code in summary.status_counts]
    labels += [err.value for err in summary.error_counts]
    counts = list(summary.status_counts.values()) + list(summary.error_counts.values())
    fig = go.Figure(go.Bar(x=labels, y=counts, name="Responses"))
    fig.update_layout(height=300, margin=dict(l=10, r=10, t=30, b=10), title="Status breakdown")
    return fig


def _render_result(result: RunResult) -> None:
    summary = aggregate(result.outcomes, result.wall_clock_sec)
    frame = outcomes_frame(result.outcomes)

    col1, col2, col3 = st.columns(3)
    col1.metric("Successful (2XX)", summary.success_count)
    col2.metric("Failed", summary.failed_count)
    col3.metric("Requests/second", f"{summary.requests_per_second:.2f}")

    st.dataframe(_stats_frame(summary))

    col4, col5 = st.columns(2)
    with col4:
        st.plotly_chart(_plot_latency_hist(frame), use_container_width=True)
    with col5:
        st.plotly_chart(_plot_status(summary), use_container_width=True)

    with st.expander("Outcomes"):
        st.dataframe(frame)


def main() -> None:
    _render_header()
    config = _build_config()
    _run_button(config)

    result = st.session_state.get("result")
    if result is None:
        st.info("No run yet. Start one from the sidebar.")
        return
    _render_result(result)


if __name__ == "__main__":
    main()

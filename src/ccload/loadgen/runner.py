from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass

import httpx

from ccload.config import RunConfig, validate_config
from ccload.loadgen.client import probe
from ccload.loadgen.transport import HttpxTransport, Transport
from ccload.metrics import RequestOutcome, Summary, aggregate

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RunResult:
    outcomes: list[RequestOutcome]
    wall_clock_sec: float


class WorkCounter:
    __slots__ = ("_remaining",)

    def __init__(self, total: int) -> None:
        self._remaining = total

    @property
    def remaining(self) -> int:
        return self._remaining

    def claim(self) -> bool:
        # no await between test and decrement, so the claim is atomic on the loop
        if self._remaining <= 0:
            return False
        self._remaining -= 1
        return True


async def run_load_test(config: RunConfig, transport: Transport | None = None) -> Summary:
    result = await dispatch(config, transport)
    return aggregate(result.outcomes, result.wall_clock_sec)


async def run_single(config: RunConfig, transport: Transport | None = None) -> RequestOutcome:
    config = validate_config(config)
    if transport is not None:
        return await _probe(transport, config)
    async with _client(config) as client:
        return await _probe(HttpxTransport(client, config.timeout_sec), config)


async def dispatch(config: RunConfig, transport: Transport | None = None) -> RunResult:
    config = validate_config(config)
    if transport is not None:
        return await _execute_load(config, transport)
    async with _client(config) as client:
        return await _execute_load(config, HttpxTransport(client, config.timeout_sec))


async def _execute_load(config: RunConfig, transport: Transport) -> RunResult:
    counter = WorkCounter(config.requests)
    buffers: list[list[RequestOutcome]] = [[] for _ in range(config.concurrency)]
    logger.info(
        "Starting run: %d %s requests to %s with concurrency %d",
        config.requests,
        config.method,
        config.url,
        config.concurrency,
    )
    logger.debug("Run configuration: %s", config.to_metadata())

    async def worker(worker_id: int) -> None:
        local = buffers[worker_id]
        while counter.claim():
            local.append(await _probe(transport, config))

    started = time.perf_counter()
    tasks = [asyncio.create_task(worker(i)) for i in range(config.concurrency)]
    try:
        await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    wall_clock_sec = time.perf_counter() - started

    outcomes = [outcome for local in buffers for outcome in local]
    logger.info("Run finished: %d outcomes in %.3fs", len(outcomes), wall_clock_sec)
    return RunResult(outcomes=outcomes, wall_clock_sec=wall_clock_sec)


async def _probe(transport: Transport, config: RunConfig) -> RequestOutcome:
    return await probe(
        transport,
        config.url,
        method=config.method,
        body=config.body,
        headers=config.headers,
        timeout_sec=config.timeout_sec,
    )


def _client(config: RunConfig) -> httpx.AsyncClient:
    limits = httpx.Limits(max_connections=config.concurrency)
    return httpx.AsyncClient(follow_redirects=True, limits=limits)

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import aclosing
from typing import Callable, Mapping

from ccload.errors import TransportError
from ccload.loadgen.transport import (
    Completed,
    DataChunk,
    Failed,
    HeadersReceived,
    Transport,
    describe_error,
)
from ccload.metrics import ErrorType, RequestOutcome

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


async def probe(
    transport: Transport,
    url: str,
    method: str = "GET",
    body: bytes | None = None,
    headers: Mapping[str, str] | None = None,
    timeout_sec: float | None = None,
    clock: Clock = time.perf_counter,
) -> RequestOutcome:
    start = clock()
    first_byte: float | None = None
    status_code: int | None = None
    error: str | None = None
    error_type: ErrorType | None = None
    try:
        async with asyncio.timeout(timeout_sec):
            async with aclosing(transport.issue(url, method, headers or {}, body)) as events:
                terminated = False
                async for event in events:
                    if isinstance(event, HeadersReceived):
                        status_code = event.status_code
                    elif isinstance(event, DataChunk):
                        if first_byte is None:
                            first_byte = clock()
                    elif isinstance(event, Failed):
                        error, error_type = event.message, event.error_type
                        terminated = True
                        break
                    elif isinstance(event, Completed):
                        terminated = True
                        break
                if not terminated:
                    error, error_type = "transport ended without a terminal event", ErrorType.OTHER
    except TimeoutError:
        error, error_type = f"request timed out after {timeout_sec}s", ErrorType.TIMEOUT
    except TransportError as exc:
        error, error_type = str(exc), exc.error_type or ErrorType.OTHER
    except OSError as exc:
        error, error_type = describe_error(exc), ErrorType.CONNECT
    except Exception as exc:  # noqa: BLE001
        logger.debug("Unexpected error probing %s", url, exc_info=True)
        error, error_type = describe_error(exc), ErrorType.OTHER
    end = clock()

    if error is not None:
        logger.debug("%s %s failed: %s", method, url, error)
    return RequestOutcome(
        total_time_ms=(end - start) * 1000.0,
        status_code=status_code,
        error_message=error,
        error_type=error_type if error is not None else None,
        time_to_first_byte_ms=(first_byte - start) * 1000.0 if first_byte is not None else None,
        time_to_last_byte_ms=(end - first_byte) * 1000.0 if first_byte is not None else None,
    )

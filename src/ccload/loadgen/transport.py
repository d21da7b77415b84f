from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncIterator, Mapping, Protocol, Union

import httpx

from ccload.errors import ResponseStreamError, TransportError
from ccload.metrics import ErrorType


@dataclass(frozen=True, slots=True)
class HeadersReceived:
    status_code: int


@dataclass(frozen=True, slots=True)
class DataChunk:
    data: bytes


@dataclass(frozen=True, slots=True)
class Completed:
    pass


@dataclass(frozen=True, slots=True)
class Failed:
    message: str
    error_type: ErrorType = ErrorType.OTHER


TransportEvent = Union[HeadersReceived, DataChunk, Completed, Failed]


class Transport(Protocol):
    def issue(
        self,
        url: str,
        method: str,
        headers: Mapping[str, str],
        body: bytes | None,
    ) -> AsyncIterator[TransportEvent]:
        ...


def classify_error(exc: httpx.HTTPError) -> ErrorType:
    if isinstance(exc, httpx.TimeoutException):
        return ErrorType.TIMEOUT
    if isinstance(exc, httpx.ConnectError):
        return ErrorType.CONNECT
    if isinstance(exc, httpx.ReadError):
        return ErrorType.READ
    return ErrorType.OTHER


def describe_error(exc: BaseException) -> str:
    text = str(exc)
    return f"{type(exc).__name__}: {text}" if text else type(exc).__name__


class HttpxTransport:
    def __init__(self, client: httpx.AsyncClient, timeout_sec: float | None = None) -> None:
        self._client = client
        self._timeout = httpx.Timeout(timeout_sec)

    async def issue(
        self,
        url: str,
        method: str,
        headers: Mapping[str, str],
        body: bytes | None,
    ) -> AsyncIterator[TransportEvent]:
        headers_seen = False
        try:
            async with self._client.stream(
                method,
                url,
                headers=dict(headers),
                content=body,
                timeout=self._timeout,
            ) as response:
                headers_seen = True
                yield HeadersReceived(response.status_code)
                if response.is_stream_consumed:
                    # body was loaded eagerly, e.g. by a mock transport
                    if response.content:
                        yield DataChunk(response.content)
                else:
                    async for chunk in response.aiter_raw():
                        if chunk:
                            yield DataChunk(chunk)
        except httpx.HTTPError as exc:
            if headers_seen:
                msg = f"response stream error: {describe_error(exc)}"
                raise ResponseStreamError(msg, classify_error(exc)) from exc
            raise TransportError(describe_error(exc), classify_error(exc)) from exc
        yield Completed()

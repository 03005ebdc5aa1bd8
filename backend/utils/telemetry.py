"""Fire-and-forget telemetry: vehicle positions and job lifecycle events.

Sinks never raise. A failed emit is logged and the record is dropped.
"""
import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

LOG = logging.getLogger(__name__)

VEHICLE_STREAM = "vehicle-telemetry"
JOB_STREAM = "job-events"


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class TelemetrySink:
    """Base sink. Subclasses implement _send; emit wraps it so errors never propagate."""

    def emit(self, stream: str, record: dict[str, Any]) -> None:
        payload = {"stream": stream, "timestamp": _timestamp(), **record}
        try:
            self._send(stream, payload)
        except Exception as e:
            LOG.warning("Dropped %s record: %s", stream, e)

    def _send(self, stream: str, payload: dict[str, Any]) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass

    async def aclose(self) -> None:
        self.close()


class LogTelemetrySink(TelemetrySink):
    """Writes each record as one JSON line at DEBUG level."""

    def _send(self, stream: str, payload: dict[str, Any]) -> None:
        LOG.debug("%s %s", stream, json.dumps(payload, default=str))


class HttpTelemetrySink(TelemetrySink):
    """POSTs each record to {url}/{stream} with a short timeout. Blocking; for callers off the event loop."""

    def __init__(self, url: str, *, timeout: float = 2.0, transport: Optional[httpx.BaseTransport] = None) -> None:
        self._url = url.rstrip("/")
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def _send(self, stream: str, payload: dict[str, Any]) -> None:
        resp = self._client.post(f"{self._url}/{stream}", content=json.dumps(payload, default=str),
                                 headers={"Content-Type": "application/json"})
        resp.raise_for_status()

    def close(self) -> None:
        self._client.close()


class AsyncHttpTelemetrySink(TelemetrySink):
    """Queues records and POSTs them from a background task on the running event loop.

    emit never waits on the network. Records that arrive while max_pending are
    already queued are dropped.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 2.0,
        max_pending: int = 1000,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = url.rstrip("/")
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_pending)
        self._sender: Optional[asyncio.Task] = None

    def _send(self, stream: str, payload: dict[str, Any]) -> None:
        if self._sender is None:
            self._sender = asyncio.get_running_loop().create_task(self._run_sender())
        try:
            self._queue.put_nowait((stream, payload))
        except asyncio.QueueFull:
            raise RuntimeError(f"{self._queue.maxsize} records already pending") from None

    async def _run_sender(self) -> None:
        while True:
            stream, payload = await self._queue.get()
            try:
                resp = await self._client.post(
                    f"{self._url}/{stream}",
                    content=json.dumps(payload, default=str),
                    headers={"Content-Type": "application/json"},
                )
                resp.raise_for_status()
            except httpx.HTTPError as e:
                LOG.warning("Dropped %s record: %s", stream, e)
            finally:
                self._queue.task_done()

    async def flush(self) -> None:
        """Wait until every queued record has been sent or dropped."""
        if self._sender is not None:
            await self._queue.join()

    async def aclose(self) -> None:
        if self._sender is not None:
            self._sender.cancel()
            try:
                await self._sender
            except asyncio.CancelledError:
                pass
            self._sender = None
        await self._client.aclose()


def build_telemetry_sink(url: str = "", *, asynchronous: bool = False) -> TelemetrySink:
    """HTTP sink when url is set, otherwise log-only. asynchronous selects the event-loop sender."""
    if not url:
        return LogTelemetrySink()
    if asynchronous:
        return AsyncHttpTelemetrySink(url)
    return HttpTelemetrySink(url)

"""Background sweep that retries assignment of pending jobs on a fixed interval."""
import asyncio
import logging
from typing import Optional

from services.job_service import JobService

LOG = logging.getLogger(__name__)


async def _process_loop(job_service: JobService, interval_s: float, stop_event: asyncio.Event) -> None:
    """Sweep every interval_s until stop_event is set. A failed sweep is logged and the loop continues."""
    while not stop_event.is_set():
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval_s)
        except asyncio.TimeoutError:
            pass
        if stop_event.is_set():
            break
        try:
            assigned = await asyncio.to_thread(job_service.process_pending_jobs)
        except Exception:
            LOG.exception("Error processing pending jobs")
            continue
        if assigned:
            LOG.info("Pending job sweep assigned %d job(s)", assigned)


class JobProcessor:
    """Owns the sweep task. start() and stop() are idempotent."""

    def __init__(self, job_service: JobService, interval_s: float = 5.0) -> None:
        self.job_service = job_service
        self.interval_s = interval_s
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(_process_loop(self.job_service, self.interval_s, self._stop_event))
        LOG.info("Job processor started (interval %.1fs)", self.interval_s)

    async def stop(self) -> None:
        if self._task is None or self._stop_event is None:
            return
        self._stop_event.set()
        await self._task
        self._task = None
        self._stop_event = None
        LOG.info("Job processor stopped")
